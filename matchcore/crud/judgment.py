"""
CRUD operations for decision receipts and judgment aggregates.

Receipts are read-only here. Aggregates are only ever written as a complete
set for one (tenant, window) through replace_window_aggregates.
"""

from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from matchcore.models.judgment import DecisionReceipt, JudgmentAggregate


def list_receipts_in_window(
    db: Session,
    tenant_id: str,
    window_start: datetime,
    window_end: datetime
) -> List[DecisionReceipt]:
    """
    Retrieve a tenant's decision receipts created inside the window (inclusive).

    Args:
        db: Database session
        tenant_id: Tenant to read
        window_start: First instant of the window
        window_end: Last instant of the window

    Returns:
        List of DecisionReceipt instances
    """
    return (
        db.query(DecisionReceipt)
        .filter(
            DecisionReceipt.tenant_id == tenant_id,
            DecisionReceipt.created_at >= window_start,
            DecisionReceipt.created_at <= window_end,
        )
        .order_by(DecisionReceipt.created_at.asc(), DecisionReceipt.id.asc())
        .all()
    )


def replace_window_aggregates(
    db: Session,
    tenant_id: str,
    window_start: datetime,
    window_end: datetime,
    rows: List[Dict]
) -> int:
    """
    Swap the aggregates for one (tenant, window) in a single transaction.

    Readers see either the previous set or the new set, never a mix. On
    failure the transaction is rolled back and the error re-raised.

    Returns:
        Number of aggregate rows written
    """
    try:
        db.query(JudgmentAggregate).filter(
            JudgmentAggregate.tenant_id == tenant_id,
            JudgmentAggregate.window_start == window_start,
            JudgmentAggregate.window_end == window_end,
        ).delete(synchronize_session=False)

        db.add_all([JudgmentAggregate(**row) for row in rows])
        db.commit()
    except Exception:
        db.rollback()
        raise

    return len(rows)


def list_aggregates_for_tenant(
    db: Session,
    tenant_id: str,
    dimension: Optional[str] = None
) -> List[JudgmentAggregate]:
    """Aggregates for a tenant, newest window first."""
    query = db.query(JudgmentAggregate).filter(JudgmentAggregate.tenant_id == tenant_id)
    if dimension is not None:
        query = query.filter(JudgmentAggregate.dimension == dimension)
    return query.order_by(JudgmentAggregate.window_end.desc(), JudgmentAggregate.id.asc()).all()
