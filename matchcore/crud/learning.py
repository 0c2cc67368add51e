"""
CRUD operations for network-learning signals and anonymized aggregates.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from matchcore.models.learning import LearningAggregate, TenantLearningSignal


def list_recent_signals(
    db: Session,
    tenant_id: str,
    window_days: int,
    limit: int = 50
) -> List[TenantLearningSignal]:
    """
    Retrieve a tenant's most recent learning signals for a window length.

    Args:
        db: Database session
        tenant_id: Tenant to read
        window_days: Signal window length in days
        limit: Maximum number of rows, newest first

    Returns:
        List of TenantLearningSignal instances ordered by captured_at desc
    """
    query = db.query(TenantLearningSignal).filter(
        TenantLearningSignal.tenant_id == tenant_id,
        TenantLearningSignal.window_days == window_days,
    )
    return query.order_by(TenantLearningSignal.captured_at.desc(), TenantLearningSignal.id.desc()).limit(limit).all()


def list_latest_aggregates(
    db: Session,
    signal_type: str,
    window_days: int,
    role_family: Optional[str] = None
) -> List[LearningAggregate]:
    """
    Retrieve the most recent generation of anonymized aggregates for a signal.

    A generation is every aggregate created at or after the newest
    created_at for this signal type, window and role family.
    """
    query = db.query(LearningAggregate).filter(
        LearningAggregate.signal_type == signal_type,
        LearningAggregate.window_days == window_days,
    )
    if role_family:
        query = query.filter(LearningAggregate.role_family == role_family)

    newest = query.order_by(LearningAggregate.created_at.desc()).first()
    if not newest:
        return []

    return query.filter(LearningAggregate.created_at >= newest.created_at).all()
