"""
Judgment memory aggregation.

Rolls a tenant's decision receipts up into per-dimension statistics for one
time window. Every observed (dimension, value) pair produces exactly seven
metric rows:

- decision_mix             {mix, total}
- hire_rate                {hires, decisions, rate}
- override_rate            {overrides, total, rate}
- override_success_delta   {hiresFromOverrides, overrideRate, overrideHireRate, baselineHireRate, delta}
- confidence_band_success  {bands: {band: {hires, total, rate}}}
- tenure_average           {averageDays, observations}
- performance_average      {averageRating, observations}

Value payloads keep camelCase keys; they are read by reporting surfaces
outside this service.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session

from matchcore.core.config import settings
from matchcore.core.exceptions import AggregationError
from matchcore.crud import judgment as judgment_crud
from matchcore.crud import tenant as tenant_crud
from matchcore.models.judgment import AggregateDimension, DecisionReceipt, DecisionType
from matchcore.schemas.judgment import AggregationRunResult, DecisionOutcome, DecisionSignals

logger = logging.getLogger(__name__)

METRIC_NAMES = [
    "decision_mix",
    "hire_rate",
    "override_rate",
    "override_success_delta",
    "confidence_band_success",
    "tenure_average",
    "performance_average",
]

UNASSIGNED_CLIENT = "unassigned"
UNSPECIFIED_ROLE = "unspecified"


@dataclass
class _Accumulator:
    total: int = 0
    decisions: Dict[str, int] = field(default_factory=lambda: {t.value: 0 for t in DecisionType})
    overrides: int = 0
    hires: int = 0
    override_hires: int = 0
    bands: Dict[str, Dict[str, int]] = field(default_factory=dict)
    tenure_total: float = 0.0
    tenure_count: int = 0
    rating_total: float = 0.0
    rating_count: int = 0


def _dimension_value(receipt: DecisionReceipt, dimension: AggregateDimension) -> str:
    if dimension == AggregateDimension.FIRM:
        return receipt.firm_id
    if dimension == AggregateDimension.CLIENT:
        return receipt.client_id or UNASSIGNED_CLIENT
    return receipt.role_type or UNSPECIFIED_ROLE


def _decision_key(decision_type: Any) -> str:
    return decision_type.value if isinstance(decision_type, DecisionType) else str(decision_type)


def _accumulate(bucket: _Accumulator, receipt: DecisionReceipt) -> None:
    is_override = receipt.human_override is not None
    outcome = DecisionOutcome.parse(receipt.outcome)
    band = DecisionSignals.parse(receipt.signals).confidence_band
    hired = bool(outcome and outcome.hired)

    bucket.total += 1
    key = _decision_key(receipt.decision_type)
    bucket.decisions[key] = bucket.decisions.get(key, 0) + 1

    if is_override:
        bucket.overrides += 1

    if band:
        record = bucket.bands.setdefault(band, {"hires": 0, "total": 0})
        record["total"] += 1
        if hired:
            record["hires"] += 1

    if hired:
        bucket.hires += 1
        if is_override:
            bucket.override_hires += 1

    if outcome and outcome.tenure_days is not None:
        bucket.tenure_total += outcome.tenure_days
        bucket.tenure_count += 1

    if outcome and outcome.performance_rating is not None:
        bucket.rating_total += outcome.performance_rating
        bucket.rating_count += 1


def _metric_values(bucket: _Accumulator) -> List[Tuple[str, Dict[str, Any], int]]:
    """The seven (metric, value, sample_size) triples for one accumulator."""
    hire_denominator = (bucket.decisions["submit"] + bucket.decisions["override"]) or bucket.total or 1
    override_rate = bucket.overrides / bucket.total if bucket.total else 0
    override_hire_rate = bucket.override_hires / bucket.overrides if bucket.overrides else 0
    baseline_hire_rate = bucket.hires / bucket.total if bucket.total else 0

    return [
        ("decision_mix", {"mix": dict(bucket.decisions), "total": bucket.total}, bucket.total),
        (
            "hire_rate",
            {"hires": bucket.hires, "decisions": hire_denominator, "rate": bucket.hires / hire_denominator},
            hire_denominator,
        ),
        (
            "override_rate",
            {"overrides": bucket.overrides, "total": bucket.total, "rate": override_rate},
            bucket.total,
        ),
        (
            "override_success_delta",
            {
                "hiresFromOverrides": bucket.override_hires,
                "overrideRate": override_rate,
                "overrideHireRate": override_hire_rate,
                "baselineHireRate": baseline_hire_rate,
                "delta": override_hire_rate - baseline_hire_rate if bucket.overrides else 0,
            },
            bucket.overrides or bucket.total,
        ),
        (
            "confidence_band_success",
            {
                "bands": {
                    band: {**stats, "rate": stats["hires"] / stats["total"] if stats["total"] else 0}
                    for band, stats in bucket.bands.items()
                }
            },
            sum(stats["total"] for stats in bucket.bands.values()),
        ),
        (
            "tenure_average",
            {
                "averageDays": bucket.tenure_total / bucket.tenure_count if bucket.tenure_count else None,
                "observations": bucket.tenure_count,
            },
            bucket.tenure_count,
        ),
        (
            "performance_average",
            {
                "averageRating": bucket.rating_total / bucket.rating_count if bucket.rating_count else None,
                "observations": bucket.rating_count,
            },
            bucket.rating_count,
        ),
    ]


def build_aggregates(
    receipts: Iterable[DecisionReceipt],
    tenant_id: str,
    window_start: datetime,
    window_end: datetime,
) -> List[Dict[str, Any]]:
    """
    Build the aggregate rows for one tenant window.

    Pure: reads only the receipts passed in and returns plain dicts ready to
    be inserted as JudgmentAggregate rows.

    Args:
        receipts: Decision receipts inside the window
        tenant_id: Tenant the rows belong to
        window_start: Window start stamped on every row
        window_end: Window end stamped on every row

    Returns:
        List of aggregate row dicts, seven per (dimension, value)
    """
    buckets: Dict[AggregateDimension, Dict[str, _Accumulator]] = {dim: {} for dim in AggregateDimension}

    for receipt in receipts:
        for dimension, values in buckets.items():
            value = _dimension_value(receipt, dimension)
            _accumulate(values.setdefault(value, _Accumulator()), receipt)

    rows = []
    for dimension, values in buckets.items():
        for dimension_value, bucket in values.items():
            for metric, value, sample_size in _metric_values(bucket):
                rows.append({
                    "tenant_id": tenant_id,
                    "dimension": dimension,
                    "dimension_value": dimension_value,
                    "metric": metric,
                    "window_start": window_start,
                    "window_end": window_end,
                    "value": value,
                    "sample_size": sample_size,
                })
    return rows


def resolve_window(now: datetime, window_days: int = 90) -> Tuple[datetime, datetime]:
    """Start of day window_days-1 days before now, through end of day of now."""
    window_start = (now - timedelta(days=window_days - 1)).replace(hour=0, minute=0, second=0, microsecond=0)
    window_end = now.replace(hour=23, minute=59, second=59, microsecond=999999)
    return window_start, window_end


def aggregate_tenant_window(
    db: Session,
    tenant_id: str,
    window_start: datetime,
    window_end: datetime,
) -> int:
    """
    Recompute and replace one tenant's aggregates for a window.

    Raises:
        AggregationError: If reading receipts or replacing the window fails
    """
    try:
        receipts = judgment_crud.list_receipts_in_window(db, tenant_id, window_start, window_end)
        rows = build_aggregates(receipts, tenant_id, window_start, window_end)
        return judgment_crud.replace_window_aggregates(db, tenant_id, window_start, window_end, rows)
    except Exception as e:
        db.rollback()
        raise AggregationError(tenant_id, str(e)) from e


def run_judgment_memory_aggregation(
    db: Session,
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
) -> AggregationRunResult:
    """
    Recompute judgment aggregates for every tenant.

    Each tenant runs in its own transaction. A failing tenant is logged and
    skipped; its previous window snapshot stays intact and the remaining
    tenants are still processed.
    """
    now = now or datetime.now(timezone.utc)
    window_days = window_days or settings.JUDGMENT_WINDOW_DAYS
    window_start, window_end = resolve_window(now, window_days)

    tenant_ids = tenant_crud.list_ids(db)
    written = 0
    failed = []

    logger.info(f"Judgment aggregation started for {len(tenant_ids)} tenants ({window_start.date()} to {window_end.date()})")

    for tenant_id in tenant_ids:
        try:
            count = aggregate_tenant_window(db, tenant_id, window_start, window_end)
        except AggregationError as e:
            logger.error(str(e), exc_info=True, extra={"tenant_id": tenant_id})
            failed.append(tenant_id)
            continue

        written += count
        logger.debug(f"{count} aggregates written", extra={"tenant_id": tenant_id})

    logger.info(f"Judgment aggregation finished: {written} aggregates, {len(failed)} failed tenants")

    return AggregationRunResult(
        tenants_processed=len(tenant_ids),
        aggregates_written=written,
        failed_tenants=failed,
    )


def get_supported_judgment_metrics() -> List[str]:
    return list(METRIC_NAMES)
