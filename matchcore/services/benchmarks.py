"""
Client-relative benchmarking.

Compares a tenant's own learning signals with medians of the anonymized
cross-tenant pool, split three ways: same industry, same region and same size
cohort. Only tenants opted into network learning get comparisons, and the
opt-out path never reads signal data.
"""

import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from matchcore.core import gating
from matchcore.core.config import settings
from matchcore.core.feature_gates import is_network_learning_opted_in
from matchcore.crud import learning as learning_crud
from matchcore.crud import tenant as tenant_crud
from matchcore.models.learning import LearningAggregate, TenantLearningSignal
from matchcore.schemas.benchmark import BenchmarkComparison, BenchmarkScope, ClientBenchmarkingResult

logger = logging.getLogger(__name__)

METRIC_LABELS = {
    "time_to_fill": "Median time-to-fill (days)",
    "skill_scarcity": "Skill scarcity index",
    "confidence_dist": "High-confidence rate",
}

OPT_OUT_NOTES = [
    "Benchmarking is only available for tenants opted into anonymized learning.",
    "No peer identities are ever exposed; only medians from k-anonymized aggregates are shared.",
]
OPT_IN_NOTES = [
    "Comparisons use medians from anonymized aggregates; no peer identities or raw resumes are surfaced.",
    "Use for advisory gut-checks only. Benchmarks do not override recruiter judgment or local context.",
]


def median(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    midpoint = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return round((ordered[midpoint - 1] + ordered[midpoint]) / 2, 2)
    return round(ordered[midpoint], 2)


def determine_size_cohort(sample_size: int) -> str:
    if sample_size >= gating.COHORT_ENTERPRISE_MIN_SAMPLE:
        return "enterprise"
    if sample_size >= gating.COHORT_GROWTH_MIN_SAMPLE:
        return "growth"
    return "emerging"


def _scope_value(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def pick_latest_signals(
    signals: List[TenantLearningSignal],
    role_family: Optional[str] = None
) -> List[TenantLearningSignal]:
    """Newest signal per signal type, optionally restricted to one role family."""
    by_type: Dict[str, TenantLearningSignal] = {}
    for signal in signals:
        if role_family and signal.role_family != role_family:
            continue
        current = by_type.get(signal.signal_type)
        if current is None or current.captured_at < signal.captured_at:
            by_type[signal.signal_type] = signal
    return list(by_type.values())


def _interpretation(basis_label: str, client_value: float, benchmark_value: float) -> str:
    delta = round(client_value - benchmark_value, 2)
    if delta == 0:
        direction = "in line with"
    elif delta > 0:
        direction = "above"
    else:
        direction = "below"
    return (
        f"Advisory only: client signals are {direction} the {basis_label} benchmark by {abs(delta):.2f}. "
        "Peer identities stay hidden; only anonymized medians are used."
    )


def _compare_signal(
    signal: TenantLearningSignal,
    aggregates: List[LearningAggregate],
) -> List[BenchmarkComparison]:
    industry = _scope_value(signal.industry)
    region = _scope_value(signal.region)
    cohort = determine_size_cohort(signal.sample_size)
    label = METRIC_LABELS.get(signal.signal_type, signal.signal_type)

    groups = [
        (
            "industry",
            [entry.value for entry in aggregates if entry.industry == industry],
            f"{label} ({industry or 'industry'} median)",
            industry or "industry peer group",
        ),
        (
            "region",
            [entry.value for entry in aggregates if entry.region == region],
            f"{label} ({region or 'regional'} median)",
            region or "regional peer group",
        ),
        (
            "size",
            [entry.value for entry in aggregates if determine_size_cohort(entry.sample_size) == cohort],
            f"{label} ({cohort} cohort)",
            f"{cohort} cohort",
        ),
    ]

    comparisons = []
    for basis, values, metric, basis_label in groups:
        if not values:
            continue
        benchmark_value = median(values)
        comparisons.append(BenchmarkComparison(
            metric=metric,
            client_value=round(signal.value, 2),
            benchmark_value=benchmark_value,
            delta=round(signal.value - benchmark_value, 2),
            interpretation=_interpretation(basis_label, signal.value, benchmark_value),
            basis=basis,
        ))
    return comparisons


def get_client_relative_benchmarks(
    db: Session,
    tenant_id: str,
    role_family: Optional[str] = None,
    window_days: Optional[int] = None,
) -> ClientBenchmarkingResult:
    """
    Compare a tenant's latest learning signals with anonymized peer medians.

    Args:
        db: Database session
        tenant_id: Tenant requesting the comparison
        role_family: Optional role-family filter for the tenant's signals
        window_days: Signal window length (defaults to BENCHMARK_WINDOW_DAYS)

    Returns:
        ClientBenchmarkingResult; comparisons stay empty for opted-out tenants
    """
    window_days = window_days or settings.BENCHMARK_WINDOW_DAYS
    config = tenant_crud.get_config(db, tenant_id)

    if not is_network_learning_opted_in(config):
        logger.info(f"Benchmarking skipped for tenant {tenant_id}: not opted into network learning")
        return ClientBenchmarkingResult(
            opted_in=False,
            window_days=window_days,
            scope=BenchmarkScope(role_family=role_family),
            comparisons=[],
            notes=list(OPT_OUT_NOTES),
        )

    signals = learning_crud.list_recent_signals(db, tenant_id, window_days)
    latest = pick_latest_signals(signals, role_family)

    comparisons = []
    for signal in latest:
        aggregates = learning_crud.list_latest_aggregates(db, signal.signal_type, window_days, signal.role_family)
        if not aggregates:
            continue
        comparisons.extend(_compare_signal(signal, aggregates))

    first = latest[0] if latest else None
    scope = BenchmarkScope(
        role_family=role_family,
        industry=first.industry if first else None,
        region=first.region if first else None,
        size_cohort=determine_size_cohort(first.sample_size) if first else None,
    )

    logger.info(f"Benchmarking for tenant {tenant_id}: {len(comparisons)} comparisons from {len(latest)} signals")

    return ClientBenchmarkingResult(
        opted_in=True,
        window_days=window_days,
        scope=scope,
        comparisons=comparisons,
        notes=list(OPT_IN_NOTES),
    )
