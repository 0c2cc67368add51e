"""
Match Quality Index (MQI).

A 0-100 KPI per tenant (optionally per job or recruiter) built from four
components, each clamped to [0, 1]:

    shortlist -> interview rate   weight 0.3
    interview -> hire rate        weight 0.3
    candidate feedback average    weight 0.2   (UP=1, DOWN=0, other=0.5)
    time-to-fill score            weight 0.2   (vs. trailing baseline, 0.5 = on par)

mqi = round(1000 * weighted sum) / 10, i.e. one decimal place.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence
from sqlalchemy.orm import Session

from matchcore.core.config import settings
from matchcore.core.feature_gates import can_capture_snapshots
from matchcore.crud import match_quality as mqi_crud
from matchcore.models.pipeline import JobCandidate, JobCandidateStatus
from matchcore.models.tenant import OperatingMode
from matchcore.schemas.quality import (
    MatchQualityComponents,
    MatchQualityResult,
    MatchQualitySamples,
    MatchQualitySnapshotResponse,
)

logger = logging.getLogger(__name__)

COMPONENT_WEIGHTS = {
    "shortlist_to_interview_rate": 0.3,
    "interview_to_hire_rate": 0.3,
    "average_candidate_feedback": 0.2,
    "time_to_fill_score": 0.2,
}

DEFAULT_WINDOW_DAYS = 30
BASELINE_LOOKBACK_DAYS = 180
DEFAULT_TIME_TO_FILL_BASELINE = 45.0
NEUTRAL_SCORE = 0.5

SHORTLIST_STATUSES = {
    JobCandidateStatus.SHORTLISTED,
    JobCandidateStatus.SUBMITTED,
    JobCandidateStatus.INTERVIEWING,
    JobCandidateStatus.HIRED,
}
INTERVIEW_STATUSES = {JobCandidateStatus.INTERVIEWING, JobCandidateStatus.HIRED}


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)


def _safe_rate(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


def _average(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def start_of_week(moment: datetime) -> datetime:
    """Monday 00:00 of the ISO week containing moment."""
    return start_of_day(moment) - timedelta(days=moment.weekday())


def feedback_score(direction: Optional[str]) -> float:
    normalized = (direction or "").strip().upper()
    if normalized == "UP":
        return 1.0
    if normalized == "DOWN":
        return 0.0
    return NEUTRAL_SCORE


def time_to_fill_days(hires: Iterable[JobCandidate]) -> List[float]:
    """Fastest fill per job, in days from job creation to hire."""
    by_job: Dict[int, float] = {}
    for hire in hires:
        job = hire.job
        if job is None or job.created_at is None:
            continue
        hired_at = hire.updated_at or hire.created_at
        if hired_at is None:
            continue
        days_open = max(0.0, (hired_at - job.created_at).total_seconds() / 86400)
        by_job[job.id] = min(by_job.get(job.id, float("inf")), days_open)
    return list(by_job.values())


def time_to_fill_score(actual: Sequence[float], baseline: Sequence[float]) -> Dict[str, float]:
    average_baseline = _average(baseline) if baseline else DEFAULT_TIME_TO_FILL_BASELINE

    if not actual:
        return {"score": NEUTRAL_SCORE, "average_actual": 0.0, "average_baseline": average_baseline}

    average_actual = _average(actual)
    if average_baseline == 0:
        return {"score": NEUTRAL_SCORE, "average_actual": average_actual, "average_baseline": DEFAULT_TIME_TO_FILL_BASELINE}

    delta = (average_baseline - average_actual) / average_baseline
    return {"score": _clamp((delta + 1) / 2), "average_actual": average_actual, "average_baseline": average_baseline}


def score_match_quality(
    shortlisted: int,
    interviewed: int,
    hired: int,
    feedback_directions: Sequence[Optional[str]],
    actual_fill_days: Sequence[float],
    baseline_fill_days: Sequence[float],
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> MatchQualityResult:
    """Combine already-counted funnel, feedback and time-to-fill samples into an MQI."""
    feedback_average = (
        _average([feedback_score(direction) for direction in feedback_directions])
        if feedback_directions else NEUTRAL_SCORE
    )
    fill = time_to_fill_score(actual_fill_days, baseline_fill_days)

    components = {
        "shortlist_to_interview_rate": _clamp(_safe_rate(interviewed, shortlisted)),
        "interview_to_hire_rate": _clamp(_safe_rate(hired, interviewed)),
        "average_candidate_feedback": _clamp(feedback_average),
        "time_to_fill_score": _clamp(fill["score"]),
    }
    weighted_sum = sum(components[name] * weight for name, weight in COMPONENT_WEIGHTS.items())
    mqi = round(weighted_sum * 1000) / 10

    return MatchQualityResult(
        mqi=mqi,
        window_days=window_days,
        components=MatchQualityComponents(
            **components,
            average_time_to_fill_days=round(fill["average_actual"] * 10) / 10,
            baseline_time_to_fill_days=round(fill["average_baseline"] * 10) / 10,
        ),
        samples=MatchQualitySamples(
            shortlisted=shortlisted,
            interviewed=interviewed,
            hired=hired,
            feedback_entries=len(feedback_directions),
            time_to_fill_samples=len(actual_fill_days),
            baseline_samples=len(baseline_fill_days),
        ),
    )


def calculate_match_quality_index(
    db: Session,
    tenant_id: str,
    job_id: Optional[int] = None,
    recruiter_id: Optional[str] = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    reference_date: Optional[datetime] = None,
) -> MatchQualityResult:
    """
    Compute the MQI for a tenant, job or recruiter over a trailing window.

    The window covers the last window_days calendar days up to and including
    reference_date. The time-to-fill baseline is every tenant hire in the last
    BASELINE_LOOKBACK_DAYS, the measured window included.
    """
    reference_date = reference_date or datetime.now(timezone.utc)
    since = start_of_day(reference_date - timedelta(days=window_days - 1))
    until = end_of_day(reference_date)
    baseline_since = start_of_day(reference_date - timedelta(days=BASELINE_LOOKBACK_DAYS - 1))

    scoped = mqi_crud.get_scoped_job_candidates(db, tenant_id, since, until, job_id, recruiter_id)
    baseline_hires = mqi_crud.get_baseline_hires(db, tenant_id, baseline_since, until)
    directions = mqi_crud.get_feedback_directions(db, tenant_id, since, until, job_id, recruiter_id)

    shortlisted = sum(1 for row in scoped if row.status in SHORTLIST_STATUSES)
    interviewed = sum(1 for row in scoped if row.status in INTERVIEW_STATUSES)
    hires = [row for row in scoped if row.status == JobCandidateStatus.HIRED]

    return score_match_quality(
        shortlisted=shortlisted,
        interviewed=interviewed,
        hired=len(hires),
        feedback_directions=directions,
        actual_fill_days=time_to_fill_days(hires),
        baseline_fill_days=time_to_fill_days(baseline_hires),
        window_days=window_days,
    )


def calculate_tenant_match_quality(
    db: Session,
    tenant_id: str,
    windows: Optional[Sequence[int]] = None,
    reference_date: Optional[datetime] = None,
) -> List[MatchQualityResult]:
    reference_date = reference_date or datetime.now(timezone.utc)
    return [
        calculate_match_quality_index(db, tenant_id, window_days=window, reference_date=reference_date)
        for window in (windows or settings.MQI_SNAPSHOT_WINDOWS)
    ]


def capture_weekly_match_quality_snapshots(
    db: Session,
    tenant_id: str,
    mode: OperatingMode,
    windows: Optional[Sequence[int]] = None,
    reference_date: Optional[datetime] = None,
) -> List[MatchQualitySnapshotResponse]:
    """
    Capture tenant-scope MQI snapshots for the current ISO week.

    Restricted modes (fire drill, demo) skip capture entirely: nothing is
    computed, deleted or written, and an empty list is returned.

    Args:
        db: Database session
        tenant_id: Tenant to capture
        mode: Tenant operating mode, loaded by the caller
        windows: Window lengths in days (defaults to MQI_SNAPSHOT_WINDOWS)
        reference_date: Capture date; snapshots are stamped with its week start

    Returns:
        The snapshots written for this week
    """
    if not can_capture_snapshots(mode):
        logger.info(
            f"Skipping MQI snapshot capture: mode={OperatingMode(mode).value}",
            extra={"tenant_id": tenant_id},
        )
        return []

    reference_date = reference_date or datetime.now(timezone.utc)
    captured_at = start_of_week(reference_date)

    results = calculate_tenant_match_quality(db, tenant_id, windows, reference_date)
    rows = [
        {
            "tenant_id": tenant_id,
            "scope": "tenant",
            "scope_ref": None,
            "window_days": result.window_days,
            "mqi": result.mqi,
            "components": {
                **result.components.model_dump(),
                "context": {"system_mode": OperatingMode(mode).value},
            },
            "captured_at": captured_at,
        }
        for result in results
    ]
    if not rows:
        return []

    mqi_crud.replace_tenant_snapshots(db, tenant_id, captured_at, rows)
    logger.info(f"Captured {len(rows)} MQI snapshots (week of {captured_at.date()})", extra={"tenant_id": tenant_id})

    return [MatchQualitySnapshotResponse(**row) for row in rows]
