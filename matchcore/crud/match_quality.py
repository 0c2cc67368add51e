"""
CRUD operations for MQI inputs and snapshots.
"""

from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.orm import Session, joinedload
from matchcore.models.pipeline import JobCandidate, JobCandidateStatus, MatchFeedback
from matchcore.models.quality import MatchQualitySnapshot

HIRED_OUTCOME = "HIRED"


def get_scoped_job_candidates(
    db: Session,
    tenant_id: str,
    since: datetime,
    until: datetime,
    job_id: Optional[int] = None,
    recruiter_id: Optional[str] = None
) -> List[JobCandidate]:
    """Job-candidate rows created in [since, until], optionally scoped to a job or recruiter."""
    query = (
        db.query(JobCandidate)
        .options(joinedload(JobCandidate.job))
        .filter(
            JobCandidate.tenant_id == tenant_id,
            JobCandidate.created_at >= since,
            JobCandidate.created_at <= until,
        )
    )
    if job_id is not None:
        query = query.filter(JobCandidate.job_id == job_id)
    if recruiter_id is not None:
        query = query.filter(JobCandidate.recruiter_id == recruiter_id)
    return query.all()


def get_baseline_hires(db: Session, tenant_id: str, since: datetime, until: datetime) -> List[JobCandidate]:
    """Tenant-wide hires created in [since, until], the trailing time-to-fill baseline."""
    return (
        db.query(JobCandidate)
        .options(joinedload(JobCandidate.job))
        .filter(
            JobCandidate.tenant_id == tenant_id,
            JobCandidate.status == JobCandidateStatus.HIRED,
            JobCandidate.created_at >= since,
            JobCandidate.created_at <= until,
        )
        .all()
    )


def get_feedback_directions(
    db: Session,
    tenant_id: str,
    since: datetime,
    until: datetime,
    job_id: Optional[int] = None,
    recruiter_id: Optional[str] = None
) -> List[Optional[str]]:
    """Feedback directions left on hired matches in [since, until]."""
    query = db.query(MatchFeedback.direction).filter(
        MatchFeedback.tenant_id == tenant_id,
        MatchFeedback.outcome == HIRED_OUTCOME,
        MatchFeedback.created_at >= since,
        MatchFeedback.created_at <= until,
    )
    if job_id is not None:
        query = query.filter(MatchFeedback.job_id == job_id)
    if recruiter_id is not None:
        query = query.join(JobCandidate, MatchFeedback.job_candidate_id == JobCandidate.id).filter(
            JobCandidate.recruiter_id == recruiter_id
        )
    return [row[0] for row in query.all()]


def replace_tenant_snapshots(
    db: Session,
    tenant_id: str,
    captured_at: datetime,
    rows: List[Dict]
) -> List[MatchQualitySnapshot]:
    """
    Replace this capture week's tenant-scope snapshots in a single transaction.

    Rows captured on or after captured_at are deleted before the new rows
    are inserted, so a rerun in the same week never duplicates snapshots.
    """
    try:
        db.query(MatchQualitySnapshot).filter(
            MatchQualitySnapshot.tenant_id == tenant_id,
            MatchQualitySnapshot.scope == "tenant",
            MatchQualitySnapshot.captured_at >= captured_at,
        ).delete(synchronize_session=False)

        snapshots = [MatchQualitySnapshot(**row) for row in rows]
        db.add_all(snapshots)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return snapshots


def list_snapshots(
    db: Session,
    tenant_id: str,
    window_days: Optional[int] = None,
    limit: int = 52
) -> List[MatchQualitySnapshot]:
    query = db.query(MatchQualitySnapshot).filter(MatchQualitySnapshot.tenant_id == tenant_id)
    if window_days is not None:
        query = query.filter(MatchQualitySnapshot.window_days == window_days)
    return query.order_by(MatchQualitySnapshot.captured_at.desc()).limit(limit).all()
