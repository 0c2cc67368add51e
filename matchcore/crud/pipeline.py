"""
CRUD operations for job-candidate pipeline rows.
"""

from typing import Optional
from sqlalchemy.orm import Session, joinedload
from matchcore.models.job import Job
from matchcore.models.candidate import Candidate
from matchcore.models.pipeline import JobCandidate


def get_job_candidate(db: Session, tenant_id: str, job_candidate_id: int) -> Optional[JobCandidate]:
    """
    Retrieve a job-candidate row with its job, candidate and their skills.

    Rows belonging to another tenant are not returned.
    """
    return (
        db.query(JobCandidate)
        .options(
            joinedload(JobCandidate.job).joinedload(Job.skills),
            joinedload(JobCandidate.candidate).joinedload(Candidate.skills),
        )
        .filter(JobCandidate.id == job_candidate_id, JobCandidate.tenant_id == tenant_id)
        .first()
    )
