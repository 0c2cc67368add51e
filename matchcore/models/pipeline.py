"""
Pipeline models: a candidate's progress on a job and recruiter feedback.

JobCandidate also carries the persisted match explanation, so the explanation
cache can compare fingerprints without a separate lookup.
"""

import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import relationship
from matchcore.core.database import Base, JSONType


class JobCandidateStatus(str, enum.Enum):
    """
    Pipeline status lifecycle:

    POTENTIAL -> SHORTLISTED -> SUBMITTED -> INTERVIEWING -> HIRED
                                     ↓
                                  REJECTED
    """
    POTENTIAL = "POTENTIAL"
    SHORTLISTED = "SHORTLISTED"
    SUBMITTED = "SUBMITTED"
    INTERVIEWING = "INTERVIEWING"
    HIRED = "HIRED"
    REJECTED = "REJECTED"


class JobCandidate(Base):
    __tablename__ = "job_candidates"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False, index=True)
    recruiter_id = Column(String(64), nullable=True, index=True)

    status = Column(Enum(JobCandidateStatus), default=JobCandidateStatus.POTENTIAL, nullable=False, index=True)

    # {"version", "updated_at", "explanation", "fingerprints"}
    explanation = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    job = relationship("Job", back_populates="job_candidates")
    candidate = relationship("Candidate", back_populates="job_candidates")
    feedback = relationship("MatchFeedback", back_populates="job_candidate", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<JobCandidate(id={self.id}, job_id={self.job_id}, status={self.status.value})>"


class MatchFeedback(Base):
    """Recruiter thumbs-up/down on a match. direction is UP, DOWN or free text; outcome is HIRED, REJECTED, etc."""
    __tablename__ = "match_feedback"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    job_candidate_id = Column(Integer, ForeignKey("job_candidates.id"), nullable=True, index=True)

    direction = Column(String, nullable=True)
    outcome = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    job_candidate = relationship("JobCandidate", back_populates="feedback")
