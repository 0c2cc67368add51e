"""
Candidate database models.

Candidates arrive from the resume-ingestion layer already parsed; the engine
reads their identity fields for profile completeness and their normalized
skills for overlap and coverage.
"""

from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from matchcore.core.database import Base


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)

    # Identity (all optional, e.g. for blind screening)
    full_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    location = Column(String, nullable=True)

    current_title = Column(String, nullable=True)
    seniority_level = Column(String, nullable=True)
    summary = Column(Text, nullable=True)

    # Ingestion quality signals (0-1)
    trust_score = Column(Float, nullable=True)
    parsing_confidence = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    skills = relationship("CandidateSkill", back_populates="candidate", cascade="all, delete-orphan")
    job_candidates = relationship("JobCandidate", back_populates="candidate", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Candidate(id={self.id}, tenant_id={self.tenant_id})>"


class CandidateSkill(Base):
    __tablename__ = "candidate_skills"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    normalized_name = Column(String, nullable=True)
    proficiency = Column(String, nullable=True)
    years_of_experience = Column(Float, nullable=True)

    candidate = relationship("Candidate", back_populates="skills")
