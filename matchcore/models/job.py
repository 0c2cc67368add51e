from sqlalchemy import Column, Integer, String, Boolean, Float, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from matchcore.core.database import Base


class Job(Base):
    """
    Job requisition as supplied by the intake layer.

    Only the fields the scoring and confidence engines read are modelled here.
    """
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)

    title = Column(String, nullable=True, index=True)
    location = Column(String, nullable=True)
    seniority_level = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    skills = relationship("JobSkill", back_populates="job", cascade="all, delete-orphan")
    job_candidates = relationship("JobCandidate", back_populates="job", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}')>"


class JobSkill(Base):
    __tablename__ = "job_skills"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    normalized_name = Column(String, nullable=True)
    required = Column(Boolean, default=False, nullable=False)
    weight = Column(Float, nullable=True)

    job = relationship("Job", back_populates="skills")
