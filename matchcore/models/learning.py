"""
Network-learning models used by client-relative benchmarking.

TenantLearningSignal holds a tenant's own per-signal values.
LearningAggregate is the precomputed cross-tenant pool: it has no tenant_id,
only peer-group attributes, a value and the contributing sample size.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, func
from matchcore.core.database import Base


class TenantLearningSignal(Base):
    __tablename__ = "tenant_learning_signals"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)

    role_family = Column(String, nullable=False)
    industry = Column(String, nullable=True)
    region = Column(String, nullable=True)
    signal_type = Column(String, nullable=False)  # time_to_fill | skill_scarcity | confidence_dist

    value = Column(Float, nullable=False)
    sample_size = Column(Integer, nullable=False, default=0)
    window_days = Column(Integer, nullable=False)

    captured_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)


class LearningAggregate(Base):
    __tablename__ = "learning_aggregates"

    id = Column(Integer, primary_key=True, index=True)

    role_family = Column(String, nullable=False)
    industry = Column(String, nullable=True)
    region = Column(String, nullable=True)
    signal_type = Column(String, nullable=False)

    value = Column(Float, nullable=False)
    # Used only to bucket the aggregate into a size cohort
    sample_size = Column(Integer, nullable=False, default=0)
    window_days = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
