"""
Tenant and tenant configuration models.

Each tenant is the isolation boundary for jobs, candidates, decision receipts
and every aggregate derived from them. The only cross-tenant data lives in
the anonymized learning pool (see learning.py).
"""

import enum
from sqlalchemy import Column, String, Boolean, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import relationship
from matchcore.core.database import Base, JSONType


class OperatingMode(str, enum.Enum):
    """
    Tenant operating mode.

    FIRE_DRILL and DEMO are safety modes: jobs that write derived metrics
    (for example the weekly MQI snapshots) are suppressed while they are active.
    """
    PILOT = "pilot"
    PRODUCTION = "production"
    FIRE_DRILL = "fire_drill"
    DEMO = "demo"


RESTRICTED_MODES = frozenset({OperatingMode.FIRE_DRILL, OperatingMode.DEMO})


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String, nullable=False)
    operating_mode = Column(
        Enum(OperatingMode, values_callable=lambda modes: [m.value for m in modes]),
        default=OperatingMode.PILOT,
        nullable=False
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    config = relationship("TenantConfig", back_populates="tenant", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Tenant(id={self.id}, mode={self.operating_mode})>"


class TenantConfig(Base):
    """
    Per-tenant configuration read by the engine.

    - network_learning_opt_in: gates cross-tenant benchmarking
    - network_learning: legacy JSON form, e.g. {"enabled": true}
    - guardrails: scoring/explanation guardrails; part of the explanation fingerprint
    """
    __tablename__ = "tenant_configs"

    tenant_id = Column(String(64), ForeignKey("tenants.id"), primary_key=True)
    network_learning_opt_in = Column(Boolean, nullable=True)
    network_learning = Column(JSONType, nullable=True)
    guardrails = Column(JSONType, nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    tenant = relationship("Tenant", back_populates="config")
