"""
Judgment-memory models.

DecisionReceipt rows are written by the decision-recording system and are
immutable; this engine only reads them. JudgmentAggregate rows are owned by the
aggregator and are replaced as a complete set per (tenant, window).
"""

import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Index, func
from matchcore.core.database import Base, JSONType


class DecisionType(str, enum.Enum):
    SUBMIT = "submit"
    REJECT = "reject"
    OVERRIDE = "override"
    CONFIDENCE_ADJUSTMENT = "confidence_adjustment"


class AggregateDimension(str, enum.Enum):
    FIRM = "firm"
    CLIENT = "client"
    ROLE_TYPE = "role_type"


class DecisionReceipt(Base):
    __tablename__ = "decision_receipts"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)

    firm_id = Column(String, nullable=False)
    client_id = Column(String, nullable=True)
    role_type = Column(String, nullable=True)
    agent = Column(String, nullable=True)

    decision_type = Column(
        Enum(DecisionType, values_callable=lambda types: [t.value for t in types]),
        nullable=False
    )

    # Opaque payloads, parsed through schemas.judgment on read
    signals = Column(JSONType, nullable=True)
    human_override = Column(JSONType, nullable=True)
    outcome = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<DecisionReceipt(id={self.id}, tenant_id={self.tenant_id}, type={self.decision_type})>"


class JudgmentAggregate(Base):
    __tablename__ = "judgment_aggregates"
    __table_args__ = (
        Index("ix_judgment_aggregates_window", "tenant_id", "window_start", "window_end"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)

    dimension = Column(
        Enum(AggregateDimension, values_callable=lambda dims: [d.value for d in dims]),
        nullable=False
    )
    dimension_value = Column(String, nullable=False)
    metric = Column(String, nullable=False)

    window_start = Column(DateTime(timezone=True), nullable=False)
    window_end = Column(DateTime(timezone=True), nullable=False)

    # Metric-specific shape, see services.judgment_aggregator
    value = Column(JSONType, nullable=False)
    sample_size = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<JudgmentAggregate({self.dimension}={self.dimension_value}, metric={self.metric}, n={self.sample_size})>"
