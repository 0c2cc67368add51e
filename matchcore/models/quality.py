from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, func
from matchcore.core.database import Base, JSONType


class MatchQualitySnapshot(Base):
    """
    Weekly capture of the Match Quality Index.

    One row per (scope, scope_ref, window_days) per capture week; a rerun for
    the same week replaces that week's rows.
    """
    __tablename__ = "match_quality_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String(64), ForeignKey("tenants.id"), nullable=False, index=True)

    scope = Column(String, nullable=False, default="tenant")  # tenant | job | recruiter
    scope_ref = Column(String, nullable=True)
    window_days = Column(Integer, nullable=False)

    mqi = Column(Float, nullable=False)
    components = Column(JSONType, nullable=False)

    captured_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<MatchQualitySnapshot(tenant_id={self.tenant_id}, window={self.window_days}, mqi={self.mqi})>"
