"""
Pydantic schemas for judgment memory.

DecisionSignals and DecisionOutcome give the opaque receipt payloads a typed
shape. Unknown keys are kept and malformed known keys become None, so a bad
receipt degrades to "no signal" instead of failing the batch.
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Dimension = Literal["firm", "client", "role_type"]


class DecisionSignals(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    confidence_band: Optional[str] = Field(
        None, validation_alias=AliasChoices("confidenceBand", "confidence_band")
    )

    @field_validator("confidence_band", mode="before")
    @classmethod
    def blank_band_is_missing(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and v.strip():
            return v
        return None

    @classmethod
    def parse(cls, raw: Any) -> "DecisionSignals":
        if not isinstance(raw, dict):
            return cls()
        return cls.model_validate(raw)


class DecisionOutcome(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    hired: Optional[bool] = None
    tenure_days: Optional[float] = Field(
        None, validation_alias=AliasChoices("tenureDays", "tenure_days")
    )
    performance_rating: Optional[float] = Field(
        None, validation_alias=AliasChoices("performanceRating", "performance_rating")
    )

    @field_validator("hired", mode="before")
    @classmethod
    def strict_bool(cls, v: Any) -> Optional[bool]:
        return v if isinstance(v, bool) else None

    @field_validator("tenure_days", "performance_rating", mode="before")
    @classmethod
    def finite_number(cls, v: Any) -> Optional[float]:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        return float(v) if math.isfinite(v) else None

    @classmethod
    def parse(cls, raw: Any) -> Optional["DecisionOutcome"]:
        if not isinstance(raw, dict):
            return None
        return cls.model_validate(raw)


class JudgmentMetric(BaseModel):
    """One aggregate metric row as read back from the store."""
    model_config = ConfigDict(from_attributes=True)

    metric: str
    value: Dict[str, Any]
    sample_size: int


class JudgmentInsight(BaseModel):
    """Latest-window aggregate bundle for one dimension value."""
    dimension: Dimension
    dimension_value: str
    window_start: datetime
    window_end: datetime
    metrics: Dict[str, JudgmentMetric] = Field(default_factory=dict)


class DriftAdjustment(BaseModel):
    id: str
    dimension: Dimension
    segment: str
    category: Literal["defaults", "tradeoffs", "confidence"]
    status: Literal["applied", "watching"]
    change: str
    rationale: str
    signals: List[str]
    guardrail: str


class DecisionCultureCue(BaseModel):
    message: str
    scope: Dimension
    sample_size: int
    window_label: str


class AggregationRunResult(BaseModel):
    tenants_processed: int
    aggregates_written: int
    failed_tenants: List[str] = Field(default_factory=list)
