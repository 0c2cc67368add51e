from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict


class MatchQualityComponents(BaseModel):
    shortlist_to_interview_rate: float
    interview_to_hire_rate: float
    average_candidate_feedback: float
    time_to_fill_score: float
    average_time_to_fill_days: float
    baseline_time_to_fill_days: float


class MatchQualitySamples(BaseModel):
    shortlisted: int
    interviewed: int
    hired: int
    feedback_entries: int
    time_to_fill_samples: int
    baseline_samples: int


class MatchQualityResult(BaseModel):
    mqi: float
    window_days: int
    components: MatchQualityComponents
    samples: MatchQualitySamples


class MatchQualitySnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    scope: str
    scope_ref: Optional[str] = None
    window_days: int
    mqi: float
    components: Dict[str, Any]
    captured_at: datetime
