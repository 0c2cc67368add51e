from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class Explanation(BaseModel):
    """Recruiter-facing match explanation."""
    summary: str
    strengths: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)


class ExplanationRecord(BaseModel):
    """Shape persisted on JobCandidate.explanation."""
    version: int
    updated_at: datetime
    explanation: Explanation
    fingerprints: Dict[str, str]


class ExplanationResult(BaseModel):
    """
    Result of an explanation request.

    status:
    - cached: persisted explanation reused, generator not called
    - generated: generator called, fresh explanation persisted
    - unavailable: generator failed; deterministic explanation returned, nothing persisted
    """
    status: Literal["cached", "generated", "unavailable"]
    explanation: Explanation
    fingerprint: str
    updated_at: Optional[datetime] = None
