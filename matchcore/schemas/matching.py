"""
Pydantic schemas for match scoring and confidence.

JobProfile and CandidateProfile validate straight from the ORM rows
(from_attributes) or from API payloads.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class SkillInput(BaseModel):
    """A job or candidate skill."""
    model_config = ConfigDict(from_attributes=True)

    name: str
    normalized_name: Optional[str] = None
    required: bool = False
    weight: Optional[float] = None
    proficiency: Optional[str] = None
    years_of_experience: Optional[float] = None

    @property
    def key(self) -> str:
        """Case-insensitive comparison key."""
        return (self.normalized_name or self.name or "").strip().lower()


class JobProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: Optional[str] = None
    normalized_title: Optional[str] = None
    location: Optional[str] = None
    seniority_level: Optional[str] = None
    skills: List[SkillInput] = Field(default_factory=list)

    @property
    def comparable_title(self) -> Optional[str]:
        title = self.normalized_title or self.title
        return title.strip().lower() if title and title.strip() else None


class CandidateProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    current_title: Optional[str] = None
    seniority_level: Optional[str] = None
    summary: Optional[str] = None
    trust_score: Optional[float] = Field(None, ge=0, le=1)
    parsing_confidence: Optional[float] = Field(None, ge=0, le=1)
    skills: List[SkillInput] = Field(default_factory=list)


class MatchScoreBreakdown(BaseModel):
    """Deterministic match score, every field an integer in [0, 100]."""
    model_config = ConfigDict(frozen=True)

    skill_overlap_score: int = Field(..., ge=0, le=100)
    title_similarity_score: int = Field(..., ge=0, le=100)
    composite_score: int = Field(..., ge=0, le=100)


class ConfidenceResult(BaseModel):
    confidence_score: int = Field(..., ge=0, le=100)
    reasons: List[str]


class MatchScoreRequest(BaseModel):
    job: JobProfile
    candidate: CandidateProfile


class MatchScoreResponse(BaseModel):
    match: MatchScoreBreakdown
    confidence: ConfidenceResult
    confidence_band: str = Field(..., description="HIGH, MEDIUM or LOW")
