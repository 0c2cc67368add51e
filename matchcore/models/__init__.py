"""
Database models package.
"""

from matchcore.models.tenant import Tenant, TenantConfig, OperatingMode, RESTRICTED_MODES
from matchcore.models.job import Job, JobSkill
from matchcore.models.candidate import Candidate, CandidateSkill
from matchcore.models.pipeline import JobCandidate, JobCandidateStatus, MatchFeedback
from matchcore.models.judgment import DecisionReceipt, DecisionType, JudgmentAggregate, AggregateDimension
from matchcore.models.quality import MatchQualitySnapshot
from matchcore.models.learning import TenantLearningSignal, LearningAggregate

__all__ = [
    "Tenant", "TenantConfig", "OperatingMode", "RESTRICTED_MODES",
    "Job", "JobSkill",
    "Candidate", "CandidateSkill",
    "JobCandidate", "JobCandidateStatus", "MatchFeedback",
    "DecisionReceipt", "DecisionType", "JudgmentAggregate", "AggregateDimension",
    "MatchQualitySnapshot",
    "TenantLearningSignal", "LearningAggregate",
]
