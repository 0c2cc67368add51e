"""
Confidence engine.

Turns a match breakdown plus the job and candidate profiles into a 0-100
confidence score and the ordered list of reasons behind it:

- skill coverage   0-40  (required-skill coverage averaged with skill overlap)
- seniority        0-20  (match 20, conflict 10, one side missing 14, unspecified 10)
- completeness     0-25  (six profile fields)
- composite        0-15  (15% of the composite match score)
- penalties              (seniority conflict 7, no skills 8, no name 5)

Missing data never raises; it lowers the score and shows up in the reasons.
"""

from typing import List, Optional, Tuple
from matchcore.schemas.matching import CandidateProfile, ConfidenceResult, JobProfile, MatchScoreBreakdown
from matchcore.services.scoring import clamp, round_half_up

SKILL_COVERAGE_MAX = 40
SENIORITY_MAX = 20
COMPLETENESS_MAX = 25
COMPOSITE_MAX = 15
COMPOSITE_FACTOR = 0.15

PENALTY_SENIORITY_CONFLICT = 7
PENALTY_NO_SKILLS = 8
PENALTY_NO_NAME = 5

HIGH_BAND_MIN = 75
MEDIUM_BAND_MIN = 50


def _normalize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip().lower()
    return normalized or None


def _clamped(value: float, high: float) -> int:
    return round_half_up(clamp(value, 0, high))


def _required_skill_coverage(job: JobProfile, candidate: CandidateProfile) -> Tuple[int, int, float]:
    required = [skill for skill in job.skills if skill.required]
    candidate_skills = {skill.key for skill in candidate.skills if skill.key}

    matched = sum(1 for skill in required if skill.key and skill.key in candidate_skills)
    coverage = matched / len(required) if required else 1.0
    return len(required), matched, coverage


def _seniority(job: JobProfile, candidate: CandidateProfile) -> Tuple[float, str]:
    job_level = _normalize(job.seniority_level)
    candidate_level = _normalize(candidate.seniority_level)

    if not job_level and not candidate_level:
        return 0.5, "Seniority unspecified; neutral confidence applied."
    if job_level and candidate_level:
        if job_level == candidate_level:
            return 1.0, "Candidate seniority matches job requirement."
        return 0.5, f"Seniority differs (job: {job_level}, candidate: {candidate_level}); lowering confidence."
    return 0.7, "Partial seniority data; modest confidence applied."


def _completeness(candidate: CandidateProfile) -> Tuple[float, List[str]]:
    fields = [
        ("full name", candidate.full_name),
        ("location", candidate.location),
        ("current title", candidate.current_title),
        ("contact", candidate.email or candidate.phone),
        ("skills", len(candidate.skills)),
        ("summary", candidate.summary),
    ]

    missing = []
    for label, value in fields:
        if isinstance(value, int):
            present = value > 0
        else:
            present = bool(value and str(value).strip())
        if not present:
            missing.append(label)

    return (len(fields) - len(missing)) / len(fields), missing


def _contradictions(job: JobProfile, candidate: CandidateProfile) -> Tuple[int, List[str]]:
    penalty = 0
    reasons = []

    job_level = _normalize(job.seniority_level)
    candidate_level = _normalize(candidate.seniority_level)
    if job_level and candidate_level and job_level != candidate_level:
        penalty += PENALTY_SENIORITY_CONFLICT
        reasons.append("Candidate seniority conflicts with job requirement.")

    if not candidate.skills:
        penalty += PENALTY_NO_SKILLS
        reasons.append("No candidate skills provided.")

    if not (candidate.full_name and candidate.full_name.strip()):
        penalty += PENALTY_NO_NAME
        reasons.append("Candidate name missing.")

    return penalty, reasons


def compute_confidence(
    match: MatchScoreBreakdown,
    job: JobProfile,
    candidate: CandidateProfile,
) -> ConfidenceResult:
    reasons: List[str] = []

    required_count, matched_required, required_coverage = _required_skill_coverage(job, candidate)
    overlap_factor = match.skill_overlap_score / 100
    skill_coverage_score = _clamped((required_coverage + overlap_factor) / 2 * SKILL_COVERAGE_MAX, SKILL_COVERAGE_MAX)
    if required_count:
        reasons.append(
            f"Matched {matched_required}/{required_count} required skills "
            f"({round_half_up(required_coverage * 100)}% coverage)."
        )
    else:
        reasons.append("No explicit required skills; relying on general skill overlap.")

    seniority_ratio, seniority_reason = _seniority(job, candidate)
    seniority_score = _clamped(seniority_ratio * SENIORITY_MAX, SENIORITY_MAX)
    reasons.append(seniority_reason)

    completeness_ratio, missing = _completeness(candidate)
    completeness_score = _clamped(completeness_ratio * COMPLETENESS_MAX, COMPLETENESS_MAX)
    if missing:
        reasons.append(f"Candidate profile missing {', '.join(missing)}.")
    else:
        reasons.append("Candidate profile is largely complete.")

    penalty, penalty_reasons = _contradictions(job, candidate)
    reasons.extend(penalty_reasons)

    composite_contribution = _clamped(match.composite_score * COMPOSITE_FACTOR, COMPOSITE_MAX)

    base_score = skill_coverage_score + seniority_score + completeness_score + composite_contribution
    confidence_score = _clamped(base_score - penalty, 100)

    return ConfidenceResult(confidence_score=confidence_score, reasons=reasons)


def confidence_band(score: int) -> str:
    """Bucket a confidence score into the band recorded on decision receipts."""
    if score >= HIGH_BAND_MIN:
        return "HIGH"
    if score >= MEDIUM_BAND_MIN:
        return "MEDIUM"
    return "LOW"
