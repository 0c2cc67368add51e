"""
Match explanations with a fingerprint cache.

Polishing an explanation goes through an external text-generation call, which
is slow and not deterministic. Each explanation is stored with a fingerprint of
everything that shaped it:

- explanation mode and guardrail config
- normalized job context
- normalized candidate context (skills sorted)
- match breakdown and confidence

When the stored fingerprint equals the current one, the stored explanation is
returned and the generator is not called. The check-then-write is not locked.
Two concurrent requests for the same row may both call the generator, and the
later commit wins. The fingerprint is the same for both, so either text is a
valid cache entry.
"""

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from pydantic import ValidationError
from sqlalchemy.orm import Session

from matchcore.core.config import settings
from matchcore.core.exceptions import ExplanationUnavailableError
from matchcore.models.pipeline import JobCandidate
from matchcore.schemas.explanation import Explanation, ExplanationRecord, ExplanationResult
from matchcore.schemas.matching import CandidateProfile, ConfidenceResult, JobProfile, MatchScoreBreakdown
from matchcore.services.confidence import confidence_band
from matchcore.services import llm

logger = logging.getLogger(__name__)

TextGenerator = Callable[[str, str], str]

MODE_COMPACT = "compact"
MODE_DETAILED = "detailed"

STRENGTH_FILLERS = [
    "Overall signals suggest a workable fit.",
    "Profile data supports a recruiter review.",
    "No blocking gaps detected in the scored signals.",
]
NO_RISK_FILLER = "No significant risks flagged."

SYSTEM_PROMPT = " ".join([
    "You are an assistant that polishes candidate-job explanations for recruiters.",
    "Rewrite the provided summary, strengths, and risks to be concise and recruiter-friendly while preserving meaning.",
    "Respond ONLY with JSON in the shape { \"summary\": string, \"strengths\": string[], \"risks\": string[] }.",
    "Do not include any additional commentary or formatting.",
])


# ============================================================
# Fingerprints
# ============================================================

def stable_serialize(payload: Any) -> str:
    """Key-sorted, whitespace-free JSON."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def _digest(payload: Any) -> str:
    return hashlib.sha256(stable_serialize(payload).encode("utf-8")).hexdigest()


def _norm(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip().lower() or None


def normalize_job_context(job: JobProfile) -> Dict[str, Any]:
    return {
        "title": job.comparable_title,
        "location": _norm(job.location),
        "seniority": _norm(job.seniority_level),
        "skills": sorted(
            ({"name": skill.key, "required": skill.required, "weight": skill.weight} for skill in job.skills if skill.key),
            key=lambda entry: (entry["name"], not entry["required"]),
        ),
    }


def normalize_candidate_context(candidate: CandidateProfile) -> Dict[str, Any]:
    return {
        "full_name": _norm(candidate.full_name),
        "location": _norm(candidate.location),
        "title": _norm(candidate.current_title),
        "seniority": _norm(candidate.seniority_level),
        "has_contact": bool(candidate.email or candidate.phone),
        "summary": (candidate.summary or "").strip() or None,
        "skills": sorted({skill.key for skill in candidate.skills if skill.key}),
    }


def resolve_mode(guardrails: Optional[Dict[str, Any]]) -> str:
    level = ((guardrails or {}).get("explain") or {}).get("level")
    return MODE_COMPACT if level == MODE_COMPACT else MODE_DETAILED


def build_fingerprints(
    mode: str,
    guardrails: Optional[Dict[str, Any]],
    job: JobProfile,
    candidate: CandidateProfile,
    match: MatchScoreBreakdown,
    confidence: ConfidenceResult,
) -> Dict[str, str]:
    """
    Fingerprint each input part plus the combined "explanation" key.

    Only the combined key decides cache hits; the per-part digests make it
    visible which input changed.
    """
    parts = {
        "mode": mode,
        "guardrails": guardrails or {},
        "job": normalize_job_context(job),
        "candidate": normalize_candidate_context(candidate),
        "signals": {
            "match": match.model_dump(),
            "confidence_score": confidence.confidence_score,
            "reasons": confidence.reasons,
        },
    }
    fingerprints = {name: _digest(value) for name, value in parts.items() if name != "mode"}
    fingerprints["explanation"] = _digest(parts)
    return fingerprints


# ============================================================
# Deterministic base explanation
# ============================================================

def _required_coverage(job: JobProfile, candidate: CandidateProfile) -> float:
    required = [skill.key for skill in job.skills if skill.required and skill.key]
    if not required:
        return 1.0
    candidate_skills = {skill.key for skill in candidate.skills}
    return sum(1 for key in required if key in candidate_skills) / len(required)


def _location_mismatch(job: JobProfile, candidate: CandidateProfile) -> bool:
    job_location = _norm(job.location)
    candidate_location = _norm(candidate.location)
    if not job_location or not candidate_location:
        return False
    if "remote" in job_location or "remote" in candidate_location:
        return False
    return job_location != candidate_location


def _pad(items: List[str], minimum: int, fillers: List[str]) -> List[str]:
    for filler in fillers:
        if len(items) >= minimum:
            break
        items.append(filler)
    return items


def build_base_explanation(
    job: JobProfile,
    candidate: CandidateProfile,
    match: MatchScoreBreakdown,
    confidence: ConfidenceResult,
    mode: str = MODE_DETAILED,
) -> Explanation:
    compact = mode == MODE_COMPACT
    band = confidence_band(confidence.confidence_score)
    required_coverage = _required_coverage(job, candidate)

    strengths = []
    if required_coverage >= 0.8:
        strengths.append(f"High required-skill coverage ({round(required_coverage * 100)}%).")
    if match.skill_overlap_score >= 60:
        strengths.append(f"Broad skill overlap with the role ({match.skill_overlap_score}%).")
    if match.title_similarity_score >= 80:
        strengths.append("Current title closely matches the role.")
    if band == "HIGH":
        lead = confidence.reasons[0] if confidence.reasons else None
        strengths.append(
            f"High confidence band driven by: {lead}" if lead else "High confidence band supported by reliable signals."
        )
    strengths = _pad(strengths[: 2 if compact else 5], 1 if compact else 3, STRENGTH_FILLERS)

    risks = []
    if required_coverage < 0.8:
        risks.append("Missing required skills may require ramp-up.")
    job_level = _norm(job.seniority_level)
    candidate_level = _norm(candidate.seniority_level)
    if job_level and candidate_level and job_level != candidate_level:
        risks.append("Seniority differs from the role expectation.")
    if _location_mismatch(job, candidate):
        risks.append("Location mismatch could impact availability expectations.")
    if band == "LOW":
        risks.append("Low confidence band; profile data needs manual validation.")
    risks = _pad(risks[: 1 if compact else 3], 0 if compact else 1, [NO_RISK_FILLER])

    summary = strengths[0]
    if risks and risks[0] != NO_RISK_FILLER:
        summary = f"{summary} Top risk: {risks[0]}"

    return Explanation(summary=summary, strengths=strengths, risks=risks)


# ============================================================
# Generator call
# ============================================================

def polish_explanation(
    base: Explanation,
    guardrails: Optional[Dict[str, Any]],
    generate: TextGenerator,
) -> Explanation:
    """
    Ask the generator to rewrite the base explanation.

    Raises:
        ExplanationUnavailableError: If the call fails or the reply is not a valid explanation
    """
    explain_config = (guardrails or {}).get("explain") or {}
    strengths_max = explain_config.get("strengths_max")
    risks_max = explain_config.get("risks_max")

    user_prompt = json.dumps({
        "explanation": base.model_dump(),
        "constraints": {
            "strengthsMax": strengths_max or 5,
            "risksMax": risks_max or 3,
        },
    })

    try:
        raw = generate(SYSTEM_PROMPT, user_prompt)
        polished = Explanation.model_validate(json.loads(raw))
    except ExplanationUnavailableError:
        raise
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ExplanationUnavailableError(f"Unusable generator output: {e}") from e
    except Exception as e:
        raise ExplanationUnavailableError(str(e)) from e

    if strengths_max:
        polished.strengths = polished.strengths[:strengths_max]
    if risks_max:
        polished.risks = polished.risks[:risks_max]
    return polished


def _load_record(raw: Any) -> Optional[ExplanationRecord]:
    if not isinstance(raw, dict):
        return None
    try:
        return ExplanationRecord.model_validate(raw)
    except ValidationError:
        logger.warning("Discarding malformed persisted explanation")
        return None


def get_match_explanation(
    db: Session,
    job_candidate: JobCandidate,
    job: JobProfile,
    candidate: CandidateProfile,
    match: MatchScoreBreakdown,
    confidence: ConfidenceResult,
    guardrails: Optional[Dict[str, Any]] = None,
    force: bool = False,
    generate: Optional[TextGenerator] = None,
) -> ExplanationResult:
    """
    Return the explanation for a job-candidate pair, reusing the stored one when possible.

    Args:
        db: Database session
        job_candidate: Row that holds the persisted explanation
        job, candidate: Profiles the match was scored on
        match, confidence: Scoring results being explained
        guardrails: Tenant guardrail config (explain level, strengths/risks caps)
        force: Skip the cache and always call the generator
        generate: Text-generation callable, defaults to the OpenAI client

    Returns:
        ExplanationResult with status cached, generated or unavailable
    """
    mode = resolve_mode(guardrails)
    fingerprints = build_fingerprints(mode, guardrails, job, candidate, match, confidence)
    fingerprint = fingerprints["explanation"]

    existing = _load_record(job_candidate.explanation)
    if (
        existing
        and not force
        and existing.version == settings.EXPLANATION_VERSION
        and existing.fingerprints.get("explanation") == fingerprint
    ):
        logger.info(f"Explanation cache hit for job_candidate {job_candidate.id}")
        return ExplanationResult(
            status="cached",
            explanation=existing.explanation,
            fingerprint=fingerprint,
            updated_at=existing.updated_at,
        )

    base = build_base_explanation(job, candidate, match, confidence, mode)

    try:
        polished = polish_explanation(base, guardrails, generate or llm.generate_text)
    except ExplanationUnavailableError as e:
        logger.warning(f"Explanation unavailable for job_candidate {job_candidate.id}: {e}")
        return ExplanationResult(status="unavailable", explanation=base, fingerprint=fingerprint)

    record = ExplanationRecord(
        version=settings.EXPLANATION_VERSION,
        updated_at=datetime.now(timezone.utc),
        explanation=polished,
        fingerprints=fingerprints,
    )
    job_candidate.explanation = record.model_dump(mode="json")
    db.commit()

    logger.info(f"Explanation regenerated for job_candidate {job_candidate.id} (force={force})")
    return ExplanationResult(
        status="generated",
        explanation=polished,
        fingerprint=fingerprint,
        updated_at=record.updated_at,
    )
