import logging
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from matchcore.core.database import get_db
from matchcore.core.deps import get_tenant_id
from matchcore.crud import pipeline as pipeline_crud
from matchcore.crud import tenant as tenant_crud
from matchcore.schemas.explanation import ExplanationResult
from matchcore.schemas.matching import CandidateProfile, JobProfile, MatchScoreRequest, MatchScoreResponse
from matchcore.services.confidence import compute_confidence, confidence_band
from matchcore.services.explanation import get_match_explanation
from matchcore.services.scoring import score_profiles

router = APIRouter(prefix="/matching", tags=["Matching"])
logger = logging.getLogger(__name__)


@router.post("/score", response_model=MatchScoreResponse)
def score_match(request: MatchScoreRequest):
    """
    Score a candidate against a job.

    Pure computation: nothing is read from or written to the database.
    Returns the match breakdown, the confidence score with its reasons, and
    the confidence band.
    """
    match = score_profiles(request.job, request.candidate)
    confidence = compute_confidence(match, request.job, request.candidate)

    return MatchScoreResponse(
        match=match,
        confidence=confidence,
        confidence_band=confidence_band(confidence.confidence_score)
    )


@router.post("/{job_candidate_id}/explanation", response_model=ExplanationResult)
def explain_match(
    job_candidate_id: int,
    force: bool = False,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db)
):
    """
    Return the recruiter-facing explanation for a job-candidate pair.

    The stored explanation is reused while its fingerprint still matches the
    current job, candidate, scores and tenant guardrails. Pass force=true to
    regenerate regardless. If text generation fails the deterministic
    explanation is returned with status "unavailable".
    """
    job_candidate = pipeline_crud.get_job_candidate(db, tenant_id, job_candidate_id)
    if not job_candidate:
        raise HTTPException(status_code=404, detail="Job candidate not found")

    job = JobProfile.model_validate(job_candidate.job)
    candidate = CandidateProfile.model_validate(job_candidate.candidate)
    match = score_profiles(job, candidate)
    confidence = compute_confidence(match, job, candidate)

    config = tenant_crud.get_config(db, tenant_id)
    guardrails = config.guardrails if config else None

    result = get_match_explanation(
        db,
        job_candidate,
        job,
        candidate,
        match,
        confidence,
        guardrails=guardrails,
        force=force
    )

    logger.info(f"Explanation for job_candidate {job_candidate_id}: {result.status}")
    return result
