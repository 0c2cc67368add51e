"""
Deterministic match scoring.

skill overlap: Jaccard similarity of the case-insensitive skill sets, 0-100
title similarity: exact 100 / containment 80 / different 30 / missing 0
composite: 70% skills + 30% title
"""

import math
from typing import Iterable, Optional, Set
from matchcore.schemas.matching import MatchScoreBreakdown

SKILL_WEIGHT = 0.7
TITLE_WEIGHT = 0.3

TITLE_EXACT = 100
TITLE_CONTAINS = 80
TITLE_DIFFERENT = 30
TITLE_MISSING = 0


def round_half_up(value: float) -> int:
    """Round halves up; built-in round() sends 46.5 to 46."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _skill_set(skills: Optional[Iterable[str]]) -> Set[str]:
    return {skill.strip().lower() for skill in (skills or []) if skill and skill.strip()}


def _normalize_title(title: Optional[str]) -> str:
    return (title or "").strip().lower()


def jaccard(a: Optional[Iterable[str]], b: Optional[Iterable[str]]) -> float:
    set_a = _skill_set(a)
    set_b = _skill_set(b)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def title_similarity(job_title: Optional[str], candidate_title: Optional[str]) -> int:
    job = _normalize_title(job_title)
    candidate = _normalize_title(candidate_title)

    if not candidate or not job:
        return TITLE_MISSING
    if job == candidate:
        return TITLE_EXACT
    if job in candidate or candidate in job:
        return TITLE_CONTAINS
    return TITLE_DIFFERENT


def compute_match_score(
    job_title: Optional[str],
    job_skills: Optional[Iterable[str]],
    candidate_title: Optional[str],
    candidate_skills: Optional[Iterable[str]],
) -> MatchScoreBreakdown:
    skill_overlap_score = round_half_up(jaccard(job_skills, candidate_skills) * 100)
    title_similarity_score = title_similarity(job_title, candidate_title)
    composite_score = round_half_up(skill_overlap_score * SKILL_WEIGHT + title_similarity_score * TITLE_WEIGHT)

    return MatchScoreBreakdown(
        skill_overlap_score=skill_overlap_score,
        title_similarity_score=title_similarity_score,
        composite_score=composite_score,
    )


def score_profiles(job, candidate) -> MatchScoreBreakdown:
    """Score a JobProfile against a CandidateProfile."""
    return compute_match_score(
        job.normalized_title or job.title,
        [skill.normalized_name or skill.name for skill in job.skills],
        candidate.current_title,
        [skill.normalized_name or skill.name for skill in candidate.skills],
    )
