"""
Dimension Scorers
=================
Four independent scorers, each mapping (JobRequirement, CandidateProfile)
to an integer 0-100:

- Semantic Match: contextual similarity of job text and resume text
- Skill Match: coverage of the normalized required-skill set
- Experience Match: seniority alignment on the entry < mid < senior < executive ladder
- Education Match: highest degree against the job's stated minimum

Missing optional data never raises; it degrades to a neutral or zero score.
"""

import asyncio
import logging
import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Set, Tuple

from core.config import DEFAULT_SCORING_CONFIG, ScoringConfig, get_settings
from core.exceptions import ExternalScorerTimeout
from models.schemas import CandidateProfile, EducationLevel, ExperienceLevel, JobRequirement
from services.similarity import SimilarityProvider, get_similarity_provider
from services.skill_normalizer import normalize_skills

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def clamp_score(value: int) -> int:
    return max(0, min(100, value))


def ordinal_gap_score(required: int, actual: int, penalty_per_level: int) -> int:
    """100 at or above the required level, minus a fixed penalty per level below"""
    gap = required - actual
    if gap <= 0:
        return 100
    return clamp_score(100 - gap * penalty_per_level)


# ============================================================================
# Semantic Match
# ============================================================================

def build_job_text(job: JobRequirement) -> str:
    """Job side of the semantic comparison"""
    parts = []
    if job.title:
        parts.append(job.title)
    parts.append(job.description)
    if job.required_skills:
        parts.append("Skills: " + ", ".join(job.required_skills))
    return "\n".join(parts).strip()


class SemanticScorer:
    """
    Semantic match through an injected SimilarityProvider.
    Each lookup is bounded by a timeout; a timeout or provider failure
    degrades the dimension to 0 for that candidate only.
    """

    def __init__(
        self,
        provider: Optional[SimilarityProvider] = None,
        timeout_seconds: Optional[float] = None,
        text_limit: Optional[int] = None
    ):
        settings = get_settings()
        self.provider = provider or get_similarity_provider()
        self.timeout_seconds = timeout_seconds or settings.semantic_timeout_seconds
        self.text_limit = text_limit or settings.semantic_text_limit

    async def _lookup(self, job_text: str, resume_text: str) -> float:
        try:
            return await asyncio.wait_for(
                self.provider.similarity(job_text, resume_text),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise ExternalScorerTimeout(self.provider.name, self.timeout_seconds) from e

    async def score_with_status(self, job: JobRequirement, candidate: CandidateProfile) -> Tuple[int, bool]:
        """Returns (score, degraded)"""
        job_text = build_job_text(job)[:self.text_limit]
        resume_text = candidate.resume_text.strip()[:self.text_limit]
        if not job_text or not resume_text:
            return 0, False

        try:
            similarity = float(await self._lookup(job_text, resume_text))
            if not math.isfinite(similarity):
                raise ValueError(f"non-finite similarity {similarity!r} from {self.provider.name}")
            return clamp_score(round_half_up(similarity * 100)), False
        except ExternalScorerTimeout as e:
            logger.warning(
                f"⏱️ Semantic scorer timeout for candidate {candidate.candidate_id}: {e.message}",
                extra={"job_id": job.job_id, "candidate_id": candidate.candidate_id}
            )
            return 0, True
        except Exception as e:
            logger.warning(
                f"Semantic scorer failed for candidate {candidate.candidate_id}: {e}",
                extra={"job_id": job.job_id, "candidate_id": candidate.candidate_id}
            )
            return 0, True

    async def score(self, job: JobRequirement, candidate: CandidateProfile) -> int:
        score, _ = await self.score_with_status(job, candidate)
        return score


# ============================================================================
# Skill Match
# ============================================================================

def skill_overlap(job: JobRequirement, candidate: CandidateProfile) -> Tuple[Set[str], Set[str]]:
    """(matched, missing) over the normalized required-skill set"""
    required = normalize_skills(job.required_skills)
    have = normalize_skills(candidate.skills)
    return required & have, required - have


def skill_match(job: JobRequirement, candidate: CandidateProfile) -> int:
    """
    Share of required skills the candidate has, 0-100.
    A job with no required skills scores 100: there is nothing to fail on.
    """
    required = normalize_skills(job.required_skills)
    if not required:
        return 100
    matched, _ = skill_overlap(job, candidate)
    # Integer half-up rounding of len(matched) / len(required) * 100
    return (len(matched) * 200 + len(required)) // (2 * len(required))


# ============================================================================
# Experience Match
# ============================================================================

# Minimum years for each level
EXPERIENCE_YEARS = {
    ExperienceLevel.ENTRY: 0,
    ExperienceLevel.MID: 3,
    ExperienceLevel.SENIOR: 7,
    ExperienceLevel.EXECUTIVE: 10,
}


def experience_level_from_years(years: float) -> ExperienceLevel:
    level = ExperienceLevel.ENTRY
    for candidate_level, minimum in EXPERIENCE_YEARS.items():
        if years >= minimum:
            level = candidate_level
    return level


def candidate_experience_level(candidate: CandidateProfile) -> ExperienceLevel:
    """Explicit level wins, then bucketed years; no signal counts as entry"""
    if candidate.experience_level is not None:
        return candidate.experience_level
    if candidate.experience_years is not None:
        return experience_level_from_years(candidate.experience_years)
    return ExperienceLevel.ENTRY


def experience_match(
    job: JobRequirement,
    candidate: CandidateProfile,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> int:
    return ordinal_gap_score(
        job.experience_level.ordinal,
        candidate_experience_level(candidate).ordinal,
        config.experience_penalty_per_level
    )


# ============================================================================
# Education Match
# ============================================================================

# Highest level first; the first pattern that matches a descriptor wins
EDUCATION_PATTERNS: List[Tuple[EducationLevel, re.Pattern]] = [
    (EducationLevel.DOCTORATE, re.compile(
        r"\b(?:ph\.?\s?d|doctorate|doctoral|d\.phil)\b", re.IGNORECASE)),
    (EducationLevel.MASTER, re.compile(
        r"\b(?:(?<!scrum )master'?s?|mba|m\.b\.a|msc|m\.sc|mtech|m\.tech|meng|m\.eng|m\.s|m\.a|(?:ms|ma)\s+(?:in|of))\b",
        re.IGNORECASE)),
    (EducationLevel.BACHELOR, re.compile(
        r"\b(?:bachelor'?s?|bsc|b\.sc|btech|b\.tech|beng|b\.eng|b\.s|b\.a|b\.e|undergraduate degree|(?:bs|ba)\s+(?:in|of))\b",
        re.IGNORECASE)),
    (EducationLevel.ASSOCIATE, re.compile(r"\bassociate'?s?\s+(?:degree|of)\b", re.IGNORECASE)),
    (EducationLevel.DIPLOMA, re.compile(r"\b(?:diploma|high school|ged)\b", re.IGNORECASE)),
]


# Bare level names, as stored in a job's minimum-education field
EDUCATION_LEVEL_NAMES = {
    "none": EducationLevel.NONE,
    "diploma": EducationLevel.DIPLOMA,
    "associate": EducationLevel.ASSOCIATE,
    "bachelor": EducationLevel.BACHELOR,
    "master": EducationLevel.MASTER,
    "doctorate": EducationLevel.DOCTORATE,
    "phd": EducationLevel.DOCTORATE,
}


def parse_education_level(text: str) -> EducationLevel:
    """Highest degree level mentioned in a descriptor"""
    if not text:
        return EducationLevel.NONE
    name = text.strip().lower()
    if name in EDUCATION_LEVEL_NAMES:
        return EDUCATION_LEVEL_NAMES[name]
    for level, pattern in EDUCATION_PATTERNS:
        if pattern.search(text):
            return level
    return EducationLevel.NONE


def highest_education_level(descriptors: Iterable[str]) -> EducationLevel:
    best = EducationLevel.NONE
    for descriptor in descriptors or []:
        best = max(best, parse_education_level(descriptor))
    return best


def education_match(
    job: JobRequirement,
    candidate: CandidateProfile,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> int:
    """
    100 when the job states no minimum (or one we cannot read);
    otherwise the same per-level penalty policy as experience.
    """
    required = parse_education_level(job.min_education or "")
    if required == EducationLevel.NONE:
        return 100
    attained = highest_education_level(candidate.education)
    return ordinal_gap_score(int(required), int(attained), config.education_penalty_per_level)
