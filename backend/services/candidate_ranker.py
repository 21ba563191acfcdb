"""
Candidate Ranking Engine
========================
Scores every applicant of one job, sorts them and assigns ranks.

Per-candidate scoring is independent, so candidates are scored concurrently
under a semaphore sized by settings.ranking_concurrency. The only suspension
point is the semantic similarity lookup, which carries its own timeout.
Results are sorted only after every candidate has finished:

    overall score desc -> skill match desc -> candidate id asc

Only a malformed job aborts a run. Candidates that cannot be scored are
skipped and counted in the summary.
"""

import asyncio
import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from core.config import DEFAULT_SCORING_CONFIG, ScoringConfig, get_settings
from core.exceptions import ValidationError
from core.logging import PerformanceLogger
from models.schemas import (
    CandidateProfile,
    JobRequirement,
    MatchResult,
    MatchTier,
    RankingResult,
    RankingSummary,
    ScoreBreakdown,
    SkippedCandidate,
)
from services.aggregator import build_match_result
from services.dimension_scorers import SemanticScorer, education_match, experience_match, skill_match
from services.insight_generator import generate_insights
from services.resume_analyzer import fill_profile

logger = logging.getLogger(__name__)

JobInput = Union[JobRequirement, Mapping[str, Any]]
CandidateInput = Union[CandidateProfile, Mapping[str, Any]]

SKIP_INVALID = "invalid profile"
SKIP_NO_DATA = "no usable profile data"

SORT_OPTIONS = ("rank", "score", "skills", "experience")


def _describe_errors(exc: PydanticValidationError) -> Tuple[str, List[dict]]:
    errors = [
        {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
        for err in exc.errors(include_url=False, include_context=False)
    ]
    return (errors[0]["loc"] if errors else ""), errors


def validate_job(job: Optional[JobInput]) -> JobRequirement:
    """Validated JobRequirement, or ValidationError for a malformed job"""
    if job is None:
        raise ValidationError("Job requirement is missing", field="job")
    if isinstance(job, JobRequirement):
        return job
    if not isinstance(job, Mapping):
        raise ValidationError("Job requirement must be an object", field="job")

    try:
        return JobRequirement.model_validate(dict(job))
    except PydanticValidationError as e:
        field, errors = _describe_errors(e)
        raise ValidationError(
            f"Invalid job requirement: {field} - {errors[0]['msg'] if errors else 'invalid'}",
            field=field,
            details={"errors": errors}
        ) from e


def _candidate_label(raw: Any, index: int) -> str:
    if isinstance(raw, Mapping):
        label = raw.get("candidateId") or raw.get("candidate_id")
        if label:
            return str(label)
    return f"#{index}"


def rank_results(results: Iterable[MatchResult]) -> List[MatchResult]:
    """Deterministic order and ranks 1..N"""
    ordered = sorted(
        results,
        key=lambda r: (-r.overall_score, -r.breakdown.skill_match, r.candidate_id, r.application_id)
    )
    for position, result in enumerate(ordered, start=1):
        result.rank = position
    return ordered


def summarize(results: List[MatchResult], skipped: List[SkippedCandidate]) -> RankingSummary:
    summary = RankingSummary(total=len(results), skipped=len(skipped))
    for result in results:
        tier = result.tier
        setattr(summary, tier.value, getattr(summary, tier.value) + 1)
        if result.semantic_degraded:
            summary.semantic_timeouts += 1
    # At least half the pool lost its semantic dimension
    summary.ranking_limited = summary.semantic_timeouts > 0 and summary.semantic_timeouts * 2 >= summary.total
    return summary


class CandidateRanker:
    """
    Ranks applicants for one job at a time.
    Holds no per-job state, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        semantic_scorer: Optional[SemanticScorer] = None,
        config: Optional[ScoringConfig] = None,
        concurrency: Optional[int] = None,
        infer_profile_from_text: Optional[bool] = None
    ):
        settings = get_settings()
        self.semantic_scorer = semantic_scorer or SemanticScorer()
        self.config = config or DEFAULT_SCORING_CONFIG
        self.concurrency = concurrency or settings.ranking_concurrency
        self.infer_profile_from_text = (
            settings.infer_profile_from_text if infer_profile_from_text is None else infer_profile_from_text
        )

    def _prepare_candidate(self, raw: CandidateInput, index: int) -> Tuple[Optional[CandidateProfile], Optional[SkippedCandidate]]:
        if isinstance(raw, CandidateProfile):
            profile = raw
        elif isinstance(raw, Mapping):
            try:
                profile = CandidateProfile.model_validate(dict(raw))
            except PydanticValidationError as e:
                _, errors = _describe_errors(e)
                label = _candidate_label(raw, index)
                logger.warning(f"Skipping candidate {label}: {SKIP_INVALID} ({errors[0]['loc'] if errors else ''})")
                return None, SkippedCandidate(candidate_id=label, reason=SKIP_INVALID)
        else:
            label = _candidate_label(raw, index)
            logger.warning(f"Skipping candidate {label}: {SKIP_INVALID} ({type(raw).__name__})")
            return None, SkippedCandidate(candidate_id=label, reason=SKIP_INVALID)

        if self.infer_profile_from_text and profile.is_unparsed:
            profile = fill_profile(profile)

        if profile.is_unusable:
            logger.warning(f"Skipping candidate {profile.candidate_id}: {SKIP_NO_DATA}")
            return None, SkippedCandidate(candidate_id=profile.candidate_id, reason=SKIP_NO_DATA)

        return profile, None

    async def score_candidate(self, job: JobRequirement, candidate: CandidateProfile) -> MatchResult:
        """Full per-candidate pipeline: dimensions -> aggregate -> insights"""
        semantic, degraded = await self.semantic_scorer.score_with_status(job, candidate)
        breakdown = ScoreBreakdown(
            semantic_match=semantic,
            skill_match=skill_match(job, candidate),
            experience_match=experience_match(job, candidate, self.config),
            education_match=education_match(job, candidate, self.config),
        )
        result = build_match_result(job, candidate, breakdown, semantic_degraded=degraded, config=self.config)
        result.insights = generate_insights(result, self.config)
        return result

    async def rank_all(self, job: JobInput, candidates: Optional[Iterable[CandidateInput]]) -> RankingResult:
        """
        Rank every candidate for a job.
        Raises ValidationError only when the job itself is malformed.
        """
        job = validate_job(job)

        profiles: List[CandidateProfile] = []
        skipped: List[SkippedCandidate] = []
        for index, raw in enumerate(candidates or []):
            profile, skip = self._prepare_candidate(raw, index)
            if profile is not None:
                profiles.append(profile)
            else:
                skipped.append(skip)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _bounded(profile: CandidateProfile) -> MatchResult:
            async with semaphore:
                return await self.score_candidate(job, profile)

        with PerformanceLogger(logger, f"rank_all job={job.job_id}"):
            scored = await asyncio.gather(*(_bounded(p) for p in profiles))

        results = rank_results(scored)
        summary = summarize(results, skipped)

        logger.info(
            f"🏆 Ranked {summary.total} candidates for job {job.job_id} "
            f"(excellent={summary.excellent}, good={summary.good}, fair={summary.fair}, "
            f"poor={summary.poor}, skipped={summary.skipped})",
            extra={"job_id": job.job_id}
        )
        if summary.ranking_limited:
            logger.warning(
                f"Ranking limited for job {job.job_id}: semantic scorer unavailable for "
                f"{summary.semantic_timeouts}/{summary.total} candidates",
                extra={"job_id": job.job_id}
            )

        return RankingResult(results=results, summary=summary, skipped=skipped)

    async def rank_one(self, job: JobInput, candidate: CandidateInput) -> MatchResult:
        """Score a single application. An unusable candidate is a validation error here."""
        job = validate_job(job)
        profile, skip = self._prepare_candidate(candidate, 0)
        if profile is None:
            raise ValidationError(
                f"Candidate could not be scored: {skip.reason}",
                field="candidate",
                details={"candidate_id": skip.candidate_id}
            )
        return await self.score_candidate(job, profile)


# ============================================================================
# UI helpers (candidate ranking page)
# ============================================================================

def filter_results(
    results: Iterable[MatchResult],
    tier: Optional[str] = None,
    include_shortlisted: bool = True
) -> List[MatchResult]:
    """Keep one tier (None or "all" keeps every tier), optionally hiding shortlisted candidates"""
    if tier and tier != "all":
        try:
            wanted = MatchTier(tier.lower())
        except ValueError:
            raise ValidationError(f"Unknown tier: {tier}", field="tier")
    else:
        wanted = None

    return [
        r for r in results
        if (wanted is None or r.tier == wanted) and (include_shortlisted or not r.is_shortlisted)
    ]


def sort_results(results: Iterable[MatchResult], sort_by: str = "rank") -> List[MatchResult]:
    """Re-order for display without touching rank"""
    if sort_by not in SORT_OPTIONS:
        raise ValidationError(f"Unknown sort option: {sort_by}", field="sortBy")

    if sort_by == "rank":
        return sorted(results, key=lambda r: r.rank)
    elif sort_by == "score":
        return sorted(results, key=lambda r: (-r.overall_score, r.rank))
    elif sort_by == "skills":
        return sorted(results, key=lambda r: (-r.breakdown.skill_match, r.rank))
    return sorted(results, key=lambda r: (-r.breakdown.experience_match, r.rank))


def select_top_candidates(results: Iterable[MatchResult], count: int) -> List[str]:
    """Application ids of the best `count` candidates not yet shortlisted"""
    if count <= 0:
        return []
    return [r.application_id for r in results if not r.is_shortlisted][:count]


# Singleton
_ranker: Optional[CandidateRanker] = None


def get_candidate_ranker() -> CandidateRanker:
    """Get singleton ranker instance"""
    global _ranker
    if _ranker is None:
        _ranker = CandidateRanker()
    return _ranker


async def rank_all(
    job: JobInput,
    candidates: Optional[Iterable[CandidateInput]],
    ranker: Optional[CandidateRanker] = None
) -> RankingResult:
    return await (ranker or get_candidate_ranker()).rank_all(job, candidates)


def rank_all_sync(
    job: JobInput,
    candidates: Optional[Iterable[CandidateInput]],
    ranker: Optional[CandidateRanker] = None
) -> RankingResult:
    """For callers without an event loop"""
    return asyncio.run(rank_all(job, candidates, ranker))
