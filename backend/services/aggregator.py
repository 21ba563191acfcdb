"""
Score Aggregation
Combines the four dimension scores into one overall score with the fixed
weights from ScoringConfig, assigns the tier and derives the skill sets.

overall = round_half_up(0.35*semantic + 0.30*skill + 0.20*experience + 0.15*education)
tiers   = excellent >= 85, good >= 70, fair >= 50, else poor

Pure functions, no I/O.
"""
from typing import Optional

from core.config import DEFAULT_SCORING_CONFIG, ScoringConfig, ScoringWeights, TierThresholds
from models.schemas import CandidateProfile, JobRequirement, MatchResult, MatchTier, ScoreBreakdown
from services.dimension_scorers import skill_overlap


def compute_overall_score(
    breakdown: ScoreBreakdown,
    weights: ScoringWeights = DEFAULT_SCORING_CONFIG.weights
) -> int:
    return weights.weighted_score(
        breakdown.semantic_match,
        breakdown.skill_match,
        breakdown.experience_match,
        breakdown.education_match,
    )


def assign_tier(score: int, thresholds: TierThresholds = DEFAULT_SCORING_CONFIG.tiers) -> MatchTier:
    return MatchTier(thresholds.tier_for(score))


def build_match_result(
    job: JobRequirement,
    candidate: CandidateProfile,
    breakdown: ScoreBreakdown,
    semantic_degraded: bool = False,
    config: Optional[ScoringConfig] = None
) -> MatchResult:
    """
    Per-candidate result without insights or rank.
    Skill sets come straight from the normalized intersection/difference,
    independent of the weighting.
    """
    matched, missing = skill_overlap(job, candidate)
    result = MatchResult(
        candidate_id=candidate.candidate_id,
        application_id=candidate.application_id or candidate.candidate_id,
        applicant_name=candidate.name,
        breakdown=breakdown,
        matched_skills=sorted(matched),
        missing_skills=sorted(missing),
        application_status=candidate.application_status,
        semantic_degraded=semantic_degraded,
    )
    return result.with_scoring(config or DEFAULT_SCORING_CONFIG)
