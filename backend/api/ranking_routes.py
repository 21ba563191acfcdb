"""
AI Matching Routes
Rank applications for a job, score a single application and analyze CV text.
Job and candidate records travel in the request body; nothing is persisted.
"""
from fastapi import APIRouter, Query
from typing import Any, Dict, Optional
import logging

from models.schemas import AnalyzeCVRequest, RankAllRequest, RankApplicationRequest
from services.candidate_ranker import filter_results, get_candidate_ranker, sort_results
from services.resume_analyzer import analyze_resume

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai-matching", tags=["AI Matching"])


# ============================================================================
# RANKING ENDPOINTS
# ============================================================================

@router.post("/rank-all")
async def rank_all_applications(
    request: RankAllRequest,
    tier: Optional[str] = Query(default=None, description="excellent | good | fair | poor | all"),
    sort_by: str = Query(default="rank", alias="sortBy", description="rank | score | skills | experience"),
    show_shortlisted: bool = Query(default=True, alias="showShortlisted"),
) -> Dict[str, Any]:
    """
    Rank every application of one job.
    tier/sortBy/showShortlisted only shape the returned list; ranks and
    summary always describe the full pool.
    """
    ranking = await get_candidate_ranker().rank_all(request.job, request.candidates)

    rankings = filter_results(ranking.results, tier=tier, include_shortlisted=show_shortlisted)
    rankings = sort_results(rankings, sort_by)

    return {
        "message": "Applications ranked successfully" if ranking.results else "No applications found",
        "rankings": [r.model_dump(by_alias=True, mode="json") for r in rankings],
        "summary": ranking.summary.model_dump(by_alias=True, mode="json"),
        "skipped": [s.model_dump(by_alias=True, mode="json") for s in ranking.skipped],
    }


@router.post("/rank-application")
async def rank_single_application(request: RankApplicationRequest) -> Dict[str, Any]:
    """Score one application against its job"""
    result = await get_candidate_ranker().rank_one(request.job, request.candidate)
    return {
        "message": "Application ranked successfully",
        "ranking": result.model_dump(by_alias=True, mode="json"),
    }


# ============================================================================
# ANALYSIS ENDPOINTS
# ============================================================================

@router.post("/analyze-cv")
async def analyze_cv(request: AnalyzeCVRequest) -> Dict[str, Any]:
    """Recover skills, experience, degrees and certifications from CV text"""
    analysis = analyze_resume(request.resume_text)
    logger.info(f"📄 CV analyzed: {len(analysis.skills)} skills, {len(analysis.education)} degrees")
    return {
        "message": "CV analyzed successfully",
        "analysis": analysis.model_dump(by_alias=True, mode="json"),
    }


@router.get("/scoring-config")
async def scoring_config() -> Dict[str, Any]:
    """Weights, tier thresholds and penalties currently in effect"""
    return get_candidate_ranker().config.to_dict()
