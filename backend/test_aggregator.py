"""Aggregation and tier assignment tests"""
import pytest

from core.config import ScoringConfig, ScoringWeights
from models.schemas import MatchResult, MatchTier, ScoreBreakdown
from services.aggregator import assign_tier, build_match_result, compute_overall_score


def _breakdown(semantic, skill, experience, education):
    return ScoreBreakdown(
        semantic_match=semantic,
        skill_match=skill,
        experience_match=experience,
        education_match=education,
    )


class TestOverallScore:
    def test_weighted_sum(self):
        # 0.35*90 + 0.30*67 + 0.20*100 + 0.15*100 = 86.6
        assert compute_overall_score(_breakdown(90, 67, 100, 100)) == 87

    @pytest.mark.parametrize("semantic, skill, expected", [
        (10, 0, 4),   # 3.5
        (0, 5, 2),    # 1.5
        (30, 0, 11),  # 10.5
    ])
    def test_rounds_half_up(self, semantic, skill, expected):
        assert compute_overall_score(_breakdown(semantic, skill, 0, 0)) == expected

    def test_uniform_breakdown_is_identity(self):
        for value in (0, 49, 50, 69, 70, 84, 85, 100):
            assert compute_overall_score(_breakdown(value, value, value, value)) == value

    @pytest.mark.parametrize("breakdown, expected", [
        ((80, 60, 70, 40), 66),     # 28 + 18 + 14 + 6
        ((73, 41, 100, 10), 59),    # 59.35
        ((55, 95, 40, 100), 71),    # 70.75
        ((1, 2, 3, 4), 2),          # 2.15
        ((100, 0, 0, 100), 50),     # 50.0
    ])
    def test_non_uniform_breakdowns(self, breakdown, expected):
        b = _breakdown(*breakdown)
        assert compute_overall_score(b) == expected
        result = MatchResult(candidate_id="c1", application_id="c1", breakdown=b)
        assert result.overall_score == expected
        assert result.tier == assign_tier(expected)

    def test_custom_weights(self):
        weights = ScoringWeights(semantic=0.25, skill=0.25, experience=0.25, education=0.25)
        assert compute_overall_score(_breakdown(100, 0, 100, 0), weights) == 50


class TestTiers:
    @pytest.mark.parametrize("score, tier", [
        (100, MatchTier.EXCELLENT),
        (85, MatchTier.EXCELLENT),
        (84, MatchTier.GOOD),
        (70, MatchTier.GOOD),
        (69, MatchTier.FAIR),
        (50, MatchTier.FAIR),
        (49, MatchTier.POOR),
        (0, MatchTier.POOR),
    ])
    def test_boundaries(self, score, tier):
        assert assign_tier(score) == tier

    def test_tier_follows_overall_score(self):
        result = MatchResult(
            candidate_id="c1",
            application_id="a1",
            breakdown=_breakdown(85, 85, 85, 85),
        )
        assert result.overall_score == 85
        assert result.tier == MatchTier.EXCELLENT


class TestBuildMatchResult:
    def test_skill_sets_and_defaults(self, job, make_candidate):
        candidate = make_candidate("c7", name="Ada", skills=["react", "node"], applicationStatus="Shortlisted")
        result = build_match_result(job, candidate, _breakdown(50, 67, 100, 100))

        assert result.matched_skills == ["node.js", "react"]
        assert result.missing_skills == ["sql"]
        assert result.application_id == "c7"
        assert result.rank == 0
        assert result.insights == []
        assert result.is_shortlisted is True

    def test_serializes_with_wire_names(self, job, make_candidate):
        candidate = make_candidate("c1", skills=["react"])
        data = build_match_result(job, candidate, _breakdown(90, 67, 100, 100)).model_dump(by_alias=True, mode="json")

        assert data["candidateId"] == "c1"
        assert data["overallScore"] == 87
        assert data["tier"] == "excellent"
        assert data["breakdown"]["skillMatch"] == 67
        assert data["isShortlisted"] is False

    def test_scoring_config_carried(self, job, make_candidate):
        config = ScoringConfig(weights=ScoringWeights(semantic=1.0, skill=0.0, experience=0.0, education=0.0))
        result = build_match_result(job, make_candidate(skills=["react"]), _breakdown(40, 100, 100, 100), config=config)
        assert result.overall_score == 40
        assert result.tier == MatchTier.POOR
