"""
Ranking Insights
Short reviewer-facing observations derived from a MatchResult.

Rules run in this fixed order and the list is cut at max_insights:
1. semantic dimension unavailable
2. tier headline
3. strong skill alignment
4. missing skills
5. experience meets / falls below requirement
6. contextual fit despite skill gaps
7. education below the stated minimum
"""
from typing import List, Optional

from core.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from models.schemas import MatchResult, MatchTier

TIER_HEADLINES = {
    MatchTier.EXCELLENT: "Highly qualified candidate with strong alignment to job requirements",
    MatchTier.GOOD: "Well-qualified candidate with good fit for the position",
    MatchTier.FAIR: "Candidate meets some requirements but may need additional evaluation",
    MatchTier.POOR: "Candidate may not be the best fit for this position",
}

STRONG_SKILL_THRESHOLD = 80
FEW_MISSING_SKILLS = 3
LOW_EXPERIENCE_THRESHOLD = 50
STRONG_SEMANTIC_THRESHOLD = 80
WEAK_SKILL_THRESHOLD = 50
LOW_EDUCATION_THRESHOLD = 50


def generate_insights(result: MatchResult, config: Optional[ScoringConfig] = None) -> List[str]:
    config = config or DEFAULT_SCORING_CONFIG
    b = result.breakdown
    insights = []

    if result.semantic_degraded:
        insights.append("Contextual match unavailable; score based on structured profile data")

    insights.append(TIER_HEADLINES[result.tier])

    if b.skill_match >= STRONG_SKILL_THRESHOLD:
        insights.append("Strong skill alignment")

    missing = sorted(result.missing_skills)
    if 0 < len(missing) <= FEW_MISSING_SKILLS:
        noun = "skill" if len(missing) == 1 else "skills"
        insights.append(f"Missing only {len(missing)} key {noun}: {', '.join(missing)}")
    elif len(missing) > FEW_MISSING_SKILLS:
        insights.append(f"Missing {len(missing)} key skills")

    if b.experience_match >= 100:
        insights.append("Meets or exceeds experience requirements")
    elif b.experience_match < LOW_EXPERIENCE_THRESHOLD:
        insights.append("Experience level below job requirement")

    if b.semantic_match >= STRONG_SEMANTIC_THRESHOLD and b.skill_match < WEAK_SKILL_THRESHOLD:
        insights.append("Strong contextual fit despite skill-list gaps")

    if b.education_match < LOW_EDUCATION_THRESHOLD:
        insights.append("Education below the stated minimum requirement")

    return insights[:config.max_insights]
