"""
Pydantic Models for the Candidate Match-Scoring Service
Python attributes are snake_case; wire aliases keep the camelCase names
the ranking UI already consumes (overallScore, breakdown.skillMatch, ...).
"""
from pydantic import BaseModel, Field, PrivateAttr, computed_field, field_validator, model_validator
from typing import List, Optional, Dict, Any
from enum import Enum, IntEnum

from core.config import ScoringConfig, DEFAULT_SCORING_CONFIG


# ============================================================================
# Enums for Type Safety
# ============================================================================

class ExperienceLevel(str, Enum):
    """Seniority ladder, lowest first"""
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    EXECUTIVE = "executive"

    @property
    def ordinal(self) -> int:
        return list(ExperienceLevel).index(self)


class EducationLevel(IntEnum):
    """Highest attained degree, ordered"""
    NONE = 0
    DIPLOMA = 1
    ASSOCIATE = 2
    BACHELOR = 3
    MASTER = 4
    DOCTORATE = 5


class MatchTier(str, Enum):
    """Match score tiers"""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


def _lower_enum_value(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip().lower()
    return v


# ============================================================================
# Inputs
# ============================================================================

class JobRequirement(BaseModel):
    """Structured requirements of one job posting. Immutable per ranking run."""
    job_id: str = Field(..., alias="jobId", min_length=1)
    title: Optional[str] = Field(default=None, max_length=200)
    required_skills: List[str] = Field(..., alias="skills")
    experience_level: ExperienceLevel = Field(default=ExperienceLevel.ENTRY, alias="experienceLevel")
    category: str = Field(default="other")
    description: str = Field(..., min_length=1)
    min_education: Optional[str] = Field(default=None, alias="minEducation")

    @field_validator('job_id', 'description')
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v

    @field_validator('required_skills')
    @classmethod
    def drop_blank_skills(cls, v: List[str]) -> List[str]:
        return [s.strip() for s in v if s and s.strip()]

    @field_validator('experience_level', mode='before')
    @classmethod
    def lower_experience_level(cls, v: Any) -> Any:
        return _lower_enum_value(v)

    class Config:
        populate_by_name = True
        frozen = True
        coerce_numbers_to_str = True


class CandidateProfile(BaseModel):
    """Applicant record with its parsed resume profile. Read-only to the core."""
    candidate_id: str = Field(..., alias="candidateId", min_length=1)
    application_id: Optional[str] = Field(default=None, alias="applicationId")
    name: Optional[str] = Field(default=None, max_length=200)
    skills: List[str] = Field(default_factory=list)
    experience_years: Optional[float] = Field(default=None, alias="experienceYears", ge=0, le=70)
    experience_level: Optional[ExperienceLevel] = Field(default=None, alias="experienceLevel")
    education: List[str] = Field(default_factory=list)
    resume_text: str = Field(default="", alias="resumeText")
    application_status: str = Field(default="pending", alias="applicationStatus")

    @field_validator('candidate_id')
    @classmethod
    def strip_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v

    @field_validator('skills', mode='before')
    @classmethod
    def coerce_skills(cls, v: Any) -> Any:
        if v is None:
            return []
        return v

    @field_validator('skills')
    @classmethod
    def drop_blank_skills(cls, v: List[str]) -> List[str]:
        return [s.strip() for s in v if s and s.strip()]

    @field_validator('education', mode='before')
    @classmethod
    def coerce_education(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        return v

    @field_validator('resume_text', mode='before')
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return v or ""

    @field_validator('experience_level', mode='before')
    @classmethod
    def lower_experience_level(cls, v: Any) -> Any:
        return _lower_enum_value(v) or None

    @field_validator('application_status', mode='before')
    @classmethod
    def lower_status(cls, v: Any) -> Any:
        return _lower_enum_value(v) or "pending"

    @model_validator(mode='before')
    @classmethod
    def default_application_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not (data.get('applicationId') or data.get('application_id')):
            candidate_id = data.get('candidateId', data.get('candidate_id'))
            # Numeric ids are coerced to str like the id field itself
            if isinstance(candidate_id, (str, int, float)) and not isinstance(candidate_id, bool):
                data = {**data, 'applicationId': str(candidate_id).strip()}
        return data

    @property
    def has_experience_signal(self) -> bool:
        return self.experience_years is not None or self.experience_level is not None

    @property
    def is_unusable(self) -> bool:
        """No skills, no text and no experience signal: nothing to score."""
        return not self.skills and not self.resume_text.strip() and not self.has_experience_signal

    @property
    def is_unparsed(self) -> bool:
        """Raw application: resume text only, no structured fields."""
        return (
            bool(self.resume_text.strip())
            and not self.skills
            and not self.education
            and not self.has_experience_signal
        )

    class Config:
        populate_by_name = True
        frozen = True
        coerce_numbers_to_str = True


# ============================================================================
# Outputs
# ============================================================================

class ScoreBreakdown(BaseModel):
    """Per-dimension scores, each an integer percentage"""
    semantic_match: int = Field(..., alias="semanticMatch", ge=0, le=100)
    skill_match: int = Field(..., alias="skillMatch", ge=0, le=100)
    experience_match: int = Field(..., alias="experienceMatch", ge=0, le=100)
    education_match: int = Field(..., alias="educationMatch", ge=0, le=100)

    class Config:
        populate_by_name = True
        frozen = True


class MatchResult(BaseModel):
    """
    One candidate scored against one job.
    overall_score and tier are derived from the breakdown and cannot be set.
    rank stays 0 until the ranker sorts the full candidate set.
    """
    candidate_id: str = Field(..., alias="candidateId")
    application_id: str = Field(..., alias="applicationId")
    applicant_name: Optional[str] = Field(default=None, alias="applicantName")
    breakdown: ScoreBreakdown
    matched_skills: List[str] = Field(default_factory=list, alias="matchedSkills")
    missing_skills: List[str] = Field(default_factory=list, alias="missingSkills")
    insights: List[str] = Field(default_factory=list)
    rank: int = Field(default=0, ge=0)
    application_status: str = Field(default="pending", alias="applicationStatus")
    semantic_degraded: bool = Field(default=False, alias="semanticDegraded")

    _scoring: ScoringConfig = PrivateAttr(default=DEFAULT_SCORING_CONFIG)

    @computed_field(alias="overallScore")
    @property
    def overall_score(self) -> int:
        b = self.breakdown
        return self._scoring.weights.weighted_score(
            b.semantic_match, b.skill_match, b.experience_match, b.education_match
        )

    @computed_field
    @property
    def tier(self) -> MatchTier:
        return MatchTier(self._scoring.tiers.tier_for(self.overall_score))

    @computed_field(alias="isShortlisted")
    @property
    def is_shortlisted(self) -> bool:
        return self.application_status == "shortlisted"

    def with_scoring(self, scoring: ScoringConfig) -> "MatchResult":
        self._scoring = scoring
        return self

    class Config:
        populate_by_name = True


class SkippedCandidate(BaseModel):
    """A candidate excluded from ranking. A record, not an error."""
    candidate_id: str = Field(..., alias="candidateId")
    reason: str

    class Config:
        populate_by_name = True


class RankingSummary(BaseModel):
    """Tally returned alongside the ranked list"""
    total: int = Field(default=0, description="Candidates ranked")
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0
    skipped: int = Field(default=0, description="Candidates that could not be scored")
    semantic_timeouts: int = Field(default=0, alias="semanticTimeouts")
    ranking_limited: bool = Field(default=False, alias="rankingLimited")

    class Config:
        populate_by_name = True


class RankingResult(BaseModel):
    """Full output of one ranking run"""
    results: List[MatchResult] = Field(default_factory=list)
    summary: RankingSummary = Field(default_factory=RankingSummary)
    skipped: List[SkippedCandidate] = Field(default_factory=list)


class ResumeAnalysis(BaseModel):
    """Structured fields recovered from raw resume text"""
    skills: List[str] = Field(default_factory=list)
    experience_years: Optional[int] = Field(default=None, alias="experienceYears")
    education: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


# ============================================================================
# Request Models
# ============================================================================

class RankAllRequest(BaseModel):
    """Rank every application of one job. Records are validated by the ranker."""
    job: Dict[str, Any]
    candidates: List[Dict[str, Any]] = Field(default_factory=list)


class RankApplicationRequest(BaseModel):
    """Rank a single application"""
    job: Dict[str, Any]
    candidate: Dict[str, Any]


class AnalyzeCVRequest(BaseModel):
    """Recover profile fields from resume text"""
    resume_text: str = Field(..., alias="resumeText", min_length=1, max_length=200000)

    class Config:
        populate_by_name = True

