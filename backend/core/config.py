"""
Application Configuration with Type Safety and Validation
Following 12-factor app principles

Two layers live here:
- Settings: environment-driven runtime options (pydantic-settings)
- ScoringConfig: the fixed scoring constants (weights, tier thresholds,
  penalties). These are the single source of truth for reproducible scores.
"""
from dataclasses import dataclass, field, asdict
from decimal import Decimal, ROUND_HALF_UP
from functools import lru_cache
from typing import Any, Dict, List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


SEMANTIC_BACKENDS = ("token", "tfidf", "embedding")


class Settings(BaseSettings):
    """
    Application settings with environment variable support.
    All settings are validated and typed.
    """

    # Application
    app_name: str = "Candidate Match Scoring Service"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Enable debug mode")
    environment: str = Field(default="development", description="Environment name")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON logs (production)")
    log_file: Optional[str] = Field(default=None, description="Optional JSON log file")

    # Semantic similarity
    semantic_backend: str = Field(default="token", description="token | tfidf | embedding")
    embedding_model: str = Field(default="all-MiniLM-L6-v2", description="sentence-transformers model")
    semantic_timeout_seconds: float = Field(default=5.0, gt=0, description="Similarity lookup timeout")
    semantic_text_limit: int = Field(default=5000, ge=100, description="Max characters sent to the similarity provider")

    # Ranking
    ranking_concurrency: int = Field(default=8, ge=1, description="Max candidates scored concurrently")
    infer_profile_from_text: bool = Field(default=True, description="Fill unparsed profiles from resume text")

    # CORS - Use str type to avoid pydantic-settings JSON parsing
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    @field_validator('semantic_backend')
    @classmethod
    def validate_semantic_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in SEMANTIC_BACKENDS:
            raise ValueError(f"semantic_backend must be one of {', '.join(SEMANTIC_BACKENDS)}")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list"""
        return [origin.strip() for origin in self.cors_origins.split(',') if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.
    Uses lru_cache to ensure singleton pattern.
    """
    return Settings()


# Convenience alias
settings = get_settings()


# ============================================================================
# Scoring constants
# ============================================================================

@dataclass(frozen=True)
class ScoringWeights:
    """Dimension weights for the overall score. Must sum to 1."""
    semantic: float = 0.35
    skill: float = 0.30
    experience: float = 0.20
    education: float = 0.15

    def __post_init__(self):
        values = (self.semantic, self.skill, self.experience, self.education)
        if any(v < 0 for v in values):
            raise ValueError("Scoring weights must be non-negative")
        if abs(sum(values) - 1.0) > 1e-9:
            raise ValueError(f"Scoring weights must sum to 1.0, got {sum(values)}")

    def weighted_score(self, semantic: int, skill: int, experience: int, education: int) -> int:
        """
        Weighted sum rounded half-up to an integer.
        Decimal arithmetic keeps e.g. 84.5 from drifting to 84.4999.
        """
        total = (
            Decimal(str(self.semantic)) * semantic
            + Decimal(str(self.skill)) * skill
            + Decimal(str(self.experience)) * experience
            + Decimal(str(self.education)) * education
        )
        return int(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class TierThresholds:
    """Inclusive lower bounds for each tier; anything below fair is poor."""
    excellent: int = 85
    good: int = 70
    fair: int = 50

    def __post_init__(self):
        if not (100 >= self.excellent > self.good > self.fair >= 0):
            raise ValueError("Tier thresholds must satisfy 100 >= excellent > good > fair >= 0")

    def tier_for(self, score: int) -> str:
        if score >= self.excellent:
            return "excellent"
        elif score >= self.good:
            return "good"
        elif score >= self.fair:
            return "fair"
        return "poor"


@dataclass(frozen=True)
class ScoringConfig:
    """Everything that shapes a score. Tune here, never in scorer logic."""
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    tiers: TierThresholds = field(default_factory=TierThresholds)
    experience_penalty_per_level: int = 30
    education_penalty_per_level: int = 30
    max_insights: int = 5

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_SCORING_CONFIG = ScoringConfig()
