# Core module initialization
# Configuration, error taxonomy and logging shared by the scoring services

from .config import (
    settings,
    get_settings,
    Settings,
    ScoringConfig,
    ScoringWeights,
    TierThresholds,
    DEFAULT_SCORING_CONFIG,
)
from .exceptions import (
    AppException,
    ValidationError,
    AIServiceError,
    ExternalScorerTimeout,
)
from .logging import setup_logging, PerformanceLogger

__all__ = [
    # Config
    'settings',
    'get_settings',
    'Settings',
    'ScoringConfig',
    'ScoringWeights',
    'TierThresholds',
    'DEFAULT_SCORING_CONFIG',

    # Exceptions
    'AppException',
    'ValidationError',
    'AIServiceError',
    'ExternalScorerTimeout',

    # Logging
    'setup_logging',
    'PerformanceLogger',
]
