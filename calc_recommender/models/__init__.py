"""
Models package for the recommendation engine.

This package contains the Pydantic models exchanged with callers and
collaborators, and the dataclasses describing service configuration.
"""

from .recommendation_models import (
    RecommendationType,
    RequestContext,
    RecommendationRequest,
    Recommendation,
)

from .history_models import (
    HistoryRecord,
    PatternType,
    Pattern,
    Preset,
    UserPreferences,
)

from .service_models import (
    LIBRARY_MIN_CONFIDENCE,
    ConfidenceWeights,
    RecommendationServiceConfig,
)

__all__ = [
    # Recommendation models
    "RecommendationType",
    "RequestContext",
    "RecommendationRequest",
    "Recommendation",

    # Collaborator models
    "HistoryRecord",
    "PatternType",
    "Pattern",
    "Preset",
    "UserPreferences",

    # Service models
    "LIBRARY_MIN_CONFIDENCE",
    "ConfidenceWeights",
    "RecommendationServiceConfig",
]
