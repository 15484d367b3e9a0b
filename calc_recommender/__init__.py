"""
Recommendation engine for an engineering-calculator catalog.

The engine mines a user's calculation history, usage patterns, presets and
preferences into ranked, explained suggestions.
"""

from .models import (
    Recommendation,
    RecommendationRequest,
    RecommendationServiceConfig,
    RecommendationType,
)
from .recommendations import RecommendationService

__all__ = [
    "Recommendation",
    "RecommendationRequest",
    "RecommendationServiceConfig",
    "RecommendationType",
    "RecommendationService",
]
