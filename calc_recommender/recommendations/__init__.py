"""
Recommendation generation: candidate generators, confidence scoring, the
result cache and the orchestrating service.
"""

from .cache import RecommendationCache, build_cache_key
from .engine import ANONYMOUS_USER, RecommendationService
from .generators import (
    Candidate,
    CandidateGenerator,
    CalculatorWorkflowGenerator,
    ContextualRecommendationGenerator,
    GenerationInput,
    GeneratorSettings,
    MaterialSelectionGenerator,
    OptimizationSuggestionGenerator,
    ParameterCombinationGenerator,
    ParameterValueGenerator,
    build_generator_registry,
)
from .scoring import Evidence, calculate_confidence, recency_weight, score_evidence

__all__ = [
    # Service
    "ANONYMOUS_USER",
    "RecommendationService",

    # Cache
    "RecommendationCache",
    "build_cache_key",

    # Generators
    "Candidate",
    "CandidateGenerator",
    "CalculatorWorkflowGenerator",
    "ContextualRecommendationGenerator",
    "GenerationInput",
    "GeneratorSettings",
    "MaterialSelectionGenerator",
    "OptimizationSuggestionGenerator",
    "ParameterCombinationGenerator",
    "ParameterValueGenerator",
    "build_generator_registry",

    # Scoring
    "Evidence",
    "calculate_confidence",
    "recency_weight",
    "score_evidence",
]
