"""
Service configuration models for the recommendation engine.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

# Used when neither the request nor the service config sets a threshold.
LIBRARY_MIN_CONFIDENCE = 0.1


@dataclass(frozen=True)
class ConfidenceWeights:
    """Weights of the five confidence signals. They sum to 1.0 by default."""
    sample: float = 0.30
    success: float = 0.25
    recency: float = 0.15
    consistency: float = 0.15
    relevance: float = 0.15

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ConfidenceWeights":
        """Create ConfidenceWeights from dictionary."""
        data = data or {}
        defaults = cls()
        return cls(
            sample=float(data.get("sample", defaults.sample)),
            success=float(data.get("success", defaults.success)),
            recency=float(data.get("recency", defaults.recency)),
            consistency=float(data.get("consistency", defaults.consistency)),
            relevance=float(data.get("relevance", defaults.relevance)),
        )


@dataclass
class RecommendationServiceConfig:
    """Configuration for a RecommendationService instance."""
    cache_enabled: bool = False
    cache_ttl_seconds: Optional[float] = None  # None keeps entries until clear_cache()
    max_recommendations: int = 20
    min_confidence_threshold: Optional[float] = 0.3
    history_limit: int = 1000
    preset_limit: int = 100
    min_support: int = 2
    slow_execution_ms: float = 5000
    sample_saturation: float = 3.0
    recency_half_life_days: float = 30
    max_combinations: int = 5
    combination_keys: Optional[List[str]] = None
    material_keys: List[str] = field(
        default_factory=lambda: ["material", "materialType", "material_type"]
    )
    weights: ConfidenceWeights = field(default_factory=ConfidenceWeights)

    @property
    def effective_min_confidence(self) -> float:
        """Service-level threshold, falling back to the library default."""
        if self.min_confidence_threshold is None:
            return LIBRARY_MIN_CONFIDENCE
        return self.min_confidence_threshold

    @classmethod
    def from_dict(cls, data: dict) -> "RecommendationServiceConfig":
        """Create RecommendationServiceConfig from dictionary."""
        defaults = cls()
        ttl = data.get("cache_ttl_seconds", defaults.cache_ttl_seconds)
        return cls(
            cache_enabled=bool(data.get("cache_enabled", defaults.cache_enabled)),
            cache_ttl_seconds=float(ttl) if ttl is not None else None,
            max_recommendations=int(data.get("max_recommendations", defaults.max_recommendations)),
            min_confidence_threshold=data.get("min_confidence_threshold", defaults.min_confidence_threshold),
            history_limit=int(data.get("history_limit", defaults.history_limit)),
            preset_limit=int(data.get("preset_limit", defaults.preset_limit)),
            min_support=int(data.get("min_support", defaults.min_support)),
            slow_execution_ms=float(data.get("slow_execution_ms", defaults.slow_execution_ms)),
            sample_saturation=float(data.get("sample_saturation", defaults.sample_saturation)),
            recency_half_life_days=float(data.get("recency_half_life_days", defaults.recency_half_life_days)),
            max_combinations=int(data.get("max_combinations", defaults.max_combinations)),
            combination_keys=data.get("combination_keys", defaults.combination_keys),
            material_keys=list(data.get("material_keys") or defaults.material_keys),
            weights=ConfidenceWeights.from_dict(data.get("weights")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
