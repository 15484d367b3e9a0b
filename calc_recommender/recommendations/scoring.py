"""
Confidence scoring for recommendation candidates.

Confidence is a deterministic weighted combination of five evidence signals.
It is not a trained model.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..models import ConfidenceWeights

DEFAULT_WEIGHTS = ConfidenceWeights()
DEFAULT_SAMPLE_SATURATION = 3.0


@dataclass(slots=True)
class Evidence:
    """Signals backing a single candidate."""

    sample_size: float
    success_rate: float
    recency: float
    consistency: float
    relevance: float


def _signal(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return value


def sample_term(sample_size: float, saturation: float = DEFAULT_SAMPLE_SATURATION) -> float:
    """Saturating contribution of the sample size, in [0, 1)."""
    size = max(_signal(sample_size), 0.0)
    if math.isinf(size):
        return 1.0
    k = saturation if saturation > 0 else DEFAULT_SAMPLE_SATURATION
    return size / (size + k)


def calculate_confidence(
    sample_size: float,
    success_rate: float,
    recency: float,
    consistency: float,
    relevance: float,
    weights: ConfidenceWeights = DEFAULT_WEIGHTS,
    saturation: float = DEFAULT_SAMPLE_SATURATION,
) -> float:
    """Combine the evidence signals into a confidence in [0, 1].

    ``sample_size`` enters through ``s / (s + k)`` so a single observation
    cannot produce high confidence. The other signals are conventionally in
    [0, 1]; out-of-range values are accepted and the result is clamped.
    """
    score = (
        weights.sample * sample_term(sample_size, saturation)
        + weights.success * _signal(success_rate)
        + weights.recency * _signal(recency)
        + weights.consistency * _signal(consistency)
        + weights.relevance * _signal(relevance)
    )
    if math.isnan(score):
        return 0.0
    return min(max(score, 0.0), 1.0)


def score_evidence(
    evidence: Evidence,
    weights: ConfidenceWeights = DEFAULT_WEIGHTS,
    saturation: float = DEFAULT_SAMPLE_SATURATION,
) -> float:
    return calculate_confidence(
        evidence.sample_size,
        evidence.success_rate,
        evidence.recency,
        evidence.consistency,
        evidence.relevance,
        weights=weights,
        saturation=saturation,
    )


def recency_weight(
    timestamp: Optional[datetime],
    now: datetime,
    half_life_days: float = 30,
) -> float:
    """Exponential decay of a timestamp's age, 1.0 for now and 0.5 after one half-life."""
    if timestamp is None:
        return 0.0
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    age_days = max((now - timestamp).total_seconds() / 86400.0, 0.0)
    half_life = max(half_life_days, 1e-9)
    return math.exp(-math.log(2) * age_days / half_life)
