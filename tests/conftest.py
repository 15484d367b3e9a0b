"""Shared fixtures for the recommendation engine tests."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from calc_recommender.models import (
    HistoryRecord,
    Pattern,
    PatternType,
    RecommendationServiceConfig,
)
from calc_recommender.recommendations import RecommendationService
from calc_recommender.stores import (
    InMemoryHistoryStore,
    InMemoryPreferencesStore,
    InMemoryPresetStore,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class StaticPatternRecognizer:
    """Returns a fixed pattern list and counts calls."""

    def __init__(self, patterns: Optional[List[Pattern]] = None):
        self.patterns = list(patterns or [])
        self.calls = 0

    async def analyze_user_patterns(self, user_id: str) -> List[Pattern]:
        self.calls += 1
        return list(self.patterns)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_record():
    """Factory for history records; ``minutes_ago`` is relative to NOW."""
    counter = {"n": 0}

    def _make(
        calculator_type: str = "laser-cutting-cost",
        inputs=None,
        minutes_ago: float = 0,
        execution_time: Optional[float] = 100,
        error: Optional[str] = None,
        user_id: Optional[str] = "user-1",
        outputs=None,
    ) -> HistoryRecord:
        counter["n"] += 1
        return HistoryRecord(
            id=f"rec-{counter['n']}",
            user_id=user_id,
            calculator_type=calculator_type,
            inputs=dict(inputs or {}),
            outputs=dict(outputs or {"result": 1}),
            timestamp=NOW - timedelta(minutes=minutes_ago),
            execution_time=execution_time,
            error=error,
        )

    return _make


@pytest.fixture
def make_pattern():
    def _make(pattern_type: PatternType, data: dict, confidence: float = 0.8) -> Pattern:
        return Pattern(
            id=f"{pattern_type.value}-test",
            type=pattern_type,
            confidence=confidence,
            description="test pattern",
            data=data,
            timestamp=NOW,
            user_id="user-1",
        )

    return _make


@pytest.fixture
def history_store():
    return InMemoryHistoryStore()


@pytest.fixture
def preset_store():
    return InMemoryPresetStore()


@pytest.fixture
def preferences_store():
    return InMemoryPreferencesStore()


@pytest.fixture
def pattern_recognizer():
    return StaticPatternRecognizer()


@pytest.fixture
def make_service(history_store, pattern_recognizer, preset_store, preferences_store):
    """Build a RecommendationService over the in-memory fixtures with a fixed clock."""

    def _make(config: Optional[RecommendationServiceConfig] = None, **overrides) -> RecommendationService:
        kwargs = dict(
            history_reader=history_store,
            pattern_recognizer=pattern_recognizer,
            preset_reader=preset_store,
            preferences_reader=preferences_store,
            config=config,
            clock=lambda: NOW,
        )
        kwargs.update(overrides)
        return RecommendationService(**kwargs)

    return _make
