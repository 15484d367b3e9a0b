"""
Tests for the RecommendationService orchestrator.
"""

import asyncio
import math
from unittest.mock import AsyncMock, Mock

import pytest

from calc_recommender.models import (
    PatternType,
    RecommendationRequest,
    RecommendationServiceConfig,
    RecommendationType,
    RequestContext,
    UserPreferences,
)
from calc_recommender.recommendations import ANONYMOUS_USER
from calc_recommender.recommendations.generators import (
    Candidate,
    build_generator_registry,
)
from calc_recommender.recommendations.scoring import Evidence

LASER = "laser-cutting-cost"


def _laser_request(**kwargs):
    kwargs.setdefault("user_id", "user-1")
    kwargs.setdefault("calculator_type", LASER)
    return RecommendationRequest(**kwargs)


@pytest.fixture
def laser_history(history_store, make_record):
    history_store.add_record(make_record(inputs={"thickness": 5, "material": "steel"}, minutes_ago=10))
    history_store.add_record(make_record(inputs={"thickness": 5, "material": "steel"}, minutes_ago=5))
    return history_store


@pytest.fixture
def counted_history(laser_history, monkeypatch):
    """Wrap get_history so calls can be counted."""
    wrapped = AsyncMock(wraps=laser_history.get_history)
    monkeypatch.setattr(laser_history, "get_history", wrapped)
    return wrapped


class LeakyGenerator:
    """Registered for parameter-value but also emits material-selection candidates."""

    recommendation_type = RecommendationType.PARAMETER_VALUE

    def generate(self, request, data):
        evidence = Evidence(sample_size=10, success_rate=1.0, recency=1.0, consistency=1.0, relevance=1.0)
        return [
            Candidate(type=RecommendationType.PARAMETER_VALUE, title="PV", description="pv",
                      explanation="pv.", data={}, evidence=evidence, relevance_score=1.0),
            Candidate(type=RecommendationType.MATERIAL_SELECTION, title="MS", description="ms",
                      explanation="ms.", data={}, evidence=evidence, relevance_score=2.0),
        ]


class TestGenerateRecommendations:
    """End-to-end orchestration over in-memory collaborators."""

    @pytest.mark.asyncio
    async def test_empty_history_returns_empty_list(self, make_service):
        service = make_service()
        assert await service.generate_recommendations(_laser_request()) == []

    @pytest.mark.asyncio
    async def test_laser_cutting_scenario(self, make_service, laser_history, now):
        service = make_service()
        results = await service.generate_recommendations(_laser_request())

        combos = [r for r in results if r.type == RecommendationType.PARAMETER_COMBINATION]
        assert len(combos) == 1
        assert combos[0].data["parameters"] == {"thickness": 5, "material": "steel"}
        assert combos[0].data["success_rate"] == 1.0
        assert combos[0].data["frequency"] == 2

        values = {r.data["parameter"]: r.data["suggested_value"]
                  for r in results if r.type == RecommendationType.PARAMETER_VALUE}
        assert values == {"thickness": 5, "material": "steel"}

        materials = [r for r in results if r.type == RecommendationType.MATERIAL_SELECTION]
        assert [m.data["material"] for m in materials] == ["steel"]

    @pytest.mark.asyncio
    async def test_required_shape(self, make_service, laser_history, now):
        service = make_service()
        results = await service.generate_recommendations(_laser_request())

        assert results
        assert len({r.id for r in results}) == len(results)
        for r in results:
            assert r.id and r.title and r.description
            assert 0.0 <= r.confidence <= 1.0
            assert "Confidence" in r.explanation
            assert r.timestamp == now
            assert r.user_id == "user-1"

    @pytest.mark.asyncio
    async def test_results_are_ranked(self, make_service, laser_history):
        results = await make_service().generate_recommendations(_laser_request())
        keys = [(r.relevance_score, r.confidence) for r in results]
        assert keys == sorted(keys, reverse=True)

    @pytest.mark.asyncio
    async def test_type_filtering(self, make_service, laser_history):
        service = make_service()
        results = await service.generate_recommendations(
            _laser_request(recommendation_type=[RecommendationType.MATERIAL_SELECTION])
        )
        assert results
        assert {r.type for r in results} == {RecommendationType.MATERIAL_SELECTION}

    @pytest.mark.asyncio
    async def test_empty_type_list_runs_no_generator(self, make_service, laser_history):
        results = await make_service().generate_recommendations(_laser_request(recommendation_type=[]))
        assert results == []

    @pytest.mark.asyncio
    async def test_higher_threshold_returns_fewer(self, make_service, laser_history):
        service = make_service()
        default = await service.generate_recommendations(_laser_request())
        strict = await service.generate_recommendations(_laser_request(min_confidence=0.9))
        assert len(strict) < len(default)
        assert all(r.confidence >= 0.9 for r in strict)

    @pytest.mark.asyncio
    async def test_zero_threshold_is_honored(self, make_service, history_store, make_record):
        year = 365 * 24 * 60
        for value in (5, 5, 6, 7):
            history_store.add_record(make_record(inputs={"thickness": value}, minutes_ago=year, error="x"))
        request = RecommendationRequest(user_id="user-1")
        service = make_service()

        assert await service.generate_recommendations(request) == []
        relaxed = await service.generate_recommendations(request.model_copy(update={"min_confidence": 0}))
        assert len(relaxed) == 1
        assert relaxed[0].confidence < 0.3

    @pytest.mark.asyncio
    async def test_library_default_threshold(self, make_service, laser_history):
        config = RecommendationServiceConfig(min_confidence_threshold=None)
        assert config.effective_min_confidence == 0.1
        results = await make_service(config=config).generate_recommendations(_laser_request())
        assert results

    @pytest.mark.asyncio
    async def test_limit(self, make_service, laser_history):
        results = await make_service().generate_recommendations(_laser_request(limit=2))
        assert len(results) == 2

        capped = make_service(config=RecommendationServiceConfig(max_recommendations=1))
        assert len(await capped.generate_recommendations(_laser_request())) == 1

    @pytest.mark.asyncio
    async def test_anonymous_user_sees_unowned_history(self, make_service, history_store, make_record):
        history_store.add_record(make_record(inputs={"thickness": 3}, user_id=None))
        history_store.add_record(make_record(inputs={"thickness": 3}, user_id=None))
        history_store.get_history = AsyncMock(wraps=history_store.get_history)

        results = await make_service().generate_recommendations(RecommendationRequest(calculator_type=LASER))

        assert results
        assert all(r.user_id is None for r in results)
        query = history_store.get_history.await_args.args[0]
        assert query.user_id == ANONYMOUS_USER

    @pytest.mark.asyncio
    async def test_preferences_can_turn_recommendations_off(self, make_service, laser_history, preferences_store):
        preferences_store.set_preferences("user-1", UserPreferences(show_recommendations=False))

        assert await make_service().generate_recommendations(_laser_request()) == []

    @pytest.mark.asyncio
    async def test_malformed_patterns_do_not_break_the_pass(
        self, make_service, laser_history, pattern_recognizer, make_pattern
    ):
        pattern_recognizer.patterns = [
            make_pattern(PatternType.PARAMETER_CORRELATION, {
                "parameter_a": "thickness", "parameter_b": "power", "correlation": None,
            }),
            make_pattern(PatternType.PARAMETER_CORRELATION, {
                "parameter_a": "thickness", "parameter_b": "power", "correlation": float("nan"),
            }),
            make_pattern(PatternType.BEHAVIOR_SEQUENCE, {
                "sequence": [LASER, "gas-consumption"], "frequency": "3",
            }),
            make_pattern(PatternType.ANOMALY_DETECTION, {
                "kind": "unusual-parameter", "parameter": "thickness", "value": 5, "mean": None,
            }),
            make_pattern(PatternType.TIME_ACTIVITY, {"time_slot": "12:00-13:00", "activity_level": None},
                         confidence=float("nan")),
        ]
        request = _laser_request(
            current_parameters={"thickness": 5},
            context=RequestContext(time_of_day="noon"),
            min_confidence=0,
        )

        results = await make_service().generate_recommendations(request)

        assert results
        assert all(math.isfinite(r.relevance_score) for r in results)
        assert all(math.isfinite(r.confidence) for r in results)
        assert not any(r.type == RecommendationType.CALCULATOR_WORKFLOW for r in results)
        assert not any(r.type == RecommendationType.OPTIMIZATION_SUGGESTION for r in results)


class TestGracefulDegradation:
    """Collaborator failures never reach the caller."""

    @pytest.mark.asyncio
    async def test_history_failure_returns_empty(self, make_service):
        failing = Mock()
        failing.get_history = AsyncMock(side_effect=RuntimeError("database unavailable"))
        service = make_service(history_reader=failing)

        assert await service.generate_recommendations(_laser_request()) == []

    @pytest.mark.asyncio
    async def test_synchronous_raise_is_contained(self, make_service, laser_history):
        recognizer = Mock()
        recognizer.analyze_user_patterns = Mock(side_effect=ValueError("bad pattern state"))
        service = make_service(pattern_recognizer=recognizer)

        results = await service.generate_recommendations(_laser_request())
        assert results

    @pytest.mark.asyncio
    async def test_degraded_results_are_not_cached(self, make_service, counted_history):
        recognizer = Mock()
        recognizer.analyze_user_patterns = AsyncMock(side_effect=TimeoutError())
        service = make_service(
            config=RecommendationServiceConfig(cache_enabled=True),
            pattern_recognizer=recognizer,
        )

        await service.generate_recommendations(_laser_request())
        await service.generate_recommendations(_laser_request())

        assert counted_history.await_count == 2
        assert service.get_cache_stats()["size"] == 0


class TestCaching:
    """Cache behaviour as seen through the service."""

    @pytest.mark.asyncio
    async def test_cache_hit_skips_collaborators(self, make_service, counted_history, pattern_recognizer):
        service = make_service(config=RecommendationServiceConfig(cache_enabled=True))

        first = await service.generate_recommendations(_laser_request())
        second = await service.generate_recommendations(_laser_request())

        assert counted_history.await_count == 1
        assert pattern_recognizer.calls == 1
        assert [r.id for r in first] == [r.id for r in second]
        assert service.get_cache_stats()["size"] == 1

    @pytest.mark.asyncio
    async def test_cache_disabled_by_default(self, make_service, counted_history):
        service = make_service()
        await service.generate_recommendations(_laser_request())
        await service.generate_recommendations(_laser_request())
        assert counted_history.await_count == 2

    @pytest.mark.asyncio
    async def test_distinct_type_sets_do_not_collide(self, make_service, counted_history):
        service = make_service(config=RecommendationServiceConfig(cache_enabled=True))
        materials = await service.generate_recommendations(
            _laser_request(recommendation_type=[RecommendationType.MATERIAL_SELECTION])
        )
        values = await service.generate_recommendations(
            _laser_request(recommendation_type=[RecommendationType.PARAMETER_VALUE])
        )
        assert {r.type for r in materials} == {RecommendationType.MATERIAL_SELECTION}
        assert {r.type for r in values} == {RecommendationType.PARAMETER_VALUE}
        assert counted_history.await_count == 2

    @pytest.mark.asyncio
    async def test_clear_cache(self, make_service, counted_history):
        service = make_service(config=RecommendationServiceConfig(cache_enabled=True))
        await service.generate_recommendations(_laser_request())
        service.clear_cache()
        assert service.get_cache_stats() == {"size": 0, "keys": []}

        await service.generate_recommendations(_laser_request())
        assert counted_history.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_identical_misses_are_not_coalesced(self, make_service, counted_history):
        service = make_service(config=RecommendationServiceConfig(cache_enabled=True))

        first, second = await asyncio.gather(
            service.generate_recommendations(_laser_request()),
            service.generate_recommendations(_laser_request()),
        )

        assert counted_history.await_count == 2
        assert len(first) == len(second)
        assert service.get_cache_stats()["size"] == 1


class TestRecommendationsByType:
    """Single-type convenience wrapper."""

    @pytest.mark.asyncio
    async def test_filters_leaked_types(self, make_service, laser_history):
        registry = build_generator_registry()
        registry[RecommendationType.PARAMETER_VALUE] = LeakyGenerator()
        service = make_service(generators=registry)

        results = await service.get_recommendations_by_type(
            RecommendationType.PARAMETER_VALUE, _laser_request()
        )

        assert [r.title for r in results] == ["PV"]

    @pytest.mark.asyncio
    async def test_accepts_type_value_string(self, make_service, laser_history):
        results = await make_service().get_recommendations_by_type("material-selection", _laser_request())
        assert [r.type for r in results] == [RecommendationType.MATERIAL_SELECTION]


class TestServiceConfidence:
    """Confidence exposed on the service uses its configured weights."""

    def test_calculate_confidence_is_bounded(self, make_service):
        service = make_service()
        assert service.calculate_confidence(0, 0, 0, 0, 0) == 0.0
        assert 0.0 <= service.calculate_confidence(50, 1, 1, 1, 1) <= 1.0

    def test_invalid_registry_is_rejected(self, make_service):
        registry = build_generator_registry()
        del registry[RecommendationType.CALCULATOR_WORKFLOW]
        with pytest.raises(ValueError):
            make_service(generators=registry)
