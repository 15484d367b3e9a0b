"""
Recommendation orchestrator.

``RecommendationService`` fetches collaborator data, runs the generators of
the requested types, scores and filters the candidates, ranks them and keeps
the result in a request-keyed cache. Collaborators are injected, so every
instance owns its own cache and nothing is shared at module level.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from ..models import (
    Pattern,
    Preset,
    HistoryRecord,
    Recommendation,
    RecommendationRequest,
    RecommendationServiceConfig,
    RecommendationType,
    UserPreferences,
)
from ..readers import (
    HistoryQuery,
    HistoryReader,
    PatternRecognizer,
    PreferencesReader,
    PresetQuery,
    PresetReader,
)
from .cache import RecommendationCache, build_cache_key
from .generators import (
    Candidate,
    CandidateGenerator,
    GenerationInput,
    GeneratorSettings,
    build_generator_registry,
    validate_registry,
)
from .scoring import calculate_confidence, score_evidence

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous-user"


@dataclass(slots=True)
class _FetchResult:
    history: Sequence[HistoryRecord]
    patterns: Sequence[Pattern]
    presets: Sequence[Preset]
    preferences: Optional[UserPreferences]
    degraded: bool


class RecommendationService:
    """Top-level entry point of the recommendation engine."""

    def __init__(
        self,
        history_reader: HistoryReader,
        pattern_recognizer: PatternRecognizer,
        preset_reader: PresetReader,
        preferences_reader: PreferencesReader,
        config: Optional[RecommendationServiceConfig] = None,
        generators: Optional[Mapping[RecommendationType, CandidateGenerator]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.history_reader = history_reader
        self.pattern_recognizer = pattern_recognizer
        self.preset_reader = preset_reader
        self.preferences_reader = preferences_reader
        self.config = config or RecommendationServiceConfig()
        if generators is None:
            generators = build_generator_registry(GeneratorSettings.from_config(self.config))
        validate_registry(generators)
        self.generators: Dict[RecommendationType, CandidateGenerator] = dict(generators)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._cache = RecommendationCache(
            enabled=self.config.cache_enabled,
            ttl_seconds=self.config.cache_ttl_seconds,
        )

    # Public API -------------------------------------------------------------

    async def generate_recommendations(self, request: RecommendationRequest) -> List[Recommendation]:
        """Return ranked recommendations for ``request``.

        Collaborator failures are logged and treated as missing data; they
        never surface to the caller.
        """
        cache_key = build_cache_key(request)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Recommendation cache hit for %s", cache_key)
            return cached

        fetched = await self._collect(request)
        now = self._clock()
        data = GenerationInput(
            history=fetched.history,
            patterns=fetched.patterns,
            presets=fetched.presets,
            preferences=fetched.preferences,
            now=now,
        )

        requested = request.requested_types()
        if fetched.preferences is not None and not fetched.preferences.show_recommendations:
            logger.debug("Recommendations turned off by user preferences")
            requested = []

        candidates: List[Candidate] = []
        for rec_type in requested:
            candidates.extend(self.generators[rec_type].generate(request, data))

        threshold = self._effective_min_confidence(request)
        recommendations = []
        for candidate in candidates:
            recommendation = self._to_recommendation(candidate, request, now)
            if recommendation.confidence >= threshold:
                recommendations.append(recommendation)

        ranked = sorted(
            recommendations,
            key=lambda r: (r.relevance_score, r.confidence, r.timestamp),
            reverse=True,
        )
        limited = ranked[: request.limit or self.config.max_recommendations]
        logger.debug(
            "Generated %d candidates, %d above %.2f, returning %d",
            len(candidates), len(recommendations), threshold, len(limited),
        )

        if fetched.degraded:
            logger.info("Skipping cache for degraded recommendation pass")
        else:
            self._cache.set(cache_key, limited)
        return list(limited)

    async def get_recommendations_by_type(
        self, recommendation_type: RecommendationType, request: RecommendationRequest
    ) -> List[Recommendation]:
        """Recommendations of a single type."""
        rec_type = RecommendationType(recommendation_type)
        scoped = request.model_copy(update={"recommendation_type": [rec_type]})
        results = await self.generate_recommendations(scoped)
        return [r for r in results if r.type == rec_type]

    def calculate_confidence(
        self,
        sample_size: float,
        success_rate: float,
        recency: float,
        consistency: float,
        relevance: float,
    ) -> float:
        return calculate_confidence(
            sample_size,
            success_rate,
            recency,
            consistency,
            relevance,
            weights=self.config.weights,
            saturation=self.config.sample_saturation,
        )

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> Dict[str, Any]:
        return self._cache.stats()

    # Internals --------------------------------------------------------------

    def _effective_min_confidence(self, request: RecommendationRequest) -> float:
        if request.min_confidence is not None:
            return request.min_confidence
        return self.config.effective_min_confidence

    def _to_recommendation(
        self, candidate: Candidate, request: RecommendationRequest, now: datetime
    ) -> Recommendation:
        confidence = score_evidence(
            candidate.evidence,
            weights=self.config.weights,
            saturation=self.config.sample_saturation,
        )
        evidence = candidate.evidence
        explanation = (
            f"{candidate.explanation} Confidence {confidence:.0%} from "
            f"{evidence.sample_size:g} supporting observations."
        )
        return Recommendation(
            id=f"{candidate.type.value}-{uuid.uuid4().hex}",
            type=candidate.type,
            title=candidate.title,
            description=candidate.description,
            explanation=explanation,
            confidence=confidence,
            relevance_score=candidate.relevance_score,
            data=candidate.data,
            actionable=candidate.actionable,
            timestamp=now,
            user_id=request.user_id,
        )

    async def _collect(self, request: RecommendationRequest) -> _FetchResult:
        user_id = request.user_id or ANONYMOUS_USER
        history_query = HistoryQuery(
            user_id=user_id,
            calculator_type=request.calculator_type,
            limit=self.config.history_limit,
        )
        preset_query = PresetQuery(user_id=user_id, limit=self.config.preset_limit)

        (history, history_ok), (patterns, patterns_ok), (presets, presets_ok), (preferences, prefs_ok) = (
            await asyncio.gather(
                self._guarded("history", self._fetch_history(history_query), []),
                self._guarded("pattern", self._fetch_patterns(user_id), []),
                self._guarded("preset", self._fetch_presets(preset_query), []),
                self._guarded("preference", self._fetch_preferences(user_id), None),
            )
        )
        return _FetchResult(
            history=history or [],
            patterns=patterns or [],
            presets=presets or [],
            preferences=preferences,
            degraded=not (history_ok and patterns_ok and presets_ok and prefs_ok),
        )

    async def _fetch_history(self, query: HistoryQuery) -> List[HistoryRecord]:
        page = await self.history_reader.get_history(query)
        return list(page.records)

    async def _fetch_presets(self, query: PresetQuery) -> List[Preset]:
        page = await self.preset_reader.get_presets(query)
        return list(page.presets)

    async def _fetch_patterns(self, user_id: str) -> List[Pattern]:
        return list(await self.pattern_recognizer.analyze_user_patterns(user_id))

    async def _fetch_preferences(self, user_id: str) -> Optional[UserPreferences]:
        return await self.preferences_reader.get_preferences(user_id)

    @staticmethod
    async def _guarded(source: str, call: Awaitable[Any], fallback: Any) -> tuple:
        try:
            return await call, True
        except Exception as exc:
            logger.warning("Failed to collect %s data: %s", source, exc)
            return fallback, False
