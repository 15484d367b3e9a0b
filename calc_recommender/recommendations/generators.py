"""
Candidate generators, one per recommendation type.

Generators mine already-fetched history, patterns, presets and preferences
into unscored candidates. They are synchronous, share no mutable state and
return an empty list for empty input.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from ..models import (
    HistoryRecord,
    Pattern,
    PatternType,
    Preset,
    RecommendationRequest,
    RecommendationServiceConfig,
    RecommendationType,
    UserPreferences,
)
from ..utils import as_utc, canonical_json
from .scoring import Evidence, recency_weight


# ---------------------------------------------------------------------------
# Core data structures
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class GenerationInput:
    """Collaborator data shared by every generator of one pass."""

    history: Sequence[HistoryRecord] = field(default_factory=list)
    patterns: Sequence[Pattern] = field(default_factory=list)
    presets: Sequence[Preset] = field(default_factory=list)
    preferences: Optional[UserPreferences] = None
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(slots=True)
class Candidate:
    """A recommendation before scoring and filtering."""

    type: RecommendationType
    title: str
    description: str
    explanation: str
    data: Dict[str, Any]
    evidence: Evidence
    relevance_score: float
    actionable: bool = True


@dataclass(slots=True)
class GeneratorSettings:
    min_support: int = 2
    slow_execution_ms: float = 5000
    recency_half_life_days: float = 30
    max_combinations: int = 5
    combination_keys: Optional[List[str]] = None
    material_keys: List[str] = field(
        default_factory=lambda: ["material", "materialType", "material_type"]
    )

    @classmethod
    def from_config(cls, config: RecommendationServiceConfig) -> "GeneratorSettings":
        return cls(
            min_support=max(1, config.min_support),
            slow_execution_ms=config.slow_execution_ms,
            recency_half_life_days=config.recency_half_life_days,
            max_combinations=config.max_combinations,
            combination_keys=config.combination_keys,
            material_keys=list(config.material_keys),
        )


class CandidateGenerator(Protocol):
    """Interface for per-type candidate generators."""

    recommendation_type: RecommendationType

    def generate(self, request: RecommendationRequest, data: GenerationInput) -> List[Candidate]:
        """Return unscored candidates for ``request``."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _pattern_number(data: Mapping[str, Any], key: str, default: Optional[float] = None) -> Optional[float]:
    """Finite numeric value of ``data[key]``, else ``default``.

    Pattern payloads come from an external recognizer, so None, strings,
    booleans and NaN are all treated as missing.
    """
    value = data.get(key)
    return value if _is_number(value) else default


def _pattern_confidence(pattern: Pattern) -> float:
    confidence = pattern.confidence
    if not _is_number(confidence):
        return 0.0
    return min(max(confidence, 0.0), 1.0)


def _matching_history(
    request: RecommendationRequest, history: Sequence[HistoryRecord]
) -> List[HistoryRecord]:
    if not request.calculator_type:
        return list(history)
    return [r for r in history if r.calculator_type == request.calculator_type]


def _relevance_signal(request: RecommendationRequest) -> float:
    # Scoped requests only look at records of the requested calculator.
    return 1.0 if request.calculator_type else 0.5


def _percent(rate: float) -> int:
    return round(rate * 100)


@dataclass(slots=True)
class _UsageStats:
    """Running counters for one mined value, combination or material."""

    value: Any
    count: int = 0
    successes: float = 0.0
    latest: Optional[datetime] = None

    def add(self, timestamp: Optional[datetime], success: float) -> None:
        self.count += 1
        self.successes += success
        if timestamp is not None:
            ts = as_utc(timestamp)
            if self.latest is None or ts > self.latest:
                self.latest = ts

    @property
    def success_rate(self) -> float:
        if self.count == 0:
            return 0.0
        return self.successes / self.count

    def rank_key(self):
        """Frequency first; ties go to the most recent occurrence."""
        return (self.count, self.latest or datetime.min.replace(tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


class ParameterValueGenerator:
    """Suggests the most frequently used value of each parameter."""

    recommendation_type = RecommendationType.PARAMETER_VALUE

    def __init__(self, settings: Optional[GeneratorSettings] = None):
        self.settings = settings or GeneratorSettings()

    def generate(self, request: RecommendationRequest, data: GenerationInput) -> List[Candidate]:
        records = _matching_history(request, data.history)
        if not records:
            return []

        per_parameter: Dict[str, Dict[str, _UsageStats]] = {}
        for record in records:
            success = 1.0 if record.succeeded(self.settings.slow_execution_ms) else 0.0
            for parameter, value in record.inputs.items():
                values = per_parameter.setdefault(parameter, {})
                key = canonical_json(value)
                stats = values.get(key)
                if stats is None:
                    stats = values[key] = _UsageStats(value=value)
                stats.add(record.timestamp, success)

        candidates: List[Candidate] = []
        for parameter, values in per_parameter.items():
            # sorted() is stable with reverse=True, so full ties keep first-seen order
            ranked = sorted(values.values(), key=_UsageStats.rank_key, reverse=True)
            top = ranked[0]
            if top.count < self.settings.min_support:
                continue

            observations = sum(s.count for s in ranked)
            success_rate = top.success_rate
            evidence = Evidence(
                sample_size=top.count,
                success_rate=success_rate,
                recency=recency_weight(top.latest, data.now, self.settings.recency_half_life_days),
                consistency=top.count / observations,
                relevance=_relevance_signal(request),
            )
            candidates.append(
                Candidate(
                    type=self.recommendation_type,
                    title=f"Recommended {parameter}",
                    description=(
                        f"Based on your usage history, {top.value} is the most frequently "
                        f"used value for {parameter}"
                    ),
                    explanation=(
                        f"You've used {top.value} for {parameter} {top.count} of {observations} times "
                        f"with {_percent(success_rate)}% success rate."
                    ),
                    data={
                        "parameter": parameter,
                        "suggested_value": top.value,
                        "sample_size": top.count,
                        "success_rate": success_rate,
                        "context": [request.calculator_type or "general"],
                        "alternatives": [
                            {"value": s.value, "count": s.count} for s in ranked[1:3]
                        ],
                    },
                    evidence=evidence,
                    relevance_score=top.count * success_rate,
                )
            )
        return candidates


class ParameterCombinationGenerator:
    """Suggests complete input tuples that were used repeatedly and succeeded."""

    recommendation_type = RecommendationType.PARAMETER_COMBINATION

    def __init__(self, settings: Optional[GeneratorSettings] = None):
        self.settings = settings or GeneratorSettings()

    def _group_parameters(self, inputs: Mapping[str, Any]) -> Dict[str, Any]:
        keys = self.settings.combination_keys
        if not keys:
            return dict(inputs)
        return {key: inputs[key] for key in keys if key in inputs}

    def generate(self, request: RecommendationRequest, data: GenerationInput) -> List[Candidate]:
        records = _matching_history(request, data.history)
        if not records:
            return []

        groups: Dict[str, Dict[str, Any]] = {}
        for record in records:
            parameters = self._group_parameters(record.inputs)
            if not parameters:
                continue
            key = canonical_json(parameters)
            group = groups.get(key)
            if group is None:
                group = groups[key] = {
                    "stats": _UsageStats(value=parameters),
                    "total_time": 0.0,
                    "timed": 0,
                    "contexts": [],
                }
            success = 1.0 if record.succeeded(self.settings.slow_execution_ms) else 0.0
            group["stats"].add(record.timestamp, success)
            if record.execution_time is not None:
                group["total_time"] += record.execution_time
                group["timed"] += 1
            if record.calculator_type not in group["contexts"]:
                group["contexts"].append(record.calculator_type)

        eligible = [
            g for g in groups.values()
            if g["stats"].count >= self.settings.min_support and g["stats"].successes > 0
        ]
        eligible.sort(
            key=lambda g: (g["stats"].success_rate,) + g["stats"].rank_key(),
            reverse=True,
        )

        candidates: List[Candidate] = []
        for group in eligible[: self.settings.max_combinations]:
            stats: _UsageStats = group["stats"]
            success_rate = stats.success_rate
            average_time = group["total_time"] / group["timed"] if group["timed"] else 0.0
            evidence = Evidence(
                sample_size=stats.count,
                success_rate=success_rate,
                recency=recency_weight(stats.latest, data.now, self.settings.recency_half_life_days),
                consistency=stats.count / len(records),
                relevance=_relevance_signal(request),
            )
            candidates.append(
                Candidate(
                    type=self.recommendation_type,
                    title="Recommended Parameter Combination",
                    description="This parameter combination has worked well in your previous calculations",
                    explanation=(
                        f"Used {stats.count} times with {_percent(success_rate)}% success rate "
                        f"and average execution time of {round(average_time)}ms."
                    ),
                    data={
                        "parameters": dict(stats.value),
                        "success_rate": success_rate,
                        "frequency": stats.count,
                        "average_execution_time": average_time,
                        "usage_context": list(group["contexts"]),
                    },
                    evidence=evidence,
                    relevance_score=stats.count * success_rate,
                )
            )
        return candidates


class MaterialSelectionGenerator:
    """Suggests materials the user works with successfully, from history and presets."""

    recommendation_type = RecommendationType.MATERIAL_SELECTION

    def __init__(self, settings: Optional[GeneratorSettings] = None):
        self.settings = settings or GeneratorSettings()

    def _material_of(self, parameters: Mapping[str, Any]) -> Any:
        for key in self.settings.material_keys:
            value = parameters.get(key)
            if value not in (None, ""):
                return value
        return None

    def generate(self, request: RecommendationRequest, data: GenerationInput) -> List[Candidate]:
        records = _matching_history(request, data.history)
        presets = [
            p for p in data.presets
            if not request.calculator_type or p.calculator_type == request.calculator_type
        ]
        if not records and not presets:
            return []

        materials: Dict[str, Dict[str, Any]] = {}

        def entry_for(material: Any) -> Dict[str, Any]:
            key = canonical_json(material)
            entry = materials.get(key)
            if entry is None:
                entry = materials[key] = {
                    "stats": _UsageStats(value=material),
                    "usage_count": 0,
                    "preset_count": 0,
                    "sums": {},
                    "counts": {},
                }
            return entry

        for record in records:
            material = self._material_of(record.inputs)
            if material is None:
                continue
            entry = entry_for(material)
            success = 1.0 if record.succeeded(self.settings.slow_execution_ms) else 0.0
            entry["stats"].add(record.timestamp, success)
            entry["usage_count"] += 1
            for name, value in record.inputs.items():
                if name in self.settings.material_keys or not _is_number(value):
                    continue
                entry["sums"][name] = entry["sums"].get(name, 0.0) + value
                entry["counts"][name] = entry["counts"].get(name, 0) + 1

        for preset in presets:
            material = self._material_of(preset.parameters)
            if material is None:
                continue
            entry = entry_for(material)
            success = preset.success_rate if _is_number(preset.success_rate) else 1.0
            entry["stats"].add(None, min(max(success, 0.0), 1.0))
            entry["preset_count"] += 1

        total_observations = sum(e["stats"].count for e in materials.values())
        candidates: List[Candidate] = []
        for entry in materials.values():
            stats: _UsageStats = entry["stats"]
            if stats.count < self.settings.min_support:
                continue
            success_rate = stats.success_rate
            average_parameters = {
                name: round(entry["sums"][name] / entry["counts"][name], 2)
                for name in entry["sums"]
            }
            evidence = Evidence(
                sample_size=stats.count,
                success_rate=success_rate,
                recency=recency_weight(stats.latest, data.now, self.settings.recency_half_life_days),
                consistency=stats.count / total_observations,
                relevance=_relevance_signal(request),
            )
            candidates.append(
                Candidate(
                    type=self.recommendation_type,
                    title=f"Recommended material: {stats.value}",
                    description=f"{stats.value} is a material you use often with good results",
                    explanation=(
                        f"{stats.value} appears in {entry['usage_count']} calculations and "
                        f"{entry['preset_count']} presets with {_percent(success_rate)}% success rate."
                    ),
                    data={
                        "material": stats.value,
                        "usage_count": entry["usage_count"],
                        "preset_count": entry["preset_count"],
                        "success_rate": success_rate,
                        "average_parameters": average_parameters,
                        "last_used": stats.latest.isoformat() if stats.latest else None,
                    },
                    evidence=evidence,
                    relevance_score=stats.count * success_rate,
                )
            )
        return candidates


class CalculatorWorkflowGenerator:
    """Suggests the next calculator from recognized behavior sequences."""

    recommendation_type = RecommendationType.CALCULATOR_WORKFLOW

    def __init__(self, settings: Optional[GeneratorSettings] = None):
        self.settings = settings or GeneratorSettings()

    def generate(self, request: RecommendationRequest, data: GenerationInput) -> List[Candidate]:
        if not data.history or not request.calculator_type:
            return []

        candidates: List[Candidate] = []
        for pattern in data.patterns:
            if pattern.type != PatternType.BEHAVIOR_SEQUENCE:
                continue
            sequence = pattern.data.get("sequence")
            if not isinstance(sequence, (list, tuple)) or request.calculator_type not in sequence:
                continue
            sequence = list(sequence)
            position = sequence.index(request.calculator_type)
            if position >= len(sequence) - 1:
                continue
            frequency = _pattern_number(pattern.data, "frequency")
            if frequency is None:
                continue

            next_calculators = sequence[position + 1:]
            success_rate = min(max(_pattern_number(pattern.data, "success_rate", 1.0), 0.0), 1.0)
            evidence = Evidence(
                sample_size=frequency,
                success_rate=success_rate,
                recency=recency_weight(pattern.timestamp, data.now, self.settings.recency_half_life_days),
                consistency=_pattern_confidence(pattern),
                relevance=1.0,
            )
            candidates.append(
                Candidate(
                    type=self.recommendation_type,
                    title="Recommended Next Calculator",
                    description=f"Based on your workflow patterns, consider using {next_calculators[0]} next",
                    explanation=(
                        f"This workflow sequence appears {frequency} times in your usage history "
                        f"with {_percent(success_rate)}% success rate."
                    ),
                    data={
                        "sequence": sequence,
                        "frequency": frequency,
                        "average_completion_time": _pattern_number(pattern.data, "average_time_span", 0),
                        "success_rate": success_rate,
                        "next_probable_calculators": [
                            {"calculator": calc, "probability": max(0.1, 1 - index * 0.2)}
                            for index, calc in enumerate(next_calculators)
                        ],
                    },
                    evidence=evidence,
                    relevance_score=frequency * success_rate,
                )
            )
        return candidates


class OptimizationSuggestionGenerator:
    """Suggests adjustments to the parameters currently entered."""

    recommendation_type = RecommendationType.OPTIMIZATION_SUGGESTION

    def __init__(self, settings: Optional[GeneratorSettings] = None, min_correlation: float = 0.7):
        self.settings = settings or GeneratorSettings()
        self.min_correlation = min_correlation

    def generate(self, request: RecommendationRequest, data: GenerationInput) -> List[Candidate]:
        if not data.patterns or not request.current_parameters:
            return []

        candidates: List[Candidate] = []
        for pattern in data.patterns:
            if pattern.type == PatternType.PARAMETER_CORRELATION:
                candidate = self._from_correlation(request, data, pattern)
            elif pattern.type == PatternType.ANOMALY_DETECTION:
                candidate = self._from_anomaly(request, data, pattern)
            else:
                candidate = None
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def _from_correlation(
        self, request: RecommendationRequest, data: GenerationInput, pattern: Pattern
    ) -> Optional[Candidate]:
        parameter_a = pattern.data.get("parameter_a")
        parameter_b = pattern.data.get("parameter_b")
        correlation = _pattern_number(pattern.data, "correlation")
        if correlation is None or abs(correlation) <= self.min_correlation:
            return None
        if not isinstance(parameter_a, str) or not isinstance(parameter_b, str):
            return None
        strength = min(abs(correlation), 1.0)

        current = request.current_parameters
        reference = current.get(parameter_a)
        if not _is_number(reference) or current.get(parameter_b) is not None:
            return None

        # Records whose parameter_a lies within 10% of the current value.
        tolerance = abs(reference) * 0.1
        similar = [
            r for r in _matching_history(request, data.history)
            if _is_number(r.inputs.get(parameter_a))
            and abs(r.inputs[parameter_a] - reference) <= tolerance
            and _is_number(r.inputs.get(parameter_b))
        ]
        if not similar:
            return None

        suggested = round(sum(r.inputs[parameter_b] for r in similar) / len(similar), 2)
        successes = sum(1 for r in similar if r.succeeded(self.settings.slow_execution_ms))
        latest = max(as_utc(r.timestamp) for r in similar)
        direction = "positively" if correlation > 0 else "negatively"
        evidence = Evidence(
            sample_size=len(similar),
            success_rate=successes / len(similar),
            recency=recency_weight(latest, data.now, self.settings.recency_half_life_days),
            consistency=strength,
            relevance=1.0,
        )
        return Candidate(
            type=self.recommendation_type,
            title=f"Optimize {parameter_b}",
            description=f"Based on correlation with {parameter_a}, consider adjusting {parameter_b}",
            explanation=(
                f"Parameters {parameter_a} and {parameter_b} show strong correlation across "
                f"{len(similar)} similar calculations. Setting {parameter_b} to {suggested} may improve results."
            ),
            data={
                "current_value": None,
                "suggested_value": suggested,
                "parameter": parameter_b,
                "expected_improvement": "Better parameter harmony",
                "impact_score": strength,
                "reasoning": (
                    f"{parameter_a} and {parameter_b} are {direction} correlated ({correlation:.3f})"
                ),
            },
            evidence=evidence,
            relevance_score=strength,
        )

    def _from_anomaly(
        self, request: RecommendationRequest, data: GenerationInput, pattern: Pattern
    ) -> Optional[Candidate]:
        if pattern.data.get("kind") != "unusual-parameter":
            return None
        parameter = pattern.data.get("parameter")
        if not isinstance(parameter, str):
            return None
        mean = _pattern_number(pattern.data, "mean")
        std_dev = _pattern_number(pattern.data, "std_dev", 0.0)
        current_value = request.current_parameters.get(parameter)
        if not _is_number(current_value) or not _is_number(mean):
            return None
        if current_value != _pattern_number(pattern.data, "value"):
            return None

        confidence = _pattern_confidence(pattern)
        suggested = round(mean, 2)
        deviations = (current_value - mean) / std_dev if std_dev else 0.0
        evidence = Evidence(
            sample_size=_pattern_number(pattern.data, "sample_size", 0),
            success_rate=confidence,
            recency=recency_weight(pattern.timestamp, data.now, self.settings.recency_half_life_days),
            consistency=min(abs(deviations) / 3.0, 1.0),
            relevance=1.0,
        )
        return Candidate(
            type=self.recommendation_type,
            title=f"Normalize {parameter}",
            description=f"Your current {parameter} value is unusual. Consider using a more typical value.",
            explanation=(
                f"Your current {parameter} value ({current_value}) is {abs(deviations):.1f} standard "
                f"deviations from your typical value of {suggested}."
            ),
            data={
                "current_value": current_value,
                "suggested_value": suggested,
                "parameter": parameter,
                "expected_improvement": "More predictable results",
                "impact_score": confidence,
                "reasoning": f"Current value {current_value} is {deviations:.1f} standard deviations from typical usage",
            },
            evidence=evidence,
            relevance_score=confidence,
        )


_TIME_SLOT_HOURS = {
    "early-morning": 6,
    "morning": 9,
    "late-morning": 11,
    "afternoon": 14,
    "late-afternoon": 16,
    "evening": 19,
    "night": 22,
}


def parse_time_slot(time_slot: str) -> int:
    """Hour of a named slot ('morning') or an 'HH:00-HH:00' range; noon when unknown."""
    if time_slot in _TIME_SLOT_HOURS:
        return _TIME_SLOT_HOURS[time_slot]
    head = time_slot.split(":", 1)[0]
    if head.isdigit() and 0 <= int(head) <= 23:
        return int(head)
    return 12


def hour_distance(a: int, b: int) -> int:
    """Distance between two hours of the day, wrapping around midnight."""
    d = abs(a - b) % 24
    return min(d, 24 - d)


class ContextualRecommendationGenerator:
    """Suggestions driven by the request context: time, urgency and task type."""

    recommendation_type = RecommendationType.CONTEXTUAL_RECOMMENDATION

    def __init__(self, settings: Optional[GeneratorSettings] = None, max_quick_presets: int = 3):
        self.settings = settings or GeneratorSettings()
        self.max_quick_presets = max_quick_presets

    def generate(self, request: RecommendationRequest, data: GenerationInput) -> List[Candidate]:
        context = request.context
        if context is None:
            return []

        candidates: List[Candidate] = []
        candidates.extend(self._time_based(data))
        if context.urgency == "high":
            candidates.extend(self._urgency_based(request, data))
        if context.task_type and data.preferences is not None:
            task_candidate = self._task_based(context.task_type, data)
            if task_candidate is not None:
                candidates.append(task_candidate)
        return candidates

    def _time_based(self, data: GenerationInput) -> List[Candidate]:
        candidates = []
        current_hour = as_utc(data.now).hour
        for pattern in data.patterns:
            if pattern.type != PatternType.TIME_ACTIVITY:
                continue
            time_slot = str(pattern.data.get("time_slot", ""))
            if hour_distance(current_hour, parse_time_slot(time_slot)) > 2:
                continue
            confidence = _pattern_confidence(pattern)
            evidence = Evidence(
                sample_size=_pattern_number(pattern.data, "activity_level", 0),
                success_rate=1.0,
                recency=recency_weight(pattern.timestamp, data.now, self.settings.recency_half_life_days),
                consistency=confidence,
                relevance=1.0,
            )
            candidates.append(
                Candidate(
                    type=self.recommendation_type,
                    title="Optimal Time for Calculations",
                    description=f"You're most active during {time_slot}. Great time for complex calculations!",
                    explanation=f"Based on your usage patterns, you perform most calculations during {time_slot}.",
                    data={
                        "context": "time-based",
                        "optimal_time_slot": time_slot,
                        "current_match": True,
                        "suggestion": "Consider tackling complex calculations now",
                    },
                    evidence=evidence,
                    relevance_score=confidence * 0.8,
                    actionable=False,
                )
            )
        return candidates

    def _urgency_based(self, request: RecommendationRequest, data: GenerationInput) -> List[Candidate]:
        quick_presets = [
            p for p in data.presets
            if p.quick_access and (not request.calculator_type or p.calculator_type == request.calculator_type)
        ][: self.max_quick_presets]

        candidates = []
        for preset in quick_presets:
            evidence = Evidence(
                sample_size=preset.usage_count,
                success_rate=preset.success_rate if _is_number(preset.success_rate) else 1.0,
                recency=0.5,
                consistency=1.0,
                relevance=1.0 if preset.calculator_type == request.calculator_type else 0.5,
            )
            candidates.append(
                Candidate(
                    type=self.recommendation_type,
                    title="Quick Access Preset",
                    description=f'For urgent tasks, use your "{preset.name}" preset',
                    explanation=(
                        f'Your "{preset.name}" preset has been applied {preset.usage_count} times '
                        f"and can save time for urgent calculations."
                    ),
                    data={
                        "context": "urgency-based",
                        "preset_id": preset.id,
                        "preset_name": preset.name,
                        "parameters": dict(preset.parameters),
                        "suggestion": "Use saved preset for faster results",
                    },
                    evidence=evidence,
                    relevance_score=0.8,
                )
            )
        return candidates

    def _task_based(self, task_type: str, data: GenerationInput) -> Optional[Candidate]:
        task_preferences = data.preferences.calculator_preferences.get(task_type)
        if not task_preferences:
            return None
        evidence = Evidence(
            sample_size=len(task_preferences),
            success_rate=1.0,
            recency=1.0,
            consistency=1.0,
            relevance=1.0,
        )
        return Candidate(
            type=self.recommendation_type,
            title=f"{task_type} Task Optimization",
            description=f"Your preferences for {task_type} tasks suggest specific settings",
            explanation=f"You have {len(task_preferences)} customized settings for {task_type} tasks.",
            data={
                "context": "task-based",
                "task_type": task_type,
                "preferences": dict(task_preferences),
                "suggestion": "Apply task-specific preferences",
            },
            evidence=evidence,
            relevance_score=0.7,
        )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def validate_registry(registry: Mapping[RecommendationType, CandidateGenerator]) -> None:
    """Raise ValueError unless every recommendation type has a matching generator."""
    missing = [t.value for t in RecommendationType if t not in registry]
    if missing:
        raise ValueError(f"No generator registered for: {', '.join(missing)}")
    for rec_type, generator in registry.items():
        if generator.recommendation_type != rec_type:
            raise ValueError(
                f"Generator {type(generator).__name__} registered for {rec_type.value} "
                f"produces {generator.recommendation_type.value}"
            )


def build_generator_registry(
    settings: Optional[GeneratorSettings] = None,
) -> Dict[RecommendationType, CandidateGenerator]:
    """Factory for the default generator set, one per recommendation type."""
    settings = settings or GeneratorSettings()
    generators: List[CandidateGenerator] = [
        ParameterValueGenerator(settings),
        ParameterCombinationGenerator(settings),
        MaterialSelectionGenerator(settings),
        CalculatorWorkflowGenerator(settings),
        OptimizationSuggestionGenerator(settings),
        ContextualRecommendationGenerator(settings),
    ]
    registry = {g.recommendation_type: g for g in generators}
    validate_registry(registry)
    return registry
