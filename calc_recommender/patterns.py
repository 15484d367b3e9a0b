"""
Pattern recognition over a user's calculation history.

``HistoryPatternRecognizer`` implements the ``PatternRecognizer`` read
interface on top of any ``HistoryReader``. It reports calculator usage, busy
time slots, recurring calculator sequences, correlated numeric parameters and
unusual parameter values.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from itertools import combinations
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .models import HistoryRecord, Pattern, PatternType
from .readers import HistoryQuery, HistoryReader
from .utils import as_utc

logger = logging.getLogger(__name__)


class HistoryPatternRecognizer:
    """Mines usage patterns from calculation history."""

    def __init__(
        self,
        history_reader: HistoryReader,
        min_pattern_frequency: int = 3,
        confidence_threshold: float = 0.6,
        max_patterns_per_type: int = 10,
        history_limit: int = 1000,
        session_gap: timedelta = timedelta(minutes=30),
        correlation_threshold: float = 0.7,
        anomaly_z_score: float = 2.0,
        min_anomaly_samples: int = 5,
        slow_execution_ms: float = 5000,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.history_reader = history_reader
        self.min_pattern_frequency = max(1, min_pattern_frequency)
        self.confidence_threshold = confidence_threshold
        self.max_patterns_per_type = max_patterns_per_type
        self.history_limit = history_limit
        self.session_gap = session_gap
        self.correlation_threshold = correlation_threshold
        self.anomaly_z_score = anomaly_z_score
        self.min_anomaly_samples = min_anomaly_samples
        self.slow_execution_ms = slow_execution_ms
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def analyze_user_patterns(self, user_id: str = "anonymous-user") -> List[Pattern]:
        """Analyze all pattern types for a user, most confident first."""
        page = await self.history_reader.get_history(
            HistoryQuery(user_id=user_id, limit=self.history_limit)
        )
        records = sorted(page.records, key=lambda r: as_utc(r.timestamp))
        if not records:
            return []

        now = self._clock()
        patterns: List[Pattern] = []
        for analyze in (
            self._calculator_usage,
            self._time_activity,
            self._behavior_sequences,
            self._parameter_correlations,
            self._anomalies,
        ):
            found = analyze(records)
            patterns.extend(
                Pattern(
                    id=f"{pattern_type.value}-{uuid.uuid4().hex[:12]}",
                    type=pattern_type,
                    confidence=confidence,
                    description=description,
                    data=data,
                    timestamp=now,
                    user_id=user_id,
                )
                for pattern_type, confidence, description, data in found[: self.max_patterns_per_type]
            )

        kept = [p for p in patterns if p.confidence >= self.confidence_threshold]
        kept.sort(key=lambda p: p.confidence, reverse=True)
        logger.debug("Recognized %d of %d patterns for %s", len(kept), len(patterns), user_id)
        return kept

    def calculate_pattern_confidence(self, frequency: int, total_samples: int, consistency: float) -> float:
        if total_samples <= 0:
            return 0.0
        frequency_score = min(frequency / self.min_pattern_frequency, 1.0)
        prevalence_score = min(frequency / total_samples, 1.0)
        return frequency_score * 0.4 + prevalence_score * 0.4 + consistency * 0.2

    # Analyses ---------------------------------------------------------------
    # Each returns (type, confidence, description, data) tuples, best first.

    def _calculator_usage(self, records: Sequence[HistoryRecord]) -> List[Tuple]:
        counts = Counter(r.calculator_type for r in records)
        if not counts:
            return []
        top = max(counts.values())
        found = []
        for calculator_type, count in counts.most_common():
            if count < self.min_pattern_frequency:
                continue
            times = [r.execution_time for r in records
                     if r.calculator_type == calculator_type and r.execution_time is not None]
            average = sum(times) / len(times) if times else 0.0
            found.append((
                PatternType.CALCULATOR_USAGE,
                self.calculate_pattern_confidence(count, len(records), count / top),
                f'Calculator "{calculator_type}" used {count} times',
                {
                    "calculator_type": calculator_type,
                    "usage_count": count,
                    "percentage": count / len(records) * 100,
                    "average_session_time": average,
                },
            ))
        return found

    def _time_activity(self, records: Sequence[HistoryRecord]) -> List[Tuple]:
        slots: Counter = Counter()
        calculators: Dict[str, set] = {}
        for record in records:
            hour = as_utc(record.timestamp).hour
            slot = f"{hour:02d}:00-{(hour + 1) % 24:02d}:00"
            slots[slot] += 1
            calculators.setdefault(slot, set()).add(record.calculator_type)
        if not slots:
            return []
        top = max(slots.values())
        found = []
        for slot, count in slots.most_common(3):
            if count < self.min_pattern_frequency:
                continue
            found.append((
                PatternType.TIME_ACTIVITY,
                self.calculate_pattern_confidence(count, len(records), count / top),
                f"Most active during {slot} with {count} calculations",
                {
                    "time_slot": slot,
                    "day_of_week": "All",
                    "activity_level": count,
                    "calculator_types": sorted(calculators[slot]),
                    "average_calculations": count,
                },
            ))
        return found

    def _sessions(self, records: Sequence[HistoryRecord]) -> List[List[HistoryRecord]]:
        sessions: List[List[HistoryRecord]] = []
        for record in records:
            if sessions and as_utc(record.timestamp) - as_utc(sessions[-1][-1].timestamp) <= self.session_gap:
                sessions[-1].append(record)
            else:
                sessions.append([record])
        return sessions

    def _behavior_sequences(self, records: Sequence[HistoryRecord]) -> List[Tuple]:
        counts: Counter = Counter()
        successes: Counter = Counter()
        spans: Dict[Tuple[str, ...], List[float]] = {}
        windows = 0
        for session in self._sessions(records):
            # Collapse repeated runs of the same calculator.
            steps: List[HistoryRecord] = []
            for record in session:
                if not steps or steps[-1].calculator_type != record.calculator_type:
                    steps.append(record)
            for length in (2, 3):
                for start in range(len(steps) - length + 1):
                    window = steps[start:start + length]
                    key = tuple(r.calculator_type for r in window)
                    windows += 1
                    counts[key] += 1
                    if all(r.succeeded(self.slow_execution_ms) for r in window):
                        successes[key] += 1
                    span = (as_utc(window[-1].timestamp) - as_utc(window[0].timestamp)).total_seconds()
                    spans.setdefault(key, []).append(span)

        frequent = [(key, count) for key, count in counts.most_common() if count >= self.min_pattern_frequency]
        if not frequent:
            return []
        top = frequent[0][1]
        found = []
        for key, count in frequent:
            found.append((
                PatternType.BEHAVIOR_SEQUENCE,
                self.calculate_pattern_confidence(count, windows, count / top),
                f"Sequence {' -> '.join(key)} repeated {count} times",
                {
                    "sequence": list(key),
                    "frequency": count,
                    "success_rate": successes[key] / count,
                    "average_time_span": sum(spans[key]) / len(spans[key]),
                },
            ))
        return found

    def _numeric_columns(self, records: Sequence[HistoryRecord]) -> Dict[str, Dict[str, List[Tuple[int, float]]]]:
        """calculator type -> parameter -> [(record index, value)]"""
        columns: Dict[str, Dict[str, List[Tuple[int, float]]]] = {}
        for index, record in enumerate(records):
            for name, value in record.inputs.items():
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    continue
                columns.setdefault(record.calculator_type, {}).setdefault(name, []).append((index, float(value)))
        return columns

    def _parameter_correlations(self, records: Sequence[HistoryRecord]) -> List[Tuple]:
        found = []
        for calculator_type, params in self._numeric_columns(records).items():
            total = sum(1 for r in records if r.calculator_type == calculator_type)
            for name_a, name_b in combinations(sorted(params), 2):
                values_b = dict(params[name_b])
                pairs = [(a, values_b[i]) for i, a in params[name_a] if i in values_b]
                if len(pairs) < max(self.min_pattern_frequency, 3):
                    continue
                matrix = np.array(pairs, dtype=float)
                if np.std(matrix[:, 0]) == 0 or np.std(matrix[:, 1]) == 0:
                    continue
                correlation = float(np.corrcoef(matrix[:, 0], matrix[:, 1])[0, 1])
                if abs(correlation) < self.correlation_threshold:
                    continue
                found.append((
                    PatternType.PARAMETER_CORRELATION,
                    self.calculate_pattern_confidence(len(pairs), total, abs(correlation)),
                    f"{name_a} and {name_b} correlate ({correlation:.3f}) in {calculator_type}",
                    {
                        "calculator_type": calculator_type,
                        "parameter_a": name_a,
                        "parameter_b": name_b,
                        "correlation": correlation,
                        "sample_size": len(pairs),
                    },
                ))
        found.sort(key=lambda item: abs(item[3]["correlation"]), reverse=True)
        return found

    def _anomalies(self, records: Sequence[HistoryRecord]) -> List[Tuple]:
        found = []
        for calculator_type, params in self._numeric_columns(records).items():
            for name, indexed in params.items():
                if len(indexed) < self.min_anomaly_samples:
                    continue
                values = np.array([v for _, v in indexed], dtype=float)
                mean = float(values.mean())
                std_dev = float(values.std())
                if std_dev == 0:
                    continue
                for value in sorted(set(values.tolist())):
                    z_score = (value - mean) / std_dev
                    if abs(z_score) <= self.anomaly_z_score:
                        continue
                    found.append((
                        PatternType.ANOMALY_DETECTION,
                        self.calculate_pattern_confidence(len(values), len(values), min(abs(z_score) / 3, 1.0)),
                        f"Unusual {name} value {value:g} in {calculator_type}",
                        {
                            "kind": "unusual-parameter",
                            "calculator_type": calculator_type,
                            "parameter": name,
                            "value": value,
                            "mean": mean,
                            "std_dev": std_dev,
                            "z_score": z_score,
                            "sample_size": len(values),
                        },
                    ))
        return found