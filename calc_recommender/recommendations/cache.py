"""
Request-keyed cache of computed recommendation lists.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..models import Recommendation, RecommendationRequest

logger = logging.getLogger(__name__)


def build_cache_key(request: RecommendationRequest) -> str:
    """Deterministic serialization of the full request.

    Keys are sorted and ``recommendation_type`` is deduplicated and sorted, so
    requests that only differ in type order share an entry.
    """
    payload = request.model_dump(mode="json")
    types = payload.get("recommendation_type")
    if types is not None:
        payload["recommendation_type"] = sorted(set(types))
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


@dataclass(slots=True)
class CacheEntry:
    key: str
    value: List[Recommendation]
    created_at: float


class RecommendationCache:
    """Maps cache keys to recommendation lists.

    Disabled caches miss on every ``get`` and ignore ``set``. Without a TTL,
    entries live until ``clear()``.
    """

    def __init__(
        self,
        enabled: bool = False,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.enabled = enabled
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[List[Recommendation]]:
        if not self.enabled:
            return None
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.ttl_seconds is not None and self._clock() - entry.created_at >= self.ttl_seconds:
            del self._entries[key]
            logger.debug("Cache entry expired: %s", key)
            return None
        return list(entry.value)

    def set(self, key: str, value: List[Recommendation]) -> None:
        if not self.enabled:
            return
        self._entries[key] = CacheEntry(key=key, value=list(value), created_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, object]:
        return {
            "size": len(self._entries),
            "keys": list(self._entries.keys()),
        }
