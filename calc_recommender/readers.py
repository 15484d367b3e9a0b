"""
Read interfaces of the collaborators the recommendation engine consumes.

The engine never writes through these interfaces. Any object with matching
async methods can be passed to ``RecommendationService``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Protocol

from .models import HistoryRecord, Pattern, Preset, UserPreferences


@dataclass(slots=True)
class HistoryQuery:
    """Filter and page selection for history lookups."""

    user_id: Optional[str] = None
    calculator_type: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    limit: int = 20
    offset: int = 0


@dataclass(slots=True)
class Pagination:
    page: int
    limit: int
    total: int
    has_next: bool
    has_previous: bool


@dataclass(slots=True)
class HistoryPage:
    """One page of history records, newest first."""

    records: List[HistoryRecord]
    total: int
    pagination: Pagination


@dataclass(slots=True)
class PresetQuery:
    user_id: Optional[str] = None
    calculator_type: Optional[str] = None
    limit: int = 20
    offset: int = 0


@dataclass(slots=True)
class PresetPage:
    presets: List[Preset] = field(default_factory=list)
    total: int = 0
    has_more: bool = False


class HistoryReader(Protocol):
    async def get_history(self, query: HistoryQuery) -> HistoryPage:
        """Return a page of calculation records matching ``query``."""


class PatternRecognizer(Protocol):
    async def analyze_user_patterns(self, user_id: str) -> List[Pattern]:
        """Return the usage patterns known for ``user_id``."""


class PresetReader(Protocol):
    async def get_presets(self, query: PresetQuery) -> PresetPage:
        """Return a page of presets matching ``query``."""


class PreferencesReader(Protocol):
    async def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        """Return the preferences of ``user_id`` or None when unset."""
