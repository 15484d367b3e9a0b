"""
In-memory implementations of the collaborator read interfaces.

These back the web app and tests. Durable storage is out of scope; data can
be seeded from a JSON file with ``load_stores``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .models import HistoryRecord, Preset, UserPreferences
from .readers import HistoryPage, HistoryQuery, Pagination, PresetPage, PresetQuery
from .utils import as_utc

logger = logging.getLogger(__name__)


class InMemoryHistoryStore:
    """Calculation history kept in a list, served newest first."""

    def __init__(self, records: Optional[List[HistoryRecord]] = None):
        self._records: List[HistoryRecord] = list(records or [])

    def add_record(self, record: HistoryRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    async def get_history(self, query: Optional[HistoryQuery] = None) -> HistoryPage:
        query = query or HistoryQuery()
        records = self._apply_filters(query)
        total = len(records)
        limit = query.limit if query.limit and query.limit > 0 else 20
        offset = max(query.offset, 0)

        page_records = records[offset:offset + limit]
        pagination = Pagination(
            page=offset // limit + 1,
            limit=limit,
            total=total,
            has_next=offset + limit < total,
            has_previous=offset > 0,
        )
        return HistoryPage(records=page_records, total=total, pagination=pagination)

    def _apply_filters(self, query: HistoryQuery) -> List[HistoryRecord]:
        filtered = list(self._records)

        # Anonymous queries see records without an owner as well.
        if query.user_id:
            filtered = [r for r in filtered if r.user_id in (None, query.user_id)]
        if query.calculator_type:
            filtered = [r for r in filtered if r.calculator_type == query.calculator_type]
        if query.date_from:
            date_from = as_utc(query.date_from)
            filtered = [r for r in filtered if as_utc(r.timestamp) >= date_from]
        if query.date_to:
            date_to = as_utc(query.date_to)
            filtered = [r for r in filtered if as_utc(r.timestamp) <= date_to]

        filtered.sort(key=lambda r: as_utc(r.timestamp), reverse=True)
        return filtered


class InMemoryPresetStore:
    """Parameter presets, most used first."""

    def __init__(self, presets: Optional[List[Preset]] = None):
        self._presets: List[Preset] = list(presets or [])

    def add_preset(self, preset: Preset) -> None:
        self._presets.append(preset)

    async def get_presets(self, query: Optional[PresetQuery] = None) -> PresetPage:
        query = query or PresetQuery()
        presets = list(self._presets)
        if query.user_id:
            presets = [p for p in presets if p.created_by in (None, query.user_id)]
        if query.calculator_type:
            presets = [p for p in presets if p.calculator_type == query.calculator_type]
        presets.sort(key=lambda p: p.usage_count, reverse=True)

        total = len(presets)
        limit = query.limit if query.limit and query.limit > 0 else 20
        offset = max(query.offset, 0)
        return PresetPage(
            presets=presets[offset:offset + limit],
            total=total,
            has_more=offset + limit < total,
        )


class InMemoryPreferencesStore:
    """User preferences keyed by user id."""

    def __init__(self, preferences: Optional[Dict[str, UserPreferences]] = None):
        self._preferences: Dict[str, UserPreferences] = dict(preferences or {})

    def set_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        self._preferences[user_id] = preferences

    async def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        return self._preferences.get(user_id)


def load_stores(
    data_file: Union[str, Path, None],
) -> Tuple[InMemoryHistoryStore, InMemoryPresetStore, InMemoryPreferencesStore]:
    """
    Build the three stores from a JSON data file.

    The file holds ``{"history": [...], "presets": [...], "preferences": {user_id: {...}}}``.
    A missing file yields empty stores.

    Args:
        data_file: Path to the JSON data file

    Returns:
        Tuple of (history store, preset store, preferences store)
    """
    payload: Dict[str, Any] = {}
    if data_file and Path(data_file).exists():
        with open(data_file, "r", encoding="utf-8") as f:
            payload = json.load(f)
    elif data_file:
        logger.warning("Data file not found: %s, starting with empty stores", data_file)

    history = InMemoryHistoryStore(
        [HistoryRecord.model_validate(item) for item in payload.get("history", [])]
    )
    presets = InMemoryPresetStore(
        [Preset.model_validate(item) for item in payload.get("presets", [])]
    )
    preferences = InMemoryPreferencesStore(
        {
            user_id: UserPreferences.model_validate(item)
            for user_id, item in (payload.get("preferences") or {}).items()
        }
    )
    logger.info(
        "Loaded %d history records and %d presets", len(history), len(payload.get("presets", []))
    )
    return history, presets, preferences
