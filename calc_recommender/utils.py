"""
Small helpers shared across the recommendation engine.
"""

import json
from datetime import datetime, timezone
from typing import Any


def as_utc(ts: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def canonical_json(value: Any) -> str:
    """Key-order-insensitive JSON used to group and key arbitrary values."""
    return json.dumps(value, sort_keys=True, default=str)
