"""
Time helpers for upstream timestamps.

Hypixel reports every timestamp (``last_save``, ``firstLogin``,
``lastLogin``) as integer milliseconds since the Unix epoch.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Optional


def from_epoch_millis(value: Any) -> Optional[datetime]:
    """Convert an epoch-milliseconds value into an aware UTC datetime.

    Returns ``None`` for anything that is not a finite, non-negative number
    (booleans included), or that lies outside the platform's datetime range.

    Args:
        value: Raw JSON value, typically an ``int``.

    Returns:
        ``datetime`` in UTC, or ``None``.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        if not math.isfinite(value) or value < 0:
            return None
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
