"""
Experience → level conversion.
"""

from __future__ import annotations

from typing import Optional, Sequence

from skyblock_stats.levels.tables import SKILL_XP_LEVELS


def level_for(xp: float, table: Sequence[float], cap: Optional[int] = None) -> int:
    """Convert cumulative experience into a level using a threshold table.

    Scans from the top of the table down and reports the first threshold
    ``xp`` reaches as ``index + 1``. Experience below every threshold is
    level 1; level 0 is never produced. An empty table falls back to the
    generic skill curve.

    Args:
        xp: Cumulative experience; negative values behave like 0.
        table: Non-decreasing cumulative thresholds.
        cap: Optional hard ceiling (60 for skills, 50 for Catacombs).

    Returns:
        Level in ``[1, min(len(table), cap)]``.
    """
    thresholds = table if len(table) else SKILL_XP_LEVELS
    ceiling = len(thresholds) if cap is None else max(1, min(cap, len(thresholds)))

    for i in range(len(thresholds) - 1, -1, -1):
        if xp >= thresholds[i]:
            return min(i + 1, ceiling)
    return 1
