"""
Level table provider — authoritative skill curves with static fallbacks.

Lifecycle of the dynamic tables:
  1. ``ensure_loaded()`` is awaited once per stats request.
  2. If the cache is still empty it performs one GET of
     ``/v2/resources/skyblock/skills`` through ``HypixelClient``.
  3. The response is parsed as a whole: every skill's ``levels`` list must be
     well formed or nothing is cached.
  4. A parsed response populates the cache for all skills at once. The cache
     is never invalidated; these curves change only with major game updates.
  5. On any failure the cache stays empty and lookups use the static tables.
     The failure is not remembered, so the next request tries again.

Slayer boss tables are fixed constants and never fetched.

The cache is an explicit object so the composition root decides its scope
(one per process in production, a fresh or pre-filled one in tests).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from skyblock_stats.ingestion.errors import UpstreamUnavailable
from skyblock_stats.levels.tables import (
    CHALLENGE_XP_LEVELS,
    SKILL_XP_LEVELS,
    ExperienceThresholdTable,
)
from skyblock_stats.utils.json_paths import as_number

if TYPE_CHECKING:
    from skyblock_stats.ingestion.hypixel_client import HypixelClient

logger = logging.getLogger(__name__)


class LevelTableCache:
    """Lower-cased category → threshold table, populated at most once.

    Concurrent first-time populations are harmless: both writers hold the
    same parsed content and the second write is ignored.
    """

    def __init__(self, tables: Optional[Mapping[str, ExperienceThresholdTable]] = None) -> None:
        self._tables: dict[str, ExperienceThresholdTable] = {}
        self._populated = False
        if tables:
            self.populate(tables)

    @property
    def populated(self) -> bool:
        return self._populated

    def populate(self, tables: Mapping[str, ExperienceThresholdTable]) -> None:
        if self._populated:
            return
        self._tables = {key.lower(): tuple(table) for key, table in tables.items()}
        self._populated = True

    def get(self, category: str) -> Optional[ExperienceThresholdTable]:
        return self._tables.get(category.lower())

    def categories(self) -> list[str]:
        return sorted(self._tables)


def parse_skill_tables(payload: Any) -> dict[str, ExperienceThresholdTable]:
    """Parse a ``/v2/resources/skyblock/skills`` body into threshold tables.

    Entries are ordered by level (then threshold) regardless of the order the
    response lists them in, and the thresholds are re-sorted if the declared
    values are not monotonic.

    Args:
        payload: Decoded JSON body.

    Returns:
        Mapping of lower-cased skill id to table.

    Raises:
        ValueError: If any part of the response is malformed. Partial results
            are never returned.
    """
    skills = payload.get("skills") if isinstance(payload, Mapping) else None
    if not isinstance(skills, Mapping) or not skills:
        raise ValueError("Skill resources response has no 'skills' mapping.")

    tables: dict[str, ExperienceThresholdTable] = {}
    for skill_id, skill in skills.items():
        levels = skill.get("levels") if isinstance(skill, Mapping) else None
        if not isinstance(levels, list) or not levels:
            raise ValueError(f"Skill '{skill_id}' has no levels list.")

        pairs: list[tuple[float, float]] = []
        for entry in levels:
            level = as_number(entry.get("level")) if isinstance(entry, Mapping) else None
            required = as_number(entry.get("totalExpRequired")) if isinstance(entry, Mapping) else None
            if level is None or required is None or required < 0:
                raise ValueError(f"Skill '{skill_id}' has a malformed level entry: {entry!r}")
            pairs.append((level, required))

        pairs.sort()
        thresholds = [required for _, required in pairs]
        if any(b < a for a, b in zip(thresholds, thresholds[1:])):
            logger.debug("Skill '%s' thresholds not monotonic by level; re-sorting", skill_id)
            thresholds.sort()
        tables[str(skill_id).lower()] = tuple(thresholds)

    return tables


class LevelTableProvider:
    """Serve threshold tables per skill and per slayer boss.

    Args:
        cache: Table cache to read from and populate.
        client: Primary source client used for the one remote fetch; ``None``
            disables fetching.
        fetch_remote: Set ``False`` to use static tables only.
    """

    def __init__(
        self,
        cache: Optional[LevelTableCache] = None,
        client: Optional["HypixelClient"] = None,
        fetch_remote: bool = True,
    ) -> None:
        self.cache = cache if cache is not None else LevelTableCache()
        self.client = client
        self.fetch_remote = fetch_remote

    async def ensure_loaded(self) -> bool:
        """Populate the cache from the resources endpoint if still empty.

        Never raises.

        Returns:
            ``True`` if dynamic tables are available after the call.
        """
        if self.cache.populated:
            return True
        if not self.fetch_remote or self.client is None:
            return False

        try:
            payload = await self.client.fetch_skill_resources()
            tables = parse_skill_tables(payload)
        except (UpstreamUnavailable, ValueError) as exc:
            logger.warning("Skill level tables unavailable, using static curve: %s", exc)
            return False

        self.cache.populate(tables)
        logger.info("Loaded %d skill level tables from resources endpoint", len(tables))
        return True

    def get_table(self, category: str) -> ExperienceThresholdTable:
        """Return the dynamic table for a skill, or the generic static curve."""
        table = self.cache.get(category)
        return table if table else SKILL_XP_LEVELS

    def get_challenge_table(self, category: str) -> Optional[ExperienceThresholdTable]:
        """Return the static slayer table for a boss id, or ``None`` if unknown."""
        return CHALLENGE_XP_LEVELS.get(category.lower())
