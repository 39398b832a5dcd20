"""
Canonical naming and level-entry construction for skills and slayer bosses.

Upstream sources spell the same skill several ways (``SKILL_FARMING``,
``experience_skill_farming``, ``experience_skill_FARMING``, ``farming``).
Everything funnels through ``canonical_key`` so entries from any layout or
source compare equal by name.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Optional, TypeVar

from skyblock_stats.levels.converter import level_for
from skyblock_stats.levels.provider import LevelTableProvider
from skyblock_stats.levels.tables import MAX_SKILL_LEVEL, SKILL_DISPLAY_NAMES
from skyblock_stats.models.stats import ChallengeLevel, SkillLevel
from skyblock_stats.utils.json_paths import as_positive_number

E = TypeVar("E", bound=SkillLevel)

_KEY_PREFIXES = ("experience_skill_", "skill_")


def canonical_key(raw_key: str) -> str:
    """``"SKILL_FARMING"`` / ``"experience_skill_FARMING"`` → ``"farming"``."""
    key = raw_key.strip().lower()
    for prefix in _KEY_PREFIXES:
        if key.startswith(prefix):
            return key[len(prefix):]
    return key


def display_name(key: str) -> str:
    """``"farming"`` → ``"Farming"``; ``"fishing_festival"`` → ``"Fishing Festival"``."""
    known = SKILL_DISPLAY_NAMES.get(key)
    if known:
        return known
    return " ".join(word[:1].upper() + word[1:] for word in key.replace("_", " ").split())


def make_skill(provider: LevelTableProvider, raw_key: str, xp: float) -> SkillLevel:
    key = canonical_key(raw_key)
    level = level_for(xp, provider.get_table(key), cap=MAX_SKILL_LEVEL)
    return SkillLevel(name=display_name(key), level=level, xp=xp)


def make_challenge(provider: LevelTableProvider, raw_key: str, xp: float) -> ChallengeLevel:
    key = canonical_key(raw_key)
    table = provider.get_challenge_table(key)
    level = level_for(xp, table) if table else 1
    return ChallengeLevel(name=display_name(key), level=level, xp=xp)


class LevelList(Generic[E]):
    """Ordered, name-deduplicated list of level entries.

    The first entry for a case-insensitive name wins; later additions with the
    same name are dropped. Experience must be a positive finite number
    (numeric strings are accepted).
    """

    def __init__(self, make_entry: Callable[[str, float], E]) -> None:
        self._make_entry = make_entry
        self._entries: list[E] = []
        self._names: set[str] = set()

    def add(self, raw_key: Any, raw_xp: Any) -> Optional[E]:
        if not isinstance(raw_key, str):
            return None
        xp = as_positive_number(raw_xp, allow_strings=True)
        if xp is None:
            return None
        entry = self._make_entry(raw_key, xp)
        name = entry.name.lower()
        if not name or name in self._names:
            return None
        self._names.add(name)
        self._entries.append(entry)
        return entry

    def entries(self) -> list[E]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def skill_list(provider: LevelTableProvider) -> LevelList[SkillLevel]:
    return LevelList(lambda key, xp: make_skill(provider, key, xp))


def challenge_list(provider: LevelTableProvider) -> LevelList[ChallengeLevel]:
    return LevelList(lambda key, xp: make_challenge(provider, key, xp))
