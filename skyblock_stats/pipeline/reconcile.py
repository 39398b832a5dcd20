"""
Schema reconciler — turn one profile member record of any schema generation
into canonical values.

Hypixel has reshaped the member record several times. The layouts handled
here, newest first:

  - "v2" members:   ``currencies.coin_purse``, ``player_data.experience``
                    (``SKILL_*`` keys), ``slayer.slayer_bosses``,
                    ``fairy_soul.total_collected``,
                    ``dungeons.dungeon_types.catacombs.experience``.
  - legacy members: flat ``coin_purse``, ``experience_skill_<name>``,
                    ``slayer_bosses``, ``fairy_souls_collected``.
  - odd mirrors:    flat ``purse``, nested ``skills.<name>.experience``,
                    ``slayer`` used directly as the boss map, doubly nested
                    ``dungeons.dungeons.dungeon_types``.

Each sub-fact (purse, skills, challenges, fairy souls, dungeon level) is
reconciled independently by an ordered tuple of extractor functions. Every
extractor is pure and returns ``None`` (or an empty list) when its layout is
absent; ``first_hit`` takes the first usable result. Once a layout yields
data, later layouts are not consulted.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from skyblock_stats.levels.converter import level_for
from skyblock_stats.levels.entries import challenge_list, skill_list
from skyblock_stats.levels.provider import LevelTableProvider
from skyblock_stats.levels.tables import (
    CHALLENGE_KEYS,
    MAX_DUNGEON_LEVEL,
    SKILL_KEYS,
    SKILL_XP_LEVELS,
)
from skyblock_stats.models.stats import ChallengeLevel, SkillLevel
from skyblock_stats.utils.json_paths import (
    as_mapping,
    as_number,
    as_positive_number,
    dig,
    first_hit,
)
from skyblock_stats.utils.time_utils import from_epoch_millis

logger = logging.getLogger(__name__)

LEGACY_SKILL_PREFIX = "experience_skill_"
DUNGEON_SKILL_KEY = "SKILL_DUNGEONEERING"


# ── Result type ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ReconciledMember:
    """Canonical values extracted from one member record.

    Attributes:
        purse:         Purse coins, or ``None`` if no layout had a number.
        skills:        Skill levels from the first layout that had any.
        challenges:    Slayer levels from the first layout that had any.
        fairy_souls:   Collected fairy souls, or ``None``.
        dungeon_level: Catacombs level (<= 50), or ``None``.
        last_save:     Member ``last_save`` as UTC datetime, or ``None``.
    """

    purse: Optional[float] = None
    skills: list[SkillLevel] = field(default_factory=list)
    challenges: list[ChallengeLevel] = field(default_factory=list)
    fairy_souls: Optional[int] = None
    dungeon_level: Optional[int] = None
    last_save: Optional[datetime] = None

    @property
    def missing_lists(self) -> tuple[str, ...]:
        """Names of the lists the fallback source may backfill."""
        missing = []
        if not self.skills:
            missing.append("skills")
        if not self.challenges:
            missing.append("challenges")
        return tuple(missing)

    def needs_fallback(self, display_name: Optional[str]) -> bool:
        """True if a list is empty and there is a name to query the fallback with."""
        return bool(self.missing_lists) and bool(display_name)


# ── Purse ─────────────────────────────────────────────────────────────────────

def _coins(value: Any) -> Optional[float]:
    number = as_number(value)
    return number if number is not None and number >= 0 else None


def _purse_from_currencies(member: Mapping[str, Any]) -> Optional[float]:
    return _coins(dig(member, "currencies", "coin_purse"))


def _purse_from_coin_purse(member: Mapping[str, Any]) -> Optional[float]:
    return _coins(member.get("coin_purse"))


def _purse_from_legacy_purse(member: Mapping[str, Any]) -> Optional[float]:
    return _coins(member.get("purse"))


PURSE_LAYOUTS = (
    _purse_from_currencies,
    _purse_from_coin_purse,
    _purse_from_legacy_purse,
)


# ── Skills ────────────────────────────────────────────────────────────────────

def _skills_from_player_data(
    member: Mapping[str, Any], provider: LevelTableProvider
) -> list[SkillLevel]:
    """``player_data.experience.SKILL_FARMING`` (dungeoneering excluded)."""
    skills = skill_list(provider)
    experience = as_mapping(dig(member, "player_data", "experience"))
    if experience is None:
        return []
    for key, xp in experience.items():
        if isinstance(key, str) and key.upper() == DUNGEON_SKILL_KEY:
            continue
        skills.add(key, xp)
    return skills.entries()


def _skills_from_legacy_fields(
    member: Mapping[str, Any], provider: LevelTableProvider
) -> list[SkillLevel]:
    """``experience_skill_farming`` or ``experience_skill_FARMING`` per known skill."""
    skills = skill_list(provider)
    for key in SKILL_KEYS:
        xp = member.get(f"{LEGACY_SKILL_PREFIX}{key}")
        if xp is None:
            xp = member.get(f"{LEGACY_SKILL_PREFIX}{key.upper()}")
        skills.add(key, xp)
    return skills.entries()


def _skills_from_nested_objects(
    member: Mapping[str, Any], provider: LevelTableProvider
) -> list[SkillLevel]:
    """``skills.farming.experience`` or ``skills.farming.xp``."""
    skills = skill_list(provider)
    nested = as_mapping(member.get("skills"))
    if nested is None:
        return []
    for key, value in nested.items():
        if not isinstance(value, Mapping):
            continue
        xp = value.get("experience")
        if xp is None:
            xp = value.get("xp")
        skills.add(key, xp)
    return skills.entries()


def _skills_from_field_scan(
    member: Mapping[str, Any], provider: LevelTableProvider
) -> list[SkillLevel]:
    """Any ``experience_skill_*`` field, including skills not in ``SKILL_KEYS``."""
    skills = skill_list(provider)
    for key, xp in member.items():
        if isinstance(key, str) and key.lower().startswith(LEGACY_SKILL_PREFIX):
            skills.add(key, xp)
    return skills.entries()


SKILL_LAYOUTS = (
    _skills_from_player_data,
    _skills_from_legacy_fields,
    _skills_from_nested_objects,
    _skills_from_field_scan,
)


# ── Slayer boss challenges ────────────────────────────────────────────────────

def _boss_xp(boss: Mapping[str, Any]) -> Any:
    for key in ("xp", "total_experience", "total_exp"):
        value = boss.get(key)
        if value is not None:
            return value
    return None


def challenges_from_mapping(
    bosses: Optional[Mapping[str, Any]], provider: LevelTableProvider
) -> list[ChallengeLevel]:
    """Read boss entries: known bosses first, every key if none of those match."""
    if bosses is None:
        return []

    challenges = challenge_list(provider)
    for key in CHALLENGE_KEYS:
        boss = bosses.get(key)
        if isinstance(boss, Mapping):
            challenges.add(key, _boss_xp(boss))

    if not len(challenges):
        for key, boss in bosses.items():
            if isinstance(boss, Mapping):
                challenges.add(key, _boss_xp(boss))
    return challenges.entries()


def _challenges_from_nested_slayer(
    member: Mapping[str, Any], provider: LevelTableProvider
) -> list[ChallengeLevel]:
    return challenges_from_mapping(as_mapping(dig(member, "slayer", "slayer_bosses")), provider)


def _challenges_from_flat_slayer_bosses(
    member: Mapping[str, Any], provider: LevelTableProvider
) -> list[ChallengeLevel]:
    return challenges_from_mapping(as_mapping(member.get("slayer_bosses")), provider)


def _challenges_from_slayer_as_bosses(
    member: Mapping[str, Any], provider: LevelTableProvider
) -> list[ChallengeLevel]:
    slayer = as_mapping(member.get("slayer"))
    if slayer is None or "slayer_bosses" in slayer:
        return []
    return challenges_from_mapping(slayer, provider)


CHALLENGE_LAYOUTS = (
    _challenges_from_nested_slayer,
    _challenges_from_flat_slayer_bosses,
    _challenges_from_slayer_as_bosses,
)


# ── Fairy souls ───────────────────────────────────────────────────────────────

def _count(value: Any) -> Optional[int]:
    number = as_number(value)
    return int(number) if number is not None and number >= 0 else None


FAIRY_SOUL_LAYOUTS = (
    lambda member: _count(dig(member, "fairy_soul", "total_collected")),
    lambda member: _count(member.get("fairy_souls_collected")),
    lambda member: _count(member.get("fairy_souls")),
)


# ── Dungeons ──────────────────────────────────────────────────────────────────

# Key paths to Catacombs experience, in priority order.
CATACOMBS_XP_PATHS: tuple[tuple[str, ...], ...] = (
    ("dungeons", "dungeon_types", "catacombs", "experience"),
    ("dungeons", "dungeons", "dungeon_types", "catacombs", "experience"),
    ("dungeon_types", "catacombs", "experience"),
    ("dungeons", "dungeon_types", "catacombs_exp"),
    ("dungeons", "dungeons", "dungeon_types", "catacombs_exp"),
    ("dungeon_types", "catacombs_exp"),
    ("experience_dungeon_types_catacombs",),
    ("dungeons", "catacombs", "experience"),
)


def _catacombs_xp_at(path: tuple[str, ...]):
    def extract(member: Mapping[str, Any]) -> Optional[float]:
        return as_positive_number(dig(member, *path))

    extract.__name__ = f"catacombs_xp_{'_'.join(path)}"
    return extract


CATACOMBS_LAYOUTS = tuple(_catacombs_xp_at(path) for path in CATACOMBS_XP_PATHS)


def dungeon_level_for(xp: float) -> int:
    """Catacombs level on the generic skill curve, capped at 50."""
    return level_for(xp, SKILL_XP_LEVELS, cap=MAX_DUNGEON_LEVEL)


# ── Entry point ───────────────────────────────────────────────────────────────

def reconcile_member(
    member: Optional[Mapping[str, Any]],
    provider: LevelTableProvider,
) -> ReconciledMember:
    """Extract canonical values from a member record of unknown schema.

    Pure with respect to ``member``: the same record and the same provider
    tables always give the same result.

    Args:
        member: The located member record, or ``None``.
        provider: Source of skill and slayer threshold tables.

    Returns:
        ``ReconciledMember``; every field is empty/``None`` for a ``None``
        member.
    """
    if member is None:
        return ReconciledMember()

    skills = first_hit(SKILL_LAYOUTS, member, provider) or []
    challenges = first_hit(CHALLENGE_LAYOUTS, member, provider) or []
    catacombs_xp = first_hit(CATACOMBS_LAYOUTS, member)

    result = ReconciledMember(
        purse=first_hit(PURSE_LAYOUTS, member),
        skills=skills,
        challenges=challenges,
        fairy_souls=first_hit(FAIRY_SOUL_LAYOUTS, member),
        dungeon_level=dungeon_level_for(catacombs_xp) if catacombs_xp is not None else None,
        last_save=from_epoch_millis(member.get("last_save")),
    )
    logger.debug(
        "Reconciled member: %d skills, %d challenges, dungeon_level=%s, missing=%s",
        len(result.skills), len(result.challenges), result.dungeon_level,
        result.missing_lists,
    )
    return result
