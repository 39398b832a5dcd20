"""
Canonical player-statistics records.

Whatever schema generation the upstream member record was in, the pipeline
emits exactly these shapes:

  - ``SkillLevel``            — one skill with its converted level.
  - ``ChallengeLevel``        — one slayer boss challenge with its level.
  - ``CanonicalPlayerStats``  — the complete record handed to consumers.

All models are frozen. Validators enforce the record invariants: levels are
at least 1, every numeric field is finite and non-negative, and the skill and
challenge lists hold at most one entry per case-insensitive name.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


def _check_finite_non_negative(v: Optional[float], field_name: str) -> Optional[float]:
    if v is None:
        return v
    if not math.isfinite(v) or v < 0:
        raise ValueError(f"{field_name} must be finite and non-negative, got {v}.")
    return v


class SkillLevel(BaseModel):
    """A skill's experience and the level it converts to.

    Attributes:
        name: Canonical display name, e.g. ``"Farming"``, ``"Social"``.
        level: Level derived from ``xp``; never below 1.
        xp: Cumulative experience as reported upstream.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    level: int
    xp: float

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"level must be >= 1, got {v}.")
        return v

    @field_validator("xp")
    @classmethod
    def validate_xp(cls, v: float) -> float:
        return _check_finite_non_negative(v, "xp")


class ChallengeLevel(SkillLevel):
    """A slayer boss challenge (zombie, spider, wolf, ...) and its level."""


def _check_unique_names(entries: list[SkillLevel], label: str) -> list[SkillLevel]:
    seen: set[str] = set()
    for entry in entries:
        key = entry.name.lower()
        if key in seen:
            raise ValueError(f"Duplicate {label} name '{entry.name}'.")
        seen.add(key)
    return entries


class CanonicalPlayerStats(BaseModel):
    """One player's SkyBlock statistics on their active profile.

    Attributes:
        purse: Coins carried in the purse.
        bank: Shared bank balance of the profile.
        profile_name: Profile cute name (``"Apple"``, ``"Banana"``...), or
            ``"Unknown"``.
        profile_id: Upstream profile id, when known.
        game_mode: ``"ironman"``, ``"bingo"``, ... ``None`` for classic.
        last_save: When the member record was last saved (UTC).
        skills: Skill levels, one per canonical name.
        challenges: Slayer boss levels, one per canonical name.
        fairy_souls: Collected fairy souls.
        dungeon_level: Catacombs level (capped at 50).
        fallback_used: ``True`` if any list came from the fallback source.
    """

    model_config = ConfigDict(frozen=True)

    purse: float = 0.0
    bank: float = 0.0
    profile_name: str = "Unknown"
    profile_id: Optional[str] = None
    game_mode: Optional[str] = None
    last_save: Optional[datetime] = None
    skills: list[SkillLevel] = []
    challenges: list[ChallengeLevel] = []
    fairy_souls: Optional[int] = None
    dungeon_level: Optional[int] = None
    fallback_used: bool = False

    @field_validator("purse", "bank")
    @classmethod
    def validate_coins(cls, v: float, info) -> float:
        return _check_finite_non_negative(v, info.field_name)

    @field_validator("fairy_souls", "dungeon_level")
    @classmethod
    def validate_counts(cls, v: Optional[int], info) -> Optional[int]:
        return _check_finite_non_negative(v, info.field_name)

    @field_validator("skills")
    @classmethod
    def validate_unique_skills(cls, v: list[SkillLevel]) -> list[SkillLevel]:
        return _check_unique_names(v, "skill")

    @field_validator("challenges")
    @classmethod
    def validate_unique_challenges(cls, v: list[ChallengeLevel]) -> list[ChallengeLevel]:
        return _check_unique_names(v, "challenge")

    def skill(self, name: str) -> Optional[SkillLevel]:
        """Look a skill up by case-insensitive name."""
        key = name.lower()
        return next((s for s in self.skills if s.name.lower() == key), None)

    def challenge(self, name: str) -> Optional[ChallengeLevel]:
        """Look a boss challenge up by case-insensitive name."""
        key = name.lower()
        return next((c for c in self.challenges if c.name.lower() == key), None)
