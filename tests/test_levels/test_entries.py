"""
Tests for skyblock_stats/levels/entries.py — naming and LevelList.
"""

from __future__ import annotations

import pytest

from skyblock_stats.levels.entries import (
    canonical_key,
    challenge_list,
    display_name,
    make_challenge,
    make_skill,
    skill_list,
)
from skyblock_stats.levels.provider import LevelTableCache, LevelTableProvider


class TestNaming:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("SKILL_FARMING", "farming"),
            ("experience_skill_FARMING", "farming"),
            ("experience_skill_runecrafting", "runecrafting"),
            ("  Mining ", "mining"),
            ("zombie", "zombie"),
        ],
    )
    def test_canonical_key(self, raw, expected):
        assert canonical_key(raw) == expected

    def test_display_name_known(self):
        assert display_name("farming") == "Farming"

    def test_display_name_unknown_multiword(self):
        assert display_name("fishing_festival") == "Fishing Festival"


class TestMakeEntries:
    def test_skill_capped_at_sixty(self, static_provider):
        assert make_skill(static_provider, "SKILL_FARMING", 10**9).level == 60

    def test_skill_uses_dynamic_table(self):
        provider = LevelTableProvider(cache=LevelTableCache({"farming": (50, 175, 375)}))
        assert make_skill(provider, "SKILL_FARMING", 100).level == 1
        assert make_skill(provider, "SKILL_FARMING", 200).level == 2
        assert make_skill(provider, "SKILL_FARMING", 1_000).level == 3

    def test_known_boss(self, static_provider):
        boss = make_challenge(static_provider, "wolf", 250)
        assert boss.name == "Wolf"
        assert boss.level == 4

    def test_unknown_boss_is_level_one(self, static_provider):
        boss = make_challenge(static_provider, "ghast", 999_999)
        assert boss.name == "Ghast"
        assert boss.level == 1
        assert boss.xp == 999_999


class TestLevelList:
    def test_first_entry_wins(self, static_provider):
        skills = skill_list(static_provider)
        skills.add("SKILL_FARMING", 100)
        skills.add("experience_skill_farming", 5_000)
        entries = skills.entries()
        assert len(entries) == 1
        assert entries[0].xp == 100

    @pytest.mark.parametrize("xp", [0, -5, None, True, "abc", float("nan"), {"xp": 1}])
    def test_rejects_non_positive_or_non_numeric(self, static_provider, xp):
        skills = skill_list(static_provider)
        assert skills.add("SKILL_FARMING", xp) is None
        assert len(skills) == 0

    def test_accepts_numeric_strings(self, static_provider):
        skills = skill_list(static_provider)
        entry = skills.add("experience_skill_mining", "300")
        assert entry is not None
        assert entry.level == 5

    def test_rejects_non_string_key(self, static_provider):
        bosses = challenge_list(static_provider)
        assert bosses.add(7, 100) is None

    def test_preserves_insertion_order(self, static_provider):
        bosses = challenge_list(static_provider)
        bosses.add("wolf", 10)
        bosses.add("zombie", 10)
        assert [b.name for b in bosses.entries()] == ["Wolf", "Zombie"]
