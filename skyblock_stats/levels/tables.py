"""
Static experience-threshold tables.

A threshold table is a non-decreasing tuple of cumulative experience values:
index ``i`` is the experience needed to reach level ``i + 1``, so the table's
length is the highest level it can express.

``SKILL_XP_LEVELS`` mirrors the generic skill curve and is used for every
skill the remote resources endpoint did not describe, and for Catacombs.
Slayer boss thresholds are fixed game constants and are never fetched.
"""

from __future__ import annotations

ExperienceThresholdTable = tuple[float, ...]

MAX_SKILL_LEVEL = 60
MAX_DUNGEON_LEVEL = 50

SKILL_XP_LEVELS: ExperienceThresholdTable = (
    0, 50, 125, 200, 300, 500, 750, 1_000, 1_500, 2_000,
    3_500, 5_000, 7_500, 10_000, 15_000, 20_000, 30_000, 50_000, 75_000, 100_000,
    200_000, 300_000, 400_000, 500_000, 600_000, 700_000, 800_000, 900_000, 1_000_000,
    1_100_000, 1_200_000, 1_300_000, 1_400_000, 1_500_000, 1_600_000, 1_700_000,
    1_800_000, 1_900_000, 2_000_000, 2_100_000, 2_200_000, 2_300_000, 2_400_000,
    2_500_000, 2_600_000, 2_750_000, 2_900_000, 3_100_000, 3_400_000, 3_700_000,
    4_000_000, 4_300_000, 4_600_000, 4_900_000, 5_200_000, 5_500_000, 5_800_000,
    6_100_000, 6_400_000, 6_700_000, 7_000_000,
)

# Probe order for slayer boss mappings.
CHALLENGE_KEYS: tuple[str, ...] = ("zombie", "spider", "wolf", "enderman", "blaze", "vampire")

CHALLENGE_XP_LEVELS: dict[str, ExperienceThresholdTable] = {
    "zombie":   (0, 5, 15, 200, 1_000, 5_000, 20_000, 100_000, 400_000, 1_000_000),
    "spider":   (0, 5, 25, 200, 1_000, 5_000, 20_000, 100_000, 400_000, 1_000_000),
    "wolf":     (0, 10, 30, 250, 1_500, 5_000, 20_000, 100_000, 400_000, 1_000_000),
    "enderman": (0, 10, 30, 250, 1_500, 5_000, 20_000, 100_000, 400_000, 1_000_000),
    "blaze":    (0, 10, 25, 250, 1_500, 5_000, 20_000, 100_000, 400_000, 1_000_000),
    "vampire":  (0, 20, 75, 240, 840, 2_400),
}

# Skill ids Hypixel has exposed over time, in display order.
SKILL_KEYS: tuple[str, ...] = (
    "farming", "mining", "combat", "foraging", "fishing", "enchanting",
    "alchemy", "taming", "carpentry", "runecrafting", "social", "hunting",
)

SKILL_DISPLAY_NAMES: dict[str, str] = {key: key.title() for key in SKILL_KEYS}
