"""
SkyBlock stats — canonical player statistics from versioned Hypixel payloads.

Consumer entry point::

    from skyblock_stats import get_player_stats

    stats = get_player_stats("069a79f444e94726a5befca90e38aaf5", display_name="Notch")
    if stats is not None:
        print(stats.profile_name, stats.purse, [s.name for s in stats.skills])
"""

from skyblock_stats.models.stats import CanonicalPlayerStats, ChallengeLevel, SkillLevel
from skyblock_stats.pipeline.orchestrator import StatsOrchestrator, get_player_stats

__version__ = "0.1.0"

__all__ = [
    "CanonicalPlayerStats",
    "ChallengeLevel",
    "SkillLevel",
    "StatsOrchestrator",
    "get_player_stats",
]
