"""
SkyCrypt community aggregator client — fallback source for skills and slayers.

Site:  https://sky.shiiyu.moe
API:   GET /api/v2/profile/{display_name}   (no key required)

SkyCrypt keys everything by display name and mirrors the legacy member shape
(flat ``experience_skill_*`` fields, ``slayer_bosses``). Its ``profiles``
value has been served both as a list and as a mapping of profile id to
profile; both are accepted.

Only skill and slayer lists are taken from here. Purse, bank, fairy souls and
dungeon data are never read: the aggregator does not report them reliably.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional
from urllib.parse import quote

import httpx

from skyblock_stats.levels.entries import skill_list
from skyblock_stats.levels.provider import LevelTableProvider
from skyblock_stats.models.stats import ChallengeLevel, SkillLevel
from skyblock_stats.pipeline.reconcile import LEGACY_SKILL_PREFIX, challenges_from_mapping
from skyblock_stats.utils.json_paths import as_mapping

logger = logging.getLogger(__name__)


# ── Response types ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FallbackStats:
    """Skill and slayer lists recovered from the aggregator."""

    skills: list[SkillLevel] = field(default_factory=list)
    challenges: list[ChallengeLevel] = field(default_factory=list)


# ── Client ─────────────────────────────────────────────────────────────────────

class SkyCryptClient:
    """Async client for the SkyCrypt profile API.

    Usage::

        async with httpx.AsyncClient() as http:
            client = SkyCryptClient(http)
            fallback = await client.fetch_fallback("Technoblade")

    ``fetch_fallback`` never raises; every failure is logged and returned as
    ``None``.
    """

    SOURCE: ClassVar[str] = "skycrypt"
    DEFAULT_BASE_URL: ClassVar[str] = "https://sky.shiiyu.moe"

    def __init__(
        self,
        http: httpx.AsyncClient,
        provider: Optional[LevelTableProvider] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        """Initialise the SkyCrypt client.

        Args:
            http: Shared async HTTP client; the caller owns its lifecycle.
            provider: Threshold tables for level conversion. Defaults to
                static tables only.
            base_url: Site root.
            timeout: Per-request timeout in seconds.
        """
        self._http = http
        self.provider = provider if provider is not None else LevelTableProvider(fetch_remote=False)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def profile_url(self, display_name: str) -> str:
        """Public stats page for a player."""
        return profile_url(display_name, self.base_url)

    async def fetch_fallback(self, display_name: str) -> Optional[FallbackStats]:
        """Fetch skills and slayers for a player by display name.

        Returns:
            ``FallbackStats`` with at least one non-empty list, or ``None`` on
            network failure, non-2xx status, undecodable body, no member, or
            no usable data.
        """
        if not isinstance(display_name, str) or not display_name:
            return None

        path = f"/api/v2/profile/{quote(display_name, safe='')}"
        try:
            resp = await self._http.get(f"{self.base_url}{path}", timeout=self.timeout)
        except httpx.HTTPError as exc:
            logger.warning("SkyCrypt request failed for %s: %r", display_name, exc)
            return None

        if resp.is_error:
            logger.info("SkyCrypt returned HTTP %d for %s", resp.status_code, display_name)
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.warning("SkyCrypt returned a non-JSON body for %s", display_name)
            return None

        member = _first_member(_select_profile(data))
        if member is None:
            logger.info("SkyCrypt has no member data for %s", display_name)
            return None

        result = self._parse_member(member)
        if not result.skills and not result.challenges:
            return None
        logger.info(
            "SkyCrypt fallback for %s: %d skills, %d challenges",
            display_name, len(result.skills), len(result.challenges),
        )
        return result

    # ── Response parsers ───────────────────────────────────────────────────────

    def _parse_member(self, member: Mapping[str, Any]) -> FallbackStats:
        skills = skill_list(self.provider)
        for key, xp in member.items():
            if isinstance(key, str) and key.lower().startswith(LEGACY_SKILL_PREFIX):
                skills.add(key, xp)

        bosses = as_mapping(member.get("slayer_bosses"))
        if bosses is None:
            bosses = as_mapping(member.get("slayer"))
        challenges = challenges_from_mapping(bosses, self.provider)
        return FallbackStats(skills=skills.entries(), challenges=challenges)


def profile_url(display_name: str, base_url: str = SkyCryptClient.DEFAULT_BASE_URL) -> str:
    """``https://sky.shiiyu.moe/stats/<name>``, with the name URL-quoted."""
    return f"{base_url.rstrip('/')}/stats/{quote(display_name, safe='')}"


def _select_profile(data: Any) -> Optional[Mapping[str, Any]]:
    """The ``selected`` profile, else the first one."""
    profiles = data.get("profiles") if isinstance(data, Mapping) else None
    if isinstance(profiles, Mapping):
        candidates = list(profiles.values())
    elif isinstance(profiles, list):
        candidates = profiles
    else:
        return None

    candidates = [p for p in candidates if isinstance(p, Mapping)]
    if not candidates:
        return None
    return next((p for p in candidates if p.get("selected")), candidates[0])


def _first_member(profile: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """SkyCrypt responses are scoped to one account; its member comes first."""
    members = as_mapping(profile.get("members")) if profile is not None else None
    if not members:
        return None
    member = next(iter(members.values()))
    return member if isinstance(member, Mapping) else None
