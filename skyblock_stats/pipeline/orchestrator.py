"""
Stats orchestration — one player id in, one ``CanonicalPlayerStats`` out.

The ``StatsOrchestrator`` runs a fixed sequence per request:

  Step 1 — Identity:    Normalize the id into compact + hyphenated forms.
  Step 2 — Summary:     GET /v2/skyblock/profiles; stop if failed or empty.
  Step 3 — Select:      Pick the ``selected`` profile, else the first.
  Step 4 — Purse seed:  Locate the member in the summary for an initial purse.
  Step 5 — Detail:      GET /v2/skyblock/profile for the selected profile,
                        concurrently with the level-table load. Summaries
                        can omit skill, slayer and dungeon data.
  Step 6 — Reconcile:   Re-locate the member in the detail (preferred) and
                        reconcile it against the level tables.
  Step 7 — Fallback:    If skills or challenges are empty and a display name
                        is available, ask SkyCrypt and fill only the empty
                        list(s).
  Step 8 — Assemble:    Build the frozen record.

Failure handling
----------------
- Summary failure / no profiles:  ``None``.
- Detail failure:                 Logged; the summary member is used.
- Level-table failure:            Static tables (inside the provider).
- Fallback failure:               Lists stay as reconciled.
- Anything else:                  Logged; ``None``. Callers never see a raise.

No retries anywhere; each upstream call gets one bounded attempt.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Mapping
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from skyblock_stats.config import AppConfig, HypixelConfig, load_config
from skyblock_stats.ingestion.errors import NotFound, UpstreamUnavailable
from skyblock_stats.ingestion.hypixel_client import HypixelClient, PlayerAccount
from skyblock_stats.ingestion.skycrypt_client import FallbackStats, SkyCryptClient
from skyblock_stats.levels.provider import LevelTableCache, LevelTableProvider
from skyblock_stats.models.identity import PlayerIdentity, normalize_identity
from skyblock_stats.models.stats import CanonicalPlayerStats
from skyblock_stats.pipeline.locate import find_member
from skyblock_stats.pipeline.reconcile import PURSE_LAYOUTS, ReconciledMember, reconcile_member
from skyblock_stats.utils.json_paths import as_number, dig, first_hit

logger = logging.getLogger(__name__)

# Shared by every orchestrator built without an explicit cache.
_PROCESS_LEVEL_CACHE = LevelTableCache()


def select_profile(profiles: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """The profile flagged ``selected``, else the first one."""
    if not profiles:
        return None
    return next((p for p in profiles if p.get("selected")), profiles[0])


def _bank_balance(profile: Mapping[str, Any]) -> float:
    balance = as_number(dig(profile, "banking", "balance"))
    return balance if balance is not None and balance >= 0 else 0.0


class StatsOrchestrator:
    """Compose the clients, provider, and reconciler into one request.

    Args:
        config: Application configuration.
        http: Optional shared ``httpx.AsyncClient``; when omitted, each
            request opens and closes its own.
        level_cache: Threshold-table cache. Defaults to one cache shared by
            the whole process.
    """

    def __init__(
        self,
        config: AppConfig,
        http: Optional[httpx.AsyncClient] = None,
        level_cache: Optional[LevelTableCache] = None,
    ) -> None:
        self.config = config
        self._http = http
        self.level_cache = level_cache if level_cache is not None else _PROCESS_LEVEL_CACHE

    # ── Composition ────────────────────────────────────────────────────────────

    def _hypixel(self, http: httpx.AsyncClient) -> HypixelClient:
        cfg = self.config.hypixel
        return HypixelClient(
            http, api_key=cfg.api_key, base_url=cfg.base_url, timeout=cfg.timeout_seconds
        )

    def _provider(self, hypixel: HypixelClient) -> LevelTableProvider:
        return LevelTableProvider(
            cache=self.level_cache,
            client=hypixel,
            fetch_remote=self.config.levels.fetch_remote_tables,
        )

    def _skycrypt(self, http: httpx.AsyncClient, provider: LevelTableProvider) -> SkyCryptClient:
        cfg = self.config.fallback
        return SkyCryptClient(
            http, provider=provider, base_url=cfg.base_url, timeout=cfg.timeout_seconds
        )

    # ── Public API ─────────────────────────────────────────────────────────────

    async def get_player_stats(
        self,
        player_id: str,
        display_name: Optional[str] = None,
    ) -> Optional[CanonicalPlayerStats]:
        """Build the canonical stats record for a player's active profile.

        Args:
            player_id: Player UUID, hyphenated or compact.
            display_name: Player name; enables the SkyCrypt fallback.

        Returns:
            ``CanonicalPlayerStats``, or ``None`` when no record can be built.
        """
        if not self.config.hypixel.has_api_key:
            logger.warning("HYPIXEL_API_KEY is not set; cannot fetch stats for %s", player_id)
            return None

        identity = normalize_identity(player_id)
        if not identity.is_valid:
            logger.info("Player id %r is malformed; lookups will likely miss", player_id)

        try:
            if self._http is not None:
                return await self._build(self._http, identity, display_name)
            async with httpx.AsyncClient() as http:
                return await self._build(http, identity, display_name)
        except UpstreamUnavailable as exc:
            logger.warning("Stats for %s unavailable: %s", identity, exc)
        except NotFound as exc:
            logger.info("Stats for %s not found: %s", identity, exc)
        except (httpx.HTTPError, ValidationError, ValueError, TypeError, KeyError) as exc:
            logger.error("Stats for %s failed: %r", identity, exc)
        return None

    async def get_player(self, player_id: str) -> Optional[PlayerAccount]:
        """Look up a player's network account, or ``None``."""
        if not self.config.hypixel.has_api_key:
            logger.warning("HYPIXEL_API_KEY is not set; cannot look up %s", player_id)
            return None

        identity = normalize_identity(player_id)
        try:
            if self._http is not None:
                return await self._hypixel(self._http).fetch_player(identity)
            async with httpx.AsyncClient() as http:
                return await self._hypixel(http).fetch_player(identity)
        except UpstreamUnavailable as exc:
            logger.warning("Account %s unavailable: %s", identity, exc)
        except NotFound as exc:
            logger.info("Account %s not found: %s", identity, exc)
        return None

    # ── Steps ──────────────────────────────────────────────────────────────────

    async def _build(
        self,
        http: httpx.AsyncClient,
        identity: PlayerIdentity,
        display_name: Optional[str],
    ) -> Optional[CanonicalPlayerStats]:
        hypixel = self._hypixel(http)
        provider = self._provider(hypixel)

        profiles = await hypixel.fetch_profiles(identity)
        profile = select_profile(profiles)
        if profile is None:
            logger.info("No SkyBlock profiles for %s", identity)
            return None

        summary_member = find_member(profile.get("members"), identity)
        summary_purse = reconcile_purse(summary_member)

        detail_member: Optional[Mapping[str, Any]] = None
        profile_id = profile.get("profile_id")
        if isinstance(profile_id, str) and profile_id:
            detail, _ = await asyncio.gather(
                self._fetch_detail(hypixel, profile_id),
                provider.ensure_loaded(),
            )
            if detail is not None:
                detail_member = find_member(detail.get("members"), identity)
        else:
            await provider.ensure_loaded()

        member = detail_member if detail_member is not None else summary_member
        if member is None:
            logger.info("Member %s not present in profile %s", identity, profile_id)

        reconciled = reconcile_member(member, provider)
        purse = reconciled.purse or summary_purse or 0.0

        fallback: Optional[FallbackStats] = None
        if reconciled.missing_lists:
            name = display_name or await self._resolve_display_name(hypixel, identity)
            if reconciled.needs_fallback(name) and self.config.fallback.enabled:
                fallback = await self._skycrypt(http, provider).fetch_fallback(name)

        return assemble_stats(profile, reconciled, purse, fallback)

    async def _fetch_detail(
        self, hypixel: HypixelClient, profile_id: str
    ) -> Optional[dict[str, Any]]:
        """Profile detail, or ``None`` so the summary member is used instead."""
        try:
            return await hypixel.fetch_profile(profile_id)
        except (UpstreamUnavailable, NotFound) as exc:
            logger.warning("Profile detail %s unavailable, using summary: %s", profile_id, exc)
            return None

    async def _resolve_display_name(
        self, hypixel: HypixelClient, identity: PlayerIdentity
    ) -> Optional[str]:
        if not (self.config.fallback.enabled and self.config.fallback.resolve_display_name):
            return None
        try:
            account = await hypixel.fetch_player(identity)
        except (UpstreamUnavailable, NotFound) as exc:
            logger.info("Could not resolve display name for %s: %s", identity, exc)
            return None
        return account.display_name


def reconcile_purse(member: Optional[Mapping[str, Any]]) -> Optional[float]:
    """Purse from a summary member, without touching skills or tables."""
    if member is None:
        return None
    return first_hit(PURSE_LAYOUTS, member)


def assemble_stats(
    profile: Mapping[str, Any],
    reconciled: ReconciledMember,
    purse: float,
    fallback: Optional[FallbackStats] = None,
) -> CanonicalPlayerStats:
    """Merge reconciled values, profile-level fields and any fallback lists.

    Fallback lists only replace lists that reconciled empty; a fallback that
    supplies just one kind leaves the other empty.
    """
    skills = reconciled.skills
    challenges = reconciled.challenges
    fallback_used = False
    if fallback is not None:
        if not skills and fallback.skills:
            skills = fallback.skills
            fallback_used = True
        if not challenges and fallback.challenges:
            challenges = fallback.challenges
            fallback_used = True

    cute_name = profile.get("cute_name")
    game_mode = profile.get("game_mode")
    profile_id = profile.get("profile_id")
    return CanonicalPlayerStats(
        purse=purse,
        bank=_bank_balance(profile),
        profile_name=cute_name if isinstance(cute_name, str) and cute_name else "Unknown",
        profile_id=profile_id if isinstance(profile_id, str) else None,
        game_mode=game_mode if isinstance(game_mode, str) else None,
        last_save=reconciled.last_save,
        skills=skills,
        challenges=challenges,
        fairy_souls=reconciled.fairy_souls,
        dungeon_level=reconciled.dungeon_level,
        fallback_used=fallback_used,
    )


def get_player_stats(
    player_id: str,
    display_name: Optional[str] = None,
    config: Optional[AppConfig] = None,
) -> Optional[CanonicalPlayerStats]:
    """Synchronous entry point: canonical stats for a player, or ``None``.

    Uses ``load_config()`` when no config is given, falling back to built-in
    defaults plus ``HYPIXEL_API_KEY`` when no config file exists. An invalid
    config file or env override is logged and yields ``None``. Shares the
    process-wide level-table cache. Must not be called from inside a running
    event loop; use ``StatsOrchestrator.get_player_stats`` there.
    """
    if config is None:
        try:
            config = load_config()
        except FileNotFoundError as exc:
            logger.info("%s; using built-in defaults", exc)
            config = AppConfig(hypixel=HypixelConfig(api_key=os.environ.get("HYPIXEL_API_KEY")))
        except ValueError as exc:
            logger.error("Configuration is invalid, not fetching stats: %s", exc)
            return None
    return asyncio.run(StatsOrchestrator(config).get_player_stats(player_id, display_name))
