"""
Hypixel public API client — account, SkyBlock profiles, and skill resources.

API:   https://api.hypixel.net
Docs:  https://api.hypixel.net/ (OpenAPI)

Credential setup (.env, gitignored):
  HYPIXEL_API_KEY=your-key-here

Endpoints used:
  Account lookup (compact uuid, key required):
    GET /v2/player?uuid={uuid}
  Profile summaries for a player (hyphenated uuid, key required):
    GET /v2/skyblock/profiles?uuid={uuid}
  Full profile detail (key required):
    GET /v2/skyblock/profile?profile={profile_id}
  Skill level tables (no key):
    GET /v2/resources/skyblock/skills

Every response is an envelope ``{"success": bool, "cause"?: str, ...}``.
The summary listing omits skill, slayer, and dungeon data for some accounts,
which is why the orchestrator always follows it with a detail call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Optional

import httpx

from skyblock_stats.ingestion.errors import NotFound, UpstreamUnavailable
from skyblock_stats.models.identity import PlayerIdentity
from skyblock_stats.utils.time_utils import from_epoch_millis

logger = logging.getLogger(__name__)


# ── Response types ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlayerAccount:
    """A network-level player account as returned by ``/v2/player``."""

    uuid: str
    display_name: Optional[str] = None
    rank: Optional[str] = None
    package_rank: Optional[str] = None
    monthly_package_rank: Optional[str] = None
    first_login: Optional[datetime] = None
    last_login: Optional[datetime] = None


# ── Client ─────────────────────────────────────────────────────────────────────

class HypixelClient:
    """Async client for the Hypixel public API.

    Usage::

        async with httpx.AsyncClient() as http:
            client = HypixelClient(http, api_key=os.environ["HYPIXEL_API_KEY"])
            profiles = await client.fetch_profiles(normalize_identity(uuid))

    Every method raises ``UpstreamUnavailable`` for transport errors,
    timeouts, undecodable bodies, and ``success: false`` envelopes. No
    retries: Hypixel rate-limits per key and a retry only burns quota.
    """

    SOURCE: ClassVar[str] = "hypixel"
    DEFAULT_BASE_URL: ClassVar[str] = "https://api.hypixel.net"

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        """Initialise the Hypixel client.

        Args:
            http: Shared async HTTP client; the caller owns its lifecycle.
            api_key: Key sent as the ``API-Key`` header on keyed endpoints.
            base_url: API root, overridable for tests and proxies.
            timeout: Per-request timeout in seconds.
        """
        self._http = http
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ── Endpoints ──────────────────────────────────────────────────────────────

    async def fetch_player(self, identity: PlayerIdentity) -> PlayerAccount:
        """Look up a player's network account.

        Raises:
            UpstreamUnavailable: On any transport or envelope failure.
            NotFound: If the envelope succeeds but carries no player.
        """
        data = await self._get_envelope("/v2/player", {"uuid": identity.compact})
        player = data.get("player")
        if not isinstance(player, dict):
            raise NotFound(self.SOURCE, f"player {identity.compact}")

        display_name = player.get("displayname")
        return PlayerAccount(
            uuid=str(player.get("uuid") or identity.compact),
            display_name=display_name if isinstance(display_name, str) and display_name else None,
            rank=player.get("rank"),
            package_rank=player.get("newPackageRank"),
            monthly_package_rank=player.get("monthlyPackageRank"),
            first_login=from_epoch_millis(player.get("firstLogin")),
            last_login=from_epoch_millis(player.get("lastLogin")),
        )

    async def fetch_profiles(self, identity: PlayerIdentity) -> list[dict[str, Any]]:
        """Fetch the summary list of a player's SkyBlock profiles.

        Returns:
            Profile dicts as received; empty if the player has none.
        """
        data = await self._get_envelope(
            "/v2/skyblock/profiles", {"uuid": identity.hyphenated}
        )
        profiles = data.get("profiles")
        if not isinstance(profiles, list):
            return []
        return [p for p in profiles if isinstance(p, dict)]

    async def fetch_profile(self, profile_id: str) -> dict[str, Any]:
        """Fetch one profile's full detail record.

        Raises:
            UpstreamUnavailable: On any transport or envelope failure.
            NotFound: If the envelope succeeds but carries no profile.
        """
        data = await self._get_envelope("/v2/skyblock/profile", {"profile": profile_id})
        profile = data.get("profile")
        if not isinstance(profile, dict):
            raise NotFound(self.SOURCE, f"profile {profile_id}")
        return profile

    async def fetch_skill_resources(self) -> dict[str, Any]:
        """Fetch the skill level tables resource. No API key is sent."""
        return await self._get_envelope(
            "/v2/resources/skyblock/skills", params=None, authenticated=False
        )

    # ── Transport ──────────────────────────────────────────────────────────────

    async def _get_envelope(
        self,
        path: str,
        params: Optional[dict[str, str]],
        authenticated: bool = True,
    ) -> dict[str, Any]:
        """GET ``path`` and unwrap the success envelope.

        Hypixel reports errors (bad key, throttled, malformed uuid) as a
        ``success: false`` body alongside a 4xx status, so the body is read
        before the status is judged.
        """
        headers = {"API-Key": self.api_key} if authenticated and self.api_key else {}
        url = f"{self.base_url}{path}"

        try:
            resp = await self._http.get(
                url, params=params, headers=headers, timeout=self.timeout
            )
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(self.SOURCE, f"{path}: {exc!r}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamUnavailable(
                self.SOURCE, f"{path}: response is not JSON", resp.status_code
            ) from exc

        if not isinstance(data, dict):
            raise UpstreamUnavailable(
                self.SOURCE, f"{path}: unexpected body type", resp.status_code
            )
        if data.get("success") is not True or resp.is_error:
            cause = data.get("cause") or f"{path}: request failed"
            raise UpstreamUnavailable(self.SOURCE, str(cause), resp.status_code)

        logger.debug("Hypixel %s ok (HTTP %d)", path, resp.status_code)
        return data
