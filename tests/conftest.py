"""
Shared pytest fixtures for the SkyBlock stats test suite.

Provides:
  - ``FakeUpstream``: an ``httpx.MockTransport`` handler that routes by URL
    path to canned JSON bodies (or raises), recording every request.
  - ``run_http``: runs a coroutine factory against an ``httpx.AsyncClient``
    wired to a ``FakeUpstream``.
  - ``static_provider`` / ``app_config`` and sample member records in the
    different schema generations.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

import httpx
import pytest

from skyblock_stats.config import AppConfig, FallbackConfig, HypixelConfig
from skyblock_stats.levels.provider import LevelTableProvider

HYPIXEL_BASE = "https://api.hypixel.test"
SKYCRYPT_BASE = "https://sky.test"


# ── Fake upstream ─────────────────────────────────────────────────────────────

class FakeUpstream:
    """Path-routed request handler for ``httpx.MockTransport``.

    Unrouted paths answer 404 with a Hypixel-style failure envelope.
    """

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Any, Optional[type[Exception]]]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        path: str,
        body: Any = None,
        status: int = 200,
        raises: Optional[type[Exception]] = None,
    ) -> "FakeUpstream":
        self.routes[path] = (status, body, raises)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"success": False, "cause": "No route"})
        status, body, raises = route
        if raises is not None:
            raise raises("simulated failure", request=request)
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def last(self, path: str) -> httpx.Request:
        return [r for r in self.requests if r.url.path == path][-1]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def run_http(upstream: FakeUpstream) -> Callable[[Callable[[httpx.AsyncClient], Awaitable[Any]]], Any]:
    """Run ``factory(http)`` to completion with a mock-backed async client."""

    def _run(factory: Callable[[httpx.AsyncClient], Awaitable[Any]]) -> Any:
        async def _main() -> Any:
            async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as http:
                return await factory(http)

        return asyncio.run(_main())

    return _run


# ── Config / provider ─────────────────────────────────────────────────────────

@pytest.fixture
def app_config() -> AppConfig:
    """Config pointing at the fake hosts, with an API key set."""
    return AppConfig(
        hypixel=HypixelConfig(api_key="test-key", base_url=HYPIXEL_BASE, timeout_seconds=2.0),
        fallback=FallbackConfig(base_url=SKYCRYPT_BASE, timeout_seconds=2.0),
    )


@pytest.fixture
def static_provider() -> LevelTableProvider:
    """Provider that never fetches: generic skill curve + slayer tables."""
    return LevelTableProvider(fetch_remote=False)


# ── Sample member records ─────────────────────────────────────────────────────

@pytest.fixture
def v2_member() -> dict[str, Any]:
    """A current-generation member record."""
    return {
        "currencies": {"coin_purse": 1_234.5},
        "player_data": {
            "experience": {
                "SKILL_FARMING": 100_000,
                "SKILL_MINING": 300,
                "SKILL_DUNGEONEERING": 500_000,
            }
        },
        "slayer": {
            "slayer_bosses": {
                "zombie": {"xp": 15},
                "wolf": {"xp": 250},
            }
        },
        "fairy_soul": {"total_collected": 42},
        "dungeons": {"dungeon_types": {"catacombs": {"experience": 100_000}}},
        "last_save": 1_700_000_000_000,
    }


@pytest.fixture
def legacy_member() -> dict[str, Any]:
    """A pre-v2 member record with flat fields."""
    return {
        "coin_purse": 77.0,
        "experience_skill_combat": 2_000,
        "experience_skill_FISHING": 125,
        "slayer_bosses": {"spider": {"total_experience": 25}},
        "fairy_souls_collected": 12,
        "experience_dungeon_types_catacombs": 50,
    }

