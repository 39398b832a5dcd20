"""
Tests for skyblock_stats/ingestion/hypixel_client.py.

Uses ``httpx.MockTransport`` via the ``upstream`` / ``run_http`` fixtures;
no live network calls.
"""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from skyblock_stats.ingestion.errors import NotFound, UpstreamUnavailable
from skyblock_stats.ingestion.hypixel_client import HypixelClient
from skyblock_stats.models.identity import normalize_identity

BASE = "https://api.hypixel.test"
COMPACT = "069a79f444e94726a5befca90e38aaf5"
HYPHENATED = "069a79f4-44e9-4726-a5be-fca90e38aaf5"


def _client(http: httpx.AsyncClient, api_key: str | None = "k") -> HypixelClient:
    return HypixelClient(http, api_key=api_key, base_url=BASE + "/", timeout=1.0)


class TestFetchPlayer:
    def test_maps_account_fields(self, upstream, run_http):
        upstream.add("/v2/player", {
            "success": True,
            "player": {
                "uuid": COMPACT,
                "displayname": "Notch",
                "rank": "ADMIN",
                "newPackageRank": "MVP_PLUS",
                "monthlyPackageRank": "SUPERSTAR",
                "firstLogin": 1_700_000_000_000,
                "lastLogin": None,
            },
        })
        account = run_http(lambda http: _client(http).fetch_player(normalize_identity(HYPHENATED)))

        assert account.uuid == COMPACT
        assert account.display_name == "Notch"
        assert account.rank == "ADMIN"
        assert account.package_rank == "MVP_PLUS"
        assert account.monthly_package_rank == "SUPERSTAR"
        assert account.first_login == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        assert account.last_login is None

        request = upstream.last("/v2/player")
        assert request.url.params["uuid"] == COMPACT
        assert request.headers["API-Key"] == "k"

    @pytest.mark.parametrize("displayname", [12345, "", ["Notch"]])
    def test_non_string_display_name_is_dropped(self, upstream, run_http, displayname):
        upstream.add("/v2/player", {"success": True, "player": {"uuid": COMPACT, "displayname": displayname}})
        account = run_http(lambda http: _client(http).fetch_player(normalize_identity(COMPACT)))
        assert account.display_name is None

    def test_missing_player_is_not_found(self, upstream, run_http):
        upstream.add("/v2/player", {"success": True, "player": None})
        with pytest.raises(NotFound):
            run_http(lambda http: _client(http).fetch_player(normalize_identity(COMPACT)))


class TestFetchProfiles:
    def test_uses_hyphenated_uuid(self, upstream, run_http):
        upstream.add("/v2/skyblock/profiles", {
            "success": True,
            "profiles": [{"profile_id": "a"}, "junk", {"profile_id": "b"}],
        })
        profiles = run_http(lambda http: _client(http).fetch_profiles(normalize_identity(COMPACT)))

        assert [p["profile_id"] for p in profiles] == ["a", "b"]
        assert upstream.last("/v2/skyblock/profiles").url.params["uuid"] == HYPHENATED

    def test_null_profiles_is_empty(self, upstream, run_http):
        upstream.add("/v2/skyblock/profiles", {"success": True, "profiles": None})
        assert run_http(lambda http: _client(http).fetch_profiles(normalize_identity(COMPACT))) == []


class TestFetchProfile:
    def test_returns_profile(self, upstream, run_http):
        upstream.add("/v2/skyblock/profile", {"success": True, "profile": {"profile_id": "p1"}})
        profile = run_http(lambda http: _client(http).fetch_profile("p1"))
        assert profile == {"profile_id": "p1"}
        assert upstream.last("/v2/skyblock/profile").url.params["profile"] == "p1"

    def test_missing_profile_is_not_found(self, upstream, run_http):
        upstream.add("/v2/skyblock/profile", {"success": True})
        with pytest.raises(NotFound):
            run_http(lambda http: _client(http).fetch_profile("p1"))


class TestSkillResources:
    def test_sent_without_key(self, upstream, run_http):
        upstream.add("/v2/resources/skyblock/skills", {"success": True, "skills": {}})
        data = run_http(lambda http: _client(http).fetch_skill_resources())
        assert data["success"] is True
        assert "API-Key" not in upstream.last("/v2/resources/skyblock/skills").headers


class TestEnvelopeFailures:
    def test_success_false_carries_cause_and_status(self, upstream, run_http):
        upstream.add("/v2/skyblock/profiles", {"success": False, "cause": "Key throttle"}, status=429)
        with pytest.raises(UpstreamUnavailable) as exc_info:
            run_http(lambda http: _client(http).fetch_profiles(normalize_identity(COMPACT)))

        assert exc_info.value.source == "hypixel"
        assert exc_info.value.cause == "Key throttle"
        assert exc_info.value.status_code == 429
        assert "HTTP 429" in str(exc_info.value)

    def test_success_false_with_200(self, upstream, run_http):
        upstream.add("/v2/skyblock/profiles", {"success": False})
        with pytest.raises(UpstreamUnavailable):
            run_http(lambda http: _client(http).fetch_profiles(normalize_identity(COMPACT)))

    def test_error_status_despite_success_true(self, upstream, run_http):
        upstream.add("/v2/skyblock/profiles", {"success": True, "profiles": []}, status=503)
        with pytest.raises(UpstreamUnavailable):
            run_http(lambda http: _client(http).fetch_profiles(normalize_identity(COMPACT)))

    @pytest.mark.parametrize("body", ["<html>bad gateway</html>", b"", "[1, 2]"])
    def test_undecodable_or_wrong_shape(self, upstream, run_http, body):
        upstream.add("/v2/skyblock/profiles", body)
        with pytest.raises(UpstreamUnavailable):
            run_http(lambda http: _client(http).fetch_profiles(normalize_identity(COMPACT)))

    @pytest.mark.parametrize("exc", [httpx.ConnectError, httpx.ReadTimeout])
    def test_transport_errors(self, upstream, run_http, exc):
        upstream.add("/v2/skyblock/profiles", raises=exc)
        with pytest.raises(UpstreamUnavailable):
            run_http(lambda http: _client(http).fetch_profiles(normalize_identity(COMPACT)))

    def test_no_key_header_when_key_missing(self, upstream, run_http):
        upstream.add("/v2/skyblock/profiles", {"success": True, "profiles": []})
        run_http(lambda http: _client(http, api_key=None).fetch_profiles(normalize_identity(COMPACT)))
        assert "API-Key" not in upstream.last("/v2/skyblock/profiles").headers
