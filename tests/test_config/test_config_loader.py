"""
Tests for skyblock_stats/config.py — TOML layering, env overrides, validation.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from skyblock_stats.config import AppConfig, HypixelConfig, LoggingConfig, load_config

_ENV_VARS = (
    "HYPIXEL_API_KEY",
    "SKYBLOCK_STATS_HYPIXEL_BASE_URL",
    "SKYBLOCK_STATS_FALLBACK_ENABLED",
    "SKYBLOCK_STATS_LOG_LEVEL",
    "SKYBLOCK_STATS_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_project_defaults(self):
        config = load_config()
        assert config.hypixel.base_url == "https://api.hypixel.net"
        assert config.fallback.enabled is True
        assert config.fallback.resolve_display_name is False
        assert config.levels.fetch_remote_tables is True
        assert config.logging.level == "INFO"
        assert config.debug is False

    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path / "custom.toml", """
[project]
debug = true

[hypixel]
base_url = "https://proxy.example"
timeout_seconds = 3.5

[levels]
fetch_remote_tables = false
""")
        config = load_config(path)
        assert config.debug is True
        assert config.hypixel.base_url == "https://proxy.example"
        assert config.hypixel.timeout_seconds == 3.5
        assert config.levels.fetch_remote_tables is False
        assert config.fallback.base_url == "https://sky.shiiyu.moe"

    def test_local_overrides_merge(self, tmp_path):
        path = _write(tmp_path / "default.toml", """
[fallback]
enabled = true
base_url = "https://sky.example"
""")
        _write(tmp_path / "local.toml", """
[fallback]
enabled = false
""")
        config = load_config(path)
        assert config.fallback.enabled is False
        assert config.fallback.base_url == "https://sky.example"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_invalid_values(self, tmp_path):
        path = _write(tmp_path / "bad.toml", "[hypixel]\ntimeout_seconds = 0\n")
        with pytest.raises(ValidationError):
            load_config(path)


class TestEnvOverrides:
    def test_api_key_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HYPIXEL_API_KEY", "secret")
        config = load_config(_write(tmp_path / "c.toml", ""))
        assert config.hypixel.api_key == "secret"
        assert config.hypixel.has_api_key

    def test_prefixed_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SKYBLOCK_STATS_HYPIXEL_BASE_URL", "https://alt.example")
        monkeypatch.setenv("SKYBLOCK_STATS_FALLBACK_ENABLED", "false")
        monkeypatch.setenv("SKYBLOCK_STATS_LOG_LEVEL", "debug")
        monkeypatch.setenv("SKYBLOCK_STATS_DEBUG", "1")

        config = load_config(_write(tmp_path / "c.toml", "[fallback]\nenabled = true\n"))

        assert config.hypixel.base_url == "https://alt.example"
        assert config.fallback.enabled is False
        assert config.logging.level == "DEBUG"
        assert config.debug is True


class TestModels:
    def test_no_key_by_default(self):
        assert not AppConfig().hypixel.has_api_key

    def test_empty_key_is_no_key(self):
        assert not HypixelConfig(api_key="").has_api_key

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_frozen(self):
        with pytest.raises(ValidationError):
            AppConfig().debug = True  # type: ignore[misc]
