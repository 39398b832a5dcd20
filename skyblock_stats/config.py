"""
Configuration for the stats service and CLI.

Sources, lowest precedence first:

  - ``config/default.toml``: committed defaults.
  - ``config/local.toml``: per-machine overrides beside it, never committed.
  - ``.env``: secrets, loaded into the environment by python-dotenv.
  - ``HYPIXEL_API_KEY`` and ``SKYBLOCK_STATS_*`` environment variables.

The API key only ever comes from the environment.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sections ──────────────────────────────────────────────────────────────────

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class HypixelConfig(BaseModel):
    """Primary game-stats source settings."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.hypixel.net"
    timeout_seconds: float = 10.0
    api_key: Optional[str] = None

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


class FallbackConfig(BaseModel):
    """Secondary aggregator (SkyCrypt) settings.

    ``resolve_display_name`` lets the orchestrator look a player's display
    name up through the account endpoint when the caller did not supply one
    and the fallback source is needed. Off by default: it costs one extra
    rate-limited primary call per request.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    base_url: str = "https://sky.shiiyu.moe"
    timeout_seconds: float = 10.0
    resolve_display_name: bool = False

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v


class LevelsConfig(BaseModel):
    """Experience-threshold table settings."""

    model_config = ConfigDict(frozen=True)

    fetch_remote_tables: bool = True


class LoggingConfig(BaseModel):
    """Root logger level, optional log file, and JSON-lines switch."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"level must be one of {list(_LOG_LEVELS)}, got '{v}'.")
        return level


class AppConfig(BaseModel):
    """Everything the orchestrator and the CLI commands are configured with.

    Built by ``load_config()``; tests construct it directly.
    """

    model_config = ConfigDict(frozen=True)

    hypixel: HypixelConfig = HypixelConfig()
    fallback: FallbackConfig = FallbackConfig()
    levels: LevelsConfig = LevelsConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

# Environment variable → (section, key) in the raw config dict. A ``None``
# section targets the top level.
_ENV_OVERRIDES: tuple[tuple[str, Optional[str], str], ...] = (
    ("HYPIXEL_API_KEY", "hypixel", "api_key"),
    ("SKYBLOCK_STATS_HYPIXEL_BASE_URL", "hypixel", "base_url"),
    ("SKYBLOCK_STATS_FALLBACK_ENABLED", "fallback", "enabled"),
    ("SKYBLOCK_STATS_LOG_LEVEL", "logging", "level"),
    ("SKYBLOCK_STATS_DEBUG", None, "debug"),
)

_FLAG_KEYS = frozenset({"enabled", "debug"})


def project_root() -> Path:
    """Nearest ancestor of this package holding ``pyproject.toml``."""
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "pyproject.toml").is_file():
            return parent
    return here.parents[1]


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Build the validated ``AppConfig`` from TOML, ``.env`` and the environment.

    Args:
        config_path: TOML file to load instead of
            ``<project_root>/config/default.toml``. A ``local.toml`` beside it
            is layered on top when present.

    Returns:
        Frozen ``AppConfig``.

    Raises:
        FileNotFoundError: If the TOML file does not exist.
        tomllib.TOMLDecodeError: If a TOML file is not valid TOML.
        pydantic.ValidationError: If a merged value is out of range.
    """
    root = project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.is_file():
        raw = _deep_merge(raw, _read_toml(local))

    return _build_app_config(_apply_env_overrides(raw))


def _read_toml(path: Path) -> dict[str, Any]:
    return tomllib.loads(path.read_text(encoding="utf-8"))


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``override`` laid over it, table by table."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Layer the variables in ``_ENV_OVERRIDES`` onto the raw TOML dict.

    Unset or empty variables are ignored.
    """
    for env_name, section, key in _ENV_OVERRIDES:
        value: Any = os.environ.get(env_name)
        if not value:
            continue
        if key in _FLAG_KEYS:
            value = _env_flag(value)
        target = raw if section is None else raw.setdefault(section, {})
        target[key] = value
    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Validate the merged dict section by section."""
    debug = raw.get("debug", raw.get("project", {}).get("debug", False))
    return AppConfig(
        hypixel=HypixelConfig(**raw.get("hypixel", {})),
        fallback=FallbackConfig(**raw.get("fallback", {})),
        levels=LevelsConfig(**raw.get("levels", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=debug,
    )
