"""
skyblock-stats command line.

Every command loads ``AppConfig`` first and exits non-zero on a bad config
(1) or a malformed player id (2). Lookups that come back empty exit 1 with a
message on stderr; results go to stdout.

Examples::

    skyblock-stats validate-config --full
    skyblock-stats player 069a79f4-44e9-4726-a5be-fca90e38aaf5
    skyblock-stats stats 069a79f444e94726a5befca90e38aaf5 --name Notch --json
    skyblock-stats skill-tables
    skyblock-stats profile-url Notch
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from skyblock_stats.config import AppConfig, load_config

app = typer.Typer(
    name="skyblock-stats",
    help="Hypixel SkyBlock player statistics, normalized across API schema generations.",
    add_completion=False,
    no_args_is_help=True,
)

_CONFIG_HELP = "TOML config file (default: config/default.toml)."


# ── Helpers ───────────────────────────────────────────────────────────────────

def _fail(message: str, code: int = 1) -> typer.Exit:
    typer.echo(f"[ERROR] {message}", err=True)
    return typer.Exit(code=code)


def _load_config_or_exit(config_path: Optional[str] = None) -> AppConfig:
    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        raise _fail(str(exc))
    except ValidationError as exc:
        raise _fail(f"Invalid configuration: {exc}")
    except ValueError as exc:
        raise _fail(f"Config could not be parsed: {exc}")


def _configure_logging(config: AppConfig) -> None:
    from skyblock_stats.utils.logging import configure_logging

    configure_logging(config.logging)


def _validate_player_id(player_id: str) -> None:
    from skyblock_stats.models.identity import InvalidIdentity, normalize_identity

    try:
        normalize_identity(player_id, strict=True)
    except InvalidIdentity as exc:
        raise _fail(str(exc), code=2)


def _require_api_key(config: AppConfig) -> None:
    if not config.hypixel.has_api_key:
        raise _fail("HYPIXEL_API_KEY is not set (add it to .env).")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
    show_full: bool = typer.Option(False, "--full", help="Also dump every field as JSON."),
) -> None:
    """Load the configuration and print a summary of it."""
    config = _load_config_or_exit(config_path)

    summary = {
        "Hypixel API": config.hypixel.base_url,
        "API key set": config.hypixel.has_api_key,
        "Fallback": f"{config.fallback.base_url} (enabled={config.fallback.enabled})",
        "Resolve names": config.fallback.resolve_display_name,
        "Remote tables": config.levels.fetch_remote_tables,
        "Log level": config.logging.level,
        "Debug": config.debug,
    }
    for label, value in summary.items():
        typer.echo(f"  {label + ':':<16}{value}")

    if show_full:
        dumped = config.model_dump()
        if dumped["hypixel"].get("api_key"):
            dumped["hypixel"]["api_key"] = "***"
        typer.echo("")
        typer.echo(json.dumps(dumped, indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("player")
def player(
    player_id: str = typer.Argument(..., help="Player UUID, hyphenated or compact."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Look up a player's Hypixel network account."""
    from skyblock_stats.pipeline.orchestrator import StatsOrchestrator

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    _validate_player_id(player_id)
    _require_api_key(config)

    account = asyncio.run(StatsOrchestrator(config).get_player(player_id))
    if account is None:
        raise _fail("Player not found or Hypixel unavailable.")

    typer.echo(f"  UUID:         {account.uuid}")
    typer.echo(f"  Name:         {account.display_name or '-'}")
    typer.echo(f"  Rank:         {account.rank or account.monthly_package_rank or account.package_rank or '-'}")
    typer.echo(f"  First login:  {account.first_login.isoformat() if account.first_login else '-'}")
    typer.echo(f"  Last login:   {account.last_login.isoformat() if account.last_login else '-'}")


@app.command("stats")
def stats(
    player_id: str = typer.Argument(..., help="Player UUID, hyphenated or compact."),
    display_name: Optional[str] = typer.Option(
        None,
        "--name",
        "-n",
        help="Display name; enables the SkyCrypt fallback for missing skills/slayers.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the record as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Fetch the canonical SkyBlock stats of a player's active profile."""
    from skyblock_stats.pipeline.orchestrator import StatsOrchestrator

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    _validate_player_id(player_id)
    _require_api_key(config)

    record = asyncio.run(StatsOrchestrator(config).get_player_stats(player_id, display_name))
    if record is None:
        raise _fail("No SkyBlock stats available for this player.")

    if as_json:
        typer.echo(record.model_dump_json(indent=2))
        return

    typer.echo(f"Profile: {record.profile_name}" + (f" ({record.game_mode})" if record.game_mode else ""))
    typer.echo(f"  Purse:         {record.purse:,.1f}")
    typer.echo(f"  Bank:          {record.bank:,.1f}")
    typer.echo(f"  Fairy souls:   {record.fairy_souls if record.fairy_souls is not None else '-'}")
    typer.echo(f"  Catacombs:     {record.dungeon_level if record.dungeon_level is not None else '-'}")
    if record.last_save:
        typer.echo(f"  Last save:     {record.last_save.isoformat()}")
    typer.echo("")
    typer.echo("Skills:" if record.skills else "Skills: none")
    for skill in record.skills:
        typer.echo(f"  {skill.name:<14} {skill.level:>3}  ({skill.xp:,.0f} xp)")
    typer.echo("Slayers:" if record.challenges else "Slayers: none")
    for boss in record.challenges:
        typer.echo(f"  {boss.name:<14} {boss.level:>3}  ({boss.xp:,.0f} xp)")
    if record.fallback_used:
        typer.echo("")
        typer.echo("  (some lists supplied by SkyCrypt)")


@app.command("skill-tables")
def skill_tables(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Show which skill level tables are available (remote or static)."""
    import httpx

    from skyblock_stats.ingestion.hypixel_client import HypixelClient
    from skyblock_stats.levels.provider import LevelTableProvider
    from skyblock_stats.levels.tables import CHALLENGE_XP_LEVELS, SKILL_XP_LEVELS

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    async def _load() -> LevelTableProvider:
        async with httpx.AsyncClient() as http:
            client = HypixelClient(
                http,
                base_url=config.hypixel.base_url,
                timeout=config.hypixel.timeout_seconds,
            )
            provider = LevelTableProvider(client=client, fetch_remote=config.levels.fetch_remote_tables)
            await provider.ensure_loaded()
            return provider

    provider = asyncio.run(_load())
    categories = provider.cache.categories()
    if categories:
        typer.echo("Remote skill tables:")
        for category in categories:
            typer.echo(f"  {category:<14} max level {len(provider.get_table(category))}")
    else:
        typer.echo(f"Remote skill tables unavailable; static curve (max level {len(SKILL_XP_LEVELS)}) in use.")
    typer.echo("Slayer tables (static):")
    for boss, table in CHALLENGE_XP_LEVELS.items():
        typer.echo(f"  {boss:<14} max level {len(table)}")


@app.command("profile-url")
def profile_url(
    display_name: str = typer.Argument(..., help="Player display name."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Print the SkyCrypt stats page for a player."""
    from skyblock_stats.ingestion.skycrypt_client import profile_url as build_url

    config = _load_config_or_exit(config_path)
    typer.echo(build_url(display_name, config.fallback.base_url))


if __name__ == "__main__":
    app()
