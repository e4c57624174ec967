"""Shared helpers for CLI commands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import click

from grantwatch.adapters._base import AdapterError, ConnectionConfig
from grantwatch.adapters.postgres import PostgresAdapter
from grantwatch.config import (
    ConfigError,
    MonitorConfig,
    build_config,
    load_config_file,
    state_file_from,
)

_DATABASE_KEYS = ("host", "port", "user", "password", "dbname", "sslmode", "dsn")
_MONITOR_KEYS = ("role", "interval", "state_file", "cycle_timeout")


def config_option(f: Callable) -> Callable:
    return click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        envvar="GRANTWATCH_CONFIG",
        help="TOML config file (default: ~/.grantwatch/config.toml).",
    )(f)


def verbose_option(f: Callable) -> Callable:
    return click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")(f)


def monitor_options(f: Callable) -> Callable:
    """Connection and monitor settings; each overrides the config file."""
    options = [
        click.option("--host", default=None, envvar="GRANTWATCH_HOST", help="Database host."),
        click.option("--port", type=int, default=None, envvar="GRANTWATCH_PORT", help="Database port."),
        click.option("--user", default=None, envvar="GRANTWATCH_USER", help="Database user."),
        click.option(
            "--password", default=None, envvar="GRANTWATCH_PASSWORD", help="Database password."
        ),
        click.option("--dbname", default=None, envvar="GRANTWATCH_DBNAME", help="Database name."),
        click.option("--sslmode", default=None, envvar="GRANTWATCH_SSLMODE", help="libpq sslmode."),
        click.option(
            "--dsn", default=None, envvar="GRANTWATCH_DSN",
            help="Full connection string; replaces host/port/user/password/dbname.",
        ),
        click.option("--role", default=None, envvar="GRANTWATCH_ROLE", help="Role to monitor."),
        click.option(
            "--state-file",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            envvar="GRANTWATCH_STATE_FILE",
            help="Where the last snapshot is kept.",
        ),
        click.option(
            "--cycle-timeout", type=float, default=None, envvar="GRANTWATCH_CYCLE_TIMEOUT",
            help="Abandon a collection after N seconds.",
        ),
        config_option,
        verbose_option,
    ]
    for option in reversed(options):
        f = option(f)
    return f


def resolve_config(config_path: Path | None, overrides: dict[str, object]) -> MonitorConfig:
    """Build a MonitorConfig from the config file and CLI overrides, or exit 1."""
    database = {k: overrides.get(k) for k in _DATABASE_KEYS}
    monitor = {k: overrides.get(k) for k in _MONITOR_KEYS}
    if monitor["state_file"] is not None:
        monitor["state_file"] = str(monitor["state_file"])
    try:
        return build_config(load_config_file(config_path), database=database, monitor=monitor)
    except ConfigError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e


async def open_adapter(config: ConnectionConfig) -> PostgresAdapter:
    """Connect and ping. Raises AdapterError if the database is unreachable."""
    adapter = PostgresAdapter()
    await adapter.connect(config)
    try:
        await adapter.ping()
    except AdapterError:
        await adapter.close()
        raise
    return adapter


def resolve_state_file(config_path: Path | None, state_file: Path | None) -> Path:
    """State file path from --state-file or the config file, or exit 1."""
    try:
        file_data = {} if state_file is not None else load_config_file(config_path)
    except ConfigError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e
    return state_file_from(file_data, state_file)
