"""The `run` command: watch the role's privileges until interrupted."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from grantwatch.adapters._base import AdapterError
from grantwatch.cli._shared import monitor_options, open_adapter, resolve_config
from grantwatch.config import MonitorConfig
from grantwatch.log import configure_logging
from grantwatch.monitor import PermissionMonitor
from grantwatch.store import SnapshotStore

logger = logging.getLogger(__name__)


async def _run_monitor(config: MonitorConfig, *, max_cycles: int | None) -> None:
    adapter = await open_adapter(config.connection)
    logger.info("connected to %s", config.connection.describe())
    try:
        monitor = PermissionMonitor(
            adapter,
            SnapshotStore(config.state_file),
            config.role,
            interval=config.interval,
            cycle_timeout=config.cycle_timeout,
        )
        monitor.load_state()
        await monitor.run(max_cycles=max_cycles)
    finally:
        await adapter.close()


@click.command("run")
@monitor_options
@click.option(
    "--interval", type=float, default=None, envvar="GRANTWATCH_INTERVAL",
    help="Seconds to wait between cycles (default 10).",
)
@click.option(
    "--max-cycles", type=click.IntRange(min=1), default=None,
    help="Stop after N cycles instead of running forever.",
)
def run(
    config_path: Path | None,
    verbose: bool,
    max_cycles: int | None,
    **overrides: object,
) -> None:
    """Monitor the role's privileges and log every grant and revoke.

    Exits with status 1 only if the database cannot be reached at startup;
    later failures are logged and the next cycle tries again.
    """
    configure_logging(verbose=verbose)
    config = resolve_config(config_path, overrides)

    try:
        asyncio.run(_run_monitor(config, max_cycles=max_cycles))
    except AdapterError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        logger.info("interrupted, stopping")
