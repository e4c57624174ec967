"""The `check` command: run a single cycle and report what changed."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click

from grantwatch.adapters._base import AdapterError
from grantwatch.cli._output import format_cycle_result
from grantwatch.cli._shared import monitor_options, open_adapter, resolve_config
from grantwatch.config import MonitorConfig
from grantwatch.log import configure_logging
from grantwatch.monitor import CycleResult, CycleStatus, PermissionMonitor
from grantwatch.store import SnapshotStore


async def _run_check(config: MonitorConfig) -> CycleResult:
    adapter = await open_adapter(config.connection)
    try:
        monitor = PermissionMonitor(
            adapter,
            SnapshotStore(config.state_file),
            config.role,
            cycle_timeout=config.cycle_timeout,
        )
        monitor.load_state()
        return await monitor.run_cycle()
    finally:
        await adapter.close()


@click.command("check")
@monitor_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="json",
    help="Output format.",
)
def check(
    config_path: Path | None,
    verbose: bool,
    output_format: str,
    **overrides: object,
) -> None:
    """Collect once, diff against the saved state, and save the new snapshot."""
    configure_logging(verbose=verbose)
    config = resolve_config(config_path, overrides)

    try:
        result = asyncio.run(_run_check(config))
    except AdapterError as e:
        if output_format == "json":
            click.echo(json.dumps({"role": config.role, "error": str(e)}, indent=2))
        else:
            click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e

    click.echo(format_cycle_result(result, config.role, output_format=output_format))
    if result.status == CycleStatus.FAILED:
        raise SystemExit(1)
