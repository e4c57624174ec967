"""The `show` command: print the saved snapshot without touching the database."""

from __future__ import annotations

import json
from pathlib import Path

import click

from grantwatch.cli._output import format_snapshot
from grantwatch.cli._shared import config_option, resolve_state_file
from grantwatch.store import SnapshotStore, StoreError


@click.command("show")
@config_option
@click.option(
    "--state-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="GRANTWATCH_STATE_FILE",
    help="State file to read (default from config).",
)
@click.option("--format", "output_format", type=click.Choice(["json", "text"]), default="json")
def show(config_path: Path | None, state_file: Path | None, output_format: str) -> None:
    """Show the privileges recorded in the state file, grouped by kind."""
    store = SnapshotStore(resolve_state_file(config_path, state_file))

    try:
        snapshot = store.load()
    except StoreError as e:
        if output_format == "json":
            click.echo(json.dumps({"state_file": str(store.path), "error": str(e)}, indent=2))
        else:
            click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from None

    click.echo(format_snapshot(snapshot, store.path, output_format=output_format))
