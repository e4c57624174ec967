"""CLI entry point for `grantwatch`."""

from __future__ import annotations

import click

from grantwatch.cli.check import check
from grantwatch.cli.run import run
from grantwatch.cli.show import show


@click.group()
@click.version_option(package_name="grantwatch")
def main() -> None:
    """grantwatch: report grants and revokes on a PostgreSQL role."""


main.add_command(run)
main.add_command(check)
main.add_command(show)
