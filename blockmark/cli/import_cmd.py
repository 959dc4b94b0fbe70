"""Snapshot import command for Blockmark CLI."""

from __future__ import annotations

from pathlib import Path

import click

from ..storage import StorageError, read_snapshot
from ._common import cli_error, get_app


@click.command(name="import")
@click.argument(
    "snapshot",
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
)
@click.pass_context
def import_snapshot(ctx: click.Context, snapshot: Path) -> None:
    """Load a JSON or YAML graph snapshot into the local database."""

    app = get_app(ctx)
    try:
        summary = app.storage.import_snapshot(read_snapshot(snapshot))
    except StorageError as exc:
        raise cli_error(exc) from exc

    click.echo(
        f"Imported {summary.pages} pages, {summary.blocks} blocks, "
        f"{summary.assets} assets and {summary.properties} properties"
    )


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(import_snapshot)
