"""Batch export of several pages into one archive."""

from __future__ import annotations

from pathlib import Path

import click

from ..exporters import ExportError
from ._common import (
    BlockmarkCliError,
    apply_settings,
    cli_error,
    export_settings_options,
    get_app,
)


@click.command(name="batch")
@click.argument("pages", nargs=-1, required=True)
@click.option(
    "-n",
    "--name",
    "filename",
    type=str,
    default=None,
    help="Archive file name (defaults to export-YYYY-MM-DD.zip).",
)
@click.option(
    "-d",
    "--dest",
    "destination",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory receiving the archive.",
)
@export_settings_options
@click.pass_context
def batch(
    ctx: click.Context,
    pages: tuple[str, ...],
    filename: str | None,
    destination: Path | None,
    **overrides: object,
) -> None:
    """Export PAGES as Markdown files inside a single ZIP archive."""

    app = get_app(ctx)
    if destination is not None:
        app.files.destination = destination

    if filename is not None and not filename.endswith(".zip"):
        filename = f"{filename}.zip"

    settings = apply_settings(app.config.export, **overrides)
    try:
        results = app.exporter.export_pages_to_zip(list(pages), filename, settings)
    except ExportError as exc:
        raise cli_error(exc) from exc

    for result in results:
        if result.success:
            click.echo(f"  ok      {result.page_name}")
        else:
            click.echo(f"  failed  {result.page_name}: {result.error}")

    if not any(result.success for result in results):
        raise BlockmarkCliError("No pages were exported.")


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(batch)
