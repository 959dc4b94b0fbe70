"""Export command for Blockmark CLI."""

from __future__ import annotations

from pathlib import Path

import click

from ..exporters import ExportError
from ..services.export import export_page, get_export_format_descriptions
from ._common import (
    BlockmarkCliError,
    apply_settings,
    cli_error,
    export_settings_options,
    get_app,
)


@click.command(name="export")
@click.argument("page", required=False)
@click.option(
    "-l",
    "--list-formats",
    "list_formats",
    is_flag=True,
    help="List available export formats and exit.",
)
@click.option(
    "-f",
    "--format",
    "export_format",
    type=str,
    default="zip",
    show_default=True,
    metavar="FORMAT",
    help="Export format identifier.",
)
@click.option(
    "-n",
    "--name",
    "destination_name",
    type=str,
    default=None,
    help="File name of the export (defaults to the page name).",
)
@click.option(
    "-d",
    "--dest",
    "destination",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory receiving the export (defaults to the configured output_dir).",
)
@export_settings_options
@click.pass_context
def export(
    ctx: click.Context,
    page: str | None,
    list_formats: bool,
    export_format: str,
    destination_name: str | None,
    destination: Path | None,
    **overrides: object,
) -> None:
    """Export PAGE, or the current page, in the chosen format."""

    app = get_app(ctx)

    if list_formats:
        try:
            descriptions = get_export_format_descriptions(app.config)
        except ExportError as exc:
            raise BlockmarkCliError(str(exc)) from exc

        if not descriptions:
            click.echo("No export formats are available.")
        else:
            click.echo("Available export formats:\n")
            for fmt, desc in descriptions:
                if desc:
                    click.echo(f"  - {fmt}: {desc}")
                else:
                    click.echo(f"  - {fmt}")
        ctx.exit(0)

    if destination is not None:
        if destination.exists() and destination.is_file():
            raise BlockmarkCliError("Destination must be a directory path.")
        app.files.destination = destination

    settings = apply_settings(app.config.export, **overrides)
    try:
        target = export_page(
            app.config,
            app.exporter,
            export_format=export_format,
            page=page,
            settings=settings,
            destination_name=destination_name,
        )
    except ExportError as exc:
        raise cli_error(exc) from exc

    if target != "clipboard":
        click.echo(f"Saved {app.files.destination / target}")


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(export)
