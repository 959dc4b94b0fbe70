"""List the assets a page export would bundle."""

from __future__ import annotations

import click

from ..exporters import ExportError
from ..services.export import render_page
from ._common import cli_error, get_app


@click.command(name="assets")
@click.argument("page", required=False)
@click.option(
    "--paths",
    "show_paths",
    is_flag=True,
    help="Show the full path of each asset inside the graph.",
)
@click.pass_context
def assets(ctx: click.Context, page: str | None, show_paths: bool) -> None:
    """List assets referenced by PAGE, or by the current page."""

    app = get_app(ctx)
    try:
        render_page(app.exporter, page)
    except ExportError as exc:
        raise cli_error(exc) from exc

    listings = app.exporter.list_assets()
    if not listings:
        click.echo("No assets referenced.")
        return

    for listing in listings:
        line = f"{listing.file_name}  {listing.title}"
        if show_paths:
            line += f"  ({listing.full_path})"
        click.echo(line)


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(assets)
