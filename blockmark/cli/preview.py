"""Preview command printing the rendered Markdown."""

from __future__ import annotations

import click

from ..exporters import ExportError
from ..services.export import render_page
from ._common import apply_settings, cli_error, export_settings_options, get_app


@click.command(name="preview")
@click.argument("page", required=False)
@export_settings_options
@click.pass_context
def preview(ctx: click.Context, page: str | None, **overrides: object) -> None:
    """Print the Markdown for PAGE, or for the current page."""

    app = get_app(ctx)
    settings = apply_settings(app.config.export, **overrides)
    try:
        markdown = render_page(app.exporter, page, settings)
    except ExportError as exc:
        raise cli_error(exc) from exc
    click.echo(markdown, nl=False)


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(preview)
