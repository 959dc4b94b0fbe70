"""Open command for Blockmark CLI."""

from __future__ import annotations

import click

from ..storage import StorageError
from ._common import cli_error, get_app


@click.command(name="open")
@click.argument("page")
@click.pass_context
def open_page(ctx: click.Context, page: str) -> None:
    """Make PAGE the current page used by exports without a page argument."""

    app = get_app(ctx)
    try:
        opened = app.storage.set_current_page(page)
    except StorageError as exc:
        raise cli_error(exc) from exc
    click.echo(f"Opened page '{opened.display_title}'")


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(open_page)
