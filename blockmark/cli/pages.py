"""List imported pages."""

from __future__ import annotations

import click

from ._common import get_app


@click.command(name="pages")
@click.pass_context
def pages(ctx: click.Context) -> None:
    """List the pages of the imported graph; the open page is starred."""

    app = get_app(ctx)
    current = app.storage.get_current_page()
    for page in app.storage.list_pages():
        marker = "*" if current is not None and current.uuid == page.uuid else " "
        journal = "  [journal]" if page.journal else ""
        click.echo(f"{marker} {page.display_title}{journal}")


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(pages)
