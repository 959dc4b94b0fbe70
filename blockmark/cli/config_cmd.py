"""Config command for Blockmark CLI."""

from __future__ import annotations

from pathlib import Path

import click

from ..config import DEFAULT_CONFIG_PATH, bootstrap_config_file
from ._common import BlockmarkCliError


@click.command(name="config")
@click.option(
    "--no-edit",
    is_flag=True,
    help="Only create the file; do not open it in an editor.",
)
@click.pass_context
def config(ctx: click.Context, no_edit: bool) -> None:
    """Create the configuration file if needed and open it in the editor."""

    selected_path: Path | None = ctx.obj.get("config_path")
    config_path = (selected_path or DEFAULT_CONFIG_PATH).expanduser()

    try:
        created = bootstrap_config_file(config_path)
    except OSError as exc:
        raise BlockmarkCliError(f"Failed to create configuration: {exc}") from exc

    if created:
        click.echo(f"Created configuration at {config_path}")

    if no_edit:
        if not created:
            click.echo(f"Configuration already exists at {config_path}")
        return

    try:
        result = click.edit(filename=str(config_path))
    except click.ClickException as exc:  # pragma: no cover - editor launch failure rare
        raise BlockmarkCliError(f"Failed to launch editor: {exc.format_message()}") from exc

    if result is None:
        click.echo(f"Opened configuration at {config_path}")


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(config)
