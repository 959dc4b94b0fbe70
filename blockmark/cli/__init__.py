"""Blockmark CLI package."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import click

from ..logger import setup_logging
from . import assets, batch, config_cmd, export_cmd, import_cmd, open_cmd, pages, preview
from ._common import CONTEXT_SETTINGS, BlockmarkCliError

__all__ = ["cli", "main", "BlockmarkCliError"]


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-c",
    "--config",
    "config_path_opt",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to configuration TOML file.",
)
@click.option(
    "-v",
    "--verbose",
    "verbosity",
    count=True,
    help="Increase log output (repeatable).",
)
@click.pass_context
def cli(ctx: click.Context, config_path_opt: Path | None, verbosity: int) -> None:
    """Export outliner pages to Markdown and ZIP archives."""

    ctx.ensure_object(dict)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.command.get_help(ctx))
        ctx.exit(0)

    setup_logging(verbosity)
    ctx.obj["config_path"] = config_path_opt
    ctx.obj["verbosity"] = verbosity


for register_command in (
    config_cmd.register,
    import_cmd.register,
    pages.register,
    open_cmd.register,
    preview.register,
    assets.register,
    export_cmd.register,
    batch.register,
):
    register_command(cli)


def main(argv: Sequence[str] | None = None) -> int:
    args = list(argv) if argv is not None else None
    try:
        return cli.main(args=args, prog_name="bm", standalone_mode=False) or 0
    except click.ClickException as exc:
        click.echo(f"Error: {exc.format_message()}", err=True)
        return 1
    except SystemExit as exc:
        return int(exc.code or 0)
