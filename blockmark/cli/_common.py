"""Shared helpers for Blockmark CLI commands."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from ..app import AppContext, bootstrap
from ..config import ConfigError, MissingConfigError
from ..exporters import ExportError, NoActivePageError
from ..logger import setup_logging
from ..models import ExportSettings
from ..storage import StorageError

CONTEXT_SETTINGS: dict[str, Any] = {"help_option_names": ["-h", "--help"]}

NO_ACTIVE_PAGE_MESSAGE = "Please open a page first before exporting"


class BlockmarkCliError(click.ClickException):
    """Shared Click exception wrapper for CLI failures."""


def get_app(ctx: click.Context) -> AppContext:
    """Return a cached AppContext for the current CLI invocation."""

    app: AppContext | None = ctx.obj.get("app")
    if app is not None:
        return app

    config_path_opt: Path | None = ctx.obj.get("config_path")

    try:
        app = bootstrap(config_path_opt)
    except MissingConfigError as exc:
        raise BlockmarkCliError(
            "Configuration not found. Run 'bm config' once to set up Blockmark."
        ) from exc
    except (ConfigError, StorageError) as exc:
        raise BlockmarkCliError(str(exc)) from exc

    if app.config.export.debug:
        setup_logging(ctx.obj.get("verbosity", 0), debug=True)

    ctx.obj["app"] = app
    return app


def cli_error(exc: ExportError | StorageError) -> BlockmarkCliError:
    """Translate an export or storage failure into a CLI error."""

    if isinstance(exc, NoActivePageError):
        return BlockmarkCliError(NO_ACTIVE_PAGE_MESSAGE)
    return BlockmarkCliError(str(exc))


def export_settings_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach per-call export setting overrides to a command."""

    options = (
        click.option(
            "--page-name/--no-page-name",
            "include_page_name",
            default=None,
            help="Start the document with the page name as a heading.",
        ),
        click.option(
            "--properties/--no-properties",
            "include_properties",
            default=None,
            help="Emit page properties as YAML frontmatter.",
        ),
        click.option(
            "--tags/--no-tags",
            "include_tags",
            default=None,
            help="Keep #tags in block content.",
        ),
        click.option(
            "--flat/--nested",
            "flatten_nested",
            default=None,
            help="Render nested blocks as paragraphs or as an indented list.",
        ),
        click.option(
            "--asset-path",
            "asset_path",
            default=None,
            help="Folder prefix used for asset links.",
        ),
    )
    for option in reversed(options):
        func = option(func)
    return func


def apply_settings(base: ExportSettings, **overrides: Any) -> ExportSettings:
    """Return ``base`` with the non-``None`` overrides applied."""

    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return base
    return dataclasses.replace(base, **changes)
