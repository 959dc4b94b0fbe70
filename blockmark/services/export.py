"""Export services for Blockmark."""

from __future__ import annotations

from typing import Any, Mapping

from ..config import BlockmarkConfig
from ..exporters import ExportError
from ..markdown.exporter import PageExporter
from ..models import ExportSettings
from ..plugins import (
    ExportContribution,
    PluginRegistrationError,
    load_export_contributions,
    reset_plugin_manager_cache,
)


def clear_export_registry_cache() -> None:
    """Reset cached format discovery (primarily for testing)."""

    reset_plugin_manager_cache()


def _load_export_registry(
    config: BlockmarkConfig | None,
) -> dict[str, ExportContribution]:
    try:
        return load_export_contributions(config)
    except PluginRegistrationError as exc:
        raise ExportError(str(exc)) from exc


def get_export_format_choices(config: BlockmarkConfig | None) -> list[str]:
    """Return the list of available output format identifiers."""

    return sorted(_load_export_registry(config))


def get_export_format_descriptions(
    config: BlockmarkConfig | None,
) -> list[tuple[str, str]]:
    """Return tuples of ``(format_id, description)`` for available formats."""

    registry = _load_export_registry(config)
    return sorted(
        ((fmt, contrib.description) for fmt, contrib in registry.items()),
        key=lambda item: item[0],
    )


def render_page(
    exporter: PageExporter,
    page: str | None = None,
    settings: ExportSettings | None = None,
) -> str:
    """Render ``page`` (or the current page when ``None``) to Markdown."""

    if page is None:
        return exporter.export_current_page(settings)
    return exporter.export_page(page, settings)


def export_page(
    config: BlockmarkConfig | None,
    exporter: PageExporter,
    *,
    export_format: str,
    page: str | None = None,
    settings: ExportSettings | None = None,
    destination_name: str | None = None,
    options: Mapping[str, Any] | None = None,
) -> str:
    """Render a page and hand the Markdown to the requested output format.

    Returns whatever the format reports as the destination: a file name for
    the ``markdown`` and ``zip`` formats, ``"clipboard"`` for the clipboard.
    """

    formats = _load_export_registry(config)
    contribution = formats.get(export_format.lower())
    if contribution is None:
        available = ", ".join(sorted(formats))
        if available:
            raise ExportError(
                f"Unknown export format: {export_format}. Available: {available}."
            )
        raise ExportError("No export plugins are available.")

    markdown = render_page(exporter, page, settings)

    plugin_options: dict[str, Any] = {}
    if config is not None:
        plugin_options.update(config.plugins.get(contribution.format_id, {}))
    if options:
        plugin_options.update(options)

    try:
        return contribution.formatter(
            exporter=exporter,
            markdown=markdown,
            destination_name=destination_name,
            options=plugin_options,
        )
    except ExportError:
        raise
    except Exception as exc:
        raise ExportError(
            f"Export format '{contribution.format_id}' raised an unexpected error: {exc}"
        ) from exc


__all__ = [
    "ExportError",
    "clear_export_registry_cache",
    "export_page",
    "get_export_format_choices",
    "get_export_format_descriptions",
    "render_page",
]
