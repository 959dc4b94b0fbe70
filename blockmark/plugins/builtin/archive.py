"""Built-in ZIP archive output bundling Markdown with its assets."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from ...config import BlockmarkConfig
from .._markers import hookimpl
from ..types import ExportContribution

if TYPE_CHECKING:  # pragma: no cover - type check only
    from ...markdown.exporter import PageExporter


def _save_archive(
    *,
    exporter: "PageExporter",
    markdown: str,
    destination_name: str | None = None,
    options: Mapping[str, Any] | None = None,
) -> str:
    return exporter.download_as_zip(markdown, destination_name)


@hookimpl
def export_formats(config: BlockmarkConfig | None) -> tuple[ExportContribution, ...]:
    return (
        ExportContribution(
            format_id="zip",
            formatter=_save_archive,
            description="ZIP archive with the Markdown file and its assets",
        ),
    )
