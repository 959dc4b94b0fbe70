"""Built-in clipboard output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from ...config import BlockmarkConfig
from ...exporters import ExportError
from .._markers import hookimpl
from ..types import ExportContribution

if TYPE_CHECKING:  # pragma: no cover - type check only
    from ...markdown.exporter import PageExporter


def _copy_markdown(
    *,
    exporter: "PageExporter",
    markdown: str,
    destination_name: str | None = None,
    options: Mapping[str, Any] | None = None,
) -> str:
    if not exporter.copy_to_clipboard(markdown):
        raise ExportError("Failed to copy to clipboard")
    return "clipboard"


@hookimpl
def export_formats(config: BlockmarkConfig | None) -> tuple[ExportContribution, ...]:
    return (
        ExportContribution(
            format_id="clipboard",
            formatter=_copy_markdown,
            description="Copy the Markdown to the system clipboard",
        ),
    )
