"""Built-in Markdown file output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from ...config import BlockmarkConfig
from .._markers import hookimpl
from ..types import ExportContribution

if TYPE_CHECKING:  # pragma: no cover - type check only
    from ...markdown.exporter import PageExporter


def _save_markdown(
    *,
    exporter: "PageExporter",
    markdown: str,
    destination_name: str | None = None,
    options: Mapping[str, Any] | None = None,
) -> str:
    filename = None
    if destination_name:
        filename = (
            destination_name
            if destination_name.endswith(".md")
            else f"{destination_name}.md"
        )
    return exporter.download_markdown(markdown, filename)


@hookimpl
def export_formats(config: BlockmarkConfig | None) -> tuple[ExportContribution, ...]:
    """Expose plain Markdown output as a plugin contribution."""

    contribution = ExportContribution(
        format_id="markdown",
        formatter=_save_markdown,
        description="Single Markdown file with YAML frontmatter",
    )
    return (contribution,)
