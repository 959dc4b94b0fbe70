"""Type definitions for Blockmark plugin contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Protocol

if TYPE_CHECKING:  # pragma: no cover - type check only
    from ..markdown.exporter import PageExporter


class ExportHandler(Protocol):
    """Callable delivering an exported page to its destination."""

    def __call__(
        self,
        *,
        exporter: "PageExporter",
        markdown: str,
        destination_name: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> str:  # pragma: no cover - Protocol
        """Deliver ``markdown`` and describe where it ended up."""


@dataclass(slots=True, frozen=True)
class ExportContribution:
    """Descriptor describing an output format provided by a plugin."""

    format_id: str
    formatter: ExportHandler
    description: str
