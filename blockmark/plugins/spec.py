"""Hook specifications for Blockmark plugins."""

from __future__ import annotations

from collections.abc import Iterable

from ..config import BlockmarkConfig

from ._markers import hookspec
from .types import ExportContribution


class BlockmarkHookSpec:
    """Collection of pluggy hook specifications."""

    @hookspec
    def export_formats(self, config: BlockmarkConfig) -> Iterable[ExportContribution]:
        """Return output format contributions provided by the plugin."""
