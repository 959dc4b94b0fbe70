"""Blockmark export error types."""

from __future__ import annotations

NO_ACTIVE_PAGE = "NO_ACTIVE_PAGE"


class ExportError(RuntimeError):
    """Raised when exporting a page fails."""


class NoActivePageError(ExportError):
    """Raised when an export is requested while no page is open."""

    code = NO_ACTIVE_PAGE

    def __init__(self) -> None:
        super().__init__(NO_ACTIVE_PAGE)


class ArchiveError(ExportError):
    """Raised when building or saving an archive fails."""


__all__ = ["ArchiveError", "ExportError", "NO_ACTIVE_PAGE", "NoActivePageError"]
