"""Capability interfaces consumed by the export engine."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Protocol

from .models import Asset, Block, Page


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class FetchError(OSError):
    """Raised by a file capability when a binary cannot be fetched."""

    def __init__(self, path: str, status: int | None = None, reason: str = "") -> None:
        detail = f"status {status}" if status is not None else (reason or "I/O error")
        super().__init__(f"Failed to fetch {path}: {detail}")
        self.path = path
        self.status = status


class DocumentStore(Protocol):
    """Read access to the outliner graph."""

    def get_current_page(self) -> Page | None: ...

    def get_page(self, identifier: str) -> Page | None: ...

    def get_block(self, uuid: str) -> Block | None: ...

    def get_page_blocks_tree(self, page_uuid: str) -> list[Block]: ...

    def get_current_graph_root(self) -> Path | None: ...

    def resolve_property_name(self, key: str) -> str | None:
        """Return the display name of a property key, or ``None`` if unknown."""

    def resolve_asset(self, identifier: str) -> Asset | None:
        """Return the asset registered under ``identifier``, if any."""


class FileCapability(Protocol):
    """Binary fetch, save and clipboard access."""

    def fetch(self, path: str) -> bytes:
        """Return the file content or raise :class:`FetchError`."""

    def save(self, data: bytes, filename: str) -> None: ...

    def write_clipboard(self, text: str) -> None: ...


class Notifier(Protocol):
    """User-facing notification sink."""

    def notify(self, message: str, level: NotificationLevel) -> None: ...


__all__ = [
    "DocumentStore",
    "FetchError",
    "FileCapability",
    "NotificationLevel",
    "Notifier",
]
