"""Blockmark: export outliner pages to Markdown and ZIP archives."""

from __future__ import annotations

from .exporters import ArchiveError, ExportError, NoActivePageError
from .markdown import PageExporter
from .models import Asset, Block, ExportSettings, Page

__all__ = [
    "ArchiveError",
    "Asset",
    "Block",
    "ExportError",
    "ExportSettings",
    "NoActivePageError",
    "Page",
    "PageExporter",
]
