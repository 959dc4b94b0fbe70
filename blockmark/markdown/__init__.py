"""Markdown export engine."""

from __future__ import annotations

from .archive import ArchivePackager, build_archive, sanitize_filename
from .assets import AssetCollector
from .exporter import BatchExportResult, PageExporter
from .flattener import BlockTreeFlattener
from .frontmatter import FrontmatterBuilder, format_yaml
from .normalizer import is_property_only_block, is_uuid, normalize, post_process
from .resolver import ReferenceResolver

__all__ = [
    "ArchivePackager",
    "AssetCollector",
    "BatchExportResult",
    "BlockTreeFlattener",
    "FrontmatterBuilder",
    "PageExporter",
    "ReferenceResolver",
    "build_archive",
    "format_yaml",
    "is_property_only_block",
    "is_uuid",
    "normalize",
    "post_process",
    "sanitize_filename",
]
