"""ZIP packaging of an exported page and its assets."""

from __future__ import annotations

import io
import logging
import re
import zipfile
from collections.abc import Sequence

from ..capabilities import FileCapability
from ..exporters import ArchiveError
from ..models import Asset

logger = logging.getLogger(__name__)

ARCHIVE_MIME_TYPE = "application/zip"
DEFAULT_ARCHIVE_STEM = "export"
# Fixed entry timestamps keep archives byte-for-byte reproducible.
_ENTRY_TIMESTAMP = (1980, 1, 1, 0, 0, 0)
_UNSAFE_RUN_RE = re.compile(r"[^A-Za-z0-9]+")


def sanitize_filename(title: str | None) -> str:
    """Collapse non-alphanumeric runs of ``title`` into single hyphens."""

    stem = _UNSAFE_RUN_RE.sub("-", title or "").strip("-")
    return stem or DEFAULT_ARCHIVE_STEM


def _file_entry(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=_ENTRY_TIMESTAMP)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    return info


def _folder_entry(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name.rstrip("/") + "/", date_time=_ENTRY_TIMESTAMP)
    info.external_attr = (0o40755 << 16) | 0x10
    return info


def build_archive(
    markdown: str,
    markdown_name: str,
    assets: Sequence[Asset] = (),
    *,
    asset_folder: str = "assets",
) -> bytes:
    """Return ZIP bytes holding ``markdown`` and ``assets`` in the given order.

    The asset folder entry is written only when ``assets`` is non-empty. An
    asset without fetched data is an error: callers drop failed fetches first.
    """

    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr(_file_entry(markdown_name), markdown.encode("utf-8"))
            if assets:
                archive.writestr(_folder_entry(asset_folder), b"")
            for asset in assets:
                if asset.data is None:
                    raise ArchiveError(f"Asset '{asset.filename}' has no content to package.")
                archive.writestr(_file_entry(f"{asset_folder}/{asset.filename}"), asset.data)
    except ArchiveError:
        raise
    except (OSError, ValueError, zipfile.BadZipFile) as exc:
        raise ArchiveError(f"Failed to build archive: {exc}") from exc
    return buffer.getvalue()


def build_bundle(documents: Sequence[tuple[str, str]]) -> bytes:
    """Return ZIP bytes holding several ``(name, markdown)`` documents."""

    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w") as archive:
            for name, markdown in documents:
                archive.writestr(_file_entry(name), markdown.encode("utf-8"))
    except (OSError, ValueError) as exc:
        raise ArchiveError(f"Failed to build archive: {exc}") from exc
    return buffer.getvalue()


class ArchivePackager:
    """Build archives and hand them to the save capability."""

    def __init__(self, files: FileCapability) -> None:
        self._files = files

    def package(
        self,
        markdown: str,
        title: str | None,
        assets: Sequence[Asset] = (),
        *,
        asset_folder: str = "assets",
        filename: str | None = None,
    ) -> str:
        """Save the archive for ``title`` and return the name it was saved under.

        ``filename`` overrides the archive stem; the Markdown entry follows it.
        """

        if filename:
            stem = filename[: -len(".zip")] if filename.lower().endswith(".zip") else filename
        else:
            stem = sanitize_filename(title)
        payload = build_archive(
            markdown, f"{stem}.md", assets, asset_folder=asset_folder
        )
        archive_name = self.save(payload, f"{stem}.zip")
        logger.info("Saved %s with %d asset(s)", archive_name, len(assets))
        return archive_name

    def save(self, payload: bytes, archive_name: str) -> str:
        try:
            self._files.save(payload, archive_name)
        except OSError as exc:
            raise ArchiveError(f"Failed to save archive '{archive_name}': {exc}") from exc
        return archive_name


__all__ = [
    "ARCHIVE_MIME_TYPE",
    "ArchivePackager",
    "build_archive",
    "build_bundle",
    "sanitize_filename",
]
