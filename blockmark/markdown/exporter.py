"""Page export orchestration."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from ..capabilities import DocumentStore, FileCapability, NotificationLevel, Notifier
from ..exporters import ExportError, NoActivePageError
from ..models import AssetListing, AssetRegistry, ExportSettings, Page
from .archive import ArchivePackager, build_bundle, sanitize_filename
from .assets import DEFAULT_MAX_WORKERS, AssetCollector, graph_asset_path
from .flattener import BlockTreeFlattener
from .frontmatter import FRONTMATTER_DELIM, FrontmatterBuilder, property_value_strings
from .normalizer import post_process
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)

EMPTY_PAGE_PLACEHOLDER = "_No content found on this page._"
_LEADING_RULE_RE = re.compile(r"\A-{3,}[ \t]*(?=\n|\Z)")


@dataclass(slots=True, frozen=True)
class BatchExportResult:
    """Outcome of exporting one page as part of a batch."""

    page_name: str
    success: bool
    markdown: str | None = None
    error: str | None = None


class PageExporter:
    """Export pages of a graph to Markdown and ZIP archives.

    The exporter holds no global state: every collaborator is injected. The
    asset registry belongs to the most recent export call and is rebuilt from
    scratch by the next one.
    """

    def __init__(
        self,
        store: DocumentStore,
        files: FileCapability,
        notifier: Notifier,
        settings: ExportSettings | None = None,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._store = store
        self._files = files
        self._notifier = notifier
        self.settings = settings or ExportSettings()
        self.registry = AssetRegistry()
        self._collector = AssetCollector(
            files, notifier, registry=self.registry, max_workers=max_workers
        )
        self._packager = ArchivePackager(files)
        self._graph_root: Path | None = None
        self._page: Page | None = None
        self._last_settings = self.settings

    @property
    def graph_root(self) -> Path | None:
        return self._graph_root

    @property
    def page(self) -> Page | None:
        """Page rendered by the most recent export call."""

        return self._page

    def export_current_page(self, settings: ExportSettings | None = None) -> str:
        """Render the page currently open in the document store.

        Raises
        ------
        NoActivePageError
            If no page is open.
        """

        page = self._store.get_current_page()
        if page is None:
            raise NoActivePageError()
        return self._export(page, settings or self.settings)

    def export_page(self, identifier: str, settings: ExportSettings | None = None) -> str:
        """Render the page named or identified by ``identifier``."""

        page = self._store.get_page(identifier)
        if page is None:
            raise ExportError(f"Page '{identifier}' not found.")
        return self._export(page, settings or self.settings)

    def download_as_zip(self, markdown: str, filename: str | None = None) -> str:
        """Fetch the registered assets and save an archive with ``markdown``.

        Assets that cannot be fetched are left out with a warning; failures
        building or saving the archive propagate as :class:`ArchiveError`.
        """

        referenced = len(self.registry)
        assets = self._collector.fetch_all(self._graph_root)
        archive_name = self._packager.package(
            markdown,
            self._title(),
            assets,
            asset_folder=self._last_settings.archive_folder,
            filename=filename,
        )

        failed = referenced - len(assets)
        if referenced == 0:
            self._notifier.notify("Exported as ZIP!", NotificationLevel.SUCCESS)
        elif failed == 0:
            self._notifier.notify(
                f"Exported as ZIP with {len(assets)} assets!", NotificationLevel.SUCCESS
            )
        elif assets:
            self._notifier.notify(
                f"Exported as ZIP with {len(assets)} assets! ({failed} failed)",
                NotificationLevel.WARNING,
            )
        else:
            self._notifier.notify(
                "Exported as ZIP! (Failed to include assets)", NotificationLevel.WARNING
            )
        return archive_name

    def download_markdown(self, markdown: str, filename: str | None = None) -> str:
        """Save ``markdown`` as a single ``.md`` file."""

        name = filename or f"{sanitize_filename(self._title())}.md"
        try:
            self._files.save(markdown.encode("utf-8"), name)
        except OSError as exc:
            raise ExportError(f"Failed to save '{name}': {exc}") from exc
        self._notifier.notify("Markdown downloaded!", NotificationLevel.SUCCESS)
        return name

    def copy_to_clipboard(self, markdown: str) -> bool:
        """Copy ``markdown`` to the clipboard; failures are reported, not raised."""

        try:
            self._files.write_clipboard(markdown)
        except OSError as exc:
            logger.error("Failed to copy to clipboard: %s", exc)
            self._notifier.notify("Failed to copy to clipboard", NotificationLevel.ERROR)
            return False
        self._notifier.notify("Markdown copied to clipboard!", NotificationLevel.SUCCESS)
        return True

    def list_assets(self) -> list[AssetListing]:
        """Describe the assets referenced by the most recent export."""

        return [
            AssetListing(
                file_name=asset.filename,
                full_path=graph_asset_path(self._graph_root, asset),
                title=asset.display_title,
            )
            for asset in self.registry
        ]

    def export_pages_to_zip(
        self,
        page_names: Sequence[str],
        filename: str | None = None,
        settings: ExportSettings | None = None,
    ) -> list[BatchExportResult]:
        """Export several pages into one archive of Markdown files.

        A page that is missing or fails to render is recorded in the result
        list; the remaining pages are still exported.
        """

        if not page_names:
            return []

        opts = settings or self.settings
        results: list[BatchExportResult] = []
        documents: list[tuple[str, str]] = []
        for name in page_names:
            page = self._store.get_page(name)
            if page is None:
                results.append(BatchExportResult(name, False, error="Page not found"))
                continue
            try:
                markdown, _ = self._render(page, opts)
            except Exception as exc:  # one failing page must not abort the batch
                logger.warning("Failed to export page %s: %s", name, exc)
                results.append(BatchExportResult(name, False, error=str(exc)))
                continue
            documents.append((f"{sanitize_filename(page.name)}.md", markdown))
            results.append(BatchExportResult(name, True, markdown=markdown))

        if not documents:
            self._notifier.notify("No pages could be exported", NotificationLevel.ERROR)
            return results

        archive_name = filename or f"export-{date.today().isoformat()}.zip"
        self._packager.save(build_bundle(documents), archive_name)

        failures = sum(1 for result in results if not result.success)
        if failures:
            self._notifier.notify(
                f"Exported {len(documents)} pages ({failures} failed)",
                NotificationLevel.WARNING,
            )
        else:
            self._notifier.notify(
                f"Exported {len(documents)} pages!", NotificationLevel.SUCCESS
            )
        return results

    def _export(self, page: Page, settings: ExportSettings) -> str:
        if settings.debug:
            logger.debug("Starting export of %s with %s", page.name, settings)

        self.registry.clear()
        self._page = page
        self._last_settings = settings
        self._graph_root = self._store.get_current_graph_root()

        markdown, resolver = self._render(page, settings)
        self._collector.collect(markdown, settings, resolver.known_assets)
        logger.debug("Export of %s references %d asset(s)", page.name, len(self.registry))
        return markdown

    def _render(self, page: Page, settings: ExportSettings) -> tuple[str, ReferenceResolver]:
        resolver = ReferenceResolver(self._store, settings)
        blocks = self._store.get_page_blocks_tree(page.uuid) or []

        frontmatter = ""
        if settings.include_properties:
            frontmatter = FrontmatterBuilder(self._store, resolver).build(page)

        body = ""
        if settings.include_page_name:
            body = f"# {page.display_title}\n\n"
        if blocks:
            flattener = BlockTreeFlattener(
                resolver,
                settings,
                skip_contents=property_value_strings(page.properties),
            )
            body += "".join(flattener.flatten(blocks))
        else:
            body += EMPTY_PAGE_PLACEHOLDER
        body = post_process(body)

        if not frontmatter:
            return f"{_guard_leading_delimiter(body)}\n", resolver
        if not body:
            return frontmatter, resolver
        return f"{frontmatter}\n{body}\n", resolver

    def _title(self) -> str | None:
        if self._page is not None:
            return self._page.name
        page = self._store.get_current_page()
        return page.name if page is not None else None


def _guard_leading_delimiter(body: str) -> str:
    """Keep a document without frontmatter from opening with a YAML delimiter."""

    if not body.startswith(FRONTMATTER_DELIM):
        return body
    body = _LEADING_RULE_RE.sub("***", body, count=1)
    if body.startswith(FRONTMATTER_DELIM):
        body = "\\" + body
    return body


__all__ = ["BatchExportResult", "EMPTY_PAGE_PLACEHOLDER", "PageExporter"]
