"""Inline reference resolution: block transclusions, page links, asset links."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import replace
from typing import TypeVar

from ..capabilities import DocumentStore
from ..models import Asset, Block, ExportSettings, Page
from .normalizer import UUID_PATTERN, is_uuid, normalize

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Transclusion chains deeper than this are left as literal markers.
MAX_TRANSCLUSION_DEPTH = 100

_REFERENCE_RE = re.compile(
    rf"\(\((?P<block>{UUID_PATTERN})\)\)"
    r"|\[\[+(?P<target>[^\[\]]+)\]\]+"
    rf"|(?<![\w/-])(?P<plain>{UUID_PATTERN})(?![\w-])"
)


class ReferenceResolver:
    """Resolve references in block content against a document store.

    One resolver serves one export call: lookups are cached for the call and
    every asset rendered is remembered in :attr:`known_assets` so the asset
    collector can reuse its title and type.
    """

    def __init__(self, store: DocumentStore, settings: ExportSettings) -> None:
        self._store = store
        self._settings = settings
        self._assets: dict[str, Asset | None] = {}
        self._blocks: dict[str, Block | None] = {}
        self._pages: dict[str, Page | None] = {}
        self.known_assets: dict[str, Asset] = {}

    @property
    def settings(self) -> ExportSettings:
        return self._settings

    def reset(self) -> None:
        self._assets.clear()
        self._blocks.clear()
        self._pages.clear()
        self.known_assets.clear()

    def resolve(self, content: str, visiting: frozenset[str] = frozenset()) -> str:
        """Return ``content`` with every resolvable reference substituted.

        ``visiting`` holds the uuids of the blocks whose content is currently
        being expanded; meeting one of them again leaves the marker as is.
        """

        if not content:
            return ""

        def substitute(match: re.Match[str]) -> str:
            raw = match.group(0)
            if match.group("block") is not None:
                return self._resolve_uuid(match.group("block"), raw, visiting)
            if match.group("target") is not None:
                return self._resolve_link(match.group("target").strip(), raw, visiting)
            if not self._settings.resolve_plain_uuids:
                return raw
            return self._resolve_uuid(match.group("plain"), raw, visiting)

        return _REFERENCE_RE.sub(substitute, content)

    def render_asset(self, asset: Asset) -> str:
        """Render ``asset`` as a Markdown link and remember it."""

        export_path = f"{self._settings.asset_dir}{asset.filename}"
        known = self.known_assets.get(asset.uuid)
        if known is None:
            known = replace(asset, export_path=export_path)
            self.known_assets[asset.uuid] = known
        prefix = "!" if known.is_image else ""
        return f"{prefix}[{known.display_title}]({export_path})"

    def lookup_asset(self, identifier: str) -> Asset | None:
        return self._cached(self._assets, identifier, self._store.resolve_asset)

    def lookup_block(self, uuid: str) -> Block | None:
        return self._cached(self._blocks, uuid, self._store.get_block)

    def lookup_page(self, identifier: str) -> Page | None:
        return self._cached(self._pages, identifier, self._store.get_page)

    def _resolve_uuid(self, uuid: str, raw: str, visiting: frozenset[str]) -> str:
        key = uuid.lower()
        if key in visiting or len(visiting) >= MAX_TRANSCLUSION_DEPTH:
            logger.debug("Leaving cyclic reference %s unresolved", uuid)
            return raw

        asset = self.lookup_asset(uuid)
        if asset is not None:
            return self.render_asset(asset)

        block = self.lookup_block(uuid)
        if block is not None:
            return self.transclude(block, visiting)

        page = self.lookup_page(uuid)
        if page is not None:
            return page.display_title

        logger.debug("Unresolved reference %s", uuid)
        return raw

    def _resolve_link(self, target: str, raw: str, visiting: frozenset[str]) -> str:
        if is_uuid(target):
            return self._resolve_uuid(target, raw, visiting)

        asset = self.lookup_asset(target)
        if asset is not None:
            return self.render_asset(asset)

        page = self.lookup_page(target)
        if page is not None:
            return page.display_title
        return raw

    def transclude(self, block: Block, visiting: frozenset[str] = frozenset()) -> str:
        """Return the resolved and normalized content of ``block``."""

        nested = visiting | {block.uuid.lower()}
        content = self.resolve(block.content or "", nested)
        return normalize(content, self._settings)

    def _cached(
        self,
        cache: dict[str, T | None],
        key: str,
        loader: Callable[[str], T | None],
    ) -> T | None:
        if key in cache:
            return cache[key]
        try:
            value = loader(key)
        except Exception as exc:  # lookups of malformed references fall back to raw text
            logger.debug("Lookup of %r failed: %s", key, exc)
            value = None
        cache[key] = value
        return value


__all__ = ["MAX_TRANSCLUSION_DEPTH", "ReferenceResolver"]
