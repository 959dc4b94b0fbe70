"""Depth-first rendering of a page's block tree."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..models import Block, ExportSettings
from .assets import rewrite_asset_paths
from .normalizer import is_property_only_block, normalize
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)

MAX_DEPTH = 1000


class BlockTreeFlattener:
    """Turn nested blocks into an ordered list of Markdown segments."""

    def __init__(
        self,
        resolver: ReferenceResolver,
        settings: ExportSettings,
        *,
        skip_contents: Iterable[str] = (),
    ) -> None:
        self._resolver = resolver
        self._settings = settings
        self._skip_contents = frozenset(skip_contents)

    def flatten(self, blocks: Sequence[Block]) -> list[str]:
        """Render ``blocks`` and their descendants in pre-order.

        The walk keeps its own stack, so malformed trees cannot exhaust the
        interpreter's recursion limit; subtrees below :data:`MAX_DEPTH` are
        dropped. A block seen twice in one walk is rendered once.
        """

        segments: list[str] = []
        emitted: set[str] = set()
        stack: list[tuple[Block, int]] = [(block, 0) for block in reversed(blocks)]

        while stack:
            block, depth = stack.pop()
            if block is None:
                continue
            if depth >= MAX_DEPTH:
                logger.warning(
                    "Block %s is nested deeper than %d levels; skipping", block.uuid, MAX_DEPTH
                )
                continue
            if block.uuid:
                if block.uuid in emitted:
                    continue
                emitted.add(block.uuid)
            if depth == 0 and (block.content or "").strip() in self._skip_contents:
                logger.debug("Skipping page property value block %s", block.uuid)
                continue

            segment = self.render(block, depth)
            if segment:
                segments.append(segment)

            for child in reversed(block.children):
                stack.append((child, depth + 1))

        return segments

    def render(self, block: Block, depth: int = 0) -> str:
        """Render a single block without its children."""

        if block.uuid:
            asset = self._resolver.lookup_asset(block.uuid)
            if asset is not None:
                return self._format(self._resolver.render_asset(asset), None, depth)

        content = block.content or ""
        if is_property_only_block(content):
            return ""

        if self._settings.preserve_block_refs:
            content = self._resolver.resolve(content, frozenset({block.uuid.lower()}))
        if self._settings.remove_logseq_syntax:
            content = normalize(content, self._settings)
        content = rewrite_asset_paths(content, self._settings.asset_dir).strip()

        level = block.heading_level
        if level is not None:
            logger.debug("Block %s renders as heading level %d", block.uuid, level)
        return self._format(content, level, depth)

    def _format(self, content: str, level: int | None, depth: int) -> str:
        if not content:
            return ""
        if level is not None:
            return f"{'#' * level} {content}\n\n"
        if self._settings.flatten_nested or depth == 0:
            return f"{content}\n\n"
        indent = "  " * (depth - 1)
        item = content.replace("\n", "\n" + indent + "  ")
        return f"{indent}- {item}\n"


__all__ = ["BlockTreeFlattener", "MAX_DEPTH"]
