"""Asset discovery in resolved Markdown and binary fetching."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ..capabilities import FileCapability, NotificationLevel, Notifier
from ..models import Asset, AssetRegistry, ExportSettings
from .normalizer import UUID_PATTERN

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
GRAPH_ASSET_DIR = "assets"

_RELATIVE_ASSET_LINK_RE = re.compile(r"(!?)\[([^\]]*)\]\(\.\./assets/([^)]+)\)")


def rewrite_asset_paths(content: str, asset_dir: str) -> str:
    """Point graph-relative ``../assets/`` links at the export asset dir."""

    return _RELATIVE_ASSET_LINK_RE.sub(
        lambda m: f"{m.group(1)}[{m.group(2)}]({asset_dir}{m.group(3)})", content
    )


def _asset_reference_re(asset_dir: str) -> re.Pattern[str]:
    folders = sorted({f"{GRAPH_ASSET_DIR}/", asset_dir.lstrip("./") or asset_dir}, key=len)
    alternatives = "|".join(re.escape(folder) for folder in reversed(folders))
    return re.compile(
        r"(?:!?\[(?P<title>[^\]]*)\]\()?"
        r"(?<![\w.:/-])"
        rf"(?:\.\./|\./)?(?:{alternatives})"
        rf"(?P<uuid>{UUID_PATTERN})\.(?P<ext>[A-Za-z0-9]+)"
    )


def graph_asset_path(graph_root: Path | str | None, asset: Asset) -> str:
    """Location of ``asset`` inside the graph directory."""

    root = str(graph_root or "").rstrip("/")
    return f"{root}/{GRAPH_ASSET_DIR}/{asset.filename}"


class AssetCollector:
    """Maintain the per-export asset registry and fetch its binaries."""

    def __init__(
        self,
        files: FileCapability,
        notifier: Notifier,
        *,
        registry: AssetRegistry | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._files = files
        self._notifier = notifier
        self.registry = registry if registry is not None else AssetRegistry()
        self.max_workers = max(1, max_workers)

    def collect(
        self,
        markdown: str,
        settings: ExportSettings,
        known_assets: Mapping[str, Asset] | None = None,
    ) -> AssetRegistry:
        """Register every asset referenced by ``markdown`` in order of appearance."""

        known = known_assets or {}
        pattern = _asset_reference_re(settings.asset_dir)
        for match in pattern.finditer(markdown):
            uuid = match.group("uuid")
            if uuid in self.registry:
                continue
            source = known.get(uuid)
            title = source.title if source is not None else (match.group("title") or None)
            extension = source.extension if source is not None else match.group("ext")
            asset = Asset(
                uuid=uuid,
                extension=extension,
                title=title,
                export_path=f"{settings.asset_dir}{uuid}.{extension}",
            )
            self.registry.register(asset)
            logger.debug("Registered asset %s (%s)", asset.filename, asset.display_title)
        return self.registry

    def fetch_all(self, graph_root: Path | str | None) -> list[Asset]:
        """Fetch every registered asset; failures are dropped with a warning.

        Fetches run concurrently but results are consumed in discovery order,
        so the returned list and the registry keep their original ordering.
        """

        assets = list(self.registry)
        if not assets:
            return []

        fetched: list[Asset] = []
        workers = min(self.max_workers, len(assets))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                (asset, executor.submit(self._files.fetch, graph_asset_path(graph_root, asset)))
                for asset in assets
            ]
            for asset, future in futures:
                try:
                    data = future.result()
                except OSError as exc:
                    logger.warning("Failed to fetch asset %s: %s", asset.filename, exc)
                    self.registry.discard(asset.uuid)
                    self._notifier.notify(
                        f"Could not include asset '{asset.display_title}'",
                        NotificationLevel.WARNING,
                    )
                    continue
                asset.data = bytes(data)
                fetched.append(asset)
                logger.debug("Fetched asset %s (%d bytes)", asset.filename, len(asset.data))

        return fetched


__all__ = [
    "AssetCollector",
    "DEFAULT_MAX_WORKERS",
    "graph_asset_path",
    "rewrite_asset_paths",
]
