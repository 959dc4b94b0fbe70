"""Tests for asset discovery and fetching."""

from __future__ import annotations

import threading
import time

from blockmark.capabilities import NotificationLevel
from blockmark.markdown.assets import (
    AssetCollector,
    graph_asset_path,
    rewrite_asset_paths,
)
from blockmark.models import Asset, ExportSettings
from conftest import GRAPH_ROOT, IMAGE_UUID, PDF_UUID

THIRD_UUID = "c0ffee00-1234-4abc-8def-0123456789ab"


def _path(uuid: str, extension: str) -> str:
    return f"{GRAPH_ROOT}/assets/{uuid}.{extension}"


def test_rewrite_asset_paths() -> None:
    content = f"![a](../assets/{IMAGE_UUID}.png) and [doc](../assets/file.pdf)"

    assert rewrite_asset_paths(content, "media/") == (
        f"![a](media/{IMAGE_UUID}.png) and [doc](media/file.pdf)"
    )


def test_graph_asset_path() -> None:
    asset = Asset(uuid=IMAGE_UUID, extension="png")

    assert graph_asset_path("/g/", asset) == f"/g/assets/{IMAGE_UUID}.png"
    assert graph_asset_path(None, asset) == f"/assets/{IMAGE_UUID}.png"


def test_collect_registers_each_asset_once_in_order(files, notifier) -> None:
    markdown = (
        f"![b](assets/{PDF_UUID}.pdf)\n"
        f"![a](assets/{IMAGE_UUID}.png) again ![a](assets/{IMAGE_UUID}.png)\n"
        f"raw ../assets/{THIRD_UUID}.gif and ![b](assets/{PDF_UUID}.pdf)"
    )
    collector = AssetCollector(files, notifier)

    registry = collector.collect(markdown, ExportSettings())

    assert [asset.uuid for asset in registry] == [PDF_UUID, IMAGE_UUID, THIRD_UUID]
    assert registry.get(IMAGE_UUID).title == "a"
    assert registry.get(THIRD_UUID).title is None
    assert registry.get(THIRD_UUID).export_path == f"assets/{THIRD_UUID}.gif"


def test_collect_ignores_remote_and_embedded_asset_folders(files, notifier) -> None:
    markdown = (
        f"See https://cdn.example.com/assets/{IMAGE_UUID}.png\n"
        f"![remote](https://cdn.example.com/assets/{PDF_UUID}.pdf)\n"
        f"myassets/{THIRD_UUID}.gif"
    )
    collector = AssetCollector(files, notifier)

    registry = collector.collect(markdown, ExportSettings())

    assert len(registry) == 0


def test_collect_prefers_known_asset_metadata(files, notifier) -> None:
    known = {IMAGE_UUID: Asset(uuid=IMAGE_UUID, extension="png", title="Diagram")}
    collector = AssetCollector(files, notifier)

    registry = collector.collect(
        f"![ignored](assets/{IMAGE_UUID}.png)", ExportSettings(), known
    )

    assert registry.get(IMAGE_UUID).title == "Diagram"


def test_collect_honours_custom_asset_path(files, notifier) -> None:
    settings = ExportSettings(asset_path="../media/")
    collector = AssetCollector(files, notifier)

    registry = collector.collect(f"![x](../media/{IMAGE_UUID}.png)", settings)

    assert registry.get(IMAGE_UUID).export_path == f"../media/{IMAGE_UUID}.png"


def test_fetch_all_reads_from_graph_assets_folder(files, notifier) -> None:
    files.contents[_path(IMAGE_UUID, "png")] = b"png-bytes"
    collector = AssetCollector(files, notifier)
    collector.collect(f"![a](assets/{IMAGE_UUID}.png)", ExportSettings())

    fetched = collector.fetch_all(GRAPH_ROOT)

    assert [asset.data for asset in fetched] == [b"png-bytes"]
    assert files.fetched == [_path(IMAGE_UUID, "png")]
    assert notifier.messages == []


def test_failed_fetch_is_dropped_with_warning(files, notifier) -> None:
    files.contents[_path(PDF_UUID, "pdf")] = b"pdf"
    collector = AssetCollector(files, notifier)
    collector.collect(
        f"![a](assets/{IMAGE_UUID}.png) [b](assets/{PDF_UUID}.pdf)", ExportSettings()
    )

    fetched = collector.fetch_all(GRAPH_ROOT)

    assert [asset.uuid for asset in fetched] == [PDF_UUID]
    assert IMAGE_UUID not in collector.registry
    assert notifier.messages == [
        ("Could not include asset 'a'", NotificationLevel.WARNING)
    ]


def test_fetch_results_keep_discovery_order(files, notifier) -> None:
    uuids = [IMAGE_UUID, PDF_UUID, THIRD_UUID]
    for uuid in uuids:
        files.contents[_path(uuid, "png")] = uuid.encode()
    release = threading.Event()
    original_fetch = files.fetch

    def slow_first(path: str) -> bytes:
        if IMAGE_UUID in path:
            release.wait(timeout=2)
        else:
            release.set()
            time.sleep(0.01)
        return original_fetch(path)

    files.fetch = slow_first
    collector = AssetCollector(files, notifier, max_workers=3)
    collector.collect(" ".join(f"![x](assets/{uuid}.png)" for uuid in uuids), ExportSettings())

    fetched = collector.fetch_all(GRAPH_ROOT)

    assert [asset.uuid for asset in fetched] == uuids


def test_fetch_all_without_assets_does_nothing(files, notifier) -> None:
    assert AssetCollector(files, notifier).fetch_all(GRAPH_ROOT) == []
    assert files.fetched == []
