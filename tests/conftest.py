"""In-memory doubles for the document store, file and notification capabilities."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest
from blockmark.capabilities import FetchError, NotificationLevel
from blockmark.models import Asset, Block, Page

IMAGE_UUID = "6f9619ff-8b86-d011-b42d-00cf4fc964ff"
PDF_UUID = "0b3f6c1e-2a4d-4e5f-8a9b-1c2d3e4f5a6b"
GRAPH_ROOT = Path("/graphs/main")


class FakeDocumentStore:
    def __init__(self) -> None:
        self.pages: dict[str, Page] = {}
        self.trees: dict[str, list[Block]] = {}
        self.blocks: dict[str, Block] = {}
        self.assets: dict[str, Asset] = {}
        self.property_names: dict[str, str] = {}
        self.current: Page | None = None
        self.graph_root: Path | None = GRAPH_ROOT

    def add_page(
        self,
        name: str,
        blocks: list[Block] | None = None,
        *,
        uuid: str | None = None,
        properties: dict | None = None,
        current: bool = True,
    ) -> Page:
        page = Page(
            uuid=uuid or f"page-{len(self.pages) + 1}",
            name=name,
            properties=properties or {},
        )
        self.pages[page.uuid] = page
        self.trees[page.uuid] = list(blocks or [])
        for block in blocks or []:
            self._index(block)
        if current:
            self.current = page
        return page

    def add_block(self, block: Block) -> Block:
        self._index(block)
        return block

    def add_asset(self, uuid: str, extension: str, title: str | None = None) -> Asset:
        asset = Asset(uuid=uuid, extension=extension, title=title)
        self.assets[uuid] = asset
        return asset

    def _index(self, block: Block) -> None:
        stack = [block]
        while stack:
            current = stack.pop()
            self.blocks[current.uuid.lower()] = current
            stack.extend(current.children)

    def get_current_page(self) -> Page | None:
        return self.current

    def get_page(self, identifier: str) -> Page | None:
        if identifier in self.pages:
            return self.pages[identifier]
        for page in self.pages.values():
            if page.name.lower() == identifier.lower():
                return page
        return None

    def get_block(self, uuid: str) -> Block | None:
        return self.blocks.get(uuid.lower())

    def get_page_blocks_tree(self, page_uuid: str) -> list[Block]:
        return self.trees.get(page_uuid, [])

    def get_current_graph_root(self) -> Path | None:
        return self.graph_root

    def resolve_property_name(self, key: str) -> str | None:
        return self.property_names.get(key)

    def resolve_asset(self, identifier: str) -> Asset | None:
        for asset in self.assets.values():
            if asset.uuid.lower() == identifier.lower() or asset.title == identifier:
                return Asset(uuid=asset.uuid, extension=asset.extension, title=asset.title)
        return None


class FakeFiles:
    def __init__(self) -> None:
        self.contents: dict[str, bytes] = {}
        self.missing: set[str] = set()
        self.fetched: list[str] = []
        self.saved: dict[str, bytes] = {}
        self.clipboard: list[str] = []
        self.fail_save = False
        self.fail_clipboard = False

    def fetch(self, path: str) -> bytes:
        self.fetched.append(path)
        if path in self.missing or path not in self.contents:
            raise FetchError(path, status=404)
        return self.contents[path]

    def save(self, data: bytes, filename: str) -> None:
        if self.fail_save:
            raise OSError("disk full")
        self.saved[filename] = data

    def write_clipboard(self, text: str) -> None:
        if self.fail_clipboard:
            raise OSError("no clipboard")
        self.clipboard.append(text)

    def archive(self, filename: str) -> zipfile.ZipFile:
        return zipfile.ZipFile(io.BytesIO(self.saved[filename]))


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, NotificationLevel]] = []

    def notify(self, message: str, level: NotificationLevel) -> None:
        self.messages.append((message, level))

    def levels(self) -> list[NotificationLevel]:
        return [level for _, level in self.messages]


@pytest.fixture
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def files() -> FakeFiles:
    return FakeFiles()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
