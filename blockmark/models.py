"""Data model shared by the export engine."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

PropertyValue = Union[
    str, int, float, bool, "list[PropertyValue]", "dict[str, PropertyValue]"
]

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "svg", "webp", "bmp"})
HEADING_PROPERTY_KEYS = ("heading", "logseq.property/heading", ":logseq.property/heading")
DEFAULT_ASSET_PATH = "assets/"


def is_image_asset(extension: str) -> bool:
    """Return True when ``extension`` names a bitmap or vector image type."""

    return (extension or "").lower() in IMAGE_EXTENSIONS


def _valid_heading(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if 1 <= value <= 6 else None


@dataclass(slots=True, frozen=True)
class Page:
    """Read-only snapshot of a page."""

    uuid: str
    name: str
    title: str | None = None
    properties: Mapping[str, Any] = field(default_factory=dict)
    journal: bool = False

    @property
    def display_title(self) -> str:
        return self.title or self.name


@dataclass(slots=True, frozen=True)
class Block:
    """Read-only snapshot of a block and its subtree."""

    uuid: str
    content: str = ""
    heading: Any = None
    properties: Mapping[str, Any] = field(default_factory=dict)
    children: tuple["Block", ...] = ()
    parent: str | None = None
    left: str | None = None

    @property
    def heading_level(self) -> int | None:
        """Heading level in ``[1, 6]`` or ``None``; anything else is ignored."""

        if self.heading is not None:
            return _valid_heading(self.heading)
        for key in HEADING_PROPERTY_KEYS:
            if key in self.properties:
                return _valid_heading(self.properties[key])
        return None


@dataclass(slots=True)
class Asset:
    """Binary file referenced from page content."""

    uuid: str
    extension: str
    title: str | None = None
    export_path: str = ""
    data: bytes | None = None

    @property
    def filename(self) -> str:
        return f"{self.uuid}.{self.extension}"

    @property
    def display_title(self) -> str:
        return self.title or self.filename

    @property
    def is_image(self) -> bool:
        return is_image_asset(self.extension)


@dataclass(slots=True, frozen=True)
class AssetListing:
    """Flat description of a registered asset for listing purposes."""

    file_name: str
    full_path: str
    title: str


@dataclass(slots=True, frozen=True)
class ExportSettings:
    """Options controlling a single export call."""

    include_page_name: bool = False
    flatten_nested: bool = True
    preserve_block_refs: bool = True
    include_properties: bool = True
    include_tags: bool = False
    remove_logseq_syntax: bool = True
    resolve_plain_uuids: bool = True
    debug: bool = False
    asset_path: str = DEFAULT_ASSET_PATH

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ExportSettings":
        """Build settings from a loosely typed mapping such as a config table.

        Boolean options are coerced with ``bool()`` when present; ``asset_path``
        is only honoured when it is a string. Unknown keys are ignored.
        """

        if not data:
            return cls()

        values: dict[str, Any] = {}
        for name in (
            "include_page_name",
            "flatten_nested",
            "preserve_block_refs",
            "include_properties",
            "include_tags",
            "remove_logseq_syntax",
            "resolve_plain_uuids",
            "debug",
        ):
            if data.get(name) is not None:
                values[name] = bool(data[name])
        asset_path = data.get("asset_path")
        if isinstance(asset_path, str):
            values["asset_path"] = asset_path
        return cls(**values)

    @property
    def asset_dir(self) -> str:
        """Asset path with exactly one trailing slash."""

        path = self.asset_path or DEFAULT_ASSET_PATH
        return path if path.endswith("/") else f"{path}/"

    @property
    def archive_folder(self) -> str:
        """Folder name used for assets inside an archive."""

        folder = (self.asset_path or "").replace("../", "").strip("/")
        return folder or "assets"


class AssetRegistry:
    """Assets referenced by one export, unique per uuid, in discovery order."""

    def __init__(self) -> None:
        self._assets: dict[str, Asset] = {}

    def register(self, asset: Asset) -> Asset:
        """Add ``asset`` unless its uuid is known; return the registered entry."""

        existing = self._assets.get(asset.uuid)
        if existing is not None:
            return existing
        self._assets[asset.uuid] = asset
        return asset

    def get(self, uuid: str) -> Asset | None:
        return self._assets.get(uuid)

    def discard(self, uuid: str) -> None:
        self._assets.pop(uuid, None)

    def clear(self) -> None:
        self._assets.clear()

    def __contains__(self, uuid: object) -> bool:
        return uuid in self._assets

    def __iter__(self) -> Iterator[Asset]:
        return iter(list(self._assets.values()))

    def __len__(self) -> int:
        return len(self._assets)


__all__ = [
    "Asset",
    "AssetListing",
    "AssetRegistry",
    "Block",
    "DEFAULT_ASSET_PATH",
    "ExportSettings",
    "IMAGE_EXTENSIONS",
    "Page",
    "PropertyValue",
    "is_image_asset",
]
