"""Peewee-backed graph storage implementing the document store capability."""

from __future__ import annotations

import json
import uuid as uuid_lib
from collections import defaultdict
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from peewee import (
    BooleanField,
    IntegerField,
    Model,
    SqliteDatabase,
    TextField,
    fn,
)

from .models import Asset, Block, Page

DB_FILENAME = "blockmark.sqlite3"
CURRENT_PAGE_KEY = "current_page"


class StorageError(RuntimeError):
    """Raised when interacting with the graph database fails."""


class JSONTextField(TextField):
    """Store JSON documents while returning Python values."""

    def python_value(self, value: str | None) -> Any:  # type: ignore[override]
        if value is None:
            return None
        return json.loads(value)

    def db_value(self, value: Any) -> str | None:  # type: ignore[override]
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)


class StorageDatabase(SqliteDatabase):
    """SqliteDatabase configured for per-call connection lifetimes."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            str(path),
            pragmas={"foreign_keys": 1},
            check_same_thread=False,
        )


class StorageModel(Model):
    """Base model bound to the storage database."""

    class Meta:
        database = SqliteDatabase(None)


class PageRecord(StorageModel):
    uuid = TextField(primary_key=True)
    name = TextField(null=False)
    title = TextField(null=True)
    journal = BooleanField(default=False, null=False)
    properties = JSONTextField(default=dict, null=False)

    class Meta:
        table_name = "pages"


class BlockRecord(StorageModel):
    uuid = TextField(primary_key=True)
    page = TextField(index=True, null=False)
    parent = TextField(null=True)
    position = IntegerField(default=0, null=False)
    content = TextField(default="", null=False)
    heading = JSONTextField(null=True)
    properties = JSONTextField(default=dict, null=False)

    class Meta:
        table_name = "blocks"


class AssetRecord(StorageModel):
    uuid = TextField(primary_key=True)
    extension = TextField(null=False)
    title = TextField(null=True)

    class Meta:
        table_name = "assets"


class PropertyRecord(StorageModel):
    ident = TextField(primary_key=True)
    title = TextField(null=False)

    class Meta:
        table_name = "properties"


class StateRecord(StorageModel):
    key = TextField(primary_key=True)
    value = TextField(null=True)

    class Meta:
        table_name = "state"


MODELS = (PageRecord, BlockRecord, AssetRecord, PropertyRecord, StateRecord)


@dataclass(slots=True, frozen=True)
class ImportSummary:
    """Counts of records written by a snapshot import."""

    pages: int
    blocks: int
    assets: int
    properties: int


def read_snapshot(path: Path) -> Mapping[str, Any]:
    """Load a JSON or YAML graph snapshot from ``path``."""

    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except OSError as exc:
        raise StorageError(f"Failed to read snapshot {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise StorageError(f"Snapshot {path} is not valid JSON or YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise StorageError("Snapshot root must be a mapping.")
    return raw


class GraphStorage:
    """SQLite copy of an outliner graph, read through the document store API."""

    def __init__(self, path: Path | str, graph_root: Path | None = None) -> None:
        self.path = Path(path)
        self.graph_root = graph_root
        self._database = StorageDatabase(self.path)

    def initialize(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:  # pragma: no cover - filesystem failures are rare
            raise StorageError(f"Failed to create database directory: {exc}") from exc

        with self._binding():
            try:
                self._database.create_tables(MODELS, safe=True)
            except Exception as exc:  # pragma: no cover - defensive
                raise StorageError(f"Failed to initialize database: {exc}") from exc

    # ------------------------------------------------------------------
    # Document store capability
    # ------------------------------------------------------------------
    def get_current_page(self) -> Page | None:
        with self._binding():
            state = StateRecord.get_or_none(StateRecord.key == CURRENT_PAGE_KEY)
        if state is None or not state.value:
            return None
        return self.get_page(state.value)

    def get_page(self, identifier: str) -> Page | None:
        text = str(identifier or "").strip()
        if not text:
            return None
        with self._binding():
            record = PageRecord.get_or_none(fn.LOWER(PageRecord.uuid) == text.lower())
            if record is None:
                record = PageRecord.get_or_none(fn.LOWER(PageRecord.name) == text.lower())
        return _to_page(record) if record is not None else None

    def get_block(self, uuid: str) -> Block | None:
        with self._binding():
            record = BlockRecord.get_or_none(fn.LOWER(BlockRecord.uuid) == str(uuid).lower())
        if record is None:
            return None
        return _to_block(record, ())

    def get_page_blocks_tree(self, page_uuid: str) -> list[Block]:
        with self._binding():
            records = list(
                BlockRecord.select()
                .where(BlockRecord.page == page_uuid)
                .order_by(BlockRecord.position, BlockRecord.uuid)
            )
        return _assemble_tree(records)

    def get_current_graph_root(self) -> Path | None:
        return self.graph_root

    def resolve_property_name(self, key: str) -> str | None:
        ident = key.lstrip(":")
        with self._binding():
            record = PropertyRecord.get_or_none(PropertyRecord.ident == ident)
        return record.title if record is not None else None

    def resolve_asset(self, identifier: str) -> Asset | None:
        text = str(identifier or "").strip()
        if not text:
            return None
        with self._binding():
            record = AssetRecord.get_or_none(fn.LOWER(AssetRecord.uuid) == text.lower())
            if record is None:
                record = AssetRecord.get_or_none(AssetRecord.title == text)
        if record is None:
            return None
        return Asset(uuid=record.uuid, extension=record.extension, title=record.title)

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------
    def set_current_page(self, identifier: str) -> Page:
        page = self.get_page(identifier)
        if page is None:
            raise StorageError(f"Page '{identifier}' not found.")
        with self._binding():
            StateRecord.replace(key=CURRENT_PAGE_KEY, value=page.uuid).execute()
        return page

    def list_pages(self) -> list[Page]:
        with self._binding():
            records = list(PageRecord.select().order_by(fn.LOWER(PageRecord.name)))
        return [_to_page(record) for record in records]

    def count_blocks(self) -> int:
        with self._binding():
            return BlockRecord.select().count()

    def import_snapshot(self, snapshot: Mapping[str, Any]) -> ImportSummary:
        """Insert or replace the pages, blocks, assets and property names of a snapshot.

        Expected layout::

            pages:       [{uuid, name, title, journal, properties, blocks: [...]}]
            assets:      [{uuid, type | extension, title}]
            properties:  {ident: display title}
            current_page: name or uuid (optional)

        Blocks nest through ``children``; a missing block uuid is generated.
        """

        pages = snapshot.get("pages") or []
        assets = snapshot.get("assets") or []
        properties = snapshot.get("properties") or {}
        if not isinstance(pages, list) or not isinstance(assets, list):
            raise StorageError("Snapshot 'pages' and 'assets' must be lists.")
        if not isinstance(properties, dict):
            raise StorageError("Snapshot 'properties' must be a mapping.")

        page_rows: list[dict[str, Any]] = []
        block_rows: list[dict[str, Any]] = []
        for raw_page in pages:
            if not isinstance(raw_page, dict) or not raw_page.get("name"):
                raise StorageError("Every snapshot page needs a 'name'.")
            page_uuid = str(raw_page.get("uuid") or uuid_lib.uuid4())
            page_rows.append(
                {
                    "uuid": page_uuid,
                    "name": str(raw_page["name"]),
                    "title": raw_page.get("title"),
                    "journal": bool(raw_page.get("journal", False)),
                    "properties": dict(raw_page.get("properties") or {}),
                }
            )
            block_rows.extend(_flatten_snapshot_blocks(page_uuid, raw_page.get("blocks") or []))

        asset_rows: list[dict[str, Any]] = []
        for raw_asset in assets:
            if not isinstance(raw_asset, dict):
                raise StorageError("Snapshot assets must be mappings.")
            extension = raw_asset.get("extension") or raw_asset.get("type")
            if not extension or not raw_asset.get("uuid"):
                raise StorageError("Every snapshot asset needs a 'uuid' and a 'type'.")
            asset_rows.append(
                {
                    "uuid": str(raw_asset["uuid"]),
                    "extension": str(extension),
                    "title": raw_asset.get("title"),
                }
            )

        property_rows = [
            {"ident": str(ident).lstrip(":"), "title": str(title)}
            for ident, title in properties.items()
        ]

        with self._binding():
            try:
                with self._database.atomic():
                    for row in page_rows:
                        PageRecord.replace(**row).execute()
                    for row in block_rows:
                        BlockRecord.replace(**row).execute()
                    for row in asset_rows:
                        AssetRecord.replace(**row).execute()
                    for row in property_rows:
                        PropertyRecord.replace(**row).execute()
            except Exception as exc:  # pragma: no cover - defensive
                raise StorageError(f"Failed to import snapshot: {exc}") from exc

        current = snapshot.get("current_page")
        if isinstance(current, str) and current.strip():
            self.set_current_page(current)

        return ImportSummary(
            pages=len(page_rows),
            blocks=len(block_rows),
            assets=len(asset_rows),
            properties=len(property_rows),
        )

    @contextmanager
    def _binding(self) -> Iterator[None]:
        with self._database.connection_context():
            with self._database.bind_ctx(MODELS):
                yield


def _to_page(record: PageRecord) -> Page:
    return Page(
        uuid=record.uuid,
        name=record.name,
        title=record.title,
        properties=dict(record.properties or {}),
        journal=bool(record.journal),
    )


def _to_block(record: BlockRecord, children: tuple[Block, ...]) -> Block:
    return Block(
        uuid=record.uuid,
        content=record.content or "",
        heading=record.heading,
        properties=dict(record.properties or {}),
        children=children,
        parent=record.parent,
    )


def _assemble_tree(records: list[BlockRecord]) -> list[Block]:
    """Build nested blocks bottom-up without recursion."""

    by_uuid = {record.uuid: record for record in records}
    children_of: dict[str | None, list[str]] = defaultdict(list)
    for record in records:
        parent = record.parent if record.parent in by_uuid else None
        children_of[parent].append(record.uuid)

    order: list[str] = []
    seen: set[str] = set()
    stack = list(reversed(children_of[None]))
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        order.append(current)
        stack.extend(reversed(children_of[current]))

    built: dict[str, Block] = {}
    for current in reversed(order):
        children = tuple(built[child] for child in children_of[current] if child in built)
        built[current] = _to_block(by_uuid[current], children)

    return [built[root] for root in children_of[None] if root in built]


def _flatten_snapshot_blocks(page_uuid: str, blocks: list[Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    stack: list[tuple[Any, str | None, int]] = [
        (raw, None, position) for position, raw in reversed(list(enumerate(blocks)))
    ]
    while stack:
        raw, parent, position = stack.pop()
        if not isinstance(raw, dict):
            raise StorageError("Snapshot blocks must be mappings.")
        block_uuid = str(raw.get("uuid") or uuid_lib.uuid4())
        rows.append(
            {
                "uuid": block_uuid,
                "page": page_uuid,
                "parent": parent,
                "position": position,
                "content": str(raw.get("content") or ""),
                "heading": raw.get("heading"),
                "properties": dict(raw.get("properties") or {}),
            }
        )
        children = raw.get("children") or []
        for child_position, child in reversed(list(enumerate(children))):
            stack.append((child, block_uuid, child_position))
    return rows


__all__ = [
    "DB_FILENAME",
    "GraphStorage",
    "ImportSummary",
    "StorageError",
    "read_snapshot",
]
