"""Tests for the SQLite graph storage."""

from __future__ import annotations

import json
import sqlite3
import textwrap
from pathlib import Path

import pytest
from blockmark.storage import DB_FILENAME, GraphStorage, StorageError, read_snapshot

IMAGE_UUID = "6f9619ff-8b86-d011-b42d-00cf4fc964ff"

SNAPSHOT = {
    "pages": [
        {
            "uuid": "page-1",
            "name": "project plan",
            "title": "Project Plan",
            "properties": {"status": "active"},
            "blocks": [
                {
                    "uuid": "b1",
                    "content": "Goals",
                    "heading": 2,
                    "children": [
                        {"uuid": "b1a", "content": "first"},
                        {"uuid": "b1b", "content": "second"},
                    ],
                },
                {"uuid": "b2", "content": "Wrap up"},
            ],
        },
        {"uuid": "page-2", "name": "Journal Day", "journal": True},
    ],
    "assets": [{"uuid": IMAGE_UUID, "type": "png", "title": "Diagram"}],
    "properties": {":user.property/status-x": "Status"},
    "current_page": "Project Plan",
}


def _storage(tmp_path: Path) -> GraphStorage:
    storage = GraphStorage(tmp_path / DB_FILENAME, graph_root=tmp_path / "graph")
    storage.initialize()
    return storage


def test_import_snapshot_counts_and_persists(tmp_path: Path) -> None:
    storage = _storage(tmp_path)

    summary = storage.import_snapshot(SNAPSHOT)

    assert (summary.pages, summary.blocks, summary.assets, summary.properties) == (2, 4, 1, 1)
    conn = sqlite3.connect(tmp_path / DB_FILENAME)
    row = conn.execute("SELECT properties FROM pages WHERE uuid = 'page-1'").fetchone()
    conn.close()
    assert json.loads(row[0]) == {"status": "active"}


def test_block_tree_is_rebuilt_in_order(tmp_path: Path) -> None:
    storage = _storage(tmp_path)
    storage.import_snapshot(SNAPSHOT)

    tree = storage.get_page_blocks_tree("page-1")

    assert [block.uuid for block in tree] == ["b1", "b2"]
    assert tree[0].heading_level == 2
    assert [child.content for child in tree[0].children] == ["first", "second"]
    assert tree[0].children[0].parent == "b1"


def test_page_lookup_by_uuid_or_name(tmp_path: Path) -> None:
    storage = _storage(tmp_path)
    storage.import_snapshot(SNAPSHOT)

    assert storage.get_page("PAGE-1").display_title == "Project Plan"
    assert storage.get_page("Project Plan").uuid == "page-1"
    assert storage.get_page("journal day").journal is True
    assert storage.get_page("missing") is None
    assert storage.get_page("  ") is None


def test_current_page_follows_snapshot_and_open(tmp_path: Path) -> None:
    storage = _storage(tmp_path)
    assert storage.get_current_page() is None

    storage.import_snapshot(SNAPSHOT)
    assert storage.get_current_page().uuid == "page-1"

    storage.set_current_page("Journal Day")
    assert storage.get_current_page().uuid == "page-2"

    with pytest.raises(StorageError):
        storage.set_current_page("nope")


def test_block_asset_and_property_lookups(tmp_path: Path) -> None:
    storage = _storage(tmp_path)
    storage.import_snapshot(SNAPSHOT)

    assert storage.get_block("B1A").content == "first"
    assert storage.get_block("zzz") is None
    asset = storage.resolve_asset(IMAGE_UUID.upper())
    assert (asset.extension, asset.title) == ("png", "Diagram")
    assert storage.resolve_asset("Diagram").uuid == IMAGE_UUID
    assert storage.resolve_property_name("user.property/status-x") == "Status"
    assert storage.resolve_property_name("unknown") is None
    assert storage.get_current_graph_root() == tmp_path / "graph"


def test_list_pages_and_count_blocks(tmp_path: Path) -> None:
    storage = _storage(tmp_path)
    storage.import_snapshot(SNAPSHOT)

    assert [page.name for page in storage.list_pages()] == ["Journal Day", "project plan"]
    assert storage.count_blocks() == 4


def test_reimport_replaces_rows(tmp_path: Path) -> None:
    storage = _storage(tmp_path)
    storage.import_snapshot(SNAPSHOT)

    storage.import_snapshot(
        {"pages": [{"uuid": "page-1", "name": "project plan", "title": "Renamed"}]}
    )

    assert storage.get_page("page-1").display_title == "Renamed"
    assert len(storage.list_pages()) == 2


def test_missing_block_uuids_are_generated(tmp_path: Path) -> None:
    storage = _storage(tmp_path)

    storage.import_snapshot(
        {"pages": [{"uuid": "p", "name": "P", "blocks": [{"content": "a"}, {"content": "b"}]}]}
    )

    tree = storage.get_page_blocks_tree("p")
    assert [block.content for block in tree] == ["a", "b"]
    assert all(block.uuid for block in tree)


@pytest.mark.parametrize(
    "snapshot",
    [
        {"pages": "nope"},
        {"pages": [{"uuid": "x"}]},
        {"assets": [{"uuid": IMAGE_UUID}]},
        {"assets": ["flat"]},
        {"properties": ["a"]},
        {"pages": [{"name": "P", "blocks": ["text"]}]},
    ],
)
def test_invalid_snapshots_are_rejected(tmp_path: Path, snapshot: dict) -> None:
    storage = _storage(tmp_path)

    with pytest.raises(StorageError):
        storage.import_snapshot(snapshot)

    assert storage.list_pages() == []


def test_read_snapshot_accepts_yaml_and_json(tmp_path: Path) -> None:
    yaml_path = tmp_path / "graph.yaml"
    yaml_path.write_text(
        textwrap.dedent(
            """
            pages:
              - name: Home
                blocks:
                  - content: Hello
            """
        ),
        encoding="utf-8",
    )
    json_path = tmp_path / "graph.json"
    json_path.write_text(json.dumps({"pages": [{"name": "Home"}]}), encoding="utf-8")

    assert read_snapshot(yaml_path)["pages"][0]["blocks"][0]["content"] == "Hello"
    assert read_snapshot(json_path)["pages"][0]["name"] == "Home"


def test_read_snapshot_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "graph.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(StorageError):
        read_snapshot(path)

    with pytest.raises(StorageError):
        read_snapshot(tmp_path / "missing.yaml")
