"""Tests for block tree flattening."""

from __future__ import annotations

from blockmark.markdown.flattener import MAX_DEPTH, BlockTreeFlattener
from blockmark.markdown.resolver import ReferenceResolver
from blockmark.models import Block, ExportSettings
from conftest import IMAGE_UUID, FakeDocumentStore


def _flatten(store: FakeDocumentStore, blocks: list[Block], **settings: object) -> list[str]:
    opts = ExportSettings(**settings)
    flattener = BlockTreeFlattener(ReferenceResolver(store, opts), opts)
    return flattener.flatten(blocks)


def test_heading_block_renders_with_hashes(store) -> None:
    segments = _flatten(store, [Block(uuid="h", content="Section", heading=2)])

    assert segments == ["## Section\n\n"]


def test_heading_from_properties(store) -> None:
    block = Block(uuid="h", content="Title", properties={"logseq.property/heading": 3})

    assert _flatten(store, [block]) == ["### Title\n\n"]


def test_invalid_heading_levels_fall_back_to_paragraph(store) -> None:
    blocks = [
        Block(uuid="a", content="zero", heading=0),
        Block(uuid="b", content="seven", heading=7),
        Block(uuid="c", content="flag", heading=True),
        Block(uuid="d", content="text", heading="2"),
    ]

    assert _flatten(store, blocks) == ["zero\n\n", "seven\n\n", "flag\n\n", "text\n\n"]


def test_pre_order_traversal_flattens_children_into_paragraphs(store) -> None:
    tree = [
        Block(
            uuid="root",
            content="Parent",
            children=(
                Block(uuid="c1", content="Child one", children=(Block(uuid="g", content="Grandchild"),)),
                Block(uuid="c2", content="Child two"),
            ),
        ),
        Block(uuid="next", content="Sibling"),
    ]

    assert _flatten(store, tree) == [
        "Parent\n\n",
        "Child one\n\n",
        "Grandchild\n\n",
        "Child two\n\n",
        "Sibling\n\n",
    ]


def test_nested_mode_indents_children_and_keeps_headings(store) -> None:
    tree = [
        Block(
            uuid="root",
            content="Topic",
            heading=2,
            children=(
                Block(uuid="c1", content="point", children=(Block(uuid="g", content="detail"),)),
            ),
        ),
    ]

    assert _flatten(store, tree, flatten_nested=False) == [
        "## Topic\n\n",
        "- point\n",
        "  - detail\n",
    ]


def test_property_only_and_empty_blocks_are_skipped(store) -> None:
    blocks = [
        Block(uuid="p", content="collapsed:: true"),
        Block(uuid="e", content="   "),
        Block(uuid="t", content="kept"),
    ]

    assert _flatten(store, blocks) == ["kept\n\n"]


def test_children_of_property_only_block_still_render(store) -> None:
    tree = [
        Block(uuid="p", content="id:: x", children=(Block(uuid="c", content="child"),)),
    ]

    assert _flatten(store, tree) == ["child\n\n"]


def test_block_that_is_an_asset_renders_as_link(store) -> None:
    store.add_asset(IMAGE_UUID, "jpg", "Photo")

    assert _flatten(store, [Block(uuid=IMAGE_UUID, content="")]) == [
        f"![Photo](assets/{IMAGE_UUID}.jpg)\n\n"
    ]


def test_graph_relative_asset_paths_are_rewritten(store) -> None:
    block = Block(uuid="b", content=f"![pic](../assets/{IMAGE_UUID}.png)")

    assert _flatten(store, [block]) == [f"![pic](assets/{IMAGE_UUID}.png)\n\n"]


def test_raw_syntax_kept_when_cleanup_disabled(store) -> None:
    block = Block(uuid="b", content="TODO keep [[Link]] #tag")

    assert _flatten(store, [block], remove_logseq_syntax=False) == [
        "TODO keep [[Link]] #tag\n\n"
    ]


def test_block_references_kept_when_resolution_disabled(store) -> None:
    target = "aaaaaaaa-1111-4111-8111-111111111111"
    store.add_block(Block(uuid=target, content="target"))
    block = Block(uuid="b", content=f"ref (({target}))")

    assert _flatten(store, [block], preserve_block_refs=False) == [f"ref (({target}))\n\n"]


def test_page_property_values_are_not_repeated_as_root_blocks(store) -> None:
    opts = ExportSettings()
    flattener = BlockTreeFlattener(
        ReferenceResolver(store, opts), opts, skip_contents={"draft"}
    )

    segments = flattener.flatten([Block(uuid="a", content="draft"), Block(uuid="b", content="body")])

    assert segments == ["body\n\n"]


def test_repeated_block_is_rendered_once(store) -> None:
    shared = Block(uuid="dup", content="once")

    assert _flatten(store, [shared, shared]) == ["once\n\n"]


def test_deep_tree_is_capped_without_recursion_error(store) -> None:
    node = Block(uuid="leaf", content="leaf")
    for index in range(MAX_DEPTH + 50):
        node = Block(uuid=f"n{index}", content=f"n{index}", children=(node,))

    segments = _flatten(store, [node])

    assert len(segments) == MAX_DEPTH
    assert "leaf\n\n" not in segments
