"""Outliner syntax normalization into plain Markdown."""

from __future__ import annotations

import re

from ..models import ExportSettings

UUID_PATTERN = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

_UUID_RE = re.compile(rf"^{UUID_PATTERN}$")
_PROPERTY_LINE_RE = re.compile(r"^[\w-]+::")
_PROPERTY_LINES_RE = re.compile(r"^[ \t]*[\w-]+::.*$", re.MULTILINE)
_MACRO_RE = re.compile(r"\{\{(?:query|renderer|embed)\b[^}]*\}\}")
_WORKFLOW_RE = re.compile(
    r"^(?:TODO|DOING|DONE|WAITING|CANCELED|CANCELLED|NOW|LATER)(?:[ \t]+|$)",
    re.MULTILINE,
)
# Mid-line NOW tokens are stripped too; existing exports depend on it.
_BARE_NOW_RE = re.compile(r"\bNOW\b[ \t]*")
_PRIORITY_RE = re.compile(r"\[#[ABC]\][ \t]*")
_PAGE_LINK_RE = re.compile(r"\[\[+([^\[\]]+)\]\]+")
_TAG_RE = re.compile(r"[ \t]?(?<![\w/#&])#[\w-]+")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")

_HEADING_BEFORE_RE = re.compile(r"([^\n])\n(#{1,6}[ \t])")
_HEADING_AFTER_RE = re.compile(r"^(#{1,6}[ \t][^\n]+)\n([^\n])", re.MULTILINE)
_LOOSE_LIST_RE = re.compile(r"\n\n([ \t]*)-[ \t]")
_EMPTY_LIST_ITEM_RE = re.compile(r"^[ \t]*-[ \t]*$", re.MULTILINE)


def is_uuid(value: str) -> bool:
    """Return True for a canonical 8-4-4-4-12 hex identifier (any case)."""

    return bool(_UUID_RE.match(value or ""))


def is_property_only_block(content: str) -> bool:
    """Return True when every non-blank line is a ``key:: value`` property."""

    return all(
        _PROPERTY_LINE_RE.match(line.strip())
        for line in (content or "").split("\n")
        if line.strip()
    )


def normalize(content: str, settings: ExportSettings) -> str:
    """Strip outliner-only markup from ``content``.

    Rules apply in order: property-only content is dropped, dynamic macros
    are removed (``tweet`` and ``video`` survive), workflow keywords and
    priorities are stripped, page-link brackets collapse to their text,
    ``#tags`` go away unless ``include_tags`` is set, and blank-line runs
    collapse before the final trim.
    """

    if is_property_only_block(content):
        return ""

    result = _PROPERTY_LINES_RE.sub("", content)
    result = _MACRO_RE.sub("", result)
    result = _WORKFLOW_RE.sub("", result)
    result = _BARE_NOW_RE.sub("", result)
    result = _PRIORITY_RE.sub("", result)
    result = _PAGE_LINK_RE.sub(r"\1", result)

    if not settings.include_tags:
        result = _TAG_RE.sub("", result)

    result = _EXCESS_NEWLINES_RE.sub("\n\n", result)
    return result.strip()


def post_process(markdown: str) -> str:
    """Tidy the joined document: heading spacing, list spacing, blank runs."""

    result = _EXCESS_NEWLINES_RE.sub("\n\n", markdown)
    result = _HEADING_BEFORE_RE.sub(r"\1\n\n\2", result)
    result = _HEADING_AFTER_RE.sub(r"\1\n\n\2", result)
    result = _LOOSE_LIST_RE.sub(r"\n\1- ", result)
    result = _EMPTY_LIST_ITEM_RE.sub("", result)
    result = _EXCESS_NEWLINES_RE.sub("\n\n", result)
    return result.strip()


__all__ = [
    "UUID_PATTERN",
    "is_property_only_block",
    "is_uuid",
    "normalize",
    "post_process",
]
