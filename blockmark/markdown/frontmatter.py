"""YAML frontmatter generation from page properties."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

import yaml

from ..capabilities import DocumentStore
from ..models import Page, PropertyValue
from .normalizer import is_uuid
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)

FRONTMATTER_DELIM = "---"
TAG_KEYS = ("tags", "blogTags")
_USER_NAMESPACES = frozenset({"user", "user.property"})
_SLUG_SPACE_RE = re.compile(r"\s+")
_SLUG_INVALID_RE = re.compile(r"[^a-z0-9-]")


class _FrontmatterDumper(yaml.SafeDumper):
    """Safe dumper that indents sequences under their key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indent(flow, False)


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    if "\n" in value:
        # clip chomping (a bare "|") reads back with exactly one trailing newline
        if not value.endswith("\n"):
            value += "\n"
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_str(value)


_FrontmatterDumper.add_representer(str, _represent_str)
_FrontmatterDumper.add_representer(tuple, yaml.SafeDumper.represent_list)


def format_yaml(data: Mapping[str, PropertyValue]) -> str:
    """Serialize ``data`` into a ``---`` delimited frontmatter block.

    Keys keep their insertion order and sequences render as block sequences
    indented under their key. Strings that would read back as another type
    are quoted, and multi-line strings become ``|`` literals. An empty
    mapping yields the two delimiter lines alone.
    """

    if not data:
        return f"{FRONTMATTER_DELIM}\n{FRONTMATTER_DELIM}\n"
    payload = yaml.dump(
        dict(data),
        Dumper=_FrontmatterDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=float("inf"),
    )
    return f"{FRONTMATTER_DELIM}\n{payload}{FRONTMATTER_DELIM}\n"


def slugify(name: str) -> str:
    slug = _SLUG_SPACE_RE.sub("-", name.lower())
    return _SLUG_INVALID_RE.sub("", slug)


def is_system_property(key: str) -> bool:
    """Namespaced keys outside ``user``/``user.property`` belong to the host."""

    if "/" not in key:
        return False
    namespace = key.split("/", 1)[0].lstrip(":")
    return namespace not in _USER_NAMESPACES


def property_value_strings(properties: Mapping[str, Any]) -> set[str]:
    """Trimmed string values of a page's properties, including list members."""

    values: set[str] = set()
    for value in properties.values():
        if isinstance(value, str):
            if value.strip():
                values.add(value.strip())
        elif isinstance(value, (list, tuple, set, frozenset)):
            values.update(item.strip() for item in value if isinstance(item, str) and item.strip())
    return values


class FrontmatterBuilder:
    """Build the frontmatter mapping of a page and render it."""

    def __init__(self, store: DocumentStore, resolver: ReferenceResolver) -> None:
        self._store = store
        self._resolver = resolver

    def build(self, page: Page) -> str:
        return format_yaml(self.collect(page))

    def collect(self, page: Page) -> dict[str, PropertyValue]:
        data: dict[str, PropertyValue] = {}
        if page.name:
            data["title"] = page.name
            data["slug"] = slugify(page.name)

        named: list[tuple[str, str, Any]] = []
        for key, value in page.properties.items():
            if _is_empty(value):
                continue
            display = self._display_name(key)
            if display is None:
                logger.debug("Skipping unmapped property %s", key)
                continue
            named.append((key, display, value))

        tags: list[str] = []
        for _, display, value in named:
            if display in TAG_KEYS and isinstance(value, (list, tuple, set, frozenset)):
                for tag in value:
                    tag_text = self._clean_text(str(tag))
                    if tag_text and tag_text not in tags:
                        tags.append(tag_text)
        if tags:
            data["tags"] = tags

        for key, display, value in named:
            if is_system_property(key):
                continue
            if display == "blogTags" or (display == "tags" and "tags" in data):
                continue
            if display in data and display != "title":
                continue
            processed = self.process_value(value)
            if processed is None:
                logger.debug("Omitting malformed property %s", key)
                continue
            data[display] = processed

        return data

    def process_value(self, value: Any) -> PropertyValue | None:
        """Convert a raw property value into a frontmatter value."""

        if isinstance(value, bool) or isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            trimmed = value.strip()
            if trimmed.startswith("[[") and trimmed.endswith("]]"):
                return trimmed[2:-2]
            asset = self._resolver.lookup_asset(trimmed) if trimmed else None
            if asset is not None and (is_uuid(trimmed) or trimmed == asset.title):
                self._resolver.render_asset(asset)
                return f"{self._resolver.settings.asset_dir}{asset.filename}"
            return value
        if isinstance(value, (list, tuple, set, frozenset)):
            items = [self.process_value(item) for item in value]
            return [item for item in items if item is not None]
        if isinstance(value, Mapping):
            nested = {str(k): self.process_value(v) for k, v in value.items()}
            return {k: v for k, v in nested.items() if v is not None}
        return None

    def _display_name(self, key: str) -> str | None:
        try:
            name = self._store.resolve_property_name(key)
        except Exception as exc:  # unknown properties are omitted, never fatal
            logger.debug("Property name lookup for %s failed: %s", key, exc)
            name = None
        if name:
            return name
        if "/" not in key:
            return key.lstrip(":")
        return None

    def _clean_text(self, value: str) -> str:
        trimmed = value.strip()
        if trimmed.startswith("[[") and trimmed.endswith("]]"):
            trimmed = trimmed[2:-2]
        return trimmed


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (str, list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


__all__ = [
    "FRONTMATTER_DELIM",
    "FrontmatterBuilder",
    "format_yaml",
    "is_system_property",
    "property_value_strings",
    "slugify",
]
