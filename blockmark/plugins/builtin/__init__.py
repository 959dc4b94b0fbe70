"""Built-in Blockmark output formats."""

from __future__ import annotations

from . import archive, clipboard, markdown

BUILTIN_PLUGINS = (archive, clipboard, markdown)

__all__ = ["BUILTIN_PLUGINS"]
