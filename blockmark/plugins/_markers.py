"""Pluggy markers and constants for the Blockmark plugin namespace."""

from __future__ import annotations

import pluggy

PLUGIN_NAMESPACE = "blockmark"
ENTRY_POINT_GROUP = "blockmark.plugins"

hookspec = pluggy.HookspecMarker(PLUGIN_NAMESPACE)
hookimpl = pluggy.HookimplMarker(PLUGIN_NAMESPACE)

__all__ = ["PLUGIN_NAMESPACE", "ENTRY_POINT_GROUP", "hookspec", "hookimpl"]
