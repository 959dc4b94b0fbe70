"""Blockmark plugin infrastructure based on pluggy."""

from __future__ import annotations

from ._markers import ENTRY_POINT_GROUP, PLUGIN_NAMESPACE, hookimpl, hookspec
from .manager import (
    PluginRegistrationError,
    create_plugin_manager,
    get_plugin_manager,
    load_export_contributions,
    reset_plugin_manager_cache,
)
from .types import ExportContribution, ExportHandler

__all__ = [
    "ExportContribution",
    "ExportHandler",
    "ENTRY_POINT_GROUP",
    "PLUGIN_NAMESPACE",
    "PluginRegistrationError",
    "create_plugin_manager",
    "get_plugin_manager",
    "hookimpl",
    "hookspec",
    "load_export_contributions",
    "reset_plugin_manager_cache",
]
