"""Plugin manager construction and output format discovery."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from functools import lru_cache

import pluggy

from ..config import BlockmarkConfig
from ._markers import ENTRY_POINT_GROUP, PLUGIN_NAMESPACE
from .spec import BlockmarkHookSpec
from .types import ExportContribution


class PluginRegistrationError(RuntimeError):
    """Raised when a plugin fails validation or registration."""


def create_plugin_manager(*, load_entry_points: bool = True) -> pluggy.PluginManager:
    """Return a manager knowing the Blockmark hooks, with installed plugins loaded."""

    manager = pluggy.PluginManager(PLUGIN_NAMESPACE)
    manager.add_hookspecs(BlockmarkHookSpec)
    if load_entry_points:
        manager.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
    return manager


def register_modules(manager: pluggy.PluginManager, modules: Sequence[object]) -> None:
    """Register in-process plugin modules, reporting invalid ones uniformly."""

    for module in modules:
        try:
            manager.register(module)
        except (pluggy.PluginValidationError, ValueError) as exc:
            name = getattr(module, "__name__", repr(module))
            raise PluginRegistrationError(f"Cannot register plugin '{name}': {exc}") from exc


def iter_export_contributions(
    manager: pluggy.PluginManager,
    config: BlockmarkConfig | None,
) -> Iterator[tuple[str, ExportContribution]]:
    """Yield ``(plugin name, contribution)`` pairs in registration order."""

    for impl in manager.hook.export_formats.get_hookimpls():
        kwargs = {"config": config} if "config" in impl.argnames else {}
        result = impl.function(**kwargs)
        for contribution in _as_contributions(result, impl.plugin_name):
            yield impl.plugin_name, contribution


@lru_cache(maxsize=1)
def _builtin_plugin_modules() -> tuple[object, ...]:
    from .builtin import BUILTIN_PLUGINS

    return tuple(BUILTIN_PLUGINS)


@lru_cache(maxsize=1)
def _build_plugin_manager() -> pluggy.PluginManager:
    manager = create_plugin_manager()
    register_modules(manager, _builtin_plugin_modules())
    return manager


def get_plugin_manager() -> pluggy.PluginManager:
    """Return the process-wide plugin manager, building it on first use."""

    return _build_plugin_manager()


def reset_plugin_manager_cache() -> None:
    """Forget the cached manager so the next lookup rediscovers plugins."""

    _build_plugin_manager.cache_clear()
    _builtin_plugin_modules.cache_clear()


def load_export_contributions(
    config: BlockmarkConfig | None = None,
) -> dict[str, ExportContribution]:
    """Map lower-cased format ids to their contributions.

    Raises
    ------
    PluginRegistrationError
        If a plugin returns something other than contributions, or two plugins
        claim the same format id.
    """

    owners: dict[str, str] = {}
    registry: dict[str, ExportContribution] = {}
    for plugin_name, contribution in iter_export_contributions(get_plugin_manager(), config):
        key = contribution.format_id.lower()
        if key in registry:
            raise PluginRegistrationError(
                f"Duplicate export format '{contribution.format_id}' "
                f"from '{plugin_name}' (already provided by '{owners[key]}')."
            )
        owners[key] = plugin_name
        registry[key] = contribution
    return registry


def _as_contributions(result: object, plugin_name: str) -> tuple[ExportContribution, ...]:
    if result is None:
        return ()
    if isinstance(result, ExportContribution):
        items: Iterable[object] = (result,)
    elif isinstance(result, Iterable) and not isinstance(result, (str, bytes)):
        items = result
    else:
        raise PluginRegistrationError(
            f"Plugin '{plugin_name}' must return export contributions, got {type(result).__name__}."
        )

    contributions: list[ExportContribution] = []
    for item in items:
        if not isinstance(item, ExportContribution):
            raise PluginRegistrationError(
                f"Plugin '{plugin_name}' returned {type(item).__name__} "
                "instead of an ExportContribution."
            )
        if not item.format_id.strip() or not callable(item.formatter):
            raise PluginRegistrationError(
                f"Plugin '{plugin_name}' returned an export format without an id or formatter."
            )
        contributions.append(item)
    return tuple(contributions)


__all__ = [
    "PluginRegistrationError",
    "create_plugin_manager",
    "get_plugin_manager",
    "iter_export_contributions",
    "load_export_contributions",
    "register_modules",
    "reset_plugin_manager_cache",
]
