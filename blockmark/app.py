"""Application bootstrap and context container for Blockmark."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import BlockmarkConfig, load_config
from .files import LocalFiles
from .markdown.exporter import PageExporter
from .notify import ClickNotifier
from .storage import GraphStorage


@dataclass(slots=True)
class AppContext:
    """Aggregates core services for the CLI lifecycle."""

    config: BlockmarkConfig
    storage: GraphStorage
    files: LocalFiles
    notifier: ClickNotifier
    exporter: PageExporter


def bootstrap(
    config_path: Path | None, *, output_dir: Path | None = None
) -> AppContext:
    """Load configuration and wire storage, files and the page exporter."""

    # Error mapping is left to the CLI, which knows how to present messages.
    config = load_config(config_path)

    storage = GraphStorage(config.database_path, graph_root=config.graph_dir)
    storage.initialize()

    files = LocalFiles(output_dir or config.output_dir)
    notifier = ClickNotifier()
    exporter = PageExporter(
        storage,
        files,
        notifier,
        config.export,
        max_workers=config.max_workers,
    )
    return AppContext(
        config=config,
        storage=storage,
        files=files,
        notifier=notifier,
        exporter=exporter,
    )


__all__ = ["AppContext", "bootstrap"]
