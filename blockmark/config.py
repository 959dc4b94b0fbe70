"""Configuration management for Blockmark."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import ExportSettings
from .storage import DB_FILENAME

DEFAULT_CONFIG_DIR = Path("~/.config/blockmark").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"
DEFAULT_OUTPUT_DIRNAME = "exports"

_BOOLEAN_EXPORT_KEYS = (
    "include_page_name",
    "flatten_nested",
    "preserve_block_refs",
    "include_properties",
    "include_tags",
    "remove_logseq_syntax",
    "resolve_plain_uuids",
    "debug",
)


class ConfigError(RuntimeError):
    """Base error for configuration related issues."""


class MissingConfigError(ConfigError):
    """Raised when the configuration file cannot be found."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Configuration file not found at {path}")
        self.path = path


class InvalidConfigError(ConfigError):
    """Raised when the configuration file misses required keys or values."""


@dataclass(slots=True)
class BlockmarkConfig:
    """In-memory representation of the Blockmark configuration file."""

    graph_dir: Path
    database_path: Path
    output_dir: Path
    export: ExportSettings = field(default_factory=ExportSettings)
    max_workers: int = 4
    plugins: dict[str, dict[str, Any]] = field(default_factory=dict)
    source_path: Path | None = None


def _resolve_path(raw: Any, key: str, base_dir: Path, default: str | None) -> Path:
    if raw is None:
        if default is None:
            raise InvalidConfigError(f"'{key}' is required and must be a string")
        return (base_dir / default).expanduser().resolve()
    if not isinstance(raw, str):
        raise InvalidConfigError(f"'{key}' must be a string when provided")
    text = raw.strip()
    if not text:
        if default is None:
            raise InvalidConfigError(f"'{key}' must be a non-empty string")
        return (base_dir / default).expanduser().resolve()
    candidate = Path(text).expanduser()
    return (candidate if candidate.is_absolute() else (base_dir / candidate)).resolve()


def load_config(path: Path | None = None) -> BlockmarkConfig:
    """Load configuration from ``path`` or the default location.

    Parameters
    ----------
    path:
        Optional location of the configuration file. When ``None`` the default
        path (``~/.config/blockmark/config.toml``) is used.

    Raises
    ------
    MissingConfigError
        If the file cannot be found.
    InvalidConfigError
        If mandatory settings are missing or malformed.
    """

    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    if not config_path.exists():
        raise MissingConfigError(config_path)

    try:
        with config_path.open("rb") as fh:
            raw = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise InvalidConfigError(f"Configuration is not valid TOML: {exc}") from exc

    section = raw.get("blockmark")
    if not isinstance(section, dict):
        raise InvalidConfigError("'blockmark' section is required and must be a table")

    base_dir = (config_path.parent if path is not None else DEFAULT_CONFIG_DIR).expanduser()

    # Relative paths resolve against the configuration directory.
    graph_dir = _resolve_path(section.get("graph_dir"), "graph_dir", base_dir, None)
    database_path = _resolve_path(section.get("database"), "database", base_dir, DB_FILENAME)
    output_dir = _resolve_path(
        section.get("output_dir"), "output_dir", base_dir, DEFAULT_OUTPUT_DIRNAME
    )

    max_workers = section.get("max_workers", 4)
    if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
        raise InvalidConfigError("'max_workers' must be a positive integer")

    export_section = raw.get("export", {})
    if not isinstance(export_section, dict):
        raise InvalidConfigError("'export' must be a table when provided")
    for key in _BOOLEAN_EXPORT_KEYS:
        value = export_section.get(key)
        if value is not None and not isinstance(value, bool):
            raise InvalidConfigError(f"'export.{key}' must be a boolean")
    asset_path = export_section.get("asset_path")
    if asset_path is not None and not isinstance(asset_path, str):
        raise InvalidConfigError("'export.asset_path' must be a string")

    plugins_section = raw.get("plugins")
    plugins: dict[str, dict[str, Any]] = {}
    if isinstance(plugins_section, dict):
        for key, value in plugins_section.items():
            plugins[str(key)] = dict(value) if isinstance(value, dict) else {}

    return BlockmarkConfig(
        graph_dir=graph_dir,
        database_path=database_path,
        output_dir=output_dir,
        export=ExportSettings.from_mapping(export_section),
        max_workers=max_workers,
        plugins=plugins,
        source_path=config_path,
    )


def bootstrap_config_file(path: Path) -> bool:
    """Create a default config file if missing.

    Returns True when the file was created, False if it already existed.
    """

    if path.exists():
        return False

    config_dir = path.parent
    config_dir.mkdir(parents=True, exist_ok=True)
    default_content = (
        "[blockmark]\n"
        'graph_dir = "~/notes/graph"\n'
        f'database = "{DB_FILENAME}"\n'
        f'output_dir = "{DEFAULT_OUTPUT_DIRNAME}"\n'
        "\n"
        "[export]\n"
        "include_page_name = false\n"
        "flatten_nested = true\n"
        "preserve_block_refs = true\n"
        "include_properties = true\n"
        "include_tags = false\n"
        'asset_path = "assets/"\n'
    )
    path.write_text(default_content, encoding="utf-8")
    return True
