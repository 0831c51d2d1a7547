"""Configuration loading for docsmith (.docsmith.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".docsmith.yml"
DEFAULT_TITLE = "Application documentation"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class BuildConfig:
    """Represents the settings defined in .docsmith.yml."""

    root: Path
    output: str = "documentation"
    theme: str = "gitbook"
    title: str = DEFAULT_TITLE
    description: str = ""
    source_root: Optional[str] = None
    source_extension: str = ".ts"
    extractor: str = "json"
    graph_file: Optional[str] = None
    includes: Optional[str] = None
    includes_folder: str = "additional-documentation"
    assets_folder: Optional[str] = None
    ext_theme: Optional[str] = None
    disable_coverage: bool = False
    disable_graph: bool = False
    serve: bool = False
    host: str = "127.0.0.1"
    port: int = 8080
    open: bool = False
    watch: bool = False
    debounce_seconds: float = 1.0
    exclude: List[str] = field(default_factory=list)

    @property
    def output_path(self) -> Path:
        return (self.root / self.output).resolve()

    @property
    def title_is_default(self) -> bool:
        return self.title == DEFAULT_TITLE

    def with_overrides(self, overrides: Mapping[str, Any]) -> "BuildConfig":
        """Return a copy with non-None ``overrides`` applied (CLI flags win)."""
        known = {item.name for item in fields(self)}
        changes = {key: value for key, value in overrides.items() if key in known and value is not None}
        return replace(self, **changes)


def load_config(config_path: Path) -> BuildConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return BuildConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = BuildConfig(root=root)

    for key in (
        "output",
        "theme",
        "title",
        "description",
        "source_extension",
        "extractor",
        "includes_folder",
        "host",
    ):
        value = _as_str(data.get(key))
        if value:
            setattr(config, key, value)

    for key in ("source_root", "graph_file", "includes", "assets_folder", "ext_theme"):
        setattr(config, key, _as_str(data.get(key)))

    for key in ("disable_coverage", "disable_graph", "serve", "open", "watch"):
        flag = _as_bool(data.get(key))
        if flag is not None:
            setattr(config, key, flag)

    port = _as_int(data.get("port"))
    if port is not None:
        config.port = port

    debounce = _as_float(data.get("debounce_seconds"))
    if debounce is not None and debounce >= 0:
        config.debounce_seconds = debounce

    if not config.source_extension.startswith("."):
        config.source_extension = "." + config.source_extension

    config.exclude = _as_str_list(data.get("exclude"))
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["BuildConfig", "ConfigError", "DEFAULT_TITLE", "load_config"]
