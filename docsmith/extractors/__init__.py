"""Extractor plugin implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable

from .base import ExtractOptions, Extractor
from .json_graph import JsonGraphExtractor, graph_from_dict

_ENTRY_POINT_GROUP = "docsmith.extractors"

_BUILTIN_FACTORIES: dict[str, Callable[[], Extractor]] = {
    "json": JsonGraphExtractor,
}


def resolve_extractor(name: str) -> Extractor:
    """Return an extractor instance registered under ``name``."""
    key = name.strip().lower()
    factory = _BUILTIN_FACTORIES.get(key)
    if factory is not None:
        return factory()

    for entry in _iter_entry_points():
        if entry.name.lower() != key:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(f"Failed to load extractor entry point '{name}': {exc}") from exc
        return _coerce_extractor(loaded)

    raise ValueError(f"Unknown extractor requested: {name}")


def _coerce_extractor(obj: object) -> Extractor:
    if isinstance(obj, Extractor):
        return obj
    if isinstance(obj, type) and issubclass(obj, Extractor):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Extractor):
            return instance
    raise TypeError("Extractor entry point must be an Extractor subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "ExtractOptions",
    "Extractor",
    "JsonGraphExtractor",
    "graph_from_dict",
    "resolve_extractor",
]
