"""Extractor that reads a dependency graph exported by an external analyzer.

The graph file is a JSON document with one list per entity collection::

    {
      "modules": [{"name": "AppModule", "file": "src/app/app.module.ts",
                   "declarations": [{"name": "AppComponent", "type": "component"}]}],
      "components": [{"name": "AppComponent", "file": "src/app/app.component.ts",
                      "properties": [{"name": "title", "description": "Page title"}]}],
      "routes": {"name": "<root>", "children": [...]},
      "miscellaneous": {"variables": [...], "functions": [...]}
    }

Only entities declared in the requested files are returned, which is what lets
a watch-mode content change re-extract a single file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Sequence, Set, TypeVar

from ..logging import get_logger
from ..models import (
    MISC_GROUPS,
    ClassDoc,
    Component,
    Directive,
    Entity,
    EntityGraph,
    Injectable,
    Interface,
    Member,
    MiscItem,
    Miscellaneous,
    Module,
    ModuleRef,
    Pipe,
    RouteNode,
)
from .base import ExtractOptions, Extractor

DEFAULT_GRAPH_FILE = "dependencies.json"

_MISC_SUBTYPES = {
    "variables": "variable",
    "functions": "function",
    "typealiases": "typealias",
    "enumerations": "enumeration",
    "types": "type",
}

E = TypeVar("E", bound=Entity)


class JsonGraphExtractor(Extractor):
    """Loads entities from a JSON dependency graph on disk."""

    def __init__(self) -> None:
        self.logger = get_logger("extractors.json")

    def extract(self, files: Sequence[str], options: ExtractOptions) -> EntityGraph:
        graph_path = options.graph_file or (options.root / DEFAULT_GRAPH_FILE)
        try:
            data = json.loads(graph_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            self.logger.error("Dependency graph %s not found; continuing with an empty graph", graph_path)
            return EntityGraph()
        except (OSError, json.JSONDecodeError) as exc:
            self.logger.error("Unable to read dependency graph %s: %s", graph_path, exc)
            return EntityGraph()
        if not isinstance(data, dict):
            self.logger.error("Dependency graph %s must contain a mapping at the root", graph_path)
            return EntityGraph()

        graph = graph_from_dict(data, logger=self.logger)
        wanted = {_normalise(options.root, file) for file in files}
        return _restrict(graph, options.root, wanted)


def graph_from_dict(data: Mapping[str, Any], *, logger: Any = None) -> EntityGraph:
    """Build an :class:`EntityGraph` from its JSON representation, skipping bad rows."""
    log = logger or get_logger("extractors.json")

    def _collect(key: str, factory: Callable[[Mapping[str, Any]], E]) -> List[E]:
        items: List[E] = []
        for raw in _as_list(data.get(key)):
            if not isinstance(raw, dict) or not raw.get("name") or not raw.get("file"):
                log.debug("Skipping malformed %s entry: %r", key, raw)
                continue
            items.append(factory(raw))
        return items

    misc_data = data.get("miscellaneous") if isinstance(data.get("miscellaneous"), dict) else {}
    miscellaneous = Miscellaneous()
    for group in MISC_GROUPS:
        entries = [
            MiscItem(
                name=str(raw["name"]),
                file=str(raw["file"]),
                description=_text(raw.get("description")),
                subtype=_MISC_SUBTYPES[group],
            )
            for raw in _as_list(misc_data.get(group))
            if isinstance(raw, dict) and raw.get("name") and raw.get("file")
        ]
        setattr(miscellaneous, group, entries)

    routes_data = data.get("routes")
    return EntityGraph(
        modules=_collect("modules", _module),
        components=_collect("components", _component),
        directives=_collect("directives", _directive),
        injectables=_collect("injectables", _injectable),
        pipes=_collect("pipes", _pipe),
        classes=_collect("classes", _class),
        interfaces=_collect("interfaces", _interface),
        routes=_route(routes_data) if isinstance(routes_data, dict) else None,
        miscellaneous=miscellaneous,
    )


def _restrict(graph: EntityGraph, root: Path, wanted: Set[str]) -> EntityGraph:
    def _keep(entities: List[E]) -> List[E]:
        return [entity for entity in entities if _normalise(root, entity.file) in wanted]

    miscellaneous = Miscellaneous()
    for group in MISC_GROUPS:
        setattr(miscellaneous, group, _keep(getattr(graph.miscellaneous, group)))

    routes = graph.routes
    if routes is not None and routes.file and _normalise(root, routes.file) not in wanted:
        routes = None

    return EntityGraph(
        modules=_keep(graph.modules),
        components=_keep(graph.components),
        directives=_keep(graph.directives),
        injectables=_keep(graph.injectables),
        pipes=_keep(graph.pipes),
        classes=_keep(graph.classes),
        interfaces=_keep(graph.interfaces),
        routes=routes,
        miscellaneous=miscellaneous,
    )


def _normalise(root: Path, file: str) -> str:
    path = Path(file)
    if not path.is_absolute():
        path = root / path
    return str(path.resolve())


def _module(raw: Mapping[str, Any]) -> Module:
    return Module(
        name=str(raw["name"]),
        file=str(raw["file"]),
        description=_text(raw.get("description")),
        declarations=_refs(raw.get("declarations")),
        bootstrap=_refs(raw.get("bootstrap")),
        imports=_refs(raw.get("imports")),
        exports=_refs(raw.get("exports")),
        providers=_refs(raw.get("providers"), default_kind="injectable"),
    )


def _component(raw: Mapping[str, Any]) -> Component:
    return Component(
        name=str(raw["name"]),
        file=str(raw["file"]),
        description=_text(raw.get("description")),
        selector=_text(raw.get("selector")),
        template_url=_text(raw.get("template_url", raw.get("templateUrl"))),
        properties=_members(raw, "properties", "propertiesClass"),
        methods=_members(raw, "methods", "methodsClass"),
        inputs=_members(raw, "inputs", "inputsClass"),
        outputs=_members(raw, "outputs", "outputsClass"),
    )


def _directive(raw: Mapping[str, Any]) -> Directive:
    return Directive(
        name=str(raw["name"]),
        file=str(raw["file"]),
        description=_text(raw.get("description")),
        selector=_text(raw.get("selector")),
        properties=_members(raw, "properties", "propertiesClass"),
        methods=_members(raw, "methods", "methodsClass"),
        inputs=_members(raw, "inputs", "inputsClass"),
        outputs=_members(raw, "outputs", "outputsClass"),
    )


def _injectable(raw: Mapping[str, Any]) -> Injectable:
    return Injectable(
        name=str(raw["name"]),
        file=str(raw["file"]),
        description=_text(raw.get("description")),
        properties=_members(raw, "properties"),
        methods=_members(raw, "methods"),
    )


def _pipe(raw: Mapping[str, Any]) -> Pipe:
    return Pipe(
        name=str(raw["name"]),
        file=str(raw["file"]),
        description=_text(raw.get("description")),
        pipe_name=_text(raw.get("pipe_name", raw.get("ngname"))),
    )


def _class(raw: Mapping[str, Any]) -> ClassDoc:
    return ClassDoc(
        name=str(raw["name"]),
        file=str(raw["file"]),
        description=_text(raw.get("description")),
        properties=_members(raw, "properties"),
        methods=_members(raw, "methods"),
    )


def _interface(raw: Mapping[str, Any]) -> Interface:
    return Interface(
        name=str(raw["name"]),
        file=str(raw["file"]),
        description=_text(raw.get("description")),
        properties=_members(raw, "properties"),
        methods=_members(raw, "methods"),
    )


def _route(raw: Mapping[str, Any]) -> RouteNode:
    return RouteNode(
        name=_text(raw.get("name")) or "<root>",
        path=_text(raw.get("path")),
        component=_text(raw.get("component")) or None,
        file=_text(raw.get("file")) or None,
        children=[_route(child) for child in _as_list(raw.get("children")) if isinstance(child, dict)],
    )


def _refs(value: Any, *, default_kind: str = "unknown") -> List[ModuleRef]:
    refs: List[ModuleRef] = []
    for item in _as_list(value):
        if isinstance(item, str):
            refs.append(ModuleRef(name=item, kind=default_kind))
        elif isinstance(item, dict) and item.get("name"):
            kind = item.get("type", item.get("kind", default_kind))
            refs.append(ModuleRef(name=str(item["name"]), kind=str(kind).lower()))
    return refs


def _members(raw: Mapping[str, Any], *keys: str) -> Optional[List[Member]]:
    for key in keys:
        if key in raw and isinstance(raw[key], list):
            return [
                Member(
                    name=str(item.get("name", "")),
                    description=_text(item.get("description")),
                    type=_text(item.get("type")) or None,
                )
                for item in raw[key]
                if isinstance(item, dict)
            ]
    return None


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any) -> str:
    return str(value) if isinstance(value, (str, int, float)) else ""


__all__ = ["DEFAULT_GRAPH_FILE", "JsonGraphExtractor", "graph_from_dict"]
