"""Global entity set shared across build cycles."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Set

from .logging import get_logger
from .models import (
    ENTITY_COLLECTIONS,
    MISC_GROUPS,
    ClassDoc,
    Component,
    Directive,
    EntityGraph,
    Injectable,
    Interface,
    Miscellaneous,
    Module,
    Pipe,
    RouteNode,
)


class DependencyStore:
    """Holds the current entity graph.

    A full extraction replaces the graph wholesale; a partial extraction is merged
    by file identity so that a file's previous entities are superseded by its
    freshly extracted ones.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self._graph = EntityGraph()
        self.logger = get_logger("dependencies")

    def init(self, graph: EntityGraph) -> None:
        self._graph = graph
        self.logger.debug("Dependency store initialised with %d file(s)", len(graph.files()))

    def update(self, partial: EntityGraph, files: Iterable[str]) -> None:
        refreshed = {self._key(file) for file in files}
        refreshed.update(self._key(file) for file in partial.files())
        merged = EntityGraph()
        for collection in ENTITY_COLLECTIONS:
            kept = [
                entity
                for entity in getattr(self._graph, collection)
                if self._key(entity.file) not in refreshed
            ]
            kept.extend(getattr(partial, collection))
            setattr(merged, collection, kept)

        miscellaneous = Miscellaneous()
        for group in MISC_GROUPS:
            kept_items = [
                item
                for item in getattr(self._graph.miscellaneous, group)
                if self._key(item.file) not in refreshed
            ]
            kept_items.extend(getattr(partial.miscellaneous, group))
            setattr(miscellaneous, group, kept_items)
        merged.miscellaneous = miscellaneous
        merged.routes = partial.routes if partial.routes is not None else self._graph.routes

        self._graph = merged
        self.logger.debug("Dependency store merged %d refreshed file(s)", len(refreshed))

    @property
    def graph(self) -> EntityGraph:
        return self._graph

    def get_modules(self) -> List[Module]:
        return list(self._graph.modules)

    def get_components(self) -> List[Component]:
        return list(self._graph.components)

    def get_directives(self) -> List[Directive]:
        return list(self._graph.directives)

    def get_injectables(self) -> List[Injectable]:
        return list(self._graph.injectables)

    def get_pipes(self) -> List[Pipe]:
        return list(self._graph.pipes)

    def get_classes(self) -> List[ClassDoc]:
        return list(self._graph.classes)

    def get_interfaces(self) -> List[Interface]:
        return list(self._graph.interfaces)

    def get_routes(self) -> Optional[RouteNode]:
        return self._graph.routes

    def get_miscellaneous(self) -> Miscellaneous:
        return self._graph.miscellaneous

    def known_names(self, collection: str) -> Set[str]:
        return {entity.name for entity in getattr(self._graph, collection)}

    def _key(self, file: str) -> str:
        path = Path(file)
        if not path.is_absolute() and self.root is not None:
            path = self.root / path
        return str(path.resolve())


__all__ = ["DependencyStore"]
