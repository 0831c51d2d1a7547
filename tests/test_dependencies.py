"""Tests for the dependency store merge rules."""

from __future__ import annotations

from pathlib import Path

from docsmith.dependencies import DependencyStore
from docsmith.models import Component, EntityGraph, MiscItem, Miscellaneous, Module, RouteNode


def _graph() -> EntityGraph:
    return EntityGraph(
        modules=[Module(name="AppModule", file="src/app.module.ts")],
        components=[
            Component(name="HeaderComponent", file="src/header.component.ts"),
            Component(name="FooterComponent", file="src/footer.component.ts"),
        ],
        routes=RouteNode(name="<root>", children=[RouteNode(name="home", path="home")]),
        miscellaneous=Miscellaneous(variables=[MiscItem(name="VERSION", file="src/footer.component.ts")]),
    )


def test_init_replaces_graph_wholesale(tmp_path: Path) -> None:
    store = DependencyStore(tmp_path)
    store.init(_graph())
    store.init(EntityGraph(modules=[Module(name="OtherModule", file="src/other.module.ts")]))

    assert [module.name for module in store.get_modules()] == ["OtherModule"]
    assert store.get_components() == []
    assert store.get_routes() is None


def test_update_supersedes_entities_of_refreshed_files(tmp_path: Path) -> None:
    store = DependencyStore(tmp_path)
    store.init(_graph())
    partial = EntityGraph(
        components=[
            Component(name="FooterComponent", file="src/footer.component.ts", description="Updated")
        ]
    )

    store.update(partial, [str(tmp_path / "src/footer.component.ts")])

    components = {component.name: component for component in store.get_components()}
    assert set(components) == {"HeaderComponent", "FooterComponent"}
    assert components["FooterComponent"].description == "Updated"
    assert store.get_miscellaneous().variables == []
    assert [module.name for module in store.get_modules()] == ["AppModule"]
    assert store.get_routes() is not None


def test_update_drops_entities_removed_from_a_refreshed_file(tmp_path: Path) -> None:
    store = DependencyStore(tmp_path)
    store.init(_graph())

    store.update(EntityGraph(), [str(tmp_path / "src/header.component.ts")])

    assert [component.name for component in store.get_components()] == ["FooterComponent"]


def test_getters_return_copies(tmp_path: Path) -> None:
    store = DependencyStore(tmp_path)
    store.init(_graph())

    store.get_components().clear()

    assert len(store.get_components()) == 2
    assert store.known_names("components") == {"HeaderComponent", "FooterComponent"}
