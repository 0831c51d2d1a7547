"""Helper utilities for constructing temporary projects in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping

from docsmith.config import BuildConfig


class ProjectBuilder:
    """Writes source files and a dependency graph into a throwaway project."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_graph(self, graph: Mapping[str, Any], name: str = "dependencies.json") -> Path:
        """Write the dependency graph consumed by the json extractor."""
        target = self.root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(graph, indent=2), encoding="utf-8")
        return target

    def config(self, **overrides: Any) -> BuildConfig:
        """Return a build configuration rooted at the project."""
        defaults: dict[str, Any] = {"disable_graph": True}
        defaults.update(overrides)
        return BuildConfig(root=self.root.resolve(), **defaults)

    def path(self) -> Path:
        return self.root


def minimal_graph() -> dict[str, Any]:
    """One module declaring one fully documented component."""
    return {
        "modules": [
            {
                "name": "AppModule",
                "file": "src/app/app.module.ts",
                "declarations": [{"name": "AppComponent", "type": "component"}],
                "bootstrap": [{"name": "AppComponent", "type": "component"}],
            }
        ],
        "components": [
            {
                "name": "AppComponent",
                "file": "src/app/app.component.ts",
                "description": "Root component",
                "selector": "app-root",
                "properties": [{"name": "title", "description": "Page title"}],
                "methods": [{"name": "ngOnInit", "description": "Loads the title"}],
                "inputs": [],
                "outputs": [],
            }
        ],
    }


MINIMAL_SOURCES = {
    "src/app/app.module.ts": "export class AppModule {}\n",
    "src/app/app.component.ts": "export class AppComponent {}\n",
}


__all__ = ["MINIMAL_SOURCES", "ProjectBuilder", "minimal_graph"]
