"""Dependency graph images rendered with pydot."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import pydot

from ..errors import ExternalToolFailure
from ..fileio import run_blocking
from ..models import Module

_KIND_COLORS = {
    "module": "#2b6cb0",
    "component": "#2f855a",
    "directive": "#b7791f",
    "pipe": "#6b46c1",
    "injectable": "#c53030",
}
_DEFAULT_COLOR = "#4a5568"

PROJECT_MODE = "p"
MODULE_MODE = "f"


class GraphRenderer:
    """Writes ``dependencies.dot`` and ``dependencies.svg`` below an output prefix.

    Mode ``p`` draws every module and its imports; mode ``f`` draws a single
    module (selected by ``label``) with its declarations, imports, exports and
    providers. The SVG needs the Graphviz ``dot`` binary; the DOT source is
    always written.
    """

    def __init__(self, *, image_format: str = "svg") -> None:
        self.image_format = image_format

    async def render_graph(
        self,
        modules: Sequence[Module],
        output_prefix: Path,
        mode: str,
        label: Optional[str] = None,
    ) -> Path:
        if mode == PROJECT_MODE:
            graph = self._project_graph(modules)
        elif mode == MODULE_MODE:
            module = next((item for item in modules if item.name == label), None)
            if module is None:
                raise ExternalToolFailure(f"Unknown module '{label}' for graph rendering", subject=label)
            graph = self._module_graph(module)
        else:
            raise ValueError(f"Unsupported graph mode: {mode}")
        return await run_blocking(self._write, graph, output_prefix, label)

    def _write(self, graph: pydot.Dot, output_prefix: Path, label: Optional[str]) -> Path:
        output_prefix.mkdir(parents=True, exist_ok=True)
        dot_path = output_prefix / "dependencies.dot"
        dot_path.write_text(graph.to_string(), encoding="utf-8")
        image_path = output_prefix / f"dependencies.{self.image_format}"
        try:
            payload = graph.create(format=self.image_format)
        except Exception as exc:
            raise ExternalToolFailure(
                f"Graphviz could not render {image_path.name}: {exc}", subject=label
            ) from exc
        image_path.write_bytes(payload)
        return image_path

    def _project_graph(self, modules: Sequence[Module]) -> pydot.Dot:
        graph = pydot.Dot(graph_type="digraph", rankdir="LR")
        for module in sorted(modules, key=lambda item: item.name):
            graph.add_node(self._node(module.name, "module"))
        for module in modules:
            for ref in module.imports:
                graph.add_edge(pydot.Edge(module.name, ref.name, color=_DEFAULT_COLOR))
        return graph

    def _module_graph(self, module: Module) -> pydot.Dot:
        graph = pydot.Dot(graph_type="digraph", rankdir="LR")
        graph.add_node(self._node(module.name, "module", bold=True))
        for relation, refs in (
            ("declares", module.declarations),
            ("imports", module.imports),
            ("exports", module.exports),
            ("provides", module.providers),
        ):
            for ref in refs:
                graph.add_node(self._node(ref.name, ref.kind))
                graph.add_edge(pydot.Edge(module.name, ref.name, label=relation, fontsize="8"))
        return graph

    @staticmethod
    def _node(name: str, kind: str, *, bold: bool = False) -> pydot.Node:
        return pydot.Node(
            name,
            shape="box",
            color=_KIND_COLORS.get(kind, _DEFAULT_COLOR),
            style="bold" if bold else "solid",
        )


__all__ = ["GraphRenderer", "MODULE_MODE", "PROJECT_MODE"]
