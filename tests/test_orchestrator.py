"""End-to-end build cycle tests."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from docsmith.errors import BuildAborted, ExternalToolFailure
from docsmith.models import Module
from docsmith.orchestrator import Orchestrator
from docsmith.service import ServeOptions
from tests._fixtures.project_builder import MINIMAL_SOURCES, ProjectBuilder, minimal_graph


class _RecordingGraphRenderer:
    def __init__(self, fail: bool = False) -> None:
        self.calls: List[tuple[Path, str, Optional[str]]] = []
        self.fail = fail

    async def render_graph(
        self, modules: Sequence[Module], output_prefix: Path, mode: str, label: Optional[str] = None
    ) -> Path:
        self.calls.append((output_prefix, mode, label))
        if self.fail:
            raise ExternalToolFailure("dot not installed", subject=label)
        return output_prefix / "dependencies.svg"


class _RecordingServer:
    def __init__(self) -> None:
        self.starts: List[tuple[Path, ServeOptions]] = []

    def start(self, root_dir: Path, options: ServeOptions | None = None) -> None:
        self.starts.append((root_dir, options))


def _html_files(output: Path) -> List[str]:
    return sorted(path.relative_to(output).as_posix() for path in output.rglob("*.html"))


def _minimal_project(project_builder: ProjectBuilder, *, readme: bool = True) -> None:
    project_builder.write(MINIMAL_SOURCES)
    if readme:
        project_builder.write({"README.md": "# Shop\n\nOnline shop front end.\n"})
    project_builder.write_graph(minimal_graph())


def _build(orchestrator: Orchestrator):
    orchestrator.discover_files()
    return asyncio.run(orchestrator.build())


def test_minimal_project_writes_six_pages(project_builder: ProjectBuilder) -> None:
    _minimal_project(project_builder)
    orchestrator = Orchestrator(project_builder.config())

    result = _build(orchestrator)

    output = project_builder.path().resolve() / "documentation"
    assert _html_files(output) == [
        "components/AppComponent.html",
        "coverage.html",
        "index.html",
        "modules.html",
        "modules/AppModule.html",
        "overview.html",
    ]
    assert [path.relative_to(output).as_posix() for path in result.written] == [
        "index.html",
        "overview.html",
        "modules.html",
        "modules/AppModule.html",
        "components/AppComponent.html",
        "coverage.html",
    ]

    assert result.coverage is not None
    assert len(result.coverage.records) == 1
    assert result.coverage.records[0].percent == 100
    assert result.coverage.records[0].status == "very-good"

    assert "<h1>Shop</h1>" in (output / "index.html").read_text(encoding="utf-8")
    assert (output / "styles" / "style.css").exists()
    assert (output / "js" / "search.js").exists()
    coverage = json.loads((output / "coverage.json").read_text(encoding="utf-8"))
    assert coverage["count"] == 100
    index = json.loads((output / "search_index.json").read_text(encoding="utf-8"))
    assert len(index["documents"]) == 6


def test_project_without_readme_uses_overview_as_index(project_builder: ProjectBuilder) -> None:
    _minimal_project(project_builder, readme=False)

    result = _build(Orchestrator(project_builder.config(disable_coverage=True)))

    assert [path.name for path in result.written] == [
        "index.html",
        "modules.html",
        "AppModule.html",
        "AppComponent.html",
    ]
    assert result.coverage is None


def test_package_json_names_the_project(project_builder: ProjectBuilder) -> None:
    _minimal_project(project_builder)
    project_builder.write({"package.json": '{"name": "shop", "description": "Storefront"}'})

    _build(Orchestrator(project_builder.config()))

    overview = (project_builder.path().resolve() / "documentation" / "overview.html").read_text(encoding="utf-8")
    assert "shop documentation" in overview
    assert "Storefront" in overview


def test_micro_rebuild_merges_changed_file(project_builder: ProjectBuilder) -> None:
    _minimal_project(project_builder)
    orchestrator = Orchestrator(project_builder.config())
    _build(orchestrator)

    graph = minimal_graph()
    graph["components"][0]["description"] = ""
    project_builder.write_graph(graph)
    changed = str(project_builder.path() / "src/app/app.component.ts")

    result = asyncio.run(orchestrator.build([changed]))

    assert result.micro is True
    assert result.coverage is not None
    assert result.coverage.records[0].percent == 66
    assert [module.name for module in orchestrator.store.get_modules()] == ["AppModule"]


def test_additional_documentation_is_rendered(project_builder: ProjectBuilder) -> None:
    _minimal_project(project_builder)
    project_builder.write(
        {
            "docs/summary.json": '[{"title": "Getting Started", "file": "start.md"}]',
            "docs/start.md": "# Start here\n",
        }
    )

    result = _build(Orchestrator(project_builder.config(includes="docs")))

    output = project_builder.path().resolve() / "documentation"
    page = output / "additional-documentation" / "gettingstarted.html"
    assert result.written[-1] == page
    assert "<h1>Start here</h1>" in page.read_text(encoding="utf-8")


def test_undecodable_manifest_does_not_abort_the_build(project_builder: ProjectBuilder) -> None:
    _minimal_project(project_builder)
    docs = project_builder.path() / "docs"
    docs.mkdir()
    (docs / "summary.json").write_bytes(b'[{"title": "G\xff", "file": "g.md"}]')

    result = _build(Orchestrator(project_builder.config(includes="docs")))

    output = project_builder.path().resolve() / "documentation"
    assert len(result.written) == 6
    assert not (output / "additional-documentation").exists()

def test_missing_component_template_aborts_the_build(project_builder: ProjectBuilder) -> None:
    _minimal_project(project_builder)
    graph = minimal_graph()
    graph["components"][0]["templateUrl"] = "./app.component.html"
    project_builder.write_graph(graph)

    with pytest.raises(BuildAborted) as excinfo:
        _build(Orchestrator(project_builder.config()))

    assert excinfo.value.stage == "projection"
    assert not (project_builder.path().resolve() / "documentation" / "index.html").exists()


def test_graphs_are_rendered_and_failures_are_not_fatal(project_builder: ProjectBuilder) -> None:
    _minimal_project(project_builder)
    renderer = _RecordingGraphRenderer(fail=True)
    orchestrator = Orchestrator(project_builder.config(disable_graph=False), graph_renderer=renderer)

    result = _build(orchestrator)

    output = project_builder.path().resolve() / "documentation"
    assert renderer.calls == [
        (output / "graph", "p", None),
        (output / "modules" / "AppModule", "f", "AppModule"),
    ]
    assert len(result.written) == 6


def test_server_starts_once_across_rebuilds(project_builder: ProjectBuilder) -> None:
    _minimal_project(project_builder)
    server = _RecordingServer()
    orchestrator = Orchestrator(project_builder.config(serve=True, port=9100), server=server)

    asyncio.run(orchestrator.run_async())
    asyncio.run(orchestrator.full_rebuild())

    assert len(server.starts) == 1
    root_dir, options = server.starts[0]
    assert root_dir == project_builder.path().resolve() / "documentation"
    assert options.port == 9100
