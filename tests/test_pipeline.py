"""Render pipeline ordering tests."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import List, Tuple

import pytest

from docsmith.errors import RenderError
from docsmith.models import AdditionalPage, PageDescriptor, PageKind, ProjectInfo, SiteData
from docsmith.pipeline import RenderPipeline
from docsmith.registry import PageRegistry
from docsmith.search import SearchIndex


class _RecordingEngine:
    """Renders ``<p>name</p>`` and records which outputs existed at each call."""

    def __init__(self, output_root: Path, events: List[Tuple[str, str]], fail_on: str | None = None) -> None:
        self.output_root = output_root
        self.events = events
        self.fail_on = fail_on

    async def render(self, site: SiteData, page: PageDescriptor) -> str:
        written = sorted(path.name for path in self.output_root.rglob("*.html"))
        self.events.append(("render", page.name + ":" + ",".join(written)))
        if page.name == self.fail_on:
            raise ValueError("template exploded")
        await asyncio.sleep(0)
        return f"<html><nav>menu</nav><p>{page.name} body</p></html>"


class _RecordingIndex(SearchIndex):
    def __init__(self, events: List[Tuple[str, str]]) -> None:
        super().__init__()
        self.events = events

    def index_page(self, infos, raw_data, url) -> None:  # type: ignore[override]
        self.events.append(("index", url))
        super().index_page(infos, raw_data, url)


def _registry() -> PageRegistry:
    registry = PageRegistry()
    registry.add_page(PageDescriptor(name="index", context="overview", depth=1))
    registry.add_page(PageDescriptor(name="modules", context="modules", depth=1))
    registry.add_page(
        PageDescriptor(name="AppModule", context="module", path="modules", depth=2, page_type=PageKind.INTERNAL)
    )
    registry.add_additional_page(
        AdditionalPage(
            name="Guide",
            context="additional-page",
            path="additional-documentation",
            depth=1,
            page_type=PageKind.INTERNAL,
            filename="guide",
        )
    )
    return registry


def test_pages_are_rendered_indexed_and_written_in_order(tmp_path: Path) -> None:
    events: List[Tuple[str, str]] = []
    index = _RecordingIndex(events)
    pipeline = RenderPipeline(_RecordingEngine(tmp_path, events), index)

    result = asyncio.run(pipeline.run(SiteData(project=ProjectInfo(title="T")), _registry(), tmp_path))

    assert events == [
        ("render", "index:"),
        ("index", "index.html"),
        ("render", "modules:index.html"),
        ("index", "modules.html"),
        ("render", "AppModule:index.html,modules.html"),
        ("index", "modules/AppModule.html"),
        ("render", "Guide:AppModule.html,index.html,modules.html"),
        ("index", "additional-documentation/guide.html"),
    ]
    assert [path.relative_to(tmp_path).as_posix() for path in result.written] == [
        "index.html",
        "modules.html",
        "modules/AppModule.html",
        "additional-documentation/guide.html",
    ]

    payload = json.loads((tmp_path / "search_index.json").read_text(encoding="utf-8"))
    assert [document["url"] for document in payload["documents"]] == [
        "index.html",
        "modules.html",
        "modules/AppModule.html",
        "additional-documentation/guide.html",
    ]
    assert payload["documents"][0]["body"] == "index body"


def test_render_failure_stops_the_run(tmp_path: Path) -> None:
    events: List[Tuple[str, str]] = []
    pipeline = RenderPipeline(_RecordingEngine(tmp_path, events, fail_on="modules"), _RecordingIndex(events))

    with pytest.raises(RenderError):
        asyncio.run(pipeline.run(SiteData(project=ProjectInfo(title="T")), _registry(), tmp_path))

    assert [kind for kind, _ in events] == ["render", "index", "render"]
    assert (tmp_path / "index.html").exists()
    assert not (tmp_path / "modules.html").exists()
    assert not (tmp_path / "search_index.json").exists()


def test_url_uses_output_name() -> None:
    page = AdditionalPage(name="First Build", context="additional-page", path="docs/guide/", filename="firstbuild")

    assert page.url == "docs/guide/firstbuild.html"
    assert PageDescriptor(name="coverage", context="coverage").url == "coverage.html"


def test_write_failure_stops_the_run(tmp_path: Path) -> None:
    events: List[Tuple[str, str]] = []
    (tmp_path / "modules.html").mkdir()
    pipeline = RenderPipeline(_RecordingEngine(tmp_path, events), _RecordingIndex(events))

    with pytest.raises(RenderError):
        asyncio.run(pipeline.run(SiteData(project=ProjectInfo(title="T")), _registry(), tmp_path))

    assert events == [
        ("render", "index:modules.html"),
        ("index", "index.html"),
        ("render", "modules:index.html,modules.html"),
        ("index", "modules.html"),
    ]
    assert not (tmp_path / "modules").exists()
    assert not (tmp_path / "additional-documentation").exists()
    assert not (tmp_path / "search_index.json").exists()
