"""Render pipeline: renders, indexes and writes every registered page in order."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Protocol, Sequence

from .errors import RenderError
from .fileio import output_file
from .logging import get_logger, log_exception
from .models import PageDescriptor, SiteData
from .registry import PageRegistry
from .search import SearchIndex


class TemplateEngine(Protocol):
    async def render(self, site: SiteData, page: PageDescriptor) -> str: ...


@dataclass
class PipelineResult:
    written: List[Path] = field(default_factory=list)
    search_index: Path | None = None


class RenderPipeline:
    """Drains the page registry, then the additional pages, one page at a time.

    A page is rendered, indexed and written before the next one starts, so the
    search index and the output directory always agree on what was produced. The
    first render or write failure stops the run.
    """

    def __init__(self, engine: TemplateEngine, search_index: SearchIndex) -> None:
        self.engine = engine
        self.search_index = search_index
        self.logger = get_logger("pipeline")

    async def run(self, site: SiteData, registry: PageRegistry, output_root: Path) -> PipelineResult:
        result = PipelineResult()

        self.logger.info("Process pages")
        await self._process_all(site, registry.pages, output_root, result)

        additional = registry.additional_pages
        if additional:
            self.logger.info("Process additional pages")
            await self._process_all(site, additional, output_root, result)

        result.search_index = await self.search_index.flush(output_root)
        return result

    async def _process_all(
        self,
        site: SiteData,
        pages: Sequence[PageDescriptor],
        output_root: Path,
        result: PipelineResult,
    ) -> None:
        for page in pages:
            result.written.append(await self.process_page(site, page, output_root))

    async def process_page(self, site: SiteData, page: PageDescriptor, output_root: Path) -> Path:
        self.logger.info("Process page %s", page.name)
        try:
            html = await self.engine.render(site, page)
        except RenderError as exc:
            log_exception(self.logger, f"Error during {page.name} page rendering", exc)
            raise
        except Exception as exc:
            log_exception(self.logger, f"Error during {page.name} page rendering", exc)
            raise RenderError(f"Unable to render page '{page.name}': {exc}", subject=page.name) from exc

        relative = page.url
        self.search_index.index_page(page.meta(), html, relative)

        target = output_root / relative
        try:
            await output_file(target, html)
        except OSError as exc:
            self.logger.error("Error during %s page generation: %s", page.name, exc)
            raise RenderError(f"Unable to write {target}: {exc}", subject=page.name) from exc
        return target


__all__ = ["PipelineResult", "RenderPipeline", "TemplateEngine"]
