"""Build cycle orchestration: extraction, projection, rendering, serving and watching."""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .config import BuildConfig, ConfigError, load_config
from .content import ContentImporter, MarkdownConverter
from .coverage import CoverageEngine
from .dependencies import DependencyStore
from .errors import (
    BuildAborted,
    DocsmithError,
    ExternalToolFailure,
    MissingOptionalInput,
)
from .extractors import ExtractOptions, Extractor, resolve_extractor
from .fileio import copy_file, copy_tree, output_file, read_text, run_blocking
from .logging import get_logger, log_exception
from .models import CoverageSummary, PageDescriptor, PageKind, ProjectInfo, SiteData
from .pipeline import RenderPipeline, TemplateEngine
from .projector import EntityProjector
from .registry import PageRegistry
from .rendering import GraphRenderer, HtmlEngine
from .rendering.graphs import MODULE_MODE, PROJECT_MODE
from .search import SearchIndex
from .service import ServeOptions, StaticServer
from .sources import SourceFilter, SourceScanner, find_main_source_folder
from .watch import RebuildCoordinator, WatchdogEventSource

_RESOURCES_DIR = Path(__file__).resolve().parent / "resources"
ROUTES_INDEX = "routes_index.json"


@dataclass
class BuildResult:
    """Outcome of one successful build cycle."""

    output: Path
    written: List[Path] = field(default_factory=list)
    coverage: Optional[CoverageSummary] = None
    elapsed: float = 0.0
    micro: bool = False


class Orchestrator:
    """Runs documentation build cycles for one project.

    Collaborators are created once and reused by every cycle; only the page
    registries and the search index start empty on each run.
    """

    def __init__(
        self,
        config: BuildConfig,
        *,
        extractor: Extractor | None = None,
        store: DependencyStore | None = None,
        converter: MarkdownConverter | None = None,
        projector: EntityProjector | None = None,
        coverage: CoverageEngine | None = None,
        importer: ContentImporter | None = None,
        engine: TemplateEngine | None = None,
        search_index: SearchIndex | None = None,
        graph_renderer: GraphRenderer | None = None,
        server: StaticServer | None = None,
        scanner: SourceScanner | None = None,
    ) -> None:
        self.config = config
        self.logger = get_logger("orchestrator")
        self.extractor = extractor or resolve_extractor(config.extractor)
        self.store = store or DependencyStore(config.root)
        self.converter = converter or MarkdownConverter()
        self.projector = projector or EntityProjector(self.converter, root=config.root)
        self.coverage = coverage or CoverageEngine()
        self.importer = importer or ContentImporter(self.converter)
        self.engine = engine or HtmlEngine()
        self.search_index = search_index or SearchIndex()
        self.graph_renderer = graph_renderer or GraphRenderer()
        self.server = server or StaticServer()
        self.source_filter = SourceFilter(config.source_extension, tuple(config.exclude))
        self.scanner = scanner or SourceScanner(self.source_filter)
        self.registry = PageRegistry()
        self.tracked_files: List[str] = []
        self._stop: Optional[asyncio.Event] = None
        self._serving = False

    @classmethod
    def from_path(cls, path: Path, **overrides: object) -> "Orchestrator":
        """Load ``.docsmith.yml`` from ``path`` and apply CLI overrides."""
        root = Path(path).expanduser().resolve()
        logger = get_logger("orchestrator")
        try:
            config = load_config(root)
        except ConfigError as exc:
            logger.error("Configuration error: %s; using defaults", exc)
            config = BuildConfig(root=root)
        return cls(config.with_overrides(overrides))

    @property
    def output_dir(self) -> Path:
        return self.config.output_path

    @property
    def source_dir(self) -> Path:
        if self.config.source_root:
            return (self.config.root / self.config.source_root).resolve()
        return self.config.root

    def discover_files(self) -> List[str]:
        self.tracked_files = self.scanner.scan(self.source_dir, self.output_dir)
        self.logger.debug("Tracking %d source file(s)", len(self.tracked_files))
        return self.tracked_files

    def run(self) -> BuildResult:
        """Build once, then serve and watch as configured."""
        return asyncio.run(self.run_async())

    async def run_async(self) -> BuildResult:
        self.discover_files()
        try:
            result = await self.build()
        except BuildAborted:
            if not self.config.watch:
                raise
            result = BuildResult(output=self.output_dir)
        self._serve()

        if self.config.watch:
            await self.watch()
        return result

    async def build(self, changed_files: Optional[Sequence[str]] = None) -> BuildResult:
        """Run one build cycle.

        Without ``changed_files`` every tracked file is extracted and replaces
        the entity set; otherwise only ``changed_files`` are re-extracted and
        merged into it.
        """
        started = time.perf_counter()
        micro = changed_files is not None
        stage = "setup"
        try:
            self.registry.reset()
            self.search_index.reset()

            stage = "metadata"
            site = SiteData(project=await self._project_info())
            await self._prepare_readme(site)

            stage = "extraction"
            await self._extract(changed_files)

            stage = "projection"
            await self.projector.project(self.store, site, self.registry)

            stage = "coverage"
            if not self.config.disable_coverage:
                self._prepare_coverage(site)

            stage = "additional documentation"
            await self._import_additional_pages(site)

            stage = "rendering"
            pipeline = RenderPipeline(self.engine, self.search_index)
            rendered = await pipeline.run(site, self.registry, self.output_dir)

            stage = "artifacts"
            await self._write_artifacts(site)
        except BuildAborted:
            raise
        except (DocsmithError, OSError) as exc:
            log_exception(self.logger, f"Build aborted during {stage}", exc)
            raise BuildAborted(stage, exc) from exc

        await self._copy_assets()
        await self._copy_resources()
        if not self.config.disable_graph and site.modules:
            await self._render_graphs(site)

        elapsed = time.perf_counter() - started
        self.logger.info(
            "Documentation generated in %s in %.3f seconds using %s theme",
            self.output_dir,
            elapsed,
            self.config.theme,
        )
        return BuildResult(
            output=self.output_dir,
            written=rendered.written,
            coverage=site.coverage,
            elapsed=elapsed,
            micro=micro,
        )

    async def full_rebuild(self) -> None:
        self.discover_files()
        await self.build()
        self._serve()

    async def micro_rebuild(self, files: List[str]) -> None:
        await self.build(files)
        self._serve()

    async def watch(self) -> None:
        """Watch the main source folder until :meth:`stop` is called."""
        coordinator = RebuildCoordinator(
            self.full_rebuild,
            self.micro_rebuild,
            debounce_seconds=self.config.debounce_seconds,
            source_filter=self.source_filter,
            root=self.source_dir,
        )
        if not coordinator.start_watching():
            return
        folder = self.source_dir if self.config.source_root else find_main_source_folder(
            self.tracked_files, self.source_dir
        )
        source = WatchdogEventSource(coordinator)
        self._stop = asyncio.Event()
        source.start(folder, asyncio.get_running_loop())
        try:
            await self._stop.wait()
        finally:
            source.stop()
            coordinator.cancel()

    def stop(self) -> None:
        if self._stop is not None:
            self._stop.set()

    async def _project_info(self) -> ProjectInfo:
        title = self.config.title
        description = self.config.description
        package_json = self.config.root / "package.json"
        self.logger.info("Searching package.json file")
        try:
            data = json.loads(await read_text(package_json))
        except FileNotFoundError:
            self.logger.warning("No package.json file found, continuing without project metadata")
            data = {}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self.logger.error("Unable to read %s: %s", package_json, exc)
            data = {}
        if isinstance(data, dict):
            name = data.get("name")
            if isinstance(name, str) and name and self.config.title_is_default:
                title = f"{name} documentation"
            if isinstance(data.get("description"), str) and not description:
                description = data["description"]
        return ProjectInfo(
            title=title,
            description=description,
            theme=self.config.theme,
            output=str(self.output_dir),
        )

    async def _prepare_readme(self, site: SiteData) -> None:
        try:
            site.project.readme = await self.converter.get_readme_file(self.config.root)
        except MissingOptionalInput as exc:
            self.logger.warning("Continuing without README.md file: %s", exc)
            self.registry.add_page(PageDescriptor(name="index", context="overview", depth=1))
            return
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.error("Unable to read README.md: %s", exc)
            self.registry.add_page(PageDescriptor(name="index", context="overview", depth=1))
            return

        self.logger.info("README.md file found")
        self.registry.add_page(PageDescriptor(name="index", context="readme", depth=1))
        self.registry.add_page(PageDescriptor(name="overview", context="overview", depth=1))

    async def _extract(self, changed_files: Optional[Sequence[str]]) -> None:
        options = ExtractOptions(
            root=self.config.root,
            graph_file=(self.config.root / self.config.graph_file) if self.config.graph_file else None,
            source_root=self.source_dir,
        )
        if changed_files is None:
            self.logger.info("Extracting %d source file(s)", len(self.tracked_files))
            graph = await run_blocking(self.extractor.extract, list(self.tracked_files), options)
            self.store.init(graph)
            return

        files = list(changed_files)
        self.logger.info("Re-extracting %d changed file(s)", len(files))
        partial = await run_blocking(self.extractor.extract, files, options)
        self.store.update(partial, files)

    def _prepare_coverage(self, site: SiteData) -> None:
        self.logger.info("Process documentation coverage report")
        summary = self.coverage.evaluate(
            components=site.components,
            classes=site.classes,
            injectables=site.injectables,
            interfaces=site.interfaces,
            pipes=site.pipes,
        )
        site.coverage = summary
        self.registry.add_page(
            PageDescriptor(
                name="coverage",
                context="coverage",
                depth=1,
                page_type=PageKind.ROOT,
                payload={"files": summary.records, "data": summary},
            )
        )

    async def _import_additional_pages(self, site: SiteData) -> None:
        if not self.config.includes:
            return
        includes_dir = (self.config.root / self.config.includes).resolve()
        try:
            site.additional_pages = await self.importer.import_manifest(
                includes_dir, self.config.includes_folder, self.registry
            )
        except MissingOptionalInput as exc:
            self.logger.warning("Skipping additional documentation: %s", exc)

    async def _write_artifacts(self, site: SiteData) -> None:
        if site.routes is not None:
            await output_file(self.output_dir / ROUTES_INDEX, json.dumps(asdict(site.routes), indent=2))
        if site.coverage is not None:
            await run_blocking(self.coverage.save, self.output_dir, site.coverage)

    async def _copy_assets(self) -> None:
        if not self.config.assets_folder:
            return
        source = (self.config.root / self.config.assets_folder).resolve()
        if not source.is_dir():
            self.logger.warning("Assets folder %s does not exist, skipping copy", source)
            return
        self.logger.info("Copy assets folder")
        try:
            await copy_tree(source, self.output_dir / source.name)
        except OSError as exc:
            self.logger.error("Error during assets copy: %s", exc)

    async def _copy_resources(self) -> None:
        try:
            await copy_tree(_RESOURCES_DIR, self.output_dir)
        except OSError as exc:
            self.logger.error("Error during resources copy: %s", exc)
            return

        if not self.config.ext_theme:
            return
        theme = (self.config.root / self.config.ext_theme).resolve()
        self.logger.info("Copy external theme %s", theme)
        try:
            if theme.is_dir():
                await copy_tree(theme, self.output_dir / "styles")
            else:
                await copy_file(theme, self.output_dir / "styles" / theme.name)
        except OSError as exc:
            self.logger.error("Error during external theme copy: %s", exc)

    async def _render_graphs(self, site: SiteData) -> None:
        self.logger.info("Process main graph")
        try:
            await self.graph_renderer.render_graph(site.modules, self.output_dir / "graph", PROJECT_MODE)
        except (ExternalToolFailure, OSError) as exc:
            log_exception(self.logger, "Error during main graph generation", exc)

        for module in site.modules:
            self.logger.info("Process module graph %s", module.name)
            try:
                await self.graph_renderer.render_graph(
                    site.modules,
                    self.output_dir / "modules" / module.name,
                    MODULE_MODE,
                    module.name,
                )
            except (ExternalToolFailure, OSError) as exc:
                log_exception(self.logger, f"Error during {module.name} graph generation", exc)

    def _serve(self) -> None:
        if not self.config.serve or self._serving:
            return
        self._serving = True
        self.server.start(
            self.output_dir,
            ServeOptions(host=self.config.host, port=self.config.port, open=self.config.open),
        )


__all__ = ["BuildResult", "Orchestrator", "ROUTES_INDEX"]
