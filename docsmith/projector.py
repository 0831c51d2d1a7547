"""Projects the extracted entity graph into page descriptors."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Sequence, Set

from .content.markdown import MarkdownConverter
from .dependencies import DependencyStore
from .errors import MissingRequiredInput
from .fileio import read_text
from .logging import get_logger
from .models import Component, Entity, Module, ModuleRef, PageDescriptor, PageKind, SiteData
from .registry import PageRegistry

# Module metadata lists filtered by (kind, name); other kinds pass through.
_FILTERED_METADATA = ("declarations", "bootstrap", "imports", "exports")
_KIND_COLLECTIONS = {
    "component": "components",
    "directive": "directives",
    "module": "modules",
    "pipe": "pipes",
}


class EntityProjector:
    """Turns the dependency store into projected entities and registered pages.

    References to entities missing from the graph (for instance members of an
    un-analysed third-party package) are dropped without error.
    """

    def __init__(self, converter: MarkdownConverter | None = None, *, root: Path | None = None) -> None:
        self.converter = converter or MarkdownConverter()
        self.root = root
        self.logger = get_logger("projector")

    async def project(self, store: DependencyStore, site: SiteData, registry: PageRegistry) -> None:
        """Run every preparation step in order."""
        self.prepare_modules(store, site, registry)
        await self.prepare_components(store, site, registry)

        if store.get_directives():
            self._prepare_internal(site, registry, "directives", "directive", store.get_directives())
        if store.get_injectables():
            self._prepare_internal(site, registry, "injectables", "injectable", store.get_injectables())
        routes = store.get_routes()
        if routes is not None and routes.children:
            self.prepare_routes(store, site, registry)
        if store.get_pipes():
            self._prepare_internal(site, registry, "pipes", "pipe", store.get_pipes())
        if store.get_classes():
            self._prepare_internal(site, registry, "classes", "class", store.get_classes())
        if store.get_interfaces():
            self._prepare_internal(site, registry, "interfaces", "interface", store.get_interfaces())
        if not store.get_miscellaneous().is_empty():
            self.prepare_miscellaneous(store, site, registry)

    def prepare_modules(self, store: DependencyStore, site: SiteData, registry: PageRegistry) -> None:
        modules = store.get_modules()
        if not modules:
            site.modules = []
            return

        self.logger.info("Prepare modules")
        known: Dict[str, Set[str]] = {
            kind: store.known_names(collection) for kind, collection in _KIND_COLLECTIONS.items()
        }
        injectables = store.known_names("injectables")

        projected: List[Module] = []
        for module in modules:
            changes: Dict[str, List[ModuleRef]] = {
                metadata: [ref for ref in getattr(module, metadata) if _resolves(ref, known)]
                for metadata in _FILTERED_METADATA
            }
            changes["providers"] = [ref for ref in module.providers if ref.name in injectables]
            projected.append(replace(module, **changes))
        site.modules = projected

        registry.add_page(PageDescriptor(name="modules", context="modules", depth=1, page_type=PageKind.ROOT))
        for module in projected:
            registry.add_page(
                PageDescriptor(
                    name=module.name,
                    context="module",
                    path="modules",
                    depth=2,
                    page_type=PageKind.INTERNAL,
                    payload={"module": module},
                )
            )

    async def prepare_components(self, store: DependencyStore, site: SiteData, registry: PageRegistry) -> None:
        components = store.get_components()
        site.components = []
        if not components:
            return

        self.logger.info("Prepare components")
        for component in components:
            prepared = await self._prepare_component(component)
            site.components.append(prepared)
            registry.add_page(
                PageDescriptor(
                    name=prepared.name,
                    context="component",
                    path="components",
                    depth=2,
                    page_type=PageKind.INTERNAL,
                    payload={"component": prepared},
                )
            )

    def prepare_routes(self, store: DependencyStore, site: SiteData, registry: PageRegistry) -> None:
        self.logger.info("Process routes")
        site.routes = store.get_routes()
        registry.add_page(PageDescriptor(name="routes", context="routes", depth=1, page_type=PageKind.ROOT))

    def prepare_miscellaneous(self, store: DependencyStore, site: SiteData, registry: PageRegistry) -> None:
        self.logger.info("Prepare miscellaneous")
        site.miscellaneous = store.get_miscellaneous()
        registry.add_page(
            PageDescriptor(name="miscellaneous", context="miscellaneous", depth=1, page_type=PageKind.ROOT)
        )

    def _prepare_internal(
        self,
        site: SiteData,
        registry: PageRegistry,
        collection: str,
        context: str,
        entities: Sequence[Entity],
    ) -> None:
        self.logger.info("Prepare %s", collection)
        setattr(site, collection, list(entities))
        for entity in entities:
            registry.add_page(
                PageDescriptor(
                    name=entity.name,
                    context=context,
                    path=collection,
                    depth=2,
                    page_type=PageKind.INTERNAL,
                    payload={context: entity},
                )
            )

    async def _prepare_component(self, component: Component) -> Component:
        source = self._resolve(component.file)
        directory = source.parent

        readme = None
        readme_path = directory / "README.md"
        if readme_path.is_file():
            self.logger.info("README.md exists for %s, including it", component.name)
            try:
                readme = await self.converter.get(readme_path)
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.warning("Unable to read %s: %s", readme_path, exc)

        template_data = None
        if component.template_url:
            self.logger.info("%s has a templateUrl, including it", component.name)
            template_path = (directory / component.template_url).resolve()
            try:
                template_data = await read_text(template_path)
            except (OSError, UnicodeDecodeError) as exc:
                raise MissingRequiredInput(
                    f"Template {template_path} declared by {component.name} could not be read: {exc}"
                ) from exc

        return replace(component, readme=readme, template_data=template_data)

    def _resolve(self, file: str) -> Path:
        path = Path(file)
        if not path.is_absolute() and self.root is not None:
            path = self.root / path
        return path


def _resolves(ref: ModuleRef, known: Dict[str, Set[str]]) -> bool:
    names = known.get(ref.kind)
    if names is None:
        return True
    return ref.name in names


__all__ = ["EntityProjector"]
