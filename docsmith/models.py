"""Core data models shared across docsmith components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional


@dataclass
class Member:
    """A documentable member of an entity (property, method, input or output)."""

    name: str
    description: str = ""
    type: Optional[str] = None


@dataclass(frozen=True)
class ModuleRef:
    """Reference from a module's metadata to another entity, tagged by kind."""

    name: str
    kind: str


@dataclass
class Entity:
    """Common shape of every extracted entity."""

    kind: ClassVar[str] = "entity"

    name: str
    file: str
    description: str = ""


@dataclass
class Module(Entity):
    kind: ClassVar[str] = "module"

    declarations: List[ModuleRef] = field(default_factory=list)
    bootstrap: List[ModuleRef] = field(default_factory=list)
    imports: List[ModuleRef] = field(default_factory=list)
    exports: List[ModuleRef] = field(default_factory=list)
    providers: List[ModuleRef] = field(default_factory=list)


@dataclass
class Component(Entity):
    """A component; member lists are ``None`` when the extractor reported none."""

    kind: ClassVar[str] = "component"

    selector: str = ""
    template_url: str = ""
    properties: Optional[List[Member]] = None
    methods: Optional[List[Member]] = None
    inputs: Optional[List[Member]] = None
    outputs: Optional[List[Member]] = None
    readme: Optional[str] = None
    template_data: Optional[str] = None


@dataclass
class Directive(Entity):
    kind: ClassVar[str] = "directive"

    selector: str = ""
    properties: Optional[List[Member]] = None
    methods: Optional[List[Member]] = None
    inputs: Optional[List[Member]] = None
    outputs: Optional[List[Member]] = None


@dataclass
class Injectable(Entity):
    kind: ClassVar[str] = "injectable"

    properties: Optional[List[Member]] = None
    methods: Optional[List[Member]] = None


@dataclass
class Pipe(Entity):
    kind: ClassVar[str] = "pipe"

    pipe_name: str = ""


@dataclass
class ClassDoc(Entity):
    kind: ClassVar[str] = "class"

    properties: Optional[List[Member]] = None
    methods: Optional[List[Member]] = None


@dataclass
class Interface(Entity):
    kind: ClassVar[str] = "interface"

    properties: Optional[List[Member]] = None
    methods: Optional[List[Member]] = None


@dataclass
class MiscItem(Entity):
    """Top-level variable, function, type alias or enumeration."""

    kind: ClassVar[str] = "miscellaneous"

    subtype: str = "variable"


@dataclass
class RouteNode:
    """One node of the application route tree."""

    name: str
    path: str = ""
    component: Optional[str] = None
    file: Optional[str] = None
    children: List["RouteNode"] = field(default_factory=list)

    def walk(self) -> Iterator["RouteNode"]:
        yield self
        for child in self.children:
            yield from child.walk()


MISC_GROUPS = ("variables", "functions", "typealiases", "enumerations", "types")


@dataclass
class Miscellaneous:
    variables: List[MiscItem] = field(default_factory=list)
    functions: List[MiscItem] = field(default_factory=list)
    typealiases: List[MiscItem] = field(default_factory=list)
    enumerations: List[MiscItem] = field(default_factory=list)
    types: List[MiscItem] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(getattr(self, group) for group in MISC_GROUPS)

    def items(self) -> Iterator[MiscItem]:
        for group in MISC_GROUPS:
            yield from getattr(self, group)


ENTITY_COLLECTIONS = (
    "modules",
    "components",
    "directives",
    "injectables",
    "pipes",
    "classes",
    "interfaces",
)


@dataclass
class EntityGraph:
    """Dependency graph produced by an extractor for one build cycle."""

    modules: List[Module] = field(default_factory=list)
    components: List[Component] = field(default_factory=list)
    directives: List[Directive] = field(default_factory=list)
    injectables: List[Injectable] = field(default_factory=list)
    pipes: List[Pipe] = field(default_factory=list)
    classes: List[ClassDoc] = field(default_factory=list)
    interfaces: List[Interface] = field(default_factory=list)
    routes: Optional[RouteNode] = None
    miscellaneous: Miscellaneous = field(default_factory=Miscellaneous)

    def files(self) -> List[str]:
        """Return every source file contributing at least one entity."""
        seen: Dict[str, None] = {}
        for collection in ENTITY_COLLECTIONS:
            for entity in getattr(self, collection):
                seen.setdefault(entity.file, None)
        for item in self.miscellaneous.items():
            seen.setdefault(item.file, None)
        if self.routes is not None:
            for node in self.routes.walk():
                if node.file:
                    seen.setdefault(node.file, None)
        return list(seen)


class PageKind(str, Enum):
    ROOT = "root"
    INTERNAL = "internal"


@dataclass
class PageDescriptor:
    """A renderable unit of output."""

    name: str
    context: str
    path: Optional[str] = None
    depth: Optional[int] = None
    page_type: PageKind = PageKind.ROOT
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def output_name(self) -> str:
        return self.name

    @property
    def url(self) -> str:
        """Location of the rendered page relative to the output root."""
        filename = f"{self.output_name}.html"
        if self.path:
            return f"{self.path.strip('/')}/{filename}"
        return filename

    def meta(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "context": self.context,
            "path": self.path,
            "depth": self.depth,
            "page_type": self.page_type.value,
        }


@dataclass
class AdditionalPage(PageDescriptor):
    """Page imported from the external content manifest."""

    filename: str = ""
    content: str = ""

    @property
    def output_name(self) -> str:
        return self.filename

    def meta(self) -> Dict[str, Any]:
        meta = super().meta()
        meta["filename"] = self.filename
        return meta


@dataclass
class CoverageRecord:
    """Documentation coverage for a single entity."""

    file_path: str
    kind: str
    name: str
    documented: int
    total: int
    percent: int
    status: str

    @property
    def coverage_count(self) -> str:
        return f"{self.documented}/{self.total}"


@dataclass
class CoverageSummary:
    """Aggregate coverage for the project."""

    count: int
    status: str
    records: List[CoverageRecord] = field(default_factory=list)


@dataclass
class ProjectInfo:
    """Project-level metadata shared by every page."""

    title: str
    description: str = ""
    readme: Optional[str] = None
    theme: str = "gitbook"
    output: str = "documentation"


@dataclass
class SiteData:
    """Projected entities and derived data consumed by the template engine."""

    project: ProjectInfo
    modules: List[Module] = field(default_factory=list)
    components: List[Component] = field(default_factory=list)
    directives: List[Directive] = field(default_factory=list)
    injectables: List[Injectable] = field(default_factory=list)
    pipes: List[Pipe] = field(default_factory=list)
    classes: List[ClassDoc] = field(default_factory=list)
    interfaces: List[Interface] = field(default_factory=list)
    routes: Optional[RouteNode] = None
    miscellaneous: Miscellaneous = field(default_factory=Miscellaneous)
    coverage: Optional[CoverageSummary] = None
    additional_pages: List[AdditionalPage] = field(default_factory=list)

    def as_context(self) -> Dict[str, Any]:
        return {
            "project": self.project,
            "modules": self.modules,
            "components": self.components,
            "directives": self.directives,
            "injectables": self.injectables,
            "pipes": self.pipes,
            "classes": self.classes,
            "interfaces": self.interfaces,
            "routes": self.routes,
            "miscellaneous": self.miscellaneous,
            "coverage": self.coverage,
            "additional_pages": self.additional_pages,
        }
