"""Base classes for extractor plugins."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..models import EntityGraph


@dataclass(frozen=True)
class ExtractOptions:
    """Settings handed to an extractor for one extraction run."""

    root: Path
    graph_file: Optional[Path] = None
    source_root: Optional[Path] = None


class Extractor(ABC):
    """Contract for extractors that turn source files into an entity graph.

    Implementations return a best-effort partial graph instead of raising so that
    one unreadable file never blocks page generation.
    """

    @abstractmethod
    def extract(self, files: Sequence[str], options: ExtractOptions) -> EntityGraph:
        """Return the entities declared in ``files``."""
