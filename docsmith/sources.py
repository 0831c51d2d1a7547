"""Source file discovery and filtering for extraction and watching."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import List, Sequence

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".idea",
    ".vscode",
    "dist",
    "coverage",
}


@dataclass(frozen=True)
class SourceFilter:
    """Accepts source files with ``extension`` that are not tests or declaration files."""

    extension: str = ".ts"
    exclude: Sequence[str] = field(default_factory=tuple)

    def accepts(self, path: str | Path, root: Path | None = None) -> bool:
        candidate = Path(path)
        name = candidate.name
        if not name.endswith(self.extension):
            return False
        stem = name[: -len(self.extension)]
        if stem.endswith(".spec") or stem.endswith(".d"):
            return False
        if self.exclude:
            relative = _relative_posix(candidate, root)
            if any(fnmatchcase(relative, pattern) or fnmatchcase(name, pattern) for pattern in self.exclude):
                return False
        return True


class SourceScanner:
    """Collects the tracked source files below a project root."""

    def __init__(self, source_filter: SourceFilter | None = None) -> None:
        self.source_filter = source_filter or SourceFilter()

    def scan(self, root: Path, output_dir: Path | None = None) -> List[str]:
        root = root.resolve()
        excluded_output = output_dir.resolve() if output_dir is not None else None
        files: List[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if name not in _EXCLUDED_DIRS and (current / name).resolve() != excluded_output
            )
            for filename in sorted(filenames):
                path = current / filename
                if self.source_filter.accepts(path, root):
                    files.append(str(path))
        return files


def find_main_source_folder(files: Sequence[str], fallback: Path) -> Path:
    """Return the deepest directory shared by every tracked file."""
    if not files:
        return fallback
    parents = [str(Path(file).resolve().parent) for file in files]
    try:
        common = os.path.commonpath(parents)
    except ValueError:
        return fallback
    return Path(common)


def _relative_posix(path: Path, root: Path | None) -> str:
    if root is not None:
        try:
            return path.resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            pass
    return path.as_posix()


__all__ = ["SourceFilter", "SourceScanner", "find_main_source_folder"]
