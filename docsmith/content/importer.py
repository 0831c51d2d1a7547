"""Imports an externally declared content tree as additional pages."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Sequence

from ..errors import MissingOptionalInput
from ..fileio import read_text
from ..logging import get_logger, log_exception
from ..models import AdditionalPage, PageKind
from ..registry import PageRegistry
from .markdown import MarkdownConverter

MANIFEST_NAME = "summary.json"

_WHITESPACE = re.compile(r"\s+")


def clean_name(title: str) -> str:
    """Return the lowercase, space-stripped slug used for filenames and folders."""
    return _WHITESPACE.sub("", title).lower()


@dataclass
class ManifestEntry:
    title: str
    file: str
    children: List["ManifestEntry"] = field(default_factory=list)


class ContentImporter:
    """Walks ``summary.json`` and registers one additional page per entry.

    Entries are processed strictly in manifest order, a parent together with all
    of its children before the next sibling. A file that cannot be loaded skips
    only its own entry.
    """

    def __init__(self, converter: MarkdownConverter | None = None) -> None:
        self.converter = converter or MarkdownConverter()
        self.logger = get_logger("content")

    async def import_manifest(
        self,
        includes_dir: Path,
        base_path: str,
        registry: PageRegistry,
    ) -> List[AdditionalPage]:
        manifest_path = includes_dir / MANIFEST_NAME
        entries = await self.load_manifest(manifest_path)
        self.logger.info("Additional documentation: %s file found", MANIFEST_NAME)

        imported: List[AdditionalPage] = []
        for entry in entries:
            await self._import_entry(entry, includes_dir, base_path, 1, registry, imported)
        return imported

    async def load_manifest(self, manifest_path: Path) -> List[ManifestEntry]:
        try:
            raw = await read_text(manifest_path)
        except FileNotFoundError as exc:
            raise MissingOptionalInput(f"Additional documentation manifest {manifest_path} not found") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise MissingOptionalInput(f"Unable to read {manifest_path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MissingOptionalInput(f"Invalid JSON in {manifest_path}: {exc}") from exc
        if not isinstance(data, list):
            raise MissingOptionalInput(f"{manifest_path} must contain a list of entries")
        return _parse_entries(data, self.logger)

    async def _import_entry(
        self,
        entry: ManifestEntry,
        includes_dir: Path,
        path: str,
        depth: int,
        registry: PageRegistry,
        imported: List[AdditionalPage],
    ) -> None:
        try:
            content = await self.converter.get(includes_dir / entry.file)
        except (OSError, UnicodeDecodeError) as exc:
            log_exception(self.logger, f"Unable to load additional page '{entry.title}'", exc)
        else:
            page = AdditionalPage(
                name=entry.title,
                context="additional-page",
                path=path,
                depth=depth,
                page_type=PageKind.INTERNAL,
                filename=clean_name(entry.title),
                content=content,
            )
            if registry.add_additional_page(page):
                imported.append(page)

        child_path = f"{path}/{clean_name(entry.title)}"
        for child in entry.children:
            await self._import_entry(child, includes_dir, child_path, depth + 1, registry, imported)


def _parse_entries(data: Sequence[Any], logger: logging.Logger) -> List[ManifestEntry]:
    entries: List[ManifestEntry] = []
    for raw in data:
        if not isinstance(raw, dict) or not raw.get("title") or not raw.get("file"):
            logger.warning("Skipping %s entry without a title and file: %r", MANIFEST_NAME, raw)
            continue
        children = raw.get("children")
        entries.append(
            ManifestEntry(
                title=str(raw["title"]),
                file=str(raw["file"]),
                children=_parse_entries(children, logger) if isinstance(children, list) else [],
            )
        )
    return entries


__all__ = ["ContentImporter", "MANIFEST_NAME", "ManifestEntry", "clean_name"]
