"""Search index fed by the render pipeline."""

from __future__ import annotations

import json
import re
from html import unescape
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .fileio import output_file

INDEX_FILENAME = "search_index.json"

_SCRIPT_OR_STYLE = re.compile(r"<(script|style|nav)\b.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]+>")
_SPACES = re.compile(r"\s+")


class SearchIndex:
    """Collects page text in render order and persists it as JSON."""

    def __init__(self, *, max_body_chars: int = 5000) -> None:
        self.max_body_chars = max_body_chars
        self._documents: List[Dict[str, Any]] = []

    def reset(self) -> None:
        self._documents = []

    def index_page(self, infos: Mapping[str, Any], raw_data: str, url: str) -> None:
        body = _text_content(raw_data)
        self._documents.append(
            {
                "url": url,
                "title": str(infos.get("name", "")),
                "context": infos.get("context"),
                "body": body[: self.max_body_chars],
            }
        )

    @property
    def documents(self) -> List[Dict[str, Any]]:
        return list(self._documents)

    async def flush(self, output_root: Path) -> Path:
        """Write the collected documents to ``<output_root>/search_index.json``."""
        target = output_root / INDEX_FILENAME
        payload = {"documents": self._documents}
        await output_file(target, json.dumps(payload, indent=2))
        return target


def _text_content(markup: str) -> str:
    stripped = _SCRIPT_OR_STYLE.sub(" ", markup)
    stripped = _TAG.sub(" ", stripped)
    return _SPACES.sub(" ", unescape(stripped)).strip()


__all__ = ["INDEX_FILENAME", "SearchIndex"]
