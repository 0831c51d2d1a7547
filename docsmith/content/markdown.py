"""Markdown to HTML conversion."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import markdown

from ..errors import MissingOptionalInput
from ..fileio import read_text


class MarkdownConverter:
    """Converts Markdown sources to HTML fragments."""

    DEFAULT_EXTENSIONS: Sequence[str] = ("tables", "fenced_code")
    README_NAMES: Sequence[str] = ("README.md", "readme.md", "Readme.md")

    def __init__(self, extensions: Sequence[str] | None = None) -> None:
        self.extensions = list(extensions or self.DEFAULT_EXTENSIONS)

    def convert(self, text: str) -> str:
        return markdown.markdown(text, extensions=self.extensions)

    async def get(self, path: Path) -> str:
        """Read ``path`` and return its converted HTML."""
        text = await read_text(path)
        return self.convert(text)

    def find_readme(self, directory: Path) -> Path | None:
        for name in self.README_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        return None

    async def get_readme_file(self, directory: Path) -> str:
        readme = self.find_readme(directory)
        if readme is None:
            raise MissingOptionalInput(f"No README.md found in {directory}")
        return await self.get(readme)


__all__ = ["MarkdownConverter"]
