"""Markdown converter tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from docsmith.content import MarkdownConverter
from docsmith.errors import MissingOptionalInput


def test_convert_supports_tables_and_fenced_code() -> None:
    html = MarkdownConverter().convert("| a | b |\n|---|---|\n| 1 | 2 |\n\n```\ncode\n```\n")

    assert "<table>" in html
    assert "<code>code" in html


def test_get_readme_file_converts_project_readme(tmp_path: Path) -> None:
    (tmp_path / "README.md").write_text("# Shop\n", encoding="utf-8")

    html = asyncio.run(MarkdownConverter().get_readme_file(tmp_path))

    assert html == "<h1>Shop</h1>"


def test_get_readme_file_raises_when_absent(tmp_path: Path) -> None:
    with pytest.raises(MissingOptionalInput):
        asyncio.run(MarkdownConverter().get_readme_file(tmp_path))
