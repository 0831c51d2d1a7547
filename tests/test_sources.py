"""Source discovery and filtering tests."""

from __future__ import annotations

from pathlib import Path

from docsmith.sources import SourceFilter, SourceScanner, find_main_source_folder
from tests._fixtures.project_builder import ProjectBuilder


def test_filter_skips_specs_declarations_and_other_extensions() -> None:
    source_filter = SourceFilter(".ts")

    assert source_filter.accepts("src/app.component.ts")
    assert not source_filter.accepts("src/app.component.spec.ts")
    assert not source_filter.accepts("src/typings.d.ts")
    assert not source_filter.accepts("src/app.component.html")


def test_filter_applies_exclude_globs(tmp_path: Path) -> None:
    source_filter = SourceFilter(".ts", ("src/generated/*", "*.stories.ts"))

    assert not source_filter.accepts(tmp_path / "src/generated/api.ts", tmp_path)
    assert not source_filter.accepts(tmp_path / "src/button.stories.ts", tmp_path)
    assert source_filter.accepts(tmp_path / "src/button.ts", tmp_path)


def test_scanner_ignores_vendor_and_output_folders(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/app/app.module.ts": "",
            "src/app/app.module.spec.ts": "",
            "node_modules/lib/index.ts": "",
            "documentation/leftover.ts": "",
        }
    )
    root = project_builder.path()

    files = SourceScanner().scan(root, root / "documentation")

    assert files == [str((root / "src/app/app.module.ts").resolve())]


def test_main_source_folder_is_common_parent(tmp_path: Path) -> None:
    files = [str(tmp_path / "src/app/a.ts"), str(tmp_path / "src/shared/b.ts")]

    assert find_main_source_folder(files, tmp_path) == (tmp_path / "src").resolve()
    assert find_main_source_folder([], tmp_path) == tmp_path
