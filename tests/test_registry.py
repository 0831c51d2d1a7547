"""Page registry tests."""

from __future__ import annotations

from docsmith.models import AdditionalPage, PageDescriptor, PageKind
from docsmith.registry import PageRegistry


def test_pages_keep_insertion_order() -> None:
    registry = PageRegistry()
    registry.add_page(PageDescriptor(name="index", context="overview", depth=1))
    registry.add_page(PageDescriptor(name="modules", context="modules", depth=1))
    registry.add_page(
        PageDescriptor(name="AppModule", context="module", path="modules", depth=2, page_type=PageKind.INTERNAL)
    )

    assert [page.name for page in registry.pages] == ["index", "modules", "AppModule"]
    assert len(registry) == 3


def test_duplicate_output_location_is_skipped() -> None:
    registry = PageRegistry()
    first = PageDescriptor(name="Shared", context="component", path="components", depth=2)
    clash = PageDescriptor(name="Shared", context="component", path="components", depth=2)
    elsewhere = PageDescriptor(name="Shared", context="directive", path="directives", depth=2)

    assert registry.add_page(first) is True
    assert registry.add_page(clash) is False
    assert registry.add_page(elsewhere) is True
    assert registry.pages == [first, elsewhere]


def test_same_output_file_is_a_duplicate_regardless_of_spelling() -> None:
    registry = PageRegistry()
    first = PageDescriptor(name="Shared", context="component", path="components", depth=2)
    deeper = PageDescriptor(name="Shared", context="component", path="components", depth=3)
    slashed = PageDescriptor(name="Shared", context="component", path="components/", depth=2)
    root = PageDescriptor(name="overview", context="overview")
    empty_path = PageDescriptor(name="overview", context="overview", path="")

    assert registry.add_page(first) is True
    assert registry.add_page(deeper) is False
    assert registry.add_page(slashed) is False
    assert registry.add_page(root) is True
    assert registry.add_page(empty_path) is False
    assert registry.pages == [first, root]


def test_additional_page_cannot_overwrite_a_main_page() -> None:
    registry = PageRegistry()
    registry.add_page(PageDescriptor(name="guide", context="overview", path="docs"))

    added = registry.add_additional_page(
        AdditionalPage(name="Guide", context="additional-page", path="docs", depth=1, filename="guide")
    )

    assert added is False
    assert registry.additional_pages == []


def test_reset_clears_both_registries() -> None:
    registry = PageRegistry()
    registry.add_page(PageDescriptor(name="index", context="overview"))
    registry.add_additional_page(
        AdditionalPage(name="Guide", context="additional-page", path="additional-documentation", depth=1, filename="guide")
    )

    registry.reset()

    assert registry.pages == []
    assert registry.additional_pages == []
    assert registry.add_page(PageDescriptor(name="index", context="overview")) is True
