"""Ordered page registries for one build cycle."""

from __future__ import annotations

from typing import List, Set

from .logging import get_logger
from .models import AdditionalPage, PageDescriptor


class PageRegistry:
    """Append-only list of pages plus the additional (imported) pages.

    Both lists are cleared at the start of every cycle and rebuilt from scratch.
    """

    def __init__(self) -> None:
        self._pages: List[PageDescriptor] = []
        self._additional: List[AdditionalPage] = []
        self._keys: Set[str] = set()
        self.logger = get_logger("registry")

    def reset(self) -> None:
        self._pages = []
        self._additional = []
        self._keys = set()

    def add_page(self, page: PageDescriptor) -> bool:
        if not self._claim(page):
            return False
        self._pages.append(page)
        return True

    def add_additional_page(self, page: AdditionalPage) -> bool:
        if not self._claim(page):
            return False
        self._additional.append(page)
        return True

    @property
    def pages(self) -> List[PageDescriptor]:
        return list(self._pages)

    @property
    def additional_pages(self) -> List[AdditionalPage]:
        return list(self._additional)

    def __len__(self) -> int:
        return len(self._pages) + len(self._additional)

    def _claim(self, page: PageDescriptor) -> bool:
        if page.url in self._keys:
            self.logger.warning(
                "Skipping duplicate page '%s'; %s is already generated by another page",
                page.name,
                page.url,
            )
            return False
        self._keys.add(page.url)
        return True


__all__ = ["PageRegistry"]
