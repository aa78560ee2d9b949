"""Page registry for generated documentation pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class PageType(Enum):
    ROOT = "root"
    INTERNAL = "internal"


@dataclass
class Page:
    """A page to be rendered by a report writer."""

    name: str
    """Page name, also the output file stem."""

    id: str
    """Page identifier used for navigation."""

    context: str
    """Rendering context selecting the page template."""

    files: list[Any] = field(default_factory=list)
    """Records listed on the page."""

    data: Any = None
    """Page payload."""

    depth: int = 0
    """Nesting depth relative to the output root."""

    page_type: PageType = PageType.ROOT
    """Whether the page sits at the root or under an internal folder."""


class PageRegistry:
    """Ordered collection of pages registered during a generation run."""

    def __init__(self) -> None:
        self._pages: list[Page] = []

    @property
    def pages(self) -> list[Page]:
        return list(self._pages)

    def add_page(self, page: Page) -> None:
        """Register ``page``, replacing any earlier page with the same id."""
        self._pages = [p for p in self._pages if p.id != page.id]
        self._pages.append(page)
        logger.debug("Registered page %s (%s)", page.id, page.context)

    def get(self, page_id: str) -> Page | None:
        for page in self._pages:
            if page.id == page_id:
                return page
        return None
