"""Fixed-size pagination of an ordered record list."""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from app.config import settings
from app.dashboard.records import FeedbackRecord


def total_pages(total_items: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    return math.ceil(total_items / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamp ``page`` into ``[1, pages]``; an empty list still has page 1."""
    return min(max(page, 1), max(pages, 1))


@dataclass(frozen=True)
class Page:
    """One page of records plus enough context to render pager controls."""
    items: List[FeedbackRecord]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def previous_page(self) -> int:
        return clamp_page(self.page - 1, self.total_pages)

    @property
    def next_page(self) -> int:
        return clamp_page(self.page + 1, self.total_pages)


def paginate(
    records: Sequence[FeedbackRecord],
    page: int,
    page_size: Optional[int] = None,
) -> Page:
    """
    Slice ``records`` to the 1-based ``page``.

    Pages outside ``[1, total_pages]`` produce an empty slice rather than an
    error.
    """
    size = page_size or settings.page_size
    pages = total_pages(len(records), size)
    if page < 1:
        items: List[FeedbackRecord] = []
    else:
        items = list(records[(page - 1) * size:page * size])
    return Page(
        items=items,
        page=page,
        page_size=size,
        total_items=len(records),
        total_pages=pages,
    )
