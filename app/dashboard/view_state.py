"""Dashboard view state: filter, sort order and page as one value."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import List

from app.dashboard.filters import DateRange, FilterSpec, filter_records
from app.dashboard.ordering import SortDirection, sort_records
from app.dashboard.pagination import Page, clamp_page, paginate, total_pages
from app.dashboard.records import FeedbackRecord


@dataclass(frozen=True)
class ViewState:
    """
    What the admin is currently looking at.

    Each user action produces a new ``ViewState`` in a single step, so the
    page number can never disagree with the filter it was computed for.
    """
    filter: FilterSpec = field(default_factory=FilterSpec)
    sort: SortDirection = SortDirection.DESC
    page: int = 1

    @classmethod
    def initial(cls, now: datetime, range_days: int) -> "ViewState":
        """Newest first, limited to the last ``range_days`` days."""
        return cls(filter=FilterSpec(date_range=DateRange(start=now - timedelta(days=range_days))))

    def with_filter(self, spec: FilterSpec) -> "ViewState":
        return replace(self, filter=spec, page=1)

    def with_sort(self, direction: SortDirection) -> "ViewState":
        return replace(self, sort=direction, page=1)

    def toggle_sort(self) -> "ViewState":
        return self.with_sort(self.sort.toggled())

    def with_page(self, page: int, pages: int) -> "ViewState":
        """Move to ``page``, clamped to the pages that exist."""
        return replace(self, page=clamp_page(page, pages))

    def ordered(self, records: List[FeedbackRecord]) -> List[FeedbackRecord]:
        """Filtered and sorted view of ``records``."""
        return sort_records(filter_records(records, self.filter), self.sort)

    def page_of(self, records: List[FeedbackRecord], page_size: int) -> Page:
        return paginate(self.ordered(records), self.page, page_size)

    def page_count(self, records: List[FeedbackRecord], page_size: int) -> int:
        return total_pages(len(filter_records(records, self.filter)), page_size)
