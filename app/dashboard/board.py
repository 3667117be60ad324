"""Live dashboard session state."""

import itertools
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, List, Optional, Tuple

from app.config import DashboardSettings, settings as default_settings
from app.dashboard.aggregation import FeedbackSummary, QuickStats, quick_stats, summarize
from app.dashboard.export import export_csv, export_filename
from app.dashboard.filters import FilterSpec
from app.dashboard.ordering import SortDirection
from app.dashboard.pagination import Page
from app.dashboard.records import FeedbackRecord
from app.dashboard.source import RecordSourceError, SQLAlchemyRecordSource
from app.dashboard.view_state import ViewState

logger = logging.getLogger("Echo.dashboard")

MAX_NOTICES = 20


@dataclass(frozen=True)
class Notice:
    """A message for the dashboard's notification tray."""
    id: int
    message: str
    level: str  # info | warning | success
    timestamp: datetime


@dataclass(frozen=True)
class BoardSnapshot:
    view: ViewState
    page: Page
    stats: QuickStats
    analytics: FeedbackSummary
    notices: List[Notice]
    loaded: bool
    loading: bool = False


class FeedbackBoard:
    """
    One admin's dashboard: the cached collection plus the current view.

    Fetches are tagged with increasing sequence numbers. Only the response to
    the most recently issued fetch is applied; anything older is dropped so a
    slow response cannot overwrite a newer one.
    """

    def __init__(self, settings: Optional[DashboardSettings] = None, now: Optional[datetime] = None):
        self.settings = settings or default_settings
        self.records: List[FeedbackRecord] = []
        self.view = ViewState.initial(
            now or datetime.now(timezone.utc),
            self.settings.default_range_days,
        )
        self.notices: Deque[Notice] = deque(maxlen=MAX_NOTICES)
        self.loaded = False
        self._latest_seq = 0
        self._pending_seq: Optional[int] = None
        self._notice_ids = itertools.count(1)

    # --- Fetch lifecycle

    def begin_fetch(self) -> int:
        self._latest_seq += 1
        return self._latest_seq

    def is_latest(self, seq: int) -> bool:
        return seq == self._latest_seq

    @property
    def is_loading(self) -> bool:
        return self._pending_seq is not None

    def apply_fetch(self, seq: int, records: List[FeedbackRecord]) -> bool:
        """Replace the collection if ``seq`` is still the latest fetch."""
        if not self.is_latest(seq):
            logger.debug(f"Discarding stale fetch {seq} (latest is {self._latest_seq})")
            return False
        self.records = list(records)
        self.loaded = True
        self._pending_seq = None
        # Re-filtering a new collection starts again from the first page
        self.view = self.view.with_filter(self.view.filter)
        return True

    def fetch_failed(self, seq: int, exc: Exception) -> bool:
        """Keep the previous collection and tell the admin. Stale failures are ignored."""
        if not self.is_latest(seq):
            logger.debug(f"Ignoring failure of stale fetch {seq}: {exc}")
            return False
        self._pending_seq = None
        logger.warning(f"Feedback fetch {seq} failed: {exc}")
        self.notify("Could not load feedback. Showing the last loaded data.", level="warning")
        return True

    async def refresh(self, source: SQLAlchemyRecordSource) -> bool:
        """Fetch everything from ``source``. Returns True if the result was applied."""
        seq = self.begin_fetch()
        self._pending_seq = seq
        try:
            records = await source.fetch_all()
        except RecordSourceError as e:
            self.fetch_failed(seq, e)
            return False
        return self.apply_fetch(seq, records)

    async def record_inserted(self, record: FeedbackRecord, source: SQLAlchemyRecordSource) -> bool:
        """React to a push notification for a new record."""
        self.notify("New feedback received", level="info")
        if self.settings.incremental_merge:
            self.merge(record)
            return True
        return await self.refresh(source)

    def merge(self, record: FeedbackRecord) -> None:
        """Insert a pushed record into the cache without a re-fetch."""
        if any(existing.id == record.id for existing in self.records):
            return
        self.records.insert(0, record)
        self.view = self.view.with_filter(self.view.filter)

    # --- Notices

    @property
    def latest_notice(self) -> Optional[Notice]:
        return self.notices[0] if self.notices else None

    def notify(self, message: str, level: str = "info", now: Optional[datetime] = None) -> Notice:
        notice = Notice(
            id=next(self._notice_ids),
            message=message,
            level=level,
            timestamp=now or datetime.now(timezone.utc),
        )
        self.notices.appendleft(notice)
        return notice

    # --- View actions

    @property
    def page_count(self) -> int:
        return self.view.page_count(self.records, self.settings.page_size)

    def set_filter(self, spec: FilterSpec) -> None:
        self.view = self.view.with_filter(spec)

    def set_sort(self, direction: SortDirection) -> None:
        self.view = self.view.with_sort(direction)

    def toggle_sort(self) -> None:
        self.view = self.view.toggle_sort()

    def go_to_page(self, page: int) -> None:
        self.view = self.view.with_page(page, self.page_count)

    def next_page(self) -> None:
        self.go_to_page(self.view.page + 1)

    def previous_page(self) -> None:
        self.go_to_page(self.view.page - 1)

    # --- Derived views

    def ordered_view(self) -> List[FeedbackRecord]:
        return self.view.ordered(self.records)

    def current_page(self) -> Page:
        return self.view.page_of(self.records, self.settings.page_size)

    def snapshot(self, now: Optional[datetime] = None) -> BoardSnapshot:
        now = now or datetime.now(timezone.utc)
        return BoardSnapshot(
            view=self.view,
            page=self.current_page(),
            stats=quick_stats(self.records, now, self.settings),
            analytics=summarize(self.records, now, self.settings),
            notices=list(self.notices),
            loaded=self.loaded,
            loading=self.is_loading,
        )

    def export(self, now: Optional[datetime] = None) -> Tuple[bytes, str]:
        """CSV bytes and download filename for the filtered, sorted view."""
        tz = self.settings.timezone
        return export_csv(self.ordered_view(), tz), export_filename(now, tz)
