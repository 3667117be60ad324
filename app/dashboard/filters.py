"""Search, category and date-range filtering of feedback records."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from app.dashboard.records import FeedbackRecord, ensure_aware, parse_timestamp

logger = logging.getLogger("Echo.dashboard")

ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class DateRange:
    """Inclusive instant range. Either bound may be left open."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        """False for an empty or inverted range; such a range filters nothing."""
        if self.start is None and self.end is None:
            return False
        if self.start is not None and self.end is not None:
            return ensure_aware(self.start) <= ensure_aware(self.end)
        return True

    def contains(self, moment: datetime) -> bool:
        moment = ensure_aware(moment)
        if self.start is not None and moment < ensure_aware(self.start):
            return False
        if self.end is not None and moment > ensure_aware(self.end):
            return False
        return True

    @classmethod
    def parse(cls, start: Optional[str], end: Optional[str]) -> Optional["DateRange"]:
        """
        Build a range from raw query values.

        Unparseable bounds are dropped instead of raising; a range whose
        bounds all fail to parse comes back as ``None``.
        """
        parsed_start = _parse_bound(start, "start")
        parsed_end = _parse_bound(end, "end")
        if parsed_start is None and parsed_end is None:
            return None
        return cls(start=parsed_start, end=parsed_end)


def _parse_bound(value: Optional[str], which: str) -> Optional[datetime]:
    if value is None or not value.strip():
        return None
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring malformed date range {which}: {value!r}")
        return None


@dataclass(frozen=True)
class FilterSpec:
    """Active dashboard filters. Predicates are combined with AND."""
    search_term: str = ""
    category: str = ALL_CATEGORIES
    date_range: Optional[DateRange] = None

    @property
    def normalized_term(self) -> str:
        """Lowercased term, or empty when the term is only whitespace."""
        if not self.search_term.strip():
            return ""
        return self.search_term.lower()

    def matches(self, record: FeedbackRecord) -> bool:
        if self.category != ALL_CATEGORIES and record.category_raw != self.category:
            return False

        term = self.normalized_term
        if term and not (
            term in record.user_name.lower()
            or term in record.email.lower()
            or term in record.feedback_text.lower()
        ):
            return False

        if self.date_range is not None and self.date_range.is_active:
            if not self.date_range.contains(record.created_at):
                return False

        return True


def filter_records(records: Iterable[FeedbackRecord], spec: FilterSpec) -> List[FeedbackRecord]:
    """Return the records passing ``spec``, in their original order."""
    return [record for record in records if spec.matches(record)]
