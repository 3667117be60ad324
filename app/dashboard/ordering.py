"""Ordering of feedback records by creation time."""

import enum
from typing import Iterable, List, Optional

from app.dashboard.records import FeedbackRecord


class SortDirection(str, enum.Enum):
    """Sort direction for the feedback list."""
    ASC = "asc"     # Oldest first
    DESC = "desc"   # Newest first

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortDirection":
        """Parse a query value, falling back to newest first."""
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.DESC

    def toggled(self) -> "SortDirection":
        return SortDirection.ASC if self is SortDirection.DESC else SortDirection.DESC


def sort_records(
    records: Iterable[FeedbackRecord],
    direction: SortDirection = SortDirection.DESC,
) -> List[FeedbackRecord]:
    """Sort by ``created_at``. Records with equal timestamps keep their input order."""
    # sorted() stays stable with reverse=True
    return sorted(
        records,
        key=lambda record: record.created_at,
        reverse=direction is SortDirection.DESC,
    )
