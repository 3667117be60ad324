"""CSV export of the filtered feedback view."""

import csv
import io
from datetime import datetime, timezone, tzinfo
from typing import Iterable, Optional

from app.config import settings
from app.dashboard.records import FeedbackRecord

EXPORT_HEADER = ["Date", "Name", "Email", "Category", "Feedback"]
EXPORT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
EXPORT_MEDIA_TYPE = "text/csv"


def export_csv(records: Iterable[FeedbackRecord], tz: Optional[tzinfo] = None) -> bytes:
    """
    Serialize records to UTF-8 CSV with a fixed header row.

    Free-text fields are quoted when they contain commas, quotes or newlines,
    so feedback bodies survive a round trip through any CSV reader.
    """
    tz = tz or settings.timezone
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for record in records:
        writer.writerow([
            record.created_at.astimezone(tz).strftime(EXPORT_DATE_FORMAT),
            record.user_name,
            record.email,
            record.category_value,
            record.feedback_text,
        ])
    return buffer.getvalue().encode("utf-8")


def export_filename(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> str:
    tz = tz or settings.timezone
    now = now or datetime.now(timezone.utc)
    return f"feedback-export-{now.astimezone(tz).strftime('%Y-%m-%d')}.csv"
