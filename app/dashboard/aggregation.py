"""
Aggregate views over a feedback collection.

Every function here is pure: it takes a list of records and an evaluation
time and returns plain data. Callers decide whether to pass the full
collection (global stats) or the filtered view (contextual stats).
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Optional, Sequence

from app.config import DashboardSettings, settings as default_settings
from app.dashboard.records import (
    CATEGORY_LABELS,
    FeedbackCategory,
    FeedbackRecord,
    ensure_aware,
)


@dataclass(frozen=True)
class Contributor:
    email: str
    name: str
    count: int


@dataclass(frozen=True)
class DailyCount:
    """Submissions on one local calendar day."""
    day: date
    label: str
    total: int
    by_category: Dict[str, int]


@dataclass(frozen=True)
class QuickStats:
    """Numbers shown in the dashboard header cards."""
    total: int
    recent: int
    unique_submitters: int
    category_count: int


@dataclass(frozen=True)
class FeedbackSummary:
    total: int
    recent: int
    unique_submitters: int
    category_distribution: Dict[str, int]
    category_share: Dict[str, float]
    top_contributors: List[Contributor]
    daily_trend: List[DailyCount]
    category_count: int = 0
    hourly_distribution: List[int] = field(default_factory=lambda: [0] * 24)

    @property
    def quick_stats(self) -> QuickStats:
        return QuickStats(
            total=self.total,
            recent=self.recent,
            unique_submitters=self.unique_submitters,
            category_count=self.category_count,
        )


def _now(now: Optional[datetime]) -> datetime:
    return ensure_aware(now) if now is not None else datetime.now(timezone.utc)


def count_recent(
    records: Sequence[FeedbackRecord],
    now: Optional[datetime] = None,
    window: timedelta = timedelta(hours=24),
) -> int:
    """Records created in ``(now - window, now]``."""
    now = _now(now)
    cutoff = now - window
    return sum(1 for r in records if cutoff < r.created_at <= now)


def count_unique_submitters(records: Sequence[FeedbackRecord]) -> int:
    return len({r.email for r in records})


def category_distribution(records: Sequence[FeedbackRecord]) -> Dict[str, int]:
    """
    Count per category, keyed in order of first appearance.

    Every unrecognized or missing value lands in the ``uncategorized`` bucket.
    """
    counts: Dict[str, int] = {}
    for record in records:
        key = record.category_key
        counts[key] = counts.get(key, 0) + 1
    return counts


def count_distinct_categories(records: Sequence[FeedbackRecord]) -> int:
    """Distinct stored category values, so "praise" and "legacy" count as two."""
    return len({r.category_raw for r in records})


def category_share(distribution: Dict[str, int]) -> Dict[str, float]:
    """Percentage of the total per category, rounded to one decimal."""
    total = sum(distribution.values())
    if total == 0:
        return {}
    return {key: round(count / total * 100, 1) for key, count in distribution.items()}


def top_contributors(records: Sequence[FeedbackRecord], limit: int = 3) -> List[Contributor]:
    """
    Most active submitters by email.

    Ties keep the order in which the emails were first seen. The display name
    comes from the first record carrying that email.
    """
    counts = Counter(r.email for r in records)
    first_names: Dict[str, str] = {}
    for record in records:
        first_names.setdefault(record.email, record.user_name)
    return [
        Contributor(email=email, name=first_names.get(email) or email, count=count)
        for email, count in counts.most_common(limit)
    ]


def daily_trend(
    records: Sequence[FeedbackRecord],
    now: Optional[datetime] = None,
    days: int = 7,
    tz: tzinfo = timezone.utc,
) -> List[DailyCount]:
    """
    Per-day totals for the last ``days`` local calendar days, oldest first.

    Only the three known categories get a bucket; other values still count
    toward the day's total.
    """
    today = _now(now).astimezone(tz).date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    buckets = {
        day: {"total": 0, **{label: 0 for label in CATEGORY_LABELS.values()}}
        for day in window
    }

    for record in records:
        bucket = buckets.get(record.created_at.astimezone(tz).date())
        if bucket is None:
            continue
        bucket["total"] += 1
        category = record.category
        # OtherCategory values have no trend bucket
        if isinstance(category, FeedbackCategory):
            bucket[category.label] += 1

    return [
        DailyCount(
            day=day,
            label=f"{day.strftime('%b')} {day.day}",
            total=buckets[day].pop("total"),
            by_category=buckets[day],
        )
        for day in window
    ]


def hourly_distribution(records: Sequence[FeedbackRecord], tz: tzinfo = timezone.utc) -> List[int]:
    """24 buckets indexed by local hour of day."""
    hours = [0] * 24
    for record in records:
        hours[record.created_at.astimezone(tz).hour] += 1
    return hours


def summarize(
    records: Sequence[FeedbackRecord],
    now: Optional[datetime] = None,
    settings: Optional[DashboardSettings] = None,
) -> FeedbackSummary:
    """Compute every aggregate view for ``records`` in one call."""
    settings = settings or default_settings
    now = _now(now)
    distribution = category_distribution(records)
    return FeedbackSummary(
        total=len(records),
        recent=count_recent(records, now, timedelta(hours=settings.recency_hours)),
        unique_submitters=count_unique_submitters(records),
        category_distribution=distribution,
        category_share=category_share(distribution),
        top_contributors=top_contributors(records, settings.top_contributors),
        daily_trend=daily_trend(records, now, settings.trend_days, settings.timezone),
        category_count=count_distinct_categories(records),
        hourly_distribution=hourly_distribution(records, settings.timezone),
    )


def quick_stats(
    records: Sequence[FeedbackRecord],
    now: Optional[datetime] = None,
    settings: Optional[DashboardSettings] = None,
) -> QuickStats:
    settings = settings or default_settings
    return QuickStats(
        total=len(records),
        recent=count_recent(records, now, timedelta(hours=settings.recency_hours)),
        unique_submitters=count_unique_submitters(records),
        category_count=count_distinct_categories(records),
    )
