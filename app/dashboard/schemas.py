"""Response schemas shared by the admin API and the live dashboard socket."""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from app.dashboard.aggregation import FeedbackSummary, QuickStats
from app.dashboard.board import BoardSnapshot, Notice
from app.dashboard.pagination import Page
from app.dashboard.records import FeedbackRecord
from app.dashboard.view_state import ViewState


class FeedbackItem(BaseModel):
    """Feedback list item."""
    id: str
    user_name: str
    email: str
    feedback_text: str
    category: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: FeedbackRecord) -> "FeedbackItem":
        return cls(
            id=record.id,
            user_name=record.user_name,
            email=record.email,
            feedback_text=record.feedback_text,
            category=record.category_value,
            created_at=record.created_at,
        )


class FeedbackPage(BaseModel):
    """One page of the filtered, sorted feedback list."""
    items: List[FeedbackItem]
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_previous: bool
    has_next: bool

    @classmethod
    def from_page(cls, page: Page) -> "FeedbackPage":
        return cls(
            items=[FeedbackItem.from_record(r) for r in page.items],
            page=page.page,
            page_size=page.page_size,
            total_items=page.total_items,
            total_pages=page.total_pages,
            has_previous=page.has_previous,
            has_next=page.has_next,
        )


class StatsResponse(BaseModel):
    """Dashboard header statistics."""
    total_feedback: int
    last_24h: int
    unique_users: int
    categories: int

    @classmethod
    def from_stats(cls, stats: QuickStats) -> "StatsResponse":
        return cls(
            total_feedback=stats.total,
            last_24h=stats.recent,
            unique_users=stats.unique_submitters,
            categories=stats.category_count,
        )


class ContributorItem(BaseModel):
    email: str
    name: str
    count: int


class TrendPoint(BaseModel):
    day: date
    label: str
    total: int
    by_category: Dict[str, int]


class AnalyticsResponse(BaseModel):
    """Aggregate views over a feedback collection."""
    total: int
    recent: int
    unique_submitters: int
    category_distribution: Dict[str, int]
    category_share: Dict[str, float]
    top_contributors: List[ContributorItem]
    daily_trend: List[TrendPoint]
    hourly_distribution: List[int]

    @classmethod
    def from_summary(cls, summary: FeedbackSummary) -> "AnalyticsResponse":
        return cls(
            total=summary.total,
            recent=summary.recent,
            unique_submitters=summary.unique_submitters,
            category_distribution=summary.category_distribution,
            category_share=summary.category_share,
            top_contributors=[
                ContributorItem(email=c.email, name=c.name, count=c.count)
                for c in summary.top_contributors
            ],
            daily_trend=[
                TrendPoint(day=d.day, label=d.label, total=d.total, by_category=d.by_category)
                for d in summary.daily_trend
            ],
            hourly_distribution=summary.hourly_distribution,
        )


class NoticeItem(BaseModel):
    id: int
    message: str
    level: str
    timestamp: datetime

    @classmethod
    def from_notice(cls, notice: Notice) -> "NoticeItem":
        return cls(id=notice.id, message=notice.message, level=notice.level, timestamp=notice.timestamp)


class ViewStateItem(BaseModel):
    search: str
    category: str
    start: Optional[datetime]
    end: Optional[datetime]
    sort: str
    page: int

    @classmethod
    def from_view(cls, view: ViewState) -> "ViewStateItem":
        date_range = view.filter.date_range
        return cls(
            search=view.filter.search_term,
            category=view.filter.category,
            start=date_range.start if date_range else None,
            end=date_range.end if date_range else None,
            sort=view.sort.value,
            page=view.page,
        )


class DashboardSnapshot(BaseModel):
    """Everything the live dashboard renders."""
    view: ViewStateItem
    page: FeedbackPage
    stats: StatsResponse
    analytics: AnalyticsResponse
    notices: List[NoticeItem]
    loaded: bool
    loading: bool

    @classmethod
    def from_snapshot(cls, snapshot: BoardSnapshot) -> "DashboardSnapshot":
        return cls(
            view=ViewStateItem.from_view(snapshot.view),
            page=FeedbackPage.from_page(snapshot.page),
            stats=StatsResponse.from_stats(snapshot.stats),
            analytics=AnalyticsResponse.from_summary(snapshot.analytics),
            notices=[NoticeItem.from_notice(n) for n in snapshot.notices],
            loaded=snapshot.loaded,
            loading=snapshot.loading,
        )
