"""Feedback dashboard pipeline: filter, sort, paginate, aggregate, export."""

from app.dashboard.aggregation import FeedbackSummary, QuickStats, quick_stats, summarize
from app.dashboard.board import FeedbackBoard, Notice
from app.dashboard.export import export_csv, export_filename
from app.dashboard.filters import ALL_CATEGORIES, DateRange, FilterSpec, filter_records
from app.dashboard.ordering import SortDirection, sort_records
from app.dashboard.pagination import Page, paginate
from app.dashboard.records import FeedbackCategory, FeedbackRecord, OtherCategory, parse_category
from app.dashboard.source import (
    InsertChannel,
    RecordSourceError,
    SessionRecordSource,
    SQLAlchemyRecordSource,
    insert_channel,
)
from app.dashboard.view_state import ViewState

__all__ = [
    "ALL_CATEGORIES",
    "DateRange",
    "FeedbackBoard",
    "FeedbackCategory",
    "FeedbackRecord",
    "FeedbackSummary",
    "FilterSpec",
    "InsertChannel",
    "Notice",
    "OtherCategory",
    "Page",
    "QuickStats",
    "RecordSourceError",
    "SessionRecordSource",
    "SortDirection",
    "SQLAlchemyRecordSource",
    "ViewState",
    "export_csv",
    "export_filename",
    "filter_records",
    "insert_channel",
    "paginate",
    "parse_category",
    "quick_stats",
    "sort_records",
    "summarize",
]
