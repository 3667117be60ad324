"""Admin API endpoints."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from litestar import Controller, Response, get
from litestar.exceptions import HTTPException
from litestar.params import Parameter
from litestar.status_codes import HTTP_500_INTERNAL_SERVER_ERROR, HTTP_503_SERVICE_UNAVAILABLE
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.oauth import require_admin_guard
from app.config import settings
from app.dashboard.aggregation import quick_stats, summarize
from app.dashboard.export import EXPORT_MEDIA_TYPE, export_csv, export_filename
from app.dashboard.filters import DateRange, FilterSpec, filter_records
from app.dashboard.ordering import SortDirection, sort_records
from app.dashboard.pagination import paginate
from app.dashboard.records import FeedbackRecord
from app.dashboard.schemas import AnalyticsResponse, FeedbackPage, StatsResponse
from app.dashboard.source import RecordSourceError, SessionRecordSource

logger = logging.getLogger("Echo.admin")


def build_filter(
    search: str = "",
    category: str = "all",
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> FilterSpec:
    """Filter spec from query parameters. Bad dates switch the date filter off."""
    return FilterSpec(
        search_term=search or "",
        category=category or "all",
        date_range=DateRange.parse(start, end),
    )


async def load_records(session: AsyncSession) -> List[FeedbackRecord]:
    """Fetch every record, translating store failures into HTTP errors."""
    try:
        return await SessionRecordSource(session).fetch_all()
    except RecordSourceError as e:
        if e.missing_table:
            raise HTTPException(
                detail="Feedback table does not exist. Please run database migrations.",
                status_code=HTTP_500_INTERNAL_SERVER_ERROR
            )
        raise HTTPException(
            detail="Feedback store is unavailable. Please refresh to try again.",
            status_code=HTTP_503_SERVICE_UNAVAILABLE
        )


# --- Controller ---

class AdminController(Controller):
    """API endpoints for admin dashboard."""

    path = "/api/admin"
    tags = ["admin"]
    guards = [require_admin_guard]

    @get("/feedback")
    async def get_feedback(
        self,
        session: AsyncSession,
        search: str = "",
        category: str = "all",
        start: Optional[str] = None,
        end: Optional[str] = None,
        sort: str = "desc",
        page: int = 1,
    ) -> FeedbackPage:
        """Filtered, sorted and paginated feedback submissions."""
        records = await load_records(session)
        spec = build_filter(search, category, start, end)
        ordered = sort_records(filter_records(records, spec), SortDirection.parse(sort))
        logger.debug(f"Feedback list: {len(ordered)}/{len(records)} records match {spec}")
        return FeedbackPage.from_page(paginate(ordered, page, settings.page_size))

    @get("/stats")
    async def get_stats(
        self,
        session: AsyncSession,
    ) -> StatsResponse:
        """Quick statistics over all feedback."""
        records = await load_records(session)
        return StatsResponse.from_stats(quick_stats(records, datetime.now(timezone.utc), settings))

    @get("/analytics")
    async def get_analytics(
        self,
        session: AsyncSession,
        view_scope: str = Parameter(query="scope", default="all"),
        search: str = "",
        category: str = "all",
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> AnalyticsResponse:
        """
        Aggregate views for the analytics panel.

        ``scope=all`` (default) summarizes every record; ``scope=filtered``
        summarizes only records matching the filter parameters.
        """
        records = await load_records(session)
        if view_scope == "filtered":
            records = filter_records(records, build_filter(search, category, start, end))
        return AnalyticsResponse.from_summary(
            summarize(records, datetime.now(timezone.utc), settings)
        )

    @get("/feedback/export")
    async def export_feedback(
        self,
        session: AsyncSession,
        search: str = "",
        category: str = "all",
        start: Optional[str] = None,
        end: Optional[str] = None,
        sort: str = "desc",
    ) -> Response[bytes]:
        """Download the filtered, sorted feedback list as CSV."""
        records = await load_records(session)
        spec = build_filter(search, category, start, end)
        ordered = sort_records(filter_records(records, spec), SortDirection.parse(sort))
        filename = export_filename(tz=settings.timezone)
        logger.info(f"Exporting {len(ordered)} feedback records to {filename}")
        return Response(
            content=export_csv(ordered, settings.timezone),
            media_type=EXPORT_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
