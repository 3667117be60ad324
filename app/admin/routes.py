"""Admin page routes."""

from datetime import datetime, timezone

from litestar import get, Request
from litestar.response import Redirect, Template
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.oauth import require_admin_guard, admin_login, admin_callback, admin_logout
from app.config import settings
from app.dashboard.aggregation import quick_stats, summarize
from app.dashboard.board import FeedbackBoard
from app.dashboard.records import CATEGORY_LABELS
from app.api.admin import load_records
from app.utils import get_base_path


@get("/admin", guards=[require_admin_guard])
async def admin_dashboard(request: Request, session: AsyncSession) -> Template:
    """Admin dashboard page (requires authentication).

    Renders the first page of the default view; the page then connects to
    the live websocket for filtering and updates.
    """
    now = datetime.now(timezone.utc)
    board = FeedbackBoard(now=now)
    board.apply_fetch(board.begin_fetch(), await load_records(session))
    return Template(
        template_name="admin/dashboard.html",
        context={
            "base_path": get_base_path(request),
            "page": board.current_page(),
            "stats": quick_stats(board.records, now, settings),
            "analytics": summarize(board.records, now, settings),
            "categories": CATEGORY_LABELS,
        },
    )


@get("/admin/login-page")
async def admin_login_page(request: Request) -> Template:
    """Admin login page (shown when not authenticated)."""
    return Template(template_name="admin/login.html", context={"base_path": get_base_path(request)})


@get("/admin/login")
async def admin_login_route(request: Request) -> Redirect:
    """Redirect to Google OAuth login."""
    return await admin_login(request)


@get("/admin/callback")
async def admin_callback_route(request: Request) -> Redirect:
    """Handle OAuth callback."""
    return await admin_callback(request)


@get("/admin/logout")
async def admin_logout_get(request: Request) -> Redirect:
    """Log out admin user (GET handler)."""
    return await admin_logout(request)


routes = [admin_dashboard, admin_login_route, admin_callback_route, admin_logout_get, admin_login_page]
