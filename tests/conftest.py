import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncIterator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

# The app reads its configuration at import time, so the test database has to
# be in the environment before anything under app/ is imported.
_DB_DIR = Path(tempfile.mkdtemp(prefix="echo-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'test.db'}"
os.environ["APP_DEBUG"] = "true"
os.environ["GOOGLE_AUTHORIZED_EMAIL"] = "admin@example.com"

from app.dashboard.records import FeedbackRecord, parse_category  # noqa: E402

NOW = datetime(2026, 10, 17, 15, 30, tzinfo=timezone.utc)


def make_record(
    id: str,
    created_at: datetime = NOW,
    user_name: str = "Jane Doe",
    email: str = "jane@example.com",
    feedback_text: str = "The export button is hard to find.",
    category: str = "suggestion",
) -> FeedbackRecord:
    return FeedbackRecord(
        id=id,
        user_name=user_name,
        email=email,
        feedback_text=feedback_text,
        category=parse_category(category),
        created_at=created_at,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def records() -> list:
    """A small mixed collection, deliberately not in time order."""
    return [
        make_record("r1", NOW - timedelta(hours=2), category="bug_report"),
        make_record("r2", NOW - timedelta(days=1, hours=3), "John Roe", "john@example.com",
                    "Please add dark mode to the dashboard.", "feature_request"),
        make_record("r3", NOW - timedelta(minutes=5), "Ann Lee", "ann@example.com",
                    "Crash when saving, twice today.", "bug_report"),
        make_record("r4", NOW - timedelta(days=3), "Jane D.", "jane@example.com",
                    "Love the new layout.\nKeep it up!", "suggestion"),
        make_record("r5", NOW - timedelta(days=10), "Bob", "bob@example.com",
                    "Imported from the old tracker.", "praise"),
    ]


@pytest.fixture(scope="session")
def test_db_url() -> str:
    return os.environ["DATABASE_URL"]


@pytest.fixture(scope="session")
def app(test_db_url: str):
    from app.main import app as litestar_app
    return litestar_app


@pytest_asyncio.fixture()
async def client(app) -> AsyncIterator[AsyncClient]:
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac


@pytest_asyncio.fixture()
async def admin_client(client: AsyncClient) -> AsyncIterator[AsyncClient]:
    """Client carrying an authenticated admin session cookie."""
    from app.auth.oauth import grant_admin_session, session_store

    session_id = "test-admin-session"
    await grant_admin_session(session_id, "admin@example.com")
    client.cookies.set("session_id", session_id)
    yield client
    client.cookies.clear()
    await session_store.delete_all()


@pytest_asyncio.fixture()
async def clean_feedback(client) -> AsyncIterator[None]:
    """Empty the feedback table before and after a test."""
    from sqlalchemy import delete

    from app.db import session_maker
    from app.models import Feedback

    async def _wipe():
        async with session_maker() as session:
            await session.execute(delete(Feedback))
            await session.commit()

    await _wipe()
    yield
    await _wipe()
