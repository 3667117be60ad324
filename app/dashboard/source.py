"""Record source: database access and insert notifications for the dashboard."""

import inspect
import itertools
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.dashboard.records import FeedbackCategory, FeedbackRecord
from app.models import Feedback
from app.utils.logging import error_log

logger = logging.getLogger("Echo.dashboard")

InsertCallback = Callable[[FeedbackRecord], Union[None, Awaitable[None]]]


class RecordSourceError(Exception):
    """Raised when the feedback store cannot be read or written."""

    def __init__(self, message: str, missing_table: bool = False):
        super().__init__(message)
        self.missing_table = missing_table

    @classmethod
    def from_db_error(cls, action: str, exc: SQLAlchemyError) -> "RecordSourceError":
        error_msg = str(exc).lower()
        missing = "does not exist" in error_msg or "no such table" in error_msg
        return cls(f"Could not {action}: {exc}", missing_table=missing)


class Subscription:
    """Handle returned by ``subscribe_insert``; call ``unsubscribe`` on teardown."""

    def __init__(self, channel: "InsertChannel", key: int):
        self._channel = channel
        self._key = key
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._channel._remove(self._key)
            self.active = False


class InsertChannel:
    """
    In-process fan-out of "new feedback" events.

    The submission endpoint publishes here after committing; live dashboard
    sessions subscribe to hear about new rows.
    """

    def __init__(self):
        self._subscribers: Dict[int, InsertCallback] = {}
        self._keys = itertools.count(1)

    def subscribe(self, callback: InsertCallback) -> Subscription:
        key = next(self._keys)
        self._subscribers[key] = callback
        logger.debug(f"Insert subscriber {key} added ({len(self._subscribers)} total)")
        return Subscription(self, key)

    def _remove(self, key: int) -> None:
        self._subscribers.pop(key, None)
        logger.debug(f"Insert subscriber {key} removed ({len(self._subscribers)} left)")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, record: FeedbackRecord) -> None:
        """Deliver ``record`` to every subscriber. A failing subscriber does not stop the rest."""
        for key, callback in list(self._subscribers.items()):
            try:
                result = callback(record)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                error_log(
                    "Insert subscriber failed",
                    exc=e,
                    context={"subscriber": key, "feedback_id": record.id},
                )


# Global channel shared by the API and the websocket
insert_channel = InsertChannel()


class SQLAlchemyRecordSource:
    """Reads and writes feedback through SQLAlchemy sessions from ``session_maker``."""

    def __init__(
        self,
        session_maker: Optional[async_sessionmaker] = None,
        channel: Optional[InsertChannel] = None,
    ):
        self._session_maker = session_maker
        self.channel = channel or insert_channel

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_maker() as session:
            yield session

    async def fetch_all(self) -> List[FeedbackRecord]:
        """Every stored record, newest first."""
        try:
            async with self._session() as session:
                result = await session.execute(
                    select(Feedback).order_by(Feedback.created_at.desc())
                )
                rows = result.scalars().all()
                return [FeedbackRecord.from_model(row) for row in rows]
        except SQLAlchemyError as e:
            logger.exception(f"Database error fetching feedback: {e}")
            raise RecordSourceError.from_db_error("fetch feedback", e) from e

    async def create(
        self,
        user_name: str,
        email: str,
        feedback_text: str,
        category: Any = FeedbackCategory.SUGGESTION,
    ) -> FeedbackRecord:
        """Persist a new submission and notify insert subscribers."""
        if isinstance(category, FeedbackCategory):
            category = category.value
        try:
            async with self._session() as session:
                feedback = Feedback(
                    user_name=user_name,
                    email=email,
                    feedback_text=feedback_text,
                    category=category or FeedbackCategory.SUGGESTION.value,
                )
                session.add(feedback)
                await session.commit()
                await session.refresh(feedback)
                record = FeedbackRecord.from_model(feedback)
        except SQLAlchemyError as e:
            logger.exception(f"Database error saving feedback: {e}")
            raise RecordSourceError.from_db_error("save feedback", e) from e

        await self.channel.publish(record)
        return record

    def subscribe_insert(self, callback: InsertCallback) -> Subscription:
        return self.channel.subscribe(callback)


class SessionRecordSource(SQLAlchemyRecordSource):
    """Record source bound to a single request-scoped session."""

    def __init__(self, session: AsyncSession, channel: Optional[InsertChannel] = None):
        super().__init__(channel=channel)
        self._bound_session = session

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        yield self._bound_session
