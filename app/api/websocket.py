"""WebSocket handler for the live admin dashboard."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Set

from litestar import WebSocket, websocket
from litestar.exceptions import WebSocketDisconnect

from app.auth.oauth import require_admin_guard
from app.dashboard.board import FeedbackBoard, Notice
from app.dashboard.filters import FilterSpec
from app.dashboard.ordering import SortDirection
from app.dashboard.records import FeedbackRecord
from app.dashboard.schemas import DashboardSnapshot, NoticeItem
from app.dashboard.source import SQLAlchemyRecordSource, Subscription
from app.api.admin import build_filter
from app.db import session_maker
from app.utils.logging import error_log

logger = logging.getLogger("Echo.WebSocket")


@dataclass
class DashboardConnection:
    """One connected admin dashboard and the board it drives."""
    socket: WebSocket
    board: FeedbackBoard
    source: SQLAlchemyRecordSource
    subscription: Optional[Subscription] = None
    tasks: Set[asyncio.Task] = field(default_factory=set)
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def send(self, message: dict) -> bool:
        """Send a JSON message; returns False if the socket is gone."""
        try:
            async with self.send_lock:
                await self.socket.send_json(message)
            return True
        except Exception as e:
            logger.warning(f"Failed to send to dashboard: {e}")
            return False

    async def send_snapshot(self) -> bool:
        snapshot = DashboardSnapshot.from_snapshot(self.board.snapshot())
        return await self.send({"type": "snapshot", "data": snapshot.model_dump(mode="json")})

    async def send_notice(self, notice: Notice) -> bool:
        item = NoticeItem.from_notice(notice)
        return await self.send({"type": "notice", "notice": item.model_dump(mode="json")})

    def _last_notice_id(self) -> int:
        latest = self.board.latest_notice
        return latest.id if latest else 0

    async def send_notices_after(self, notice_id: int) -> None:
        """Push every notice newer than ``notice_id``, oldest first."""
        fresh = [n for n in self.board.notices if n.id > notice_id]
        for notice in reversed(fresh):
            await self.send_notice(notice)

    async def refresh(self) -> None:
        """Re-fetch and push a snapshot. Stale fetches are dropped by the board."""
        last_id = self._last_notice_id()
        await self.board.refresh(self.source)
        await self.send_notices_after(last_id)
        await self.send_snapshot()

    def on_insert(self, record: FeedbackRecord) -> None:
        """Insert-channel callback: handle the new record without blocking the publisher."""
        task = asyncio.create_task(self._handle_insert(record))
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)

    async def _handle_insert(self, record: FeedbackRecord) -> None:
        last_id = self._last_notice_id()
        try:
            await self.board.record_inserted(record, self.source)
            await self.send_notices_after(last_id)
            await self.send_snapshot()
        except Exception as e:
            error_log("Error handling feedback insert", exc=e, context={"feedback_id": record.id})

    def close(self) -> None:
        if self.subscription is not None:
            self.subscription.unsubscribe()
        for task in list(self.tasks):
            task.cancel()


class DashboardConnectionManager:
    """Tracks open dashboard connections."""

    def __init__(self):
        self._connections: Dict[int, DashboardConnection] = {}

    def add(self, connection: DashboardConnection) -> None:
        self._connections[id(connection)] = connection

    def remove(self, connection: DashboardConnection) -> None:
        self._connections.pop(id(connection), None)

    @property
    def connection_count(self) -> int:
        return len(self._connections)


# Global connection manager instance
connection_manager = DashboardConnectionManager()


def _parse_page(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


async def handle_message(connection: DashboardConnection, data: dict) -> None:
    """Apply one client message to the board and answer it."""
    board = connection.board
    msg_type = data.get("type")

    if msg_type == "set_filter":
        spec: FilterSpec = build_filter(
            search=data.get("search") or "",
            category=data.get("category") or "all",
            start=data.get("start"),
            end=data.get("end"),
        )
        board.set_filter(spec)
        await connection.send_snapshot()

    elif msg_type == "toggle_sort":
        board.toggle_sort()
        await connection.send_snapshot()

    elif msg_type == "set_sort":
        board.set_sort(SortDirection.parse(data.get("sort")))
        await connection.send_snapshot()

    elif msg_type == "set_page":
        page = _parse_page(data.get("page"))
        if page is None:
            await connection.send({"type": "error", "message": "Invalid page"})
            return
        board.go_to_page(page)
        await connection.send_snapshot()

    elif msg_type == "next_page":
        board.next_page()
        await connection.send_snapshot()

    elif msg_type == "previous_page":
        board.previous_page()
        await connection.send_snapshot()

    elif msg_type == "refresh":
        await connection.refresh()

    elif msg_type == "export":
        content, filename = board.export()
        await connection.send({
            "type": "export",
            "filename": filename,
            "content": content.decode("utf-8"),
        })

    elif msg_type == "ping":
        await connection.send({"type": "pong"})

    else:
        await connection.send({"type": "error", "message": f"Unknown message type: {msg_type}"})


@websocket("/ws/admin/feedback", guards=[require_admin_guard])
async def dashboard_websocket(socket: WebSocket) -> None:
    """
    WebSocket endpoint for the live feedback dashboard.

    Message types (client -> server):
    - {"type": "set_filter", "search": "...", "category": "all", "start": "...", "end": "..."}
    - {"type": "toggle_sort"} / {"type": "set_sort", "sort": "asc"}
    - {"type": "set_page", "page": 2} / {"type": "next_page"} / {"type": "previous_page"}
    - {"type": "refresh"}
    - {"type": "export"}
    - {"type": "ping"}

    Message types (server -> client):
    - {"type": "snapshot", "data": {...}}  - Current page, stats, analytics, notices
    - {"type": "notice", "notice": {...}}  - New feedback received, fetch failed, ...
    - {"type": "export", "filename": "...", "content": "..."}
    - {"type": "pong"}
    - {"type": "error", "message": "..."}
    """
    await socket.accept()

    connection = DashboardConnection(
        socket=socket,
        board=FeedbackBoard(),
        source=SQLAlchemyRecordSource(session_maker),
    )
    connection.subscription = connection.source.subscribe_insert(connection.on_insert)
    connection_manager.add(connection)
    logger.info(f"Dashboard connected ({connection_manager.connection_count} open)")

    try:
        await connection.refresh()

        while True:
            try:
                data = await socket.receive_json()
            except json.JSONDecodeError:
                await connection.send({"type": "error", "message": "Invalid JSON"})
                continue

            if not isinstance(data, dict):
                await connection.send({"type": "error", "message": "Expected a JSON object"})
                continue

            await handle_message(connection, data)

    except WebSocketDisconnect:
        logger.info("Dashboard websocket disconnected")

    except Exception as e:
        logger.exception(f"Dashboard websocket error: {e}")

    finally:
        connection.close()
        connection_manager.remove(connection)
        logger.info(f"Dashboard closed ({connection_manager.connection_count} open)")


# Export the websocket handler for use in routes
websocket_handler = dashboard_websocket
