"""Tests for the live dashboard board: view actions, fetch sequencing, inserts."""

import asyncio
from dataclasses import replace
from datetime import timedelta

import pytest

from app.config import DashboardSettings
from app.dashboard.board import FeedbackBoard
from app.dashboard.filters import FilterSpec
from app.dashboard.ordering import SortDirection
from app.dashboard.source import RecordSourceError
from conftest import NOW, make_record

SETTINGS = DashboardSettings(default_range_days=30)


class FakeSource:
    """Record source whose fetches resolve when the test says so."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.pending = []
        self.manual = False
        self.fail = False

    async def fetch_all(self):
        if self.fail:
            raise RecordSourceError("connection refused")
        if self.manual:
            future = asyncio.get_running_loop().create_future()
            self.pending.append(future)
            return await future
        return list(self.records)


def many(count):
    return [make_record(f"r{i}", NOW - timedelta(minutes=i)) for i in range(count)]


@pytest.fixture
def board():
    return FeedbackBoard(settings=SETTINGS, now=NOW)


def test_initial_view_is_newest_first_last_thirty_days(board):
    assert board.view.sort is SortDirection.DESC
    assert board.view.page == 1
    assert board.view.filter.date_range.start == NOW - timedelta(days=30)
    assert board.view.filter.date_range.end is None
    assert not board.loaded


def test_apply_fetch_replaces_collection(board, records):
    seq = board.begin_fetch()
    assert board.apply_fetch(seq, records)
    assert board.loaded
    # Ten days old is still inside the thirty-day default window
    assert board.current_page().total_items == 5


def test_stale_fetch_is_discarded(board, records):
    old = board.begin_fetch()
    new = board.begin_fetch()
    assert board.apply_fetch(new, records[:2])
    assert not board.apply_fetch(old, records)
    assert [r.id for r in board.records] == ["r1", "r2"]


@pytest.mark.asyncio
async def test_slow_fetch_cannot_overwrite_newer_one(board, records):
    source = FakeSource()
    source.manual = True
    first = asyncio.create_task(board.refresh(source))
    second = asyncio.create_task(board.refresh(source))
    await asyncio.sleep(0)
    assert len(source.pending) == 2

    # Newer response arrives first, the older one afterwards
    source.pending[1].set_result(records[:1])
    source.pending[0].set_result(records)
    assert await second is True
    assert await first is False
    assert [r.id for r in board.records] == ["r1"]
    assert not board.is_loading


@pytest.mark.asyncio
async def test_snapshot_reports_loading_while_fetch_in_flight(board, records):
    assert board.snapshot(NOW).loading is False

    source = FakeSource()
    source.manual = True
    task = asyncio.create_task(board.refresh(source))
    await asyncio.sleep(0)
    assert board.snapshot(NOW).loading is True

    source.pending[0].set_result(records)
    await task
    snapshot = board.snapshot(NOW)
    assert snapshot.loading is False
    assert snapshot.loaded is True


@pytest.mark.asyncio
async def test_fetch_failure_keeps_previous_records(board, records):
    source = FakeSource(records)
    assert await board.refresh(source)

    source.fail = True
    assert await board.refresh(source) is False
    assert len(board.records) == 5
    assert board.latest_notice.level == "warning"


def test_stale_failure_is_ignored(board):
    old = board.begin_fetch()
    board.begin_fetch()
    assert not board.fetch_failed(old, RecordSourceError("late"))
    assert board.latest_notice is None


def test_filter_change_resets_page(board):
    board.apply_fetch(board.begin_fetch(), many(12))
    board.go_to_page(3)
    assert board.view.page == 3
    board.set_filter(replace(board.view.filter, search_term="jane"))
    assert board.view.page == 1


def test_sort_change_resets_page_and_reorders(board):
    board.apply_fetch(board.begin_fetch(), many(12))
    board.next_page()
    board.toggle_sort()
    assert board.view.page == 1
    assert board.view.sort is SortDirection.ASC
    assert board.current_page().items[0].id == "r11"


def test_paging_is_clamped(board):
    board.apply_fetch(board.begin_fetch(), many(12))
    board.previous_page()
    assert board.view.page == 1
    for _ in range(5):
        board.next_page()
    assert board.view.page == 3
    assert [r.id for r in board.current_page().items] == ["r10", "r11"]


def test_paging_on_empty_board_stays_on_first_page(board):
    board.next_page()
    assert board.view.page == 1
    assert board.current_page().items == []


@pytest.mark.asyncio
async def test_insert_triggers_refetch(board, records):
    source = FakeSource(records[:2])
    await board.refresh(source)
    source.records = records
    assert await board.record_inserted(records[2], source)
    assert len(board.records) == 5
    assert board.latest_notice.message == "New feedback received"


@pytest.mark.asyncio
async def test_insert_with_incremental_merge(records):
    board = FeedbackBoard(settings=replace(SETTINGS, incremental_merge=True), now=NOW)
    source = FakeSource(records[:2])
    await board.refresh(source)
    source.fail = True  # a merge must not touch the source
    await board.record_inserted(records[2], source)
    await board.record_inserted(records[2], source)
    assert [r.id for r in board.records] == ["r3", "r1", "r2"]


def test_snapshot_uses_full_collection_for_analytics(board, records):
    board.apply_fetch(board.begin_fetch(), records)
    board.set_filter(FilterSpec(category="bug_report"))
    snapshot = board.snapshot(NOW)
    assert snapshot.page.total_items == 2
    assert snapshot.stats.total == 5
    assert snapshot.analytics.total == 5
    assert snapshot.loaded


def test_export_uses_filtered_sorted_view(board, records):
    board.apply_fetch(board.begin_fetch(), records)
    board.set_filter(FilterSpec(category="bug_report"))
    board.set_sort(SortDirection.ASC)
    content, filename = board.export(NOW)
    lines = content.decode("utf-8").splitlines()
    assert len(lines) == 3
    assert lines[1].startswith("2026-10-17 13:30:00,Jane Doe")
    assert filename == "feedback-export-2026-10-17.csv"


def test_notices_are_bounded(board):
    for i in range(30):
        board.notify(f"notice {i}")
    assert len(board.notices) == 20
    assert board.latest_notice.message == "notice 29"
