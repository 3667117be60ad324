"""Tests for sorting by creation time."""

from datetime import timedelta, timezone

from app.dashboard.ordering import SortDirection, sort_records
from conftest import NOW, make_record


def test_default_is_newest_first(records):
    ordered = sort_records(records)
    assert [r.id for r in ordered] == ["r3", "r1", "r2", "r4", "r5"]


def test_ascending_is_reverse_of_descending_without_ties(records):
    asc = sort_records(records, SortDirection.ASC)
    desc = sort_records(records, SortDirection.DESC)
    assert asc == list(reversed(desc))


def test_sort_is_idempotent(records):
    for direction in SortDirection:
        once = sort_records(records, direction)
        assert sort_records(once, direction) == once


def test_ties_keep_input_order_in_both_directions():
    first = make_record("first", NOW)
    second = make_record("second", NOW)
    older = make_record("older", NOW - timedelta(hours=1))
    desc = sort_records([first, older, second], SortDirection.DESC)
    asc = sort_records([first, older, second], SortDirection.ASC)
    assert [r.id for r in desc] == ["first", "second", "older"]
    assert [r.id for r in asc] == ["older", "first", "second"]


def test_comparison_uses_instants_not_strings():
    utc_late = make_record("utc", NOW.replace(hour=10))
    # 09:00 at UTC-5 is 14:00 UTC, later than 10:00 UTC
    offset_later = make_record("offset", NOW.replace(hour=9, tzinfo=timezone(timedelta(hours=-5))))
    assert [r.id for r in sort_records([utc_late, offset_later])] == ["offset", "utc"]


def test_parse_falls_back_to_desc():
    assert SortDirection.parse("ASC") is SortDirection.ASC
    assert SortDirection.parse("sideways") is SortDirection.DESC
    assert SortDirection.parse(None) is SortDirection.DESC
