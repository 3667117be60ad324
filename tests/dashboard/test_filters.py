"""Tests for search, category and date-range filtering."""

from datetime import timedelta

from app.dashboard.filters import DateRange, FilterSpec, filter_records
from conftest import NOW, make_record


def test_no_predicates_is_identity(records):
    assert filter_records(records, FilterSpec()) == records


def test_search_matches_name_case_insensitively():
    jane = make_record("a", user_name="Jane Doe", email="jd@example.com", feedback_text="Nice work overall")
    john = make_record("b", user_name="John Roe", email="jr@example.com", feedback_text="Nice work overall")
    assert filter_records([jane, john], FilterSpec(search_term="jane")) == [jane]
    assert filter_records([jane, john], FilterSpec(search_term="JANE")) == [jane]


def test_search_covers_email_and_text(records):
    by_email = filter_records(records, FilterSpec(search_term="ann@"))
    assert [r.id for r in by_email] == ["r3"]
    by_text = filter_records(records, FilterSpec(search_term="dark mode"))
    assert [r.id for r in by_text] == ["r2"]


def test_whitespace_only_search_is_inactive(records):
    assert filter_records(records, FilterSpec(search_term="   ")) == records


def test_category_filter_is_exact(records):
    bugs = filter_records(records, FilterSpec(category="bug_report"))
    assert [r.id for r in bugs] == ["r1", "r3"]
    # Unknown stored values never match a concrete known category
    assert all(r.id != "r5" for r in filter_records(records, FilterSpec(category="suggestion")))


def test_category_filter_compares_the_stored_value(records):
    missing = make_record("m", category=None)
    blank = make_record("b", category="")
    literal = make_record("u", category="uncategorized")
    pool = records + [missing, blank, literal]

    # Rows without a category are shown as "uncategorized" but are not stored as it
    assert filter_records(pool, FilterSpec(category="uncategorized")) == [literal]
    assert [r.id for r in filter_records(pool, FilterSpec(category="praise"))] == ["r5"]
    assert missing.category_value == "uncategorized"
    assert missing.category_raw is None


def test_date_range_is_inclusive_on_both_ends():
    inside = make_record("in", NOW)
    before = make_record("before", NOW - timedelta(seconds=1))
    after = make_record("after", NOW + timedelta(seconds=1))
    spec = FilterSpec(date_range=DateRange(start=NOW, end=NOW))
    assert filter_records([before, inside, after], spec) == [inside]


def test_open_ended_range(records):
    spec = FilterSpec(date_range=DateRange(start=NOW - timedelta(days=2)))
    assert [r.id for r in filter_records(records, spec)] == ["r1", "r2", "r3"]


def test_inverted_range_is_ignored(records):
    spec = FilterSpec(date_range=DateRange(start=NOW, end=NOW - timedelta(days=1)))
    assert filter_records(records, spec) == records


def test_predicates_are_combined(records):
    spec = FilterSpec(
        search_term="jane",
        category="bug_report",
        date_range=DateRange(start=NOW - timedelta(days=1), end=NOW),
    )
    assert [r.id for r in filter_records(records, spec)] == ["r1"]


def test_filter_is_an_ordered_idempotent_subset(records):
    spec = FilterSpec(search_term="e", category="bug_report")
    once = filter_records(records, spec)
    assert filter_records(once, spec) == once
    positions = [records.index(r) for r in once]
    assert positions == sorted(positions)


def test_date_range_parse_drops_malformed_bounds():
    assert DateRange.parse("not-a-date", "") is None
    parsed = DateRange.parse("2026-10-01T00:00:00Z", "garbage")
    assert parsed is not None
    assert parsed.start.year == 2026 and parsed.end is None
