"""Tests for core calendar logic."""

from datetime import date, datetime, timedelta, timezone

import pytest

from notical.core.calendar import (
    GRID_CELLS,
    PAGE_SIZE,
    CalendarEntry,
    DisplayedMonth,
    build_entry_payload,
    build_grid,
    build_query_payload,
    format_today,
    grid_rows,
    leading_blanks,
    month_range,
    page_url,
    parse_record_date,
    reduce_results,
)


# Fixtures
@pytest.fixture
def february():
    return DisplayedMonth(2024, 2)


@pytest.fixture
def make_record():
    """Factory for creating query result records."""
    def _make(record_id: str, start: str | None, color: str | None = "blue") -> dict:
        props = {"Date": {"date": {"start": start} if start else None}}
        props["Color"] = {"select": {"name": color} if color else None}
        return {"id": record_id, "properties": props}
    return _make


class TestDisplayedMonth:
    def test_next_wraps_year(self):
        assert DisplayedMonth(2024, 12).next() == DisplayedMonth(2025, 1)

    def test_previous_wraps_year(self):
        assert DisplayedMonth(2024, 1).previous() == DisplayedMonth(2023, 12)

    def test_current(self):
        assert DisplayedMonth.current(date(2026, 10, 19)) == DisplayedMonth(2026, 10)

    def test_parse(self):
        assert DisplayedMonth.parse("2024-02") == DisplayedMonth(2024, 2)

    def test_parse_rejects_bad_month(self):
        with pytest.raises(ValueError):
            DisplayedMonth.parse("2024-13")

    def test_label(self, february):
        assert february.label == "february 2024"

    def test_contains(self, february):
        assert february.contains(date(2024, 2, 29)) is True
        assert february.contains(date(2024, 3, 1)) is False
        assert february.contains(date(2023, 2, 1)) is False


class TestQueryPayload:
    def test_leap_year_range(self, february):
        assert month_range(february) == ("2024-02-01", "2024-02-29")

    def test_non_leap_year_range(self):
        assert month_range(DisplayedMonth(2023, 2)) == ("2023-02-01", "2023-02-28")

    def test_december_range(self):
        assert month_range(DisplayedMonth(2024, 12)) == ("2024-12-01", "2024-12-31")

    def test_payload_shape(self, february):
        payload = build_query_payload(february)

        assert payload["page_size"] == PAGE_SIZE == 100
        assert payload["filter"] == {
            "and": [
                {"property": "Date", "date": {"on_or_after": "2024-02-01"}},
                {"property": "Date", "date": {"on_or_before": "2024-02-29"}},
            ]
        }


class TestParseRecordDate:
    def test_date_only(self):
        assert parse_record_date("2024-02-05") == date(2024, 2, 5)

    def test_utc_timestamp(self):
        assert parse_record_date("2024-02-05T10:00:00.000Z", timezone.utc) == date(2024, 2, 5)

    def test_offset_shifts_day(self):
        # 00:30 in UTC+9 is still the previous day in UTC
        assert parse_record_date("2024-03-01T00:30:00+09:00", timezone.utc) == date(2024, 2, 29)

    def test_naive_timestamp(self):
        assert parse_record_date("2024-02-05T23:59:00") == date(2024, 2, 5)

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_record_date("not a date")


class TestReduceResults:
    def test_keys_by_day(self, february, make_record):
        day_map = reduce_results(
            [make_record("a", "2024-02-05"), make_record("b", "2024-02-20", "red")],
            february,
        )

        assert set(day_map) == {5, 20}
        assert day_map[20] == CalendarEntry(id="b", date="2024-02-20", color="red", day=20)

    def test_last_record_wins(self, february, make_record):
        day_map = reduce_results(
            [make_record("first", "2024-02-05"), make_record("second", "2024-02-05", "green")],
            february,
        )

        assert day_map[5].id == "second"
        assert day_map[5].color == "green"

    def test_skips_records_outside_month(self, february, make_record):
        day_map = reduce_results(
            [
                make_record("inside", "2024-02-10"),
                make_record("before", "2024-01-31"),
                make_record("after", "2024-03-01"),
            ],
            february,
        )

        assert list(day_map) == [10]

    def test_time_zone_shift_out_of_month(self, make_record):
        march = DisplayedMonth(2024, 3)
        day_map = reduce_results(
            [make_record("shifted", "2024-03-01T00:30:00+09:00")],
            march,
            tz=timezone.utc,
        )

        assert day_map == {}

    def test_missing_color_uses_fallback(self, february, make_record):
        day_map = reduce_results([make_record("a", "2024-02-05", None)], february)
        assert day_map[5].color == "gray"

        day_map = reduce_results(
            [make_record("a", "2024-02-05", None)], february, fallback_color="default"
        )
        assert day_map[5].color == "default"

    def test_skips_records_without_date(self, february, make_record):
        assert reduce_results([make_record("a", None)], february) == {}

    def test_skips_records_without_properties(self, february):
        assert reduce_results([{"id": "a"}], february) == {}

    def test_skips_non_object_records(self, february, make_record):
        results = ["junk", None, make_record("a", "2024-02-05")]
        assert list(reduce_results(results, february)) == [5]

    def test_skips_unparseable_dates(self, february, make_record):
        assert reduce_results([make_record("a", "someday")], february) == {}


class TestBuildGrid:
    def test_every_month_has_42_cells(self):
        month = DisplayedMonth(2000, 1)
        while month != DisplayedMonth(2031, 1):
            cells = build_grid(month, {}, date(1999, 1, 1))

            # Sunday-first weekday of the 1st
            sunday_first = month.first_day.isoweekday() % 7
            expected_leading = (sunday_first + 6) % 7
            leading = next(i for i, c in enumerate(cells) if not c.is_blank)
            days = [c for c in cells if not c.is_blank]
            trailing = GRID_CELLS - leading - len(days)

            assert len(cells) == 42
            assert leading == expected_leading == leading_blanks(month)
            assert [c.day for c in days] == list(range(1, month.days_in_month + 1))
            assert all(c.is_blank for c in cells[leading + len(days):])
            assert leading + len(days) + trailing == 42
            month = month.next()

    def test_monday_start_has_no_leading_blanks(self):
        # 1 January 2024 was a Monday
        cells = build_grid(DisplayedMonth(2024, 1), {}, date(2024, 1, 1))
        assert cells[0].day == 1

    def test_sunday_start_has_six_leading_blanks(self):
        # 1 September 2024 was a Sunday
        cells = build_grid(DisplayedMonth(2024, 9), {}, date(2024, 1, 1))
        assert [c.is_blank for c in cells[:7]] == [True] * 6 + [False]

    def test_marks_today_in_current_month(self, february):
        cells = build_grid(february, {}, date(2024, 2, 15))
        today_cells = [c for c in cells if c.is_today]
        assert [c.day for c in today_cells] == [15]

    def test_no_today_in_other_month(self, february):
        cells = build_grid(february, {}, date(2024, 3, 15))
        assert not any(c.is_today for c in cells)

    def test_entries_attached(self, february):
        entry = CalendarEntry(id="abc", date="2024-02-05", color="blue", day=5)
        cells = build_grid(february, {5: entry}, date(2024, 3, 1))

        with_entries = [c for c in cells if c.has_entry]
        assert len(with_entries) == 1
        assert with_entries[0].day == 5
        assert with_entries[0].entry is entry

    def test_grid_rows(self, february):
        rows = grid_rows(build_grid(february, {}, date(2024, 2, 1)))
        assert len(rows) == 6
        assert all(len(r) == 7 for r in rows)


class TestEntryPayload:
    def test_payload(self):
        now = datetime(2024, 2, 5, 9, 30, tzinfo=timezone(timedelta(hours=9)))
        payload = build_entry_payload("db-id", now, "blue")

        assert payload["parent"] == {"database_id": "db-id"}
        props = payload["properties"]
        assert props["Date"] == {"date": {"start": "2024-02-05T09:30:00+09:00"}}
        assert props["Color"] == {"select": {"name": "blue"}}
        title = props["Name"]["title"][0]["text"]["content"]
        assert now.strftime("%x") in title


class TestHelpers:
    def test_page_url_strips_hyphens(self):
        assert (
            page_url("f6a9e1d8-0b5c-4c7a-9f0d-1e2f3a4b5c6d")
            == "https://www.notion.so/f6a9e1d80b5c4c7a9f0d1e2f3a4b5c6d"
        )

    def test_format_today(self):
        assert format_today(date(2026, 10, 19)) == "10/ 19/ MON"
