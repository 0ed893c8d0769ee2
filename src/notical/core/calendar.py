"""Pure calendar domain logic - no I/O dependencies."""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
GRID_CELLS = 42
DATE_PROPERTY = "Date"
COLOR_PROPERTY = "Color"
TITLE_PROPERTY = "Name"
NOTION_PAGE_BASE = "https://www.notion.so/"

WEEKDAY_HEADERS = ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")
_WEEKDAY_ABBR = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")
MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)


@dataclass(frozen=True)
class DisplayedMonth:
    """The month shown by the widget. ``month`` is 1-12."""

    year: int
    month: int

    @classmethod
    def current(cls, today: date | None = None) -> "DisplayedMonth":
        today = today or date.today()
        return cls(today.year, today.month)

    @classmethod
    def parse(cls, value: str) -> "DisplayedMonth":
        """Parse a ``YYYY-MM`` string."""
        year_str, _, month_str = value.partition("-")
        month = cls(int(year_str), int(month_str))
        if not 1 <= month.month <= 12:
            raise ValueError(f"Month out of range: {value}")
        return month

    def next(self) -> "DisplayedMonth":
        if self.month == 12:
            return DisplayedMonth(self.year + 1, 1)
        return DisplayedMonth(self.year, self.month + 1)

    def previous(self) -> "DisplayedMonth":
        if self.month == 1:
            return DisplayedMonth(self.year - 1, 12)
        return DisplayedMonth(self.year, self.month - 1)

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, self.days_in_month)

    @property
    def name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @property
    def label(self) -> str:
        return f"{self.name} {self.year}"

    def contains(self, d: date) -> bool:
        return d.year == self.year and d.month == self.month


@dataclass
class CalendarEntry:
    """A database record reduced to the day it falls on."""

    id: str
    date: str
    color: str
    day: int


@dataclass
class GridCell:
    """One of the 42 cells of the month grid. Blank cells have no day."""

    day: int | None = None
    is_today: bool = False
    entry: CalendarEntry | None = None

    @property
    def is_blank(self) -> bool:
        return self.day is None

    @property
    def has_entry(self) -> bool:
        return self.entry is not None


def month_range(month: DisplayedMonth) -> tuple[str, str]:
    """First and last calendar day of the month as inclusive ISO dates."""
    return month.first_day.isoformat(), month.last_day.isoformat()


def build_query_payload(month: DisplayedMonth) -> dict:
    """
    Build the database query body for one month.

    Only the first page is requested; records beyond PAGE_SIZE are dropped.
    """
    start, end = month_range(month)
    return {
        "filter": {
            "and": [
                {"property": DATE_PROPERTY, "date": {"on_or_after": start}},
                {"property": DATE_PROPERTY, "date": {"on_or_before": end}},
            ]
        },
        "page_size": PAGE_SIZE,
    }


def parse_record_date(value: str, tz: tzinfo | None = None) -> date:
    """
    Resolve a record's date property to a calendar date.

    Date-only values are taken as-is. Timestamps with an offset are shifted
    into ``tz`` (local time when None) before the date is taken.
    """
    if len(value) == 10:
        return date.fromisoformat(value)

    dt = datetime.fromisoformat(value)
    if dt.tzinfo is not None:
        dt = dt.astimezone(tz)
    return dt.date()


def _property(record: dict, name: str, kind: str) -> dict:
    props = record.get("properties") or {}
    return (props.get(name) or {}).get(kind) or {}


def reduce_results(
    results: list[dict],
    month: DisplayedMonth,
    tz: tzinfo | None = None,
    fallback_color: str = "gray",
) -> dict[int, CalendarEntry]:
    """
    Reduce query results to a day-of-month map for ``month``.

    Records outside the month (e.g. shifted by time zone conversion) are
    skipped. Later records overwrite earlier ones on the same day.
    """
    day_map: dict[int, CalendarEntry] = {}

    for record in results:
        if not isinstance(record, dict):
            continue

        start = _property(record, DATE_PROPERTY, "date").get("start")
        if not start:
            continue

        try:
            record_date = parse_record_date(start, tz)
        except ValueError:
            logger.debug(f"Skipping record {record.get('id')} with bad date {start!r}")
            continue

        if not month.contains(record_date):
            logger.debug(f"Skipping record {record.get('id')} outside {month.label}")
            continue

        color = _property(record, COLOR_PROPERTY, "select").get("name") or fallback_color
        day_map[record_date.day] = CalendarEntry(
            id=record.get("id", ""),
            date=start,
            color=color,
            day=record_date.day,
        )

    return day_map


def build_entry_payload(
    database_id: str,
    now: datetime,
    color: str = "blue",
) -> dict:
    """Build the page creation body for today's entry."""
    title = f"Today's entry ({now.strftime('%x')})"
    return {
        "parent": {"database_id": database_id},
        "properties": {
            TITLE_PROPERTY: {"title": [{"text": {"content": title}}]},
            DATE_PROPERTY: {"date": {"start": now.isoformat()}},
            COLOR_PROPERTY: {"select": {"name": color}},
        },
    }


def leading_blanks(month: DisplayedMonth) -> int:
    """Blank cells before day 1 in a Monday-first week."""
    sunday_first = (month.first_day.weekday() + 1) % 7
    return (sunday_first + 6) % 7


def build_grid(
    month: DisplayedMonth,
    entries: dict[int, CalendarEntry],
    today: date | None = None,
) -> list[GridCell]:
    """
    Lay out a month as a 6x7 grid, week starting Monday.

    Pure function - no I/O.
    """
    today = today or date.today()
    is_current_month = month.contains(today)

    cells = [GridCell() for _ in range(leading_blanks(month))]

    for day in range(1, month.days_in_month + 1):
        cells.append(
            GridCell(
                day=day,
                is_today=is_current_month and day == today.day,
                entry=entries.get(day),
            )
        )

    cells.extend(GridCell() for _ in range(GRID_CELLS - len(cells)))
    return cells


def grid_rows(cells: list[GridCell]) -> list[list[GridCell]]:
    """Split a flat grid into weeks."""
    return [cells[i : i + 7] for i in range(0, len(cells), 7)]


def page_url(record_id: str) -> str:
    """Canonical link to a record (separators removed)."""
    return NOTION_PAGE_BASE + record_id.replace("-", "")


def format_today(today: date) -> str:
    """Header label, e.g. ``10/ 19/ MON``."""
    return f"{today.month}/ {today.day}/ {_WEEKDAY_ABBR[today.weekday()]}"
