"""Functional core - pure business logic with no I/O."""

from .calendar import (
    CalendarEntry,
    DisplayedMonth,
    GridCell,
    build_entry_payload,
    build_grid,
    build_query_payload,
    month_range,
    page_url,
    reduce_results,
)
from .connection import (
    ConnectionConfig,
    ValidationError,
    normalize_database_id,
    validate_connection,
)

__all__ = [
    # Calendar
    "CalendarEntry",
    "DisplayedMonth",
    "GridCell",
    "build_entry_payload",
    "build_grid",
    "build_query_payload",
    "month_range",
    "page_url",
    "reduce_results",
    # Connection
    "ConnectionConfig",
    "ValidationError",
    "normalize_database_id",
    "validate_connection",
]
