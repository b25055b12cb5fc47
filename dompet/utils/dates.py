"""Calendar helpers for monthly grouping."""
from datetime import date, datetime
from typing import Tuple, Union

from dateutil import parser

# Short month names as the dashboard shows them (id-ID)
MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "Mei", "Jun",
    "Jul", "Agu", "Sep", "Okt", "Nov", "Des",
)


def parse_date(value: Union[str, date, datetime]) -> date:
    """
    Parse a user-supplied date into a calendar date.

    Supports:
    - date / datetime instances
    - ISO dates: "2026-03-01"
    - ISO datetimes with or without offset: "2026-03-01T10:00:00+07:00"

    Only the calendar date as written is kept. A timestamp is never shifted
    to UTC first, so a row entered late in the evening stays in its own day
    and month.

    Args:
        value: Date, datetime or string

    Returns:
        date object

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        raise ValueError("Missing date")

    s = str(value).strip()
    if not s:
        raise ValueError("Empty date string")

    try:
        return date.fromisoformat(s)
    except ValueError:
        pass

    try:
        return parser.isoparse(s).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Unable to parse date: {s}. Expected ISO format (e.g. '2026-03-01')") from e


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move (year, month) by delta months, wrapping across year boundaries."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def in_month(d: date, year: int, month: int) -> bool:
    return d.year == year and d.month == month


def month_label(month: int) -> str:
    return MONTH_LABELS[month - 1]


def check_month(month: int) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return month
