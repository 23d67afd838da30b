from __future__ import annotations

import math
import re

from .layout_models import CalendarDate

DAYS_PER_YEAR = 365.25
_DAYS_PER_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_date(value: str) -> CalendarDate:
    """
    Parse an ISO-like date string, including BCE years written with a leading '-'.

    Accepts "2025-01-15", "-0150-01-01", "1804" or "1804-03". A time suffix on
    the day ("15T10:00") is ignored. Missing or unparseable month/day segments
    default to 1 and an unparseable year to 0; this function never raises.
    """

    text = (value or "").strip()
    is_negative = text.startswith("-")
    if is_negative:
        text = text[1:]
    parts = text.split("-")

    year = _leading_int(parts[0], default=0)
    if is_negative:
        year = -year
    month = _leading_int(parts[1], default=1) if len(parts) > 1 else 1
    day = _leading_int(parts[2].split("T")[0], default=1) if len(parts) > 2 else 1

    month = min(12, max(1, month))
    day = min(31, max(1, day))

    decimal_year = year + (_day_of_year(month, day) - 1) / DAYS_PER_YEAR
    return CalendarDate(year=year, month=month, day=day, decimal_year=decimal_year)


def _leading_int(segment: str, default: int) -> int:
    match = _LEADING_INT.match(segment)
    if match is None:
        return default
    parsed = int(match.group(1))
    # Zero month/day reads as absent, same as an unparseable segment.
    return parsed or default


def _day_of_year(month: int, day: int) -> int:
    """Approximate day of year (1..365) using a fixed non-leap month table."""
    return day + sum(_DAYS_PER_MONTH[: month - 1])


def difference_in_years(start: CalendarDate, end: CalendarDate) -> float:
    """Signed difference in years; positive when end is later than start."""
    return end.decimal_year - start.decimal_year


def from_year(year: int) -> CalendarDate:
    """Calendar date at 1 January of the given (signed) year."""
    return CalendarDate(year=year, month=1, day=1, decimal_year=float(year))


def each_year_of_interval(start: CalendarDate, end: CalendarDate) -> list[int]:
    """All integer years from start.year to end.year inclusive (empty when reversed)."""
    return list(range(math.ceil(start.year), math.floor(end.year) + 1))
