from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .date_model import each_year_of_interval, from_year, parse_date
from .layout_models import CalendarDate, TimelineEvent, Tick

logger = logging.getLogger(__name__)

DEFAULT_PADDING_BEFORE_YEARS = 50
DEFAULT_PADDING_AFTER_YEARS = 20
DECADE_TICKS_BELOW_PPY = 10

_EPOCH = from_year(0)


@dataclass(frozen=True)
class TimeScale:
    """Linear date → pixel mapping for one event set, zoom level and padding."""

    total_width: float
    min_date: CalendarDate
    max_date: CalendarDate
    total_years: float
    pixels_per_year: float
    is_empty: bool = False

    def get_position(self, date_str: str) -> float:
        """Pixel x of a date relative to the padded start of the canvas (0 when empty)."""
        return self.year_to_x(parse_date(date_str).decimal_year)

    def year_to_x(self, decimal_year: float) -> float:
        if self.is_empty:
            return 0.0
        return (decimal_year - self.min_date.decimal_year) * self.pixels_per_year

    def x_to_year(self, x: float) -> float:
        if self.is_empty or self.pixels_per_year <= 0:
            return self.min_date.decimal_year
        return self.min_date.decimal_year + x / self.pixels_per_year


def empty_scale(pixels_per_year: float = 0.0) -> TimeScale:
    return TimeScale(
        total_width=0.0,
        min_date=_EPOCH,
        max_date=_EPOCH,
        total_years=0.0,
        pixels_per_year=pixels_per_year,
        is_empty=True,
    )


def sort_chronologically(events: Iterable[TimelineEvent]) -> list[TimelineEvent]:
    """Stable sort by start decimal year; ties keep input order."""
    return sorted(events, key=lambda event: parse_date(event.date_start).decimal_year)


def data_bounds(events: Iterable[TimelineEvent]) -> tuple[CalendarDate, CalendarDate] | None:
    """
    First event's start and the chronologically last event's end (or start).

    Returns None for an empty event set.
    """

    ordered = sort_chronologically(events)
    if not ordered:
        return None
    first, last = ordered[0], ordered[-1]
    return parse_date(first.date_start), parse_date(last.date_end or last.date_start)


def compute_time_scale(
    events: Iterable[TimelineEvent],
    pixels_per_year: float,
    padding_before: float | None = None,
    padding_after: float | None = None,
) -> TimeScale:
    """
    Compute canvas extent and the date → pixel mapping.

    - Without explicit padding the canvas starts on 1 January fifty years before
      the first event and ends on 1 January twenty years after the last one.
    - Explicit padding is in (fractional) years and applied to decimal years.
    - All arithmetic runs on decimal years, so BCE data has finite widths.
    - An empty event set yields a zero-width scale whose get_position returns 0.
    """

    bounds = data_bounds(events)
    if bounds is None:
        return empty_scale(pixels_per_year)
    data_min, data_max = bounds

    if padding_before is None:
        min_date = from_year(data_min.year - DEFAULT_PADDING_BEFORE_YEARS)
    else:
        min_date = _shifted(data_min, -padding_before)
    if padding_after is None:
        max_date = from_year(data_max.year + DEFAULT_PADDING_AFTER_YEARS)
    else:
        max_date = _shifted(data_max, padding_after)

    total_years = max(0.0, max_date.decimal_year - min_date.decimal_year)
    total_width = total_years * pixels_per_year
    logger.debug(
        "time scale %.3f..%.3f (%.3f years) at %s px/year -> %.1f px",
        min_date.decimal_year,
        max_date.decimal_year,
        total_years,
        pixels_per_year,
        total_width,
    )
    return TimeScale(
        total_width=total_width,
        min_date=min_date,
        max_date=max_date,
        total_years=total_years,
        pixels_per_year=pixels_per_year,
    )


def _shifted(date: CalendarDate, years: float) -> CalendarDate:
    decimal_year = date.decimal_year + years
    if years == int(years):
        return CalendarDate(year=date.year + int(years), month=date.month, day=date.day, decimal_year=decimal_year)
    # Fractional padding: calendar fields follow the shifted decimal year.
    year = int(decimal_year // 1)
    return CalendarDate(year=year, month=1, day=1, decimal_year=decimal_year)


def generate_ticks(scale: TimeScale) -> list[Tick]:
    """
    Year ticks across the scale's padded range.

    Below DECADE_TICKS_BELOW_PPY only decade ticks are emitted (all major);
    otherwise every year is emitted and decades are major.
    """

    if scale.is_empty:
        return []
    years = [
        y
        for y in each_year_of_interval(scale.min_date, scale.max_date)
        if scale.min_date.decimal_year <= y <= scale.max_date.decimal_year
    ]
    if scale.pixels_per_year < DECADE_TICKS_BELOW_PPY:
        return [Tick(year=y, label=str(y), major=True) for y in years if y % 10 == 0]
    return [Tick(year=y, label=str(y), major=y % 10 == 0) for y in years]
