import pytest

from timeline_layout_engine.date_model import (
    DAYS_PER_YEAR,
    difference_in_years,
    each_year_of_interval,
    from_year,
    parse_date,
)


def test_parse_full_date_to_decimal_year():
    parsed = parse_date("2025-01-15")

    assert (parsed.year, parsed.month, parsed.day) == (2025, 1, 15)
    assert parsed.decimal_year == pytest.approx(2025 + 14 / DAYS_PER_YEAR)


def test_parse_bce_date_keeps_negative_year_and_forward_day_offset():
    parsed = parse_date("-0150-03-01")

    assert parsed.year == -150
    assert (parsed.month, parsed.day) == (3, 1)
    assert parsed.decimal_year == pytest.approx(-150 + 59 / DAYS_PER_YEAR)


def test_year_only_and_year_month_default_to_first_day():
    assert parse_date("1804").decimal_year == 1804.0
    year_month = parse_date("1804-03")
    assert (year_month.month, year_month.day) == (3, 1)


def test_time_suffix_is_ignored():
    parsed = parse_date("2020-05-10T12:30:00")

    assert parsed.day == 10
    assert parsed.decimal_year == parse_date("2020-05-10").decimal_year


def test_garbage_never_raises():
    parsed = parse_date("not a date")

    assert parsed.year == 0
    assert parsed.decimal_year == 0.0
    assert parse_date("").decimal_year == 0.0


def test_out_of_range_month_and_day_are_clamped():
    assert (parse_date("2020-13-40").month, parse_date("2020-13-40").day) == (12, 31)
    assert (parse_date("2020-00-00").month, parse_date("2020-00-00").day) == (1, 1)


def test_ordering_across_year_zero():
    assert parse_date("-0001-12-31") < parse_date("0000-01-01") < parse_date("0001-01-01")


def test_difference_in_years_is_signed():
    start, end = from_year(-10), from_year(5)

    assert difference_in_years(start, end) == 15
    assert difference_in_years(end, start) == -15


def test_each_year_of_interval_spans_bce_and_ce():
    assert each_year_of_interval(from_year(-2), from_year(1)) == [-2, -1, 0, 1]
    assert each_year_of_interval(from_year(5), from_year(1)) == []
