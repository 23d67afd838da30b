import math

import pytest

from timeline_layout_engine.layout_models import TimelineEvent
from timeline_layout_engine.time_scale import compute_time_scale, generate_ticks


def _event(event_id, start, end=None):
    return TimelineEvent(id=event_id, date_start=start, date_end=end)


def test_empty_events_give_zero_scale():
    scale = compute_time_scale([], 50)

    assert scale.is_empty
    assert scale.total_width == 0
    assert scale.total_years == 0
    assert scale.get_position("2020-01-01") == 0
    assert generate_ticks(scale) == []


def test_default_padding_snaps_to_whole_years():
    scale = compute_time_scale([_event("a", "1900-06-15"), _event("b", "1950-03-01")], 10)

    assert scale.min_date.decimal_year == 1850
    assert scale.max_date.decimal_year == 1970
    assert scale.total_years == 120
    assert scale.total_width == 1200
    assert scale.get_position("1900-01-01") == pytest.approx(500)


def test_chronologically_last_event_end_extends_range():
    scale = compute_time_scale([_event("b", "1950-01-01", "1960-01-01"), _event("a", "1900-01-01")], 1)

    assert scale.max_date.decimal_year == 1980


def test_bce_only_data_has_finite_width():
    scale = compute_time_scale([_event("a", "-0500-01-01"), _event("b", "-0100-01-01")], 2)

    assert scale.min_date.decimal_year == -550
    assert scale.max_date.decimal_year == -80
    assert scale.total_width == 940
    assert math.isfinite(scale.get_position("-0300-01-01"))


def test_mixed_bce_ce_span():
    scale = compute_time_scale([_event("a", "-0044-03-15"), _event("b", "0014-08-19")], 1)

    assert scale.min_date.decimal_year == -94
    assert scale.max_date.decimal_year == 34
    assert scale.total_years == 128


def test_explicit_fractional_padding_uses_decimal_years():
    scale = compute_time_scale(
        [_event("a", "2000-01-01"), _event("b", "2010-01-01")],
        100,
        padding_before=1.5,
        padding_after=1.5,
    )

    assert scale.min_date.decimal_year == pytest.approx(1998.5)
    assert scale.max_date.decimal_year == pytest.approx(2011.5)
    assert scale.total_years == pytest.approx(13)
    assert scale.get_position("2000-01-01") == pytest.approx(150)


def test_zoom_increases_width_and_event_distance():
    events = [_event("a", "1900-01-01"), _event("b", "1901-07-01")]
    low = compute_time_scale(events, 10)
    high = compute_time_scale(events, 20)

    assert high.total_width > low.total_width
    low_gap = low.get_position("1901-07-01") - low.get_position("1900-01-01")
    high_gap = high.get_position("1901-07-01") - high.get_position("1900-01-01")
    assert high_gap > low_gap


def test_recompute_is_idempotent():
    events = [_event("a", "1900-01-01"), _event("b", "1950-01-01")]

    assert compute_time_scale(events, 25) == compute_time_scale(events, 25)


def test_ticks_are_decades_only_at_low_zoom():
    scale = compute_time_scale([_event("a", "1900-01-01"), _event("b", "1950-01-01")], 5)
    ticks = generate_ticks(scale)

    assert [t.year for t in ticks] == list(range(1850, 1971, 10))
    assert all(t.major for t in ticks)


def test_ticks_every_year_with_major_decades():
    scale = compute_time_scale([_event("a", "1900-01-01"), _event("b", "1950-01-01")], 50)
    ticks = generate_ticks(scale)

    assert len(ticks) == 121
    assert sum(1 for t in ticks if t.major) == 13
    assert ticks[0].label == "1850"


def test_bce_tick_labels():
    scale = compute_time_scale([_event("a", "-0100-01-01")], 50)
    ticks = generate_ticks(scale)

    assert ticks[0].year == -150
    assert ticks[0].label == "-150"
    assert ticks[0].major
