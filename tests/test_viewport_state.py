import pytest

from timeline_layout_engine.layout_models import NormalizedRange, ViewportState
from timeline_layout_engine.viewport_state import (
    normalize_viewport,
    parse_query_params,
    restore_viewport,
    to_query_params,
)


def test_normalize_viewport_fractions_and_clamps():
    assert normalize_viewport(ViewportState(250, 500, 10), 1000) == NormalizedRange(0.25, 0.75)
    assert normalize_viewport(ViewportState(800, 500, 10), 1000) == NormalizedRange(0.8, 1.0)
    assert normalize_viewport(ViewportState(0, 500, 10), 0) == NormalizedRange(0.0, 1.0)


def test_restore_viewport_fits_range_into_width():
    viewport = restore_viewport(NormalizedRange(0.25, 0.75), total_years=100, viewport_width=500)

    assert viewport.pixels_per_year == pytest.approx(10)
    assert viewport.offset == pytest.approx(250)
    assert viewport.width == 500


def test_restore_viewport_respects_zoom_bounds():
    viewport = restore_viewport(NormalizedRange(0.0, 0.001), total_years=100, viewport_width=500, zoom_max=500)

    assert viewport.pixels_per_year == 500


def test_query_params_use_four_decimals():
    assert to_query_params(NormalizedRange(0.123456, 0.9)) == {"s": "0.1235", "e": "0.9000"}
    assert to_query_params(NormalizedRange(-0.5, 1.5)) == {"s": "0.0000", "e": "1.0000"}


def test_parse_query_params_accepts_valid_range():
    assert parse_query_params({"s": "0.1", "e": "0.4"}) == NormalizedRange(0.1, 0.4)
    assert parse_query_params({"s": "0", "e": "1", "t": "abc"}) == NormalizedRange(0.0, 1.0)


@pytest.mark.parametrize(
    "params",
    [
        {},
        {"s": "0.1"},
        {"s": "abc", "e": "0.5"},
        {"s": "0.5", "e": "0.5"},
        {"s": "0.6", "e": "0.2"},
        {"s": "-0.1", "e": "0.5"},
        {"s": "0.1", "e": "1.5"},
        {"s": "nan", "e": "0.5"},
    ],
)
def test_parse_query_params_rejects_invalid(params):
    assert parse_query_params(params) is None


def test_restore_empty_range_keeps_positive_zoom():
    assert restore_viewport(NormalizedRange(0.5, 0.5), total_years=100, viewport_width=1000).pixels_per_year == 1.0
    assert restore_viewport(NormalizedRange(0.5, 0.5), 100, 1000, zoom_min=2).pixels_per_year == 2
