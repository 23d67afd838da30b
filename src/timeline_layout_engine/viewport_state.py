from __future__ import annotations

import math
from typing import Mapping

from .layout_models import NormalizedRange, ViewportState

PARAM_START = "s"
PARAM_END = "e"
FALLBACK_PIXELS_PER_YEAR = 1.0


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def normalize_viewport(viewport: ViewportState, total_width: float) -> NormalizedRange:
    """Viewport as fractions of the canvas width, clamped to [0, 1]."""
    if total_width <= 0:
        return NormalizedRange(0.0, 1.0)
    start = viewport.offset / total_width
    end = (viewport.offset + viewport.width) / total_width
    return NormalizedRange(_clamp01(start), _clamp01(end))


def restore_viewport(
    normalized: NormalizedRange,
    total_years: float,
    viewport_width: float,
    zoom_min: float | None = None,
    zoom_max: float | None = None,
) -> ViewportState:
    """
    Zoom and offset that show the normalized range in a viewport of the given width.

    The canvas length in years does not depend on the zoom, so the range maps to
    a year span and the zoom is whatever fits that span into the viewport. An
    empty span or viewport falls back to zoom_min (or one pixel per year), so
    the result always has a positive zoom.
    """

    span_years = (normalized.end - normalized.start) * total_years
    if span_years <= 0 or viewport_width <= 0:
        ppy = zoom_min if zoom_min is not None and zoom_min > 0 else FALLBACK_PIXELS_PER_YEAR
        return ViewportState(offset=0.0, width=viewport_width, pixels_per_year=ppy)

    pixels_per_year = viewport_width / span_years
    if zoom_min is not None:
        pixels_per_year = max(zoom_min, pixels_per_year)
    if zoom_max is not None:
        pixels_per_year = min(zoom_max, pixels_per_year)
    offset = normalized.start * total_years * pixels_per_year
    return ViewportState(offset=offset, width=viewport_width, pixels_per_year=pixels_per_year)


def to_query_params(normalized: NormalizedRange) -> dict[str, str]:
    return {
        PARAM_START: f"{_clamp01(normalized.start):.4f}",
        PARAM_END: f"{_clamp01(normalized.end):.4f}",
    }


def parse_query_params(params: Mapping[str, str]) -> NormalizedRange | None:
    """Range from shared-link parameters; None unless both are numbers with 0 <= s < e <= 1."""
    raw_start = params.get(PARAM_START)
    raw_end = params.get(PARAM_END)
    if raw_start is None or raw_end is None:
        return None
    try:
        start = float(raw_start)
        end = float(raw_end)
    except ValueError:
        return None
    if math.isnan(start) or math.isnan(end):
        return None
    if not (0 <= start <= 1 and 0 <= end <= 1 and start < end):
        return None
    return NormalizedRange(start, end)
