"""Coordinate math for the minimap.

The minimap shows a sub-range of years [range_start, range_end] of the full data
span. Positions inside it are percentages of that range. Every function here is
pure; state lives in minimap_sync.MinimapSync.
"""

from __future__ import annotations

import math
from typing import Literal, Sequence

from .layout_models import (
    CoordinateSnapshot,
    DensityDot,
    IndicatorBounds,
    MinimapConfig,
    MinimapRange,
    ResizeCommand,
    ViewportState,
)

_DEFAULTS = MinimapConfig()


def year_to_minimap_percent(year: float, range_start: float, range_end: float) -> float:
    span = range_end - range_start
    if span <= 0:
        return 0.0
    return (year - range_start) / span * 100


def minimap_percent_to_year(percent: float, range_start: float, range_end: float) -> float:
    return range_start + percent / 100 * (range_end - range_start)


def get_viewport_indicator_bounds(
    viewport: ViewportState,
    total_min_year: float,
    range_start: float,
    range_end: float,
) -> IndicatorBounds:
    """Main viewport expressed in percent of the minimap range, plus its clipped visible part."""
    minimap_years = range_end - range_start
    if minimap_years <= 0 or viewport.pixels_per_year <= 0:
        return IndicatorBounds(0.0, 100.0, False, 0.0, 100.0)

    left = year_to_minimap_percent(viewport.start_year(total_min_year), range_start, range_end)
    width = viewport.years / minimap_years * 100
    is_clipped = left < 0 or left + width > 100

    visible_left = max(0.0, left)
    visible_width = width
    if left < 0:
        visible_width += left
    if visible_left + visible_width > 100:
        visible_width = 100 - visible_left

    return IndicatorBounds(
        left_percent=left,
        width_percent=width,
        is_clipped=is_clipped,
        visible_left_percent=max(0.0, visible_left),
        visible_width_percent=max(0.0, visible_width),
    )


def _fit_range(center_or_start: float, span: float, total_min_year: float, total_max_year: float, centered: bool) -> MinimapRange:
    start = center_or_start - span / 2 if centered else center_or_start
    end = start + span
    if start < total_min_year:
        start, end = total_min_year, total_min_year + span
    if end > total_max_year:
        start, end = total_max_year - span, total_max_year
    return MinimapRange(max(total_min_year, start), min(total_max_year, end))


def _clamp_span(span: float, total_years: float, config: MinimapConfig) -> float:
    # min_years_visible never exceeds the data span itself.
    return max(min(config.min_years_visible, total_years), min(total_years, span))


def recenter_minimap_around_viewport(
    viewport: ViewportState,
    total_min_year: float,
    total_max_year: float,
    config: MinimapConfig = _DEFAULTS,
) -> MinimapRange:
    """Range centered on the viewport, sized so the indicator is ~target_viewport_percent wide."""
    total_years = total_max_year - total_min_year
    if total_years <= 0 or viewport.pixels_per_year <= 0:
        return MinimapRange(total_min_year, total_max_year)

    center = viewport.start_year(total_min_year) + viewport.years / 2
    desired = viewport.years / (config.target_viewport_percent / 100)
    return _fit_range(center, _clamp_span(desired, total_years, config), total_min_year, total_max_year, centered=True)


def pan_minimap_range(
    current: MinimapRange,
    delta_years: float,
    total_min_year: float,
    total_max_year: float,
) -> MinimapRange:
    """Shift the range by delta_years, keeping its width and staying inside the data span."""
    span = min(current.years_visible, total_max_year - total_min_year)
    return _fit_range(current.range_start + delta_years, span, total_min_year, total_max_year, centered=False)


def zoom_minimap_range(
    current: MinimapRange,
    focal_year: float,
    zoom_factor: float,
    total_min_year: float,
    total_max_year: float,
    config: MinimapConfig = _DEFAULTS,
) -> MinimapRange:
    """
    Zoom around focal_year (> 1 zooms in, < 1 zooms out).

    The focal year keeps its relative position in the range; the new width is
    clamped to [min_years_visible, total span].
    """

    total_years = total_max_year - total_min_year
    span = current.years_visible
    if total_years <= 0 or span <= 0 or zoom_factor <= 0:
        return current

    new_span = _clamp_span(span / zoom_factor, total_years, config)
    focal_ratio = (focal_year - current.range_start) / span
    start = focal_year - focal_ratio * new_span
    return _fit_range(start, new_span, total_min_year, total_max_year, centered=False)


def should_auto_adjust_range(
    indicator_width_percent: float,
    config: MinimapConfig = _DEFAULTS,
) -> Literal["zoom-in", "zoom-out"] | None:
    if indicator_width_percent < config.min_viewport_percent:
        return "zoom-in"
    if indicator_width_percent > config.max_viewport_percent:
        return "zoom-out"
    return None


def calculate_minimum_meaningful_range(event_years: Sequence[float], config: MinimapConfig = _DEFAULTS) -> float:
    """Smallest useful minimap span: ten times the closest event gap, never below min_years_visible."""
    if len(event_years) < 2:
        return config.min_years_visible
    ordered = sorted(event_years)
    gaps = [b - a for a, b in zip(ordered, ordered[1:]) if b - a > 0]
    if not gaps:
        return config.min_years_visible
    return max(config.min_years_visible, min(gaps) * 10)


def pixel_delta_to_percent(delta_px: float, snapshot: CoordinateSnapshot) -> float:
    """Pointer movement in track pixels as percent of the frozen track width."""
    if snapshot.track_width <= 0:
        return 0.0
    return delta_px / snapshot.track_width * 100


def get_preview_center_year(left_percent: float, width_percent: float, snapshot: CoordinateSnapshot) -> float:
    """Year under the center of a previewed indicator, in the frozen minimap range."""
    return minimap_percent_to_year(left_percent + width_percent / 2, snapshot.range_start, snapshot.range_end)


def year_to_viewport_offset(
    center_year: float,
    viewport_width: float,
    pixels_per_year: float,
    total_min_year: float,
    total_width: float,
) -> float:
    """Viewport offset that centers center_year, clamped to the scrollable extent."""
    if pixels_per_year <= 0:
        return 0.0
    viewport_years = viewport_width / pixels_per_year
    offset = (center_year - viewport_years / 2 - total_min_year) * pixels_per_year
    return max(0.0, min(max(0.0, total_width - viewport_width), offset))


def get_event_density_dots(
    x_positions: Sequence[float],
    pixels_per_year: float,
    total_min_year: float,
    total_max_year: float,
    bucket_count: int = 50,
) -> list[DensityDot]:
    """Bucketed event counts across the whole span for the context bar, densities in (0, 1]."""
    total_years = total_max_year - total_min_year
    if not x_positions or total_years <= 0 or pixels_per_year <= 0 or bucket_count <= 0:
        return []

    counts = [0] * bucket_count
    for x in x_positions:
        year = x / pixels_per_year + total_min_year
        ratio = (year - total_min_year) / total_years
        bucket = min(bucket_count - 1, max(0, math.floor(ratio * bucket_count)))
        counts[bucket] += 1

    peak = max(counts)
    return [
        DensityDot(percent=(idx + 0.5) / bucket_count * 100, density=count / peak)
        for idx, count in enumerate(counts)
        if count
    ]


def percent_to_viewport_offset(
    percent: float,
    viewport: ViewportState,
    range_start: float,
    range_end: float,
    total_min_year: float,
    total_width: float,
) -> float:
    """Offset that centers the main viewport on a clicked minimap position."""
    target_year = minimap_percent_to_year(percent, range_start, range_end)
    return year_to_viewport_offset(target_year, viewport.width, viewport.pixels_per_year, total_min_year, total_width)


def apply_resize_zoom(
    command: ResizeCommand,
    viewport_width: float,
    total_min_year: float,
    zoom_min: float,
    zoom_max: float,
) -> ViewportState:
    """
    Turn a released edge resize into a new main viewport.

    The edge opposite the dragged one keeps its year as seen in the snapshot:
    dragging the left edge pins the right edge and vice versa. The new zoom is
    clamped to [zoom_min, zoom_max] and the offset never goes negative.
    """

    pixels_per_year = max(zoom_min, min(zoom_max, command.pixels_per_year))
    old_ppy = command.snapshot_pixels_per_year
    if old_ppy <= 0 or pixels_per_year <= 0:
        return ViewportState(offset=command.snapshot_viewport_offset, width=viewport_width, pixels_per_year=pixels_per_year)

    left_year = command.snapshot_viewport_offset / old_ppy + total_min_year
    if command.edge == "left":
        right_year = left_year + viewport_width / old_ppy
        offset = (right_year - total_min_year) * pixels_per_year - viewport_width
    else:
        offset = (left_year - total_min_year) * pixels_per_year
    return ViewportState(offset=max(0.0, offset), width=viewport_width, pixels_per_year=pixels_per_year)
