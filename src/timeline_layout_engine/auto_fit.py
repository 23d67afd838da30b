from __future__ import annotations

import logging
import math
from typing import Sequence

from .layout_models import AutoFitResult, LayoutConfig

logger = logging.getLogger(__name__)

# Padding as a fraction of the data span, applied on each side.
PADDING_RATIO = 0.1
# Above this events-per-capacity ratio the initial view zooms into a slice.
DENSITY_THRESHOLD = 1.5
MIN_DISPLAY_SPAN_YEARS = 1 / 365
MIN_EFFECTIVE_VIEWPORT_PX = 100
HOUR_IN_YEARS = 1 / 8760
SECOND_IN_YEARS = 1 / 31_536_000


def compute_auto_fit_zoom(
    event_count: int,
    data_span_years: float,
    viewport_width: float,
    config: LayoutConfig,
) -> AutoFitResult:
    """
    Pick the initial zoom and padding for a dataset.

    Sparse data (density ratio <= 1.5) shows the whole span plus 10% padding per
    side. Dense data zooms into a slice of span / density ratio, with the same
    proportional padding, and starts at the beginning of the data. The zoom is
    clamped to [zoom_min, zoom_max]; padding stays 10% of the data span.
    """

    min_separation = config.min_separation
    groups_in_viewport = math.floor(viewport_width / min_separation) if min_separation > 0 else 0
    max_individual_items = max(1, groups_in_viewport * config.stack_capacity)
    density_ratio = event_count / max_individual_items

    effective_span = max(data_span_years, MIN_DISPLAY_SPAN_YEARS)

    if density_ratio <= DENSITY_THRESHOLD:
        display_span = effective_span * (1 + 2 * PADDING_RATIO)
    else:
        portion_span = effective_span / density_ratio
        display_span = portion_span * (1 + 2 * PADDING_RATIO)

    effective_viewport_width = max(MIN_EFFECTIVE_VIEWPORT_PX, viewport_width - config.min_edge_padding * 2)
    padding = effective_span * PADDING_RATIO

    pixels_per_year = effective_viewport_width / display_span
    pixels_per_year = max(config.zoom_min, min(config.zoom_max, pixels_per_year))
    display_span = effective_viewport_width / pixels_per_year

    logger.debug(
        "auto-fit: %d events, capacity %d, density %.2f -> %.4f px/year",
        event_count,
        max_individual_items,
        density_ratio,
        pixels_per_year,
    )
    return AutoFitResult(
        pixels_per_year=pixels_per_year,
        padding_before=padding,
        padding_after=padding,
        display_span=display_span,
        initial_offset=0.0,
        density_ratio=density_ratio,
    )


def get_data_aware_zoom_max(
    data_span_years: float,
    event_count: int,
    card_width: float = 240,
    gap: float = 48,
    event_years: Sequence[float] | None = None,
) -> float:
    """
    Zoom ceiling at which the two closest distinct events sit one card apart.

    Falls back to average spacing when no positive gap exists, and to a 1-hour
    (single event) or 1-second (all events simultaneous) granularity so the
    ceiling is always finite.
    """

    target_spacing = card_width + gap
    min_gap = math.inf

    if event_years is not None and len(event_years) >= 2:
        ordered = sorted(set(event_years))
        for previous, current in zip(ordered, ordered[1:]):
            gap_years = current - previous
            if 0 < gap_years < min_gap:
                min_gap = gap_years

    if math.isinf(min_gap):
        if event_count < 2:
            return target_spacing / HOUR_IN_YEARS
        min_gap = data_span_years / (event_count - 1)
        if min_gap <= 0:
            return target_spacing / SECOND_IN_YEARS

    return target_spacing / min_gap
