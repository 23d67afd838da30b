from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable

from .auto_fit import compute_auto_fit_zoom, get_data_aware_zoom_max
from .date_model import difference_in_years, parse_date
from .layout_models import AutoFitResult, LayoutConfig, SwimlaneLayout, Tick, TimelineEvent, TrackLayout
from .path_generator import GeneratedPath, generate_path
from .time_scale import TimeScale, compute_time_scale, data_bounds, generate_ticks
from .track_layout import compute_swimlanes, compute_track_layout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutInputs:
    events: tuple[TimelineEvent, ...]
    pixels_per_year: float
    padding_before: float | None = None
    padding_after: float | None = None
    config: LayoutConfig = LayoutConfig()

    @classmethod
    def build(
        cls,
        events: Iterable[TimelineEvent],
        pixels_per_year: float,
        padding_before: float | None = None,
        padding_after: float | None = None,
        config: LayoutConfig | None = None,
    ) -> "LayoutInputs":
        return cls(
            events=tuple(events),
            pixels_per_year=pixels_per_year,
            padding_before=padding_before,
            padding_after=padding_after,
            config=config or LayoutConfig(),
        )

    def cache_key(self) -> tuple:
        # metrics are excluded from TimelineEvent equality, so the milestone flag is keyed explicitly.
        events_key = tuple((e.id, e.date_start, e.date_end, e.is_milestone) for e in self.events)
        return (events_key, self.pixels_per_year, self.padding_before, self.padding_after, self.config)


@dataclass(frozen=True)
class LayoutResult:
    scale: TimeScale
    ticks: tuple[Tick, ...]
    swimlanes: SwimlaneLayout
    track: TrackLayout
    path: GeneratedPath


@dataclass(frozen=True)
class InitialView:
    """Zoom, padding and zoom ceiling to open a dataset with."""

    pixels_per_year: float
    padding_before: float | None
    padding_after: float | None
    zoom_max: float
    auto_fit: AutoFitResult | None = None


def recompute(inputs: LayoutInputs) -> LayoutResult:
    """Derive every layout output from scratch; equal inputs give equal outputs."""
    cfg = inputs.config
    scale = compute_time_scale(inputs.events, inputs.pixels_per_year, inputs.padding_before, inputs.padding_after)
    result = LayoutResult(
        scale=scale,
        ticks=tuple(generate_ticks(scale)),
        swimlanes=compute_swimlanes(inputs.events, cfg.card_width, cfg.gap, scale.get_position),
        track=compute_track_layout(
            inputs.events,
            scale.get_position,
            card_width=cfg.card_width,
            gap=cfg.gap,
            cluster_threshold=cfg.cluster_threshold,
        ),
        path=generate_path(
            scale.total_width,
            amplitude=cfg.path_amplitude,
            segments=cfg.path_segments,
            center_y=cfg.path_center_y,
        ),
    )
    logger.debug(
        "recomputed layout: %d events, %.1f px wide, %d track items",
        len(inputs.events),
        scale.total_width,
        len(result.track.items),
    )
    return result


class LayoutEngine:
    """Memoizes recompute() on its inputs; only the latest result is kept."""

    def __init__(self) -> None:
        self._key: tuple | None = None
        self._result: LayoutResult | None = None

    def compute(self, inputs: LayoutInputs) -> LayoutResult:
        key = inputs.cache_key()
        if self._result is not None and key == self._key:
            return self._result
        self._result = recompute(inputs)
        self._key = key
        return self._result

    def invalidate(self) -> None:
        self._key = None
        self._result = None


def initial_view(events: Iterable[TimelineEvent], viewport_width: float, config: LayoutConfig | None = None) -> InitialView:
    """
    Auto-fit zoom for a freshly loaded dataset.

    The zoom ceiling is raised to the data-aware maximum when events are closer
    together than the configured ceiling can separate; auto-fit is then clamped
    against that ceiling. An empty dataset keeps the configured zoom.
    """

    cfg = config or LayoutConfig()
    events = list(events)
    bounds = data_bounds(events)
    if bounds is None:
        return InitialView(pixels_per_year=cfg.pixels_per_year, padding_before=None, padding_after=None, zoom_max=cfg.zoom_max)

    data_min, data_max = bounds
    span = max(0.0, difference_in_years(data_min, data_max))
    event_years = [parse_date(e.date_start).decimal_year for e in events]
    zoom_max = max(
        cfg.zoom_max,
        get_data_aware_zoom_max(span, len(events), cfg.card_width, cfg.gap, event_years),
    )
    fit = compute_auto_fit_zoom(len(events), span, viewport_width, replace(cfg, zoom_max=zoom_max))
    logger.debug("initial view: %.4f px/year (ceiling %.4f)", fit.pixels_per_year, zoom_max)
    return InitialView(
        pixels_per_year=fit.pixels_per_year,
        padding_before=fit.padding_before,
        padding_after=fit.padding_after,
        zoom_max=zoom_max,
        auto_fit=fit,
    )
