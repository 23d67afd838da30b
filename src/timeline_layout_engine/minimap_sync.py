"""Stateful side of the minimap: auto-follow, drag gestures and edge auto-scroll.

MinimapSync owns the minimap range and the dragging flag. Gestures capture a
CoordinateSnapshot when they start and compute their preview against it only,
so a minimap that re-ranges mid-drag (auto-scroll, host re-render) cannot make
the indicator jump. Nothing here touches the main viewport directly; finishing
a gesture returns the offset or ResizeCommand the host should apply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Protocol

from .layout_models import (
    CoordinateSnapshot,
    DragKind,
    IndicatorBounds,
    MinimapConfig,
    MinimapRange,
    ResizeCommand,
    ResizeEdge,
    ViewportState,
)
from .minimap import (
    get_preview_center_year,
    get_viewport_indicator_bounds,
    minimap_percent_to_year,
    pan_minimap_range,
    pixel_delta_to_percent,
    recenter_minimap_around_viewport,
    year_to_viewport_offset,
    zoom_minimap_range,
)

logger = logging.getLogger(__name__)

ScrollDirection = Literal["left", "right"]


class MinimapSync:
    def __init__(self, total_min_year: float, total_max_year: float, config: MinimapConfig | None = None) -> None:
        self.total_min_year = total_min_year
        self.total_max_year = total_max_year
        self.config = config or MinimapConfig()
        self.range = MinimapRange(total_min_year, total_max_year)
        self.is_dragging = False

    @property
    def total_years(self) -> float:
        return self.total_max_year - self.total_min_year

    @property
    def years_visible(self) -> float:
        return self.range.years_visible

    @property
    def is_at_full_range(self) -> bool:
        return self.range.range_start <= self.total_min_year and self.range.range_end >= self.total_max_year

    @property
    def has_more_left(self) -> bool:
        return self.range.range_start > self.total_min_year

    @property
    def has_more_right(self) -> bool:
        return self.range.range_end < self.total_max_year

    def set_dragging(self, dragging: bool) -> None:
        self.is_dragging = dragging

    def indicator(self, viewport: ViewportState) -> IndicatorBounds:
        return get_viewport_indicator_bounds(viewport, self.total_min_year, self.range.range_start, self.range.range_end)

    def follow_viewport(self, viewport: ViewportState) -> bool:
        """
        Keep the minimap framed around the main viewport; returns True if the range changed.

        The indicator is kept inside [min_viewport_percent, max_viewport_percent]
        by re-ranging to target_viewport_percent (zooming out only while not at
        full range), and the range re-centers once the viewport center drifts
        more than recenter_threshold of the range away. Skipped while a drag
        owns the minimap.
        """

        if self.is_dragging:
            return False
        if self.total_years <= 0 or viewport.width <= 0 or viewport.pixels_per_year <= 0:
            return False

        cfg = self.config
        viewport_years = viewport.years
        center_year = viewport.start_year(self.total_min_year) + viewport_years / 2
        current_span = self.range.years_visible
        ratio_percent = viewport_years / current_span * 100 if current_span > 0 else 0.0

        new_span = current_span
        needs_update = current_span <= 0
        target_span = viewport_years / (cfg.target_viewport_percent / 100)
        if ratio_percent < cfg.min_viewport_percent or (
            ratio_percent > cfg.max_viewport_percent and current_span < self.total_years
        ):
            new_span = target_span
            needs_update = True
        new_span = max(cfg.min_years_visible, min(self.total_years, new_span))

        range_center = (self.range.range_start + self.range.range_end) / 2
        if abs(center_year - range_center) > current_span * cfg.recenter_threshold:
            needs_update = True

        if not needs_update:
            return False

        start = center_year - new_span / 2
        end = center_year + new_span / 2
        if start < self.total_min_year:
            start, end = self.total_min_year, self.total_min_year + new_span
        if end > self.total_max_year:
            start, end = self.total_max_year - new_span, self.total_max_year
        updated = MinimapRange(max(self.total_min_year, start), min(self.total_max_year, end))
        if updated == self.range:
            return False
        logger.debug("minimap follows viewport: %.3f..%.3f", updated.range_start, updated.range_end)
        self.range = updated
        return True

    def pan(self, delta_years: float) -> None:
        self.range = pan_minimap_range(self.range, delta_years, self.total_min_year, self.total_max_year)

    def pan_by_percent(self, delta_percent: float) -> None:
        """Drag-style pan: moving the content right reveals earlier years."""
        self.pan(-(delta_percent / 100) * self.years_visible)

    def zoom(self, focal_year: float, zoom_factor: float) -> None:
        self.range = zoom_minimap_range(
            self.range,
            focal_year,
            zoom_factor,
            self.total_min_year,
            self.total_max_year,
            self.config,
        )

    def zoom_at_percent(self, percent: float, zoom_factor: float) -> None:
        self.zoom(minimap_percent_to_year(percent, self.range.range_start, self.range.range_end), zoom_factor)

    def recenter_on_viewport(self, viewport: ViewportState) -> None:
        self.range = recenter_minimap_around_viewport(viewport, self.total_min_year, self.total_max_year, self.config)

    def reset_to_full_range(self) -> None:
        self.range = MinimapRange(self.total_min_year, self.total_max_year)

    def snapshot(self, viewport: ViewportState, track_width: float) -> CoordinateSnapshot:
        bounds = self.indicator(viewport)
        return CoordinateSnapshot(
            viewport_offset=viewport.offset,
            pixels_per_year=viewport.pixels_per_year,
            range_start=self.range.range_start,
            range_end=self.range.range_end,
            indicator_left_percent=bounds.visible_left_percent,
            indicator_width_percent=bounds.visible_width_percent,
            track_width=track_width,
        )

    # Gestures

    def begin_indicator_move(self, viewport: ViewportState, track_width: float) -> IndicatorDrag:
        self.set_dragging(True)
        return IndicatorDrag.start("move", self.snapshot(viewport, track_width), self.config)

    def finish_indicator_move(self, drag: IndicatorDrag, viewport: ViewportState, total_width: float) -> float | None:
        """
        Release a move gesture.

        The preview center is read in the frozen range, then converted to an
        offset with the live zoom. Returns None when the pointer never moved.
        """

        drag.release()
        self.set_dragging(False)
        if not drag.has_moved:
            return None
        center_year = get_preview_center_year(drag.preview_left_percent, drag.preview_width_percent, drag.snapshot)
        offset = year_to_viewport_offset(
            center_year,
            viewport.width,
            viewport.pixels_per_year,
            self.total_min_year,
            total_width,
        )
        logger.debug("indicator move committed: center %.3f -> offset %.1f", center_year, offset)
        return offset

    def begin_edge_resize(
        self,
        edge: ResizeEdge,
        viewport: ViewportState,
        track_width: float,
        scroller: AutoScroller | None = None,
    ) -> IndicatorDrag:
        """
        Start dragging one edge of the indicator.

        With a scroller, pointer moves near either end of the track pan the
        minimap; the scroller is stopped when the drag is released.
        """

        self.set_dragging(True)
        kind: DragKind = "resize-left" if edge == "left" else "resize-right"
        return IndicatorDrag.start(kind, self.snapshot(viewport, track_width), self.config, scroller)

    def finish_edge_resize(self, drag: IndicatorDrag, viewport: ViewportState) -> ResizeCommand | None:
        """Release a resize gesture; the zoom ratio comes from the frozen indicator width."""
        drag.release()
        self.set_dragging(False)
        if drag.preview_width_percent <= 0 or drag.snapshot.indicator_width_percent <= 0:
            return None
        ratio = drag.snapshot.indicator_width_percent / drag.preview_width_percent
        command = ResizeCommand(
            pixels_per_year=viewport.pixels_per_year * ratio,
            edge="left" if drag.kind == "resize-left" else "right",
            snapshot_viewport_offset=drag.snapshot.viewport_offset,
            snapshot_pixels_per_year=drag.snapshot.pixels_per_year,
        )
        logger.debug("edge resize committed: %s edge, zoom ratio %.3f", command.edge, ratio)
        return command

    def begin_context_pan(self, viewport: ViewportState, context_width: float) -> ContextPan | None:
        """Start a context-bar drag; None when the viewport has no usable zoom or width."""
        if viewport.pixels_per_year <= 0 or viewport.width <= 0:
            return None
        pan = ContextPan.start(viewport, self.total_min_year, self.total_max_year, context_width)
        self.set_dragging(True)
        return pan

    def finish_context_pan(self, pan: ContextPan, viewport: ViewportState, total_width: float) -> float:
        """Release a context-bar drag and return the main viewport offset it lands on."""
        pan.release()
        self.set_dragging(False)
        center_year = pan.viewport_start_year + pan.viewport_years / 2
        return year_to_viewport_offset(
            center_year,
            viewport.width,
            viewport.pixels_per_year,
            self.total_min_year,
            total_width,
        )

    def auto_scroller(self, scheduler: IntervalScheduler) -> AutoScroller:
        """Auto-scroller that pans this minimap by a share of its current range."""
        return AutoScroller(
            on_scroll=self.pan,
            years_visible=lambda: self.years_visible,
            scheduler=scheduler,
            config=self.config,
        )


@dataclass
class IndicatorDrag:
    """
    Move or edge-resize of the viewport indicator.

    The ghost stays at the snapshot position; the preview follows the pointer.
    Updates after release are ignored.
    """

    kind: DragKind
    snapshot: CoordinateSnapshot
    min_width_percent: float
    preview_left_percent: float
    preview_width_percent: float
    ghost_left_percent: float
    ghost_width_percent: float
    has_moved: bool = False
    active: bool = True
    scroller: AutoScroller | None = None

    @classmethod
    def start(
        cls,
        kind: DragKind,
        snapshot: CoordinateSnapshot,
        config: MinimapConfig,
        scroller: AutoScroller | None = None,
    ) -> "IndicatorDrag":
        return cls(
            kind=kind,
            scroller=scroller,
            snapshot=snapshot,
            min_width_percent=config.min_indicator_percent,
            preview_left_percent=snapshot.indicator_left_percent,
            preview_width_percent=snapshot.indicator_width_percent,
            ghost_left_percent=snapshot.indicator_left_percent,
            ghost_width_percent=snapshot.indicator_width_percent,
        )

    def update(self, delta_px: float, pointer_percent: float | None = None) -> None:
        """
        Recompute the preview for a pointer delta measured from the gesture start.

        pointer_percent is the pointer position on the minimap track; during a
        resize it starts or stops the edge auto-scroll.
        """

        if not self.active:
            return
        if self.kind != "move" and self.scroller is not None and pointer_percent is not None:
            direction = self.scroller.check_edge_proximity(pointer_percent)
            if direction is None:
                self.scroller.stop()
            else:
                self.scroller.start(direction)
        snap = self.snapshot
        delta = pixel_delta_to_percent(delta_px, snap)
        if delta_px:
            self.has_moved = True

        if self.kind == "move":
            width = snap.indicator_width_percent
            self.preview_left_percent = max(0.0, min(100 - width, snap.indicator_left_percent + delta))
            self.preview_width_percent = width
        elif self.kind == "resize-left":
            right = snap.indicator_left_percent + snap.indicator_width_percent
            left = max(0.0, min(right - self.min_width_percent, snap.indicator_left_percent + delta))
            self.preview_left_percent = left
            self.preview_width_percent = right - left
        else:
            self.preview_left_percent = snap.indicator_left_percent
            self.preview_width_percent = max(
                self.min_width_percent,
                min(100 - snap.indicator_left_percent, snap.indicator_width_percent + delta),
            )

    def release(self) -> None:
        self.active = False
        if self.scroller is not None:
            self.scroller.stop()


@dataclass
class ContextPan:
    """Drag on the full-span context bar; moves the viewport across the whole timeline."""

    start_viewport_year: float
    viewport_years: float
    total_min_year: float
    total_max_year: float
    context_width: float
    viewport_start_year: float = field(init=False)
    preview_left_percent: float = field(init=False)
    width_percent: float = field(init=False)
    active: bool = True

    def __post_init__(self) -> None:
        self.viewport_start_year = self.start_viewport_year
        total_years = self.total_max_year - self.total_min_year
        self.preview_left_percent = self._percent(self.start_viewport_year)
        self.width_percent = self.viewport_years / total_years * 100 if total_years > 0 else 100.0

    @classmethod
    def start(cls, viewport: ViewportState, total_min_year: float, total_max_year: float, context_width: float) -> "ContextPan":
        return cls(
            start_viewport_year=viewport.start_year(total_min_year),
            viewport_years=viewport.years,
            total_min_year=total_min_year,
            total_max_year=total_max_year,
            context_width=context_width,
        )

    def _percent(self, year: float) -> float:
        total_years = self.total_max_year - self.total_min_year
        if total_years <= 0:
            return 0.0
        return (year - self.total_min_year) / total_years * 100

    def update(self, delta_px: float) -> None:
        if not self.active or self.context_width <= 0:
            return
        total_years = self.total_max_year - self.total_min_year
        delta_years = delta_px / self.context_width * total_years
        latest_start = self.total_max_year - self.viewport_years
        self.viewport_start_year = max(self.total_min_year, min(latest_start, self.start_viewport_year + delta_years))
        self.preview_left_percent = self._percent(self.viewport_start_year)

    def release(self) -> None:
        self.active = False


class IntervalScheduler(Protocol):
    """Host timer facility: run callback every interval_s seconds until cancelled."""

    def start(self, interval_s: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class AutoScroller:
    """Pans the minimap while a resize drag is held near one of its edges."""

    def __init__(
        self,
        on_scroll: Callable[[float], None],
        years_visible: Callable[[], float],
        scheduler: IntervalScheduler,
        config: MinimapConfig | None = None,
    ) -> None:
        self.on_scroll = on_scroll
        self.years_visible = years_visible
        self.scheduler = scheduler
        self.config = config or MinimapConfig()
        self.direction: ScrollDirection | None = None
        self._handle: Any = None

    @property
    def is_auto_scrolling(self) -> bool:
        return self._handle is not None

    def check_edge_proximity(self, position_percent: float) -> ScrollDirection | None:
        threshold = self.config.edge_threshold_percent
        if position_percent <= threshold:
            return "left"
        if position_percent >= 100 - threshold:
            return "right"
        return None

    def start(self, direction: ScrollDirection) -> None:
        if self.direction == direction:
            return
        self.stop()
        self.direction = direction
        self._handle = self.scheduler.start(self.config.auto_scroll_interval_ms / 1000, self._tick)

    def stop(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            self.scheduler.cancel(handle)
        self.direction = None

    def _tick(self) -> None:
        if self.direction is None:
            return
        step = self.years_visible() * self.config.auto_scroll_step_percent / 100
        self.on_scroll(-step if self.direction == "left" else step)
