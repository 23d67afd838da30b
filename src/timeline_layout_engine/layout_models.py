from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Callable, Literal


TrackLane = Literal["above", "below"]
"""Side of the time axis a track layout group is drawn on."""

ResizeEdge = Literal["left", "right"]
"""Edge of the minimap viewport indicator being dragged."""

DragKind = Literal["move", "resize-left", "resize-right"]
"""Viewport indicator gestures that compute their preview against a frozen snapshot."""


@dataclass(frozen=True, order=True)
class CalendarDate:
    """Parsed calendar date; ordering and arithmetic use decimal_year only."""

    year: int = field(compare=False)
    month: int = field(compare=False)
    day: int = field(compare=False)
    decimal_year: float


@dataclass(frozen=True)
class TimelineEvent:
    """Input event. Only date_start/date_end (and the milestone flag) matter for layout."""

    id: str
    date_start: str
    date_end: str | None = None
    title: str = ""
    metrics: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)
    meta: dict[str, Any] | None = field(default=None, hash=False, compare=False)

    @property
    def is_milestone(self) -> bool:
        """Milestones are flagged with a literal boolean in metrics."""
        return self.metrics.get("milestone") is True


def _config_from_mapping(cls, data: dict[str, Any] | None):
    if not data:
        return cls()
    known = {f.name for f in fields(cls)}
    extras = sorted(set(data) - known)
    if extras:
        raise ValueError(f"unexpected {cls.__name__} fields {extras}")
    return cls(**data)


@dataclass(frozen=True)
class LayoutConfig:
    """Numeric knobs shared by the scale, auto-fit, track layout and path generator."""

    card_width: float = 240
    card_height: float = 180
    gap: float = 48
    cluster_threshold: int = 4
    stack_capacity: int = 3
    zoom_min: float = 2
    zoom_max: float = 500
    pixels_per_year: float = 50
    min_edge_padding: float = 48
    path_amplitude: float = 80
    path_segments: int = 200
    path_center_y: float = 300

    @property
    def min_separation(self) -> float:
        """Horizontal distance below which two cards overlap."""
        return self.card_width + self.gap

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "LayoutConfig":
        """Build from a (possibly partial) mapping; unknown keys raise ValueError."""
        return _config_from_mapping(cls, data)


@dataclass(frozen=True)
class MinimapConfig:
    """Target band and gesture tuning for the minimap."""

    target_viewport_percent: float = 25
    min_viewport_percent: float = 15
    max_viewport_percent: float = 60
    min_years_visible: float = 5
    auto_scroll_step_percent: float = 20
    auto_scroll_interval_ms: float = 50
    edge_threshold_percent: float = 2
    recenter_threshold: float = 0.1
    min_indicator_percent: float = 5

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "MinimapConfig":
        """Build from a (possibly partial) mapping; unknown keys raise ValueError."""
        return _config_from_mapping(cls, data)


@dataclass(frozen=True)
class Tick:
    """Axis tick at the start of a calendar year."""

    year: int
    label: str
    major: bool


@dataclass(frozen=True)
class AutoFitResult:
    pixels_per_year: float
    padding_before: float
    padding_after: float
    display_span: float
    initial_offset: float
    density_ratio: float


@dataclass(frozen=True)
class SwimlaneEvent:
    event: TimelineEvent
    lane: int
    x_pos: float

    @property
    def id(self) -> str:
        return self.event.id


@dataclass(frozen=True)
class SwimlaneLayout:
    """Greedy lane packing result; max_lane is the number of lanes opened."""

    events: tuple[SwimlaneEvent, ...] = ()
    max_lane: int = 0


@dataclass(frozen=True)
class EventItem:
    """A single event card placed on one side of the track."""

    id: str
    x_pos: float
    lane: TrackLane
    stack_index: int
    event: TimelineEvent
    is_milestone: bool = False

    kind: Literal["event"] = field(default="event", init=False)


@dataclass(frozen=True)
class ClusterItem:
    """A dense group collapsed into one badge."""

    id: str
    x_pos: float
    lane: TrackLane
    stack_index: int
    events: tuple[TimelineEvent, ...]
    start_year: int
    end_year: int

    kind: Literal["cluster"] = field(default="cluster", init=False)


LayoutItem = EventItem | ClusterItem
"""Track layout output element."""


@dataclass(frozen=True)
class TrackLayout:
    items: tuple[LayoutItem, ...] = ()
    max_stack_above: int = 0
    max_stack_below: int = 0


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class PathPoint:
    """Sample on a generated path; t and length both increase along the array."""

    x: float
    y: float
    t: float
    length: float


@dataclass(frozen=True)
class BezierSegment:
    start: Point
    cp1: Point
    cp2: Point
    end: Point


@dataclass(frozen=True)
class ArcLengthSample:
    arc_length: float
    segment_index: int
    t: float
    point: Point
    tangent_angle: float


@dataclass(frozen=True)
class MinimapRange:
    """Years currently shown by the minimap; always a sub-window of the data span."""

    range_start: float
    range_end: float

    @property
    def years_visible(self) -> float:
        return self.range_end - self.range_start


@dataclass(frozen=True)
class ViewportState:
    """Live main viewport as reported by the host's scroll container."""

    offset: float
    width: float
    pixels_per_year: float

    def start_year(self, total_min_year: float) -> float:
        if self.pixels_per_year <= 0:
            return total_min_year
        return self.offset / self.pixels_per_year + total_min_year

    @property
    def years(self) -> float:
        if self.pixels_per_year <= 0:
            return 0.0
        return self.width / self.pixels_per_year


@dataclass(frozen=True)
class IndicatorBounds:
    """Viewport indicator position in percent of the minimap range.

    left/width may fall outside [0, 100]; the visible_* pair is the clipped part.
    """

    left_percent: float
    width_percent: float
    is_clipped: bool
    visible_left_percent: float
    visible_width_percent: float


@dataclass(frozen=True)
class CoordinateSnapshot:
    """Coordinate system frozen at gesture start; all drag math reads from it."""

    viewport_offset: float
    pixels_per_year: float
    range_start: float
    range_end: float
    indicator_left_percent: float
    indicator_width_percent: float
    track_width: float


@dataclass(frozen=True)
class ResizeCommand:
    """Zoom request produced when an edge resize is released."""

    pixels_per_year: float
    edge: ResizeEdge
    snapshot_viewport_offset: float
    snapshot_pixels_per_year: float


@dataclass(frozen=True)
class NormalizedRange:
    """Viewport as fractions of the full canvas, used for shareable links."""

    start: float
    end: float


@dataclass(frozen=True)
class DensityDot:
    percent: float
    density: float


GetPosition = Callable[[str], float]
"""Maps a date string to a pixel x position."""


def format_number(value: float) -> str:
    """Render a float without a trailing '.0' for integral values."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


PreviewNodeKind = Literal["card", "milestone", "cluster"]


@dataclass(frozen=True)
class PreviewRow:
    """
    Flattened layout element used by the preview renderer.

    x is the canvas pixel position; level is the vertical slot (stack level on
    the track, lane number for swimlanes, pixel y for path views).
    """

    order: int
    node_type: PreviewNodeKind
    node_id: str
    label: str
    x: float
    level: float
    count: int = 1
