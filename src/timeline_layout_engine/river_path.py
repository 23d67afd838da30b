"""River flavor of the path generator.

Waypoints are joined by cubic Bézier segments (Catmull-Rom control points).
Bézier parameter t is not proportional to distance, so positions along the
river are looked up by arc length in a sampled table, never by t.
"""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field
from typing import Literal, Sequence

from .layout_models import ArcLengthSample, BezierSegment, Point, format_number

CATMULL_ROM_TENSION = 0.3
DEFAULT_SAMPLES_PER_SEGMENT = 50


@dataclass(frozen=True)
class ArcLengthLookup:
    total_length: float
    samples: tuple[ArcLengthSample, ...]
    _lengths: tuple[float, ...] = field(default=(), repr=False, compare=False)


@dataclass(frozen=True)
class RiverConfig:
    width: float = 4000
    height: float = 800
    bend_count: int = 12
    amplitude: float = 100
    margin_x: float = 150
    margin_y: float = 150
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT


@dataclass(frozen=True)
class RiverPath:
    waypoints: tuple[Point, ...]
    segments: tuple[BezierSegment, ...]
    lookup: ArcLengthLookup
    svg_path: str

    @property
    def total_length(self) -> float:
        return self.lookup.total_length

    def position_at_arc_length(self, length: float) -> tuple[Point, float]:
        return get_position_at_arc_length(self.lookup, length)

    def position_at_time(self, t: float) -> tuple[Point, float]:
        """Point and tangent angle at normalized time t, measured as a share of river length."""
        clamped = max(0.0, min(1.0, t))
        return get_position_at_arc_length(self.lookup, clamped * self.lookup.total_length)


def _seeded_random(seed: float) -> float:
    value = math.sin(seed * 12.9898) * 43758.5453
    return value - math.floor(value)


def generate_river_waypoints(
    width: float,
    height: float,
    bend_count: int,
    amplitude: float,
    margin_x: float,
    margin_y: float,
) -> list[Point]:
    """Evenly spaced waypoints left to right with a sine-like wave and seeded jitter, clamped to the margins."""
    bend_count = max(1, int(bend_count))
    usable_width = width - 2 * margin_x
    center_y = height / 2
    points: list[Point] = []
    for i in range(bend_count + 1):
        t = i / bend_count
        x = margin_x + t * usable_width
        base_y = math.sin(t * math.pi * 2.5) * amplitude
        variation = (_seeded_random(i * 7) - 0.5) * amplitude * 0.3
        y = max(margin_y, min(height - margin_y, center_y + base_y + variation))
        points.append(Point(x, y))
    return points


def waypoints_to_bezier_segments(waypoints: Sequence[Point], tension: float = CATMULL_ROM_TENSION) -> list[BezierSegment]:
    if len(waypoints) < 2:
        return []
    last = len(waypoints) - 1
    segments: list[BezierSegment] = []
    for i in range(last):
        p0 = waypoints[max(0, i - 1)]
        p1 = waypoints[i]
        p2 = waypoints[i + 1]
        p3 = waypoints[min(last, i + 2)]
        cp1 = Point(p1.x + (p2.x - p0.x) * tension, p1.y + (p2.y - p0.y) * tension)
        cp2 = Point(p2.x - (p3.x - p1.x) * tension, p2.y - (p3.y - p1.y) * tension)
        segments.append(BezierSegment(start=p1, cp1=cp1, cp2=cp2, end=p2))
    return segments


def bezier_point(segment: BezierSegment, t: float) -> Point:
    mt = 1 - t
    a, b, c, d = mt**3, 3 * mt**2 * t, 3 * mt * t**2, t**3
    s, c1, c2, e = segment.start, segment.cp1, segment.cp2, segment.end
    return Point(
        a * s.x + b * c1.x + c * c2.x + d * e.x,
        a * s.y + b * c1.y + c * c2.y + d * e.y,
    )


def bezier_derivative(segment: BezierSegment, t: float) -> Point:
    mt = 1 - t
    s, c1, c2, e = segment.start, segment.cp1, segment.cp2, segment.end
    return Point(
        3 * mt**2 * (c1.x - s.x) + 6 * mt * t * (c2.x - c1.x) + 3 * t**2 * (e.x - c2.x),
        3 * mt**2 * (c1.y - s.y) + 6 * mt * t * (c2.y - c1.y) + 3 * t**2 * (e.y - c2.y),
    )


def bezier_arc_length(segment: BezierSegment, steps: int = 20) -> float:
    """Polyline approximation of a segment's length."""
    length = 0.0
    previous = segment.start
    for i in range(1, steps + 1):
        point = bezier_point(segment, i / steps)
        length += math.hypot(point.x - previous.x, point.y - previous.y)
        previous = point
    return length


def build_arc_length_lookup(
    segments: Sequence[BezierSegment],
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
) -> ArcLengthLookup:
    """Fixed-step samples of every segment with cumulative arc length and tangent angle."""
    samples_per_segment = max(1, int(samples_per_segment))
    samples: list[ArcLengthSample] = []
    cumulative = 0.0
    for seg_idx, segment in enumerate(segments):
        for i in range(samples_per_segment + 1):
            # A segment's first sample duplicates the previous segment's last.
            if seg_idx > 0 and i == 0:
                continue
            t = i / samples_per_segment
            point = bezier_point(segment, t)
            derivative = bezier_derivative(segment, t)
            if samples:
                prev = samples[-1].point
                cumulative += math.hypot(point.x - prev.x, point.y - prev.y)
            samples.append(
                ArcLengthSample(
                    arc_length=cumulative,
                    segment_index=seg_idx,
                    t=t,
                    point=point,
                    tangent_angle=math.atan2(derivative.y, derivative.x),
                )
            )
    return ArcLengthLookup(
        total_length=cumulative,
        samples=tuple(samples),
        _lengths=tuple(s.arc_length for s in samples),
    )


def get_position_at_arc_length(lookup: ArcLengthLookup, target_length: float) -> tuple[Point, float]:
    """
    Point and tangent angle at a distance along the curve.

    Binary search on arc length, then linear interpolation between the
    bracketing samples. The target is clamped to [0, total_length].
    """

    samples = lookup.samples
    if not samples:
        return Point(0.0, 0.0), 0.0
    if len(samples) == 1:
        return samples[0].point, samples[0].tangent_angle

    clamped = max(0.0, min(lookup.total_length, target_length))
    high = max(1, bisect.bisect_left(lookup._lengths, clamped))
    high = min(high, len(samples) - 1)
    s1, s2 = samples[high - 1], samples[high]

    if s2.arc_length == s1.arc_length:
        return s1.point, s1.tangent_angle
    ratio = (clamped - s1.arc_length) / (s2.arc_length - s1.arc_length)
    point = Point(
        s1.point.x + (s2.point.x - s1.point.x) * ratio,
        s1.point.y + (s2.point.y - s1.point.y) * ratio,
    )
    return point, s1.tangent_angle + (s2.tangent_angle - s1.tangent_angle) * ratio


def segments_to_svg_path(segments: Sequence[BezierSegment]) -> str:
    if not segments:
        return ""
    n = format_number
    parts = [f"M {n(segments[0].start.x)} {n(segments[0].start.y)}"]
    for seg in segments:
        parts.append(
            f"C {n(seg.cp1.x)} {n(seg.cp1.y)}, {n(seg.cp2.x)} {n(seg.cp2.y)}, {n(seg.end.x)} {n(seg.end.y)}"
        )
    return " ".join(parts)


def build_river_path(config: RiverConfig | None = None) -> RiverPath:
    config = config or RiverConfig()
    waypoints = generate_river_waypoints(
        config.width,
        config.height,
        config.bend_count,
        config.amplitude,
        config.margin_x,
        config.margin_y,
    )
    segments = waypoints_to_bezier_segments(waypoints)
    return RiverPath(
        waypoints=tuple(waypoints),
        segments=tuple(segments),
        lookup=build_arc_length_lookup(segments, config.samples_per_segment),
        svg_path=segments_to_svg_path(segments),
    )


def calculate_density_profile(
    event_times: Sequence[float],
    samples: int = 100,
    window_size: float = 0.05,
) -> list[float]:
    """Event counts in a sliding window over normalized time, scaled to [0, 1]."""
    if samples < 2:
        samples = 2
    densities: list[float] = []
    for i in range(samples):
        t = i / (samples - 1)
        lo, hi = t - window_size / 2, t + window_size / 2
        densities.append(float(sum(1 for et in event_times if lo <= et <= hi)))
    peak = max([*densities, 1.0])
    return [d / peak for d in densities]


def get_width_at_position(normalized_pos: float, density_profile: Sequence[float], min_width: float, max_width: float) -> float:
    if not density_profile:
        return min_width
    index = math.floor(normalized_pos * (len(density_profile) - 1))
    index = max(0, min(len(density_profile) - 1, index))
    return min_width + density_profile[index] * (max_width - min_width)


def offset_from_path(point: Point, tangent_angle: float, offset: float, side: Literal["left", "right"]) -> Point:
    """Move a point perpendicular to the path tangent, e.g. onto a river bank."""
    perpendicular = tangent_angle + (-math.pi / 2 if side == "left" else math.pi / 2)
    return Point(point.x + math.cos(perpendicular) * offset, point.y + math.sin(perpendicular) * offset)
