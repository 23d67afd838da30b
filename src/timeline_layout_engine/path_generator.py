from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field

from .layout_models import PathPoint, Point, format_number

DEFAULT_AMPLITUDE = 80.0
DEFAULT_SEGMENTS = 200
DEFAULT_CENTER_Y = 300.0
DEFAULT_SEED = 42

# (frequency per pixel, phase multiplier on the seed, weight)
_NOISE_WAVES = (
    (0.01, 1.0, 1.0),
    (0.023, 1.3, 0.5),
    (0.007, 0.7, 0.8),
    (0.031, 2.1, 0.3),
)
_NOISE_NORMALIZER = 2.6


def smooth_noise(x: float, seed: float) -> float:
    """Deterministic sum of sines, roughly in [-1, 1]."""
    total = sum(weight * math.sin(x * freq + seed * phase) for freq, phase, weight in _NOISE_WAVES)
    return total / _NOISE_NORMALIZER


@dataclass(frozen=True)
class GeneratedPath:
    """
    Meandering path whose x grows linearly with normalized time t.

    points carries cumulative arc length so callers can place things by distance;
    time lookups search on t and never on length.
    """

    points: tuple[PathPoint, ...]
    svg_path: str
    total_length: float
    total_width: float
    center_y: float = DEFAULT_CENTER_Y
    _times: tuple[float, ...] = field(default=(), repr=False, compare=False)

    def get_point_at_time(self, t: float) -> Point:
        """Linearly interpolated position at normalized time t (clamped to [0, 1])."""
        if not self.points:
            return Point(0.0, self.center_y)
        if len(self.points) == 1:
            only = self.points[0]
            return Point(only.x, only.y)

        clamped = max(0.0, min(1.0, t))
        lower = bisect.bisect_right(self._times, clamped) - 1
        lower = max(0, min(len(self.points) - 2, lower))
        p1, p2 = self.points[lower], self.points[lower + 1]

        if p1.t == p2.t:
            return Point(p1.x, p1.y)
        local = (clamped - p1.t) / (p2.t - p1.t)
        return Point(p1.x + (p2.x - p1.x) * local, p1.y + (p2.y - p1.y) * local)

    def get_time_at_x(self, x: float) -> float:
        """Normalized time at pixel x; x is linear in t so no search is needed."""
        if self.total_width <= 0:
            return 0.0
        return max(0.0, min(1.0, x / self.total_width))


def generate_path(
    total_width: float,
    amplitude: float = DEFAULT_AMPLITUDE,
    segments: int = DEFAULT_SEGMENTS,
    center_y: float = DEFAULT_CENTER_Y,
    seed: float = DEFAULT_SEED,
) -> GeneratedPath:
    """
    Sample segments + 1 points at evenly spaced t.

    x = t * total_width; y = center_y + noise(x) * amplitude * sin(t * pi), so the
    path enters and leaves at center_y. The same seed and width always give the
    same shape. A non-positive width yields an empty path.
    """

    if total_width <= 0:
        return GeneratedPath(points=(), svg_path="", total_length=0.0, total_width=0.0, center_y=center_y)

    segments = max(1, int(segments))
    raw: list[tuple[float, float, float]] = []
    for i in range(segments + 1):
        t = i / segments
        x = t * total_width
        envelope = math.sin(t * math.pi)
        y = center_y + smooth_noise(x, seed) * amplitude * envelope
        raw.append((x, y, t))

    points: list[PathPoint] = []
    cumulative = 0.0
    for idx, (x, y, t) in enumerate(raw):
        if idx:
            prev_x, prev_y, _ = raw[idx - 1]
            cumulative += math.hypot(x - prev_x, y - prev_y)
        points.append(PathPoint(x=x, y=y, t=t, length=cumulative))

    return GeneratedPath(
        points=tuple(points),
        svg_path=build_svg_path(points),
        total_length=cumulative,
        total_width=total_width,
        center_y=center_y,
        _times=tuple(p.t for p in points),
    )


def build_svg_path(points: list[PathPoint] | tuple[PathPoint, ...]) -> str:
    """
    SVG path data through the samples.

    A straight first segment, then quadratic curves using each previous sample as
    control point and ending at the midpoint to the next; the last curve ends on
    the final sample.
    """

    if not points:
        return ""
    n = format_number
    parts = [f"M {n(points[0].x)} {n(points[0].y)}"]
    for i in range(1, len(points)):
        prev, curr = points[i - 1], points[i]
        if i == 1:
            parts.append(f"L {n(curr.x)} {n(curr.y)}")
        elif i < len(points) - 1:
            mid_x = (prev.x + curr.x) / 2
            mid_y = (prev.y + curr.y) / 2
            parts.append(f"Q {n(prev.x)} {n(prev.y)} {n(mid_x)} {n(mid_y)}")
        else:
            parts.append(f"Q {n(prev.x)} {n(prev.y)} {n(curr.x)} {n(curr.y)}")
    return " ".join(parts)
