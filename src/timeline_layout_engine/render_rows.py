from __future__ import annotations

from typing import Iterable

from .layout_models import ClusterItem, PreviewRow, SwimlaneLayout, TimelineEvent, TrackLayout
from .path_generator import GeneratedPath
from .river_path import RiverPath
from .time_scale import TimeScale, sort_chronologically


def track_rows(track: TrackLayout) -> list[PreviewRow]:
    """
    Flatten a track layout into rows in layout order.

    Stack index 0 sits one level off the axis; levels are positive above the
    axis and negative below it.
    """

    rows: list[PreviewRow] = []
    for order, item in enumerate(track.items):
        level = item.stack_index + 1
        if item.lane == "below":
            level = -level
        if isinstance(item, ClusterItem):
            rows.append(
                PreviewRow(
                    order=order,
                    node_type="cluster",
                    node_id=item.id,
                    label=f"{len(item.events)} events ({item.start_year}-{item.end_year})",
                    x=item.x_pos,
                    level=level,
                    count=len(item.events),
                )
            )
            continue
        rows.append(
            PreviewRow(
                order=order,
                node_type="milestone" if item.is_milestone else "card",
                node_id=item.id,
                label=item.event.title or item.id,
                x=item.x_pos,
                level=level,
            )
        )
    return rows


def swimlane_rows(swimlanes: SwimlaneLayout) -> list[PreviewRow]:
    return [
        PreviewRow(
            order=order,
            node_type="milestone" if placed.event.is_milestone else "card",
            node_id=placed.id,
            label=placed.event.title or placed.id,
            x=placed.x_pos,
            level=placed.lane,
        )
        for order, placed in enumerate(swimlanes.events)
    ]


def path_rows(events: Iterable[TimelineEvent], scale: TimeScale, path: GeneratedPath) -> list[PreviewRow]:
    """Events placed on the meander path; level carries the path's pixel y."""
    rows: list[PreviewRow] = []
    for order, event in enumerate(sort_chronologically(events)):
        t = path.get_time_at_x(scale.get_position(event.date_start))
        point = path.get_point_at_time(t)
        rows.append(_point_row(order, event, point.x, point.y))
    return rows


def river_rows(events: Iterable[TimelineEvent], scale: TimeScale, river: RiverPath) -> list[PreviewRow]:
    """Events placed along the river by their share of the time span, measured in arc length."""
    rows: list[PreviewRow] = []
    for order, event in enumerate(sort_chronologically(events)):
        t = scale.get_position(event.date_start) / scale.total_width if scale.total_width > 0 else 0.0
        point, _ = river.position_at_time(t)
        rows.append(_point_row(order, event, point.x, point.y))
    return rows


def _point_row(order: int, event: TimelineEvent, x: float, y: float) -> PreviewRow:
    return PreviewRow(
        order=order,
        node_type="milestone" if event.is_milestone else "card",
        node_id=event.id,
        label=event.title or event.id,
        x=x,
        level=y,
    )
