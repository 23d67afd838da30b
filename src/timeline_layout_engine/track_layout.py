from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .date_model import parse_date
from .layout_models import (
    ClusterItem,
    EventItem,
    GetPosition,
    LayoutItem,
    SwimlaneEvent,
    SwimlaneLayout,
    TimelineEvent,
    TrackLane,
    TrackLayout,
    format_number,
)
from .time_scale import sort_chronologically

logger = logging.getLogger(__name__)

DEFAULT_CLUSTER_THRESHOLD = 4
MILESTONE_STACK_OFFSET = 4
MILESTONE_MIN_STACK = 5


def compute_swimlanes(
    events: Iterable[TimelineEvent],
    card_width: float,
    gap: float,
    get_position: GetPosition,
) -> SwimlaneLayout:
    """
    Greedy interval packing into numbered lanes.

    Events are taken in chronological order; each goes into the first lane whose
    last occupant ends strictly before the event's x position, or opens a new
    lane. A lane's end advances to x + card_width + gap.
    """

    lane_ends: list[float] = []
    placed: list[SwimlaneEvent] = []

    for event in sort_chronologically(events):
        start = get_position(event.date_start)
        end = start + card_width + gap

        lane = next((idx for idx, lane_end in enumerate(lane_ends) if lane_end < start), None)
        if lane is None:
            lane = len(lane_ends)
            lane_ends.append(end)
        else:
            lane_ends[lane] = end
        placed.append(SwimlaneEvent(event=event, lane=lane, x_pos=start))

    return SwimlaneLayout(events=tuple(placed), max_lane=len(lane_ends))


@dataclass(frozen=True)
class _Positioned:
    event: TimelineEvent
    x_pos: float
    year: int


def compute_track_layout(
    events: Iterable[TimelineEvent],
    get_position: GetPosition,
    card_width: float = 240,
    gap: float = 48,
    cluster_threshold: int = DEFAULT_CLUSTER_THRESHOLD,
) -> TrackLayout:
    """
    Two-sided track layout with stacking and clustering.

    1. Position every event and sort by x (stable, so ties stay chronological).
    2. Group runs of events that start within card_width + gap of the run's first event.
    3. Alternate groups above/below the axis.
    4. Groups of cluster_threshold or more collapse into one ClusterItem;
       smaller groups stack (regular events first, milestones pushed further out).
    """

    positioned = [
        _Positioned(event=event, x_pos=get_position(event.date_start), year=parse_date(event.date_start).year)
        for event in sort_chronologically(events)
    ]
    positioned.sort(key=lambda item: item.x_pos)

    items: list[LayoutItem] = []
    max_stack = {"above": 0, "below": 0}

    for group_index, group in enumerate(_group_overlapping(positioned, card_width + gap)):
        lane: TrackLane = "above" if group_index % 2 == 0 else "below"
        group_x = group[0].x_pos

        if len(group) >= cluster_threshold:
            years = [member.year for member in group]
            items.append(
                ClusterItem(
                    id=f"cluster-{format_number(group_x)}",
                    x_pos=group_x,
                    lane=lane,
                    stack_index=0,
                    events=tuple(member.event for member in group),
                    start_year=min(years),
                    end_year=max(years),
                )
            )
            continue

        regular = [member for member in group if not member.event.is_milestone]
        milestones = [member for member in group if member.event.is_milestone]
        milestone_base = max(len(regular) + MILESTONE_STACK_OFFSET, MILESTONE_MIN_STACK)

        stacked = [(idx, member, False) for idx, member in enumerate(regular)]
        stacked += [(milestone_base + idx, member, True) for idx, member in enumerate(milestones)]
        for stack_index, member, is_milestone in stacked:
            items.append(
                EventItem(
                    id=member.event.id,
                    x_pos=member.x_pos,
                    lane=lane,
                    stack_index=stack_index,
                    event=member.event,
                    is_milestone=is_milestone,
                )
            )
            max_stack[lane] = max(max_stack[lane], stack_index + 1)

    logger.debug("track layout: %d items from %d events", len(items), len(positioned))
    return TrackLayout(
        items=tuple(items),
        max_stack_above=max_stack["above"],
        max_stack_below=max_stack["below"],
    )


def _group_overlapping(positioned: list[_Positioned], min_separation: float) -> list[list[_Positioned]]:
    groups: list[list[_Positioned]] = []
    current: list[_Positioned] = []
    for item in positioned:
        if current and item.x_pos - current[0].x_pos >= min_separation:
            groups.append(current)
            current = []
        current.append(item)
    if current:
        groups.append(current)
    return groups
