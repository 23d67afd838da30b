from timeline_layout_engine.date_model import parse_date
from timeline_layout_engine.layout_models import ClusterItem, EventItem, TimelineEvent
from timeline_layout_engine.track_layout import compute_swimlanes, compute_track_layout


def _event(event_id, start, milestone=False):
    metrics = {"milestone": True} if milestone else {}
    return TimelineEvent(id=event_id, date_start=start, metrics=metrics)


def _position(ppy, origin=2000):
    return lambda date: (parse_date(date).decimal_year - origin) * ppy


def test_swimlanes_far_apart_events_share_lane():
    layout = compute_swimlanes(
        [_event("a", "2000-01-01"), _event("b", "2005-01-01")],
        card_width=100,
        gap=10,
        get_position=_position(100),
    )

    assert [placed.lane for placed in layout.events] == [0, 0]
    assert layout.max_lane == 1


def test_swimlanes_close_events_open_new_lane():
    layout = compute_swimlanes(
        [_event("a", "2000-01-01"), _event("b", "2000-07-01")],
        card_width=100,
        gap=10,
        get_position=_position(100),
    )

    assert [(placed.id, placed.lane) for placed in layout.events] == [("a", 0), ("b", 1)]
    assert layout.max_lane == 2


def test_swimlanes_never_overlap_within_a_lane():
    starts = [f"{2000 + i // 4}-{(i % 4) * 3 + 1:02d}-01" for i in range(16)]
    layout = compute_swimlanes(
        [_event(f"e{i}", start) for i, start in enumerate(reversed(starts))],
        card_width=100,
        gap=10,
        get_position=_position(100),
    )

    by_lane = {}
    for placed in layout.events:
        by_lane.setdefault(placed.lane, []).append(placed.x_pos)
    assert len(by_lane) == layout.max_lane
    for positions in by_lane.values():
        positions.sort()
        for left, right in zip(positions, positions[1:]):
            assert left + 110 < right


def test_swimlanes_empty():
    layout = compute_swimlanes([], 100, 10, _position(100))

    assert layout.events == ()
    assert layout.max_lane == 0


def test_dense_group_collapses_to_cluster():
    events = [_event(f"e{year}", f"{year}-01-01") for year in range(2000, 2005)]
    layout = compute_track_layout(events, _position(50), cluster_threshold=4)

    assert len(layout.items) == 1
    cluster = layout.items[0]
    assert isinstance(cluster, ClusterItem)
    assert cluster.kind == "cluster"
    assert cluster.id == "cluster-0"
    assert cluster.lane == "above"
    assert (cluster.start_year, cluster.end_year) == (2000, 2004)
    assert [e.id for e in cluster.events] == ["e2000", "e2001", "e2002", "e2003", "e2004"]


def test_small_group_stacks_individually():
    events = [_event(f"e{year}", f"{year}-01-01") for year in range(2000, 2003)]
    layout = compute_track_layout(events, _position(50), cluster_threshold=4)

    assert all(isinstance(item, EventItem) for item in layout.items)
    assert [item.stack_index for item in layout.items] == [0, 1, 2]
    assert layout.max_stack_above == 3
    assert layout.max_stack_below == 0


def test_groups_alternate_above_and_below():
    events = [
        _event("a", "2000-01-01"),
        _event("b", "2001-01-01"),
        _event("c", "2010-01-01"),
    ]
    layout = compute_track_layout(events, _position(50))

    assert [(item.id, item.lane) for item in layout.items] == [("a", "above"), ("b", "above"), ("c", "below")]
    assert layout.max_stack_below == 1


def test_grouping_is_anchored_on_first_member():
    # 0, 200, 400 px: 200 overlaps 0, but 400 is a full separation away from 0.
    events = [_event("a", "2000-01-01"), _event("b", "2004-01-01"), _event("c", "2008-01-01")]
    layout = compute_track_layout(events, _position(50))

    assert [item.lane for item in layout.items] == ["above", "above", "below"]


def test_milestones_stack_beyond_regular_events():
    events = [
        _event("a", "2000-01-01"),
        _event("m", "2001-01-01", milestone=True),
        _event("b", "2002-01-01"),
    ]
    layout = compute_track_layout(events, _position(50))

    stacks = {item.id: (item.stack_index, item.is_milestone) for item in layout.items}
    assert stacks == {"a": (0, False), "b": (1, False), "m": (6, True)}
    assert layout.max_stack_above == 7


def test_milestone_flag_must_be_literal_true():
    event = TimelineEvent(id="x", date_start="2000-01-01", metrics={"milestone": "yes"})

    assert not event.is_milestone


def test_track_layout_is_idempotent():
    events = [_event(f"e{i}", f"{2000 + i}-01-01") for i in range(9)]

    assert compute_track_layout(events, _position(30)) == compute_track_layout(events, _position(30))
