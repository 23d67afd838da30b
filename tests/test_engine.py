from timeline_layout_engine.engine import LayoutEngine, LayoutInputs, initial_view, recompute
from timeline_layout_engine.layout_models import LayoutConfig, TimelineEvent


def _events():
    return [
        TimelineEvent(id="a", date_start="1900-01-01"),
        TimelineEvent(id="b", date_start="1902-06-01", date_end="1905-01-01"),
        TimelineEvent(id="c", date_start="1950-01-01", metrics={"milestone": True}),
    ]


def test_recompute_is_idempotent():
    inputs = LayoutInputs.build(_events(), 20)

    assert recompute(inputs) == recompute(inputs)


def test_recompute_wires_all_outputs():
    result = recompute(LayoutInputs.build(_events(), 20))

    assert result.scale.total_width == (1970 - 1850) * 20
    assert result.ticks[0].year == 1850
    assert len(result.swimlanes.events) == 3
    assert {item.id for item in result.track.items} == {"a", "b", "c"}
    assert result.path.total_width == result.scale.total_width
    assert len(result.path.points) == LayoutConfig().path_segments + 1


def test_engine_reuses_result_for_same_inputs():
    engine = LayoutEngine()
    first = engine.compute(LayoutInputs.build(_events(), 20))

    assert engine.compute(LayoutInputs.build(_events(), 20)) is first
    assert engine.compute(LayoutInputs.build(_events(), 40)) is not first


def test_engine_notices_milestone_flag_change():
    engine = LayoutEngine()
    events = _events()
    first = engine.compute(LayoutInputs.build(events, 20))
    events[2] = TimelineEvent(id="c", date_start="1950-01-01")

    second = engine.compute(LayoutInputs.build(events, 20))

    assert second is not first
    assert not any(item.is_milestone for item in second.track.items)


def test_higher_zoom_widens_layout():
    low = recompute(LayoutInputs.build(_events(), 10))
    high = recompute(LayoutInputs.build(_events(), 11))

    assert high.scale.total_width > low.scale.total_width
    low_positions = {e.id: e.x_pos for e in low.swimlanes.events}
    high_positions = {e.id: e.x_pos for e in high.swimlanes.events}
    assert high_positions["b"] - high_positions["a"] > low_positions["b"] - low_positions["a"]


def test_empty_inputs_give_empty_layout():
    result = recompute(LayoutInputs.build([], 20))

    assert result.scale.total_width == 0
    assert result.ticks == ()
    assert result.track.items == ()
    assert result.path.points == ()


def test_initial_view_without_events_keeps_configured_zoom():
    view = initial_view([], 1200)

    assert view.pixels_per_year == 50
    assert view.padding_before is None
    assert view.auto_fit is None


def test_initial_view_raises_ceiling_for_close_events():
    events = [TimelineEvent(id=str(day), date_start=f"2020-01-{day:02d}") for day in range(1, 11)]
    view = initial_view(events, 1200)

    assert view.zoom_max > 500
    assert view.padding_before == view.padding_after


def test_initial_view_keeps_configured_ceiling_for_sparse_events():
    events = [TimelineEvent(id="a", date_start="1900-01-01"), TimelineEvent(id="b", date_start="2000-01-01")]
    view = initial_view(events, 1200)

    assert view.zoom_max == 500
    assert view.padding_before == 10
