import textwrap

import pytest

from timeline_layout_engine.parse_events import EventValidationError, load_events, parse_timeline


def _write(tmp_path, text):
    path = tmp_path / "events.yaml"
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return str(path)


def test_load_events_normalizes_dates_and_config(tmp_path):
    path = _write(
        tmp_path,
        """
        title: Ancient and modern
        layout:
          card_width: 100
          gap: 10
        minimap:
          target_viewport_percent: 30
        events:
          - id: rome
            title: Founding of Rome
            date_start: "-0753-04-21"
          - id: moon
            date_start: 1969-07-20
            metrics:
              milestone: true
          - id: hastings
            date_start: 1066
            date_end: 1066-10-14
            meta:
              place: England
        """,
    )

    timeline = load_events(path)

    assert timeline.title == "Ancient and modern"
    assert [e.date_start for e in timeline.events] == ["-0753-04-21", "1969-07-20", "1066"]
    assert timeline.events[2].date_end == "1066-10-14"
    assert timeline.events[1].is_milestone
    assert timeline.events[2].meta == {"place": "England"}
    assert timeline.layout.card_width == 100
    assert timeline.layout.min_separation == 110
    assert timeline.minimap.target_viewport_percent == 30
    assert timeline.minimap.min_viewport_percent == 15


def test_json_is_accepted(tmp_path):
    path = _write(tmp_path, '{"events": [{"id": "a", "date_start": "2000-01-01"}]}')

    assert load_events(path).events[0].id == "a"


def test_duplicate_ids_report_path():
    data = {"events": [{"id": "a", "date_start": "2000"}, {"id": "a", "date_start": "2001"}]}

    with pytest.raises(EventValidationError, match=r"events\[1\]\.id: duplicate id 'a'"):
        parse_timeline(data)


@pytest.mark.parametrize(
    "data, message",
    [
        ([], "expected mapping at top level"),
        ({}, "missing required field 'events'"),
        ({"events": {}}, "events: expected list"),
        ({"events": ["a"]}, r"events\[0\]: expected mapping"),
        ({"events": [{"date_start": "2000"}]}, "missing required field 'id'"),
        ({"events": [{"id": "a"}]}, "missing required field 'date_start'"),
        ({"events": [{"id": "a", "date_start": True}]}, r"events\[0\]\.date_start: expected date string"),
        ({"events": [{"id": "a", "date_start": "2000", "colour": "red"}]}, "unexpected fields"),
        ({"events": [], "extra": 1}, "unexpected fields"),
        ({"events": [], "layout": {"card_size": 3}}, "unexpected LayoutConfig fields"),
        ({"events": [], "minimap": {"min_years_visible": "five"}}, "expected number"),
        ({"events": [{"id": "a", "date_start": "2000", "metrics": []}]}, "metrics: expected mapping"),
    ],
)
def test_structural_errors(data, message):
    with pytest.raises(EventValidationError, match=message):
        parse_timeline(data)


def test_empty_event_list_is_valid():
    timeline = parse_timeline({"events": []})

    assert timeline.events == ()
    assert timeline.title == ""
