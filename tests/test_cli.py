import json
import textwrap

import pytest

from timeline_layout_engine.__main__ import main

_EVENTS = """
title: Space race
layout:
  pixels_per_year: 40
events:
  - id: sputnik
    title: Sputnik 1
    date_start: 1957-10-04
  - id: gagarin
    date_start: 1961-04-12
  - id: apollo11
    title: Apollo 11
    date_start: 1969-07-16
    date_end: 1969-07-24
    metrics:
      milestone: true
"""


@pytest.fixture
def events_file(tmp_path):
    path = tmp_path / "space.yaml"
    path.write_text(textwrap.dedent(_EVENTS), encoding="utf-8")
    return path


@pytest.mark.parametrize("view", ["track", "swimlanes", "path", "river"])
def test_renders_each_view(tmp_path, events_file, view):
    out_file = tmp_path / f"{view}.svg"

    code = main([str(events_file), "--view", view, "--out", str(out_file), "--no-view-file"])

    assert code == 0
    assert out_file.stat().st_size > 0


def test_json_output_uses_file_zoom(events_file, capsys):
    assert main([str(events_file), "--json"]) == 0

    layout = json.loads(capsys.readouterr().out)
    assert layout["scale"]["pixels_per_year"] == 40
    assert layout["scale"]["min_year"] == 1907
    assert {item["id"] for item in layout["track"]["items"]} == {"sputnik", "gagarin", "apollo11"}


def test_json_output_includes_initial_viewport_and_minimap(events_file, capsys):
    assert main([str(events_file), "--json", "--viewport-width", "1200"]) == 0

    layout = json.loads(capsys.readouterr().out)
    assert layout["viewport"]["query"] == {"s": "0.0000", "e": "0.3659"}
    assert (layout["minimap"]["range_start"], layout["minimap"]["range_end"]) == (1907, 1989)
    assert layout["minimap"]["indicator_left_percent"] == 0
    assert layout["minimap"]["indicator_width_percent"] == pytest.approx(30 / 82 * 100)


def test_pixels_per_year_flag_overrides_file(events_file, capsys):
    assert main([str(events_file), "--json", "--pixels-per-year", "5"]) == 0

    assert json.loads(capsys.readouterr().out)["scale"]["pixels_per_year"] == 5


def test_auto_fit_pads_data_span(events_file, capsys):
    assert main([str(events_file), "--json", "--auto-fit", "--viewport-width", "1440"]) == 0

    scale = json.loads(capsys.readouterr().out)["scale"]
    assert scale["min_year"] < 1957.76
    assert scale["max_year"] > 1969.54
    assert scale["total_years"] < 20


def test_invalid_file_exits_with_validation_code(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("events:\n  - id: a\n", encoding="utf-8")

    assert main([str(path), "--no-view-file"]) == 2
    assert "missing required field 'date_start'" in capsys.readouterr().err


def test_yaml_syntax_error_exits_with_validation_code(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("events: [\n", encoding="utf-8")

    assert main([str(path), "--no-view-file"]) == 2


def test_missing_file_exits_with_one(tmp_path, capsys):
    assert main([str(tmp_path / "nope.yaml"), "--no-view-file"]) == 1
    assert "events file not found" in capsys.readouterr().err


def test_no_events_cannot_be_rendered(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("events: []\n", encoding="utf-8")

    assert main([str(path), "--out", str(tmp_path / "out.svg"), "--no-view-file"]) == 2
