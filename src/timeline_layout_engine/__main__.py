from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
import webbrowser
from pathlib import Path
from typing import Any

import yaml

from .engine import LayoutEngine, LayoutInputs, LayoutResult, initial_view
from .layout_models import MinimapConfig, PreviewRow, ViewportState
from .minimap_sync import MinimapSync
from .parse_events import EventValidationError, LoadedTimeline, load_events
from .render_preview import render_preview
from .render_rows import path_rows, river_rows, swimlane_rows, track_rows
from .river_path import build_river_path
from .viewport_state import normalize_viewport, to_query_params

VIEWS = ("track", "swimlanes", "path", "river")


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number '{value}'") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got '{value}'")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Timeline layout engine: compute a layout and render an SVG preview",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("events", help="Path to events YAML (or JSON)")
    parser.add_argument("--view", choices=VIEWS, default="track", help="Layout to render")
    parser.add_argument("--out", help="Output SVG path; defaults to output/timeline_<view>.svg")
    zoom = parser.add_mutually_exclusive_group()
    zoom.add_argument("--pixels-per-year", type=_positive_float, help="Fixed zoom; overrides the file's layout config")
    zoom.add_argument("--auto-fit", action="store_true", help="Pick zoom and padding from data density")
    parser.add_argument("--viewport-width", type=_positive_float, default=1200.0, help="Viewport width used by --auto-fit")
    parser.add_argument("--json", action="store_true", help="Print the computed layout as JSON instead of rendering")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--view-file",
        dest="view_file",
        action="store_true",
        default=True,
        help="Best-effort open the output file after rendering",
    )
    parser.add_argument(
        "--no-view-file",
        dest="view_file",
        action="store_false",
        help="Do not open the output file after rendering",
    )
    return parser


def _layout_inputs(timeline: LoadedTimeline, args: argparse.Namespace) -> LayoutInputs:
    config = timeline.layout
    if args.auto_fit:
        view = initial_view(timeline.events, args.viewport_width, config)
        return LayoutInputs.build(
            timeline.events,
            view.pixels_per_year,
            view.padding_before,
            view.padding_after,
            dataclasses.replace(config, zoom_max=view.zoom_max),
        )
    pixels_per_year = args.pixels_per_year or config.pixels_per_year
    return LayoutInputs.build(timeline.events, pixels_per_year, config=config)


def _preview_rows(view: str, timeline: LoadedTimeline, result: LayoutResult) -> tuple[list[PreviewRow], list[tuple[float, float]] | None]:
    if view == "track":
        return track_rows(result.track), None
    if view == "swimlanes":
        return swimlane_rows(result.swimlanes), None
    if view == "path":
        curve = [(p.x, p.y) for p in result.path.points]
        return path_rows(timeline.events, result.scale, result.path), curve
    river = build_river_path()
    curve = [(s.point.x, s.point.y) for s in river.lookup.samples]
    return river_rows(timeline.events, result.scale, river), curve


def _viewport_summary(result: LayoutResult, viewport_width: float, minimap_config: MinimapConfig) -> dict[str, Any]:
    scale = result.scale
    viewport = ViewportState(offset=0.0, width=viewport_width, pixels_per_year=scale.pixels_per_year)
    sync = MinimapSync(scale.min_date.decimal_year, scale.max_date.decimal_year, minimap_config)
    sync.follow_viewport(viewport)
    indicator = sync.indicator(viewport)
    return {
        "viewport": {
            "offset": viewport.offset,
            "width": viewport.width,
            "query": to_query_params(normalize_viewport(viewport, scale.total_width)),
        },
        "minimap": {
            "range_start": sync.range.range_start,
            "range_end": sync.range.range_end,
            "indicator_left_percent": indicator.left_percent,
            "indicator_width_percent": indicator.width_percent,
        },
    }


def _layout_summary(result: LayoutResult) -> dict[str, Any]:
    scale = result.scale
    return {
        "scale": {
            "total_width": scale.total_width,
            "min_year": scale.min_date.decimal_year,
            "max_year": scale.max_date.decimal_year,
            "total_years": scale.total_years,
            "pixels_per_year": scale.pixels_per_year,
        },
        "ticks": [dataclasses.asdict(tick) for tick in result.ticks],
        "swimlanes": {
            "max_lane": result.swimlanes.max_lane,
            "events": [{"id": e.id, "lane": e.lane, "x_pos": e.x_pos} for e in result.swimlanes.events],
        },
        "track": {
            "max_stack_above": result.track.max_stack_above,
            "max_stack_below": result.track.max_stack_below,
            "items": [
                {
                    "kind": item.kind,
                    "id": item.id,
                    "x_pos": item.x_pos,
                    "lane": item.lane,
                    "stack_index": item.stack_index,
                }
                for item in result.track.items
            ],
        },
        "path": {"total_length": result.path.total_length, "svg_path": result.path.svg_path},
    }


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    events_path = Path(args.events)

    try:
        timeline = load_events(str(events_path))
    except (yaml.YAMLError, EventValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: events file not found: {events_path}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading events: {exc}", file=sys.stderr)
        return 1

    result = LayoutEngine().compute(_layout_inputs(timeline, args))

    if args.json:
        summary = _layout_summary(result)
        summary.update(_viewport_summary(result, args.viewport_width, timeline.minimap))
        print(json.dumps(summary, indent=2))
        return 0

    if not timeline.events:
        print("Error: no events to render", file=sys.stderr)
        return 2

    out_path = args.out or f"output/timeline_{args.view}.svg"
    rows, curve = _preview_rows(args.view, timeline, result)
    with_ticks = args.view in ("track", "swimlanes")
    try:
        render_preview(
            view=args.view,
            rows=rows,
            out_path=out_path,
            title=timeline.title or events_path.stem,
            total_width=result.scale.total_width,
            card_width=timeline.layout.card_width,
            ticks=result.ticks if with_ticks else (),
            tick_positions=[result.scale.year_to_x(t.year) for t in result.ticks] if with_ticks else (),
            curve=curve,
        )
    except Exception as exc:
        print(f"Unexpected error while rendering: {exc}", file=sys.stderr)
        return 1

    if args.view_file:
        try:
            webbrowser.open(Path(out_path).resolve().as_uri())
        except webbrowser.Error:
            pass

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
