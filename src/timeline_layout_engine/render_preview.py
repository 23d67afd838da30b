from __future__ import annotations

import math
from importlib import metadata
from pathlib import Path
from typing import Literal

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Polygon, Rectangle

from .layout_models import PreviewRow, Tick

PreviewView = Literal["track", "swimlanes", "path", "river"]

# Drawing knobs, in inches or points unless stated.
PX_PER_INCH = 160.0  # canvas pixels per figure inch
MIN_FIG_WIDTH = 8.0
MAX_FIG_WIDTH = 24.0
LEVEL_HEIGHT = 0.8  # card height in level units (track / swimlanes)
CLUSTER_RADIUS = 0.35  # in level units
CARD_COLOR = "#4c78a8"
MILESTONE_COLOR = "#e45756"
CLUSTER_COLOR = "#72b7b2"
PATH_COLOR = "#888888"
FONT_SCALE = 1.0
TITLE_FONT = 14 * FONT_SCALE
LABEL_FONT = 7 * FONT_SCALE
FOOTER_FONT = 8 * FONT_SCALE
TICK_FONT = 8 * FONT_SCALE
MAX_TICK_LABELS = 30


def render_preview(
    view: PreviewView,
    rows: list[PreviewRow],
    out_path: str,
    title: str,
    total_width: float,
    card_width: float = 240,
    ticks: list[Tick] | tuple[Tick, ...] = (),
    tick_positions: list[float] | tuple[float, ...] = (),
    curve: list[tuple[float, float]] | None = None,
) -> None:
    """
    Render a static SVG preview of a computed layout to `out_path`.

    - track/swimlanes: x is canvas pixels, y is the row level.
    - path/river: rows and `curve` are in canvas pixel coordinates (y down).
    - Ticks, when given, label the x axis at their pixel positions.
    """

    if not rows:
        raise ValueError("rows must not be empty")

    fig_width = max(MIN_FIG_WIDTH, min(MAX_FIG_WIDTH, total_width / PX_PER_INCH))
    if view in ("track", "swimlanes"):
        levels = [row.level for row in rows]
        fig_height = max(3.0, min(12.0, (max(levels) - min(levels) + 2) * 0.5))
    else:
        fig_height = max(3.0, fig_width / 3)
    fig, ax = plt.subplots(figsize=(fig_width, fig_height))

    if view in ("track", "swimlanes"):
        if view == "track":
            _draw_track(ax, rows, card_width)
        else:
            _draw_swimlanes(ax, rows, card_width)
        x_min = min(0.0, min(row.x for row in rows))
        x_max = max(total_width, max(row.x for row in rows) + card_width)
        ax.set_xlim(x_min, x_max)
    else:
        _draw_curve(ax, rows, curve or [])
    _apply_ticks(ax, ticks, tick_positions)
    ax.spines[["top", "right"]].set_visible(False)

    fig.suptitle(title, x=0.5, fontsize=TITLE_FONT)
    footer = f"{view} preview, timeline layout engine v{_tool_version()}"
    fig.text(0.99, 0.01, footer, ha="right", va="bottom", fontsize=FOOTER_FONT, alpha=0.8)

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg", bbox_inches="tight")
    plt.close(fig)


def _draw_track(ax: plt.Axes, rows: list[PreviewRow], card_width: float) -> None:
    ax.axhline(0, color="black", linewidth=1.0, zorder=1)
    for row in rows:
        # Connector from the axis to the card.
        ax.plot([row.x, row.x], [0, row.level], color=PATH_COLOR, linewidth=0.5, zorder=1)
        _draw_node(ax, row, card_width)
    levels = [row.level for row in rows]
    ax.set_ylim(min(-1.0, min(levels)) - 1, max(1.0, max(levels)) + 1)
    ax.set_yticks([])


def _draw_swimlanes(ax: plt.Axes, rows: list[PreviewRow], card_width: float) -> None:
    for row in rows:
        _draw_node(ax, row, card_width)
    lanes = int(max(row.level for row in rows)) + 1
    ax.set_ylim(lanes, -1)
    ax.set_yticks(range(lanes))
    ax.set_yticklabels([f"lane {lane}" for lane in range(lanes)], fontsize=TICK_FONT)


def _draw_curve(ax: plt.Axes, rows: list[PreviewRow], curve: list[tuple[float, float]]) -> None:
    if curve:
        xs, ys = zip(*curve)
        ax.plot(xs, ys, color=PATH_COLOR, linewidth=2.0, zorder=1)
    for row in rows:
        color = MILESTONE_COLOR if row.node_type == "milestone" else CARD_COLOR
        ax.plot(row.x, row.level, marker="o", color=color, markersize=5, zorder=2)
        ax.annotate(row.label, (row.x, row.level), xytext=(0, -10), textcoords="offset points", ha="center", fontsize=LABEL_FONT)
    ax.invert_yaxis()
    ax.set_aspect("equal", adjustable="datalim")
    ax.set_yticks([])


def _draw_node(ax: plt.Axes, row: PreviewRow, card_width: float) -> None:
    y = row.level
    if row.node_type == "cluster":
        ax.add_patch(Circle((row.x, y), radius=CLUSTER_RADIUS, facecolor=CLUSTER_COLOR, edgecolor="black", linewidth=0.5, zorder=2))
        ax.text(row.x, y, str(row.count), ha="center", va="center", fontsize=LABEL_FONT, zorder=3)
        ax.text(row.x + CLUSTER_RADIUS, y, f" {row.label}", ha="left", va="center", fontsize=LABEL_FONT, zorder=3)
        return
    if row.node_type == "milestone":
        half_width = card_width / 12
        half_height = LEVEL_HEIGHT / 2
        diamond = [
            (row.x - half_width, y),
            (row.x, y - half_height),
            (row.x + half_width, y),
            (row.x, y + half_height),
        ]
        ax.add_patch(Polygon(diamond, closed=True, facecolor=MILESTONE_COLOR, edgecolor="black", linewidth=0.5, zorder=2))
        ax.text(row.x + half_width, y, f" {row.label}", ha="left", va="center", fontsize=LABEL_FONT, zorder=3)
        return
    ax.add_patch(
        Rectangle(
            (row.x, y - LEVEL_HEIGHT / 2),
            card_width,
            LEVEL_HEIGHT,
            facecolor=CARD_COLOR,
            edgecolor="black",
            linewidth=0.5,
            alpha=0.85,
            zorder=2,
        )
    )
    ax.text(row.x + card_width / 2, y, row.label, ha="center", va="center", fontsize=LABEL_FONT, color="white", clip_on=True, zorder=3)


def _apply_ticks(ax: plt.Axes, ticks, tick_positions) -> None:
    """Label major ticks only, thinned so at most MAX_TICK_LABELS remain."""
    if not ticks or len(ticks) != len(tick_positions):
        return
    major = [(pos, tick.label) for tick, pos in zip(ticks, tick_positions) if tick.major]
    if not major:
        return
    step = max(1, math.ceil(len(major) / MAX_TICK_LABELS))
    shown = major[::step]
    ax.set_xticks([pos for pos, _ in shown])
    ax.set_xticklabels([label for _, label in shown], fontsize=TICK_FONT, rotation=30)
    ax.grid(True, axis="x", linestyle="--", alpha=0.4)


def _tool_version() -> str:
    try:
        return metadata.version("timeline-layout-engine")
    except metadata.PackageNotFoundError:
        return "0.0.0"
