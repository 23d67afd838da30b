from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Any

import yaml

from .layout_models import LayoutConfig, MinimapConfig, TimelineEvent


class EventValidationError(Exception):
    """Raised when an events file is structurally invalid (wrong types, duplicate ids, unknown fields)."""


@dataclass(frozen=True)
class LoadedTimeline:
    """Contents of an events file: the events plus any config overrides it carries."""

    events: tuple[TimelineEvent, ...]
    title: str = ""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    minimap: MinimapConfig = field(default_factory=MinimapConfig)


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like events[3].date_start."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


def load_events(path: str) -> LoadedTimeline:
    """Load events and config overrides from a YAML (or JSON) file. Dates are not interpreted here."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return parse_timeline(raw)


def parse_timeline(data: Any) -> LoadedTimeline:
    path = _Path()
    if not isinstance(data, dict):
        raise EventValidationError(f"{path}: expected mapping at top level")
    _assert_allowed_keys(data, {"title", "events", "layout", "minimap"}, path)

    title = data.get("title") or ""
    if not isinstance(title, str):
        raise EventValidationError(f"{path.child('title')}: expected string")

    events_raw = data.get("events")
    if events_raw is None:
        raise EventValidationError(f"{path}: missing required field 'events'")
    if not isinstance(events_raw, list):
        raise EventValidationError(f"{path.child('events')}: expected list")

    ids: set[str] = set()
    events = tuple(
        _parse_event(event_raw, path.child(f"events[{idx}]"), ids) for idx, event_raw in enumerate(events_raw)
    )

    return LoadedTimeline(
        events=events,
        title=title,
        layout=_parse_config(LayoutConfig, data.get("layout"), path.child("layout")),
        minimap=_parse_config(MinimapConfig, data.get("minimap"), path.child("minimap")),
    )


def _parse_event(data: Any, path: _Path, ids: set[str]) -> TimelineEvent:
    if not isinstance(data, dict):
        raise EventValidationError(f"{path}: expected mapping for event")

    _assert_allowed_keys(data, {"id", "title", "date_start", "date_end", "metrics", "meta"}, path)
    event_id = _require_str(data, "id", path)
    if event_id in ids:
        raise EventValidationError(f"{path.child('id')}: duplicate id '{event_id}'")
    ids.add(event_id)

    title = data.get("title", "")
    if title is None:
        title = ""
    if not isinstance(title, str):
        raise EventValidationError(f"{path.child('title')}: expected string")

    date_start = _parse_date(_require_value(data, "date_start", path), path.child("date_start"))
    date_end = None
    if data.get("date_end") is not None:
        date_end = _parse_date(data["date_end"], path.child("date_end"))

    metrics = _parse_mapping(data.get("metrics"), path.child("metrics")) or {}
    meta = _parse_mapping(data.get("meta"), path.child("meta"))

    return TimelineEvent(
        id=event_id,
        date_start=date_start,
        date_end=date_end,
        title=title,
        metrics=metrics,
        meta=meta,
    )


def _parse_date(value: Any, path: _Path) -> str:
    """
    Normalize a date field to the engine's string form.

    YAML turns unquoted 2020-05-01 into a date and 1066 or -500 into an int;
    both are accepted. Everything else must be a non-empty string.
    """

    if isinstance(value, bool):
        raise EventValidationError(f"{path}: expected date string")
    if isinstance(value, _dt.date):
        return value.isoformat()
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str) or not value.strip():
        raise EventValidationError(f"{path}: expected date string")
    return value.strip()


def _parse_config(cls, value: Any, path: _Path):
    if value is None:
        return cls()
    if not isinstance(value, dict):
        raise EventValidationError(f"{path}: expected mapping")
    for key, item in value.items():
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise EventValidationError(f"{path.child(str(key))}: expected number")
    try:
        return cls.from_mapping(value)
    except ValueError as exc:
        raise EventValidationError(f"{path}: {exc}") from exc


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(str(key) for key in set(data.keys()) - allowed)
    if extras:
        raise EventValidationError(f"{path}: unexpected fields {extras}")


def _require_str(data: dict[str, Any], key: str, path: _Path) -> str:
    value = _require_value(data, key, path)
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise EventValidationError(f"{path.child(key)}: expected non-empty string")
    return value


def _require_value(data: dict[str, Any], key: str, path: _Path) -> Any:
    if key not in data:
        raise EventValidationError(f"{path}: missing required field '{key}'")
    return data[key]


def _parse_mapping(value: Any, path: _Path) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise EventValidationError(f"{path}: expected mapping")
    return value
