"""Event log import/export: one JSON array or JSON Lines of events.

This is the only persisted game format. Reading always canonicalizes, so an
export followed by an import reproduces an equal canonical sequence.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Union

from pydantic import ValidationError

from takeoff.core.canonical import canonicalize
from takeoff.core.errors import SchemaViolation
from takeoff.core.validation import format_issues, validate_events
from takeoff.models.events import EVENT_ADAPTER, Event, event_to_dict

logger = logging.getLogger(__name__)

LOG_FORMATS = ("jsonl", "json")

PathLike = Union[str, Path]


def _load_jsonl(text: str, label: str) -> list[Event]:
    events: list[Event] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise SchemaViolation(label, f"invalid JSON on line {line_number}: {exc.msg}") from exc
        try:
            events.append(EVENT_ADAPTER.validate_python(payload))
        except ValidationError as exc:
            raise SchemaViolation(
                label, f"invalid event on line {line_number}.\n{format_issues(exc)}"
            ) from exc
    return events


def load_events(text: str, label: str = "event-log") -> list[Event]:
    """Parse a JSON array or JSON Lines document into canonical events."""
    stripped = text.strip()
    if not stripped:
        return []
    if stripped.startswith("["):
        try:
            payload = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise SchemaViolation(label, f"invalid JSON array: {exc.msg}") from exc
        return canonicalize(validate_events(payload, label))
    return canonicalize(_load_jsonl(stripped, label))


def dump_events(events: Iterable[Event], fmt: str = "jsonl") -> str:
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Unsupported event log format '{fmt}'. Supported: {', '.join(LOG_FORMATS)}.")
    payload = [event_to_dict(event) for event in events]
    if fmt == "json":
        return json.dumps(payload, ensure_ascii=False, indent=2)
    return "\n".join(json.dumps(item, ensure_ascii=False) for item in payload)


def read_event_log(path: PathLike, label: str | None = None) -> list[Event]:
    p = Path(path)
    events = load_events(p.read_text(encoding="utf-8"), label or p.name)
    logger.info("Read %d events from %s", len(events), p)
    return events


def write_event_log(path: PathLike, events: Iterable[Event], fmt: str = "jsonl") -> Path:
    p = Path(path)
    items = list(events)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(dump_events(items, fmt), encoding="utf-8")
    logger.info("Wrote %d events to %s (%s)", len(items), p, fmt)
    return p
