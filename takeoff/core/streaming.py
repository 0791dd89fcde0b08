"""Parse forecaster text into commands and normalize them into events.

Accepted shapes: a JSON array of commands, a single command object, JSON Lines,
or any of these inside a markdown fence or surrounded by prose.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from takeoff.core.errors import SchemaViolation
from takeoff.core.json_repair import extract_json_array, repair_trailing_commas, strip_code_fences
from takeoff.core.normalize import Clock, command_to_event
from takeoff.core.validation import validate_commands
from takeoff.models.commands import Command
from takeoff.models.events import Event

logger = logging.getLogger(__name__)

_EXCERPT_LENGTH = 200


@dataclass(frozen=True)
class ParseResult:
    events: list[Event] = field(default_factory=list)
    next_history: list[Event] = field(default_factory=list)


def _excerpt(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) <= _EXCERPT_LENGTH:
        return flat
    return flat[:_EXCERPT_LENGTH] + "..."


def _as_list(payload: Any) -> list[Any]:
    if isinstance(payload, dict):
        return [payload]
    return payload


def _loads_jsonl(text: str) -> list[Any]:
    items = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            items.append(json.loads(repair_trailing_commas(line)))
        except json.JSONDecodeError as exc:
            raise ValueError(f"line {line_number}: {exc.msg}") from exc
    return items


def _decode(text: str, source: str) -> list[Any]:
    body = strip_code_fences(text)
    try:
        return _as_list(json.loads(repair_trailing_commas(body)))
    except json.JSONDecodeError as exc:
        json_error = exc.msg

    try:
        return _loads_jsonl(body)
    except ValueError as exc:
        jsonl_error = str(exc)

    embedded = extract_json_array(text)
    if embedded is not None:
        try:
            payload = json.loads(embedded)
        except json.JSONDecodeError:
            payload = None
        if payload is not None:
            logger.debug("%s: recovered command array embedded in model text", source)
            return payload

    raise SchemaViolation(
        source,
        f"model text is not valid JSON/JSONL.\n- JSON error: {json_error}\n"
        f"- JSONL error: {jsonl_error}\n- Excerpt: {_excerpt(text)}",
    )


def parse_commands(text: str, source: str = "forecaster") -> list[Command]:
    """Decode and validate a batch of commands. Empty text yields no commands."""
    if not text or not text.strip():
        return []
    return validate_commands(_decode(text, source), source)


def parse_action_chunk(
    text: str,
    history: Sequence[Event],
    clock: Optional[Clock] = None,
    source: str = "forecaster",
) -> ParseResult:
    """Turn one chunk of command text into events appended to ``history``.

    Commands are normalized in order, each against the history grown by the
    ones before it, so dice rolls within a batch see distinct event counts.
    """
    next_history = list(history)
    events: list[Event] = []
    for cmd in parse_commands(text, source):
        event = command_to_event(cmd, next_history, clock)
        events.append(event)
        next_history.append(event)
    return ParseResult(events=events, next_history=next_history)
