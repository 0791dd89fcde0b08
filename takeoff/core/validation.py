"""Strict batch validation for events and commands.

A batch is accepted whole or rejected whole; the error names its source.
"""
from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from takeoff.core.canonical import canonicalize
from takeoff.core.errors import SchemaViolation
from takeoff.models.commands import COMMAND_LIST_ADAPTER, Command
from takeoff.models.events import EVENT_LIST_ADAPTER, Event


def format_issues(error: ValidationError) -> str:
    """One ``- location: message`` line per validation issue."""
    issues = error.errors()
    if not issues:
        return "Unknown schema error."
    lines = []
    for issue in issues:
        loc = ".".join(str(part) for part in issue.get("loc", ())) or "(root)"
        lines.append(f"- {loc}: {issue.get('msg', 'invalid')}")
    return "\n".join(lines)


def validate_events(payload: Any, source: str) -> list[Event]:
    """Validate a list of event payloads (dicts or event models)."""
    if not isinstance(payload, list):
        raise SchemaViolation(source, f"expected a list of events, got {type(payload).__name__}")
    try:
        return EVENT_LIST_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise SchemaViolation(source, format_issues(exc)) from exc


def validate_commands(payload: Any, source: str) -> list[Command]:
    if not isinstance(payload, list):
        raise SchemaViolation(source, f"expected a list of commands, got {type(payload).__name__}")
    try:
        return COMMAND_LIST_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise SchemaViolation(source, format_issues(exc)) from exc


def coerce_events(payload: Any, source: str) -> list[Event]:
    """Validate then canonicalize."""
    return canonicalize(validate_events(payload, source))
