"""Engine error taxonomy.

Schema and chronology violations reject a whole batch; replay mismatches fail
before any chunk is replayed; dangling patch targets are not errors at all.
"""
from __future__ import annotations


class EngineError(Exception):
    """Base class for engine failures."""


class SchemaViolation(EngineError):
    """Raised when an event or command batch fails validation."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        message = f"Invalid payload from {source}."
        if reason:
            message = f"{message}\n{reason}"
        super().__init__(message)


class ChronologyViolation(EngineError):
    """Raised when a forecaster batch contains an event dated before the history."""

    def __init__(self, date: str, latest_date: str):
        self.date = date
        self.latest_date = latest_date
        super().__init__(
            f"Model returned an event with a past date: {date} (latest date in history: {latest_date})"
        )


class ReplayMismatch(EngineError):
    """Raised when a call diverges from the request recorded on its tape."""

    FIELDS = ("model", "systemPrompt", "history")

    def __init__(self, field: str, detail: str = ""):
        self.field = field
        message = f"Replay request mismatch: {field}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ForecasterError(EngineError):
    """Raised when the forecasting backend fails or returns unusable output."""


class GameOverError(EngineError):
    """Raised when a turn is requested after the game has ended."""
