"""Forecaster interfaces shared by the engine and the backend adapters.

Live, recording and replaying clients all implement ``StreamClient`` over the
same ``StreamRequest``, so callers never change between live and replayed runs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional, Protocol, Sequence, runtime_checkable

from takeoff.models.events import Event


@dataclass(frozen=True)
class ForecastOptions:
    temperature: Optional[float] = None
    seed: Optional[int] = None
    max_events: Optional[int] = None


@dataclass(frozen=True)
class ForecasterContext:
    history: list[Event] = field(default_factory=list)
    system_prompt: str = ""


@dataclass(frozen=True)
class StreamRequest:
    """One streaming generation call: model, system prompt and the history to project."""

    model: str
    system_prompt: str
    history: list[Event] = field(default_factory=list)
    options: Optional[ForecastOptions] = None


@runtime_checkable
class StreamClient(Protocol):
    def generate_content_stream(self, request: StreamRequest) -> AsyncIterator[str]:
        """Yield raw text chunks (JSON / JSONL fragments) as they arrive."""
        ...


@runtime_checkable
class Forecaster(Protocol):
    """Opaque collaborator returning proposed commands for the next turn."""

    name: str

    async def forecast(
        self, context: ForecasterContext, options: Optional[ForecastOptions] = None
    ) -> Sequence[Any]:
        ...
