"""Forecaster implementations and the client factory.

``create_stream_client`` picks live, record or replay from settings; the
forecaster on top is the same in all three modes.
"""
from __future__ import annotations

import logging
import time
from typing import Optional

from takeoff.config import ForecasterSettings, load_forecaster_settings, log_resolved_settings
from takeoff.constants import DEFAULT_MODEL
from takeoff.core.streaming import parse_commands
from takeoff.forecaster.base import ForecastOptions, ForecasterContext, StreamClient, StreamRequest
from takeoff.forecaster.gemini import GeminiStreamClient
from takeoff.forecaster.replay import RecordingStreamClient, ReplayStreamClient, load_tape
from takeoff.models.commands import Command

logger = logging.getLogger(__name__)


class StreamingForecaster:
    """Streams the model response, then parses the accumulated text into commands."""

    def __init__(self, client: StreamClient, model: str = DEFAULT_MODEL, name: str = "forecaster"):
        self.client = client
        self.model = model
        self.name = name

    async def forecast(
        self, context: ForecasterContext, options: Optional[ForecastOptions] = None
    ) -> list[Command]:
        request = StreamRequest(
            model=self.model,
            system_prompt=context.system_prompt,
            history=list(context.history),
            options=options,
        )
        t0 = time.monotonic()
        parts: list[str] = []
        async for text in self.client.generate_content_stream(request):
            parts.append(text)
        commands = parse_commands("".join(parts), self.name)
        logger.info(
            "Forecast streamed in %.2fs (model=%s, chunks=%d, commands=%d)",
            time.monotonic() - t0,
            self.model,
            len(parts),
            len(commands),
        )
        return commands


def create_stream_client(settings: ForecasterSettings) -> StreamClient:
    """Return the stream client for the configured mode (live, record or replay)."""
    if settings.mode == "replay":
        return ReplayStreamClient(load_tape(settings.tape_path), strict=settings.strict_replay)
    live = GeminiStreamClient(
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
    )
    if settings.mode == "record":
        return RecordingStreamClient(live, settings.tape_path)
    return live


def create_forecaster(settings: ForecasterSettings | None = None) -> StreamingForecaster:
    resolved = settings or load_forecaster_settings()
    log_resolved_settings(resolved)
    return StreamingForecaster(
        create_stream_client(resolved),
        model=resolved.model,
        name=f"forecaster:{resolved.mode}",
    )
