"""Record/replay harness for streaming forecaster calls.

The recorder wraps a live client and writes a tape (request plus chunk/delay
sequence). The player checks an incoming request against the tape before
yielding anything, then replays the chunks with their recorded delays.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Sequence, Union

from pydantic import ValidationError

from takeoff.constants import REPLAY_SDK_TAG
from takeoff.core.canonical import canonicalize, is_news
from takeoff.core.errors import ReplayMismatch, SchemaViolation
from takeoff.core.normalize import Clock
from takeoff.core.text_utils import to_iso_timestamp, utc_now
from takeoff.core.validation import format_issues
from takeoff.forecaster.base import StreamClient, StreamRequest
from takeoff.models.events import Event, event_to_dict
from takeoff.models.replay import ReplayChunk, ReplayMeta, ReplayRequest, ReplayTape

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Sleeper = Callable[[float], Awaitable[Any]]


def load_tape(path: PathLike) -> ReplayTape:
    """Read and validate a tape; the recorded history is validated as events."""
    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SchemaViolation(f"replay:{p}", f"invalid JSON: {exc.msg}") from exc
    try:
        tape = ReplayTape.model_validate(payload)
    except ValidationError as exc:
        raise SchemaViolation(f"replay:{p}", format_issues(exc)) from exc
    logger.info("Loaded replay tape %s (%d chunks, model=%s)", p, len(tape.stream), tape.request.model)
    return tape


def save_tape(path: PathLike, tape: ReplayTape) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = tape.model_dump(mode="json", by_alias=True, exclude_none=True)
    p.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Wrote replay tape %s (%d chunks)", p, len(tape.stream))
    return p


def normalize_history(events: Sequence[Event]) -> list[dict[str, Any]]:
    """News-only, canonicalized history in wire form; the unit of request comparison."""
    return [event_to_dict(event) for event in canonicalize(e for e in events if is_news(e))]


def delay_ms(delay_ns: int) -> int:
    """Whole milliseconds, floored, never negative."""
    return max(0, delay_ns // 1_000_000)


class ReplayStreamClient:
    """Replays a recorded tape as a drop-in stream client."""

    def __init__(self, tape: ReplayTape, strict: bool = True, sleep: Sleeper = asyncio.sleep):
        self.tape = tape
        self.strict = strict
        self._sleep = sleep

    def _mismatch(self, field: str, detail: str = "") -> None:
        error = ReplayMismatch(field, detail)
        if self.strict:
            raise error
        logger.warning("%s; replaying anyway (strict replay disabled)", error)

    def assert_request_matches(self, request: StreamRequest) -> None:
        recorded = self.tape.request
        if recorded.model != request.model:
            self._mismatch("model", f"tape={recorded.model}, requested={request.model}")
            return
        if recorded.system_prompt != request.system_prompt:
            self._mismatch("systemPrompt")
            return
        if normalize_history(recorded.history) != normalize_history(request.history):
            self._mismatch("history")

    def generate_content_stream(self, request: StreamRequest) -> AsyncIterator[str]:
        # Checked eagerly so a mismatch fails before any chunk is consumed.
        self.assert_request_matches(request)
        return self._play()

    async def _play(self) -> AsyncIterator[str]:
        for chunk in self.tape.stream:
            wait = delay_ms(chunk.delay_ns)
            if wait > 0:
                await self._sleep(wait / 1000)
            yield chunk.text


class RecordingStreamClient:
    """Wraps a live client; forwards chunks unchanged and writes a tape at the end.

    A consumer that stops early still gets a tape with the chunks seen so far.
    A live stream that fails leaves no tape behind.
    """

    def __init__(
        self,
        base: StreamClient,
        tape_path: PathLike,
        label: Optional[str] = None,
        comment: Optional[str] = None,
        sdk: str = REPLAY_SDK_TAG,
        clock: Optional[Clock] = None,
    ):
        self.base = base
        self.tape_path = Path(tape_path)
        self.label = label
        self.comment = comment
        self.sdk = sdk
        self.clock = clock or utc_now

    def build_tape(self, request: StreamRequest, chunks: list[ReplayChunk]) -> ReplayTape:
        return ReplayTape(
            meta=ReplayMeta(
                model=request.model,
                recorded_at=to_iso_timestamp(self.clock()),
                label=self.label,
                comment=self.comment,
                sdk=self.sdk,
            ),
            request=ReplayRequest(
                model=request.model,
                system_prompt=request.system_prompt,
                history=list(request.history),
            ),
            stream=chunks,
        )

    def generate_content_stream(self, request: StreamRequest) -> AsyncIterator[str]:
        return self._record(request)

    async def _record(self, request: StreamRequest) -> AsyncIterator[str]:
        chunks: list[ReplayChunk] = []
        last = time.perf_counter_ns()
        try:
            async for text in self.base.generate_content_stream(request):
                now = time.perf_counter_ns()
                chunks.append(ReplayChunk(delay_ns=max(0, now - last), text=text))
                last = now
                yield text
        except GeneratorExit:
            logger.info("Recording closed early after %d chunks", len(chunks))
            save_tape(self.tape_path, self.build_tape(request, chunks))
            raise
        save_tape(self.tape_path, self.build_tape(request, chunks))
