"""Replay tape and prepared-prompt models used by record/replay tooling.

A tape is one recorded streaming call: the request that produced it and the
chunk sequence with inter-arrival delays. Tapes never enter the game log.
"""
from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field, Strict

from takeoff.models.events import Event, NonEmptyStr, Record


class ReplayChunk(Record):
    delay_ns: Annotated[int, Strict(), Field(ge=0)] = Field(alias="delayNs")
    text: Annotated[str, Strict()]


class ReplayMeta(Record):
    model: NonEmptyStr
    recorded_at: NonEmptyStr = Field(alias="recordedAt")
    label: Optional[str] = None
    comment: Optional[str] = None
    sdk: Optional[str] = None


class ReplayRequest(Record):
    model: NonEmptyStr
    system_prompt: str = Field(alias="systemPrompt")
    history: list[Event] = Field(default_factory=list)


class ReplayTape(Record):
    meta: ReplayMeta
    request: ReplayRequest
    stream: list[ReplayChunk] = Field(default_factory=list)


class ContentPart(Record):
    text: str


class Content(Record):
    role: str
    parts: list[ContentPart]


class PromptConfig(Record):
    system_instruction: str = Field(alias="systemInstruction")
    response_mime_type: str = Field(alias="responseMimeType")


class PreparedRequest(Record):
    model: str
    contents: list[Content]
    config: PromptConfig


class PreparedPrompt(Record):
    """Self-contained request saved to disk between prepare and call steps."""

    model: str
    request: PreparedRequest
    materials_used: list[str] = Field(default_factory=list, alias="materialsUsed")


class MaterialDoc(Record):
    """Background document inlined into the system instruction."""

    id: NonEmptyStr
    title: str = ""
    body: str
