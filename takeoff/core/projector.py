"""Prompt projection: fold the event log into the text the forecaster reads.

Sections, in order:
- ``# TIMELINE (JSONL)``: one line per non-telemetry event.
- ``# PLAYER ATTENTION``: first-time views this turn and never-viewed news ids,
  only while a turn bracket is open.
- ``# CURRENT STATE``: latest date and the open turn window.

The log is folded in the order given, so telemetry is scoped to the turn
bracket it was appended under.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from takeoff.constants import SECTION_CURRENT_STATE, SECTION_PLAYER_ATTENTION, SECTION_TIMELINE
from takeoff.core.aggregator import latest_date
from takeoff.core.canonical import is_news, is_telemetry, news_id
from takeoff.models.events import (
    DiceRolledEvent,
    Event,
    HiddenNewsPublishedEvent,
    NewsOpenedEvent,
    TurnFinishedEvent,
    TurnStartedEvent,
    event_to_dict,
)


@dataclass
class _AttentionIndex:
    news: dict[str, bool] = field(default_factory=dict)  # id -> is_hidden
    viewed_ever: set[str] = field(default_factory=set)
    viewed_this_turn: list[str] = field(default_factory=list)
    current_turn: Optional[dict[str, str]] = None


def _dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _index(history: Sequence[Event]) -> _AttentionIndex:
    index = _AttentionIndex()
    turn_start = -1
    for position, event in enumerate(history):
        if isinstance(event, TurnStartedEvent):
            index.current_turn = {"from": event.from_, "until": event.until, "actor": event.actor}
            turn_start = position
            index.viewed_this_turn = []
        elif isinstance(event, TurnFinishedEvent):
            index.current_turn = None
        elif is_news(event):
            index.news[news_id(event)] = isinstance(event, HiddenNewsPublishedEvent)
        elif isinstance(event, NewsOpenedEvent):
            first_view = event.target_id not in index.viewed_ever
            index.viewed_ever.add(event.target_id)
            if position > turn_start and first_view:
                index.viewed_this_turn.append(event.target_id)
    return index


def render_event(event: Event) -> Optional[str]:
    """JSONL line for one event; None for telemetry."""
    if is_telemetry(event):
        return None
    if is_news(event):
        return _dumps(
            {
                "date": event.date,
                "icon": event.icon,
                "title": event.title,
                "description": event.description,
                "id": news_id(event),
                "isHidden": isinstance(event, HiddenNewsPublishedEvent),
            }
        )
    if isinstance(event, DiceRolledEvent):
        # No type tag: the roll is context for the forecaster, not an instruction
        line: dict[str, Any] = {"roll": event.roll}
        if event.label is not None:
            line["label"] = event.label
        line["at"] = event.at
        return _dumps(line)
    return _dumps(event_to_dict(event))


def _attention_summary(index: _AttentionIndex) -> Optional[dict[str, list[str]]]:
    if index.current_turn is None:
        return None
    return {
        "viewedFirstTime": list(index.viewed_this_turn),
        "notViewed": [item for item in index.news if item not in index.viewed_ever],
    }


def player_attention(history: Sequence[Event]) -> Optional[dict[str, list[str]]]:
    """Aggregated view telemetry, or None when no turn bracket is open."""
    return _attention_summary(_index(history))


def project(history: Sequence[Event]) -> str:
    index = _index(history)
    sections = [SECTION_TIMELINE]
    for event in history:
        line = render_event(event)
        if line is not None:
            sections.append(line)

    attention = _attention_summary(index)
    if attention is not None:
        sections.append(SECTION_PLAYER_ATTENTION)
        sections.append(_dumps(attention))

    sections.append(SECTION_CURRENT_STATE)
    sections.append(
        json.dumps(
            {"latestDate": latest_date(history), "currentTurn": index.current_turn},
            ensure_ascii=False,
            indent=2,
        )
    )
    return "\n".join(sections)
