"""Deterministic state derivation from the event log. No LLM calls, no I/O.

State is never stored: it is re-derived from the canonical log on demand.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from takeoff.core.canonical import canonicalize, game_date, is_news, news_id
from takeoff.core.errors import ChronologyViolation
from takeoff.core.normalize import Clock
from takeoff.core.text_utils import increment_date, utc_now
from takeoff.models.events import (
    Event,
    GameOverEvent,
    HiddenNewsPublishedEvent,
    NewsPatchedEvent,
    ScenarioEvent,
)


@dataclass(frozen=True)
class AggregatedState:
    events: list[Event] = field(default_factory=list)
    latest_date: Optional[str] = None
    event_count: int = 0


def latest_date(events: Iterable[Event]) -> Optional[str]:
    """Maximum game date across dated events and turn brackets, or None."""
    latest: Optional[str] = None
    for event in events:
        candidate = game_date(event)
        if candidate is not None and (latest is None or candidate > latest):
            latest = candidate
    return latest


def aggregate(events: Iterable[Event]) -> AggregatedState:
    canonical = canonicalize(events)
    return AggregatedState(
        events=canonical,
        latest_date=latest_date(canonical),
        event_count=len(canonical),
    )


def apply_patches(events: Iterable[Event]) -> list[ScenarioEvent]:
    """Resolve news-patched events onto their targets; return only news items.

    Patches are consumed field by field in canonical order. A patch whose
    target id is unknown at that point is dropped.
    """
    resolved: dict[str, ScenarioEvent] = {}
    for event in canonicalize(events):
        if is_news(event):
            resolved[news_id(event)] = event
            continue
        if isinstance(event, NewsPatchedEvent):
            target = resolved.get(event.target_id)
            if target is None:
                continue
            patch = event.patch
            resolved[event.target_id] = target.model_copy(
                update={
                    "date": patch.date or target.date,
                    "icon": patch.icon or target.icon,
                    "title": patch.title or target.title,
                    "description": patch.description or target.description,
                }
            )
    return canonicalize(resolved.values())


def assert_chronology(history: Sequence[Event], additions: Iterable[Event]) -> None:
    """Reject a batch containing any event dated before the history's latest date."""
    last = latest_date(history)
    if last is None:
        return
    for event in additions:
        candidate = game_date(event)
        if candidate is not None and candidate < last:
            raise ChronologyViolation(candidate, last)


def next_date_after(history: Sequence[Event], clock: Optional[Clock] = None) -> str:
    """Day after the latest game date; today's UTC date for an undated history."""
    last = latest_date(history)
    if last is None:
        return (clock or utc_now)().date().isoformat()
    return increment_date(last)


def is_game_over(history: Iterable[Event]) -> bool:
    return any(isinstance(event, GameOverEvent) for event in history)


def visible_timeline(events: Sequence[Event]) -> list[ScenarioEvent]:
    """Player-facing news: patched, with hidden items withheld until game over."""
    news = apply_patches(events)
    if is_game_over(events):
        return news
    return [item for item in news if not isinstance(item, HiddenNewsPublishedEvent)]
