"""Canonicalizer: one identity rule and one total order over any set of events.

``canonicalize`` is pure and idempotent; the output does not depend on input
order except through last-write-wins on duplicate keys.
"""
from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from takeoff.constants import (
    EVENT_SORT_PRIORITY,
    HIDDEN_NEWS_ID_PREFIX,
    NEWS_ID_PREFIX,
    UNDATED_SORT_DATE,
)
from takeoff.core.text_utils import generate_news_id
from takeoff.models.events import (
    DiceRolledEvent,
    Event,
    GameOverEvent,
    HiddenNewsPublishedEvent,
    NewsClosedEvent,
    NewsOpenedEvent,
    NewsPatchedEvent,
    NewsPublishedEvent,
    ScenarioHeadCompletedEvent,
    TurnFinishedEvent,
    TurnStartedEvent,
    event_to_dict,
)

_NEWS_TYPES = (NewsPublishedEvent, HiddenNewsPublishedEvent)
_TELEMETRY_TYPES = (NewsOpenedEvent, NewsClosedEvent)


def is_news(event: Any) -> bool:
    return isinstance(event, _NEWS_TYPES)


def is_telemetry(event: Any) -> bool:
    return isinstance(event, _TELEMETRY_TYPES)


def game_date(event: Event) -> Optional[str]:
    """In-game date of an event: its own date, a bracket's from/until, else None."""
    if isinstance(event, TurnStartedEvent):
        return event.from_
    if isinstance(event, TurnFinishedEvent):
        return event.until
    return getattr(event, "date", None)


def news_id(event: NewsPublishedEvent | HiddenNewsPublishedEvent) -> str:
    """Explicit id, or the deterministic one derived from date and title."""
    if event.id:
        return event.id
    kind = HIDDEN_NEWS_ID_PREFIX if isinstance(event, HiddenNewsPublishedEvent) else NEWS_ID_PREFIX
    return generate_news_id(kind, event.date, event.title)


def normalize_event(event: Event) -> Event:
    """Fill in the generated id of news items; other events pass through."""
    if is_news(event) and not event.id:
        return event.model_copy(update={"id": news_id(event)})
    return event


def dedup_key(event: Event) -> str:
    """Identity of an event; two events with the same key are the same fact."""
    if isinstance(event, NewsPublishedEvent):
        return f"news-{event.id or f'{event.date}-{event.title}'}".lower()
    if isinstance(event, HiddenNewsPublishedEvent):
        return f"hidden-news-{event.id or f'{event.date}-{event.title}'}".lower()
    if isinstance(event, NewsPatchedEvent):
        return f"news-patched-{event.target_id}-{event.date}"
    if isinstance(event, NewsOpenedEvent):
        return f"news-opened-{event.target_id}-{event.at}"
    if isinstance(event, NewsClosedEvent):
        return f"news-closed-{event.target_id}-{event.at}"
    if isinstance(event, ScenarioHeadCompletedEvent):
        return f"scenario-head-completed-{event.date}"
    if isinstance(event, GameOverEvent):
        return f"game-over-{event.date}"
    if isinstance(event, TurnStartedEvent):
        return f"turn-started-{event.from_}-{event.until}-{event.actor}"
    if isinstance(event, TurnFinishedEvent):
        return f"turn-finished-{event.from_}-{event.until}-{event.actor}"
    if isinstance(event, DiceRolledEvent):
        return f"dice-rolled-{event.at}-{event.label or ''}"
    raise TypeError(f"Unsupported event type: {type(event).__name__}")


def sort_title(event: Event) -> str:
    if is_news(event):
        return event.title
    if isinstance(event, NewsPatchedEvent):
        return f"news-patched-{event.target_id}"
    if is_telemetry(event):
        return f"{event.type}-{event.target_id}"
    if isinstance(event, (TurnStartedEvent, TurnFinishedEvent)):
        return f"{event.type}-{event.from_}-{event.until}"
    if isinstance(event, DiceRolledEvent):
        return f"dice-rolled-{event.at}-{event.label or ''}"
    return event.type


def sort_key(event: Event) -> tuple:
    # Last element breaks ties between distinct events that agree on everything else
    fingerprint = json.dumps(event_to_dict(event), sort_keys=True, ensure_ascii=False)
    if is_telemetry(event):
        return (1, event.at, event.target_id, event.type, fingerprint)
    return (
        0,
        game_date(event) or UNDATED_SORT_DATE,
        EVENT_SORT_PRIORITY[event.type],
        sort_title(event),
        fingerprint,
    )


def _last_write_wins(events: Iterable[Event]) -> dict[str, Event]:
    out: dict[str, Event] = {}
    for event in events:
        out[dedup_key(event)] = event
    return out


def _id_precedence(original: Event, normalized: Event) -> tuple:
    # Explicit ids outrank generated ones; the greater sort key settles the rest
    explicit = not is_news(original) or bool(original.id)
    return (explicit, sort_key(normalized))


def canonicalize(events: Iterable[Event]) -> list[Event]:
    """Dedup (last write wins), assign news ids, and sort into canonical order.

    Returns a new list; the argument is not modified.
    """
    raw = _last_write_wins(events)
    # Distinct items whose ids collide once generated collapse to one, picked by
    # precedence rather than input position
    resolved: dict[str, tuple[tuple, Event]] = {}
    for event in raw.values():
        normalized = normalize_event(event)
        key = dedup_key(normalized)
        rank = _id_precedence(event, normalized)
        if key not in resolved or rank > resolved[key][0]:
            resolved[key] = (rank, normalized)
    return sorted((event for _, event in resolved.values()), key=sort_key)
