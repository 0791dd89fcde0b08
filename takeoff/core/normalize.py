"""Command -> event normalization and telemetry constructors.

News ids are assigned deterministically from date and title; a roll-dice
command is materialized once into a dice-rolled fact and never recomputed.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence

from takeoff.constants import HIDDEN_NEWS_ID_PREFIX, NEWS_ID_PREFIX
from takeoff.core import dice
from takeoff.core.text_utils import generate_news_id, to_iso_timestamp, utc_now
from takeoff.models.commands import (
    Command,
    GameOverCommand,
    PatchNewsCommand,
    PublishHiddenNewsCommand,
    PublishNewsCommand,
    RollDiceCommand,
)
from takeoff.models.events import (
    DiceRolledEvent,
    Event,
    GameOverEvent,
    HiddenNewsPublishedEvent,
    NewsClosedEvent,
    NewsOpenedEvent,
    NewsPatchedEvent,
    NewsPublishedEvent,
)

Clock = Callable[[], datetime]


def normalize_publish_news(cmd: PublishNewsCommand) -> NewsPublishedEvent:
    return NewsPublishedEvent(
        id=cmd.id or generate_news_id(NEWS_ID_PREFIX, cmd.date, cmd.title),
        date=cmd.date,
        icon=cmd.icon,
        title=cmd.title,
        description=cmd.description,
    )


def normalize_publish_hidden_news(cmd: PublishHiddenNewsCommand) -> HiddenNewsPublishedEvent:
    return HiddenNewsPublishedEvent(
        id=cmd.id or generate_news_id(HIDDEN_NEWS_ID_PREFIX, cmd.date, cmd.title),
        date=cmd.date,
        icon=cmd.icon,
        title=cmd.title,
        description=cmd.description,
    )


def normalize_patch_news(cmd: PatchNewsCommand) -> NewsPatchedEvent:
    return NewsPatchedEvent(target_id=cmd.target_id, date=cmd.date, patch=cmd.patch)


def normalize_roll_dice(
    cmd: RollDiceCommand,
    history: Sequence[Event],
    clock: Optional[Clock] = None,
) -> DiceRolledEvent:
    """Roll against the current history size and wall time, then persist the outcome."""
    at = to_iso_timestamp((clock or utc_now)())
    return DiceRolledEvent(roll=dice.roll(len(history), at, cmd.label), at=at, label=cmd.label)


def command_to_event(cmd: Command, history: Sequence[Event], clock: Optional[Clock] = None) -> Event:
    if isinstance(cmd, PublishNewsCommand):
        return normalize_publish_news(cmd)
    if isinstance(cmd, PublishHiddenNewsCommand):
        return normalize_publish_hidden_news(cmd)
    if isinstance(cmd, PatchNewsCommand):
        return normalize_patch_news(cmd)
    if isinstance(cmd, GameOverCommand):
        return GameOverEvent(date=cmd.date, summary=cmd.summary)
    if isinstance(cmd, RollDiceCommand):
        return normalize_roll_dice(cmd, history, clock)
    raise TypeError(f"Unsupported command type: {type(cmd).__name__}")


def news_opened(target_id: str, clock: Optional[Clock] = None) -> NewsOpenedEvent:
    return NewsOpenedEvent(target_id=target_id, at=to_iso_timestamp((clock or utc_now)()))


def news_closed(target_id: str, clock: Optional[Clock] = None) -> NewsClosedEvent:
    return NewsClosedEvent(target_id=target_id, at=to_iso_timestamp((clock or utc_now)()))
