"""Command models: proposed facts emitted by the forecaster (or the player UI).

A command carries no guaranteed id; normalization turns each one into exactly
one event.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from takeoff.models.events import GameDate, IconName, NewsPatch, NonEmptyStr, Record


class PublishNewsCommand(Record):
    type: Literal["publish-news"] = "publish-news"
    id: Optional[NonEmptyStr] = None
    date: GameDate
    icon: IconName
    title: NonEmptyStr
    description: NonEmptyStr


class PublishHiddenNewsCommand(Record):
    type: Literal["publish-hidden-news"] = "publish-hidden-news"
    id: Optional[NonEmptyStr] = None
    date: GameDate
    icon: IconName
    title: NonEmptyStr
    description: NonEmptyStr


class PatchNewsCommand(Record):
    type: Literal["patch-news"] = "patch-news"
    target_id: NonEmptyStr = Field(alias="targetId")
    date: GameDate
    patch: NewsPatch


class GameOverCommand(Record):
    type: Literal["game-over"] = "game-over"
    date: GameDate
    summary: NonEmptyStr


class RollDiceCommand(Record):
    type: Literal["roll-dice"] = "roll-dice"
    label: Optional[NonEmptyStr] = None


Command = Annotated[
    Union[
        PublishNewsCommand,
        PublishHiddenNewsCommand,
        PatchNewsCommand,
        GameOverCommand,
        RollDiceCommand,
    ],
    Field(discriminator="type"),
]

COMMAND_LIST_ADAPTER: TypeAdapter[Any] = TypeAdapter(list[Command])
