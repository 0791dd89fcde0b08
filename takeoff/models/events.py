"""Pydantic event models for the append-only timeline log.

Every event is a closed, immutable record. The wire format is camelCase JSON;
``event_to_dict`` produces it.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, Strict, StringConstraints, TypeAdapter, model_validator

from takeoff.constants import DATE_PATTERN, ICON_SET

GameDate = Annotated[str, Strict(), StringConstraints(pattern=DATE_PATTERN)]
NonEmptyStr = Annotated[str, Strict(), StringConstraints(min_length=1)]
IconName = Literal[ICON_SET]
Actor = Literal["player", "game_master"]
DiceRoll = Annotated[int, Strict(), Field(ge=1, le=100)]


class Record(BaseModel):
    """Base for closed, frozen wire records."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class NewsPublishedEvent(Record):
    type: Literal["news-published"] = "news-published"
    id: Optional[NonEmptyStr] = None
    date: GameDate
    icon: IconName
    title: NonEmptyStr
    description: NonEmptyStr


class HiddenNewsPublishedEvent(Record):
    """News withheld from the player timeline until the post-mortem reveal."""

    type: Literal["hidden-news-published"] = "hidden-news-published"
    id: Optional[NonEmptyStr] = None
    date: GameDate
    icon: IconName
    title: NonEmptyStr
    description: NonEmptyStr


class NewsPatch(Record):
    date: Optional[GameDate] = None
    icon: Optional[IconName] = None
    title: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None

    @model_validator(mode="after")
    def _require_one_field(self) -> "NewsPatch":
        if self.date is None and self.icon is None and self.title is None and self.description is None:
            raise ValueError("patch must set at least one of date, icon, title, description")
        return self


class NewsPatchedEvent(Record):
    type: Literal["news-patched"] = "news-patched"
    target_id: NonEmptyStr = Field(alias="targetId")
    date: GameDate
    patch: NewsPatch


class NewsOpenedEvent(Record):
    type: Literal["news-opened"] = "news-opened"
    target_id: NonEmptyStr = Field(alias="targetId")
    at: NonEmptyStr


class NewsClosedEvent(Record):
    type: Literal["news-closed"] = "news-closed"
    target_id: NonEmptyStr = Field(alias="targetId")
    at: NonEmptyStr


class ScenarioHeadCompletedEvent(Record):
    """Boundary between seed history and generated continuation."""

    type: Literal["scenario-head-completed"] = "scenario-head-completed"
    date: GameDate


class GameOverEvent(Record):
    type: Literal["game-over"] = "game-over"
    date: GameDate
    summary: NonEmptyStr


class TurnStartedEvent(Record):
    type: Literal["turn-started"] = "turn-started"
    actor: Actor
    from_: GameDate = Field(alias="from")
    until: GameDate


class TurnFinishedEvent(Record):
    type: Literal["turn-finished"] = "turn-finished"
    actor: Actor
    from_: GameDate = Field(alias="from")
    until: GameDate


class DiceRolledEvent(Record):
    type: Literal["dice-rolled"] = "dice-rolled"
    roll: DiceRoll
    at: NonEmptyStr
    label: Optional[NonEmptyStr] = None


Event = Annotated[
    Union[
        NewsPublishedEvent,
        HiddenNewsPublishedEvent,
        NewsPatchedEvent,
        NewsOpenedEvent,
        NewsClosedEvent,
        ScenarioHeadCompletedEvent,
        GameOverEvent,
        TurnStartedEvent,
        TurnFinishedEvent,
        DiceRolledEvent,
    ],
    Field(discriminator="type"),
]

# News items as rendered on the timeline
ScenarioEvent = Union[NewsPublishedEvent, HiddenNewsPublishedEvent]

EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(Event)
EVENT_LIST_ADAPTER: TypeAdapter[Any] = TypeAdapter(list[Event])


def event_to_dict(event: BaseModel) -> dict[str, Any]:
    """Wire form of an event: camelCase keys, absent optionals omitted."""
    return event.model_dump(mode="json", by_alias=True, exclude_none=True)
