"""Wire models: events, commands, replay tapes."""
from .commands import (
    Command,
    GameOverCommand,
    PatchNewsCommand,
    PublishHiddenNewsCommand,
    PublishNewsCommand,
    RollDiceCommand,
)
from .events import (
    DiceRolledEvent,
    Event,
    GameOverEvent,
    HiddenNewsPublishedEvent,
    NewsClosedEvent,
    NewsOpenedEvent,
    NewsPatch,
    NewsPatchedEvent,
    NewsPublishedEvent,
    ScenarioEvent,
    ScenarioHeadCompletedEvent,
    TurnFinishedEvent,
    TurnStartedEvent,
    event_to_dict,
)
from .replay import MaterialDoc, PreparedPrompt, ReplayChunk, ReplayMeta, ReplayRequest, ReplayTape

__all__ = [
    "Command",
    "DiceRolledEvent",
    "Event",
    "GameOverCommand",
    "GameOverEvent",
    "HiddenNewsPublishedEvent",
    "MaterialDoc",
    "NewsClosedEvent",
    "NewsOpenedEvent",
    "NewsPatch",
    "NewsPatchedEvent",
    "NewsPublishedEvent",
    "PatchNewsCommand",
    "PreparedPrompt",
    "PublishHiddenNewsCommand",
    "PublishNewsCommand",
    "ReplayChunk",
    "ReplayMeta",
    "ReplayRequest",
    "ReplayTape",
    "RollDiceCommand",
    "ScenarioEvent",
    "ScenarioHeadCompletedEvent",
    "TurnFinishedEvent",
    "TurnStartedEvent",
    "event_to_dict",
]
