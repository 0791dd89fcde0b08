"""Turn driver: player contribution, game-master forecast, merge.

Every turn is bracketed with turn-started / turn-finished events for both
actors. The forecaster sees the canonical history with the game-master bracket
appended last, so the prompt carries an open turn and its attention summary.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from takeoff.constants import SYSTEM_PROMPT
from takeoff.core.aggregator import (
    AggregatedState,
    aggregate,
    assert_chronology,
    is_game_over,
    latest_date,
    next_date_after,
)
from takeoff.core.canonical import canonicalize, game_date
from takeoff.core.error_handling import log_turn_failure
from takeoff.core.errors import GameOverError, SchemaViolation
from takeoff.core.normalize import Clock, command_to_event
from takeoff.core.validation import coerce_events, validate_commands
from takeoff.forecaster.base import Forecaster, ForecasterContext, ForecastOptions
from takeoff.models.events import Event, TurnFinishedEvent, TurnStartedEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    history: list[Event] = field(default_factory=list)
    state: AggregatedState = field(default_factory=AggregatedState)
    player_events: list[Event] = field(default_factory=list)
    forecast_events: list[Event] = field(default_factory=list)


def _earliest_date(events: Iterable[Event]) -> Optional[str]:
    dates = sorted(d for d in (game_date(event) for event in events) if d is not None)
    return dates[0] if dates else None


class Engine:
    def __init__(
        self,
        forecaster: Forecaster,
        system_prompt: str = SYSTEM_PROMPT,
        clock: Optional[Clock] = None,
    ):
        self.forecaster = forecaster
        self.system_prompt = system_prompt
        self.clock = clock

    async def forecast(
        self, history: Sequence[Event], options: Optional[ForecastOptions] = None
    ) -> list[Event]:
        """Ask the forecaster for the next batch and return it as validated events.

        Raises SchemaViolation (named after the forecaster) on a malformed batch
        and ChronologyViolation when any event predates the history.
        """
        context = ForecasterContext(history=list(history), system_prompt=self.system_prompt)
        raw = await self.forecaster.forecast(context, options)
        commands = validate_commands(raw, self.forecaster.name)
        grown = list(history)
        events: list[Event] = []
        for cmd in commands:
            event = command_to_event(cmd, grown, self.clock)
            events.append(event)
            grown.append(event)
        assert_chronology(history, events)
        return events

    def merge(self, history: Sequence[Event], additions: Iterable[Event]) -> list[Event]:
        return canonicalize([*history, *additions])

    def next_date(self, history: Sequence[Event]) -> str:
        return next_date_after(history, self.clock)

    def coerce(self, payload: Any, source: str) -> list[Event]:
        return coerce_events(payload, source)

    async def play_turn(
        self,
        history: Sequence[Event],
        player_events: Sequence[Event],
        options: Optional[ForecastOptions] = None,
    ) -> TurnResult:
        """Run one player turn followed by one game-master turn.

        On any failure the caller's history is untouched; nothing is merged.
        """
        if is_game_over(history):
            raise GameOverError("The game is over; no further turns can be played.")
        if not player_events:
            raise SchemaViolation("player", "expected at least one event")
        player_from = _earliest_date(player_events)
        if player_from is None:
            raise SchemaViolation("player", "new events must include at least one dated event")

        t0 = time.monotonic()
        player_until = latest_date([*history, *player_events]) or player_from
        with_player_turn = canonicalize(
            [
                *history,
                TurnStartedEvent(actor="player", from_=player_from, until=player_from),
                *player_events,
                TurnFinishedEvent(actor="player", from_=player_from, until=player_until),
            ]
        )
        gm_from = latest_date(with_player_turn) or player_until
        prompt_history = [
            *with_player_turn,
            TurnStartedEvent(actor="game_master", from_=gm_from, until=gm_from),
        ]

        try:
            forecast_events = await self.forecast(prompt_history, options)
        except Exception as exc:
            log_turn_failure(exc, "forecast", "game_master", prompt_history, self.forecaster.name)
            raise

        with_forecast = canonicalize([*prompt_history, *forecast_events])
        gm_until = latest_date(with_forecast) or gm_from
        final_history = canonicalize(
            [*with_forecast, TurnFinishedEvent(actor="game_master", from_=gm_from, until=gm_until)]
        )
        state = aggregate(final_history)
        logger.info(
            "Turn completed in %.2fs (player=%s..%s, game_master=%s..%s, forecast=%d, total=%d)",
            time.monotonic() - t0,
            player_from,
            player_until,
            gm_from,
            gm_until,
            len(forecast_events),
            state.event_count,
        )
        return TurnResult(
            history=final_history,
            state=state,
            player_events=list(player_events),
            forecast_events=forecast_events,
        )
