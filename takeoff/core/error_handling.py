"""Structured logging for failed turns."""
from __future__ import annotations

import logging
from typing import Sequence

from takeoff.core.aggregator import latest_date
from takeoff.models.events import Event

logger = logging.getLogger(__name__)


def log_turn_failure(error: Exception, stage: str, actor: str, history: Sequence[Event], forecaster: str) -> None:
    """Log a turn that failed at ``stage`` while ``actor`` held the open bracket.

    The history is the one the stage was working on; nothing from the failed
    stage has been merged into it.
    """
    turn = {
        "stage": stage,
        "actor": actor,
        "latest_date": latest_date(history),
        "event_count": len(history),
        "forecaster": forecaster,
    }
    logger.error(
        "Turn failed at %s: %s: %s (actor=%s, latest_date=%s, events=%d, forecaster=%s)",
        stage,
        type(error).__name__,
        error,
        actor,
        turn["latest_date"],
        turn["event_count"],
        forecaster,
        exc_info=error,
        extra={"turn": turn},
    )
