"""Core engine: canonical event log, derived state, prompt projection, dice."""
from .aggregator import AggregatedState, aggregate, apply_patches, assert_chronology, latest_date
from .canonical import canonicalize
from .dice import roll
from .projector import project

__all__ = [
    "AggregatedState",
    "aggregate",
    "apply_patches",
    "assert_chronology",
    "canonicalize",
    "latest_date",
    "project",
    "roll",
]
