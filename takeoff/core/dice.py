"""Deterministic percentile dice.

A roll is a pure function of (history size, timestamp, label). The only
unpredictability is the wall-clock timestamp; fix the clock to reproduce a roll.
"""
from __future__ import annotations

import hashlib
import random
from typing import Optional

from takeoff.constants import DICE_DEFAULT_LABEL, DICE_MAX, DICE_MIN


def dice_seed(event_count: int, at: str, label: Optional[str] = None) -> int:
    """64-bit seed from the roll context."""
    material = f"{event_count}-{at}-{label or DICE_DEFAULT_LABEL}".encode("utf-8")
    return int.from_bytes(hashlib.sha256(material).digest()[:8], "big")


def roll_percentile(seed: int) -> int:
    """1-100 inclusive from a seed."""
    return random.Random(seed).randint(DICE_MIN, DICE_MAX)


def roll(event_count: int, at: str, label: Optional[str] = None) -> int:
    return roll_percentile(dice_seed(event_count, at, label))
