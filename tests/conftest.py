"""Pytest setup: fixed clock and a small seed history."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from builders import hidden_news, news

FIXED_NOW = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def sample_history():
    return [
        news("2025-01-01", "Lab announces frontier model", id="news-frontier"),
        news("2025-01-03", "Chip export rules tightened"),
        hidden_news("2025-01-04", "Weights exfiltrated"),
    ]
