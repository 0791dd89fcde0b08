"""Prompt projection: timeline, player attention, current state."""
from __future__ import annotations

import json

from builders import hidden_news, news, opened, turn_finished, turn_started
from takeoff.core.projector import player_attention, project, render_event
from takeoff.models.events import DiceRolledEvent, GameOverEvent, NewsClosedEvent, NewsPatch, NewsPatchedEvent


def _sections(text: str) -> dict[str, list[str]]:
    sections: dict[str, list[str]] = {}
    current = None
    for line in text.split("\n"):
        if line.startswith("# "):
            current = line
            sections[current] = []
        elif current is not None:
            sections[current].append(line)
    return sections


def test_sections_without_open_turn() -> None:
    text = project([news("2025-01-01", "A")])
    sections = _sections(text)
    assert list(sections) == ["# TIMELINE (JSONL)", "# CURRENT STATE"]
    state = json.loads("\n".join(sections["# CURRENT STATE"]))
    assert state == {"latestDate": "2025-01-01", "currentTurn": None}


def test_news_lines_carry_id_and_hidden_flag() -> None:
    text = project([news("2025-01-01", "Open"), hidden_news("2025-01-02", "Covert")])
    lines = [json.loads(line) for line in _sections(text)["# TIMELINE (JSONL)"]]
    assert lines[0]["id"] == "news-2025-01-01-open"
    assert lines[0]["isHidden"] is False
    assert lines[1]["id"] == "hidden-news-2025-01-02-covert"
    assert lines[1]["isHidden"] is True
    assert "type" not in lines[0]


def test_structural_events_pass_through() -> None:
    patch = NewsPatchedEvent(target_id="news-a", date="2025-01-02", patch=NewsPatch(title="T"))
    assert json.loads(render_event(patch)) == {
        "type": "news-patched",
        "targetId": "news-a",
        "date": "2025-01-02",
        "patch": {"title": "T"},
    }
    bracket = json.loads(render_event(turn_started("player", "2025-01-01", "2025-06-01")))
    assert bracket == {"type": "turn-started", "actor": "player", "from": "2025-01-01", "until": "2025-06-01"}
    assert json.loads(render_event(GameOverEvent(date="2025-01-03", summary="x")))["type"] == "game-over"


def test_dice_line_has_no_type_tag() -> None:
    line = json.loads(render_event(DiceRolledEvent(roll=42, at="2025-01-15T10:00:00.000Z", label="coup")))
    assert line == {"roll": 42, "label": "coup", "at": "2025-01-15T10:00:00.000Z"}
    unlabeled = json.loads(render_event(DiceRolledEvent(roll=7, at="2025-01-15T10:00:00.000Z")))
    assert unlabeled == {"roll": 7, "at": "2025-01-15T10:00:00.000Z"}


def test_telemetry_never_rendered() -> None:
    text = project([news("2025-01-01", "A", id="a"), opened("a"), NewsClosedEvent(target_id="a", at="2025-01-15T10:00:01.000Z")])
    assert "news-opened" not in text
    assert "news-closed" not in text
    assert render_event(opened("a")) is None


def test_attention_present_only_while_turn_open() -> None:
    start = turn_started("player", "2025-01-01", "2025-06-01")
    history = [start, opened("id")]
    assert player_attention(history) == {"viewedFirstTime": ["id"], "notViewed": []}
    assert "# PLAYER ATTENTION" in project(history)

    closed = history + [turn_finished("player", "2025-01-01", "2025-06-01")]
    assert player_attention(closed) is None
    assert "# PLAYER ATTENTION" not in project(closed)


def test_attention_resets_on_new_turn() -> None:
    history = [
        turn_started("player", "2025-01-01", "2025-06-01"),
        opened("id"),
        turn_finished("player", "2025-01-01", "2025-06-01"),
        turn_started("player", "2025-06-01", "2025-06-01"),
        opened("id", at="2025-01-16T10:00:00.000Z"),
    ]
    assert player_attention(history) == {"viewedFirstTime": [], "notViewed": []}


def test_not_viewed_lists_unopened_news() -> None:
    history = [
        news("2025-01-01", "Read me", id="read"),
        news("2025-01-02", "Skipped", id="skipped"),
        hidden_news("2025-01-03", "Secret", id="secret"),
        turn_started("game_master", "2025-01-03"),
        opened("read"),
        opened("read", at="2025-01-15T10:00:05.000Z"),
    ]
    assert player_attention(history) == {"viewedFirstTime": ["read"], "notViewed": ["skipped", "secret"]}


def test_views_before_turn_start_are_not_first_views_this_turn() -> None:
    history = [
        news("2025-01-01", "A", id="a"),
        opened("a"),
        turn_started("player", "2025-01-02"),
    ]
    assert player_attention(history) == {"viewedFirstTime": [], "notViewed": []}


def test_current_state_reports_open_turn() -> None:
    text = project([news("2025-01-01", "A"), turn_started("game_master", "2025-01-01")])
    state = json.loads("\n".join(_sections(text)["# CURRENT STATE"]))
    assert state == {
        "latestDate": "2025-01-01",
        "currentTurn": {"from": "2025-01-01", "until": "2025-01-01", "actor": "game_master"},
    }
