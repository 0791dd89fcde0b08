"""Canonical order and identity rules."""
from __future__ import annotations

import itertools
import random

from builders import hidden_news, news, opened, turn_finished, turn_started
from takeoff.core.canonical import canonicalize, dedup_key, game_date
from takeoff.models.events import (
    DiceRolledEvent,
    GameOverEvent,
    NewsClosedEvent,
    NewsPatch,
    NewsPatchedEvent,
    ScenarioHeadCompletedEvent,
)


def _mixed_events():
    return [
        news("2025-01-02", "Beta"),
        news("2025-01-01", "Alpha", id="news-alpha"),
        hidden_news("2025-01-02", "Covert"),
        NewsPatchedEvent(target_id="news-alpha", date="2025-01-02", patch=NewsPatch(title="Alpha v2")),
        ScenarioHeadCompletedEvent(date="2025-01-02"),
        turn_started("player", "2025-01-02"),
        turn_finished("player", "2025-01-02", "2025-01-03"),
        GameOverEvent(date="2025-01-03", summary="Done."),
        opened("news-alpha", at="2025-01-15T10:00:01.000Z"),
        NewsClosedEvent(target_id="news-alpha", at="2025-01-15T10:00:02.000Z"),
        opened("news-alpha", at="2025-01-15T09:00:00.000Z"),
        DiceRolledEvent(roll=42, at="2025-01-15T10:00:00.000Z", label="coup"),
    ]


def test_two_same_day_news_sort_alphabetically() -> None:
    result = canonicalize([news("2025-01-01", "B"), news("2025-01-01", "A")])
    assert [e.title for e in result] == ["A", "B"]
    assert [e.id for e in result] == ["news-2025-01-01-a", "news-2025-01-01-b"]


def test_idempotent() -> None:
    once = canonicalize(_mixed_events())
    assert canonicalize(once) == once
    assert canonicalize(canonicalize(once)) == once


def test_order_independent_across_shuffles() -> None:
    events = _mixed_events()
    expected = canonicalize(events)
    rng = random.Random(7)
    for _ in range(25):
        shuffled = list(events)
        rng.shuffle(shuffled)
        assert canonicalize(shuffled) == expected


def test_order_independent_small_permutations() -> None:
    events = [news("2025-01-01", "A"), hidden_news("2025-01-01", "A"), turn_started("player", "2025-01-01")]
    expected = canonicalize(events)
    for perm in itertools.permutations(events):
        assert canonicalize(list(perm)) == expected


def test_does_not_mutate_input() -> None:
    events = [news("2025-01-02", "B"), news("2025-01-01", "A")]
    snapshot = list(events)
    canonicalize(events)
    assert events == snapshot
    assert events[0].id is None


def test_case_insensitive_dedup_keeps_later() -> None:
    first = news("2025-01-01", "Launch Day", description="first")
    second = news("2025-01-01", "launch day", description="second")
    [only] = canonicalize([first, second])
    assert only.description == "second"
    assert only.title == "launch day"


def test_dedup_by_explicit_id_replaces_entirely() -> None:
    first = news("2025-01-01", "Old title", id="news-x")
    second = news("2025-01-05", "New title", id="NEWS-X", icon="Globe")
    [only] = canonicalize([first, second])
    assert only.title == "New title"
    assert only.icon == "Globe"


def test_news_and_hidden_news_with_same_title_are_distinct() -> None:
    result = canonicalize([news("2025-01-01", "Leak"), hidden_news("2025-01-01", "Leak")])
    assert [e.type for e in result] == ["news-published", "hidden-news-published"]


def test_generated_id_collision_prefers_explicit_id() -> None:
    explicit = news("2025-01-01", "Something else", id="news-2025-01-01-launch")
    generated = news("2025-01-01", "Launch")
    for perm in ([explicit, generated], [generated, explicit]):
        result = canonicalize(perm)
        assert len(result) == 1
        assert result[0].title == "Something else"
        assert canonicalize(result) == result


def test_generated_id_collision_is_order_independent() -> None:
    prefix = "The European Union formally adopts a comprehensive"
    first = news("2025-01-01", f"{prefix} AI regulation framework")
    second = news("2025-01-01", f"{prefix} chip export amendment")
    punctuated = news("2025-01-01", f"{prefix}!!! AI regulation framework")
    assert dedup_key(first) != dedup_key(second)
    events = [first, second, punctuated]
    expected = canonicalize(events)
    assert len(expected) == 1
    for perm in itertools.permutations(events):
        assert canonicalize(list(perm)) == expected


def test_same_day_type_priority() -> None:
    day = "2025-01-02"
    result = canonicalize(
        [
            GameOverEvent(date=day, summary="x"),
            turn_finished("player", "2025-01-01", day),
            ScenarioHeadCompletedEvent(date=day),
            NewsPatchedEvent(target_id="news-a", date=day, patch=NewsPatch(icon="Cpu")),
            hidden_news(day, "H"),
            news(day, "N"),
            turn_started("game_master", day),
        ]
    )
    assert [e.type for e in result] == [
        "turn-started",
        "news-published",
        "hidden-news-published",
        "news-patched",
        "scenario-head-completed",
        "turn-finished",
        "game-over",
    ]


def test_telemetry_sorts_after_everything_by_timestamp() -> None:
    result = canonicalize(_mixed_events())
    tail = [e for e in result if e.type in ("news-opened", "news-closed")]
    assert result[-len(tail):] == tail
    assert [e.at for e in tail] == [
        "2025-01-15T09:00:00.000Z",
        "2025-01-15T10:00:01.000Z",
        "2025-01-15T10:00:02.000Z",
    ]


def test_telemetry_dedups_on_target_and_timestamp() -> None:
    result = canonicalize([opened("news-a"), opened("news-a"), opened("news-b")])
    assert len(result) == 2


def test_turn_brackets_dedup_on_window_and_actor() -> None:
    result = canonicalize(
        [
            turn_started("player", "2025-01-01"),
            turn_started("player", "2025-01-01"),
            turn_started("game_master", "2025-01-01"),
        ]
    )
    assert len(result) == 2


def test_dice_rolls_are_not_collapsed() -> None:
    rolls = [
        DiceRolledEvent(roll=10, at="2025-01-15T10:00:00.000Z"),
        DiceRolledEvent(roll=20, at="2025-01-15T10:00:01.000Z"),
        DiceRolledEvent(roll=30, at="2025-01-15T10:00:01.000Z", label="coup"),
    ]
    result = canonicalize(rolls)
    assert sorted(e.roll for e in result) == [10, 20, 30]


def test_dice_roll_same_key_last_write_wins() -> None:
    at = "2025-01-15T10:00:00.000Z"
    [only] = canonicalize([DiceRolledEvent(roll=10, at=at), DiceRolledEvent(roll=99, at=at)])
    assert only.roll == 99


def test_game_date_of_brackets() -> None:
    assert game_date(turn_started("player", "2025-01-01", "2025-02-01")) == "2025-01-01"
    assert game_date(turn_finished("player", "2025-01-01", "2025-02-01")) == "2025-02-01"
    assert game_date(DiceRolledEvent(roll=5, at="2025-01-15T10:00:00.000Z")) is None


def test_dedup_key_of_patch_uses_target_and_date() -> None:
    patch = NewsPatchedEvent(target_id="news-a", date="2025-01-02", patch=NewsPatch(title="T"))
    assert dedup_key(patch) == "news-patched-news-a-2025-01-02"
