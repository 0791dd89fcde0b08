"""Batch validation of events and commands."""
from __future__ import annotations

import pytest

from takeoff.core.errors import SchemaViolation
from takeoff.core.validation import coerce_events, validate_commands, validate_events
from takeoff.models.events import NewsPatchedEvent, NewsPublishedEvent, TurnStartedEvent


def _news_payload(**overrides):
    payload = {
        "type": "news-published",
        "date": "2025-01-01",
        "icon": "Landmark",
        "title": "Treaty signed",
        "description": "Nations agree on compute limits.",
    }
    payload.update(overrides)
    return payload


def test_accepts_valid_batch_with_camel_case_fields() -> None:
    events = validate_events(
        [
            _news_payload(),
            {"type": "news-patched", "targetId": "news-x", "date": "2025-01-02", "patch": {"title": "New"}},
            {"type": "turn-started", "actor": "player", "from": "2025-01-01", "until": "2025-01-01"},
        ],
        "fixture",
    )
    assert isinstance(events[0], NewsPublishedEvent)
    assert isinstance(events[1], NewsPatchedEvent)
    assert events[1].target_id == "news-x"
    assert isinstance(events[2], TurnStartedEvent)
    assert events[2].from_ == "2025-01-01"


@pytest.mark.parametrize("date", ["2025-02-30", "0000-00-00", "9999-99-99"])
def test_date_regex_has_no_calendar_check(date: str) -> None:
    [event] = validate_events([_news_payload(date=date)], "fixture")
    assert event.date == date


@pytest.mark.parametrize("date", ["2025-1-01", "25-01-01", "2025/01/01", "2025-01-01T00:00", " 2025-01-01", "2025-01-0a"])
def test_malformed_dates_rejected(date: str) -> None:
    with pytest.raises(SchemaViolation):
        validate_events([_news_payload(date=date)], "fixture")


def test_icon_is_case_sensitive() -> None:
    validate_events([_news_payload(icon="Landmark")], "fixture")
    with pytest.raises(SchemaViolation):
        validate_events([_news_payload(icon="landmark")], "fixture")
    with pytest.raises(SchemaViolation):
        validate_events([_news_payload(icon="Rocket")], "fixture")


def test_empty_title_and_description_rejected() -> None:
    with pytest.raises(SchemaViolation):
        validate_events([_news_payload(title="")], "fixture")
    with pytest.raises(SchemaViolation):
        validate_events([_news_payload(description="")], "fixture")


def test_unknown_type_rejects_whole_batch_and_names_source() -> None:
    with pytest.raises(SchemaViolation) as excinfo:
        validate_events([_news_payload(), {"type": "news-deleted", "date": "2025-01-01"}], "forecaster")
    assert excinfo.value.source == "forecaster"
    assert "forecaster" in str(excinfo.value)


def test_missing_required_field_rejects_batch() -> None:
    payload = _news_payload()
    del payload["description"]
    with pytest.raises(SchemaViolation):
        validate_events([payload], "fixture")


def test_extra_fields_rejected() -> None:
    with pytest.raises(SchemaViolation):
        validate_events([_news_payload(sentiment="positive")], "fixture")


def test_patch_must_be_non_empty() -> None:
    with pytest.raises(SchemaViolation):
        validate_events(
            [{"type": "news-patched", "targetId": "news-x", "date": "2025-01-02", "patch": {}}],
            "fixture",
        )


def test_dice_roll_range_enforced() -> None:
    base = {"type": "dice-rolled", "at": "2025-01-15T10:00:00.000Z"}
    validate_events([dict(base, roll=1), dict(base, roll=100)], "fixture")
    with pytest.raises(SchemaViolation):
        validate_events([dict(base, roll=0)], "fixture")
    with pytest.raises(SchemaViolation):
        validate_events([dict(base, roll=101)], "fixture")


def test_empty_dice_label_rejected() -> None:
    with pytest.raises(SchemaViolation):
        validate_events([{"type": "dice-rolled", "roll": 5, "at": "2025-01-15T10:00:00.000Z", "label": ""}], "fixture")
    with pytest.raises(SchemaViolation):
        validate_commands([{"type": "roll-dice", "label": ""}], "forecaster")


def test_strict_types_do_not_coerce() -> None:
    with pytest.raises(SchemaViolation):
        validate_events([{"type": "dice-rolled", "roll": "42", "at": "2025-01-15T10:00:00.000Z"}], "fixture")


def test_actor_restricted() -> None:
    with pytest.raises(SchemaViolation):
        validate_events(
            [{"type": "turn-started", "actor": "observer", "from": "2025-01-01", "until": "2025-01-01"}],
            "fixture",
        )


def test_non_list_payload_rejected() -> None:
    with pytest.raises(SchemaViolation) as excinfo:
        validate_events(_news_payload(), "fixture")
    assert "expected a list" in str(excinfo.value)


def test_validate_commands_accepts_all_command_types() -> None:
    commands = validate_commands(
        [
            {"type": "publish-news", "date": "2025-01-01", "icon": "Cpu", "title": "T", "description": "D"},
            {"type": "publish-hidden-news", "date": "2025-01-01", "icon": "Cpu", "title": "T", "description": "D"},
            {"type": "patch-news", "targetId": "news-x", "date": "2025-01-02", "patch": {"icon": "Globe"}},
            {"type": "game-over", "date": "2025-02-01", "summary": "The end."},
            {"type": "roll-dice", "label": "coup"},
            {"type": "roll-dice"},
        ],
        "forecaster",
    )
    assert [cmd.type for cmd in commands] == [
        "publish-news",
        "publish-hidden-news",
        "patch-news",
        "game-over",
        "roll-dice",
        "roll-dice",
    ]


def test_events_are_not_valid_commands() -> None:
    with pytest.raises(SchemaViolation):
        validate_commands([_news_payload()], "forecaster")


def test_coerce_events_canonicalizes() -> None:
    events = coerce_events(
        [_news_payload(date="2025-01-05", title="Later"), _news_payload(date="2025-01-01", title="Earlier")],
        "fixture",
    )
    assert [e.title for e in events] == ["Earlier", "Later"]
    assert events[0].id == "news-2025-01-01-earlier"
