"""Text and date helpers for ids and timestamps."""
from __future__ import annotations

import re
from datetime import datetime, timezone

from takeoff.constants import HIDDEN_NEWS_ID_PREFIX, NEWS_ID_PREFIX, SLUG_MAX_LENGTH

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """
    ASCII slug for ids: lowercase, hyphen-separated, at most 48 characters.

    Non-ASCII characters are dropped rather than transliterated.

    Examples:
        >>> slugify("OpenAI Releases GPT-5!")
        'openai-releases-gpt-5'
        >>> slugify("Über  AI -- Act")
        'ber-ai-act'
    """
    slug = _NON_SLUG.sub("-", text.lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].strip("-")


def generate_news_id(kind: str, date_str: str, title: str) -> str:
    """Deterministic id for a news item: ``{prefix}-{date}-{slug(title)}``."""
    prefix = HIDDEN_NEWS_ID_PREFIX if kind == HIDDEN_NEWS_ID_PREFIX else NEWS_ID_PREFIX
    return f"{prefix}-{date_str}-{slugify(title)}"


def _days_from_civil(year: int, month: int, day: int) -> int:
    # Proleptic Gregorian day number (0 = 1970-01-01); out-of-range months and
    # days carry over, so 2025-02-30 lands on 2025-03-02
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    if month <= 2:
        year -= 1
    era = year // 400
    yoe = year - era * 400
    doy = (153 * (month + (-3 if month > 2 else 9)) + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def _civil_from_days(days: int) -> tuple[int, int, int]:
    days += 719468
    era = days // 146097
    doe = days - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + (3 if mp < 10 else -9)
    year = yoe + era * 400 + (1 if month <= 2 else 0)
    return year, month, day


def increment_date(date_str: str) -> str:
    """
    Next calendar day of a YYYY-MM-DD string.

    Any string matching the date pattern is accepted. Impossible days roll
    forward instead of raising, and year 0000 is a real year.

    Examples:
        >>> increment_date("2025-12-31")
        '2026-01-01'
        >>> increment_date("2025-02-30")
        '2025-03-03'
    """
    year, month, day = (int(part) for part in date_str.split("-"))
    year, month, day = _civil_from_days(_days_from_civil(year, month, day) + 1)
    return f"{year:04d}-{month:02d}-{day:02d}"


def date_from_iso(timestamp: str) -> str:
    """Date portion (YYYY-MM-DD) of an ISO 8601 timestamp."""
    return timestamp.split("T", 1)[0]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso_timestamp(moment: datetime) -> str:
    """UTC ISO 8601 with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
