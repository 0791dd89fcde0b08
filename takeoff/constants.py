"""Centralized constants shared across the engine."""
from __future__ import annotations

# Game dates: four-digit year, zero-padded month/day. No calendar check.
DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"

# Generated ids: {prefix}-{date}-{slug(title)}
SLUG_MAX_LENGTH = 48
NEWS_ID_PREFIX = "news"
HIDDEN_NEWS_ID_PREFIX = "hidden-news"

# Dice rolls
DICE_MIN = 1
DICE_MAX = 100
DICE_DEFAULT_LABEL = "default"

# Same-day ordering of non-telemetry events (lower sorts first)
EVENT_SORT_PRIORITY: dict[str, int] = {
    "turn-started": 0,
    "news-published": 1,
    "hidden-news-published": 2,
    "news-patched": 3,
    "scenario-head-completed": 4,
    "turn-finished": 5,
    "game-over": 6,
    "dice-rolled": 7,
}
TELEMETRY_EVENT_TYPES = frozenset({"news-opened", "news-closed"})
NEWS_EVENT_TYPES = frozenset({"news-published", "hidden-news-published"})

# dice-rolled carries no game date; it sorts as if dated here
UNDATED_SORT_DATE = "1970-01-01"

# Prompt projection section headers
SECTION_TIMELINE = "# TIMELINE (JSONL)"
SECTION_PLAYER_ATTENTION = "# PLAYER ATTENTION"
SECTION_CURRENT_STATE = "# CURRENT STATE"

# Streaming / replay
DEFAULT_MODEL = "gemini-2.5-flash"
REPLAY_SDK_TAG = "takeoff-httpx"
RESPONSE_MIME_TYPE = "application/json"
MIN_OUTPUT_TOKENS = 256
OUTPUT_TOKENS_PER_EVENT = 128

ICON_SET: tuple[str, ...] = (
    "Landmark",
    "BrainCircuit",
    "FlaskConical",
    "Scale",
    "Satellite",
    "Globe",
    "Cpu",
    "DollarSign",
    "Smartphone",
    "Newspaper",
    "Power",
    "ShieldCheck",
    "Swords",
    "Code",
    "Database",
    "FileText",
    "MessageSquare",
    "Users",
    "TrendingUp",
    "Factory",
    "Building",
    "Bomb",
    "Ship",
    "Plane",
    "Wallet",
    "Bot",
)

SYSTEM_PROMPT = """SYSTEM ROLE: Simulation engine for an AI takeoff timeline.

YOU RECEIVE:
- A projected prompt with a JSONL timeline, an optional player attention block and a current state block.
- Timeline lines include news (with id and isHidden), news-patched, turn-started/finished, scenario-head-completed and dice rolls ({roll, label, at}).
- The user controls ONE organization. Default: the United States government and military. The user sets macroscopic agendas only. Do not author decisions for that organization.

YOU OUTPUT:
- Strictly a JSON array of one or more Command objects (no extra text, no markdown).
- Command types: "publish-news", "publish-hidden-news", "patch-news", "game-over", "roll-dice".
- For "publish-news" and "publish-hidden-news": { "type": ..., "date": "YYYY-MM-DD", "icon": "IconName", "title": "string", "description": "string" }.
- For "patch-news": { "type": "patch-news", "targetId": "existing-news-id", "date": "YYYY-MM-DD", "patch": { "date"?: ..., "icon"?: ..., "title"?: ..., "description"?: ... } }.
- For "game-over": { "type": "game-over", "date": "YYYY-MM-DD", "summary": "string" }.
- For "roll-dice": { "type": "roll-dice", "label"?: "string" } to draw a percentile roll (1-100) before deciding an uncertain outcome.
- All output dates must be on or after latestDate in the current state block.
- Use "publish-hidden-news" only for events that should be hidden from the player timeline.
- The "icon" field must be one of: """ + ", ".join(ICON_SET) + """.
- Titles state the core fact in plain language. Descriptions add enough context for a reader whose knowledge cutoff is June 1, 2024.
- Never take actions reserved for the user-controlled organization. You may describe consequences and third-party reactions.
- Aim for 1-5 commands per turn to preserve alternation pacing.

CHECKS BEFORE SENDING:
- Output is valid JSON representing Command[].
- Dates are non-decreasing."""
