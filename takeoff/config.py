"""Runtime configuration: forecaster backend selection, model, API key, replay tapes.

Env overrides: TAKEOFF_MODEL, GEMINI_API_KEY, TAKEOFF_GEMINI_BASE_URL, LLM_TIMEOUT,
TAKEOFF_FORECASTER_MODE (live | record | replay), TAKEOFF_TAPE_PATH,
TAKEOFF_STRICT_REPLAY.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from takeoff.constants import DEFAULT_MODEL

logger = logging.getLogger(__name__)

FORECASTER_MODES = ("live", "record", "replay")
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_LLM_TIMEOUT = 300.0


def _env_flag(name: str, default: bool = False, environ: Mapping[str, str] | None = None) -> bool:
    """Read boolean env flag."""
    env = os.environ if environ is None else environ
    val = env.get(name, "").strip().lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


def _env_float(name: str, default: float, environ: Mapping[str, str] | None = None) -> float:
    env = os.environ if environ is None else environ
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r; using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class ForecasterSettings:
    """Resolved settings for the forecasting backend."""

    mode: str
    model: str
    api_key: str
    base_url: str
    timeout: float
    tape_path: str
    strict_replay: bool


def load_forecaster_settings(environ: Mapping[str, str] | None = None) -> ForecasterSettings:
    env = os.environ if environ is None else environ
    mode = env.get("TAKEOFF_FORECASTER_MODE", "live").strip().lower() or "live"
    if mode not in FORECASTER_MODES:
        raise ValueError(
            f"Unsupported TAKEOFF_FORECASTER_MODE '{mode}'. Supported: {', '.join(FORECASTER_MODES)}."
        )
    settings = ForecasterSettings(
        mode=mode,
        model=env.get("TAKEOFF_MODEL", "").strip() or DEFAULT_MODEL,
        api_key=env.get("GEMINI_API_KEY", "").strip(),
        base_url=(env.get("TAKEOFF_GEMINI_BASE_URL", "").strip() or DEFAULT_GEMINI_BASE_URL).rstrip("/"),
        timeout=_env_float("LLM_TIMEOUT", DEFAULT_LLM_TIMEOUT, environ=env),
        tape_path=env.get("TAKEOFF_TAPE_PATH", "").strip(),
        strict_replay=_env_flag("TAKEOFF_STRICT_REPLAY", default=True, environ=env),
    )
    if settings.mode in ("record", "replay") and not settings.tape_path:
        raise ValueError(f"TAKEOFF_TAPE_PATH is required in {settings.mode} mode")
    return settings


def log_resolved_settings(settings: ForecasterSettings) -> None:
    """Log resolved forecaster config at startup (no secrets)."""
    logger.info(
        "Forecaster config: mode=%s model=%s base_url=%s timeout=%.0fs api_key=%s tape=%s",
        settings.mode,
        settings.model,
        settings.base_url,
        settings.timeout,
        "set" if settings.api_key else "missing",
        settings.tape_path or "-",
    )
