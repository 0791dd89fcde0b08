"""Gemini streaming client over the REST ``streamGenerateContent`` SSE endpoint.

Requires GEMINI_API_KEY environment variable or api_key parameter.
"""
from __future__ import annotations

import json as _json
import logging
import os
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from takeoff.config import DEFAULT_GEMINI_BASE_URL, DEFAULT_LLM_TIMEOUT
from takeoff.constants import (
    DATE_PATTERN,
    MIN_OUTPUT_TOKENS,
    OUTPUT_TOKENS_PER_EVENT,
    RESPONSE_MIME_TYPE,
)
from takeoff.core.errors import ForecasterError
from takeoff.core.projector import project
from takeoff.forecaster.base import ForecastOptions, StreamRequest

logger = logging.getLogger(__name__)


def _news_schema(kind: str) -> Dict[str, Any]:
    return {
        "type": "OBJECT",
        "properties": {
            "type": {"type": "STRING", "enum": [kind]},
            "id": {"type": "STRING"},
            "date": {"type": "STRING", "pattern": DATE_PATTERN},
            "icon": {"type": "STRING"},
            "title": {"type": "STRING"},
            "description": {"type": "STRING"},
        },
        "required": ["type", "date", "icon", "title", "description"],
    }


def command_response_schema() -> Dict[str, Any]:
    """Structured-output schema constraining the model to a command array."""
    date = {"type": "STRING", "pattern": DATE_PATTERN}
    return {
        "type": "ARRAY",
        "minItems": "1",
        "items": {
            "anyOf": [
                _news_schema("publish-news"),
                _news_schema("publish-hidden-news"),
                {
                    "type": "OBJECT",
                    "properties": {
                        "type": {"type": "STRING", "enum": ["patch-news"]},
                        "targetId": {"type": "STRING"},
                        "date": date,
                        "patch": {
                            "type": "OBJECT",
                            "minProperties": "1",
                            "properties": {
                                "date": date,
                                "icon": {"type": "STRING"},
                                "title": {"type": "STRING"},
                                "description": {"type": "STRING"},
                            },
                        },
                    },
                    "required": ["type", "targetId", "date", "patch"],
                },
                {
                    "type": "OBJECT",
                    "properties": {
                        "type": {"type": "STRING", "enum": ["game-over"]},
                        "date": date,
                        "summary": {"type": "STRING"},
                    },
                    "required": ["type", "date", "summary"],
                },
                {
                    "type": "OBJECT",
                    "properties": {
                        "type": {"type": "STRING", "enum": ["roll-dice"]},
                        "label": {"type": "STRING"},
                    },
                    "required": ["type"],
                },
            ]
        },
    }


def generation_config(options: Optional[ForecastOptions]) -> Dict[str, Any]:
    config: Dict[str, Any] = {
        "responseMimeType": RESPONSE_MIME_TYPE,
        "responseSchema": command_response_schema(),
    }
    if options is None:
        return config
    if options.temperature is not None:
        config["temperature"] = options.temperature
    if options.seed is not None:
        config["seed"] = options.seed
    if options.max_events is not None:
        config["maxOutputTokens"] = max(MIN_OUTPUT_TOKENS, options.max_events * OUTPUT_TOKENS_PER_EVENT)
    return config


def build_request_body(request: StreamRequest) -> Dict[str, Any]:
    """JSON body for streamGenerateContent: projected history as the single user turn."""
    return {
        "contents": [{"role": "user", "parts": [{"text": project(request.history)}]}],
        "systemInstruction": {"parts": [{"text": request.system_prompt}]},
        "generationConfig": generation_config(request.options),
    }


def extract_chunk_text(data: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate in one SSE payload."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


class GeminiStreamClient:
    """Async client for Gemini's streaming generateContent API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_LLM_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY", "")
        self.base_url = (base_url or DEFAULT_GEMINI_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def generate_content_stream(self, request: StreamRequest) -> AsyncIterator[str]:
        """Stream text chunks from the SSE endpoint. Whitespace-only chunks are skipped."""
        if not self.api_key:
            raise ForecasterError("GEMINI_API_KEY not set")

        url = f"{self.base_url}/v1beta/models/{request.model}:streamGenerateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "content-type": "application/json",
        }
        logger.debug("Gemini stream request: model=%s history=%d", request.model, len(request.history))

        try:
            async with self.client.stream(
                "POST",
                url,
                params={"alt": "sse"},
                json=build_request_body(request),
                headers=headers,
                timeout=self.timeout,
            ) as response:
                if response.is_error:
                    await response.aread()
                    raise ForecasterError(
                        f"Gemini HTTP error {response.status_code}: {response.text[:500]}"
                    )
                async for line in response.aiter_lines():
                    if not line or not line.startswith("data:"):
                        continue
                    data_str = line[5:].strip()
                    if not data_str or data_str == "[DONE]":
                        continue
                    try:
                        data = _json.loads(data_str)
                    except _json.JSONDecodeError:
                        logger.warning("Skipping non-JSON SSE payload: %s", data_str[:200])
                        continue
                    if isinstance(data, dict) and data.get("error"):
                        raise ForecasterError(f"Gemini stream error payload: {data['error']}")
                    text = extract_chunk_text(data) if isinstance(data, dict) else ""
                    if text.strip():
                        yield text
        except httpx.TimeoutException as exc:
            raise ForecasterError("Gemini stream timed out") from exc
        except httpx.ConnectError as exc:
            raise ForecasterError(f"Cannot connect to Gemini API at {self.base_url}") from exc
        except httpx.HTTPError as exc:
            raise ForecasterError(f"Gemini stream error: {exc}") from exc
