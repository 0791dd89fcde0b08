"""JSON extraction and repair for forecaster output.

Model text may arrive wrapped in markdown fences, surrounded by prose, or with
trailing commas before ``]`` / ``}``.
"""
from __future__ import annotations

import re

_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def strip_code_fences(text: str) -> str:
    """Return the body of the first ```json (or bare ```) fence, else the stripped text."""
    t = text.strip()
    if "```json" in t:
        return t.split("```json", 1)[1].split("```", 1)[0].strip()
    if "```" in t:
        return t.split("```", 1)[1].split("```", 1)[0].strip()
    return t


def repair_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def _extract_balanced(text: str, opener: str, closer: str) -> str | None:
    start = text.find(opener)
    if start == -1:
        return None
    depth = 0
    in_string = False
    escape_next = False
    for i in range(start, len(text)):
        c = text[i]
        if escape_next:
            escape_next = False
            continue
        if c == "\\":
            escape_next = True
            continue
        if c == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if c == opener:
            depth += 1
        elif c == closer:
            depth -= 1
            if depth == 0:
                return repair_trailing_commas(text[start : i + 1])
    # Unmatched
    return None


def extract_json_array(text: str) -> str | None:
    """Extract the first complete JSON array from text.

    Returns the extracted JSON string, or None if no balanced array is found.
    """
    if not text or not text.strip():
        return None
    return _extract_balanced(strip_code_fences(text), "[", "]")


def extract_json_object(text: str) -> str | None:
    """Extract the first complete JSON object from text."""
    if not text or not text.strip():
        return None
    return _extract_balanced(strip_code_fences(text), "{", "}")
