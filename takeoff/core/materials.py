"""Background materials and self-contained prepared prompts.

A materials manifest is YAML: either a list of ``{id, title, body}`` documents
or a mapping with a ``materials`` list. Bodies may carry ``<!-- ... -->``
provenance comments; those are stripped before reaching the model.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable, Sequence, Union

import yaml
from pydantic import ValidationError

from takeoff.constants import RESPONSE_MIME_TYPE
from takeoff.core.errors import SchemaViolation
from takeoff.core.projector import project
from takeoff.core.validation import format_issues
from takeoff.models.events import Event
from takeoff.models.replay import (
    Content,
    ContentPart,
    MaterialDoc,
    PreparedPrompt,
    PreparedRequest,
    PromptConfig,
)

logger = logging.getLogger(__name__)

_HTML_COMMENT = re.compile(r"<!--[\s\S]*?-->")


def strip_html_comments(text: str) -> str:
    return _HTML_COMMENT.sub("", text)


def _coerce_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, dict):
        return _coerce_list(value.get("materials"))
    if isinstance(value, list):
        return value
    return []


def load_materials(path: Union[str, Path]) -> list[MaterialDoc]:
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    docs = []
    for index, item in enumerate(_coerce_list(raw)):
        try:
            docs.append(MaterialDoc.model_validate(item))
        except ValidationError as exc:
            raise SchemaViolation(f"materials:{p.name}", f"entry {index}:\n{format_issues(exc)}") from exc
    logger.info("Loaded %d materials from %s", len(docs), p)
    return docs


def select_materials(materials: Sequence[MaterialDoc], selection: str | None) -> list[MaterialDoc]:
    """Pick materials by ``all``, ``none``, or a comma-separated id list."""
    if not selection or selection == "none":
        return []
    if selection == "all":
        return list(materials)
    wanted = {part.strip() for part in selection.split(",") if part.strip()}
    return [doc for doc in materials if doc.id in wanted]


def build_system_instruction(system_prompt: str, materials: Iterable[MaterialDoc]) -> str:
    blocks = [system_prompt]
    for doc in materials:
        blocks.append(f"\n[MATERIAL:{doc.id}]\n{strip_html_comments(doc.body)}")
    return "\n".join(blocks)


def prepare_prompt(
    model: str,
    system_prompt: str,
    history: Sequence[Event],
    materials: Sequence[MaterialDoc] = (),
) -> PreparedPrompt:
    """Build a request that can be saved to disk and sent later without the engine."""
    request = PreparedRequest(
        model=model,
        contents=[Content(role="user", parts=[ContentPart(text=project(history))])],
        config=PromptConfig(
            system_instruction=build_system_instruction(system_prompt, materials),
            response_mime_type=RESPONSE_MIME_TYPE,
        ),
    )
    return PreparedPrompt(model=model, request=request, materials_used=[doc.id for doc in materials])
