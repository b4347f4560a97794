"""Parsing and validation of raw LLM text into agent output models."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# ```json ... ``` or just ``` ... ```
_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def extract_json(raw_text: str) -> Optional[Dict[str, Any]]:
    """Strip an optional Markdown code fence and parse the JSON object.

    Returns ``None`` when the text is not a JSON object.
    """
    clean_text = raw_text.strip()

    match = _FENCE_PATTERN.search(clean_text)
    if match:
        clean_text = match.group(1)

    try:
        data = json.loads(clean_text)
    except json.JSONDecodeError as exc:
        logger.warning("llm_output_invalid_json", error=str(exc), length=len(raw_text))
        return None

    if not isinstance(data, dict):
        logger.warning("llm_output_not_object", type=type(data).__name__)
        return None
    return data


def validate_llm_output(raw_text: str, model: Type[ModelT]) -> Optional[ModelT]:
    """Parse and validate the raw text response from the LLM.

    Handles:
    - Markdown code block stripping
    - JSON parsing
    - Pydantic schema validation against *model*

    Returns ``None`` on any failure so callers can fall back.
    """
    data = extract_json(raw_text)
    if data is None:
        return None

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.warning(
            "llm_output_schema_mismatch",
            model=model.__name__,
            errors=exc.error_count(),
        )
        return None
