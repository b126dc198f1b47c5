from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError
from app.schemas.analysis import AnalysisResult

logger = logging.getLogger(__name__)


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        first_newline = cleaned.find("\n")
        cleaned = cleaned[first_newline + 1 :] if first_newline != -1 else cleaned[3:]
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location or '<root>'}: {error.get('msg')}")
    return "; ".join(parts)


def parse_payload(raw: str | bytes | dict[str, Any]) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if not isinstance(raw, str):
        raise ValidationError(f"Unsupported payload type {type(raw).__name__}", code="unparseable_payload")

    text = _strip_code_fence(raw)
    if not text:
        raise ValidationError("Empty analysis payload", code="unparseable_payload")
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Analysis payload is not valid JSON: {exc}", code="unparseable_payload") from exc
    if not isinstance(parsed, dict):
        raise ValidationError("Analysis payload must be a JSON object", code="unparseable_payload")
    return parsed


def validate_analysis(raw: str | bytes | dict[str, Any]) -> AnalysisResult:
    """Turn untrusted provider output into an AnalysisResult or raise ValidationError.

    Scores must be real numbers (no coercion from strings), out-of-range scores
    are clamped to [0, 100], and unknown fields are kept.
    """
    payload = parse_payload(raw)
    try:
        return AnalysisResult.model_validate(payload)
    except PydanticValidationError as exc:
        detail = _describe(exc)
        logger.warning("analysis_schema_invalid errors=%s", detail)
        raise ValidationError(f"Analysis payload violates schema: {detail}", code="schema_mismatch") from exc
