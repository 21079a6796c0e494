from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError as PydanticValidationError

from resume_tailor.core.errors import ParseError
from resume_tailor.schemas.resume import TailoredResume

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*\s*([\s\S]*?)\s*```")


def extract_json_payload(text: str) -> str:
    """Pick the substring of a model response that should hold the JSON object.

    Preference order: a ```json fence, then any fence, then the whole text.
    """
    raw = text or ""
    match = _JSON_FENCE_RE.search(raw) or _ANY_FENCE_RE.search(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


def parse_tailored_resume(text: str) -> TailoredResume:
    payload = extract_json_payload(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        logger.warning("tailored_resume_parse_failed reason=invalid_json response_len=%s", len(text or ""))
        raise ParseError("Failed to parse AI response", raw_response=text, details=str(exc)) from exc

    if not isinstance(data, dict):
        logger.warning("tailored_resume_parse_failed reason=not_an_object response_len=%s", len(text or ""))
        raise ParseError(
            "Failed to parse AI response",
            raw_response=text,
            details=f"Expected a JSON object, got {type(data).__name__}",
        )

    try:
        return TailoredResume.model_validate(data)
    except PydanticValidationError as exc:
        logger.warning("tailored_resume_parse_failed reason=schema errors=%s", exc.error_count())
        raise ParseError(
            "AI response does not match the resume schema",
            raw_response=text,
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc
