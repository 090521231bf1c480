"""Validate and parse structured payloads out of generation replies.

The model is asked for JSON but frequently wraps it in prose, so the parser
takes the first balanced ``{...}`` span and validates only that. Nothing
downstream should assume more than what :func:`parse_synthesis_response`
guarantees.
"""

import json
import math
from collections.abc import Mapping
from typing import Any, Optional

import structlog

from commitresume.errors import FormatError
from commitresume.models.analysis import SynthesisResult
from commitresume.models.resume import BulletPoint

logger = structlog.get_logger(__name__)

REQUIRED_KEYS = ("bulletPoints", "isTrivial")
REQUIRED_BULLET_FIELDS = ("text", "actionVerb", "businessImpact")


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the one at ``start``, ignoring braces in strings."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def extract_json_object(text: str) -> str:
    """Return the first balanced ``{...}`` span in ``text``.

    Raises:
        FormatError: If no balanced span exists
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is not None:
            return text[start : end + 1]
        start = text.find("{", start + 1)
    raise FormatError("No JSON object found in response")


def _confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, float(value)))


def _parse_bullet(index: int, raw: Any) -> BulletPoint:
    if not isinstance(raw, Mapping):
        raise FormatError(f"Bullet point {index} is not an object")

    values = {}
    for field in REQUIRED_BULLET_FIELDS:
        value = raw.get(field)
        if not isinstance(value, str) or not value.strip():
            raise FormatError(f"Bullet point {index} is missing {field}")
        values[field] = value.strip()

    return BulletPoint(
        text=values["text"],
        action_verb=values["actionVerb"],
        business_impact=values["businessImpact"],
        confidence=_confidence(raw.get("confidence")),
    )


def _parse_payload(data: Any) -> SynthesisResult:
    if not isinstance(data, Mapping):
        raise FormatError("Response JSON is not an object")

    missing = [key for key in REQUIRED_KEYS if key not in data]
    if missing:
        raise FormatError(f"Missing required bullet point fields: {', '.join(missing)}")

    is_trivial = data["isTrivial"]
    if not isinstance(is_trivial, bool):
        raise FormatError("isTrivial must be a boolean")

    reasoning = data.get("reasoning")
    reasoning = reasoning if isinstance(reasoning, str) else None

    if is_trivial:
        return SynthesisResult(bullet_points=[], is_trivial=True, reasoning=reasoning)

    raw_bullets = data["bulletPoints"]
    if not isinstance(raw_bullets, list):
        raise FormatError("bulletPoints must be a list")

    bullets = [_parse_bullet(index, raw) for index, raw in enumerate(raw_bullets)]
    return SynthesisResult(bullet_points=bullets, is_trivial=False, reasoning=reasoning)


def parse_synthesis_response(raw_text: str) -> SynthesisResult:
    """Parse a generation reply into validated bullet points.

    Args:
        raw_text: Free-form model output expected to embed one JSON object

    Returns:
        SynthesisResult; trivial replies carry no bullet points

    Raises:
        FormatError: If no JSON object is found, it does not decode, or it
            fails validation. A malformed batch is rejected as a whole.
    """
    if not isinstance(raw_text, str):
        raise FormatError("Response is not text")

    try:
        data = json.loads(extract_json_object(raw_text))
        return _parse_payload(data)
    except json.JSONDecodeError as e:
        logger.warning("synthesis_response_invalid", reason=f"invalid JSON: {e.msg}", preview=raw_text[:200])
        raise FormatError(f"Invalid bullet point response format: {e.msg}") from e
    except FormatError as e:
        logger.warning("synthesis_response_invalid", reason=str(e), preview=raw_text[:200])
        raise
