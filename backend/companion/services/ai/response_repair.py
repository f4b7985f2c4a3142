"""Extract structured payloads from free-form model replies."""
from __future__ import annotations

import json
import re
from typing import Any, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from companion.services.ai.errors import EmptyResponse, MalformedResponse

T = TypeVar("T")

_FENCED_JSON = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_CLOSERS = {"{": "}", "[": "]"}


def parse_model_json(text: str | None) -> Any:
    """
    Decode the JSON payload contained in a model reply.

    A fenced ```json block wins over anything else in the text. Without a fence, the
    payload is the slice from the first opening brace or bracket to the last matching
    closer, so prose around it is ignored.
    """
    if not text or not text.strip():
        raise EmptyResponse()

    candidate = _extract_candidate(text)
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedResponse(f"Model reply is not valid JSON: {exc}", raw_text=text) from exc


def parse_model_output(text: str | None, shape: Type[T] | Any) -> T:
    """Decode a model reply and validate it against a pydantic model or type."""
    return validate_payload(parse_model_json(text), shape, raw_text=text or "")


def validate_payload(payload: Any, shape: Type[T] | Any, *, raw_text: str) -> T:
    """Validate an already-decoded payload; missing or mistyped fields count as malformed."""
    try:
        if isinstance(shape, type) and issubclass(shape, BaseModel):
            return shape.model_validate(payload)
        return TypeAdapter(shape).validate_python(payload)
    except ValidationError as exc:
        raise MalformedResponse(
            f"Model reply is missing required fields ({exc.error_count()} errors)",
            raw_text=raw_text,
        ) from exc


def _extract_candidate(text: str) -> str:
    fenced = _FENCED_JSON.search(text)
    if fenced:
        return fenced.group(1).strip()

    starts = [idx for idx in (text.find("{"), text.find("[")) if idx != -1]
    if not starts:
        return text.strip()
    start = min(starts)
    end = text.rfind(_CLOSERS[text[start]])
    if end <= start:
        return text[start:].strip()
    return text[start : end + 1]
