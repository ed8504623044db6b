"""Extracting and validating JSON payloads from free-text provider replies."""

import json
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from saligo.errors import ErrorCode, SaligoError

T = TypeVar("T", bound=BaseModel)

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
PREVIEW_CHARS = 200


@dataclass(frozen=True)
class Parsed(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    message: str
    field: str | None = None
    preview: str = ""

    def to_error(self, *, provider: str | None = None) -> SaligoError:
        details: dict[str, Any] = {}
        if self.field:
            details["field"] = self.field
        if self.preview:
            details["preview"] = self.preview
        return SaligoError(
            ErrorCode.INVALID_RESPONSE, self.message, provider=provider, details=details
        )


ParseResult = Parsed[T] | Invalid


def extract_json(text: str) -> dict[str, Any] | Invalid:
    """Extract a JSON object from a reply that may wrap it in prose.

    The outermost {...} span is tried first, then the raw text.

    Args:
        text: Raw reply text

    Returns:
        The decoded object, or Invalid with a preview of the reply
    """
    candidate = text.strip()
    match = JSON_OBJECT_PATTERN.search(candidate)
    if match:
        candidate = match.group(0)

    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as first_error:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            return Invalid(
                f"Invalid JSON response: {first_error.msg}",
                preview=text[:PREVIEW_CHARS],
            )

    if not isinstance(payload, dict):
        return Invalid("Invalid response: not a JSON object", preview=text[:PREVIEW_CHARS])
    return payload


def validate_payload(payload: dict[str, Any], schema: type[T]) -> ParseResult:
    """Validate a decoded payload, reporting the first failing field."""
    try:
        return Parsed(schema.model_validate(payload))
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        message = first["msg"]
        if field:
            message = f"Invalid response: field '{field}': {message}"
        else:
            message = f"Invalid response: {message}"
        return Invalid(message, field=field)


def parse_reply(text: str, schema: type[T]) -> ParseResult:
    payload = extract_json(text)
    if isinstance(payload, Invalid):
        return payload
    return validate_payload(payload, schema)
