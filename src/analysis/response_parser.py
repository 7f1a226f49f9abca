# src/analysis/response_parser.py — v1
"""Extract and validate the JSON payload embedded in a model answer.

Steps:
  1. Strip a leading/trailing markdown code fence.
  2. Slice from the first '{' to the last '}'.
  3. Parse as JSON.
  4. Validate against a pydantic schema.

Each failure raises a MalformedResponse subclass carrying the raw text.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# A response this close to the output cap was probably cut off.
TRUNCATION_MARGIN = 6

DEFAULT_MAX_OUTPUT_TOKENS = 4096


class MalformedResponse(Exception):
    """The model answer could not be turned into a trusted result."""

    def __init__(self, message: str, raw_text: str):
        self.raw_text = raw_text
        super().__init__(message)


class NoJsonFound(MalformedResponse):
    """No '{' ... '}' span in the answer."""

    def __init__(self, raw_text: str):
        super().__init__("Response does not contain valid JSON object", raw_text)


class InvalidJson(MalformedResponse):
    """The extracted span is not parseable JSON."""

    def __init__(self, detail: str, raw_text: str, possibly_truncated: bool):
        self.detail = detail
        self.possibly_truncated = possibly_truncated
        message = f"JSON parsing failed: {detail}."
        if possibly_truncated:
            message += " Response may be truncated or contain invalid characters."
        super().__init__(message, raw_text)


class SchemaViolation(MalformedResponse):
    """A required field is missing, mistyped or outside its enumeration.

    ``field`` names the first offending field (dotted path for nested
    values, e.g. ``matches.0.confidence``); ``fields`` lists all of them.
    """

    def __init__(self, fields: list[str], detail: str, raw_text: str):
        self.fields = fields
        self.field = fields[0]
        self.detail = detail
        super().__init__(f"Invalid {', '.join(fields)} field: {detail}", raw_text)


def strip_code_fence(text: str) -> str:
    """Remove a ```json / ``` wrapper the model sometimes adds."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[len("```"):]
    if cleaned.endswith("```"):
        cleaned = cleaned[: -len("```")]
    return cleaned.strip()


def is_possibly_truncated(raw_text: str, max_output_tokens: int) -> bool:
    """Heuristic: answer length within a few units of the output cap."""
    return len(raw_text) >= max_output_tokens - TRUNCATION_MARGIN


def extract_json_payload(
    raw_text: str, max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
) -> dict[str, Any]:
    """Return the JSON object embedded in a model answer.

    Raises:
        NoJsonFound: If no brace-delimited span exists.
        InvalidJson: If the span does not parse, or is not an object.
    """
    cleaned = strip_code_fence(raw_text)

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first == -1 or last == -1 or first >= last:
        logger.error("No valid JSON braces found in response")
        raise NoJsonFound(raw_text)

    json_string = cleaned[first : last + 1]
    logger.debug("Extracted JSON string (%d chars)", len(json_string))

    truncated = is_possibly_truncated(raw_text, max_output_tokens)
    if truncated:
        logger.warning("Response may be truncated - close to token limit")

    try:
        payload = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise InvalidJson(str(e), raw_text, truncated) from e

    if not isinstance(payload, dict):
        raise InvalidJson("top-level value is not an object", raw_text, truncated)
    return payload


def extract_and_validate(
    raw_text: str,
    schema: type[ModelT],
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
) -> ModelT:
    """Extract the JSON payload and validate it into ``schema``.

    Raises:
        NoJsonFound, InvalidJson, SchemaViolation: see MalformedResponse.
    """
    logger.debug("Raw AI response: %s", raw_text[:1000])
    try:
        payload = extract_json_payload(raw_text, max_output_tokens)
        try:
            result = schema.model_validate(payload)
        except ValidationError as e:
            raise _schema_violation(e, raw_text) from e
    except MalformedResponse as e:
        logger.error("Error parsing AI response: %s", e)
        logger.debug("Full response text: %s", raw_text)
        raise

    logger.info("Response validation passed (%s)", schema.__name__)
    return result


def _schema_violation(error: ValidationError, raw_text: str) -> SchemaViolation:
    # Present-but-invalid values are reported ahead of absent fields.
    errors = sorted(error.errors(), key=lambda err: err["type"] == "missing")
    fields = [
        ".".join(str(part) for part in err["loc"]) or "<root>" for err in errors
    ]
    return SchemaViolation(fields, errors[0]["msg"], raw_text)
