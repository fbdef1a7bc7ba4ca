"""
Translation of evaluation payloads into canonical JSON.

The analysis service emits its results as Python literal notation, e.g.
``{'Skills': {'Python': 90, 'Communication': None}}``. Records store the
canonical JSON form of that value and hand the parsed mapping back to callers.
Parsing is structural, so quote characters inside string values survive.
"""

import ast
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .logger import get_logger


CanonicalResult = Dict[str, Dict[str, Any]]
SCALAR_TYPES = (int, float, str, bool, type(None))


class TranslationFailure(ValueError):
    """Raised when an external payload cannot be translated."""
    pass


@dataclass
class ParseResult:
    """Outcome of reading canonical text: a value, or the reason there is none."""

    value: CanonicalResult = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _read_external(raw: str) -> Any:
    try:
        return ast.literal_eval(raw.strip())
    except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError) as e:
        literal_error = e

    # Already-canonical input (lowercase true/false/null) is accepted as-is
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        raise TranslationFailure(f"Unparsable result payload: {literal_error}") from literal_error


def to_canonical(raw: str) -> str:
    """
    Translate an external result payload into canonical JSON text.

    Args:
        raw: Payload in Python literal notation (canonical JSON is accepted too)

    Returns:
        Canonical JSON text. The same input always yields the same output and
        translating the output again returns it unchanged.

    Raises:
        TranslationFailure: If the payload is not a well-formed literal
    """
    value = _read_external(raw)
    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise TranslationFailure(f"Result payload has no JSON form: {e}") from e


def parse_result(canonical_text: Optional[str]) -> ParseResult:
    """Deserialize canonical text into a category -> attribute -> value mapping."""
    if canonical_text is None or not canonical_text.strip():
        return ParseResult(error="empty payload")
    try:
        value = json.loads(canonical_text)
    except (ValueError, RecursionError) as e:
        return ParseResult(error=f"invalid JSON: {e}")

    if not isinstance(value, dict):
        return ParseResult(error=f"expected an object at top level, got {type(value).__name__}")
    for category, attributes in value.items():
        if not isinstance(attributes, dict):
            return ParseResult(error=f"category '{category}' is not an object")
        for attribute, v in attributes.items():
            if not isinstance(v, SCALAR_TYPES):
                return ParseResult(error=f"attribute '{category}.{attribute}' is not a scalar")
    return ParseResult(value=value)


def parse(canonical_text: Optional[str]) -> CanonicalResult:
    """Like parse_result, but degrades to an empty mapping instead of reporting."""
    result = parse_result(canonical_text)
    if not result.ok:
        get_logger().warning("Degrading unreadable result to empty mapping", error=result.error)
    return result.value


def to_external(canonical_text: str) -> str:
    """Render canonical text back into the analysis service's literal notation."""
    return repr(parse(canonical_text))
