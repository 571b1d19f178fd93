"""
Scenario archetypes for synthetic test generation.

Each archetype pairs its metadata (name template, priority, tags) with a
mutation function that turns a copy of the base request body into the
scenario's payload. Adding a scenario means appending an entry to
``CATALOGUE``; nothing else changes.

The order of ``CATALOGUE`` is part of the contract: indices 0-2 are the
user-pointer framings, and indices 3-9 put every required coverage
category (empty x2, injection x2, type, missing, extra) inside the first
ten generated tests.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from ..utils.helpers import is_number

logger = logging.getLogger(__name__)

# body, pointer -> body
Mutation = Callable[[Any, str], Any]

SQL_INJECTION_PAYLOAD = "'; DROP TABLE users; --"
XSS_PAYLOAD = '<script>alert("xss")</script>'
MAX_SAFE_INTEGER = 9007199254740991
EXTRA_FIELD = ("unexpectedField", "unexpected_value")


@dataclass(frozen=True)
class Archetype:
    """A named scenario template."""

    kind: str
    name: str
    priority: str
    tags: Tuple[str, ...]
    mutate: Mutation
    user_pointer: bool = False


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


def first_key(body: Any, predicate: Callable[[Any], bool]) -> Optional[str]:
    """First key of a mapping body whose value satisfies ``predicate``."""
    if not isinstance(body, dict):
        return None
    for key, value in body.items():
        if predicate(value):
            return key
    return None


def _replace_first(kind: str, predicate: Callable[[Any], bool], replace: Callable[[Any], Any]) -> Mutation:
    def mutate(body: Any, pointer: str) -> Any:
        key = first_key(body, predicate)
        if key is None:
            logger.debug("%s: no matching field in body, payload left unchanged", kind)
            return body
        body[key] = replace(body[key])
        return body

    return mutate


def _to_string(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _apply_pointer_cues(body: Any, pointer: str) -> Any:
    """Apply literal hints from the pointer text ("0"/"zero", "empty")."""
    text = pointer.lower()
    if "0" in text or "zero" in text:
        key = first_key(body, is_number)
        if key is not None:
            body[key] = 0
    if "empty" in text:
        key = first_key(body, _is_string)
        if key is not None:
            body[key] = ""
    return body


def _drop_first_field(body: Any, pointer: str) -> Any:
    if isinstance(body, dict) and body:
        del body[next(iter(body))]
    else:
        logger.debug("missing-field: body has no fields to drop")
    return body


def _add_extra_field(body: Any, pointer: str) -> Any:
    if body is None:
        body = {}
    if isinstance(body, dict):
        body[EXTRA_FIELD[0]] = EXTRA_FIELD[1]
    else:
        logger.debug("extra-field: body is not an object, payload left unchanged")
    return body


CATALOGUE: Tuple[Archetype, ...] = (
    # User-requested framings of the pointer
    Archetype("user-pointer", "direct", "high", ("user-requested", "direct"), _apply_pointer_cues, True),
    Archetype("user-pointer", "variation", "high", ("user-requested", "variation"), _apply_pointer_cues, True),
    Archetype("user-pointer", "edge-case", "high", ("user-requested", "edge-case"), _apply_pointer_cues, True),
    # Exploratory
    Archetype(
        "empty", "Test with empty string value", "medium",
        ("empty-value", "edge-case", "null"),
        _replace_first("empty", _is_string, lambda _: ""),
    ),
    Archetype(
        "empty-null", "Test with null value for field", "medium",
        ("empty-value", "null", "edge-case"),
        _replace_first("empty-null", _is_string, lambda _: None),
    ),
    Archetype(
        "injection-sql", "Test with SQL injection payload", "high",
        ("security", "injection", "sql"),
        _replace_first("injection-sql", _is_string, lambda _: SQL_INJECTION_PAYLOAD),
    ),
    Archetype(
        "injection-xss", "Test with XSS injection payload", "high",
        ("security", "injection", "xss"),
        _replace_first("injection-xss", _is_string, lambda _: XSS_PAYLOAD),
    ),
    Archetype(
        "type-coercion", "Test with string instead of number type", "medium",
        ("type-variation", "type"),
        _replace_first("type-coercion", is_number, _to_string),
    ),
    Archetype(
        "missing-field", "Test with missing required field", "medium",
        ("missing-field", "validation"),
        _drop_first_field,
    ),
    Archetype(
        "extra-field", "Test with unexpected extra field", "low",
        ("extra-field", "validation"),
        _add_extra_field,
    ),
    # Larger suites
    Archetype(
        "type-coercion-bool", "Test with boolean type instead of string", "medium",
        ("type-variation", "type", "boolean"),
        _replace_first("type-coercion-bool", _is_string, lambda _: True),
    ),
    Archetype(
        "boundary", "Test with boundary value 0", "high",
        ("boundary", "edge-case"),
        _replace_first("boundary", is_number, lambda _: 0),
    ),
    Archetype(
        "negative", "Test with negative number value", "medium",
        ("boundary", "negative"),
        _replace_first("negative", is_number, lambda _: -1),
    ),
    Archetype(
        "large-value", "Test with very large number value", "medium",
        ("boundary", "overflow"),
        _replace_first("large-value", is_number, lambda _: MAX_SAFE_INTEGER),
    ),
)


def archetype_for(index: int, catalogue: Tuple[Archetype, ...] = CATALOGUE) -> Archetype:
    """Archetype used for the test at ``index``; cycles once exhausted."""
    return catalogue[index % len(catalogue)]
