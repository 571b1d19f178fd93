"""
Structural validation of generated tests.

Works on untyped data so it can report on anything a generator returns.
Malformed input is reported, never raised.
"""
import json
import re
from typing import Any, Dict, List, Optional, Sequence

from ..config import StructureConfig
from ..models.report import BatchValidation, ValidationResult
from ..utils.helpers import to_plain

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
# RFC 3986 path/query characters, plus braces for templated paths
PATH_RE = re.compile(r"^/[a-zA-Z0-9\-._~:/?#\[\]@!$&'()*+,;=%{}]*$")


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def validate_test(test: Any, config: Optional[StructureConfig] = None) -> ValidationResult:
    """
    Validate a single test object.

    Every check runs; all failures are collected.

    Args:
        test: Test dict or TestCase
        config: Allowed values, defaults when omitted

    Returns:
        ValidationResult with the list of errors
    """
    config = config or StructureConfig()
    test = to_plain(test)
    errors: List[str] = []

    test_id = test.get("id")
    if not _is_non_empty_str(test_id):
        errors.append("id: must be a non-empty string")
    elif not UUID_RE.match(test_id):
        errors.append("id: must be a valid UUID")

    if not _is_non_empty_str(test.get("name")):
        errors.append("name: must be a non-empty string")

    request = test.get("request")
    if not isinstance(request, dict):
        errors.append("request: must be an object")
    else:
        if request.get("method") not in config.valid_methods:
            errors.append(f"request.method: must be one of {', '.join(config.valid_methods)}")
        if not _is_non_empty_str(request.get("path")):
            errors.append("request.path: must be a non-empty string")
        if "headers" in request and request["headers"] is not None and not isinstance(request["headers"], dict):
            errors.append("request.headers: must be an object if provided")

    tags = test.get("tags")
    if not isinstance(tags, list):
        errors.append("tags: must be an array")
    elif not all(isinstance(t, str) for t in tags):
        errors.append("tags: all elements must be strings")

    if test.get("priority") not in config.valid_priorities:
        errors.append(f"priority: must be one of {', '.join(config.valid_priorities)}")

    if test.get("run_mode") not in config.valid_run_modes:
        errors.append(f"run_mode: must be one of {', '.join(config.valid_run_modes)}")

    if "user_requested" in test and not isinstance(test["user_requested"], bool):
        errors.append("user_requested: must be a boolean if provided")

    return ValidationResult(valid=not errors, errors=errors)


def validate_tests(tests: Sequence[Any], config: Optional[StructureConfig] = None) -> BatchValidation:
    """Validate a batch; errors are prefixed ``Test <index>: ``."""
    errors: List[str] = []
    invalid_count = 0

    for index, test in enumerate(tests):
        result = validate_test(test, config)
        if not result.valid:
            invalid_count += 1
            errors.extend(f"Test {index}: {e}" for e in result.errors)

    return BatchValidation(
        valid=invalid_count == 0,
        errors=errors,
        valid_count=len(tests) - invalid_count,
        invalid_count=invalid_count,
    )


def check_required_fields(test: Any, config: Optional[StructureConfig] = None) -> Dict[str, Any]:
    """Report which top-level fields are absent."""
    config = config or StructureConfig()
    test = to_plain(test)
    missing = [f for f in config.required_fields if f not in test]
    return {"has_all_fields": not missing, "missing_fields": missing}


def is_valid_method(method: Any, config: Optional[StructureConfig] = None) -> bool:
    config = config or StructureConfig()
    return method in config.valid_methods


def validate_path(path: Any) -> Dict[str, Any]:
    if not _is_non_empty_str(path):
        return {"valid": False, "reason": "Path must be a non-empty string"}
    if not path.startswith("/"):
        return {"valid": False, "reason": "Path must start with /"}
    if not PATH_RE.match(path):
        return {"valid": False, "reason": "Path contains invalid characters"}
    return {"valid": True}


def validate_headers(headers: Any) -> Dict[str, Any]:
    # Headers are optional
    if not isinstance(headers, dict):
        return {"valid": True, "invalid_headers": []}
    invalid = [key for key, value in headers.items() if not isinstance(value, str)]
    return {"valid": not invalid, "invalid_headers": invalid}


def validate_body(body: Any) -> Dict[str, Any]:
    if body is None:
        return {"valid": True}
    try:
        json.dumps(body)
    except (TypeError, ValueError):
        return {"valid": False, "reason": "Body is not JSON serializable"}
    return {"valid": True}


def validate_request(request: Any) -> Dict[str, Any]:
    """Path, headers and body checks combined; reasons are collected in ``errors``."""
    if not isinstance(request, dict):
        return {"valid": False, "errors": ["request: must be an object"]}

    errors: List[str] = []
    path = validate_path(request.get("path"))
    if not path["valid"]:
        errors.append(f"path: {path['reason']}")
    headers = validate_headers(request.get("headers"))
    if not headers["valid"]:
        errors.append(f"headers: non-string values for {', '.join(headers['invalid_headers'])}")
    body = validate_body(request.get("body"))
    if not body["valid"]:
        errors.append(f"body: {body['reason']}")

    return {"valid": not errors, "errors": errors}
