"""
Turning free-form model output into tests.
"""
import json
import re
import uuid
from typing import Any, Dict, List

from ..exceptions import GenerationError
from ..utils.helpers import truncate_text

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def _content_type(headers: Dict[str, Any]) -> Any:
    return headers.get("Content-Type") or headers.get("content-type")


def normalize_test(test: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fix up headers for the body type and make sure the test has an id.

    String bodies (deliberately malformed JSON) are sent as text/plain unless
    a non-JSON content type is already set; mapping or list bodies get
    application/json when no content type is present.

    Raises:
        GenerationError: request or request.headers is not an object
    """
    name = test.get("name")
    request = test.get("request") or {}
    if not isinstance(request, dict):
        raise GenerationError(
            "Model returned a malformed test",
            f"request of '{name}' is not an object: {truncate_text(repr(request), 200)}",
        )
    headers = request.get("headers") or {}
    if not isinstance(headers, dict):
        raise GenerationError(
            "Model returned a malformed test",
            f"request.headers of '{name}' is not an object: {truncate_text(repr(headers), 200)}",
        )

    request = dict(request)
    headers = dict(headers)
    body = request.get("body")

    if isinstance(body, str):
        content_type = _content_type(headers)
        if not content_type or "json" in str(content_type).lower():
            headers.pop("content-type", None)
            headers["Content-Type"] = "text/plain"
    elif isinstance(body, (dict, list)):
        if not _content_type(headers):
            headers["Content-Type"] = "application/json"

    request["headers"] = headers
    normalized = dict(test)
    normalized["id"] = test.get("id") or str(uuid.uuid4())
    normalized["request"] = request
    return normalized


def parse_model_output(text: str) -> List[Dict[str, Any]]:
    """
    Parse the model's reply into a list of normalized test dicts.

    Raises:
        GenerationError: reply is not JSON or has no ``tests`` list
    """
    text = text or ""
    match = _FENCE_RE.search(text)
    payload = match.group(1).strip() if match else text.strip()

    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as e:
        raise GenerationError(
            "Failed to parse model response as JSON",
            f"{e.msg}; response: {truncate_text(text, 300)}",
        ) from e

    if not isinstance(parsed, dict) or not isinstance(parsed.get("tests"), list):
        raise GenerationError(
            "Model response missing tests array",
            truncate_text(json.dumps(parsed, default=str), 300),
        )

    return [normalize_test(t) for t in parsed["tests"] if isinstance(t, dict)]
