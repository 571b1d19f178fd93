"""
Relay transport - forwards a test request to a real API with httpx
"""
import json
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..models.execution_result import ApiResponse
from ..utils.helpers import to_plain

logger = logging.getLogger(__name__)

BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def build_url(base_url: str, path: str) -> str:
    path = path or "/"
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{(base_url or '').rstrip('/')}{path}"


class RelayTransport:
    """
    Sends ``{method, path, headers, body}`` to ``base_url + path``.

    Network failures are returned as ``ApiResponse(error=...)`` rather than
    raised, so a broken target shows up as a result the caller can replay.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS
        self.transport = transport

    def _prepare(self, request: Dict[str, Any]) -> Dict[str, Any]:
        method = str(request.get("method") or "GET").upper()
        headers = dict(request.get("headers") or {})
        body = request.get("body")
        kwargs: Dict[str, Any] = {"method": method, "headers": headers}

        if method in BODY_METHODS and body is not None:
            if isinstance(body, str):
                # raw string, e.g. deliberately invalid JSON
                kwargs["content"] = body
            else:
                kwargs["content"] = json.dumps(body)
                if "Content-Type" not in headers and "content-type" not in headers:
                    headers["Content-Type"] = "application/json"
        return kwargs

    async def execute(self, request: Any) -> ApiResponse:
        """
        Perform the request.

        Args:
            request: dict or RequestSpec

        Returns:
            ApiResponse; JSON bodies are parsed when the content type says so
        """
        request = to_plain(request)
        url = build_url(self.base_url, request.get("path"))
        kwargs = self._prepare(request)
        logger.info(f"Relaying {kwargs['method']} {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(url=url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Relay request to {url} failed: {e!r}")
            return ApiResponse(error=f"Relay request failed: {e.__class__.__name__}: {e}", url=url)

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                body = response.json()
            except ValueError:
                body = response.text
        else:
            body = response.text

        return ApiResponse(
            status=response.status_code,
            body=body,
            headers={"content-type": content_type},
            url=url,
        )
