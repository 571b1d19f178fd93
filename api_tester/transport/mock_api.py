"""
Mock API - simulated target with fixed business rules per path
"""
import asyncio
import logging
import random
from typing import Any, Dict, Optional, Tuple

from ..config import settings
from ..models.execution_result import ApiResponse
from ..utils.helpers import is_number, to_plain

logger = logging.getLogger(__name__)

JSON_HEADERS = {"content-type": "application/json"}


class MockApi:
    """
    Stand-in for a real API.

    Simulated failures (4xx/5xx) come back as ordinary responses. The
    zero-amount branch on ``/orders`` is random on purpose; pass a seeded
    ``rng`` to make it reproducible.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        delay_range_ms: Optional[Tuple[int, int]] = None,
    ):
        self.rng = rng or random.Random(seed)
        if delay_range_ms is None:
            delay_range_ms = (settings.MOCK_DELAY_MIN_MS, settings.MOCK_DELAY_MAX_MS)
        self.delay_range_ms = delay_range_ms

    async def execute(self, request: Any) -> ApiResponse:
        """
        Answer a request after a short artificial delay.

        Args:
            request: dict or RequestSpec with ``path`` and ``body``

        Returns:
            ApiResponse with status, body and optional headers
        """
        request = to_plain(request)
        path = request.get("path")
        body = request.get("body")
        logger.debug(f"Mock request {request.get('method', 'POST')} {path} body={body!r}")

        low, high = self.delay_range_ms
        delay = self.rng.uniform(low, high) if high > 0 else 0
        if delay:
            await asyncio.sleep(delay / 1000)

        if path == "/orders":
            return self._orders(body)
        if path == "/users":
            return self._users(body)

        logger.debug("Default response")
        return ApiResponse(status=200, body={})

    def _orders(self, body: Any) -> ApiResponse:
        if isinstance(body, str) and not body.strip().endswith("]"):
            logger.warning("Truncated JSON body for /orders")
            return ApiResponse(
                status=400,
                body="<html>Bad request</html>",
                headers={"content-type": "text/html"},
            )

        fields: Dict[str, Any] = body if isinstance(body, dict) else {}
        amount = fields.get("amount")
        if is_number(amount) and amount == 0:
            if self.rng.random() > 0.5:
                logger.error("Simulating 500 for amount=0")
                return ApiResponse(status=500, body={"error": "server error processing zero amount"})
            logger.info("Returning 400 for amount=0")
            return ApiResponse(status=400, body={"error": "amount must be > 0"})

        if fields.get("currency") == "XYZ":
            logger.info("Invalid currency XYZ")
            return ApiResponse(status=400, body={"error": "invalid currency"})

        items = fields.get("items")
        if isinstance(items, list) and not items:
            logger.info("Empty items list")
            return ApiResponse(status=400, body={"error": "items required"})

        order_id = f"ord_{self.rng.randint(0, 9999)}"
        logger.info(f"Order accepted: {order_id}")
        return ApiResponse(status=201, body={"id": order_id, "accepted": True}, headers=dict(JSON_HEADERS))

    def _users(self, body: Any) -> ApiResponse:
        fields: Dict[str, Any] = body if isinstance(body, dict) else {}
        email = fields.get("email")
        if not email:
            logger.warning("Missing email, returning 500 (simulated server bug)")
            return ApiResponse(status=500, body={"error": "missing email (simulated server bug)"})
        if email == "duplicate@example.com":
            logger.info("Duplicate email")
            return ApiResponse(status=409, body={"error": "duplicate"})

        user_id = f"user_{self.rng.randint(0, 9999)}"
        logger.info(f"User created: {user_id}")
        return ApiResponse(status=201, body={"id": user_id})
