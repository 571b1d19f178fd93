"""
Executor Agent - Executes a single request through a transport and records the run log
"""
import asyncio
from typing import Any, Dict, Optional, Protocol

from .base_agent import BaseAgent
from ..config import settings
from ..models.execution_result import ApiResponse, RunLog
from ..utils.helpers import duration_ms, format_duration, timestamp_now, to_plain


class Transport(Protocol):
    async def execute(self, request: Any) -> ApiResponse:
        ...


class ExecutorAgent(BaseAgent):
    """
    Executes one test request.

    Simulated 4xx/5xx are recorded as they come back. Timeouts and
    unexpected transport exceptions become an error response for that test
    only, so one broken request never stops a suite.
    """

    def __init__(self, transport: Transport, agent_id: str = "executor_1", timeout: Optional[float] = None):
        super().__init__(
            name=f"Executor_{agent_id}",
            description="Executes test requests through a transport"
        )
        self.agent_id = agent_id
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS

    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a test case."""
        log = await self.execute_test(context.get("test_case", {}))
        return {"run_log": log}

    async def execute_test(self, test_case: Any, test_name: Optional[str] = None) -> RunLog:
        """
        Send the test's request and build its run log.

        Args:
            test_case: Test dict or TestCase
            test_name: Overrides the name recorded in the log (e.g. "replay")

        Returns:
            RunLog with request, response and timing
        """
        test_case = to_plain(test_case)
        request = dict(test_case.get("request") or {})
        name = test_name or test_case.get("name") or "Unknown Test"

        self.log_info(f"Executing '{name}': {request.get('method', 'GET')} {request.get('path', '/')}")
        started_at = timestamp_now()
        response = await self.send(request)
        finished_at = timestamp_now()
        elapsed = duration_ms(started_at, finished_at)

        if response.error:
            self.log_error(f"'{name}' transport failure: {response.error}")
        else:
            self.log_info(f"'{name}' returned {response.status} in {format_duration(elapsed)}")

        return RunLog(
            test_id=test_case.get("id"),
            test_name=name,
            started_at=started_at,
            finished_at=finished_at,
            duration_ms=elapsed,
            request=request,
            response=response,
        )

    async def send(self, request: Dict[str, Any]) -> ApiResponse:
        """Call the transport with the per-request timeout."""
        try:
            return await asyncio.wait_for(self.transport.execute(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            return ApiResponse(error=f"Request timed out after {self.timeout}s")
        except Exception as e:
            self.log_error(f"Transport raised {e.__class__.__name__}: {e}")
            return ApiResponse(error=f"{e.__class__.__name__}: {e}")
