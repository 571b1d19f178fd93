"""
Orchestrator Agent - Runs queued tests sequentially and keeps the run log
"""
from typing import Any, Dict, List, Optional

from .base_agent import BaseAgent
from .executor_agent import ExecutorAgent, Transport
from .ranker_agent import RankerAgent
from ..config import settings
from ..models.execution_result import RunLog, SuiteRun
from ..transport.mock_api import MockApi
from ..transport.relay import RelayTransport
from ..utils.helpers import timestamp_now


def default_transport(base_url: Optional[str] = None) -> Transport:
    """Relay to ``base_url`` (or TARGET_BASE_URL) when set, otherwise the mock API."""
    base_url = base_url if base_url is not None else settings.TARGET_BASE_URL
    if base_url:
        return RelayTransport(base_url)
    return MockApi()


class OrchestratorAgent(BaseAgent):
    """
    Orchestrates suite execution:
    - Asks the Ranker for the run queue
    - Runs each queued test through the Executor, one at a time
    - Appends every run log to a caller-owned list
    - Replays arbitrary requests on demand
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        ranker: Optional[RankerAgent] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(
            name="Orchestrator",
            description="Runs test suites sequentially"
        )
        self.transport = transport or default_transport()
        self.ranker = ranker or RankerAgent()
        self.executor = ExecutorAgent(self.transport, timeout=timeout)

    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Execute orchestration."""
        suite = await self.run_suite(context.get("test_cases", []), context.get("run_logs"))
        return {"suite_run": suite}

    async def run_suite(self, tests: List[Any], logs: Optional[List[RunLog]] = None) -> SuiteRun:
        """
        Run a suite sequentially.

        Args:
            tests: Test dicts or TestCase models
            logs: Run log to append to; a new list when omitted

        Returns:
            SuiteRun holding this run's logs and the names of skipped tests
        """
        logs = logs if logs is not None else []
        queue, skipped = self.ranker.build_queue(tests)
        self.log_info(f"Running suite: {len(queue)} queued, {len(skipped)} manual skipped")

        started_at = timestamp_now()
        suite_logs = []
        for test in queue:
            log = await self.executor.execute_test(test)
            logs.append(log)
            suite_logs.append(log)

        self.log_info(f"Suite completed: {len(suite_logs)} requests executed")
        return SuiteRun(
            logs=suite_logs,
            skipped=[t.get("name", "") for t in skipped],
            started_at=started_at,
            finished_at=timestamp_now(),
        )

    async def run_test(self, test: Any, logs: Optional[List[RunLog]] = None) -> RunLog:
        """Run a single test regardless of its run mode."""
        log = await self.executor.execute_test(test)
        if logs is not None:
            logs.append(log)
        return log

    async def replay(self, request: Dict[str, Any], logs: Optional[List[RunLog]] = None) -> RunLog:
        """Re-send a recorded (possibly edited) request; logged as "replay"."""
        self.log_info(f"Replaying {request.get('method', 'GET')} {request.get('path', '/')}")
        log = await self.executor.execute_test({"request": request}, test_name="replay")
        if logs is not None:
            logs.append(log)
        return log
