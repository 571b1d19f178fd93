"""
Ranker Agent - Orders tests into the execution queue
"""
from typing import Any, Dict, List, Optional, Tuple

from .base_agent import BaseAgent
from ..utils.helpers import to_plain

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


class RankerAgent(BaseAgent):
    """
    Builds the run queue for a suite.

    User-requested tests run first, then the remaining tests, each group in
    its original order. Manual tests never run unattended and are reported
    as skipped.
    """

    def __init__(self):
        super().__init__(
            name="Ranker",
            description="Orders tests for sequential execution"
        )

    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Execute queue planning."""
        queue, skipped = self.build_queue(context.get("test_cases", []))
        return {"queue": queue, "skipped": skipped}

    def build_queue(self, tests: List[Any]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """
        Split tests into the run queue and the skipped manual tests.

        Args:
            tests: Test dicts or TestCase models

        Returns:
            (queue, skipped)
        """
        tests = [to_plain(t) for t in tests]
        ordered = [t for t in tests if t.get("user_requested")]
        ordered += [t for t in tests if not t.get("user_requested")]

        queue = []
        skipped = []
        for test in ordered:
            if test.get("run_mode") == "manual":
                self.log_debug(f"Skipping manual test '{test.get('name')}'")
                skipped.append(test)
            else:
                queue.append(test)

        self.log_info(f"Queued {len(queue)} tests, skipped {len(skipped)} manual tests")
        return queue, skipped

    def merge_tests(self, existing: List[Dict[str, Any]], generated: List[Any]) -> List[Dict[str, Any]]:
        """
        Put newly generated tests in front of the existing ones.

        Generated tests whose name is already present are dropped.
        """
        names = [t.get("name") for t in existing]
        fresh = [to_plain(t) for t in generated if to_plain(t).get("name") not in names]
        self.log_info(f"Merging {len(fresh)} new tests into {len(existing)} existing")
        return fresh + list(existing)

    def rank_by_priority(self, tests: List[Any]) -> List[Dict[str, Any]]:
        """Stable sort by priority (high first) for display; run order comes from build_queue."""
        tests = [to_plain(t) for t in tests]
        return sorted(tests, key=lambda t: PRIORITY_ORDER.get(t.get("priority"), len(PRIORITY_ORDER)))

    def toggle_run_mode(self, tests: List[Dict[str, Any]], test_id: str) -> Optional[Dict[str, Any]]:
        """
        Flip a stored test between auto and manual, in place.

        Returns:
            The updated test, or None when no test has that id
        """
        test = next((t for t in tests if t.get("id") == test_id), None)
        if test is None:
            return None
        test["run_mode"] = "auto" if test.get("run_mode") == "manual" else "manual"
        self.log_info(f"Test '{test.get('name')}' is now {test['run_mode']}")
        return test
