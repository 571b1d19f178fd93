"""
Synthetic Test Generator - deterministic stand-in for the live model
"""
import copy
import logging
import uuid
from typing import Any, List, Optional, Tuple

from ..models.test_case import RequestConfig, RequestSpec, TestCase
from .archetypes import CATALOGUE, Archetype, archetype_for

logger = logging.getLogger(__name__)

USER_REQUESTED_COUNT = 3
DEFAULT_HEADERS = {"Content-Type": "application/json"}


class SyntheticTestGenerator:
    """
    Expands a pointer and a base request into a batch of tests.

    Every field except ``id`` is a pure function of
    ``(pointer, request_config, count)``.
    """

    def __init__(self, catalogue: Tuple[Archetype, ...] = CATALOGUE):
        self.catalogue = catalogue

    def generate(
        self,
        pointer: str,
        request_config: Optional[RequestConfig] = None,
        count: int = 10,
    ) -> List[TestCase]:
        """
        Generate ``count`` tests.

        Args:
            pointer: Natural language test pointer
            request_config: Base request the tests are derived from
            count: Number of tests to generate

        Returns:
            List of tests; the first three are user requested
        """
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")

        config = request_config or RequestConfig()
        pointer = pointer or ""
        logger.info(f"Generating {count} synthetic tests for {config.method} {config.path}")

        return [self._build_test(i, pointer, config) for i in range(count)]

    def _build_test(self, index: int, pointer: str, config: RequestConfig) -> TestCase:
        archetype = archetype_for(index, self.catalogue)
        body = archetype.mutate(copy.deepcopy(config.body), pointer)
        if body == config.body and archetype.kind != "user-pointer":
            logger.debug(f"Test {index} ({archetype.kind}): mutation had no effect on the body")

        headers = dict(config.headers) if config.headers else dict(DEFAULT_HEADERS)

        return TestCase(
            id=str(uuid.uuid4()),
            name=self._name_for(index, archetype, pointer),
            request=RequestSpec(
                method=config.method,
                path=config.path,
                headers=headers,
                body=body,
            ),
            tags=list(archetype.tags),
            priority=archetype.priority,
            run_mode=self._run_mode_for(index),
            user_requested=index < USER_REQUESTED_COUNT,
        )

    def _name_for(self, index: int, archetype: Archetype, pointer: str) -> str:
        if archetype.user_pointer:
            return f"Test {pointer} - variation {index + 1}"
        round_number = index // len(self.catalogue)
        if round_number:
            return f"{archetype.name} (round {round_number + 1})"
        return archetype.name

    @staticmethod
    def _run_mode_for(index: int) -> str:
        if index < USER_REQUESTED_COUNT:
            return "auto"
        return "auto" if index % 2 == 0 else "manual"


def generate(pointer: str, request_config: Any = None, count: int = 10) -> List[TestCase]:
    """Generate tests with the default catalogue; accepts a RequestConfig or a plain dict."""
    if isinstance(request_config, dict):
        request_config = RequestConfig(**request_config)
    return SyntheticTestGenerator().generate(pointer, request_config, count)
