"""
Planner Agent - Generates test cases from a pointer using LangChain or the synthetic generator
"""
import json
import time
from typing import Any, Dict, List, Optional

from langchain_community.chat_models import ChatOllama
from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate

from .base_agent import BaseAgent
from ..config import settings
from ..exceptions import GenerationError
from ..generation.normalize import parse_model_output
from ..generation.synthetic import SyntheticTestGenerator
from ..models.test_case import RequestConfig

SYSTEM_PROMPT = (
    "You are an expert API testing assistant. You generate comprehensive test cases in valid "
    "JSON format only. Never include markdown formatting or explanations, only return a JSON "
    'object with a "tests" array.'
)

USER_PROMPT = """You are an API testing expert. Generate {count} test variations based on the following:

Natural Language Test Pointer: "{pointer}"

API Request Configuration:
- Method: {method}
- Path: {path}
- Headers: {headers}
- Body: {body}

Generate {count} test cases that:
1. The first 3 tests MUST directly satisfy the user's pointer: "{pointer}"
2. Include edge cases, boundary conditions, type variations, missing fields, malformed data, no validation
3. Test for common vulnerabilities (injection, overflow, etc.)
4. Each test should have a descriptive name

Return a JSON object with a "tests" array containing test objects with this exact structure:
{{
  "tests": [
    {{
      "name": "descriptive-test-name",
      "request": {{
        "method": "{method}",
        "path": "{path}",
        "headers": {{...}},
        "body": {{...}}
      }},
      "tags": ["tag1", "tag2"],
      "user_requested": true/false,
      "run_mode": "auto" or "manual",
      "priority": "high", "medium", or "low"
    }}
  ]
}}

IMPORTANT:
- The first 3 tests must have "user_requested": true and directly test "{pointer}"
- Remaining tests should have "user_requested": false
- For tests that intentionally use invalid JSON, set request.body to a STRING containing the invalid JSON (do NOT return it as an object) and set request.headers["Content-Type"] = "text/plain" for that test.
- For tests with valid JSON object bodies, ensure request.headers["Content-Type"] = "application/json".
- Always return ONLY a valid JSON object with a "tests" array (no markdown or explanations)"""


def create_llm(provider: str, model: Optional[str] = None) -> Optional[BaseChatModel]:
    """Chat model for ``provider``; None for the synthetic ("mock") provider."""
    if provider == "mock":
        return None
    if provider == "ollama":
        return ChatOllama(
            model=model or settings.OLLAMA_TEXT_MODEL,
            base_url=settings.OLLAMA_HOST,
            temperature=settings.LLM_TEMPERATURE,
        )
    raise ValueError(f"Unknown LLM provider: {provider!r} (expected 'mock' or 'ollama')")


class PlannerAgent(BaseAgent):
    """
    Expands a pointer into a batch of tests.

    With a chat model the LangChain prompt is used and the reply is parsed and
    normalized; without one the deterministic synthetic generator runs.
    Tests are returned as plain dicts so that malformed model output can
    still reach the validator.
    """

    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        provider: Optional[str] = None,
        generator: Optional[SyntheticTestGenerator] = None,
    ):
        super().__init__(
            name="Planner",
            description="Generates test cases using LangChain or the synthetic generator"
        )
        self.provider = provider or settings.LLM_PROVIDER
        self.llm = llm if llm is not None else create_llm(self.provider)
        self.generator = generator or SyntheticTestGenerator()
        self.last_latency_ms = 0
        self.last_tokens_used = 0

    @property
    def model_name(self) -> str:
        if self.llm is None:
            return "synthetic"
        return getattr(self.llm, "model", None) or getattr(self.llm, "model_name", None) or type(self.llm).__name__

    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Execute test generation."""
        tests = await self.generate_tests(
            pointer=context.get("pointer", ""),
            request_config=context.get("request_config"),
            count=context.get("count", settings.DEFAULT_TEST_COUNT),
        )
        return {
            "test_cases": tests,
            "model": self.model_name,
            "latency_ms": self.last_latency_ms,
            "tokens_used": self.last_tokens_used,
        }

    async def generate_tests(
        self,
        pointer: str,
        request_config: Any = None,
        count: int = 12,
    ) -> List[Dict[str, Any]]:
        """
        Generate test cases for a pointer.

        Args:
            pointer: Natural language test pointer
            request_config: RequestConfig or dict with method/path/headers/body
            count: Number of tests to ask for

        Returns:
            List of test dicts

        Raises:
            GenerationError: the model call failed or its reply was unusable
        """
        if isinstance(request_config, dict):
            request_config = RequestConfig(**request_config)
        request_config = request_config or RequestConfig()

        self.log_info(f"Generating {count} tests with {self.model_name} for pointer '{pointer}'")
        started = time.monotonic()

        if self.llm is None:
            tests = [t.model_dump(mode="json") for t in self.generator.generate(pointer, request_config, count)]
            self.last_tokens_used = 0
        else:
            tests = await self._generate_with_langchain(pointer, request_config, count)

        self.last_latency_ms = int((time.monotonic() - started) * 1000)
        self.log_info(f"Generated {len(tests)} test cases in {self.last_latency_ms}ms")
        return tests

    async def _generate_with_langchain(
        self,
        pointer: str,
        request_config: RequestConfig,
        count: int
    ) -> List[Dict[str, Any]]:
        prompt_template = ChatPromptTemplate.from_messages([
            ("system", SYSTEM_PROMPT),
            ("human", USER_PROMPT),
        ])
        chain = prompt_template | self.llm

        try:
            response = await chain.ainvoke({
                "pointer": pointer,
                "count": count,
                "method": request_config.method,
                "path": request_config.path,
                "headers": json.dumps(request_config.headers, indent=2),
                "body": json.dumps(request_config.body, indent=2),
            })
        except Exception as e:
            self.log_error(f"LangChain generation failed: {e}")
            raise GenerationError(f"Model call to {self.model_name} failed", str(e)) from e

        usage = getattr(response, "usage_metadata", None) or {}
        self.last_tokens_used = usage.get("total_tokens", 0)

        content = response.content if hasattr(response, "content") else str(response)
        return parse_model_output(content if isinstance(content, str) else json.dumps(content))


def planner_for_model(model: str) -> PlannerAgent:
    """Planner for a model name; "synthetic" selects the deterministic generator."""
    if model == "synthetic":
        return PlannerAgent(provider="mock")
    return PlannerAgent(llm=create_llm("ollama", model), provider="ollama")
