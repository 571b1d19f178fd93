"""
FastAPI Main Application - API Pointer Tester
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import EvalConfig, settings
from .agents.analyzer_agent import AnalyzerAgent
from .agents.executor_agent import Transport
from .agents.orchestrator_agent import OrchestratorAgent, default_transport
from .agents.planner_agent import PlannerAgent, planner_for_model
from .agents.ranker_agent import RankerAgent
from .exceptions import GenerationError
from .transport.relay import RelayTransport
from .models.test_case import RequestConfig

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.APP_NAME,
    description="Expands a test pointer into API request variations, runs them and triages failures",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Session storage (in-memory, lost on restart)
sessions: Dict[str, Dict[str, Any]] = {}


# Request/Response Models
class GenerateTestsRequest(BaseModel):
    pointer: str = Field(..., min_length=1)
    request_config: RequestConfig = Field(default_factory=RequestConfig)
    count: int = Field(default=settings.DEFAULT_TEST_COUNT, ge=1, le=200)
    session_id: Optional[str] = None  # merge into an existing session


class EvaluateRequest(BaseModel):
    session_id: str
    golden_tests: Optional[List[Dict[str, Any]]] = None
    config: Optional[EvalConfig] = None


class RunTestRequest(BaseModel):
    session_id: str
    test_id: str


class SessionRequest(BaseModel):
    session_id: str


class ReplayRequest(BaseModel):
    session_id: str
    request: Dict[str, Any]


class CompareModelsRequest(BaseModel):
    pointer: str = Field(..., min_length=1)
    request_config: RequestConfig = Field(default_factory=RequestConfig)
    count: int = Field(default=settings.DEFAULT_TEST_COUNT, ge=1, le=200)
    models: List[str] = Field(default_factory=lambda: ["synthetic"], min_length=1)
    golden_tests: Optional[List[Dict[str, Any]]] = None


# Dependencies
def get_planner() -> PlannerAgent:
    return PlannerAgent()


def get_transport() -> Transport:
    return default_transport()


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    return None


def get_analyzer() -> AnalyzerAgent:
    return AnalyzerAgent()


def get_planner_factory() -> Callable[[str], PlannerAgent]:
    return planner_for_model


def _get_session(session_id: str) -> Dict[str, Any]:
    if session_id not in sessions:
        raise HTTPException(status_code=404, detail="Session not found")
    return sessions[session_id]


def _require_tests(session: Dict[str, Any]):
    if not session.get("test_cases"):
        raise HTTPException(status_code=400, detail="No test cases generated yet")


def _session_transport(
    session: Dict[str, Any],
    transport: Transport,
    http_transport: Optional[httpx.AsyncBaseTransport],
) -> Transport:
    """Relay to the session's own base_url when its request config has one."""
    base_url = (session.get("request_config") or {}).get("base_url")
    if base_url:
        return RelayTransport(base_url, transport=http_transport)
    return transport


# API Endpoints
@app.get("/")
async def root():
    return {"message": "API Pointer Tester", "docs": "/docs"}


@app.post("/api/generate-tests")
async def generate_tests(request: GenerateTestsRequest, planner: PlannerAgent = Depends(get_planner)):
    """
    Generate tests for a pointer.
    Creates a session, or merges the new tests into an existing one.
    """
    if request.session_id:
        session = _get_session(request.session_id)
    else:
        session_id = str(uuid.uuid4())[:8]
        session = sessions[session_id] = {
            "id": session_id,
            "status": "created",
            "created_at": datetime.now().isoformat(),
            "test_cases": [],
            "run_logs": [],
            "evaluation": None,
            "report": None,
        }

    session.update({
        "pointer": request.pointer,
        "request_config": request.request_config.model_dump(mode="json"),
        "status": "generating_tests",
    })

    try:
        test_cases = await planner.generate_tests(request.pointer, request.request_config, request.count)
    except GenerationError as e:
        session["status"] = "error"
        session["error"] = str(e)
        raise HTTPException(status_code=502, detail=f"Test generation failed: {e}")

    session["test_cases"] = RankerAgent().merge_tests(session["test_cases"], test_cases)
    session.update({
        "model": planner.model_name,
        "latency_ms": planner.last_latency_ms,
        "tokens_used": planner.last_tokens_used,
        "evaluation": None,
        "report": None,
        "status": "tests_generated",
    })

    return {
        "session_id": session["id"],
        "status": "tests_generated",
        "model": planner.model_name,
        "test_count": len(test_cases),
        "test_cases": test_cases,
    }


@app.get("/api/session/{session_id}")
async def get_session(session_id: str):
    """
    Get full session data.
    """
    return _get_session(session_id)


@app.post("/api/evaluate")
async def evaluate(request: EvaluateRequest, analyzer: AnalyzerAgent = Depends(get_analyzer)):
    """
    Score the session's tests: structure, coverage, intent and (optionally) golden similarity.
    """
    session = _get_session(request.session_id)
    _require_tests(session)

    evaluation = analyzer.evaluate(
        session.get("pointer", ""),
        session["test_cases"],
        golden_tests=request.golden_tests,
        config=request.config,
    )
    session["evaluation"] = evaluation
    return evaluation


@app.post("/api/run-test")
async def run_test(
    request: RunTestRequest,
    transport: Transport = Depends(get_transport),
    http_transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
):
    """
    Run one test, whatever its run mode.
    """
    session = _get_session(request.session_id)
    test = next((t for t in session.get("test_cases", []) if t.get("id") == request.test_id), None)
    if test is None:
        raise HTTPException(status_code=404, detail="Test not found")

    session["report"] = None
    orchestrator = OrchestratorAgent(transport=_session_transport(session, transport, http_transport))
    return await orchestrator.run_test(test, session["run_logs"])


@app.post("/api/run-suite")
async def run_suite(
    request: SessionRequest,
    transport: Transport = Depends(get_transport),
    http_transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
):
    """
    Run all auto tests sequentially, user-requested tests first.
    """
    session = _get_session(request.session_id)
    _require_tests(session)

    session["status"] = "executing_tests"
    orchestrator = OrchestratorAgent(transport=_session_transport(session, transport, http_transport))
    suite = await orchestrator.run_suite(session["test_cases"], session["run_logs"])
    session["status"] = "tests_executed"
    session["report"] = None

    return {
        "session_id": session["id"],
        "status": "tests_executed",
        "executed": len(suite.logs),
        "skipped": suite.skipped,
        "run_logs": suite.logs,
    }


@app.post("/api/replay")
async def replay(
    request: ReplayRequest,
    transport: Transport = Depends(get_transport),
    http_transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
):
    """
    Re-send a recorded request, optionally edited.
    """
    session = _get_session(request.session_id)
    if not request.request.get("path"):
        raise HTTPException(status_code=400, detail="Missing path")

    session["report"] = None
    orchestrator = OrchestratorAgent(transport=_session_transport(session, transport, http_transport))
    return await orchestrator.replay(request.request, session["run_logs"])


@app.post("/api/toggle-run-mode")
async def toggle_run_mode(request: RunTestRequest):
    """
    Flip a test between auto and manual; run-suite skips manual tests.
    """
    session = _get_session(request.session_id)
    test = RankerAgent().toggle_run_mode(session.get("test_cases", []), request.test_id)
    if test is None:
        raise HTTPException(status_code=404, detail="Test not found")

    session["report"] = None
    return test


@app.get("/api/report/{session_id}")
async def get_report(session_id: str, analyzer: AnalyzerAgent = Depends(get_analyzer)):
    """
    Get the session report (evaluation, run summary, triage notes).
    """
    session = _get_session(session_id)
    _require_tests(session)

    if not session.get("report"):
        evaluation = session.get("evaluation") or analyzer.evaluate(
            session.get("pointer", ""), session["test_cases"]
        )
        session["evaluation"] = evaluation
        session["report"] = analyzer.generate_report(
            session_id=session_id,
            pointer=session.get("pointer", ""),
            tests=session["test_cases"],
            evaluation=evaluation,
            run_logs=session["run_logs"],
            model=session.get("model", "synthetic"),
            latency_ms=session.get("latency_ms", 0),
            tokens_used=session.get("tokens_used", 0),
        )

    return session["report"]


@app.post("/api/compare-models")
async def compare_models(
    request: CompareModelsRequest,
    planner_factory: Callable[[str], PlannerAgent] = Depends(get_planner_factory),
    analyzer: AnalyzerAgent = Depends(get_analyzer),
):
    """
    Generate the same batch with several models and rank them.
    """
    planners = [planner_factory(model) for model in request.models]
    result = await analyzer.compare_models(
        request.pointer,
        request.request_config,
        request.count,
        planners,
        golden_tests=request.golden_tests,
    )
    return {
        "pointer": request.pointer,
        "scores": [{**s.model_dump(), "overall_score": s.overall_score} for s in result["scores"]],
        "report_path": result["report_path"],
        "json_path": result["json_path"],
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
