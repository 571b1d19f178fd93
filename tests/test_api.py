"""
Tests for the FastAPI service.
"""
import httpx
import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from api_tester.agents.analyzer_agent import AnalyzerAgent
from api_tester.agents.planner_agent import PlannerAgent
from api_tester.main import (
    app,
    get_analyzer,
    get_http_transport,
    get_planner,
    get_planner_factory,
    get_transport,
    sessions,
)
from api_tester.transport.mock_api import MockApi


@pytest.fixture
def client(tmp_path):
    """Test client with the synthetic planner, a latency-free mock API and reports in tmp_path."""
    app.dependency_overrides[get_planner] = lambda: PlannerAgent(provider="mock")
    app.dependency_overrides[get_transport] = lambda: MockApi(seed=3, delay_range_ms=(0, 0))
    app.dependency_overrides[get_analyzer] = lambda: AnalyzerAgent(reports_dir=tmp_path)
    app.dependency_overrides[get_planner_factory] = lambda: lambda model: PlannerAgent(provider="mock")
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        sessions.clear()


@pytest.fixture
def session(client, payment_fixture):
    response = client.post("/api/generate-tests", json={
        "pointer": payment_fixture["pointer"],
        "request_config": payment_fixture["request_config"],
        "count": 10,
    })
    assert response.status_code == 200
    return response.json()


class TestGenerate:
    """POST /api/generate-tests"""

    def test_creates_session(self, client, session):
        assert session["status"] == "tests_generated"
        assert session["model"] == "synthetic"
        assert session["test_count"] == 10
        assert [t["user_requested"] for t in session["test_cases"][:3]] == [True] * 3

        stored = client.get(f"/api/session/{session['session_id']}").json()
        assert len(stored["test_cases"]) == 10
        assert stored["pointer"] == "ensure to test when amount is 0"

    def test_merge_into_existing_session(self, client, session, user_fixture):
        response = client.post("/api/generate-tests", json={
            "pointer": user_fixture["pointer"],
            "request_config": user_fixture["request_config"],
            "count": 3,
            "session_id": session["session_id"],
        })

        assert response.status_code == 200
        stored = client.get(f"/api/session/{session['session_id']}").json()
        assert len(stored["test_cases"]) == 13
        assert stored["test_cases"][0]["request"]["path"] == "/users"

    def test_invalid_count(self, client):
        response = client.post("/api/generate-tests", json={"pointer": "x", "count": 0})

        assert response.status_code == 422

    def test_unknown_session(self, client):
        response = client.post("/api/generate-tests", json={"pointer": "x", "session_id": "missing"})

        assert response.status_code == 404

    def test_model_failure_is_502(self, client):
        app.dependency_overrides[get_planner] = lambda: PlannerAgent(llm=FakeListChatModel(responses=["oops"]))

        response = client.post("/api/generate-tests", json={"pointer": "amount is 0"})

        assert response.status_code == 502
        assert response.json()["detail"].startswith("Test generation failed: Failed to parse model response as JSON")

    def test_malformed_model_test_is_502(self, client):
        reply = '{"tests": [{"name": "Zero amount", "request": "POST /orders"}]}'
        app.dependency_overrides[get_planner] = lambda: PlannerAgent(llm=FakeListChatModel(responses=[reply]))

        response = client.post("/api/generate-tests", json={"pointer": "amount is 0"})

        assert response.status_code == 502
        assert response.json()["detail"].startswith("Test generation failed: Model returned a malformed test")


class TestEvaluate:
    """POST /api/evaluate"""

    def test_evaluate_with_golden(self, client, session, golden_tests):
        response = client.post("/api/evaluate", json={
            "session_id": session["session_id"],
            "golden_tests": golden_tests,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["structure_valid"] is True
        assert body["intent"]["overall_valid"] is True
        assert body["golden"]["total_golden"] == 7

    def test_invalid_config(self, client, session):
        response = client.post("/api/evaluate", json={
            "session_id": session["session_id"],
            "config": {"coverage": {"min_boundary_tests": -1}},
        })

        assert response.status_code == 422

    def test_unknown_session(self, client):
        assert client.post("/api/evaluate", json={"session_id": "nope"}).status_code == 404


class TestExecution:
    """Run, replay and report endpoints."""

    def test_run_suite(self, client, session):
        response = client.post("/api/run-suite", json={"session_id": session["session_id"]})

        assert response.status_code == 200
        body = response.json()
        assert body["executed"] == 6
        assert len(body["skipped"]) == 4
        assert body["run_logs"][0]["response"]["status"] in (400, 500)

    def test_run_single_manual_test(self, client, session):
        manual = next(t for t in session["test_cases"] if t["run_mode"] == "manual")

        response = client.post("/api/run-test", json={"session_id": session["session_id"], "test_id": manual["id"]})

        assert response.status_code == 200
        assert response.json()["test_id"] == manual["id"]

    def test_run_unknown_test(self, client, session):
        response = client.post("/api/run-test", json={"session_id": session["session_id"], "test_id": "nope"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Test not found"

    def test_replay(self, client, session):
        response = client.post("/api/replay", json={
            "session_id": session["session_id"],
            "request": {"method": "POST", "path": "/users", "body": {"email": "duplicate@example.com"}},
        })

        assert response.status_code == 200
        assert response.json()["test_name"] == "replay"
        assert response.json()["response"]["status"] == 409

    def test_replay_without_path(self, client, session):
        response = client.post("/api/replay", json={"session_id": session["session_id"], "request": {}})

        assert response.status_code == 400

    def test_toggle_run_mode_changes_suite(self, client, session):
        manual = next(t for t in session["test_cases"] if t["run_mode"] == "manual")

        response = client.post("/api/toggle-run-mode", json={"session_id": session["session_id"], "test_id": manual["id"]})

        assert response.status_code == 200
        assert response.json()["run_mode"] == "auto"
        suite = client.post("/api/run-suite", json={"session_id": session["session_id"]}).json()
        assert suite["executed"] == 7
        assert manual["name"] not in suite["skipped"]

    def test_toggle_auto_test_is_skipped(self, client, session):
        auto = next(t for t in session["test_cases"] if t["run_mode"] == "auto")

        client.post("/api/toggle-run-mode", json={"session_id": session["session_id"], "test_id": auto["id"]})
        suite = client.post("/api/run-suite", json={"session_id": session["session_id"]}).json()

        assert suite["executed"] == 5
        assert auto["name"] in suite["skipped"]

    def test_toggle_unknown_test(self, client, session):
        response = client.post("/api/toggle-run-mode", json={"session_id": session["session_id"], "test_id": "nope"})

        assert response.status_code == 404

    def test_report(self, client, session):
        client.post("/api/run-suite", json={"session_id": session["session_id"]})

        response = client.get(f"/api/report/{session['session_id']}")

        assert response.status_code == 200
        report = response.json()
        assert report["session_id"] == session["session_id"]
        assert report["run_summary"]["total_runs"] == 6
        assert report["evaluation"]["structure_valid"] is True
        assert report["report_path"]
        assert report["recommendations"]

    def test_report_unknown_session(self, client):
        assert client.get("/api/report/missing").status_code == 404


class TestMisc:
    """Model comparison, root and health."""

    def test_compare_models(self, client, payment_fixture):
        response = client.post("/api/compare-models", json={
            "pointer": payment_fixture["pointer"],
            "request_config": payment_fixture["request_config"],
            "count": 12,
            "models": ["synthetic"],
        })

        assert response.status_code == 200
        scores = response.json()["scores"]
        assert len(scores) == 1
        assert scores[0]["model"] == "synthetic"
        assert scores[0]["coverage_score"] == 100
        assert response.json()["report_path"].endswith(".csv")

    def test_root_and_health(self, client):
        assert client.get("/").json()["docs"] == "/docs"
        assert client.get("/health").json()["status"] == "healthy"


class TestSessionTarget:
    """Sessions whose request config names a real API."""

    def test_requests_relayed_to_session_base_url(self, client, payment_fixture):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"id": "ord_1"})

        app.dependency_overrides[get_http_transport] = lambda: httpx.MockTransport(handler)
        request_config = {**payment_fixture["request_config"], "base_url": "https://orders.example.com/"}
        session = client.post("/api/generate-tests", json={
            "pointer": payment_fixture["pointer"],
            "request_config": request_config,
            "count": 4,
        }).json()

        suite = client.post("/api/run-suite", json={"session_id": session["session_id"]}).json()
        replayed = client.post("/api/replay", json={
            "session_id": session["session_id"],
            "request": {"method": "GET", "path": "/orders/ord_1"},
        }).json()

        assert suite["executed"] == 3
        assert all(log["response"]["status"] == 201 for log in suite["run_logs"])
        assert replayed["response"]["body"] == {"id": "ord_1"}
        assert [str(r.url) for r in seen[-2:]] == [
            "https://orders.example.com/orders",
            "https://orders.example.com/orders/ord_1",
        ]

    def test_without_base_url_uses_default_transport(self, client, session):
        app.dependency_overrides[get_http_transport] = lambda: httpx.MockTransport(
            lambda request: pytest.fail("relay must not be used")
        )

        suite = client.post("/api/run-suite", json={"session_id": session["session_id"]}).json()

        assert suite["executed"] == 6
