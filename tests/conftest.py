"""
Pytest configuration and fixtures for api_tester tests.
"""
import json
import uuid
from pathlib import Path

import pytest

from api_tester.evaluation.golden import load_golden_suite
from api_tester.models.test_case import RequestConfig
from api_tester.transport.mock_api import MockApi

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_pointer_fixture(name: str) -> dict:
    with open(FIXTURES_DIR / "pointers" / f"{name}.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def payment_fixture():
    """Pointer, base request and count of the zero-amount payment scenario."""
    return load_pointer_fixture("payment")


@pytest.fixture
def payment_pointer(payment_fixture):
    return payment_fixture["pointer"]


@pytest.fixture
def payment_config(payment_fixture):
    return RequestConfig(**payment_fixture["request_config"])


@pytest.fixture
def user_fixture():
    return load_pointer_fixture("user-crud")


@pytest.fixture
def golden_tests():
    """Hand-written reference suite for the payment scenario."""
    return load_golden_suite(FIXTURES_DIR / "golden" / "payment-tests.json")


@pytest.fixture
def valid_test():
    """A structurally valid test dict."""
    return {
        "id": str(uuid.uuid4()),
        "name": "Order with zero amount",
        "request": {
            "method": "POST",
            "path": "/orders",
            "headers": {"Content-Type": "application/json"},
            "body": {"amount": 0, "currency": "USD"},
        },
        "tags": ["boundary", "user-requested"],
        "priority": "high",
        "run_mode": "auto",
        "user_requested": True,
    }


@pytest.fixture
def mock_api():
    """Seeded mock API without artificial latency."""
    return MockApi(seed=42, delay_range_ms=(0, 0))
