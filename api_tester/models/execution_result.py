"""
Execution Result Data Model
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """Response of the target API, real or simulated.

    Simulated 4xx/5xx are ordinary responses. ``error`` is only set when
    the request never got a response (timeout, DNS, connection reset).
    """

    status: Optional[int] = None
    body: Any = None
    headers: Optional[Dict[str, str]] = None
    error: Optional[str] = None
    url: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status is not None and 200 <= self.status < 300


class RunLog(BaseModel):
    """One execution of one request."""

    test_id: Optional[str] = None
    test_name: str
    started_at: str
    finished_at: Optional[str] = None
    duration_ms: Optional[int] = None
    request: Dict[str, Any] = Field(default_factory=dict)
    response: Optional[ApiResponse] = None

    class Config:
        frozen = True


class SuiteRun(BaseModel):
    """Result of running a queue of tests."""

    logs: List[RunLog] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
