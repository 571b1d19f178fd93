"""Models package"""
from .test_case import TestCase, RequestSpec, RequestConfig
from .execution_result import ApiResponse, RunLog, SuiteRun
from .report import (
    ValidationResult,
    BatchValidation,
    EvaluationResult,
    Report,
    TriageNote,
    RunSummary,
    ModelScores,
)

__all__ = [
    "TestCase",
    "RequestSpec",
    "RequestConfig",
    "ApiResponse",
    "RunLog",
    "SuiteRun",
    "ValidationResult",
    "BatchValidation",
    "EvaluationResult",
    "Report",
    "TriageNote",
    "RunSummary",
    "ModelScores",
]
