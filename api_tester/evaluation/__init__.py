"""Evaluation harness: structure, coverage, intent and golden scorers"""
from .structure import validate_test, validate_tests, validate_request
from .coverage import (
    analyze_coverage,
    calculate_coverage_score,
    analyze_tag_diversity,
    check_uniqueness,
    analyze_scenario_diversity,
)
from .intent import extract_keywords, calculate_keyword_match, check_user_requested_flags, evaluate_intent_alignment
from .golden import compare_test, find_best_match, compare_test_suite, check_category_coverage, load_golden_suite
from .reporter import write_json_report, write_model_report, write_comparison_report

__all__ = [
    "validate_test",
    "validate_tests",
    "validate_request",
    "analyze_coverage",
    "calculate_coverage_score",
    "analyze_tag_diversity",
    "check_uniqueness",
    "analyze_scenario_diversity",
    "extract_keywords",
    "calculate_keyword_match",
    "check_user_requested_flags",
    "evaluate_intent_alignment",
    "compare_test",
    "find_best_match",
    "compare_test_suite",
    "check_category_coverage",
    "load_golden_suite",
    "write_json_report",
    "write_model_report",
    "write_comparison_report",
]
