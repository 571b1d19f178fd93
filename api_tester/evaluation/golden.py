"""
Comparison of a generated suite against a curated golden suite.

Matching is many-to-one: several generated tests may pair with the same
golden test.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..models.report import CategoryCoverage, GoldenCoverage, MatchPair, SuiteComparison, TestComparison
from ..utils.helpers import tag_list, to_plain

logger = logging.getLogger(__name__)

TAG_OVERLAP_THRESHOLD = 0.5


def _request(test: Dict[str, Any]) -> Dict[str, Any]:
    request = test.get("request")
    return request if isinstance(request, dict) else {}


def _body_keys(test: Dict[str, Any]) -> List[str]:
    body = _request(test).get("body")
    return list(body.keys()) if isinstance(body, dict) else []


def _tags(test: Dict[str, Any]) -> List[str]:
    return tag_list(test)


def _fmt(value: Any) -> str:
    return json.dumps(value, default=str)


def compare_test(generated: Any, golden: Any) -> TestComparison:
    """
    Similarity of one generated test to one golden test.

    Six equally weighted checks: method, path, priority, user_requested,
    tag overlap and golden body keys present in the generated body.
    """
    generated = to_plain(generated)
    golden = to_plain(golden)
    gen_request = _request(generated)
    gold_request = _request(golden)
    matches: List[str] = []
    mismatches: List[str] = []

    for field, got, expected in (
        ("method", gen_request.get("method"), gold_request.get("method")),
        ("path", gen_request.get("path"), gold_request.get("path")),
        ("priority", generated.get("priority"), golden.get("priority")),
        ("user_requested", generated.get("user_requested"), golden.get("user_requested")),
    ):
        if got == expected:
            matches.append(field)
        else:
            mismatches.append(f"{field}: got {_fmt(got)}, expected {_fmt(expected)}")

    gen_tags = set(_tags(generated))
    golden_tags = set(_tags(golden))
    if golden_tags:
        overlap = len(gen_tags & golden_tags) / len(golden_tags)
    else:
        overlap = 1.0
    if overlap >= TAG_OVERLAP_THRESHOLD:
        matches.append("tags")
    else:
        mismatches.append(f"tags: {round(overlap * 100)}% overlap")

    gen_keys = _body_keys(generated)
    missing = [k for k in _body_keys(golden) if k not in gen_keys]
    if not missing:
        matches.append("body_structure")
    else:
        mismatches.append(f"body_structure: missing keys [{', '.join(missing)}]")

    total = len(matches) + len(mismatches)
    return TestComparison(score=len(matches) / total, matches=matches, mismatches=mismatches)


def find_best_match(
    generated: Any, golden_tests: Sequence[Any]
) -> Tuple[Optional[int], float, Optional[TestComparison]]:
    """
    Best scoring golden test for ``generated``.

    Returns:
        (golden index, score, comparison); index is None when nothing scores above 0.
        Ties keep the first golden seen.
    """
    best_index = None
    best_score = 0.0
    best_comparison = None

    for index, golden in enumerate(golden_tests):
        comparison = compare_test(generated, golden)
        if comparison.score > best_score:
            best_index = index
            best_score = comparison.score
            best_comparison = comparison

    return best_index, best_score, best_comparison


def _name(test: Any) -> str:
    return str(to_plain(test).get("name") or "")


def compare_test_suite(generated_tests: Sequence[Any], golden_tests: Sequence[Any]) -> SuiteComparison:
    """Pair every generated test with its best golden match and summarize."""
    pairs: List[MatchPair] = []
    matched_indices = set()

    for generated in generated_tests:
        index, score, comparison = find_best_match(generated, golden_tests)
        if index is None:
            continue
        matched_indices.add(index)
        pairs.append(MatchPair(
            generated=_name(generated),
            golden=_name(golden_tests[index]),
            score=score,
            matches=comparison.matches,
            mismatches=comparison.mismatches,
        ))

    average = sum(p.score for p in pairs) / len(pairs) if pairs else 0.0
    missed = [_name(g) for i, g in enumerate(golden_tests) if i not in matched_indices]

    return SuiteComparison(
        total_generated=len(generated_tests),
        total_golden=len(golden_tests),
        matches=pairs,
        average_score=average,
        coverage_report=GoldenCoverage(golden_covered=len(matched_indices), golden_missed=missed),
    )


def check_category_coverage(generated_tests: Sequence[Any], golden_tests: Sequence[Any]) -> CategoryCoverage:
    """Golden tags (the category universe) that appear among the generated tags."""
    categories: List[str] = []
    for golden in golden_tests:
        for tag in _tags(to_plain(golden)):
            if tag not in categories:
                categories.append(tag)

    generated_tags = {tag for t in generated_tests for tag in _tags(to_plain(t))}
    covered = [c for c in categories if c in generated_tags]
    missing = [c for c in categories if c not in generated_tags]
    percent = (len(covered) / len(categories)) * 100 if categories else 100.0

    return CategoryCoverage(covered=covered, missing=missing, coverage_percent=percent)


def comparison_summary(comparison: SuiteComparison) -> str:
    lines = [
        f"Generated: {comparison.total_generated} tests",
        f"Golden: {comparison.total_golden} tests",
        f"Average similarity: {comparison.average_score * 100:.1f}%",
        f"Golden coverage: {comparison.coverage_report.golden_covered}/{comparison.total_golden}",
    ]
    if comparison.coverage_report.golden_missed:
        lines.append(f"Missing golden tests: {', '.join(comparison.coverage_report.golden_missed)}")
    return "\n".join(lines)


def load_golden_suite(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Read a golden suite file of the form ``{"tests": [...]}``."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    tests = data.get("tests", []) if isinstance(data, dict) else []
    logger.info(f"Loaded {len(tests)} golden tests from {path}")
    return tests
