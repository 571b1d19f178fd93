"""
Edge-case coverage of a generated batch.

Classification is a case-insensitive substring/tag heuristic; one test may
count toward several categories.
"""
import re
from typing import Any, Dict, List, Optional, Sequence

from ..config import CoverageConfig, QualityConfig
from ..models.report import CoverageCategory, CoverageScore, TagDiversity, Uniqueness
from ..utils.helpers import compact_json, tag_list, to_plain


def _fields(test: Any):
    """(name, tags, body) of a test, tolerating malformed input."""
    test = to_plain(test)
    name = test.get("name")
    name = name if isinstance(name, str) else ""
    tags = tag_list(test)
    request = test.get("request")
    body = request.get("body") if isinstance(request, dict) else None
    return name, tags, body


def serialized_form(test: Any) -> str:
    """Lowercased name + tags + compact JSON body."""
    name, tags, body = _fields(test)
    body_text = compact_json(body) if body is not None else ""
    return " ".join([name, *tags, body_text]).lower()


def _any_in(text: str, needles: Sequence[str]) -> bool:
    return any(n in text for n in needles)


def _tag_has(tags: List[str], needles: Sequence[str]) -> bool:
    return any(_any_in(t, needles) for t in tags)


def _is_empty_value(text: str, name: str, tags: List[str]) -> bool:
    return _any_in(text, ("empty", "null", "undefined", '""', "[]", "{}")) or _tag_has(tags, ("empty", "null"))


def _is_boundary(text: str, name: str, tags: List[str]) -> bool:
    return _any_in(name, ("zero", "0", "negative", "-1", "max", "min", "boundary", "limit")) or _tag_has(
        tags, ("boundary", "edge")
    )


def _is_type_variation(text: str, name: str, tags: List[str]) -> bool:
    return _any_in(name, ("type", "string", "number", "boolean", "array", "object")) or _tag_has(tags, ("type",))


def _is_injection(text: str, name: str, tags: List[str]) -> bool:
    return _any_in(text, ("injection", "sql", "xss", "command", "script")) or _tag_has(
        tags, ("security", "injection")
    )


def _is_missing_field(text: str, name: str, tags: List[str]) -> bool:
    return _any_in(name, ("missing", "omit", "without", "absent")) or _tag_has(tags, ("missing", "required"))


def _is_extra_field(text: str, name: str, tags: List[str]) -> bool:
    return _any_in(name, ("extra", "additional", "unknown", "unexpected")) or _tag_has(tags, ("extra",))


# category -> (classifier, CoverageConfig attribute holding its minimum)
CATEGORIES = {
    "emptyValues": (_is_empty_value, "min_empty_value_tests"),
    "boundaryNumbers": (_is_boundary, "min_boundary_tests"),
    "typeVariations": (_is_type_variation, "min_type_variation_tests"),
    "injectionTests": (_is_injection, "min_injection_tests"),
    "missingFields": (_is_missing_field, "min_missing_field_tests"),
    "extraFields": (_is_extra_field, "min_extra_field_tests"),
}


def analyze_coverage(
    tests: Sequence[Any], config: Optional[CoverageConfig] = None
) -> Dict[str, CoverageCategory]:
    """
    Count the tests that fall into each edge-case category.

    Args:
        tests: Test dicts or TestCase models
        config: Per-category minimums

    Returns:
        Mapping of category key to found names, count and required minimum
    """
    config = config or CoverageConfig()
    coverage = {
        key: CoverageCategory(required=getattr(config, attr)) for key, (_, attr) in CATEGORIES.items()
    }

    for test in tests:
        name, tags, _ = _fields(test)
        text = serialized_form(test)
        lowered_name = name.lower()
        lowered_tags = [t.lower() for t in tags]
        for key, (matches, _) in CATEGORIES.items():
            if matches(text, lowered_name, lowered_tags):
                coverage[key].found.append(name)
                coverage[key].count += 1

    return coverage


def calculate_coverage_score(coverage: Dict[str, CoverageCategory]) -> CoverageScore:
    """Percentage of categories that meet their minimum, with a gap line per failure."""
    passed = 0
    gaps = []
    for key, category in coverage.items():
        if category.count >= category.required:
            passed += 1
        else:
            gaps.append(f"{key}: found {category.count}, required {category.required}")

    total = len(coverage)
    score = (passed / total) * 100 if total else 0.0
    return CoverageScore(score=score, passed=passed, total=total, gaps=gaps)


def analyze_tag_diversity(tests: Sequence[Any], config: Optional[QualityConfig] = None) -> TagDiversity:
    config = config or QualityConfig()
    unique_tags: List[str] = []
    for test in tests:
        for tag in _fields(test)[1]:
            if tag not in unique_tags:
                unique_tags.append(tag)
    return TagDiversity(
        unique_tags=unique_tags,
        diversity=len(unique_tags),
        meets_threshold=len(unique_tags) >= config.min_tag_diversity,
    )


def check_uniqueness(tests: Sequence[Any]) -> Uniqueness:
    """Duplicate names and duplicate serialized bodies."""
    names = [_fields(t)[0] for t in tests]
    bodies = [compact_json(_fields(t)[2]) for t in tests]

    seen = set()
    duplicates: List[str] = []
    for name in names:
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)

    unique_names = len(set(names))
    unique_bodies = len(set(bodies))
    return Uniqueness(
        unique_count=unique_names,
        total_count=len(tests),
        duplicates=duplicates,
        duplicate_bodies=len(bodies) - unique_bodies,
        is_unique=unique_names == len(tests) and unique_bodies == len(tests),
    )


def analyze_scenario_diversity(tests: Sequence[Any]) -> Dict[str, Any]:
    """Methods, body patterns and header names seen across the batch."""
    methods: List[str] = []
    patterns: List[str] = []
    header_names: List[str] = []

    def add(bucket: List[str], value: str):
        if value not in bucket:
            bucket.append(value)

    for test in tests:
        request = to_plain(test).get("request")
        if not isinstance(request, dict):
            continue
        if request.get("method"):
            add(methods, request["method"])

        body = request.get("body")
        if body:
            body_text = compact_json(body)
            if "null" in body_text:
                add(patterns, "null-values")
            if '""' in body_text:
                add(patterns, "empty-strings")
            if "[]" in body_text:
                add(patterns, "empty-arrays")
            if "{}" in body_text:
                add(patterns, "empty-objects")
            if re.search(r"\d{10,}", body_text):
                add(patterns, "large-numbers")
            if re.search(r"-\d+", body_text):
                add(patterns, "negative-numbers")

        headers = request.get("headers")
        if isinstance(headers, dict):
            for header in headers:
                add(header_names, str(header).lower())

    return {
        "methods_covered": methods,
        "body_patterns_covered": patterns,
        "header_variations_covered": header_names,
        "total_diversity_score": len(methods) + len(patterns) + len(header_names),
    }
