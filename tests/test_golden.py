"""
Tests for golden suite comparison.
"""
import copy

from api_tester.evaluation.golden import (
    check_category_coverage,
    compare_test,
    compare_test_suite,
    comparison_summary,
    find_best_match,
)
from api_tester.generation.synthetic import generate


class TestCompareTest:
    """One generated test against one golden test."""

    def test_identical_scores_one(self, golden_tests):
        comparison = compare_test(golden_tests[0], golden_tests[0])

        assert comparison.score == 1.0
        assert comparison.mismatches == []
        assert comparison.matches == ["method", "path", "priority", "user_requested", "tags", "body_structure"]

    def test_method_mismatch(self, golden_tests):
        generated = copy.deepcopy(golden_tests[0])
        generated["request"]["method"] = "GET"

        comparison = compare_test(generated, golden_tests[0])
        assert comparison.score == 5 / 6
        assert comparison.mismatches == ['method: got "GET", expected "POST"']

    def test_missing_body_keys(self, golden_tests):
        generated = copy.deepcopy(golden_tests[0])
        generated["request"]["body"] = {"currency": "USD"}

        comparison = compare_test(generated, golden_tests[0])
        assert comparison.mismatches == ["body_structure: missing keys [amount]"]

    def test_extra_generated_keys_are_fine(self, golden_tests):
        generated = copy.deepcopy(golden_tests[0])
        generated["request"]["body"]["note"] = "extra"

        assert compare_test(generated, golden_tests[0]).score == 1.0

    def test_low_tag_overlap(self, golden_tests):
        generated = copy.deepcopy(golden_tests[0])
        generated["tags"] = ["other"]

        comparison = compare_test(generated, golden_tests[0])
        assert comparison.mismatches == ["tags: 0% overlap"]

    def test_half_tag_overlap_passes(self, golden_tests):
        generated = copy.deepcopy(golden_tests[0])
        generated["tags"] = ["boundary"]

        assert "tags" in compare_test(generated, golden_tests[0]).matches

    def test_golden_without_tags(self, golden_tests):
        golden = copy.deepcopy(golden_tests[0])
        golden["tags"] = []

        assert "tags" in compare_test({"tags": ["anything"]}, golden).matches

    def test_non_list_tags(self, golden_tests):
        generated = copy.deepcopy(golden_tests[0])
        generated["tags"] = 5

        assert compare_test(generated, generated).score == 1.0
        assert compare_test(generated, golden_tests[0]).mismatches == ["tags: 0% overlap"]


class TestFindBestMatch:
    """Best golden match for a generated test."""

    def test_exact_match_wins(self, golden_tests):
        index, score, comparison = find_best_match(golden_tests[5], golden_tests)

        assert index == 5
        assert score == 1.0
        assert comparison.mismatches == []

    def test_ties_keep_first(self, golden_tests):
        index, _, _ = find_best_match(golden_tests[0], [golden_tests[0], golden_tests[0]])

        assert index == 0

    def test_zero_score_is_no_match(self, golden_tests):
        generated = {
            "name": "Unrelated",
            "request": {"method": "GET", "path": "/health"},
            "tags": [],
            "priority": "low",
            "user_requested": None,
        }

        assert find_best_match(generated, golden_tests[:1]) == (None, 0.0, None)

    def test_empty_golden(self, golden_tests):
        assert find_best_match(golden_tests[0], []) == (None, 0.0, None)


class TestCompareSuite:
    """Suite comparison and category coverage."""

    def test_matching_is_not_exclusive(self, golden_tests):
        result = compare_test_suite([golden_tests[0], golden_tests[0]], golden_tests)

        assert [m.golden for m in result.matches] == [golden_tests[0]["name"]] * 2
        assert result.coverage_report.golden_covered == 1
        assert len(result.coverage_report.golden_missed) == 6
        assert result.average_score == 1.0

    def test_empty_generated(self, golden_tests):
        result = compare_test_suite([], golden_tests)

        assert result.average_score == 0.0
        assert result.matches == []
        assert result.coverage_report.golden_covered == 0

    def test_synthetic_against_golden(self, payment_pointer, payment_config, golden_tests):
        tests = generate(payment_pointer, payment_config, 10)

        result = compare_test_suite(tests, golden_tests)
        assert result.total_generated == 10
        assert result.total_golden == 7
        assert result.average_score >= 0.5
        missing_field = next(m for m in result.matches if m.generated == "Test with missing required field")
        assert missing_field.golden == "Missing amount field"
        assert missing_field.score == 1.0

    def test_summary(self, golden_tests):
        summary = comparison_summary(compare_test_suite(golden_tests[:1], golden_tests))

        assert "Average similarity: 100.0%" in summary
        assert "Golden coverage: 1/7" in summary
        assert "Missing golden tests:" in summary

    def test_category_coverage(self, payment_pointer, payment_config, golden_tests):
        coverage = check_category_coverage(generate(payment_pointer, payment_config, 10), golden_tests)

        assert coverage.missing == ["boundary", "negative"]
        assert coverage.coverage_percent == 80.0

    def test_category_coverage_larger_batch(self, payment_pointer, payment_config, golden_tests):
        coverage = check_category_coverage(generate(payment_pointer, payment_config, 14), golden_tests)

        assert coverage.missing == []
        assert coverage.coverage_percent == 100.0

    def test_category_coverage_without_golden_tags(self):
        coverage = check_category_coverage([{"tags": ["a"]}], [{"tags": []}])

        assert coverage.coverage_percent == 100.0
        assert coverage.covered == []

    def test_golden_fixture_loaded(self, golden_tests):
        assert len(golden_tests) == 7
        assert sum(1 for t in golden_tests if t["user_requested"]) == 3
