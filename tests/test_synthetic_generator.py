"""
Tests for the synthetic test generator.
"""
import pytest

from api_tester.evaluation.coverage import analyze_coverage, calculate_coverage_score
from api_tester.evaluation.structure import UUID_RE, validate_tests
from api_tester.generation.archetypes import CATALOGUE, MAX_SAFE_INTEGER, SQL_INJECTION_PAYLOAD, XSS_PAYLOAD
from api_tester.generation.synthetic import SyntheticTestGenerator, generate
from api_tester.models.test_case import RequestConfig


def _without_ids(tests):
    return [t.model_dump(mode="json", exclude={"id"}) for t in tests]


class TestBatchShape:
    """Count, flags and ids."""

    @pytest.mark.parametrize("count", [3, 4, 10, 14, 31])
    def test_exact_count_and_user_requested_flags(self, payment_pointer, payment_config, count):
        """First three tests are user requested, the rest are not."""
        tests = generate(payment_pointer, payment_config, count)

        assert len(tests) == count
        assert [t.user_requested for t in tests[:3]] == [True, True, True]
        assert all(t.user_requested is False for t in tests[3:])

    def test_fewer_than_three(self, payment_pointer, payment_config):
        tests = generate(payment_pointer, payment_config, 2)

        assert len(tests) == 2
        assert all(t.user_requested for t in tests)

    def test_ids_unique_and_uuid_shaped(self, payment_pointer, payment_config):
        tests = generate(payment_pointer, payment_config, 40)
        ids = [t.id for t in tests]

        assert len(set(ids)) == len(ids)
        assert all(UUID_RE.match(i) for i in ids)

    def test_count_below_one_raises(self, payment_pointer, payment_config):
        with pytest.raises(ValueError):
            generate(payment_pointer, payment_config, 0)

    def test_batch_passes_structure_validation(self, payment_pointer, payment_config):
        result = validate_tests(generate(payment_pointer, payment_config, 20))

        assert result.valid is True
        assert result.invalid_count == 0

    def test_accepts_plain_dict_config(self, payment_fixture):
        tests = generate(payment_fixture["pointer"], payment_fixture["request_config"], 5)

        assert tests[0].request.path == "/orders"
        assert tests[0].request.method == "POST"


class TestDeterminism:
    """Everything except ids is reproducible."""

    def test_same_inputs_same_output(self, payment_pointer, payment_config):
        first = generate(payment_pointer, payment_config, 10)
        second = generate(payment_pointer, payment_config, 10)

        assert _without_ids(first) == _without_ids(second)
        assert [t.id for t in first] != [t.id for t in second]

    def test_base_body_not_mutated(self, payment_pointer, payment_config):
        generate(payment_pointer, payment_config, 14)

        assert payment_config.body == {"amount": 100, "currency": "USD"}


class TestArchetypes:
    """Payloads, names, priorities and run modes per catalogue slot."""

    @pytest.fixture
    def tests(self, payment_pointer, payment_config):
        return generate(payment_pointer, payment_config, 14)

    def test_catalogue_order(self):
        kinds = [a.kind for a in CATALOGUE]

        assert len(CATALOGUE) >= 13
        assert kinds[:3] == ["user-pointer"] * 3
        assert kinds[3:10] == [
            "empty", "empty-null", "injection-sql", "injection-xss",
            "type-coercion", "missing-field", "extra-field",
        ]

    def test_user_pointer_zeroes_first_number(self, tests, payment_pointer):
        for i, test in enumerate(tests[:3]):
            assert test.name == f"Test {payment_pointer} - variation {i + 1}"
            assert test.request.body == {"amount": 0, "currency": "USD"}
            assert test.priority == "high"
            assert "user-requested" in test.tags

    def test_user_pointer_blanks_string_on_empty_cue(self, payment_config):
        tests = generate("ensure an empty currency is rejected", payment_config, 3)

        assert tests[0].request.body == {"amount": 100, "currency": ""}

    def test_exploratory_payloads(self, tests):
        bodies = [t.request.body for t in tests]

        assert bodies[3] == {"amount": 100, "currency": ""}
        assert bodies[4] == {"amount": 100, "currency": None}
        assert bodies[5] == {"amount": 100, "currency": SQL_INJECTION_PAYLOAD}
        assert bodies[6] == {"amount": 100, "currency": XSS_PAYLOAD}
        assert bodies[7] == {"amount": "100", "currency": "USD"}
        assert bodies[8] == {"currency": "USD"}
        assert bodies[9] == {"amount": 100, "currency": "USD", "unexpectedField": "unexpected_value"}
        assert bodies[10] == {"amount": 100, "currency": True}
        assert bodies[11] == {"amount": 0, "currency": "USD"}
        assert bodies[12] == {"amount": -1, "currency": "USD"}
        assert bodies[13] == {"amount": MAX_SAFE_INTEGER, "currency": "USD"}

    def test_exploratory_names_and_tags(self, tests):
        assert tests[5].name == "Test with SQL injection payload"
        assert tests[5].tags == ["security", "injection", "sql"]
        assert tests[9].priority == "low"
        assert tests[11].name == "Test with boundary value 0"

    def test_run_modes(self, tests):
        modes = [t.run_mode for t in tests[:10]]

        assert modes == [
            "auto", "auto", "auto", "manual", "auto",
            "manual", "auto", "manual", "auto", "manual",
        ]

    def test_headers_copied_from_config(self, tests):
        assert tests[0].request.headers == {"Content-Type": "application/json"}


class TestDegenerateInputs:
    """Bodies without a matching field leave the payload unchanged."""

    def test_absent_body(self):
        tests = generate("check zero", RequestConfig(method="POST", path="/orders"), 10)

        assert tests[0].request.headers == {"Content-Type": "application/json"}
        assert tests[5].request.body is None
        assert tests[8].request.body is None
        assert tests[9].request.body == {"unexpectedField": "unexpected_value"}

    def test_string_body_left_unchanged(self):
        config = RequestConfig(method="POST", path="/orders", body='[{"sku": "S1"}')
        tests = generate("truncated payload", config, 10)

        assert all(t.request.body == '[{"sku": "S1"}' for t in tests)

    def test_no_numeric_field(self):
        config = RequestConfig(method="POST", path="/users", body={"email": "a@example.com"})
        tests = generate("amount is 0", config, 14)

        assert tests[0].request.body == {"email": "a@example.com"}
        assert tests[11].request.body == {"email": "a@example.com"}
        assert tests[11].name == "Test with boundary value 0"


class TestCycling:
    """Large counts repeat the catalogue with unique names."""

    def test_names_unique_across_rounds(self, payment_pointer, payment_config):
        tests = generate(payment_pointer, payment_config, 3 * len(CATALOGUE))
        names = [t.name for t in tests]

        assert len(set(names)) == len(names)
        assert tests[len(CATALOGUE) + 3].name == "Test with empty string value (round 2)"
        assert tests[len(CATALOGUE)].name == f"Test {payment_pointer} - variation {len(CATALOGUE) + 1}"

    def test_later_rounds_are_not_user_requested(self, payment_pointer, payment_config):
        tests = generate(payment_pointer, payment_config, len(CATALOGUE) + 3)

        assert all(t.user_requested is False for t in tests[len(CATALOGUE):])


class TestCoverageOfGeneratedBatch:
    """Default batch size covers every edge-case category."""

    def test_twelve_tests_cover_all_categories(self, payment_pointer, payment_config):
        tests = SyntheticTestGenerator().generate(payment_pointer, payment_config, 12)
        score = calculate_coverage_score(analyze_coverage(tests))

        assert score.score == 100
        assert score.gaps == []

    def test_ten_tests_cover_required_categories_once(self, payment_pointer, payment_config):
        coverage = analyze_coverage(generate(payment_pointer, payment_config, 10))

        assert all(category.count >= 1 for category in coverage.values())
