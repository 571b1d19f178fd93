"""
Tests for utility helpers.
"""
import pytest

from api_tester.models.test_case import RequestSpec
from api_tester.utils.helpers import (
    compact_json,
    duration_ms,
    format_duration,
    is_number,
    sanitize_filename,
    tag_list,
    to_plain,
    truncate_text,
)


class TestHelpers:

    @pytest.mark.parametrize("ms,expected", [(250, "250ms"), (1500, "1.5s"), (125000, "2m 5s")])
    def test_format_duration(self, ms, expected):
        assert format_duration(ms) == expected

    def test_sanitize_filename(self):
        assert sanitize_filename('eval: "gpt/4o" run') == "eval_gpt4o_run"

    def test_truncate_text(self):
        assert truncate_text("abcdef", 5) == "ab..."
        assert truncate_text("abc", 5) == "abc"
        assert truncate_text(None) == ""

    def test_duration_ms(self):
        assert duration_ms("2024-05-01T10:00:00", "2024-05-01T10:00:01.250000") == 1250
        assert duration_ms("not a time", "2024-05-01T10:00:01") == 0

    def test_to_plain(self):
        request = RequestSpec(method="GET", path="/x")

        assert to_plain(request) == {"method": "GET", "path": "/x", "headers": {}, "body": None}
        assert to_plain({"a": 1}) == {"a": 1}
        assert to_plain(None) == {}

    def test_compact_json(self):
        assert compact_json({"a": [1, 2], "b": "ü"}) == '{"a":[1,2],"b":"ü"}'

    @pytest.mark.parametrize("value,expected", [(0, True), (1.5, True), (True, False), ("1", False), (None, False)])
    def test_is_number(self, value, expected):
        assert is_number(value) is expected

    @pytest.mark.parametrize(
        "tags,expected",
        [(["a", 1, "b"], ["a", "b"]), (5, []), ("boundary", []), ({"a": 1}, []), (None, [])],
    )
    def test_tag_list(self, tags, expected):
        assert tag_list({"tags": tags}) == expected
