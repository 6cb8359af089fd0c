"""Result formatter: every JSON shape comes back as one text block."""

import json
import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from tools.formatter import format_result


class TestFormatResult:

    def test_wraps_object_as_text_content(self):
        result = format_result({"risk_score": 42})

        assert len(result) == 1
        assert result[0].type == "text"
        assert json.loads(result[0].text) == {"risk_score": 42}

    @pytest.mark.parametrize("value", [
        {"nested": {"list": [1, {"a": None}]}},
        [1, 2, 3],
        None,
        3.5,
        0,
        "clean",
        True,
    ])
    def test_parses_back_to_original(self, value):
        assert json.loads(format_result(value)[0].text) == value

    def test_null(self):
        assert format_result(None)[0].text == "null"

    def test_indented(self):
        assert format_result({"a": 1})[0].text == '{\n  "a": 1\n}'

    def test_non_ascii_kept_readable(self):
        assert "café" in format_result({"name": "café"})[0].text
