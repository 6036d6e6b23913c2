"""
Unit-тесты для Stage 3: Whitespace Normalization.
"""

import pytest

from src.parsing.stages.stage_3_whitespace import WhitespaceStage, normalize_whitespace


SAMPLES = [
    "a\r\nb\rc",
    "  a \t  b  ",
    "a\n\n\n\nb",
    "a\n \n \nb",
    " Order ID: OD1 ",
    "\n\n\nleading and trailing\n\n\n",
    "x\t\ty\n\n\tz",
    "",
]


class TestNormalizeWhitespace:

    def test_line_endings(self):
        assert normalize_whitespace("a\r\nb\rc") == "a\nb\nc"

    def test_horizontal_runs(self):
        assert normalize_whitespace("  a \t  b  ") == "a b"

    def test_blank_line_runs_collapse(self):
        assert normalize_whitespace("a\n\n\n\nb") == "a\n\nb"
        assert normalize_whitespace("a\n \n \nb") == "a\n\nb"

    def test_single_blank_line_kept(self):
        assert normalize_whitespace("a\n\nb") == "a\n\nb"

    def test_nbsp_is_whitespace(self):
        assert normalize_whitespace(" Order ID ") == "Order ID"

    @pytest.mark.parametrize("text", SAMPLES)
    def test_idempotent(self, text):
        once = normalize_whitespace(text)
        assert normalize_whitespace(once) == once


class TestWhitespaceStage:

    def test_line_count(self):
        result = WhitespaceStage().process("a\n\n\nb\nc")
        assert result.text == "a\n\nb\nc"
        assert result.line_count == 4

    def test_empty(self):
        result = WhitespaceStage().process("   \n\t ")
        assert result.text == ""
        assert result.line_count == 0
