"""
Tests for reportcard/text_metrics.py — wrapping, heights and ellipsizing.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from reportcard.text_metrics import (
    fit_lines,
    line_height,
    measure,
    split_lines,
    text_width,
    truncate_to_width,
)


class TestMeasure:
    """Tests for measure / split_lines."""

    def test_none_counts_as_one_line(self):
        result = measure(None, 9)
        assert result.line_count == 1
        assert result.height == pytest.approx(line_height(9))

    def test_empty_string_counts_as_one_line(self):
        result = measure("", 9, max_width=100)
        assert result.line_count == 1
        assert result.lines == ("",)

    def test_long_text_wraps_within_width(self):
        text = "attendance and participation were excellent " * 10
        result = measure(text, 9, max_width=120)
        assert result.line_count > 1
        for line in result.lines:
            assert text_width(line, 9) <= 120 + 1e-6

    def test_height_is_lines_times_line_height(self):
        result = measure("one two three four five six seven eight", 10, max_width=40)
        assert result.height == pytest.approx(result.line_count * line_height(10))

    def test_list_is_taken_as_pre_split(self):
        result = measure(["first", "second", "third"], 9, max_width=5)
        assert result.line_count == 3
        assert result.lines == ("first", "second", "third")

    def test_string_without_width_is_single_line(self):
        assert split_lines("a very long line that is never wrapped", 9) == [
            "a very long line that is never wrapped"
        ]

    def test_line_height_is_monotonic(self):
        assert line_height(6.5) < line_height(9) < line_height(16)


class TestFitLines:
    """Tests for fit_lines / truncate_to_width."""

    def test_within_budget_is_unchanged(self):
        lines = ["alpha", "beta"]
        assert fit_lines(lines, 5) == lines

    def test_cut_is_marked_with_ellipsis(self):
        lines = ["the first line of remarks", "second line of remarks", "third line"]
        kept = fit_lines(lines, 2)
        assert len(kept) == 2
        assert kept[0] == lines[0]
        assert kept[-1].endswith("...")

    def test_short_last_line_becomes_ellipsis(self):
        assert fit_lines(["ab", "cd", "ef"], 2) == ["ab", "..."]

    def test_zero_budget(self):
        assert fit_lines(["a"], 0) == []

    def test_truncate_short_text_untouched(self):
        assert truncate_to_width("Mathematics", 9, 500) == "Mathematics"

    def test_truncate_long_text_fits(self):
        text = "Government Bilingual High School of the Southwest Region"
        result = truncate_to_width(text, 9, 80)
        assert result.endswith("...")
        assert text_width(result, 9) <= 80 + 1e-6
