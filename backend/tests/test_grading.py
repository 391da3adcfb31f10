"""
Tests for reportcard/grading.py — grade bands and score tones.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from reportcard.config import DEFAULT_PALETTE, Palette, ScoreTone
from reportcard.grading import GRADE_BANDS, classify, color_for, get_grade_thresholds, is_passing


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize("score,label", [
        (20, "excellent"),
        (18.0, "excellent"),
        (17.99, "very_good"),
        (16, "very_good"),
        (14, "good"),
        (12, "satisfactory"),
        (10.0, "passing"),
        (9.99, "needs_improvement"),
        (8, "needs_improvement"),
        (6, "weak"),
        (5.99, "very_weak"),
        (0, "very_weak"),
    ])
    def test_bands(self, score, label):
        assert classify(score) == label

    def test_boundary_takes_higher_band(self):
        assert classify(9.99) != classify(10.0)

    def test_none_has_no_label(self):
        assert classify(None) is None

    def test_out_of_range_is_clamped(self):
        assert classify(25) == "excellent"
        assert classify(-3) == "very_weak"


class TestColorFor:
    """Tests for color_for."""

    def test_below_pass_mark_fails(self):
        assert color_for(9.5, 10) == ScoreTone.FAIL

    def test_pass_mark_passes(self):
        assert color_for(10, 10) == ScoreTone.PASS

    def test_high_scores_highlighted(self):
        assert color_for(16, 10) == ScoreTone.HIGHLIGHT
        assert color_for(15.99, 10) == ScoreTone.PASS

    def test_highlight_can_be_disabled(self):
        assert color_for(18, 10, highlight=False) == ScoreTone.PASS

    def test_missing_score_is_neutral(self):
        assert color_for(None) == ScoreTone.NEUTRAL

    def test_custom_pass_mark(self):
        assert color_for(11, passing_score=12) == ScoreTone.FAIL

    def test_is_passing(self):
        assert is_passing(10, 10)
        assert not is_passing(None, 10)
        assert not is_passing(9.9, 10)


class TestPalette:
    """Tones resolve through the palette."""

    def test_default_mapping(self):
        assert DEFAULT_PALETTE.for_tone(ScoreTone.PASS) == DEFAULT_PALETTE.passed
        assert DEFAULT_PALETTE.for_tone(ScoreTone.FAIL) == DEFAULT_PALETTE.failed
        assert DEFAULT_PALETTE.for_tone(ScoreTone.HIGHLIGHT) == DEFAULT_PALETTE.accent
        assert DEFAULT_PALETTE.for_tone(ScoreTone.ABSENT) == DEFAULT_PALETTE.absent

    def test_custom_palette(self):
        palette = Palette(failed="#000000")
        assert palette.for_tone(ScoreTone.FAIL) == "#000000"


class TestThresholds:
    def test_one_entry_per_band(self):
        thresholds = get_grade_thresholds()
        assert len(thresholds) == len(GRADE_BANDS)
        assert thresholds[0]["label"] == "excellent"
        assert thresholds[0]["max"] == 20
        assert thresholds[-1]["min"] == 0
