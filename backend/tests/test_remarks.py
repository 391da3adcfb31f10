"""
Tests for reportcard/remarks.py — promotion remarks and fallbacks.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from reportcard.i18n import make_translator
from reportcard.models import OverallPerformance, SubjectResult
from reportcard.remarks import count_passed, generate_promotion_remark, mean_score, promotion_status_text


@pytest.fixture
def subjects():
    return [SubjectResult(subject_id=i, score=s) for i, s in enumerate([12, 8, 15], start=1)]


@pytest.fixture
def t():
    return make_translator("en")


class TestStatistics:
    def test_count_passed(self, subjects):
        assert count_passed(subjects, 10) == 2

    def test_missing_scores_do_not_pass(self):
        subjects = [SubjectResult(subject_id=1, score=None), SubjectResult(subject_id=2, score=10)]
        assert count_passed(subjects, 10) == 1

    def test_mean_of_available_scores(self, subjects):
        assert mean_score(subjects) == pytest.approx(35 / 3)
        assert mean_score([]) is None


class TestGeneratePromotionRemark:
    """Tests for generate_promotion_remark."""

    def test_conditional_promotion(self, subjects, t):
        overall = OverallPerformance(average=11.67)
        remark = generate_promotion_remark("conditional_promotion", subjects, overall, 10, t)
        assert "11.67/20" in remark
        assert "2 of 3 subjects passed" in remark

    def test_deterministic(self, subjects, t):
        overall = OverallPerformance(average=11.67)
        first = generate_promotion_remark("conditional_promotion", subjects, overall, 10, t)
        second = generate_promotion_remark("conditional_promotion", subjects, overall, 10, t)
        assert first == second

    def test_translator_receives_statistics(self, subjects):
        calls = []

        def t(key, params=None):
            calls.append((key, params))
            return key

        generate_promotion_remark("promoted", subjects, OverallPerformance(average=14), 10, t)
        key, params = calls[0]
        assert key == "Export.promotionRemark.promoted"
        assert params == {"average": "14.00", "passed": 2, "total": 3}

    def test_average_falls_back_to_subject_mean(self, subjects, t):
        remark = generate_promotion_remark("repeated", subjects, OverallPerformance(), 10, t)
        assert "11.67/20" in remark

    def test_key_is_case_insensitive(self, subjects, t):
        remark = generate_promotion_remark("PROMOTED", subjects, OverallPerformance(average=12), 10, t)
        assert remark.startswith("Promoted to the next class")

    def test_unknown_key_uses_decision_remarks(self, subjects, t):
        overall = OverallPerformance(promotion_decision_remarks="Council decision pending.", remarks="Other")
        assert generate_promotion_remark("deferred", subjects, overall, 10, t) == "Council decision pending."

    def test_unknown_key_then_general_remarks(self, subjects, t):
        overall = OverallPerformance(remarks="Keep it up.")
        assert generate_promotion_remark(None, subjects, overall, 10, t) == "Keep it up."

    def test_nothing_to_say(self, subjects, t):
        assert generate_promotion_remark(None, subjects, OverallPerformance(), 10, t) == ""
        assert generate_promotion_remark("other", subjects, None, 10, t) == ""

    def test_french_catalog(self, subjects):
        remark = generate_promotion_remark(
            "conditional_promotion", subjects, OverallPerformance(average=11.67), 10, make_translator("fr"),
        )
        assert remark.startswith("Admis sous condition")


class TestPromotionStatusText:
    def test_display_wins(self, t):
        overall = OverallPerformance(promotion_status_key="promoted", promotion_status_display="Passe en 4e")
        assert promotion_status_text(overall, t) == "Passe en 4e"

    def test_known_key_translated(self, t):
        overall = OverallPerformance(promotion_status_key="repeated")
        assert promotion_status_text(overall, t) == "Repeats the Class"

    def test_unknown_key_shown_raw(self, t):
        assert promotion_status_text(OverallPerformance(promotion_status_key="expelled"), t) == "expelled"

    def test_no_status(self, t):
        assert promotion_status_text(OverallPerformance(), t) is None
        assert promotion_status_text(None, t) is None
