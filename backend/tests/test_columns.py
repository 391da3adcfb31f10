"""
Tests for reportcard/columns.py — schema union/sort, row mapping and widths.
"""

import json
import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from reportcard.columns import (
    DYNAMIC,
    allocate_column_widths,
    allocate_widths,
    build_column_schema,
    build_dynamic_columns,
    build_subject_rows,
    natural_sort_key,
)
from reportcard.config import A4_PORTRAIT, MIN_COLUMN_WIDTH, SUBJECT_COLUMN_WEIGHTS, ScoreTone
from reportcard.i18n import make_translator
from reportcard.models import SubjectResult, parse_result_payload

SAMPLE_TERM = os.path.join(os.path.dirname(__file__), "..", "sample_data", "sample_term_results.json")
WIDTH = A4_PORTRAIT.usable_width
TERM_FIXED = {k: v for k, v in SUBJECT_COLUMN_WEIGHTS.items() if k != "class_average"}


@pytest.fixture
def t():
    return make_translator("en")


@pytest.fixture
def term_payload():
    with open(SAMPLE_TERM, encoding="utf-8") as fh:
        return parse_result_payload(json.load(fh))


def _subject(subject_id, details=(), **kwargs):
    return SubjectResult(subject_id=subject_id, sequence_details=list(details), **kwargs)


class TestDynamicColumns:
    """Tests for build_dynamic_columns."""

    def test_numeric_aware_sort(self):
        subjects = [_subject(1, [
            {"sequence_id": 10, "sequence_name": "Sequence 10"},
            {"sequence_id": 2, "sequence_name": "sequence 2"},
            {"sequence_id": 1, "sequence_name": "Sequence 1"},
        ])]
        headers = [c.header for c in build_dynamic_columns("term", subjects)]
        assert headers == ["Sequence 1", "sequence 2", "Sequence 10"]

    def test_union_across_subjects_deduplicated(self):
        subjects = [
            _subject(1, [{"sequence_id": 1, "sequence_name": "Seq 1"}]),
            _subject(2, [
                {"sequence_id": 1, "sequence_name": "Seq 1 (renamed)"},
                {"sequence_id": 2, "sequence_name": "Seq 2"},
            ]),
        ]
        columns = build_dynamic_columns("term", subjects)
        assert [c.detail_id for c in columns] == [1, 2]
        assert columns[0].header == "Seq 1"
        assert all(c.kind == DYNAMIC for c in columns)

    def test_year_uses_term_details(self):
        subjects = [SubjectResult(subject_id=1, term_details=[
            {"term_id": 3, "term_name": "Term 3"},
            {"term_id": 1, "term_name": "Term 1"},
        ])]
        assert [c.header for c in build_dynamic_columns("year", subjects)] == ["Term 1", "Term 3"]

    def test_sequence_has_no_dynamic_columns(self):
        subjects = [_subject(1, [{"sequence_id": 1, "sequence_name": "Seq 1"}])]
        assert build_dynamic_columns("sequence", subjects) == []

    def test_unnamed_details_ignored(self):
        subjects = [_subject(1, [{"sequence_id": 1}])]
        assert build_dynamic_columns("term", subjects) == []

    def test_details_without_id_ignored(self):
        subjects = [_subject(1, [
            {"sequence_id": None, "sequence_name": "Draft", "normalized_score": 12},
            {"sequence_id": 1, "sequence_name": "Seq 1", "normalized_score": 14},
        ])]
        assert [c.header for c in build_dynamic_columns("term", subjects)] == ["Seq 1"]

    def test_natural_sort_key_ignores_accents(self):
        assert natural_sort_key("Étape 2") < natural_sort_key("etape 10")


class TestSchema:
    """Tests for build_column_schema."""

    def test_sequence_order(self, t):
        keys = [c.key for c in build_column_schema("sequence", [_subject(1)], t)]
        assert keys == ["subject", "coefficient", "score", "rank", "class_average", "remarks", "teacher"]

    def test_term_scenario(self, t, term_payload):
        schema = build_column_schema("term", term_payload.subject_breakdown, t)
        assert [c.header for c in schema] == [
            "Subject", "Coef.", "Seq 1", "Seq 2", "Seq 3", "Score", "Rank", "Remarks", "Teacher",
        ]
        assert "class_average" not in [c.key for c in schema]


class TestRows:
    """Tests for build_subject_rows."""

    def test_rows_are_rectangular(self, t, term_payload):
        schema = build_column_schema("term", term_payload.subject_breakdown, t)
        rows = build_subject_rows("term", term_payload.subject_breakdown, schema, t)
        assert len(rows) == len(term_payload.subject_breakdown)
        assert all(len(row) == len(schema) for row in rows)

    def test_missing_detail_renders_not_applicable(self, t, term_payload):
        schema = build_column_schema("term", term_payload.subject_breakdown, t)
        rows = build_subject_rows("term", term_payload.subject_breakdown, schema, t)
        seq3 = [c.header for c in schema].index("Seq 3")
        french = rows[1]
        assert french[0].text == "French"
        assert french[seq3].text == "N/A"

    def test_gaps_on_both_sides_render_not_applicable(self, t):
        subjects = [
            _subject(1, [
                {"sequence_id": 1, "sequence_name": "Seq 1", "normalized_score": 12},
                {"sequence_id": 2, "sequence_name": "Seq 2", "normalized_score": 13},
            ], subject_name="A"),
            _subject(2, [
                {"sequence_id": 2, "sequence_name": "Seq 2", "normalized_score": 9},
                {"sequence_id": 3, "sequence_name": "Seq 3", "normalized_score": 11},
            ], subject_name="B"),
        ]
        schema = build_column_schema("term", subjects, t)
        headers = [c.header for c in schema]
        assert headers[2:5] == ["Seq 1", "Seq 2", "Seq 3"]
        a, b = build_subject_rows("term", subjects, schema, t)
        assert [cell.text for cell in a[2:5]] == ["12.00", "13.00", "N/A"]
        assert [cell.text for cell in b[2:5]] == ["N/A", "9.00", "11.00"]

    def test_absent_and_weight_markers(self, t, term_payload):
        schema = build_column_schema("term", term_payload.subject_breakdown, t)
        rows = build_subject_rows("term", term_payload.subject_breakdown, schema, t)
        seq1 = [c.header for c in schema].index("Seq 1")
        english_seq1 = rows[2][seq1]
        assert english_seq1.text == "ABS"
        assert english_seq1.tone == ScoreTone.ABSENT
        assert english_seq1.suffix == "(50%)"

    def test_score_and_remark_cells(self, t, term_payload):
        schema = build_column_schema("term", term_payload.subject_breakdown, t)
        rows = build_subject_rows("term", term_payload.subject_breakdown, schema, t, passing_score=10)
        keys = [c.key for c in schema]
        maths, french, history = rows[0], rows[1], rows[4]
        assert maths[keys.index("score")].text == "14.50"
        assert maths[keys.index("score")].tone == ScoreTone.PASS
        assert maths[keys.index("remarks")].text == "Good"
        assert french[keys.index("score")].tone == ScoreTone.FAIL
        assert history[keys.index("score")].text == "N/A"
        assert history[keys.index("teacher")].text == ""
        assert all(cell.text == "N/A" for cell in history[2:5])

    def test_translated_placeholder(self, term_payload):
        t = make_translator("fr")
        schema = build_column_schema("term", term_payload.subject_breakdown, t)
        rows = build_subject_rows("term", term_payload.subject_breakdown, schema, t)
        assert rows[4][2].text == "N/D"


class TestWidths:
    """Tests for allocate_widths / allocate_column_widths."""

    @pytest.mark.parametrize("n_dynamic", [0, 1, 5, 20])
    def test_widths_sum_to_usable_width(self, n_dynamic):
        fixed, dynamic = allocate_widths(WIDTH, TERM_FIXED, n_dynamic)
        assert len(dynamic) == n_dynamic
        assert sum(fixed.values()) + sum(dynamic) == pytest.approx(WIDTH, abs=1e-6)
        assert min(list(fixed.values()) + dynamic) >= MIN_COLUMN_WIDTH - 1e-3

    def test_no_dynamic_columns_folds_into_teacher(self):
        fixed, dynamic = allocate_widths(WIDTH, TERM_FIXED, 0)
        assert dynamic == []
        leftover = 1.0 - sum(TERM_FIXED.values())
        assert fixed["teacher"] == pytest.approx((TERM_FIXED["teacher"] + leftover) * WIDTH, abs=0.01)
        assert fixed["subject"] == pytest.approx(TERM_FIXED["subject"] * WIDTH, abs=0.01)

    def test_dynamic_share_split_evenly(self):
        _, dynamic = allocate_widths(WIDTH, TERM_FIXED, 5)
        share = (1.0 - sum(TERM_FIXED.values())) / 5
        for width in dynamic:
            assert width == pytest.approx(share * WIDTH, abs=0.01)

    def test_many_dynamic_columns_get_minimum_share(self):
        fixed, dynamic = allocate_widths(WIDTH, TERM_FIXED, 10)
        assert dynamic[0] == pytest.approx(0.05 * WIDTH, abs=0.01)
        assert fixed["subject"] < TERM_FIXED["subject"] * WIDTH

    def test_page_too_narrow_splits_equally(self):
        fixed, dynamic = allocate_widths(20.0, TERM_FIXED, 2)
        widths = list(fixed.values()) + dynamic
        assert sum(widths) == pytest.approx(20.0, abs=1e-6)
        assert max(widths) - min(widths) < 0.01

    def test_schema_order(self, t, term_payload):
        schema = build_column_schema("term", term_payload.subject_breakdown, t)
        widths = allocate_column_widths(WIDTH, schema)
        assert len(widths) == len(schema)
        assert sum(widths) == pytest.approx(WIDTH, abs=1e-6)
        assert widths[0] == max(widths)
