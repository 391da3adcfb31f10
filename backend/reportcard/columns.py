"""
columns.py — Subject-table schema and column widths.

The subject table has a fixed skeleton plus a variable number of
"period-breakdown" columns:

  - term reports show one column per evaluation sequence,
  - year reports show one column per term,
  - sequence reports show none (but gain a class-average column).

The breakdown columns are the union of the detail entries of every subject,
so a subject that lacks one of them still gets a cell (N/A) and the table
stays rectangular.

Widths come from relative weights and always add up to the usable page
width exactly; nothing is left unallocated and nothing overflows.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from reportcard.config import (
    DEFAULT_PASSING_SCORE,
    MIN_COLUMN_WIDTH,
    MIN_DYNAMIC_SHARE,
    SUBJECT_COLUMN_WEIGHTS,
    ScoreTone,
)
from reportcard.grading import classify, color_for
from reportcard.i18n import Translator
from reportcard.models import Identifier, SequenceDetail, SubjectResult

FIXED = "fixed"
DYNAMIC = "dynamic"

_EPS = 1e-9


@dataclass(frozen=True)
class Column:
    key: str
    header: str
    kind: str = FIXED
    relative_weight: Optional[float] = None
    detail_id: Optional[Identifier] = None


@dataclass(frozen=True)
class BreakdownCell:
    """Content of one subject-table cell, styled semantically."""
    text: str
    tone: Optional[ScoreTone] = None
    emphasis: str = "normal"
    suffix: Optional[str] = None


# ── Formatting helpers ──────────────────────────────────────────────

def format_score(value: Optional[float], placeholder: str) -> str:
    if value is None:
        return placeholder
    return f"{float(value):.2f}"


def format_number(value: Optional[float], placeholder: str) -> str:
    """Whole numbers without decimals (coefficients, points)."""
    if value is None:
        return placeholder
    return f"{float(value):g}"


def format_value(value, placeholder: str) -> str:
    if value is None or value == "":
        return placeholder
    return str(value)


# ── Schema ──────────────────────────────────────────────────────────

def natural_sort_key(name: str) -> Tuple:
    """
    Case- and accent-insensitive key that orders embedded numbers by value,
    so "Sequence 2" sorts before "Sequence 10".
    """
    folded = unicodedata.normalize("NFKD", str(name))
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch)).casefold()
    key = []
    for token in re.split(r"(\d+)", folded):
        if not token:
            continue
        if token.isdigit():
            key.append((0, int(token), ""))
        else:
            key.append((1, 0, token))
    return tuple(key)


def _details(subject: SubjectResult, period_type: str) -> Sequence:
    if period_type == "term":
        return subject.sequence_details
    if period_type == "year":
        return subject.term_details
    return ()


def _detail_id(detail) -> Optional[Identifier]:
    return detail.sequence_id if isinstance(detail, SequenceDetail) else detail.term_id


def _detail_name(detail) -> Optional[str]:
    return detail.sequence_name if isinstance(detail, SequenceDetail) else detail.term_name


def build_dynamic_columns(period_type: str, subjects: Iterable[SubjectResult]) -> List[Column]:
    """
    Union of the breakdown entries across all subjects, deduplicated by id
    (first name seen wins) and naturally sorted by name. Entries without an
    id or a name are ignored.
    """
    seen: Dict[Identifier, str] = {}
    for subject in subjects:
        for detail in _details(subject, period_type):
            detail_id = _detail_id(detail)
            name = _detail_name(detail)
            if detail_id is None or name is None or detail_id in seen:
                continue
            seen[detail_id] = name

    ordered = sorted(seen.items(), key=lambda item: natural_sort_key(item[1]))
    return [
        Column(key=f"{period_type}{detail_id}", header=name, kind=DYNAMIC, detail_id=detail_id)
        for detail_id, name in ordered
    ]


def build_column_schema(
    period_type: str,
    subjects: Sequence[SubjectResult],
    t: Translator,
    weights: Mapping[str, float] = SUBJECT_COLUMN_WEIGHTS,
) -> List[Column]:
    """Full left-to-right column list of the subject table."""

    def fixed(key: str, header_key: str) -> Column:
        return Column(key=key, header=t(header_key), kind=FIXED, relative_weight=weights[key])

    schema = [fixed("subject", "Export.subject"), fixed("coefficient", "Export.coefShort")]
    schema.extend(build_dynamic_columns(period_type, subjects))
    schema.append(fixed("score", "Export.finalScore"))
    schema.append(fixed("rank", "Export.rankShort"))
    if period_type == "sequence":
        schema.append(fixed("class_average", "Export.classAvgShort"))
    schema.append(fixed("remarks", "Export.appreciation"))
    schema.append(fixed("teacher", "Export.teacher"))
    return schema


# ── Rows ────────────────────────────────────────────────────────────

def _detail_cell(
    detail,
    period_type: str,
    t: Translator,
    passing_score: float,
    placeholder: str,
) -> BreakdownCell:
    if detail is None:
        return BreakdownCell(placeholder)

    if period_type == "term":
        raw = detail.normalized_score
        absent = bool(detail.is_absent)
        weight = detail.weight
    else:
        raw = detail.term_average_score
        absent = False
        weight = None

    suffix = f"({float(weight):.0f}%)" if weight is not None else None
    if absent:
        return BreakdownCell(t("Export.absentShort"), tone=ScoreTone.ABSENT, emphasis="bolditalic", suffix=suffix)
    if raw is None:
        return BreakdownCell(placeholder, suffix=suffix)
    return BreakdownCell(
        format_score(raw, placeholder),
        tone=color_for(raw, passing_score, highlight=False),
        suffix=suffix,
    )


def build_subject_rows(
    period_type: str,
    subjects: Sequence[SubjectResult],
    schema: Sequence[Column],
    t: Translator,
    passing_score: float = DEFAULT_PASSING_SCORE,
) -> List[List[BreakdownCell]]:
    """
    One cell per schema column for every subject.

    Each subject's details are indexed by id once, so matching costs
    O(subjects x details) overall rather than a scan per cell.
    """
    placeholder = t("Export.notAvailableShort")
    rows = []
    for subject in subjects:
        index = {}
        for detail in _details(subject, period_type):
            if _detail_id(detail) is not None:
                index.setdefault(_detail_id(detail), detail)

        if subject.score is not None:
            score_cell = BreakdownCell(
                format_score(subject.score, placeholder),
                tone=color_for(subject.score, passing_score, highlight=False),
                emphasis="bold",
            )
        else:
            score_cell = BreakdownCell(placeholder, tone=ScoreTone.NEUTRAL, emphasis="italic")

        grade = classify(subject.score)
        fixed_cells = {
            "subject": BreakdownCell(subject.subject_name or placeholder, emphasis="bold"),
            "coefficient": BreakdownCell(format_number(subject.coefficient, placeholder)),
            "score": score_cell,
            "rank": BreakdownCell(format_value(subject.rank, placeholder)),
            "class_average": BreakdownCell(format_score(subject.class_average_subject, placeholder)),
            "remarks": BreakdownCell(
                t(f"Export.grades.{grade}") if grade else placeholder,
                tone=color_for(subject.score, passing_score, highlight=False) if grade else None,
                emphasis="italic",
            ),
            "teacher": BreakdownCell(subject.teacher_name or ""),
        }

        row = []
        for column in schema:
            if column.kind == DYNAMIC:
                row.append(_detail_cell(index.get(column.detail_id), period_type, t, passing_score, placeholder))
            else:
                row.append(fixed_cells.get(column.key, BreakdownCell(placeholder)))
        rows.append(row)
    return rows


# ── Widths ──────────────────────────────────────────────────────────

def _enforce_floor(widths: List[float], total: float, floor: float) -> List[float]:
    """
    Raise every column to ``floor``, taking the shortfall from the columns
    above it in proportion to their surplus. Splits equally when the page
    cannot hold every column at the floor.
    """
    n = len(widths)
    if n == 0:
        return []
    if floor * n >= total:
        return [total / n] * n

    widths = list(widths)
    short = [i for i, w in enumerate(widths) if w < floor - _EPS]
    if not short:
        return widths
    shortfall = sum(floor - widths[i] for i in short)
    for i in short:
        widths[i] = floor
    donors = [i for i, w in enumerate(widths) if w > floor + _EPS]
    surplus = sum(widths[i] - floor for i in donors)
    for i in donors:
        widths[i] -= shortfall * (widths[i] - floor) / surplus
    return widths


def _settle_rounding(widths: List[float], total: float, ndigits: int = 3) -> List[float]:
    """Round widths, then hand the rounding residue to the widest column."""
    if not widths:
        return []
    rounded = [round(w, ndigits) for w in widths]
    widest = max(range(len(rounded)), key=lambda i: rounded[i])
    rounded[widest] += total - sum(rounded)
    return rounded


def allocate_widths(
    usable_width: float,
    fixed_weights: Mapping[str, float],
    n_dynamic: int,
    absorb_key: Optional[str] = "teacher",
    min_dynamic_share: float = MIN_DYNAMIC_SHARE,
    min_width: float = MIN_COLUMN_WIDTH,
) -> Tuple[Dict[str, float], List[float]]:
    """
    Convert relative weights into absolute widths.

    Returns the fixed widths by key and the list of dynamic widths. The
    widths always sum to ``usable_width``.
    """
    fixed = {key: max(0.0, float(weight)) for key, weight in fixed_weights.items()}
    n_dynamic = max(0, int(n_dynamic))
    fixed_total = sum(fixed.values())
    dynamic_share = max(0.0, 1.0 - fixed_total)

    dynamic: List[float] = []
    if n_dynamic > 0:
        per_column = dynamic_share / n_dynamic
        if per_column < min_dynamic_share:
            per_column = min(min_dynamic_share, 1.0 / n_dynamic)
            remaining = max(0.0, 1.0 - per_column * n_dynamic)
            scale = remaining / fixed_total if fixed_total > 0 else 0.0
            fixed = {key: weight * scale for key, weight in fixed.items()}
        dynamic = [per_column] * n_dynamic
    elif dynamic_share > 0 and absorb_key in fixed:
        fixed[absorb_key] += dynamic_share

    weights = list(fixed.values()) + dynamic
    total_weight = sum(weights)
    if total_weight <= 0:
        weights = [1.0] * len(weights)
        total_weight = float(len(weights) or 1)

    widths = [usable_width * weight / total_weight for weight in weights]
    widths = _enforce_floor(widths, usable_width, min_width)
    widths = _settle_rounding(widths, usable_width)

    keys = list(fixed)
    return dict(zip(keys, widths[: len(keys)])), widths[len(keys):]


def allocate_column_widths(
    usable_width: float,
    schema: Sequence[Column],
    min_width: float = MIN_COLUMN_WIDTH,
) -> List[float]:
    """Widths in schema order for a subject-table schema."""
    fixed_weights = {c.key: c.relative_weight or 0.0 for c in schema if c.kind == FIXED}
    n_dynamic = sum(1 for c in schema if c.kind == DYNAMIC)
    fixed_widths, dynamic_widths = allocate_widths(
        usable_width, fixed_weights, n_dynamic, min_width=min_width,
    )
    dynamic_iter = iter(dynamic_widths)
    return [
        next(dynamic_iter) if column.kind == DYNAMIC else fixed_widths[column.key]
        for column in schema
    ]
