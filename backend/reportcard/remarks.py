"""
remarks.py — Promotion remarks for year-end report cards.

Turns the promotion status key computed upstream plus the subject scores
into one translated sentence. Template-based; the catalogs in i18n.py carry
the wording.
"""

import logging
from typing import Optional, Sequence

from reportcard.config import DEFAULT_PASSING_SCORE
from reportcard.grading import is_passing
from reportcard.i18n import Translator
from reportcard.models import OverallPerformance, SubjectResult

logger = logging.getLogger(__name__)

PROMOTION_KEYS = ("promoted", "conditional_promotion", "repeated")


# ── Statistics ──────────────────────────────────────────────────────

def count_passed(subjects: Sequence[SubjectResult], passing_score: float = DEFAULT_PASSING_SCORE) -> int:
    return sum(1 for s in subjects if is_passing(s.score, passing_score))


def mean_score(subjects: Sequence[SubjectResult]) -> Optional[float]:
    scores = [float(s.score) for s in subjects if s.score is not None]
    if not scores:
        return None
    return sum(scores) / len(scores)


def _remark_average(subjects: Sequence[SubjectResult], overall: Optional[OverallPerformance]) -> str:
    average = overall.average if overall is not None else None
    if average is None:
        average = mean_score(subjects)
    return f"{average:.2f}" if average is not None else "0.00"


# ── Narratives ──────────────────────────────────────────────────────

def generate_promotion_remark(
    status_key: Optional[str],
    subjects: Sequence[SubjectResult],
    overall: Optional[OverallPerformance],
    passing_score: float,
    t: Translator,
) -> str:
    """
    Translated remark for a known promotion key.

    Unknown or missing keys fall back to the decision remarks, then the
    general remarks recorded upstream, then an empty string.
    """
    key = (status_key or "").strip().lower()
    if key in PROMOTION_KEYS:
        return t(f"Export.promotionRemark.{key}", {
            "average": _remark_average(subjects, overall),
            "passed": count_passed(subjects, passing_score),
            "total": len(subjects),
        })

    if key:
        logger.debug("Unknown promotion status %r, using recorded remarks", status_key)
    if overall is None:
        return ""
    return overall.promotion_decision_remarks or overall.remarks or ""


def promotion_status_text(overall: Optional[OverallPerformance], t: Translator) -> Optional[str]:
    """Display text for the promotion status, or None when there is none."""
    if overall is None:
        return None
    if overall.promotion_status_display:
        return overall.promotion_status_display
    key = (overall.promotion_status_key or "").strip().lower()
    if not key:
        return None
    if key in PROMOTION_KEYS:
        return t(f"Export.promotionStatus.{key}")
    return overall.promotion_status_key
