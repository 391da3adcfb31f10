"""
grading.py — Score bands and conditional styling on the /20 scale.

Maps a subject or overall score to:
  - a qualitative grade label (excellent … very weak), and
  - a ScoreTone (pass / fail / highlight) that the palette turns into a color.

Thresholds are inclusive of the higher band: a score exactly on a boundary
takes the better label.
"""

from typing import Any, Dict, List, Optional

from reportcard.config import DEFAULT_PASSING_SCORE, HIGHLIGHT_SCORE, MAX_SCORE, ScoreTone


# Grade bands (min_score, label). Ordered high to low.
GRADE_BANDS = [
    (18.0, "excellent"),
    (16.0, "very_good"),
    (14.0, "good"),
    (12.0, "satisfactory"),
    (10.0, "passing"),
    (8.0, "needs_improvement"),
    (6.0, "weak"),
    (0.0, "very_weak"),
]


def _clamp_score(score: Optional[float]) -> Optional[float]:
    if score is None:
        return None
    try:
        value = float(score)
    except (TypeError, ValueError):
        return None
    return max(0.0, min(float(MAX_SCORE), value))


def classify(score: Optional[float]) -> Optional[str]:
    """Return the grade label for a /20 score, or None when there is no score."""
    value = _clamp_score(score)
    if value is None:
        return None
    for min_score, label in GRADE_BANDS:
        if value >= min_score:
            return label
    return GRADE_BANDS[-1][1]


def color_for(
    score: Optional[float],
    passing_score: float = DEFAULT_PASSING_SCORE,
    highlight: bool = True,
) -> ScoreTone:
    """
    Tone for a score: FAIL below the pass mark, PASS otherwise, HIGHLIGHT for
    averages at or above 16 when ``highlight`` is set. Missing scores are NEUTRAL.
    """
    value = _clamp_score(score)
    if value is None:
        return ScoreTone.NEUTRAL
    if value < passing_score:
        return ScoreTone.FAIL
    if highlight and value >= HIGHLIGHT_SCORE:
        return ScoreTone.HIGHLIGHT
    return ScoreTone.PASS


def is_passing(score: Optional[float], passing_score: float = DEFAULT_PASSING_SCORE) -> bool:
    return score is not None and float(score) >= passing_score


def get_grade_thresholds() -> List[Dict[str, Any]]:
    """Full band scale, for legends and the /api/config endpoint."""
    thresholds = []
    for idx, (min_score, label) in enumerate(GRADE_BANDS):
        max_score = float(MAX_SCORE) if idx == 0 else GRADE_BANDS[idx - 1][0] - 0.01
        thresholds.append({"min": min_score, "max": round(max_score, 2), "label": label})
    return thresholds
