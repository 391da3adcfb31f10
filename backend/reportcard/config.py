"""
config.py — Layout configuration for the report card.

Page geometry, typography, spacing, palette and column weights. Everything
that a school might want to tune (pass mark, colors, grade bands) is data
here or in grading.py, never an inline literal in the layout code.

All lengths are PDF points; millimetre values are converted with
reportlab's ``mm`` unit.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm


DEFAULT_PASSING_SCORE = 10.0
MAX_SCORE = 20
HIGHLIGHT_SCORE = 16.0


# ── Page geometry ───────────────────────────────────────────────────

@dataclass(frozen=True)
class PageMetrics:
    width: float = A4[0]
    height: float = A4[1]
    margin_left: float = 15 * mm
    margin_right: float = 15 * mm
    margin_top: float = 15 * mm
    margin_bottom: float = 15 * mm
    footer_reserve: float = 5 * mm

    @property
    def usable_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def right_edge(self) -> float:
        return self.margin_left + self.usable_width

    @property
    def content_bottom(self) -> float:
        """Lowest y (top-down) any content block may reach."""
        return self.height - (self.margin_bottom + self.footer_reserve)

    @property
    def footer_y(self) -> float:
        return self.height - self.margin_bottom / 1.5


A4_PORTRAIT = PageMetrics()


# ── Typography ──────────────────────────────────────────────────────

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"
FONT_BOLD_ITALIC = "Helvetica-BoldOblique"

FONT_FACES = {
    "normal": FONT_REGULAR,
    "bold": FONT_BOLD,
    "italic": FONT_ITALIC,
    "bolditalic": FONT_BOLD_ITALIC,
}

FONT_SIZES = {
    "huge_title": 16,
    "large_title": 14,
    "title": 12,
    "subtitle": 10,
    "header": 9,
    "body": 9,
    "small": 8,
    "tiny": 7.5,
    "micro": 6.5,
}

LINE_SPACING_FACTOR = 1.2


# ── Spacing ─────────────────────────────────────────────────────────

SECTION_SPACING = 8 * mm
HEADING_TO_TABLE_SPACING = 3 * mm
HEADER_LINE_GAP = 1 * mm

CARD_PADDING = 4 * mm
CARD_ROW_GAP = 3 * mm
CARD_RADIUS = 3 * mm

HEAD_CELL_PADDING = (2 * mm, 1 * mm)  # (vertical, horizontal)
SUMMARY_CELL_PADDING = (2.5 * mm, 2 * mm)
BODY_CELL_PADDING = (1.5 * mm, 1.5 * mm)
SPAN_CELL_PADDING = (2 * mm, 3 * mm)
TABLE_LINE_WIDTH = 0.3

RUNNING_HEADER_HEIGHT = 9 * mm

REMARKS_TRAILING_HEIGHT = 35 * mm
SIGNATURE_AREA_ESTIMATE = 30 * mm
SIGNATURE_MIN_GAP = 10 * mm
SIGNATURE_TEXT_OFFSET = 4 * mm


# ── Palette ─────────────────────────────────────────────────────────

class ScoreTone(str, Enum):
    """Qualitative rendering of a score, resolved to a color by the palette."""

    PASS = "pass"
    FAIL = "fail"
    HIGHLIGHT = "highlight"
    ABSENT = "absent"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class Palette:
    primary: str = "#1e293b"
    secondary: str = "#475569"
    text: str = "#111827"
    light_text: str = "#64748b"
    accent: str = "#2563eb"
    border: str = "#cbd5e1"
    light_border: str = "#e2e8f0"
    light_bg: str = "#f8fafc"
    white: str = "#ffffff"
    absent: str = "#f97316"
    passed: str = "#16a34a"
    failed: str = "#dc2626"

    def for_tone(self, tone: ScoreTone, default: Optional[str] = None) -> str:
        return {
            ScoreTone.PASS: self.passed,
            ScoreTone.FAIL: self.failed,
            ScoreTone.HIGHLIGHT: self.accent,
            ScoreTone.ABSENT: self.absent,
            ScoreTone.NEUTRAL: self.secondary,
        }.get(tone, default or self.text)


DEFAULT_PALETTE = Palette()


# ── Column weights ──────────────────────────────────────────────────

# Fraction of the usable width per fixed subject-table column.
# "class_average" only exists on sequence reports.
SUBJECT_COLUMN_WEIGHTS: Dict[str, float] = {
    "subject": 0.20,
    "coefficient": 0.05,
    "score": 0.07,
    "rank": 0.06,
    "class_average": 0.08,
    "remarks": 0.16,
    "teacher": 0.12,
}

MIN_DYNAMIC_SHARE = 0.05
MIN_COLUMN_WIDTH = 5 * mm

SUMMARY_COLUMN_WEIGHTS: Tuple[Tuple[str, float], ...] = (
    ("average", 0.22),
    ("rank", 0.18),
    ("total_points", 0.18),
    ("class_average", 0.16),
    ("total_coefficient", 0.13),
    ("decision", 0.13),
)
