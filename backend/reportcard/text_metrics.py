"""
text_metrics.py — Deterministic text measurement.

Wraps text with reportlab's own font metrics so the layout knows how tall
a block will be before anything is drawn. Measurement never fails: empty or
missing text counts as one empty line, so a block never collapses to zero
height.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import getAscent, stringWidth

from reportcard.config import FONT_REGULAR, LINE_SPACING_FACTOR

TextInput = Union[None, str, Sequence[str]]

ELLIPSIS = "..."


@dataclass(frozen=True)
class TextMeasure:
    lines: Tuple[str, ...]
    line_count: int
    height: float


def line_height(font_size: float) -> float:
    return font_size * LINE_SPACING_FACTOR


def baseline_offset(font_size: float, font_name: str = FONT_REGULAR) -> float:
    """Distance from the top of a line box to the text baseline."""
    return (line_height(font_size) - font_size) / 2 + getAscent(font_name, font_size)


def text_width(text: Optional[str], font_size: float, font_name: str = FONT_REGULAR) -> float:
    return stringWidth(text or "", font_name, font_size)


def split_lines(
    text: TextInput,
    font_size: float,
    max_width: Optional[float] = None,
    font_name: str = FONT_REGULAR,
) -> List[str]:
    """
    Strings are wrapped at ``max_width`` when one is given; lists are taken
    as already-split lines.
    """
    if text is None:
        return [""]
    if isinstance(text, (list, tuple)):
        lines = ["" if line is None else str(line) for line in text]
    elif max_width is not None and max_width > 0:
        lines = simpleSplit(str(text), font_name, font_size, max_width)
    else:
        lines = [str(text)]
    return lines or [""]


def measure(
    text: TextInput,
    font_size: float,
    max_width: Optional[float] = None,
    font_name: str = FONT_REGULAR,
) -> TextMeasure:
    lines = split_lines(text, font_size, max_width, font_name)
    return TextMeasure(
        lines=tuple(lines),
        line_count=len(lines),
        height=len(lines) * line_height(font_size),
    )


def fit_lines(lines: Sequence[str], max_lines: int) -> List[str]:
    """Keep at most ``max_lines`` lines, marking a cut with an ellipsis."""
    if max_lines <= 0:
        return []
    kept = list(lines[:max_lines])
    if len(lines) > max_lines and kept:
        last = kept[-1].rstrip()
        if len(last) > len(ELLIPSIS) + 2:
            kept[-1] = last[: len(last) - len(ELLIPSIS) - 1] + ELLIPSIS
        else:
            kept[-1] = ELLIPSIS
    return kept


def truncate_to_width(
    text: Optional[str],
    font_size: float,
    max_width: float,
    font_name: str = FONT_REGULAR,
) -> str:
    """First wrapped line of ``text``, ellipsized when the rest is cut."""
    lines = split_lines(text or "", font_size, max_width, font_name)
    if len(lines) == 1:
        return lines[0]
    first = lines[0]
    while first and text_width(first + ELLIPSIS, font_size, font_name) > max_width:
        first = first[:-1]
    return first.rstrip() + ELLIPSIS
