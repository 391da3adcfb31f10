"""
commands.py — The immutable layout tree.

Layout code never draws. It emits these commands, grouped by page, and the
renderer replays them once onto a reportlab canvas. Coordinates are points
measured from the top-left corner of the page (y grows downwards); the
renderer flips them into PDF space.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from reportcard.config import DEFAULT_PALETTE, FONT_REGULAR, FONT_SIZES, TABLE_LINE_WIDTH


@dataclass(frozen=True)
class TextCommand:
    x: float
    y: float  # baseline
    text: str
    font: str = FONT_REGULAR
    size: float = FONT_SIZES["body"]
    color: str = DEFAULT_PALETTE.text
    align: str = "left"  # left | center | right


@dataclass(frozen=True)
class RectCommand:
    x: float
    y: float  # top edge
    width: float
    height: float
    stroke: Optional[str] = None
    fill: Optional[str] = None
    line_width: float = TABLE_LINE_WIDTH
    radius: float = 0.0


@dataclass(frozen=True)
class LineCommand:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = DEFAULT_PALETTE.border
    line_width: float = TABLE_LINE_WIDTH


@dataclass(frozen=True)
class FooterCommand:
    """Running footer; the page label is completed with "n / total" at render time."""
    y: float
    x_left: float
    x_right: float
    left_text: str
    right_text: str
    page_label: str = "Page"
    font: str = FONT_REGULAR
    size: float = FONT_SIZES["micro"]
    color: str = DEFAULT_PALETTE.light_text
    rule_color: Optional[str] = DEFAULT_PALETTE.light_border


Command = Union[TextCommand, RectCommand, LineCommand, FooterCommand]


@dataclass(frozen=True)
class Page:
    number: int
    commands: Tuple[Command, ...]

    @property
    def footer(self) -> Optional[FooterCommand]:
        for command in self.commands:
            if isinstance(command, FooterCommand):
                return command
        return None

    def texts(self) -> Tuple[str, ...]:
        return tuple(c.text for c in self.commands if isinstance(c, TextCommand))


@dataclass(frozen=True)
class SectionMark:
    section: str
    page: int
    y: float


@dataclass(frozen=True)
class ReportLayout:
    page_width: float
    page_height: float
    pages: Tuple[Page, ...]
    sections: Tuple[SectionMark, ...] = ()

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def texts(self) -> Tuple[str, ...]:
        return tuple(text for page in self.pages for text in page.texts())
