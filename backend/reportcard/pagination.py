"""
pagination.py — Page and cursor bookkeeping for the layout.

The Paginator owns the vertical cursor. Layout code asks it for space
before placing a block; when the block would cross the content bottom the
current page is closed (its footer appended), a new page opens, the running
header is drawn through the ``on_new_page`` callback and the cursor resumes
below it.
"""

import logging
from typing import Callable, List, Optional, Tuple

from reportcard.commands import Command, FooterCommand, Page, SectionMark
from reportcard.config import A4_PORTRAIT, PageMetrics

logger = logging.getLogger(__name__)

_EPS = 1e-6


class Paginator:
    def __init__(
        self,
        metrics: PageMetrics = A4_PORTRAIT,
        on_new_page: Optional[Callable[["Paginator"], None]] = None,
        footer_factory: Optional[Callable[[int], FooterCommand]] = None,
    ):
        self.metrics = metrics
        self.on_new_page = on_new_page
        self.footer_factory = footer_factory
        self.page_number = 1
        self.cursor_y = metrics.margin_top
        self._page_start_y = self.cursor_y
        self._commands: List[Command] = []
        self._pages: List[Page] = []
        self._sections: List[SectionMark] = []
        self._finished = False

    # ── Geometry ────────────────────────────────────────────────────

    @property
    def bottom(self) -> float:
        return self.metrics.content_bottom

    @property
    def remaining(self) -> float:
        return max(0.0, self.bottom - self.cursor_y)

    @property
    def at_page_start(self) -> bool:
        return self.cursor_y <= self._page_start_y + _EPS

    def fits(self, height: float) -> bool:
        return self.cursor_y + height <= self.bottom + _EPS

    # ── Cursor ──────────────────────────────────────────────────────

    def advance(self, dy: float) -> None:
        self.cursor_y += dy

    def move_to(self, y: float) -> None:
        self.cursor_y = y

    def ensure_space(self, height: float) -> bool:
        """
        Start a new page unless ``height`` fits below the cursor.
        Returns True when a break happened. A block taller than a whole page
        is placed anyway rather than breaking forever.
        """
        if self.fits(height):
            return False
        if self.at_page_start:
            logger.warning(
                "Block of %.1fpt exceeds the page body on page %d; drawing it unsplit",
                height, self.page_number,
            )
            return False
        self.new_page()
        return True

    def new_page(self) -> None:
        self._check_open()
        self._close_page()
        self.page_number += 1
        self.cursor_y = self.metrics.margin_top
        if self.on_new_page is not None:
            self.on_new_page(self)
        self._page_start_y = self.cursor_y
        logger.debug("Page break: now on page %d, cursor at %.1f", self.page_number, self.cursor_y)

    # ── Output ──────────────────────────────────────────────────────

    def add(self, *commands: Command) -> None:
        self._check_open()
        self._commands.extend(commands)

    def mark(self, section: str) -> SectionMark:
        mark = SectionMark(section=section, page=self.page_number, y=self.cursor_y)
        self._sections.append(mark)
        logger.debug("Section %s starts on page %d at y=%.1f", section, mark.page, mark.y)
        return mark

    @property
    def sections(self) -> Tuple[SectionMark, ...]:
        return tuple(self._sections)

    def finish(self) -> Tuple[Page, ...]:
        """Close the last page and return every page. Safe to call twice."""
        if not self._finished:
            self._close_page()
            self._finished = True
        return tuple(self._pages)

    def _close_page(self) -> None:
        commands = list(self._commands)
        if self.footer_factory is not None:
            commands.append(self.footer_factory(self.page_number))
        self._pages.append(Page(number=self.page_number, commands=tuple(commands)))
        self._commands = []

    def _check_open(self) -> None:
        if self._finished:
            raise RuntimeError("Paginator already finished")
