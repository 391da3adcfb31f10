"""
renderer.py — Draw a ReportLayout with reportlab.

The one place that touches a canvas. Layout coordinates run top-down from
the page's top-left corner; PDF space runs bottom-up, so every y is flipped
against the page height here.
"""

import io
import re
from typing import Optional

from reportlab.lib import colors
from reportlab.pdfgen import canvas as pdf_canvas

from reportcard.commands import FooterCommand, LineCommand, RectCommand, ReportLayout, TextCommand


def _color(value: str):
    return colors.HexColor(value)


def _draw_text(c, cmd: TextCommand, page_height: float) -> None:
    c.setFont(cmd.font, cmd.size)
    c.setFillColor(_color(cmd.color))
    y = page_height - cmd.y
    if cmd.align == "center":
        c.drawCentredString(cmd.x, y, cmd.text)
    elif cmd.align == "right":
        c.drawRightString(cmd.x, y, cmd.text)
    else:
        c.drawString(cmd.x, y, cmd.text)


def _draw_rect(c, cmd: RectCommand, page_height: float) -> None:
    if not cmd.stroke and not cmd.fill:
        return
    c.setLineWidth(cmd.line_width)
    if cmd.stroke:
        c.setStrokeColor(_color(cmd.stroke))
    if cmd.fill:
        c.setFillColor(_color(cmd.fill))
    y = page_height - cmd.y - cmd.height
    stroke, fill = int(bool(cmd.stroke)), int(bool(cmd.fill))
    if cmd.radius > 0:
        c.roundRect(cmd.x, y, cmd.width, cmd.height, cmd.radius, stroke=stroke, fill=fill)
    else:
        c.rect(cmd.x, y, cmd.width, cmd.height, stroke=stroke, fill=fill)


def _draw_line(c, cmd: LineCommand, page_height: float) -> None:
    c.setLineWidth(cmd.line_width)
    c.setStrokeColor(_color(cmd.color))
    c.line(cmd.x1, page_height - cmd.y1, cmd.x2, page_height - cmd.y2)


def _draw_footer(c, cmd: FooterCommand, page_height: float, page_number: int, page_count: int) -> None:
    """School name, page n / total and generation date along the bottom margin."""
    y = page_height - cmd.y
    if cmd.rule_color:
        c.setLineWidth(0.3)
        c.setStrokeColor(_color(cmd.rule_color))
        rule_y = y + cmd.size * 1.5
        c.line(cmd.x_left, rule_y, cmd.x_right, rule_y)
    c.setFont(cmd.font, cmd.size)
    c.setFillColor(_color(cmd.color))
    c.drawString(cmd.x_left, y, cmd.left_text)
    c.drawCentredString((cmd.x_left + cmd.x_right) / 2, y, f"{cmd.page_label} {page_number} / {page_count}")
    c.drawRightString(cmd.x_right, y, cmd.right_text)


def render_pdf(layout: ReportLayout, title: Optional[str] = None, author: Optional[str] = None) -> bytes:
    """Replay the layout onto an in-memory canvas and return the PDF bytes."""
    buffer = io.BytesIO()
    c = pdf_canvas.Canvas(buffer, pagesize=(layout.page_width, layout.page_height))
    if title:
        c.setTitle(title)
    if author:
        c.setAuthor(author)

    page_count = layout.page_count
    for page in layout.pages:
        c.saveState()
        for command in page.commands:
            if isinstance(command, TextCommand):
                _draw_text(c, command, layout.page_height)
            elif isinstance(command, RectCommand):
                _draw_rect(c, command, layout.page_height)
            elif isinstance(command, LineCommand):
                _draw_line(c, command, layout.page_height)
            elif isinstance(command, FooterCommand):
                _draw_footer(c, command, layout.page_height, page.number, page_count)
        c.restoreState()
        c.showPage()

    c.save()
    return buffer.getvalue()


def _safe_token(value: Optional[str], fallback: str) -> str:
    """Lowercase, every non-alphanumeric character replaced with '_'."""
    token = re.sub(r"[^a-z0-9]", "_", str(value or "").lower())
    return token or fallback


def report_filename(student_name: Optional[str], period_name: Optional[str]) -> str:
    return f"{_safe_token(student_name, 'student')}_{_safe_token(period_name, 'report')}.pdf"
