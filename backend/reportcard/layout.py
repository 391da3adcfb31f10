"""
layout.py — Report-card layout composition.

Lays the document out section by section, top to bottom:

  1. Header            school block (left) and report title / period (right)
  2. Student card      rounded card with six label/value pairs
  3. Overall summary   six key metrics, plus promotion rows on year reports
  4. Subject table     dynamic breakdown columns, striped rows
  5. Remarks           remarks box and the two signature lines

Every function here is pure: it reads a RenderContext and the validated
payload and emits commands into a Paginator. Nothing touches a canvas.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from reportcard.columns import (
    DYNAMIC,
    BreakdownCell,
    allocate_column_widths,
    allocate_widths,
    build_column_schema,
    build_subject_rows,
    format_number,
    format_score,
)
from reportcard.commands import FooterCommand, LineCommand, RectCommand, ReportLayout, TextCommand
from reportcard.config import (
    A4_PORTRAIT,
    BODY_CELL_PADDING,
    CARD_PADDING,
    CARD_RADIUS,
    CARD_ROW_GAP,
    DEFAULT_PALETTE,
    DEFAULT_PASSING_SCORE,
    FONT_FACES,
    FONT_SIZES,
    HEAD_CELL_PADDING,
    HEADER_LINE_GAP,
    HEADING_TO_TABLE_SPACING,
    MAX_SCORE,
    REMARKS_TRAILING_HEIGHT,
    RUNNING_HEADER_HEIGHT,
    SECTION_SPACING,
    SIGNATURE_AREA_ESTIMATE,
    SIGNATURE_MIN_GAP,
    SIGNATURE_TEXT_OFFSET,
    SPAN_CELL_PADDING,
    SUMMARY_CELL_PADDING,
    SUMMARY_COLUMN_WEIGHTS,
    PageMetrics,
    Palette,
)
from reportcard.grading import color_for, is_passing
from reportcard.i18n import Translator
from reportcard.models import ResultPayload, SchoolInfo, StudentInfo
from reportcard.pagination import Paginator
from reportcard.remarks import count_passed, generate_promotion_remark, promotion_status_text
from reportcard.text_metrics import (
    baseline_offset,
    fit_lines,
    line_height,
    measure,
    text_width,
    truncate_to_width,
)

logger = logging.getLogger(__name__)

MAX_CELL_LINES = 3


@dataclass(frozen=True)
class RenderContext:
    """Everything the layout needs besides the data itself."""
    t: Translator
    metrics: PageMetrics = A4_PORTRAIT
    palette: Palette = DEFAULT_PALETTE
    fonts: Mapping[str, str] = field(default_factory=lambda: dict(FONT_FACES))
    font_sizes: Mapping[str, float] = field(default_factory=lambda: dict(FONT_SIZES))
    passing_score: float = DEFAULT_PASSING_SCORE
    generated_on: date = field(default_factory=date.today)

    def font(self, emphasis: str = "normal") -> str:
        return self.fonts.get(emphasis, self.fonts["normal"])

    def size(self, role: str) -> float:
        return self.font_sizes[role]

    @property
    def placeholder(self) -> str:
        return self.t("Export.notAvailableShort")


@dataclass(frozen=True)
class _Cell:
    lines: Tuple[str, ...]
    font: str
    size: float
    color: str
    align: str = "left"
    note: Optional[str] = None
    note_size: float = FONT_SIZES["micro"]

    @property
    def content_height(self) -> float:
        height = len(self.lines) * line_height(self.size)
        if self.note:
            height += line_height(self.note_size)
        return height


# ── Drawing helpers ─────────────────────────────────────────────────

def _text_block(
    x: float,
    top: float,
    lines: Sequence[str],
    font: str,
    size: float,
    color: str,
    align: str = "left",
) -> List[TextCommand]:
    offset = baseline_offset(size, font)
    step = line_height(size)
    return [
        TextCommand(x=x, y=top + offset + i * step, text=line, font=font, size=size, color=color, align=align)
        for i, line in enumerate(lines)
    ]


def _cell(
    ctx: RenderContext,
    text: str,
    width: float,
    padding: Tuple[float, float],
    size: float,
    emphasis: str = "normal",
    color: Optional[str] = None,
    align: str = "left",
    note: Optional[str] = None,
    max_lines: Optional[int] = MAX_CELL_LINES,
) -> _Cell:
    font = ctx.font(emphasis)
    lines = measure(text, size, width - 2 * padding[1], font).lines
    if max_lines:
        lines = tuple(fit_lines(lines, max_lines))
    return _Cell(lines=lines, font=font, size=size, color=color or ctx.palette.text, align=align, note=note)


def _row_height(cells: Sequence[_Cell], padding: Tuple[float, float]) -> float:
    return max(c.content_height for c in cells) + 2 * padding[0]


def _draw_row(
    ctx: RenderContext,
    pg: Paginator,
    widths: Sequence[float],
    cells: Sequence[_Cell],
    height: float,
    padding: Tuple[float, float],
    fill: Optional[str] = None,
) -> None:
    top = pg.cursor_y
    x = ctx.metrics.margin_left
    for width, cell in zip(widths, cells):
        pg.add(RectCommand(x=x, y=top, width=width, height=height, stroke=ctx.palette.border, fill=fill))
        if cell.align == "center":
            anchor = x + width / 2
        elif cell.align == "right":
            anchor = x + width - padding[1]
        else:
            anchor = x + padding[1]
        text_top = top + (height - cell.content_height) / 2
        pg.add(*_text_block(anchor, text_top, cell.lines, cell.font, cell.size, cell.color, cell.align))
        if cell.note:
            note_top = text_top + len(cell.lines) * line_height(cell.size)
            pg.add(*_text_block(
                anchor, note_top, [cell.note], ctx.font("normal"), cell.note_size,
                ctx.palette.light_text, cell.align,
            ))
        x += width
    pg.advance(height)


def _heading(ctx: RenderContext, pg: Paginator, text: str, keep_with: float = 0.0) -> None:
    """Section title; kept on the same page as the first ``keep_with`` points of content."""
    size = ctx.size("title")
    height = line_height(size)
    pg.ensure_space(height + HEADING_TO_TABLE_SPACING + keep_with)
    pg.add(*_text_block(ctx.metrics.margin_left, pg.cursor_y, [text], ctx.font("bold"), size, ctx.palette.primary))
    pg.advance(height + HEADING_TO_TABLE_SPACING)


# ── Running header / footer ─────────────────────────────────────────

def _school_name(ctx: RenderContext, school: SchoolInfo) -> str:
    return school.name or ctx.t("Export.unknownSchoolName")


def _period_label(ctx: RenderContext, payload: ResultPayload, school: SchoolInfo) -> str:
    period = payload.period_info.name or ctx.t("Export.unknownPeriod")
    year = (
        payload.period_info.academic_year_name
        or school.active_academic_year_name
        or ctx.t("Export.unknownAcademicYear")
    )
    return f"{period} ({year})"


def _student_name(ctx: RenderContext, student: Optional[StudentInfo]) -> str:
    name = student.display_name if student is not None else None
    return name or ctx.t("Export.unknownStudent")


def make_running_header(ctx: RenderContext, school: SchoolInfo, caption: str):
    """Callback that draws the compact header of continuation pages."""
    m = ctx.metrics
    size = ctx.size("small")

    def draw(pg: Paginator) -> None:
        top = pg.cursor_y
        half = m.usable_width / 2
        name = truncate_to_width(_school_name(ctx, school), size, half, ctx.font("bold"))
        right = truncate_to_width(caption, size, half, ctx.font("normal"))
        pg.add(*_text_block(m.margin_left, top, [name], ctx.font("bold"), size, ctx.palette.primary))
        pg.add(*_text_block(m.right_edge, top, [right], ctx.font("normal"), size, ctx.palette.secondary, "right"))
        rule_y = top + line_height(size) + HEADER_LINE_GAP
        pg.add(LineCommand(m.margin_left, rule_y, m.right_edge, rule_y, color=ctx.palette.light_border))
        pg.move_to(top + RUNNING_HEADER_HEIGHT)

    return draw


def make_footer_factory(ctx: RenderContext, school: SchoolInfo):
    m = ctx.metrics
    size = ctx.size("micro")
    left = truncate_to_width(_school_name(ctx, school), size, m.usable_width / 3, ctx.font("normal"))
    right = f"{ctx.t('Export.generated')}: {ctx.generated_on.strftime('%d/%m/%Y')}"

    def footer(page_number: int) -> FooterCommand:
        return FooterCommand(
            y=m.footer_y,
            x_left=m.margin_left,
            x_right=m.right_edge,
            left_text=left,
            right_text=right,
            page_label=ctx.t("Export.page"),
            font=ctx.font("normal"),
            size=size,
            color=ctx.palette.light_text,
            rule_color=ctx.palette.light_border,
        )

    return footer


# ── 1. Header ───────────────────────────────────────────────────────

def compose_header(ctx: RenderContext, pg: Paginator, payload: ResultPayload, school: SchoolInfo) -> None:
    m, p, t = ctx.metrics, ctx.palette, ctx.t
    top = pg.cursor_y
    left_width = m.usable_width * 0.6 - CARD_PADDING
    right_width = m.usable_width * 0.4

    school_lines = [(_school_name(ctx, school), ctx.size("large_title"), ctx.font("bold"), p.primary)]
    if school.moto:
        school_lines.append((school.moto, ctx.size("small"), ctx.font("italic"), p.secondary))
    if school.phone_number:
        school_lines.append((f"{t('Export.telLabel')}: {school.phone_number}", ctx.size("small"), ctx.font("normal"), p.secondary))
    if school.email:
        school_lines.append((f"{t('Export.emailLabel')}: {school.email}", ctx.size("small"), ctx.font("normal"), p.secondary))

    y = top
    for text, size, font, color in school_lines:
        block = measure(text, size, left_width, font)
        pg.add(*_text_block(m.margin_left, y, block.lines, font, size, color))
        y += block.height
    left_bottom = y

    y = top
    right_lines = [
        (t("Export.reportCardTitle"), ctx.size("huge_title"), ctx.font("bold"), p.primary),
        (_period_label(ctx, payload, school), ctx.size("subtitle"), ctx.font("normal"), p.secondary),
    ]
    for text, size, font, color in right_lines:
        block = measure(text, size, right_width, font)
        pg.add(*_text_block(m.right_edge, y, block.lines, font, size, color, "right"))
        y += block.height
    right_bottom = y

    rule_y = max(left_bottom, right_bottom) + HEADER_LINE_GAP
    pg.add(LineCommand(m.margin_left, rule_y, m.right_edge, rule_y, color=p.primary, line_width=0.8))
    pg.move_to(rule_y + SECTION_SPACING)


# ── 2. Student card ─────────────────────────────────────────────────

def _student_pairs(ctx: RenderContext, student: Optional[StudentInfo]) -> List[Tuple[str, str]]:
    t, na = ctx.t, ctx.placeholder
    s = student or StudentInfo()
    return [
        (t("Export.studentLabel"), _student_name(ctx, student)),
        (t("Export.matriculeLabel"), str(s.matricule) if s.matricule not in (None, "") else na),
        (t("Export.classLabel"), s.class_name or t("Export.unknownClass")),
        (t("Export.dobLabel"), s.date_of_birth or na),
        (t("Export.pobLabel"), s.place_of_birth or na),
        (t("Export.sexLabel"), s.sex_display or na),
    ]


def compose_student_card(ctx: RenderContext, pg: Paginator, student: Optional[StudentInfo]) -> None:
    m, p = ctx.metrics, ctx.palette
    size = ctx.size("body")
    pairs = _student_pairs(ctx, student)

    rows = math.ceil(len(pairs) / 2)
    row_height = line_height(size) + CARD_ROW_GAP
    height = rows * row_height - CARD_ROW_GAP + 2 * CARD_PADDING
    pg.ensure_space(height)

    top = pg.cursor_y
    pg.add(RectCommand(
        x=m.margin_left, y=top, width=m.usable_width, height=height,
        stroke=p.border, fill=p.light_bg, radius=CARD_RADIUS,
    ))

    column_width = (m.usable_width - 2 * CARD_PADDING) / 2
    for idx, (label, value) in enumerate(pairs):
        row, col = divmod(idx, 2)
        x = m.margin_left + CARD_PADDING + col * column_width
        y = top + CARD_PADDING + row * row_height
        label_text = f"{label}:"
        label_w = text_width(label_text, size, ctx.font("bold")) + 2
        value = truncate_to_width(value, size, column_width - label_w - CARD_PADDING, ctx.font("normal"))
        pg.add(*_text_block(x, y, [label_text], ctx.font("bold"), size, p.secondary))
        pg.add(*_text_block(x + label_w, y, [value], ctx.font("normal"), size, p.text))

    pg.advance(height + SECTION_SPACING)


# ── 3. Overall summary ──────────────────────────────────────────────

def _summary_values(ctx: RenderContext, payload: ResultPayload) -> List[Tuple[str, str, str]]:
    """(header, value, color) for the six summary metrics."""
    t, p, na = ctx.t, ctx.palette, ctx.placeholder
    overall = payload.overall_performance
    average = overall.average if overall else None

    if overall and overall.rank is not None and overall.class_size:
        rank = f"{overall.rank} / {overall.class_size}"
    elif overall and overall.rank is not None:
        rank = str(overall.rank)
    else:
        rank = na

    if average is None:
        decision, decision_color = t("Export.unknown"), p.secondary
    elif is_passing(average, ctx.passing_score):
        decision, decision_color = t("Export.passed"), p.passed
    else:
        decision, decision_color = t("Export.failed"), p.failed

    values = {
        "average": (
            t("Export.averageScore"),
            f"{average:.2f} / {MAX_SCORE}" if average is not None else na,
            p.for_tone(color_for(average, ctx.passing_score)),
        ),
        "rank": (t("Export.classRank"), rank, p.text),
        "total_points": (t("Export.totalPoints"), format_score(overall.total_points if overall else None, na), p.text),
        "class_average": (
            t("Export.classAverage"),
            format_score(overall.class_average_overall if overall else None, na),
            p.text,
        ),
        "total_coefficient": (
            t("Export.totalCoefficient"),
            format_number(overall.total_coefficient if overall else None, na),
            p.text,
        ),
        "decision": (t("Export.decision"), decision, decision_color),
    }
    return [values[key] for key, _ in SUMMARY_COLUMN_WEIGHTS]


# Palette attribute per promotion status.
_PROMOTION_COLORS = {
    "promoted": "passed",
    "conditional_promotion": "passed",
    "repeated": "failed",
}


def _span_row(ctx: RenderContext, pg: Paginator, label: str, value: str, color: str) -> None:
    m = ctx.metrics
    size = ctx.size("small")
    cell = _cell(
        ctx, f"{label}: {value}", m.usable_width, SPAN_CELL_PADDING, size,
        emphasis="bold", color=color, max_lines=None,
    )
    height = _row_height([cell], SPAN_CELL_PADDING)
    pg.ensure_space(height)
    _draw_row(ctx, pg, [m.usable_width], [cell], height, SPAN_CELL_PADDING, fill=ctx.palette.white)


def compose_summary(ctx: RenderContext, pg: Paginator, payload: ResultPayload) -> None:
    m, p, t = ctx.metrics, ctx.palette, ctx.t
    metrics = _summary_values(ctx, payload)
    fixed, _ = allocate_widths(m.usable_width, dict(SUMMARY_COLUMN_WEIGHTS), 0, absorb_key=None)
    widths = [fixed[key] for key, _ in SUMMARY_COLUMN_WEIGHTS]

    head = [
        _cell(ctx, header, w, SUMMARY_CELL_PADDING, ctx.size("small"), "bold", p.secondary, "center")
        for (header, _, _), w in zip(metrics, widths)
    ]
    body = [
        _cell(ctx, value, w, SUMMARY_CELL_PADDING, ctx.size("subtitle"), "bold", color, "center")
        for (_, value, color), w in zip(metrics, widths)
    ]
    head_height = _row_height(head, SUMMARY_CELL_PADDING)
    body_height = _row_height(body, SUMMARY_CELL_PADDING)

    _heading(ctx, pg, t("Export.overallSummary"), keep_with=head_height + body_height)
    _draw_row(ctx, pg, widths, head, head_height, SUMMARY_CELL_PADDING, fill=p.light_bg)
    _draw_row(ctx, pg, widths, body, body_height, SUMMARY_CELL_PADDING, fill=p.white)

    if payload.period_type == "year":
        overall = payload.overall_performance
        status = promotion_status_text(overall, t)
        if status:
            key = (overall.promotion_status_key or "").lower()
            color = getattr(p, _PROMOTION_COLORS.get(key, "text"))
            _span_row(ctx, pg, t("Export.promotionStatusLabel"), status, color)
        remark = generate_promotion_remark(
            overall.promotion_status_key if overall else None,
            payload.subject_breakdown, overall, ctx.passing_score, t,
        )
        if remark:
            _span_row(ctx, pg, t("Export.promotionRemarksLabel"), remark, p.text)

    pg.advance(SECTION_SPACING)


# ── 4. Subject table ────────────────────────────────────────────────

_LEFT_ALIGNED = {"subject", "remarks", "teacher"}


def _body_cell(ctx: RenderContext, column_key: str, cell: BreakdownCell, width: float) -> _Cell:
    color = ctx.palette.for_tone(cell.tone) if cell.tone is not None else ctx.palette.text
    align = "left" if column_key in _LEFT_ALIGNED else "center"
    return _cell(
        ctx, cell.text, width, BODY_CELL_PADDING, ctx.size("small"),
        emphasis=cell.emphasis, color=color, align=align, note=cell.suffix,
    )


def compose_subject_table(ctx: RenderContext, pg: Paginator, payload: ResultPayload) -> None:
    m, p, t = ctx.metrics, ctx.palette, ctx.t
    subjects = payload.subject_breakdown
    body_size = ctx.size("small")

    if not subjects:
        _heading(ctx, pg, t("Export.subjectBreakdown"), keep_with=line_height(body_size))
        pg.add(*_text_block(
            m.margin_left, pg.cursor_y, [t("Export.noSubjectData")],
            ctx.font("italic"), body_size, p.light_text,
        ))
        pg.advance(line_height(body_size) + SECTION_SPACING)
        return

    schema = build_column_schema(payload.period_type, subjects, t)
    widths = allocate_column_widths(m.usable_width, schema)
    rows = build_subject_rows(payload.period_type, subjects, schema, t, ctx.passing_score)
    logger.debug(
        "Subject table: %d rows, %d columns (%d breakdown)",
        len(rows), len(schema), sum(1 for c in schema if c.kind == DYNAMIC),
    )

    head = [
        _cell(
            ctx, column.header, w, HEAD_CELL_PADDING, ctx.size("tiny"), "bold", p.white,
            "left" if column.key in _LEFT_ALIGNED else "center",
        )
        for column, w in zip(schema, widths)
    ]
    head_height = _row_height(head, HEAD_CELL_PADDING)
    body = [
        [_body_cell(ctx, column.key, cell, w) for column, cell, w in zip(schema, row, widths)]
        for row in rows
    ]
    body_heights = [_row_height(cells, BODY_CELL_PADDING) for cells in body]

    _heading(ctx, pg, t("Export.subjectBreakdown"), keep_with=head_height + body_heights[0])
    _draw_row(ctx, pg, widths, head, head_height, HEAD_CELL_PADDING, fill=p.primary)

    for idx, (cells, height) in enumerate(zip(body, body_heights)):
        if pg.ensure_space(height):
            pg.ensure_space(head_height + height)
            _draw_row(ctx, pg, widths, head, head_height, HEAD_CELL_PADDING, fill=p.primary)
        fill = p.light_bg if idx % 2 else p.white
        _draw_row(ctx, pg, widths, cells, height, BODY_CELL_PADDING, fill=fill)

    passed = count_passed(subjects, ctx.passing_score)
    summary = t("Export.subjectsPassed", {"passed": passed, "total": len(subjects)})
    pg.advance(HEADER_LINE_GAP)
    pg.ensure_space(line_height(body_size))
    pg.add(*_text_block(
        m.right_edge, pg.cursor_y, [summary], ctx.font("italic"), body_size, p.secondary, "right",
    ))
    pg.advance(line_height(body_size) + SECTION_SPACING)


# ── 5. Remarks & signatures ─────────────────────────────────────────

def compose_remarks_and_signatures(ctx: RenderContext, pg: Paginator, payload: ResultPayload) -> None:
    m, p, t = ctx.metrics, ctx.palette, ctx.t
    label_size = ctx.size("subtitle")
    body_size = ctx.size("body")
    sig_size = ctx.size("small")

    overall = payload.overall_performance
    remarks = ((overall.remarks if overall else None) or "").strip()

    if remarks:
        if pg.ensure_space(REMARKS_TRAILING_HEIGHT):
            logger.debug("Remarks block moved to page %d", pg.page_number)

        pg.add(*_text_block(m.margin_left, pg.cursor_y, [t("Export.remarksLabel")], ctx.font("bold"), label_size, p.primary))
        pg.advance(line_height(label_size) + HEADER_LINE_GAP)

        inner_width = m.usable_width - 2 * CARD_PADDING
        available = pg.remaining - SIGNATURE_AREA_ESTIMATE - 2 * CARD_PADDING
        max_lines = max(1, int(available // line_height(body_size)))
        lines = measure(remarks, body_size, inner_width, ctx.font("italic")).lines
        shown = fit_lines(lines, max_lines)
        if len(shown) < len(lines):
            logger.warning("Remarks truncated to %d of %d lines", len(shown), len(lines))

        box_height = len(shown) * line_height(body_size) + 2 * CARD_PADDING
        top = pg.cursor_y
        pg.add(RectCommand(
            x=m.margin_left, y=top, width=m.usable_width, height=box_height,
            stroke=p.border, radius=CARD_RADIUS,
        ))
        pg.add(*_text_block(m.margin_left + CARD_PADDING, top + CARD_PADDING, shown, ctx.font("italic"), body_size, p.text))
        pg.advance(box_height)

    label_height = line_height(sig_size)
    preferred = pg.bottom - SIGNATURE_TEXT_OFFSET - label_height
    line_y = max(preferred, pg.cursor_y + SIGNATURE_MIN_GAP)
    if line_y + SIGNATURE_TEXT_OFFSET + label_height > pg.bottom:
        logger.warning("No room for signatures on page %d, continuing on a new page", pg.page_number)
        pg.new_page()
        line_y = pg.cursor_y + SIGNATURE_MIN_GAP

    signature_width = m.usable_width / 3
    anchors = (m.margin_left + m.usable_width / 4, m.margin_left + 3 * m.usable_width / 4)
    labels = (t("Export.deanOfStudiesSignature"), t("Export.principalSignature"))
    for center, label in zip(anchors, labels):
        pg.add(LineCommand(
            center - signature_width / 2, line_y, center + signature_width / 2, line_y,
            color=p.secondary, line_width=0.5,
        ))
        pg.add(*_text_block(center, line_y + SIGNATURE_TEXT_OFFSET, [label], ctx.font("bold"), sig_size, p.secondary, "center"))
    pg.move_to(line_y + SIGNATURE_TEXT_OFFSET + label_height)


# ── Document ────────────────────────────────────────────────────────

def compose_report_card(
    ctx: RenderContext,
    payload: ResultPayload,
    student: Optional[StudentInfo],
    school: SchoolInfo,
) -> ReportLayout:
    """Lay out a whole report card. Same inputs, same layout."""
    caption = f"{_student_name(ctx, student)} · {_period_label(ctx, payload, school)}"
    pg = Paginator(
        ctx.metrics,
        on_new_page=make_running_header(ctx, school, caption),
        footer_factory=make_footer_factory(ctx, school),
    )

    pg.mark("header")
    compose_header(ctx, pg, payload, school)
    pg.mark("student_info")
    compose_student_card(ctx, pg, student)
    pg.mark("summary")
    compose_summary(ctx, pg, payload)
    pg.mark("subjects")
    compose_subject_table(ctx, pg, payload)
    pg.mark("remarks")
    compose_remarks_and_signatures(ctx, pg, payload)
    pg.mark("end")

    pages = pg.finish()
    logger.debug("Layout complete: %d page(s)", len(pages))
    return ReportLayout(
        page_width=ctx.metrics.width,
        page_height=ctx.metrics.height,
        pages=pages,
        sections=pg.sections,
    )


def section_cursors(layout: ReportLayout) -> Dict[str, Tuple[int, float]]:
    return {mark.section: (mark.page, mark.y) for mark in layout.sections}
