"""
report_card.py — Report-card generation entry points.

    generate_report_card()        one student's results  -> PDF bytes + filename
    build_report_card_layout()    same inputs            -> layout tree (no drawing)
    generate_bulk_report_cards()  a whole class          -> ZIP of PDFs

Inputs are validated before any layout work starts, so a bad payload raises
ReportCardDataError and never yields a partial document.
"""

import io
import logging
import re
import zipfile
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Tuple

from reportcard.commands import ReportLayout
from reportcard.config import A4_PORTRAIT, DEFAULT_PALETTE, DEFAULT_PASSING_SCORE, MAX_SCORE, PageMetrics, Palette
from reportcard.i18n import Translator, make_translator
from reportcard.layout import RenderContext, compose_report_card
from reportcard.models import (
    ReportCardDataError,
    ResultPayload,
    SchoolInfo,
    StudentInfo,
    parse_result_payload,
    parse_school_info,
    parse_student_info,
)
from reportcard.renderer import render_pdf, report_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportCardDocument:
    filename: str
    content: bytes
    page_count: int
    layout: ReportLayout

    media_type = "application/pdf"


def _check_passing_score(passing_score: Any) -> float:
    try:
        value = float(passing_score)
    except (TypeError, ValueError) as exc:
        raise ReportCardDataError(f"Invalid passing score {passing_score!r}.") from exc
    if not 0 <= value <= MAX_SCORE:
        raise ReportCardDataError(f"Passing score must be between 0 and {MAX_SCORE}, got {value:g}.")
    return value


def _prepare(
    results: Any,
    student_info: Any,
    school_info: Any,
    t: Optional[Translator],
    passing_score: Any,
    locale: str,
    generated_on: Optional[date],
    palette: Palette,
    metrics: PageMetrics,
) -> Tuple[RenderContext, ResultPayload, Optional[StudentInfo], SchoolInfo]:
    payload = parse_result_payload(results)
    if student_info is None and isinstance(results, Mapping):
        student_info = results.get("student_info")
    student = parse_student_info(student_info)
    school = parse_school_info(school_info)
    ctx = RenderContext(
        t=t or make_translator(locale),
        metrics=metrics,
        palette=palette,
        passing_score=_check_passing_score(passing_score),
        generated_on=generated_on or date.today(),
    )
    return ctx, payload, student, school


def build_report_card_layout(
    results: Any,
    student_info: Any = None,
    school_info: Any = None,
    t: Optional[Translator] = None,
    passing_score: float = DEFAULT_PASSING_SCORE,
    locale: str = "en",
    generated_on: Optional[date] = None,
    palette: Palette = DEFAULT_PALETTE,
    metrics: PageMetrics = A4_PORTRAIT,
) -> ReportLayout:
    """Validate the inputs and lay the document out without drawing it."""
    ctx, payload, student, school = _prepare(
        results, student_info, school_info, t, passing_score, locale, generated_on, palette, metrics,
    )
    return compose_report_card(ctx, payload, student, school)


def generate_report_card(
    results: Any,
    student_info: Any = None,
    school_info: Any = None,
    t: Optional[Translator] = None,
    passing_score: float = DEFAULT_PASSING_SCORE,
    locale: str = "en",
    generated_on: Optional[date] = None,
    palette: Palette = DEFAULT_PALETTE,
    metrics: PageMetrics = A4_PORTRAIT,
) -> ReportCardDocument:
    """
    Produce one student's report card as PDF bytes.

    ``results`` is the results-query response; ``student_info`` may also be
    embedded in it. ``school_info`` is required.
    """
    ctx, payload, student, school = _prepare(
        results, student_info, school_info, t, passing_score, locale, generated_on, palette, metrics,
    )
    layout = compose_report_card(ctx, payload, student, school)

    student_name = (student.display_name if student else None) or ctx.t("Export.unknownStudent")
    period_name = payload.period_info.name or ctx.t("Export.unknownPeriod")
    filename = report_filename(student_name, period_name)
    content = render_pdf(
        layout,
        title=f"{ctx.t('Export.reportCardTitle')} - {student_name} - {period_name}",
        author=school.name,
    )
    logger.info(
        "Generated %s report card %s (%d page(s), %d subject(s))",
        payload.period_type, filename, layout.page_count, len(payload.subject_breakdown),
    )
    return ReportCardDocument(filename=filename, content=content, page_count=layout.page_count, layout=layout)


# ── Bulk export ─────────────────────────────────────────────────────

def _entry_name(student: Mapping, index: int) -> str:
    full_name = str(student.get("full_name") or f"student_{index}")
    name = re.sub(r"\s+", "_", full_name.strip())
    name = re.sub(r"[\\/]+", "_", name)
    matricule = student.get("matricule")
    return f"{name}_{matricule}.pdf" if matricule not in (None, "") else f"{name}.pdf"


def _unique(name: str, taken: set) -> str:
    if name not in taken:
        return name
    stem = name[:-4]
    n = 2
    while f"{stem}_{n}.pdf" in taken:
        n += 1
    return f"{stem}_{n}.pdf"


def generate_bulk_report_cards(
    bulk: Any,
    t: Optional[Translator] = None,
    passing_score: float = DEFAULT_PASSING_SCORE,
    locale: str = "en",
    generated_on: Optional[date] = None,
) -> bytes:
    """
    Render one report card per student of a class and pack them into a ZIP.

    ``bulk`` is ``{"school_info": {...}, "students": [{student_info,
    period_type, results}, ...]}``. Students without results are skipped.
    """
    if not isinstance(bulk, Mapping):
        raise ReportCardDataError("Bulk payload must be an object.")
    students = bulk.get("students") or []
    with_results = [s for s in students if isinstance(s, Mapping) and s.get("results")]
    if not with_results:
        raise ReportCardDataError("No students with results in bulk data.")

    school_info = parse_school_info(bulk.get("school_info"))
    translator = t or make_translator(locale)
    generated_on = generated_on or date.today()
    skipped = len(students) - len(with_results)
    if skipped:
        logger.info("Skipping %d student(s) without results", skipped)

    buffer = io.BytesIO()
    taken = set()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for index, entry in enumerate(with_results, start=1):
            student_raw = entry.get("student_info") or {}
            results = {
                "period_type": entry.get("period_type") or bulk.get("period_type"),
                "results": entry.get("results"),
            }
            document = generate_report_card(
                results,
                student_info=student_raw,
                school_info=school_info,
                t=translator,
                passing_score=passing_score,
                generated_on=generated_on,
            )
            name = _unique(_entry_name(student_raw, index), taken)
            taken.add(name)
            archive.writestr(name, document.content)

    logger.info("Bulk export: %d report card(s) archived", len(taken))
    return buffer.getvalue()
