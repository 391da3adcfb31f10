"""
Report routes — report-card PDF and bulk ZIP endpoints.
"""

import logging
import os
import re

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from reportcard.i18n import available_locales, make_translator
from reportcard.models import ReportCardDataError
from reportcard.report_card import generate_bulk_report_cards, generate_report_card

router = APIRouter()
logger = logging.getLogger(__name__)

PASS_MARK = float(os.getenv("PASS_MARK", "10"))
SCHOOL_NAME = os.getenv("SCHOOL_NAME", "")
REPORT_LOCALE = os.getenv("REPORT_LOCALE", "en")


def _safe_token(value: str, fallback: str = "item") -> str:
    """Create filesystem-safe token for filenames."""
    token = re.sub(r"[^A-Za-z0-9._-]+", "_", str(value)).strip("._-")
    return token or fallback


def _school_info(payload: dict):
    """Prefer the school sent with the request; fall back to env config."""
    school = payload.get("school_info")
    if school is None and SCHOOL_NAME:
        school = {"name": SCHOOL_NAME}
    return school


def _options(payload: dict):
    locale = str(payload.get("locale") or REPORT_LOCALE)
    if locale[:2].lower() not in available_locales():
        raise HTTPException(400, f"Unsupported locale '{locale}'. Use one of: {', '.join(available_locales())}.")
    passing_score = payload.get("passing_score", PASS_MARK)
    return make_translator(locale), passing_score


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.post("/report-card")
async def report_card_pdf(payload: dict):
    """Generate one student's report card PDF from a results-query response."""
    if not payload.get("results"):
        raise HTTPException(400, "No results provided.")

    t, passing_score = _options(payload)
    try:
        document = generate_report_card(
            payload,
            student_info=payload.get("student_info"),
            school_info=_school_info(payload),
            t=t,
            passing_score=passing_score,
        )
    except ReportCardDataError as exc:
        logger.warning("Report card rejected: %s", exc)
        raise HTTPException(400, str(exc))

    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={**_attachment(document.filename), "X-Page-Count": str(document.page_count)},
    )


@router.post("/report-cards/bulk")
async def bulk_report_cards(payload: dict):
    """Generate every student's report card for a class, packed as a ZIP."""
    if not payload.get("students"):
        raise HTTPException(400, "No students provided.")

    t, passing_score = _options(payload)
    bulk = {**payload, "school_info": _school_info(payload)}
    try:
        archive = generate_bulk_report_cards(bulk, t=t, passing_score=passing_score)
    except ReportCardDataError as exc:
        logger.warning("Bulk export rejected: %s", exc)
        raise HTTPException(400, str(exc))

    class_name = payload.get("class_name") or "class"
    filename = f"report_cards_{_safe_token(class_name, 'class')}.zip"
    return Response(content=archive, media_type="application/zip", headers=_attachment(filename))
