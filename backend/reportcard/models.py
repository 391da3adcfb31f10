"""
models.py — Input records for report-card generation.

The results query returns one student's results for one reporting period:

    {
      "period_type": "term",
      "results": {
        "period_info": {...},
        "overall_performance": {...},
        "subject_breakdown": [...]
      },
      "student_info": {...}        # optional
    }

parse_result_payload() validates that shape (or the already-flattened one)
into a ResultPayload and fails fast, before anything is drawn, when the
document cannot be produced.
"""

from collections.abc import Mapping
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from reportcard.config import MAX_SCORE


PeriodType = Literal["sequence", "term", "year"]
PERIOD_TYPES = ("sequence", "term", "year")

Identifier = Union[int, str]


class ReportCardDataError(ValueError):
    """Raised when the inputs cannot produce a report card."""


def _none_to_list(value):
    return [] if value is None else value


# ── Breakdown details ───────────────────────────────────────────────

class SequenceDetail(BaseModel):
    """One evaluation sequence inside a term, for one subject."""
    sequence_id: Optional[Identifier] = None
    sequence_name: Optional[str] = None
    normalized_score: Optional[float] = None
    weight: Optional[float] = None
    is_absent: Optional[bool] = None
    rank: Optional[Identifier] = None


class TermDetail(BaseModel):
    """One term inside an academic year, for one subject."""
    term_id: Optional[Identifier] = None
    term_name: Optional[str] = None
    term_average_score: Optional[float] = None
    rank: Optional[Identifier] = None


class SubjectResult(BaseModel):
    subject_id: Identifier
    subject_name: Optional[str] = None
    coefficient: Optional[float] = None
    score: Optional[float] = Field(default=None, ge=0, le=MAX_SCORE)
    rank: Optional[Identifier] = None
    class_average_subject: Optional[float] = None
    teacher_name: Optional[str] = None
    sequence_details: List[SequenceDetail] = Field(default_factory=list)
    term_details: List[TermDetail] = Field(default_factory=list)

    @field_validator("sequence_details", "term_details", mode="before")
    @classmethod
    def default_details(cls, value):
        return _none_to_list(value)


class OverallPerformance(BaseModel):
    average: Optional[float] = None
    rank: Optional[Identifier] = None
    class_size: Optional[int] = None
    total_points: Optional[float] = None
    total_coefficient: Optional[float] = None
    class_average_overall: Optional[float] = None
    promotion_status_key: Optional[str] = None
    promotion_status_display: Optional[str] = None
    promotion_decision_remarks: Optional[str] = None
    remarks: Optional[str] = None


class PeriodInfo(BaseModel):
    name: Optional[str] = None
    academic_year_name: Optional[str] = None


# ── Identity records (display only) ─────────────────────────────────

class StudentInfo(BaseModel):
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    matricule: Optional[Identifier] = None
    class_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    place_of_birth: Optional[str] = None
    sex_display: Optional[str] = None

    @property
    def display_name(self) -> Optional[str]:
        if self.full_name:
            return self.full_name
        joined = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return joined or None


class SchoolInfo(BaseModel):
    name: Optional[str] = None
    moto: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    active_academic_year_name: Optional[str] = None


# ── Payload ─────────────────────────────────────────────────────────

class ResultPayload(BaseModel):
    period_type: PeriodType
    period_info: PeriodInfo = Field(default_factory=PeriodInfo)
    overall_performance: Optional[OverallPerformance] = None
    subject_breakdown: List[SubjectResult] = Field(default_factory=list)

    @field_validator("subject_breakdown", mode="before")
    @classmethod
    def default_breakdown(cls, value):
        return _none_to_list(value)

    @field_validator("period_info", mode="before")
    @classmethod
    def default_period_info(cls, value):
        return {} if value is None else value

    @field_validator("period_type", mode="before")
    @classmethod
    def normalize_period_type(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @model_validator(mode="after")
    def check_unique_subjects(self):
        seen = set()
        for subject in self.subject_breakdown:
            if subject.subject_id in seen:
                raise ValueError(f"duplicate subject_id {subject.subject_id!r} in subject_breakdown")
            seen.add(subject.subject_id)
        return self


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors()[:3]:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "payload"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_result_payload(raw: Any) -> ResultPayload:
    """Validate a results-query response into a ResultPayload."""
    if isinstance(raw, ResultPayload):
        return raw
    if not isinstance(raw, Mapping):
        raise ReportCardDataError("Cannot generate report: result payload must be an object.")

    if "results" in raw:
        body = raw.get("results")
        if not body:
            raise ReportCardDataError("Cannot generate report: missing results data.")
        if not isinstance(body, Mapping):
            raise ReportCardDataError("Cannot generate report: results must be an object.")
    elif "subject_breakdown" in raw or "overall_performance" in raw:
        body = raw
    else:
        raise ReportCardDataError("Cannot generate report: missing results data.")

    period_type = raw.get("period_type") or body.get("period_type")
    if not period_type:
        raise ReportCardDataError("Cannot generate report: missing period type.")
    if str(period_type).strip().lower() not in PERIOD_TYPES:
        raise ReportCardDataError(
            f"Cannot generate report: unknown period type {period_type!r} "
            f"(expected one of {', '.join(PERIOD_TYPES)})."
        )

    try:
        return ResultPayload.model_validate({
            "period_type": period_type,
            "period_info": body.get("period_info"),
            "overall_performance": body.get("overall_performance"),
            "subject_breakdown": body.get("subject_breakdown"),
        })
    except ValidationError as exc:
        raise ReportCardDataError(f"Invalid result payload: {_describe(exc)}") from exc


def parse_student_info(raw: Any) -> Optional[StudentInfo]:
    """Student details are optional; the layout falls back to placeholders."""
    if raw is None:
        return None
    if isinstance(raw, StudentInfo):
        return raw
    try:
        return StudentInfo.model_validate(raw)
    except ValidationError as exc:
        raise ReportCardDataError(f"Invalid student information: {_describe(exc)}") from exc


def parse_school_info(raw: Any) -> SchoolInfo:
    if raw is None:
        raise ReportCardDataError("Cannot generate report: missing school information.")
    if isinstance(raw, SchoolInfo):
        return raw
    try:
        return SchoolInfo.model_validate(raw)
    except ValidationError as exc:
        raise ReportCardDataError(f"Invalid school information: {_describe(exc)}") from exc
