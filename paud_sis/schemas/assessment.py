"""Pydantic v2 schemas for development assessments."""

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from paud_sis.models.enums import AgeGroup, DevelopmentLevel, Semester


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _date_part(value: Any) -> Any:
    """Accept ``YYYY-MM-DD`` as well as full ISO timestamps from the browser."""
    value = _blank_to_none(value)
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


# ---------------------------------------------------------------------------
# Bulk submission items
# ---------------------------------------------------------------------------


class AssessmentItem(BaseModel):
    """One row of the ``assessmentData`` JSON array posted by the bulk form.

    Rows where the teacher has not picked an indicator and a level yet are
    placeholders; ``is_rated`` is False for them and the workflow skips them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    indicator_id: str | None = Field(default=None, alias="indicatorId")
    development: DevelopmentLevel | None = None
    notes: str | None = None
    assessment_date: date | None = Field(default=None, alias="assessmentDate")
    assessment_id: str | None = Field(default=None, alias="assessmentId")

    @field_validator(
        "indicator_id", "development", "notes", "assessment_id", mode="before"
    )
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("assessment_date", mode="before")
    @classmethod
    def strip_time(cls, value: Any) -> Any:
        return _date_part(value)

    @property
    def is_rated(self) -> bool:
        return bool(self.indicator_id) and self.development is not None


_ITEMS_ADAPTER = TypeAdapter(list[AssessmentItem])


def parse_assessment_items(raw: str) -> list[AssessmentItem]:
    """Decode the ``assessmentData`` form field.

    Raises:
        pydantic.ValidationError: (a ``ValueError``) if the payload is not a
            JSON array of well-formed items.
    """
    return _ITEMS_ADAPTER.validate_json(raw)


# ---------------------------------------------------------------------------
# Single-assessment form
# ---------------------------------------------------------------------------


class AssessmentForm(BaseModel):
    """Raw fields of the single-assessment create/update form.

    Values stay as submitted strings; the service checks them in order so each
    failure maps to its own message.
    """

    id: str | None = None
    student_id: str | None = None
    indicator_id: str | None = None
    development: str | None = None
    semester: str | None = None
    academic_year_id: str | None = None
    notes: str | None = None
    assessment_date: str | None = None


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


class AssessmentSortField(str, enum.Enum):
    """Columns a list request may sort by."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    ASSESSMENT_DATE = "assessment_date"
    DEVELOPMENT = "development"
    SEMESTER = "semester"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class StudentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    nis: str
    class_name: str | None = None
    age_group: AgeGroup | None = None


class AspectSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    order: int


class IndicatorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    short_name: str | None = None
    order: int
    age_group: AgeGroup | None = None
    aspect: AspectSummary | None = None


class AssessmentRead(BaseModel):
    """Assessment with the student and indicator context shown on lists."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    indicator_id: str
    semester: Semester
    academic_year_id: str
    development: DevelopmentLevel
    notes: str | None = None
    assessment_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    student: StudentSummary | None = None
    indicator: IndicatorSummary | None = None


class AssessmentListResponse(BaseModel):
    """Paginated list of assessments."""

    assessments: list[AssessmentRead]
    total_count: int
    current_page: int
    total_pages: int
    items_per_page: int


# ---------------------------------------------------------------------------
# Report card
# ---------------------------------------------------------------------------


class ReportCardIndicator(BaseModel):
    indicator_id: str
    name: str
    short_name: str | None = None
    order: int
    development: DevelopmentLevel | None = None
    notes: str | None = None


class ReportCardAspect(BaseModel):
    aspect_id: str
    code: str
    name: str
    order: int
    indicators: list[ReportCardIndicator]


class ReportCard(BaseModel):
    """Everything the printable report needs for one student and semester.

    Attributes:
        level_counts: Number of rated indicators per development level.
        rated_count: Indicators with a recorded level.
        indicator_count: Indicators applicable to the student's age group.
    """

    student_id: str
    student_name: str
    nis: str
    class_name: str | None = None
    semester: Semester
    academic_year_id: str
    academic_year: str
    aspects: list[ReportCardAspect]
    level_counts: dict[DevelopmentLevel, int]
    rated_count: int
    indicator_count: int
