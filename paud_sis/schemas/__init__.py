"""Pydantic schemas for the PAUD school records API."""

from paud_sis.schemas.academic_year import AcademicYearForm, AcademicYearRead
from paud_sis.schemas.assessment import (
    AssessmentForm,
    AssessmentItem,
    AssessmentListResponse,
    AssessmentRead,
    AssessmentSortField,
    ReportCard,
    SortOrder,
)
from paud_sis.schemas.forms import FormState
from paud_sis.schemas.student import StudentRead

__all__ = [
    "AcademicYearForm",
    "AcademicYearRead",
    "AssessmentForm",
    "AssessmentItem",
    "AssessmentListResponse",
    "AssessmentRead",
    "AssessmentSortField",
    "FormState",
    "ReportCard",
    "SortOrder",
    "StudentRead",
]
