"""Development-assessment API routes.

Provides:
    POST /assessments/bulk                          — bulk rate one student
    POST /development-assessments                   — create one assessment
    POST /development-assessments/{id}              — update one assessment
    POST /development-assessments/{id}/delete       — soft delete
    GET  /development-assessments                   — paginated list
    GET  /development-assessments/{id}              — detail

Write routes take HTML-form bodies and answer with a ``303`` redirect on
success or ``400 {"error": "..."}`` for the form to display.
"""

import logging

from fastapi import APIRouter, Form, Query
from fastapi.responses import Response

from paud_sis.api.dependencies import CacheDep, DBDep, PaginationDep, StoreDep
from paud_sis.api.responses import form_response
from paud_sis.models.enums import Semester
from paud_sis.schemas.assessment import (
    AssessmentForm,
    AssessmentListResponse,
    AssessmentRead,
    AssessmentSortField,
    SortOrder,
)
from paud_sis.schemas.forms import FormState
from paud_sis.services.assessment_views import get_assessment_detail, list_assessments
from paud_sis.services.assessments import AssessmentService
from paud_sis.services.reconciliation import (
    AssessmentReconciler,
    BulkAssessmentSubmission,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assessments"])


# ---------------------------------------------------------------------------
# Bulk reconciliation
# ---------------------------------------------------------------------------


@router.post(
    "/assessments/bulk",
    summary="Rate one student on many indicators",
    description=(
        "Create the ratings of a student for a semester and academic year, or "
        "edit a batch rated before (``isEditMode=true``). Indicators already "
        "rated are never duplicated."
    ),
    responses={
        303: {"description": "Saved; redirect to the class assessment view"},
        400: {"description": "Validation or storage error for the form"},
    },
)
async def submit_bulk_assessments(
    db: DBDep,
    store: StoreDep,
    cache: CacheDep,
    student_id: str | None = Form(default=None, alias="studentId"),
    semester: str | None = Form(default=None),
    academic_year_id: str | None = Form(default=None, alias="academicYearId"),
    academic_year: str | None = Form(default=None, alias="academicYear"),
    assessment_data: str | None = Form(default=None, alias="assessmentData"),
    is_edit_mode: str | None = Form(default=None, alias="isEditMode"),
    class_id: str | None = Form(default=None, alias="classId"),
) -> Response:
    submission = BulkAssessmentSubmission(
        student_id=student_id,
        semester=semester,
        academic_year_id=academic_year_id or academic_year,
        assessment_data=assessment_data,
        is_edit_mode=is_edit_mode == "true",
        class_id=class_id,
    )
    result = await AssessmentReconciler(store).submit(submission)
    if result.ok:
        logger.info(
            "Bulk assessment saved: student=%s created=%d updated=%d skipped=%d",
            student_id,
            result.created,
            result.updated,
            len(result.skipped_assessment_ids),
        )
    return await form_response(
        FormState(
            error=result.error,
            redirect_url=result.redirect_url,
            invalidate_tags=result.invalidate_tags,
        ),
        db,
        cache,
    )


# ---------------------------------------------------------------------------
# Single-assessment writes
# ---------------------------------------------------------------------------


def _assessment_form(
    assessment_id: str | None,
    student_id: str | None,
    indicator_id: str | None,
    development: str | None,
    semester: str | None,
    academic_year_id: str | None,
    notes: str | None,
    assessment_date: str | None,
) -> AssessmentForm:
    return AssessmentForm(
        id=assessment_id,
        student_id=student_id,
        indicator_id=indicator_id,
        development=development,
        semester=semester,
        academic_year_id=academic_year_id,
        notes=notes,
        assessment_date=assessment_date,
    )


@router.post("/development-assessments", summary="Create one assessment")
async def create_assessment(
    db: DBDep,
    store: StoreDep,
    cache: CacheDep,
    student_id: str | None = Form(default=None, alias="studentId"),
    indicator_id: str | None = Form(default=None, alias="indicatorId"),
    development: str | None = Form(default=None),
    semester: str | None = Form(default=None),
    academic_year_id: str | None = Form(default=None, alias="academicYearId"),
    notes: str | None = Form(default=None),
    assessment_date: str | None = Form(default=None, alias="assessmentDate"),
) -> Response:
    form = _assessment_form(
        None, student_id, indicator_id, development, semester,
        academic_year_id, notes, assessment_date,
    )
    state = await AssessmentService(store).create(form)
    return await form_response(state, db, cache)


@router.post("/development-assessments/{assessment_id}", summary="Update one assessment")
async def update_assessment(
    assessment_id: str,
    db: DBDep,
    store: StoreDep,
    cache: CacheDep,
    student_id: str | None = Form(default=None, alias="studentId"),
    indicator_id: str | None = Form(default=None, alias="indicatorId"),
    development: str | None = Form(default=None),
    semester: str | None = Form(default=None),
    academic_year_id: str | None = Form(default=None, alias="academicYearId"),
    notes: str | None = Form(default=None),
    assessment_date: str | None = Form(default=None, alias="assessmentDate"),
) -> Response:
    form = _assessment_form(
        assessment_id, student_id, indicator_id, development, semester,
        academic_year_id, notes, assessment_date,
    )
    state = await AssessmentService(store).update(form)
    return await form_response(state, db, cache)


@router.post(
    "/development-assessments/{assessment_id}/delete",
    summary="Soft delete one assessment",
)
async def delete_assessment(
    assessment_id: str, db: DBDep, store: StoreDep, cache: CacheDep
) -> Response:
    state = await AssessmentService(store).delete(assessment_id)
    return await form_response(state, db, cache)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get(
    "/development-assessments",
    response_model=AssessmentListResponse,
    summary="List assessments",
    description=(
        "Paginated list of active assessments. ``sort_by`` accepts only the "
        "listed columns; anything else is rejected with 422."
    ),
)
async def read_assessments(
    db: DBDep,
    cache: CacheDep,
    page: PaginationDep,
    sort_by: AssessmentSortField = Query(default=AssessmentSortField.CREATED_AT),
    sort_order: SortOrder = Query(default=SortOrder.ASC),
    search: str | None = Query(default=None, description="Student name, NIS, indicator or notes"),
    student_id: str | None = Query(default=None),
    indicator_id: str | None = Query(default=None),
    semester: Semester | None = Query(default=None),
    academic_year_id: str | None = Query(default=None),
) -> AssessmentListResponse:
    return await list_assessments(
        db,
        cache,
        skip=page.skip,
        limit=page.limit,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        student_id=student_id,
        indicator_id=indicator_id,
        semester=semester,
        academic_year_id=academic_year_id,
    )


@router.get(
    "/development-assessments/{assessment_id}",
    response_model=AssessmentRead,
    summary="Get one assessment",
    responses={404: {"description": "Assessment not found"}},
)
async def read_assessment(assessment_id: str, db: DBDep, cache: CacheDep) -> AssessmentRead:
    return await get_assessment_detail(db, cache, assessment_id)
