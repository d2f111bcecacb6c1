"""Student API routes.

Provides:
    GET  /students/{id}                 — student detail
    GET  /students/{id}/assessments     — the student's assessments
    GET  /students/{id}/report-card     — report-card data for one semester
    POST /students/{id}/delete          — soft delete
"""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import Response

from paud_sis.api.dependencies import CacheDep, DBDep
from paud_sis.api.responses import form_response
from paud_sis.models.enums import Semester
from paud_sis.schemas.assessment import AssessmentRead, ReportCard
from paud_sis.schemas.student import StudentRead
from paud_sis.services.assessment_views import build_report_card, get_student_assessments
from paud_sis.services.students import delete_student, get_student

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["students"])


@router.get(
    "/{student_id}",
    response_model=StudentRead,
    summary="Get one student",
    responses={404: {"description": "Student not found"}},
)
async def read_student(student_id: str, db: DBDep) -> StudentRead:
    return await get_student(db, student_id)


@router.get(
    "/{student_id}/assessments",
    response_model=list[AssessmentRead],
    summary="List a student's assessments",
    description="Active assessments ordered by aspect and indicator order.",
)
async def read_student_assessments(
    student_id: str,
    db: DBDep,
    cache: CacheDep,
    semester: Semester | None = Query(default=None),
    academic_year_id: str | None = Query(default=None),
) -> list[AssessmentRead]:
    await get_student(db, student_id)
    return await get_student_assessments(
        db, cache, student_id, semester=semester, academic_year_id=academic_year_id
    )


@router.get(
    "/{student_id}/report-card",
    response_model=ReportCard,
    summary="Report-card data",
    responses={404: {"description": "Student or academic year not found"}},
)
async def read_report_card(
    student_id: str,
    db: DBDep,
    cache: CacheDep,
    semester: Semester = Query(...),
    academic_year_id: str = Query(...),
) -> ReportCard:
    return await build_report_card(db, cache, student_id, semester, academic_year_id)


@router.post("/{student_id}/delete", summary="Soft delete a student")
async def remove_student(student_id: str, db: DBDep, cache: CacheDep) -> Response:
    state = await delete_student(db, student_id)
    return await form_response(state, db, cache)
