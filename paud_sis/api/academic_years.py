"""Academic-year API routes.

Provides:
    GET  /academic-years                — all active academic years
    POST /academic-years                — create
    GET  /academic-years/{id}           — detail
    POST /academic-years/{id}           — rename
    POST /academic-years/{id}/delete    — soft delete
"""

from fastapi import APIRouter, Form, Query
from fastapi.responses import Response

from paud_sis.api.dependencies import CacheDep, DBDep
from paud_sis.api.responses import form_response
from paud_sis.schemas.academic_year import AcademicYearForm, AcademicYearRead
from paud_sis.services.academic_years import (
    create_academic_year,
    delete_academic_year,
    get_academic_year,
    list_academic_years,
    update_academic_year,
)

router = APIRouter(prefix="/academic-years", tags=["academic-years"])


@router.get(
    "",
    response_model=list[AcademicYearRead],
    summary="List academic years",
    responses={422: {"description": "year filter is not a YYYY/YYYY label"}},
)
async def read_academic_years(
    db: DBDep,
    cache: CacheDep,
    year: str | None = Query(default=None, description="Exact label, e.g. 2024/2025"),
) -> list[AcademicYearRead]:
    return await list_academic_years(db, cache, year=year)


@router.post(
    "",
    summary="Create an academic year",
    responses={
        303: {"description": "Created; redirect to the list"},
        400: {"description": "Invalid or duplicate label"},
    },
)
async def add_academic_year(
    db: DBDep, cache: CacheDep, year: str | None = Form(default=None)
) -> Response:
    state = await create_academic_year(db, AcademicYearForm(year=year))
    return await form_response(state, db, cache)


@router.get(
    "/{academic_year_id}",
    response_model=AcademicYearRead,
    summary="Get one academic year",
    responses={404: {"description": "Academic year not found"}},
)
async def read_academic_year(
    academic_year_id: str, db: DBDep, cache: CacheDep
) -> AcademicYearRead:
    return await get_academic_year(db, cache, academic_year_id)


@router.post("/{academic_year_id}", summary="Rename an academic year")
async def edit_academic_year(
    academic_year_id: str,
    db: DBDep,
    cache: CacheDep,
    year: str | None = Form(default=None),
) -> Response:
    form = AcademicYearForm(id=academic_year_id, year=year)
    state = await update_academic_year(db, form)
    return await form_response(state, db, cache)


@router.post("/{academic_year_id}/delete", summary="Soft delete an academic year")
async def remove_academic_year(academic_year_id: str, db: DBDep, cache: CacheDep) -> Response:
    state = await delete_academic_year(db, academic_year_id)
    return await form_response(state, db, cache)
