"""Academic-year records: create, update, soft delete and lookups."""

from __future__ import annotations

import logging
from urllib.parse import quote, urlencode

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from paud_sis.exceptions import InvalidAcademicYearError, RecordNotFoundError
from paud_sis.models.academic_year import AcademicYear
from paud_sis.models.base import new_id
from paud_sis.schemas.academic_year import (
    AcademicYearForm,
    AcademicYearRead,
    validate_academic_year_label,
)
from paud_sis.schemas.forms import FormState
from paud_sis.services.cache import CacheTag, TagCache

logger = logging.getLogger(__name__)

LIST_PATH = "/academic-years"

MSG_YEAR_REQUIRED = "Tahun ajaran harus diisi."
MSG_YEAR_INVALID = (
    "Format tahun ajaran tidak valid. Gunakan format YYYY/YYYY (contoh: 2024/2025)."
)
MSG_YEAR_EXISTS = "Tahun ajaran sudah ada."
MSG_YEAR_NOT_FOUND = "Tahun ajaran tidak ditemukan."
MSG_CREATE_FAILED = "Terjadi kesalahan saat menambahkan data tahun ajaran."
MSG_UPDATE_FAILED = "Terjadi kesalahan saat memperbarui data tahun ajaran."
MSG_DELETE_FAILED = "Terjadi kesalahan saat menghapus data tahun ajaran."
MSG_CREATED = "Data tahun ajaran berhasil ditambahkan."
MSG_UPDATED = "Data tahun ajaran berhasil diperbarui."
MSG_DELETED = "Data tahun ajaran berhasil dihapus."

# The report card embeds the year label, so writes also drop it.
_TAGS = (CacheTag.ACADEMIC_YEAR, CacheTag.ACADEMIC_YEARS, CacheTag.STUDENT)


def _redirect(message: str, error: bool = False) -> str:
    flag = "error" if error else "success"
    return f"{LIST_PATH}?" + urlencode({flag: "1", "message": message}, quote_via=quote)


def _check_label(year: str | None) -> str | None:
    if not year:
        return MSG_YEAR_REQUIRED
    try:
        validate_academic_year_label(year)
    except InvalidAcademicYearError:
        return MSG_YEAR_INVALID
    return None


async def _active(db: AsyncSession, academic_year_id: str) -> AcademicYear | None:
    result = await db.execute(
        select(AcademicYear).where(
            AcademicYear.id == academic_year_id, AcademicYear.is_deleted.is_(False)
        )
    )
    return result.scalar_one_or_none()


async def _label_taken(db: AsyncSession, year: str, exclude_id: str | None = None) -> bool:
    stmt = select(AcademicYear.id).where(
        AcademicYear.year == year, AcademicYear.is_deleted.is_(False)
    )
    if exclude_id is not None:
        stmt = stmt.where(AcademicYear.id != exclude_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None


async def list_academic_years(
    db: AsyncSession, cache: TagCache, year: str | None = None
) -> list[AcademicYearRead]:
    """Return active academic years, newest label first.

    Args:
        year: Optional exact label to filter on.

    Raises:
        InvalidAcademicYearError: If ``year`` is not a ``YYYY/YYYY`` label.
    """
    if year is not None:
        validate_academic_year_label(year)

    async def _load() -> list[AcademicYearRead]:
        stmt = select(AcademicYear).where(AcademicYear.is_deleted.is_(False))
        if year is not None:
            stmt = stmt.where(AcademicYear.year == year)
        result = await db.execute(stmt.order_by(AcademicYear.year.desc()))
        return [AcademicYearRead.model_validate(row) for row in result.scalars().all()]

    return await cache.get_or_load(
        ("list_academic_years", year), [CacheTag.ACADEMIC_YEARS], _load
    )


async def get_academic_year(
    db: AsyncSession, cache: TagCache, academic_year_id: str
) -> AcademicYearRead:
    """Return one active academic year.

    Raises:
        RecordNotFoundError: If missing or soft-deleted.
    """

    async def _load() -> AcademicYearRead | None:
        row = await _active(db, academic_year_id)
        return AcademicYearRead.model_validate(row) if row is not None else None

    found = await cache.get_or_load(
        ("get_academic_year", academic_year_id), [CacheTag.ACADEMIC_YEAR], _load
    )
    if found is None:
        raise RecordNotFoundError("academic_year", academic_year_id)
    return found


async def create_academic_year(
    db: AsyncSession, form: AcademicYearForm
) -> FormState:
    message = _check_label(form.year)
    if message is not None:
        return FormState.failure(message)

    try:
        if await _label_taken(db, form.year or ""):
            return FormState.failure(MSG_YEAR_EXISTS)
        db.add(AcademicYear(id=new_id(), year=form.year))
        await db.flush()
    except Exception as exc:
        logger.exception("Error creating academic year: %s", exc)
        return FormState.failure(MSG_CREATE_FAILED)

    return FormState.success(_redirect(MSG_CREATED), _TAGS)


async def update_academic_year(
    db: AsyncSession, form: AcademicYearForm
) -> FormState:
    message = _check_label(form.year)
    if message is not None:
        return FormState.failure(message)

    try:
        existing = await _active(db, form.id) if form.id else None
        if existing is None:
            return FormState.failure(MSG_YEAR_NOT_FOUND)
        if await _label_taken(db, form.year or "", exclude_id=existing.id):
            return FormState.failure(MSG_YEAR_EXISTS)
        await db.execute(
            update(AcademicYear)
            .where(AcademicYear.id == existing.id)
            .values(year=form.year, updated_at=func.now())
        )
    except Exception as exc:
        logger.exception("Error updating academic year %s: %s", form.id, exc)
        return FormState.failure(MSG_UPDATE_FAILED)

    return FormState.success(_redirect(MSG_UPDATED), _TAGS)


async def delete_academic_year(db: AsyncSession, academic_year_id: str) -> FormState:
    """Soft delete; the label becomes available for a new record."""
    try:
        result = await db.execute(
            update(AcademicYear)
            .where(
                AcademicYear.id == academic_year_id,
                AcademicYear.is_deleted.is_(False),
            )
            .values(is_deleted=True, deleted_at=func.now(), updated_at=func.now())
        )
    except Exception as exc:
        logger.exception("Error deleting academic year %s: %s", academic_year_id, exc)
        return FormState(
            error=MSG_DELETE_FAILED, redirect_url=_redirect(MSG_DELETE_FAILED, error=True)
        )

    if not result.rowcount:
        return FormState(
            error=MSG_YEAR_NOT_FOUND, redirect_url=_redirect(MSG_YEAR_NOT_FOUND, error=True)
        )

    return FormState.success(_redirect(MSG_DELETED), _TAGS)
