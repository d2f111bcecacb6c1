"""Student lookup and soft deletion.

Soft deletion only flags the row. NIS uniqueness is enforced by a partial
unique index over active students, so the NIS of a deleted student can be
given to a new enrolment without renaming the old row.
"""

from __future__ import annotations

import logging
from urllib.parse import quote, urlencode

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from paud_sis.exceptions import RecordNotFoundError
from paud_sis.models.student import Student
from paud_sis.schemas.forms import FormState
from paud_sis.schemas.student import StudentRead
from paud_sis.services.cache import ASSESSMENT_WRITE_TAGS

logger = logging.getLogger(__name__)

MSG_STUDENT_NOT_FOUND = "Siswa tidak ditemukan."
MSG_DELETE_FAILED = "Terjadi kesalahan saat menghapus data siswa."
MSG_DELETED = "Data siswa berhasil dihapus."


def _redirect(message: str, error: bool = False) -> str:
    flag = "error" if error else "success"
    return "/students?" + urlencode({flag: "1", "message": message}, quote_via=quote)


async def get_student(db: AsyncSession, student_id: str) -> StudentRead:
    """Return an active student.

    Raises:
        RecordNotFoundError: If the id is unknown or the student was deleted.
    """
    result = await db.execute(
        select(Student).where(Student.id == student_id, Student.is_deleted.is_(False))
    )
    student = result.scalar_one_or_none()
    if student is None:
        raise RecordNotFoundError("student", student_id)
    return StudentRead.model_validate(student)


async def delete_student(db: AsyncSession, student_id: str) -> FormState:
    """Soft delete a student; success carries the tags of every view listing students."""
    try:
        result = await db.execute(
            update(Student)
            .where(Student.id == student_id, Student.is_deleted.is_(False))
            .values(is_deleted=True, deleted_at=func.now(), updated_at=func.now())
        )
    except Exception as exc:
        logger.exception("Error deleting student %s: %s", student_id, exc)
        return FormState(
            error=MSG_DELETE_FAILED, redirect_url=_redirect(MSG_DELETE_FAILED, error=True)
        )

    if not result.rowcount:
        return FormState(
            error=MSG_STUDENT_NOT_FOUND,
            redirect_url=_redirect(MSG_STUDENT_NOT_FOUND, error=True),
        )

    logger.info("Student %s soft-deleted", student_id)
    return FormState.success(_redirect(MSG_DELETED), ASSESSMENT_WRITE_TAGS)
