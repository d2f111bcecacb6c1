"""Single development-assessment create / update / soft delete.

Each operation checks its form fields in a fixed order, verifies that the
student, indicator and academic year are still active, enforces the natural
key (student, indicator, semester, academic year) and returns a
:class:`~paud_sis.schemas.forms.FormState` value.
"""

from __future__ import annotations

import logging
from datetime import date
from urllib.parse import quote, urlencode

from paud_sis.models.enums import DevelopmentLevel, Semester
from paud_sis.schemas.assessment import AssessmentForm
from paud_sis.schemas.forms import FormState
from paud_sis.services.cache import ASSESSMENT_WRITE_TAGS
from paud_sis.services.reconciliation import (
    MSG_ACADEMIC_YEAR_NOT_FOUND,
    MSG_ACADEMIC_YEAR_REQUIRED,
    MSG_INDICATOR_NOT_FOUND,
    MSG_SEMESTER_INVALID,
    MSG_SEMESTER_REQUIRED,
    MSG_STUDENT_NOT_FOUND,
    MSG_STUDENT_REQUIRED,
)
from paud_sis.services.store import AssessmentDraft, AssessmentStore, NaturalKey

logger = logging.getLogger(__name__)

LIST_PATH = "/development-assessments"

MSG_INDICATOR_REQUIRED = "Indikator perkembangan harus dipilih."
MSG_DEVELOPMENT_REQUIRED = "Tingkat perkembangan harus dipilih."
MSG_DATE_INVALID = "Tanggal penilaian tidak valid."
MSG_DUPLICATE = "Penilaian untuk siswa dan indikator ini sudah ada pada semester tersebut."
MSG_NOT_FOUND = "Penilaian perkembangan tidak ditemukan."
MSG_CREATE_FAILED = "Terjadi kesalahan saat menambahkan penilaian perkembangan."
MSG_UPDATE_FAILED = "Terjadi kesalahan saat memperbarui penilaian perkembangan."
MSG_DELETE_FAILED = "Terjadi kesalahan saat menghapus penilaian perkembangan."
MSG_CREATED = "Penilaian perkembangan berhasil ditambahkan."
MSG_UPDATED = "Penilaian perkembangan berhasil diperbarui."
MSG_DELETED = "Penilaian perkembangan berhasil dihapus."


def list_redirect(message: str, error: bool = False) -> str:
    """Return the assessment list URL with a toast message."""
    flag = "error" if error else "success"
    return f"{LIST_PATH}?" + urlencode({flag: "1", "message": message}, quote_via=quote)


class _FieldError(Exception):
    """Internal: a form field failed its check; carries the user message."""


def _parse_form(form: AssessmentForm) -> tuple[NaturalKey, DevelopmentLevel, date | None]:
    """Check the form fields in display order and convert them.

    Raises:
        _FieldError: With the message for the first failing field.
    """
    if not form.student_id:
        raise _FieldError(MSG_STUDENT_REQUIRED)
    if not form.indicator_id:
        raise _FieldError(MSG_INDICATOR_REQUIRED)
    if not form.development:
        raise _FieldError(MSG_DEVELOPMENT_REQUIRED)
    try:
        development = DevelopmentLevel(form.development)
    except ValueError:
        raise _FieldError(MSG_DEVELOPMENT_REQUIRED) from None
    if not form.semester:
        raise _FieldError(MSG_SEMESTER_REQUIRED)
    try:
        semester = Semester(form.semester)
    except ValueError:
        raise _FieldError(MSG_SEMESTER_INVALID) from None
    if not form.academic_year_id:
        raise _FieldError(MSG_ACADEMIC_YEAR_REQUIRED)

    assessment_date: date | None = None
    if form.assessment_date:
        try:
            assessment_date = date.fromisoformat(form.assessment_date.split("T", 1)[0])
        except ValueError:
            raise _FieldError(MSG_DATE_INVALID) from None

    key = NaturalKey(
        student_id=form.student_id,
        indicator_id=form.indicator_id,
        semester=semester,
        academic_year_id=form.academic_year_id,
    )
    return key, development, assessment_date


class AssessmentService:
    """Form-level operations on one assessment.

    Successful results carry :data:`ASSESSMENT_WRITE_TAGS`; the caller drops
    them from the cache after committing.

    Args:
        store: Data-access port.
    """

    def __init__(self, store: AssessmentStore) -> None:
        self._store = store

    async def _check_references(self, key: NaturalKey) -> str | None:
        if await self._store.get_active_student(key.student_id) is None:
            return MSG_STUDENT_NOT_FOUND
        if await self._store.get_active_indicator(key.indicator_id) is None:
            return MSG_INDICATOR_NOT_FOUND
        if await self._store.get_active_academic_year(key.academic_year_id) is None:
            return MSG_ACADEMIC_YEAR_NOT_FOUND
        return None

    async def create(self, form: AssessmentForm) -> FormState:
        """Record a new assessment unless its natural key is already rated."""
        try:
            key, development, assessment_date = _parse_form(form)
        except _FieldError as exc:
            return FormState.failure(str(exc))

        try:
            message = await self._check_references(key)
            if message is not None:
                return FormState.failure(message)

            if await self._store.find_assessment(key) is not None:
                return FormState.failure(MSG_DUPLICATE)

            assessment = await self._store.create_assessment(
                AssessmentDraft(
                    key=key,
                    development=development,
                    notes=form.notes or None,
                    assessment_date=assessment_date,
                )
            )
        except Exception as exc:
            logger.exception("Error creating development assessment: %s", exc)
            return FormState.failure(MSG_CREATE_FAILED)

        logger.info(
            "Created assessment %s for student=%s indicator=%s",
            assessment.id,
            key.student_id,
            key.indicator_id,
        )
        return FormState.success(list_redirect(MSG_CREATED), ASSESSMENT_WRITE_TAGS)

    async def update(self, form: AssessmentForm) -> FormState:
        """Rewrite an existing assessment, keeping the natural key unique."""
        try:
            key, development, assessment_date = _parse_form(form)
        except _FieldError as exc:
            return FormState.failure(str(exc))

        try:
            existing = (
                await self._store.get_assessment(form.id) if form.id else None
            )
            if existing is None:
                return FormState.failure(MSG_NOT_FOUND)

            message = await self._check_references(key)
            if message is not None:
                return FormState.failure(message)

            key_changed = (
                existing.student_id != key.student_id
                or existing.indicator_id != key.indicator_id
                or existing.semester != key.semester
                or existing.academic_year_id != key.academic_year_id
            )
            if key_changed:
                duplicate = await self._store.find_assessment(key)
                if duplicate is not None and duplicate.id != existing.id:
                    return FormState.failure(MSG_DUPLICATE)

            applied = await self._store.update_assessment(
                existing.id,
                {
                    "student_id": key.student_id,
                    "indicator_id": key.indicator_id,
                    "semester": key.semester,
                    "academic_year_id": key.academic_year_id,
                    "development": development,
                    "notes": form.notes or None,
                    "assessment_date": assessment_date,
                },
            )
            if not applied:
                return FormState.failure(MSG_NOT_FOUND)
        except Exception as exc:
            logger.exception("Error updating development assessment %s: %s", form.id, exc)
            return FormState.failure(MSG_UPDATE_FAILED)

        return FormState.success(list_redirect(MSG_UPDATED), ASSESSMENT_WRITE_TAGS)

    async def delete(self, assessment_id: str) -> FormState:
        """Soft delete an assessment; the redirect carries success or error."""
        try:
            deleted = await self._store.soft_delete_assessment(assessment_id)
        except Exception as exc:
            logger.exception("Error deleting development assessment %s: %s", assessment_id, exc)
            return FormState(
                error=MSG_DELETE_FAILED,
                redirect_url=list_redirect(MSG_DELETE_FAILED, error=True),
            )

        if not deleted:
            return FormState(
                error=MSG_NOT_FOUND,
                redirect_url=list_redirect(MSG_NOT_FOUND, error=True),
            )

        return FormState.success(list_redirect(MSG_DELETED), ASSESSMENT_WRITE_TAGS)
