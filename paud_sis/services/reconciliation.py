"""Bulk development-assessment reconciliation.

A teacher rates one student on many indicators at once for a semester and an
academic year. The bulk form posts the whole batch; this service decides, per
indicator, whether to insert, update or leave the stored row alone:

* creation mode: insert ratings whose (student, indicator, semester, year)
  key is not taken yet; keys already rated are skipped, and a batch with
  nothing new is reported back as an error so the UI can say so.
* edit mode: rows identified by ``assessmentId`` are updated in place; rows
  without one are inserted only if their key is free, never overwritten.

Validation and storage failures come back as :class:`ReconciliationResult`
values. Nothing is raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlencode

from paud_sis.models.enums import Semester
from paud_sis.schemas.assessment import AssessmentItem, parse_assessment_items
from paud_sis.services.cache import ASSESSMENT_WRITE_TAGS
from paud_sis.services.store import AssessmentDraft, AssessmentStore, NaturalKey

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# User-facing messages
# ---------------------------------------------------------------------------

MSG_STUDENT_REQUIRED = "Siswa harus dipilih."
MSG_SEMESTER_REQUIRED = "Semester harus dipilih."
MSG_SEMESTER_INVALID = "Semester tidak valid."
MSG_ACADEMIC_YEAR_REQUIRED = "Tahun ajaran harus diisi."
MSG_DATA_REQUIRED = "Data penilaian harus diisi."
MSG_DATA_INVALID = "Format data penilaian tidak valid."
MSG_STUDENT_NOT_FOUND = "Siswa tidak ditemukan atau sudah tidak aktif."
MSG_ACADEMIC_YEAR_NOT_FOUND = "Tahun ajaran tidak ditemukan."
MSG_INDICATOR_NOT_FOUND = "Indikator perkembangan tidak ditemukan atau sudah tidak aktif."
MSG_NOTHING_NEW = (
    "Tidak ada penilaian baru untuk ditambahkan. "
    "Semua indikator sudah dinilai pada semester ini."
)
MSG_CREATE_FAILED = "Terjadi kesalahan saat menyimpan penilaian perkembangan."
MSG_UPDATE_FAILED = "Terjadi kesalahan saat memperbarui penilaian perkembangan."
MSG_CREATED = "Penilaian perkembangan berhasil ditambahkan."
MSG_UPDATED = "Penilaian perkembangan berhasil diperbarui."

_SEMESTER_VALUES = frozenset(semester.value for semester in Semester)


# ---------------------------------------------------------------------------
# Input / output values
# ---------------------------------------------------------------------------


@dataclass
class BulkAssessmentSubmission:
    """Fields of the bulk assessment form, as posted.

    Attributes:
        student_id: Student being rated.
        semester: Raw semester value; checked against :class:`Semester`.
        academic_year_id: Academic year the ratings belong to.
        assessment_data: JSON array of assessment items.
        is_edit_mode: True when the form edits a batch rated before.
        class_id: Only used to build the redirect target.
    """

    student_id: str | None = None
    semester: str | None = None
    academic_year_id: str | None = None
    assessment_data: str | None = None
    is_edit_mode: bool = False
    class_id: str | None = None


@dataclass
class ReconciliationResult:
    """What a bulk submission did.

    Attributes:
        error: Message for the form, or None on success.
        redirect_url: Where to send the browser on success.
        created: Rows inserted.
        updated: Rows updated by explicit id.
        skipped_assessment_ids: Explicit ids that matched no active row of
            this student and were left out of the batch.
        invalidate_tags: Cache tags to drop once the batch has committed.
    """

    error: str | None = None
    redirect_url: str | None = None
    created: int = 0
    updated: int = 0
    skipped_assessment_ids: list[str] = field(default_factory=list)
    invalidate_tags: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> ReconciliationResult:
        return cls(error=message)


def build_assessment_redirect(
    class_id: str | None,
    student_id: str,
    semester: Semester,
    academic_year_id: str,
    message: str,
) -> str:
    """Return the per-class assessment view URL carrying a success message.

    Falls back to the student page when the form did not carry a class.
    """
    if not class_id:
        return f"/students/{student_id}?" + urlencode(
            {"success": "1", "message": message}, quote_via=quote
        )
    query = urlencode(
        {
            "semester": semester.value,
            "year": academic_year_id,
            "success": "1",
            "message": message,
        },
        quote_via=quote,
    )
    return f"/assessments/{class_id}?{query}"


def _check_required_fields(submission: BulkAssessmentSubmission) -> str | None:
    """Return the first message for a missing or malformed field, else None."""
    if not submission.student_id:
        return MSG_STUDENT_REQUIRED
    if not submission.semester:
        return MSG_SEMESTER_REQUIRED
    if submission.semester not in _SEMESTER_VALUES:
        return MSG_SEMESTER_INVALID
    if not submission.academic_year_id:
        return MSG_ACADEMIC_YEAR_REQUIRED
    if not submission.assessment_data:
        return MSG_DATA_REQUIRED
    return None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AssessmentReconciler:
    """Apply a bulk assessment submission with the fewest writes possible.

    Args:
        store: Data-access port.
    """

    def __init__(self, store: AssessmentStore) -> None:
        self._store = store

    async def submit(self, submission: BulkAssessmentSubmission) -> ReconciliationResult:
        """Validate the submission, reconcile it with storage and report back.

        Field checks and payload parsing happen before any storage call.
        """
        message = _check_required_fields(submission)
        if message is not None:
            return ReconciliationResult.failure(message)

        try:
            items = parse_assessment_items(submission.assessment_data or "")
        except ValueError:
            return ReconciliationResult.failure(MSG_DATA_INVALID)
        if not items:
            return ReconciliationResult.failure(MSG_DATA_INVALID)

        semester = Semester(submission.semester)
        rated = [item for item in items if item.is_rated]
        failed_message = MSG_UPDATE_FAILED if submission.is_edit_mode else MSG_CREATE_FAILED

        try:
            result = await self._reconcile(submission, semester, rated)
        except Exception as exc:
            logger.exception(
                "Error reconciling assessments for student=%s: %s",
                submission.student_id,
                exc,
            )
            return ReconciliationResult.failure(failed_message)

        if result.ok:
            result.invalidate_tags = ASSESSMENT_WRITE_TAGS
            result.redirect_url = build_assessment_redirect(
                submission.class_id,
                submission.student_id or "",
                semester,
                submission.academic_year_id or "",
                MSG_UPDATED if submission.is_edit_mode else MSG_CREATED,
            )
        return result

    # ------------------------------------------------------------------
    # Reconciliation paths
    # ------------------------------------------------------------------

    async def _reconcile(
        self,
        submission: BulkAssessmentSubmission,
        semester: Semester,
        rated: list[AssessmentItem],
    ) -> ReconciliationResult:
        student_id = submission.student_id or ""
        academic_year_id = submission.academic_year_id or ""

        student = await self._store.get_active_student(student_id)
        if student is None:
            return ReconciliationResult.failure(MSG_STUDENT_NOT_FOUND)

        if submission.is_edit_mode:
            academic_year = await self._store.get_active_academic_year(academic_year_id)
            if academic_year is None:
                return ReconciliationResult.failure(MSG_ACADEMIC_YEAR_NOT_FOUND)

        indicator_ids = {item.indicator_id for item in rated if item.indicator_id}
        if indicator_ids:
            active = await self._store.find_active_indicator_ids(indicator_ids)
            missing = indicator_ids - active
            if missing:
                logger.info(
                    "Rejected bulk assessment for student=%s: inactive indicators %s",
                    student_id,
                    sorted(missing),
                )
                return ReconciliationResult.failure(MSG_INDICATOR_NOT_FOUND)

        if submission.is_edit_mode:
            return await self._apply_edits(student_id, semester, academic_year_id, rated)
        return await self._create_missing(student_id, semester, academic_year_id, rated)

    async def _create_missing(
        self,
        student_id: str,
        semester: Semester,
        academic_year_id: str,
        rated: list[AssessmentItem],
    ) -> ReconciliationResult:
        drafts = _unique_drafts(
            _draft(item, student_id, semester, academic_year_id) for item in rated
        )
        existing = await _gather_settled(
            *(self._store.find_assessment(draft.key) for draft in drafts)
        )
        staged = [draft for draft, found in zip(drafts, existing) if found is None]
        if not staged:
            return ReconciliationResult.failure(MSG_NOTHING_NEW)

        created = await self._store.create_assessments(staged)
        if created == 0:
            # Another request took every key between the check and the insert.
            return ReconciliationResult.failure(MSG_NOTHING_NEW)

        logger.info(
            "Created %d assessments for student=%s semester=%s year=%s (%d already rated)",
            created,
            student_id,
            semester.value,
            academic_year_id,
            len(drafts) - len(staged),
        )
        return ReconciliationResult(created=created)

    async def _apply_edits(
        self,
        student_id: str,
        semester: Semester,
        academic_year_id: str,
        rated: list[AssessmentItem],
    ) -> ReconciliationResult:
        updates: list[tuple[str, Any]] = []
        inserts: list[Any] = []
        seen_keys: set[NaturalKey] = set()

        for item in rated:
            if item.assessment_id:
                changes = {
                    "development": item.development,
                    "notes": item.notes,
                    "assessment_date": item.assessment_date,
                    "semester": semester,
                    "academic_year_id": academic_year_id,
                }
                updates.append(
                    (
                        item.assessment_id,
                        self._store.update_assessment(
                            item.assessment_id, changes, student_id=student_id
                        ),
                    )
                )
            else:
                draft = _draft(item, student_id, semester, academic_year_id)
                if draft.key in seen_keys:
                    continue
                seen_keys.add(draft.key)
                inserts.append(self._store.insert_assessment_if_absent(draft))

        outcomes = await _gather_settled(*(op for _, op in updates), *inserts)
        update_outcomes = outcomes[: len(updates)]
        insert_outcomes = outcomes[len(updates):]

        skipped = [
            assessment_id
            for (assessment_id, _), applied in zip(updates, update_outcomes)
            if not applied
        ]
        for assessment_id in skipped:
            logger.warning(
                "Assessment %s not found for student=%s; left out of the batch",
                assessment_id,
                student_id,
            )

        result = ReconciliationResult(
            created=sum(1 for inserted in insert_outcomes if inserted),
            updated=len(updates) - len(skipped),
            skipped_assessment_ids=skipped,
        )
        logger.info(
            "Edited assessments for student=%s semester=%s year=%s: updated=%d created=%d skipped=%d",
            student_id,
            semester.value,
            academic_year_id,
            result.updated,
            result.created,
            len(skipped),
        )
        return result


def _draft(
    item: AssessmentItem, student_id: str, semester: Semester, academic_year_id: str
) -> AssessmentDraft:
    return AssessmentDraft(
        key=NaturalKey(
            student_id=student_id,
            indicator_id=item.indicator_id or "",
            semester=semester,
            academic_year_id=academic_year_id,
        ),
        development=item.development,  # type: ignore[arg-type]
        notes=item.notes,
        assessment_date=item.assessment_date,
    )


def _unique_drafts(drafts: Any) -> list[AssessmentDraft]:
    """Keep the first draft for each natural key."""
    unique: dict[NaturalKey, AssessmentDraft] = {}
    for draft in drafts:
        unique.setdefault(draft.key, draft)
    return list(unique.values())


async def _gather_settled(*aws: Awaitable[Any]) -> list[Any]:
    """Await every operation of a group, then raise the first failure.

    No member is still queued on the session when this returns or raises.
    """
    outcomes = await asyncio.gather(*aws, return_exceptions=True)
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return list(outcomes)
