"""PostgreSQL implementation of :class:`~paud_sis.services.store.AssessmentStore`.

One instance wraps the request-scoped ``AsyncSession``. An ``AsyncSession``
must not run two statements at once, so callers that fan out with
``asyncio.gather`` are serialized by an internal lock; the workflow code stays
written as a concurrent group either way.

Inserts go through ``INSERT ... ON CONFLICT DO NOTHING`` against the partial
unique index on the natural key, so two requests racing on the same student
cannot create duplicate active rows.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection, Sequence
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from paud_sis.models.academic_year import AcademicYear
from paud_sis.models.base import new_id
from paud_sis.models.development_aspect import DevelopmentIndicator
from paud_sis.models.development_assessment import (
    ACTIVE_ROW_PREDICATE,
    NATURAL_KEY_COLUMNS,
    DevelopmentAssessment,
)
from paud_sis.models.student import Student
from paud_sis.services.store import AssessmentDraft, AssessmentStore, NaturalKey

logger = logging.getLogger(__name__)


class SqlAlchemyAssessmentStore(AssessmentStore):
    """Assessment storage backed by an async SQLAlchemy session.

    Args:
        session: Request-scoped session; commit/rollback is owned by the
            ``get_async_db`` dependency, this class only flushes.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Collaborator lookups
    # ------------------------------------------------------------------

    async def _scalar(self, stmt: Any) -> Any:
        async with self._lock:
            result = await self._session.execute(stmt)
            return result.scalar_one_or_none()

    async def get_active_student(self, student_id: str) -> Student | None:
        return await self._scalar(
            select(Student).where(Student.id == student_id, Student.is_deleted.is_(False))
        )

    async def get_active_indicator(self, indicator_id: str) -> DevelopmentIndicator | None:
        return await self._scalar(
            select(DevelopmentIndicator).where(
                DevelopmentIndicator.id == indicator_id,
                DevelopmentIndicator.is_deleted.is_(False),
            )
        )

    async def get_active_academic_year(self, academic_year_id: str) -> AcademicYear | None:
        return await self._scalar(
            select(AcademicYear).where(
                AcademicYear.id == academic_year_id,
                AcademicYear.is_deleted.is_(False),
            )
        )

    async def find_active_indicator_ids(self, indicator_ids: Collection[str]) -> set[str]:
        if not indicator_ids:
            return set()
        stmt = select(DevelopmentIndicator.id).where(
            DevelopmentIndicator.id.in_(list(indicator_ids)),
            DevelopmentIndicator.is_deleted.is_(False),
        )
        async with self._lock:
            result = await self._session.execute(stmt)
            return set(result.scalars().all())

    # ------------------------------------------------------------------
    # Assessments
    # ------------------------------------------------------------------

    async def find_assessment(self, key: NaturalKey) -> DevelopmentAssessment | None:
        return await self._scalar(
            select(DevelopmentAssessment).where(
                DevelopmentAssessment.student_id == key.student_id,
                DevelopmentAssessment.indicator_id == key.indicator_id,
                DevelopmentAssessment.semester == key.semester,
                DevelopmentAssessment.academic_year_id == key.academic_year_id,
                DevelopmentAssessment.is_deleted.is_(False),
            )
        )

    async def get_assessment(self, assessment_id: str) -> DevelopmentAssessment | None:
        return await self._scalar(
            select(DevelopmentAssessment).where(
                DevelopmentAssessment.id == assessment_id,
                DevelopmentAssessment.is_deleted.is_(False),
            )
        )

    async def create_assessment(self, draft: AssessmentDraft) -> DevelopmentAssessment:
        assessment = DevelopmentAssessment(id=new_id(), **draft.as_row())
        async with self._lock:
            self._session.add(assessment)
            await self._session.flush()
        return assessment

    def _insert_ignoring_conflicts(self, rows: list[dict[str, Any]]) -> Any:
        return (
            pg_insert(DevelopmentAssessment)
            .values(rows)
            .on_conflict_do_nothing(
                index_elements=list(NATURAL_KEY_COLUMNS),
                index_where=ACTIVE_ROW_PREDICATE,
            )
        )

    async def create_assessments(self, drafts: Sequence[AssessmentDraft]) -> int:
        if not drafts:
            return 0
        rows = [{"id": new_id(), **draft.as_row()} for draft in drafts]
        async with self._lock:
            result = await self._session.execute(self._insert_ignoring_conflicts(rows))
        inserted = max(result.rowcount or 0, 0)
        if inserted < len(rows):
            logger.warning(
                "Bulk insert skipped %d of %d assessments already present",
                len(rows) - inserted,
                len(rows),
            )
        return inserted

    async def insert_assessment_if_absent(self, draft: AssessmentDraft) -> bool:
        stmt = self._insert_ignoring_conflicts([{"id": new_id(), **draft.as_row()}])
        async with self._lock:
            result = await self._session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def update_assessment(
        self,
        assessment_id: str,
        changes: dict[str, Any],
        student_id: str | None = None,
    ) -> bool:
        stmt = (
            update(DevelopmentAssessment)
            .where(
                DevelopmentAssessment.id == assessment_id,
                DevelopmentAssessment.is_deleted.is_(False),
            )
            .values(**changes, updated_at=func.now())
        )
        if student_id is not None:
            stmt = stmt.where(DevelopmentAssessment.student_id == student_id)
        async with self._lock:
            result = await self._session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def soft_delete_assessment(self, assessment_id: str) -> bool:
        stmt = (
            update(DevelopmentAssessment)
            .where(
                DevelopmentAssessment.id == assessment_id,
                DevelopmentAssessment.is_deleted.is_(False),
            )
            .values(is_deleted=True, deleted_at=func.now(), updated_at=func.now())
        )
        async with self._lock:
            result = await self._session.execute(stmt)
        return (result.rowcount or 0) > 0
