"""Data-access port for development assessments.

Services depend on :class:`AssessmentStore` rather than on a session so the
same workflow runs against PostgreSQL in production
(:class:`~paud_sis.services.sql_store.SqlAlchemyAssessmentStore`) and against
an in-memory store in tests.
"""

from __future__ import annotations

import abc
from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from paud_sis.models.academic_year import AcademicYear
from paud_sis.models.development_aspect import DevelopmentIndicator
from paud_sis.models.development_assessment import DevelopmentAssessment
from paud_sis.models.enums import DevelopmentLevel, Semester
from paud_sis.models.student import Student


@dataclass(frozen=True)
class NaturalKey:
    """(student, indicator, semester, academic year): unique over active rows."""

    student_id: str
    indicator_id: str
    semester: Semester
    academic_year_id: str


@dataclass(frozen=True)
class AssessmentDraft:
    """Values for a row that does not exist yet."""

    key: NaturalKey
    development: DevelopmentLevel
    notes: str | None = None
    assessment_date: date | None = None

    def as_row(self) -> dict[str, Any]:
        return {
            "student_id": self.key.student_id,
            "indicator_id": self.key.indicator_id,
            "semester": self.key.semester,
            "academic_year_id": self.key.academic_year_id,
            "development": self.development,
            "notes": self.notes,
            "assessment_date": self.assessment_date,
        }


class AssessmentStore(abc.ABC):
    """Operations the assessment services need from persistent storage.

    Every lookup ignores soft-deleted rows.
    """

    # -- collaborators ----------------------------------------------------

    @abc.abstractmethod
    async def get_active_student(self, student_id: str) -> Student | None:
        """Return the student unless it is missing or soft-deleted."""

    @abc.abstractmethod
    async def get_active_indicator(self, indicator_id: str) -> DevelopmentIndicator | None:
        """Return the indicator unless it is missing or soft-deleted."""

    @abc.abstractmethod
    async def get_active_academic_year(self, academic_year_id: str) -> AcademicYear | None:
        """Return the academic year unless it is missing or soft-deleted."""

    @abc.abstractmethod
    async def find_active_indicator_ids(self, indicator_ids: Collection[str]) -> set[str]:
        """Return the subset of ``indicator_ids`` that refer to active indicators."""

    # -- assessments ------------------------------------------------------

    @abc.abstractmethod
    async def find_assessment(self, key: NaturalKey) -> DevelopmentAssessment | None:
        """Return the active assessment stored under ``key``, if any."""

    @abc.abstractmethod
    async def get_assessment(self, assessment_id: str) -> DevelopmentAssessment | None:
        """Return the active assessment with this id, if any."""

    @abc.abstractmethod
    async def create_assessment(self, draft: AssessmentDraft) -> DevelopmentAssessment:
        """Insert one row; the caller has already checked the natural key."""

    @abc.abstractmethod
    async def create_assessments(self, drafts: Sequence[AssessmentDraft]) -> int:
        """Insert many rows in one statement, skipping keys that already exist.

        Returns:
            Number of rows actually inserted.
        """

    @abc.abstractmethod
    async def insert_assessment_if_absent(self, draft: AssessmentDraft) -> bool:
        """Insert ``draft`` unless its natural key is taken.

        Returns:
            True if a row was inserted, False if an active row already held
            the key (that row is left untouched).
        """

    @abc.abstractmethod
    async def update_assessment(
        self,
        assessment_id: str,
        changes: dict[str, Any],
        student_id: str | None = None,
    ) -> bool:
        """Apply ``changes`` to the active row ``assessment_id``.

        Args:
            assessment_id: Primary key of the row to change.
            changes: Column values to write; ``updated_at`` is always refreshed.
            student_id: When given, the row must also belong to this student.

        Returns:
            False if no matching active row exists.
        """

    @abc.abstractmethod
    async def soft_delete_assessment(self, assessment_id: str) -> bool:
        """Flag the row deleted and stamp ``deleted_at``; False if not found."""
