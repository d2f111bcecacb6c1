"""Cached read views over development assessments.

Provides:
    list_assessments        — paginated, searchable, sortable list
    get_assessment_detail   — one assessment with student / indicator context
    get_student_assessments — a student's assessments in report order
    build_report_card       — aspects → indicators → recorded level

Results are cached in the process-wide :class:`TagCache` and dropped whenever
an assessment write invalidates their tag.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from paud_sis.exceptions import RecordNotFoundError
from paud_sis.models.academic_year import AcademicYear
from paud_sis.models.development_aspect import DevelopmentAspect, DevelopmentIndicator
from paud_sis.models.development_assessment import DevelopmentAssessment
from paud_sis.models.enums import DevelopmentLevel, Semester
from paud_sis.models.student import Student
from paud_sis.schemas.assessment import (
    AspectSummary,
    AssessmentListResponse,
    AssessmentRead,
    AssessmentSortField,
    IndicatorSummary,
    ReportCard,
    ReportCardAspect,
    ReportCardIndicator,
    SortOrder,
    StudentSummary,
)
from paud_sis.services.cache import CacheTag, TagCache

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    AssessmentSortField.CREATED_AT: DevelopmentAssessment.created_at,
    AssessmentSortField.UPDATED_AT: DevelopmentAssessment.updated_at,
    AssessmentSortField.ASSESSMENT_DATE: DevelopmentAssessment.assessment_date,
    AssessmentSortField.DEVELOPMENT: DevelopmentAssessment.development,
    AssessmentSortField.SEMESTER: DevelopmentAssessment.semester,
}

_CONTEXT_OPTIONS = (
    selectinload(DevelopmentAssessment.student).selectinload(Student.school_class),
    selectinload(DevelopmentAssessment.indicator).selectinload(DevelopmentIndicator.aspect),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _student_summary(student: Student | None) -> StudentSummary | None:
    if student is None:
        return None
    school_class = student.school_class
    return StudentSummary(
        id=student.id,
        name=student.name,
        nis=student.nis,
        class_name=school_class.name if school_class is not None else None,
        age_group=school_class.age_group if school_class is not None else None,
    )


def _indicator_summary(indicator: DevelopmentIndicator | None) -> IndicatorSummary | None:
    if indicator is None:
        return None
    aspect = indicator.aspect
    return IndicatorSummary(
        id=indicator.id,
        name=indicator.name,
        short_name=indicator.short_name,
        order=indicator.order,
        age_group=indicator.age_group,
        aspect=AspectSummary.model_validate(aspect) if aspect is not None else None,
    )


def to_assessment_read(assessment: DevelopmentAssessment) -> AssessmentRead:
    """Convert an ORM row (with context relationships loaded) to its read model."""
    return AssessmentRead(
        id=assessment.id,
        student_id=assessment.student_id,
        indicator_id=assessment.indicator_id,
        semester=assessment.semester,
        academic_year_id=assessment.academic_year_id,
        development=assessment.development,
        notes=assessment.notes,
        assessment_date=assessment.assessment_date,
        created_at=assessment.created_at,
        updated_at=assessment.updated_at,
        student=_student_summary(assessment.student),
        indicator=_indicator_summary(assessment.indicator),
    )


def _list_conditions(
    search: str | None,
    student_id: str | None,
    indicator_id: str | None,
    semester: Semester | None,
    academic_year_id: str | None,
) -> list[Any]:
    conditions: list[Any] = [DevelopmentAssessment.is_deleted.is_(False)]
    if search:
        pattern = f"%{search}%"
        conditions.append(
            or_(
                Student.name.ilike(pattern),
                Student.nis.ilike(pattern),
                DevelopmentIndicator.name.ilike(pattern),
                DevelopmentAssessment.notes.ilike(pattern),
            )
        )
    if student_id:
        conditions.append(DevelopmentAssessment.student_id == student_id)
    if indicator_id:
        conditions.append(DevelopmentAssessment.indicator_id == indicator_id)
    if semester is not None:
        conditions.append(DevelopmentAssessment.semester == semester)
    if academic_year_id:
        conditions.append(DevelopmentAssessment.academic_year_id == academic_year_id)
    return conditions


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


async def list_assessments(
    db: AsyncSession,
    cache: TagCache,
    *,
    skip: int = 0,
    limit: int = 10,
    sort_by: AssessmentSortField = AssessmentSortField.CREATED_AT,
    sort_order: SortOrder = SortOrder.ASC,
    search: str | None = None,
    student_id: str | None = None,
    indicator_id: str | None = None,
    semester: Semester | None = None,
    academic_year_id: str | None = None,
) -> AssessmentListResponse:
    """Return one page of active assessments.

    ``sort_by`` is an :class:`AssessmentSortField`, so only known columns ever
    reach the ORDER BY clause.
    """

    async def _load() -> AssessmentListResponse:
        conditions = _list_conditions(
            search, student_id, indicator_id, semester, academic_year_id
        )
        joined = (
            select(DevelopmentAssessment)
            .join(Student, DevelopmentAssessment.student_id == Student.id)
            .join(
                DevelopmentIndicator,
                DevelopmentAssessment.indicator_id == DevelopmentIndicator.id,
            )
            .where(*conditions)
        )
        count_stmt = select(func.count()).select_from(joined.subquery())

        column = _SORT_COLUMNS[sort_by]
        ordering = column.desc() if sort_order is SortOrder.DESC else column.asc()
        page_stmt = (
            joined.options(*_CONTEXT_OPTIONS)
            .order_by(ordering, DevelopmentAssessment.id)
            .offset(skip)
            .limit(limit)
        )

        total_count = (await db.execute(count_stmt)).scalar_one()
        rows = (await db.execute(page_stmt)).scalars().all()

        return AssessmentListResponse(
            assessments=[to_assessment_read(row) for row in rows],
            total_count=total_count,
            current_page=skip // limit + 1,
            total_pages=math.ceil(total_count / limit),
            items_per_page=limit,
        )

    key = (
        "list_assessments",
        skip,
        limit,
        sort_by,
        sort_order,
        search,
        student_id,
        indicator_id,
        semester,
        academic_year_id,
    )
    return await cache.get_or_load(key, [CacheTag.DEVELOPMENT_ASSESSMENTS], _load)


async def get_assessment_detail(
    db: AsyncSession, cache: TagCache, assessment_id: str
) -> AssessmentRead:
    """Return one active assessment.

    Raises:
        RecordNotFoundError: If the id is unknown or the row is soft-deleted.
    """

    async def _load() -> AssessmentRead | None:
        stmt = (
            select(DevelopmentAssessment)
            .where(
                DevelopmentAssessment.id == assessment_id,
                DevelopmentAssessment.is_deleted.is_(False),
            )
            .options(*_CONTEXT_OPTIONS)
        )
        row = (await db.execute(stmt)).scalar_one_or_none()
        return to_assessment_read(row) if row is not None else None

    detail = await cache.get_or_load(
        ("get_assessment_detail", assessment_id),
        [CacheTag.DEVELOPMENT_ASSESSMENT],
        _load,
    )
    if detail is None:
        raise RecordNotFoundError("development_assessment", assessment_id)
    return detail


async def get_student_assessments(
    db: AsyncSession,
    cache: TagCache,
    student_id: str,
    semester: Semester | None = None,
    academic_year_id: str | None = None,
) -> list[AssessmentRead]:
    """Return a student's active assessments ordered by aspect then indicator."""

    async def _load() -> list[AssessmentRead]:
        stmt = (
            select(DevelopmentAssessment)
            .join(
                DevelopmentIndicator,
                DevelopmentAssessment.indicator_id == DevelopmentIndicator.id,
            )
            .join(DevelopmentAspect, DevelopmentIndicator.aspect_id == DevelopmentAspect.id)
            .where(
                *_list_conditions(None, student_id, None, semester, academic_year_id)
            )
            .options(*_CONTEXT_OPTIONS)
            .order_by(DevelopmentAspect.order, DevelopmentIndicator.order)
        )
        rows = (await db.execute(stmt)).scalars().all()
        return [to_assessment_read(row) for row in rows]

    key = ("get_student_assessments", student_id, semester, academic_year_id)
    return await cache.get_or_load(
        key, [CacheTag.STUDENT_DEVELOPMENT_ASSESSMENTS], _load
    )


async def build_report_card(
    db: AsyncSession,
    cache: TagCache,
    student_id: str,
    semester: Semester,
    academic_year_id: str,
) -> ReportCard:
    """Assemble the report-card data for one student, semester and year.

    Only indicators for the student's age group (or for all ages) are listed.
    Indicators without an assessment appear with ``development=None``.

    Raises:
        RecordNotFoundError: If the student or the academic year is inactive.
    """

    async def _load() -> ReportCard:
        student = (
            await db.execute(
                select(Student)
                .where(Student.id == student_id, Student.is_deleted.is_(False))
                .options(selectinload(Student.school_class))
            )
        ).scalar_one_or_none()
        if student is None:
            raise RecordNotFoundError("student", student_id)

        academic_year = (
            await db.execute(
                select(AcademicYear).where(
                    AcademicYear.id == academic_year_id,
                    AcademicYear.is_deleted.is_(False),
                )
            )
        ).scalar_one_or_none()
        if academic_year is None:
            raise RecordNotFoundError("academic_year", academic_year_id)

        aspects = (
            await db.execute(
                select(DevelopmentAspect)
                .where(DevelopmentAspect.is_deleted.is_(False))
                .options(selectinload(DevelopmentAspect.indicators))
                .order_by(DevelopmentAspect.order)
            )
        ).scalars().all()

        assessments = (
            await db.execute(
                select(DevelopmentAssessment).where(
                    *_list_conditions(None, student_id, None, semester, academic_year_id)
                )
            )
        ).scalars().all()
        by_indicator = {row.indicator_id: row for row in assessments}

        age_group = student.school_class.age_group if student.school_class else None
        level_counts = {level: 0 for level in DevelopmentLevel}
        card_aspects: list[ReportCardAspect] = []
        indicator_count = 0

        for aspect in aspects:
            indicators: list[ReportCardIndicator] = []
            for indicator in sorted(aspect.indicators, key=lambda i: i.order):
                if indicator.is_deleted:
                    continue
                if indicator.age_group is not None and indicator.age_group != age_group:
                    continue
                assessment = by_indicator.get(indicator.id)
                if assessment is not None:
                    level_counts[assessment.development] += 1
                indicators.append(
                    ReportCardIndicator(
                        indicator_id=indicator.id,
                        name=indicator.name,
                        short_name=indicator.short_name,
                        order=indicator.order,
                        development=assessment.development if assessment else None,
                        notes=assessment.notes if assessment else None,
                    )
                )
            indicator_count += len(indicators)
            card_aspects.append(
                ReportCardAspect(
                    aspect_id=aspect.id,
                    code=aspect.code,
                    name=aspect.name,
                    order=aspect.order,
                    indicators=indicators,
                )
            )

        return ReportCard(
            student_id=student.id,
            student_name=student.name,
            nis=student.nis,
            class_name=student.school_class.name if student.school_class else None,
            semester=semester,
            academic_year_id=academic_year.id,
            academic_year=academic_year.year,
            aspects=card_aspects,
            level_counts=level_counts,
            rated_count=sum(level_counts.values()),
            indicator_count=indicator_count,
        )

    key = ("build_report_card", student_id, semester, academic_year_id)
    return await cache.get_or_load(
        key, [CacheTag.STUDENT, CacheTag.STUDENT_DEVELOPMENT_ASSESSMENTS], _load
    )
