"""SQLAlchemy ORM model for the development_assessments table."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paud_sis.models.base import Base, SoftDeleteMixin, TimestampMixin, id_column
from paud_sis.models.enums import DevelopmentLevel, Semester

if TYPE_CHECKING:
    from paud_sis.models.academic_year import AcademicYear
    from paud_sis.models.development_aspect import DevelopmentIndicator
    from paud_sis.models.student import Student

# Natural key of an assessment; unique over active rows only.
NATURAL_KEY_COLUMNS = ("student_id", "indicator_id", "semester", "academic_year_id")
ACTIVE_ROW_PREDICATE = text("is_deleted = false")


class DevelopmentAssessment(TimestampMixin, SoftDeleteMixin, Base):
    """One rating of one student on one indicator for a semester and year.

    Attributes:
        id: String UUID primary key.
        student_id: Foreign key to students.
        indicator_id: Foreign key to development_indicators.
        semester: SEMESTER_1 or SEMESTER_2.
        academic_year_id: Foreign key to academic_years.
        development: BAIK, CUKUP or PERLU_DILATIH.
        notes: Optional teacher notes.
        assessment_date: Optional observation date.
    """

    __tablename__ = "development_assessments"
    __table_args__ = (
        Index(
            "uq_development_assessments_natural_key_active",
            *NATURAL_KEY_COLUMNS,
            unique=True,
            postgresql_where=ACTIVE_ROW_PREDICATE,
        ),
        Index("idx_development_assessments_student_id", "student_id"),
    )

    id: Mapped[str] = id_column()
    student_id: Mapped[str] = mapped_column(
        ForeignKey("students.id", ondelete="RESTRICT"), nullable=False
    )
    indicator_id: Mapped[str] = mapped_column(
        ForeignKey("development_indicators.id", ondelete="RESTRICT"), nullable=False
    )
    semester: Mapped[Semester] = mapped_column(
        Enum(Semester, name="semester"), nullable=False
    )
    academic_year_id: Mapped[str] = mapped_column(
        ForeignKey("academic_years.id", ondelete="RESTRICT"), nullable=False
    )
    development: Mapped[DevelopmentLevel] = mapped_column(
        Enum(DevelopmentLevel, name="development_level"), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    assessment_date: Mapped[date | None] = mapped_column(nullable=True)

    student: Mapped[Student] = relationship("Student", back_populates="assessments")
    indicator: Mapped[DevelopmentIndicator] = relationship(
        "DevelopmentIndicator", back_populates="assessments"
    )
    academic_year: Mapped[AcademicYear] = relationship("AcademicYear")

    def __repr__(self) -> str:
        return (
            f"<DevelopmentAssessment(id={self.id}, student_id={self.student_id}, "
            f"indicator_id={self.indicator_id}, development='{self.development.value}')>"
        )
