"""SQLAlchemy ORM model for the students table."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import Enum, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paud_sis.models.base import Base, SoftDeleteMixin, TimestampMixin, id_column
from paud_sis.models.enums import Gender, Religion

if TYPE_CHECKING:
    from paud_sis.models.development_assessment import DevelopmentAssessment
    from paud_sis.models.school_class import SchoolClass


class Student(TimestampMixin, SoftDeleteMixin, Base):
    """A child enrolled at the centre.

    NIS is unique among active students only (partial unique index), so a
    soft-deleted student keeps its NIS and the number can be issued again.

    Attributes:
        id: String UUID primary key.
        nis: National student number.
        name: Full name.
        gender: MALE or FEMALE.
        religion: Religion recorded at admission.
        birth_place: Optional place of birth.
        birth_date: Optional date of birth.
        academic_year: Academic-year label at admission (e.g. '2024/2025').
        admitted_at: Optional admission date.
        class_id: Foreign key to classes table.
        school_class: Relationship to the enrolled class.
        assessments: Development assessments recorded for this student.
    """

    __tablename__ = "students"
    __table_args__ = (
        Index(
            "uq_students_nis_active",
            "nis",
            unique=True,
            postgresql_where=text("is_deleted = false"),
        ),
    )

    id: Mapped[str] = id_column()
    nis: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    gender: Mapped[Gender] = mapped_column(
        Enum(Gender, name="gender"), nullable=False, default=Gender.MALE
    )
    religion: Mapped[Religion] = mapped_column(
        Enum(Religion, name="religion"), nullable=False
    )
    birth_place: Mapped[str | None] = mapped_column(String(100), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(nullable=True)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    admitted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    class_id: Mapped[str] = mapped_column(
        ForeignKey("classes.id", ondelete="RESTRICT"), nullable=False
    )

    school_class: Mapped[SchoolClass] = relationship(
        "SchoolClass", back_populates="students"
    )
    assessments: Mapped[List[DevelopmentAssessment]] = relationship(
        "DevelopmentAssessment", back_populates="student"
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, nis='{self.nis}')>"
