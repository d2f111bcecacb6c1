"""SQLAlchemy ORM model for the classes table."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paud_sis.models.base import Base, SoftDeleteMixin, TimestampMixin, id_column
from paud_sis.models.enums import AgeGroup

if TYPE_CHECKING:
    from paud_sis.models.student import Student


class SchoolClass(TimestampMixin, SoftDeleteMixin, Base):
    """A class (rombongan belajar) grouping students of one age band.

    Attributes:
        id: String UUID primary key.
        name: Display name (e.g. 'Kelompok A - Melati').
        age_group: Age band taught in this class.
        students: Students enrolled in the class.
    """

    __tablename__ = "classes"

    id: Mapped[str] = id_column()
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    age_group: Mapped[AgeGroup] = mapped_column(
        Enum(AgeGroup, name="age_group"), nullable=False
    )

    students: Mapped[List[Student]] = relationship(
        "Student", back_populates="school_class"
    )

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id}, name='{self.name}')>"
