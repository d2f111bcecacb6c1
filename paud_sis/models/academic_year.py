"""SQLAlchemy ORM model for the academic_years table."""

from __future__ import annotations

from sqlalchemy import Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from paud_sis.models.base import Base, SoftDeleteMixin, TimestampMixin, id_column


class AcademicYear(TimestampMixin, SoftDeleteMixin, Base):
    """A school year labelled ``YYYY/YYYY``.

    Attributes:
        id: String UUID primary key.
        year: Label such as '2024/2025', unique among active rows.
    """

    __tablename__ = "academic_years"
    __table_args__ = (
        Index(
            "uq_academic_years_year_active",
            "year",
            unique=True,
            postgresql_where=text("is_deleted = false"),
        ),
    )

    id: Mapped[str] = id_column()
    year: Mapped[str] = mapped_column(String(9), nullable=False)

    def __repr__(self) -> str:
        return f"<AcademicYear(id={self.id}, year='{self.year}')>"
