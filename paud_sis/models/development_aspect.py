"""SQLAlchemy ORM models for the development taxonomy: aspects and indicators."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paud_sis.models.base import Base, SoftDeleteMixin, TimestampMixin, id_column
from paud_sis.models.enums import AgeGroup

if TYPE_CHECKING:
    from paud_sis.models.development_assessment import DevelopmentAssessment


class DevelopmentAspect(TimestampMixin, SoftDeleteMixin, Base):
    """A named category of development (e.g. 'Nilai Agama dan Moral').

    Attributes:
        id: String UUID primary key.
        code: Short code, unique among active aspects.
        name: Display name.
        description: Optional long description.
        order: Display order on lists and report cards.
        indicators: Observable indicators belonging to this aspect.
    """

    __tablename__ = "development_aspects"
    __table_args__ = (
        Index(
            "uq_development_aspects_code_active",
            "code",
            unique=True,
            postgresql_where=text("is_deleted = false"),
        ),
    )

    id: Mapped[str] = id_column()
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    indicators: Mapped[List[DevelopmentIndicator]] = relationship(
        "DevelopmentIndicator",
        back_populates="aspect",
        order_by="DevelopmentIndicator.order",
    )

    def __repr__(self) -> str:
        return f"<DevelopmentAspect(id={self.id}, code='{self.code}')>"


class DevelopmentIndicator(TimestampMixin, SoftDeleteMixin, Base):
    """A specific observable behaviour under an aspect.

    Attributes:
        id: String UUID primary key.
        aspect_id: Foreign key to development_aspects.
        name: Full indicator text.
        short_name: Optional abbreviation shown on compact views.
        order: Display order within the aspect.
        age_group: Age band the indicator applies to; NULL means all ages.
        aspect: Relationship to the parent aspect.
        assessments: Assessments recorded against this indicator.
    """

    __tablename__ = "development_indicators"

    id: Mapped[str] = id_column()
    aspect_id: Mapped[str] = mapped_column(
        ForeignKey("development_aspects.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    short_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    age_group: Mapped[AgeGroup | None] = mapped_column(
        Enum(AgeGroup, name="age_group"), nullable=True
    )

    aspect: Mapped[DevelopmentAspect] = relationship(
        "DevelopmentAspect", back_populates="indicators"
    )
    assessments: Mapped[List[DevelopmentAssessment]] = relationship(
        "DevelopmentAssessment", back_populates="indicator"
    )

    def __repr__(self) -> str:
        return f"<DevelopmentIndicator(id={self.id}, order={self.order})>"
