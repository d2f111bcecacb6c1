"""Pydantic v2 schemas for academic years."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from paud_sis.exceptions import InvalidAcademicYearError

ACADEMIC_YEAR_PATTERN = re.compile(r"^\d{4}/\d{4}$")


def validate_academic_year_label(year: str) -> str:
    """Return ``year`` unchanged if it matches ``YYYY/YYYY``.

    Raises:
        InvalidAcademicYearError: If the label has any other shape.
    """
    if not ACADEMIC_YEAR_PATTERN.match(year):
        raise InvalidAcademicYearError(year)
    return year


class AcademicYearForm(BaseModel):
    """Raw fields of the academic-year create/update form."""

    id: str | None = None
    year: str | None = None


class AcademicYearRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    year: str
