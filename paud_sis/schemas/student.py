"""Pydantic v2 schemas for students."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict

from paud_sis.models.enums import Gender, Religion


class StudentRead(BaseModel):
    """Student profile as returned by the detail endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    nis: str
    name: str
    gender: Gender
    religion: Religion
    birth_place: str | None = None
    birth_date: date | None = None
    academic_year: str
    class_id: str
