"""SQLAlchemy ORM models for the PAUD school records backend."""

from paud_sis.models.academic_year import AcademicYear
from paud_sis.models.base import Base
from paud_sis.models.development_aspect import DevelopmentAspect, DevelopmentIndicator
from paud_sis.models.development_assessment import DevelopmentAssessment
from paud_sis.models.enums import AgeGroup, DevelopmentLevel, Gender, Religion, Semester
from paud_sis.models.school_class import SchoolClass
from paud_sis.models.student import Student

__all__ = [
    "Base",
    "SchoolClass",
    "Student",
    "AcademicYear",
    "DevelopmentAspect",
    "DevelopmentIndicator",
    "DevelopmentAssessment",
    "AgeGroup",
    "DevelopmentLevel",
    "Gender",
    "Religion",
    "Semester",
]
