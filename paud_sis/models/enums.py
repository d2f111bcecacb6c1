"""Enumerations shared by the ORM models and the Pydantic schemas."""

from __future__ import annotations

import enum


class DevelopmentLevel(str, enum.Enum):
    """Three-point development scale, best first."""

    BAIK = "BAIK"
    CUKUP = "CUKUP"
    PERLU_DILATIH = "PERLU_DILATIH"

    @property
    def rank(self) -> int:
        """Higher is better: BAIK=3, CUKUP=2, PERLU_DILATIH=1."""
        return _LEVEL_RANK[self]

    @property
    def label(self) -> str:
        return _LEVEL_LABEL[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, DevelopmentLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, DevelopmentLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, DevelopmentLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, DevelopmentLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_RANK = {
    DevelopmentLevel.BAIK: 3,
    DevelopmentLevel.CUKUP: 2,
    DevelopmentLevel.PERLU_DILATIH: 1,
}

_LEVEL_LABEL = {
    DevelopmentLevel.BAIK: "Baik",
    DevelopmentLevel.CUKUP: "Cukup",
    DevelopmentLevel.PERLU_DILATIH: "Perlu Dilatih",
}


class Semester(str, enum.Enum):
    SEMESTER_1 = "SEMESTER_1"
    SEMESTER_2 = "SEMESTER_2"


class AgeGroup(str, enum.Enum):
    """Class / indicator age bands (Kelompok Bermain, Kelompok A, Kelompok B)."""

    TODDLER = "TODDLER"
    GROUP_A = "GROUP_A"
    GROUP_B = "GROUP_B"


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class Religion(str, enum.Enum):
    ISLAM = "ISLAM"
    KATOLIK = "KATOLIK"
    PROTESTAN = "PROTESTAN"
    HINDU = "HINDU"
    BUDHA = "BUDHA"
    KONGHUCU = "KONGHUCU"
    LAINNYA = "LAINNYA"
