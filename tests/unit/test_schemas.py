"""Unit tests for request / response schemas (paud_sis/schemas/).

Covers parsing of the bulk ``assessmentData`` payload, academic-year label
validation and the FormState helpers.
"""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from paud_sis.exceptions import InvalidAcademicYearError
from paud_sis.models import DevelopmentLevel
from paud_sis.schemas.academic_year import validate_academic_year_label
from paud_sis.schemas.assessment import AssessmentItem, parse_assessment_items
from paud_sis.schemas.forms import FormState


# ---------------------------------------------------------------------------
# assessmentData parsing
# ---------------------------------------------------------------------------


def test_parse_items_reads_camel_case_fields():
    """Browser payloads use camelCase keys; unknown keys are ignored."""
    items = parse_assessment_items(
        '[{"indicatorId": "I1", "development": "CUKUP", "notes": "ok",'
        ' "assessmentDate": "2024-10-01", "assessmentId": "A1", "extra": 1}]'
    )

    (item,) = items
    assert item.indicator_id == "I1"
    assert item.development == DevelopmentLevel.CUKUP
    assert item.assessment_date == date(2024, 10, 1)
    assert item.assessment_id == "A1"
    assert item.is_rated


@pytest.mark.parametrize(
    "payload",
    [
        {"indicatorId": "", "development": "BAIK"},
        {"indicatorId": "I1", "development": ""},
        {"indicatorId": "I1"},
        {},
    ],
)
def test_blank_fields_make_an_item_unrated(payload):
    item = AssessmentItem.model_validate(payload)

    assert not item.is_rated


def test_blank_assessment_id_means_new_row():
    item = AssessmentItem.model_validate(
        {"indicatorId": "I1", "development": "BAIK", "assessmentId": "  "}
    )

    assert item.assessment_id is None


@pytest.mark.parametrize(
    "raw",
    ["", "null", "{}", '"text"', '[{"development": "GOOD"}]', '[{"assessmentDate": "soon"}]'],
)
def test_parse_items_rejects_malformed_payloads(raw):
    with pytest.raises(ValidationError):
        parse_assessment_items(raw)


def test_parse_items_errors_are_value_errors():
    """Callers catch ValueError; pydantic's ValidationError must satisfy that."""
    with pytest.raises(ValueError):
        parse_assessment_items("not json")


# ---------------------------------------------------------------------------
# Development levels
# ---------------------------------------------------------------------------


def test_development_levels_order_best_first():
    assert DevelopmentLevel.BAIK > DevelopmentLevel.CUKUP > DevelopmentLevel.PERLU_DILATIH
    assert max(DevelopmentLevel) == DevelopmentLevel.BAIK
    assert DevelopmentLevel.PERLU_DILATIH.label == "Perlu Dilatih"


# ---------------------------------------------------------------------------
# Academic-year labels
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("label", ["2024/2025", "1999/2000"])
def test_valid_academic_year_labels(label):
    assert validate_academic_year_label(label) == label


@pytest.mark.parametrize("label", ["2024-2025", "24/25", "2024/2025 ", "", "2024/20256"])
def test_invalid_academic_year_labels(label):
    with pytest.raises(InvalidAcademicYearError) as exc_info:
        validate_academic_year_label(label)

    assert exc_info.value.year == label


# ---------------------------------------------------------------------------
# FormState
# ---------------------------------------------------------------------------


def test_form_state_helpers():
    failed = FormState.failure("Siswa harus dipilih.")
    done = FormState.success("/academic-years?success=1")

    assert not failed.ok and failed.redirect_url is None
    assert done.ok and done.error is None
