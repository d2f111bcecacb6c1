"""Unit tests for single-assessment create / update / delete (paud_sis/services/assessments.py).

Each operation returns a FormState: an error message for the form, or a
redirect to the assessment list carrying a toast message.
"""

from __future__ import annotations

from datetime import date
from urllib.parse import parse_qs, urlsplit

import pytest

from paud_sis.models import DevelopmentLevel, Semester
from paud_sis.schemas.assessment import AssessmentForm
from paud_sis.services.assessments import (
    MSG_CREATE_FAILED,
    MSG_CREATED,
    MSG_DATE_INVALID,
    MSG_DELETE_FAILED,
    MSG_DELETED,
    MSG_DEVELOPMENT_REQUIRED,
    MSG_DUPLICATE,
    MSG_INDICATOR_REQUIRED,
    MSG_NOT_FOUND,
    MSG_UPDATED,
    AssessmentService,
    list_redirect,
)
from paud_sis.services.cache import ASSESSMENT_WRITE_TAGS, CacheTag
from paud_sis.services.reconciliation import (
    MSG_ACADEMIC_YEAR_NOT_FOUND,
    MSG_INDICATOR_NOT_FOUND,
    MSG_SEMESTER_INVALID,
    MSG_STUDENT_NOT_FOUND,
    MSG_STUDENT_REQUIRED,
)
from tests.fixtures.sample_records import make_assessment, make_indicator


def _form(**overrides) -> AssessmentForm:
    fields = {
        "student_id": "S1",
        "indicator_id": "I1",
        "development": "BAIK",
        "semester": "SEMESTER_1",
        "academic_year_id": "AY1",
        "notes": "Mampu menyebut nama teman",
        "assessment_date": "2024-09-02",
    }
    fields.update(overrides)
    return AssessmentForm(**fields)


def _message(url: str) -> str:
    return parse_qs(urlsplit(url).query)["message"][0]


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


async def test_create_stores_row_and_redirects_to_list(fake_store):
    state = await AssessmentService(fake_store).create(_form())

    assert state.ok, f"Unexpected error {state.error!r}"
    assert urlsplit(state.redirect_url).path == "/development-assessments"
    assert _message(state.redirect_url) == MSG_CREATED
    (row,) = fake_store.active_assessments()
    assert row.development == DevelopmentLevel.BAIK
    assert row.semester == Semester.SEMESTER_1
    assert row.assessment_date == date(2024, 9, 2)
    assert state.invalidate_tags == ASSESSMENT_WRITE_TAGS


async def test_create_rejects_duplicate_natural_key(fake_store):
    fake_store.add(make_assessment("A1", "I1"))

    state = await AssessmentService(fake_store).create(_form(development="CUKUP"))

    assert state.error == MSG_DUPLICATE
    assert fake_store.write_calls == []
    assert state.invalidate_tags == ()


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"student_id": None}, MSG_STUDENT_REQUIRED),
        ({"indicator_id": ""}, MSG_INDICATOR_REQUIRED),
        ({"development": None}, MSG_DEVELOPMENT_REQUIRED),
        ({"development": "EXCELLENT"}, MSG_DEVELOPMENT_REQUIRED),
        ({"semester": "3"}, MSG_SEMESTER_INVALID),
        ({"assessment_date": "02/09/2024"}, MSG_DATE_INVALID),
    ],
)
async def test_create_field_errors_skip_storage(fake_store, overrides, expected):
    state = await AssessmentService(fake_store).create(_form(**overrides))

    assert state.error == expected
    assert state.redirect_url is None
    assert fake_store.calls == []


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"student_id": "S-x"}, MSG_STUDENT_NOT_FOUND),
        ({"indicator_id": "I-x"}, MSG_INDICATOR_NOT_FOUND),
        ({"academic_year_id": "AY-x"}, MSG_ACADEMIC_YEAR_NOT_FOUND),
    ],
)
async def test_create_checks_references_are_active(fake_store, overrides, expected):
    state = await AssessmentService(fake_store).create(_form(**overrides))

    assert state.error == expected
    assert fake_store.write_calls == []


async def test_create_rejects_deleted_indicator(fake_store):
    fake_store.add(make_indicator("I-old", is_deleted=True))

    state = await AssessmentService(fake_store).create(_form(indicator_id="I-old"))

    assert state.error == MSG_INDICATOR_NOT_FOUND


async def test_create_storage_failure_returns_generic_message(fake_store):
    fake_store.fail_on.add("create_assessment")

    state = await AssessmentService(fake_store).create(_form())

    assert state.error == MSG_CREATE_FAILED


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


async def test_update_rewrites_level_and_notes(fake_store):
    fake_store.add(make_assessment("A1", "I1", DevelopmentLevel.BAIK))

    state = await AssessmentService(fake_store).update(
        _form(id="A1", development="PERLU_DILATIH", notes="")
    )

    assert state.ok
    assert _message(state.redirect_url) == MSG_UPDATED
    row = fake_store.assessments["A1"]
    assert row.development == DevelopmentLevel.PERLU_DILATIH
    assert row.notes is None


async def test_update_unknown_id_is_not_found(fake_store):
    state = await AssessmentService(fake_store).update(_form(id="A-x"))

    assert state.error == MSG_NOT_FOUND


async def test_update_onto_taken_key_is_duplicate(fake_store):
    fake_store.add(make_assessment("A1", "I1"), make_assessment("A2", "I2"))

    state = await AssessmentService(fake_store).update(_form(id="A2", indicator_id="I1"))

    assert state.error == MSG_DUPLICATE
    assert fake_store.assessments["A2"].indicator_id == "I2"


async def test_update_keeping_own_key_is_not_a_duplicate(fake_store):
    fake_store.add(make_assessment("A1", "I1"))

    state = await AssessmentService(fake_store).update(_form(id="A1", development="CUKUP"))

    assert state.ok
    assert not any(name == "find_assessment" for name, _ in fake_store.calls)


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


async def test_delete_soft_deletes_and_redirects_with_success(fake_store):
    fake_store.add(make_assessment("A1", "I1"))

    state = await AssessmentService(fake_store).delete("A1")

    assert state.ok
    assert _message(state.redirect_url) == MSG_DELETED
    assert fake_store.assessments["A1"].is_deleted is True
    assert fake_store.assessments["A1"].deleted_at is not None
    assert CacheTag.STUDENT_DEVELOPMENT_ASSESSMENTS in state.invalidate_tags


async def test_delete_twice_reports_not_found(fake_store):
    fake_store.add(make_assessment("A1", "I1"))
    service = AssessmentService(fake_store)
    await service.delete("A1")

    state = await service.delete("A1")

    assert state.error == MSG_NOT_FOUND
    assert state.redirect_url == list_redirect(MSG_NOT_FOUND, error=True)
    assert "error=1" in state.redirect_url


async def test_delete_storage_failure_redirects_with_error(fake_store):
    fake_store.fail_on.add("soft_delete_assessment")

    state = await AssessmentService(fake_store).delete("A1")

    assert state.error == MSG_DELETE_FAILED
    assert _message(state.redirect_url) == MSG_DELETE_FAILED
