"""Unit tests for academic-year records (paud_sis/services/academic_years.py).

The service talks to the session directly, so these tests drive it with the
``mock_db_session`` fixture and shape ``execute`` results per scenario.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlsplit

import pytest

from paud_sis.exceptions import InvalidAcademicYearError, RecordNotFoundError
from paud_sis.models import AcademicYear
from paud_sis.schemas.academic_year import AcademicYearForm
from paud_sis.services.academic_years import (
    MSG_CREATE_FAILED,
    MSG_CREATED,
    MSG_DELETED,
    MSG_UPDATED,
    MSG_YEAR_EXISTS,
    MSG_YEAR_INVALID,
    MSG_YEAR_NOT_FOUND,
    MSG_YEAR_REQUIRED,
    create_academic_year,
    delete_academic_year,
    get_academic_year,
    list_academic_years,
    update_academic_year,
)
from paud_sis.services.cache import CacheTag
from tests.fixtures.sample_records import make_academic_year


def _scalar_result(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _rowcount_result(count: int) -> MagicMock:
    result = MagicMock()
    result.rowcount = count
    return result


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


async def test_create_adds_row_and_invalidates_year_views(mock_db_session):
    mock_db_session.execute = AsyncMock(return_value=_scalar_result(None))

    state = await create_academic_year(
        mock_db_session, AcademicYearForm(year="2025/2026")
    )

    assert state.ok, f"Unexpected error {state.error!r}"
    assert parse_qs(urlsplit(state.redirect_url).query)["message"] == [MSG_CREATED]
    added = mock_db_session.add.call_args.args[0]
    assert isinstance(added, AcademicYear)
    assert added.year == "2025/2026"
    mock_db_session.flush.assert_awaited_once()
    assert CacheTag.ACADEMIC_YEARS in state.invalidate_tags


@pytest.mark.parametrize(
    "year, expected",
    [(None, MSG_YEAR_REQUIRED), ("", MSG_YEAR_REQUIRED), ("2025-2026", MSG_YEAR_INVALID)],
)
async def test_create_rejects_bad_labels_without_querying(mock_db_session, year, expected):
    state = await create_academic_year(mock_db_session, AcademicYearForm(year=year))

    assert state.error == expected
    mock_db_session.execute.assert_not_awaited()


async def test_create_rejects_label_already_active(mock_db_session):
    mock_db_session.execute = AsyncMock(return_value=_scalar_result("AY1"))

    state = await create_academic_year(
        mock_db_session, AcademicYearForm(year="2024/2025")
    )

    assert state.error == MSG_YEAR_EXISTS
    mock_db_session.add.assert_not_called()


async def test_create_database_error_is_reported_as_message(mock_db_session):
    mock_db_session.execute = AsyncMock(side_effect=RuntimeError("connection reset"))

    state = await create_academic_year(
        mock_db_session, AcademicYearForm(year="2024/2025")
    )

    assert state.error == MSG_CREATE_FAILED


# ---------------------------------------------------------------------------
# update / delete
# ---------------------------------------------------------------------------


async def test_update_renames_active_year(mock_db_session):
    mock_db_session.execute = AsyncMock(
        side_effect=[
            _scalar_result(make_academic_year()),
            _scalar_result(None),
            _rowcount_result(1),
        ]
    )

    state = await update_academic_year(
        mock_db_session, AcademicYearForm(id="AY1", year="2024/2025")
    )

    assert state.ok
    assert parse_qs(urlsplit(state.redirect_url).query)["message"] == [MSG_UPDATED]
    assert mock_db_session.execute.await_count == 3
    assert CacheTag.STUDENT in state.invalidate_tags, "Report cards embed the year label"


async def test_update_unknown_year(mock_db_session):
    mock_db_session.execute = AsyncMock(return_value=_scalar_result(None))

    state = await update_academic_year(
        mock_db_session, AcademicYearForm(id="AY-x", year="2024/2025")
    )

    assert state.error == MSG_YEAR_NOT_FOUND


async def test_delete_flags_row_and_redirects(mock_db_session):
    mock_db_session.execute = AsyncMock(return_value=_rowcount_result(1))

    state = await delete_academic_year(mock_db_session, "AY1")

    assert state.ok
    assert parse_qs(urlsplit(state.redirect_url).query)["message"] == [MSG_DELETED]
    assert set(state.invalidate_tags) >= {CacheTag.ACADEMIC_YEAR, CacheTag.STUDENT}


async def test_delete_missing_year_redirects_with_error(mock_db_session):
    mock_db_session.execute = AsyncMock(return_value=_rowcount_result(0))

    state = await delete_academic_year(mock_db_session, "AY-x")

    assert state.error == MSG_YEAR_NOT_FOUND
    assert "error=1" in state.redirect_url


# ---------------------------------------------------------------------------
# reads
# ---------------------------------------------------------------------------


async def test_get_missing_year_raises_not_found(mock_db_session, tag_cache):
    mock_db_session.execute = AsyncMock(return_value=_scalar_result(None))

    with pytest.raises(RecordNotFoundError) as exc_info:
        await get_academic_year(mock_db_session, tag_cache, "AY-x")

    assert exc_info.value.entity == "academic_year"


async def test_list_is_cached_until_a_write(mock_db_session, tag_cache):
    result = MagicMock()
    result.scalars.return_value.all.return_value = [make_academic_year()]
    mock_db_session.execute = AsyncMock(return_value=result)

    first = await list_academic_years(mock_db_session, tag_cache)
    second = await list_academic_years(mock_db_session, tag_cache)

    assert [row.year for row in first] == ["2024/2025"]
    assert first == second
    assert mock_db_session.execute.await_count == 1


async def test_list_rejects_malformed_year_filter(mock_db_session, tag_cache):
    with pytest.raises(InvalidAcademicYearError):
        await list_academic_years(mock_db_session, tag_cache, year="2024")

    mock_db_session.execute.assert_not_awaited()
