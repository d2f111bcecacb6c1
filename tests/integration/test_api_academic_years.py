"""Integration tests for the academic-year endpoints and the service root.

Endpoints tested
----------------
GET  /academic-years              — list, optional ``year`` filter
POST /academic-years              — create form
GET  /academic-years/{id}         — detail
POST /academic-years/{id}/delete  — soft delete
GET  /, GET /health               — service info and health
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from paud_sis.services.academic_years import MSG_YEAR_INVALID
from tests.fixtures.sample_records import make_academic_year


def test_list_academic_years(test_client, mock_db_session):
    result = MagicMock()
    result.scalars.return_value.all.return_value = [make_academic_year()]
    mock_db_session.execute = AsyncMock(return_value=result)

    response = test_client.get("/academic-years")

    assert response.status_code == 200
    assert response.json() == [{"id": "AY1", "year": "2024/2025"}]


def test_list_with_malformed_year_filter_is_422(test_client):
    response = test_client.get("/academic-years", params={"year": "2024"})

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "invalid_academic_year"
    assert body["year"] == "2024"


def test_create_with_bad_label_returns_form_error(test_client, mock_db_session):
    response = test_client.post(
        "/academic-years", data={"year": "2024-2025"}, follow_redirects=False
    )

    assert response.status_code == 400
    assert response.json() == {"error": MSG_YEAR_INVALID}


def test_create_redirects_to_list(test_client, mock_db_session):
    free = MagicMock()
    free.scalar_one_or_none.return_value = None
    mock_db_session.execute = AsyncMock(return_value=free)

    response = test_client.post(
        "/academic-years", data={"year": "2025/2026"}, follow_redirects=False
    )

    assert response.status_code == 303
    assert response.headers["location"].startswith("/academic-years?success=1")


def test_get_missing_academic_year(test_client, mock_db_session):
    missing = MagicMock()
    missing.scalar_one_or_none.return_value = None
    mock_db_session.execute = AsyncMock(return_value=missing)

    response = test_client.get("/academic-years/AY-x")

    assert response.status_code == 404
    assert response.json()["error"] == "academic_year_not_found"


def test_delete_academic_year(test_client, mock_db_session):
    result = MagicMock()
    result.rowcount = 1
    mock_db_session.execute = AsyncMock(return_value=result)

    response = test_client.post("/academic-years/AY1/delete", follow_redirects=False)

    assert response.status_code == 303


# ---------------------------------------------------------------------------
# Root and health
# ---------------------------------------------------------------------------


def test_root_lists_service_links(test_client):
    response = test_client.get("/")

    assert response.status_code == 200
    assert response.json()["health"] == "/health"
    assert "X-Request-ID" in response.headers


def test_health_reports_database_status(test_client):
    response = test_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == {"status": "ok"}
