"""Unit tests for custom exception classes (paud_sis/exceptions.py).

Tests verify that each exception class:
1. Stores its constructor arguments as instance attributes.
2. Inherits from the standard Exception hierarchy.
3. Has a useful string representation that includes the message.

No database or external services are used.
"""

from __future__ import annotations

import pytest

from paud_sis.exceptions import (
    DatabaseConnectionError,
    InvalidAcademicYearError,
    RecordNotFoundError,
)


# ---------------------------------------------------------------------------
# RecordNotFoundError
# ---------------------------------------------------------------------------


def test_record_not_found_error_stores_entity_and_id():
    """RecordNotFoundError keeps the entity name and id for the 404 body.

    The exception handler builds ``"<entity>_not_found"`` from exc.entity and
    echoes exc.record_id back to the client.
    """
    exc = RecordNotFoundError("student", "S1")

    assert isinstance(exc, Exception), "RecordNotFoundError must inherit from Exception"
    assert exc.entity == "student"
    assert exc.record_id == "S1"
    assert str(exc) == "student with id=S1 not found", (
        f"Unexpected message: {str(exc)!r}"
    )


def test_record_not_found_error_can_be_raised_and_caught():
    with pytest.raises(RecordNotFoundError) as exc_info:
        raise RecordNotFoundError("academic_year", "AY9")

    assert exc_info.value.record_id == "AY9"


# ---------------------------------------------------------------------------
# InvalidAcademicYearError
# ---------------------------------------------------------------------------


def test_invalid_academic_year_error_stores_year():
    """The rejected label is kept so the 422 body can echo it."""
    exc = InvalidAcademicYearError("2024-2025")

    assert exc.year == "2024-2025"
    assert "2024-2025" in str(exc), f"str(exc) must mention the label, got {str(exc)!r}"
    assert "YYYY/YYYY" in str(exc)


# ---------------------------------------------------------------------------
# DatabaseConnectionError
# ---------------------------------------------------------------------------


def test_database_connection_error_message():
    """DatabaseConnectionError carries the driver message verbatim."""
    exc = DatabaseConnectionError("Connection refused on port 5432")

    assert isinstance(exc, Exception)
    assert str(exc) == "Connection refused on port 5432", (
        f"str(exc) must equal the message, got {str(exc)!r}"
    )


def test_domain_exceptions_are_distinct():
    """Handlers map each type to its own status code, so none may subclass another."""
    classes = [RecordNotFoundError, InvalidAcademicYearError, DatabaseConnectionError]

    for cls in classes:
        for other in classes:
            if cls is not other:
                assert not issubclass(cls, other), f"{cls.__name__} subclasses {other.__name__}"
