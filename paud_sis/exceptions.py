"""Custom exception classes for the PAUD school records API.

Read endpoints raise these typed exceptions so that FastAPI exception handlers
can convert them to structured HTTP responses. Form submissions never raise
them; they return ``FormState`` values instead.
"""


class RecordNotFoundError(Exception):
    """Raised when a requested record does not exist or has been soft-deleted.

    Args:
        entity: Human-readable entity name (e.g. ``"student"``).
        record_id: The identifier that was looked up.
    """

    def __init__(self, entity: str, record_id: str) -> None:
        super().__init__(f"{entity} with id={record_id} not found")
        self.entity: str = entity
        self.record_id: str = record_id


class InvalidAcademicYearError(Exception):
    """Raised when an academic-year label does not match ``YYYY/YYYY``.

    Args:
        year: The rejected label.
    """

    def __init__(self, year: str) -> None:
        super().__init__(f"Invalid academic year {year!r}; expected YYYY/YYYY")
        self.year: str = year


class DatabaseConnectionError(Exception):
    """Raised when a connection to PostgreSQL cannot be established.

    Args:
        message: Detail from the underlying driver exception.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
