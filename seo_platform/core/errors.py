"""Application error taxonomy and store-error translation.

Every error raised towards the API boundary is an AppError carrying an
ErrorKind. The kind alone decides the HTTP status, so handlers never pick
status codes themselves.
"""

import re
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Discriminant for AppError; the value doubles as the envelope code."""

    VALIDATION = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE_ERROR"
    DATABASE = "DATABASE_ERROR"
    EXTERNAL_API = "EXTERNAL_API_ERROR"
    INTERNAL = "INTERNAL_ERROR"


_HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE: 409,
    ErrorKind.DATABASE: 500,
    ErrorKind.INTERNAL: 500,
    ErrorKind.EXTERNAL_API: 502,
}


def to_http_status(kind: ErrorKind) -> int:
    """Map an error kind to its HTTP status code."""
    return _HTTP_STATUS[kind]


class AppError(Exception):
    """Base application error with a kind, message and optional details."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def status_code(self) -> int:
        return to_http_status(self.kind)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(AppError):
    """Malformed, missing or out-of-range input."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorKind.VALIDATION, message, details)


class UnauthorizedError(AppError):
    """Missing or incorrect API key."""

    def __init__(self) -> None:
        super().__init__(ErrorKind.UNAUTHORIZED, "Invalid or missing API key")


class NotFoundError(AppError):
    def __init__(self, resource: str) -> None:
        super().__init__(ErrorKind.NOT_FOUND, f"{resource} not found")


class DuplicateError(AppError):
    """Unique-constraint violation."""

    def __init__(self, resource: str) -> None:
        super().__init__(ErrorKind.DUPLICATE, f"{resource} already exists")


class ExternalApiError(AppError):
    """Provider call failed or returned a non-success status."""

    def __init__(self, service: str, original_error: str) -> None:
        super().__init__(
            ErrorKind.EXTERNAL_API, f"{service} API error: {original_error}"
        )


class DatabaseError(AppError):
    """Any store failure that is not a known constraint violation."""

    def __init__(self, operation: str, original_error: Exception | str) -> None:
        super().__init__(
            ErrorKind.DATABASE,
            f"Database {operation} failed",
            {"original_error": str(original_error)},
        )


# ---------------------------------------------------------------------------
# Store error translation
# ---------------------------------------------------------------------------

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"

# SQLite extended result names mapped onto the PostgreSQL SQLSTATE classes
_SQLITE_CODES: dict[str, str] = {
    "SQLITE_CONSTRAINT_UNIQUE": UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_PRIMARYKEY": UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_FOREIGNKEY": FOREIGN_KEY_VIOLATION,
    "SQLITE_CONSTRAINT_NOTNULL": NOT_NULL_VIOLATION,
}

# Message fragments for interpreters whose sqlite3 lacks sqlite_errorname
_SQLITE_MESSAGES: dict[str, str] = {
    "UNIQUE constraint failed": UNIQUE_VIOLATION,
    "FOREIGN KEY constraint failed": FOREIGN_KEY_VIOLATION,
    "NOT NULL constraint failed": NOT_NULL_VIOLATION,
}

_SQLITE_NOT_NULL_COLUMN = re.compile(r"NOT NULL constraint failed: (?:\w+\.)?(\w+)")


def _driver_errors(error: BaseException) -> list[BaseException]:
    """Return the error followed by its wrapped driver errors (orig, __cause__)."""
    chain: list[BaseException] = []
    current: BaseException | None = error
    while current is not None and current not in chain:
        chain.append(current)
        current = getattr(current, "orig", None) or current.__cause__
    return chain


def extract_error_code(error: BaseException) -> str | None:
    """Find a SQLSTATE-style code on a store error or anything it wraps."""
    for candidate in _driver_errors(error):
        code = getattr(candidate, "pgcode", None) or getattr(candidate, "sqlstate", None)
        if code:
            return str(code)
        sqlite_name = getattr(candidate, "sqlite_errorname", None)
        if sqlite_name in _SQLITE_CODES:
            return _SQLITE_CODES[sqlite_name]
    message = str(error)
    for prefix, code in _SQLITE_MESSAGES.items():
        if prefix in message:
            return code
    return None


def _error_attribute(error: BaseException, name: str) -> str | None:
    for candidate in _driver_errors(error):
        value = getattr(candidate, name, None)
        if value:
            return str(value)
    return None


def _not_null_column(error: BaseException) -> str | None:
    column = _error_attribute(error, "column_name")
    if column:
        return column
    match = _SQLITE_NOT_NULL_COLUMN.search(str(error))
    return match.group(1) if match else None


def _duplicate(error: BaseException, resource: str) -> AppError:
    return DuplicateError(resource)


def _foreign_key(error: BaseException, resource: str) -> AppError:
    return ValidationError(
        "Referenced record does not exist",
        {"constraint": _error_attribute(error, "constraint_name")},
    )


def _not_null(error: BaseException, resource: str) -> AppError:
    return ValidationError(f"Required field is null: {_not_null_column(error)}")


_TRANSLATIONS = {
    UNIQUE_VIOLATION: _duplicate,
    FOREIGN_KEY_VIOLATION: _foreign_key,
    NOT_NULL_VIOLATION: _not_null,
}


def map_database_error(
    error: BaseException, operation: str, resource: str = "Record"
) -> AppError:
    """Translate a store error into the application taxonomy.

    Known constraint violations become Duplicate/Validation errors; anything
    else is wrapped in a DatabaseError naming the failed operation.
    """
    translate = _TRANSLATIONS.get(extract_error_code(error) or "")
    if translate is None:
        return DatabaseError(operation, error)
    return translate(error, resource)
