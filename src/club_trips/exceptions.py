"""Exception hierarchy for the club trips service.

Every error raised by the service layer derives from `ClubTripsError` and
carries the HTTP status the API layer should answer with:

| Exception | Status | Raised when |
|---|---|---|
| ValidationError | 400 | Missing/malformed input, bad date/time, invalid range |
| AuthorizationError | 403 | Officer secret missing or wrong |
| NotFoundError | 404 | Unknown trip or request id |
| ExternalServiceError | 500 | Sheets or Calendar API call failed |
| DataIntegrityError | 500 | A stored row holds a value that cannot be valid |
| SheetSchemaError | 500 | A table lacks a column an operation needs |

`ReconciliationWarning` is never surfaced to a client: the sync engine records
it per skipped row and logs it.
"""

from __future__ import annotations


class ClubTripsError(Exception):
    """Base exception for the club trips service."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClubTripsError):
    """Raised when request input fails validation."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidFormatError(ValidationError):
    """Raised when a date or time string does not match its strict format."""

    def __init__(self, field: str, value: str, expected: str):
        super().__init__(
            f"Invalid {field}: '{value}' (expected {expected})",
            field=field,
        )
        self.value = value


class InvalidRangeError(ValidationError):
    """Raised when a trip ends before (or, for timed trips, at) its start."""


class AuthorizationError(ClubTripsError):
    """Raised when the officer secret does not match."""

    status_code = 403


class NotFoundError(ClubTripsError):
    """Raised when a trip or request id does not exist."""

    status_code = 404


class ExternalServiceError(ClubTripsError):
    """Raised when the Sheets or Calendar API fails."""

    def __init__(self, message: str, service: str, status: int | None = None):
        super().__init__(message)
        self.service = service
        self.status = status


class DataIntegrityError(ClubTripsError):
    """Raised when a stored value violates a data invariant."""


class SheetSchemaError(ClubTripsError):
    """Raised when a sheet is missing a column an operation writes to."""


class ReconciliationWarning(ClubTripsError):
    """A single trip row could not be projected onto the calendar.

    Raised inside the sync engine and recorded on the `SyncResult`; the pass
    continues with the next row.
    """

    def __init__(self, message: str, trip_id: str | None = None, row_index: int | None = None):
        super().__init__(message)
        self.trip_id = trip_id
        self.row_index = row_index

    def __str__(self) -> str:
        where = self.trip_id or (f"row {self.row_index}" if self.row_index else "sync")
        return f"{where}: {self.message}"
