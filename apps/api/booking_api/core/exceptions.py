"""Typed failures raised by the scheduling core.

Each kind maps to a stable HTTP status category in ``main.py``:

- ValidationError    -> 400 (bad input, detected before any write)
- AuthorizationError -> 403 (caller role insufficient)
- NotFoundError      -> 404 (absent or outside the caller's tenant)
- ConflictError      -> 409 (double booking, time off, availability, duplicate links)
- InternalError      -> 500 (data integrity inconsistency)
"""


class BookingError(Exception):
    """Base exception for scheduling core errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BookingError):
    """Malformed or missing input."""

    status_code = 400


class AuthorizationError(BookingError):
    """Caller role is not allowed to perform the mutation."""

    status_code = 403


class NotFoundError(BookingError):
    """Referenced entity is absent or belongs to another tenant."""

    status_code = 404


class ConflictError(BookingError):
    """Requested state collides with existing bookings or staff rules."""

    status_code = 409


class InternalError(BookingError):
    """Stored data is inconsistent (e.g. appointment without its service)."""

    status_code = 500
