"""Domain errors raised by the booking services.

Each error carries the HTTP status it maps to; ``campus_booking.main``
turns them into the standard response envelope.
"""

from fastapi import status


class BookingError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    headers: dict | None = None

    def __init__(self, message: str, errors: list | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(BookingError):
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(BookingError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BookingError):
    status_code = status.HTTP_409_CONFLICT
