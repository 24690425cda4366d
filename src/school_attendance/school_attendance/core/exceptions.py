from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class DuplicateAttendanceError(DomainError):
    """Raised when an insert hits the one-mark-per-student/subject/date key."""

    def __init__(self, student_ids: Sequence[str] = (), message: str | None = None):
        self.student_ids = list(student_ids)
        super().__init__(
            message
            or "Attendance already marked for some students. Use the update feature instead."
        )


class StorageError(DomainError):
    """Raised when the attendance store fails unexpectedly."""
