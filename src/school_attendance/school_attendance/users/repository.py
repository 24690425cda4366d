from __future__ import annotations

from typing import Optional, Protocol

from .model import StudentContact, User


class UserRepository(Protocol):
    """Repository interface for users.

    Note: services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError


class StudentDirectory(Protocol):
    """Lookup of a student's identity and contact addresses."""

    def find_contact(self, student_id: str) -> Optional[StudentContact]:
        raise NotImplementedError
