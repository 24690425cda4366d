from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account (admin, faculty, student or parent).

    Note: plain data object, no database access here.
    """

    user_id: str
    username: str
    full_name: str
    email: Optional[str]
    password_hash: str
    role: Role
    subjects: Tuple[str, ...] = field(default_factory=tuple)
    assigned_classes: Tuple[str, ...] = field(default_factory=tuple)
    parent_id: Optional[str] = None
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class ParentContact:
    name: Optional[str]
    email: Optional[str]


@dataclass(frozen=True)
class StudentContact:
    """What the notification step needs to know about a student."""

    student_id: str
    name: str
    email: Optional[str]
    parent: Optional[ParentContact] = None
