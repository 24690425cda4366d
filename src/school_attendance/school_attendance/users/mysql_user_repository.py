from __future__ import annotations

from typing import Optional, Tuple

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ParentContact, StudentContact, User
from .repository import StudentDirectory, UserRepository

_USER_COLUMNS = """
    user_id, username, full_name, email, password_hash, role,
    subjects, assigned_classes, parent_id, is_active
"""


def _split_list(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in str(value).split(",") if part.strip())


def _to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        username=row["username"],
        full_name=row["full_name"],
        email=row.get("email"),
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        subjects=_split_list(row.get("subjects")),
        assigned_classes=_split_list(row.get("assigned_classes")),
        parent_id=row.get("parent_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository, StudentDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (str(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def find_contact(self, student_id: str) -> Optional[StudentContact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.user_id, s.full_name, s.email,
                       p.full_name AS parent_name, p.email AS parent_email,
                       p.user_id AS parent_id
                FROM users s
                LEFT JOIN users p ON p.user_id = s.parent_id
                WHERE s.user_id=%s AND s.role='student'
                """,
                (str(student_id),),
            )
            row = fetchone(cur)
            if not row:
                return None

            parent = None
            if row.get("parent_id"):
                parent = ParentContact(name=row.get("parent_name"), email=row.get("parent_email"))

            return StudentContact(
                student_id=str(row["user_id"]),
                name=row["full_name"],
                email=row.get("email"),
                parent=parent,
            )
