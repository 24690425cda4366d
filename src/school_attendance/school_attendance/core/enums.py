from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for access checks."""

    ADMIN = "admin"
    FACULTY = "faculty"
    STUDENT = "student"
    PARENT = "parent"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"

    @property
    def needs_notification(self) -> bool:
        return self in (AttendanceStatus.ABSENT, AttendanceStatus.LATE)


class WriteMode(str, Enum):
    """How a batch is persisted: blind insert or per-student upsert."""

    INSERT = "insert"
    UPDATE = "update"


class ActivityType(str, Enum):
    ATTENDANCE = "attendance"
    LOGIN = "login"
    LOGOUT = "logout"
