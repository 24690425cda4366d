from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceMark, NewMark


class AttendanceRepository(Protocol):
    """Durable storage of attendance marks.

    Implementations enforce one mark per (student, subject, date).
    """

    def find_for_session(self, *, class_label: str, subject: str, day: date) -> Sequence[AttendanceMark]:
        raise NotImplementedError

    def upsert_mark(
        self,
        *,
        student_id: str,
        class_label: str,
        subject: str,
        day: date,
        status: AttendanceStatus,
        marked_by: str,
        late_arrival_time: Optional[datetime] = None,
        remarks: Optional[str] = None,
    ) -> AttendanceMark:
        """Create or overwrite the mark keyed by (student, class, subject, day)."""

        raise NotImplementedError

    def insert_marks(self, marks: Sequence[NewMark]) -> Sequence[AttendanceMark]:
        """Insert every mark independently.

        Raises DuplicateAttendanceError once all non-duplicate marks are stored
        if any mark hit the uniqueness key.
        """

        raise NotImplementedError

    def get_by_id(self, mark_id: int) -> Optional[AttendanceMark]:
        raise NotImplementedError

    def update_status(
        self,
        *,
        mark_id: int,
        status: AttendanceStatus,
        remarks: Optional[str],
        late_arrival_time: Optional[datetime],
    ) -> bool:
        raise NotImplementedError

    def list_for_student(
        self,
        *,
        student_id: str,
        start: date,
        end: date,
        subject: Optional[str] = None,
    ) -> Sequence[AttendanceMark]:
        raise NotImplementedError
