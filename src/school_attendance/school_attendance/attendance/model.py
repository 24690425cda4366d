from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Sequence

from ..core.enums import AttendanceStatus, WriteMode
from ..notifications.model import NotificationOutcome


@dataclass(frozen=True)
class AttendanceMark:
    """Domain entity: one student's attendance for one (class, subject, date)."""

    mark_id: int
    student_id: str
    class_label: str
    subject: str
    day: date
    status: AttendanceStatus
    marked_by: str
    late_arrival_time: Optional[datetime] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.mark_id,
            "student": self.student_id,
            "class": self.class_label,
            "subject": self.subject,
            "date": self.day.isoformat(),
            "status": self.status.value,
            "markedBy": self.marked_by,
            "lateArrivalTime": self.late_arrival_time.isoformat() if self.late_arrival_time else None,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class NewMark:
    """A mark about to be written; the store assigns the id."""

    student_id: str
    class_label: str
    subject: str
    day: date
    status: AttendanceStatus
    marked_by: str
    late_arrival_time: Optional[datetime] = None
    remarks: Optional[str] = None


@dataclass(frozen=True)
class BatchEntry:
    student_id: str
    status: Optional[AttendanceStatus]
    remarks: Optional[str] = None


@dataclass(frozen=True)
class BatchRequest:
    """One submission covering several students for a single session."""

    day: date
    class_label: str
    subject: str
    entries: Sequence[BatchEntry]
    update_mode: bool = False

    def marked_entries(self) -> List[BatchEntry]:
        """Entries that carry a status; the rest are not persisted."""
        return [e for e in self.entries if e.status is not None]


@dataclass(frozen=True)
class BatchReport:
    mode: WriteMode
    count: int
    marks: Sequence[AttendanceMark]
    notifications: NotificationOutcome
    message: str

    @property
    def created(self) -> bool:
        return self.mode == WriteMode.INSERT

    def to_response(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "count": self.count,
            "emailNotifications": self.notifications.to_dict(),
        }


@dataclass(frozen=True)
class AttendanceStats:
    total_classes: int = 0
    present_count: int = 0
    late_count: int = 0
    absent_count: int = 0
    percentage: float = 0.0

    @classmethod
    def from_marks(cls, marks: Sequence[AttendanceMark]) -> "AttendanceStats":
        total = len(marks)
        if total == 0:
            return cls()

        present = sum(1 for m in marks if m.status == AttendanceStatus.PRESENT)
        late = sum(1 for m in marks if m.status == AttendanceStatus.LATE)
        absent = total - present - late
        return cls(
            total_classes=total,
            present_count=present,
            late_count=late,
            absent_count=absent,
            percentage=round((present + late) / total * 100, 2),
        )

    def to_dict(self) -> dict:
        return {
            "percentage": self.percentage,
            "totalClasses": self.total_classes,
            "presentCount": self.present_count,
            "lateCount": self.late_count,
            "absentCount": self.absent_count,
        }
