from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class NotificationPayload:
    """Everything an attendance alert needs, for both recipients."""

    student_id: str
    student_name: str
    student_email: Optional[str]
    parent_name: Optional[str]
    parent_email: Optional[str]
    status: AttendanceStatus
    day: date
    class_label: str
    subject: str
    remarks: Optional[str] = None


@dataclass(frozen=True)
class ChannelResult:
    """Delivery result for one recipient of one notification."""

    sent: bool
    error: Optional[str] = None
    skipped: bool = False

    @classmethod
    def ok(cls) -> "ChannelResult":
        return cls(sent=True)

    @classmethod
    def failed(cls, error: str) -> "ChannelResult":
        return cls(sent=False, error=error)

    @classmethod
    def no_address(cls) -> "ChannelResult":
        return cls(sent=False, skipped=True)


@dataclass(frozen=True)
class NotificationResult:
    parent: ChannelResult
    student: ChannelResult

    @classmethod
    def all_failed(cls, payload: NotificationPayload, error: str) -> "NotificationResult":
        """Fail every channel the payload has an address for."""
        return cls(
            parent=ChannelResult.failed(error) if payload.parent_email else ChannelResult.no_address(),
            student=ChannelResult.failed(error) if payload.student_email else ChannelResult.no_address(),
        )


@dataclass(frozen=True)
class NotificationOutcome:
    """Per-batch tally of notification attempts, split by channel."""

    parent_sent: int = 0
    parent_failed: int = 0
    student_sent: int = 0
    student_failed: int = 0

    @property
    def sent(self) -> int:
        return self.parent_sent + self.student_sent

    @property
    def failed(self) -> int:
        return self.parent_failed + self.student_failed

    def add(self, result: NotificationResult) -> "NotificationOutcome":
        return NotificationOutcome(
            parent_sent=self.parent_sent + int(result.parent.sent),
            parent_failed=self.parent_failed + int(_is_failure(result.parent)),
            student_sent=self.student_sent + int(result.student.sent),
            student_failed=self.student_failed + int(_is_failure(result.student)),
        )

    def to_dict(self) -> dict:
        return {
            "sent": self.sent,
            "failed": self.failed,
            "parentDetails": {"sent": self.parent_sent, "failed": self.parent_failed},
            "studentDetails": {"sent": self.student_sent, "failed": self.student_failed},
        }


def _is_failure(channel: ChannelResult) -> bool:
    return not channel.sent and not channel.skipped
