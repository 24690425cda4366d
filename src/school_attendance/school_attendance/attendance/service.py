from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from ..activity.tracker import ActivityTracker
from ..common.datetime_utils import now_local
from ..common.validators import parse_status, require_non_empty
from ..core.enums import ActivityType, WriteMode
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, StorageError, ValidationError
from ..notifications.fanout import dispatch_all, tally
from ..notifications.model import NotificationOutcome, NotificationPayload
from ..notifications.notifier import Notifier
from ..users.model import User
from ..users.repository import StudentDirectory, UserRepository
from .factory import WriteStrategyFactory
from .model import AttendanceMark, AttendanceStats, BatchEntry, BatchReport, BatchRequest
from .policy import AttendanceAccessPolicy
from .repository import AttendanceRepository
from .strategies.base import late_arrival_for

logger = logging.getLogger(__name__)


def summarize(mode: WriteMode, outcome: NotificationOutcome) -> str:
    """Human-readable batch summary: records first, then notification counts."""
    if mode == WriteMode.INSERT:
        message = "Attendance marked successfully"
    else:
        message = "Attendance updated successfully"

    if outcome.sent > 0:
        breakdown = f"{outcome.parent_sent} to parents"
        if outcome.student_sent > 0:
            breakdown += f", {outcome.student_sent} to students"
        message += f". {outcome.sent} email notification(s) sent ({breakdown})"
    if outcome.failed > 0:
        message += f". {outcome.failed} notification(s) failed"
    return message


class AttendanceRecorder:
    """Use case: record a batch of attendance marks and alert families.

    Persistence decides the outcome of the call. Notifications are attempted
    afterwards and only ever show up as counts in the report.
    """

    def __init__(
        self,
        store: AttendanceRepository,
        directory: StudentDirectory,
        notifier: Notifier,
        activity: ActivityTracker,
        *,
        users: Optional[UserRepository] = None,
        policy: Optional[AttendanceAccessPolicy] = None,
        strategy_factory: Optional[WriteStrategyFactory] = None,
    ):
        self._store = store
        self._directory = directory
        self._notifier = notifier
        self._activity = activity
        self._users = users
        self._policy = policy or AttendanceAccessPolicy()
        self._factory = strategy_factory or WriteStrategyFactory()

    def record_batch(self, request: BatchRequest, actor: User, *, now: Optional[datetime] = None) -> BatchReport:
        now = now or now_local()
        class_label = require_non_empty(request.class_label, "Class")
        subject = require_non_empty(request.subject, "Subject")
        request = replace(request, class_label=class_label, subject=subject)

        if not self._policy.can_manage(actor, class_label=class_label, subject=subject):
            raise AuthorizationError("You are not authorized to mark attendance for this class/subject")

        entries = request.marked_entries()
        if not entries:
            raise ValidationError("No valid attendance records provided")
        for e in entries:
            if not str(e.student_id or "").strip():
                raise ValidationError("Student ID is required")

        existing = self._call_store(
            lambda: self._store.find_for_session(class_label=class_label, subject=subject, day=request.day)
        )
        strategy = self._factory.for_batch(existing_count=len(existing), update_mode=request.update_mode)
        if strategy.mode == WriteMode.UPDATE:
            logger.info(
                "%s for %s, %s on %s. Updating...",
                "Update requested" if request.update_mode else f"Found {len(existing)} existing records",
                class_label,
                subject,
                request.day,
            )

        marks = self._call_store(
            lambda: strategy.write(self._store, request, entries, marked_by=actor.user_id, now=now)
        )

        outcome = self._notify(request, entries)

        verb = "Marked" if strategy.mode == WriteMode.INSERT else "Updated"
        self._activity.track(
            user_id=actor.user_id,
            activity_type=ActivityType.ATTENDANCE,
            message=f"{verb} attendance for {subject} in {class_label}",
            metadata={
                "className": class_label,
                "subject": subject,
                "date": request.day.isoformat(),
                "count": len(marks),
            },
        )

        report = BatchReport(
            mode=strategy.mode,
            count=len(marks),
            marks=marks,
            notifications=outcome,
            message=summarize(strategy.mode, outcome),
        )
        logger.info(
            "Attendance batch %s/%s/%s: mode=%s count=%d notifications sent=%d failed=%d",
            class_label,
            subject,
            request.day,
            report.mode.value,
            report.count,
            outcome.sent,
            outcome.failed,
        )
        return report

    def _call_store(self, op):
        try:
            return op()
        except DomainError:
            raise
        except Exception as e:
            logger.exception("Attendance store failure")
            raise StorageError(str(e) or e.__class__.__name__) from e

    def _notify(self, request: BatchRequest, entries: Sequence[BatchEntry]) -> NotificationOutcome:
        payloads = self._build_payloads(request, [e for e in entries if e.status.needs_notification])
        if not payloads:
            return NotificationOutcome()
        settled = dispatch_all(self._notifier, payloads)
        return tally(payloads, settled)

    def _build_payloads(self, request: BatchRequest, entries: Sequence[BatchEntry]) -> List[NotificationPayload]:
        payloads: List[NotificationPayload] = []
        for e in entries:
            try:
                contact = self._directory.find_contact(e.student_id)
            except Exception:
                logger.exception("Contact lookup failed for student %s; skipping notification", e.student_id)
                continue
            if contact is None:
                logger.warning("Student %s not found; skipping notification", e.student_id)
                continue

            parent = contact.parent
            payloads.append(
                NotificationPayload(
                    student_id=contact.student_id,
                    student_name=contact.name,
                    student_email=contact.email,
                    parent_name=parent.name if parent else None,
                    parent_email=parent.email if parent else None,
                    status=e.status,
                    day=request.day,
                    class_label=request.class_label,
                    subject=request.subject,
                    remarks=e.remarks,
                )
            )
        return payloads

    def get_student_attendance(
        self,
        actor: User,
        *,
        student_id: str,
        start: date,
        end: date,
        subject: Optional[str] = None,
    ) -> Tuple[Sequence[AttendanceMark], AttendanceStats]:
        student_id = require_non_empty(student_id, "Student ID")
        if start > end:
            raise ValidationError("Start date must not be after end date")

        student = self._users.get_by_id(student_id) if self._users else None
        if not self._policy.can_view_student(actor, student=student, student_id=student_id):
            raise AuthorizationError("You do not have permission to view this attendance")

        marks = self._store.list_for_student(student_id=student_id, start=start, end=end, subject=subject or None)
        return marks, AttendanceStats.from_marks(marks)

    def get_class_attendance(self, actor: User, *, class_label: str, subject: str, day: date) -> Sequence[AttendanceMark]:
        class_label = require_non_empty(class_label, "Class")
        subject = require_non_empty(subject, "Subject")
        if not self._policy.can_manage(actor, class_label=class_label, subject=subject):
            raise AuthorizationError("You are not authorized to view attendance for this class/subject")
        return self._store.find_for_session(class_label=class_label, subject=subject, day=day)

    def update_mark(
        self,
        actor: User,
        *,
        mark_id: int,
        status,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceMark:
        new_status = parse_status(status)
        if new_status is None:
            raise ValidationError("Status is required")

        mark = self._store.get_by_id(int(mark_id))
        if not mark:
            raise NotFoundError("Attendance record not found")
        if not self._policy.can_correct(actor, marked_by=mark.marked_by):
            raise AuthorizationError("You can only update attendance records that you marked")

        late_at = late_arrival_for(new_status, now or now_local())
        if not self._store.update_status(mark_id=mark.mark_id, status=new_status, remarks=remarks, late_arrival_time=late_at):
            raise NotFoundError("Attendance record not found")

        updated = self._store.get_by_id(mark.mark_id)
        if not updated:
            raise NotFoundError("Attendance record not found")
        return updated
