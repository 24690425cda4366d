from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime

import pytest

from src.school_attendance.school_attendance.activity.model import Activity
from src.school_attendance.school_attendance.activity.tracker import ActivityTracker
from src.school_attendance.school_attendance.attendance.model import AttendanceMark
from src.school_attendance.school_attendance.attendance.service import AttendanceRecorder
from src.school_attendance.school_attendance.core.enums import Role
from src.school_attendance.school_attendance.core.exceptions import DuplicateAttendanceError
from src.school_attendance.school_attendance.notifications.model import ChannelResult, NotificationResult
from src.school_attendance.school_attendance.users.model import ParentContact, StudentContact, User


def make_user(user_id, role, *, subjects=(), classes=(), parent_id=None, password_hash="x", is_active=True):
    return User(
        user_id=user_id,
        username=user_id,
        full_name=user_id.title(),
        email=f"{user_id}@school.test",
        password_hash=password_hash,
        role=role,
        subjects=tuple(subjects),
        assigned_classes=tuple(classes),
        parent_id=parent_id,
        is_active=is_active,
    )


class FakeAttendanceStore:
    """In-memory store keyed like the real table: one mark per (student, subject, date)."""

    def __init__(self):
        self._next_id = 1
        self.marks: dict[int, AttendanceMark] = {}
        self.fail_with: Exception | None = None
        self.session_queries = 0

    def _find(self, student_id, subject, day):
        for m in self.marks.values():
            if m.student_id == student_id and m.subject == subject and m.day == day:
                return m
        return None

    def _add(self, **kwargs):
        mark = AttendanceMark(mark_id=self._next_id, **kwargs)
        self.marks[mark.mark_id] = mark
        self._next_id += 1
        return mark

    def seed(self, *, student_id, class_label, subject, day, status, marked_by):
        return self._add(
            student_id=student_id,
            class_label=class_label,
            subject=subject,
            day=day,
            status=status,
            marked_by=marked_by,
        )

    def find_for_session(self, *, class_label, subject, day):
        self.session_queries += 1
        if self.fail_with:
            raise self.fail_with
        return [
            m
            for m in self.marks.values()
            if m.class_label == class_label and m.subject == subject and m.day == day
        ]

    def upsert_mark(self, *, student_id, class_label, subject, day, status, marked_by, late_arrival_time=None, remarks=None):
        existing = self._find(student_id, subject, day)
        if existing and existing.class_label != class_label:
            raise DuplicateAttendanceError(
                [student_id],
                f"Attendance for {student_id} is already marked under class {existing.class_label} "
                "for this subject and date",
            )
        if existing:
            updated = replace(
                existing,
                status=status,
                marked_by=marked_by,
                late_arrival_time=late_arrival_time,
                remarks=remarks,
            )
            self.marks[existing.mark_id] = updated
            return updated
        return self._add(
            student_id=student_id,
            class_label=class_label,
            subject=subject,
            day=day,
            status=status,
            marked_by=marked_by,
            late_arrival_time=late_arrival_time,
            remarks=remarks,
        )

    def insert_marks(self, marks):
        stored, duplicates = [], []
        for m in marks:
            if self._find(m.student_id, m.subject, m.day):
                duplicates.append(m.student_id)
                continue
            stored.append(
                self._add(
                    student_id=m.student_id,
                    class_label=m.class_label,
                    subject=m.subject,
                    day=m.day,
                    status=m.status,
                    marked_by=m.marked_by,
                    late_arrival_time=m.late_arrival_time,
                    remarks=m.remarks,
                )
            )
        if duplicates:
            raise DuplicateAttendanceError(duplicates)
        return stored

    def get_by_id(self, mark_id):
        return self.marks.get(int(mark_id))

    def update_status(self, *, mark_id, status, remarks, late_arrival_time):
        mark = self.marks.get(int(mark_id))
        if not mark:
            return False
        self.marks[mark.mark_id] = replace(mark, status=status, remarks=remarks, late_arrival_time=late_arrival_time)
        return True

    def list_for_student(self, *, student_id, start, end, subject=None):
        return [
            m
            for m in self.marks.values()
            if m.student_id == student_id and start <= m.day <= end and (subject is None or m.subject == subject)
        ]


class FakeUsers:
    """Both the user repository and the student directory."""

    def __init__(self, users=()):
        self.users = {u.user_id: u for u in users}
        self.broken_lookups: set[str] = set()

    def add(self, user):
        self.users[user.user_id] = user
        return user

    def get_by_id(self, user_id):
        return self.users.get(str(user_id))

    def get_by_username(self, username):
        return next((u for u in self.users.values() if u.username == username), None)

    def find_contact(self, student_id):
        if student_id in self.broken_lookups:
            raise RuntimeError("directory unavailable")
        student = self.users.get(student_id)
        if not student or student.role != Role.STUDENT:
            return None
        parent = self.users.get(student.parent_id) if student.parent_id else None
        return StudentContact(
            student_id=student.user_id,
            name=student.full_name,
            email=student.email,
            parent=ParentContact(name=parent.full_name, email=parent.email) if parent else None,
        )


class FakeNotifier:
    """Succeeds on every addressed channel unless told to raise for a student."""

    def __init__(self):
        self._lock = threading.Lock()
        self.payloads = []
        self.raise_for: set[str] = set()

    def notify(self, payload):
        with self._lock:
            self.payloads.append(payload)
        if payload.student_id in self.raise_for:
            raise RuntimeError("mail server exploded")
        return NotificationResult(
            parent=ChannelResult.ok() if payload.parent_email else ChannelResult.no_address(),
            student=ChannelResult.ok() if payload.student_email else ChannelResult.no_address(),
        )

    def notified_ids(self):
        return sorted(p.student_id for p in self.payloads)


class FakeActivityRepo:
    def __init__(self):
        self.items: list[Activity] = []
        self.fail = False

    def create(self, *, user_id, activity_type, message, metadata=None):
        if self.fail:
            raise RuntimeError("activities table missing")
        activity = Activity(
            activity_id=len(self.items) + 1,
            user_id=user_id,
            activity_type=activity_type,
            message=message,
            metadata=dict(metadata or {}),
            created_at=datetime(2024, 1, 10, 9, 0, len(self.items)),
        )
        self.items.append(activity)
        return activity.activity_id

    def list_recent(self, *, user_id, limit):
        mine = [a for a in self.items if a.user_id == user_id]
        return list(reversed(mine))[:limit]


@pytest.fixture
def fixed_now():
    return datetime(2024, 1, 10, 9, 15, 0)


@pytest.fixture
def store():
    return FakeAttendanceStore()


@pytest.fixture
def users():
    parent = make_user("parent1", Role.PARENT)
    return FakeUsers(
        [
            make_user("admin", Role.ADMIN),
            make_user("teacher", Role.FACULTY, subjects=["Math"], classes=["CSE-A"]),
            make_user("other_teacher", Role.FACULTY, subjects=["Physics"], classes=["CSE-B"]),
            parent,
            make_user("parent2", Role.PARENT),
            make_user("s1", Role.STUDENT, parent_id=parent.user_id),
            make_user("s2", Role.STUDENT, parent_id="parent2"),
            make_user("s3", Role.STUDENT, parent_id="parent2"),
            make_user("s4", Role.STUDENT),
        ]
    )


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def activity_repo():
    return FakeActivityRepo()


@pytest.fixture
def recorder(store, users, notifier, activity_repo):
    return AttendanceRecorder(store, users, notifier, ActivityTracker(activity_repo), users=users)
