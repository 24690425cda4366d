from __future__ import annotations

from datetime import date, datetime

import mysql.connector
import pytest

from src.school_attendance.school_attendance.attendance.model import NewMark
from src.school_attendance.school_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.school_attendance.school_attendance.core.enums import AttendanceStatus
from src.school_attendance.school_attendance.core.exceptions import DuplicateAttendanceError, StorageError

DAY = date(2024, 1, 10)
ER_NO_REFERENCED_ROW = 1452


class FakeTable:
    """attendance_marks with its UNIQUE (student_id, attendance_date, subject) key."""

    def __init__(self):
        self.rows: dict[int, dict] = {}
        self.next_id = 1
        self.commits = 0
        self.rollbacks = 0
        # student_id -> errno raised on INSERT
        self.insert_errors: dict[str, int] = {}

    def find(self, rows, student_id, subject, day):
        return next(
            (r for r in rows.values() if (r["student_id"], r["subject"], r["attendance_date"]) == (student_id, subject, day)),
            None,
        )

    def seed(self, student_id, class_label, status="present"):
        row = self.new_row((student_id, class_label, "Math", DAY, status, "admin", None, None))
        self.rows[row["mark_id"]] = row
        return row

    def new_row(self, params):
        student_id, class_label, subject, day, status, marked_by, late_at, remarks = params
        row = {
            "mark_id": self.next_id,
            "student_id": student_id,
            "class_label": class_label,
            "subject": subject,
            "attendance_date": day,
            "status": status,
            "marked_by": marked_by,
            "late_arrival_time": late_at,
            "remarks": remarks,
            "created_at": None,
            "updated_at": None,
        }
        self.next_id += 1
        return row


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self._result = []
        self.lastrowid = None
        self.rowcount = 0

    def execute(self, sql, params=()):
        rows = self._conn.working
        table = self._conn.table
        if sql.lstrip().startswith("INSERT INTO attendance_marks"):
            student_id, class_label, subject, day = params[:4]
            if student_id in table.insert_errors:
                errno = table.insert_errors[student_id]
                raise mysql.connector.IntegrityError(msg=f"error {errno}", errno=errno)
            existing = table.find(rows, student_id, subject, day)
            if existing and "ON DUPLICATE KEY UPDATE" in sql:
                if existing["class_label"] == class_label:
                    existing.update(status=params[4], marked_by=params[5], late_arrival_time=params[6], remarks=params[7])
                self.lastrowid = existing["mark_id"]
                return
            if existing:
                raise mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062)
            row = table.new_row(params)
            rows[row["mark_id"]] = row
            self.lastrowid = row["mark_id"]
        elif "WHERE mark_id IN" in sql:
            self._result = [dict(rows[i]) for i in params if i in rows]
        elif "WHERE student_id=%s AND subject=%s AND attendance_date=%s" in sql:
            found = table.find(rows, *params)
            self._result = [dict(found)] if found else []
        else:
            raise AssertionError(f"unexpected SQL: {sql}")

    def fetchone(self):
        return self._result[0] if self._result else None

    def fetchall(self):
        return list(self._result)

    def close(self):
        pass


class FakeConnection:
    """Writes go to a working copy until commit."""

    def __init__(self, table):
        self.table = table
        self.working = {k: dict(v) for k, v in table.rows.items()}

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        self.table.rows = self.working
        self.table.commits += 1

    def rollback(self):
        self.table.rollbacks += 1

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, table):
        self._table = table

    def connect(self):
        return FakeConnection(self._table)


@pytest.fixture
def table():
    return FakeTable()


@pytest.fixture
def repo(table):
    return MySQLAttendanceRepository(FakeConnectionFactory(table))


def _new(student_id, status=AttendanceStatus.ABSENT, class_label="CSE-A"):
    return NewMark(
        student_id=student_id,
        class_label=class_label,
        subject="Math",
        day=DAY,
        status=status,
        marked_by="teacher",
    )


def _students(table):
    return sorted(r["student_id"] for r in table.rows.values())


def test_insert_marks_returns_stored_marks(repo, table):
    marks = repo.insert_marks([_new("s1"), _new("s2", AttendanceStatus.PRESENT)])

    assert [m.student_id for m in marks] == ["s1", "s2"]
    assert marks[1].status == AttendanceStatus.PRESENT
    assert table.commits == 1


def test_insert_marks_keeps_going_past_duplicates_and_commits_the_rest(repo, table):
    table.insert_errors["s2"] = 1062

    with pytest.raises(DuplicateAttendanceError) as exc:
        repo.insert_marks([_new("s1"), _new("s2"), _new("s3")])

    assert exc.value.student_ids == ["s2"]
    assert _students(table) == ["s1", "s3"]
    assert table.commits == 1
    assert table.rollbacks == 0


def test_insert_marks_other_integrity_errors_roll_back(repo, table):
    table.insert_errors["s2"] = ER_NO_REFERENCED_ROW

    with pytest.raises(StorageError):
        repo.insert_marks([_new("s1"), _new("s2"), _new("s3")])

    assert table.rows == {}
    assert table.rollbacks == 1
    assert table.commits == 0


def test_upsert_inserts_then_updates_same_row(repo, table):
    first = repo.upsert_mark(
        student_id="s1", class_label="CSE-A", subject="Math", day=DAY,
        status=AttendanceStatus.ABSENT, marked_by="teacher",
    )
    late_at = datetime(2024, 1, 10, 9, 20)
    second = repo.upsert_mark(
        student_id="s1", class_label="CSE-A", subject="Math", day=DAY,
        status=AttendanceStatus.LATE, marked_by="teacher", late_arrival_time=late_at, remarks="bus",
    )

    assert second.mark_id == first.mark_id
    assert second.status == AttendanceStatus.LATE
    assert second.late_arrival_time == late_at
    assert len(table.rows) == 1


def test_upsert_refuses_mark_owned_by_another_class(repo, table):
    table.seed("s1", "CSE-B")

    with pytest.raises(DuplicateAttendanceError) as exc:
        repo.upsert_mark(
            student_id="s1", class_label="CSE-A", subject="Math", day=DAY,
            status=AttendanceStatus.ABSENT, marked_by="teacher",
        )

    assert exc.value.student_ids == ["s1"]
    assert "under class CSE-B" in str(exc.value)
    assert "update feature" not in str(exc.value)
    [row] = table.rows.values()
    assert (row["class_label"], row["status"]) == ("CSE-B", "present")
    assert table.rollbacks == 1
