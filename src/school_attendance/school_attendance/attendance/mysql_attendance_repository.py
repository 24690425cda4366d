from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateAttendanceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceMark, NewMark
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_MARK_COLUMNS = """
    mark_id, student_id, class_label, subject, attendance_date, status,
    marked_by, late_arrival_time, remarks, created_at, updated_at
"""


def _to_mark(r: dict) -> AttendanceMark:
    return AttendanceMark(
        mark_id=int(r["mark_id"]),
        student_id=str(r["student_id"]),
        class_label=r["class_label"],
        subject=r["subject"],
        day=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        marked_by=str(r["marked_by"]),
        late_arrival_time=r.get("late_arrival_time"),
        remarks=r.get("remarks"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_for_session(self, *, class_label: str, subject: str, day: date) -> Sequence[AttendanceMark]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_MARK_COLUMNS}
                FROM attendance_marks
                WHERE class_label=%s AND subject=%s AND attendance_date=%s
                ORDER BY student_id
                """,
                (class_label, subject, day),
            )
            return [_to_mark(r) for r in fetchall(cur)]

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
        # One statement keyed on the unique index; a row owned by another class is left untouched.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_marks(
                    student_id, class_label, subject, attendance_date,
                    status, marked_by, late_arrival_time, remarks
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=IF(class_label=VALUES(class_label), VALUES(status), status),
                    marked_by=IF(class_label=VALUES(class_label), VALUES(marked_by), marked_by),
                    late_arrival_time=IF(class_label=VALUES(class_label), VALUES(late_arrival_time), late_arrival_time),
                    remarks=IF(class_label=VALUES(class_label), VALUES(remarks), remarks)
                """,
                (student_id, class_label, subject, day, status.value, marked_by, late_arrival_time, remarks),
            )
            cur.execute(
                f"""
                SELECT {_MARK_COLUMNS} FROM attendance_marks
                WHERE student_id=%s AND subject=%s AND attendance_date=%s
                """,
                (student_id, subject, day),
            )
            mark = _to_mark(fetchone(cur))
            if mark.class_label != class_label:
                raise DuplicateAttendanceError(
                    [student_id],
                    f"Attendance for {student_id} is already marked under class {mark.class_label} "
                    "for this subject and date",
                )
            return mark

    def insert_marks(self, marks: Sequence[NewMark]) -> Sequence[AttendanceMark]:
        duplicates: list[str] = []
        inserted_ids: list[int] = []

        with db_cursor(self._conn_factory) as (_, cur):
            for m in marks:
                try:
                    cur.execute(
                        """
                        INSERT INTO attendance_marks(
                            student_id, class_label, subject, attendance_date,
                            status, marked_by, late_arrival_time, remarks
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        (
                            m.student_id,
                            m.class_label,
                            m.subject,
                            m.day,
                            m.status.value,
                            m.marked_by,
                            m.late_arrival_time,
                            m.remarks,
                        ),
                    )
                    inserted_ids.append(int(cur.lastrowid))
                except mysql.connector.IntegrityError as e:
                    if not is_duplicate_key(e):
                        raise
                    duplicates.append(m.student_id)

            rows: list[dict] = []
            if inserted_ids:
                placeholders = ",".join(["%s"] * len(inserted_ids))
                cur.execute(
                    f"SELECT {_MARK_COLUMNS} FROM attendance_marks WHERE mark_id IN ({placeholders})",
                    tuple(inserted_ids),
                )
                rows = fetchall(cur)

        if duplicates:
            logger.warning("Duplicate attendance for students %s; %d other marks stored", duplicates, len(rows))
            raise DuplicateAttendanceError(duplicates)
        return [_to_mark(r) for r in rows]

    def get_by_id(self, mark_id: int) -> Optional[AttendanceMark]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_MARK_COLUMNS} FROM attendance_marks WHERE mark_id=%s", (int(mark_id),))
            r = fetchone(cur)
            return _to_mark(r) if r else None

    def update_status(
        self,
        *,
        mark_id: int,
        status: AttendanceStatus,
        remarks: Optional[str],
        late_arrival_time: Optional[datetime],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_marks
                SET status=%s, remarks=%s, late_arrival_time=%s
                WHERE mark_id=%s
                """,
                (status.value, remarks, late_arrival_time, int(mark_id)),
            )
            return cur.rowcount > 0

    def list_for_student(
        self,
        *,
        student_id: str,
        start: date,
        end: date,
        subject: Optional[str] = None,
    ) -> Sequence[AttendanceMark]:
        clauses = ["student_id=%s", "attendance_date BETWEEN %s AND %s"]
        params: list[object] = [student_id, start, end]
        if subject:
            clauses.append("subject=%s")
            params.append(subject)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_MARK_COLUMNS}
                FROM attendance_marks
                WHERE {where}
                ORDER BY attendance_date DESC
                """,
                tuple(params),
            )
            return [_to_mark(r) for r in fetchall(cur)]
