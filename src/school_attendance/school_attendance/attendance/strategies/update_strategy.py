from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ...core.enums import WriteMode
from ..model import AttendanceMark, BatchEntry, BatchRequest
from ..repository import AttendanceRepository
from .base import WriteStrategy, late_arrival_for


class UpdateStrategy(WriteStrategy):
    """Session already (partly) recorded: upsert each student's mark."""

    mode = WriteMode.UPDATE

    def write(
        self,
        store: AttendanceRepository,
        request: BatchRequest,
        entries: Sequence[BatchEntry],
        *,
        marked_by: str,
        now: datetime,
    ) -> Sequence[AttendanceMark]:
        return [
            store.upsert_mark(
                student_id=e.student_id,
                class_label=request.class_label,
                subject=request.subject,
                day=request.day,
                status=e.status,
                marked_by=marked_by,
                late_arrival_time=late_arrival_for(e.status, now),
                remarks=e.remarks,
            )
            for e in entries
        ]
