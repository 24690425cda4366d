from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from ...core.enums import AttendanceStatus, WriteMode
from ..model import AttendanceMark, BatchEntry, BatchRequest
from ..repository import AttendanceRepository


def late_arrival_for(status: AttendanceStatus, now: datetime) -> Optional[datetime]:
    """Only late marks carry an arrival time (the submission time)."""
    return now if status == AttendanceStatus.LATE else None


class WriteStrategy(ABC):
    """Strategy Pattern: encapsulate how a batch of marks is persisted."""

    mode: WriteMode

    @abstractmethod
    def write(
        self,
        store: AttendanceRepository,
        request: BatchRequest,
        entries: Sequence[BatchEntry],
        *,
        marked_by: str,
        now: datetime,
    ) -> Sequence[AttendanceMark]:
        raise NotImplementedError
