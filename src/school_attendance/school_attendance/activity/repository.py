from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ActivityType
from .model import Activity


class ActivityRepository(Protocol):
    def create(
        self,
        *,
        user_id: str,
        activity_type: ActivityType,
        message: str,
        metadata: Optional[dict] = None,
    ) -> int:
        raise NotImplementedError

    def list_recent(self, *, user_id: str, limit: int) -> Sequence[Activity]:
        raise NotImplementedError
