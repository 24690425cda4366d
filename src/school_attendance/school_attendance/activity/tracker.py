from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.constants import DEFAULT_ACTIVITY_LIMIT, MAX_ACTIVITY_LIMIT
from ..core.enums import ActivityType
from .model import Activity
from .repository import ActivityRepository

logger = logging.getLogger(__name__)


class ActivityTracker:
    """Records user activity. Writing is best-effort: failures are logged, never raised."""

    def __init__(self, activities: ActivityRepository):
        self._activities = activities

    def track(
        self,
        *,
        user_id: Optional[str],
        activity_type: ActivityType,
        message: str,
        metadata: Optional[dict] = None,
    ) -> Optional[int]:
        if not user_id or not message:
            logger.error("Missing required parameters for activity tracking")
            return None
        try:
            return self._activities.create(
                user_id=str(user_id),
                activity_type=activity_type,
                message=message,
                metadata=metadata or {},
            )
        except Exception:
            logger.exception("Activity tracking error")
            return None

    def recent(self, user_id: str, *, limit: int = DEFAULT_ACTIVITY_LIMIT) -> Sequence[Activity]:
        limit = max(1, min(int(limit), MAX_ACTIVITY_LIMIT))
        return self._activities.list_recent(user_id=str(user_id), limit=limit)
