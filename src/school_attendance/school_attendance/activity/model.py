from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import ActivityType


@dataclass(frozen=True)
class Activity:
    activity_id: int
    user_id: str
    activity_type: ActivityType
    message: str
    metadata: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.activity_id,
            "type": self.activity_type.value,
            "message": self.message,
            "metadata": dict(self.metadata),
            "timestamp": self.created_at.isoformat() if self.created_at else None,
        }
