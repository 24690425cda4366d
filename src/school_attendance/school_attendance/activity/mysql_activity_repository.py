from __future__ import annotations

import json
from typing import Optional, Sequence

from ..core.enums import ActivityType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Activity
from .repository import ActivityRepository


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: str,
        activity_type: ActivityType,
        message: str,
        metadata: Optional[dict] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activities(user_id, activity_type, message, metadata)
                VALUES(%s,%s,%s,%s)
                """,
                (str(user_id), activity_type.value, message, json.dumps(metadata or {}, default=str)),
            )
            return int(cur.lastrowid)

    def list_recent(self, *, user_id: str, limit: int) -> Sequence[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT activity_id, user_id, activity_type, message, metadata, created_at
                FROM activities
                WHERE user_id=%s
                ORDER BY created_at DESC, activity_id DESC
                LIMIT %s
                """,
                (str(user_id), int(limit)),
            )
            rows = fetchall(cur)
            out: list[Activity] = []
            for r in rows:
                raw = r.get("metadata")
                if isinstance(raw, (bytes, bytearray)):
                    raw = raw.decode("utf-8")
                out.append(
                    Activity(
                        activity_id=int(r["activity_id"]),
                        user_id=str(r["user_id"]),
                        activity_type=ActivityType(r["activity_type"]),
                        message=r["message"],
                        metadata=json.loads(raw) if raw else {},
                        created_at=r.get("created_at"),
                    )
                )
            return out
