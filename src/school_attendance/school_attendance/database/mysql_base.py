from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import StorageError
from .connection import DatabaseConnection

# MySQL error code for a UNIQUE key violation.
ER_DUP_ENTRY = 1062


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise StorageError(f"Cannot connect to database: {e}") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        raise StorageError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def is_duplicate_key(error: Exception) -> bool:
    return isinstance(error, mysql.connector.IntegrityError) and getattr(error, "errno", None) == ER_DUP_ENTRY


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
