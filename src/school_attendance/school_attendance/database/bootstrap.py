from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def schema_statements(sql: str) -> List[str]:
    """Split schema.sql into statements for the configured database.

    CREATE DATABASE / USE lines are dropped so DB_NAME decides the target.
    The schema holds no ';' inside literals, so a plain split is enough.
    """
    lines = [ln for ln in sql.splitlines() if not ln.strip().startswith("--")]
    body = re.sub(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$", "", "\n".join(lines))
    return [stmt.strip() for stmt in body.split(";") if stmt.strip()]


def apply_schema(db_config: dict, *, schema_path: str | Path) -> int:
    """Create the database if needed and apply schema.sql; returns statement count."""
    target = DBConfig.from_dict(db_config)
    statements = schema_statements(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(target, with_database=False)
    try:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %d schema statements to %s", len(statements), target.database)
    return len(statements)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
