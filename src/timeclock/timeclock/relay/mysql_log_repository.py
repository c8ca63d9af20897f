from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import all_rows, db_cursor, insert_returning_id
from .model import LogEntry
from .repository import LogRepository


class MySQLLogRepository(LogRepository):
    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(self, entry: LogEntry) -> int:
        with db_cursor(self._db) as cur:
            return insert_returning_id(
                cur,
                "INSERT INTO logs (user_name, action, client_time, local_string) VALUES (%s, %s, %s, %s)",
                (entry.user_name, entry.action, entry.client_time, entry.local_string),
            )

    def recent(self, limit: int) -> Sequence[LogEntry]:
        with db_cursor(self._db) as cur:
            cur.execute(
                """
                SELECT user_name, action, client_time, local_string
                FROM logs
                ORDER BY client_time DESC, log_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            rows = all_rows(cur)
        return [LogEntry(r["user_name"], r["action"], r["client_time"], r.get("local_string")) for r in rows]
