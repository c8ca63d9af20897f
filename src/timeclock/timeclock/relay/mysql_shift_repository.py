from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RecordKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import all_rows, db_cursor, first_row, insert_returning_id
from .model import ShiftRow
from .repository import ShiftRowRepository

_COLUMNS = "shift_id, user_name, kind, clock_in, clock_out, duration_minutes"


def _to_row(r: dict) -> ShiftRow:
    return ShiftRow(
        shift_id=int(r["shift_id"]),
        user_name=r["user_name"],
        kind=r["kind"],
        clock_in=r["clock_in"],
        clock_out=r.get("clock_out"),
        duration_minutes=int(r.get("duration_minutes") or 0),
    )


class MySQLShiftRowRepository(ShiftRowRepository):
    def __init__(self, db: DatabaseConnection):
        self._db = db

    def open_shift(self, *, user_name: str, clock_in: datetime) -> int:
        with db_cursor(self._db) as cur:
            return insert_returning_id(
                cur,
                "INSERT INTO shifts (user_name, kind, clock_in) VALUES (%s, %s, %s)",
                (user_name, RecordKind.WORK.value, clock_in),
            )

    def close_latest_open(self, *, user_name: str, clock_out: datetime) -> bool:
        with db_cursor(self._db) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE user_name=%s AND kind=%s AND clock_out IS NULL
                ORDER BY clock_in DESC
                LIMIT 1
                FOR UPDATE
                """,
                (user_name, RecordKind.WORK.value),
            )
            found = first_row(cur)
            if found is None:
                return False
            open_row = _to_row(found)
            minutes = max(int((clock_out - open_row.clock_in).total_seconds() // 60), 0)
            cur.execute(
                "UPDATE shifts SET clock_out=%s, duration_minutes=%s WHERE shift_id=%s",
                (clock_out, minutes, open_row.shift_id),
            )
            return cur.rowcount > 0

    def add_leave(self, *, user_name: str, kind: str, on: datetime, duration_minutes: int) -> int:
        with db_cursor(self._db) as cur:
            return insert_returning_id(
                cur,
                "INSERT INTO shifts (user_name, kind, clock_in, clock_out, duration_minutes) VALUES (%s, %s, %s, %s, %s)",
                (user_name, kind, on, on, int(duration_minutes)),
            )

    def between(self, *, start: datetime, end: datetime, user_name: Optional[str] = None) -> Sequence[ShiftRow]:
        where = ["clock_in >= %s", "clock_in <= %s"]
        params: list = [start, end]
        if user_name:
            where.append("LOWER(user_name) = LOWER(%s)")
            params.append(user_name)

        with db_cursor(self._db) as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE {' AND '.join(where)} ORDER BY clock_in ASC", tuple(params))
            rows = all_rows(cur)
        return [_to_row(r) for r in rows]
