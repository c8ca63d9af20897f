from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(db: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Any]:
    """One transaction per block: commit when it exits cleanly, rollback otherwise."""
    conn = db.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def insert_returning_id(cur, sql: str, params: Sequence[Any]) -> int:
    cur.execute(sql, tuple(params))
    return int(cur.lastrowid)


def first_row(cur) -> Optional[dict[str, Any]]:
    return cur.fetchone() or None


def all_rows(cur) -> list[dict[str, Any]]:
    return list(cur.fetchall() or [])
