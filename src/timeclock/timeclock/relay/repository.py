from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import LogEntry, ShiftRow


class LogRepository(Protocol):
    def add(self, entry: LogEntry) -> int:
        raise NotImplementedError

    def recent(self, limit: int) -> Sequence[LogEntry]:
        """Newest first by client time."""
        raise NotImplementedError


class ShiftRowRepository(Protocol):
    def open_shift(self, *, user_name: str, clock_in: datetime) -> int:
        raise NotImplementedError

    def close_latest_open(self, *, user_name: str, clock_out: datetime) -> bool:
        raise NotImplementedError

    def add_leave(self, *, user_name: str, kind: str, on: datetime, duration_minutes: int) -> int:
        raise NotImplementedError

    def between(self, *, start: datetime, end: datetime, user_name: Optional[str] = None) -> Sequence[ShiftRow]:
        """Rows whose clock-in falls in [start, end], ascending; name match is case-insensitive."""
        raise NotImplementedError
