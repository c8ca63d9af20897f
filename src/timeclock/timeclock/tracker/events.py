from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..core.enums import RecordKind
from ..sync.model import SyncEvent


# ----- events -----

@dataclass(frozen=True)
class ClockIn:
    now: datetime


@dataclass(frozen=True)
class RequestClockOut:
    now: datetime


@dataclass(frozen=True)
class CancelClockOut:
    now: datetime


@dataclass(frozen=True)
class CountdownExpired:
    now: datetime


@dataclass(frozen=True)
class Restore:
    """Cold start: resume the timer, or finalize an interrupted grace window."""

    now: datetime


@dataclass(frozen=True)
class AddLeave:
    kind: RecordKind
    on_date: date
    now: datetime
    confirmed: bool = False


@dataclass(frozen=True)
class DeleteRecord:
    record_id: int


@dataclass(frozen=True)
class ClearAll:
    pass


@dataclass(frozen=True)
class SetUserName:
    name: str


@dataclass(frozen=True)
class SetAutoShare:
    enabled: bool


# ----- effects -----

@dataclass(frozen=True)
class PersistState:
    pass


@dataclass(frozen=True)
class ClearStore:
    pass


@dataclass(frozen=True)
class Announce:
    """One-line summary: copied, optionally shared, counted as unread."""

    message: str
    share: bool = False


@dataclass(frozen=True)
class Notice:
    """Transient, non-blocking message for the user."""

    message: str


@dataclass(frozen=True)
class ScheduleSync:
    key: str
    event: SyncEvent


@dataclass(frozen=True)
class CancelSync:
    """Drop a sync that has not been delivered yet."""

    key: str


@dataclass(frozen=True)
class StartTimer:
    clock_in: datetime


@dataclass(frozen=True)
class StopTimer:
    pass


@dataclass(frozen=True)
class StartCountdown:
    deadline: datetime


@dataclass(frozen=True)
class StopCountdown:
    pass
