from __future__ import annotations

from enum import Enum


class TrackerStatus(str, Enum):
    """Trạng thái của máy trạng thái ca làm (persisted as-is)."""

    OUT = "out"
    IN = "in"
    PENDING_OUT = "pending_out"


class RecordKind(str, Enum):
    """Loại bản ghi: ca làm việc hoặc một loại ngày nghỉ."""

    WORK = "work"
    PAID_OFF = "Paid Off"
    SICK_DAY = "Sick Day"
    DAY_OFF = "Day Off"

    @property
    def is_leave(self) -> bool:
        return self is not RecordKind.WORK

    @property
    def label(self) -> str:
        return "Work" if self is RecordKind.WORK else self.value


class SyncAction(str, Enum):
    """Action names sent to the submission endpoint."""

    CLOCK_IN = "Clock In"
    CLOCK_OUT = "Clock Out"


class PresenceStatus(str, Enum):
    """Trạng thái hiện tại của từng người, suy ra từ log mới nhất."""

    WORKING = "Working"
    OFFLINE = "Offline"
    PAID_OFF = "PaidOff"
