from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Optional

from ..core.constants import LEAVE_MINUTES
from ..core.enums import RecordKind, TrackerStatus


@dataclass(frozen=True)
class ShiftRecord:
    """Thực thể miền (domain): một ca làm hoặc một ngày nghỉ."""

    id: int
    kind: RecordKind
    occurred_on: datetime
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    duration_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    @property
    def is_completed_work(self) -> bool:
        return self.kind is RecordKind.WORK and self.clock_out is not None

    @classmethod
    def open_work(cls, *, record_id: int, clock_in: datetime) -> "ShiftRecord":
        return cls(id=record_id, kind=RecordKind.WORK, occurred_on=clock_in, clock_in=clock_in)

    @classmethod
    def leave(cls, *, record_id: int, kind: RecordKind, on_date: date) -> "ShiftRecord":
        return cls(
            id=record_id,
            kind=kind,
            occurred_on=datetime.combine(on_date, datetime.min.time()),
            duration_minutes=leave_minutes(kind),
        )

    def closed_at(self, clock_out: datetime) -> "ShiftRecord":
        minutes = int((clock_out - self.clock_in).total_seconds() // 60)
        return replace(self, clock_out=clock_out, duration_minutes=max(minutes, 0))

    def reopened(self) -> "ShiftRecord":
        return replace(self, clock_out=None, duration_minutes=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "occurred_on": self.occurred_on.isoformat(),
            "clock_in": self.clock_in.isoformat() if self.clock_in else None,
            "clock_out": self.clock_out.isoformat() if self.clock_out else None,
            "duration_minutes": self.duration_minutes,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ShiftRecord":
        def _dt(value):
            return datetime.fromisoformat(value) if value else None

        return cls(
            id=int(raw["id"]),
            kind=RecordKind(raw["kind"]),
            occurred_on=datetime.fromisoformat(raw["occurred_on"]),
            clock_in=_dt(raw.get("clock_in")),
            clock_out=_dt(raw.get("clock_out")),
            duration_minutes=max(int(raw.get("duration_minutes") or 0), 0),
        )


@dataclass(frozen=True)
class TrackerState:
    """Trạng thái toàn cục được lưu lại giữa các lần khởi động."""

    status: TrackerStatus = TrackerStatus.OUT
    active_shift_id: Optional[int] = None
    user_name: str = ""
    auto_share_enabled: bool = False


def leave_minutes(kind: RecordKind) -> int:
    """Fixed duration credited for a leave kind (a full paid day is 480)."""
    return int(LEAVE_MINUTES.get(kind.value, 0))
