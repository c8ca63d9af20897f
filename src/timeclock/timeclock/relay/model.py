from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class LogEntry:
    """Một sự kiện nhận được từ client (bảng ``logs``)."""

    user_name: str
    action: str
    client_time: str
    local_string: Optional[str] = None


@dataclass(frozen=True)
class ShiftRow:
    """Read-model của bảng ``shifts`` phục vụ truy vấn báo cáo."""

    shift_id: int
    user_name: str
    kind: str
    clock_in: datetime
    clock_out: Optional[datetime]
    duration_minutes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.shift_id,
            "user_name": self.user_name,
            "kind": self.kind,
            "clock_in": self.clock_in.isoformat(),
            "clock_out": self.clock_out.isoformat() if self.clock_out else None,
            "duration_minutes": self.duration_minutes,
        }
