from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SyncEvent:
    """One event delivered to the submission endpoint."""

    name: str
    action: str
    timestamp: str
    local_time: str

    def to_payload(self) -> dict[str, str]:
        return {
            "name": self.name,
            "action": self.action,
            "timestamp": self.timestamp,
            "localTime": self.local_time,
        }


def clock_in_key(record_id: int) -> str:
    return str(record_id)


def clock_out_key(record_id: int) -> str:
    # Distinct from the clock-in key of the same record.
    return f"{record_id}:out"
