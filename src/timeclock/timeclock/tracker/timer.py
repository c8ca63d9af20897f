from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_hms
from ..core.constants import GRACE_SECONDS, RING_CIRCUMFERENCE, STANDARD_DAY_SECONDS
from ..core.enums import TrackerStatus


@dataclass(frozen=True)
class RingProgress:
    """Fractions of the regular (8h) ring and the overtime ring, both in [0, 1]."""

    primary: float = 0.0
    overtime: float = 0.0

    def dash_offsets(self, circumference: float = RING_CIRCUMFERENCE) -> tuple[float, float]:
        return (
            circumference - self.primary * circumference,
            circumference - self.overtime * circumference,
        )


@dataclass(frozen=True)
class TimerSnapshot:
    status: TrackerStatus
    elapsed_seconds: int
    elapsed_label: str
    ring: RingProgress
    countdown_remaining: Optional[int] = None
    countdown_fraction: Optional[float] = None

    def to_dict(self) -> dict:
        blue, pink = self.ring.dash_offsets()
        return {
            "status": self.status.value,
            "elapsed_seconds": self.elapsed_seconds,
            "elapsed": self.elapsed_label,
            "ring_primary": self.ring.primary,
            "ring_overtime": self.ring.overtime,
            "ring_primary_offset": blue,
            "ring_overtime_offset": pink,
            "countdown_remaining": self.countdown_remaining,
            "countdown_fraction": self.countdown_fraction,
        }


def elapsed_seconds(clock_in: datetime, now: datetime) -> int:
    return max(int((now - clock_in).total_seconds()), 0)


def ring_progress(elapsed: int, *, day_seconds: int = STANDARD_DAY_SECONDS) -> RingProgress:
    primary = min(elapsed / day_seconds, 1.0)
    overtime = min(max(elapsed - day_seconds, 0) / day_seconds, 1.0)
    return RingProgress(primary=primary, overtime=overtime)


def countdown_remaining(deadline: datetime, now: datetime) -> int:
    """Whole seconds left in the grace window, rounded up so 0 means expired."""
    return max(math.ceil((deadline - now).total_seconds()), 0)


def countdown_fraction(remaining: int, *, grace_seconds: int = GRACE_SECONDS) -> float:
    return min(max(remaining / grace_seconds, 0.0), 1.0)


def stopped_snapshot(status: TrackerStatus = TrackerStatus.OUT) -> TimerSnapshot:
    return TimerSnapshot(status=status, elapsed_seconds=0, elapsed_label=format_hms(0), ring=RingProgress())


def running_snapshot(clock_in: datetime, now: datetime) -> TimerSnapshot:
    elapsed = elapsed_seconds(clock_in, now)
    return TimerSnapshot(
        status=TrackerStatus.IN,
        elapsed_seconds=elapsed,
        elapsed_label=format_hms(elapsed),
        ring=ring_progress(elapsed),
    )


def pending_snapshot(deadline: datetime, now: datetime, *, grace_seconds: int = GRACE_SECONDS) -> TimerSnapshot:
    # The elapsed display is stopped while the clock-out is pending.
    remaining = countdown_remaining(deadline, now)
    base = stopped_snapshot(TrackerStatus.PENDING_OUT)
    return TimerSnapshot(
        status=base.status,
        elapsed_seconds=base.elapsed_seconds,
        elapsed_label=base.elapsed_label,
        ring=base.ring,
        countdown_remaining=remaining,
        countdown_fraction=countdown_fraction(remaining, grace_seconds=grace_seconds),
    )
