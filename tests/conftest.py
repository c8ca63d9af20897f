from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

import pytest


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeScheduler:
    """Keyed scheduler driven by a FakeClock instead of real threads."""

    def __init__(self, clock: FakeClock):
        self._clock = clock
        self.calls: dict[str, tuple[datetime, Callable[[], None]]] = {}

    def call_later(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        self.calls[key] = (self._clock() + timedelta(seconds=delay), callback)

    def cancel(self, key: str) -> bool:
        return self.calls.pop(key, None) is not None

    def run_due(self) -> None:
        while True:
            due = [(at, key) for key, (at, _) in self.calls.items() if at <= self._clock()]
            if not due:
                return
            _, key = min(due)
            _, callback = self.calls.pop(key)
            callback()

    def advance(self, seconds: float, *, step: float = 1.0) -> None:
        remaining = seconds
        while remaining > 0:
            delta = min(step, remaining)
            self._clock.advance(delta)
            remaining -= delta
            self.run_due()


class MemoryStore:
    def __init__(self, data: Optional[dict] = None):
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.data.clear()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 10, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def scheduler(clock) -> FakeScheduler:
    return FakeScheduler(clock)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()
