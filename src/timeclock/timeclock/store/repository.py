from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..records.model import ShiftRecord, TrackerState


class KeyValueStore(Protocol):
    """Durable string key-value storage (one value per persisted key)."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class TrackerRepository(Protocol):
    def load(self) -> tuple[TrackerState, list[ShiftRecord]]:
        raise NotImplementedError

    def save(self, state: TrackerState, records: Sequence[ShiftRecord]) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError
