from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Single delayed-execution primitive, keyed: at most one pending call per key."""

    def call_later(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        """Run ``callback`` after ``delay`` seconds, replacing any pending call for ``key``."""
        raise NotImplementedError

    def cancel(self, key: str) -> bool:
        raise NotImplementedError


class ThreadingScheduler(Scheduler):
    """Scheduler backed by one daemon ``threading.Timer`` per key."""

    def __init__(self):
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def call_later(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(max(float(delay), 0.0), self._fire, args=(key, callback))
        timer.daemon = True
        with self._lock:
            previous = self._timers.get(key)
            if previous is not None:
                previous.cancel()
            self._timers[key] = timer
        timer.start()

    def _fire(self, key: str, callback: Callable[[], None]) -> None:
        with self._lock:
            current = self._timers.get(key)
            if current is not threading.current_thread():
                # Superseded between expiry and acquiring the lock.
                return
            del self._timers[key]
        try:
            callback()
        except Exception:
            logger.exception("Scheduled callback %r failed", key)

    def cancel(self, key: str) -> bool:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def pending(self) -> list[str]:
        with self._lock:
            return sorted(self._timers)
