from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..core.constants import SYNC_DELAY_SECONDS
from ..core.exceptions import SyncError
from .model import SyncEvent
from .scheduler import Scheduler
from .transport import SubmitTransport

logger = logging.getLogger(__name__)


class CloudSyncDispatcher:
    """Deferred, keyed, best-effort delivery of events to the submission endpoint.

    - Each event waits ``delay_seconds`` before it is sent.
    - A new event for a pending key replaces the old one (only the latest is sent).
    - Offline at send time: the attempt is skipped, not queued.
    - Failures become a transient notice; nothing is retried or rolled back.
    """

    def __init__(
        self,
        transport: Optional[SubmitTransport],
        scheduler: Scheduler,
        *,
        delay_seconds: float = SYNC_DELAY_SECONDS,
        is_online: Callable[[], bool] = lambda: True,
        on_notice: Optional[Callable[[str], None]] = None,
    ):
        self._transport = transport
        self._scheduler = scheduler
        self._delay = float(delay_seconds)
        self._is_online = is_online
        self._on_notice = on_notice
        self._pending: dict[str, SyncEvent] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._transport is not None

    def set_notice_handler(self, on_notice: Optional[Callable[[str], None]]) -> None:
        self._on_notice = on_notice

    def enqueue(self, key: str, event: SyncEvent) -> None:
        if self._transport is None:
            logger.debug("Sync disabled, dropping %s (%s)", key, event.action)
            return
        with self._lock:
            superseded = key in self._pending
            self._pending[key] = event
        if superseded:
            logger.info("Sync event %s superseded by a newer %s", key, event.action)
        self._scheduler.call_later(self._timer_key(key), self._delay, lambda: self.deliver(key))

    def cancel(self, key: str) -> bool:
        with self._lock:
            dropped = self._pending.pop(key, None) is not None
        self._scheduler.cancel(self._timer_key(key))
        return dropped

    def pending(self) -> dict[str, SyncEvent]:
        with self._lock:
            return dict(self._pending)

    def deliver(self, key: str) -> bool:
        with self._lock:
            event = self._pending.pop(key, None)
        if event is None or self._transport is None:
            return False

        if not self._is_online():
            logger.info("Offline, skipping sync of %s (%s)", key, event.action)
            return False

        try:
            self._transport.submit(event.to_payload())
        except SyncError as e:
            logger.warning("Cloud sync failed for %s (%s): %s", key, event.action, e)
            self._notice(f"Cloud sync failed: {e}")
            return False

        logger.info("Synced %s for %s", event.action, event.name)
        return True

    def _notice(self, message: str) -> None:
        if self._on_notice is not None:
            self._on_notice(message)

    @staticmethod
    def _timer_key(key: str) -> str:
        return f"sync:{key}"
