from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from ..core.enums import TrackerStatus
from ..core.exceptions import StorageParseError
from ..records.model import ShiftRecord, TrackerState
from .repository import KeyValueStore, TrackerRepository

logger = logging.getLogger(__name__)

RECORDS_KEY = "tt_data"
STATUS_KEY = "tt_status"
ACTIVE_SHIFT_KEY = "tt_shiftId"
USER_KEY = "tt_user"
AUTO_SHARE_KEY = "tt_autoshare"


def decode_records(raw: Optional[str]) -> list[ShiftRecord]:
    """Decode the persisted record list (newest first); absent key means empty."""
    if raw is None:
        return []
    try:
        items = json.loads(raw)
        if not isinstance(items, list):
            raise TypeError("record collection is not a list")
        return [ShiftRecord.from_dict(item) for item in items]
    except (ValueError, TypeError, KeyError) as e:
        raise StorageParseError(f"corrupted record collection: {e}") from e


def encode_records(records: Sequence[ShiftRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], ensure_ascii=False)


class StoreTrackerRepository(TrackerRepository):
    """Tracker state and records mapped onto independent store keys."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def load(self) -> tuple[TrackerState, list[ShiftRecord]]:
        try:
            records = decode_records(self._store.get(RECORDS_KEY))
        except StorageParseError as e:
            logger.warning("Falling back to an empty tracker: %s", e)
            return TrackerState(user_name=self._store.get(USER_KEY) or ""), []

        try:
            status = TrackerStatus(self._store.get(STATUS_KEY) or TrackerStatus.OUT.value)
        except ValueError:
            logger.warning("Unknown persisted status %r, using OUT", self._store.get(STATUS_KEY))
            status = TrackerStatus.OUT

        active_raw = self._store.get(ACTIVE_SHIFT_KEY)
        active_id = int(active_raw) if active_raw and active_raw.isdigit() else None
        if status is not TrackerStatus.OUT and not any(r.id == active_id for r in records):
            logger.warning("Active shift %r missing from records, using OUT", active_raw)
            status, active_id = TrackerStatus.OUT, None
        if status is TrackerStatus.OUT:
            active_id = None

        state = TrackerState(
            status=status,
            active_shift_id=active_id,
            user_name=self._store.get(USER_KEY) or "",
            auto_share_enabled=(self._store.get(AUTO_SHARE_KEY) or "").lower() == "true",
        )
        return state, records

    def save(self, state: TrackerState, records: Sequence[ShiftRecord]) -> None:
        self._store.set(RECORDS_KEY, encode_records(records))
        self._store.set(STATUS_KEY, state.status.value)
        if state.active_shift_id is not None:
            self._store.set(ACTIVE_SHIFT_KEY, str(state.active_shift_id))
        else:
            self._store.remove(ACTIVE_SHIFT_KEY)
        self._store.set(USER_KEY, state.user_name)
        self._store.set(AUTO_SHARE_KEY, "true" if state.auto_share_enabled else "false")

    def clear(self) -> None:
        self._store.clear()
