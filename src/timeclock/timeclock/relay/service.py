from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Optional

import mysql.connector
import requests

from ..common.datetime_utils import parse_client_timestamp
from ..common.validators import require_iso_date, require_non_empty
from ..core.constants import STATUS_SCAN_LIMIT
from ..core.enums import PresenceStatus, RecordKind, SyncAction
from ..core.exceptions import ConfigurationError, SyncError, ValidationError
from ..records.model import leave_minutes
from .model import LogEntry
from .repository import LogRepository, ShiftRowRepository

logger = logging.getLogger(__name__)

_PRESENCE_BY_ACTION = {
    SyncAction.CLOCK_IN.value: PresenceStatus.WORKING,
    SyncAction.CLOCK_OUT.value: PresenceStatus.OFFLINE,
    RecordKind.PAID_OFF.value: PresenceStatus.PAID_OFF,
}

_LEAVE_ACTIONS = {k.value: k for k in RecordKind if k.is_leave}


def parse_submission(payload: Optional[dict]) -> LogEntry:
    """Validate a ``{name, action, timestamp, localTime}`` body."""
    if not isinstance(payload, dict):
        raise ValidationError("JSON body required")
    name = require_non_empty(payload.get("name"), "name")
    action = require_non_empty(payload.get("action"), "action")
    timestamp = require_non_empty(payload.get("timestamp"), "timestamp")
    try:
        parse_client_timestamp(timestamp)
    except ValueError:
        raise ValidationError(f"invalid timestamp: {timestamp!r}") from None
    local = payload.get("localTime")
    return LogEntry(user_name=name, action=action, client_time=timestamp, local_string=str(local) if local is not None else None)


class SubmitRelayService:
    """Use case: accept one client event and mirror it to the configured sinks.

    Sinks: the spreadsheet script URL (forwarded as-is) and, when a database
    is configured, the ``logs``/``shifts`` tables.
    """

    def __init__(
        self,
        *,
        script_url: Optional[str] = None,
        logs: Optional[LogRepository] = None,
        shifts: Optional[ShiftRowRepository] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
    ):
        self._script_url = script_url or None
        self._logs = logs
        self._shifts = shifts
        self._session = session or requests.Session()
        self._timeout = timeout

    def submit(self, payload: Optional[dict]) -> dict:
        entry = parse_submission(payload)
        if not self._script_url and self._logs is None:
            raise ConfigurationError("Variable GOOGLE_SCRIPT_URL not found in settings.")

        errors: list[str] = []
        if self._logs is not None:
            try:
                self._record(entry)
            except mysql.connector.Error as e:
                logger.error("DB error while recording %s for %s: %s", entry.action, entry.user_name, e)
                errors.append(f"Database Error: {e}")

        result: dict = {"result": "success"}
        if self._script_url:
            try:
                result = self._forward(payload)
            except SyncError as e:
                logger.error("Spreadsheet relay failed: %s", e)
                errors.append(str(e))

        if errors:
            raise SyncError("; ".join(errors))
        return result

    def _forward(self, payload: dict) -> dict:
        try:
            resp = self._session.post(self._script_url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            raise SyncError(f"Google Error: {e}") from e
        if not resp.ok:
            raise SyncError(f"Google Error {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError:
            return {"result": "success"}
        return data if isinstance(data, dict) else {"result": "success", "data": data}

    def _record(self, entry: LogEntry) -> None:
        self._logs.add(entry)
        if self._shifts is None:
            return

        at = parse_client_timestamp(entry.client_time)
        if entry.action == SyncAction.CLOCK_IN.value:
            self._shifts.open_shift(user_name=entry.user_name, clock_in=at)
        elif entry.action == SyncAction.CLOCK_OUT.value:
            if not self._shifts.close_latest_open(user_name=entry.user_name, clock_out=at):
                logger.warning("Clock Out for %s without an open shift", entry.user_name)
        elif entry.action in _LEAVE_ACTIONS:
            kind = _LEAVE_ACTIONS[entry.action]
            self._shifts.add_leave(user_name=entry.user_name, kind=kind.value, on=at, duration_minutes=leave_minutes(kind))
        else:
            logger.info("Unknown action %r logged without a shift row", entry.action)


class ReportQueryService:
    """Use case: stored shift rows between two dates, optional name filter."""

    def __init__(self, shifts: Optional[ShiftRowRepository]):
        self._shifts = shifts

    def query(self, *, start: Optional[str], end: Optional[str], name: Optional[str] = None) -> list[dict]:
        if not start or not end:
            raise ValidationError("Missing start or end date parameters")
        start_d = require_iso_date(start, "start date")
        end_d = require_iso_date(end, "end date")
        if self._shifts is None:
            raise ConfigurationError("Database is not configured")

        rows = self._shifts.between(
            start=datetime.combine(start_d, time.min),
            end=datetime.combine(end_d, time.max),
            user_name=(name or "").strip() or None,
        )
        return [r.to_dict() for r in rows]


class StatusQueryService:
    """Use case: current presence per user from the newest log entries."""

    def __init__(self, logs: Optional[LogRepository]):
        self._logs = logs

    def current_statuses(self, *, limit: int = STATUS_SCAN_LIMIT) -> list[dict]:
        if self._logs is None:
            raise ConfigurationError("Database is not configured")

        result: dict[str, dict] = {}
        for log in self._logs.recent(limit):
            if log.user_name in result:
                continue
            presence = _PRESENCE_BY_ACTION.get(log.action)
            if presence is None:
                continue
            item = {"name": log.user_name, "status": presence.value, "since": log.local_string}
            if presence is PresenceStatus.WORKING:
                item["timestamp"] = log.client_time
            result[log.user_name] = item
        return list(result.values())
