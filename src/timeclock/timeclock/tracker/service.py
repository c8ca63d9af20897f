from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import format_date, format_time, minutes_to_hm, now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT, GRACE_SECONDS, TICK_SECONDS
from ..core.enums import RecordKind, TrackerStatus
from ..notify.notifier import Notifier
from ..records.model import ShiftRecord, TrackerState
from ..reports.periods import ReportPeriod
from ..reports.service import TimesheetReport, TimesheetReportService
from ..store.repository import TrackerRepository
from ..sync.dispatcher import CloudSyncDispatcher
from ..sync.scheduler import Scheduler
from .events import (
    AddLeave,
    Announce,
    CancelClockOut,
    CancelSync,
    ClearAll,
    ClearStore,
    ClockIn,
    CountdownExpired,
    DeleteRecord,
    Notice,
    PersistState,
    RequestClockOut,
    Restore,
    ScheduleSync,
    SetAutoShare,
    SetUserName,
    StartCountdown,
    StartTimer,
    StopCountdown,
    StopTimer,
)
from .machine import MachineState, Transition, transition
from .timer import TimerSnapshot, pending_snapshot, running_snapshot, stopped_snapshot

logger = logging.getLogger(__name__)

TIMER_KEY = "tracker:timer"
COUNTDOWN_KEY = "tracker:countdown"
EMPTY_REPORT_NOTICE = "Report is empty or loading..."


@dataclass(frozen=True)
class HistoryItem:
    id: int
    date: str
    description: str
    kind: str
    active: bool


class TrackerService:
    """Use case: drive the shift state machine and perform its effects.

    Every public call runs under one lock because tick and sync callbacks
    arrive on timer threads.
    """

    def __init__(
        self,
        repository: TrackerRepository,
        dispatcher: CloudSyncDispatcher,
        notifier: Notifier,
        scheduler: Scheduler,
        *,
        reports: Optional[TimesheetReportService] = None,
        clock: Callable[[], datetime] = now_local,
        grace_seconds: int = GRACE_SECONDS,
        tick_seconds: float = TICK_SECONDS,
    ):
        self._repository = repository
        self._dispatcher = dispatcher
        self._notifier = notifier
        self._scheduler = scheduler
        self._reports = reports or TimesheetReportService()
        self._clock = clock
        self._grace_seconds = int(grace_seconds)
        self._tick_seconds = float(tick_seconds)
        self._lock = threading.RLock()
        self._state = MachineState()
        self._listeners: list[Callable[[TimerSnapshot], None]] = []
        self._last_report: Optional[TimesheetReport] = None
        self._dispatcher.set_notice_handler(self._notifier.notice)

    # ----- lifecycle -----

    def start(self, *, now: Optional[datetime] = None) -> None:
        """Load persisted state and resume (or finalize) whatever was in progress."""
        with self._lock:
            tracker, records = self._repository.load()
            self._state = MachineState(tracker=tracker, records=tuple(records))
            logger.info("Tracker restored: status=%s records=%d", tracker.status.value, len(records))
            self._dispatch(Restore(now or self._clock()))

    def subscribe(self, listener: Callable[[TimerSnapshot], None]) -> None:
        """Register a callback for the once-per-second timer/countdown ticks."""
        self._listeners.append(listener)

    # ----- read side -----

    @property
    def state(self) -> TrackerState:
        return self._state.tracker

    @property
    def records(self) -> list[ShiftRecord]:
        return list(self._state.records)

    @property
    def pending_deadline(self) -> Optional[datetime]:
        return self._state.pending_deadline

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    def now(self) -> datetime:
        return self._clock()

    def active_record(self) -> Optional[ShiftRecord]:
        return self._state.active_record

    def snapshot(self, *, now: Optional[datetime] = None) -> TimerSnapshot:
        now = now or self._clock()
        with self._lock:
            state = self._state
        if state.status is TrackerStatus.IN and state.active_record is not None:
            return running_snapshot(state.active_record.clock_in, now)
        if state.status is TrackerStatus.PENDING_OUT and state.pending_deadline is not None:
            return pending_snapshot(state.pending_deadline, now, grace_seconds=self._grace_seconds)
        return stopped_snapshot(state.status)

    def history(self, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryItem]:
        """Newest records for the history view; opening it marks everything read."""
        self._notifier.reset_unread()
        with self._lock:
            state = self._state
        items = []
        for r in state.records[:limit]:
            if r.kind is RecordKind.WORK:
                end = format_time(r.clock_out) if r.clock_out else "Active"
                desc = f"{format_time(r.clock_in)} - {end}"
            else:
                desc = r.kind.label
            if r.duration_minutes > 0:
                desc += f" ({minutes_to_hm(r.duration_minutes)})"
            items.append(
                HistoryItem(
                    id=r.id,
                    date=format_date(r.occurred_on),
                    description=desc,
                    kind=r.kind.value,
                    active=r.id == state.tracker.active_shift_id,
                )
            )
        return items

    def report(self, period: ReportPeriod) -> TimesheetReport:
        with self._lock:
            records = self._state.records
            user_name = self._state.tracker.user_name
        report = self._reports.build_report(records, user_name=user_name, period=period)
        self._last_report = report
        return report

    def copy_report(self) -> Optional[str]:
        if self._last_report is None or not self._last_report.text:
            self._notifier.notice(EMPTY_REPORT_NOTICE)
            return None
        self._notifier.copy_to_clipboard(self._last_report.text)
        return self._last_report.text

    def export_json(self) -> str:
        with self._lock:
            records = self._state.records
        return json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)

    # ----- commands -----

    def set_user_name(self, name: str) -> None:
        self._dispatch(SetUserName(name))

    def set_auto_share(self, enabled: bool) -> None:
        self._dispatch(SetAutoShare(enabled))

    def clock_in(self, *, now: Optional[datetime] = None) -> Transition:
        return self._dispatch(ClockIn(now or self._clock()))

    def request_clock_out(self, *, now: Optional[datetime] = None) -> Transition:
        return self._dispatch(RequestClockOut(now or self._clock()))

    def cancel_clock_out(self, *, now: Optional[datetime] = None) -> Transition:
        return self._dispatch(CancelClockOut(now or self._clock()))

    def expire_countdown(self, *, now: Optional[datetime] = None) -> Transition:
        return self._dispatch(CountdownExpired(now or self._clock()))

    def toggle(self, *, now: Optional[datetime] = None) -> Transition:
        """Main button: clock in, request clock out, or cancel a pending clock out."""
        now = now or self._clock()
        with self._lock:
            status = self._state.status
            if status is TrackerStatus.OUT:
                return self._dispatch(ClockIn(now))
            if status is TrackerStatus.IN:
                return self._dispatch(RequestClockOut(now))
            return self._dispatch(CancelClockOut(now))

    def add_leave(
        self,
        kind: RecordKind,
        on_date: Optional[date] = None,
        *,
        confirmed: bool = False,
        now: Optional[datetime] = None,
    ) -> Transition:
        """Add a leave day; without ``on_date`` it lands on today's date."""
        now = now or self._clock()
        return self._dispatch(AddLeave(kind=kind, on_date=on_date or now.date(), now=now, confirmed=confirmed))

    def delete_record(self, record_id: int) -> Transition:
        return self._dispatch(DeleteRecord(int(record_id)))

    def clear_all(self) -> Transition:
        return self._dispatch(ClearAll())

    # ----- effects -----

    def _dispatch(self, event) -> Transition:
        with self._lock:
            result = transition(self._state, event, grace_seconds=self._grace_seconds)
            self._state = result.state
            for effect in result.effects:
                self._apply(effect)
            return result

    def _apply(self, effect) -> None:
        if isinstance(effect, PersistState):
            self._repository.save(self._state.tracker, self._state.records)
        elif isinstance(effect, ClearStore):
            self._repository.clear()
            self._last_report = None
        elif isinstance(effect, Announce):
            self._notifier.announce(effect.message, share=effect.share)
        elif isinstance(effect, Notice):
            self._notifier.notice(effect.message)
        elif isinstance(effect, ScheduleSync):
            self._dispatcher.enqueue(effect.key, effect.event)
        elif isinstance(effect, CancelSync):
            if self._dispatcher.cancel(effect.key):
                logger.info("Dropped pending sync %s", effect.key)
        elif isinstance(effect, StartTimer):
            self._scheduler.cancel(COUNTDOWN_KEY)
            self._scheduler.call_later(TIMER_KEY, self._tick_seconds, self._on_timer_tick)
            self._notifier.show_quote()
        elif isinstance(effect, StopTimer):
            self._scheduler.cancel(TIMER_KEY)
            self._notifier.hide_quote()
        elif isinstance(effect, StartCountdown):
            self._scheduler.cancel(TIMER_KEY)
            self._scheduler.call_later(COUNTDOWN_KEY, self._tick_seconds, self._on_countdown_tick)
        elif isinstance(effect, StopCountdown):
            self._scheduler.cancel(COUNTDOWN_KEY)
        else:
            raise TypeError(f"Unsupported effect: {effect!r}")

    def _publish(self, snapshot: TimerSnapshot) -> None:
        for listener in list(self._listeners):
            listener(snapshot)

    def _on_timer_tick(self) -> None:
        with self._lock:
            if self._state.status is not TrackerStatus.IN:
                return
            self._scheduler.call_later(TIMER_KEY, self._tick_seconds, self._on_timer_tick)
            snapshot = self.snapshot()
        self._publish(snapshot)

    def _on_countdown_tick(self) -> None:
        with self._lock:
            if self._state.status is not TrackerStatus.PENDING_OUT:
                return
            now = self._clock()
            snapshot = self.snapshot(now=now)
            if not snapshot.countdown_remaining:
                self._dispatch(CountdownExpired(now))
                snapshot = self.snapshot(now=now)
            else:
                self._scheduler.call_later(COUNTDOWN_KEY, self._tick_seconds, self._on_countdown_tick)
        self._publish(snapshot)
