"""Shift state machine: OUT -> IN -> PENDING_OUT -> OUT (or back to IN).

``transition(state, event)`` is pure. It returns the next state plus the
effects (persist, announce, schedule sync, start/stop ticks) the caller has to
perform; nothing here touches storage, clocks or the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import format_date, format_time, to_utc_iso
from ..common.validators import require_non_empty
from ..core.constants import CLOCK_IN_DEBOUNCE_SECONDS, GRACE_SECONDS, MIN_SHIFT_SECONDS
from ..core.enums import SyncAction, TrackerStatus
from ..core.exceptions import ConfirmationRequiredError, TransitionError, ValidationError
from ..records.model import ShiftRecord, TrackerState
from ..sync.model import SyncEvent, clock_in_key, clock_out_key
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

DISCARDED_NOTICE = "Shift shorter than a minute was discarded"
CANCELLED_NOTICE = "Clock out cancelled"


@dataclass(frozen=True)
class MachineState:
    tracker: TrackerState = field(default_factory=TrackerState)
    # Newest-created first.
    records: tuple[ShiftRecord, ...] = ()
    pending_deadline: Optional[datetime] = None
    last_trigger_at: Optional[datetime] = None

    @property
    def status(self) -> TrackerStatus:
        return self.tracker.status

    @property
    def active_record(self) -> Optional[ShiftRecord]:
        if self.tracker.active_shift_id is None:
            return None
        return next((r for r in self.records if r.id == self.tracker.active_shift_id), None)


@dataclass(frozen=True)
class Transition:
    state: MachineState
    effects: tuple = ()


def new_record_id(now: datetime, records: tuple[ShiftRecord, ...]) -> int:
    """Creation-time id in milliseconds, bumped to stay strictly increasing."""
    candidate = int(now.timestamp() * 1000)
    newest = max((r.id for r in records), default=0)
    return max(candidate, newest + 1)


def _replace_record(records: tuple[ShiftRecord, ...], record: ShiftRecord) -> tuple[ShiftRecord, ...]:
    return tuple(record if r.id == record.id else r for r in records)


def _within_debounce(state: MachineState, now: datetime) -> bool:
    if state.last_trigger_at is None:
        return False
    delta = (now - state.last_trigger_at).total_seconds()
    return 0 <= delta < CLOCK_IN_DEBOUNCE_SECONDS


def _clock_in(state: MachineState, event: ClockIn, grace_seconds: int) -> Transition:
    user = require_non_empty(state.tracker.user_name, "user name")
    if _within_debounce(state, event.now):
        return Transition(state)
    if state.status is not TrackerStatus.OUT:
        raise TransitionError("Already clocked in")

    record = ShiftRecord.open_work(record_id=new_record_id(event.now, state.records), clock_in=event.now)
    tracker = replace(state.tracker, status=TrackerStatus.IN, active_shift_id=record.id)
    next_state = replace(state, tracker=tracker, records=(record,) + state.records, last_trigger_at=event.now)

    local_time = format_time(event.now)
    sync = SyncEvent(name=user, action=SyncAction.CLOCK_IN.value, timestamp=to_utc_iso(event.now), local_time=local_time)
    return Transition(
        next_state,
        (
            PersistState(),
            Announce(f"{local_time} {user} - clock in", share=tracker.auto_share_enabled),
            StartTimer(record.clock_in),
            ScheduleSync(clock_in_key(record.id), sync),
        ),
    )


def _request_clock_out(state: MachineState, event: RequestClockOut, grace_seconds: int) -> Transition:
    user = require_non_empty(state.tracker.user_name, "user name")
    if _within_debounce(state, event.now):
        return Transition(state)
    if state.status is not TrackerStatus.IN:
        raise TransitionError("Not clocked in")
    record = state.active_record
    if record is None:
        raise TransitionError("Active shift not found")

    closed = record.closed_at(event.now)
    deadline = event.now + timedelta(seconds=grace_seconds)
    next_state = replace(
        state,
        tracker=replace(state.tracker, status=TrackerStatus.PENDING_OUT),
        records=_replace_record(state.records, closed),
        pending_deadline=deadline,
        last_trigger_at=event.now,
    )
    return Transition(
        next_state,
        (
            PersistState(),
            Announce(f"{format_time(event.now)} {user} - clock out", share=state.tracker.auto_share_enabled),
            StopTimer(),
            StartCountdown(deadline),
        ),
    )


def _cancel_clock_out(state: MachineState, event: CancelClockOut, grace_seconds: int) -> Transition:
    if state.status is not TrackerStatus.PENDING_OUT:
        raise TransitionError("No clock out to cancel")
    if state.pending_deadline is not None and event.now >= state.pending_deadline:
        raise TransitionError("Clock out is already final")
    record = state.active_record
    if record is None:
        raise TransitionError("Active shift not found")

    reopened = record.reopened()
    next_state = replace(
        state,
        tracker=replace(state.tracker, status=TrackerStatus.IN),
        records=_replace_record(state.records, reopened),
        pending_deadline=None,
    )
    return Transition(
        next_state,
        (PersistState(), StopCountdown(), StartTimer(reopened.clock_in), Notice(CANCELLED_NOTICE)),
    )


def _finalize(state: MachineState, now: datetime) -> Transition:
    record = state.active_record
    tracker = replace(state.tracker, status=TrackerStatus.OUT, active_shift_id=None)
    base = replace(state, tracker=tracker, pending_deadline=None)
    if record is None:
        return Transition(base, (StopCountdown(), PersistState()))

    if record.clock_out is None:
        record = record.closed_at(now)
    if (record.clock_out - record.clock_in).total_seconds() < MIN_SHIFT_SECONDS:
        records = tuple(r for r in state.records if r.id != record.id)
        return Transition(
            replace(base, records=records),
            (StopCountdown(), PersistState(), CancelSync(clock_in_key(record.id)), Notice(DISCARDED_NOTICE)),
        )

    sync = SyncEvent(
        name=state.tracker.user_name.strip(),
        action=SyncAction.CLOCK_OUT.value,
        timestamp=to_utc_iso(record.clock_out),
        local_time=format_time(record.clock_out),
    )
    return Transition(
        replace(base, records=_replace_record(state.records, record)),
        (StopCountdown(), PersistState(), ScheduleSync(clock_out_key(record.id), sync)),
    )


def _countdown_expired(state: MachineState, event: CountdownExpired, grace_seconds: int) -> Transition:
    if state.status is not TrackerStatus.PENDING_OUT:
        # Stale tick after a cancel or delete.
        return Transition(state)
    return _finalize(state, event.now)


def _restore(state: MachineState, event: Restore, grace_seconds: int) -> Transition:
    if state.status is TrackerStatus.PENDING_OUT:
        # The countdown is not persisted; an interrupted grace window counts as expired.
        return _finalize(state, event.now)
    if state.status is TrackerStatus.IN:
        record = state.active_record
        if record is None or record.clock_in is None:
            tracker = replace(state.tracker, status=TrackerStatus.OUT, active_shift_id=None)
            return Transition(replace(state, tracker=tracker), (PersistState(),))
        return Transition(state, (StartTimer(record.clock_in),))
    return Transition(state)


def _add_leave(state: MachineState, event: AddLeave, grace_seconds: int) -> Transition:
    user = require_non_empty(state.tracker.user_name, "user name")
    if not event.kind.is_leave:
        raise ValidationError(f"not a leave kind: {event.kind.value}")

    if not event.confirmed:
        if state.status is TrackerStatus.IN and event.on_date == event.now.date():
            raise ConfirmationRequiredError("You are clocked in today. Add a leave day anyway?")
        if any(r.occurred_on.date() == event.on_date for r in state.records):
            raise ConfirmationRequiredError(f"A record already exists for {event.on_date.isoformat()}. Add anyway?")

    record = ShiftRecord.leave(record_id=new_record_id(event.now, state.records), kind=event.kind, on_date=event.on_date)
    next_state = replace(state, records=(record,) + state.records)
    sync = SyncEvent(name=user, action=event.kind.value, timestamp=to_utc_iso(record.occurred_on), local_time="N/A")
    return Transition(
        next_state,
        (
            PersistState(),
            Announce(f"{format_date(event.on_date)} {user} - {event.kind.label}", share=state.tracker.auto_share_enabled),
            ScheduleSync(clock_in_key(record.id), sync),
        ),
    )


def _delete_record(state: MachineState, event: DeleteRecord, grace_seconds: int) -> Transition:
    if not any(r.id == event.record_id for r in state.records):
        raise ValidationError("record not found")
    records = tuple(r for r in state.records if r.id != event.record_id)
    # Undelivered events of a deleted record are never sent.
    cancels = (CancelSync(clock_in_key(event.record_id)), CancelSync(clock_out_key(event.record_id)))
    if event.record_id != state.tracker.active_shift_id:
        return Transition(replace(state, records=records), (PersistState(),) + cancels)

    tracker = replace(state.tracker, status=TrackerStatus.OUT, active_shift_id=None)
    return Transition(
        replace(state, tracker=tracker, records=records, pending_deadline=None),
        (StopTimer(), StopCountdown(), PersistState()) + cancels,
    )


def _clear_all(state: MachineState, event: ClearAll, grace_seconds: int) -> Transition:
    return Transition(MachineState(), (StopTimer(), StopCountdown(), ClearStore()))


def _set_user_name(state: MachineState, event: SetUserName, grace_seconds: int) -> Transition:
    return Transition(replace(state, tracker=replace(state.tracker, user_name=event.name)), (PersistState(),))


def _set_auto_share(state: MachineState, event: SetAutoShare, grace_seconds: int) -> Transition:
    tracker = replace(state.tracker, auto_share_enabled=bool(event.enabled))
    return Transition(replace(state, tracker=tracker), (PersistState(),))


_HANDLERS: dict[type, Callable[..., Transition]] = {
    ClockIn: _clock_in,
    RequestClockOut: _request_clock_out,
    CancelClockOut: _cancel_clock_out,
    CountdownExpired: _countdown_expired,
    Restore: _restore,
    AddLeave: _add_leave,
    DeleteRecord: _delete_record,
    ClearAll: _clear_all,
    SetUserName: _set_user_name,
    SetAutoShare: _set_auto_share,
}


def transition(state: MachineState, event, *, grace_seconds: int = GRACE_SECONDS) -> Transition:
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unsupported event: {event!r}")
    return handler(state, event, grace_seconds)
