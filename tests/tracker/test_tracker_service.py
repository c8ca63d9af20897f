import json
from datetime import date, timedelta

import pytest

from src.timeclock.timeclock.core.enums import RecordKind, TrackerStatus
from src.timeclock.timeclock.core.exceptions import SyncError, ValidationError
from src.timeclock.timeclock.notify.notifier import Notifier
from src.timeclock.timeclock.reports.periods import custom_period
from src.timeclock.timeclock.store.tracker_repository import StoreTrackerRepository
from src.timeclock.timeclock.sync.dispatcher import CloudSyncDispatcher
from src.timeclock.timeclock.tracker.service import COUNTDOWN_KEY, EMPTY_REPORT_NOTICE, TIMER_KEY, TrackerService


class FakeTransport:
    def __init__(self, fail=False):
        self.fail = fail
        self.payloads = []

    def submit(self, payload):
        if self.fail:
            raise SyncError("HTTP 502: bad gateway")
        self.payloads.append(payload)
        return {"result": "success"}


def _service(store, scheduler, clock, transport=None, notifier=None):
    dispatcher = CloudSyncDispatcher(transport, scheduler, delay_seconds=60)
    service = TrackerService(
        StoreTrackerRepository(store),
        dispatcher,
        notifier or Notifier(),
        scheduler,
        clock=clock,
        grace_seconds=10,
    )
    service.start()
    return service


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def service(memory_store, scheduler, clock, transport):
    s = _service(memory_store, scheduler, clock, transport)
    s.set_user_name("Alex")
    return s


def test_clock_in_persists_and_survives_restart(service, memory_store, scheduler, clock):
    service.clock_in()

    restarted = _service(memory_store, scheduler, clock)

    assert restarted.state.status is TrackerStatus.IN
    assert restarted.state.user_name == "Alex"
    assert restarted.active_record().clock_in == clock()


def test_clock_in_without_user_name_leaves_store_untouched(memory_store, scheduler, clock):
    service = _service(memory_store, scheduler, clock)

    with pytest.raises(ValidationError):
        service.clock_in()

    assert memory_store.data == {}
    assert service.state.status is TrackerStatus.OUT


def test_full_shift_counts_down_then_syncs_both_events(service, scheduler, clock, transport):
    snapshots = []
    service.subscribe(snapshots.append)

    service.clock_in()
    clock.advance(2 * 3600)
    scheduler.run_due()
    assert [p["action"] for p in transport.payloads] == ["Clock In"]

    service.request_clock_out()
    assert service.state.status is TrackerStatus.PENDING_OUT
    assert TIMER_KEY not in scheduler.calls

    snapshots.clear()
    scheduler.advance(5)
    assert [s.countdown_remaining for s in snapshots] == [9, 8, 7, 6, 5]
    assert service.state.status is TrackerStatus.PENDING_OUT

    scheduler.advance(5)
    assert service.state.status is TrackerStatus.OUT
    assert snapshots[-1].status is TrackerStatus.OUT
    assert COUNTDOWN_KEY not in scheduler.calls
    assert service.records[0].duration_minutes == 120

    scheduler.advance(60)
    assert [p["action"] for p in transport.payloads] == ["Clock In", "Clock Out"]


def test_cancel_during_countdown_resumes_original_timer(service, scheduler, clock):
    service.clock_in()
    clock.advance(3600)
    service.request_clock_out()
    scheduler.advance(3)

    service.cancel_clock_out()

    assert service.state.status is TrackerStatus.IN
    assert COUNTDOWN_KEY not in scheduler.calls
    assert TIMER_KEY in scheduler.calls
    assert service.snapshot().elapsed_seconds == 3603
    assert service.active_record().clock_out is None


def test_toggle_cycles_through_the_main_button_states(service, clock):
    service.toggle()
    assert service.state.status is TrackerStatus.IN

    clock.advance(600)
    service.toggle()
    assert service.state.status is TrackerStatus.PENDING_OUT

    clock.advance(2)
    service.toggle()
    assert service.state.status is TrackerStatus.IN


def test_reload_during_grace_window_finalizes(service, memory_store, scheduler, clock):
    service.clock_in()
    clock.advance(3600)
    service.request_clock_out()

    restarted = _service(memory_store, scheduler, clock)

    assert restarted.state.status is TrackerStatus.OUT
    assert restarted.records[0].duration_minutes == 60


def test_sync_failure_becomes_notice_and_keeps_local_state(memory_store, scheduler, clock):
    notifier = Notifier()
    service = _service(memory_store, scheduler, clock, FakeTransport(fail=True), notifier)
    service.set_user_name("Alex")
    service.clock_in()

    scheduler.advance(61)

    assert service.state.status is TrackerStatus.IN
    assert any(n.startswith("Cloud sync failed") for n in notifier.drain_notices())


def test_announcement_updates_preview_copy_and_badge(service):
    service.clock_in()

    notifier = service.notifier
    assert notifier.preview == "9:00am Alex - clock in"
    assert notifier.last_copied == "9:00am Alex - clock in"
    assert notifier.badge_label() == "1"


def test_auto_share_sends_the_summary(memory_store, scheduler, clock):
    shared = []
    service = _service(memory_store, scheduler, clock, notifier=Notifier(share=shared.append))
    service.set_user_name("Alex")
    service.set_auto_share(True)

    service.clock_in()

    assert shared == ["9:00am Alex - clock in"]


def test_history_lists_newest_first_and_marks_read(service, clock):
    service.add_leave(RecordKind.SICK_DAY, date(2024, 1, 2))
    service.clock_in()

    items = service.history()

    assert [i.description for i in items] == ["9:00am - Active", "Sick Day"]
    assert items[0].active is True
    assert items[1].date == "Jan 2"
    assert service.notifier.unread == 0
    assert service.notifier.badge_label() is None


def test_badge_caps_at_nine_plus(service, clock):
    for day in range(1, 12):
        service.add_leave(RecordKind.DAY_OFF, date(2023, 12, day))
    assert service.notifier.badge_label() == "9+"


def test_report_and_copy(service, clock):
    service.clock_in()
    clock.advance(8 * 3600)
    service.request_clock_out()
    service.expire_countdown(now=clock() + timedelta(seconds=10))
    service.add_leave(RecordKind.PAID_OFF, date(2024, 1, 12))

    report = service.report(custom_period("2024-01-01", "2024-01-15"))

    assert report.total_label == "16h 0m"
    assert service.copy_report() == report.text
    assert service.notifier.last_copied == report.text


def test_copy_before_any_report_shows_notice(service):
    assert service.copy_report() is None
    assert EMPTY_REPORT_NOTICE in service.notifier.drain_notices()


def test_delete_and_clear_all(service, memory_store):
    service.clock_in()
    service.delete_record(service.state.active_shift_id)
    assert service.state.status is TrackerStatus.OUT
    assert service.records == []

    service.clear_all()
    assert memory_store.data == {}
    assert service.state.user_name == ""


def test_export_json_lists_records(service):
    service.add_leave(RecordKind.PAID_OFF, date(2024, 1, 5))

    exported = json.loads(service.export_json())

    assert exported[0]["kind"] == "Paid Off"
    assert exported[0]["duration_minutes"] == 480


def test_discarded_short_shift_never_reaches_the_endpoint(service, scheduler, transport):
    service.clock_in()
    scheduler.advance(5)
    service.request_clock_out()
    scheduler.advance(15)
    assert service.records == []

    scheduler.advance(120)

    assert transport.payloads == []


def test_deleted_active_shift_never_reaches_the_endpoint(service, scheduler, transport):
    service.clock_in()
    scheduler.advance(10)
    service.delete_record(service.state.active_shift_id)

    scheduler.advance(120)

    assert transport.payloads == []


def test_quote_is_shown_while_clocked_in(memory_store, scheduler, clock):
    service = _service(memory_store, scheduler, clock, notifier=Notifier(quotes=["Stay sharp."], choose=lambda q: q[0]))
    service.set_user_name("Alex")

    service.clock_in()
    assert service.notifier.quote == "Stay sharp."

    clock.advance(120)
    service.request_clock_out()
    assert service.notifier.quote is None


def test_leave_without_date_uses_the_service_clock(service, clock):
    service.add_leave(RecordKind.DAY_OFF)

    assert service.records[0].occurred_on.date() == clock().date()
