from datetime import datetime

import pytest

from src.timeclock.timeclock.core.enums import TrackerStatus
from src.timeclock.timeclock.core.exceptions import StorageParseError
from src.timeclock.timeclock.records.model import ShiftRecord, TrackerState
from src.timeclock.timeclock.store.json_file_store import JsonFileStore
from src.timeclock.timeclock.store.tracker_repository import (
    ACTIVE_SHIFT_KEY,
    RECORDS_KEY,
    STATUS_KEY,
    USER_KEY,
    StoreTrackerRepository,
    decode_records,
)


def test_json_file_store_survives_reopen(tmp_path):
    path = tmp_path / "state" / "store.json"
    store = JsonFileStore(path)
    store.set("tt_user", "Alex")
    store.set("tt_status", "in")
    store.remove("tt_status")

    reopened = JsonFileStore(path)

    assert reopened.get("tt_user") == "Alex"
    assert reopened.get("tt_status") is None


def test_json_file_store_starts_empty_on_corrupt_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    assert JsonFileStore(path).get("tt_user") is None


def test_missing_keys_load_defaults(memory_store):
    state, records = StoreTrackerRepository(memory_store).load()

    assert state == TrackerState()
    assert records == []


def test_save_then_load_round_trips_state(memory_store, fixed_now):
    repo = StoreTrackerRepository(memory_store)
    record = ShiftRecord.open_work(record_id=1, clock_in=fixed_now)
    state = TrackerState(status=TrackerStatus.IN, active_shift_id=1, user_name="Alex", auto_share_enabled=True)

    repo.save(state, [record])

    assert repo.load() == (state, [record])
    assert memory_store.get(STATUS_KEY) == "in"
    assert memory_store.get(ACTIVE_SHIFT_KEY) == "1"


def test_corrupted_records_fall_back_to_empty_tracker(memory_store):
    memory_store.set(RECORDS_KEY, "[{broken")
    memory_store.set(STATUS_KEY, "in")
    memory_store.set(USER_KEY, "Alex")

    state, records = StoreTrackerRepository(memory_store).load()

    assert records == []
    assert state.status is TrackerStatus.OUT
    assert state.user_name == "Alex"


def test_missing_active_record_forces_out(memory_store, fixed_now):
    repo = StoreTrackerRepository(memory_store)
    closed = ShiftRecord.open_work(record_id=1, clock_in=fixed_now).closed_at(datetime(2024, 1, 10, 17, 0))
    repo.save(TrackerState(status=TrackerStatus.IN, active_shift_id=99, user_name="Alex"), [closed])

    state, records = repo.load()

    assert state.status is TrackerStatus.OUT
    assert state.active_shift_id is None
    assert records == [closed]


def test_unknown_status_loads_as_out(memory_store):
    memory_store.set(STATUS_KEY, "on_break")

    state, _ = StoreTrackerRepository(memory_store).load()

    assert state.status is TrackerStatus.OUT


@pytest.mark.parametrize("raw", ['{"id": 1}', '[{"kind": "work"}]', "[{"])
def test_decode_records_rejects_malformed_payloads(raw):
    with pytest.raises(StorageParseError):
        decode_records(raw)
