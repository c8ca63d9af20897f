from datetime import date, datetime

import pytest

from src.timeclock.timeclock.core.enums import RecordKind
from src.timeclock.timeclock.core.exceptions import ValidationError
from src.timeclock.timeclock.records.model import ShiftRecord
from src.timeclock.timeclock.reports.periods import custom_period, half_month, half_month_periods, resolve_period
from src.timeclock.timeclock.reports.service import TimesheetReportService


def _work(record_id, start, end=None):
    record = ShiftRecord.open_work(record_id=record_id, clock_in=start)
    return record.closed_at(end) if end else record


@pytest.fixture
def records():
    # Newest first, the way the tracker keeps them.
    return [
        _work(5, datetime(2024, 2, 1, 9, 0), datetime(2024, 2, 1, 17, 0)),
        _work(4, datetime(2024, 1, 14, 9, 0)),
        ShiftRecord.leave(record_id=3, kind=RecordKind.PAID_OFF, on_date=date(2024, 1, 12)),
        _work(2, datetime(2024, 1, 10, 9, 0), datetime(2024, 1, 10, 17, 0)),
        _work(1, datetime(2023, 12, 31, 9, 0), datetime(2023, 12, 31, 12, 0)),
    ]


def test_custom_range_totals_completed_work_and_leave(records):
    report = TimesheetReportService().build_report(records, user_name="Alex", period=custom_period("2024-01-01", "2024-01-15"))

    assert report.lines == ["Jan 10 9:00am - 5:00pm (8h 0m)", "Jan 12 Paid Off (8h 0m)"]
    assert report.total_minutes == 960
    assert report.total_label == "16h 0m"
    assert report.text.splitlines() == [
        "Timesheet: Alex",
        "Period: 2024-01-01 to 2024-01-15",
        "----------------",
        "Jan 10 9:00am - 5:00pm (8h 0m)",
        "Jan 12 Paid Off (8h 0m)",
        "----------------",
        "Total: 16h 0m",
    ]


def test_report_is_idempotent(records):
    service = TimesheetReportService()
    period = custom_period("2024-01-01", "2024-01-15")

    assert service.build_report(records, user_name="Alex", period=period) == service.build_report(
        records, user_name="Alex", period=period
    )


def test_end_date_is_inclusive_through_the_whole_day():
    late = _work(1, datetime(2024, 1, 15, 23, 0), datetime(2024, 1, 15, 23, 59, 59))

    report = TimesheetReportService().build_report([late], user_name="Alex", period=custom_period("2024-01-15", "2024-01-15"))

    assert report.total_label == "0h 59m"


def test_empty_period_still_renders_header_and_total(records):
    report = TimesheetReportService().build_report(records, user_name="Alex", period=half_month(2024, 3, True))

    assert report.is_empty
    assert report.text.endswith("Total: 0h 0m")


def test_half_month_periods_start_with_current_half():
    periods = half_month_periods(date(2024, 3, 20))

    assert [p.label for p in periods] == ["Mar 16-End, 2024", "Mar 1-15, 2024", "Feb 16-End, 2024", "Feb 1-15, 2024"]
    assert [p.value for p in periods] == ["2024-03-b", "2024-03-a", "2024-02-b", "2024-02-a"]
    assert periods[2].end.date() == date(2024, 2, 29)


def test_half_month_periods_roll_back_over_the_year():
    periods = half_month_periods(date(2024, 1, 5))

    assert periods[0].label == "Jan 1-15, 2024"
    assert periods[2].label == "Dec 16-End, 2023"
    assert periods[2].end.date() == date(2023, 12, 31)


def test_second_half_of_thirty_day_month_ends_on_the_thirtieth():
    assert half_month(2024, 4, False).end.date() == date(2024, 4, 30)


def test_resolve_period_selectors():
    today = date(2024, 3, 20)

    assert resolve_period(None, today=today) == half_month(2024, 3, False)
    assert resolve_period("2024-02-a", today=today) == half_month(2024, 2, True)
    assert resolve_period("custom", start="2024-01-01", end="2024-01-02", today=today).label == "2024-01-01 to 2024-01-02"


@pytest.mark.parametrize("value", ["bogus", "2024-13-a", "2024-02-c"])
def test_resolve_period_rejects_unknown_selectors(value):
    with pytest.raises(ValidationError):
        resolve_period(value, today=date(2024, 3, 20))


def test_custom_period_validates_its_dates():
    with pytest.raises(ValidationError, match="missing start date"):
        custom_period(None, "2024-01-01")
    with pytest.raises(ValidationError, match="invalid end date"):
        custom_period("2024-01-01", "01/05/2024")
    with pytest.raises(ValidationError):
        custom_period("2024-01-10", "2024-01-01")
