from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..common.datetime_utils import format_date, format_time, minutes_to_hm
from ..records.model import ShiftRecord
from .periods import ReportPeriod

SEPARATOR = "----------------"


@dataclass(frozen=True)
class TimesheetReport:
    period: ReportPeriod
    lines: list[str]
    total_minutes: int
    text: str

    @property
    def total_label(self) -> str:
        return minutes_to_hm(self.total_minutes)

    @property
    def is_empty(self) -> bool:
        return not self.lines


class TimesheetReportService:
    """Filter records into a period and render the copyable plain-text timesheet."""

    def items_in_period(self, records: Iterable[ShiftRecord], period: ReportPeriod) -> list[ShiftRecord]:
        items = [r for r in records if period.contains(r.occurred_on)]
        items.sort(key=lambda r: r.occurred_on)
        return items

    def build_report(self, records: Iterable[ShiftRecord], *, user_name: str, period: ReportPeriod) -> TimesheetReport:
        total = 0
        lines: list[str] = []

        for r in self.items_in_period(records, period):
            day = format_date(r.occurred_on)
            if r.is_completed_work:
                total += r.duration_minutes
                lines.append(
                    f"{day} {format_time(r.clock_in)} - {format_time(r.clock_out)} ({minutes_to_hm(r.duration_minutes)})"
                )
            elif r.kind.is_leave:
                total += r.duration_minutes
                lines.append(f"{day} {r.kind.label} ({minutes_to_hm(r.duration_minutes)})")
            # Open work contributes nothing until it is closed.

        text = "\n".join(
            [f"Timesheet: {user_name}", f"Period: {period.label}", SEPARATOR, *lines, SEPARATOR, f"Total: {minutes_to_hm(total)}"]
        )
        return TimesheetReport(period=period, lines=lines, total_minutes=total, text=text)
