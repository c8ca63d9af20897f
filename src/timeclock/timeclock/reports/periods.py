from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import last_day_of_month
from ..common.validators import require_iso_date
from ..core.exceptions import ValidationError

CUSTOM = "custom"
_HALF_RE = re.compile(r"^(\d{4})-(\d{2})-(a|b)$")


@dataclass(frozen=True)
class ReportPeriod:
    """Inclusive report window; ``end`` already points at the last microsecond of the day."""

    value: str
    label: str
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def _end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max)


def half_month(year: int, month: int, first_half: bool) -> ReportPeriod:
    """``a`` is days 1-15, ``b`` is day 16 through the real last day of the month."""
    mname = calendar.month_abbr[month]
    if first_half:
        start_day, end_day, span = 1, 15, "1-15"
    else:
        start_day, end_day, span = 16, last_day_of_month(year, month), "16-End"
    return ReportPeriod(
        value=f"{year:04d}-{month:02d}-{'a' if first_half else 'b'}",
        label=f"{mname} {span}, {year}",
        start=datetime(year, month, start_day),
        end=_end_of_day(date(year, month, end_day)),
    )


def half_month_periods(today: date) -> list[ReportPeriod]:
    """Current half, other half of this month, then both halves of the previous month."""
    is_first = today.day <= 15
    prev_year, prev_month = (today.year - 1, 12) if today.month == 1 else (today.year, today.month - 1)
    return [
        half_month(today.year, today.month, is_first),
        half_month(today.year, today.month, not is_first),
        half_month(prev_year, prev_month, False),
        half_month(prev_year, prev_month, True),
    ]


def custom_period(start: Optional[str], end: Optional[str]) -> ReportPeriod:
    start_d = require_iso_date(start, "start date")
    end_d = require_iso_date(end, "end date")
    if end_d < start_d:
        raise ValidationError("end date is before start date")
    return ReportPeriod(
        value=CUSTOM,
        label=f"{start_d.isoformat()} to {end_d.isoformat()}",
        start=datetime.combine(start_d, time.min),
        end=_end_of_day(end_d),
    )


def resolve_period(value: Optional[str], *, start: Optional[str] = None, end: Optional[str] = None, today: date) -> ReportPeriod:
    """Turn a period selector into a window; empty selector means the current half."""
    if not value:
        return half_month_periods(today)[0]
    if value == CUSTOM:
        return custom_period(start, end)
    m = _HALF_RE.match(value)
    if not m:
        raise ValidationError(f"invalid period: {value!r}")
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        raise ValidationError(f"invalid period: {value!r}")
    return half_month(year, month, m.group(3) == "a")
