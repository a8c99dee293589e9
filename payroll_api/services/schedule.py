from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from payroll_api.common.errors import ValidationFailed

# date.weekday() order: Monday=0 .. Sunday=6, names as stored on Position.work_days
WEEKDAY_NAMES = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")


@dataclass(frozen=True)
class ScheduleSummary:
    standard_hours: Decimal
    scheduled_days: int


def _fold(name: str) -> str:
    """Lower-case and strip accents: 'Miércoles' -> 'miercoles'."""
    decomposed = unicodedata.normalize("NFKD", (name or "").strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def weekday_name(d: date) -> str:
    return WEEKDAY_NAMES[d.weekday()]


def each_day(start: date, end: date) -> Iterable[date]:
    """Every calendar day in [start, end], both bounds included."""
    cur = start
    while cur <= end:
        yield cur
        cur += timedelta(days=1)


def evaluate_schedule(work_days: Optional[Iterable[str]], daily_hours, start: date, end: date) -> ScheduleSummary:
    """
    Count the scheduled work days of a position in [start, end] and the standard
    hours they add up to (daily_hours per scheduled day).

    An empty or missing work_days set schedules nothing: (0, 0). Callers must not
    derive an hourly rate from a zero result.
    """
    if start > end:
        raise ValidationFailed("start_date must be <= end_date")

    wanted = {_fold(w) for w in (work_days or []) if w}
    if not wanted:
        return ScheduleSummary(Decimal("0"), 0)

    per_day = Decimal(str(daily_hours or 0))
    total = Decimal("0")
    days = 0
    for d in each_day(start, end):
        if _fold(weekday_name(d)) in wanted:
            total += per_day
            days += 1
    return ScheduleSummary(total, days)
