from __future__ import annotations

from datetime import date
from decimal import Decimal

from payroll_api.models.attendance import Attendance, hours_between


def worked_hours(employee_id: int, start: date, end: date) -> Decimal:
    """
    Sum of (exit_time - entry_time), in hours, over the employee's attendance
    records dated within [start, end].

    Always recomputed from the raw entry/exit times; the cached
    Attendance.hours_worked column is not trusted here. A record whose exit is
    before its entry contributes a negative amount.
    """
    rows = (
        Attendance.query
        .filter(Attendance.employee_id == employee_id)
        .filter(Attendance.date >= start, Attendance.date <= end)
        .all()
    )
    total = Decimal("0")
    for a in rows:
        total += hours_between(a.date, a.entry_time, a.exit_time)
    return total
