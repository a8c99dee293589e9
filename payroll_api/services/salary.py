from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from payroll_api.common.errors import InvalidComputation

CENT = Decimal("0.01")
ZERO = Decimal("0")


def _d(x) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x or 0))


def money(x: Decimal) -> Decimal:
    return x.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SalaryBreakdown:
    overtime_hours: Decimal
    hourly_rate: Decimal
    salary_adjustment: Decimal
    gross_salary: Decimal
    adjusted_gross_salary: Decimal
    net_salary: Decimal


def calculate_salary(base_salary, standard_hours, worked_hours,
                     total_deductions=ZERO, total_perceptions=ZERO) -> SalaryBreakdown:
    """
    Salary for one employee over one period.

        overtime          = max(worked - standard, 0)
        hourly_rate       = base / standard
        salary_adjustment = (standard - worked) * hourly_rate
        gross             = base + overtime * hourly_rate + perceptions
        adjusted_gross    = 0 if worked == 0 else gross - salary_adjustment
        net               = adjusted_gross - deductions

    Note: when worked > standard the adjustment is negative, so overtime is
    credited twice (once in gross, once through the adjustment). Kept as is
    for compatibility with payrolls already issued; do not change without
    product sign-off.

    Raises InvalidComputation when hours were worked against a zero standard
    (no hourly rate can be derived) or when any result is not a number.
    """
    base = _d(base_salary)
    standard = _d(standard_hours)
    worked = _d(worked_hours)
    deductions = _d(total_deductions)
    perceptions = _d(total_perceptions)

    for label, v in (("base_salary", base), ("standard_hours", standard), ("worked_hours", worked),
                     ("deductions", deductions), ("perceptions", perceptions)):
        if v.is_nan():
            raise InvalidComputation(f"{label} is not a number")

    overtime = max(worked - standard, ZERO)

    if worked == 0:
        # nothing worked: nothing earned, deductions still apply
        return SalaryBreakdown(
            overtime_hours=money(overtime),
            hourly_rate=money(base / standard) if standard else ZERO,
            salary_adjustment=money(base) if standard else ZERO,
            gross_salary=money(base + perceptions),
            adjusted_gross_salary=money(ZERO),
            net_salary=money(ZERO - deductions),
        )

    if standard == 0:
        raise InvalidComputation("no scheduled hours in period; hourly rate is undefined")

    hourly_rate = base / standard
    salary_adjustment = (standard - worked) * hourly_rate
    gross = base + overtime * hourly_rate + perceptions
    adjusted_gross = gross - salary_adjustment
    net = adjusted_gross - deductions

    if adjusted_gross.is_nan() or net.is_nan():
        raise InvalidComputation("salary computation produced a non-numeric result")

    return SalaryBreakdown(
        overtime_hours=money(overtime),
        hourly_rate=money(hourly_rate),
        salary_adjustment=money(salary_adjustment),
        gross_salary=money(gross),
        adjusted_gross_salary=money(adjusted_gross),
        net_salary=money(net),
    )
