from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from payroll_api.common.errors import Conflict, InvalidComputation, NotFound, ValidationFailed
from payroll_api.common.parsing import parse_date, parse_id_list
from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.master import Department, Position
from payroll_api.models.payroll.catalogs import Deduction, Perception
from payroll_api.models.payroll.payroll import Payroll, PayrollState
from payroll_api.services.attendance_hours import worked_hours
from payroll_api.services.payroll_overlap import has_overlap, lock_employees
from payroll_api.services.payroll_scope import EMPLOYEE, resolve_employees
from payroll_api.services.salary import SalaryBreakdown, calculate_salary
from payroll_api.services.schedule import ScheduleSummary, evaluate_schedule

log = logging.getLogger(__name__)

# per-employee error codes
OVERLAP = "OVERLAP"
POSITION_NOT_FOUND = "POSITION_NOT_FOUND"
INVALID_COMPUTATION = "INVALID_COMPUTATION"


@dataclass
class GenerationRequest:
    period: str
    start_date: date
    end_date: date
    payment_date: date
    deduction_ids: List[int] = field(default_factory=list)
    perception_ids: List[int] = field(default_factory=list)

    @classmethod
    def from_json(cls, j: Dict[str, Any]) -> "GenerationRequest":
        j = j or {}
        period = j.get("period")
        if isinstance(period, str):
            period = period.strip()
        if not (period and j.get("start_date") and j.get("end_date") and j.get("payment_date")):
            raise ValidationFailed("period, start_date, end_date, payment_date are required")

        start, end, pay = parse_date(j["start_date"]), parse_date(j["end_date"]), parse_date(j["payment_date"])
        if not (start and end and pay):
            raise ValidationFailed("dates must be YYYY-MM-DD")
        if start > end:
            raise ValidationFailed("start_date must be <= end_date")

        try:
            ded = parse_id_list(j.get("deductions")) or []
            per = parse_id_list(j.get("perceptions")) or []
        except (TypeError, ValueError):
            raise ValidationFailed("deductions and perceptions must be lists of ids")
        return cls(str(period), start, end, pay, ded, per)


@dataclass
class PayrollFigures:
    schedule: ScheduleSummary
    worked_hours: Decimal
    salary: SalaryBreakdown


@dataclass
class GenerationResult:
    payrolls: List[Payroll]
    errors: List[Dict[str, Any]]

    @property
    def outcome(self) -> str:
        if not self.errors:
            return "created"
        return "partial" if self.payrolls else "failed"


def _error(employee_id: int, code: str, message: str) -> Dict[str, Any]:
    return {"employee_id": employee_id, "code": code, "message": message}


def load_catalog(deduction_ids: Sequence[int], perception_ids: Sequence[int]):
    """Resolve deduction/perception ids. Unknown ids are a validation error."""
    deductions = Deduction.query.filter(Deduction.id.in_(deduction_ids)).all() if deduction_ids else []
    perceptions = Perception.query.filter(Perception.id.in_(perception_ids)).all() if perception_ids else []

    missing_d = sorted(set(deduction_ids) - {d.id for d in deductions})
    missing_p = sorted(set(perception_ids) - {p.id for p in perceptions})
    if missing_d or missing_p:
        raise ValidationFailed("unknown deductions/perceptions",
                               payload={"deductions": missing_d, "perceptions": missing_p})
    return deductions, perceptions


def catalog_total(items) -> Decimal:
    return sum((Decimal(str(x.amount or 0)) for x in items), Decimal("0"))


def compute_figures(employee: Employee, position: Position, start: date, end: date,
                    total_deductions: Decimal, total_perceptions: Decimal) -> PayrollFigures:
    """Schedule + attendance + salary for one employee over [start, end]."""
    sched = evaluate_schedule(position.work_days, position.daily_hours, start, end)
    hours = worked_hours(employee.id, start, end)
    salary = calculate_salary(employee.base_salary, sched.standard_hours, hours,
                              total_deductions, total_perceptions)
    return PayrollFigures(sched, hours, salary)


def _build_payroll(emp: Employee, req: GenerationRequest, deductions, perceptions) -> Payroll:
    position = emp.position or db.session.get(Position, emp.position_id)
    if position is None:
        raise NotFound(f"Position {emp.position_id} not found")

    figures = compute_figures(emp, position, req.start_date, req.end_date,
                              catalog_total(deductions), catalog_total(perceptions))
    return Payroll(
        employee_id=emp.id,
        period=req.period,
        start_date=req.start_date,
        end_date=req.end_date,
        payment_date=req.payment_date,
        base_salary=emp.base_salary,
        overtime_hours=figures.salary.overtime_hours,
        gross_salary=figures.salary.adjusted_gross_salary,
        net_salary=figures.salary.net_salary,
        state=PayrollState.GENERATED,
        deductions=list(deductions),
        perceptions=list(perceptions),
    )


def _check_employee_refs(emp: Employee) -> None:
    if db.session.get(Department, emp.department_id) is None:
        raise NotFound(f"Department {emp.department_id} not found")
    if db.session.get(Position, emp.position_id) is None:
        raise NotFound(f"Position {emp.position_id} not found")


def generate_payrolls(scope: str, target_id: Optional[int], req: GenerationRequest) -> GenerationResult:
    """
    Generate one Generada payroll per targeted employee for req's period.

    Employees with an overlapping payroll or an uncomputable salary are skipped
    and reported in `errors`; the rest are written in one commit. Single-employee
    scope turns those skips into hard errors. If every candidate was skipped
    nothing is written and Conflict is raised with the error list.
    """
    employees = resolve_employees(scope, target_id)
    if scope == EMPLOYEE:
        _check_employee_refs(employees[0])

    deductions, perceptions = load_catalog(req.deduction_ids, req.perception_ids)
    lock_employees(e.id for e in employees)

    built: List[Payroll] = []
    errors: List[Dict[str, Any]] = []
    for emp in employees:
        if has_overlap(emp.id, req.start_date, req.end_date):
            log.warning("payroll skipped: employee %s already has a payroll overlapping %s..%s",
                        emp.id, req.start_date, req.end_date)
            errors.append(_error(emp.id, OVERLAP,
                                 f"Employee {emp.id} already has a payroll in the given date range"))
            continue
        try:
            built.append(_build_payroll(emp, req, deductions, perceptions))
        except InvalidComputation as e:
            log.warning("payroll skipped: employee %s: %s", emp.id, e.message)
            errors.append(_error(emp.id, INVALID_COMPUTATION, f"Employee {emp.id}: {e.message}"))
        except NotFound as e:
            errors.append(_error(emp.id, POSITION_NOT_FOUND, f"Employee {emp.id}: {e.message}"))

    if scope == EMPLOYEE and errors:
        db.session.rollback()
        err = errors[0]
        if err["code"] == INVALID_COMPUTATION:
            raise InvalidComputation(err["message"], payload=err)
        if err["code"] == POSITION_NOT_FOUND:
            raise NotFound(err["message"], payload=err)
        raise Conflict(err["message"], errors=errors)

    if errors and not built:
        db.session.rollback()
        raise Conflict("No payrolls were generated", errors=errors)

    db.session.add_all(built)
    db.session.commit()
    log.info("generated %d payroll(s) for %s %s (%s..%s), %d skipped",
             len(built), scope, target_id if target_id is not None else "", req.start_date,
             req.end_date, len(errors))
    return GenerationResult(built, errors)
