from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from payroll_api.common.errors import Conflict, NotFound, ValidationFailed
from payroll_api.common.parsing import parse_date, parse_id_list
from payroll_api.extensions import db
from payroll_api.models.master import Position
from payroll_api.models.payroll.payroll import Payroll, PayrollState
from payroll_api.services.payroll_generator import catalog_total, compute_figures, load_catalog
from payroll_api.services.payroll_overlap import find_overlapping, lock_employees
from payroll_api.services.payroll_scope import DEPARTMENT, GENERAL, POSITION, resolve_employees

log = logging.getLogger(__name__)

OVERLAP = "OVERLAP"
MULTIPLE_PAYROLLS = "MULTIPLE_PAYROLLS"
INVALID_PERIOD = "INVALID_PERIOD"


@dataclass
class PayrollEdit:
    """Partial update: only fields present in the request body are applied."""
    period: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    payment_date: Optional[date] = None
    deduction_ids: Optional[List[int]] = None
    perception_ids: Optional[List[int]] = None
    state: Optional[str] = None

    @classmethod
    def from_json(cls, j: Dict[str, Any]) -> "PayrollEdit":
        j = j or {}
        out = cls()
        if j.get("period"):
            out.period = str(j["period"]).strip()
        for key in ("start_date", "end_date", "payment_date"):
            if j.get(key):
                d = parse_date(j[key])
                if d is None:
                    raise ValidationFailed(f"{key} must be YYYY-MM-DD")
                setattr(out, key, d)
        if out.start_date and out.end_date and out.start_date > out.end_date:
            raise ValidationFailed("start_date must be <= end_date")
        try:
            out.deduction_ids = parse_id_list(j.get("deductions"))
            out.perception_ids = parse_id_list(j.get("perceptions"))
        except (TypeError, ValueError):
            raise ValidationFailed("deductions and perceptions must be lists of ids")
        if j.get("state"):
            if j["state"] not in PayrollState.ALL:
                raise ValidationFailed(f"state must be one of {', '.join(PayrollState.ALL)}")
            out.state = j["state"]
        return out

    @property
    def changes_dates(self) -> bool:
        return self.start_date is not None or self.end_date is not None

    @property
    def changes_catalog(self) -> bool:
        return self.deduction_ids is not None or self.perception_ids is not None

    def interval_for(self, p: Payroll) -> Tuple[date, date]:
        return (self.start_date or p.start_date, self.end_date or p.end_date)


@dataclass
class EditResult:
    updated: List[Payroll] = field(default_factory=list)
    skipped_terminal: int = 0


def _error(p: Payroll, code: str, message: str) -> Dict[str, Any]:
    return {"payroll_id": p.id, "employee_id": p.employee_id, "code": code, "message": message}


def _get_payroll(payroll_id: int) -> Payroll:
    p = db.session.get(Payroll, payroll_id)
    if p is None:
        raise NotFound(f"Payroll {payroll_id} not found")
    return p


def _validate_intervals(targets: List[Payroll], edit: PayrollEdit) -> List[Dict[str, Any]]:
    """
    Check every payroll about to move against (a) stored payrolls of the same
    employee outside the update set and (b) the new intervals of the other
    payrolls of that employee inside the update set. Read-only.
    """
    errors: List[Dict[str, Any]] = []
    if not edit.changes_dates:
        return errors

    moving = {p.id: edit.interval_for(p) for p in targets}
    by_employee: Dict[int, List[Payroll]] = defaultdict(list)
    for p in targets:
        by_employee[p.employee_id].append(p)

    for p in targets:
        start, end = moving[p.id]
        if start > end:
            errors.append(_error(p, INVALID_PERIOD,
                                 f"Payroll {p.id}: start_date {start} is after end_date {end}"))
            continue
        clash = [o for o in find_overlapping(p.employee_id, start, end, exclude_payroll_id=p.id)
                 if o.id not in moving]
        clash += [o for o in by_employee[p.employee_id]
                  if o.id != p.id and moving[o.id][0] <= end and moving[o.id][1] >= start]
        if clash:
            errors.append(_error(p, OVERLAP,
                                 f"Dates collide with existing payrolls for employee {p.employee_id}"))
    return errors


def _apply(p: Payroll, edit: PayrollEdit, deductions, perceptions) -> None:
    if edit.period:
        p.period = edit.period
    if edit.start_date:
        p.start_date = edit.start_date
    if edit.end_date:
        p.end_date = edit.end_date
    if edit.payment_date:
        p.payment_date = edit.payment_date
    if edit.deduction_ids is not None:
        p.deductions = list(deductions)
    if edit.perception_ids is not None:
        p.perceptions = list(perceptions)
    if edit.state:
        p.state = edit.state


def edit_payroll(payroll_id: int, edit: PayrollEdit) -> Payroll:
    """
    Edit one payroll and recompute its overtime, gross and net salary over the
    (possibly new) period. Paid or cancelled payrolls are rejected; an edit that
    moves a payroll to Pagada or Cancelada keeps the stored figures.
    """
    p = _get_payroll(payroll_id)
    if p.is_terminal:
        raise Conflict(f"Payroll {p.id} is {p.state} and cannot be edited")

    start, end = edit.interval_for(p)
    if start > end:
        raise ValidationFailed("start_date must be <= end_date")

    lock_employees([p.employee_id])
    errors = _validate_intervals([p], edit)
    if errors:
        db.session.rollback()
        raise Conflict(errors[0]["message"], errors=errors)

    deductions = p.deductions
    perceptions = p.perceptions
    if edit.changes_catalog:
        new_d, new_p = load_catalog(edit.deduction_ids or [], edit.perception_ids or [])
        if edit.deduction_ids is not None:
            deductions = new_d
        if edit.perception_ids is not None:
            perceptions = new_p

    # a payroll being closed keeps its last figures
    figures = None
    if edit.state not in PayrollState.TERMINAL:
        emp = p.employee
        position = emp.position or db.session.get(Position, emp.position_id)
        if position is None:
            raise NotFound(f"Position {emp.position_id} not found")
        # raises InvalidComputation before anything is touched
        figures = compute_figures(emp, position, start, end,
                                  catalog_total(deductions), catalog_total(perceptions))

    _apply(p, edit, deductions, perceptions)
    if figures is not None:
        p.overtime_hours = figures.salary.overtime_hours
        p.gross_salary = figures.salary.adjusted_gross_salary
        p.net_salary = figures.salary.net_salary
    db.session.commit()
    log.info("payroll %s edited (employee %s, %s..%s)", p.id, p.employee_id, p.start_date, p.end_date)
    return p


def _payrolls_in_scope(scope: str, target_id: Optional[int]) -> List[Payroll]:
    # terminal rows are kept here so the caller can count what it skips
    if scope == GENERAL:
        return Payroll.query.order_by(Payroll.id.asc()).all()
    employees = resolve_employees(scope, target_id)
    if scope in (DEPARTMENT, POSITION) and not employees:
        raise NotFound(f"No employees found for {scope} {target_id}")
    ids = [e.id for e in employees]
    if not ids:
        return []
    return (Payroll.query
            .filter(Payroll.employee_id.in_(ids))
            .order_by(Payroll.id.asc())
            .all())


def edit_payrolls(scope: str, target_id: Optional[int], edit: PayrollEdit) -> EditResult:
    """
    Apply `edit` to every non-terminal payroll of the scope (general, employee,
    department, position). Paid/cancelled payrolls are skipped silently.

    All payrolls are validated first; if any of them conflicts (overlap, or for
    department/position scopes an employee holding several open payrolls) no
    payroll is modified and Conflict carries the full error list.
    """
    deductions, perceptions = [], []
    if edit.changes_catalog:
        deductions, perceptions = load_catalog(edit.deduction_ids or [], edit.perception_ids or [])

    in_scope = _payrolls_in_scope(scope, target_id)
    targets = [p for p in in_scope if not p.is_terminal]
    skipped = len(in_scope) - len(targets)

    lock_employees({p.employee_id for p in targets})

    errors: List[Dict[str, Any]] = []
    if scope in (DEPARTMENT, POSITION):
        open_by_employee: Dict[int, List[Payroll]] = defaultdict(list)
        for p in targets:
            open_by_employee[p.employee_id].append(p)
        single = []
        for emp_id, rows in open_by_employee.items():
            if len(rows) > 1:
                errors.append({"payroll_id": None, "employee_id": emp_id, "code": MULTIPLE_PAYROLLS,
                               "message": f"Employee {emp_id} has multiple payrolls"})
            else:
                single.extend(rows)
        errors += _validate_intervals(single, edit)
    else:
        errors += _validate_intervals(targets, edit)

    if errors:
        db.session.rollback()
        log.warning("batch edit (%s %s) rejected: %d conflict(s)", scope, target_id or "", len(errors))
        raise Conflict("Some payrolls could not be updated; nothing was changed", errors=errors)

    for p in targets:
        _apply(p, edit, deductions, perceptions)
    db.session.commit()
    log.info("batch edit (%s %s): %d updated, %d terminal skipped",
             scope, target_id or "", len(targets), skipped)
    return EditResult(updated=targets, skipped_terminal=skipped)


def delete_payroll(payroll_id: int) -> None:
    p = _get_payroll(payroll_id)
    if p.is_terminal:
        raise Conflict(f"Payroll {p.id} is {p.state} and cannot be deleted")
    db.session.delete(p)
    db.session.commit()
    log.info("payroll %s deleted", payroll_id)


def delete_payrolls(scope: str, target_id: Optional[int]) -> int:
    """Delete every non-terminal payroll in scope. Returns how many were deleted."""
    if scope == GENERAL:
        rows = Payroll.query.filter(Payroll.state.notin_(PayrollState.TERMINAL)).all()
    else:
        ids = [e.id for e in resolve_employees(scope, target_id)]
        rows = (Payroll.query
                .filter(Payroll.employee_id.in_(ids))
                .filter(Payroll.state.notin_(PayrollState.TERMINAL))
                .all()) if ids else []
    for p in rows:
        db.session.delete(p)
    db.session.commit()
    log.info("batch delete (%s %s): %d payroll(s) deleted", scope, target_id or "", len(rows))
    return len(rows)
