from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.payroll.payroll import Payroll


def _overlap_query(employee_id: int, start: date, end: date, exclude_payroll_id: Optional[int] = None):
    # inclusive bounds: [1..15] and [15..20] overlap, [1..15] and [16..31] do not
    q = (
        Payroll.query
        .filter(Payroll.employee_id == employee_id)
        .filter(Payroll.start_date <= end, Payroll.end_date >= start)
    )
    if exclude_payroll_id is not None:
        q = q.filter(Payroll.id != exclude_payroll_id)
    return q


def has_overlap(employee_id: int, start: date, end: date, exclude_payroll_id: Optional[int] = None) -> bool:
    return _overlap_query(employee_id, start, end, exclude_payroll_id).first() is not None


def find_overlapping(employee_id: int, start: date, end: date, exclude_payroll_id: Optional[int] = None) -> List[Payroll]:
    return _overlap_query(employee_id, start, end, exclude_payroll_id).order_by(Payroll.start_date).all()


def lock_employees(employee_ids: Iterable[int]) -> None:
    """
    Row-lock the given employees (SELECT ... FOR UPDATE, id order) for the rest
    of the transaction so two requests cannot both pass the overlap check for
    the same employee and then both commit. No-op on SQLite.
    """
    ids = sorted({int(i) for i in employee_ids})
    if not ids:
        return
    # id column only: no eager joins next to FOR UPDATE
    (db.session.query(Employee.id)
     .filter(Employee.id.in_(ids))
     .order_by(Employee.id)
     .with_for_update()
     .all())
