# payroll_api/blueprints/payrolls.py
from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, request, current_app

from payroll_api.common.auth import requires_roles
from payroll_api.common.errors import NotFound
from payroll_api.common.http import ok, fail, multi_status
from payroll_api.common.paging import paginate
from payroll_api.common.parsing import parse_date
from payroll_api.extensions import db
from payroll_api.models.payroll.payroll import Payroll
from payroll_api.services.payroll_generator import GenerationRequest, generate_payrolls
from payroll_api.services.payroll_lifecycle import (
    PayrollEdit, edit_payroll, edit_payrolls, delete_payroll, delete_payrolls,
)
from payroll_api.services.payroll_scope import (
    GENERAL, EMPLOYEE, DEPARTMENT, POSITION, resolve_employees,
)

bp = Blueprint("payrolls", __name__, url_prefix="/api/v1/payrolls")

PAYROLL_ROLES = ("admin_principal", "admin_nomina")


# ---------- row shape ----------
def _money(v):
    return float(v) if v is not None else None

def _row(p: Payroll) -> Dict[str, Any]:
    emp = p.employee
    return {
        "id": p.id,
        "employee_id": p.employee_id,
        "employee_ci": emp.ci if emp else None,
        "employee_name": emp.full_name if emp else None,
        "period": p.period,
        "start_date": p.start_date.isoformat() if p.start_date else None,
        "end_date": p.end_date.isoformat() if p.end_date else None,
        "payment_date": p.payment_date.isoformat() if p.payment_date else None,
        "base_salary": _money(p.base_salary),
        "overtime_hours": _money(p.overtime_hours),
        "deductions": [d.id for d in p.deductions],
        "perceptions": [x.id for x in p.perceptions],
        "gross_salary": _money(p.gross_salary),
        "net_salary": _money(p.net_salary),
        "state": p.state,
        "export_file": p.export_file,
        "created_at": p.created_at.isoformat() if p.created_at else None,
        "updated_at": p.updated_at.isoformat() if p.updated_at else None,
    }


def _body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ---------- generation ----------
def _generate(scope: str, target_id=None):
    req = GenerationRequest.from_json(_body())
    result = generate_payrolls(scope, target_id, req)
    rows = [_row(p) for p in result.payrolls]
    if result.outcome == "partial":
        current_app.logger.warning("payroll generation (%s %s) partially failed: %d error(s)",
                                   scope, target_id or "", len(result.errors))
        return multi_status(rows, result.errors, "Some payrolls were generated with errors")
    return ok({"payrolls": rows, "errors": result.errors}, 201, message="Payrolls generated")


@bp.post("/generate/general")
@requires_roles(*PAYROLL_ROLES)
def generate_general():
    return _generate(GENERAL)


@bp.post("/generate/employee/<int:employee_id>")
@requires_roles(*PAYROLL_ROLES)
def generate_employee(employee_id: int):
    return _generate(EMPLOYEE, employee_id)


@bp.post("/generate/department/<int:department_id>")
@requires_roles(*PAYROLL_ROLES)
def generate_department(department_id: int):
    return _generate(DEPARTMENT, department_id)


@bp.post("/generate/position/<int:position_id>")
@requires_roles(*PAYROLL_ROLES)
def generate_position(position_id: int):
    return _generate(POSITION, position_id)


# ---------- edit ----------
def _edit(scope: str, target_id=None):
    result = edit_payrolls(scope, target_id, PayrollEdit.from_json(_body()))
    return ok({"payrolls": [_row(p) for p in result.updated]},
              updated=len(result.updated), skipped_terminal=result.skipped_terminal)


@bp.put("/edit/general")
@requires_roles(*PAYROLL_ROLES)
def edit_general():
    return _edit(GENERAL)


@bp.put("/edit/employee/<int:employee_id>")
@requires_roles(*PAYROLL_ROLES)
def edit_employee(employee_id: int):
    return _edit(EMPLOYEE, employee_id)


@bp.put("/edit/department/<int:department_id>")
@requires_roles(*PAYROLL_ROLES)
def edit_department(department_id: int):
    return _edit(DEPARTMENT, department_id)


@bp.put("/edit/position/<int:position_id>")
@requires_roles(*PAYROLL_ROLES)
def edit_position(position_id: int):
    return _edit(POSITION, position_id)


@bp.put("/edit/<int:payroll_id>")
@requires_roles(*PAYROLL_ROLES)
def edit_single(payroll_id: int):
    p = edit_payroll(payroll_id, PayrollEdit.from_json(_body()))
    return ok(_row(p))


# ---------- delete ----------
@bp.delete("/delete/general")
@requires_roles(*PAYROLL_ROLES)
def delete_general():
    return ok({"deleted_count": delete_payrolls(GENERAL, None)})


@bp.delete("/delete/employee/<int:employee_id>")
@requires_roles(*PAYROLL_ROLES)
def delete_employee(employee_id: int):
    return ok({"deleted_count": delete_payrolls(EMPLOYEE, employee_id)})


@bp.delete("/delete/department/<int:department_id>")
@requires_roles(*PAYROLL_ROLES)
def delete_department(department_id: int):
    return ok({"deleted_count": delete_payrolls(DEPARTMENT, department_id)})


@bp.delete("/delete/position/<int:position_id>")
@requires_roles(*PAYROLL_ROLES)
def delete_position(position_id: int):
    return ok({"deleted_count": delete_payrolls(POSITION, position_id)})


@bp.delete("/delete/<int:payroll_id>")
@requires_roles(*PAYROLL_ROLES)
def delete_single(payroll_id: int):
    delete_payroll(payroll_id)
    return ok({"deleted": payroll_id})


# ---------- queries ----------
def _listing(qry):
    qry = qry.order_by(Payroll.payment_date.desc(), Payroll.id.desc())
    rows, meta = paginate(qry)
    return ok([_row(p) for p in rows], **meta)


def _for_employees(scope: str, target_id: int):
    ids = [e.id for e in resolve_employees(scope, target_id)]
    return Payroll.query.filter(Payroll.employee_id.in_(ids))


@bp.get("")
@requires_roles(*PAYROLL_ROLES)
def list_payrolls():
    qry = Payroll.query
    state = request.args.get("state")
    if state:
        qry = qry.filter(Payroll.state == state)
    return _listing(qry)


@bp.get("/<int:payroll_id>")
@requires_roles(*PAYROLL_ROLES)
def get_payroll(payroll_id: int):
    p = db.session.get(Payroll, payroll_id)
    if p is None:
        raise NotFound(f"Payroll {payroll_id} not found")
    return ok(_row(p))


@bp.get("/department/<int:department_id>")
@requires_roles(*PAYROLL_ROLES)
def list_by_department(department_id: int):
    return _listing(_for_employees(DEPARTMENT, department_id))


@bp.get("/position/<int:position_id>")
@requires_roles(*PAYROLL_ROLES)
def list_by_position(position_id: int):
    return _listing(_for_employees(POSITION, position_id))


@bp.get("/employee/<int:employee_id>")
@requires_roles(*PAYROLL_ROLES)
def list_by_employee(employee_id: int):
    return _listing(_for_employees(EMPLOYEE, employee_id))


@bp.get("/date/<day>")
@requires_roles(*PAYROLL_ROLES)
def list_by_payment_date(day: str):
    d = parse_date(day)
    if d is None:
        return fail("date must be YYYY-MM-DD", 422)
    return _listing(Payroll.query.filter(Payroll.payment_date == d))


@bp.get("/date-range/<start>/<end>")
@requires_roles(*PAYROLL_ROLES)
def list_by_payment_range(start: str, end: str):
    s, e = parse_date(start), parse_date(end)
    if not (s and e):
        return fail("dates must be YYYY-MM-DD", 422)
    if s > e:
        return fail("start_date must be <= end_date", 422)
    return _listing(Payroll.query.filter(Payroll.payment_date >= s, Payroll.payment_date <= e))
