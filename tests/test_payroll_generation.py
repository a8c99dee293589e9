from datetime import date, time
from decimal import Decimal

import pytest

from payroll_api.common.errors import Conflict, InvalidComputation, NotFound, ValidationFailed
from payroll_api.models.payroll.payroll import Payroll, PayrollState
from payroll_api.services.payroll_generator import GenerationRequest, generate_payrolls
from payroll_api.services.payroll_scope import DEPARTMENT, EMPLOYEE, GENERAL, POSITION

from conftest import (
    full_week, mk_attendance, mk_catalog, mk_department, mk_employee, mk_payroll, mk_position,
)


def _req(ded=None, per=None, start="2024-01-01", end="2024-01-05"):
    body = {"period": "Enero 2024 S1", "start_date": start, "end_date": end, "payment_date": "2024-01-06"}
    if ded is not None:
        body["deductions"] = ded
    if per is not None:
        body["perceptions"] = per
    return GenerationRequest.from_json(body)


def test_request_validation():
    with pytest.raises(ValidationFailed):
        GenerationRequest.from_json({"period": "x", "start_date": "2024-01-01"})
    with pytest.raises(ValidationFailed):
        _req(start="2024-01-10", end="2024-01-01")
    with pytest.raises(ValidationFailed):
        _req(ded="1")
    with pytest.raises(ValidationFailed):
        _req(start="2024-13-40")


def test_employee_payroll_figures(session):
    d, p = mk_department(), mk_position()
    emp = mk_employee(d, p, "V-20")
    full_week(emp)
    mk_attendance(emp, date(2024, 1, 5), time(16, 0), time(20, 0))  # 4h extra on Friday
    ded, per = mk_catalog()

    res = generate_payrolls(EMPLOYEE, emp.id, _req([ded.id], [per.id]))
    assert res.outcome == "created"
    [pr] = res.payrolls
    assert pr.state == PayrollState.GENERATED
    assert pr.overtime_hours == Decimal("4")
    assert pr.gross_salary == Decimal("530")
    assert pr.net_salary == Decimal("500")
    assert pr.base_salary == Decimal("400")
    assert [x.id for x in pr.deductions] == [ded.id]
    assert [x.id for x in pr.perceptions] == [per.id]


def test_employee_scope_overlap_is_a_hard_conflict(session):
    emp = mk_employee(mk_department(), mk_position(), "V-21")
    mk_payroll(emp, date(2024, 1, 5), date(2024, 1, 20))

    with pytest.raises(Conflict):
        generate_payrolls(EMPLOYEE, emp.id, _req())
    assert Payroll.query.count() == 1


def test_unknown_targets_are_not_found(session):
    with pytest.raises(NotFound):
        generate_payrolls(EMPLOYEE, 999, _req())
    with pytest.raises(NotFound):
        generate_payrolls(DEPARTMENT, 999, _req())
    with pytest.raises(NotFound):
        generate_payrolls(POSITION, 999, _req())


def test_unknown_catalog_ids_reject_the_request(session):
    emp = mk_employee(mk_department(), mk_position(), "V-22")
    with pytest.raises(ValidationFailed) as exc:
        generate_payrolls(EMPLOYEE, emp.id, _req(ded=[42]))
    assert exc.value.payload["deductions"] == [42]
    assert Payroll.query.count() == 0


def test_department_partial_batch(session):
    d, p = mk_department(), mk_position()
    a = mk_employee(d, p, "V-23")
    b = mk_employee(d, p, "V-24", name="Luis")
    full_week(a)
    full_week(b)
    mk_payroll(b, date(2024, 1, 1), date(2024, 1, 3))

    res = generate_payrolls(DEPARTMENT, d.id, _req())
    assert res.outcome == "partial"
    assert [x.employee_id for x in res.payrolls] == [a.id]
    assert res.errors == [{"employee_id": b.id, "code": "OVERLAP",
                           "message": f"Employee {b.id} already has a payroll in the given date range"}]
    # b keeps only its old payroll
    assert Payroll.query.filter_by(employee_id=b.id).count() == 1


def test_batch_where_everyone_fails_writes_nothing(session):
    d, p = mk_department(), mk_position()
    a = mk_employee(d, p, "V-25")
    mk_payroll(a, date(2024, 1, 1), date(2024, 1, 31))

    with pytest.raises(Conflict) as exc:
        generate_payrolls(DEPARTMENT, d.id, _req())
    assert [e["code"] for e in exc.value.errors] == ["OVERLAP"]
    assert Payroll.query.count() == 1


def test_general_scope_reports_invalid_computation_per_employee(session):
    d = mk_department()
    ok_pos = mk_position()
    no_days = mk_position(name="Guardia", work_days=[])
    good = mk_employee(d, ok_pos, "V-26")
    bad = mk_employee(d, no_days, "V-27", name="Jose")
    full_week(good)
    full_week(bad)

    res = generate_payrolls(GENERAL, None, _req())
    assert [x.employee_id for x in res.payrolls] == [good.id]
    assert [(e["employee_id"], e["code"]) for e in res.errors] == [(bad.id, "INVALID_COMPUTATION")]


def test_employee_scope_invalid_computation_is_raised(session):
    emp = mk_employee(mk_department(), mk_position(work_days=[]), "V-28")
    mk_attendance(emp, date(2024, 1, 2))
    with pytest.raises(InvalidComputation):
        generate_payrolls(EMPLOYEE, emp.id, _req())


def test_no_schedule_and_no_attendance_yields_zero_gross(session):
    emp = mk_employee(mk_department(), mk_position(work_days=[]), "V-29")
    ded, _ = mk_catalog(ded_amount=15)
    [pr] = generate_payrolls(EMPLOYEE, emp.id, _req(ded=[ded.id])).payrolls
    assert pr.gross_salary == 0
    assert pr.net_salary == Decimal("-15")


def test_position_scope_with_no_employees_creates_nothing(session):
    pos = mk_position()
    res = generate_payrolls(POSITION, pos.id, _req())
    assert res.payrolls == [] and res.errors == []
    assert res.outcome == "created"
