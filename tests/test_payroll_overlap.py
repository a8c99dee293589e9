from datetime import date

from payroll_api.models.payroll.payroll import PayrollState
from payroll_api.services.payroll_overlap import find_overlapping, has_overlap, lock_employees

from conftest import mk_department, mk_employee, mk_payroll, mk_position


def test_inclusive_bounds(session):
    emp = mk_employee(mk_department(), mk_position(), "V-10")
    mk_payroll(emp, date(2024, 1, 1), date(2024, 1, 15))

    assert has_overlap(emp.id, date(2024, 1, 15), date(2024, 1, 31))
    assert has_overlap(emp.id, date(2023, 12, 20), date(2024, 1, 1))
    assert not has_overlap(emp.id, date(2024, 1, 16), date(2024, 1, 31))


def test_any_state_blocks_the_period(session):
    emp = mk_employee(mk_department(), mk_position(), "V-11")
    mk_payroll(emp, date(2024, 1, 1), date(2024, 1, 15), state=PayrollState.PAID)
    assert has_overlap(emp.id, date(2024, 1, 10), date(2024, 1, 20))


def test_other_employees_and_excluded_id_do_not_count(session):
    d, p = mk_department(), mk_position()
    a = mk_employee(d, p, "V-12")
    b = mk_employee(d, p, "V-13", name="Luis")
    own = mk_payroll(a, date(2024, 1, 1), date(2024, 1, 15))
    mk_payroll(b, date(2024, 1, 1), date(2024, 1, 15))

    assert not has_overlap(a.id, date(2024, 1, 1), date(2024, 1, 15), exclude_payroll_id=own.id)
    assert [x.employee_id for x in find_overlapping(b.id, date(2024, 1, 5), date(2024, 1, 6))] == [b.id]


def test_lock_employees_accepts_empty_and_generators(session):
    emp = mk_employee(mk_department(), mk_position(), "V-14")
    lock_employees([])
    lock_employees(i for i in [emp.id, emp.id])
