import os
from datetime import date, time

import pytest

from payroll_api import create_app
from payroll_api.extensions import db
from payroll_api.models.attendance import Attendance
from payroll_api.models.employee import Employee
from payroll_api.models.employee_bank import BankAccount
from payroll_api.models.master import Bank, Company, Department, Position
from payroll_api.models.payroll.catalogs import Deduction, Perception
from payroll_api.models.payroll.payroll import Payroll, PayrollState

WEEKDAYS = ["lunes", "martes", "miércoles", "jueves", "viernes"]


@pytest.fixture(scope="function")
def app(tmp_path):
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app()
    app.config["TESTING"] = True
    app.config["PAYROLL_EXPORTS_DIR"] = str(tmp_path / "exports")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def session(app):
    yield db.session


# ---------- builders ----------
def mk_department(name="Operaciones"):
    d = Department(name=name, description=f"{name} dept", location="Caracas")
    db.session.add(d); db.session.commit()
    return d


def mk_position(name="Analista", work_days=None, daily_hours=8):
    p = Position(name=name, description=name, base_salary=400, daily_hours=daily_hours,
                 period="quincenal", work_days=WEEKDAYS if work_days is None else work_days)
    db.session.add(p); db.session.commit()
    return p


def mk_employee(dept, pos, ci, base_salary=400, name="Ana", surnames="Perez"):
    e = Employee(department_id=dept.id, position_id=pos.id, ci=ci, name=name, surnames=surnames,
                 email=f"{ci}@example.com", base_salary=base_salary, hire_date=date(2020, 1, 1),
                 gender="Femenino")
    db.session.add(e); db.session.commit()
    return e


def mk_attendance(emp, day, entry=time(8, 0), exit_=time(16, 0)):
    a = Attendance(employee_id=emp.id, date=day, entry_time=entry, exit_time=exit_)
    a.compute_hours()
    db.session.add(a); db.session.commit()
    return a


def full_week(emp, monday=date(2024, 1, 1)):
    """8h on each weekday Mon..Fri starting at `monday`."""
    for i in range(5):
        mk_attendance(emp, date(monday.year, monday.month, monday.day + i))


def mk_catalog(ded_amount=30, per_amount=50):
    d = Deduction(type="IVSS", description="Seguro social", amount=ded_amount, date=date(2024, 1, 1))
    p = Perception(type="Bono", description="Bono alimentacion", amount=per_amount, date=date(2024, 1, 1))
    db.session.add_all([d, p]); db.session.commit()
    return d, p


def mk_payroll(emp, start, end, state=PayrollState.GENERATED, net=100, payment=None):
    p = Payroll(employee_id=emp.id, period="test", start_date=start, end_date=end,
                payment_date=payment or end, base_salary=emp.base_salary, overtime_hours=0,
                gross_salary=net, net_salary=net, state=state)
    db.session.add(p); db.session.commit()
    return p


def mk_company():
    c = Company(name="Demo C.A.", address="Caracas", country="Venezuela", currency="VES",
                foundation_date=date(2000, 1, 1))
    db.session.add(c); db.session.commit()
    return c


def mk_bank(code="0102", name="Banco de Venezuela"):
    b = Bank(name=name, code=code)
    db.session.add(b); db.session.commit()
    return b


def mk_account(emp, bank, number, kind="Ahorros"):
    a = BankAccount(employee_id=emp.id, bank_id=bank.id, account_number=number, account_type=kind)
    db.session.add(a); db.session.commit()
    return a
