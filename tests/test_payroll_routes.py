import os
from datetime import date

import pytest
from flask_jwt_extended import create_access_token

from payroll_api.extensions import db
from payroll_api.models.payroll.payroll import Payroll, PayrollState
from payroll_api.models.user import User

from conftest import (
    full_week, mk_account, mk_bank, mk_company, mk_department, mk_employee, mk_payroll, mk_position,
)

BODY = {"period": "Enero 2024 S1", "start_date": "2024-01-01", "end_date": "2024-01-05",
        "payment_date": "2024-01-06"}


@pytest.fixture()
def client(app):
    return app.test_client()


def _auth(roles=("admin_nomina",)):
    token = create_access_token(identity="1", additional_claims={"roles": list(roles)})
    return {"Authorization": f"Bearer {token}"}


def test_routes_require_a_token(client):
    assert client.get("/api/v1/payrolls").status_code == 401


def test_routes_reject_other_roles(client):
    r = client.get("/api/v1/payrolls", headers=_auth(["empleado"]))
    assert r.status_code == 403
    assert r.get_json()["success"] is False


def test_generate_employee_then_list(client):
    emp = mk_employee(mk_department(), mk_position(), "V-80")
    full_week(emp)

    r = client.post(f"/api/v1/payrolls/generate/employee/{emp.id}", json=BODY, headers=_auth())
    assert r.status_code == 201
    data = r.get_json()["data"]
    assert data["errors"] == []
    [row] = data["payrolls"]
    assert row["employee_id"] == emp.id
    assert row["state"] == "Generada"
    assert row["net_salary"] == 400.0

    r = client.get(f"/api/v1/payrolls/employee/{emp.id}", headers=_auth(["admin_principal"]))
    body = r.get_json()
    assert r.status_code == 200
    assert body["meta"]["total"] == 1
    assert body["data"][0]["id"] == row["id"]


def test_partial_department_generation_is_207(client):
    d, p = mk_department(), mk_position()
    a = mk_employee(d, p, "V-81")
    b = mk_employee(d, p, "V-82", name="Luis")
    mk_payroll(b, date(2024, 1, 1), date(2024, 1, 31))

    r = client.post(f"/api/v1/payrolls/generate/department/{d.id}", json=BODY, headers=_auth())
    assert r.status_code == 207
    data = r.get_json()["data"]
    assert [x["employee_id"] for x in data["payrolls"]] == [a.id]
    assert [e["employee_id"] for e in data["errors"]] == [b.id]


def test_overlapping_employee_generation_is_409(client):
    emp = mk_employee(mk_department(), mk_position(), "V-83")
    mk_payroll(emp, date(2024, 1, 3), date(2024, 1, 10))

    r = client.post(f"/api/v1/payrolls/generate/employee/{emp.id}", json=BODY, headers=_auth())
    assert r.status_code == 409
    assert r.get_json()["error"]["code"] == "CONFLICT"


def test_generation_validation_is_422(client):
    r = client.post("/api/v1/payrolls/generate/general", json={"period": "x"}, headers=_auth())
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_missing_department_is_404(client):
    r = client.post("/api/v1/payrolls/generate/department/77", json=BODY, headers=_auth())
    assert r.status_code == 404


def test_edit_paid_payroll_is_409(client):
    emp = mk_employee(mk_department(), mk_position(), "V-84")
    pr = mk_payroll(emp, date(2024, 1, 1), date(2024, 1, 15), state=PayrollState.PAID)
    r = client.put(f"/api/v1/payrolls/edit/{pr.id}", json={"period": "x"}, headers=_auth())
    assert r.status_code == 409


def test_batch_edit_conflict_lists_errors(client):
    emp = mk_employee(mk_department(), mk_position(), "V-85")
    mk_payroll(emp, date(2024, 1, 1), date(2024, 1, 15))
    mk_payroll(emp, date(2024, 1, 16), date(2024, 1, 31))

    r = client.put(f"/api/v1/payrolls/edit/employee/{emp.id}",
                   json={"start_date": "2024-03-01", "end_date": "2024-03-15"}, headers=_auth())
    assert r.status_code == 409
    assert len(r.get_json()["error"]["errors"]) == 2


def test_batch_edit_and_delete(client):
    emp = mk_employee(mk_department(), mk_position(), "V-86")
    mk_payroll(emp, date(2024, 1, 1), date(2024, 1, 15))
    mk_payroll(emp, date(2023, 12, 1), date(2023, 12, 15), state=PayrollState.PAID)

    r = client.put("/api/v1/payrolls/edit/general", json={"payment_date": "2024-01-20"}, headers=_auth())
    assert r.status_code == 200
    assert r.get_json()["meta"]["updated"] == 1

    r = client.delete(f"/api/v1/payrolls/delete/employee/{emp.id}", headers=_auth())
    assert r.get_json()["data"] == {"deleted_count": 1}
    assert Payroll.query.count() == 1


def test_payment_date_queries_sorted_desc(client):
    emp = mk_employee(mk_department(), mk_position(), "V-87")
    early = mk_payroll(emp, date(2024, 1, 1), date(2024, 1, 15), payment=date(2024, 1, 16))
    late = mk_payroll(emp, date(2024, 1, 16), date(2024, 1, 31), payment=date(2024, 2, 1))

    r = client.get("/api/v1/payrolls/date-range/2024-01-01/2024-02-28", headers=_auth())
    assert [x["id"] for x in r.get_json()["data"]] == [late.id, early.id]

    r = client.get("/api/v1/payrolls/date/2024-01-16", headers=_auth())
    assert [x["id"] for x in r.get_json()["data"]] == [early.id]

    assert client.get("/api/v1/payrolls/date/yesterday", headers=_auth()).status_code == 422
    assert client.get(f"/api/v1/payrolls/{late.id}", headers=_auth()).get_json()["data"]["id"] == late.id
    assert client.get("/api/v1/payrolls/9999", headers=_auth()).status_code == 404


def test_settlement_export_and_download(client, app, tmp_path):
    mk_company()
    bank = mk_bank()
    emp = mk_employee(mk_department(), mk_position(), "V-88")
    mk_account(emp, bank, "01020000000000000088")
    mk_payroll(emp, date(2024, 1, 1), date(2024, 1, 15), net=250)

    r = client.post("/api/v1/settlements",
                    json={"bank_id": bank.id, "start_date": "2024-01-01", "end_date": "2024-01-31"},
                    headers=_auth())
    assert r.status_code == 201
    data = r.get_json()["data"]
    assert data["file_name"].startswith("0102_")
    assert data["total"] == 250.0
    assert os.path.exists(os.path.join(app.config["PAYROLL_EXPORTS_DIR"], data["file_name"]))

    listing = client.get("/api/v1/settlements", headers=_auth()).get_json()
    assert [x["file_name"] for x in listing["data"]] == [data["file_name"]]

    r = client.get(f"/api/v1/settlements/{data['id']}/download", headers=_auth())
    assert r.status_code == 200
    assert r.data.decode("utf-8").startswith("0102;")
    r.close()

    r = client.post("/api/v1/settlements",
                    json={"bank_id": bank.id, "start_date": "2024-01-01", "end_date": "2024-01-31"},
                    headers=_auth())
    assert r.status_code == 404


def test_settlement_body_validation(client):
    r = client.post("/api/v1/settlements", json={"start_date": "2024-01-01"}, headers=_auth())
    assert r.status_code == 422


def test_login_and_me(client):
    u = User(username="nomina", name="Nomina", role="admin_nomina")
    u.set_password("secreto")
    db.session.add(u); db.session.commit()

    assert client.post("/api/v1/auth/login", json={"username": "nomina", "password": "mal"}).status_code == 401
    r = client.post("/api/v1/auth/login", json={"username": "nomina", "password": "secreto"})
    assert r.status_code == 200
    access = r.get_json()["data"]["access"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert me.get_json()["data"]["roles"] == ["admin_nomina"]
    assert client.get("/api/v1/payrolls", headers={"Authorization": f"Bearer {access}"}).status_code == 200
