# payroll_api/blueprints/settlements.py
import os

from flask import Blueprint, request, send_from_directory

from payroll_api.common.auth import requires_roles
from payroll_api.common.errors import NotFound
from payroll_api.common.http import ok, fail
from payroll_api.common.paging import paginate
from payroll_api.common.parsing import parse_date
from payroll_api.extensions import db
from payroll_api.models.payroll.settlement import SettlementFile
from payroll_api.services.settlement_export import get_exporter

bp = Blueprint("settlements", __name__, url_prefix="/api/v1/settlements")

SETTLEMENT_ROLES = ("admin_principal", "admin_nomina")


def _row(s: SettlementFile):
    return {
        "id": s.id,
        "bank_id": s.bank_id,
        "bank_code": s.bank.code if s.bank else None,
        "file_name": s.file_name,
        "start_date": s.start_date.isoformat(),
        "end_date": s.end_date.isoformat(),
        "payroll_count": s.payroll_count,
        "total_amount": float(s.total_amount or 0),
        "created_at": s.created_at.isoformat() if s.created_at else None,
    }


@bp.post("")
@requires_roles(*SETTLEMENT_ROLES)
def export_settlement():
    j = request.get_json(silent=True) or {}
    try:
        bank_id = int(j.get("bank_id"))
    except (TypeError, ValueError):
        return fail("bank_id is required", 422)
    start, end = parse_date(j.get("start_date")), parse_date(j.get("end_date"))
    if not (start and end):
        return fail("start_date and end_date must be YYYY-MM-DD", 422)

    result = get_exporter().export(bank_id, start, end)
    return ok({
        "id": result.settlement.id,
        "file_name": result.file_name,
        "payrolls": [p.id for p in result.payrolls],
        "total": float(result.total),
    }, 201)


@bp.get("")
@requires_roles(*SETTLEMENT_ROLES)
def list_settlements():
    qry = SettlementFile.query
    bank_id = request.args.get("bank_id", type=int)
    if bank_id:
        qry = qry.filter(SettlementFile.bank_id == bank_id)
    rows, meta = paginate(qry.order_by(SettlementFile.created_at.desc(), SettlementFile.id.desc()))
    return ok([_row(s) for s in rows], **meta)


@bp.get("/<int:settlement_id>/download")
@requires_roles(*SETTLEMENT_ROLES)
def download_settlement(settlement_id: int):
    s = db.session.get(SettlementFile, settlement_id)
    if s is None:
        raise NotFound(f"Settlement file {settlement_id} not found")
    exporter = get_exporter()
    if not os.path.exists(exporter.path_of(s)):
        raise NotFound(f"File {s.file_name} is missing from storage")
    return send_from_directory(
        exporter.storage_root,
        s.file_path,
        mimetype="text/plain",
        as_attachment=True,
        download_name=s.file_name,
    )
