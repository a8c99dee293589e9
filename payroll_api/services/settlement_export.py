from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from payroll_api.common.errors import APIError, NotFound, ValidationFailed
from payroll_api.extensions import db
from payroll_api.models.employee_bank import BankAccount
from payroll_api.models.master import Bank, Company
from payroll_api.models.payroll.payroll import Payroll, PayrollState
from payroll_api.models.payroll.settlement import SettlementFile

log = logging.getLogger(__name__)

DEFAULT_LABEL = "Pago Nomina"
FIELD_SEP = ";"


@dataclass
class SettlementResult:
    file_name: str
    file_path: str
    settlement: SettlementFile
    payrolls: List[Payroll]
    total: Decimal


def _field(v) -> str:
    # the separator must never appear inside a field
    return str(v if v is not None else "").replace(FIELD_SEP, " ").replace("\n", " ").strip()


class SettlementExporter:
    """
    Builds the bank transfer file for Generada payrolls and marks them Pagada.

    File layout (one record per line, ';' separated):
        <bank_code>;<YYYYMMDD>
        <ci>;<name surnames>;<account_number>;<account_type>;<net_salary>;<label>
    """

    def __init__(self, storage_root=None, label: str = DEFAULT_LABEL):
        self.storage_root = storage_root or os.path.join(os.getcwd(), "exports")
        self.label = label

    # ---------- selection ----------
    def select_payrolls(self, start: date, end: date) -> List[Payroll]:
        """Generada payrolls lying fully inside [start, end] (containment, not overlap)."""
        return (
            Payroll.query
            .filter(Payroll.state == PayrollState.GENERATED)
            .filter(Payroll.start_date >= start, Payroll.end_date <= end)
            .order_by(Payroll.employee_id.asc(), Payroll.start_date.asc())
            .with_for_update(of=Payroll)
            .all()
        )

    def pair_accounts(self, bank: Bank, payrolls: List[Payroll]) -> List[Tuple[Payroll, BankAccount]]:
        """Payrolls whose employee holds an account at `bank`; the rest are left out."""
        out = []
        for p in payrolls:
            acct = (BankAccount.query
                    .filter(BankAccount.employee_id == p.employee_id, BankAccount.bank_id == bank.id)
                    .order_by(BankAccount.id.asc())
                    .first())
            if acct is None:
                log.info("settlement: employee %s has no account at bank %s, payroll %s left out",
                         p.employee_id, bank.code, p.id)
                continue
            out.append((p, acct))
        return out

    # ---------- rendering ----------
    def render(self, bank: Bank, run_date: date, pairs: List[Tuple[Payroll, BankAccount]]) -> str:
        lines = [f"{_field(bank.code)}{FIELD_SEP}{run_date:%Y%m%d}"]
        for p, acct in pairs:
            emp = p.employee
            net = Decimal(str(p.net_salary or 0))
            lines.append(FIELD_SEP.join([
                _field(emp.ci),
                _field(emp.full_name),
                _field(acct.account_number),
                _field(acct.account_type),
                f"{net:.2f}",
                _field(self.label),
            ]))
        return "\n".join(lines) + "\n"

    # ---------- storage ----------
    def file_name_for(self, bank: Bank, run_date: date) -> str:
        """<bank_code>_<YYYYMMDD>.txt, or <bank_code>_<YYYYMMDD>_<n>.txt if taken."""
        base = f"{bank.code}_{run_date:%Y%m%d}"
        name = f"{base}.txt"
        n = 2
        while (os.path.exists(os.path.join(self.storage_root, name))
               or SettlementFile.query.filter_by(file_name=name).first() is not None):
            name = f"{base}_{n}.txt"
            n += 1
        return name

    def write_file(self, file_name: str, content: str) -> str:
        """Write atomically (temp file + rename). Returns the absolute path."""
        os.makedirs(self.storage_root, exist_ok=True)
        abs_path = os.path.join(self.storage_root, file_name)
        fd, tmp = tempfile.mkstemp(dir=self.storage_root, prefix=".settlement-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            os.replace(tmp, abs_path)
        except Exception:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
        return abs_path

    # ---------- orchestration ----------
    def export(self, bank_id: int, start: date, end: date, run_date: Optional[date] = None) -> SettlementResult:
        if start > end:
            raise ValidationFailed("start_date must be <= end_date")

        bank = db.session.get(Bank, bank_id)
        if bank is None:
            raise NotFound(f"Bank {bank_id} not found")
        if Company.query.first() is None:
            raise NotFound("Company not found")

        run_date = run_date or date.today()

        selected = self.select_payrolls(start, end)
        if not selected:
            db.session.rollback()
            raise NotFound(f"No Generada payrolls found between {start} and {end}")

        pairs = self.pair_accounts(bank, selected)
        if not pairs:
            db.session.rollback()
            raise NotFound(f"No payroll between {start} and {end} has an account at bank {bank.code}")

        content = self.render(bank, run_date, pairs)
        file_name = self.file_name_for(bank, run_date)

        # 1) durable write; nothing has been mutated yet
        try:
            abs_path = self.write_file(file_name, content)
        except OSError as e:
            db.session.rollback()
            log.exception("settlement file %s could not be written", file_name)
            raise APIError("EXPORT_WRITE_FAILED", f"Could not write settlement file: {e}", 500)

        # 2) state transitions only once the file exists
        payrolls = [p for p, _ in pairs]
        total = sum((Decimal(str(p.net_salary or 0)) for p in payrolls), Decimal("0"))
        try:
            for p in payrolls:
                p.state = PayrollState.PAID
                p.payment_date = run_date
                p.export_file = file_name
            settlement = SettlementFile(
                bank_id=bank.id,
                file_name=file_name,
                file_path=file_name,
                start_date=start,
                end_date=end,
                payroll_count=len(payrolls),
                total_amount=total,
            )
            db.session.add(settlement)
            db.session.commit()
        except Exception:
            db.session.rollback()
            if os.path.exists(abs_path):
                os.remove(abs_path)
            log.exception("settlement %s: state update failed, file removed", file_name)
            raise

        log.info("settlement %s written: %d payroll(s), total %s", file_name, len(payrolls), total)
        return SettlementResult(file_name, abs_path, settlement, payrolls, total)

    def path_of(self, settlement: SettlementFile) -> str:
        return os.path.join(self.storage_root, settlement.file_path)


def get_exporter() -> SettlementExporter:
    from flask import current_app
    return SettlementExporter(
        storage_root=current_app.config.get("PAYROLL_EXPORTS_DIR"),
        label=current_app.config.get("PAYROLL_EXPORT_LABEL", DEFAULT_LABEL),
    )
