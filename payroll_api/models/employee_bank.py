from datetime import datetime
from payroll_api.extensions import db

class BankAccount(db.Model):
    __tablename__ = "bank_accounts"

    id = db.Column(db.Integer, primary_key=True)
    bank_id = db.Column(
        db.Integer, db.ForeignKey("banks.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    employee_id = db.Column(
        db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    account_number = db.Column(db.String(40), nullable=False)
    account_type = db.Column(db.String(30), nullable=False)  # e.g. "Ahorros", "Corriente"
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("bank_id", "account_number", name="uq_bank_account_number"),
    )

    bank = db.relationship("Bank", lazy="joined")
    employee = db.relationship("Employee", lazy="joined")
