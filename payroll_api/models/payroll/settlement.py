from datetime import datetime
from payroll_api.extensions import db


class SettlementFile(db.Model):
    """One bank settlement artifact produced by an export run."""
    __tablename__ = "settlement_files"

    id = db.Column(db.Integer, primary_key=True)
    bank_id = db.Column(db.Integer, db.ForeignKey("banks.id", ondelete="RESTRICT"), nullable=False, index=True)
    file_name = db.Column(db.String(120), unique=True, nullable=False)
    file_path = db.Column(db.String(500), nullable=False)    # relative to PAYROLL_EXPORTS_DIR
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    payroll_count = db.Column(db.Integer, nullable=False, default=0)
    total_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    bank = db.relationship("Bank", lazy="joined")
