from datetime import datetime
from payroll_api.extensions import db


class PayrollState:
    GENERATED = "Generada"
    PENDING = "Pendiente"
    PAID = "Pagada"
    CANCELLED = "Cancelada"

    ALL = (GENERATED, PENDING, PAID, CANCELLED)
    TERMINAL = (PAID, CANCELLED)


payroll_deductions = db.Table(
    "payroll_deductions",
    db.Column("payroll_id", db.Integer, db.ForeignKey("payrolls.id", ondelete="CASCADE"), primary_key=True),
    db.Column("deduction_id", db.Integer, db.ForeignKey("deductions.id", ondelete="RESTRICT"), primary_key=True),
)

payroll_perceptions = db.Table(
    "payroll_perceptions",
    db.Column("payroll_id", db.Integer, db.ForeignKey("payrolls.id", ondelete="CASCADE"), primary_key=True),
    db.Column("perception_id", db.Integer, db.ForeignKey("perceptions.id", ondelete="RESTRICT"), primary_key=True),
)


class Payroll(db.Model):
    __tablename__ = "payrolls"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True)

    period = db.Column(db.String(60), nullable=False)          # free label, e.g. "Enero 2024 - Q1"
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    payment_date = db.Column(db.Date, nullable=False)

    base_salary = db.Column(db.Numeric(14, 2), nullable=False)        # snapshot at generation
    overtime_hours = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    gross_salary = db.Column(db.Numeric(14, 2), nullable=False)       # adjusted gross
    net_salary = db.Column(db.Numeric(14, 2), nullable=False)

    state = db.Column(db.Enum(*PayrollState.ALL, name="payroll_state_enum"),
                      nullable=False, default=PayrollState.GENERATED)
    export_file = db.Column(db.String(120))   # settlement artifact that paid this payroll

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("start_date <= end_date", name="ck_payroll_period_order"),
        db.CheckConstraint("overtime_hours >= 0", name="ck_payroll_overtime_non_negative"),
        db.Index("ix_payroll_employee_period", "employee_id", "start_date", "end_date"),
        db.Index("ix_payroll_state", "state"),
    )

    employee = db.relationship("Employee", lazy="joined")
    deductions = db.relationship("Deduction", secondary=payroll_deductions, lazy="selectin")
    perceptions = db.relationship("Perception", secondary=payroll_perceptions, lazy="selectin")

    @property
    def is_terminal(self) -> bool:
        return self.state in PayrollState.TERMINAL
