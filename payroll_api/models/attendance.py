from datetime import datetime, date, time
from decimal import Decimal

from payroll_api.extensions import db

_SECONDS_PER_HOUR = Decimal(3600)


def hours_between(work_date: date, entry: time, exit_: time) -> Decimal:
    """(exit - entry) in hours on the same calendar day. Negative if exit < entry."""
    delta = datetime.combine(work_date, exit_) - datetime.combine(work_date, entry)
    return Decimal(int(delta.total_seconds())) / _SECONDS_PER_HOUR


class Attendance(db.Model):
    __tablename__ = "attendances"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    date        = db.Column(db.Date, nullable=False)
    entry_time  = db.Column(db.Time, nullable=False)
    exit_time   = db.Column(db.Time, nullable=False)
    hours_worked = db.Column(db.Numeric(6, 2), nullable=False, default=0)  # cached at write time
    created_at  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_attendance_employee_date", "employee_id", "date"),
    )

    employee = db.relationship("Employee", lazy="joined")

    def compute_hours(self) -> Decimal:
        self.hours_worked = hours_between(self.date, self.entry_time, self.exit_time).quantize(Decimal("0.01"))
        return self.hours_worked
