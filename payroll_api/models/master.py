from datetime import datetime

from payroll_api.extensions import db


class Company(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    country = db.Column(db.String(80), nullable=False)
    currency = db.Column(db.String(10), nullable=False)
    foundation_date = db.Column(db.Date, nullable=False)
    logo = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class Department(db.Model):
    __tablename__ = "departments"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


# work schedule: standard hours come from work_days x daily_hours
class Position(db.Model):
    __tablename__ = "positions"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    base_salary = db.Column(db.Numeric(14, 2), nullable=False, default=0)  # informational only
    daily_hours = db.Column(db.Numeric(5, 2), nullable=False)
    period = db.Column(db.String(40), nullable=False)                      # e.g. "quincenal"
    work_days = db.Column(db.JSON, nullable=False, default=list)           # ["lunes", ..., "viernes"]
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("daily_hours > 0", name="ck_position_daily_hours_positive"),
    )


class Bank(db.Model):
    __tablename__ = "banks"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    code = db.Column(db.String(20), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
