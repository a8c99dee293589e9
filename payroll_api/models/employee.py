from datetime import datetime
from payroll_api.extensions import db

GENDERS = ("Masculino", "Femenino")

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id", ondelete="RESTRICT"), nullable=False)
    position_id   = db.Column(db.Integer, db.ForeignKey("positions.id", ondelete="RESTRICT"), nullable=False)

    ci       = db.Column(db.String(20), unique=True, nullable=False)   # national id
    name     = db.Column(db.String(80), nullable=False)
    surnames = db.Column(db.String(120), nullable=False)
    address  = db.Column(db.String(255))
    phone    = db.Column(db.String(20))
    email    = db.Column(db.String(255), unique=True, nullable=False)
    birthdate = db.Column(db.Date)
    gender   = db.Column(db.Enum(*GENDERS, name="employee_gender_enum"))

    base_salary = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    hire_date   = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("base_salary >= 0", name="ck_employee_base_salary_non_negative"),
        db.Index("ix_emp_dept_id", "department_id"),
        db.Index("ix_emp_position_id", "position_id"),
    )

    department = db.relationship("Department", lazy="joined")
    position   = db.relationship("Position", lazy="joined")

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surnames or ''}".strip()
