from __future__ import annotations

from typing import Callable, Dict, List, Optional

from payroll_api.common.errors import NotFound, ValidationFailed
from payroll_api.extensions import db
from payroll_api.models.employee import Employee
from payroll_api.models.master import Department, Position

GENERAL, EMPLOYEE, DEPARTMENT, POSITION = "general", "employee", "department", "position"


def _all_employees(_target_id=None) -> List[Employee]:
    return Employee.query.order_by(Employee.id.asc()).all()


def _one_employee(employee_id) -> List[Employee]:
    emp = db.session.get(Employee, employee_id)
    if emp is None:
        raise NotFound(f"Employee {employee_id} not found")
    return [emp]


def _department_employees(department_id) -> List[Employee]:
    if db.session.get(Department, department_id) is None:
        raise NotFound(f"Department {department_id} not found")
    return (Employee.query
            .filter(Employee.department_id == department_id)
            .order_by(Employee.id.asc())
            .all())


def _position_employees(position_id) -> List[Employee]:
    if db.session.get(Position, position_id) is None:
        raise NotFound(f"Position {position_id} not found")
    return (Employee.query
            .filter(Employee.position_id == position_id)
            .order_by(Employee.id.asc())
            .all())


# scope tag -> resolver(target_id) -> employees
RESOLVERS: Dict[str, Callable[[Optional[int]], List[Employee]]] = {
    GENERAL: _all_employees,
    EMPLOYEE: _one_employee,
    DEPARTMENT: _department_employees,
    POSITION: _position_employees,
}


def resolve_employees(scope: str, target_id: Optional[int] = None) -> List[Employee]:
    """Employees targeted by a batch operation. Raises NotFound for a missing target."""
    resolver = RESOLVERS.get(scope)
    if resolver is None:
        raise ValidationFailed(f"unknown scope '{scope}'")
    if scope != GENERAL and target_id is None:
        raise ValidationFailed(f"{scope} id is required")
    return resolver(target_id)
