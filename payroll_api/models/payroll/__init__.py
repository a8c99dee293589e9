# payroll_api/models/payroll/__init__.py
# Import order matters: catalogs first (association tables reference them),
# then payroll, then settlement files.
from payroll_api.extensions import db  # noqa

from .catalogs import Deduction, Perception
from .payroll import Payroll, PayrollState, payroll_deductions, payroll_perceptions
from .settlement import SettlementFile

__all__ = [
    "Deduction", "Perception",
    "Payroll", "PayrollState", "payroll_deductions", "payroll_perceptions",
    "SettlementFile",
]
