# payroll_api/models/__init__.py
import importlib

# every module that declares tables; create_all() and autogenerate only see
# what has been imported
MODEL_MODULES = (
    "payroll_api.models.master",
    "payroll_api.models.user",
    "payroll_api.models.employee",
    "payroll_api.models.employee_bank",
    "payroll_api.models.attendance",
    "payroll_api.models.payroll",
)


def load_all():
    return [importlib.import_module(name) for name in MODEL_MODULES]
