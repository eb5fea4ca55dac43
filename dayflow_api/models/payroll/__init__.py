# dayflow_api/models/payroll/__init__.py
from dayflow_api.extensions import db  # noqa

from .salary_structure import SalaryStructure
from .payroll_run import PayrollRun, PayrollItem

__all__ = ["SalaryStructure", "PayrollRun", "PayrollItem"]
