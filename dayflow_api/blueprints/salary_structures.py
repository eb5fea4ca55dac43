from __future__ import annotations
from typing import Any, Dict

from flask import Blueprint, request

from dayflow_api.common.auth import requires_roles, current_company_id
from dayflow_api.common.http import ok, fail
from dayflow_api.common.money import as_float
from dayflow_api.models.payroll.salary_structure import SalaryStructure
from dayflow_api.models.security import ROLE_ADMIN, ROLE_MANAGER
from dayflow_api.services import salary_structures as svc

bp = Blueprint("salary_structures", __name__, url_prefix="/api/v1/employees")

AMOUNT_FIELDS = svc.EARNING_FIELDS + svc.DEDUCTION_FIELDS

def _row(s: SalaryStructure) -> Dict[str, Any]:
    out = {"id": s.id, "employee_id": s.employee_id}
    for f in AMOUNT_FIELDS + ("gross_salary", "net_salary", "ctc"):
        out[f] = as_float(getattr(s, f))
    out["other_allowances"] = s.other_allowances or []
    out["other_deductions"] = s.other_deductions or []
    out["effective_from"] = s.effective_from.isoformat() if s.effective_from else None
    return out

@bp.get("/<int:employee_id>/salary-structure")
@requires_roles(ROLE_ADMIN, ROLE_MANAGER)
def get_salary_structure(employee_id: int):
    s = svc.get_salary_structure(current_company_id(), employee_id)
    return ok(_row(s) if s else None)

@bp.put("/<int:employee_id>/salary-structure")
@requires_roles(ROLE_ADMIN)
def put_salary_structure(employee_id: int):
    j = request.get_json(silent=True) or {}
    if j.get("basic_salary") is None:
        return fail("basic_salary is required", 422)
    s = svc.upsert_salary_structure(current_company_id(), employee_id, j)
    return ok(_row(s))
