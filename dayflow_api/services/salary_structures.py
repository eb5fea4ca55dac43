# dayflow_api/services/salary_structures.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from dayflow_api.common.errors import NotFoundError, BadRequestError
from dayflow_api.common.money import dec, q2, sum_amounts
from dayflow_api.extensions import db
from dayflow_api.models.employee import Employee
from dayflow_api.models.payroll.salary_structure import SalaryStructure

EARNING_FIELDS = ("basic_salary", "hra", "da", "ta", "special_allowance", "medical_allowance")
DEDUCTION_FIELDS = ("pf", "esi", "professional_tax", "tds")


def _employee_or_404(company_id: int, employee_id: int) -> Employee:
    emp = (Employee.query
           .filter(Employee.id == employee_id,
                   Employee.company_id == company_id,
                   Employee.deleted_at.is_(None))
           .first())
    if emp is None:
        raise NotFoundError("Employee not found")
    return emp


def _clean_lines(rows) -> list:
    out = []
    for r in rows or []:
        name = str((r or {}).get("name") or "").strip()
        amt = dec((r or {}).get("amount"), None)
        if not name or amt is None:
            raise BadRequestError("Each line needs a name and a numeric amount")
        out.append({"name": name, "amount": float(q2(amt))})
    return out


def compute_totals(data: Dict[str, Any]) -> Dict[str, Any]:
    """gross = all earnings incl. other allowances; net = gross - all deductions; ctc = 12 * (gross + pf + esi)."""
    gross = sum((q2(data.get(f)) for f in EARNING_FIELDS), q2(0)) + q2(sum_amounts(data.get("other_allowances")))
    deductions = sum((q2(data.get(f)) for f in DEDUCTION_FIELDS), q2(0)) + q2(sum_amounts(data.get("other_deductions")))
    ctc = gross * 12 + q2(data.get("pf")) * 12 + q2(data.get("esi")) * 12
    return {"gross_salary": gross, "net_salary": gross - deductions, "ctc": ctc}


def get_salary_structure(company_id: int, employee_id: int) -> Optional[SalaryStructure]:
    emp = _employee_or_404(company_id, employee_id)
    return emp.salary_structure


def upsert_salary_structure(company_id: int, employee_id: int, data: Dict[str, Any]) -> SalaryStructure:
    """Create or fully replace the employee's structure; every derived field is recomputed."""
    emp = _employee_or_404(company_id, employee_id)

    for f in EARNING_FIELDS + DEDUCTION_FIELDS:
        v = dec(data.get(f), None) if data.get(f) is not None else q2(0)
        if v is None or v < 0:
            raise BadRequestError(f"{f} must be a non-negative number")

    values = {f: q2(data.get(f)) for f in EARNING_FIELDS + DEDUCTION_FIELDS}
    values["other_allowances"] = _clean_lines(data.get("other_allowances"))
    values["other_deductions"] = _clean_lines(data.get("other_deductions"))
    values.update(compute_totals(values))

    eff = data.get("effective_from")
    if isinstance(eff, str):
        try:
            eff = date.fromisoformat(eff)
        except ValueError:
            raise BadRequestError("effective_from must be YYYY-MM-DD")
    values["effective_from"] = eff or date.today()

    ss = SalaryStructure.query.filter_by(employee_id=emp.id).first()
    if ss is None:
        ss = SalaryStructure(employee_id=emp.id)
        db.session.add(ss)
    for k, v in values.items():
        setattr(ss, k, v)

    db.session.commit()
    return ss
