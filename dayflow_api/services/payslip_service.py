from dataclasses import dataclass, asdict
from typing import List, Dict, Any

from flask import render_template

from dayflow_api.common.money import q2, sum_amounts, as_float
from dayflow_api.models.payroll.payroll_run import PayrollItem

@dataclass
class PayslipComponent:
    code: str
    name: str
    amount: float

@dataclass
class PayslipDTO:
    company: Dict[str, Any]
    employee: Dict[str, Any]
    run: Dict[str, Any]
    attendance: Dict[str, Any]
    earnings: List[PayslipComponent]
    deductions: List[PayslipComponent]
    totals: Dict[str, Any]

EARNING_LINES = (
    ("BASIC", "Basic Salary", "basic_salary"),
    ("HRA", "House Rent Allowance", "hra"),
    ("DA", "Dearness Allowance", "da"),
    ("TA", "Travel Allowance", "ta"),
    ("SPECIAL", "Special Allowance", "special_allowance"),
    ("OT", "Overtime", "overtime_pay"),
    ("BONUS", "Bonus", "bonus"),
)
DEDUCTION_LINES = (
    ("PF", "Provident Fund", "pf"),
    ("ESI", "Employee State Insurance", "esi"),
    ("PT", "Professional Tax", "professional_tax"),
    ("TDS", "Tax Deducted at Source", "tds"),
    ("LOP", "Loss of Pay", "lop_deduction"),
)


def _lines(item: PayrollItem, layout) -> List[PayslipComponent]:
    out = []
    for code, name, attr in layout:
        amt = q2(getattr(item, attr, 0) or 0)
        if amt or code in ("BASIC", "PF"):
            out.append(PayslipComponent(code=code, name=name, amount=as_float(amt)))
    return out


def _extra(rows, code: str) -> List[PayslipComponent]:
    return [PayslipComponent(code=code, name=str(r.get("name") or code), amount=as_float(q2(r.get("amount"))))
            for r in rows or []]


class PayslipService:
    def build_payslip_dto(self, item: PayrollItem) -> dict:
        """Payslip view of one payroll item, with run period and company header. Money values are floats."""
        run = item.payroll_run
        emp = item.employee
        company = run.company
        dept = emp.department

        earnings = _lines(item, EARNING_LINES) + _extra(item.other_earnings, "OTHER_EARNING")
        deductions = _lines(item, DEDUCTION_LINES) + _extra(item.other_deductions, "OTHER_DEDUCTION")

        dto = PayslipDTO(
            company={
                "id": company.id,
                "code": company.code,
                "name": company.name,
                "address": company.address,
                "city": company.city,
                "state": company.state,
            },
            employee={
                "id": emp.id,
                "code": emp.code,
                "name": emp.full_name,
                "email": emp.email,
                "department": dept.name if dept else None,
                "designation": emp.designation,
                "joining_date": str(emp.joining_date) if emp.joining_date else None,
                "bank_name": emp.bank_name,
                "bank_account_no": emp.bank_account_no,
                "pan_number": emp.pan_number,
            },
            run={
                "payroll_run_id": run.id,
                "payroll_item_id": item.id,
                "year": run.year,
                "month": run.month,
                "period_start": str(run.period_start),
                "period_end": str(run.period_end),
                "status": item.status,
                "paid_at": run.paid_at.isoformat() if run.paid_at else None,
            },
            attendance={
                "total_working_days": item.total_working_days,
                "days_present": float(item.days_present or 0),
                "days_absent": float(item.days_absent or 0),
                "paid_leave_days": float(item.paid_leave_days or 0),
                "lop_days": float(item.unpaid_leave_days or 0),
            },
            earnings=earnings,
            deductions=deductions,
            totals={
                "gross_earnings": as_float(q2(item.gross_earnings)),
                "total_deductions": as_float(q2(item.total_deductions)),
                "net_salary": as_float(q2(item.net_salary)),
                "other_earnings": as_float(q2(sum_amounts(item.other_earnings))),
                "other_deductions": as_float(q2(sum_amounts(item.other_deductions))),
            },
        )
        return asdict(dto)

    def render_payslip_html(self, dto: dict) -> str:
        return render_template("payroll/payslip.html", payslip=dto)
