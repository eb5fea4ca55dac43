# dayflow_api/services/payroll_engine.py
"""
Monthly payroll generation.

Each eligible employee gets one PayrollLine computed by a pure function
from (salary structure, working days, attendance summary). Run totals are
a fold over those lines. Persisting the run and its items is a single
commit, so a failed generation leaves a previous DRAFT untouched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from decimal import Decimal
from functools import reduce
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError

from dayflow_api.common.errors import BadRequestError, ConflictError, NotFoundError
from dayflow_api.common.money import ZERO, q2, sum_amounts
from dayflow_api.extensions import db
from dayflow_api.models.payroll.payroll_run import PayrollRun, PayrollItem, PAYROLL_DRAFT
from dayflow_api.models.payroll.salary_structure import SalaryStructure
from dayflow_api.services.attendance_store import (
    list_active_employees_with_salary,
    get_attendance_logs,
    get_holidays,
    get_working_days,
)
from dayflow_api.services.attendance_summary import AttendanceSummary, summarize_attendance, lop_days
from dayflow_api.services.working_days import count_working_days, month_bounds

log = logging.getLogger(__name__)

PRORATED_COMPONENTS = ("basic_salary", "hra", "da", "ta", "special_allowance")
STATUTORY_DEDUCTIONS = ("pf", "esi", "professional_tax", "tds")

MSG_ALREADY_EXISTS = "Payroll for this period already exists"
MSG_NO_EMPLOYEES = "No active employees with salary structure found"


@dataclass(frozen=True)
class PayrollLine:
    employee_id: int
    total_working_days: int
    days_present: Decimal
    days_absent: Decimal
    paid_leave_days: Decimal
    unpaid_leave_days: Decimal
    attendance_ratio: Decimal
    basic_salary: Decimal
    hra: Decimal
    da: Decimal
    ta: Decimal
    special_allowance: Decimal
    gross_earnings: Decimal
    pf: Decimal
    esi: Decimal
    professional_tax: Decimal
    tds: Decimal
    lop_deduction: Decimal
    total_deductions: Decimal
    net_salary: Decimal

    def item_kwargs(self) -> Dict[str, Any]:
        kw = asdict(self)
        kw.pop("attendance_ratio")
        kw["base_gross_earnings"] = self.gross_earnings
        kw["base_total_deductions"] = self.total_deductions
        return kw


@dataclass(frozen=True)
class PayrollTotals:
    total_employees: int = 0
    total_gross: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_net: Decimal = ZERO


def attendance_ratio(effective_days: Decimal, total_working_days: int) -> Decimal:
    if total_working_days <= 0:
        raise ValueError("total_working_days must be positive")
    ratio = Decimal(effective_days) / Decimal(total_working_days)
    if ratio > 1:
        return Decimal(1)
    return ratio if ratio > 0 else Decimal(0)


def compute_payroll_line(
    employee_id: int,
    salary: SalaryStructure,
    total_working_days: int,
    summary: AttendanceSummary,
) -> PayrollLine:
    ratio = attendance_ratio(summary.effective_working_days, total_working_days)
    effective = min(summary.effective_working_days, Decimal(total_working_days))

    # medical allowance and other allowances are not part of the item breakdown
    prorated = {}
    for f in PRORATED_COMPONENTS:
        amount = Decimal(getattr(salary, f) or 0)
        prorated[f] = q2(amount if ratio == 1 else amount * effective / total_working_days)
    gross = sum(prorated.values(), ZERO)

    statutory = {f: q2(getattr(salary, f) or 0) for f in STATUTORY_DEDUCTIONS}
    lop = lop_days(total_working_days, summary)
    lop_deduction = q2(lop * Decimal(salary.gross_salary or 0) / total_working_days)
    total_deductions = sum(statutory.values(), ZERO) + lop_deduction

    return PayrollLine(
        employee_id=employee_id,
        total_working_days=total_working_days,
        days_present=summary.days_present,
        days_absent=summary.days_absent,
        paid_leave_days=summary.paid_leave_days,
        unpaid_leave_days=lop,
        attendance_ratio=ratio,
        gross_earnings=gross,
        lop_deduction=lop_deduction,
        total_deductions=total_deductions,
        net_salary=gross - total_deductions,
        **prorated,
        **statutory,
    )


def _add(acc: PayrollTotals, line) -> PayrollTotals:
    return PayrollTotals(
        total_employees=acc.total_employees + 1,
        total_gross=acc.total_gross + q2(line.gross_earnings),
        total_deductions=acc.total_deductions + q2(line.total_deductions),
        total_net=acc.total_net + q2(line.net_salary),
    )


def summarize_lines(lines: Iterable) -> PayrollTotals:
    """Fold lines (PayrollLine or PayrollItem) into run totals."""
    return reduce(_add, lines, PayrollTotals())


def _apply_totals(run: PayrollRun, totals: PayrollTotals):
    run.total_employees = totals.total_employees
    run.total_gross = totals.total_gross
    run.total_deductions = totals.total_deductions
    run.total_net = totals.total_net


def generate_payroll(
    company_id: int,
    month: int,
    year: int,
    notes: Optional[str] = None,
    user_id: Optional[int] = None,
) -> PayrollRun:
    existing = PayrollRun.query.filter_by(company_id=company_id, month=month, year=year).first()
    if existing is not None and existing.status != PAYROLL_DRAFT:
        raise ConflictError(MSG_ALREADY_EXISTS)

    period_start, period_end = month_bounds(year, month)

    pairs = list_active_employees_with_salary(company_id)
    if not pairs:
        raise BadRequestError(MSG_NO_EMPLOYEES)

    total_working_days = count_working_days(
        period_start, period_end,
        get_working_days(company_id),
        get_holidays(company_id, period_start, period_end),
    )
    if total_working_days <= 0:
        raise BadRequestError("No working days in the selected period")

    try:
        lines: List[PayrollLine] = [
            compute_payroll_line(
                emp.id, salary, total_working_days,
                summarize_attendance(get_attendance_logs(emp.id, period_start, period_end)),
            )
            for emp, salary in pairs
        ]
        totals = summarize_lines(lines)

        if existing is not None:
            PayrollItem.query.filter_by(payroll_run_id=existing.id).delete()
            db.session.expire(existing, ["items"])
            run = existing
            run.period_start = period_start
            run.period_end = period_end
            run.notes = notes
        else:
            run = PayrollRun(
                company_id=company_id,
                month=month,
                year=year,
                period_start=period_start,
                period_end=period_end,
                notes=notes,
                status=PAYROLL_DRAFT,
                created_by=user_id,
            )
            db.session.add(run)
            db.session.flush()

        for line in lines:
            db.session.add(PayrollItem(payroll_run_id=run.id, status=PAYROLL_DRAFT, **line.item_kwargs()))
        _apply_totals(run, totals)

        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(MSG_ALREADY_EXISTS)
    except Exception:
        db.session.rollback()
        raise

    log.info("[payroll.generate] company=%s period=%04d-%02d run=%s employees=%s working_days=%s",
             company_id, year, month, run.id, totals.total_employees, total_working_days)
    return run


def _line_total(rows) -> Decimal:
    return q2(sum_amounts(rows))


def _clean_lines(rows) -> list:
    return [{"name": str(r.get("name") or "").strip(), "amount": float(q2(r.get("amount")))} for r in rows or []]


def update_payroll_item(
    company_id: int,
    item_id: int,
    overtime_pay=None,
    bonus=None,
    other_earnings: Optional[list] = None,
    other_deductions: Optional[list] = None,
) -> PayrollItem:
    """
    Set the adjustment fields of a DRAFT item and recompute its totals from
    the generation-time baseline. Omitted fields keep their stored value, so
    repeating a call yields the same result.
    """
    item = db.session.get(PayrollItem, item_id)
    if item is None or item.payroll_run.company_id != company_id:
        raise NotFoundError("Payroll item not found")
    if item.status != PAYROLL_DRAFT:
        raise BadRequestError("Cannot update processed payroll item")

    if overtime_pay is not None:
        item.overtime_pay = q2(overtime_pay)
    if bonus is not None:
        item.bonus = q2(bonus)
    if other_earnings is not None:
        item.other_earnings = _clean_lines(other_earnings)
    if other_deductions is not None:
        item.other_deductions = _clean_lines(other_deductions)

    gross = (q2(item.base_gross_earnings) + q2(item.overtime_pay) + q2(item.bonus)
             + _line_total(item.other_earnings))
    deductions = q2(item.base_total_deductions) + _line_total(item.other_deductions)
    item.gross_earnings = gross
    item.total_deductions = deductions
    item.net_salary = gross - deductions

    try:
        db.session.flush()
        _apply_totals(item.payroll_run, summarize_lines(item.payroll_run.items))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return item
