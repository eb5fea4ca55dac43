# dayflow_api/services/payroll_state.py
"""
Payroll run lifecycle: DRAFT -> PROCESSING -> COMPLETED -> PAID.

Each transition moves the run and all of its items in one commit. The
notifications sent on completion happen after that commit and never undo it.
"""
from __future__ import annotations

import calendar
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.orm import joinedload

from dayflow_api.common.errors import BadRequestError, NotFoundError
from dayflow_api.extensions import db
from dayflow_api.models.employee import Employee
from dayflow_api.models.payroll.payroll_run import (
    PayrollRun, PayrollItem,
    PAYROLL_DRAFT, PAYROLL_PROCESSING, PAYROLL_COMPLETED, PAYROLL_PAID,
)
from dayflow_api.services.notifications import notify_payroll_generated, send_payroll_generated_email

log = logging.getLogger(__name__)

MSG_NOT_FOUND = "Payroll record not found"


def get_run_or_404(company_id: int, run_id: int, with_items: bool = False) -> PayrollRun:
    q = PayrollRun.query.filter(PayrollRun.id == run_id, PayrollRun.company_id == company_id)
    if with_items:
        q = q.options(joinedload(PayrollRun.items).joinedload(PayrollItem.employee).joinedload(Employee.user))
    run = q.first()
    if run is None:
        raise NotFoundError(MSG_NOT_FOUND)
    return run


def _require(run: PayrollRun, status: str, message: str):
    if run.status != status:
        raise BadRequestError(message, payload={"status": run.status, "required": status})


def _move(run: PayrollRun, status: str):
    (PayrollItem.query
     .filter(PayrollItem.payroll_run_id == run.id)
     .update({PayrollItem.status: status}, synchronize_session="fetch"))
    run.status = status


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def process_payroll(company_id: int, run_id: int, user_id: Optional[int] = None,
                    notes: Optional[str] = None) -> PayrollRun:
    run = get_run_or_404(company_id, run_id)
    _require(run, PAYROLL_DRAFT, "Payroll has already been processed")

    _move(run, PAYROLL_PROCESSING)
    run.processed_by = user_id
    run.processed_at = datetime.utcnow()
    if notes:
        run.notes = notes
    _commit()
    log.info("[payroll.process] run=%s by user=%s", run.id, user_id)
    return run


def _payslip_notices(run: PayrollRun) -> List[Dict[str, Any]]:
    base = (current_app.config.get("FRONTEND_URL") or "http://localhost:3000").rstrip("/")
    out = []
    for it in run.items:
        emp = it.employee
        user = emp.user if emp is not None else None
        out.append({
            "item_id": it.id,
            "employee_id": it.employee_id,
            "user_id": user.id if user else None,
            "email": (user.email if user else None) or (emp.email if emp else None),
            "employee_name": emp.full_name if emp else "",
            "net_salary": f"{it.net_salary:,.2f}",
            "payslip_link": f"{base}/payroll/payslips/{it.id}",
        })
    return out


def _dispatch_payslip_notices(notices: List[Dict[str, Any]], month_name: str, year: int):
    for n in notices:
        if n["user_id"]:
            try:
                notify_payroll_generated(n["user_id"], month_name, year)
            except Exception:
                db.session.rollback()
                log.exception("[payroll.complete] in-app notification failed for employee=%s", n["employee_id"])
        if n["email"]:
            try:
                send_payroll_generated_email(
                    to=n["email"],
                    employee_name=n["employee_name"],
                    month=month_name,
                    year=year,
                    net_salary=n["net_salary"],
                    payslip_link=n["payslip_link"],
                )
            except Exception:
                log.exception("[payroll.complete] payslip email failed for employee=%s", n["employee_id"])


def complete_payroll(company_id: int, run_id: int) -> PayrollRun:
    run = get_run_or_404(company_id, run_id, with_items=True)
    _require(run, PAYROLL_PROCESSING, "Payroll must be in processing state")

    notices = _payslip_notices(run)
    month_name = calendar.month_name[run.month]
    year = run.year

    _move(run, PAYROLL_COMPLETED)
    _commit()
    log.info("[payroll.complete] run=%s items=%s", run.id, len(notices))

    _dispatch_payslip_notices(notices, month_name, year)
    return run


def mark_paid(company_id: int, run_id: int, paid_at: Optional[datetime] = None) -> PayrollRun:
    run = get_run_or_404(company_id, run_id)
    _require(run, PAYROLL_COMPLETED, "Payroll must be completed first")

    _move(run, PAYROLL_PAID)
    run.paid_at = paid_at or datetime.utcnow()
    _commit()
    log.info("[payroll.mark_paid] run=%s paid_at=%s", run.id, run.paid_at)
    return run
