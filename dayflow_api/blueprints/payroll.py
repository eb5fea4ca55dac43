from __future__ import annotations
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from flask import Blueprint, request, make_response, current_app

from dayflow_api.common.auth import (
    requires_roles, current_company_id, current_user_id, current_employee_id, current_roles,
)
from dayflow_api.common.errors import NotFoundError
from dayflow_api.common.http import ok, fail, paged
from dayflow_api.common.money import dec, as_float
from dayflow_api.common.paging import page_limit
from dayflow_api.models.payroll.payroll_run import PayrollRun, PayrollItem, PAYROLL_STATUSES
from dayflow_api.models.security import ROLE_ADMIN, ROLE_MANAGER, ROLE_EMPLOYEE
from dayflow_api.services import payroll_engine, payroll_state, payroll_queries
from dayflow_api.services.payslip_service import PayslipService

bp = Blueprint("payroll", __name__, url_prefix="/api/v1/payroll")
svc = PayslipService()

MIN_YEAR, MAX_YEAR = 2020, 2100

# ---------- helpers ----------
def _int(v) -> Optional[int]:
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None

def _dt(s) -> Optional[datetime]:
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(str(s).replace("Z", "+00:00"))
    except ValueError:
        return None
    # columns are naive UTC
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt

def _iso(v):
    return v.isoformat() if v else None

def _notes(j) -> Optional[str]:
    return (j.get("notes") or "").strip() or None

def _amount_lines(raw, field: str, errors: Dict[str, str]) -> Optional[List[Dict[str, Any]]]:
    if raw is None:
        return None
    if not isinstance(raw, list):
        errors[field] = "must be a list of {name, amount}"
        return None
    out = []
    for r in raw:
        if not isinstance(r, dict) or not str(r.get("name") or "").strip() or dec(r.get("amount"), None) is None:
            errors[field] = "each entry needs a name and a numeric amount"
            return None
        out.append({"name": str(r["name"]).strip(), "amount": r["amount"]})
    return out

# ---------- row serializers ----------
def _row_run(r: PayrollRun) -> Dict[str, Any]:
    return {
        "id": r.id,
        "company_id": r.company_id,
        "month": r.month,
        "year": r.year,
        "period_start": _iso(r.period_start),
        "period_end": _iso(r.period_end),
        "status": r.status,
        "total_employees": r.total_employees,
        "total_gross": as_float(r.total_gross),
        "total_deductions": as_float(r.total_deductions),
        "total_net": as_float(r.total_net),
        "processed_by": r.processed_by,
        "processed_at": _iso(r.processed_at),
        "paid_at": _iso(r.paid_at),
        "notes": r.notes,
        "created_at": _iso(r.created_at),
    }

def _row_item(x: PayrollItem) -> Dict[str, Any]:
    emp = x.employee
    return {
        "id": x.id,
        "payroll_run_id": x.payroll_run_id,
        "employee_id": x.employee_id,
        "employee": {
            "id": emp.id,
            "code": emp.code,
            "name": emp.full_name,
            "department": emp.department.name if emp.department else None,
            "designation": emp.designation,
        } if emp else None,
        "total_working_days": x.total_working_days,
        "days_present": as_float(x.days_present),
        "days_absent": as_float(x.days_absent),
        "paid_leave_days": as_float(x.paid_leave_days),
        "unpaid_leave_days": as_float(x.unpaid_leave_days),
        "basic_salary": as_float(x.basic_salary),
        "hra": as_float(x.hra),
        "da": as_float(x.da),
        "ta": as_float(x.ta),
        "special_allowance": as_float(x.special_allowance),
        "overtime_pay": as_float(x.overtime_pay),
        "bonus": as_float(x.bonus),
        "other_earnings": x.other_earnings or [],
        "gross_earnings": as_float(x.gross_earnings),
        "pf": as_float(x.pf),
        "esi": as_float(x.esi),
        "professional_tax": as_float(x.professional_tax),
        "tds": as_float(x.tds),
        "lop_deduction": as_float(x.lop_deduction),
        "other_deductions": x.other_deductions or [],
        "total_deductions": as_float(x.total_deductions),
        "net_salary": as_float(x.net_salary),
        "status": x.status,
    }

def _row_payslip_summary(x: PayrollItem) -> Dict[str, Any]:
    run = x.payroll_run
    return {
        "id": x.id,
        "month": run.month,
        "year": run.year,
        "period_start": _iso(run.period_start),
        "period_end": _iso(run.period_end),
        "gross_earnings": as_float(x.gross_earnings),
        "total_deductions": as_float(x.total_deductions),
        "net_salary": as_float(x.net_salary),
        "status": x.status,
    }

# ---------- runs ----------
@bp.post("/generate")
@requires_roles(ROLE_ADMIN)
def generate_payroll():
    j = request.get_json(silent=True) or {}
    month = _int(j.get("month"))
    year = _int(j.get("year"))

    errors = {}
    if month is None or not 1 <= month <= 12:
        errors["month"] = "must be an integer 1..12"
    if year is None or not MIN_YEAR <= year <= MAX_YEAR:
        errors["year"] = f"must be an integer {MIN_YEAR}..{MAX_YEAR}"
    if errors:
        return fail("Validation failed", 422, errors=errors)

    run = payroll_engine.generate_payroll(
        current_company_id(), month, year, notes=_notes(j), user_id=current_user_id()
    )
    return ok(_row_run(run), 201, message="Payroll generated successfully")

@bp.get("")
@requires_roles(ROLE_ADMIN)
def list_runs():
    month = _int(request.args.get("month"))
    year = _int(request.args.get("year"))
    status = (request.args.get("status") or "").strip().upper() or None
    if status and status not in PAYROLL_STATUSES:
        return fail(f"status must be one of {', '.join(PAYROLL_STATUSES)}", 422)

    page, size = page_limit()
    rows, total = payroll_queries.list_payroll_runs(
        current_company_id(), page, size, month=month, year=year, status=status
    )
    return paged((_row_run(r) for r in rows), page, size, total)

@bp.get("/<int:run_id>")
@requires_roles(ROLE_ADMIN)
def get_run(run_id: int):
    return ok(_row_run(payroll_queries.get_payroll_run(current_company_id(), run_id)))

@bp.get("/<int:run_id>/items")
@requires_roles(ROLE_ADMIN)
def list_run_items(run_id: int):
    page, size = page_limit()
    rows, total = payroll_queries.get_payroll_items(
        current_company_id(), run_id, page, size,
        employee_id=_int(request.args.get("employee_id")),
        department_id=_int(request.args.get("department_id")),
    )
    return paged((_row_item(x) for x in rows), page, size, total)

@bp.put("/items/<int:item_id>")
@requires_roles(ROLE_ADMIN)
def update_item(item_id: int):
    j = request.get_json(silent=True) or {}

    errors: Dict[str, str] = {}
    amounts = {}
    for k in ("overtime_pay", "bonus"):
        if j.get(k) is None:
            continue
        v = dec(j.get(k), None)
        if v is None or v < Decimal("0"):
            errors[k] = "must be a non-negative number"
        amounts[k] = v
    other_earnings = _amount_lines(j.get("other_earnings"), "other_earnings", errors)
    other_deductions = _amount_lines(j.get("other_deductions"), "other_deductions", errors)
    if errors:
        return fail("Validation failed", 422, errors=errors)

    item = payroll_engine.update_payroll_item(
        current_company_id(), item_id,
        overtime_pay=amounts.get("overtime_pay"),
        bonus=amounts.get("bonus"),
        other_earnings=other_earnings,
        other_deductions=other_deductions,
    )
    return ok(_row_item(item))

@bp.post("/<int:run_id>/process")
@requires_roles(ROLE_ADMIN)
def process_run(run_id: int):
    j = request.get_json(silent=True) or {}
    run = payroll_state.process_payroll(current_company_id(), run_id, current_user_id(), notes=_notes(j))
    return ok(_row_run(run), message="Payroll processed successfully")

@bp.post("/<int:run_id>/complete")
@requires_roles(ROLE_ADMIN)
def complete_run(run_id: int):
    run = payroll_state.complete_payroll(current_company_id(), run_id)
    data = _row_run(run)
    data["items"] = [_row_item(x) for x in run.items]
    return ok(data, message="Payroll completed and notifications sent")

@bp.post("/<int:run_id>/mark-paid")
@requires_roles(ROLE_ADMIN)
def mark_paid(run_id: int):
    j = request.get_json(silent=True) or {}
    paid_at = None
    if j.get("paid_at"):
        paid_at = _dt(j["paid_at"])
        if paid_at is None:
            return fail("paid_at must be an ISO date or datetime", 422)
    run = payroll_state.mark_paid(current_company_id(), run_id, paid_at=paid_at)
    return ok(_row_run(run))

# ---------- payslips ----------
@bp.get("/employees/<int:employee_id>/payslips")
@requires_roles(ROLE_ADMIN)
def employee_payslips(employee_id: int):
    page, size = page_limit()
    rows, total = payroll_queries.get_employee_payslips(current_company_id(), employee_id, page, size)
    return paged((_row_payslip_summary(x) for x in rows), page, size, total)

@bp.get("/my-payslips")
@requires_roles(ROLE_ADMIN, ROLE_MANAGER, ROLE_EMPLOYEE)
def my_payslips():
    emp_id = current_employee_id()
    if emp_id is None:
        return fail("No employee profile linked to this user", 404)
    page, size = page_limit()
    rows, total = payroll_queries.get_employee_payslips(current_company_id(), emp_id, page, size)
    return paged((_row_payslip_summary(x) for x in rows), page, size, total)

def _visible_payslip(item_id: int) -> PayrollItem:
    item = payroll_queries.get_payslip_item(current_company_id(), item_id)
    roles = current_roles()
    if not (roles & {ROLE_ADMIN, ROLE_MANAGER}):
        if item.employee_id != current_employee_id() or item.status not in payroll_queries.PAYSLIP_STATUSES:
            raise NotFoundError("Payslip not found")
    return item

@bp.get("/payslips/<int:item_id>")
@requires_roles(ROLE_ADMIN, ROLE_MANAGER, ROLE_EMPLOYEE)
def get_payslip(item_id: int):
    return ok(svc.build_payslip_dto(_visible_payslip(item_id)))

@bp.get("/payslips/<int:item_id>/download")
@requires_roles(ROLE_ADMIN, ROLE_MANAGER, ROLE_EMPLOYEE)
def download_payslip(item_id: int):
    dto = svc.build_payslip_dto(_visible_payslip(item_id))
    current_app.logger.info("payslip download item=%s by user=%s", item_id, current_user_id())
    response = make_response(svc.render_payslip_html(dto))
    response.headers["Content-Type"] = "text/html"
    filename = f"PAYSLIP_{dto['employee']['code']}_{dto['run']['year']}_{dto['run']['month']:02d}.html"
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response
