# dayflow_api/services/payroll_queries.py
from __future__ import annotations

from typing import List, Optional, Tuple

from dayflow_api.common.errors import NotFoundError
from dayflow_api.common.paging import offset_for
from dayflow_api.extensions import db
from dayflow_api.models.employee import Employee
from dayflow_api.models.payroll.payroll_run import (
    PayrollRun, PayrollItem, PAYROLL_COMPLETED, PAYROLL_PAID,
)
from dayflow_api.services.payroll_state import get_run_or_404

PAYSLIP_STATUSES = (PAYROLL_COMPLETED, PAYROLL_PAID)


def list_payroll_runs(company_id: int, page: int, size: int, month: Optional[int] = None,
                      year: Optional[int] = None, status: Optional[str] = None) -> Tuple[List[PayrollRun], int]:
    q = PayrollRun.query.filter(PayrollRun.company_id == company_id)
    if month:
        q = q.filter(PayrollRun.month == month)
    if year:
        q = q.filter(PayrollRun.year == year)
    if status:
        q = q.filter(PayrollRun.status == status)
    total = q.count()
    rows = (q.order_by(PayrollRun.year.desc(), PayrollRun.month.desc())
            .offset(offset_for(page, size)).limit(size).all())
    return rows, total


def get_payroll_run(company_id: int, run_id: int) -> PayrollRun:
    return get_run_or_404(company_id, run_id)


def get_payroll_items(company_id: int, run_id: int, page: int, size: int,
                      employee_id: Optional[int] = None,
                      department_id: Optional[int] = None) -> Tuple[List[PayrollItem], int]:
    run = get_run_or_404(company_id, run_id)
    q = (PayrollItem.query
         .join(Employee, Employee.id == PayrollItem.employee_id)
         .filter(PayrollItem.payroll_run_id == run.id))
    if employee_id:
        q = q.filter(PayrollItem.employee_id == employee_id)
    if department_id:
        q = q.filter(Employee.department_id == department_id)
    total = q.count()
    rows = (q.order_by(Employee.first_name.asc(), PayrollItem.id.asc())
            .offset(offset_for(page, size)).limit(size).all())
    return rows, total


def get_employee_payslips(company_id: int, employee_id: int, page: int, size: int) -> Tuple[List[PayrollItem], int]:
    emp = Employee.query.filter(Employee.id == employee_id, Employee.company_id == company_id).first()
    if emp is None:
        raise NotFoundError("Employee not found")
    q = (PayrollItem.query
         .join(PayrollRun, PayrollRun.id == PayrollItem.payroll_run_id)
         .filter(PayrollItem.employee_id == emp.id,
                 PayrollItem.status.in_(PAYSLIP_STATUSES)))
    total = q.count()
    rows = (q.order_by(PayrollRun.year.desc(), PayrollRun.month.desc())
            .offset(offset_for(page, size)).limit(size).all())
    return rows, total


def get_payslip_item(company_id: int, item_id: int) -> PayrollItem:
    item = db.session.get(PayrollItem, item_id)
    if item is None or item.payroll_run.company_id != company_id:
        raise NotFoundError("Payslip not found")
    return item
