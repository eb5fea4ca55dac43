# dayflow_api/services/attendance_store.py
"""
Read side of employees / attendance / calendar used by payroll, plus the
attendance writes the leave-approval flow performs.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import List, Tuple

from flask import current_app
from sqlalchemy.orm import joinedload

from dayflow_api.extensions import db
from dayflow_api.models.attendance import AttendanceLog, Holiday, ATT_ON_LEAVE, ATTENDANCE_STATUSES
from dayflow_api.models.employee import Employee, EMP_ACTIVE
from dayflow_api.models.master import Company, DEFAULT_WORKING_DAYS
from dayflow_api.models.payroll.salary_structure import SalaryStructure


def list_active_employees_with_salary(company_id: int) -> List[Tuple[Employee, SalaryStructure]]:
    rows = (Employee.query
            .join(SalaryStructure, SalaryStructure.employee_id == Employee.id)
            .options(joinedload(Employee.salary_structure))
            .filter(Employee.company_id == company_id,
                    Employee.status == EMP_ACTIVE,
                    Employee.deleted_at.is_(None))
            .order_by(Employee.id.asc())
            .all())
    return [(e, e.salary_structure) for e in rows]


def get_attendance_logs(employee_id: int, start: date, end: date) -> List[AttendanceLog]:
    return (AttendanceLog.query
            .filter(AttendanceLog.employee_id == employee_id,
                    AttendanceLog.date >= start,
                    AttendanceLog.date <= end)
            .order_by(AttendanceLog.date.asc())
            .all())


def get_holidays(company_id: int, start: date, end: date) -> List[date]:
    rows = (db.session.query(Holiday.date)
            .filter(Holiday.company_id == company_id,
                    Holiday.date >= start,
                    Holiday.date <= end)
            .all())
    return [r[0] for r in rows]


def get_working_days(company_id: int) -> List[int]:
    c = db.session.get(Company, company_id)
    if c is not None and c.working_days:
        return [int(x) for x in c.working_days]
    return list(current_app.config.get("PAYROLL_DEFAULT_WORKING_DAYS") or DEFAULT_WORKING_DAYS)


def upsert_attendance(employee_id: int, day: date, status: str, notes: str | None = None) -> AttendanceLog:
    """Create or overwrite the status of one attendance day. Caller commits."""
    status = (status or "").upper()
    if status not in ATTENDANCE_STATUSES:
        raise ValueError(f"Unknown attendance status '{status}'")
    row = AttendanceLog.query.filter_by(employee_id=employee_id, date=day).first()
    if row is None:
        row = AttendanceLog(employee_id=employee_id, date=day, status=status, notes=notes)
        db.session.add(row)
    else:
        row.status = status
        if notes is not None:
            row.notes = notes
    return row


def mark_leave_days(employee_id: int, start: date, end: date) -> int:
    """Mark every day of an approved leave span ON_LEAVE and commit. Returns days touched."""
    n = 0
    d = start
    try:
        while d <= end:
            upsert_attendance(employee_id, d, ATT_ON_LEAVE)
            n += 1
            d += timedelta(days=1)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return n
