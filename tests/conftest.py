import os
from datetime import date, timedelta

import pytest
from flask_jwt_extended import create_access_token

from dayflow_api import create_app
from dayflow_api.extensions import db
from dayflow_api.models.attendance import AttendanceLog, ATT_PRESENT
from dayflow_api.models.employee import Employee
from dayflow_api.models.master import Company, Department
from dayflow_api.models.security import Role, UserRole
from dayflow_api.models.user import User
from dayflow_api.services.salary_structures import upsert_salary_structure

# March 2025: 21 Monday..Friday days, the 1st is a Saturday
YEAR, MONTH = 2025, 3

STANDARD_SALARY = {
    "basic_salary": 21000,
    "hra": 8400,
    "da": 2100,
    "ta": 1050,
    "special_allowance": 4200,
    "pf": 1800,
    "professional_tax": 200,
    "tds": 500,
}


def _mk_app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    return create_app({"TESTING": True, "RESEND_API_KEY": None, "FRONTEND_URL": "http://app.test"})


@pytest.fixture()
def app():
    app = _mk_app()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def company(app):
    c = Company(code="ACME", name="Acme Pvt Ltd", city="Pune", state="MH", working_days=[1, 2, 3, 4, 5])
    db.session.add(c)
    db.session.commit()
    db.session.add(Department(company_id=c.id, name="Engineering"))
    db.session.commit()
    return c


@pytest.fixture()
def make_user(app):
    def _make(company, email, roles=("employee",)):
        u = User(company_id=company.id, email=email, full_name=email.split("@")[0], status="active")
        u.set_password("secret")
        db.session.add(u)
        db.session.commit()
        for code in roles:
            role = Role.query.filter_by(code=code).first()
            if role is None:
                role = Role(code=code)
                db.session.add(role)
                db.session.commit()
            db.session.add(UserRole(user_id=u.id, role_id=role.id))
        db.session.commit()
        return u
    return _make


@pytest.fixture()
def make_employee(app, make_user):
    """Employee (with a login) and, unless salary=None, a salary structure."""
    counter = {"n": 0}

    def _make(company, salary=STANDARD_SALARY, first_name=None, with_user=True, **fields):
        counter["n"] += 1
        n = counter["n"]
        email = f"emp{n}@{company.code.lower()}.test"
        user = make_user(company, email) if with_user else None
        dept = company.departments.first()
        emp = Employee(
            company_id=company.id,
            department_id=dept.id if dept else None,
            user_id=user.id if user else None,
            code=f"E{n:03d}",
            email=email,
            first_name=first_name or f"Emp{n:03d}",
            last_name="Test",
            designation="Engineer",
            joining_date=date(2024, 1, 1),
            **fields,
        )
        db.session.add(emp)
        db.session.commit()
        if salary is not None:
            upsert_salary_structure(company.id, emp.id, dict(salary))
        return emp
    return _make


def month_weekdays(year=YEAR, month=MONTH):
    d = date(year, month, 1)
    out = []
    while d.month == month:
        if d.weekday() < 5:
            out.append(d)
        d += timedelta(days=1)
    return out


@pytest.fixture()
def fill_attendance(app):
    """Write a status for the first `days` Monday..Friday days of the month (all of them by default)."""
    def _fill(emp, days=None, status=ATT_PRESENT, year=YEAR, month=MONTH, offset=0):
        wd = month_weekdays(year, month)
        picked = wd[offset:] if days is None else wd[offset:offset + days]
        for d in picked:
            db.session.add(AttendanceLog(employee_id=emp.id, date=d, status=status))
        db.session.commit()
        return picked
    return _fill


@pytest.fixture()
def auth_headers(app):
    def _headers(user, roles):
        token = create_access_token(
            identity=str(user.id),
            additional_claims={"roles": list(roles), "company_id": user.company_id},
        )
        return {"Authorization": f"Bearer {token}"}
    return _headers
