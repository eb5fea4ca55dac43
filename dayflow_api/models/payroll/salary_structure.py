from datetime import datetime, date
from dayflow_api.extensions import db


class SalaryStructure(db.Model):
    """Fixed monthly compensation for one employee.

    gross_salary, net_salary and ctc are derived; they are written by
    services.salary_structures.upsert_salary_structure on every save.
    """
    __tablename__ = "salary_structures"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, unique=True)

    # earnings
    basic_salary      = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    hra               = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    da                = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    ta                = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    special_allowance = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    medical_allowance = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    other_allowances  = db.Column(db.JSON, nullable=False, default=list)  # [{name, amount}]

    # deductions
    pf               = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    esi              = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    professional_tax = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    tds              = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    other_deductions = db.Column(db.JSON, nullable=False, default=list)

    # derived
    gross_salary = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    net_salary   = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    ctc          = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    effective_from = db.Column(db.Date, nullable=False, default=date.today)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", back_populates="salary_structure")
