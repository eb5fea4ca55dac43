from datetime import datetime
from dayflow_api.extensions import db

PAYROLL_DRAFT = "DRAFT"
PAYROLL_PROCESSING = "PROCESSING"
PAYROLL_COMPLETED = "COMPLETED"
PAYROLL_PAID = "PAID"
PAYROLL_STATUSES = (PAYROLL_DRAFT, PAYROLL_PROCESSING, PAYROLL_COMPLETED, PAYROLL_PAID)


class PayrollRun(db.Model):
    __tablename__ = "payroll_runs"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    month = db.Column(db.Integer, nullable=False)
    year = db.Column(db.Integer, nullable=False)
    period_start = db.Column(db.Date, nullable=False)
    period_end = db.Column(db.Date, nullable=False)
    status = db.Column(db.Enum(*PAYROLL_STATUSES, name="payroll_status_enum"), nullable=False, default=PAYROLL_DRAFT)

    total_employees = db.Column(db.Integer, nullable=False, default=0)
    total_gross = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    total_deductions = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    total_net = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    processed_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    processed_at = db.Column(db.DateTime)
    paid_at = db.Column(db.DateTime)
    notes = db.Column(db.Text)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("company_id", "month", "year", name="uq_payroll_run_company_period"),
    )

    company = db.relationship("Company", lazy="joined")
    items = db.relationship(
        "PayrollItem",
        back_populates="payroll_run",
        cascade="all, delete-orphan",
        order_by="PayrollItem.id",
    )


class PayrollItem(db.Model):
    __tablename__ = "payroll_items"

    id = db.Column(db.Integer, primary_key=True)
    payroll_run_id = db.Column(db.Integer, db.ForeignKey("payroll_runs.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)

    total_working_days = db.Column(db.Integer, nullable=False, default=0)
    days_present = db.Column(db.Numeric(5, 1), nullable=False, default=0)
    days_absent = db.Column(db.Numeric(5, 1), nullable=False, default=0)
    paid_leave_days = db.Column(db.Numeric(5, 1), nullable=False, default=0)
    unpaid_leave_days = db.Column(db.Numeric(5, 1), nullable=False, default=0)  # LOP days

    basic_salary = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    hra = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    da = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    ta = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    special_allowance = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    gross_earnings = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    pf = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    esi = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    professional_tax = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    tds = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    lop_deduction = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    total_deductions = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    net_salary = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    # computed at generation time; adjustments are layered on top of these
    base_gross_earnings = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    base_total_deductions = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    overtime_pay = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    bonus = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    other_earnings = db.Column(db.JSON, nullable=False, default=list)
    other_deductions = db.Column(db.JSON, nullable=False, default=list)

    status = db.Column(db.Enum(*PAYROLL_STATUSES, name="payroll_item_status_enum"), nullable=False, default=PAYROLL_DRAFT)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("payroll_run_id", "employee_id", name="uq_payroll_item_run_employee"),
    )

    payroll_run = db.relationship("PayrollRun", back_populates="items")
    employee = db.relationship("Employee", lazy="joined")
