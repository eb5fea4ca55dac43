from datetime import datetime
from dayflow_api.extensions import db

EMP_ACTIVE = "ACTIVE"
EMP_ON_NOTICE = "ON_NOTICE"
EMP_RESIGNED = "RESIGNED"
EMP_TERMINATED = "TERMINATED"
EMPLOYEE_STATUSES = (EMP_ACTIVE, EMP_ON_NOTICE, EMP_RESIGNED, EMP_TERMINATED)


class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    # business
    company_id    = db.Column(db.Integer, db.ForeignKey("companies.id", ondelete="RESTRICT"), nullable=False)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id", ondelete="RESTRICT"), nullable=True)
    user_id       = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)

    code  = db.Column(db.String(32), nullable=False)    # unique per company
    email = db.Column(db.String(255), unique=True, nullable=False)
    first_name  = db.Column(db.String(80), nullable=False)
    last_name   = db.Column(db.String(80), nullable=True)
    designation = db.Column(db.String(120), nullable=True)
    joining_date = db.Column(db.Date, nullable=True)

    bank_name       = db.Column(db.String(120), nullable=True)
    bank_account_no = db.Column(db.String(40), nullable=True)
    pan_number      = db.Column(db.String(20), nullable=True)

    status = db.Column(db.String(16), default=EMP_ACTIVE, nullable=False)
    deleted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("company_id", "code", name="uq_employee_company_code"),
        db.Index("ix_emp_company_id", "company_id"),
        db.Index("ix_emp_dept_id", "department_id"),
    )

    company    = db.relationship("Company", lazy="joined")
    department = db.relationship("Department", lazy="joined")
    user       = db.relationship("User", lazy="joined")
    salary_structure = db.relationship("SalaryStructure", uselist=False, back_populates="employee")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()
