from datetime import datetime
from dayflow_api.extensions import db

ATT_PRESENT = "PRESENT"
ATT_HALF_DAY = "HALF_DAY"
ATT_ON_LEAVE = "ON_LEAVE"
ATT_ABSENT = "ABSENT"
ATT_WEEKEND = "WEEKEND"
ATT_HOLIDAY = "HOLIDAY"
ATTENDANCE_STATUSES = (ATT_PRESENT, ATT_HALF_DAY, ATT_ON_LEAVE, ATT_ABSENT, ATT_WEEKEND, ATT_HOLIDAY)


class Holiday(db.Model):
    __tablename__ = "holidays"
    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id", ondelete="RESTRICT"), nullable=False, index=True)
    date       = db.Column(db.Date, nullable=False)
    name       = db.Column(db.String(120), nullable=False)
    is_optional = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    __table_args__ = (
        db.UniqueConstraint("company_id", "date", name="uq_holiday_company_date"),
    )


class AttendanceLog(db.Model):
    """One row per employee per calendar day. Rows are corrected in place, never deleted."""
    __tablename__ = "attendance_logs"
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    date        = db.Column(db.Date, nullable=False)
    status      = db.Column(db.String(16), nullable=False, default=ATT_PRESENT)
    check_in    = db.Column(db.DateTime, nullable=True)
    check_out   = db.Column(db.DateTime, nullable=True)
    notes       = db.Column(db.String(255), nullable=True)
    created_at  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at  = db.Column(db.DateTime, onupdate=datetime.utcnow)
    __table_args__ = (
        db.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    employee = db.relationship("Employee")
