from datetime import datetime
from dayflow_api.extensions import db

NOTIFY_PAYROLL_GENERATED = "PAYROLL_GENERATED"


class Notification(db.Model):
    __tablename__ = "notifications"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type    = db.Column(db.String(40), nullable=False)
    title   = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    data    = db.Column(db.JSON)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
