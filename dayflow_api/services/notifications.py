# dayflow_api/services/notifications.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from flask import current_app, render_template

from dayflow_api.extensions import db
from dayflow_api.models.notification import Notification, NOTIFY_PAYROLL_GENERATED

log = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


def create_notification(user_id: int, type_: str, title: str, message: str,
                        data: Optional[Dict[str, Any]] = None) -> Notification:
    n = Notification(user_id=user_id, type=type_, title=title, message=message, data=data or {})
    db.session.add(n)
    db.session.commit()
    return n


def notify_payroll_generated(user_id: int, month: str, year: int) -> Notification:
    return create_notification(
        user_id,
        NOTIFY_PAYROLL_GENERATED,
        "Payslip Available",
        f"Your payslip for {month} {year} is now available",
    )


def _sender() -> str:
    cfg = current_app.config
    return f"{cfg.get('EMAIL_FROM_NAME', 'Dayflow HRMS')} <{cfg.get('EMAIL_FROM', 'noreply@dayflow.io')}>"


def send_email(to: str, subject: str, html: str) -> bool:
    """POST one message to the Resend HTTP API. Returns False instead of raising on delivery problems."""
    api_key = current_app.config.get("RESEND_API_KEY")
    if not api_key:
        log.warning("RESEND_API_KEY not configured, skipping email send to=%s subject=%r", to, subject)
        return False

    try:
        resp = requests.post(
            current_app.config.get("RESEND_API_URL") or RESEND_API_URL,
            json={"from": _sender(), "to": [to], "subject": subject, "html": html},
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=current_app.config.get("EMAIL_TIMEOUT_SECONDS", 5),
        )
    except requests.RequestException:
        log.exception("Email sending failed to=%s subject=%r", to, subject)
        return False

    if resp.status_code >= 400:
        log.error("Failed to send email to=%s subject=%r status=%s body=%s",
                  to, subject, resp.status_code, resp.text[:500])
        return False

    log.info("Email sent to=%s subject=%r", to, subject)
    return True


def send_payroll_generated_email(to: str, employee_name: str, month: str, year: int,
                                 net_salary: str, payslip_link: str) -> bool:
    html = render_template(
        "email/payroll_generated.html",
        employee_name=employee_name,
        month=month,
        year=year,
        net_salary=net_salary,
        payslip_link=payslip_link,
    )
    return send_email(to, f"Your payslip for {month} {year} is ready", html)
