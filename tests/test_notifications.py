import requests

from dayflow_api.services import notifications


class _Resp:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text


def test_payslip_email_posts_to_resend(app, monkeypatch):
    app.config["RESEND_API_KEY"] = "re_test"
    captured = {}

    def _post(url, json=None, headers=None, timeout=None):
        captured.update(url=url, json=json, headers=headers, timeout=timeout)
        return _Resp(200)

    monkeypatch.setattr(notifications.requests, "post", _post)
    assert notifications.send_payroll_generated_email(
        to="asha@acme.test", employee_name="Asha K", month="March", year=2025,
        net_salary="34,250.00", payslip_link="http://app.test/payroll/payslips/1",
    ) is True

    assert captured["url"] == notifications.RESEND_API_URL
    assert captured["headers"]["Authorization"] == "Bearer re_test"
    assert captured["timeout"] == 5
    assert captured["json"]["to"] == ["asha@acme.test"]
    assert captured["json"]["subject"] == "Your payslip for March 2025 is ready"
    assert captured["json"]["from"] == "Dayflow HRMS <noreply@dayflow.io>"
    html = captured["json"]["html"]
    assert "Asha K" in html and "34,250.00" in html
    assert "http://app.test/payroll/payslips/1" in html


def test_provider_error_returns_false(app, monkeypatch):
    app.config["RESEND_API_KEY"] = "re_test"
    monkeypatch.setattr(notifications.requests, "post", lambda *a, **kw: _Resp(422, "invalid from"))
    assert notifications.send_email("x@acme.test", "s", "<p/>") is False


def test_network_error_returns_false(app, monkeypatch):
    app.config["RESEND_API_KEY"] = "re_test"

    def _down(*a, **kw):
        raise requests.ConnectionError("no route")

    monkeypatch.setattr(notifications.requests, "post", _down)
    assert notifications.send_email("x@acme.test", "s", "<p/>") is False


def test_in_app_notification_row(company, make_user):
    u = make_user(company, "n@acme.test")
    n = notifications.notify_payroll_generated(u.id, "April", 2025)
    assert n.id is not None
    assert n.user_id == u.id
    assert n.is_read is False
    assert n.message == "Your payslip for April 2025 is now available"
