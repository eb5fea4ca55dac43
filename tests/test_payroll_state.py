from datetime import datetime
from decimal import Decimal

import pytest

from dayflow_api.common.errors import BadRequestError, NotFoundError
from dayflow_api.models.notification import Notification, NOTIFY_PAYROLL_GENERATED
from dayflow_api.models.payroll.payroll_run import (
    PayrollItem, PAYROLL_DRAFT, PAYROLL_PROCESSING, PAYROLL_COMPLETED, PAYROLL_PAID,
)
from dayflow_api.services import payroll_state
from dayflow_api.services.notifications import send_email
from dayflow_api.services.payroll_engine import generate_payroll, update_payroll_item

from conftest import YEAR, MONTH


@pytest.fixture()
def draft_run(company, make_employee, fill_attendance):
    a = make_employee(company)
    b = make_employee(company)
    fill_attendance(a)
    fill_attendance(b, days=16)
    return generate_payroll(company.id, MONTH, YEAR)


@pytest.fixture()
def sent(monkeypatch):
    calls = []

    def _fake_send(**kw):
        calls.append(kw)
        return True

    monkeypatch.setattr(payroll_state, "send_payroll_generated_email", _fake_send)
    return calls


def _statuses(run):
    return {i.status for i in PayrollItem.query.filter_by(payroll_run_id=run.id)}


def test_full_lifecycle_moves_run_and_items(company, draft_run, sent):
    actor = draft_run.items[0].employee.user_id
    run = payroll_state.process_payroll(company.id, draft_run.id, user_id=actor, notes="checked")
    assert run.status == PAYROLL_PROCESSING
    assert run.processed_by == actor and run.processed_at is not None
    assert run.notes == "checked"
    assert _statuses(run) == {PAYROLL_PROCESSING}

    run = payroll_state.complete_payroll(company.id, run.id)
    assert run.status == PAYROLL_COMPLETED
    assert _statuses(run) == {PAYROLL_COMPLETED}

    paid_at = datetime(2025, 4, 1, 10, 0)
    run = payroll_state.mark_paid(company.id, run.id, paid_at=paid_at)
    assert run.status == PAYROLL_PAID
    assert run.paid_at == paid_at
    assert _statuses(run) == {PAYROLL_PAID}


def test_complete_notifies_every_employee(company, draft_run, sent):
    payroll_state.process_payroll(company.id, draft_run.id)
    payroll_state.complete_payroll(company.id, draft_run.id)

    notes = Notification.query.order_by(Notification.id).all()
    assert len(notes) == 2
    assert {n.type for n in notes} == {NOTIFY_PAYROLL_GENERATED}
    assert notes[0].title == "Payslip Available"
    assert notes[0].message == "Your payslip for March 2025 is now available"

    assert len(sent) == 2
    assert {c["month"] for c in sent} == {"March"}
    nets = sorted(c["net_salary"] for c in sent)
    assert nets == ["16,750.00", "34,250.00"]
    assert all(c["payslip_link"].startswith("http://app.test/payroll/payslips/") for c in sent)


def test_notification_failures_do_not_undo_completion(company, draft_run, monkeypatch):
    def _boom(*a, **kw):
        raise RuntimeError("provider down")

    monkeypatch.setattr(payroll_state, "notify_payroll_generated", _boom)
    monkeypatch.setattr(payroll_state, "send_payroll_generated_email", _boom)

    payroll_state.process_payroll(company.id, draft_run.id)
    run = payroll_state.complete_payroll(company.id, draft_run.id)
    assert run.status == PAYROLL_COMPLETED
    assert _statuses(run) == {PAYROLL_COMPLETED}


def test_email_without_api_key_is_skipped(app):
    assert send_email("someone@acme.test", "hi", "<p>hi</p>") is False


@pytest.mark.parametrize("step, message", [
    ("complete", "Payroll must be in processing state"),
    ("paid", "Payroll must be completed first"),
])
def test_out_of_order_transitions_rejected(company, draft_run, step, message):
    with pytest.raises(BadRequestError) as exc:
        if step == "complete":
            payroll_state.complete_payroll(company.id, draft_run.id)
        else:
            payroll_state.mark_paid(company.id, draft_run.id)
    assert exc.value.message == message
    assert draft_run.status == PAYROLL_DRAFT


def test_process_twice_rejected(company, draft_run):
    payroll_state.process_payroll(company.id, draft_run.id)
    with pytest.raises(BadRequestError) as exc:
        payroll_state.process_payroll(company.id, draft_run.id)
    assert exc.value.message == "Payroll has already been processed"


def test_unknown_run(company):
    with pytest.raises(NotFoundError):
        payroll_state.process_payroll(company.id, 12345)


def test_update_item_layers_adjustments_on_baseline(company, draft_run):
    it = draft_run.items[0]
    base_gross, base_ded = it.gross_earnings, it.total_deductions

    kw = dict(overtime_pay=1500, bonus=2000,
              other_earnings=[{"name": "Referral", "amount": 500}],
              other_deductions=[{"name": "Advance", "amount": 1000}])
    once = update_payroll_item(company.id, it.id, **kw)
    first = (once.gross_earnings, once.total_deductions, once.net_salary)
    assert once.gross_earnings == base_gross + Decimal("4000.00")
    assert once.total_deductions == base_ded + Decimal("1000.00")
    assert once.net_salary == once.gross_earnings - once.total_deductions

    twice = update_payroll_item(company.id, it.id, **kw)
    assert (twice.gross_earnings, twice.total_deductions, twice.net_salary) == first

    run = twice.payroll_run
    assert run.total_gross == sum(i.gross_earnings for i in run.items)
    assert run.total_net == sum(i.net_salary for i in run.items)


def test_update_item_keeps_omitted_fields(company, draft_run):
    it = draft_run.items[0]
    update_payroll_item(company.id, it.id, bonus=1000)
    it = update_payroll_item(company.id, it.id, overtime_pay=250)
    assert it.bonus == Decimal("1000.00")
    assert it.overtime_pay == Decimal("250.00")
    assert it.gross_earnings == it.base_gross_earnings + Decimal("1250.00")


def test_update_item_rejected_after_processing(company, draft_run):
    item_id = draft_run.items[0].id
    payroll_state.process_payroll(company.id, draft_run.id)
    with pytest.raises(BadRequestError) as exc:
        update_payroll_item(company.id, item_id, bonus=1)
    assert exc.value.message == "Cannot update processed payroll item"


def test_update_item_other_company(company, draft_run):
    with pytest.raises(NotFoundError):
        update_payroll_item(company.id + 1, draft_run.items[0].id, bonus=1)
