from decimal import Decimal
from types import SimpleNamespace

from dayflow_api.services.attendance_summary import AttendanceSummary, summarize_attendance, lop_days


def _rows(*statuses):
    return [SimpleNamespace(status=s) for s in statuses]


def test_buckets_by_status():
    s = summarize_attendance(_rows("PRESENT", "PRESENT", "HALF_DAY", "ON_LEAVE", "ABSENT"))
    assert s.days_present == Decimal("2.5")
    assert s.paid_leave_days == Decimal("1")
    assert s.days_absent == Decimal("1")
    assert s.effective_working_days == Decimal("3.5")


def test_weekend_and_holiday_rows_are_ignored():
    s = summarize_attendance(_rows("WEEKEND", "HOLIDAY", "PRESENT"))
    assert s == AttendanceSummary(days_present=Decimal("1"))


def test_status_match_is_case_insensitive():
    s = summarize_attendance(_rows("present", "on_leave"))
    assert s.days_present == 1
    assert s.paid_leave_days == 1


def test_empty_logs():
    s = summarize_attendance([])
    assert s.effective_working_days == 0
    assert lop_days(21, s) == 21


def test_lop_counts_only_days_without_rows():
    # 16 present + 2 absent out of 21 -> 3 days with nothing recorded
    s = AttendanceSummary(days_present=Decimal(16), days_absent=Decimal(2))
    assert lop_days(21, s) == 3


def test_lop_never_negative():
    s = AttendanceSummary(days_present=Decimal(23))
    assert lop_days(21, s) == 0


def test_half_day_leaves_half_day_of_lop():
    s = summarize_attendance(_rows(*(["PRESENT"] * 20 + ["HALF_DAY"])))
    assert lop_days(21, s) == Decimal("0.5")
