# dayflow_api/services/attendance_summary.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from dayflow_api.models.attendance import ATT_PRESENT, ATT_HALF_DAY, ATT_ON_LEAVE, ATT_ABSENT

ZERO = Decimal("0")
HALF = Decimal("0.5")


@dataclass(frozen=True)
class AttendanceSummary:
    days_present: Decimal = ZERO
    days_absent: Decimal = ZERO
    paid_leave_days: Decimal = ZERO

    @property
    def effective_working_days(self) -> Decimal:
        return self.days_present + self.paid_leave_days


def summarize_attendance(logs: Iterable) -> AttendanceSummary:
    """
    Bucket attendance rows by status. HALF_DAY counts 0.5 towards presence;
    statuses other than PRESENT/HALF_DAY/ON_LEAVE/ABSENT are ignored.
    """
    present = absent = leave = ZERO
    for row in logs:
        st = (getattr(row, "status", None) or "").upper()
        if st == ATT_PRESENT:
            present += 1
        elif st == ATT_HALF_DAY:
            present += HALF
        elif st == ATT_ON_LEAVE:
            leave += 1
        elif st == ATT_ABSENT:
            absent += 1
    return AttendanceSummary(days_present=present, days_absent=absent, paid_leave_days=leave)


def lop_days(total_working_days: int, summary: AttendanceSummary) -> Decimal:
    # Working days with no attendance row at all are loss-of-pay.
    # Explicit ABSENT rows are already excluded from presence and are not
    # counted a second time here.
    lop = Decimal(total_working_days) - summary.effective_working_days - summary.days_absent
    return lop if lop > 0 else ZERO
