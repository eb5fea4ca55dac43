# dayflow_api/services/working_days.py
from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable, Tuple


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of the month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def sunday_weekday(d: date) -> int:
    """Weekday with 0=Sunday .. 6=Saturday (company.working_days convention)."""
    return (d.weekday() + 1) % 7


def _as_date(v) -> date:
    return v.date() if isinstance(v, datetime) else v


def count_working_days(
    start: date,
    end: date,
    working_weekdays: Iterable[int],
    holidays: Iterable[date] = (),
) -> int:
    """
    Count days in [start, end] whose weekday is a working weekday and which
    are not holidays. Holidays compare by calendar day, so datetimes are
    truncated first.
    """
    weekdays = {int(w) for w in working_weekdays}
    off = {_as_date(h) for h in holidays}

    count = 0
    d = start
    while d <= end:
        if sunday_weekday(d) in weekdays and d not in off:
            count += 1
        d += timedelta(days=1)
    return count
