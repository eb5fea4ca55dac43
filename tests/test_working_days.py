from datetime import date, datetime

from dayflow_api.services.working_days import count_working_days, month_bounds, sunday_weekday

MON_FRI = [1, 2, 3, 4, 5]


def test_month_bounds_handles_leap_february():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))


def test_sunday_is_zero():
    assert sunday_weekday(date(2025, 3, 2)) == 0   # Sunday
    assert sunday_weekday(date(2025, 3, 3)) == 1   # Monday
    assert sunday_weekday(date(2025, 3, 1)) == 6   # Saturday


def test_march_2025_has_21_weekdays():
    start, end = month_bounds(2025, 3)
    assert count_working_days(start, end, MON_FRI) == 21


def test_midweek_holiday_removes_one_day():
    start, end = month_bounds(2025, 3)
    assert count_working_days(start, end, MON_FRI, [date(2025, 3, 12)]) == 20


def test_holiday_on_weekend_is_not_subtracted_twice():
    start, end = month_bounds(2025, 3)
    assert count_working_days(start, end, MON_FRI, [date(2025, 3, 15), date(2025, 3, 16)]) == 21


def test_holiday_datetime_compares_by_calendar_day():
    start, end = month_bounds(2025, 3)
    assert count_working_days(start, end, MON_FRI, [datetime(2025, 3, 12, 18, 30)]) == 20


def test_six_day_week_counts_saturdays():
    start, end = month_bounds(2025, 3)
    # Saturdays: 1, 8, 15, 22, 29
    assert count_working_days(start, end, MON_FRI + [6]) == 26


def test_no_working_weekdays_gives_zero():
    start, end = month_bounds(2025, 3)
    assert count_working_days(start, end, []) == 0


def test_single_day_range():
    d = date(2025, 3, 3)
    assert count_working_days(d, d, MON_FRI) == 1
    assert count_working_days(d, d, MON_FRI, [d]) == 0
