#!/usr/bin/env python3
"""
Unit test the weekly and monthly summaries.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import pytest
from pytest import approx
import datetime as dt

# Internal libraries
from .test_constants import *
from shiftclock.core.shift import ShiftConfig
from shiftclock.core.attendance import ActionType, AttendanceEvent
from shiftclock.core.day_status import DayStatus, DayWorkStatus
from shiftclock.core.store import MemoryAttendanceStore
from shiftclock.core.aggregator import (
    DaySummary,
    iter_dates,
    month_range,
    summarize_days,
    summarize_period,
    week_range,
)


def record_day(
    store: MemoryAttendanceStore,
    date: dt.date,
    check_in: tuple[int, int],
    check_out: tuple[int, int],
):
    """
    Record a whole day in the store.
    """
    for action, stamp in (
        (ActionType.GO_WORK, at(date, 7, 30)),
        (ActionType.CHECK_IN, at(date, *check_in)),
        (ActionType.CHECK_OUT, at(date, *check_out)),
    ):
        store.append_event(date, AttendanceEvent(action, stamp))


def test_week_range():
    assert week_range(TEST_DATE) == (dt.date(2025, 5, 5), dt.date(2025, 5, 11))
    assert week_range(dt.date(2025, 5, 5)) == (dt.date(2025, 5, 5), dt.date(2025, 5, 11))
    assert week_range(dt.date(2025, 5, 11)) == (dt.date(2025, 5, 5), dt.date(2025, 5, 11))


def test_month_range():
    assert month_range(TEST_DATE) == (dt.date(2025, 5, 1), dt.date(2025, 5, 31))
    assert month_range(dt.date(2024, 2, 10)) == (dt.date(2024, 2, 1), dt.date(2024, 2, 29))


def test_iter_dates():
    assert list(iter_dates(TEST_DATE, TEST_DATE)) == [TEST_DATE]
    with pytest.raises(ValueError):
        list(iter_dates(TEST_DATE, TEST_DATE - dt.timedelta(days=1)))


def test_summarize_week(store: MemoryAttendanceStore, day_shift: ShiftConfig):
    monday, sunday = week_range(TEST_DATE)
    tuesday = monday + dt.timedelta(days=1)

    record_day(store, monday, (8, 0), (17, 45))  # Overtime 0.75h
    record_day(store, tuesday, (8, 20), (17, 0))  # Late
    store.save_day_status(
        TEST_DATE, DayWorkStatus.manual_status(DayStatus.HOLIDAY, "Bank holiday")
    )

    summary = summarize_period(monday, sunday, store, day_shift)

    assert len(summary.days) == 7
    assert summary.days[0].date == monday
    assert summary.days[0].status.status is DayStatus.OVERTIME
    assert summary.days[1].status.status is DayStatus.LATE_ARRIVAL
    assert summary.days[2].status.status is DayStatus.HOLIDAY

    assert summary.total_hours == approx(9.75 + 8.67)
    assert summary.overtime_hours == approx(0.75)
    assert summary.regular_hours == approx(9.0 + 8.67)
    assert summary.worked_days == 2
    assert summary.count(DayStatus.NOT_UPDATED) == 4
    assert summary.count(DayStatus.HOLIDAY) == 1
    assert summary.count(DayStatus.SICK) == 0
    assert summary.hours_by_status[DayStatus.OVERTIME] == approx(9.75)
    assert DayStatus.HOLIDAY not in summary.hours_by_status


def test_short_overtime_counts_as_regular(
    store: MemoryAttendanceStore, day_shift: ShiftConfig
):
    monday, _ = week_range(TEST_DATE)
    record_day(store, monday, (8, 0), (17, 20))  # 20 minutes past the office end

    summary = summarize_period(monday, monday, store, day_shift)

    assert summary.days[0].status.status is DayStatus.FULL_ATTENDANCE
    assert summary.total_hours == approx(9.33)
    assert summary.overtime_hours == 0.0
    assert summary.regular_hours == approx(9.33)


def test_summarize_days_sorts():
    first = dt.date(2025, 5, 1)
    second = dt.date(2025, 5, 2)
    summary = summarize_days(
        first,
        second,
        [
            DaySummary(second, DayWorkStatus(DayStatus.FULL_ATTENDANCE, 8.0)),
            DaySummary(first, DayWorkStatus(DayStatus.FULL_ATTENDANCE, 7.5)),
        ],
    )

    assert [d.date for d in summary.days] == [first, second]
    assert summary.total_hours == approx(15.5)
    assert summary.count(DayStatus.FULL_ATTENDANCE) == 2


def test_empty_period(store: MemoryAttendanceStore, day_shift: ShiftConfig):
    summary = summarize_period(TEST_DATE, TEST_DATE, store, day_shift)
    assert summary.total_hours == 0.0
    assert summary.worked_days == 0
    assert "0.00h" in str(summary)
