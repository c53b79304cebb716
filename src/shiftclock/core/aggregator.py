#!/usr/bin/env python3
"""
Fold day statuses over a week, a month or any range of dates.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import calendar
from collections import Counter
from dataclasses import dataclass, field
import datetime as dt
from typing import Iterable

# Internal libraries
from .day_status import DayStatus, DayWorkStatus, resolve_day_status
from .rules import AttendanceRules, DEFAULT_RULES
from .shift import ShiftConfig
from .store import AttendanceStore

_ONE_DAY = dt.timedelta(days=1)


@dataclass(frozen=True)
class DaySummary:
    date: dt.date
    status: DayWorkStatus


@dataclass(frozen=True)
class PeriodSummary:
    """
    Summary of a range of days.

    Attributes:
        first (dt.date): First day, included.
        last (dt.date): Last day, included.
        days (tuple[DaySummary, ...]): Status of each day, chronological.
        total_hours (float): Hours worked over the period.
        regular_hours (float): Hours worked that are not awarded as
            overtime. Time past the office end below the overtime minimum
            counts as regular.
        overtime_hours (float): Awarded overtime hours.
        status_counts (dict[DayStatus, int]): Number of days per status.
        hours_by_status (dict[DayStatus, float]): Hours worked per status.
    """

    first: dt.date
    last: dt.date
    days: tuple[DaySummary, ...] = ()
    total_hours: float = 0.0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    status_counts: dict[DayStatus, int] = field(default_factory=dict)
    hours_by_status: dict[DayStatus, float] = field(default_factory=dict)

    @property
    def worked_days(self) -> int:
        return sum(1 for day in self.days if day.status.total_work_time > 0)

    def count(self, status: DayStatus) -> int:
        return self.status_counts.get(status, 0)

    def __str__(self):
        return (
            f"Period[{self.first.isoformat()}..{self.last.isoformat()}] "
            f"{self.total_hours:.2f}h (OT {self.overtime_hours:.2f}h)"
        )


def iter_dates(first: dt.date, last: dt.date) -> Iterable[dt.date]:
    """
    Yield the dates from `first` to `last`, both included.

    Raises:
        ValueError: `last` is before `first`.
    """
    if last < first:
        raise ValueError(f"Invalid range {first.isoformat()} to {last.isoformat()}.")
    date = first
    while date <= last:
        yield date
        date += _ONE_DAY


def week_range(date: dt.date) -> tuple[dt.date, dt.date]:
    """
    Returns:
        tuple[dt.date, dt.date]: Monday and Sunday of the week of `date`.
    """
    monday = date - dt.timedelta(days=date.weekday())
    return (monday, monday + dt.timedelta(days=6))


def month_range(date: dt.date) -> tuple[dt.date, dt.date]:
    """
    Returns:
        tuple[dt.date, dt.date]: First and last day of the month of `date`.
    """
    last_day = calendar.monthrange(date.year, date.month)[1]
    return (date.replace(day=1), date.replace(day=last_day))


def summarize_days(
    first: dt.date, last: dt.date, days: Iterable[DaySummary]
) -> PeriodSummary:
    """
    Fold already resolved day statuses.

    Returns:
        PeriodSummary: The period totals.
    """
    days = tuple(sorted(days, key=lambda day: day.date))

    counts: Counter[DayStatus] = Counter()
    hours: dict[DayStatus, float] = {}
    total = 0.0
    overtime = 0.0

    for day in days:
        status = day.status
        counts[status.status] += 1
        if status.total_work_time > 0:
            hours[status.status] = round(
                hours.get(status.status, 0.0) + status.total_work_time, 2
            )
        total += status.total_work_time
        overtime += status.overtime

    total = round(total, 2)
    overtime = round(overtime, 2)

    return PeriodSummary(
        first=first,
        last=last,
        days=days,
        total_hours=total,
        regular_hours=round(total - overtime, 2),
        overtime_hours=overtime,
        status_counts=dict(counts),
        hours_by_status=hours,
    )


def summarize_period(
    first: dt.date,
    last: dt.date,
    store: AttendanceStore,
    shift: ShiftConfig,
    rules: AttendanceRules = DEFAULT_RULES,
) -> PeriodSummary:
    """
    Resolve the status of each day of the range and fold them.

    Args:
        first (dt.date): First day, included.
        last (dt.date): Last day, included.
        store (AttendanceStore): Events and saved statuses source.
        shift (ShiftConfig): Shift used to classify the days.
        rules (AttendanceRules): Engine rules.

    Returns:
        PeriodSummary: The period totals.

    Raises:
        ValueError: `last` is before `first`.
        StoreException: The store failed to load a day.
    """
    days = []
    for date in iter_dates(first, last):
        status = resolve_day_status(
            store.load_events_for_date(date),
            shift,
            store.load_day_status(date),
            rules,
            day=date,
        )
        days.append(DaySummary(date, status))

    return summarize_days(first, last, days)
