#!/usr/bin/env python3
"""
Split worked time into regular and overtime hours.

The worked interval is clamped into the shift [start, end] window and
split at the office end. Hours are kept with a two decimals precision,
presentation rounding is left to the host.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
from dataclasses import dataclass
import datetime as dt
from typing import Optional

# Internal libraries
from .shift import ShiftConfig
from .time_window import ShiftWindow, compute_window
from .rules import AttendanceRules, DEFAULT_RULES

HOURS_PRECISION = 2

_ONE_HOUR = dt.timedelta(hours=1)
_ZERO = dt.timedelta(0)


def to_hours(duration: dt.timedelta) -> float:
    """
    Returns:
        float: The duration in hours, rounded to the storage precision.
    """
    return round(duration / _ONE_HOUR, HOURS_PRECISION)


@dataclass(frozen=True)
class WorkHours:
    """
    Worked time split at the office end.

    Attributes:
        regular_hours (float): Hours worked until the office end.
        overtime_hours (float): Hours worked after the office end.
        total_hours (float): Sum of regular and overtime hours.
        overtime (dt.timedelta): Unrounded overtime duration.
    """

    regular_hours: float
    overtime_hours: float
    total_hours: float
    overtime: dt.timedelta = _ZERO

    def overtime_awarded(self, rules: AttendanceRules = DEFAULT_RULES) -> bool:
        """
        Returns:
            bool: `True` if the overtime is long enough to be reported.
        """
        return self.overtime > _ZERO and self.overtime >= rules.delta("min_overtime")


def split_window(
    check_in: dt.datetime, check_out: dt.datetime, window: ShiftWindow
) -> WorkHours:
    """
    Split the worked interval using already anchored shift instants.

    Returns:
        WorkHours: Split hours.
    """
    effective_in = max(check_in, window.start)
    effective_out = min(check_out, window.end)
    total = max(effective_out - effective_in, _ZERO)

    if effective_out <= window.office_end:
        regular = total
    elif effective_in >= window.office_end:
        regular = _ZERO
    else:
        regular = window.office_end - effective_in

    overtime = total - regular

    # Derive the overtime from the rounded values to keep the sum exact
    total_hours = to_hours(total)
    regular_hours = to_hours(regular)
    overtime_hours = round(total_hours - regular_hours, HOURS_PRECISION)

    return WorkHours(
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        total_hours=total_hours,
        overtime=overtime,
    )


def split_work_hours(
    check_in: dt.datetime,
    check_out: dt.datetime,
    shift: ShiftConfig,
    day: Optional[dt.date] = None,
) -> WorkHours:
    """
    Compute the regular and overtime hours worked between `check_in` and
    `check_out`.

    Time worked before the shift start or after the shift end is not
    counted.

    Args:
        check_in (dt.datetime): Actual or effective check-in.
        check_out (dt.datetime): Actual or effective check-out.
        shift (ShiftConfig): Shift of the day.
        day (Optional[dt.date]): Date the shift started on, defaults to
            the check-in date.

    Returns:
        WorkHours: Split hours.
    """
    window = compute_window(shift, day or check_in.date(), check_in.tzinfo)
    return split_window(check_in, check_out, window)
