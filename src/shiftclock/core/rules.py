#!/usr/bin/env python3
"""
Tunable attendance rules shared by the engine components.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
from dataclasses import dataclass
import datetime as dt


@dataclass(frozen=True)
class AttendanceRules:
    """
    Attendance rules, all expressed in minutes.

    Attributes:
        go_work_to_check_in (int): Minimal gap between going to work and
            checking in.
        check_in_to_check_out (int): Minimal gap between checking in and
            checking out.
        window_tolerance (int): Allowed distance between a punch and the
            shift start/end before the window validator warns.
        late_grace (int): Arrival delay tolerated before being late.
        early_grace (int): Departure advance tolerated before leaving
            early.
        min_overtime (int): Minimal overtime awarded in the day status.
        quick_cycle (int): A whole day recorded in less than this duration
            counts as a full day shortcut.
        reset_after_end (int): Delay after check-out/complete after which
            the current day can be reset.
    """

    go_work_to_check_in: int = 5
    check_in_to_check_out: int = 120
    window_tolerance: int = 15
    late_grace: int = 5
    early_grace: int = 5
    min_overtime: int = 30
    quick_cycle: int = 5
    reset_after_end: int = 120

    def __post_init__(self):
        for name, value in vars(self).items():
            if value < 0:
                raise ValueError(f"Rule '{name}' cannot be negative (got {value}).")

    def delta(self, name: str) -> dt.timedelta:
        """
        Get a rule as a `timedelta`.

        Args:
            name (str): Rule attribute name.

        Returns:
            dt.timedelta: Rule duration.
        """
        return dt.timedelta(minutes=getattr(self, name))


DEFAULT_RULES = AttendanceRules()
