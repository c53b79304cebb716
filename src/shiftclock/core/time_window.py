#!/usr/bin/env python3
"""
Anchor a shift's wall-clock times on a calendar date.

The office end and the end of a shift are moved to the next day when
they are numerically earlier than the start. This is the only place
where overnight shifts are resolved; every other component works on the
concrete instants computed here.

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

_ONE_DAY = dt.timedelta(days=1)


@dataclass(frozen=True)
class ShiftWindow:
    """
    Concrete instants of a shift for one date.

    Attributes:
        date (dt.date): Date the shift starts on.
        departure (dt.datetime): Departure instant, never after start.
        start (dt.datetime): Shift start.
        office_end (dt.datetime): Office end, never before start.
        end (dt.datetime): Shift end, never before office end for a
            valid shift.
    """

    date: dt.date
    departure: dt.datetime
    start: dt.datetime
    office_end: dt.datetime
    end: dt.datetime

    @property
    def crosses_midnight(self) -> bool:
        return self.end.date() > self.start.date()

    @property
    def office_duration(self) -> dt.timedelta:
        return self.office_end - self.start

    @property
    def overtime_duration(self) -> dt.timedelta:
        return max(self.end - self.office_end, dt.timedelta(0))

    @property
    def duration(self) -> dt.timedelta:
        return self.end - self.start


def anchor(time: dt.time, date: dt.date, tzinfo: Optional[dt.tzinfo] = None) -> dt.datetime:
    """
    Returns:
        dt.datetime: The time of day on the given date.
    """
    return dt.datetime.combine(date, time, tzinfo=tzinfo)


def is_overnight(shift: ShiftConfig) -> bool:
    """
    Returns:
        bool: `True` if the shift end falls on the day after its start.
    """
    return shift.end_time < shift.start_time


def compute_window(
    shift: ShiftConfig,
    date: dt.date | dt.datetime,
    tzinfo: Optional[dt.tzinfo] = None,
) -> ShiftWindow:
    """
    Compute the concrete instants of a shift starting on the given date.

    Args:
        shift (ShiftConfig): Shift definition.
        date (dt.date | dt.datetime): Reference date. A `datetime` only
            contributes its date, and its timezone if `tzinfo` is not
            given.
        tzinfo (Optional[dt.tzinfo]): Timezone of the returned instants.
            Naive instants are returned when left `None`.

    Returns:
        ShiftWindow: The shift instants.
    """
    if isinstance(date, dt.datetime):
        tzinfo = tzinfo or date.tzinfo
        date = date.date()

    start = anchor(shift.start_time, date, tzinfo)
    # Departure never wraps forward, it is the day before when the shift
    # starts shortly after midnight (e.g. 23:50 for 00:10)
    departure = anchor(shift.departure_time, date, tzinfo)
    if shift.departure_time > shift.start_time:
        departure -= _ONE_DAY

    office_end = anchor(shift.office_end_time, date, tzinfo)
    if shift.office_end_time < shift.start_time:
        office_end += _ONE_DAY

    end = anchor(shift.end_time, date, tzinfo)
    if shift.end_time < shift.start_time:
        end += _ONE_DAY

    return ShiftWindow(
        date=date, departure=departure, start=start, office_end=office_end, end=end
    )
