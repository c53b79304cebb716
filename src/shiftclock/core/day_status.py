#!/usr/bin/env python3
"""
Derive the work status of a day from its attendance events.

The classifier is a pure function of the events, the shift and the
rules. A status set manually by the user (leave, sickness, ...) is
stored flagged `manual` and is never recomputed, see
`resolve_day_status()`.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
from dataclasses import dataclass, replace
from enum import Enum
import datetime as dt
from typing import Any, Iterable, Optional

# Internal libraries
from .attendance import ActionType, AttendanceEvent, derive_progress
from .rules import AttendanceRules, DEFAULT_RULES
from .shift import ShiftConfig
from .time_window import compute_window
from .work_hours import split_window

logger = logging.getLogger(__name__)

_ONE_MINUTE = dt.timedelta(minutes=1)
_ONE_DAY = dt.timedelta(days=1)

########################################################################
#                        Day status declaration                        #
########################################################################


class DayStatus(Enum):
    """Work status of a day."""

    # Derived from the events
    NOT_UPDATED = "not_updated"
    INCOMPLETE = "incomplete"
    FULL_ATTENDANCE = "full_attendance"
    LATE_ARRIVAL = "late_arrival"
    EARLY_DEPARTURE = "early_departure"
    LATE_AND_EARLY = "late_and_early"
    OVERTIME = "overtime"
    # Set by the user only
    LEAVE = "leave"
    SICK = "sick"
    HOLIDAY = "holiday"
    ABSENT = "absent"

    @property
    def is_manual_only(self) -> bool:
        """
        Returns:
            bool: `True` if the classifier never derives this status.
        """
        return self in (DayStatus.LEAVE, DayStatus.SICK, DayStatus.HOLIDAY, DayStatus.ABSENT)

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class DayWorkStatus:
    """
    Work status of a day.

    Attributes:
        status (DayStatus): Status label.
        total_work_time (float): Hours worked, 2 decimals.
        overtime (float): Awarded overtime hours, 2 decimals.
        remarks (str): Human readable summary.
        late_minutes (int): Minutes late at check-in, 0 if on time.
        early_minutes (int): Minutes left before the office end, 0 if
            not early.
        overtime_minutes (int): Awarded overtime minutes.
        manual (bool): `True` if the status was set by the user.
    """

    status: DayStatus
    total_work_time: float = 0.0
    overtime: float = 0.0
    remarks: str = ""
    late_minutes: int = 0
    early_minutes: int = 0
    overtime_minutes: int = 0
    manual: bool = False

    @property
    def regular_work_time(self) -> float:
        return round(self.total_work_time - self.overtime, 2)

    @classmethod
    def manual_status(cls, status: DayStatus, remarks: str = "") -> "DayWorkStatus":
        """
        Build a status set by the user.

        Returns:
            DayWorkStatus: A status flagged `manual`, without worked time.
        """
        return cls(status=status, remarks=remarks, manual=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "totalWorkTime": self.total_work_time,
            "overtime": self.overtime,
            "remarks": self.remarks,
            "lateMinutes": self.late_minutes,
            "earlyMinutes": self.early_minutes,
            "overtimeMinutes": self.overtime_minutes,
            "manual": self.manual,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "DayWorkStatus":
        return DayWorkStatus(
            status=DayStatus(data["status"]),
            total_work_time=float(data.get("totalWorkTime", 0.0)),
            overtime=float(data.get("overtime", 0.0)),
            remarks=data.get("remarks", ""),
            late_minutes=int(data.get("lateMinutes", 0)),
            early_minutes=int(data.get("earlyMinutes", 0)),
            overtime_minutes=int(data.get("overtimeMinutes", 0)),
            manual=bool(data.get("manual", False)),
        )

    def __str__(self):
        flag = " (manual)" if self.manual else ""
        return f"{self.status}{flag} {self.total_work_time:.2f}h (OT {self.overtime:.2f}h)"


########################################################################
#                             Classifier                               #
########################################################################

_REQUIRED_ACTIONS = (ActionType.GO_WORK, ActionType.CHECK_IN, ActionType.CHECK_OUT)


def _minutes(delta: dt.timedelta) -> int:
    return int(delta // _ONE_MINUTE)


def classify_day(
    events: Iterable[AttendanceEvent],
    shift: ShiftConfig,
    rules: AttendanceRules = DEFAULT_RULES,
    day: Optional[dt.date] = None,
) -> DayWorkStatus:
    """
    Classify a day from its attendance events.

    Args:
        events (Iterable[AttendanceEvent]): Events of the day, in any
            order. The latest event of each action is used.
        shift (ShiftConfig): Shift active that day.
        rules (AttendanceRules): Engine rules.
        day (Optional[dt.date]): Date the shift started on, defaults to
            the date of the go to work event.

    Returns:
        DayWorkStatus: The derived status, never flagged `manual`.
    """
    progress = derive_progress(events)

    if not progress.events:
        return DayWorkStatus(DayStatus.NOT_UPDATED, remarks="No attendance recorded")

    missing = [action for action in _REQUIRED_ACTIONS if not progress.has(action)]
    if missing:
        return DayWorkStatus(
            DayStatus.INCOMPLETE,
            remarks="Missing " + ", ".join(str(action) for action in missing),
        )

    go_work = progress.timestamp(ActionType.GO_WORK)
    check_in = progress.timestamp(ActionType.CHECK_IN)
    check_out = progress.timestamp(ActionType.CHECK_OUT)
    complete = progress.timestamp(ActionType.COMPLETE)
    assert go_work and check_in and check_out

    # Whole day punched in a row, the nominal shift is worked
    if complete is not None and complete - go_work < rules.delta("quick_cycle"):
        window = compute_window(shift, day or go_work.date(), go_work.tzinfo)
        hours = split_window(window.start, window.end, window)
        return DayWorkStatus(
            DayStatus.FULL_ATTENDANCE,
            total_work_time=hours.total_hours,
            overtime=hours.overtime_hours,
            overtime_minutes=_minutes(hours.overtime),
            remarks="Full day recorded",
        )

    if check_out < check_in and shift.is_overnight:
        check_out += _ONE_DAY

    window = compute_window(shift, day or go_work.date(), go_work.tzinfo)
    hours = split_window(check_in, check_out, window)

    late = check_in - window.start
    early = window.office_end - check_out
    is_late = late > rules.delta("late_grace")
    is_early = early > rules.delta("early_grace")
    has_overtime = hours.overtime_awarded(rules)

    remarks = []
    if is_late:
        remarks.append(f"Late by {_minutes(late)} minutes")
    if is_early:
        remarks.append(f"Left {_minutes(early)} minutes early")
    if has_overtime:
        remarks.append(f"Overtime of {hours.overtime_hours:.2f} hours")

    if is_late and is_early:
        status = DayStatus.LATE_AND_EARLY
    elif is_late:
        status = DayStatus.LATE_ARRIVAL
    elif is_early:
        status = DayStatus.EARLY_DEPARTURE
    elif has_overtime:
        status = DayStatus.OVERTIME
    else:
        status = DayStatus.FULL_ATTENDANCE

    return DayWorkStatus(
        status,
        total_work_time=hours.total_hours,
        overtime=hours.overtime_hours if has_overtime else 0.0,
        remarks=", ".join(remarks) if remarks else "On time",
        late_minutes=_minutes(late) if is_late else 0,
        early_minutes=_minutes(early) if is_early else 0,
        overtime_minutes=_minutes(hours.overtime) if has_overtime else 0,
    )


def resolve_day_status(
    events: Iterable[AttendanceEvent],
    shift: ShiftConfig,
    stored: Optional[DayWorkStatus] = None,
    rules: AttendanceRules = DEFAULT_RULES,
    day: Optional[dt.date] = None,
) -> DayWorkStatus:
    """
    Get the status to display for a day.

    A manual status is returned untouched. Otherwise the events are
    classified, falling back on the stored status when the events were
    cleared after the day was finished.

    Returns:
        DayWorkStatus: Status of the day.
    """
    if stored is not None and stored.manual:
        return stored

    events = list(events)
    if not events and stored is not None:
        return stored

    return classify_day(events, shift, rules, day)


def force_status(status: DayWorkStatus, label: DayStatus, remarks: str) -> DayWorkStatus:
    """
    Turn a derived status into a manual one, keeping its worked time.

    Returns:
        DayWorkStatus: The overridden status.
    """
    return replace(status, status=label, remarks=remarks or status.remarks, manual=True)
