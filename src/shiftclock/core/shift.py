#!/usr/bin/env python3
"""
Shift configuration model.

A `ShiftConfig` describes one recurring work shift: the wall-clock times
of departure, start, office end and end, the weekdays it applies to and
the reminder offsets. Overnight shifts are not flagged explicitly, a
boundary that is numerically earlier than the start is understood to
fall on the next day.

Times are exchanged as "HH:MM" strings with the storage layer, see
`parse_time()` and `format_time()`.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import re
import uuid
import unicodedata
from dataclasses import dataclass, field
import datetime as dt
from typing import Any, Iterable, Final

# Internal libraries
from .errors import InvalidShiftTime, InvalidShiftConfig

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

MINUTES_PER_DAY: Final = 24 * 60
MAX_NAME_LENGTH: Final = 200

# Shift invariants, in minutes
MIN_DEPARTURE_TO_START: Final = 5
MIN_OFFICE_SPAN: Final = 120
MIN_OVERTIME_SPAN: Final = 30

# Monday to Friday
DEFAULT_DAYS_APPLIED: Final = (True, True, True, True, True, False, False)

########################################################################
#                         Time of day helpers                          #
########################################################################


def parse_time(value: str | dt.time) -> dt.time:
    """
    Parse a time of day.

    Args:
        value (str | dt.time): A "HH:MM" string or a `time` object. The
            seconds of a `time` object are dropped.

    Returns:
        dt.time: Parsed time of day, without seconds.

    Raises:
        InvalidShiftTime: The value cannot be parsed or is out of range.
    """
    if isinstance(value, dt.time):
        return value.replace(second=0, microsecond=0)

    if not isinstance(value, str):
        raise InvalidShiftTime(
            f"Expected a 'HH:MM' string, got a '{type(value).__name__}'."
        )

    match = _TIME_PATTERN.match(value)
    if not match:
        raise InvalidShiftTime(f"'{value}' is not a 'HH:MM' time.")

    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidShiftTime(f"'{value}' is out of range.")

    return dt.time(hour, minute)


def format_time(value: dt.time) -> str:
    """
    Returns:
        str: The time of day as a "HH:MM" string.
    """
    return f"{value.hour:02}:{value.minute:02}"


def time_to_minutes(value: dt.time) -> int:
    """
    Returns:
        int: Minutes elapsed since midnight.
    """
    return value.hour * 60 + value.minute


def minutes_between(first: dt.time, second: dt.time) -> int:
    """
    Get the minutes from `first` to `second`. When `second` is earlier
    than `first`, it is understood to be on the next day.

    Returns:
        int: Minutes in the [0, 1440[ range.
    """
    diff = time_to_minutes(second) - time_to_minutes(first)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff


def _is_valid_name_char(char: str) -> bool:
    """Letters, numbers, white spaces and punctuation are accepted."""
    return char.isspace() or unicodedata.category(char)[0] in ("L", "N", "P")


########################################################################
#                        Shift configuration                           #
########################################################################


@dataclass(frozen=True)
class ShiftConfig:
    """
    Recurring work shift.

    Attributes:
        name (str): Display name.
        departure_time (dt.time): Time to leave for work.
        start_time (dt.time): Shift start.
        office_end_time (dt.time): End of the regular working hours.
        end_time (dt.time): Shift end, overtime runs from the office end
            to this time.
        days_applied (tuple[bool, ...]): Seven flags indexed by
            `date.weekday()` (Monday is 0).
        remind_before_start (int): Reminder delay before the start [min].
        remind_after_end (int): Reminder delay after the end [min].
        show_sign_button (bool): Display flag for the host.
        id (str): Opaque unique identifier.

    The time attributes also accept "HH:MM" strings at construction.

    Raises:
        InvalidShiftTime: A time attribute cannot be parsed.
        InvalidShiftConfig: `days_applied` doesn't hold seven flags.
    """

    name: str
    departure_time: dt.time
    start_time: dt.time
    office_end_time: dt.time
    end_time: dt.time
    days_applied: tuple[bool, ...] = DEFAULT_DAYS_APPLIED
    remind_before_start: int = 15
    remind_after_end: int = 15
    show_sign_button: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        # The dataclass is frozen, normalize through object.__setattr__
        for attr in ("departure_time", "start_time", "office_end_time", "end_time"):
            object.__setattr__(self, attr, parse_time(getattr(self, attr)))

        days = tuple(bool(day) for day in self.days_applied)
        if len(days) != 7:
            raise InvalidShiftConfig(
                {"days_applied": f"expected 7 weekday flags, got {len(days)}"}
            )
        object.__setattr__(self, "days_applied", days)

    @property
    def is_overnight(self) -> bool:
        """
        Returns:
            bool: `True` if the shift ends on the day after it started.
        """
        return self.end_time < self.start_time

    def applies_on(self, date: dt.date | dt.datetime) -> bool:
        """
        Returns:
            bool: `True` if the shift recurs on the weekday of `date`.
        """
        return self.days_applied[date.weekday()]

    def to_dict(self) -> dict[str, Any]:
        """
        Returns:
            dict[str, Any]: Plain representation with "HH:MM" times.
        """
        return {
            "id": self.id,
            "name": self.name,
            "departureTime": format_time(self.departure_time),
            "startTime": format_time(self.start_time),
            "officeEndTime": format_time(self.office_end_time),
            "endTime": format_time(self.end_time),
            "daysApplied": list(self.days_applied),
            "remindBeforeStart": self.remind_before_start,
            "remindAfterEnd": self.remind_after_end,
            "showSignButton": self.show_sign_button,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ShiftConfig":
        """
        Build a shift from its plain representation.

        Raises:
            InvalidShiftTime: A time value cannot be parsed.
            InvalidShiftConfig: A required key is missing.
        """
        try:
            return ShiftConfig(
                id=data["id"],
                name=data["name"],
                departure_time=data["departureTime"],
                start_time=data["startTime"],
                office_end_time=data["officeEndTime"],
                end_time=data["endTime"],
                days_applied=tuple(data.get("daysApplied", DEFAULT_DAYS_APPLIED)),
                remind_before_start=int(data.get("remindBeforeStart", 15)),
                remind_after_end=int(data.get("remindAfterEnd", 15)),
                show_sign_button=bool(data.get("showSignButton", True)),
            )
        except KeyError as e:
            raise InvalidShiftConfig({str(e.args[0]): "missing value"}) from e

    def __str__(self) -> str:
        return f"Shift['{self.name}' {format_time(self.start_time)}-{format_time(self.end_time)}]"


def validate_shift(shift: ShiftConfig, existing: Iterable[ShiftConfig] = ()) -> None:
    """
    Check the shift invariants before it is saved.

    All the time spans are measured forward, a later time numerically
    smaller than the previous one is on the next day.

    Args:
        shift (ShiftConfig): Shift to validate.
        existing (Iterable[ShiftConfig]): Already saved shifts, used to
            check the name is unique. A shift with the same id is
            ignored (edition).

    Raises:
        InvalidShiftConfig: At least one invariant is violated. All the
            errors found are reported.
    """
    errors: dict[str, str] = {}

    name = shift.name.strip()
    if not name:
        errors["name"] = "name is required"
    elif len(shift.name) > MAX_NAME_LENGTH:
        errors["name"] = f"name exceeds {MAX_NAME_LENGTH} characters"
    elif not all(_is_valid_name_char(c) for c in shift.name):
        errors["name"] = "name contains invalid characters"
    elif any(
        other.id != shift.id and other.name.strip().lower() == name.lower()
        for other in existing
    ):
        errors["name"] = f"a shift named '{name}' already exists"

    if minutes_between(shift.departure_time, shift.start_time) < MIN_DEPARTURE_TO_START:
        errors["departure_time"] = (
            f"departure must precede start by {MIN_DEPARTURE_TO_START} minutes"
        )

    if minutes_between(shift.start_time, shift.office_end_time) < MIN_OFFICE_SPAN:
        errors["office_end_time"] = (
            f"office hours must last at least {MIN_OFFICE_SPAN} minutes"
        )

    # The end can't be before the office end once wrapped, so only the
    # overtime floor has to be checked
    overtime_span = minutes_between(shift.office_end_time, shift.end_time)
    if 0 < overtime_span < MIN_OVERTIME_SPAN:
        errors["end_time"] = (
            f"end must be the office end or at least {MIN_OVERTIME_SPAN} "
            "minutes after it"
        )
    elif minutes_between(shift.start_time, shift.end_time) < minutes_between(
        shift.start_time, shift.office_end_time
    ):
        errors["end_time"] = "end must be at or after the office end"

    if not any(shift.days_applied):
        errors["days_applied"] = "at least one weekday must be selected"

    if shift.remind_before_start < 0 or shift.remind_after_end < 0:
        errors["reminders"] = "reminder offsets cannot be negative"

    if errors:
        logger.debug(f"{shift!s} Validation failed with {len(errors)} error(s).")
        raise InvalidShiftConfig(errors)
