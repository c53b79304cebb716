#!/usr/bin/env python3
"""
Check that a check-in or a check-out happens close to the configured
shift start or end.

The validation is advisory: a punch outside the tolerance window
produces a warning the host can display, the punch may still be
recorded.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import math
from dataclasses import dataclass
from enum import Enum
import datetime as dt
from typing import Optional, NamedTuple

# Internal libraries
from .errors import CheckOutBeforeCheckIn
from .shift import ShiftConfig, format_time
from .time_window import compute_window
from .rules import DEFAULT_RULES

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_MINUTES = DEFAULT_RULES.window_tolerance

# Before this hour, a punch for an overnight shift relates to the shift
# that started the day before
_OVERNIGHT_PIVOT_HOUR = 12


class WindowDirection(Enum):
    """Side of the window the punch falls on."""

    EARLY = "early"
    LATE = "late"


class TimeRange(NamedTuple):
    """Inclusive range of allowed punch instants."""

    earliest: dt.datetime
    latest: dt.datetime


@dataclass(frozen=True)
class WindowCheck:
    """
    Result of a window validation.

    Attributes:
        is_valid (bool): `True` if the punch is inside the window.
        allowed (TimeRange): The allowed window.
        direction (Optional[WindowDirection]): Side of the violation.
        minutes_off (int): Minutes between the punch and the nearest
            boundary, rounded up. 0 when valid.
        message (Optional[str]): Human readable warning when invalid.
    """

    is_valid: bool
    allowed: TimeRange
    direction: Optional[WindowDirection] = None
    minutes_off: int = 0
    message: Optional[str] = None

    @property
    def boundary(self) -> Optional[dt.datetime]:
        """
        Returns:
            Optional[dt.datetime]: The boundary nearest to the punch when
                invalid.
        """
        if self.direction is WindowDirection.EARLY:
            return self.allowed.earliest
        if self.direction is WindowDirection.LATE:
            return self.allowed.latest
        return None


def _around(instant: dt.datetime, tolerance_minutes: int) -> TimeRange:
    tolerance = dt.timedelta(minutes=tolerance_minutes)
    return TimeRange(instant - tolerance, instant + tolerance)


def check_in_range(
    shift: ShiftConfig,
    candidate: dt.datetime,
    tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
) -> TimeRange:
    """
    Get the allowed check-in range for a punch at `candidate`.

    For an overnight shift, a punch in the morning is matched against the
    start of the shift that began the previous day.

    Returns:
        TimeRange: Allowed range around the shift start.
    """
    day = candidate.date()
    if shift.is_overnight and candidate.hour < _OVERNIGHT_PIVOT_HOUR:
        day -= dt.timedelta(days=1)

    window = compute_window(shift, day, candidate.tzinfo)
    return _around(window.start, tolerance_minutes)


def check_out_range(
    shift: ShiftConfig,
    check_in: dt.datetime,
    tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
) -> TimeRange:
    """
    Get the allowed check-out range for a day checked in at `check_in`.

    The end is taken on the check-in date, the next day for an overnight
    shift.

    Returns:
        TimeRange: Allowed range around the shift end.
    """
    window = compute_window(shift, check_in.date(), check_in.tzinfo)
    return _around(window.end, tolerance_minutes)


def _check(candidate: dt.datetime, allowed: TimeRange, verb: str) -> WindowCheck:
    """
    Place the candidate relative to the allowed range and build the
    warning message.
    """
    one_minute = dt.timedelta(minutes=1)

    if candidate < allowed.earliest:
        minutes = math.ceil((allowed.earliest - candidate) / one_minute)
        return WindowCheck(
            is_valid=False,
            allowed=allowed,
            direction=WindowDirection.EARLY,
            minutes_off=minutes,
            message=(
                f"You're checking {verb} {minutes} minutes too early. "
                f"Earliest allowed check-{verb} time is "
                f"{format_time(allowed.earliest.time())}."
            ),
        )

    if candidate > allowed.latest:
        minutes = math.ceil((candidate - allowed.latest) / one_minute)
        return WindowCheck(
            is_valid=False,
            allowed=allowed,
            direction=WindowDirection.LATE,
            minutes_off=minutes,
            message=(
                f"You're checking {verb} {minutes} minutes too late. "
                f"Latest allowed check-{verb} time is "
                f"{format_time(allowed.latest.time())}."
            ),
        )

    return WindowCheck(is_valid=True, allowed=allowed)


def validate_check_in(
    candidate: dt.datetime,
    shift: ShiftConfig,
    tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
) -> WindowCheck:
    """
    Validate a check-in against the shift start.

    Args:
        candidate (dt.datetime): Check-in instant.
        shift (ShiftConfig): Active shift.
        tolerance_minutes (int): Accepted distance to the shift start.

    Returns:
        WindowCheck: Validation result.
    """
    result = _check(candidate, check_in_range(shift, candidate, tolerance_minutes), "in")
    if not result.is_valid:
        logger.debug(f"{shift!s} {result.message}")
    return result


def validate_check_out(
    candidate: dt.datetime,
    check_in: dt.datetime,
    shift: ShiftConfig,
    tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES,
) -> WindowCheck:
    """
    Validate a check-out against the shift end.

    Args:
        candidate (dt.datetime): Check-out instant.
        check_in (dt.datetime): Check-in instant of the same day.
        shift (ShiftConfig): Active shift.
        tolerance_minutes (int): Accepted distance to the shift end.

    Returns:
        WindowCheck: Validation result.

    Raises:
        CheckOutBeforeCheckIn: The check-out is not after the check-in.
    """
    if candidate <= check_in:
        raise CheckOutBeforeCheckIn(
            f"Check-out at {candidate:%Y-%m-%d %H:%M} is not after "
            f"check-in at {check_in:%Y-%m-%d %H:%M}."
        )

    result = _check(candidate, check_out_range(shift, check_in, tolerance_minutes), "out")
    if not result.is_valid:
        logger.debug(f"{shift!s} {result.message}")
    return result
