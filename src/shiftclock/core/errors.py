#!/usr/bin/env python3
"""
Errors raised by the attendance engine.

Only data and precondition errors are raised. Advisory rule violations
(minimum gap between two actions, punch outside the shift window) are
returned as result objects so the host can offer an override.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
from typing import Mapping, Optional


class ShiftClockException(Exception):
    """Base type for all exceptions related to the attendance engine."""

    pass


class InvalidShiftTime(ShiftClockException):
    """A shift time value cannot be parsed or is out of range."""

    def __init__(self, message: str = "Invalid shift time."):
        super().__init__(message)


class InvalidShiftConfig(ShiftClockException):
    """
    One or several shift invariants are violated.

    Attributes:
        errors (dict[str, str]): Error description by field name.
    """

    def __init__(self, errors: Mapping[str, str]):
        self.errors = dict(errors)
        details = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Invalid shift configuration ({details}).")


class CheckOutBeforeCheckIn(ShiftClockException):
    """The check-out time is not after the check-in time."""

    def __init__(self, message: str = "Check-out time must be after check-in time."):
        super().__init__(message)


class MissingShiftError(ShiftClockException):
    """An operation requires a shift but none is available."""

    def __init__(self, shift_id: Optional[str] = None):
        if shift_id is None:
            super().__init__("No active shift available.")
        else:
            super().__init__(f"Shift '{shift_id}' not found.")


class ActionSequenceError(ShiftClockException):
    """The attendance action doesn't follow the day's action sequence."""

    def __init__(self, message: str = "Action is out of sequence."):
        super().__init__(message)


class InvalidNote(ShiftClockException):
    """
    A note fails its validation rules.

    Attributes:
        errors (dict[str, str]): Error description by field name.
    """

    def __init__(self, errors: Mapping[str, str]):
        self.errors = dict(errors)
        details = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Invalid note ({details}).")


class StoreException(ShiftClockException):
    """Error raised by an attendance store implementation."""

    def __init__(self, message: str = "Attendance store operation failed."):
        super().__init__(message)
