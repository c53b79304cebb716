#!/usr/bin/env python3
"""
Declaration of shared fixtures across unit test modules.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import pytest

# Internal libraries
from tests.test_constants import *
from shiftclock.core.shift import ShiftConfig
from shiftclock.core.store import MemoryAttendanceStore
from shiftclock.core.recorder import AttendanceRecorder

########################################################################
#                            Shift fixtures                            #
########################################################################


@pytest.fixture
def day_shift() -> ShiftConfig:
    """
    Get the 08:00 to 18:00 day shift, office end at 17:00.
    """
    return ShiftConfig.from_dict(TEST_DAY_SHIFT)


@pytest.fixture
def night_shift() -> ShiftConfig:
    """
    Get the 22:00 to 06:00 overnight shift.
    """
    return ShiftConfig.from_dict(TEST_NIGHT_SHIFT)


########################################################################
#                        Store and recorder                            #
########################################################################


@pytest.fixture
def store(day_shift: ShiftConfig, night_shift: ShiftConfig) -> MemoryAttendanceStore:
    """
    Get an empty in-memory store knowing the test shifts.
    """
    return MemoryAttendanceStore((day_shift, night_shift))


@pytest.fixture
def recorder(store: MemoryAttendanceStore, day_shift: ShiftConfig) -> AttendanceRecorder:
    """
    Get a recorder for the day shift.
    """
    return AttendanceRecorder(store, day_shift.id)


@pytest.fixture
def night_recorder(
    store: MemoryAttendanceStore, night_shift: ShiftConfig
) -> AttendanceRecorder:
    """
    Get a recorder for the overnight shift.
    """
    return AttendanceRecorder(store, night_shift.id)
