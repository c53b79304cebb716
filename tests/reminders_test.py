#!/usr/bin/env python3
"""
Unit test the reminder instants.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import pytest
import datetime as dt

# Internal libraries
from .test_constants import *
from shiftclock.core.shift import ShiftConfig
from shiftclock.core.notes import Note
from shiftclock.core.reminders import (
    ReminderType,
    note_reminders,
    shift_reminders,
    upcoming_reminders,
)

NEXT_DAY = TEST_DATE + dt.timedelta(days=1)


def test_day_shift_reminders(day_shift: ShiftConfig):
    reminders = shift_reminders(day_shift, TEST_DATE, TEST_TZ)

    assert [r.kind for r in reminders] == [
        ReminderType.DEPARTURE,
        ReminderType.CHECK_IN,
        ReminderType.CHECK_OUT,
    ]
    assert [r.at for r in reminders] == [
        at(TEST_DATE, 7, 30),
        at(TEST_DATE, 7, 45),
        at(TEST_DATE, 18, 10),
    ]
    assert all(r.subject_id == day_shift.id for r in reminders)


def test_no_reminders_on_off_days(day_shift: ShiftConfig):
    assert shift_reminders(day_shift, TEST_SATURDAY, TEST_TZ) == []


def test_overnight_check_out_reminder(night_shift: ShiftConfig):
    reminders = shift_reminders(night_shift, TEST_DATE, TEST_TZ)
    assert reminders[-1].kind is ReminderType.CHECK_OUT
    assert reminders[-1].at == at(NEXT_DAY, 6, 15)


def test_upcoming_reminders(day_shift: ShiftConfig):
    reminders = upcoming_reminders(day_shift, at(TEST_DATE, 12), days=2)

    assert [r.at for r in reminders] == [
        at(TEST_DATE, 18, 10),
        at(NEXT_DAY, 7, 30),
        at(NEXT_DAY, 7, 45),
        at(NEXT_DAY, 18, 10),
    ]


def test_upcoming_includes_previous_shift(night_shift: ShiftConfig):
    """
    The check-out reminder of the shift started yesterday is still ahead
    after midnight.
    """
    reminders = upcoming_reminders(night_shift, at(NEXT_DAY, 1), days=1)

    assert reminders[0].kind is ReminderType.CHECK_OUT
    assert reminders[0].at == at(NEXT_DAY, 6, 15)
    assert len(reminders) == 4


def test_note_reminders(day_shift: ShiftConfig):
    timed = Note("Keys", "Return the keys", "16:30", associated_shift_ids=(day_shift.id,))
    listed = Note("Listed", "No reminder", explicit_reminder_days=(2,))

    reminders = note_reminders([listed, timed], TEST_DATE, [day_shift], TEST_TZ)

    assert len(reminders) == 1
    assert reminders[0].kind is ReminderType.NOTE
    assert reminders[0].at == at(TEST_DATE, 16, 30)
    assert reminders[0].subject_id == timed.id
    assert reminders[0].message == "Keys"
    assert note_reminders([timed], TEST_SATURDAY, [day_shift], TEST_TZ) == []
