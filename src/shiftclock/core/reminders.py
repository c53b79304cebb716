#!/usr/bin/env python3
"""
Reminder instants for the host notification scheduler.

The engine only computes when the reminders are due, delivering them is
the host's concern.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
from dataclasses import dataclass
from enum import Enum
import datetime as dt
from typing import Iterable, Optional

# Internal libraries
from .shift import ShiftConfig
from .notes import Note, notes_due_on
from .time_window import anchor, compute_window

_ONE_DAY = dt.timedelta(days=1)


class ReminderType(Enum):
    DEPARTURE = "departure"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    NOTE = "note"


@dataclass(frozen=True)
class Reminder:
    """
    A reminder to deliver.

    Attributes:
        kind (ReminderType): Reminder type.
        at (dt.datetime): Instant the reminder is due.
        subject_id (str): Identifier of the shift or note.
        message (str): Default text for the notification.
    """

    kind: ReminderType
    at: dt.datetime
    subject_id: str
    message: str

    def __str__(self):
        return f"Reminder[{self.kind.value} at {self.at:%Y-%m-%d %H:%M}]"


def shift_reminders(
    shift: ShiftConfig, date: dt.date, tzinfo: Optional[dt.tzinfo] = None
) -> list[Reminder]:
    """
    Get the reminders of the shift starting on `date`.

    Returns:
        list[Reminder]: Departure, check-in and check-out reminders, or an
            empty list if the shift doesn't apply on that day.
    """
    if not shift.applies_on(date):
        return []

    window = compute_window(shift, date, tzinfo)
    return [
        Reminder(
            ReminderType.DEPARTURE,
            window.departure,
            shift.id,
            f"Time to leave for '{shift.name}'.",
        ),
        Reminder(
            ReminderType.CHECK_IN,
            window.start - dt.timedelta(minutes=shift.remind_before_start),
            shift.id,
            f"'{shift.name}' starts in {shift.remind_before_start} minutes.",
        ),
        Reminder(
            ReminderType.CHECK_OUT,
            window.end + dt.timedelta(minutes=shift.remind_after_end),
            shift.id,
            f"'{shift.name}' is over, remember to check out.",
        ),
    ]


def note_reminders(
    notes: Iterable[Note],
    date: dt.date,
    shifts: Iterable[ShiftConfig] = (),
    tzinfo: Optional[dt.tzinfo] = None,
) -> list[Reminder]:
    """
    Get the reminders of the notes due on `date` that have a reminder
    time.

    Returns:
        list[Reminder]: Note reminders, chronologically.
    """
    return [
        Reminder(ReminderType.NOTE, anchor(note.reminder_time, date, tzinfo), note.id, note.title)
        for note in notes_due_on(notes, date, shifts)
        if note.reminder_time is not None
    ]


def upcoming_reminders(
    shift: ShiftConfig, now: dt.datetime, days: int = 7
) -> list[Reminder]:
    """
    Get the shift reminders due after `now` over the next `days` days.

    The shift that started the day before is included, its check-out
    reminder may still be ahead for an overnight shift.

    Returns:
        list[Reminder]: Reminders strictly after `now`, chronologically.
    """
    today = now.date()
    reminders = []
    for offset in range(-1, days):
        reminders.extend(shift_reminders(shift, today + offset * _ONE_DAY, now.tzinfo))

    return sorted(
        (reminder for reminder in reminders if reminder.at > now),
        key=lambda reminder: reminder.at,
    )
