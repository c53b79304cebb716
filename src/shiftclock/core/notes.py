#!/usr/bin/env python3
"""
Work notes and the weekdays they are recalled on.

A note is either tied to shifts, and recalled on the weekdays these
shifts apply to, or recalled on explicit weekdays. When at least one
shift is associated, the explicit weekdays are ignored.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import uuid
from dataclasses import dataclass, field
import datetime as dt
from typing import Any, Final, Iterable, Optional

# Internal libraries
from .errors import InvalidNote
from .shift import ShiftConfig, parse_time, format_time

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH: Final = 100
MAX_CONTENT_LENGTH: Final = 300


@dataclass(frozen=True)
class Note:
    """
    Work note.

    Attributes:
        title (str): Short title.
        content (str): Note body.
        reminder_time (Optional[dt.time]): Time of day the note is
            recalled at, `None` to only list it.
        associated_shift_ids (tuple[str, ...]): Shifts the note is tied to.
        explicit_reminder_days (tuple[int, ...]): Weekday indexes
            (Monday is 0), used when no shift is associated.
        id (str): Opaque unique identifier.
    """

    title: str
    content: str
    reminder_time: Optional[dt.time] = None
    associated_shift_ids: tuple[str, ...] = ()
    explicit_reminder_days: tuple[int, ...] = ()
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if self.reminder_time is not None:
            object.__setattr__(self, "reminder_time", parse_time(self.reminder_time))
        object.__setattr__(self, "associated_shift_ids", tuple(self.associated_shift_ids))
        object.__setattr__(
            self, "explicit_reminder_days", tuple(sorted(set(self.explicit_reminder_days)))
        )

    @property
    def reminder_days(self) -> tuple[int, ...]:
        """
        Returns:
            tuple[int, ...]: The explicit weekdays, empty when the note is
                tied to shifts.
        """
        if self.associated_shift_ids:
            return ()
        return self.explicit_reminder_days

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "reminderTime": (
                format_time(self.reminder_time) if self.reminder_time else None
            ),
            "associatedShiftIds": list(self.associated_shift_ids),
            "explicitReminderDays": list(self.reminder_days),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Note":
        return Note(
            id=data["id"],
            title=data["title"],
            content=data["content"],
            reminder_time=data.get("reminderTime"),
            associated_shift_ids=tuple(data.get("associatedShiftIds") or ()),
            explicit_reminder_days=tuple(data.get("explicitReminderDays") or ()),
        )

    def __str__(self):
        return f"Note['{self.title}']"


def validate_note(note: Note, existing: Iterable[Note] = ()) -> None:
    """
    Check a note before it is saved.

    Args:
        note (Note): Note to validate.
        existing (Iterable[Note]): Already saved notes. A note with the
            same id is ignored (edition).

    Raises:
        InvalidNote: At least one rule is violated. All the errors found
            are reported.
    """
    errors: dict[str, str] = {}

    title = note.title.strip()
    content = note.content.strip()

    if not title:
        errors["title"] = "title is required"
    elif len(title) > MAX_TITLE_LENGTH:
        errors["title"] = f"title exceeds {MAX_TITLE_LENGTH} characters"

    if not content:
        errors["content"] = "content is required"
    elif len(content) > MAX_CONTENT_LENGTH:
        errors["content"] = f"content exceeds {MAX_CONTENT_LENGTH} characters"

    if not note.associated_shift_ids and not note.explicit_reminder_days:
        errors["reminder_days"] = "select a shift or at least one weekday"
    elif any(not 0 <= day <= 6 for day in note.explicit_reminder_days):
        errors["reminder_days"] = "weekday indexes must be in [0, 6]"

    if title and content and any(
        other.id != note.id
        and other.title.strip() == title
        and other.content.strip() == content
        for other in existing
    ):
        errors["content"] = "an identical note already exists"

    if errors:
        logger.debug(f"{note!s} Validation failed with {len(errors)} error(s).")
        raise InvalidNote(errors)


def note_applies_on(
    note: Note, date: dt.date | dt.datetime, shifts: Iterable[ShiftConfig] = ()
) -> bool:
    """
    Tell if a note is recalled on the weekday of `date`.

    Args:
        note (Note): Note to check.
        date (dt.date | dt.datetime): Day to check.
        shifts (Iterable[ShiftConfig]): Known shifts. Associated ids
            without a matching shift are ignored.

    Returns:
        bool: `True` if the note applies on that day.
    """
    if note.associated_shift_ids:
        return any(
            shift.applies_on(date)
            for shift in shifts
            if shift.id in note.associated_shift_ids
        )
    return date.weekday() in note.explicit_reminder_days


def notes_due_on(
    notes: Iterable[Note], date: dt.date | dt.datetime, shifts: Iterable[ShiftConfig] = ()
) -> list[Note]:
    """
    Select the notes recalled on the weekday of `date`, the ones with a
    reminder time first, by reminder time.

    Returns:
        list[Note]: Notes due on that day.
    """
    shifts = tuple(shifts)
    due = [note for note in notes if note_applies_on(note, date, shifts)]
    return sorted(
        due,
        key=lambda note: (note.reminder_time is None, note.reminder_time or dt.time()),
    )
