#!/usr/bin/env python3
"""
Attendance events and the explicit state of a working day.

A day follows a strictly linear sequence of actions:
`go_work -> check_in -> check_out -> complete`. The events logged for a
day are append-only, their state is derived once by `derive_progress()`
instead of scanning the raw list in each component.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import uuid
from dataclasses import dataclass, field
from enum import Enum, auto
import datetime as dt
from typing import Any, Iterable, Optional

# Internal libraries
from .errors import ActionSequenceError
from .rules import AttendanceRules, DEFAULT_RULES

########################################################################
#                     Attendance event declaration                     #
########################################################################


class ActionType(Enum):
    """Attendance actions, in their chronological order."""

    GO_WORK = "go_work"  # The user leaves for work
    CHECK_IN = "check_in"  # The user starts working
    CHECK_OUT = "check_out"  # The user stops working
    COMPLETE = "complete"  # The day is closed

    @property
    def order(self) -> int:
        return _SEQUENCE.index(self)

    @property
    def predecessor(self) -> Optional["ActionType"]:
        """
        Returns:
            Optional[ActionType]: The action expected right before this
                one, `None` for the first action of the day.
        """
        if self.order == 0:
            return None
        return _SEQUENCE[self.order - 1]

    def __str__(self):
        return self.value


_SEQUENCE = tuple(ActionType)


@dataclass(frozen=True)
class AttendanceEvent:
    """
    A logged attendance action.

    Attributes:
        action (ActionType): Logged action.
        timestamp (dt.datetime): Instant of the action, timezone aware
            for stored events.
        id (str): Opaque unique identifier.
    """

    action: ActionType
    timestamp: dt.datetime
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def date(self) -> dt.date:
        """
        Returns:
            dt.date: Local calendar day of the event, used as storage key.
        """
        return self.timestamp.date()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.action.value,
            "timestamp": self.timestamp.isoformat(),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "AttendanceEvent":
        return AttendanceEvent(
            id=data["id"],
            action=ActionType(data["type"]),
            timestamp=dt.datetime.fromisoformat(data["timestamp"]),
        )

    def __str__(self):
        return f"{self.action} at {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}"


########################################################################
#                        Day progress declaration                      #
########################################################################


class DayState(Enum):
    """State of a working day, after its last logged action."""

    IDLE = auto()
    WENT_TO_WORK = auto()
    CHECKED_IN = auto()
    CHECKED_OUT = auto()
    COMPLETED = auto()

    @classmethod
    def after(cls, action: Optional[ActionType]) -> "DayState":
        """
        Returns:
            DayState: State reached once the given action is logged.
        """
        if action is None:
            return cls.IDLE
        return _STATE_AFTER[action]


_STATE_AFTER = {
    ActionType.GO_WORK: DayState.WENT_TO_WORK,
    ActionType.CHECK_IN: DayState.CHECKED_IN,
    ActionType.CHECK_OUT: DayState.CHECKED_OUT,
    ActionType.COMPLETE: DayState.COMPLETED,
}


@dataclass(frozen=True)
class DayProgress:
    """
    Explicit state of a day derived from its events.

    Attributes:
        state (DayState): Current state.
        events (tuple[AttendanceEvent, ...]): Chronologically sorted
            events.
        latest (dict[ActionType, AttendanceEvent]): Latest event of each
            logged action.
    """

    state: DayState = DayState.IDLE
    events: tuple[AttendanceEvent, ...] = ()
    latest: dict[ActionType, AttendanceEvent] = field(default_factory=dict)

    @property
    def last_event(self) -> Optional[AttendanceEvent]:
        return self.events[-1] if self.events else None

    @property
    def next_action(self) -> Optional[ActionType]:
        """
        Returns:
            Optional[ActionType]: The only action allowed next, `None`
                once the day is completed.
        """
        if self.state is DayState.COMPLETED:
            return None
        if self.state is DayState.IDLE:
            return ActionType.GO_WORK
        last = max(self.latest, key=lambda action: action.order)
        return _SEQUENCE[last.order + 1]

    def event(self, action: ActionType) -> Optional[AttendanceEvent]:
        return self.latest.get(action)

    def timestamp(self, action: ActionType) -> Optional[dt.datetime]:
        evt = self.latest.get(action)
        return evt.timestamp if evt else None

    def has(self, *actions: ActionType) -> bool:
        return all(action in self.latest for action in actions)

    def check_next(self, action: ActionType):
        """
        Check that the given action can be logged next.

        Raises:
            ActionSequenceError: The day is completed or the action is
                not the expected one.
        """
        if self.state is DayState.COMPLETED:
            raise ActionSequenceError(
                f"The day is completed, '{action}' cannot be logged."
            )
        if action is not self.next_action:
            raise ActionSequenceError(
                f"Expected '{self.next_action}' but got '{action}'."
            )


def derive_progress(events: Iterable[AttendanceEvent]) -> DayProgress:
    """
    Derive the state of a day from its events, in any order.

    The state is the one reached after the furthest action of the
    sequence found in the events.

    Returns:
        DayProgress: The day progress.
    """
    ordered = tuple(sorted(events, key=lambda evt: evt.timestamp))

    latest: dict[ActionType, AttendanceEvent] = {}
    for evt in ordered:
        latest[evt.action] = evt

    furthest = max(latest, key=lambda action: action.order, default=None)
    return DayProgress(state=DayState.after(furthest), events=ordered, latest=latest)


def reset_due(
    progress: DayProgress,
    day: dt.date,
    now: dt.datetime,
    rules: AttendanceRules = DEFAULT_RULES,
    shift_end: Optional[dt.datetime] = None,
) -> bool:
    """
    Tell if the tracked day should be reset so that a new day can start.

    A finished day (checked out or completed) is reset once the
    configured delay after its last action elapsed. A day still in
    progress is kept across midnight, for overnight shifts, until the
    same delay after its shift end (a forgotten check-out). Any day older
    than yesterday is reset.

    Args:
        progress (DayProgress): Progress of the tracked day.
        day (dt.date): Date of the tracked day.
        now (dt.datetime): Current date and time.
        rules (AttendanceRules): Engine rules.
        shift_end (Optional[dt.datetime]): End of the shift started on
            `day`. Without it, a day in progress is kept until the day
            after tomorrow.

    Returns:
        bool: `True` if the day should be reset.
    """
    if progress.state is DayState.IDLE:
        return False

    days_elapsed = (now.date() - day).days
    if days_elapsed > 1:
        return True

    if progress.state in (DayState.CHECKED_OUT, DayState.COMPLETED):
        last = progress.last_event
        assert last is not None
        return now - last.timestamp >= rules.delta("reset_after_end")

    if days_elapsed == 1 and shift_end is not None:
        return now - shift_end >= rules.delta("reset_after_end")

    return False
