#!/usr/bin/env python3
"""
Attendance recording pipeline.

The recorder ties the engine components to a store: an action is
checked against the day sequence and the time rules, recorded, and the
day status is classified again. It holds no state of its own, the day
in progress is always derived from the store and the given time.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
from dataclasses import dataclass
import datetime as dt
from typing import Optional

# Internal libraries
from .errors import MissingShiftError
from .rules import AttendanceRules, DEFAULT_RULES
from .shift import ShiftConfig
from .attendance import (
    ActionType,
    AttendanceEvent,
    DayProgress,
    DayState,
    derive_progress,
    reset_due,
)
from .action_gate import GateResult, check_progress
from .window_validator import WindowCheck, validate_check_in, validate_check_out
from .day_status import (
    DayStatus,
    DayWorkStatus,
    classify_day,
    force_status,
    resolve_day_status,
)
from .aggregator import PeriodSummary, summarize_period
from .reminders import Reminder, upcoming_reminders
from .store import AttendanceStore
from .time_window import compute_window

logger = logging.getLogger(__name__)

_ONE_DAY = dt.timedelta(days=1)

# States of a day that can be carried on after midnight
_OPEN_STATES = (DayState.WENT_TO_WORK, DayState.CHECKED_IN, DayState.CHECKED_OUT)


@dataclass(frozen=True)
class RecordResult:
    """
    Outcome of a record request.

    Attributes:
        recorded (bool): `True` if the event was appended.
        day (dt.date): Tracked day the action belongs to.
        gate (GateResult): Time rule decision, forced past when
            `recorded` is `True` and the gate is blocked.
        progress (DayProgress): Day progress after the request.
        event (Optional[AttendanceEvent]): The recorded event.
        window (Optional[WindowCheck]): Advisory shift window check, for
            check-in and check-out only.
        status (Optional[DayWorkStatus]): Day status after the event.
    """

    recorded: bool
    day: dt.date
    gate: GateResult
    progress: DayProgress
    event: Optional[AttendanceEvent] = None
    window: Optional[WindowCheck] = None
    status: Optional[DayWorkStatus] = None

    @property
    def forced(self) -> bool:
        return self.recorded and not self.gate.allowed


class AttendanceRecorder:
    """
    Records the attendance actions of one shift in a store.
    """

    def __init__(
        self,
        store: AttendanceStore,
        shift_id: str,
        rules: AttendanceRules = DEFAULT_RULES,
        tzinfo: Optional[dt.tzinfo] = None,
    ):
        """
        Load the shift from the store.

        Args:
            store (AttendanceStore): Events and statuses store.
            shift_id (str): Identifier of the active shift.
            rules (AttendanceRules): Engine rules.
            tzinfo (Optional[dt.tzinfo]): Timezone the instants are
                converted to before their day is taken, `None` to keep
                the timezone of the given instants.

        Raises:
            MissingShiftError: The shift doesn't exist.
            StoreException: The store failed to load the shift.
        """
        shift = store.load_shift_config(shift_id)
        if shift is None:
            raise MissingShiftError(shift_id)

        self._store = store
        self._shift: ShiftConfig = shift
        self._rules = rules
        self._tzinfo = tzinfo

    @property
    def shift(self) -> ShiftConfig:
        return self._shift

    @property
    def rules(self) -> AttendanceRules:
        return self._rules

    @property
    def tzinfo(self) -> Optional[dt.tzinfo]:
        return self._tzinfo

    def _localize(self, now: dt.datetime) -> dt.datetime:
        if self._tzinfo is None:
            return now
        return now.astimezone(self._tzinfo)

    def progress(self, date: dt.date) -> DayProgress:
        """
        Returns:
            DayProgress: Progress of the given day.
        """
        return derive_progress(self._store.load_events_for_date(date))

    def _candidate_day(self, now: dt.datetime) -> tuple[dt.date, DayProgress]:
        """
        Get the day an action at `now` would continue: the day started
        yesterday while it is still open and nothing is recorded today,
        otherwise today.
        """
        today = now.date()
        if not self._store.load_events_for_date(today):
            yesterday = today - _ONE_DAY
            progress = self.progress(yesterday)
            if progress.state in _OPEN_STATES:
                return yesterday, progress
        return today, self.progress(today)

    def _reset_due(self, day: dt.date, progress: DayProgress, now: dt.datetime) -> bool:
        shift_end = compute_window(self._shift, day, now.tzinfo).end
        return reset_due(progress, day, now, self._rules, shift_end)

    def current_day(self, now: dt.datetime) -> dt.date:
        """
        Get the tracked day at `now`.

        It is the day before when nothing is recorded today and the day
        started yesterday is neither completed nor due for a reset
        (overnight shift), otherwise today. A day left open after its
        shift end (forgotten check-out) is no longer tracked once its
        reset is due.

        Returns:
            dt.date: Tracked day.
        """
        now = self._localize(now)
        day, progress = self._candidate_day(now)
        if day != now.date() and self._reset_due(day, progress, now):
            return now.date()
        return day

    def record(
        self, action: ActionType, now: dt.datetime, force: bool = False
    ) -> RecordResult:
        """
        Record an attendance action.

        The action must be the next one of the day. An action blocked by
        the time rules is not recorded unless `force` is set. The shift
        window check is advisory, a punch outside the window is recorded
        with the warning attached to the result.

        Args:
            action (ActionType): Action to record.
            now (dt.datetime): Current date and time, timezone aware.
            force (bool): Record even if the time rules block the action.

        Returns:
            RecordResult: Outcome of the request.

        Raises:
            ActionSequenceError: The action is not the next one of the day.
            CheckOutBeforeCheckIn: The check-out is not after the check-in.
            StoreException: The store failed.
        """
        now = self._localize(now)
        day = self.current_day(now)
        progress = self.progress(day)
        progress.check_next(action)

        gate = check_progress(progress, action, now, self._rules)
        if not gate.allowed and not force:
            logger.info(f"{self._shift!s} '{action}' refused: {gate!s}.")
            return RecordResult(recorded=False, day=day, gate=gate, progress=progress)

        window = None
        tolerance = self._rules.window_tolerance
        if action is ActionType.CHECK_IN:
            window = validate_check_in(now, self._shift, tolerance)
        elif action is ActionType.CHECK_OUT:
            check_in = progress.timestamp(ActionType.CHECK_IN)
            assert check_in is not None
            window = validate_check_out(now, check_in, self._shift, tolerance)

        event = AttendanceEvent(action=action, timestamp=now)
        self._store.append_event(day, event)

        if gate.allowed:
            logger.info(f"{self._shift!s} Recorded {event!s} for {day.isoformat()}.")
        else:
            logger.warning(
                f"{self._shift!s} Forced {event!s} for {day.isoformat()} ({gate!s})."
            )

        progress = self.progress(day)
        status = self._refresh_status(day, progress)

        return RecordResult(
            recorded=True,
            day=day,
            gate=gate,
            progress=progress,
            event=event,
            window=window,
            status=status,
        )

    def _refresh_status(self, day: dt.date, progress: DayProgress) -> DayWorkStatus:
        """
        Classify the day again and save the result, unless a manual status
        is set.
        """
        stored = self._store.load_day_status(day)
        if stored is not None and stored.manual:
            logger.debug(f"{self._shift!s} Manual status kept for {day.isoformat()}.")
            return stored

        status = classify_day(progress.events, self._shift, self._rules, day)
        self._store.save_day_status(day, status)
        return status

    def reset_due(self, now: dt.datetime) -> bool:
        """
        Tell if the host should reset the tracked day, once a finished day
        is over, a day left open is past its shift end, or the calendar
        day changed.

        Returns:
            bool: `True` if `rollover()` should be called.
        """
        now = self._localize(now)
        day, progress = self._candidate_day(now)
        return self._reset_due(day, progress, now)

    def rollover(self, now: dt.datetime) -> bool:
        """
        Clear the events of the tracked day when its reset is due,
        keeping its saved status for the summaries.

        Returns:
            bool: `True` if the day was cleared.
        """
        now = self._localize(now)
        day, progress = self._candidate_day(now)
        if not self._reset_due(day, progress, now):
            return False

        self._refresh_status(day, progress)
        self._store.clear_events_for_date(day)
        logger.info(f"{self._shift!s} Tracked day {day.isoformat()} rolled over.")
        return True

    def reset_day(self, date: dt.date):
        """
        Clear the events and the saved status of a day.
        """
        self._store.clear_events_for_date(date)
        self._store.clear_day_status(date)
        logger.info(f"{self._shift!s} Day {date.isoformat()} reset.")

    def set_manual_status(
        self, date: dt.date, status: DayStatus, remarks: str = ""
    ) -> DayWorkStatus:
        """
        Override the status of a day. The override is never recomputed by
        the classifier.

        A derived label keeps the worked time of the day, a manual only
        label (leave, sickness, ...) has no worked time.

        Returns:
            DayWorkStatus: The saved status.
        """
        if status.is_manual_only:
            override = DayWorkStatus.manual_status(status, remarks)
        else:
            derived = classify_day(
                self._store.load_events_for_date(date), self._shift, self._rules, date
            )
            override = force_status(derived, status, remarks)

        self._store.save_day_status(date, override)
        logger.info(f"{self._shift!s} Manual status {override!s} set for {date.isoformat()}.")
        return override

    def day_status(self, date: dt.date) -> DayWorkStatus:
        """
        Returns:
            DayWorkStatus: Status of the given day.
        """
        return resolve_day_status(
            self._store.load_events_for_date(date),
            self._shift,
            self._store.load_day_status(date),
            self._rules,
            day=date,
        )

    def summarize(self, first: dt.date, last: dt.date) -> PeriodSummary:
        """
        Returns:
            PeriodSummary: Summary of the days from `first` to `last`.
        """
        return summarize_period(first, last, self._store, self._shift, self._rules)

    def upcoming_reminders(self, now: dt.datetime, days: int = 7) -> list[Reminder]:
        """
        Returns:
            list[Reminder]: Reminders of the shift due after `now` over the
                next `days` days, in the recorder timezone.
        """
        return upcoming_reminders(self._shift, self._localize(now), days)
