#!/usr/bin/env python3
"""
Unit test the attendance recording pipeline against the in-memory
store.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import pytest
from pytest import approx
import datetime as dt
import logging

# Internal libraries
from .test_constants import *
from shiftclock.core.errors import ActionSequenceError, MissingShiftError
from shiftclock.core.attendance import ActionType, DayState
from shiftclock.core.action_gate import GateReason
from shiftclock.core.window_validator import WindowDirection
from shiftclock.core.day_status import DayStatus
from shiftclock.core.store import MemoryAttendanceStore
from shiftclock.core.shift import ShiftConfig
from shiftclock.core.recorder import AttendanceRecorder

NEXT_DAY = TEST_DATE + dt.timedelta(days=1)


def record_full_day(recorder: AttendanceRecorder):
    """
    Record a day with 45 minutes of overtime, completed at 17:50.
    """
    for action, stamp in (
        (ActionType.GO_WORK, at(TEST_DATE, 7, 30)),
        (ActionType.CHECK_IN, at(TEST_DATE, 8)),
        (ActionType.CHECK_OUT, at(TEST_DATE, 17, 45)),
        (ActionType.COMPLETE, at(TEST_DATE, 17, 50)),
    ):
        result = recorder.record(action, stamp)
        assert result.recorded


def test_missing_shift_raises(store: MemoryAttendanceStore):
    with pytest.raises(MissingShiftError, match="unknown"):
        AttendanceRecorder(store, "unknown")


def test_full_day(recorder: AttendanceRecorder, store: MemoryAttendanceStore):
    go_work = recorder.record(ActionType.GO_WORK, at(TEST_DATE, 7, 30))
    assert go_work.recorded
    assert go_work.day == TEST_DATE
    assert go_work.window is None
    assert go_work.status.status is DayStatus.INCOMPLETE

    check_in = recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 8))
    assert check_in.window.is_valid
    assert check_in.progress.state is DayState.CHECKED_IN

    check_out = recorder.record(ActionType.CHECK_OUT, at(TEST_DATE, 17, 45))
    assert check_out.window.is_valid
    assert check_out.status.status is DayStatus.OVERTIME
    assert check_out.status.overtime == approx(0.75)

    complete = recorder.record(ActionType.COMPLETE, at(TEST_DATE, 17, 50))
    assert complete.progress.state is DayState.COMPLETED
    assert complete.status == check_out.status

    assert len(store.load_events_for_date(TEST_DATE)) == 4
    assert store.load_day_status(TEST_DATE) == complete.status
    assert recorder.day_status(TEST_DATE) == complete.status


def test_out_of_sequence_raises(recorder: AttendanceRecorder):
    with pytest.raises(ActionSequenceError):
        recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 8))

    record_full_day(recorder)
    with pytest.raises(ActionSequenceError):
        recorder.record(ActionType.COMPLETE, at(TEST_DATE, 18))


def test_blocked_action_not_recorded(
    recorder: AttendanceRecorder, store: MemoryAttendanceStore
):
    recorder.record(ActionType.GO_WORK, at(TEST_DATE, 7, 30))
    result = recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 7, 33))

    assert not result.recorded
    assert not result.forced
    assert result.gate.reason is GateReason.CHECK_IN_TOO_SOON
    assert result.gate.wait_amount == 120
    assert result.event is None
    assert len(store.load_events_for_date(TEST_DATE)) == 1


def test_forced_action(recorder: AttendanceRecorder, caplog: pytest.LogCaptureFixture):
    """
    A forced action is recorded despite the time rule, and the window
    warning is attached.
    """
    recorder.record(ActionType.GO_WORK, at(TEST_DATE, 7, 30))

    with caplog.at_level(logging.WARNING):
        result = recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 7, 33), force=True)

    assert result.recorded
    assert result.forced
    assert not result.window.is_valid
    assert result.window.direction is WindowDirection.EARLY
    assert result.window.minutes_off == 12
    assert "Forced" in caplog.text


def test_late_check_in_warns(recorder: AttendanceRecorder):
    recorder.record(ActionType.GO_WORK, at(TEST_DATE, 7, 30))
    result = recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 8, 30))

    assert result.recorded
    assert not result.window.is_valid
    assert result.window.direction is WindowDirection.LATE


def test_overnight_day(night_recorder: AttendanceRecorder, store: MemoryAttendanceStore):
    """
    The actions after midnight belong to the day the shift started on.
    """
    for action, stamp in (
        (ActionType.GO_WORK, at(TEST_DATE, 21, 15)),
        (ActionType.CHECK_IN, at(TEST_DATE, 22)),
        (ActionType.CHECK_OUT, at(NEXT_DAY, 6, 5)),
        (ActionType.COMPLETE, at(NEXT_DAY, 6, 10)),
    ):
        result = night_recorder.record(action, stamp)
        assert result.recorded
        assert result.day == TEST_DATE

    assert result.window is None
    assert result.status.status is DayStatus.FULL_ATTENDANCE
    assert result.status.total_work_time == approx(8.0)
    assert store.load_events_for_date(NEXT_DAY) == []
    assert night_recorder.current_day(at(NEXT_DAY, 9)) == NEXT_DAY


def test_overnight_check_out_window(night_recorder: AttendanceRecorder):
    night_recorder.record(ActionType.GO_WORK, at(TEST_DATE, 21, 15))
    night_recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 22, 5))
    result = night_recorder.record(ActionType.CHECK_OUT, at(NEXT_DAY, 6, 10))

    assert result.window.is_valid


########################################################################
#                              Day reset                               #
########################################################################


def test_reset_due_after_end(recorder: AttendanceRecorder):
    assert not recorder.reset_due(at(TEST_DATE, 12))

    record_full_day(recorder)
    assert not recorder.reset_due(at(TEST_DATE, 19, 49))
    assert recorder.reset_due(at(TEST_DATE, 19, 50))


def test_rollover_keeps_status(
    recorder: AttendanceRecorder, store: MemoryAttendanceStore
):
    record_full_day(recorder)
    status = recorder.day_status(TEST_DATE)

    assert not recorder.rollover(at(TEST_DATE, 18))
    assert recorder.rollover(at(TEST_DATE, 20))

    assert store.load_events_for_date(TEST_DATE) == []
    assert recorder.day_status(TEST_DATE) == status
    assert recorder.progress(TEST_DATE).state is DayState.IDLE

    # A new cycle can start
    assert recorder.record(ActionType.GO_WORK, at(TEST_DATE, 20, 5)).recorded


def test_forgotten_check_out(recorder: AttendanceRecorder, store: MemoryAttendanceStore):
    """
    A day shift left checked in doesn't block the next morning.
    """
    recorder.record(ActionType.GO_WORK, at(TEST_DATE, 7, 30))
    recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 8))

    # Not carried into the next morning, 2 hours after the shift end passed
    assert recorder.current_day(at(NEXT_DAY, 7, 30)) == NEXT_DAY
    assert recorder.reset_due(at(NEXT_DAY, 7, 30))

    assert recorder.rollover(at(NEXT_DAY, 7, 30))
    assert store.load_events_for_date(TEST_DATE) == []
    assert recorder.day_status(TEST_DATE).status is DayStatus.INCOMPLETE

    result = recorder.record(ActionType.GO_WORK, at(NEXT_DAY, 7, 30))
    assert result.recorded
    assert result.day == NEXT_DAY


def test_forgotten_check_out_without_rollover(recorder: AttendanceRecorder):
    recorder.record(ActionType.GO_WORK, at(TEST_DATE, 7, 30))
    recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 8))

    result = recorder.record(ActionType.GO_WORK, at(NEXT_DAY, 7, 30))
    assert result.recorded
    assert result.day == NEXT_DAY
    assert recorder.progress(TEST_DATE).state is DayState.CHECKED_IN


def test_overnight_forgotten_check_out(night_recorder: AttendanceRecorder):
    night_recorder.record(ActionType.GO_WORK, at(TEST_DATE, 21, 15))
    night_recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 22))

    # The shift ends at 06:00, the reset is due 2 hours later
    assert night_recorder.current_day(at(NEXT_DAY, 7, 59)) == TEST_DATE
    assert not night_recorder.reset_due(at(NEXT_DAY, 7, 59))
    assert night_recorder.current_day(at(NEXT_DAY, 8)) == NEXT_DAY
    assert night_recorder.reset_due(at(NEXT_DAY, 8))


def test_reset_day(recorder: AttendanceRecorder, store: MemoryAttendanceStore):
    record_full_day(recorder)
    recorder.reset_day(TEST_DATE)

    assert store.load_events_for_date(TEST_DATE) == []
    assert store.load_day_status(TEST_DATE) is None
    assert recorder.day_status(TEST_DATE).status is DayStatus.NOT_UPDATED


########################################################################
#                           Manual statuses                            #
########################################################################


def test_manual_status_not_recomputed(recorder: AttendanceRecorder):
    manual = recorder.set_manual_status(TEST_DATE, DayStatus.SICK, "Flu")
    assert manual.manual
    assert manual.total_work_time == 0.0

    result = recorder.record(ActionType.GO_WORK, at(TEST_DATE, 7, 30))
    assert result.status == manual
    assert recorder.day_status(TEST_DATE) == manual


def test_forced_derived_label(recorder: AttendanceRecorder):
    recorder.record(ActionType.GO_WORK, at(TEST_DATE, 7, 30))
    recorder.record(ActionType.CHECK_IN, at(TEST_DATE, 8, 20))
    late = recorder.record(ActionType.CHECK_OUT, at(TEST_DATE, 17)).status
    assert late.status is DayStatus.LATE_ARRIVAL

    forced = recorder.set_manual_status(
        TEST_DATE, DayStatus.FULL_ATTENDANCE, "Train delay"
    )
    assert forced.manual
    assert forced.total_work_time == late.total_work_time
    assert recorder.day_status(TEST_DATE) == forced


def test_summarize(recorder: AttendanceRecorder):
    record_full_day(recorder)
    summary = recorder.summarize(TEST_DATE, TEST_DATE + dt.timedelta(days=1))

    assert summary.total_hours == approx(9.75)
    assert summary.overtime_hours == approx(0.75)
    assert summary.count(DayStatus.OVERTIME) == 1
    assert summary.count(DayStatus.NOT_UPDATED) == 1


########################################################################
#                               Timezone                               #
########################################################################


def test_instants_localized(store: MemoryAttendanceStore, day_shift: ShiftConfig):
    """
    The day of an action is taken in the recorder timezone.
    """
    recorder = AttendanceRecorder(store, day_shift.id, tzinfo=dt.timezone.utc)
    assert recorder.tzinfo is dt.timezone.utc

    # 01:00 at UTC+2 is still the day before in UTC
    previous_day = TEST_DATE - dt.timedelta(days=1)
    assert recorder.current_day(at(TEST_DATE, 1)) == previous_day

    result = recorder.record(ActionType.GO_WORK, at(TEST_DATE, 1))
    assert result.day == previous_day
    assert result.event.timestamp.tzinfo is dt.timezone.utc
    assert result.event.timestamp == at(TEST_DATE, 1)


def test_upcoming_reminders(store: MemoryAttendanceStore, day_shift: ShiftConfig):
    recorder = AttendanceRecorder(store, day_shift.id, tzinfo=dt.timezone.utc)
    reminders = recorder.upcoming_reminders(at(TEST_DATE, 12), days=1)

    # 10:00 UTC, only the check-out reminder of the day remains
    assert len(reminders) == 1
    assert reminders[0].at == dt.datetime(2025, 5, 7, 18, 10, tzinfo=dt.timezone.utc)
