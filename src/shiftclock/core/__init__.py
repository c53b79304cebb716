#!/usr/bin/env python3
"""
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Expose the engine public API
from .errors import *
from .rules import AttendanceRules, DEFAULT_RULES
from .shift import ShiftConfig, parse_time, format_time, validate_shift
from .time_window import ShiftWindow, compute_window, is_overnight
from .attendance import (
    ActionType,
    AttendanceEvent,
    DayState,
    DayProgress,
    derive_progress,
    reset_due,
)
from .action_gate import GateReason, GateResult, WaitUnit, can_perform, check_progress
from .window_validator import (
    TimeRange,
    WindowCheck,
    WindowDirection,
    validate_check_in,
    validate_check_out,
)
from .work_hours import WorkHours, split_work_hours
from .day_status import (
    DayStatus,
    DayWorkStatus,
    classify_day,
    force_status,
    resolve_day_status,
)
from .store import AttendanceStore, MemoryAttendanceStore
from .aggregator import (
    DaySummary,
    PeriodSummary,
    month_range,
    summarize_days,
    summarize_period,
    week_range,
)
from .notes import Note, note_applies_on, notes_due_on, validate_note
from .reminders import (
    Reminder,
    ReminderType,
    note_reminders,
    shift_reminders,
    upcoming_reminders,
)
from .recorder import AttendanceRecorder, RecordResult

__all__ = [
    "ShiftClockException",
    "InvalidShiftTime",
    "InvalidShiftConfig",
    "CheckOutBeforeCheckIn",
    "MissingShiftError",
    "ActionSequenceError",
    "InvalidNote",
    "StoreException",
    "AttendanceRules",
    "DEFAULT_RULES",
    "ShiftConfig",
    "parse_time",
    "format_time",
    "validate_shift",
    "ShiftWindow",
    "compute_window",
    "is_overnight",
    "ActionType",
    "AttendanceEvent",
    "DayState",
    "DayProgress",
    "derive_progress",
    "reset_due",
    "GateReason",
    "GateResult",
    "WaitUnit",
    "can_perform",
    "check_progress",
    "TimeRange",
    "WindowCheck",
    "WindowDirection",
    "validate_check_in",
    "validate_check_out",
    "WorkHours",
    "split_work_hours",
    "DayStatus",
    "DayWorkStatus",
    "classify_day",
    "force_status",
    "resolve_day_status",
    "AttendanceStore",
    "MemoryAttendanceStore",
    "DaySummary",
    "PeriodSummary",
    "month_range",
    "summarize_days",
    "summarize_period",
    "week_range",
    "Note",
    "note_applies_on",
    "notes_due_on",
    "validate_note",
    "Reminder",
    "ReminderType",
    "note_reminders",
    "shift_reminders",
    "upcoming_reminders",
    "AttendanceRecorder",
    "RecordResult",
]
