#!/usr/bin/env python3
"""
Unit test the minimum delay rules between two attendance actions.

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
from shiftclock.core.rules import AttendanceRules
from shiftclock.core.attendance import ActionType, AttendanceEvent, derive_progress
from shiftclock.core.action_gate import (
    GateReason,
    WaitUnit,
    can_perform,
    check_progress,
)

T0 = at(TEST_DATE, 7, 30)


def test_first_action_allowed():
    result = can_perform(None, None, ActionType.GO_WORK, T0)
    assert result.allowed
    assert result.reason is GateReason.NONE
    assert str(result) == "allowed"


def test_check_in_boundary():
    """
    Checking in is blocked until 5 minutes after going to work, boundary
    included.
    """
    blocked = can_perform(
        ActionType.GO_WORK,
        T0,
        ActionType.CHECK_IN,
        T0 + dt.timedelta(minutes=4, seconds=59),
    )
    assert not blocked.allowed
    assert blocked.reason is GateReason.CHECK_IN_TOO_SOON
    assert blocked.wait_amount == 1
    assert blocked.wait_unit is WaitUnit.SECONDS

    allowed = can_perform(
        ActionType.GO_WORK, T0, ActionType.CHECK_IN, T0 + dt.timedelta(minutes=5)
    )
    assert allowed.allowed


def test_check_in_wait_rounded_up():
    result = can_perform(
        ActionType.GO_WORK,
        T0,
        ActionType.CHECK_IN,
        T0 + dt.timedelta(seconds=10, milliseconds=500),
    )
    assert result.wait_amount == 290


def test_check_out_boundary():
    """
    Checking out is blocked until 2 hours after checking in, boundary
    included.
    """
    blocked = can_perform(
        ActionType.CHECK_IN, T0, ActionType.CHECK_OUT, T0 + dt.timedelta(minutes=119)
    )
    assert not blocked.allowed
    assert blocked.reason is GateReason.CHECK_OUT_TOO_SOON
    assert blocked.wait_amount == 1
    assert blocked.wait_unit is WaitUnit.MINUTES
    assert "retry in 1 minutes" in str(blocked)

    allowed = can_perform(
        ActionType.CHECK_IN, T0, ActionType.CHECK_OUT, T0 + dt.timedelta(minutes=120)
    )
    assert allowed.allowed


def test_check_out_wait_rounded_up():
    result = can_perform(
        ActionType.CHECK_IN,
        T0,
        ActionType.CHECK_OUT,
        T0 + dt.timedelta(minutes=30, seconds=1),
    )
    assert result.wait_amount == 90


@pytest.mark.parametrize(
    "previous, proposed",
    [
        (ActionType.CHECK_OUT, ActionType.COMPLETE),
        (ActionType.GO_WORK, ActionType.GO_WORK),
        (ActionType.CHECK_IN, ActionType.COMPLETE),
    ],
)
def test_other_transitions_have_no_gap(previous: ActionType, proposed: ActionType):
    assert can_perform(previous, T0, proposed, T0).allowed


def test_custom_rules():
    rules = AttendanceRules(go_work_to_check_in=0, check_in_to_check_out=1)
    assert can_perform(ActionType.GO_WORK, T0, ActionType.CHECK_IN, T0, rules).allowed
    assert not can_perform(
        ActionType.CHECK_IN, T0, ActionType.CHECK_OUT, T0, rules
    ).allowed


def test_negative_rule_raises():
    with pytest.raises(ValueError):
        AttendanceRules(late_grace=-1)


def test_check_progress_uses_predecessor():
    """
    The gate measures the delay from the action preceding the proposed
    one in the day.
    """
    progress = derive_progress(
        [
            AttendanceEvent(ActionType.GO_WORK, T0),
            AttendanceEvent(ActionType.CHECK_IN, T0 + dt.timedelta(minutes=10)),
        ]
    )

    result = check_progress(
        progress, ActionType.CHECK_OUT, T0 + dt.timedelta(minutes=70)
    )
    assert not result.allowed
    assert result.wait_amount == 60

    assert check_progress(derive_progress([]), ActionType.GO_WORK, T0).allowed
