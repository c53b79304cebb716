#!/usr/bin/env python3
"""
Minimum delay rules between two attendance actions.

The gate never raises, it returns a `GateResult` telling if the action
is allowed now or how long the user has to wait. The host decides
whether it offers to proceed anyway.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import math
from dataclasses import dataclass
from enum import Enum
import datetime as dt
from typing import Optional

# Internal libraries
from .attendance import ActionType, DayProgress
from .rules import AttendanceRules, DEFAULT_RULES

logger = logging.getLogger(__name__)


class GateReason(Enum):
    """Reason code of a gate decision."""

    NONE = "none"
    CHECK_IN_TOO_SOON = "time_rule_violation_check_in"
    CHECK_OUT_TOO_SOON = "time_rule_violation_check_out"


class WaitUnit(Enum):
    """Unit of the remaining wait amount."""

    SECONDS = "seconds"
    MINUTES = "minutes"


@dataclass(frozen=True)
class GateResult:
    """
    Gate decision.

    Attributes:
        allowed (bool): `True` if the action can be performed now.
        reason (GateReason): Machine readable reason of a blocked action.
        wait_amount (int): Remaining time to wait, rounded up, 0 when
            allowed.
        wait_unit (Optional[WaitUnit]): Unit of `wait_amount`.
    """

    allowed: bool
    reason: GateReason = GateReason.NONE
    wait_amount: int = 0
    wait_unit: Optional[WaitUnit] = None

    def __str__(self):
        if self.allowed:
            return "allowed"
        assert self.wait_unit is not None
        return f"blocked ({self.reason.name}), retry in {self.wait_amount} {self.wait_unit.value}"


_ALLOWED = GateResult(allowed=True)


def can_perform(
    previous_type: Optional[ActionType],
    previous_timestamp: Optional[dt.datetime],
    proposed_type: ActionType,
    now: dt.datetime,
    rules: AttendanceRules = DEFAULT_RULES,
) -> GateResult:
    """
    Check the minimum delay between the previous action and the proposed
    one.

    `now` must not be earlier than `previous_timestamp`, the caller logs
    actions in chronological order.

    Args:
        previous_type (Optional[ActionType]): Last logged action, `None`
            if nothing is logged yet.
        previous_timestamp (Optional[dt.datetime]): Instant of the last
            logged action.
        proposed_type (ActionType): Action the user wants to perform.
        now (dt.datetime): Current date and time.
        rules (AttendanceRules): Engine rules.

    Returns:
        GateResult: The gate decision.
    """
    if previous_type is None or previous_timestamp is None:
        return _ALLOWED

    elapsed = now - previous_timestamp

    if previous_type is ActionType.GO_WORK and proposed_type is ActionType.CHECK_IN:
        remaining = rules.delta("go_work_to_check_in") - elapsed
        if remaining > dt.timedelta(0):
            return GateResult(
                allowed=False,
                reason=GateReason.CHECK_IN_TOO_SOON,
                wait_amount=math.ceil(remaining / dt.timedelta(seconds=1)),
                wait_unit=WaitUnit.SECONDS,
            )

    elif previous_type is ActionType.CHECK_IN and proposed_type is ActionType.CHECK_OUT:
        remaining = rules.delta("check_in_to_check_out") - elapsed
        if remaining > dt.timedelta(0):
            return GateResult(
                allowed=False,
                reason=GateReason.CHECK_OUT_TOO_SOON,
                wait_amount=math.ceil(remaining / dt.timedelta(minutes=1)),
                wait_unit=WaitUnit.MINUTES,
            )

    return _ALLOWED


def check_progress(
    progress: DayProgress,
    proposed_type: ActionType,
    now: dt.datetime,
    rules: AttendanceRules = DEFAULT_RULES,
) -> GateResult:
    """
    Run the gate against the predecessor of the proposed action in the
    given day progress.

    Returns:
        GateResult: The gate decision.
    """
    predecessor = proposed_type.predecessor
    previous = progress.event(predecessor) if predecessor else None

    result = can_perform(
        previous.action if previous else None,
        previous.timestamp if previous else None,
        proposed_type,
        now,
        rules,
    )

    if not result.allowed:
        logger.debug(f"Action '{proposed_type}' at {now:%H:%M:%S} is {result!s}.")

    return result
