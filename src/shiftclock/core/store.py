#!/usr/bin/env python3
"""
Storage interface used by the attendance engine.

The engine only works on snapshots loaded through `AttendanceStore`. The
persistence itself belongs to the host, the public methods of the base
class wrap any implementation error into a `StoreException`.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import threading
from abc import ABC, abstractmethod
import datetime as dt
from typing import Optional

# Internal libraries
from .errors import StoreException
from .shift import ShiftConfig
from .attendance import AttendanceEvent
from .day_status import DayWorkStatus

logger = logging.getLogger(__name__)


class AttendanceStore(ABC):
    """
    Abstract shift, event and day status store.

    Events are keyed by the date the tracked day started on, which is
    not always the calendar date of the event (overnight shifts).
    """

    def load_shift_config(self, shift_id: str) -> Optional[ShiftConfig]:
        """
        Load a shift by its identifier.

        Returns:
            Optional[ShiftConfig]: The shift, `None` if unknown.

        Raises:
            StoreException: The store failed to load the shift.
        """
        return self._guard(self._load_shift_config, shift_id)

    def save_shift_config(self, shift: ShiftConfig):
        """
        Insert or replace a shift.

        Raises:
            StoreException: The store failed to save the shift.
        """
        self._guard(self._save_shift_config, shift)

    def load_events_for_date(self, date: dt.date) -> list[AttendanceEvent]:
        """
        Returns:
            list[AttendanceEvent]: Events of the day, in insertion order.

        Raises:
            StoreException: The store failed to load the events.
        """
        return self._guard(self._load_events_for_date, date)

    def append_event(self, date: dt.date, event: AttendanceEvent):
        """
        Append an event to the given day.

        Raises:
            StoreException: The store failed to save the event.
        """
        self._guard(self._append_event, date, event)

    def clear_events_for_date(self, date: dt.date):
        """
        Remove all the events of the given day.

        Raises:
            StoreException: The store failed to clear the events.
        """
        self._guard(self._clear_events_for_date, date)

    def load_day_status(self, date: dt.date) -> Optional[DayWorkStatus]:
        """
        Returns:
            Optional[DayWorkStatus]: Saved status of the day, `None` if
                nothing is saved.

        Raises:
            StoreException: The store failed to load the status.
        """
        return self._guard(self._load_day_status, date)

    def save_day_status(self, date: dt.date, status: DayWorkStatus):
        """
        Insert or replace the status of the given day.

        Raises:
            StoreException: The store failed to save the status.
        """
        self._guard(self._save_day_status, date, status)

    def clear_day_status(self, date: dt.date):
        """
        Remove the saved status of the given day.

        Raises:
            StoreException: The store failed to clear the status.
        """
        self._guard(self._clear_day_status, date)

    def _guard(self, method, *args):
        try:
            return method(*args)
        except StoreException:
            raise
        except Exception as e:
            raise StoreException(f"{method.__name__.lstrip('_')} failed.") from e

    @abstractmethod
    def _load_shift_config(self, shift_id: str) -> Optional[ShiftConfig]:
        pass

    @abstractmethod
    def _save_shift_config(self, shift: ShiftConfig):
        pass

    @abstractmethod
    def _load_events_for_date(self, date: dt.date) -> list[AttendanceEvent]:
        pass

    @abstractmethod
    def _append_event(self, date: dt.date, event: AttendanceEvent):
        pass

    @abstractmethod
    def _clear_events_for_date(self, date: dt.date):
        pass

    @abstractmethod
    def _load_day_status(self, date: dt.date) -> Optional[DayWorkStatus]:
        pass

    @abstractmethod
    def _save_day_status(self, date: dt.date, status: DayWorkStatus):
        pass

    @abstractmethod
    def _clear_day_status(self, date: dt.date):
        pass


class MemoryAttendanceStore(AttendanceStore):
    """
    In-process store. The records are lost when the object is released.

    The store can be shared between threads.
    """

    def __init__(self, shifts: tuple[ShiftConfig, ...] = ()):
        self._lock = threading.Lock()
        self._shifts: dict[str, ShiftConfig] = {shift.id: shift for shift in shifts}
        self._events: dict[dt.date, list[AttendanceEvent]] = {}
        self._statuses: dict[dt.date, DayWorkStatus] = {}

    def _load_shift_config(self, shift_id: str) -> Optional[ShiftConfig]:
        with self._lock:
            return self._shifts.get(shift_id)

    def _save_shift_config(self, shift: ShiftConfig):
        with self._lock:
            self._shifts[shift.id] = shift

    def _load_events_for_date(self, date: dt.date) -> list[AttendanceEvent]:
        with self._lock:
            return list(self._events.get(date, ()))

    def _append_event(self, date: dt.date, event: AttendanceEvent):
        with self._lock:
            self._events.setdefault(date, []).append(event)

    def _clear_events_for_date(self, date: dt.date):
        with self._lock:
            self._events.pop(date, None)

    def _load_day_status(self, date: dt.date) -> Optional[DayWorkStatus]:
        with self._lock:
            return self._statuses.get(date)

    def _save_day_status(self, date: dt.date, status: DayWorkStatus):
        with self._lock:
            self._statuses[date] = status

    def _clear_day_status(self, date: dt.date):
        with self._lock:
            self._statuses.pop(date, None)

    def __str__(self):
        return "MemoryAttendanceStore"
