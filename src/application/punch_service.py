"""
Punch Service Module

Half-day clock-in for one staff member.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from config.config_manager import PunchWindows, Schedule
from domain.entities import DTRRecord, HalfDay, StaffMember
from domain.exceptions import AlreadyPunchedError, OutOfWindowError, PersistenceError
from domain.time_model import (
    clock_time, date_key, format_time, is_later_than, is_within, parse_time
)
from infrastructure.dtr_store import DTRStore
from infrastructure.logger import get_logger

logger = get_logger("PunchService")

Clock = Callable[[], datetime]


@dataclass
class PunchResult:
    """Result of a successful punch."""
    record: DTRRecord
    half_day: HalfDay
    time: str
    is_late: bool = False

    @property
    def display_time(self) -> str:
        return format_time(self.time)


class PunchService:
    """
    Records AM / PM clock-ins.

    The clock is injected so tests can pin "now"; production passes
    datetime.now.
    """

    def __init__(
        self,
        store: DTRStore,
        windows: Optional[PunchWindows] = None,
        schedule: Optional[Schedule] = None,
        clock: Clock = datetime.now
    ):
        self._store = store
        self._windows = windows or PunchWindows()
        self._schedule = schedule or Schedule()
        self._clock = clock

    def punch(self, staff: StaffMember, half_day: HalfDay) -> PunchResult:
        """
        Clock in for the current half-day.

        Raises:
            OutOfWindowError: If now is outside the half-day window
            AlreadyPunchedError: If the half-day already has an arrival
            PersistenceError: If the record could not be saved
        """
        now = self._clock()
        now_str = clock_time(now)
        start, end = self._window(half_day)
        if not is_within(parse_time(now_str), start, end):
            logger.info(f"{staff.id} {half_day.value} punch rejected at {now_str}")
            raise OutOfWindowError(half_day.value, now_str, start, end)

        today = date_key(now.date())
        self._store.refresh()
        record = self._store.get(staff.id, today) or DTRRecord.blank(staff, today)

        if half_day == HalfDay.AM:
            if record.am_in:
                raise AlreadyPunchedError(half_day.value, record.am_in)
            record.am_in = now_str
            record.am_out = self._schedule.am_out_placeholder
            is_late = is_later_than(now_str, self._schedule.late_am_after)
        else:
            if record.pm_in:
                raise AlreadyPunchedError(half_day.value, record.pm_in)
            record.pm_in = now_str
            record.pm_out = self._schedule.pm_out_placeholder
            is_late = is_later_than(now_str, self._schedule.late_pm_after)

        self._store.upsert(record)
        try:
            self._store.refresh()
        except PersistenceError as e:
            # The punch is saved; only the cached snapshot is stale
            logger.warning(f"Refresh after punch failed: {e}")

        logger.info(f"{staff.id} clocked in {half_day.value} at {now_str} on {today}")
        return PunchResult(record=record, half_day=half_day, time=now_str, is_late=is_late)

    def _window(self, half_day: HalfDay):
        if half_day == HalfDay.AM:
            return self._windows.am_start, self._windows.am_end
        return self._windows.pm_start, self._windows.pm_end
