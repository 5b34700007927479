"""
Dashboard Service Module

Daily, weekly and monthly attendance summaries. Every cell comes from the
status resolver.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, List, Optional

from config.config_manager import Schedule
from domain.entities import DayResolution, DayStatus, StaffMember
from domain.status_resolver import StatusResolver
from domain.time_model import date_key, month_dates, week_dates
from infrastructure.dtr_store import DTRStore
from infrastructure.holiday_registry import HolidayRegistry
from infrastructure.logger import get_logger
from infrastructure.staff_directory import StaffDirectory

logger = get_logger("DashboardService")

CHECK_MARK = "✔"

WEEKLY_SYMBOLS = {
    DayStatus.HOLIDAY: "HOL",
    DayStatus.LEAVE: "LEAVE",
    DayStatus.OFFICIAL_BUSINESS: "OB",
}


def weekly_symbol(resolution: DayResolution) -> str:
    """Single-cell summary of a resolved day."""
    if resolution.status in WEEKLY_SYMBOLS:
        return WEEKLY_SYMBOLS[resolution.status]
    if resolution.has_punch:
        return CHECK_MARK
    return "-"


@dataclass
class Presence:
    staff: StaffMember
    resolution: DayResolution


@dataclass
class DailySummary:
    day: date
    present: List[Presence] = field(default_factory=list)
    provincial: List[Presence] = field(default_factory=list)


@dataclass
class WeeklyRow:
    staff: StaffMember
    cells: List[str]


@dataclass
class WeeklySummary:
    dates: List[date]
    rows: List[WeeklyRow]


@dataclass
class MonthlyCount:
    staff: StaffMember
    days_present: int


class DashboardService:
    """Read-only attendance views over the current store snapshot."""

    def __init__(
        self,
        store: DTRStore,
        holidays: HolidayRegistry,
        directory: StaffDirectory,
        schedule: Optional[Schedule] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self._store = store
        self._holidays = holidays
        self._directory = directory
        self._schedule = schedule or Schedule()
        self._clock = clock

    def _resolver(self) -> StatusResolver:
        return StatusResolver(
            self._holidays.list(),
            self._store.list(),
            late_am_after=self._schedule.late_am_after,
            late_pm_after=self._schedule.late_pm_after,
        )

    def daily(self, day: Optional[date] = None) -> DailySummary:
        """Municipal staff who clocked in this morning, plus the provincial log."""
        day = day or self._clock().date()
        resolver = self._resolver()
        summary = DailySummary(day=day)

        for staff in self._directory.municipal():
            resolution = resolver.resolve(day, staff.id)
            if resolution.status == DayStatus.NORMAL and resolution.am_in:
                summary.present.append(Presence(staff, resolution))

        for staff in self._directory.provincial():
            summary.provincial.append(Presence(staff, resolver.resolve(day, staff.id)))

        logger.debug(f"Daily summary {date_key(day)}: {len(summary.present)} present")
        return summary

    def weekly(self, day: Optional[date] = None) -> WeeklySummary:
        """Monday to Friday grid of the week containing day."""
        dates = week_dates(day or self._clock().date())
        resolver = self._resolver()
        rows = [
            WeeklyRow(staff, [weekly_symbol(resolver.resolve(d, staff.id)) for d in dates])
            for staff in self._directory.municipal()
        ]
        return WeeklySummary(dates=dates, rows=rows)

    def monthly_counts(self, year: int, month: int) -> List[MonthlyCount]:
        """Days in the month each municipal staff member resolved to a punched Normal day."""
        resolver = self._resolver()
        days = month_dates(year, month)
        counts = []
        for staff in self._directory.municipal():
            present = sum(1 for d in days if resolver.resolve(d, staff.id).has_punch)
            counts.append(MonthlyCount(staff, present))
        return counts
