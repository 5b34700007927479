"""
Month Grid Module

Presentation-neutral rows of one staff member's month, shared by the PDF
form and the workbook export.
"""

from calendar import month_name
from dataclasses import dataclass, field
from typing import List

from .entities import DayResolution, DayStatus, StaffMember
from .status_resolver import StatusResolver
from .time_model import format_time, month_dates, weekday_name

# Day | AM Arr | AM Dep | PM Arr | PM Dep | Undertime Hrs | Undertime Min
COLUMN_HEADERS = ["Day", "Arr", "Dep", "Arr", "Dep", "Hrs", "Min"]

BANNER_STATUSES = (
    DayStatus.HOLIDAY,
    DayStatus.WEEKEND,
    DayStatus.LEAVE,
    DayStatus.OFFICIAL_BUSINESS,
)


@dataclass
class GridRow:
    """
    One day of the grid.

    cells holds the six time columns in 12-hour display form. Undertime
    is never computed, so the last two cells are always blank. For banner
    days all cells are blank and banner replaces them.
    """
    day: int
    weekday_name: str
    resolution: DayResolution
    cells: List[str] = field(default_factory=lambda: [""] * 6)

    @property
    def status(self) -> DayStatus:
        return self.resolution.status

    @property
    def is_banner(self) -> bool:
        return self.status in BANNER_STATUSES

    @property
    def banner(self) -> str:
        return self.resolution.banner

    @property
    def late_am(self) -> bool:
        return self.resolution.late_am

    @property
    def late_pm(self) -> bool:
        return self.resolution.late_pm


@dataclass
class MonthGrid:
    staff: StaffMember
    year: int
    month: int
    rows: List[GridRow]

    @property
    def month_label(self) -> str:
        """e.g. "December 2025"."""
        return f"{month_name[self.month]} {self.year}"


def build_month_grid(
    resolver: StatusResolver,
    staff: StaffMember,
    year: int,
    month: int
) -> MonthGrid:
    """Resolve every day of the month into a grid row."""
    rows = []
    for day in month_dates(year, month):
        resolution = resolver.resolve(day, staff.id)
        if resolution.status in BANNER_STATUSES:
            cells = [""] * 6
        else:
            cells = [
                format_time(resolution.am_in),
                format_time(resolution.am_out),
                format_time(resolution.pm_in),
                format_time(resolution.pm_out),
                "",
                "",
            ]
        rows.append(GridRow(
            day=day.day,
            weekday_name=weekday_name(day),
            resolution=resolution,
            cells=cells,
        ))
    return MonthGrid(staff=staff, year=year, month=month, rows=rows)
