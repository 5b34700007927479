"""
Status Resolver Module

Derives the single rendered status of a (day, staff) pair from the
holiday registry, the weekend calendar, leave/OB filings and punches.

Precedence: Holiday > Weekend > Leave > Official Business > Normal > Empty.
Every view (dashboards, month grid, workbook and PDF form) goes through
resolve_day; none of them re-implement the chain.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from .entities import (
    DayResolution, DayStatus, DTRRecord, Holiday, RecordCategory
)
from .time_model import (
    date_key, is_later_than, is_weekend, month_dates, parse_date_key, weekday_name
)

DEFAULT_LATE_AM_AFTER = "08:00"
DEFAULT_LATE_PM_AFTER = "13:00"

OFFICIAL_BUSINESS_BANNER = "OFFICIAL BUSINESS"


def _holiday_sort_key(holiday: Holiday) -> Tuple[int, int, str]:
    """Lowest id first; numeric ids compare as numbers."""
    if holiday.id.isdigit():
        return (0, int(holiday.id), holiday.id)
    return (1, 0, holiday.id)


def pick_holiday(candidates: Iterable[Holiday]) -> Optional[Holiday]:
    """Deterministic choice among holidays sharing a date."""
    candidates = list(candidates)
    if not candidates:
        return None
    return min(candidates, key=_holiday_sort_key)


def resolve_day(
    day: date,
    staff_id: str,
    record: Optional[DTRRecord] = None,
    holiday: Optional[Holiday] = None,
    late_am_after: str = DEFAULT_LATE_AM_AFTER,
    late_pm_after: str = DEFAULT_LATE_PM_AFTER,
) -> DayResolution:
    """
    Resolve one calendar day for one staff member.

    Args:
        day: The calendar day
        staff_id: Staff member id (record must belong to this staff, if given)
        record: The day's DTR record, if any
        holiday: The holiday matched to this day, if any
        late_am_after: AM arrivals strictly after this are late
        late_pm_after: PM arrivals strictly after this are late

    Returns:
        DayResolution with exactly one DayStatus
    """
    day_str = date_key(day)
    if record is not None and record.staff_id != staff_id:
        record = None

    if holiday is not None:
        return DayResolution(
            date_string=day_str,
            status=DayStatus.HOLIDAY,
            banner=holiday.display_text,
            holiday=holiday,
            record=record,
        )

    if is_weekend(day):
        return DayResolution(
            date_string=day_str,
            status=DayStatus.WEEKEND,
            banner=weekday_name(day).upper(),
            record=record,
        )

    if record is None:
        return DayResolution(date_string=day_str, status=DayStatus.EMPTY)

    if record.category == RecordCategory.LEAVE:
        return DayResolution(
            date_string=day_str,
            status=DayStatus.LEAVE,
            banner=record.remarks.upper(),
            record=record,
        )

    if record.category == RecordCategory.OB:
        return DayResolution(
            date_string=day_str,
            status=DayStatus.OFFICIAL_BUSINESS,
            banner=OFFICIAL_BUSINESS_BANNER,
            record=record,
        )

    return DayResolution(
        date_string=day_str,
        status=DayStatus.NORMAL,
        am_in=record.am_in,
        am_out=record.am_out,
        pm_in=record.pm_in,
        pm_out=record.pm_out,
        late_am=is_later_than(record.am_in, late_am_after),
        late_pm=is_later_than(record.pm_in, late_pm_after),
        record=record,
    )


class StatusResolver:
    """
    Indexes a snapshot of holidays and DTR records for repeated lookups.

    Build a new resolver after every store refresh; it never reads the
    store itself.
    """

    def __init__(
        self,
        holidays: Iterable[Holiday],
        records: Iterable[DTRRecord],
        late_am_after: str = DEFAULT_LATE_AM_AFTER,
        late_pm_after: str = DEFAULT_LATE_PM_AFTER,
    ):
        self.late_am_after = late_am_after
        self.late_pm_after = late_pm_after

        grouped: Dict[str, List[Holiday]] = {}
        for holiday in holidays:
            grouped.setdefault(holiday.date_string.strip(), []).append(holiday)
        self._holidays: Dict[str, Holiday] = {
            key: pick_holiday(items) for key, items in grouped.items()
        }

        self._records: Dict[str, DTRRecord] = {r.record_id: r for r in records}

    def holiday_on(self, day_str: str) -> Optional[Holiday]:
        return self._holidays.get(day_str.strip())

    def record_for(self, staff_id: str, day_str: str) -> Optional[DTRRecord]:
        return self._records.get(f"{day_str}_{staff_id}")

    def resolve(self, day, staff_id: str) -> DayResolution:
        """Resolve a date or YYYY-MM-DD key for a staff member."""
        day = parse_date_key(day)
        day_str = date_key(day)
        return resolve_day(
            day,
            staff_id,
            record=self.record_for(staff_id, day_str),
            holiday=self.holiday_on(day_str),
            late_am_after=self.late_am_after,
            late_pm_after=self.late_pm_after,
        )

    def resolve_month(self, staff_id: str, year: int, month: int) -> List[DayResolution]:
        """Resolutions for days 1..N of the month."""
        return [self.resolve(d, staff_id) for d in month_dates(year, month)]
