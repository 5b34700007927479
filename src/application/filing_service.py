"""
Filing Service Module

Files leave or official business over a date range, one record per weekday.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple, Union

from config.config_manager import Schedule
from domain.entities import DTRRecord, RecordCategory, StaffMember
from domain.exceptions import InvalidRangeError, PersistenceError
from domain.time_model import date_key, is_weekend, iter_days, parse_date_key
from infrastructure.dtr_store import DTRStore
from infrastructure.logger import get_logger

logger = get_logger("FilingService")

LEAVE_TYPES = [
    "Vacation Leave",
    "Sick Leave",
    "Maternity Leave",
    "Paternity Leave",
    "Special Privilege Leave",
    "Mandatory Forced Leave",
]


class FilingKind(Enum):
    LEAVE = "LEAVE"
    OB = "OB"


@dataclass
class LeaveDetail:
    leave_type: str
    reason: str = ""

    def tag(self) -> str:
        return f"{self.leave_type.upper()} - {self.reason}"


@dataclass
class ObDetail:
    location: str
    purpose: str = ""

    def tag(self) -> str:
        return f"OB: {self.location} - {self.purpose}"


@dataclass
class FilingResult:
    """
    Outcome of a range filing.

    success is True only if every weekday in the range was saved.
    """
    kind: FilingKind
    filed: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)  # (date, error)
    skipped: List[str] = field(default_factory=list)  # weekend days

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def filed_count(self) -> int:
        return len(self.filed)


class FilingService:
    """
    Batch leave / OB filing.

    Each weekday gets its own upsert. A day that fails is reported in the
    result and the loop carries on; there is no multi-day transaction.
    """

    def __init__(self, store: DTRStore, schedule: Optional[Schedule] = None):
        self._store = store
        self._schedule = schedule or Schedule()

    def file_range(
        self,
        staff: StaffMember,
        start,
        end,
        kind: FilingKind,
        detail: Union[LeaveDetail, ObDetail]
    ) -> FilingResult:
        """
        File leave or OB for every weekday from start to end inclusive.

        Args:
            staff: The staff member filing
            start: First day (date or YYYY-MM-DD)
            end: Last day (date or YYYY-MM-DD)
            kind: FilingKind.LEAVE or FilingKind.OB
            detail: LeaveDetail for leave, ObDetail for OB

        Returns:
            FilingResult listing filed, failed and skipped days

        Raises:
            InvalidRangeError: If a date does not parse or start is after end
            ValueError: If detail does not match kind
            PersistenceError: If the store cannot be read before filing
        """
        start_day, end_day = self._parse_range(start, end)
        expected = LeaveDetail if kind == FilingKind.LEAVE else ObDetail
        if not isinstance(detail, expected):
            raise ValueError(f"{kind.value} filing needs a {expected.__name__}")

        tag = detail.tag()
        category = RecordCategory.LEAVE if kind == FilingKind.LEAVE else RecordCategory.OB
        result = FilingResult(kind=kind)

        self._store.refresh()
        for day in iter_days(start_day, end_day):
            day_str = date_key(day)
            if is_weekend(day):
                result.skipped.append(day_str)
                continue

            record = self._store.get(staff.id, day_str) or DTRRecord.blank(staff, day_str)
            self._apply(record, tag, category, kind)
            try:
                self._store.upsert(record)
            except PersistenceError as e:
                logger.error(f"{kind.value} filing failed for {staff.id} on {day_str}: {e}")
                result.failed.append((day_str, str(e)))
                continue
            result.filed.append(day_str)

        try:
            self._store.refresh()
        except PersistenceError as e:
            logger.warning(f"Refresh after filing failed: {e}")

        logger.info(
            f"{kind.value} filed for {staff.id} {date_key(start_day)}..{date_key(end_day)}: "
            f"{len(result.filed)} filed, {len(result.failed)} failed, {len(result.skipped)} skipped"
        )
        return result

    def _apply(self, record: DTRRecord, tag: str, category: RecordCategory, kind: FilingKind) -> None:
        """Append the tag and fill only the empty time fields."""
        record.remarks = f"{record.remarks} | {tag}" if record.remarks else tag
        record.category = record.category.merge(category)

        if kind == FilingKind.OB:
            s = self._schedule
            record.am_in = record.am_in or s.ob_am_in
            record.am_out = record.am_out or s.ob_am_out
            record.pm_in = record.pm_in or s.ob_pm_in
            record.pm_out = record.pm_out or s.ob_pm_out

    @staticmethod
    def _parse_range(start, end) -> Tuple[date, date]:
        try:
            start_day = parse_date_key(start)
            end_day = parse_date_key(end)
        except ValueError as e:
            raise InvalidRangeError(f"Invalid date range: {e}") from e
        if start_day > end_day:
            raise InvalidRangeError(
                f"Invalid date range: {date_key(start_day)} is after {date_key(end_day)}"
            )
        return start_day, end_day
