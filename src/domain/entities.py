"""
Domain Entities Module

Core domain entities using dataclasses for the daily time record system.
These entities represent the core business concepts independent of infrastructure.
"""

import re
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Optional

from .time_model import date_key, normalize_date_key, normalize_time


class HalfDay(Enum):
    """Punch session."""
    AM = "AM"
    PM = "PM"


class RecordCategory(Enum):
    """Semantic category of a day record, carried next to the free-text remarks."""
    NONE = "NONE"
    LEAVE = "LEAVE"
    OB = "OB"  # Official Business

    @property
    def rank(self) -> int:
        return _CATEGORY_RANK[self]

    def merge(self, other: "RecordCategory") -> "RecordCategory":
        """Keep whichever category resolves first (LEAVE > OB > NONE)."""
        return self if self.rank >= other.rank else other


_CATEGORY_RANK = {
    RecordCategory.NONE: 0,
    RecordCategory.OB: 1,
    RecordCategory.LEAVE: 2,
}


class DayStatus(Enum):
    """Resolved status of one calendar day for one staff member."""
    HOLIDAY = "Holiday"
    WEEKEND = "Weekend"
    LEAVE = "Leave"
    OFFICIAL_BUSINESS = "Official Business"
    NORMAL = "Normal"
    EMPTY = "Empty"


class HolidayType(Enum):
    REGULAR = "Regular"
    SPECIAL_NON_WORKING = "Special Non-Working"

    @classmethod
    def parse(cls, value) -> "HolidayType":
        text = str(value or '').strip().lower().replace('-', ' ')
        if text.startswith('special'):
            return cls.SPECIAL_NON_WORKING
        return cls.REGULAR


class Role(Enum):
    GUEST = "GUEST"
    OPERATOR = "OPERATOR"
    MODERATOR = "MODERATOR"
    DEVELOPER = "DEVELOPER"

    @property
    def is_privileged(self) -> bool:
        return self == Role.DEVELOPER


@dataclass
class StaffMember:
    """
    Staff directory entry (read-only from the engine's perspective).

    Attributes:
        id: Directory id, e.g. "emp_007"
        name: Display name
        role: Access role; only privileged roles may edit holidays
        position: Job title
        group: "municipal" or "provincial"
    """
    id: str
    name: str
    role: Role = Role.MODERATOR
    position: str = ""
    group: str = "municipal"


# Whole-word tags found in remarks written before the category column existed
_LEGACY_LEAVE_TAG = re.compile(r'\bLEAVE\b')
_LEGACY_OB_TAG = re.compile(r'\bOB\b')


def infer_category(remarks: str) -> RecordCategory:
    """Derive the category of a legacy row from its remarks text."""
    remarks = remarks or ""
    if _LEGACY_LEAVE_TAG.search(remarks):
        return RecordCategory.LEAVE
    if _LEGACY_OB_TAG.search(remarks):
        return RecordCategory.OB
    return RecordCategory.NONE


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() == 'true'


@dataclass
class DTRRecord:
    """
    One staff member's time record for one calendar day.

    Identity is "<date_string>_<staff_id>", so there is at most one record
    per staff per day. am_out / pm_out hold the schedule placeholders set
    on punch (12:00 / 17:00), not observed departures.
    """
    staff_id: str
    staff_name: str
    date_string: str
    am_in: str = ""
    am_out: str = ""
    pm_in: str = ""
    pm_out: str = ""
    remarks: str = ""
    category: RecordCategory = RecordCategory.NONE
    is_holiday: bool = False  # legacy flag, superseded by the holiday registry

    @property
    def record_id(self) -> str:
        return make_record_id(self.staff_id, self.date_string)

    @property
    def has_punch(self) -> bool:
        return bool(self.am_in or self.pm_in)

    @classmethod
    def blank(cls, staff: StaffMember, day) -> "DTRRecord":
        day_str = date_key(day) if isinstance(day, date) else normalize_date_key(day)
        return cls(staff_id=staff.id, staff_name=staff.name, date_string=day_str)

    def copy(self) -> "DTRRecord":
        return replace(self)

    def to_row(self) -> dict:
        """Serialise to a record-store row."""
        return {
            "id": self.record_id,
            "staffId": self.staff_id,
            "staffName": self.staff_name,
            "dateString": self.date_string,
            "amIn": self.am_in,
            "amOut": self.am_out,
            "pmIn": self.pm_in,
            "pmOut": self.pm_out,
            "remarks": self.remarks,
            "category": self.category.value,
            "isHoliday": "true" if self.is_holiday else "false",
        }

    @classmethod
    def from_row(cls, row: dict) -> "DTRRecord":
        """
        Build a record from a store row.

        Times are normalised to HH:MM and the date key is trimmed. Rows
        without a category column derive it from the remarks.
        """
        remarks = str(row.get("remarks") or "")
        raw_category = str(row.get("category") or "").strip().upper()
        try:
            category = RecordCategory(raw_category) if raw_category else infer_category(remarks)
        except ValueError:
            category = infer_category(remarks)

        return cls(
            staff_id=str(row.get("staffId") or "").strip(),
            staff_name=str(row.get("staffName") or ""),
            date_string=normalize_date_key(row.get("dateString")),
            am_in=normalize_time(row.get("amIn")),
            am_out=normalize_time(row.get("amOut")),
            pm_in=normalize_time(row.get("pmIn")),
            pm_out=normalize_time(row.get("pmOut")),
            remarks=remarks,
            category=category,
            is_holiday=_as_bool(row.get("isHoliday")),
        )


def make_record_id(staff_id: str, date_string: str) -> str:
    return f"{date_string}_{staff_id}"


@dataclass
class Holiday:
    """A declared holiday; applies to every staff member."""
    id: str
    date_string: str
    name: str
    type: HolidayType = HolidayType.REGULAR
    remarks: str = ""  # memorandum reference

    @property
    def display_text(self) -> str:
        name = self.name.upper()
        return f"{name} ({self.remarks})" if self.remarks else name

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "dateString": self.date_string,
            "name": self.name,
            "type": self.type.value,
            "remarks": self.remarks,
        }

    @classmethod
    def from_row(cls, row: dict) -> "Holiday":
        return cls(
            id=str(row.get("id") or "").strip(),
            date_string=str(row.get("dateString") or ""),
            name=str(row.get("name") or ""),
            type=HolidayType.parse(row.get("type")),
            remarks=str(row.get("remarks") or ""),
        )


@dataclass
class DayResolution:
    """
    The single authoritative answer to "what happened on this day".

    Punch fields are blank unless status is NORMAL. banner holds the text
    that replaces the punch columns for HOLIDAY, WEEKEND, LEAVE and
    OFFICIAL_BUSINESS days.
    """
    date_string: str
    status: DayStatus
    am_in: str = ""
    am_out: str = ""
    pm_in: str = ""
    pm_out: str = ""
    late_am: bool = False
    late_pm: bool = False
    banner: str = ""
    holiday: Optional[Holiday] = None
    record: Optional[DTRRecord] = field(default=None, repr=False)

    @property
    def has_punch(self) -> bool:
        return self.status == DayStatus.NORMAL and bool(self.am_in or self.pm_in)
