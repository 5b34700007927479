"""
Edit Service Module

Manual correction of a single day's record.
"""

from typing import Optional

from domain.entities import DTRRecord, RecordCategory, StaffMember, infer_category
from domain.exceptions import InvalidTimeError, PersistenceError
from domain.time_model import date_key, normalize_time, parse_date_key
from infrastructure.dtr_store import DTRStore
from infrastructure.logger import get_logger

logger = get_logger("EditService")

TIME_FIELDS = ("am_in", "am_out", "pm_in", "pm_out")


class EditService:
    """Open a day for editing and save it back by identity."""

    def __init__(self, store: DTRStore):
        self._store = store

    def open_day(self, staff: StaffMember, day) -> DTRRecord:
        """
        Copy of the day's record, or a blank one if none exists yet.

        A missing record is not an error.
        """
        day_str = date_key(parse_date_key(day))
        existing = self._store.get(staff.id, day_str)
        if existing is not None:
            return existing
        logger.debug(f"No record for {staff.id} on {day_str}, starting blank")
        return DTRRecord.blank(staff, day_str)

    def save_day(
        self,
        record: DTRRecord,
        remarks: Optional[str] = None,
        category: Optional[RecordCategory] = None,
        **times: str
    ) -> DTRRecord:
        """
        Apply edits and persist.

        Args:
            record: Record from open_day
            remarks: Replacement remarks, if given
            category: Replacement category; when omitted but remarks are
                given, the category is derived from the new remarks
            **times: Any of am_in, am_out, pm_in, pm_out

        Returns:
            The saved record

        Raises:
            InvalidTimeError: If a time field is not blank and not a clock time
            PersistenceError: If the store write fails
        """
        unknown = set(times) - set(TIME_FIELDS)
        if unknown:
            raise TypeError(f"Unknown time field(s): {', '.join(sorted(unknown))}")

        updated = record.copy()
        for name in TIME_FIELDS:
            value = times.get(name, getattr(updated, name))
            setattr(updated, name, self._clean_time(name, value))

        if remarks is not None:
            updated.remarks = remarks.strip()
        if category is not None:
            updated.category = category
        elif remarks is not None:
            updated.category = infer_category(updated.remarks)

        self._store.upsert(updated)
        try:
            self._store.refresh()
        except PersistenceError as e:
            logger.warning(f"Refresh after manual edit failed: {e}")
        logger.info(f"Manual edit saved for {updated.record_id}")
        return updated

    @staticmethod
    def _clean_time(name: str, value) -> str:
        text = str(value or "").strip()
        if not text:
            return ""
        normalized = normalize_time(text)
        if not normalized:
            raise InvalidTimeError(f"Invalid time for {name}: {text!r}")
        return normalized
