"""
Holiday Registry Module

Global holiday list kept in the "Holidays" collection of the record store.
"""

from typing import List, Optional

from domain.entities import Holiday
from domain.exceptions import PersistenceError
from domain.status_resolver import pick_holiday
from infrastructure.logger import get_logger
from infrastructure.record_store import RecordStore, StoreError

logger = get_logger("HolidayRegistry")


class HolidayRegistry:
    """
    CRUD over declared holidays.

    A day is a holiday only if some entry's trimmed date string equals the
    day key exactly. Several entries on one date are allowed by the store;
    find() returns the one with the lowest id.
    """

    def __init__(self, store: RecordStore, collection: str = "Holidays"):
        self._store = store
        self._collection = collection

    def list(self) -> List[Holiday]:
        try:
            rows = self._store.read(self._collection)
        except StoreError as e:
            raise PersistenceError(f"Failed to load holidays: {e}", e) from e
        return [Holiday.from_row(row) for row in rows]

    def find(self, date_string: str) -> Optional[Holiday]:
        key = date_string.strip()
        return pick_holiday(h for h in self.list() if h.date_string.strip() == key)

    def add(self, holiday: Holiday) -> None:
        try:
            self._store.create(self._collection, holiday.to_row())
        except StoreError as e:
            logger.error(f"Failed to save holiday {holiday.date_string}: {e}")
            raise PersistenceError(f"Failed to save holiday {holiday.name}", e) from e
        logger.info(f"Holiday added: {holiday.date_string} {holiday.name}")

    def remove(self, holiday_id: str) -> None:
        try:
            self._store.delete(self._collection, holiday_id)
        except StoreError as e:
            logger.error(f"Failed to delete holiday {holiday_id}: {e}")
            raise PersistenceError(f"Failed to delete holiday {holiday_id}", e) from e
        logger.info(f"Holiday removed: {holiday_id}")
