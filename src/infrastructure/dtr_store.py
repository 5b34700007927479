"""
DTR Store Module

Per-staff, per-day attendance records on top of a RecordStore collection.
"""

from typing import Dict, List, Optional

from domain.entities import DTRRecord, make_record_id
from domain.exceptions import PersistenceError
from infrastructure.logger import get_logger
from infrastructure.record_store import RecordStore, StoreError

logger = get_logger("DTRStore")


class DTRStore:
    """
    Upsert-by-identity store of DTR records.

    upsert() looks the identity up in a fresh read and then updates or
    creates. Two concurrent upserts of the same new identity can both see
    "absent" and create two rows; backends with supports_upsert take a
    single keyed call instead and close that gap.

    The last successful read is kept as a snapshot for views. Any write
    drops it so the next read comes from the backend; after a failed write
    it is re-read at once, because whether the write landed is unknown.
    """

    def __init__(self, store: RecordStore, collection: str = "Attendance"):
        self._store = store
        self._collection = collection
        self._snapshot: Optional[List[DTRRecord]] = None

    def list(self) -> List[DTRRecord]:
        """All records, from the snapshot if one is loaded."""
        if self._snapshot is None:
            self.refresh()
        return list(self._snapshot)

    def refresh(self) -> List[DTRRecord]:
        """Re-read the authoritative list from the backend."""
        try:
            rows = self._store.read(self._collection)
        except StoreError as e:
            self._snapshot = None
            raise PersistenceError(f"Failed to load DTR records: {e}", e) from e
        self._snapshot = self._dedupe(DTRRecord.from_row(row) for row in rows)
        logger.debug(f"Loaded {len(self._snapshot)} DTR records")
        return list(self._snapshot)

    def get(self, staff_id: str, date_string: str) -> Optional[DTRRecord]:
        record_id = make_record_id(staff_id, date_string)
        for record in self.list():
            if record.record_id == record_id:
                return record.copy()
        return None

    def records_for(self, staff_id: str, year: int, month: int) -> List[DTRRecord]:
        prefix = f"{year:04d}-{month:02d}-"
        return [
            r for r in self.list()
            if r.staff_id == staff_id and r.date_string.startswith(prefix)
        ]

    def upsert(self, record: DTRRecord) -> None:
        """
        Write a record by identity, replacing any existing fields.

        Merging with the previous contents is the caller's job.

        Raises:
            PersistenceError: If the backend call fails
        """
        row = record.to_row()
        try:
            if self._store.supports_upsert:
                self._store.upsert(self._collection, row)
            else:
                current = self._store.read(self._collection)
                exists = any(str(r.get("id")) == record.record_id for r in current)
                if exists:
                    self._store.update(self._collection, row)
                else:
                    self._store.create(self._collection, row)
        except StoreError as e:
            logger.error(f"Failed to save DTR {record.record_id}: {e}")
            self._recover()
            raise PersistenceError(f"Failed to save DTR record {record.record_id}", e) from e

        self._snapshot = None
        logger.info(f"Saved DTR {record.record_id}")

    def _recover(self) -> None:
        self._snapshot = None
        try:
            self.refresh()
        except PersistenceError as e:
            logger.warning(f"Re-fetch after failed write also failed: {e}")

    @staticmethod
    def _dedupe(records) -> List[DTRRecord]:
        """Collapse duplicate identities; the last row wins."""
        by_id: Dict[str, DTRRecord] = {}
        for record in records:
            if not record.staff_id or not record.date_string:
                continue
            by_id.pop(record.record_id, None)
            by_id[record.record_id] = record
        return list(by_id.values())
