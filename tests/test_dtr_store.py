"""
Unit tests for DTRStore identity, upsert and failure recovery, and the
holiday registry.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities import DTRRecord, Holiday, HolidayType
from domain.exceptions import PersistenceError
from infrastructure.dtr_store import DTRStore
from infrastructure.holiday_registry import HolidayRegistry
from infrastructure.record_store import InMemoryRecordStore, StoreError


class FlakyStore(InMemoryRecordStore):
    """In-memory store whose writes (and optionally reads) can be made to fail."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.fail_writes = False
        self.fail_reads = False

    def read(self, collection):
        if self.fail_reads:
            self.calls.append(("read-failed", collection))
            raise StoreError("network down")
        return super().read(collection)

    def create(self, collection, record):
        if self.fail_writes:
            raise StoreError("network down")
        super().create(collection, record)

    def update(self, collection, record):
        if self.fail_writes:
            raise StoreError("network down")
        super().update(collection, record)


def record(**fields) -> DTRRecord:
    base = dict(staff_id="emp_007", staff_name="Norhan G. Dalos", date_string="2025-12-01")
    base.update(fields)
    return DTRRecord(**base)


class TestUpsert:
    """Tests for read-then-decide upsert."""

    def test_insert_when_absent(self):
        """Test the first upsert creates the row."""
        backend = InMemoryRecordStore()
        store = DTRStore(backend)
        store.upsert(record(am_in="07:05"))
        assert ("create", "Attendance", "2025-12-01_emp_007") in backend.calls
        assert store.get("emp_007", "2025-12-01").am_in == "07:05"

    def test_twice_gives_one_record_latest_wins(self):
        """Test two upserts of one identity leave a single row with the last fields."""
        backend = InMemoryRecordStore()
        store = DTRStore(backend)
        store.upsert(record(am_in="07:05"))
        store.upsert(record(am_in="07:05", pm_in="13:10"))

        assert len(backend.read("Attendance")) == 1
        assert ("update", "Attendance", "2025-12-01_emp_007") in backend.calls
        assert store.get("emp_007", "2025-12-01").pm_in == "13:10"

    def test_server_side_upsert_used_when_supported(self):
        """Test a keyed backend gets a single upsert call and no existence read."""
        backend = InMemoryRecordStore(unique_ids=True)
        store = DTRStore(backend)
        store.upsert(record(am_in="07:05"))
        store.upsert(record(am_in="07:10"))

        assert [c[0] for c in backend.calls] == ["upsert", "upsert"]
        assert len(backend.read("Attendance")) == 1

    def test_row_format(self):
        """Test the stored row uses the sheet column names."""
        backend = InMemoryRecordStore()
        DTRStore(backend).upsert(record(am_in="07:05", am_out="12:00"))
        row = backend.read("Attendance")[0]
        assert row["id"] == "2025-12-01_emp_007"
        assert row["amIn"] == "07:05"
        assert row["category"] == "NONE"
        assert row["isHoliday"] == "false"


class TestListing:
    """Tests for reads and the snapshot."""

    def test_duplicates_collapse_to_last_row(self):
        """Test rows duplicated by the create race list once, last row winning."""
        rows = [
            record(am_in="07:05").to_row(),
            record(am_in="07:06").to_row(),
        ]
        store = DTRStore(InMemoryRecordStore(initial={"Attendance": rows}))
        listed = store.list()
        assert len(listed) == 1
        assert listed[0].am_in == "07:06"

    def test_records_for_month(self):
        """Test filtering by staff and month."""
        rows = [
            record().to_row(),
            record(date_string="2025-11-28").to_row(),
            record(staff_id="emp_004").to_row(),
        ]
        store = DTRStore(InMemoryRecordStore(initial={"Attendance": rows}))
        result = store.records_for("emp_007", 2025, 12)
        assert [r.date_string for r in result] == ["2025-12-01"]

    def test_get_returns_copy(self):
        """Test mutating a fetched record does not touch the snapshot."""
        store = DTRStore(InMemoryRecordStore(initial={"Attendance": [record(am_in="07:05").to_row()]}))
        fetched = store.get("emp_007", "2025-12-01")
        fetched.am_in = "09:00"
        assert store.get("emp_007", "2025-12-01").am_in == "07:05"

    def test_missing_collection_is_empty(self):
        """Test an unknown collection lists nothing."""
        assert DTRStore(InMemoryRecordStore()).list() == []

    def test_read_failure_raises_persistence_error(self):
        """Test a failing read surfaces as PersistenceError."""
        backend = FlakyStore()
        backend.fail_reads = True
        with pytest.raises(PersistenceError):
            DTRStore(backend).list()


class TestFailureRecovery:
    """Tests for behaviour when a write fails."""

    def test_failed_write_raises_and_refetches(self):
        """Test PersistenceError is raised and the authoritative list is re-read."""
        backend = FlakyStore()
        store = DTRStore(backend)
        store.upsert(record(am_in="07:05"))
        backend.fail_writes = True
        backend.calls.clear()

        with pytest.raises(PersistenceError):
            store.upsert(record(am_in="07:05", pm_in="13:00"))

        # existence read, then the recovery re-fetch
        assert [c[0] for c in backend.calls].count("read") == 2
        assert store.get("emp_007", "2025-12-01").pm_in == ""

    def test_failed_refetch_still_raises_original_error(self):
        """Test a failing re-fetch is logged, not raised in place of the write error."""
        backend = FlakyStore()
        store = DTRStore(backend)
        backend.fail_writes = True

        original_read = backend.read
        state = {"n": 0}

        def read_then_fail(collection):
            state["n"] += 1
            if state["n"] > 1:
                raise StoreError("still down")
            return original_read(collection)

        backend.read = read_then_fail
        with pytest.raises(PersistenceError) as exc_info:
            store.upsert(record(am_in="07:05"))
        assert "Failed to save" in str(exc_info.value)


class TestHolidayRegistry:
    """Tests for the holiday registry."""

    def test_add_list_remove(self):
        """Test a holiday round-trips through the store and can be deleted."""
        registry = HolidayRegistry(InMemoryRecordStore())
        registry.add(Holiday("1", "2025-12-25", "Christmas Day", HolidayType.REGULAR))
        assert [h.name for h in registry.list()] == ["Christmas Day"]

        registry.remove("1")
        assert registry.list() == []

    def test_find_exact_trimmed_match(self):
        """Test find() trims stored dates and does no fuzzy matching."""
        rows = [{"id": "1", "dateString": " 2025-12-30 ", "name": "Rizal Day", "type": "Regular"}]
        registry = HolidayRegistry(InMemoryRecordStore(initial={"Holidays": rows}))
        assert registry.find("2025-12-30").name == "Rizal Day"
        assert registry.find("2025-12-3") is None

    def test_find_tie_break(self):
        """Test the lowest id wins among same-day holidays."""
        rows = [
            {"id": "200", "dateString": "2025-12-25", "name": "B"},
            {"id": "100", "dateString": "2025-12-25", "name": "A"},
        ]
        registry = HolidayRegistry(InMemoryRecordStore(initial={"Holidays": rows}))
        assert registry.find("2025-12-25").name == "A"

    def test_special_type_parsed(self):
        """Test the special non-working type survives a round trip."""
        registry = HolidayRegistry(InMemoryRecordStore())
        registry.add(Holiday("1", "2025-08-21", "Ninoy Aquino Day", HolidayType.SPECIAL_NON_WORKING))
        assert registry.list()[0].type == HolidayType.SPECIAL_NON_WORKING

    def test_store_failure_wrapped(self):
        """Test backend faults surface as PersistenceError."""
        backend = FlakyStore()
        backend.fail_writes = True
        with pytest.raises(PersistenceError):
            HolidayRegistry(backend).add(Holiday("1", "2025-12-25", "Christmas Day"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
