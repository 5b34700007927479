"""
Unit tests for HolidayService role gating, validation and ordering.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.holiday_service import HolidayService
from domain.entities import HolidayType, Role, StaffMember
from domain.exceptions import PermissionDeniedError
from infrastructure.holiday_registry import HolidayRegistry
from infrastructure.record_store import InMemoryRecordStore

DEVELOPER = StaffMember("emp_005", "Al-Benladin A. Hadji Usop", Role.DEVELOPER)
MODERATOR = StaffMember("emp_007", "Norhan G. Dalos", Role.MODERATOR)


def make_service(ids=None):
    ids = iter(ids or range(1000, 2000))
    backend = InMemoryRecordStore()
    return HolidayService(HolidayRegistry(backend), id_source=lambda: next(ids)), backend


class TestPermissions:
    """Tests for role gating."""

    def test_developer_can_add(self):
        """Test a privileged user adds a holiday."""
        service, backend = make_service()
        holiday = service.add_holiday(DEVELOPER, "2025-12-25", "Christmas Day")
        assert holiday.id == "1000"
        assert backend.read("Holidays")[0]["name"] == "Christmas Day"

    def test_moderator_cannot_add(self):
        """Test a non-privileged user is refused and nothing is written."""
        service, backend = make_service()
        with pytest.raises(PermissionDeniedError):
            service.add_holiday(MODERATOR, "2025-12-25", "Christmas Day")
        assert backend.read("Holidays") == []

    def test_moderator_cannot_remove(self):
        """Test deletion is also gated."""
        service, backend = make_service()
        holiday = service.add_holiday(DEVELOPER, "2025-12-25", "Christmas Day")
        with pytest.raises(PermissionDeniedError):
            service.remove_holiday(MODERATOR, holiday.id)
        assert len(backend.read("Holidays")) == 1

    def test_developer_can_remove(self):
        """Test a privileged user deletes by id."""
        service, backend = make_service()
        holiday = service.add_holiday(DEVELOPER, "2025-12-25", "Christmas Day")
        service.remove_holiday(DEVELOPER, holiday.id)
        assert backend.read("Holidays") == []


class TestValidation:
    """Tests for holiday input validation."""

    def test_name_required(self):
        """Test a blank name is rejected."""
        service, _ = make_service()
        with pytest.raises(ValueError):
            service.add_holiday(DEVELOPER, "2025-12-25", "  ")

    def test_date_required(self):
        """Test an invalid date is rejected."""
        service, _ = make_service()
        with pytest.raises(ValueError):
            service.add_holiday(DEVELOPER, "", "Christmas Day")

    def test_fields_trimmed(self):
        """Test date, name and remarks are stored trimmed."""
        service, _ = make_service()
        holiday = service.add_holiday(
            DEVELOPER, " 2025-08-21 ", " Ninoy Aquino Day ",
            HolidayType.SPECIAL_NON_WORKING, " Proc. 90 "
        )
        assert holiday.date_string == "2025-08-21"
        assert holiday.name == "Ninoy Aquino Day"
        assert holiday.remarks == "Proc. 90"
        assert holiday.display_text == "NINOY AQUINO DAY (Proc. 90)"


class TestListing:
    """Tests for list order and lookup."""

    def test_newest_first(self):
        """Test holidays are listed by date, newest first."""
        service, _ = make_service()
        service.add_holiday(DEVELOPER, "2025-06-12", "Independence Day")
        service.add_holiday(DEVELOPER, "2025-12-30", "Rizal Day")
        service.add_holiday(DEVELOPER, "2025-08-21", "Ninoy Aquino Day")
        assert [h.date_string for h in service.list_holidays()] == [
            "2025-12-30", "2025-08-21", "2025-06-12"
        ]

    def test_duplicate_date_allowed_lowest_id_wins(self):
        """Test a second holiday on a date is stored; lookups pick the lowest id."""
        service, backend = make_service(ids=[500, 100])
        service.add_holiday(DEVELOPER, "2025-12-25", "Christmas Day")
        service.add_holiday(DEVELOPER, "2025-12-25", "Duplicate")
        assert len(backend.read("Holidays")) == 2
        assert service.holiday_on("2025-12-25").name == "Duplicate"

    def test_holiday_on_missing(self):
        """Test a plain day has no holiday."""
        service, _ = make_service()
        assert service.holiday_on("2025-12-02") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
