"""
Unit tests for DTRReportService grid building and exports.
"""

import pytest
import tempfile
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.report_service import DTRReportService
from config.config_manager import ExportSettings, Schedule
from domain.entities import DayStatus, DTRRecord, Holiday, RecordCategory, StaffMember
from infrastructure.dtr_store import DTRStore
from infrastructure.holiday_registry import HolidayRegistry
from infrastructure.record_store import InMemoryRecordStore

DALOS = StaffMember("emp_007", "Norhan G. Dalos")
TIMAN = StaffMember("emp_006", "Vilma S. Timan")


def make_service(output_dir="", logo_calls=None, schedule=None):
    rows = [
        DTRRecord("emp_007", DALOS.name, "2025-12-01", am_in="07:05", am_out="12:00").to_row(),
        DTRRecord("emp_007", DALOS.name, "2025-12-02", am_in="08:20", am_out="12:00").to_row(),
        DTRRecord("emp_007", DALOS.name, "2025-12-03", remarks="OB: Capitol - audit",
                  category=RecordCategory.OB).to_row(),
        DTRRecord("emp_006", TIMAN.name, "2025-12-01", pm_in="13:00", pm_out="17:00").to_row(),
    ]
    holidays = [Holiday("1", "2025-12-08", "Feast of the Immaculate Conception").to_row()]
    backend = InMemoryRecordStore(initial={"Attendance": rows, "Holidays": holidays})

    def logo_loader(url):
        if logo_calls is not None:
            logo_calls.append(url)
        return None

    return DTRReportService(
        DTRStore(backend),
        HolidayRegistry(backend),
        schedule=schedule,
        export=ExportSettings(output_dir=output_dir),
        logo_loader=logo_loader,
    )


class TestMonthGrid:
    """Tests for build_month_grid."""

    def test_one_row_per_day(self):
        """Test December yields 31 rows numbered from 1."""
        grid = make_service().build_month_grid(DALOS, 2025, 12)
        assert [r.day for r in grid.rows] == list(range(1, 32))
        assert grid.month_label == "December 2025"

    def test_normal_row_cells(self):
        """Test punches are 12-hour text and undertime is blank."""
        row = make_service().build_month_grid(DALOS, 2025, 12).rows[0]
        assert row.weekday_name == "Monday"
        assert row.cells == ["7:05 AM", "12:00 PM", "", "", "", ""]
        assert not row.is_banner

    def test_late_flag(self):
        """Test an arrival after the AM cutoff is late."""
        row = make_service().build_month_grid(DALOS, 2025, 12).rows[1]
        assert row.late_am
        assert not row.late_pm

    def test_cutoff_from_schedule(self):
        """Test the late cutoff follows the configured schedule."""
        service = make_service(schedule=Schedule(late_am_after="08:30"))
        assert not service.build_month_grid(DALOS, 2025, 12).rows[1].late_am

    def test_banner_rows(self):
        """Test OB, weekend and holiday rows carry banners with blank cells."""
        rows = make_service().build_month_grid(DALOS, 2025, 12).rows
        ob, saturday, holiday = rows[2], rows[5], rows[7]

        assert ob.status == DayStatus.OFFICIAL_BUSINESS
        assert ob.banner == "OFFICIAL BUSINESS"
        assert saturday.banner == "SATURDAY"
        assert holiday.banner == "FEAST OF THE IMMACULATE CONCEPTION"
        assert all(r.is_banner and r.cells == [""] * 6 for r in (ob, saturday, holiday))

    def test_other_staff_not_mixed_in(self):
        """Test a grid only shows its own staff member's punches."""
        row = make_service().build_month_grid(TIMAN, 2025, 12).rows[0]
        assert row.cells[:4] == ["", "", "1:00 PM", "5:00 PM"]
        assert row.status == DayStatus.NORMAL


class TestExportPdf:
    """Tests for export_pdf."""

    def test_default_name_single_staff(self):
        """Test the file is named after the staff member."""
        logo_calls = []
        with tempfile.TemporaryDirectory() as tmpdir:
            result = make_service(tmpdir, logo_calls).export_pdf([DALOS], 2025, 12)
            assert result.success
            assert result.output_path == Path(tmpdir) / "DTR_Norhan G. Dalos.pdf"
            assert result.output_path.exists()
            assert result.staff_count == 1
        assert logo_calls == [ExportSettings().logo_url]

    def test_default_name_all_staff(self):
        """Test several staff share one ALL file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            result = make_service(tmpdir).export_pdf([DALOS, TIMAN], 2025, 12)
            assert result.success
            assert result.output_path.name == "DTR_ALL.pdf"
            assert result.staff_count == 2

    def test_empty_staff_raises(self):
        """Test an empty selection is rejected."""
        with pytest.raises(ValueError):
            make_service().export_pdf([], 2025, 12)

    def test_unwritable_path(self):
        """Test a filesystem error is reported in the result."""
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "blocker"
            blocker.write_text("not a directory")
            result = make_service(tmpdir).export_pdf([DALOS], 2025, 12, blocker / "out.pdf")
            assert not result.success
            assert result.error_message


class TestExportXlsx:
    """Tests for export_xlsx."""

    def test_default_name(self):
        """Test the workbook name uses year and month."""
        with tempfile.TemporaryDirectory() as tmpdir:
            result = make_service(tmpdir).export_xlsx([DALOS, TIMAN], 2025, 12)
            assert result.success
            assert result.output_path == Path(tmpdir) / "DTR_2025_12.xlsx"
            assert result.output_path.exists()

    def test_explicit_path(self):
        """Test an explicit output path is used as given."""
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "reports" / "december.xlsx"
            result = make_service().export_xlsx([DALOS], 2025, 12, target)
            assert result.success
            assert target.exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
