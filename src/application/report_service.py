"""
Report Service Module

Application layer service that orchestrates DTR report generation:
the monthly grid, the Form 48 PDF and the workbook export.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from config.config_manager import ExportSettings, Schedule
from domain.entities import StaffMember
from domain.month_grid import MonthGrid, build_month_grid
from domain.status_resolver import StatusResolver
from infrastructure.asset_loader import fetch_image
from infrastructure.dtr_store import DTRStore
from infrastructure.holiday_registry import HolidayRegistry
from infrastructure.logger import get_logger

logger = get_logger("ReportService")


@dataclass
class ReportResult:
    """Result of report generation."""
    success: bool
    output_path: Optional[Path]
    staff_count: int = 0
    year: int = 0
    month: int = 0
    error_message: str = ""


class DTRReportService:
    """
    Application service for DTR reports.

    This service:
    - Builds month grids from one resolver snapshot per export
    - Writes the PDF form and the workbook through the infrastructure writers
    - Fetches the watermark logo; a missing logo only drops the watermark
    """

    def __init__(
        self,
        store: DTRStore,
        holidays: HolidayRegistry,
        schedule: Optional[Schedule] = None,
        export: Optional[ExportSettings] = None,
        logo_loader: Callable[[str], Optional[bytes]] = fetch_image
    ):
        self._store = store
        self._holidays = holidays
        self._schedule = schedule or Schedule()
        self._export = export or ExportSettings()
        self._logo_loader = logo_loader

    def _resolver(self) -> StatusResolver:
        return StatusResolver(
            self._holidays.list(),
            self._store.list(),
            late_am_after=self._schedule.late_am_after,
            late_pm_after=self._schedule.late_pm_after,
        )

    def build_month_grid(
        self,
        staff: StaffMember,
        year: int,
        month: int,
        resolver: Optional[StatusResolver] = None
    ) -> MonthGrid:
        """One row per day of the month for one staff member."""
        return build_month_grid(resolver or self._resolver(), staff, year, month)

    def build_month_grids(self, staff_list: List[StaffMember], year: int, month: int) -> List[MonthGrid]:
        resolver = self._resolver()
        return [build_month_grid(resolver, staff, year, month) for staff in staff_list]

    def export_pdf(
        self,
        staff_list: List[StaffMember],
        year: int,
        month: int,
        output_path: Optional[Path] = None
    ) -> ReportResult:
        """
        Write the Form 48 PDF, one page per staff member.

        Raises:
            ValueError: If staff_list is empty
            PersistenceError: If records or holidays cannot be loaded
        """
        from infrastructure.pdf_writer import DtrPdfWriter, format_filename

        if not staff_list:
            raise ValueError("No staff selected for the report")

        if output_path is None:
            name = staff_list[0].name if len(staff_list) == 1 else "ALL"
            filename = format_filename(self._export.pdf_filename_pattern, year, month, name)
            output_path = self._output_dir() / filename

        grids = self.build_month_grids(staff_list, year, month)
        logo = self._logo_loader(self._export.logo_url)
        if logo is None:
            logger.warning("Logo unavailable, exporting without watermark")

        logger.info(f"Writing PDF for {len(grids)} staff: {output_path}")
        writer = DtrPdfWriter(self._export, logo=logo)
        try:
            writer.create_report(grids, Path(output_path))
        except OSError as e:
            logger.error(f"PDF export failed: {e}")
            return ReportResult(False, Path(output_path), len(grids), year, month, str(e))

        return ReportResult(True, Path(output_path), len(grids), year, month)

    def export_xlsx(
        self,
        staff_list: List[StaffMember],
        year: int,
        month: int,
        output_path: Optional[Path] = None
    ) -> ReportResult:
        """
        Write the monthly grid workbook, one sheet per staff member.

        Raises:
            ValueError: If staff_list is empty
            PersistenceError: If records or holidays cannot be loaded
        """
        from infrastructure.excel_writer import ExcelWriter
        from infrastructure.pdf_writer import format_filename

        if not staff_list:
            raise ValueError("No staff selected for the report")

        if output_path is None:
            filename = format_filename(self._export.xlsx_filename_pattern, year, month)
            output_path = self._output_dir() / filename

        grids = self.build_month_grids(staff_list, year, month)
        logger.info(f"Writing workbook for {len(grids)} staff: {output_path}")
        try:
            ExcelWriter().create_report(grids, Path(output_path))
        except OSError as e:
            logger.error(f"Workbook export failed: {e}")
            return ReportResult(False, Path(output_path), len(grids), year, month, str(e))

        return ReportResult(True, Path(output_path), len(grids), year, month)

    def _output_dir(self) -> Path:
        return Path(self._export.output_dir) if self._export.output_dir else Path.cwd()
