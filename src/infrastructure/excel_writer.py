"""
Excel Writer Module

Generates the monthly DTR grid as a styled workbook, one sheet per staff
member. Rows mirror the printed form: day, A.M. and P.M. arrival and
departure, undertime, plus the resolved status of the day.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import (
    Font, PatternFill, Alignment, Border, Side
)
from openpyxl.utils import get_column_letter

from domain.entities import DayStatus
from domain.month_grid import GridRow, MonthGrid
from infrastructure.logger import get_logger

logger = get_logger("ExcelWriter")

# Characters Excel does not allow in sheet titles
_INVALID_TITLE_CHARS = re.compile(r'[\[\]:*?/\\]')
_MAX_TITLE_LENGTH = 31


class ExcelWriter:
    """
    Generates formatted DTR workbooks.

    Sheet layout:
    - Row 1: "DAILY TIME RECORD" title (merged)
    - Row 2: Staff name, Row 3: month
    - Rows 5-6: two-row table header (Day | A.M. | P.M. | Undertime | Status)
    - One row per calendar day; banner days merge the six time columns

    Styling:
    - Banner text colour per status (holiday red, weekend grey,
      leave orange, official business purple)
    - Late arrivals in red bold
    """

    # Text colours per status (hex, no leading #)
    TEXT_COLORS = {
        DayStatus.HOLIDAY: 'DC2626',
        DayStatus.WEEKEND: '646464',
        DayStatus.LEAVE: 'EA580C',
        DayStatus.OFFICIAL_BUSINESS: '581C87',
    }
    LATE_COLOR = 'DC2626'

    FILLS = {
        'header': PatternFill(start_color='D9D9D9', end_color='D9D9D9', fill_type='solid'),
        'weekend': PatternFill(start_color='F3F4F6', end_color='F3F4F6', fill_type='solid'),
    }

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    HEADER_ROW = 5
    FIRST_DAY_ROW = 7
    COLUMN_WIDTHS = [6, 11, 11, 11, 11, 8, 8, 18]

    def __init__(self):
        self.wb: Optional[Workbook] = None

    def create_report(self, grids: List[MonthGrid], output_path: Path) -> Path:
        """
        Create a workbook with one sheet per month grid.

        Args:
            grids: Month grids, one per staff member
            output_path: Path to save the Excel file

        Returns:
            Path to the created file

        Raises:
            ValueError: If grids is empty
        """
        if not grids:
            raise ValueError("No staff selected for the report")

        self.wb = Workbook()
        self.wb.remove(self.wb.active)

        used_titles: Dict[str, int] = {}
        for grid in grids:
            ws = self.wb.create_sheet(self._sheet_title(grid.staff.name, used_titles))
            self._write_sheet(ws, grid)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(output_path)
        logger.info(f"Workbook saved: {output_path} ({len(grids)} sheet(s))")
        return output_path

    @staticmethod
    def _sheet_title(name: str, used: Dict[str, int]) -> str:
        """Excel-safe, unique sheet title."""
        base = _INVALID_TITLE_CHARS.sub('', name).strip() or "Staff"
        base = base[:_MAX_TITLE_LENGTH]
        count = used.get(base, 0)
        used[base] = count + 1
        if count == 0:
            return base
        suffix = f" ({count + 1})"
        return base[:_MAX_TITLE_LENGTH - len(suffix)] + suffix

    def _write_sheet(self, ws, grid: MonthGrid) -> None:
        last_col = len(self.COLUMN_WIDTHS)
        last_letter = get_column_letter(last_col)

        # Title block
        ws.merge_cells(f"A1:{last_letter}1")
        ws.cell(1, 1, "DAILY TIME RECORD").font = Font(bold=True, size=14)
        ws.cell(1, 1).alignment = Alignment(horizontal='center')

        ws.merge_cells(f"A2:{last_letter}2")
        ws.cell(2, 1, grid.staff.name.upper()).font = Font(bold=True, size=11)
        ws.cell(2, 1).alignment = Alignment(horizontal='center')

        ws.merge_cells(f"A3:{last_letter}3")
        ws.cell(3, 1, f"For the month of: {grid.month_label}").font = Font(size=10)

        self._write_header(ws)

        for offset, row in enumerate(grid.rows):
            self._write_row(ws, self.FIRST_DAY_ROW + offset, row)

        for col, width in enumerate(self.COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(col)].width = width

        ws.freeze_panes = ws.cell(self.FIRST_DAY_ROW, 2)

    def _write_header(self, ws) -> None:
        top = self.HEADER_ROW
        sub = top + 1

        spans = [
            (1, 1, "Day"),
            (2, 3, "A.M."),
            (4, 5, "P.M."),
            (6, 7, "Undertime"),
            (8, 8, "Status"),
        ]
        for start, end, label in spans:
            if start == end:
                ws.merge_cells(start_row=top, start_column=start, end_row=sub, end_column=end)
            else:
                ws.merge_cells(start_row=top, start_column=start, end_row=top, end_column=end)
            ws.cell(top, start, label)

        for col, label in enumerate(["Arr", "Dep", "Arr", "Dep", "Hrs", "Min"], start=2):
            ws.cell(sub, col, label)

        for r in (top, sub):
            for col in range(1, len(self.COLUMN_WIDTHS) + 1):
                cell = ws.cell(r, col)
                cell.font = Font(bold=True)
                cell.fill = self.FILLS['header']
                cell.alignment = Alignment(horizontal='center', vertical='center')
                cell.border = self.BORDER

    def _write_row(self, ws, r: int, row: GridRow) -> None:
        ws.cell(r, 1, row.day)
        ws.cell(r, 8, row.status.value)

        if row.is_banner:
            ws.merge_cells(start_row=r, start_column=2, end_row=r, end_column=7)
            cell = ws.cell(r, 2, row.banner)
            cell.font = Font(
                color=self.TEXT_COLORS[row.status],
                bold=row.status in (DayStatus.HOLIDAY, DayStatus.WEEKEND),
            )
        else:
            late = {2: row.late_am, 4: row.late_pm}
            for col, text in enumerate(row.cells, start=2):
                cell = ws.cell(r, col, text or None)
                if late.get(col):
                    cell.font = Font(color=self.LATE_COLOR, bold=True)

        for col in range(1, len(self.COLUMN_WIDTHS) + 1):
            cell = ws.cell(r, col)
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = self.BORDER
            if row.status == DayStatus.WEEKEND:
                cell.fill = self.FILLS['weekend']
