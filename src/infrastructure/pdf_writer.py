"""
PDF Writer Module

Generates the Civil Service Form No. 48 daily time record using fpdf2.
Several identical copies of the form are laid side by side on a landscape
page so the printout can be cut into individual forms.
"""

from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fpdf import FPDF
from PIL import Image

from config.config_manager import ExportSettings
from domain.entities import DayStatus
from domain.month_grid import GridRow, MonthGrid
from infrastructure.logger import get_logger

logger = get_logger("PdfWriter")

FONT_FAMILY = "Helvetica"

PAPER_SIZES = ("letter", "a4", "legal")


def calculate_copies(available_width: float, form_width: float, gap: float) -> int:
    """Number of forms that fit side by side; never less than one."""
    copies = int((available_width + gap) // (form_width + gap))
    return max(1, copies)


def copy_positions(page_width: float, margin: float, form_width: float, gap: float) -> List[float]:
    """Left x of every copy, with the whole block centred on the page."""
    copies = calculate_copies(page_width - 2 * margin, form_width, gap)
    block_width = copies * form_width + (copies - 1) * gap
    start_x = (page_width - block_width) / 2
    return [start_x + i * (form_width + gap) for i in range(copies)]


def to_latin1(text: str) -> str:
    """Core PDF fonts only cover Latin-1; replace anything outside it."""
    return text.encode('latin-1', 'replace').decode('latin-1')


def load_logo(data: bytes) -> Optional[Image.Image]:
    """Decode watermark image bytes; None if they are not a readable image."""
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (OSError, ValueError) as e:
        logger.warning(f"Cannot decode watermark image, skipping it: {e}")
        return None
    return image


# ==============================================================================
# DtrFormPdf Class
# ==============================================================================
class DtrFormPdf(FPDF):
    """Landscape FPDF document with the core Helvetica font."""

    def __init__(self, paper_size: str = "letter"):
        paper_size = paper_size.lower()
        if paper_size not in PAPER_SIZES:
            logger.warning(f"Unknown paper size '{paper_size}', using letter")
            paper_size = "letter"
        super().__init__(orientation='L', unit='mm', format=paper_size)
        self.set_auto_page_break(auto=False)
        self.set_margins(0, 0, 0)

    def text_at(
        self,
        x: float, y: float,
        width: float, text: str,
        size: float = 7,
        style: str = '',
        align: str = 'L',
        height: float = 4
    ) -> None:
        """Write one line of text in a box whose top-left is (x, y)."""
        self.set_font(FONT_FAMILY, style, size)
        self.set_xy(x, y)
        self.cell(width, height, to_latin1(text), align=align)


# ==============================================================================
# DtrPdfWriter Class
# ==============================================================================
class DtrPdfWriter:
    """
    Renders month grids as Form 48 pages.

    Features:
    - One page per staff member, as many copies as fit the paper width
    - Banner rows across the time columns for holidays, weekends, leave
      and official business
    - Late arrivals in red bold
    - Optional logo watermark centred on each copy
    """

    # RGB text colours per banner status
    COLORS: Dict[str, Tuple[int, int, int]] = {
        'black': (0, 0, 0),
        'holiday': (220, 38, 38),
        'weekend': (100, 100, 100),
        'leave': (234, 88, 12),
        'ob': (88, 28, 135),
        'late': (220, 38, 38),
    }

    BANNER_STYLES: Dict[DayStatus, Tuple[str, str]] = {
        DayStatus.HOLIDAY: ('holiday', 'B'),
        DayStatus.WEEKEND: ('weekend', 'B'),
        DayStatus.LEAVE: ('leave', ''),
        DayStatus.OFFICIAL_BUSINESS: ('ob', ''),
    }

    # Day, AM Arr, AM Dep, PM Arr, PM Dep, Undertime Hrs, Undertime Min
    COLUMN_WIDTHS = [8, 12.8, 12.8, 12.8, 12.8, 10, 10]

    TOP = 10
    ROW_HEIGHT = 4.0
    TABLE_FONT_SIZE = 7.5
    MIN_FONT_SIZE = 4.5
    THIN_LINE = 0.1
    RULE_LINE = 0.4

    def __init__(self, settings: Optional[ExportSettings] = None, logo: Optional[bytes] = None):
        self._settings = settings or ExportSettings()
        self._logo = load_logo(logo) if logo else None

    def create_report(self, grids: List[MonthGrid], output_path: Path) -> None:
        """
        Write one page per month grid.

        Raises:
            ValueError: If grids is empty
        """
        pdf = self.build(grids)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(output_path))
        logger.info(f"PDF saved: {output_path} ({pdf.page_no()} page(s))")

    def build(self, grids: List[MonthGrid]) -> DtrFormPdf:
        """Lay out the document in memory without writing it."""
        if not grids:
            raise ValueError("No staff selected for the report")

        pdf = DtrFormPdf(self._settings.paper_size)
        positions = copy_positions(
            pdf.w,
            self._settings.page_margin,
            self._settings.form_width,
            self._settings.form_gap,
        )
        logger.debug(f"{len(positions)} form copies per {self._settings.paper_size} page")

        for grid in grids:
            pdf.add_page()
            for x in positions:
                self._draw_watermark(pdf, x)
                self._draw_form(pdf, grid, x)
        return pdf

    def _draw_watermark(self, pdf: DtrFormPdf, x: float) -> None:
        if self._logo is None:
            return
        size = self._settings.watermark_size
        img_x = x + self._settings.form_width / 2 - size / 2
        img_y = pdf.h / 2 - size / 2
        with pdf.local_context(fill_opacity=self._settings.watermark_opacity):
            pdf.image(self._logo, x=img_x, y=img_y, w=size, h=size)

    def _draw_form(self, pdf: DtrFormPdf, grid: MonthGrid, x: float) -> None:
        width = self._settings.form_width
        name = grid.staff.name.upper()
        pdf.set_text_color(*self.COLORS['black'])
        pdf.set_draw_color(0, 0, 0)

        y = self.TOP
        pdf.text_at(x, y - 3, width, "CIVIL SERVICE FORM NO. 48", size=7)

        y += 4
        pdf.text_at(x, y - 4, width, "DAILY TIME RECORD", size=12, style='B', align='C', height=5)

        y += 5
        pdf.set_line_width(self.RULE_LINE)
        pdf.line(x + 5, y + 1, x + width - 5, y + 1)
        pdf.text_at(x, y - 3.5, width, f"----- {name} -----", size=10, style='B', align='C')

        y += 4
        pdf.text_at(x, y - 2.5, width, "(Name)", size=7, align='C', height=3)

        y += 6
        hours_x = x + width * 0.55
        pdf.text_at(x, y - 2.5, width * 0.55, f"For the month of: {grid.month_label}", size=7, height=3)
        pdf.text_at(hours_x, y - 2.5, width * 0.45, "Official hours for arrival", size=7, height=3)
        y += 3
        pdf.text_at(hours_x + 5, y - 2.5, width * 0.45, "and departure", size=7, height=3)
        y += 3
        pdf.text_at(hours_x, y - 2.5, width * 0.45, "Regular Days: _____________", size=7, height=3)
        y += 3
        pdf.text_at(hours_x, y - 2.5, width * 0.45, "Saturdays: _____________", size=7, height=3)
        y += 2

        y = self._draw_table(pdf, grid, x, y)
        self._draw_certification(pdf, name, x, y + 4)

    def _column_widths(self) -> List[float]:
        scale = self._settings.form_width / sum(self.COLUMN_WIDTHS)
        return [w * scale for w in self.COLUMN_WIDTHS]

    def _draw_table(self, pdf: DtrFormPdf, grid: MonthGrid, x: float, y: float) -> float:
        """Draw the two header rows and one row per day; returns the bottom y."""
        widths = self._column_widths()
        h = self.ROW_HEIGHT
        pdf.set_line_width(self.THIN_LINE)
        pdf.set_text_color(*self.COLORS['black'])
        pdf.set_font(FONT_FAMILY, 'B', self.TABLE_FONT_SIZE)

        # Header row 1: Day spans both header rows
        pdf.set_xy(x, y)
        pdf.cell(widths[0], h * 2, "Day", border=1, align='C')
        cx = x + widths[0]
        for label, span in (("A.M.", widths[1] + widths[2]),
                            ("P.M.", widths[3] + widths[4]),
                            ("Undertime", widths[5] + widths[6])):
            pdf.set_xy(cx, y)
            pdf.cell(span, h, label, border=1, align='C')
            cx += span

        # Header row 2
        cx = x + widths[0]
        for label, w in zip(["Arr", "Dep", "Arr", "Dep", "Hrs", "Min"], widths[1:]):
            pdf.set_xy(cx, y + h)
            pdf.cell(w, h, label, border=1, align='C')
            cx += w

        y += h * 2
        for row in grid.rows:
            self._draw_row(pdf, row, x, y, widths)
            y += h
        return y

    def _draw_row(self, pdf: DtrFormPdf, row: GridRow, x: float, y: float, widths: List[float]) -> None:
        h = self.ROW_HEIGHT
        pdf.set_text_color(*self.COLORS['black'])
        pdf.set_font(FONT_FAMILY, '', self.TABLE_FONT_SIZE)
        pdf.set_xy(x, y)
        pdf.cell(widths[0], h, str(row.day), border=1, align='C')

        if row.is_banner:
            color, style = self.BANNER_STYLES[row.status]
            span = sum(widths[1:])
            text = self._fit_text(pdf, to_latin1(row.banner), span - 1, style)
            pdf.set_text_color(*self.COLORS[color])
            pdf.set_xy(x + widths[0], y)
            pdf.cell(span, h, text, border=1, align='C')
            pdf.set_text_color(*self.COLORS['black'])
            return

        late = [row.late_am, False, row.late_pm, False, False, False]
        cx = x + widths[0]
        for text, w, is_late in zip(row.cells, widths[1:], late):
            if is_late:
                pdf.set_text_color(*self.COLORS['late'])
                pdf.set_font(FONT_FAMILY, 'B', self.TABLE_FONT_SIZE)
            pdf.set_xy(cx, y)
            pdf.cell(w, h, text, border=1, align='C')
            if is_late:
                pdf.set_text_color(*self.COLORS['black'])
                pdf.set_font(FONT_FAMILY, '', self.TABLE_FONT_SIZE)
            cx += w

    def _fit_text(self, pdf: DtrFormPdf, text: str, width: float, style: str) -> str:
        """
        Shrink the font until text fits width; truncate if it still does not.

        Leaves the chosen font selected.
        """
        size = self.TABLE_FONT_SIZE
        pdf.set_font(FONT_FAMILY, style, size)
        while pdf.get_string_width(text) > width and size > self.MIN_FONT_SIZE:
            size -= 0.5
            pdf.set_font(FONT_FAMILY, style, size)

        if pdf.get_string_width(text) <= width:
            return text
        while text and pdf.get_string_width(text + "...") > width:
            text = text[:-1]
        return text + "..."

    def _draw_certification(self, pdf: DtrFormPdf, name: str, x: float, y: float) -> None:
        width = self._settings.form_width
        center_line = (x + 10, x + width - 10)

        pdf.set_font(FONT_FAMILY, 'I', 7)
        pdf.set_xy(x, y - 2.5)
        pdf.multi_cell(
            width, 3,
            "I certify on my honor that the above is a true and correct report...",
        )

        sig_y = y + 12
        pdf.set_line_width(self.RULE_LINE)
        pdf.line(center_line[0], sig_y, center_line[1], sig_y)
        pdf.text_at(x, sig_y + 1, width, name, size=9, style='B', align='C')

        pdf.text_at(x, sig_y + 7.5, width, "Verified as to the prescribed office hours:", size=7, style='I', height=3)

        charge_y = sig_y + 20
        pdf.line(center_line[0], charge_y, center_line[1], charge_y)
        pdf.text_at(x, charge_y + 1, width, "In Charge", size=9, style='B', align='C')


# ==============================================================================
# Utility Functions
# ==============================================================================
def format_filename(pattern: str, year: int, month: int, name: str = "") -> str:
    """Format filename pattern with placeholders."""
    safe_name = name.replace('/', '-').replace('\\', '-')
    return pattern.format(
        year=year,
        month=f"{month:02d}",
        name=safe_name
    )
