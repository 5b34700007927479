"""
DTR Reconciliation Engine

Command line entry point for punching, filing leave / official business,
maintaining holidays, correcting days and exporting the monthly DTR.
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from application.dashboard_service import DashboardService
from application.edit_service import EditService
from application.filing_service import (
    LEAVE_TYPES, FilingKind, FilingService, LeaveDetail, ObDetail
)
from application.holiday_service import HolidayService
from application.punch_service import PunchService
from application.report_service import DTRReportService
from config.config_manager import ConfigManager
from domain.entities import HalfDay, HolidayType, RecordCategory
from domain.exceptions import AttendanceError
from infrastructure.dtr_store import DTRStore
from infrastructure.holiday_registry import HolidayRegistry
from infrastructure.logger import set_log_file
from infrastructure.record_store import StoreError, build_record_store
from infrastructure.staff_directory import StaffDirectory


class App:
    """Wires configuration, stores and services together."""

    def __init__(self, config_path=None):
        self.config_manager = ConfigManager(Path(config_path) if config_path else None)
        self.config = self.config_manager.load()
        if self.config.paths.log_file:
            set_log_file(self.config.paths.log_file)

        store_settings = self.config.store
        backend = build_record_store(store_settings)
        self.dtr_store = DTRStore(backend, store_settings.attendance_sheet)
        self.holidays = HolidayRegistry(backend, store_settings.holidays_sheet)

        if self.config.paths.staff_csv:
            self.directory = StaffDirectory.load_from_csv(Path(self.config.paths.staff_csv))
        else:
            self.directory = StaffDirectory()

    def staff(self, staff_id: str):
        member = self.directory.get(staff_id)
        if member is None:
            raise ValueError(f"Unknown staff id: {staff_id}")
        return member

    def punch_service(self) -> PunchService:
        return PunchService(self.dtr_store, self.config.punch_windows, self.config.schedule)

    def filing_service(self) -> FilingService:
        return FilingService(self.dtr_store, self.config.schedule)

    def holiday_service(self) -> HolidayService:
        return HolidayService(self.holidays)

    def edit_service(self) -> EditService:
        return EditService(self.dtr_store)

    def dashboard_service(self) -> DashboardService:
        return DashboardService(self.dtr_store, self.holidays, self.directory, self.config.schedule)

    def report_service(self) -> DTRReportService:
        return DTRReportService(
            self.dtr_store, self.holidays, self.config.schedule, self.config.export
        )


# ==============================================================================
# Commands
# ==============================================================================
def cmd_punch(app: App, args) -> int:
    result = app.punch_service().punch(app.staff(args.staff), HalfDay(args.half_day.upper()))
    late = " (late)" if result.is_late else ""
    print(f"Success! {result.half_day.value} IN recorded at {result.display_time}{late}.")
    return 0


def _print_filing(result) -> int:
    print(f"{result.kind.value} filed for {result.filed_count} day(s).")
    if result.skipped:
        print(f"Skipped weekend days: {', '.join(result.skipped)}")
    for day, error in result.failed:
        print(f"FAILED {day}: {error}")
    return 0 if result.success else 1


def cmd_file_leave(app: App, args) -> int:
    detail = LeaveDetail(args.type, args.reason)
    result = app.filing_service().file_range(
        app.staff(args.staff), args.start, args.end, FilingKind.LEAVE, detail
    )
    return _print_filing(result)


def cmd_file_ob(app: App, args) -> int:
    detail = ObDetail(args.location, args.purpose)
    result = app.filing_service().file_range(
        app.staff(args.staff), args.start, args.end, FilingKind.OB, detail
    )
    return _print_filing(result)


def cmd_holiday(app: App, args) -> int:
    service = app.holiday_service()
    if args.holiday_cmd == "list":
        for h in service.list_holidays():
            remarks = f"  [{h.remarks}]" if h.remarks else ""
            print(f"{h.date_string}  {h.name}  ({h.type.value})  id={h.id}{remarks}")
    elif args.holiday_cmd == "add":
        holiday = service.add_holiday(
            app.staff(args.actor), args.date, args.name,
            HolidayType.parse(args.type), args.remarks
        )
        print(f"Holiday set: {holiday.date_string} {holiday.name} (id {holiday.id})")
    else:
        service.remove_holiday(app.staff(args.actor), args.id)
        print(f"Holiday {args.id} deleted.")
    return 0


def cmd_edit(app: App, args) -> int:
    service = app.edit_service()
    record = service.open_day(app.staff(args.staff), args.date)
    times = {
        name: getattr(args, name)
        for name in ("am_in", "am_out", "pm_in", "pm_out")
        if getattr(args, name) is not None
    }
    category = RecordCategory(args.category.upper()) if args.category else None
    saved = service.save_day(record, remarks=args.remarks, category=category, **times)
    print(
        f"Record updated: {saved.date_string} AM {saved.am_in or '-'}-{saved.am_out or '-'} "
        f"PM {saved.pm_in or '-'}-{saved.pm_out or '-'} {saved.remarks}"
    )
    return 0


def cmd_show(app: App, args) -> int:
    staff = app.staff(args.staff)
    grid = app.report_service().build_month_grid(staff, args.year, args.month)
    print(f"{staff.name} - {grid.month_label}")
    print(f"{'Day':>3}  {'AM Arr':>8} {'AM Dep':>8} {'PM Arr':>8} {'PM Dep':>8}")
    for row in grid.rows:
        if row.is_banner:
            print(f"{row.day:>3}  {row.banner}")
        else:
            am_arr = row.cells[0] + ("*" if row.late_am else "")
            pm_arr = row.cells[2] + ("*" if row.late_pm else "")
            print(f"{row.day:>3}  {am_arr:>8} {row.cells[1]:>8} {pm_arr:>8} {row.cells[3]:>8}")
    return 0


def cmd_dashboard(app: App, args) -> int:
    service = app.dashboard_service()
    if args.view == "daily":
        summary = service.daily()
        print(f"Present today ({summary.day}): {len(summary.present)}")
        for p in summary.present:
            print(f"  {p.staff.name}  AM {p.resolution.am_in}")
        for p in summary.provincial:
            print(f"  [{p.staff.name}] {p.resolution.status.value} {p.resolution.am_in}")
    elif args.view == "weekly":
        summary = service.weekly()
        header = "  ".join(d.strftime('%a %d') for d in summary.dates)
        print(f"{'Staff':<30}{header}")
        for row in summary.rows:
            print(f"{row.staff.name:<30}" + "  ".join(f"{c:^6}" for c in row.cells))
    else:
        now = datetime.now()
        year = args.year or now.year
        month = args.month or now.month
        for count in service.monthly_counts(year, month):
            print(f"{count.staff.name:<30}{count.days_present:>3} day(s)")
    return 0


def cmd_export(app: App, args) -> int:
    staff_list = [app.staff(s) for s in args.staff] if args.staff else app.directory.municipal()
    service = app.report_service()
    output = Path(args.output) if args.output else None
    if args.format == "pdf":
        result = service.export_pdf(staff_list, args.year, args.month, output)
    else:
        result = service.export_xlsx(staff_list, args.year, args.month, output)

    if not result.success:
        print(f"Export failed: {result.error_message}")
        return 1
    print(f"Saved {result.output_path} ({result.staff_count} staff)")
    return 0


# ==============================================================================
# Argument parsing
# ==============================================================================
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dtr", description="Daily Time Record engine")
    parser.add_argument("--config", help="Path to config.json")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("punch", help="Clock in for the current half-day")
    p.add_argument("staff")
    p.add_argument("half_day", choices=["am", "pm", "AM", "PM"])
    p.set_defaults(func=cmd_punch)

    p = sub.add_parser("file-leave", help="File leave over a date range")
    p.add_argument("staff")
    p.add_argument("start")
    p.add_argument("end")
    p.add_argument("--type", default=LEAVE_TYPES[0], choices=LEAVE_TYPES)
    p.add_argument("--reason", default="")
    p.set_defaults(func=cmd_file_leave)

    p = sub.add_parser("file-ob", help="File official business over a date range")
    p.add_argument("staff")
    p.add_argument("start")
    p.add_argument("end")
    p.add_argument("--location", required=True)
    p.add_argument("--purpose", default="")
    p.set_defaults(func=cmd_file_ob)

    p = sub.add_parser("holiday", help="List, add or delete holidays")
    hsub = p.add_subparsers(dest="holiday_cmd", required=True)
    hsub.add_parser("list")
    h = hsub.add_parser("add")
    h.add_argument("actor", help="Staff id of the person declaring the holiday")
    h.add_argument("date")
    h.add_argument("name")
    h.add_argument("--type", default=HolidayType.REGULAR.value,
                   choices=[t.value for t in HolidayType])
    h.add_argument("--remarks", default="")
    h = hsub.add_parser("remove")
    h.add_argument("actor")
    h.add_argument("id")
    p.set_defaults(func=cmd_holiday)

    p = sub.add_parser("edit", help="Correct one day's record")
    p.add_argument("staff")
    p.add_argument("date")
    p.add_argument("--am-in", dest="am_in")
    p.add_argument("--am-out", dest="am_out")
    p.add_argument("--pm-in", dest="pm_in")
    p.add_argument("--pm-out", dest="pm_out")
    p.add_argument("--remarks", help="Replace remarks; the category is re-derived unless --category is given")
    p.add_argument("--category", choices=[c.value for c in RecordCategory])
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("show", help="Print a staff member's month")
    p.add_argument("staff")
    p.add_argument("year", type=int)
    p.add_argument("month", type=int)
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("dashboard", help="Attendance summaries")
    p.add_argument("view", choices=["daily", "weekly", "monthly"])
    p.add_argument("--year", type=int)
    p.add_argument("--month", type=int)
    p.set_defaults(func=cmd_dashboard)

    p = sub.add_parser("export", help="Export the monthly DTR")
    p.add_argument("format", choices=["pdf", "xlsx"])
    p.add_argument("year", type=int)
    p.add_argument("month", type=int)
    p.add_argument("--staff", action="append", help="Staff id (repeatable); default all municipal staff")
    p.add_argument("--output")
    p.set_defaults(func=cmd_export)

    return parser


def main(argv=None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)
    try:
        app = App(args.config)
        return args.func(app, args)
    except (AttendanceError, StoreError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
