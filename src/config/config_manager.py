"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between the dataclasses and JSON persistence.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from domain.time_model import normalize_time
from infrastructure.logger import get_logger

logger = get_logger("ConfigManager")


@dataclass
class PunchWindows:
    """Inclusive clock-in windows per half-day (HH:MM)."""
    am_start: str = "06:30"
    am_end: str = "11:30"
    pm_start: str = "12:10"
    pm_end: str = "15:00"


@dataclass
class Schedule:
    """Office schedule boundaries."""
    am_out_placeholder: str = "12:00"  # auto-filled on AM punch
    pm_out_placeholder: str = "17:00"  # auto-filled on PM punch
    late_am_after: str = "08:00"
    late_pm_after: str = "13:00"

    # Fixed office hours written for official business days
    ob_am_in: str = "08:00"
    ob_am_out: str = "12:00"
    ob_pm_in: str = "13:00"
    ob_pm_out: str = "17:00"


@dataclass
class StoreSettings:
    """Record store backend settings."""
    backend: str = "sheets"  # "sheets" or "memory"
    script_url: str = ""
    timeout: float = 20.0
    server_upsert: bool = False  # backend enforces the (staff, day) key itself
    attendance_sheet: str = "Attendance"
    holidays_sheet: str = "Holidays"


@dataclass
class ExportSettings:
    """Government form export settings."""
    paper_size: str = "letter"  # letter, a4, legal
    form_width: float = 85.0
    form_gap: float = 10.0
    page_margin: float = 10.0
    logo_url: str = "https://lh3.googleusercontent.com/d/1S7VKW-nIhOwDLDZOXDXgX9w6gCw2OR09"
    watermark_size: float = 50.0
    watermark_opacity: float = 0.2
    output_dir: str = ""  # empty = current directory
    pdf_filename_pattern: str = "DTR_{name}.pdf"
    xlsx_filename_pattern: str = "DTR_{year}_{month}.xlsx"


@dataclass
class Paths:
    """File paths configuration."""
    staff_csv: str = ""
    log_file: str = ""


@dataclass
class AppConfig:
    """Main application configuration container."""
    punch_windows: PunchWindows = field(default_factory=PunchWindows)
    schedule: Schedule = field(default_factory=Schedule)
    store: StoreSettings = field(default_factory=StoreSettings)
    export: ExportSettings = field(default_factory=ExportSettings)
    paths: Paths = field(default_factory=Paths)


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from JSON file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Failed to load config, using defaults. Error: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def update(self, **kwargs) -> None:
        """Update specific configuration sections."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
        self.save()

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        return {
            "punch_windows": {
                "am_start": config.punch_windows.am_start,
                "am_end": config.punch_windows.am_end,
                "pm_start": config.punch_windows.pm_start,
                "pm_end": config.punch_windows.pm_end
            },
            "schedule": {
                "am_out_placeholder": config.schedule.am_out_placeholder,
                "pm_out_placeholder": config.schedule.pm_out_placeholder,
                "late_am_after": config.schedule.late_am_after,
                "late_pm_after": config.schedule.late_pm_after,
                "ob_am_in": config.schedule.ob_am_in,
                "ob_am_out": config.schedule.ob_am_out,
                "ob_pm_in": config.schedule.ob_pm_in,
                "ob_pm_out": config.schedule.ob_pm_out
            },
            "store": {
                "backend": config.store.backend,
                "script_url": config.store.script_url,
                "timeout": config.store.timeout,
                "server_upsert": config.store.server_upsert,
                "attendance_sheet": config.store.attendance_sheet,
                "holidays_sheet": config.store.holidays_sheet
            },
            "export": {
                "paper_size": config.export.paper_size,
                "form_width": config.export.form_width,
                "form_gap": config.export.form_gap,
                "page_margin": config.export.page_margin,
                "logo_url": config.export.logo_url,
                "watermark_size": config.export.watermark_size,
                "watermark_opacity": config.export.watermark_opacity,
                "output_dir": config.export.output_dir,
                "pdf_filename_pattern": config.export.pdf_filename_pattern,
                "xlsx_filename_pattern": config.export.xlsx_filename_pattern
            },
            "paths": {
                "staff_csv": config.paths.staff_csv,
                "log_file": config.paths.log_file
            }
        }

    @staticmethod
    def _clock_value(section: dict, key: str, default: str) -> str:
        """HH:MM value from a config section; a malformed value falls back to default."""
        raw = section.get(key, default)
        value = normalize_time(raw)
        if not value:
            logger.warning(f"Invalid time {raw!r} for {key}, using {default}")
            return default
        return value

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass."""
        windows_data = data.get("punch_windows", {})
        schedule_data = data.get("schedule", {})
        store_data = data.get("store", {})
        export_data = data.get("export", {})
        paths_data = data.get("paths", {})

        defaults = AppConfig()

        punch_windows = PunchWindows(
            am_start=self._clock_value(windows_data, "am_start", defaults.punch_windows.am_start),
            am_end=self._clock_value(windows_data, "am_end", defaults.punch_windows.am_end),
            pm_start=self._clock_value(windows_data, "pm_start", defaults.punch_windows.pm_start),
            pm_end=self._clock_value(windows_data, "pm_end", defaults.punch_windows.pm_end)
        )

        schedule = Schedule(
            am_out_placeholder=self._clock_value(schedule_data, "am_out_placeholder", "12:00"),
            pm_out_placeholder=self._clock_value(schedule_data, "pm_out_placeholder", "17:00"),
            late_am_after=self._clock_value(schedule_data, "late_am_after", "08:00"),
            late_pm_after=self._clock_value(schedule_data, "late_pm_after", "13:00"),
            ob_am_in=self._clock_value(schedule_data, "ob_am_in", "08:00"),
            ob_am_out=self._clock_value(schedule_data, "ob_am_out", "12:00"),
            ob_pm_in=self._clock_value(schedule_data, "ob_pm_in", "13:00"),
            ob_pm_out=self._clock_value(schedule_data, "ob_pm_out", "17:00")
        )

        store = StoreSettings(
            backend=store_data.get("backend", "sheets"),
            script_url=store_data.get("script_url", ""),
            timeout=float(store_data.get("timeout", 20.0)),
            server_upsert=bool(store_data.get("server_upsert", False)),
            attendance_sheet=store_data.get("attendance_sheet", "Attendance"),
            holidays_sheet=store_data.get("holidays_sheet", "Holidays")
        )

        export = ExportSettings(
            paper_size=export_data.get("paper_size", "letter"),
            form_width=float(export_data.get("form_width", 85.0)),
            form_gap=float(export_data.get("form_gap", 10.0)),
            page_margin=float(export_data.get("page_margin", 10.0)),
            logo_url=export_data.get("logo_url", defaults.export.logo_url),
            watermark_size=float(export_data.get("watermark_size", 50.0)),
            watermark_opacity=float(export_data.get("watermark_opacity", 0.2)),
            output_dir=export_data.get("output_dir", ""),
            pdf_filename_pattern=export_data.get("pdf_filename_pattern", "DTR_{name}.pdf"),
            xlsx_filename_pattern=export_data.get("xlsx_filename_pattern", "DTR_{year}_{month}.xlsx")
        )

        paths = Paths(
            staff_csv=paths_data.get("staff_csv", ""),
            log_file=paths_data.get("log_file", "")
        )

        return AppConfig(
            punch_windows=punch_windows,
            schedule=schedule,
            store=store,
            export=export,
            paths=paths
        )
