"""
Unit tests for ConfigManager and the configuration dataclasses.
"""

import pytest
import json
import tempfile
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config.config_manager import (
    ConfigManager, AppConfig, PunchWindows, Schedule,
    StoreSettings, ExportSettings, Paths
)


class TestDefaults:
    """Tests for dataclass defaults."""

    def test_punch_windows(self):
        """Test the default clock-in windows."""
        windows = PunchWindows()
        assert (windows.am_start, windows.am_end) == ("06:30", "11:30")
        assert (windows.pm_start, windows.pm_end) == ("12:10", "15:00")

    def test_schedule(self):
        """Test placeholders, late cutoffs and OB office hours."""
        schedule = Schedule()
        assert schedule.am_out_placeholder == "12:00"
        assert schedule.pm_out_placeholder == "17:00"
        assert schedule.late_am_after == "08:00"
        assert schedule.late_pm_after == "13:00"
        assert (schedule.ob_am_in, schedule.ob_pm_out) == ("08:00", "17:00")

    def test_store_settings(self):
        """Test the default backend and collection names."""
        store = StoreSettings()
        assert store.backend == "sheets"
        assert store.server_upsert is False
        assert store.attendance_sheet == "Attendance"
        assert store.holidays_sheet == "Holidays"

    def test_export_settings(self):
        """Test the default form layout."""
        export = ExportSettings()
        assert export.paper_size == "letter"
        assert export.form_width == 85.0
        assert export.form_gap == 10.0
        assert export.watermark_opacity == 0.2
        assert export.pdf_filename_pattern == "DTR_{name}.pdf"

    def test_app_config_sections_independent(self):
        """Test each AppConfig gets its own section instances."""
        a, b = AppConfig(), AppConfig()
        a.export.paper_size = "legal"
        assert b.export.paper_size == "letter"


class TestConfigManager:
    """Tests for ConfigManager load and save."""

    def test_load_missing_file(self):
        """Test a missing file gives the defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir) / "config.json")
            assert manager.load() == AppConfig()

    def test_save_and_load_roundtrip(self):
        """Test saved values come back unchanged."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "sub" / "config.json"
            manager = ConfigManager(config_path)
            manager.load()
            manager.config.punch_windows.am_end = "10:00"
            manager.config.store.backend = "memory"
            manager.config.store.timeout = 5.0
            manager.config.export.paper_size = "a4"
            manager.config.paths.staff_csv = "staff.csv"
            manager.save()

            loaded = ConfigManager(config_path).load()
            assert loaded.punch_windows.am_end == "10:00"
            assert loaded.store.backend == "memory"
            assert loaded.store.timeout == 5.0
            assert loaded.export.paper_size == "a4"
            assert loaded.paths.staff_csv == "staff.csv"

    def test_partial_file_keeps_defaults(self):
        """Test sections and keys missing from the file fall back to defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump({"schedule": {"late_am_after": "08:15"}}, f)

            config = ConfigManager(config_path).load()
            assert config.schedule.late_am_after == "08:15"
            assert config.schedule.late_pm_after == "13:00"
            assert config.punch_windows == PunchWindows()
            assert config.export == ExportSettings()

    def test_malformed_times_fall_back(self):
        """Test unparseable window and schedule times keep their defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump({
                    "punch_windows": {"am_start": "6.30am", "am_end": "11:00", "pm_end": None},
                    "schedule": {"late_am_after": "eight", "late_pm_after": "13:15:00"},
                }, f)

            config = ConfigManager(config_path).load()
            assert config.punch_windows.am_start == "06:30"
            assert config.punch_windows.am_end == "11:00"
            assert config.punch_windows.pm_end == "15:00"
            assert config.schedule.late_am_after == "08:00"
            assert config.schedule.late_pm_after == "13:15"

    def test_loaded_windows_usable_for_punching(self):
        """Test a malformed window in the file does not break the punch check."""
        from domain.time_model import is_within, parse_time

        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            config_path.write_text(json.dumps({"punch_windows": {"pm_start": "noon"}}), encoding='utf-8')
            windows = ConfigManager(config_path).load().punch_windows
            assert is_within(parse_time("13:00"), windows.pm_start, windows.pm_end)

    def test_invalid_json_uses_defaults(self):
        """Test a corrupt file is ignored."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            config_path.write_text("{not json", encoding='utf-8')
            assert ConfigManager(config_path).load() == AppConfig()

    def test_bad_number_uses_defaults(self):
        """Test a non-numeric timeout is treated as a corrupt file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            config_path.write_text(json.dumps({"store": {"timeout": "soon"}}), encoding='utf-8')
            assert ConfigManager(config_path).load().store.timeout == 20.0

    def test_update_persists(self):
        """Test update replaces a section and writes the file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.json"
            manager = ConfigManager(config_path)
            manager.update(paths=Paths(log_file="dtr.log"), unknown_section=1)

            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            assert data["paths"]["log_file"] == "dtr.log"
            assert "unknown_section" not in data


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
