"""
Tests for Settings and Logging Setup

Covers:
    - Settings loading/saving
    - Merging partial files over defaults
    - Logging setup and object tracing
"""

import logging

import pytest
import yaml

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lmsensors.settings import (
    get_default_settings,
    get_settings_path,
    load_settings,
    merge_settings,
    save_settings,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_loggers():
    """Restore lmsensors logger state after each test."""
    logger = logging.getLogger("lmsensors")
    trace = logging.getLogger("lmsensors.trace")
    saved = (logger.level, list(logger.handlers), trace.level)
    yield
    logger.setLevel(saved[0])
    logger.handlers = saved[1]
    trace.setLevel(saved[2])


class TestSettingsLoading:
    """Tests for settings loading."""

    def test_default_settings(self):
        """Test default settings sections."""
        settings = get_default_settings()
        assert "library" in settings
        assert "sensors" in settings
        assert "debug" in settings
        assert settings["sensors"]["config_file"] == "/etc/sensors3.conf"

    def test_defaults_are_fresh_copies(self):
        """Test mutating defaults does not leak into later calls."""
        settings = get_default_settings()
        settings["debug"]["verbose"] = True
        assert get_default_settings()["debug"]["verbose"] is False

    def test_load_missing_settings(self):
        """Test loading a missing file returns defaults."""
        settings = load_settings("/nonexistent/path/settings.yaml")
        assert settings == get_default_settings()

    def test_load_valid_settings(self, tmp_path):
        """Test a partial file is merged over defaults."""
        path = tmp_path / "settings.yaml"
        path.write_text("sensors:\n  config_file: /tmp/custom.conf\n")

        settings = load_settings(str(path))
        assert settings["sensors"]["config_file"] == "/tmp/custom.conf"
        assert settings["library"]["name"] == "sensors"

    def test_load_invalid_yaml(self, tmp_path):
        """Test invalid YAML returns defaults."""
        path = tmp_path / "settings.yaml"
        path.write_text("invalid: yaml: content: [")

        assert load_settings(str(path)) == get_default_settings()

    def test_load_empty_settings(self, tmp_path):
        """Test an empty file returns defaults."""
        path = tmp_path / "settings.yaml"
        path.write_text("")

        assert load_settings(str(path)) == get_default_settings()

    def test_settings_path_location(self):
        """Test the default path ends in the settings file name."""
        path = get_settings_path()
        assert path.name == "settings.yaml"
        assert "lmsensors" in str(path)


class TestSettingsSaving:
    """Tests for settings saving."""

    def test_save_and_reload(self, tmp_path):
        """Test saved settings load back unchanged."""
        path = tmp_path / "nested" / "settings.yaml"
        settings = get_default_settings()
        settings["library"]["path"] = "/opt/lib/libsensors.so.5"

        assert save_settings(settings, str(path)) is True
        assert load_settings(str(path)) == settings

    def test_saved_file_is_yaml(self, tmp_path):
        """Test the file content is plain YAML."""
        path = tmp_path / "settings.yaml"
        save_settings(get_default_settings(), str(path))

        with open(path, encoding="utf-8") as f:
            assert yaml.safe_load(f)["output"]["format"] == "text"


class TestMergeSettings:
    """Tests for merge_settings."""

    def test_section_merge(self):
        """Test keys missing from the override keep their defaults."""
        merged = merge_settings(
            {"debug": {"verbose": False, "log_level": "WARNING"}},
            {"debug": {"verbose": True}},
        )
        assert merged == {"debug": {"verbose": True, "log_level": "WARNING"}}

    def test_unknown_sections_kept(self):
        """Test extra sections are carried over."""
        merged = merge_settings({"a": {"x": 1}}, {"b": 2})
        assert merged == {"a": {"x": 1}, "b": 2}

    def test_empty_section_keeps_defaults(self):
        """Test a known section without values keeps its defaults."""
        merged = merge_settings(get_default_settings(), {"debug": None, "output": "json"})
        assert merged["debug"] == get_default_settings()["debug"]
        assert merged["output"] == get_default_settings()["output"]

    def test_load_empty_section(self, tmp_path):
        """Test a file with an empty section loads over defaults."""
        path = tmp_path / "settings.yaml"
        path.write_text("debug:\nsensors:\n  config_file: /tmp/custom.conf\n")

        settings = load_settings(str(path))
        settings["debug"]["verbose"] = True
        assert settings["sensors"]["config_file"] == "/tmp/custom.conf"
        assert settings["debug"]["log_level"] == "WARNING"

    def test_base_not_mutated(self):
        """Test the base dictionary is left untouched."""
        base = {"a": {"x": 1}}
        merge_settings(base, {"a": {"x": 2}})
        assert base == {"a": {"x": 1}}


class TestLoggingSetup:
    """Tests for setup_logging."""

    def test_default_level(self):
        """Test default settings log warnings and above."""
        logger = setup_logging(get_default_settings())
        assert logger.name == "lmsensors"
        assert logger.level == logging.WARNING

    def test_debug_level(self):
        """Test an explicit DEBUG level adds a console handler."""
        settings = get_default_settings()
        settings["debug"]["log_level"] = "DEBUG"
        logging.getLogger("lmsensors").handlers = []

        logger = setup_logging(settings)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_verbose_raises_to_info(self):
        """Test verbose output enables INFO messages."""
        settings = get_default_settings()
        settings["debug"]["verbose"] = True

        assert setup_logging(settings).level == logging.INFO

    def test_invalid_level_falls_back(self):
        """Test an unknown level name falls back to WARNING."""
        settings = get_default_settings()
        settings["debug"]["log_level"] = "CHATTY"

        assert setup_logging(settings).level == logging.WARNING

    def test_trace_objects(self):
        """Test object tracing toggles the trace logger."""
        settings = get_default_settings()
        settings["debug"]["trace_objects"] = True
        setup_logging(settings)
        assert logging.getLogger("lmsensors.trace").level == logging.DEBUG

        settings["debug"]["trace_objects"] = False
        setup_logging(settings)
        assert logging.getLogger("lmsensors.trace").level == logging.WARNING

    def test_trace_records_cache_activity(self, caplog, coretemp_config):
        """Test cache hits and misses are traced at DEBUG."""
        with caplog.at_level(logging.DEBUG, logger="lmsensors.trace"):
            list(coretemp_config)

        messages = [record.getMessage() for record in caplog.records]
        assert any("chips: miss" in message for message in messages)
