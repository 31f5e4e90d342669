"""
lmsensors Settings and Logging

This module provides helper functions for:
    - Settings management (YAML file merged over defaults)
    - Logging setup
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs
import yaml

# Configure module logger
logger = logging.getLogger("lmsensors")

APP_NAME = "lmsensors"
SETTINGS_FILE = "settings.yaml"


# =============================================================================
# Settings Management
# =============================================================================

def get_settings_path() -> Path:
    """Return the default location of the user settings file."""
    return Path(platformdirs.user_config_dir(APP_NAME)) / SETTINGS_FILE


def get_default_settings() -> Dict[str, Any]:
    """Return default settings values."""
    return {
        "library": {
            "path": None,
            "name": "sensors",
        },
        "sensors": {
            "config_file": "/etc/sensors3.conf",
        },
        "output": {
            "format": "text",
            "precision": 1,
        },
        "debug": {
            "verbose": False,
            "log_level": "WARNING",
            "trace_objects": False,
        },
    }


def merge_settings(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge override into a copy of base, one section at a time.

    Args:
        base: Settings providing defaults
        override: Settings read from a file; unknown keys are kept. A known
            section given a non-mapping value (e.g. an empty "debug:")
            keeps its defaults.

    Returns:
        Merged settings dictionary
    """
    merged = copy.deepcopy(base)
    for section, values in override.items():
        if isinstance(merged.get(section), dict):
            if isinstance(values, dict):
                merged[section].update(values)
            else:
                logger.warning(f"Ignoring settings section {section!r}: not a mapping")
        else:
            merged[section] = values
    return merged


def load_settings(settings_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load settings from YAML file.

    Args:
        settings_path: Path to settings file. If None, uses default location.

    Returns:
        Settings dictionary
    """
    if settings_path is None:
        settings_path = get_settings_path()

    settings_path = Path(settings_path)

    if not settings_path.exists():
        logger.warning(f"Settings file not found: {settings_path}. Using defaults.")
        return get_default_settings()

    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading settings: {e}")
        return get_default_settings()

    if not isinstance(loaded, dict):
        return get_default_settings()
    return merge_settings(get_default_settings(), loaded)


def save_settings(settings: Dict[str, Any], settings_path: Optional[str] = None) -> bool:
    """
    Save settings to YAML file.

    Args:
        settings: Settings dictionary
        settings_path: Path to save settings file

    Returns:
        True if successful, False otherwise
    """
    if settings_path is None:
        settings_path = get_settings_path()

    settings_path = Path(settings_path)

    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_path, "w", encoding="utf-8") as f:
            yaml.dump(settings, f, default_flow_style=False, sort_keys=False)
        return True
    except OSError as e:
        logger.error(f"Error saving settings: {e}")
        return False


# =============================================================================
# Logging Utilities
# =============================================================================

def setup_logging(settings: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Set up logging for lmsensors.

    Object tracing (identity cache hits/misses, native releases) goes to the
    "lmsensors.trace" logger and is only enabled by debug.trace_objects.

    Args:
        settings: Settings dictionary

    Returns:
        Configured logger
    """
    settings = settings or get_default_settings()
    debug_settings = settings.get("debug", {})

    log_level = getattr(
        logging, str(debug_settings.get("log_level", "WARNING")).upper(), logging.WARNING
    )
    verbose = debug_settings.get("verbose", False)
    if verbose and log_level > logging.INFO:
        log_level = logging.INFO

    logger = logging.getLogger("lmsensors")
    logger.setLevel(log_level)

    trace = logging.getLogger("lmsensors.trace")
    trace.setLevel(logging.DEBUG if debug_settings.get("trace_objects") else logging.WARNING)

    # Console handler
    if (verbose or log_level <= logging.DEBUG) and not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
