"""
lmsensors Dump Tool

Prints every detected chip with its features and current readings, either
as text similar to the ``sensors`` program or as JSON.

Usage:
    lmsensors-dump [--config-file /etc/sensors3.conf] [--json]
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .backends import get_default_backend
from .config import SensorsConfig
from .exceptions import ReadError, SensorsError
from .settings import get_default_settings, get_settings_path, load_settings, setup_logging

# Module logger
logger = logging.getLogger("lmsensors.cli")


def collect_readings(config: SensorsConfig) -> Dict[str, Any]:
    """
    Collect all readings of a config into nested dictionaries.

    Layout is ``{chip name: {"Adapter": ..., feature name: {"label": ...,
    subfeature name: {"quantity", "unit", "value"}}}}``. "Adapter" is only
    present when known, "label" only when it differs from the feature name
    and "unit" only when non-empty. Values that cannot be read are None.

    Args:
        config: Initialized sensors configuration

    Returns:
        Nested readings dictionary
    """
    readings: Dict[str, Any] = {}

    for chip in config:
        chip_entry: Dict[str, Any] = {}
        adapter = chip.adapter
        if adapter:
            chip_entry["Adapter"] = adapter

        for feature in chip:
            feature_entry: Dict[str, Any] = {}
            label = feature.label
            if label != feature.name:
                feature_entry["label"] = label

            for subfeature in feature:
                entry: Dict[str, Any] = {"quantity": subfeature.quantity}
                if subfeature.unit:
                    entry["unit"] = subfeature.unit
                try:
                    entry["value"] = subfeature.value
                except ReadError as e:
                    logger.warning(f"Cannot read {chip.name}/{subfeature.name}: {e}")
                    entry["value"] = None
                feature_entry[subfeature.name] = entry

            chip_entry[feature.name] = feature_entry

        readings[chip.name] = chip_entry

    return readings


def format_text(readings: Dict[str, Any], precision: int = 1) -> str:
    """Render collected readings as indented text."""
    lines: List[str] = []

    for chip_name, chip_entry in readings.items():
        lines.append(chip_name)
        for feature_name, feature_entry in chip_entry.items():
            if feature_name == "Adapter":
                lines.append(f"Adapter: {feature_entry}")
                continue
            label = feature_entry.get("label", feature_name)
            lines.append(f"{feature_name} ({label}):")
            for sub_name, entry in feature_entry.items():
                if sub_name == "label":
                    continue
                value = entry["value"]
                shown = "N/A" if value is None else f"{value:.{precision}f}"
                unit = entry.get("unit")
                lines.append(f"  {sub_name}: {shown} {unit}" if unit else f"  {sub_name}: {shown}")
        lines.append("")

    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the dump tool."""
    parser = argparse.ArgumentParser(
        description="lmsensors dump - print detected sensor chips and readings"
    )
    parser.add_argument(
        "--settings",
        type=str,
        help="Path to settings file",
        default=None
    )
    parser.add_argument(
        "--config-file",
        type=str,
        help="Path to sensors configuration file",
        default=None
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print readings as JSON"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args(argv)

    if args.settings or get_settings_path().exists():
        settings = load_settings(args.settings)
    else:
        settings = get_default_settings()

    if args.verbose:
        settings["debug"]["verbose"] = True
    setup_logging(settings)

    config_file = args.config_file or settings["sensors"]["config_file"]
    output_format = "json" if args.json else settings["output"].get("format", "text")

    try:
        backend = get_default_backend(settings)
        logger.info(f"Using libsensors {SensorsConfig.version(backend)}")
        with SensorsConfig(backend).initialize(config_file) as config:
            readings = collect_readings(config)
    except (OSError, SensorsError) as e:
        print(f"lmsensors-dump: {e}", file=sys.stderr)
        return 1

    if output_format == "json":
        print(json.dumps(readings, indent=2, ensure_ascii=False))
    else:
        print(format_text(readings, settings["output"].get("precision", 1)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
