"""
Quantity Lookup Tables

Maps libsensors subfeature type codes to the physical quantity they measure
and the unit the value is reported in. The high byte of a subfeature type
is the type of its feature; bit 7 marks alarm/flag subfeatures, apart
from a few value codes that share the block.
"""

import enum
from typing import Dict, Tuple


class FeatureType(enum.IntEnum):
    """Feature types from sensors.h"""

    IN = 0x00
    FAN = 0x01
    TEMP = 0x02
    POWER = 0x03
    ENERGY = 0x04
    CURR = 0x05
    HUMIDITY = 0x06
    VID = 0x10
    INTRUSION = 0x11
    BEEP_ENABLE = 0x18
    UNKNOWN = 0x7FFFFFFF


# feature type -> (quantity name, unit)
QUANTITIES: Dict[int, Tuple[str, str]] = {
    FeatureType.IN: ("voltage", "V"),
    FeatureType.FAN: ("fan speed", "RPM"),
    FeatureType.TEMP: ("temperature", "°C"),
    FeatureType.POWER: ("power", "W"),
    FeatureType.ENERGY: ("energy", "J"),
    FeatureType.CURR: ("current", "A"),
    FeatureType.HUMIDITY: ("humidity", "%RH"),
    FeatureType.VID: ("cpu core voltage", "V"),
    FeatureType.INTRUSION: ("intrusion", ""),
    FeatureType.BEEP_ENABLE: ("beep enable", ""),
}

UNKNOWN_QUANTITY = ("unknown", "")

ALARM_FLAG = 0x80

SUBFEATURE_UNKNOWN = 0x7FFFFFFF

# Codes in the 0x80 block that report a value rather than a state.
# subfeature type -> True when the value keeps the feature unit
FLAG_BLOCK_VALUES: Dict[int, bool] = {
    0x182: False,  # fan divisor
    0x184: False,  # fan pulses per revolution
    0x285: False,  # temperature sensor type
    0x286: True,  # temperature offset
}


def feature_type_of(subfeature_type: int) -> int:
    """Return the feature type a subfeature type code belongs to."""
    return subfeature_type >> 8


def is_flag(subfeature_type: int) -> bool:
    """Return True for alarm, fault and beep subfeatures."""
    if subfeature_type == SUBFEATURE_UNKNOWN or subfeature_type in FLAG_BLOCK_VALUES:
        return False
    return bool(subfeature_type & ALARM_FLAG)


def quantity_of(subfeature_type: int) -> Tuple[str, str]:
    """
    Look up the quantity measured by a subfeature.

    Alarm and fault subfeatures report a boolean state, so they share the
    quantity name of their feature but carry no unit. Divisors, pulse
    counts and sensor type codes are plain numbers without a unit.

    Args:
        subfeature_type: Native subfeature type code

    Returns:
        Tuple of (quantity name, unit)
    """
    if subfeature_type == SUBFEATURE_UNKNOWN:
        return UNKNOWN_QUANTITY
    name, unit = QUANTITIES.get(feature_type_of(subfeature_type), UNKNOWN_QUANTITY)
    if subfeature_type in FLAG_BLOCK_VALUES:
        return name, unit if FLAG_BLOCK_VALUES[subfeature_type] else ""
    if is_flag(subfeature_type):
        return f"{name} alarm", ""
    return name, unit


def quantity_name(subfeature_type: int) -> str:
    return quantity_of(subfeature_type)[0]


def quantity_unit(subfeature_type: int) -> str:
    return quantity_of(subfeature_type)[1]
