"""
Pytest Configuration and Fixtures

Provides shared fixtures and an in-memory FakeBackend that stands in for
libsensors, so the wrapper layer can be tested without sensor hardware.
"""

import pytest
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lmsensors.backends.base_backend import Cursor, SensorsBackend
from lmsensors.config import SensorsConfig


SENSORS_ERR_ACCESS_R = 3
SENSORS_ERR_CHIP_NAME = 6
SENSORS_ERR_PARSE = 8

ERROR_MESSAGES = {
    1: "Wildcard found in chip name",
    2: "No such subfeature known",
    3: "Can't read",
    4: "Kernel interface error",
    5: "Divide by zero",
    6: "Can't parse chip name",
    7: "Can't parse bus name",
    8: "General parse error",
    9: "Can't write",
    10: "I/O error",
    11: "Evaluation recurses too deep",
}


@dataclass(eq=False)
class FakeSubfeature:
    name: str
    number: int
    type: int
    value: float = 0.0
    error: int = 0


@dataclass(eq=False)
class FakeFeature:
    name: str
    number: int
    type: int
    label: Optional[str] = None
    subfeatures: List[FakeSubfeature] = field(default_factory=list)


@dataclass(eq=False)
class FakeChip:
    prefix: str
    name: str
    path: str
    adapter: Optional[str] = None
    features: List[FakeFeature] = field(default_factory=list)
    name_error: int = 0


class FakeConfig:
    """Native handle handed out by FakeBackend."""

    def __init__(self, chips: List[FakeChip], source: bytes):
        self.chips = chips
        self.source = source
        self.freed = False


class FakeBackend(SensorsBackend):
    """In-memory SensorsBackend; fails loudly on use of a freed config."""

    def __init__(self, chips: Optional[List[FakeChip]] = None):
        self.chips = chips if chips is not None else []
        self.init_calls = 0
        self.cleaned: List[FakeConfig] = []
        self.label_calls = 0

    def _live(self, config: Any) -> FakeConfig:
        assert isinstance(config, FakeConfig)
        assert not config.freed, "use of freed config"
        return config

    def library_version(self) -> str:
        return "3.6.0"

    def strerror(self, errnum: int) -> str:
        return ERROR_MESSAGES.get(abs(errnum), "Unknown error")

    def init_config(self, stream):
        self.init_calls += 1
        source = stream.read()
        if b"syntax error" in source:
            return None, SENSORS_ERR_PARSE
        return FakeConfig(self.chips, source), 0

    def cleanup_config(self, config: Any) -> None:
        self._live(config).freed = True
        self.cleaned.append(config)

    def get_detected_chips(self, config: Any, cursor: Cursor):
        chips = self._live(config).chips
        if cursor.nr >= len(chips):
            return None
        cursor.nr += 1
        return chips[cursor.nr - 1]

    def get_features(self, config: Any, chip: FakeChip, cursor: Cursor):
        self._live(config)
        if cursor.nr >= len(chip.features):
            return None
        cursor.nr += 1
        return chip.features[cursor.nr - 1]

    def get_all_subfeatures(self, config: Any, chip: FakeChip, feature: FakeFeature, cursor: Cursor):
        self._live(config)
        if cursor.nr >= len(feature.subfeatures):
            return None
        cursor.nr += 1
        return feature.subfeatures[cursor.nr - 1]

    def address(self, ref: Any) -> int:
        return id(ref)

    def chip_prefix(self, chip: FakeChip) -> str:
        return chip.prefix

    def chip_path(self, chip: FakeChip) -> str:
        return chip.path

    def get_adapter_name(self, config: Any, chip: FakeChip) -> Optional[str]:
        self._live(config)
        return chip.adapter

    def snprintf_chip_name(self, buffer, size: int, chip: FakeChip) -> int:
        if chip.name_error:
            return -chip.name_error
        encoded = chip.name.encode("utf-8")
        if buffer is not None and size > 0:
            buffer.value = encoded[:size - 1]
        return len(encoded)

    def feature_name(self, feature: FakeFeature) -> str:
        return feature.name

    def feature_number(self, feature: FakeFeature) -> int:
        return feature.number

    def feature_type(self, feature: FakeFeature) -> int:
        return feature.type

    def get_label(self, config: Any, chip: FakeChip, feature: FakeFeature) -> str:
        self._live(config)
        self.label_calls += 1
        return feature.label if feature.label is not None else feature.name

    def subfeature_name(self, subfeature: FakeSubfeature) -> str:
        return subfeature.name

    def subfeature_number(self, subfeature: FakeSubfeature) -> int:
        return subfeature.number

    def subfeature_type(self, subfeature: FakeSubfeature) -> int:
        return subfeature.type

    def get_value(self, config: Any, chip: FakeChip, number: int):
        self._live(config)
        for feature in chip.features:
            for subfeature in feature.subfeatures:
                if subfeature.number == number:
                    return subfeature.error, subfeature.value
        return 2, 0.0


def make_coretemp_chip() -> FakeChip:
    """One chip, one feature, one subfeature."""
    return FakeChip(
        prefix="coretemp",
        name="coretemp-isa-0000",
        path="/sys/class/hwmon/hwmon1",
        adapter="ISA adapter",
        features=[
            FakeFeature(
                name="temp1",
                number=0,
                type=0x02,
                label="Package id 0",
                subfeatures=[
                    FakeSubfeature(name="temp1_input", number=0, type=0x200, value=45.0),
                ],
            ),
        ],
    )


def make_board_chips() -> List[FakeChip]:
    """A richer topology with several chips, features and subfeatures."""
    coretemp = FakeChip(
        prefix="coretemp",
        name="coretemp-isa-0000",
        path="/sys/class/hwmon/hwmon1",
        adapter="ISA adapter",
        features=[
            FakeFeature(
                name="temp1",
                number=0,
                type=0x02,
                label="Package id 0",
                subfeatures=[
                    FakeSubfeature(name="temp1_input", number=0, type=0x200, value=45.0),
                    FakeSubfeature(name="temp1_max", number=1, type=0x201, value=80.0),
                    FakeSubfeature(name="temp1_crit_alarm", number=2, type=0x283, value=0.0),
                ],
            ),
            FakeFeature(
                name="temp2",
                number=1,
                type=0x02,
                subfeatures=[
                    FakeSubfeature(name="temp2_input", number=3, type=0x200, value=41.0),
                ],
            ),
        ],
    )
    nct = FakeChip(
        prefix="nct6775",
        name="nct6775-isa-0290",
        path="/sys/class/hwmon/hwmon2",
        adapter="ISA adapter",
        features=[
            FakeFeature(
                name="in0",
                number=0,
                type=0x00,
                label="Vcore",
                subfeatures=[
                    FakeSubfeature(name="in0_input", number=0, type=0x000, value=1.2),
                ],
            ),
            FakeFeature(
                name="fan1",
                number=1,
                type=0x01,
                subfeatures=[
                    FakeSubfeature(name="fan1_input", number=1, type=0x100, value=1200.0),
                ],
            ),
        ],
    )
    acpi = FakeChip(
        prefix="acpitz",
        name="acpitz-acpi-0",
        path="/sys/class/hwmon/hwmon0",
        adapter=None,
        features=[],
    )
    return [coretemp, nct, acpi]


@pytest.fixture
def coretemp_backend():
    """Provide a backend detecting only a coretemp chip."""
    return FakeBackend([make_coretemp_chip()])


@pytest.fixture
def board_backend():
    """Provide a backend detecting several chips."""
    return FakeBackend(make_board_chips())


@pytest.fixture
def config_file(tmp_path):
    """Provide a valid sensors configuration file."""
    path = tmp_path / "sensors3.conf"
    path.write_text('chip "coretemp-isa-*"\n    label temp1 "Package id 0"\n')
    return str(path)


@pytest.fixture
def bad_config_file(tmp_path):
    """Provide a configuration file the backend rejects."""
    path = tmp_path / "broken.conf"
    path.write_text("chip syntax error\n")
    return str(path)


@pytest.fixture
def coretemp_config(coretemp_backend, config_file):
    """Provide an initialized config over the coretemp backend."""
    config = SensorsConfig(coretemp_backend).initialize(config_file)
    yield config
    config.release()


@pytest.fixture
def board_config(board_backend, config_file):
    """Provide an initialized config over the multi-chip backend."""
    config = SensorsConfig(board_backend).initialize(config_file)
    yield config
    config.release()
