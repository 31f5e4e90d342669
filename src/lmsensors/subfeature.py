"""
Subfeature Wrapper

A Subfeature is a single readable value of a feature, e.g. "temp1_input".
Values are read live from the hardware on every access.
"""

from typing import TYPE_CHECKING, Any

from .exceptions import ReadError
from .quantities import is_flag, quantity_name, quantity_unit

if TYPE_CHECKING:
    from .chip import Chip
    from .config import SensorsConfig
    from .feature import Feature


class Subfeature:
    """A raw value of a feature."""

    def __init__(self, config: "SensorsConfig", feature: "Feature", ref: Any):
        self._config = config
        self._feature = feature
        self._ref = ref

    @property
    def config(self) -> "SensorsConfig":
        return self._config

    @property
    def feature(self) -> "Feature":
        return self._feature

    @property
    def chip(self) -> "Chip":
        return self._feature.chip

    @property
    def ref(self) -> Any:
        self._config.require_native()
        return self._ref

    @property
    def name(self) -> str:
        return self._config.backend.subfeature_name(self.ref)

    @property
    def number(self) -> int:
        return self._config.backend.subfeature_number(self.ref)

    @property
    def type(self) -> int:
        return self._config.backend.subfeature_type(self.ref)

    @property
    def quantity(self) -> str:
        """Physical quantity, e.g. "temperature"."""
        return quantity_name(self.type)

    @property
    def unit(self) -> str:
        """Unit of value, e.g. "°C"; empty for alarms and flags."""
        return quantity_unit(self.type)

    @property
    def is_flag(self) -> bool:
        return is_flag(self.type)

    @property
    def value(self) -> float:
        """
        Read the current value.

        Raises:
            ReadError: If libsensors fails to read the value
        """
        config = self._config
        backend = config.backend
        err, value = backend.get_value(config.native, self.chip.ref, self.number)
        if err != 0:
            raise ReadError(f"{self.name}: {backend.strerror(err)}")
        return value

    def __repr__(self) -> str:
        if not self._config.is_initialized:
            return "<Subfeature (config released)>"
        return f"<Subfeature {self.name} ({self.quantity})>"
