"""
Chip Wrapper

A Chip wraps a borrowed sensors_chip_name pointer. The pointer lives in
memory owned by the configuration, so every Chip keeps its SensorsConfig
alive and checks the config is still live before touching native memory.
"""

import ctypes
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional

from .cache import FEATURES
from .enumeration import NativeSequence, walk
from .exceptions import FormatError
from .feature import Feature

if TYPE_CHECKING:
    from .config import SensorsConfig


class Chip:
    """
    A detected sensor chip.

    Chips are only created by enumerating a SensorsConfig; enumerating the
    same config again returns the same Chip objects while they are still
    referenced.
    """

    def __init__(self, config: "SensorsConfig", ref: Any):
        self._config = config
        self._ref = ref

    @property
    def config(self) -> "SensorsConfig":
        return self._config

    @property
    def ref(self) -> Any:
        """Borrowed native pointer; valid only while the config is live."""
        self._config.require_native()
        return self._ref

    @property
    def prefix(self) -> str:
        return self._config.backend.chip_prefix(self.ref)

    @property
    def path(self) -> str:
        """Bus/device path of the chip, e.g. /sys/class/hwmon/hwmon0."""
        return self._config.backend.chip_path(self.ref)

    @property
    def adapter(self) -> Optional[str]:
        """Name of the bus adapter, or None when libsensors knows none."""
        return self._config.backend.get_adapter_name(self._config.native, self.ref)

    @property
    def name(self) -> str:
        """
        Canonical chip name such as "coretemp-isa-0000".

        Raises:
            FormatError: If libsensors cannot format the name
        """
        backend = self._config.backend
        ref = self.ref
        length = backend.snprintf_chip_name(None, 0, ref)
        if length < 0:
            raise FormatError(f"chip name: {backend.strerror(length)}")

        # snprintf zero-terminates, the buffer needs room for it
        size = length + 1
        buffer = ctypes.create_string_buffer(size)
        backend.snprintf_chip_name(buffer, size, ref)
        return buffer.value.decode("utf-8", "replace")

    @property
    def display_name(self) -> str:
        """Chip name, or the bare prefix when the name cannot be formatted."""
        try:
            return self.name
        except FormatError:
            return self.prefix

    def features(self) -> NativeSequence[Feature]:
        """Return a restartable lazy sequence of this chip's features."""
        return NativeSequence(self._iter_features)

    def each_feature(self, action: Callable[[Feature], Any]) -> "Chip":
        """Apply action to each feature; returning False stops early."""
        self.features().each(action)
        return self

    def _iter_features(self) -> Iterator[Feature]:
        config = self._config
        backend = config.backend
        config.require_native()
        return walk(
            backend,
            self,
            FEATURES,
            lambda cursor: backend.get_features(config.require_native(), self._ref, cursor),
            lambda ref: Feature(config, self, ref),
        )

    def __iter__(self) -> Iterator[Feature]:
        return self._iter_features()

    def __repr__(self) -> str:
        if not self._config.is_initialized:
            return "<Chip (config released)>"
        return f"<Chip {self.display_name} path={self.path!r}>"
