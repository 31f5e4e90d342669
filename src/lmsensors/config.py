"""
Sensors Configuration Handle

SensorsConfig owns one native libsensors configuration and is the root of
the object graph: chips, features and subfeatures all keep a strong
reference to it, so the borrowed pointers they wrap stay valid while any of
them is reachable. The native handle is freed exactly once, either by an
explicit release() or when the config is garbage collected.
"""

import logging
import os
import weakref
from typing import Any, Callable, Iterator, Optional, Union

from .backends import SensorsBackend, get_default_backend
from .cache import CHIPS
from .chip import Chip
from .enumeration import NativeSequence, walk
from .exceptions import ConfigError, StateError

logger = logging.getLogger("lmsensors.config")
trace = logging.getLogger("lmsensors.trace")

PathLike = Union[str, "os.PathLike[str]"]


def _release_native(backend: SensorsBackend, native: Any, path: str) -> None:
    trace.debug(f"releasing native config {native!r} loaded from {path}")
    backend.cleanup_config(native)


class SensorsConfig:
    """
    Handle on a parsed sensors configuration.

    Usage:
        config = SensorsConfig().initialize("/etc/sensors3.conf")
        for chip in config:
            print(chip.name, chip.adapter)
            for feature in chip:
                for subfeature in feature:
                    print(subfeature.name, subfeature.value, subfeature.unit)
        config.release()

        # Or as a context manager
        with SensorsConfig().initialize("/etc/sensors3.conf") as config:
            chips = list(config.chips())
    """

    def __init__(self, backend: Optional[SensorsBackend] = None):
        """
        Create an uninitialized handle.

        Args:
            backend: Native backend; defaults to the shared libsensors backend
        """
        self._backend = backend
        self._native: Optional[Any] = None
        self._finalizer: Optional[weakref.finalize] = None
        self._released = False
        self.path: Optional[str] = None

    @staticmethod
    def version(backend: Optional[SensorsBackend] = None) -> str:
        """Return the native library version string."""
        return (backend or get_default_backend()).library_version()

    @property
    def backend(self) -> SensorsBackend:
        if self._backend is None:
            self._backend = get_default_backend()
        return self._backend

    @property
    def is_initialized(self) -> bool:
        return self._native is not None

    @property
    def is_released(self) -> bool:
        return self._released

    @property
    def native(self) -> Any:
        return self.require_native()

    def require_native(self) -> Any:
        """
        Return the live native handle.

        Raises:
            StateError: If the config was never initialized or is released
        """
        if self._native is None:
            if self._released:
                raise StateError("Config already released")
            raise StateError("Config not initialized")
        return self._native

    def initialize(self, path: PathLike) -> "SensorsConfig":
        """
        Parse a sensors configuration file.

        Args:
            path: Path of the configuration file

        Returns:
            self, so construction can be chained

        Raises:
            StateError: If the handle was already initialized or released
            OSError: If the file cannot be opened
            ConfigError: If libsensors rejects the file contents
        """
        if self._native is not None:
            raise StateError("Config already initialized!")
        if self._released:
            raise StateError("Config already released")

        path = os.fspath(path)
        backend = self.backend
        logger.debug(f"Loading sensors config from {path}")

        with open(path, "rb") as stream:
            native, err = backend.init_config(stream)

        if native is None:
            raise ConfigError(backend.strerror(err))

        self._native = native
        self._finalizer = weakref.finalize(self, _release_native, backend, native, path)
        self.path = path
        trace.debug(f"initialized {self!r} with native config {native!r}")
        return self

    def release(self) -> None:
        """Free the native handle. Safe to call more than once."""
        if self._finalizer is not None:
            self._finalizer()
        if self._native is not None:
            self._native = None
            self._released = True

    def chips(self) -> NativeSequence[Chip]:
        """Return a restartable lazy sequence of the detected chips."""
        return NativeSequence(self._iter_chips)

    def each_chip(self, action: Callable[[Chip], Any]) -> "SensorsConfig":
        """Apply action to each detected chip; returning False stops early."""
        self.chips().each(action)
        return self

    def _iter_chips(self) -> Iterator[Chip]:
        backend = self.backend
        self.require_native()
        return walk(
            backend,
            self,
            CHIPS,
            lambda cursor: backend.get_detected_chips(self.require_native(), cursor),
            lambda ref: Chip(self, ref),
        )

    def __iter__(self) -> Iterator[Chip]:
        return self._iter_chips()

    def __enter__(self) -> "SensorsConfig":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False

    def __repr__(self) -> str:
        if self._native is not None:
            state = "initialized"
        elif self._released:
            state = "released"
        else:
            state = "uninitialized"
        return f"<SensorsConfig path={self.path!r} {state}>"
