"""
libsensors ctypes Backend

Binds the lm-sensors shared library through ctypes. When the loaded library
exports the reentrant ``*_r`` entry points every configuration gets its own
native handle; otherwise the classic global API is used and only one
configuration may be live at a time.
"""

import ctypes
import ctypes.util
import logging
import os
import threading
from typing import Any, BinaryIO, Callable, List, Optional, Tuple

from ..exceptions import ConfigError, LibraryNotFoundError
from .base_backend import Cursor, SensorsBackend

logger = logging.getLogger("lmsensors.backends.libsensors")


# C structure definitions from sensors.h
class SensorsBusId(ctypes.Structure):
    """sensors_bus_id structure"""

    _fields_ = [
        ("type", ctypes.c_short),
        ("nr", ctypes.c_short),
    ]


class SensorsChipName(ctypes.Structure):
    """sensors_chip_name structure"""

    _fields_ = [
        ("prefix", ctypes.c_char_p),
        ("bus", SensorsBusId),
        ("addr", ctypes.c_int),
        ("path", ctypes.c_char_p),
    ]


class SensorsFeature(ctypes.Structure):
    """sensors_feature structure"""

    _fields_ = [
        ("name", ctypes.c_char_p),
        ("number", ctypes.c_int),
        ("type", ctypes.c_int),
        ("first_subfeature", ctypes.c_int),
        ("padding1", ctypes.c_int),
    ]


class SensorsSubfeature(ctypes.Structure):
    """sensors_subfeature structure"""

    _fields_ = [
        ("name", ctypes.c_char_p),
        ("number", ctypes.c_int),
        ("type", ctypes.c_int),
        ("mapping", ctypes.c_int),
        ("flags", ctypes.c_uint),
    ]


CHIP_P = ctypes.POINTER(SensorsChipName)
FEATURE_P = ctypes.POINTER(SensorsFeature)
SUBFEATURE_P = ctypes.POINTER(SensorsSubfeature)
INT_P = ctypes.POINTER(ctypes.c_int)

FALLBACK_SONAMES = ["libsensors.so.5", "libsensors.so.4", "libsensors.so"]


def _decode(raw: Optional[bytes]) -> str:
    if raw is None:
        return ""
    return raw.decode("utf-8", "replace")


class _GlobalConfig:
    """Stand-in handle for the non-reentrant global configuration."""

    def __repr__(self) -> str:
        return "<libsensors global config>"


# libsensors global state is per process, shared by all backend instances
_global_lock = threading.Lock()
_live_global: Optional[_GlobalConfig] = None


def find_library_candidates(
    library_path: Optional[str] = None, library_name: str = "sensors"
) -> List[str]:
    """
    List shared object names to try when loading libsensors.

    Args:
        library_path: Explicit path; when given it is the only candidate
        library_name: Name passed to ctypes.util.find_library

    Returns:
        Candidate paths/sonames in the order they should be tried
    """
    if library_path:
        return [library_path]

    candidates = []
    found = ctypes.util.find_library(library_name)
    if found:
        candidates.append(found)
    for soname in FALLBACK_SONAMES:
        if soname not in candidates:
            candidates.append(soname)
    return candidates


class LibSensorsBackend(SensorsBackend):
    """
    libsensors backend using ctypes.

    Usage:
        backend = LibSensorsBackend()
        print(backend.library_version())
    """

    def __init__(self, library_path: Optional[str] = None, library_name: str = "sensors"):
        """
        Load libsensors and declare the function signatures.

        Args:
            library_path: Explicit path to the shared object
            library_name: Library name for ctypes.util.find_library

        Raises:
            LibraryNotFoundError: If no candidate could be loaded
        """
        self.lib = self._load_library(find_library_candidates(library_path, library_name))
        self.libc = self._load_libc()
        self.reentrant = hasattr(self.lib, "sensors_init_r")
        self._setup_functions()
        logger.debug(
            f"Loaded {self.lib._name} (reentrant API: {self.reentrant})"
        )

    @staticmethod
    def _load_library(candidates: List[str]) -> ctypes.CDLL:
        errors = []
        for candidate in candidates:
            try:
                return ctypes.CDLL(candidate)
            except OSError as e:
                errors.append(f"{candidate}: {e}")
        raise LibraryNotFoundError(
            "Could not load libsensors. Install the lm-sensors library. "
            + "; ".join(errors)
        )

    @staticmethod
    def _load_libc() -> ctypes.CDLL:
        libc = ctypes.CDLL(ctypes.util.find_library("c"), use_errno=True)
        libc.fdopen.argtypes = [ctypes.c_int, ctypes.c_char_p]
        libc.fdopen.restype = ctypes.c_void_p
        libc.fclose.argtypes = [ctypes.c_void_p]
        libc.fclose.restype = ctypes.c_int
        libc.free.argtypes = [ctypes.c_void_p]
        libc.free.restype = None
        return libc

    def _setup_functions(self) -> None:
        """Setup function signatures for libsensors functions"""
        lib = self.lib

        lib.sensors_strerror.argtypes = [ctypes.c_int]
        lib.sensors_strerror.restype = ctypes.c_char_p

        lib.sensors_snprintf_chip_name.argtypes = [
            ctypes.c_char_p,
            ctypes.c_size_t,
            CHIP_P,
        ]
        lib.sensors_snprintf_chip_name.restype = ctypes.c_int

        if self.reentrant:
            lib.sensors_init_r.argtypes = [ctypes.c_void_p, INT_P]
            lib.sensors_init_r.restype = ctypes.c_void_p

            lib.sensors_cleanup_r.argtypes = [ctypes.c_void_p]
            lib.sensors_cleanup_r.restype = None

            lib.sensors_get_detected_chips_r.argtypes = [ctypes.c_void_p, CHIP_P, INT_P]
            lib.sensors_get_detected_chips_r.restype = CHIP_P

            lib.sensors_get_features_r.argtypes = [ctypes.c_void_p, CHIP_P, INT_P]
            lib.sensors_get_features_r.restype = FEATURE_P

            lib.sensors_get_all_subfeatures_r.argtypes = [
                ctypes.c_void_p,
                CHIP_P,
                FEATURE_P,
                INT_P,
            ]
            lib.sensors_get_all_subfeatures_r.restype = SUBFEATURE_P

            lib.sensors_get_adapter_name_r.argtypes = [
                ctypes.c_void_p,
                ctypes.POINTER(SensorsBusId),
            ]
            lib.sensors_get_adapter_name_r.restype = ctypes.c_char_p

            # restype c_void_p so the allocated label can be freed
            lib.sensors_get_label_r.argtypes = [ctypes.c_void_p, CHIP_P, FEATURE_P]
            lib.sensors_get_label_r.restype = ctypes.c_void_p

            lib.sensors_get_value_r.argtypes = [
                ctypes.c_void_p,
                CHIP_P,
                ctypes.c_int,
                ctypes.POINTER(ctypes.c_double),
            ]
            lib.sensors_get_value_r.restype = ctypes.c_int
        else:
            lib.sensors_init.argtypes = [ctypes.c_void_p]
            lib.sensors_init.restype = ctypes.c_int

            lib.sensors_cleanup.argtypes = []
            lib.sensors_cleanup.restype = None

            lib.sensors_get_detected_chips.argtypes = [CHIP_P, INT_P]
            lib.sensors_get_detected_chips.restype = CHIP_P

            lib.sensors_get_features.argtypes = [CHIP_P, INT_P]
            lib.sensors_get_features.restype = FEATURE_P

            lib.sensors_get_all_subfeatures.argtypes = [CHIP_P, FEATURE_P, INT_P]
            lib.sensors_get_all_subfeatures.restype = SUBFEATURE_P

            lib.sensors_get_adapter_name.argtypes = [ctypes.POINTER(SensorsBusId)]
            lib.sensors_get_adapter_name.restype = ctypes.c_char_p

            lib.sensors_get_label.argtypes = [CHIP_P, FEATURE_P]
            lib.sensors_get_label.restype = ctypes.c_void_p

            lib.sensors_get_value.argtypes = [
                CHIP_P,
                ctypes.c_int,
                ctypes.POINTER(ctypes.c_double),
            ]
            lib.sensors_get_value.restype = ctypes.c_int

    # ------------------------------------------------------------------
    # Library and configuration
    # ------------------------------------------------------------------

    def library_version(self) -> str:
        return _decode(ctypes.c_char_p.in_dll(self.lib, "libsensors_version").value)

    def strerror(self, errnum: int) -> str:
        return _decode(self.lib.sensors_strerror(errnum))

    def init_config(self, stream: BinaryIO) -> Tuple[Optional[Any], int]:
        if self.reentrant:
            return self._init_reentrant(stream)

        global _live_global
        with _global_lock:
            if _live_global is not None:
                raise ConfigError(
                    "libsensors without the reentrant API supports only one "
                    "live configuration"
                )
            err = self._with_file(stream, self.lib.sensors_init)
            if err != 0:
                return None, err
            _live_global = _GlobalConfig()
            return _live_global, 0

    def _init_reentrant(self, stream: BinaryIO) -> Tuple[Optional[Any], int]:
        err = ctypes.c_int(0)
        handle = self._with_file(
            stream, lambda fp: self.lib.sensors_init_r(fp, ctypes.byref(err))
        )
        if not handle:
            return None, err.value
        return handle, 0

    def _with_file(self, stream: BinaryIO, call: Callable[[int], Any]) -> Any:
        """Hand a C FILE* duplicated from stream to call, closing it afterwards."""
        fd = os.dup(stream.fileno())
        fp = self.libc.fdopen(fd, b"r")
        if not fp:
            errno = ctypes.get_errno()
            os.close(fd)
            raise OSError(errno, os.strerror(errno))
        try:
            return call(fp)
        finally:
            self.libc.fclose(fp)

    def cleanup_config(self, config: Any) -> None:
        if self.reentrant:
            self.lib.sensors_cleanup_r(config)
            return

        global _live_global
        with _global_lock:
            if config is not _live_global:
                return
            self.lib.sensors_cleanup()
            _live_global = None

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def get_detected_chips(self, config: Any, cursor: Cursor) -> Optional[Any]:
        nr = ctypes.c_int(cursor.nr)
        if self.reentrant:
            chip = self.lib.sensors_get_detected_chips_r(config, None, ctypes.byref(nr))
        else:
            chip = self.lib.sensors_get_detected_chips(None, ctypes.byref(nr))
        cursor.nr = nr.value
        return chip if chip else None

    def get_features(self, config: Any, chip: Any, cursor: Cursor) -> Optional[Any]:
        nr = ctypes.c_int(cursor.nr)
        if self.reentrant:
            feature = self.lib.sensors_get_features_r(config, chip, ctypes.byref(nr))
        else:
            feature = self.lib.sensors_get_features(chip, ctypes.byref(nr))
        cursor.nr = nr.value
        return feature if feature else None

    def get_all_subfeatures(
        self, config: Any, chip: Any, feature: Any, cursor: Cursor
    ) -> Optional[Any]:
        nr = ctypes.c_int(cursor.nr)
        if self.reentrant:
            subfeature = self.lib.sensors_get_all_subfeatures_r(
                config, chip, feature, ctypes.byref(nr)
            )
        else:
            subfeature = self.lib.sensors_get_all_subfeatures(
                chip, feature, ctypes.byref(nr)
            )
        cursor.nr = nr.value
        return subfeature if subfeature else None

    def address(self, ref: Any) -> int:
        return ctypes.addressof(ref.contents)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def chip_prefix(self, chip: Any) -> str:
        return _decode(chip.contents.prefix)

    def chip_path(self, chip: Any) -> str:
        return _decode(chip.contents.path)

    def get_adapter_name(self, config: Any, chip: Any) -> Optional[str]:
        bus = ctypes.byref(chip.contents.bus)
        if self.reentrant:
            adapter = self.lib.sensors_get_adapter_name_r(config, bus)
        else:
            adapter = self.lib.sensors_get_adapter_name(bus)
        if adapter is None:
            return None
        return _decode(adapter)

    def snprintf_chip_name(self, buffer: Optional[Any], size: int, chip: Any) -> int:
        return self.lib.sensors_snprintf_chip_name(buffer, size, chip)

    def feature_name(self, feature: Any) -> str:
        return _decode(feature.contents.name)

    def feature_number(self, feature: Any) -> int:
        return feature.contents.number

    def feature_type(self, feature: Any) -> int:
        return feature.contents.type

    def get_label(self, config: Any, chip: Any, feature: Any) -> str:
        if self.reentrant:
            label = self.lib.sensors_get_label_r(config, chip, feature)
        else:
            label = self.lib.sensors_get_label(chip, feature)
        if not label:
            return ""
        try:
            return _decode(ctypes.string_at(label))
        finally:
            self.libc.free(label)

    def subfeature_name(self, subfeature: Any) -> str:
        return _decode(subfeature.contents.name)

    def subfeature_number(self, subfeature: Any) -> int:
        return subfeature.contents.number

    def subfeature_type(self, subfeature: Any) -> int:
        return subfeature.contents.type

    def get_value(self, config: Any, chip: Any, number: int) -> Tuple[int, float]:
        value = ctypes.c_double()
        if self.reentrant:
            err = self.lib.sensors_get_value_r(config, chip, number, ctypes.byref(value))
        else:
            err = self.lib.sensors_get_value(chip, number, ctypes.byref(value))
        return err, value.value
