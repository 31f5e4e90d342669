"""
Base Native Backend Interface

All native backends must inherit from SensorsBackend and implement the
required methods. The wrapper layer only ever talks to libsensors through
this interface, which keeps the identity and lifetime logic independent of
how the library is loaded.

Pointers handed out by a backend (chips, features, subfeatures) are
borrowed: they stay valid only while the configuration handle they were
enumerated from is alive, and they are never freed by the caller.
"""

from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Optional, Tuple


class Cursor:
    """
    Opaque enumeration counter.

    Starts at zero and is advanced by the backend on every "get next" call,
    following the native library's own convention.
    """

    __slots__ = ("nr",)

    def __init__(self, nr: int = 0):
        self.nr = nr

    def __repr__(self) -> str:
        return f"Cursor(nr={self.nr})"


class SensorsBackend(ABC):
    """
    Abstract base class for libsensors backends.

    Example:
        class MyBackend(SensorsBackend):
            def init_config(self, stream):
                # Parse the stream, return (handle, 0) or (None, errno)
                pass

            def get_detected_chips(self, config, cursor):
                # Return the chip at cursor.nr and advance the cursor
                pass
    """

    @abstractmethod
    def library_version(self) -> str:
        """Return the native library version string."""
        pass

    @abstractmethod
    def strerror(self, errnum: int) -> str:
        """
        Translate a native error code into a message.

        Args:
            errnum: Error code as returned by the native library (sign is
                ignored)

        Returns:
            Human readable error message
        """
        pass

    @abstractmethod
    def init_config(self, stream: BinaryIO) -> Tuple[Optional[Any], int]:
        """
        Parse a sensors configuration file.

        The backend consumes the stream completely before returning; the
        caller closes it afterwards.

        Args:
            stream: Open binary file positioned at the start of the config

        Returns:
            Tuple of (native handle, 0) on success, (None, error code) when
            the native library rejects the contents
        """
        pass

    @abstractmethod
    def cleanup_config(self, config: Any) -> None:
        """Free a native handle returned by init_config."""
        pass

    @abstractmethod
    def get_detected_chips(self, config: Any, cursor: Cursor) -> Optional[Any]:
        """Return the next detected chip, or None when enumeration is done."""
        pass

    @abstractmethod
    def get_features(self, config: Any, chip: Any, cursor: Cursor) -> Optional[Any]:
        """Return the next feature of chip, or None when enumeration is done."""
        pass

    @abstractmethod
    def get_all_subfeatures(
        self, config: Any, chip: Any, feature: Any, cursor: Cursor
    ) -> Optional[Any]:
        """Return the next subfeature of feature, or None when done."""
        pass

    @abstractmethod
    def address(self, ref: Any) -> int:
        """Return the address identifying a borrowed native pointer."""
        pass

    @abstractmethod
    def chip_prefix(self, chip: Any) -> str:
        pass

    @abstractmethod
    def chip_path(self, chip: Any) -> str:
        pass

    @abstractmethod
    def get_adapter_name(self, config: Any, chip: Any) -> Optional[str]:
        """Return the name of the bus adapter of chip, or None if unknown."""
        pass

    @abstractmethod
    def snprintf_chip_name(self, buffer: Optional[Any], size: int, chip: Any) -> int:
        """
        Render the canonical chip name into buffer.

        Behaves like the C call: with a None buffer and zero size nothing is
        written and only the required length (without terminator) is
        returned. A negative return value is a native error code.

        Args:
            buffer: ctypes string buffer, or None to query the length
            size: Size of buffer in bytes, including the terminator
            chip: Borrowed chip pointer

        Returns:
            Length of the full name, or a negative error code
        """
        pass

    @abstractmethod
    def feature_name(self, feature: Any) -> str:
        pass

    @abstractmethod
    def feature_number(self, feature: Any) -> int:
        pass

    @abstractmethod
    def feature_type(self, feature: Any) -> int:
        pass

    @abstractmethod
    def get_label(self, config: Any, chip: Any, feature: Any) -> str:
        """
        Return the label of feature.

        The native library allocates the label per call; the backend copies
        it into a Python string and frees the native copy.
        """
        pass

    @abstractmethod
    def subfeature_name(self, subfeature: Any) -> str:
        pass

    @abstractmethod
    def subfeature_number(self, subfeature: Any) -> int:
        pass

    @abstractmethod
    def subfeature_type(self, subfeature: Any) -> int:
        pass

    @abstractmethod
    def get_value(self, config: Any, chip: Any, number: int) -> Tuple[int, float]:
        """
        Read the live value of a subfeature.

        Args:
            config: Native configuration handle
            chip: Borrowed chip pointer the subfeature belongs to
            number: Subfeature number

        Returns:
            Tuple of (error code, value); the value is meaningless unless
            the error code is 0
        """
        pass
