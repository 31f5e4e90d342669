"""
Exceptions raised by lmsensors.

File open failures are not wrapped: they surface as the builtin OSError
(IOError) raised by ``open()``.
"""


class SensorsError(RuntimeError):
    """Base class for all errors reported by this package."""


class ConfigError(SensorsError):
    """The native library rejected a sensors configuration file."""


class StateError(SensorsError):
    """A configuration handle was used in the wrong lifecycle state."""


class FormatError(SensorsError):
    """Formatting a chip name failed inside the native library."""


class ReadError(SensorsError):
    """Reading a subfeature value failed inside the native library."""


class LibraryNotFoundError(SensorsError, OSError):
    """The libsensors shared library could not be located or loaded."""
