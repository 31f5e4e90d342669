"""
lmsensors - Object-oriented access to lm-sensors hardware monitoring

Loads a sensors configuration through libsensors and exposes the detected
chips, their features and subfeatures as Python objects. Each native object
is represented by exactly one live wrapper, and wrappers keep the
configuration they came from alive.

Modules:
    - config: SensorsConfig, the root configuration handle
    - chip, feature, subfeature: wrappers around native sensor objects
    - cache: weak identity cache used during enumeration
    - backends: native library access (libsensors via ctypes)
    - settings: YAML settings and logging setup
    - cli: lmsensors-dump command line tool
"""

from .chip import Chip
from .config import SensorsConfig
from .exceptions import (
    ConfigError,
    FormatError,
    LibraryNotFoundError,
    ReadError,
    SensorsError,
    StateError,
)
from .feature import Feature
from .subfeature import Subfeature

__version__ = "0.2.0"
__license__ = "Apache-2.0"

__all__ = [
    "SensorsConfig",
    "Chip",
    "Feature",
    "Subfeature",
    "SensorsError",
    "ConfigError",
    "StateError",
    "FormatError",
    "ReadError",
    "LibraryNotFoundError",
]
