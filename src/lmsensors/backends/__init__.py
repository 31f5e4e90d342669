"""
Native Backends Module

Backends give the wrapper layer access to libsensors. Contributors can add
new backends by implementing the SensorsBackend interface.

Available Backends:
    - libsensors_backend: lm-sensors shared library via ctypes
"""

import logging
import threading
from typing import Any, Dict, Optional

from .base_backend import Cursor, SensorsBackend
from .libsensors_backend import LibSensorsBackend

logger = logging.getLogger("lmsensors.backends")

_default_backend: Optional[SensorsBackend] = None
_default_lock = threading.Lock()


def get_default_backend(settings: Optional[Dict[str, Any]] = None) -> SensorsBackend:
    """
    Return the process-wide libsensors backend, loading it on first use.

    Args:
        settings: Optional settings dictionary; only the ``library`` section
            is used, and only when the backend is first created

    Returns:
        Shared LibSensorsBackend instance
    """
    global _default_backend

    with _default_lock:
        if _default_backend is None:
            library = (settings or {}).get("library", {})
            _default_backend = LibSensorsBackend(
                library_path=library.get("path"),
                library_name=library.get("name", "sensors"),
            )
            logger.info(f"Using libsensors {_default_backend.library_version()}")
        return _default_backend


def set_default_backend(backend: Optional[SensorsBackend]) -> None:
    """Replace the process-wide backend; None forces a reload on next use."""
    global _default_backend

    with _default_lock:
        _default_backend = backend


__all__ = [
    "Cursor",
    "SensorsBackend",
    "LibSensorsBackend",
    "get_default_backend",
    "set_default_backend",
]
