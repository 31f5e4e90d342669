"""
Identity Cache

Keeps at most one live wrapper object per native pointer. Each cache is
scoped to a parent object (a config, chip or feature) and stored on that
parent, so it goes away together with the parent. Entries are weak: the
cache never keeps a wrapper alive, and a wrapper that has been collected is
reported as a miss.
"""

import logging
import weakref
from typing import Any, Callable, Optional

trace = logging.getLogger("lmsensors.trace")


class IdentityCache:
    """
    Parent-scoped mapping from native address to wrapper object.

    Example:
        chips = IdentityCache("chips")
        chip = chips.get(config, address)
        if chip is None:
            chip = Chip(config, ref)
            chips.set(config, address, chip)
    """

    def __init__(self, name: str):
        """
        Args:
            name: Cache name; the mapping is stored on the parent under a
                private attribute derived from it
        """
        self.name = name
        self._attr = f"_{name}_cache"

    def _mapping(self, parent: Any) -> "weakref.WeakValueDictionary[int, Any]":
        mapping = getattr(parent, self._attr, None)
        if mapping is None:
            mapping = weakref.WeakValueDictionary()
            setattr(parent, self._attr, mapping)
            trace.debug(f"{self.name}: created cache on {type(parent).__name__}")
        return mapping

    def get(self, parent: Any, key: int) -> Optional[Any]:
        """
        Look up the live wrapper for key.

        Args:
            parent: Object the cache is scoped to
            key: Native address

        Returns:
            The wrapper, or None if there is none or it has been collected
        """
        wrapper = self._mapping(parent).get(key)
        trace.debug(
            f"{self.name}: {'hit' if wrapper is not None else 'miss'} for 0x{key:x}"
        )
        return wrapper

    def set(self, parent: Any, key: int, wrapper: Any) -> None:
        """Store a weak reference to wrapper, replacing any stale entry."""
        self._mapping(parent)[key] = wrapper
        trace.debug(f"{self.name}: stored {type(wrapper).__name__} for 0x{key:x}")

    def get_or_create(self, parent: Any, key: int, factory: Callable[[], Any]) -> Any:
        """
        Return the live wrapper for key, creating and caching it on a miss.

        Args:
            parent: Object the cache is scoped to
            key: Native address
            factory: Called without arguments to build a new wrapper

        Returns:
            The cached or newly created wrapper
        """
        wrapper = self.get(parent, key)
        if wrapper is None:
            wrapper = factory()
            self.set(parent, key, wrapper)
        return wrapper

    def live_count(self, parent: Any) -> int:
        """Return the number of wrappers currently alive in parent's cache."""
        mapping = getattr(parent, self._attr, None)
        return len(mapping) if mapping is not None else 0


CHIPS = IdentityCache("chips")
FEATURES = IdentityCache("features")
SUBFEATURES = IdentityCache("subfeatures")
