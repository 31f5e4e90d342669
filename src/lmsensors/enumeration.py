"""
Enumeration helpers shared by configs, chips and features.

Every walk starts a fresh native cursor and resolves each pointer through
an identity cache, so repeated walks hand out the same wrapper objects for
as long as they are referenced.
"""

from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from .backends.base_backend import Cursor, SensorsBackend
from .cache import IdentityCache

T = TypeVar("T")


def walk(
    backend: SensorsBackend,
    parent: Any,
    cache: IdentityCache,
    next_ref: Callable[[Cursor], Optional[Any]],
    wrap: Callable[[Any], T],
) -> Iterator[T]:
    """
    Lazily enumerate native pointers as cached wrappers.

    Args:
        backend: Backend used to derive cache keys from pointers
        parent: Object the identity cache is scoped to
        cache: Identity cache for the wrapper type
        next_ref: Called with the cursor; returns the next pointer or None
        wrap: Builds a new wrapper for a pointer on a cache miss

    Yields:
        Wrapper objects in native enumeration order
    """
    cursor = Cursor()
    while True:
        ref = next_ref(cursor)
        if ref is None:
            return
        yield cache.get_or_create(parent, backend.address(ref), lambda: wrap(ref))


class NativeSequence(Generic[T]):
    """
    Restartable lazy sequence over one native enumeration.

    Each iteration starts a new walk. ``each`` offers the push style:
    the action is applied to every element and may return False to stop.
    """

    def __init__(self, source: Callable[[], Iterator[T]]):
        self._source = source

    def __iter__(self) -> Iterator[T]:
        return self._source()

    def each(self, action: Callable[[T], Any]) -> "NativeSequence[T]":
        for item in self:
            if action(item) is False:
                break
        return self

    def to_list(self):
        return list(self)
