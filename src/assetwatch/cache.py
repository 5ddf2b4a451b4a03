"""Cache store — derived artifacts keyed by CacheKey.

The watcher only needs ``invalidate``; the rest of the API lets builders
store artifacts and lets callers ask whether an entry must be rebuilt.

Thread Safety:
    All methods are protected by a ``threading.Lock``.

"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from assetwatch.model.resource import CacheKey


class CacheStore(Protocol):
    """Keyed cache of derived artifacts that supports invalidation."""

    def invalidate(self, key: CacheKey) -> None: ...


class MemoryCacheStore:
    """In-process cache store.

    Invalidation stores a tombstone (``None``) for the key rather than
    removing it, so consumers can tell "stale, rebuild me" apart from
    "never built".

    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: dict[CacheKey, object | None] = {}
        self._lock = threading.Lock()

    def put(self, key: CacheKey, value: object | None) -> None:
        with self._lock:
            self._entries[key] = value

    def get(self, key: CacheKey) -> object | None:
        """Return the cached value, or None when missing or invalidated."""
        with self._lock:
            return self._entries.get(key)

    def invalidate(self, key: CacheKey) -> None:
        self.put(key, None)

    def is_stale(self, key: CacheKey) -> bool:
        """True if *key* was invalidated and not rebuilt since."""
        with self._lock:
            return key in self._entries and self._entries[key] is None

    def keys(self) -> list[CacheKey]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> int:
        """Drop all entries and return how many were dropped."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
