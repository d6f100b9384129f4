"""Fixed-capacity least-recently-used cache for line attributions."""

from __future__ import annotations

import enum
from collections import OrderedDict
from typing import Generic, Hashable, Optional, TypeVar, Union

from ..git.blame import AttributionRecord
from ..git.repo import CacheKey

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Marker(enum.Enum):
    """Values the cache stores in place of a record."""

    NO_RECORD = "no-record"

    def __bool__(self) -> bool:
        return False


NO_RECORD = Marker.NO_RECORD

CachedAttribution = Union[AttributionRecord, Marker]


class LRUCache(Generic[K, V]):
    """Mapping bounded to ``capacity`` entries with LRU eviction.

    ``get`` and ``set`` both mark a key as most recently used. Inserting past
    capacity evicts exactly one entry, the least recently used. Not
    thread-safe; callers share it from a single event loop.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()

    def get(self, key: K) -> Optional[V]:
        """Return the cached value, or None when ``key`` is absent."""
        try:
            self._entries.move_to_end(key)
        except KeyError:
            return None
        return self._entries[key]

    def set(self, key: K, value: V) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        if len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class AttributionCache(LRUCache[CacheKey, CachedAttribution]):
    """LRU cache of :class:`AttributionRecord` or :data:`NO_RECORD` per line."""
