"""In-process LRU cache with per-entry TTL.

Used by the tenant database manager for tenant clients and tenant lookups.
Entries that are evicted (size limit) or found expired are passed to
on_evict so owners can release resources.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

V = TypeVar("V")


class LruTtlCache(Generic[V]):
    def __init__(
        self,
        max_size: int,
        ttl_seconds: float,
        *,
        on_evict: Callable[[str, V], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._on_evict = on_evict
        self._clock = clock
        self._data: OrderedDict[str, tuple[float, V]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def _evict(self, key: str) -> None:
        _, value = self._data.pop(key)
        if self._on_evict is not None:
            self._on_evict(key, value)

    def get(self, key: str) -> V | None:
        """Return the value and mark it most recently used; None if missing or expired."""
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            self._evict(key)
            return None
        self._data.move_to_end(key)
        return value

    def set(self, key: str, value: V) -> None:
        self._data[key] = (self._clock() + self.ttl_seconds, value)
        self._data.move_to_end(key)
        while len(self._data) > self.max_size:
            self._evict(next(iter(self._data)))

    def pop(self, key: str) -> V | None:
        """Remove key without calling on_evict; return its value."""
        entry = self._data.pop(key, None)
        return entry[1] if entry else None

    def items(self) -> Iterator[tuple[str, V]]:
        for key, (_, value) in list(self._data.items()):
            yield key, value

    def clear(self) -> None:
        self._data.clear()
