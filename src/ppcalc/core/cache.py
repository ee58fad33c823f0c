"""Thread-safe LRU caching of per-map difficulty attributes."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, Generic, Hashable, Mapping, Optional, TypeVar

from ppcalc.attributes import DifficultyAttributes
from ppcalc.core.cache_settings import CacheOptions

__all__ = ["AttributesCache", "LRUCache"]

_K = TypeVar("_K", bound=Hashable)
_V = TypeVar("_V")


class LRUCache(Generic[_K, _V]):
    """Least-recently-used cache; ``maxsize == 0`` disables storage."""

    __slots__ = ("_maxsize", "_data", "_lock", "_pending", "hits", "misses")

    def __init__(self, *, maxsize: int) -> None:
        size = int(maxsize)
        if size < 0:
            raise ValueError("maxsize must be >= 0")
        self._maxsize = size
        self._data: "OrderedDict[_K, _V]" = OrderedDict()
        self._lock = threading.RLock()
        self._pending: Dict[_K, threading.Lock] = {}
        self.hits = 0
        self.misses = 0

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def _lookup(self, key: _K) -> tuple[bool, Optional[_V]]:
        # Caller holds ``self._lock``.
        if key not in self._data:
            return False, None
        self._data.move_to_end(key)
        self.hits += 1
        return True, self._data[key]

    def get_or_create(self, key: _K, factory: Callable[[], _V]) -> _V:
        """Return the cached value for ``key`` or store ``factory()``.

        ``factory`` runs outside the cache lock, so different keys are
        computed concurrently.  Callers asking for a key that is already
        being computed wait for that result instead of repeating the work.
        """

        if self._maxsize == 0:
            return factory()
        with self._lock:
            found, value = self._lookup(key)
            if found:
                return value
            key_lock = self._pending.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                found, value = self._lookup(key)
                if found:
                    return value
                self.misses += 1
            try:
                value = factory()
                with self._lock:
                    self._data[key] = value
                    if len(self._data) > self._maxsize:
                        self._data.popitem(last=False)
            finally:
                with self._lock:
                    if self._pending.get(key) is key_lock:
                        del self._pending[key]
            return value

    def invalidate(self, predicate: Callable[[_K], bool]) -> int:
        """Drop entries whose key satisfies ``predicate``; return the count."""

        with self._lock:
            stale = [key for key in self._data if predicate(key)]
            for key in stale:
                del self._data[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class AttributesCache:
    """Difficulty attributes keyed by map identity.

    Attributes are immutable, so a cached instance is shared by every caller
    asking for the same map.
    """

    __slots__ = ("_cache",)

    def __init__(self, *, maxsize: int) -> None:
        self._cache: LRUCache[Hashable, DifficultyAttributes] = LRUCache(maxsize=maxsize)

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "AttributesCache":
        return cls(maxsize=CacheOptions.from_config(config).effective_size)

    @property
    def maxsize(self) -> int:
        return self._cache.maxsize

    @property
    def stats(self) -> Mapping[str, int]:
        return {"hits": self._cache.hits, "misses": self._cache.misses, "size": len(self._cache)}

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def get_or_compute(
        self, key: Hashable, factory: Callable[[], DifficultyAttributes]
    ) -> DifficultyAttributes:
        return self._cache.get_or_create(key, factory)

    def invalidate(self, predicate: Callable[[Hashable], bool]) -> int:
        return self._cache.invalidate(predicate)

    def clear(self) -> None:
        self._cache.clear()
