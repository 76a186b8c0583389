"""
L1 Local Cache Backends

Architecture:
    LocalCache (protocol consumed by the façade)
        ├── LRUMemoryCache  (OrderedDict LRU + write/access expiry)
        └── TTLMemoryCache  (cachetools.TTLCache + access expiry)

Both backends:
    - Bound the number of entries (LRU eviction past max_capacity)
    - Expire entries after write and after access
    - Are safe to share between threads (threading.Lock)
    - Treat a None/empty key as a no-op and never store None

The L1 tier is a per-process accelerator. It knows nothing about Redis or
about the data type it holds; the façade decides what goes in.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from cachetools import TTLCache

from tiered_cache.core.config.constants import (
    L1_EXPIRE_AFTER_ACCESS,
    L1_EXPIRE_AFTER_WRITE,
    L1_INITIAL_CAPACITY,
    L1_MAX_CAPACITY,
    LocalCacheType,
)
from tiered_cache.core.logging.logger import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


class LocalCache(Protocol):
    """Operations the façade needs from an L1 backend."""

    def set(self, key: str | None, value: Any) -> None: ...

    def get(self, key: str | None) -> Any | None: ...

    def delete(self, key: str | None) -> None: ...

    def delete_many(self, keys: Iterable[str] | None) -> None: ...

    def clear(self) -> None: ...

    def stats(self) -> dict[str, Any]: ...


@dataclass(frozen=True)
class LocalCacheOptions:
    """
    L1 sizing and expiry.

    initial_capacity is kept as a sizing hint only: Python mappings grow on
    demand, so neither backend preallocates.
    """

    initial_capacity: int = L1_INITIAL_CAPACITY
    max_capacity: int = L1_MAX_CAPACITY
    expire_after_write: float = L1_EXPIRE_AFTER_WRITE
    expire_after_access: float = L1_EXPIRE_AFTER_ACCESS


@dataclass
class _Entry:
    value: Any
    written_at: float
    accessed_at: float


class _StatsMixin:
    """Hit/miss bookkeeping shared by both backends."""

    _hits: int
    _misses: int
    _evictions: int

    def _reset_stats(self) -> None:
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _build_stats(self, size: int, max_size: int, backend: str) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "backend": backend,
            "size": size,
            "max_size": max_size,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }


class LRUMemoryCache(_StatsMixin):
    """
    In-memory LRU cache with expire-after-write and expire-after-access.

    Implementation Details:
    - OrderedDict keeps LRU order (oldest first)
    - Each entry carries its write and last-access time
    - Expired entries are dropped lazily, on the read that finds them
    - Inserting past max_capacity evicts from the front
    """

    def __init__(self, options: LocalCacheOptions | None = None, clock: Clock = time.monotonic):
        self._options = options or LocalCacheOptions()
        self._clock = clock
        self._cache: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = threading.Lock()
        self._reset_stats()

    @property
    def max_size(self) -> int:
        return self._options.max_capacity

    @property
    def size(self) -> int:
        return len(self._cache)

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return (
            now - entry.written_at >= self._options.expire_after_write
            or now - entry.accessed_at >= self._options.expire_after_access
        )

    def get(self, key: str | None) -> Any | None:
        if not key:
            return None

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            now = self._clock()
            if self._is_expired(entry, now):
                del self._cache[key]
                self._misses += 1
                return None

            entry.accessed_at = now
            self._cache.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: str | None, value: Any) -> None:
        if not key or value is None:
            return

        with self._lock:
            now = self._clock()
            if key in self._cache:
                self._cache.move_to_end(key)
            self._cache[key] = _Entry(value, now, now)

            while len(self._cache) > self._options.max_capacity:
                self._cache.popitem(last=False)
                self._evictions += 1

    def delete(self, key: str | None) -> None:
        if key is None:
            return
        with self._lock:
            self._cache.pop(key, None)

    def delete_many(self, keys: Iterable[str] | None) -> None:
        if keys is None:
            return
        with self._lock:
            for key in keys:
                if key is not None:
                    self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def get_keys(self) -> list[str]:
        """Keys in LRU order (oldest first, newest last)."""
        with self._lock:
            return list(self._cache.keys())

    def stats(self) -> dict[str, Any]:
        return self._build_stats(self.size, self.max_size, LocalCacheType.LRU.value)


class _EvictionCountingTTLCache(TTLCache):
    """TTLCache that reports capacity evictions back to its owner."""

    def __init__(self, maxsize, ttl, timer, on_evict: Callable[[], None]):
        super().__init__(maxsize=maxsize, ttl=ttl, timer=timer)
        self._on_evict = on_evict

    def popitem(self):
        item = super().popitem()
        self._on_evict()
        return item


class TTLMemoryCache(_StatsMixin):
    """
    cachetools-backed L1.

    cachetools.TTLCache provides the capacity bound (LRU) and the
    expire-after-write window; expire-after-access is enforced here by
    stamping each entry on read.
    """

    def __init__(self, options: LocalCacheOptions | None = None, clock: Clock = time.monotonic):
        self._options = options or LocalCacheOptions()
        self._clock = clock
        self._lock = threading.Lock()
        self._reset_stats()
        self._cache = _EvictionCountingTTLCache(
            maxsize=self._options.max_capacity,
            ttl=self._options.expire_after_write,
            timer=clock,
            on_evict=self._count_eviction,
        )

    def _count_eviction(self) -> None:
        self._evictions += 1

    @property
    def max_size(self) -> int:
        return self._options.max_capacity

    @property
    def size(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

    def get(self, key: str | None) -> Any | None:
        if not key:
            return None

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            now = self._clock()
            if now - entry.accessed_at >= self._options.expire_after_access:
                del self._cache[key]
                self._misses += 1
                return None

            entry.accessed_at = now
            self._hits += 1
            return entry.value

    def set(self, key: str | None, value: Any) -> None:
        if not key or value is None:
            return

        with self._lock:
            now = self._clock()
            self._cache[key] = _Entry(value, now, now)

    def delete(self, key: str | None) -> None:
        if key is None:
            return
        with self._lock:
            self._cache.pop(key, None)

    def delete_many(self, keys: Iterable[str] | None) -> None:
        if keys is None:
            return
        with self._lock:
            for key in keys:
                if key is not None:
                    self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def stats(self) -> dict[str, Any]:
        return self._build_stats(self.size, self.max_size, LocalCacheType.TTL.value)


def create_local_cache(
    cache_type: LocalCacheType | str | None,
    options: LocalCacheOptions | None = None,
) -> LocalCache | None:
    """
    Build the L1 backend named by cache_type.

    Returns:
        The backend, or None when the selector is unset or unknown
        (the L1 tier is then disabled and every call goes to Redis).
    """
    options = options or LocalCacheOptions()

    try:
        selected = LocalCacheType(cache_type) if cache_type else None
    except ValueError:
        selected = None

    if selected is None:
        logger.error(
            "L1 cache disabled, memory type not configured",
            stage="L1.INIT",
            memory_type=cache_type,
        )
        return None

    logger.info(
        "L1 cache created",
        stage="L1.INIT",
        backend=selected.value,
        max_capacity=options.max_capacity,
        expire_after_write=options.expire_after_write,
        expire_after_access=options.expire_after_access,
    )

    if selected is LocalCacheType.LRU:
        return LRUMemoryCache(options)
    return TTLMemoryCache(options)
