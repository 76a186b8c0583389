"""
Tiered Cache Manager - L1/L2 Consistency Protocol

Architecture:
    TieredCache (Public API)
        ├── CacheContext (immutable collaborators, resolved once)
        │   ├── LocalCache  (L1, process-local, optional)
        │   ├── RedisClient (L2, authoritative)
        │   └── Codec       (value <-> text)
        └── Local tier guards (L1 failures degrade to a miss)

Consistency rules:
    read            L1 hit -> return; else Redis, populate L1 with a non-empty result
    scalar set      write-through: L1 first, then Redis
    mutation        counters / sets / hashes: delete the L1 entry, then mutate Redis
    collections     smembers / hgetall cached as one encoded snapshot
    bloom filter    local positive markers under key + encoded(value)
    everything else pass-through to Redis
    delete          L1 first, then Redis

Redis is the source of truth. Redis errors propagate to the caller unchanged;
there is no retry and no serving of L1 data when Redis fails on a miss.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from tiered_cache.core.config.constants import BitOperation, CacheTier
from tiered_cache.core.config.settings import Settings, get_settings
from tiered_cache.core.exceptions import CacheDecodeError
from tiered_cache.core.logging.logger import get_logger, log_stage
from tiered_cache.infrastructure.cache.codec import Codec, JsonCodec
from tiered_cache.infrastructure.cache.local_cache import (
    LocalCache,
    LocalCacheOptions,
    create_local_cache,
)
from tiered_cache.infrastructure.cache.redis_client import RedisClient, create_redis_client

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheContext:
    """
    Collaborators of the façade.

    local=None disables the L1 tier: every call goes straight to Redis.
    """

    local: LocalCache | None
    remote: RedisClient
    codec: Codec

    @property
    def local_enabled(self) -> bool:
        return self.local is not None


def build_context(settings: Settings | None = None, codec: Codec | None = None) -> CacheContext:
    """
    Resolve the L1 backend, Redis client and codec from configuration.

    STAGE-CACHE.0: Context resolution

    Raises:
        ConfigurationError: When the Redis topology is not configured
    """
    settings = settings or get_settings()
    codec = codec or JsonCodec()
    memory = settings.memory

    local: LocalCache | None = None
    if memory.CACHE_MEMORY_ENABLED:
        local = create_local_cache(
            memory.CACHE_MEMORY_TYPE,
            LocalCacheOptions(
                initial_capacity=memory.CACHE_MEMORY_INITIAL_CAPACITY,
                max_capacity=memory.CACHE_MEMORY_MAX_CAPACITY,
                expire_after_write=memory.CACHE_MEMORY_EXPIRE_AFTER_WRITE,
                expire_after_access=memory.CACHE_MEMORY_EXPIRE_AFTER_ACCESS,
            ),
        )

    remote = create_redis_client(settings, codec=codec)
    return CacheContext(local=local, remote=remote, codec=codec)


class TieredCache:
    """
    Two-tier cache façade: process-local L1 in front of Redis L2.

    STAGE-CACHE: Tiered lookup

    Every method is a blocking call and is safe to use from many threads.
    There is no per-key locking: a concurrent writer may interleave between
    an L1 invalidation and the Redis mutation, and the L1 expiry window
    bounds how long such a stale entry can live.

    Usage:
        cache = TieredCache(build_context(settings))
        cache.set("u:1", {"name": "Ada"})
        cache.get("u:1")               # served by L1
        cache.incr("counter:a")        # L1 entry dropped, Redis incremented
    """

    def __init__(self, context: CacheContext):
        self._ctx = context
        self._local = context.local
        self._remote = context.remote
        self._codec = context.codec

    @property
    def context(self) -> CacheContext:
        return self._ctx

    @property
    def local_enabled(self) -> bool:
        return self._local is not None

    # -------------------------------------------------------------------------
    # Local tier guards
    # An L1 failure is logged and treated as a miss, never raised.
    # -------------------------------------------------------------------------

    def _local_get(self, key: str | None) -> Any | None:
        if self._local is None or key is None:
            return None
        try:
            return self._local.get(key)
        except Exception as e:
            logger.warning("L1 get failed", stage="L1.GET", key=key, error=str(e))
            return None

    def _local_set(self, key: str | None, value: Any) -> None:
        if self._local is None or key is None or value is None:
            return
        try:
            self._local.set(key, value)
        except Exception as e:
            logger.warning("L1 set failed", stage="L1.SET", key=key, error=str(e))

    def _local_delete(self, *keys: str) -> None:
        if self._local is None or not keys:
            return
        try:
            if len(keys) == 1:
                self._local.delete(keys[0])
            else:
                self._local.delete_many(keys)
        except Exception as e:
            logger.warning("L1 delete failed", stage="L1.DELETE", keys=keys, error=str(e))

    def _local_text(self, key: str | None) -> str | None:
        """L1 value for key, or None unless it is non-empty text (bloom markers are not)."""
        cached = self._local_get(key)
        if isinstance(cached, str) and cached:
            return cached
        return None

    def _local_snapshot(self, key: str, target: Any) -> Any | None:
        """
        Decoded L1 collection snapshot, or None.

        A snapshot that no longer decodes as target (the key changed type in
        Redis) is dropped and treated as a miss.
        """
        cached = self._local_text(key)
        if cached is None:
            return None
        try:
            snapshot = self._codec.decode(cached, target)
        except CacheDecodeError as e:
            logger.warning("L1 snapshot unreadable", stage="L1.DECODE", key=key, error=str(e))
            self._local_delete(key)
            return None
        log_stage(logger, "L1.HIT", "L1 cache hit", level="debug", key=key)
        return snapshot

    # -------------------------------------------------------------------------
    # Scalar read / write
    # -------------------------------------------------------------------------

    def get(self, key: str) -> str | None:
        """
        Read a value: L1 first, then Redis.

        A non-empty Redis value is copied into L1. Empty strings are misses
        at both tiers.
        """
        cached = self._local_text(key)
        if cached is not None:
            log_stage(logger, "L1.HIT", "L1 cache hit", level="debug", key=key)
            return cached

        value = self._remote.get(key)
        if value:
            log_stage(logger, "L2.HIT", "L2 cache hit, populating L1", level="debug", key=key)
            self._local_set(key, value)
        return value

    def get_as(self, key: str, target: type[T]) -> T | None:
        """
        Read and decode into target.

        Raises:
            CacheDecodeError: When the stored text does not fit target
        """
        return self._codec.decode(self.get(key), target)

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Write-through: L1 holds the encoded value before Redis is written.

        The Redis result is returned. If Redis fails the exception propagates
        and the L1 entry stays until it expires or is deleted.
        """
        text = self._codec.encode(value)
        self._local_set(key, text)
        return self._remote.set(key, text, ttl)

    def setnx(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """SET NX on Redis only; the caller may not win, so L1 is untouched."""
        return self._remote.setnx(key, value, ttl)

    def delete(self, *keys: str) -> int:
        """
        Delete keys from L1, then from Redis. Returns the Redis count.
        """
        if not keys:
            return 0
        self._local_delete(*keys)
        return self._remote.delete(*keys)

    # -------------------------------------------------------------------------
    # Mutations (invalidate L1, then mutate Redis)
    # -------------------------------------------------------------------------

    def incr(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        self._local_delete(key)
        return self._remote.incr(key, amount, ttl)

    def decr(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        self._local_delete(key)
        return self._remote.decr(key, amount, ttl)

    def sadd(self, key: str, *values: Any, ttl: int | None = None) -> int:
        self._local_delete(key)
        return self._remote.sadd(key, *values, ttl=ttl)

    def hset(self, key: str, field: str, value: Any, ttl: int | None = None) -> int:
        self._local_delete(key)
        return self._remote.hset(key, field, value, ttl)

    def hmset(self, key: str, mapping: Mapping[str, Any], ttl: int | None = None) -> int:
        self._local_delete(key)
        return self._remote.hmset(key, mapping, ttl)

    def hincr(self, key: str, field: str, amount: int = 1) -> int:
        self._local_delete(key)
        return self._remote.hincr(key, field, amount)

    def hdecr(self, key: str, field: str, amount: int = 1) -> int:
        self._local_delete(key)
        return self._remote.hdecr(key, field, amount)

    # -------------------------------------------------------------------------
    # Collection reads (whole-collection L1 snapshots)
    # -------------------------------------------------------------------------

    def smembers(self, key: str) -> set[str]:
        cached = self._local_snapshot(key, set[str])
        if cached is not None:
            return cached

        members = self._remote.smembers(key)
        if members:
            self._local_set(key, self._codec.encode(members))
        return members

    def hgetall(self, key: str) -> dict[str, str]:
        cached = self._local_snapshot(key, dict[str, str])
        if cached is not None:
            return cached

        mapping = self._remote.hgetall(key)
        if mapping:
            self._local_set(key, self._codec.encode(mapping))
        return mapping

    def hget(self, key: str, field: str) -> str | None:
        """
        Read one hash field.

        Served from the L1 snapshot when it holds the field. Otherwise the
        field is read from Redis and, when present, L1 is refreshed with the
        whole hash.
        """
        snapshot = self._local_snapshot(key, dict[str, str])
        if snapshot is not None and field in snapshot:
            return snapshot[field]

        value = self._remote.hget(key, field)
        if value and self._local is not None:
            mapping = self._remote.hgetall(key)
            if mapping:
                self._local_set(key, self._codec.encode(mapping))
        return value

    # -------------------------------------------------------------------------
    # Bloom filter (local positive markers)
    # -------------------------------------------------------------------------

    def _marker_key(self, key: str, value: Any) -> str:
        return key + self._codec.encode(value)

    def bloom_add(self, key: str, value: Any) -> bool:
        """
        Add value to the Redis bloom filter.

        The local marker is recorded only when the add changed the filter;
        an already-present value gets its marker on the next bloom_contains.
        """
        added = self._remote.bloom_add(key, value)
        if added:
            self._local_set(self._marker_key(key, value), True)
        return added

    def bloom_contains(self, key: str, value: Any) -> bool:
        """
        True straight from L1 when a positive marker exists.

        Markers are never cleared because the filter has no remove: a value
        that was a member stays one.
        """
        marker = self._marker_key(key, value)
        if self._local_get(marker) is True:
            log_stage(logger, "L1.HIT", "Bloom marker hit", level="debug", key=key)
            return True

        contained = self._remote.bloom_contains(key, value)
        if contained:
            self._local_set(marker, True)
        return contained

    # -------------------------------------------------------------------------
    # Pass-through (Redis only)
    # -------------------------------------------------------------------------

    def expire(self, key: str, seconds: int) -> bool:
        return self._remote.expire(key, seconds)

    def persist(self, key: str) -> bool:
        return self._remote.persist(key)

    def exists(self, key: str) -> bool:
        return self._remote.exists(key)

    def ttl(self, key: str) -> int:
        return self._remote.ttl(key)

    def sismember(self, key: str, value: Any) -> bool:
        return self._remote.sismember(key, value)

    def lpush(self, key: str, *values: Any, ttl: int | None = None) -> int:
        return self._remote.lpush(key, *values, ttl=ttl)

    def rpush(self, key: str, *values: Any, ttl: int | None = None) -> int:
        return self._remote.rpush(key, *values, ttl=ttl)

    def lrange(self, key: str, start: int = 0, end: int = -1, target: type[T] | None = None) -> list[Any]:
        return self._remote.lrange(key, start, end, target)

    def lrange_page(self, key: str, page_no: int, page_size: int, target: type[T] | None = None) -> list[Any]:
        return self._remote.lrange_page(key, page_no, page_size, target)

    def lindex(self, key: str, index: int, target: type[T] | None = None) -> Any:
        return self._remote.lindex(key, index, target)

    def llen(self, key: str) -> int:
        return self._remote.llen(key)

    def lrem(self, key: str, value: Any, count: int = 0) -> int:
        return self._remote.lrem(key, value, count)

    def ltrim(self, key: str, start: int, end: int) -> bool:
        return self._remote.ltrim(key, start, end)

    def lclear(self, key: str) -> bool:
        return self._remote.lclear(key)

    def lpop(self, key: str) -> str | None:
        return self._remote.lpop(key)

    def rpop(self, key: str) -> str | None:
        return self._remote.rpop(key)

    def setbit(self, key: str, offset: int, value: bool | int | str) -> bool:
        return self._remote.setbit(key, offset, value)

    def getbit(self, key: str, offset: int) -> bool:
        return self._remote.getbit(key, offset)

    def bitcount(self, key: str, start: int | None = None, end: int | None = None) -> int:
        return self._remote.bitcount(key, start, end)

    def bitop(self, operation: BitOperation | str, dest_key: str, *src_keys: str) -> int:
        return self._remote.bitop(operation, dest_key, *src_keys)

    def bitpos(self, key: str, bit: bool | int, start: int | None = None, end: int | None = None) -> int:
        return self._remote.bitpos(key, bit, start, end)

    def bitfield(self, key: str, *arguments: str | int) -> list[int]:
        return self._remote.bitfield(key, *arguments)

    def pfadd(self, key: str, *values: Any, ttl: int | None = None) -> bool:
        return self._remote.pfadd(key, *values, ttl=ttl)

    def pfcount(self, key: str) -> int:
        return self._remote.pfcount(key)

    def acquire_lock(self, lock_key: str, requester_id: str, ttl: int) -> bool:
        return self._remote.acquire_lock(lock_key, requester_id, ttl)

    def release_lock(self, lock_key: str, requester_id: str) -> bool:
        return self._remote.release_lock(lock_key, requester_id)

    # -------------------------------------------------------------------------
    # Lifecycle & monitoring
    # -------------------------------------------------------------------------

    def connect(self) -> None:
        self._remote.connect()

    def close(self) -> None:
        self.clear_local()
        self._remote.disconnect()

    def clear_local(self) -> None:
        """Drop every L1 entry (Redis is untouched)."""
        if self._local is not None:
            self._local.clear()

    def stats(self) -> dict[str, Any]:
        """
        L1 statistics.

        Returns:
            Dict with the enabled flag and, when enabled, the backend stats
        """
        stats: dict[str, Any] = {"tier": CacheTier.L1.value, "enabled": self.local_enabled}
        if self._local is not None:
            stats.update(self._local.stats())
        return stats

    def health_check(self) -> dict[str, Any]:
        """
        Health of both tiers; degraded when Redis is not healthy.
        """
        redis_health = self._remote.health_check()
        return {
            "status": "healthy" if redis_health.get("status") == "healthy" else "degraded",
            CacheTier.L1.value: self.stats(),
            CacheTier.L2.value: redis_health,
        }


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_cache: TieredCache | None = None
_cache_lock = threading.Lock()


def get_cache() -> TieredCache:
    """
    Get the shared cache, building it from settings on first use.

    The Redis connection is established by init_cache(), not here.
    """
    global _cache

    if _cache is None:
        with _cache_lock:
            if _cache is None:
                _cache = TieredCache(build_context())

    return _cache


def init_cache(settings: Settings | None = None) -> TieredCache:
    """
    Build (if needed) and connect the shared cache.

    Args:
        settings: Overrides get_settings() when the cache is built here

    Returns:
        TieredCache: Connected shared instance
    """
    global _cache

    with _cache_lock:
        if _cache is None:
            _cache = TieredCache(build_context(settings))
        cache = _cache

    cache.connect()
    logger.info(
        "Tiered cache initialized",
        stage="CACHE.INIT",
        l1_enabled=cache.local_enabled,
        topology=cache.context.remote.topology.value,
    )
    return cache


def close_cache() -> None:
    """Disconnect and discard the shared cache."""
    global _cache

    with _cache_lock:
        cache, _cache = _cache, None

    if cache is not None:
        cache.close()
        logger.info("Tiered cache closed", stage="CACHE.CLOSE")
