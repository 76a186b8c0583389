"""
Redis Client (L2) - Topology-Aware Operation Surface

Architecture:
    RedisClient (Public API, every L2 operation)
        ├── ConnectionManager (builds the client for the configured topology)
        │   ├── standalone: redis.Redis over a ConnectionPool
        │   ├── sentinel:   Sentinel.master_for(...)
        │   ├── sharded:    ShardedRedis (one redis.Redis per shard, md5 routing)
        │   └── cluster:    redis.cluster.RedisCluster
        ├── BloomFilter (bit offsets for approximate membership over a bitmap)
        └── HealthMonitor (ping latency and pool metrics)

Every operation is one blocking call against the node that owns the key.
Redis errors are logged and re-raised unchanged: there is no retry and no
fallback at this layer.
"""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, TypeVar

import redis
from redis.cluster import ClusterNode, RedisCluster
from redis.exceptions import ConnectionError, RedisError, TimeoutError
from redis.sentinel import Sentinel

from tiered_cache.core.config.constants import (
    BLOOM_DEFAULT_BITS,
    BLOOM_DEFAULT_HASHES,
    RELEASE_LOCK_SCRIPT,
    BitOperation,
    RedisTopology,
)
from tiered_cache.core.config.settings import RedisSettings, Settings
from tiered_cache.core.exceptions import (
    CacheConnectionError,
    CacheKeyError,
    ConfigurationError,
)
from tiered_cache.core.logging.logger import get_logger
from tiered_cache.infrastructure.cache.codec import Codec, JsonCodec

logger = get_logger(__name__)

T = TypeVar("T")


def _parse_node(node: str) -> tuple[str, int]:
    host, _, port = node.rpartition(":")
    if not host or not port.isdigit():
        raise ConfigurationError(
            f"Invalid node address: {node!r}", details={"expected": "host:port"}
        )
    return host, int(port)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# Builds and owns the client for the configured topology
# =============================================================================


class ShardedRedis:
    """
    Client-side sharding over independent Redis nodes.

    A key always lands on the same shard: md5(key) modulo the shard count.
    Adding or removing a shard remaps keys, so the shard list is fixed for
    the lifetime of the process.
    """

    def __init__(self, shards: list[redis.Redis]):
        if not shards:
            raise ConfigurationError("Sharded topology needs at least one shard")
        self._shards = shards

    @property
    def shards(self) -> list[redis.Redis]:
        return list(self._shards)

    def shard_index(self, key: str) -> int:
        digest = hashlib.md5(key.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big") % len(self._shards)

    def shard_for(self, key: str) -> redis.Redis:
        return self._shards[self.shard_index(key)]

    def group_by_shard(self, keys: tuple[str, ...] | list[str]) -> dict[int, list[str]]:
        groups: dict[int, list[str]] = {}
        for key in keys:
            groups.setdefault(self.shard_index(key), []).append(key)
        return groups

    def ping(self) -> bool:
        return all(shard.ping() for shard in self._shards)

    def close(self) -> None:
        for shard in self._shards:
            shard.close()


class ConnectionManager:
    """
    Manages the Redis client lifecycle for one topology.

    Responsibility: client construction, connectivity check, key routing,
    cleanup. Pool sizing and socket timeouts come from RedisSettings and are
    enforced by redis-py, not here.
    """

    def __init__(self, settings: RedisSettings, topology: RedisTopology):
        self._settings = settings
        self._topology = topology
        self._client: Any = None
        self._is_connected = False

    @property
    def topology(self) -> RedisTopology:
        return self._topology

    def _build_client(self) -> Any:
        s = self._settings

        if self._topology is RedisTopology.STANDALONE:
            pool = redis.ConnectionPool(
                host=s.REDIS_HOST,
                port=s.REDIS_PORT,
                db=s.REDIS_DB,
                password=s.REDIS_PASSWORD,
                max_connections=s.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=s.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=s.REDIS_SOCKET_TIMEOUT,
                health_check_interval=s.REDIS_HEALTH_CHECK_INTERVAL,
                decode_responses=True,
            )
            return redis.Redis(connection_pool=pool)

        if self._topology is RedisTopology.SENTINEL:
            if not s.REDIS_SENTINEL_NODES:
                raise ConfigurationError("REDIS_SENTINEL_NODES is empty")
            sentinel = Sentinel(
                [_parse_node(node) for node in s.REDIS_SENTINEL_NODES],
                socket_timeout=s.REDIS_SOCKET_TIMEOUT,
                socket_connect_timeout=s.REDIS_SOCKET_CONNECT_TIMEOUT,
            )
            return sentinel.master_for(
                s.REDIS_SENTINEL_MASTER,
                db=s.REDIS_DB,
                password=s.REDIS_PASSWORD,
                socket_timeout=s.REDIS_SOCKET_TIMEOUT,
                decode_responses=True,
            )

        if self._topology is RedisTopology.SHARDED:
            if not s.REDIS_SHARD_URLS:
                raise ConfigurationError("REDIS_SHARD_URLS is empty")
            return ShardedRedis(
                [
                    redis.Redis.from_url(
                        url,
                        max_connections=s.REDIS_MAX_CONNECTIONS,
                        socket_connect_timeout=s.REDIS_SOCKET_CONNECT_TIMEOUT,
                        socket_timeout=s.REDIS_SOCKET_TIMEOUT,
                        health_check_interval=s.REDIS_HEALTH_CHECK_INTERVAL,
                        decode_responses=True,
                    )
                    for url in s.REDIS_SHARD_URLS
                ]
            )

        if not s.REDIS_CLUSTER_NODES:
            raise ConfigurationError("REDIS_CLUSTER_NODES is empty")
        return RedisCluster(
            startup_nodes=[ClusterNode(*_parse_node(node)) for node in s.REDIS_CLUSTER_NODES],
            password=s.REDIS_PASSWORD,
            max_connections=s.REDIS_MAX_CONNECTIONS,
            socket_connect_timeout=s.REDIS_SOCKET_CONNECT_TIMEOUT,
            socket_timeout=s.REDIS_SOCKET_TIMEOUT,
            decode_responses=True,
        )

    def connect(self) -> Any:
        """
        Build the client and verify it answers PING.

        STAGE-REDIS.2: Connection establishment

        Raises:
            CacheConnectionError: If the topology cannot be reached
        """
        if self._is_connected and self._client is not None:
            return self._client

        try:
            self._client = self._build_client()
            self._client.ping()
        except (ConnectionError, TimeoutError) as e:
            self._client = None
            logger.error(
                "Failed to connect to Redis",
                stage="REDIS.2",
                topology=self._topology.value,
                error=str(e),
            )
            raise CacheConnectionError.from_exception(
                e,
                message=f"Failed to connect to Redis: {e}",
                topology=self._topology.value,
                host=self._settings.REDIS_HOST,
                port=self._settings.REDIS_PORT,
            ) from e

        self._is_connected = True
        logger.info("Redis connected", stage="REDIS.2", topology=self._topology.value)
        return self._client

    def attach(self, client: Any) -> None:
        """Use an already-built client (embedding, tests)."""
        self._client = client
        self._is_connected = True

    def disconnect(self) -> None:
        """
        STAGE-REDIS.3: Connection cleanup
        """
        if self._client is not None:
            self._client.close()
        self._client = None
        self._is_connected = False
        logger.info("Redis disconnected", stage="REDIS.3", topology=self._topology.value)

    def get_client(self) -> Any:
        return self._client

    def is_connected(self) -> bool:
        return self._is_connected

    def client_for(self, key: str) -> Any:
        """Node that owns key (the only node unless sharded)."""
        if self._client is None:
            raise CacheConnectionError(
                "Redis not connected", details={"topology": self._topology.value}
            )
        if isinstance(self._client, ShardedRedis):
            return self._client.shard_for(key)
        return self._client


# =============================================================================
# LAYER 2: BLOOM FILTER
# Approximate membership over a plain Redis bitmap
# =============================================================================


class BloomFilter:
    """
    Bit offsets for a bitmap-backed bloom filter.

    Uses double hashing of one md5 digest: offset_i = (h1 + i * h2) mod m.
    Only needs SETBIT/GETBIT, so it works on every topology without the
    RedisBloom module. There is deliberately no remove: membership is
    monotone, which the façade's local positive markers depend on.
    """

    def __init__(self, bits: int, hashes: int):
        if bits <= 0 or hashes <= 0:
            raise ConfigurationError(
                "Bloom filter needs positive bits and hashes",
                details={"bits": bits, "hashes": hashes},
            )
        self.bits = bits
        self.hashes = hashes

    def offsets(self, member: str) -> list[int]:
        digest = hashlib.md5(member.encode("utf-8")).digest()
        h1 = int.from_bytes(digest[:8], "big")
        h2 = int.from_bytes(digest[8:], "big") | 1
        return [(h1 + i * h2) % self.bits for i in range(self.hashes)]


# =============================================================================
# LAYER 3: HEALTH MONITORING
# =============================================================================


class HealthMonitor:
    """
    Reports Redis reachability and ping latency for the configured topology.
    """

    def __init__(self, connection_manager: ConnectionManager):
        self._conn_mgr = connection_manager

    def health_check(self) -> dict[str, Any]:
        """
        STAGE-REDIS.HEALTH: Redis health check
        """
        health: dict[str, Any] = {
            "status": "healthy",
            "connected": self._conn_mgr.is_connected(),
            "topology": self._conn_mgr.topology.value,
            "ping_latency_ms": None,
        }

        client = self._conn_mgr.get_client()
        if client is None:
            health["status"] = "unhealthy"
            health["error"] = "Client not initialized"
            return health

        try:
            start = time.perf_counter()
            client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)

            pool = getattr(client, "connection_pool", None)
            if pool is not None and hasattr(pool, "max_connections"):
                health["pool_size"] = pool.max_connections
        except RedisError as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)

        return health


# =============================================================================
# LAYER 4: PUBLIC API
# =============================================================================


class RedisClient:
    """
    Blocking Redis client exposing the full L2 operation surface.

    Operation groups:
        string   set / setnx / get / incr / decr / expire / persist / exists / ttl / delete
        list     lpush / rpush / lrange / lrange_page / lindex / llen / lrem / ltrim / lclear / lpop / rpop
        set      sadd / sismember / smembers
        hash     hset / hmset / hget / hgetall / hincr / hdecr
        bit      setbit / getbit / bitcount / bitop / bitpos / bitfield
        bloom    bloom_add / bloom_contains
        hll      pfadd / pfcount
        lock     acquire_lock / release_lock

    Write operations taking ttl apply EXPIRE in the same pipeline as the write.
    Non-text values are encoded with the codec before they are sent.

    Usage:
        client = RedisClient(ConnectionManager(settings.redis, RedisTopology.STANDALONE))
        client.connect()
        client.set("user:1", {"id": 1}, ttl=3600)
        client.get("user:1")   # '{"id":1}'
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        codec: Codec | None = None,
        bloom_filter: BloomFilter | None = None,
    ):
        self._conn_mgr = connection_manager
        self._codec = codec or JsonCodec()
        self._bloom = bloom_filter or BloomFilter(BLOOM_DEFAULT_BITS, BLOOM_DEFAULT_HASHES)
        self._health_monitor = HealthMonitor(connection_manager)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def connect(self) -> None:
        self._conn_mgr.connect()

    def disconnect(self) -> None:
        self._conn_mgr.disconnect()

    def ping(self) -> bool:
        try:
            client = self._conn_mgr.get_client()
            return bool(client is not None and client.ping())
        except (ConnectionError, TimeoutError):
            return False

    def health_check(self) -> dict[str, Any]:
        return self._health_monitor.health_check()

    @property
    def topology(self) -> RedisTopology:
        return self._conn_mgr.topology

    # -------------------------------------------------------------------------
    # Execution helpers
    # -------------------------------------------------------------------------

    @contextmanager
    def _command(self, stage: str, **fields) -> Iterator[None]:
        try:
            yield
        except RedisError as e:
            logger.error("Redis command failed", stage=stage, error=str(e), **fields)
            raise

    def _run(self, stage: str, key: str, command: str, *args, **kwargs) -> Any:
        with self._command(stage, key=key):
            return getattr(self._conn_mgr.client_for(key), command)(key, *args, **kwargs)

    def _run_with_ttl(self, stage: str, key: str, ttl: int | None, command: str, *args, **kwargs) -> Any:
        if ttl is None:
            return self._run(stage, key, command, *args, **kwargs)
        with self._command(stage, key=key, ttl=ttl):
            pipe = self._conn_mgr.client_for(key).pipeline(transaction=False)
            getattr(pipe, command)(key, *args, **kwargs)
            pipe.expire(key, ttl)
            return pipe.execute()[0]

    def _encode_all(self, values: tuple[Any, ...]) -> list[str]:
        if len(values) == 1 and isinstance(values[0], (list, tuple)):
            values = tuple(values[0])
        return [self._codec.encode(value) for value in values]

    def _decode_all(self, items: list[str], target: type[T] | None) -> list[Any]:
        if target is None:
            return items
        return [self._codec.decode(item, target) for item in items]

    # -------------------------------------------------------------------------
    # String Operations
    # -------------------------------------------------------------------------

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """SET, optionally with an expiry in seconds."""
        return bool(self._run("REDIS.SET", key, "set", self._codec.encode(value), ex=ttl))

    def setnx(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """SET NX: True only when this call created the key."""
        return bool(self._run("REDIS.SETNX", key, "set", self._codec.encode(value), ex=ttl, nx=True))

    def get(self, key: str) -> str | None:
        return self._run("REDIS.GET", key, "get")

    def get_as(self, key: str, target: type[T]) -> T | None:
        return self._codec.decode(self.get(key), target)

    def incr(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        return self._run_with_ttl("REDIS.INCR", key, ttl, "incrby", amount)

    def decr(self, key: str, amount: int = 1, ttl: int | None = None) -> int:
        return self._run_with_ttl("REDIS.DECR", key, ttl, "decrby", amount)

    def expire(self, key: str, seconds: int) -> bool:
        return bool(self._run("REDIS.EXPIRE", key, "expire", seconds))

    def persist(self, key: str) -> bool:
        return bool(self._run("REDIS.PERSIST", key, "persist"))

    def exists(self, key: str) -> bool:
        return self._run("REDIS.EXISTS", key, "exists") > 0

    def ttl(self, key: str) -> int:
        """TTL in seconds, -1 if the key has no expiry, -2 if it does not exist."""
        return self._run("REDIS.TTL", key, "ttl")

    def delete(self, *keys: str) -> int:
        """
        Delete keys, returning how many existed.

        On a sharded topology keys are grouped and deleted per shard.
        """
        if not keys:
            return 0

        client = self._conn_mgr.get_client()
        with self._command("REDIS.DEL", keys=keys):
            if isinstance(client, ShardedRedis):
                return sum(
                    client.shards[index].delete(*group)
                    for index, group in client.group_by_shard(keys).items()
                )
            return self._conn_mgr.client_for(keys[0]).delete(*keys)

    # -------------------------------------------------------------------------
    # List Operations
    # -------------------------------------------------------------------------

    def lpush(self, key: str, *values: Any, ttl: int | None = None) -> int:
        """Push one value, several values, or a single list of values to the head."""
        return self._run_with_ttl("REDIS.LPUSH", key, ttl, "lpush", *self._encode_all(values))

    def rpush(self, key: str, *values: Any, ttl: int | None = None) -> int:
        return self._run_with_ttl("REDIS.RPUSH", key, ttl, "rpush", *self._encode_all(values))

    def lrange(self, key: str, start: int = 0, end: int = -1, target: type[T] | None = None) -> list[Any]:
        return self._decode_all(self._run("REDIS.LRANGE", key, "lrange", start, end), target)

    def lrange_page(self, key: str, page_no: int, page_size: int, target: type[T] | None = None) -> list[Any]:
        """
        One page of a list; page_no starts at 1.
        """
        page_no = max(page_no, 1)
        start = (page_no - 1) * page_size
        return self.lrange(key, start, start + page_size - 1, target)

    def lindex(self, key: str, index: int, target: type[T] | None = None) -> Any:
        value = self._run("REDIS.LINDEX", key, "lindex", index)
        return value if target is None else self._codec.decode(value, target)

    def llen(self, key: str) -> int:
        return self._run("REDIS.LLEN", key, "llen")

    def lrem(self, key: str, value: Any, count: int = 0) -> int:
        """Remove occurrences of value (count=0 removes all)."""
        return self._run("REDIS.LREM", key, "lrem", count, self._codec.encode(value))

    def ltrim(self, key: str, start: int, end: int) -> bool:
        return bool(self._run("REDIS.LTRIM", key, "ltrim", start, end))

    def lclear(self, key: str) -> bool:
        """Empty a list (an empty list no longer exists in Redis)."""
        return self.ltrim(key, 1, 0)

    def lpop(self, key: str) -> str | None:
        return self._run("REDIS.LPOP", key, "lpop")

    def rpop(self, key: str) -> str | None:
        return self._run("REDIS.RPOP", key, "rpop")

    # -------------------------------------------------------------------------
    # Set Operations
    # -------------------------------------------------------------------------

    def sadd(self, key: str, *values: Any, ttl: int | None = None) -> int:
        return self._run_with_ttl("REDIS.SADD", key, ttl, "sadd", *self._encode_all(values))

    def sismember(self, key: str, value: Any) -> bool:
        return bool(self._run("REDIS.SISMEMBER", key, "sismember", self._codec.encode(value)))

    def smembers(self, key: str) -> set[str]:
        return set(self._run("REDIS.SMEMBERS", key, "smembers") or ())

    # -------------------------------------------------------------------------
    # Hash Operations
    # -------------------------------------------------------------------------

    def hset(self, key: str, field: str, value: Any, ttl: int | None = None) -> int:
        """1 if the field is new, 0 if an existing field was updated."""
        return self._run_with_ttl("REDIS.HSET", key, ttl, "hset", field, self._codec.encode(value))

    def hmset(self, key: str, mapping: Mapping[str, Any], ttl: int | None = None) -> int:
        """Set several fields at once; returns the number of new fields."""
        encoded = {field: self._codec.encode(value) for field, value in mapping.items()}
        return self._run_with_ttl("REDIS.HMSET", key, ttl, "hset", mapping=encoded)

    def hget(self, key: str, field: str) -> str | None:
        return self._run("REDIS.HGET", key, "hget", field)

    def hgetall(self, key: str) -> dict[str, str]:
        return dict(self._run("REDIS.HGETALL", key, "hgetall") or {})

    def hincr(self, key: str, field: str, amount: int = 1) -> int:
        return self._run("REDIS.HINCRBY", key, "hincrby", field, amount)

    def hdecr(self, key: str, field: str, amount: int = 1) -> int:
        return self._run("REDIS.HINCRBY", key, "hincrby", field, -amount)

    # -------------------------------------------------------------------------
    # Bit Operations
    # -------------------------------------------------------------------------

    @staticmethod
    def _bit(value: bool | int | str) -> int:
        if isinstance(value, str):
            return 1 if value.strip().lower() in ("1", "true") else 0
        return 1 if value else 0

    def setbit(self, key: str, offset: int, value: bool | int | str) -> bool:
        """Set a bit, returning its previous value."""
        return bool(self._run("REDIS.SETBIT", key, "setbit", offset, self._bit(value)))

    def getbit(self, key: str, offset: int) -> bool:
        return bool(self._run("REDIS.GETBIT", key, "getbit", offset))

    def bitcount(self, key: str, start: int | None = None, end: int | None = None) -> int:
        """Count set bits, optionally within a byte range (start and end go together)."""
        if (start is None) != (end is None):
            raise ValueError("bitcount needs both start and end, or neither")
        return self._run("REDIS.BITCOUNT", key, "bitcount", start, end)

    def bitpos(self, key: str, bit: bool | int, start: int | None = None, end: int | None = None) -> int:
        """First offset holding bit; end requires start."""
        if start is None and end is not None:
            raise ValueError("bitpos needs start when end is given")
        return self._run("REDIS.BITPOS", key, "bitpos", self._bit(bit), start, end)

    def bitop(self, operation: BitOperation | str, dest_key: str, *src_keys: str) -> int:
        """
        BITOP into dest_key; returns the length of the destination string.

        On a sharded topology every key must live on the same shard.
        """
        op = BitOperation(operation.upper() if isinstance(operation, str) else operation)
        client = self._conn_mgr.get_client()
        if isinstance(client, ShardedRedis):
            if len(client.group_by_shard((dest_key, *src_keys))) > 1:
                raise CacheKeyError(
                    "BITOP keys span several shards",
                    details={"keys": [dest_key, *src_keys]},
                )
        with self._command("REDIS.BITOP", key=dest_key, sources=src_keys):
            return self._conn_mgr.client_for(dest_key).bitop(op.value, dest_key, *src_keys)

    def bitfield(self, key: str, *arguments: str | int) -> list[int]:
        """Raw BITFIELD, e.g. bitfield("k", "INCRBY", "u8", 0, 1, "GET", "u4", 0)."""
        with self._command("REDIS.BITFIELD", key=key):
            return self._conn_mgr.client_for(key).execute_command("BITFIELD", key, *arguments)

    # -------------------------------------------------------------------------
    # Approximate Membership (bloom filter over a bitmap)
    # -------------------------------------------------------------------------

    def _bloom_pipeline(self, key: str, value: Any, queue: Callable[[Any, int], None]) -> list[Any]:
        offsets = self._bloom.offsets(self._codec.encode(value))
        with self._command("REDIS.BLOOM", key=key):
            pipe = self._conn_mgr.client_for(key).pipeline(transaction=False)
            for offset in offsets:
                queue(pipe, offset)
            return pipe.execute()

    def bloom_add(self, key: str, value: Any) -> bool:
        """
        Add value; True when at least one bit flipped (value was not yet a member).
        """
        previous = self._bloom_pipeline(key, value, lambda pipe, offset: pipe.setbit(key, offset, 1))
        return any(not bit for bit in previous)

    def bloom_contains(self, key: str, value: Any) -> bool:
        """False means definitely absent; True means probably present."""
        bits = self._bloom_pipeline(key, value, lambda pipe, offset: pipe.getbit(key, offset))
        return all(bits)

    # -------------------------------------------------------------------------
    # HyperLogLog
    # -------------------------------------------------------------------------

    def pfadd(self, key: str, *values: Any, ttl: int | None = None) -> bool:
        """True when the approximate cardinality changed."""
        return bool(self._run_with_ttl("REDIS.PFADD", key, ttl, "pfadd", *self._encode_all(values)))

    def pfcount(self, key: str) -> int:
        return self._run("REDIS.PFCOUNT", key, "pfcount")

    # -------------------------------------------------------------------------
    # Distributed Lock
    # -------------------------------------------------------------------------

    def acquire_lock(self, lock_key: str, requester_id: str, ttl: int) -> bool:
        """
        Take the lock if nobody holds it; it expires after ttl seconds.
        """
        return bool(self._run("REDIS.LOCK", lock_key, "set", requester_id, nx=True, ex=ttl))

    def release_lock(self, lock_key: str, requester_id: str) -> bool:
        """
        Release the lock only if requester_id still owns it.
        """
        with self._command("REDIS.UNLOCK", key=lock_key):
            client = self._conn_mgr.client_for(lock_key)
            return client.eval(RELEASE_LOCK_SCRIPT, 1, lock_key, requester_id) == 1


def create_redis_client(settings: Settings, codec: Codec | None = None) -> RedisClient:
    """
    Build (but do not connect) the L2 client described by settings.

    Raises:
        ConfigurationError: When CACHE_REDIS_TYPE is unset or unknown
    """
    redis_settings = settings.redis
    selector = redis_settings.CACHE_REDIS_TYPE

    try:
        topology = RedisTopology(selector) if selector else None
    except ValueError:
        topology = None

    if topology is None:
        raise ConfigurationError(
            "Redis topology not configured",
            details={
                "CACHE_REDIS_TYPE": selector,
                "expected": [t.value for t in RedisTopology],
            },
        )

    bloom = settings.bloom
    logger.info("Redis client created", stage="REDIS.1", topology=topology.value)
    return RedisClient(
        ConnectionManager(redis_settings, topology),
        codec=codec,
        bloom_filter=BloomFilter(bloom.CACHE_BLOOM_BITS, bloom.CACHE_BLOOM_HASHES),
    )
