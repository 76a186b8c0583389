"""
Unit Tests for RedisClient (L2)

Covers topology construction, key routing, the full operation surface
against the in-memory Redis, and error propagation.
"""

from unittest.mock import MagicMock, patch

import pytest
from pydantic import BaseModel
from redis.exceptions import ConnectionError as RedisConnectionError

from tests.test_fixtures import CacheTestFactory, FakeRedis, shard_of
from tiered_cache.core.config.constants import BitOperation, RedisTopology
from tiered_cache.core.config.settings import RedisSettings, Settings
from tiered_cache.core.exceptions import (
    CacheConnectionError,
    CacheKeyError,
    ConfigurationError,
)
from tiered_cache.infrastructure.cache.redis_client import (
    BloomFilter,
    ConnectionManager,
    RedisClient,
    ShardedRedis,
    create_redis_client,
)

MODULE = "tiered_cache.infrastructure.cache.redis_client"


class Item(BaseModel):
    sku: str
    qty: int


def _keys_by_shard(shard_count: int = 2, limit: int = 50) -> dict[int, list[str]]:
    groups: dict[int, list[str]] = {}
    for i in range(limit):
        key = f"key:{i}"
        groups.setdefault(shard_of(key, shard_count), []).append(key)
    return groups


# =============================================================================
# Connection management
# =============================================================================


@pytest.mark.unit
class TestConnectionManager:
    """Test client construction per topology."""

    def test_standalone_uses_pool_with_decoded_responses(self):
        """Test the standalone client and its pool settings."""
        settings = RedisSettings(REDIS_HOST="cache", REDIS_PORT=6380, REDIS_MAX_CONNECTIONS=7)

        with patch(f"{MODULE}.redis.ConnectionPool") as pool_cls, patch(f"{MODULE}.redis.Redis") as redis_cls:
            ConnectionManager(settings, RedisTopology.STANDALONE).connect()

        kwargs = pool_cls.call_args.kwargs
        assert kwargs["host"] == "cache"
        assert kwargs["port"] == 6380
        assert kwargs["max_connections"] == 7
        assert kwargs["decode_responses"] is True
        redis_cls.assert_called_once_with(connection_pool=pool_cls.return_value)
        redis_cls.return_value.ping.assert_called_once()

    def test_sentinel_resolves_master(self):
        """Test that sentinel nodes are parsed and the master is requested."""
        settings = RedisSettings(REDIS_SENTINEL_NODES=["s1:26379", "s2:26380"], REDIS_SENTINEL_MASTER="primary")

        with patch(f"{MODULE}.Sentinel") as sentinel_cls:
            manager = ConnectionManager(settings, RedisTopology.SENTINEL)
            client = manager.connect()

        assert sentinel_cls.call_args.args[0] == [("s1", 26379), ("s2", 26380)]
        sentinel_cls.return_value.master_for.assert_called_once()
        assert sentinel_cls.return_value.master_for.call_args.args[0] == "primary"
        assert client is sentinel_cls.return_value.master_for.return_value

    def test_cluster_uses_startup_nodes(self):
        """Test that cluster nodes become ClusterNode startup nodes."""
        settings = RedisSettings(REDIS_CLUSTER_NODES=["n1:7000", "n2:7001"])

        with patch(f"{MODULE}.RedisCluster") as cluster_cls, patch(f"{MODULE}.ClusterNode") as node_cls:
            ConnectionManager(settings, RedisTopology.CLUSTER).connect()

        node_cls.assert_any_call("n1", 7000)
        node_cls.assert_any_call("n2", 7001)
        assert cluster_cls.call_args.kwargs["decode_responses"] is True

    def test_sharded_builds_one_client_per_url(self):
        """Test that each shard URL gets its own client."""
        settings = RedisSettings(REDIS_SHARD_URLS=["redis://a:6379/0", "redis://b:6379/0"])

        with patch(f"{MODULE}.redis.Redis.from_url") as from_url:
            client = ConnectionManager(settings, RedisTopology.SHARDED).connect()

        assert isinstance(client, ShardedRedis)
        assert len(client.shards) == 2
        assert from_url.call_args_list[0].args[0] == "redis://a:6379/0"

    @pytest.mark.parametrize(
        "topology",
        [RedisTopology.SENTINEL, RedisTopology.SHARDED, RedisTopology.CLUSTER],
    )
    def test_topology_without_nodes_is_configuration_error(self, topology):
        """Test that missing node lists fail fast."""
        with pytest.raises(ConfigurationError):
            ConnectionManager(RedisSettings(), topology).connect()

    def test_invalid_node_address(self):
        """Test that a node without a port is rejected."""
        settings = RedisSettings(REDIS_SENTINEL_NODES=["just-a-host"])

        with pytest.raises(ConfigurationError):
            ConnectionManager(settings, RedisTopology.SENTINEL).connect()

    def test_connect_failure_wrapped(self):
        """Test that an unreachable server becomes CacheConnectionError."""
        client = MagicMock()
        client.ping.side_effect = RedisConnectionError("refused")
        manager = ConnectionManager(RedisSettings(), RedisTopology.STANDALONE)

        with patch.object(ConnectionManager, "_build_client", return_value=client):
            with pytest.raises(CacheConnectionError) as exc_info:
                manager.connect()

        assert exc_info.value.details["topology"] == "standalone"
        assert manager.is_connected() is False

    def test_connect_is_idempotent(self):
        """Test that a second connect reuses the client."""
        manager = ConnectionManager(RedisSettings(), RedisTopology.STANDALONE)

        with patch.object(ConnectionManager, "_build_client", return_value=MagicMock()) as build:
            first = manager.connect()
            second = manager.connect()

        assert first is second
        build.assert_called_once()

    def test_disconnect_closes_client(self):
        """Test cleanup."""
        client = MagicMock()
        manager = ConnectionManager(RedisSettings(), RedisTopology.STANDALONE)
        manager.attach(client)

        manager.disconnect()

        client.close.assert_called_once()
        assert manager.get_client() is None

    def test_operations_before_connect_raise(self):
        """Test that commands need a connection."""
        client = RedisClient(ConnectionManager(RedisSettings(), RedisTopology.STANDALONE))

        with pytest.raises(CacheConnectionError):
            client.get("k")


@pytest.mark.unit
class TestCreateRedisClient:
    """Test topology selection from settings."""

    @pytest.mark.parametrize("selector", [None, "memcached"])
    def test_unset_or_unknown_topology(self, selector):
        """Test that L2 configuration problems are fatal."""
        with pytest.raises(ConfigurationError):
            create_redis_client(Settings(_env_file=None, CACHE_REDIS_TYPE=selector))

    def test_builds_unconnected_client(self):
        """Test the configured topology and bloom sizing."""
        settings = Settings(_env_file=None, CACHE_REDIS_TYPE="cluster", CACHE_BLOOM_BITS=128, CACHE_BLOOM_HASHES=3)

        client = create_redis_client(settings)

        assert client.topology is RedisTopology.CLUSTER
        assert client.ping() is False


# =============================================================================
# Sharding
# =============================================================================


@pytest.mark.unit
class TestShardedRedis:
    """Test client-side key routing."""

    def test_routing_is_stable(self):
        """Test that a key always maps to the same shard."""
        sharded = ShardedRedis([FakeRedis(), FakeRedis()])

        assert sharded.shard_index("user:1") == sharded.shard_index("user:1")
        assert sharded.shard_index("user:1") == shard_of("user:1", 2)

    def test_requires_a_shard(self):
        """Test that an empty shard list is rejected."""
        with pytest.raises(ConfigurationError):
            ShardedRedis([])

    def test_writes_land_on_owning_shard(self):
        """Test that commands go to the node owning the key."""
        shards = [FakeRedis(), FakeRedis()]
        client = CacheTestFactory.redis_client(ShardedRedis(shards), RedisTopology.SHARDED)

        client.set("user:1", "Ada")

        owner = shard_of("user:1", 2)
        assert shards[owner].strings["user:1"] == "Ada"
        assert "user:1" not in shards[1 - owner].strings
        assert client.get("user:1") == "Ada"

    def test_delete_fans_out_per_shard(self):
        """Test that multi-key delete reaches every shard."""
        groups = _keys_by_shard()
        key_a, key_b = groups[0][0], groups[1][0]
        shards = [FakeRedis(), FakeRedis()]
        client = CacheTestFactory.redis_client(ShardedRedis(shards), RedisTopology.SHARDED)
        client.set(key_a, "1")
        client.set(key_b, "2")

        assert client.delete(key_a, key_b, "missing") == 2
        assert not shards[0].strings and not shards[1].strings

    def test_bitop_across_shards_rejected(self):
        """Test that BITOP needs every key on one shard."""
        groups = _keys_by_shard()
        client = CacheTestFactory.redis_client(ShardedRedis([FakeRedis(), FakeRedis()]), RedisTopology.SHARDED)

        with pytest.raises(CacheKeyError):
            client.bitop(BitOperation.OR, groups[0][0], groups[1][0])

    def test_bitop_on_same_shard(self):
        """Test that co-located keys work."""
        dest, src = _keys_by_shard()[0][:2]
        client = CacheTestFactory.redis_client(ShardedRedis([FakeRedis(), FakeRedis()]), RedisTopology.SHARDED)
        client.setbit(src, 3, True)

        client.bitop(BitOperation.OR, dest, src)

        assert client.getbit(dest, 3) is True


# =============================================================================
# Operation surface
# =============================================================================


@pytest.mark.unit
class TestStringOperations:
    """Test string, counter and key operations."""

    def test_set_and_get(self, redis_client):
        assert redis_client.set("k", "v") is True
        assert redis_client.get("k") == "v"

    def test_set_encodes_structured_values(self, redis_client, fake_redis):
        """Test that non-text values are stored as JSON."""
        redis_client.set("item", Item(sku="a", qty=2))

        assert fake_redis.strings["item"] == '{"sku":"a","qty":2}'
        assert redis_client.get_as("item", Item) == Item(sku="a", qty=2)

    def test_set_with_ttl(self, redis_client):
        redis_client.set("k", "v", ttl=30)
        assert redis_client.ttl("k") == 30

    def test_setnx_only_first_wins(self, redis_client):
        assert redis_client.setnx("lock", "a") is True
        assert redis_client.setnx("lock", "b") is False
        assert redis_client.get("lock") == "a"

    def test_incr_and_decr(self, redis_client):
        assert redis_client.incr("n") == 1
        assert redis_client.incr("n", 5) == 6
        assert redis_client.decr("n", 2) == 4

    def test_incr_with_ttl_uses_pipeline(self, redis_client, fake_redis):
        """Test that the counter and its expiry are sent together."""
        assert redis_client.incr("n", ttl=60) == 1
        assert fake_redis.calls == ["incrby", "expire"]
        assert redis_client.ttl("n") == 60

    def test_expire_persist_exists(self, redis_client):
        redis_client.set("k", "v")

        assert redis_client.expire("k", 10) is True
        assert redis_client.persist("k") is True
        assert redis_client.ttl("k") == -1
        assert redis_client.exists("k") is True
        assert redis_client.exists("missing") is False
        assert redis_client.ttl("missing") == -2

    def test_delete_counts_existing(self, redis_client):
        redis_client.set("a", "1")
        redis_client.set("b", "2")

        assert redis_client.delete("a", "b", "c") == 2
        assert redis_client.delete() == 0


@pytest.mark.unit
class TestListOperations:
    """Test list operations."""

    def test_push_and_range(self, redis_client):
        redis_client.rpush("l", "b", "c")
        redis_client.lpush("l", "a")

        assert redis_client.lrange("l") == ["a", "b", "c"]
        assert redis_client.llen("l") == 3

    def test_push_accepts_a_list(self, redis_client):
        """Test that a single list argument is expanded."""
        assert redis_client.rpush("l", ["x", "y"]) == 2

    def test_typed_range(self, redis_client):
        redis_client.rpush("items", Item(sku="a", qty=1), Item(sku="b", qty=2))

        assert redis_client.lrange("items", target=Item) == [Item(sku="a", qty=1), Item(sku="b", qty=2)]
        assert redis_client.lindex("items", 1, target=Item) == Item(sku="b", qty=2)

    def test_range_page(self, redis_client):
        """Test 1-based pagination."""
        redis_client.rpush("l", *[str(i) for i in range(7)])

        assert redis_client.lrange_page("l", 1, 3) == ["0", "1", "2"]
        assert redis_client.lrange_page("l", 3, 3) == ["6"]
        assert redis_client.lrange_page("l", 0, 3) == ["0", "1", "2"]

    def test_lrem_ltrim_pop(self, redis_client):
        redis_client.rpush("l", "a", "x", "b", "x", "c")

        assert redis_client.lrem("l", "x") == 2
        assert redis_client.ltrim("l", 0, 1) is True
        assert redis_client.lrange("l") == ["a", "b"]
        assert redis_client.lpop("l") == "a"
        assert redis_client.rpop("l") == "b"
        assert redis_client.lpop("l") is None

    def test_lclear(self, redis_client):
        redis_client.rpush("l", "a", "b")

        redis_client.lclear("l")

        assert redis_client.llen("l") == 0


@pytest.mark.unit
class TestSetAndHashOperations:
    """Test set and hash operations."""

    def test_set_membership(self, redis_client):
        assert redis_client.sadd("s", "a", "b") == 2
        assert redis_client.sadd("s", "a") == 0
        assert redis_client.sismember("s", "a") is True
        assert redis_client.smembers("s") == {"a", "b"}
        assert redis_client.smembers("missing") == set()

    def test_hash_fields(self, redis_client):
        assert redis_client.hset("h", "name", "Ada") == 1
        assert redis_client.hset("h", "name", "Grace") == 0
        assert redis_client.hget("h", "name") == "Grace"

    def test_hmset_encodes_values(self, redis_client):
        assert redis_client.hmset("h", {"n": 1, "tags": ["x"]}, ttl=5) == 2
        assert redis_client.hgetall("h") == {"n": "1", "tags": '["x"]'}
        assert redis_client.ttl("h") == 5

    def test_hash_counters(self, redis_client):
        assert redis_client.hincr("h", "views") == 1
        assert redis_client.hincr("h", "views", 4) == 5
        assert redis_client.hdecr("h", "views", 2) == 3


@pytest.mark.unit
class TestBitOperations:
    """Test bitmap operations."""

    def test_setbit_returns_previous(self, redis_client):
        assert redis_client.setbit("b", 7, True) is False
        assert redis_client.setbit("b", 7, "0") is True
        assert redis_client.getbit("b", 7) is False

    def test_text_bit_values(self, redis_client):
        redis_client.setbit("b", 1, "1")
        assert redis_client.getbit("b", 1) is True

    def test_bitcount_and_bitpos(self, redis_client):
        redis_client.setbit("b", 3, 1)
        redis_client.setbit("b", 9, 1)

        assert redis_client.bitcount("b") == 2
        assert redis_client.bitcount("b", 0, 0) == 1
        assert redis_client.bitpos("b", True) == 3

    def test_bitcount_needs_full_range(self, redis_client, fake_redis):
        """Test that a half-open byte range is rejected before reaching Redis."""
        redis_client.setbit("b", 3, 1)
        fake_redis.reset_calls()

        with pytest.raises(ValueError):
            redis_client.bitcount("b", 0)
        with pytest.raises(ValueError):
            redis_client.bitcount("b", end=1)
        assert fake_redis.calls == []

    def test_bitpos_end_needs_start(self, redis_client, fake_redis):
        redis_client.setbit("b", 3, 1)

        with pytest.raises(ValueError):
            redis_client.bitpos("b", True, end=1)
        assert redis_client.bitpos("b", True, 0) == 3

    def test_bitop_accepts_text_operation(self, redis_client):
        redis_client.setbit("x", 1, 1)
        redis_client.setbit("y", 2, 1)

        redis_client.bitop("or", "z", "x", "y")

        assert redis_client.bitcount("z") == 2

    def test_bitfield_sends_raw_command(self):
        """Test that BITFIELD arguments are forwarded verbatim."""
        raw = MagicMock()
        raw.execute_command.return_value = [1]
        client = CacheTestFactory.redis_client(raw)

        assert client.bitfield("bf", "INCRBY", "u8", 0, 1) == [1]
        raw.execute_command.assert_called_once_with("BITFIELD", "bf", "INCRBY", "u8", 0, 1)


@pytest.mark.unit
class TestBloomFilter:
    """Test bitmap-backed approximate membership."""

    def test_offsets_are_deterministic_and_in_range(self):
        bloom = BloomFilter(bits=1000, hashes=5)

        offsets = bloom.offsets("member")

        assert offsets == bloom.offsets("member")
        assert len(offsets) == 5
        assert all(0 <= offset < 1000 for offset in offsets)

    def test_invalid_sizing(self):
        with pytest.raises(ConfigurationError):
            BloomFilter(bits=0, hashes=3)

    def test_add_then_contains(self, redis_client):
        assert redis_client.bloom_contains("bf", "member1") is False
        assert redis_client.bloom_add("bf", "member1") is True
        assert redis_client.bloom_contains("bf", "member1") is True

    def test_second_add_reports_existing(self, redis_client):
        """Test that re-adding flips no bits."""
        redis_client.bloom_add("bf", "member1")
        assert redis_client.bloom_add("bf", "member1") is False

    def test_structured_members(self, redis_client):
        redis_client.bloom_add("bf", {"id": 1})
        assert redis_client.bloom_contains("bf", {"id": 1}) is True


@pytest.mark.unit
class TestHyperLogLogAndLocks:
    """Test HyperLogLog and distributed lock operations."""

    def test_pfadd_pfcount(self, redis_client):
        assert redis_client.pfadd("visitors", "a", "b") is True
        assert redis_client.pfadd("visitors", "a") is False
        assert redis_client.pfcount("visitors") == 2

    def test_lock_lifecycle(self, redis_client):
        """Test that only the owner can release."""
        assert redis_client.acquire_lock("lock:job", "worker-1", ttl=30) is True
        assert redis_client.acquire_lock("lock:job", "worker-2", ttl=30) is False
        assert redis_client.ttl("lock:job") == 30

        assert redis_client.release_lock("lock:job", "worker-2") is False
        assert redis_client.release_lock("lock:job", "worker-1") is True
        assert redis_client.acquire_lock("lock:job", "worker-2", ttl=30) is True


# =============================================================================
# Errors & health
# =============================================================================


@pytest.mark.unit
class TestErrorsAndHealth:
    """Test error propagation and health reporting."""

    def test_redis_errors_propagate_unchanged(self, redis_client, fake_redis):
        """Test that Redis failures are re-raised as-is."""
        fake_redis.unreachable = True

        with pytest.raises(RedisConnectionError):
            redis_client.get("k")

        with pytest.raises(RedisConnectionError):
            redis_client.bloom_add("bf", "x")

    def test_redis_errors_are_logged(self, redis_client, fake_redis):
        fake_redis.unreachable = True

        with patch(f"{MODULE}.logger") as logger:
            with pytest.raises(RedisConnectionError):
                redis_client.set("k", "v")

        assert logger.error.call_args.kwargs["stage"] == "REDIS.SET"
        assert logger.error.call_args.kwargs["key"] == "k"

    def test_ping(self, redis_client, fake_redis):
        assert redis_client.ping() is True
        fake_redis.unreachable = True
        assert redis_client.ping() is False

    def test_health_check_healthy(self, redis_client):
        health = redis_client.health_check()

        assert health["status"] == "healthy"
        assert health["topology"] == "standalone"
        assert health["ping_latency_ms"] is not None

    def test_health_check_unhealthy(self, redis_client, fake_redis):
        fake_redis.unreachable = True

        health = redis_client.health_check()

        assert health["status"] == "unhealthy"
        assert "error" in health
