"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the tiered cache.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for configuration selectors
"""

from enum import Enum

# ============================================================================
# Cache Tiers
# ============================================================================


class CacheTier(str, Enum):
    """
    Multi-tier caching levels.

    L1: Process-local bounded cache (fastest, < 1ms)
    L2: Redis shared cache (authoritative, 1-5ms)
    """

    L1 = "l1"
    L2 = "l2"


# ============================================================================
# Configuration Selectors
# ============================================================================


class LocalCacheType(str, Enum):
    """
    Interchangeable L1 implementations.

    LRU: OrderedDict-based LRU with write/access expiry
    TTL: cachetools.TTLCache with access expiry layered on top
    """

    LRU = "lru"
    TTL = "ttl"


class RedisTopology(str, Enum):
    """
    Supported Redis deployments behind the L2 tier.
    """

    STANDALONE = "standalone"
    SENTINEL = "sentinel"
    SHARDED = "sharded"
    CLUSTER = "cluster"


class BitOperation(str, Enum):
    """
    BITOP operations.
    """

    AND = "AND"
    OR = "OR"
    XOR = "XOR"
    NOT = "NOT"


# ============================================================================
# Defaults
# ============================================================================

# L1 sizing and expiry
L1_INITIAL_CAPACITY = 1000
L1_MAX_CAPACITY = 50_000
L1_EXPIRE_AFTER_WRITE = 300  # seconds
L1_EXPIRE_AFTER_ACCESS = 300  # seconds

# Bloom filter over a Redis bitmap
BLOOM_DEFAULT_BITS = 1 << 24  # 16 Mbit = 2 MiB per filter key
BLOOM_DEFAULT_HASHES = 6

# Redis
REDIS_DEFAULT_PORT = 6379
REDIS_DEFAULT_SENTINEL_MASTER = "mymaster"

# Lua compare-and-delete used to release a distributed lock only when owned
RELEASE_LOCK_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""
