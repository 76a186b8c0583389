"""
Cache Module

Provides two-tier caching (L1 process-local + L2 Redis).
"""

from .cache_manager import (
    CacheContext,
    TieredCache,
    build_context,
    close_cache,
    get_cache,
    init_cache,
)
from .codec import Codec, JsonCodec
from .local_cache import (
    LocalCache,
    LocalCacheOptions,
    LRUMemoryCache,
    TTLMemoryCache,
    create_local_cache,
)
from .redis_client import (
    BloomFilter,
    ConnectionManager,
    RedisClient,
    ShardedRedis,
    create_redis_client,
)

__all__ = [
    "TieredCache",
    "CacheContext",
    "build_context",
    "get_cache",
    "init_cache",
    "close_cache",
    "Codec",
    "JsonCodec",
    "LocalCache",
    "LocalCacheOptions",
    "LRUMemoryCache",
    "TTLMemoryCache",
    "create_local_cache",
    "RedisClient",
    "ConnectionManager",
    "ShardedRedis",
    "BloomFilter",
    "create_redis_client",
]
