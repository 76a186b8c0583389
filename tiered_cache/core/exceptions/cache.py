"""
Cache-Related Exceptions

All exceptions related to caching operations (Redis, in-memory cache, codec).
"""

from tiered_cache.core.exceptions.base import TieredCacheError


class CacheError(TieredCacheError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to the remote tier (Redis).

    Common causes:
    - Redis server, sentinel or cluster node is down
    - Network connectivity issues
    - Incorrect host/port configuration
    - Authentication failure
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a key cannot be served by the configured topology.

    Common causes:
    - Multi-key command spanning several shards
    """
    pass


class CacheDecodeError(CacheError):
    """
    Raised when stored text does not match the requested type.

    Never treated as a cache miss: the caller asked for a type the stored
    value cannot be converted to.
    """
    pass
