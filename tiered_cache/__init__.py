"""
Tiered Cache

A process-local, bounded and expiring L1 cache in front of a shared Redis L2,
behind one API for standalone, sentinel, sharded and cluster deployments.

Usage:
    from tiered_cache import init_cache

    cache = init_cache()
    cache.set("u:1", {"name": "Ada"})
    cache.get("u:1")
"""

from tiered_cache.core.config import Settings, get_settings
from tiered_cache.core.exceptions import (
    CacheConnectionError,
    CacheDecodeError,
    CacheError,
    CacheKeyError,
    ConfigurationError,
    TieredCacheError,
)
from tiered_cache.infrastructure.cache import (
    CacheContext,
    TieredCache,
    build_context,
    close_cache,
    get_cache,
    init_cache,
)

__version__ = "1.0.0"

__all__ = [
    "TieredCache",
    "CacheContext",
    "build_context",
    "get_cache",
    "init_cache",
    "close_cache",
    "Settings",
    "get_settings",
    "TieredCacheError",
    "ConfigurationError",
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheDecodeError",
]
