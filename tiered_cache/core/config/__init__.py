"""
Configuration Module

Centralized, type-safe configuration for the tiered cache.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Selector enums and default sizing

Environment Variables:
---------------------
```bash
CACHE_MEMORY_ENABLED=true
CACHE_MEMORY_TYPE=lru             # lru | ttl
CACHE_REDIS_TYPE=standalone       # standalone | sentinel | sharded | cluster
REDIS_HOST=localhost
REDIS_PORT=6379
REDIS_SHARD_URLS='["redis://shard-a:6379/0", "redis://shard-b:6379/0"]'
```
"""

from .constants import BitOperation, CacheTier, LocalCacheType, RedisTopology
from .settings import Settings, get_settings, reload_settings

__all__ = [
    "BitOperation",
    "CacheTier",
    "LocalCacheType",
    "RedisTopology",
    "Settings",
    "get_settings",
    "reload_settings",
]
