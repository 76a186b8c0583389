"""
Exception Module

Structured exception hierarchy for the tiered cache.

Module Structure:
-----------------
- **base.py**: TieredCacheError base class + ConfigurationError
- **cache.py**: Cache-related exceptions (Redis, codec)

Usage:
------
```python
from tiered_cache.core.exceptions import CacheConnectionError, CacheDecodeError
```
"""

from tiered_cache.core.exceptions.base import ConfigurationError, TieredCacheError
from tiered_cache.core.exceptions.cache import (
    CacheConnectionError,
    CacheDecodeError,
    CacheError,
    CacheKeyError,
)

__all__ = [
    # Base
    "TieredCacheError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheDecodeError",
]
