"""
Core Module

Foundational components: configuration, logging and exceptions.
"""

from .exceptions import (
    CacheConnectionError,
    CacheDecodeError,
    CacheError,
    CacheKeyError,
    ConfigurationError,
    TieredCacheError,
)
from .logging import get_logger, log_stage, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "log_stage",
    "TieredCacheError",
    "ConfigurationError",
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheDecodeError",
]
