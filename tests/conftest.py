"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures import CacheTestFactory, FakeClock, FakeRedis  # noqa: E402

# ============================================================================
# Mock Configuration Fixtures
# ============================================================================


@pytest.fixture
def mock_settings():
    """
    Mock settings for testing.

    Returns a MagicMock with the sections read by build_context().
    """
    from tiered_cache.core.config.settings import Settings

    settings = MagicMock(spec=Settings)

    settings.memory.CACHE_MEMORY_ENABLED = True
    settings.memory.CACHE_MEMORY_TYPE = "lru"
    settings.memory.CACHE_MEMORY_INITIAL_CAPACITY = 10
    settings.memory.CACHE_MEMORY_MAX_CAPACITY = 100
    settings.memory.CACHE_MEMORY_EXPIRE_AFTER_WRITE = 60
    settings.memory.CACHE_MEMORY_EXPIRE_AFTER_ACCESS = 60

    settings.redis.CACHE_REDIS_TYPE = "standalone"
    settings.bloom.CACHE_BLOOM_BITS = 4096
    settings.bloom.CACHE_BLOOM_HASHES = 4

    return settings


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop the shared settings and cache between tests."""
    import tiered_cache.core.config.settings as settings_module
    import tiered_cache.infrastructure.cache.cache_manager as cache_module

    settings_module._settings = None
    cache_module._cache = None
    yield
    settings_module._settings = None
    cache_module._cache = None


# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if real Redis should be used for integration tests."""
    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")


# ============================================================================
# In-Memory Infrastructure Fixtures
# ============================================================================


@pytest.fixture
def clock():
    """Manually advanced clock for expiry tests."""
    return FakeClock()


@pytest.fixture
def fake_redis():
    """
    In-memory Redis stand-in.

    Records every command in fake_redis.calls; set fake_redis.unreachable
    to make every command raise redis ConnectionError.
    """
    return FakeRedis()


@pytest.fixture
def redis_client(fake_redis):
    """RedisClient attached to fake_redis."""
    return CacheTestFactory.redis_client(fake_redis)


@pytest.fixture
def tiered_cache(redis_client, clock):
    """TieredCache with an LRU L1 (manual clock) over the in-memory Redis."""
    return CacheTestFactory.tiered_cache(
        redis_client, "lru", clock=clock, max_capacity=100, expire_after_write=60, expire_after_access=60
    )


@pytest.fixture
def bypass_cache(redis_client):
    """TieredCache with the L1 tier disabled."""
    return CacheTestFactory.tiered_cache(redis_client, None)
