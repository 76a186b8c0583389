"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .cache_factory import CacheTestFactory, FakeClock, FakePipeline, FakeRedis, shard_of

__all__ = ["CacheTestFactory", "FakeClock", "FakePipeline", "FakeRedis", "shard_of"]
