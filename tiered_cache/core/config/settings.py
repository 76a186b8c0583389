"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
tiered cache. Configuration is resolved once at startup; nothing here is
re-read at runtime.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Selectors (CACHE_MEMORY_TYPE, CACHE_REDIS_TYPE) are plain strings on purpose:
an unknown L1 selector disables the L1 tier instead of failing validation,
and an unknown Redis selector is reported by the cache factory as a
ConfigurationError.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tiered_cache.core.config.constants import (
    BLOOM_DEFAULT_BITS,
    BLOOM_DEFAULT_HASHES,
    L1_EXPIRE_AFTER_ACCESS,
    L1_EXPIRE_AFTER_WRITE,
    L1_INITIAL_CAPACITY,
    L1_MAX_CAPACITY,
    REDIS_DEFAULT_PORT,
    REDIS_DEFAULT_SENTINEL_MASTER,
)


class MemoryCacheSettings(BaseSettings):
    """
    L1 (process-local) cache configuration.

    STAGE-0.1: L1 sizing and expiry
    """

    CACHE_MEMORY_ENABLED: bool = Field(default=False, description="Enable the L1 tier")
    CACHE_MEMORY_TYPE: str | None = Field(default=None, description="L1 implementation: lru | ttl")
    CACHE_MEMORY_INITIAL_CAPACITY: int = Field(default=L1_INITIAL_CAPACITY, ge=0, description="Initial capacity hint")
    CACHE_MEMORY_MAX_CAPACITY: int = Field(default=L1_MAX_CAPACITY, gt=0, description="Maximum L1 entries")
    CACHE_MEMORY_EXPIRE_AFTER_WRITE: int = Field(default=L1_EXPIRE_AFTER_WRITE, gt=0, description="Seconds after write")
    CACHE_MEMORY_EXPIRE_AFTER_ACCESS: int = Field(default=L1_EXPIRE_AFTER_ACCESS, gt=0, description="Seconds after access")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class RedisSettings(BaseSettings):
    """
    Redis (L2) configuration for every supported topology.

    STAGE-0.2: Redis connection configuration
    """

    CACHE_REDIS_TYPE: str | None = Field(
        default=None, description="Topology: standalone | sentinel | sharded | cluster"
    )

    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=REDIS_DEFAULT_PORT, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")

    REDIS_MAX_CONNECTIONS: int = Field(default=200, description="Maximum pooled connections per node")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    REDIS_SENTINEL_NODES: list[str] = Field(default_factory=list, description="Sentinels as host:port")
    REDIS_SENTINEL_MASTER: str = Field(default=REDIS_DEFAULT_SENTINEL_MASTER, description="Sentinel master name")
    REDIS_SHARD_URLS: list[str] = Field(default_factory=list, description="One redis:// URL per shard")
    REDIS_CLUSTER_NODES: list[str] = Field(default_factory=list, description="Cluster startup nodes as host:port")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class BloomFilterSettings(BaseSettings):
    """
    Bloom filter sizing for the bitmap-backed approximate-membership operations.
    """

    CACHE_BLOOM_BITS: int = Field(default=BLOOM_DEFAULT_BITS, gt=0, description="Bits per filter key")
    CACHE_BLOOM_HASHES: int = Field(default=BLOOM_DEFAULT_HASHES, gt=0, description="Hash functions per value")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from tiered_cache.core.config import get_settings

        settings = get_settings()
        redis_host = settings.redis.REDIS_HOST
        l1_enabled = settings.memory.CACHE_MEMORY_ENABLED
    """

    # L1 settings
    CACHE_MEMORY_ENABLED: bool = Field(default=False, description="Enable the L1 tier")
    CACHE_MEMORY_TYPE: str | None = Field(default=None, description="L1 implementation: lru | ttl")
    CACHE_MEMORY_INITIAL_CAPACITY: int = Field(default=L1_INITIAL_CAPACITY, ge=0, description="Initial capacity hint")
    CACHE_MEMORY_MAX_CAPACITY: int = Field(default=L1_MAX_CAPACITY, gt=0, description="Maximum L1 entries")
    CACHE_MEMORY_EXPIRE_AFTER_WRITE: int = Field(default=L1_EXPIRE_AFTER_WRITE, gt=0, description="Seconds after write")
    CACHE_MEMORY_EXPIRE_AFTER_ACCESS: int = Field(default=L1_EXPIRE_AFTER_ACCESS, gt=0, description="Seconds after access")

    # Redis settings
    CACHE_REDIS_TYPE: str | None = Field(
        default=None, description="Topology: standalone | sentinel | sharded | cluster"
    )
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=REDIS_DEFAULT_PORT, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=200, description="Maximum pooled connections per node")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")
    REDIS_SENTINEL_NODES: list[str] = Field(default_factory=list, description="Sentinels as host:port")
    REDIS_SENTINEL_MASTER: str = Field(default=REDIS_DEFAULT_SENTINEL_MASTER, description="Sentinel master name")
    REDIS_SHARD_URLS: list[str] = Field(default_factory=list, description="One redis:// URL per shard")
    REDIS_CLUSTER_NODES: list[str] = Field(default_factory=list, description="Cluster startup nodes as host:port")

    # Bloom filter settings
    CACHE_BLOOM_BITS: int = Field(default=BLOOM_DEFAULT_BITS, gt=0, description="Bits per filter key")
    CACHE_BLOOM_HASHES: int = Field(default=BLOOM_DEFAULT_HASHES, gt=0, description="Hash functions per value")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @property
    def memory(self) -> "MemoryCacheSettings":
        """Get L1 settings."""
        return MemoryCacheSettings(
            CACHE_MEMORY_ENABLED=self.CACHE_MEMORY_ENABLED,
            CACHE_MEMORY_TYPE=self.CACHE_MEMORY_TYPE,
            CACHE_MEMORY_INITIAL_CAPACITY=self.CACHE_MEMORY_INITIAL_CAPACITY,
            CACHE_MEMORY_MAX_CAPACITY=self.CACHE_MEMORY_MAX_CAPACITY,
            CACHE_MEMORY_EXPIRE_AFTER_WRITE=self.CACHE_MEMORY_EXPIRE_AFTER_WRITE,
            CACHE_MEMORY_EXPIRE_AFTER_ACCESS=self.CACHE_MEMORY_EXPIRE_AFTER_ACCESS,
        )

    @property
    def redis(self) -> "RedisSettings":
        """Get Redis settings."""
        return RedisSettings(
            CACHE_REDIS_TYPE=self.CACHE_REDIS_TYPE,
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
            REDIS_SENTINEL_NODES=self.REDIS_SENTINEL_NODES,
            REDIS_SENTINEL_MASTER=self.REDIS_SENTINEL_MASTER,
            REDIS_SHARD_URLS=self.REDIS_SHARD_URLS,
            REDIS_CLUSTER_NODES=self.REDIS_CLUSTER_NODES,
        )

    @property
    def bloom(self) -> "BloomFilterSettings":
        """Get bloom filter settings."""
        return BloomFilterSettings(
            CACHE_BLOOM_BITS=self.CACHE_BLOOM_BITS,
            CACHE_BLOOM_HASHES=self.CACHE_BLOOM_HASHES,
        )

    @property
    def logging(self) -> "LoggingSettings":
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    STAGE-0.3: Settings initialization

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
