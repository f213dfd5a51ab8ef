"""Centralized configuration management for the Image Optimizer Service.

This module provides a single source of truth for all configuration values,
using pydantic-settings for environment variable loading and validation.

Design Principles:
    - Environment Variables: All settings can be overridden via environment variables
    - Sensible Defaults: All settings have production-ready defaults
    - Validation: Pydantic validates all values at load time
    - Singleton Pattern: Cached settings instance via lru_cache

Configuration Sections:
    - APIConfig: FastAPI server and transport policy
    - CacheConfig: Cache backend selection and its connection parameters
    - FetchConfig: Upstream download limits

Environment Variable Prefixes:
    - API_*: FastAPI server settings
    - CACHE_*: Cache backend settings
    - FETCH_*: Source download settings

Usage:
    from img_optimizer.core.config import settings

    cache_dir = settings.cache.directory
    timeout = settings.fetch.timeout_seconds
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from img_optimizer.domain.value_objects import MAX_IMAGE_SIZE

DEFAULT_USER_AGENT = "Plasmic-Image-Optimizer/1.0"


class APIConfig(BaseSettings):
    """FastAPI server configuration.

    Attributes:
        host: Bind address. Default: "0.0.0.0".
        port: Listen port. Default: 3000.
        log_level: Root logging level.
        title: OpenAPI title.
        version: API version reported by the service.
        cors_origins: Comma-separated allowed origins, or "*".
        svg_redirect: Answer ``.svg`` sources with a 302 to the source instead
            of the pipeline's IMG_004 error.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0", description="API server host")
    port: int = Field(default=3000, ge=1, le=65535, description="API server port")
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", description="Logging level"
    )
    title: str = Field(default="Image Optimizer Service", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: str = Field(default="*", description="Allowed CORS origins")
    svg_redirect: bool = Field(
        default=True, description="Redirect .svg sources instead of returning IMG_004"
    )

    @property
    def allow_origins(self) -> list[str]:
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


class CacheConfig(BaseSettings):
    """Cache backend configuration.

    Attributes:
        backend: "filesystem" (directory of key-named files), "redis" (remote
            KV with expiry) or "memory" (in-process TTL cache).
        directory: Root directory for the filesystem backend.
        redis_url: Connection URL for the redis backend.
        ttl_seconds: Expiry applied at write time by the redis and memory backends.
        memory_max_size: Entry count bound for the memory backend.
        single_flight: Serialise concurrent misses on the same key.
    """

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: Literal["filesystem", "redis", "memory"] = Field(
        default="filesystem", description="Cache backend"
    )
    directory: str = Field(default="cache", description="Filesystem cache directory")
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL")
    ttl_seconds: int = Field(
        default=24 * 60 * 60, ge=1, description="Entry expiry (seconds)"
    )
    memory_max_size: int = Field(
        default=1000, ge=1, le=100000, description="Max in-memory entries"
    )
    single_flight: bool = Field(
        default=False, description="Coalesce concurrent misses per cache key"
    )

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        if not v.startswith(("redis://", "rediss://", "unix://")):
            msg = "redis_url must start with redis://, rediss:// or unix://"
            raise ValueError(msg)
        return v


class FetchConfig(BaseSettings):
    """Source download configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FETCH_",
        case_sensitive=False,
        extra="ignore",
    )

    timeout_seconds: float = Field(
        default=30.0, gt=0.0, le=600.0, description="Total download timeout (seconds)"
    )
    max_bytes: int = Field(
        default=MAX_IMAGE_SIZE, ge=1, description="Max downloaded source size in bytes"
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header")


class Settings(BaseSettings):
    """Root settings class containing all configuration sections.

    Configuration is loaded from:
        1. Environment variables (with appropriate prefixes)
        2. .env file (if present in the working directory)
        3. Default values (if not set)

    Note:
        Settings are loaded once and cached. Changes to environment variables
        require an application restart to take effect.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api: APIConfig = Field(default_factory=APIConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    @classmethod
    @lru_cache(maxsize=1)
    def get_settings(cls) -> Settings:
        """Get cached settings instance (singleton pattern)."""
        return cls()


# Global settings instance
settings = Settings.get_settings()

__all__ = [
    "DEFAULT_USER_AGENT",
    "APIConfig",
    "CacheConfig",
    "FetchConfig",
    "Settings",
    "settings",
]
