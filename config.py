"""
Configuration Management for TaskTrack
======================================

This module handles all application configuration using the Settings pattern
with Pydantic. This approach provides:

1. **Environment Variable Support**: Easy deployment configuration
2. **Validation**: Catches configuration errors at startup
3. **Type Safety**: IDE support and runtime validation
4. **Defaults**: Sensible defaults for development

Design Pattern: Singleton-like Settings
We use a cached function to ensure we only load settings once,
but still allow for easy testing with different configurations.
The settings object is handed to the app factory, which builds the
token authority and stores from it. Components never call
get_settings() themselves.
"""

import logging
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables are prefixed with TASKTRACK_ to avoid conflicts.
    Example: TASKTRACK_JWT_SECRET_KEY=change-me-please

    Priority order (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values defined here
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKTRACK_",  # All env vars start with TASKTRACK_
        env_file=".env",  # Load from .env file if present
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # =================================================================
    # Token Authority
    # =================================================================
    jwt_secret_key: str = Field(
        ...,
        min_length=16,
        description="""
        Server-held secret used to sign access tokens.

        Required - there is no default. Rotating this value invalidates
        every token issued so far (there is no revocation list).
        """
    )

    jwt_algorithm: str = Field(
        default="HS256",
        description="JWS algorithm used to sign tokens"
    )

    jwt_access_token_expire_minutes: int = Field(
        default=60,
        gt=0,
        description="Lifetime of an access token in minutes"
    )

    # =================================================================
    # Password Hashing
    # =================================================================
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="""
        bcrypt work factor (log2 of the iteration count).

        Each increment doubles hashing time. 12 is a reasonable production
        value; tests run with 4.
        """
    )

    # =================================================================
    # Storage
    # =================================================================
    storage_backend: Literal["redis", "memory"] = Field(
        default="redis",
        description="""
        Persistence backend for users and tasks.

        - redis: durable storage (production)
        - memory: process-local dicts, lost on restart (development/tests)
        """
    )

    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_password: Optional[str] = Field(default=None, description="Redis password")

    redis_key_prefix: str = Field(
        default="tasktrack",
        description="Namespace prepended to every Redis key"
    )

    redis_socket_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Socket connect/read timeout in seconds for Redis calls"
    )

    # =================================================================
    # API Server
    # =================================================================
    api_host: str = Field(default="127.0.0.1", description="Bind address for `tasktrack serve`")
    api_port: int = Field(default=8000, description="Bind port for `tasktrack serve`")

    api_debug: bool = Field(
        default=False,
        description="Include exception details in 500 responses. Never enable in production."
    )

    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed to call the API from a browser"
    )

    cors_allow_credentials: bool = Field(default=True, description="Allow credentialed CORS requests")

    # =================================================================
    # Rate Limiting
    # =================================================================
    rate_limit_enabled: bool = Field(default=True, description="Enable slowapi rate limiting")

    auth_rate_limit: str = Field(
        default="10/minute",
        description="Limit applied per client address to /register and /login"
    )

    # =================================================================
    # Logging Configuration
    # =================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Python logging format string"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached singleton).

    For testing, you can clear the cache:
        get_settings.cache_clear()

    Returns:
        Settings: Application settings instance
    """
    return Settings()


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a Settings instance with custom values for testing.

    Example:
        settings = get_settings_for_testing(
            storage_backend="memory",
            bcrypt_rounds=4
        )

    Args:
        **overrides: Setting values to override

    Returns:
        Settings: New Settings instance with overrides applied
    """
    return Settings(**overrides)


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level and format to the root logger."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format=settings.log_format
    )
