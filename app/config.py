"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the service's documented behavior

Collaborators:
  - main.py: builds the application from a Settings instance
  - container.py: builds the database pool, session manager and rate limiter
  - scripts/create_admin.py: reads database_url

Constraints:
  - No business logic, configuration only

Notes:
  - DATABASE_URL/DB_URL and APP_ENV/NODE_ENV are accepted interchangeably
  - Singleton via lru_cache, but create_app() also accepts an explicit instance
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_SECRETS = {"dev-session-secret", "changeme", "change-me", "secret", "password"}
_SESSION_BACKENDS = {"memory", "redis"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string
        app_env: Application environment (development/production)
        host: Interface uvicorn binds to
        port: Listening port (default: 3001)
        log_level: Root level for the JSON logger
        auth_enabled: Mount login/session routes and guard employee reads
        session_secret: Secret used to sign session cookies
        session_cookie_name: Cookie carrying the signed session token
        session_ttl_seconds: Session lifetime in the store and cookie Max-Age
        session_backend: memory or redis
        redis_url: Redis connection string (required for the redis backend)
        db_pool_min_size: Connections kept open when idle
        db_pool_max_size: Maximum concurrent connections (default: 1000)
        db_pool_max_idle_seconds: Close idle connections after this long
        db_pool_timeout_seconds: Fail a checkout after waiting this long
        db_pool_close_timeout_seconds: Grace period for in-flight work on close
        db_pool_reconnect_timeout_seconds: Give up reconnecting after this long
        rate_limit_max_requests: Requests allowed per window (0 disables)
        rate_limit_window_seconds: Window length (default: 15 minutes)
        rate_limit_trust_proxy: Use X-Forwarded-For as the client address
    """

    # Required (no defaults)
    database_url: str = Field(
        validation_alias=AliasChoices("DATABASE_URL", "DB_URL"),
    )

    # Environment
    app_env: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    # Security - Sessions
    auth_enabled: bool = True
    session_secret: str = "dev-session-secret"
    session_cookie_name: str = "sid"
    session_ttl_seconds: int = 24 * 60 * 60
    session_backend: str = "memory"
    redis_url: str = ""

    # Database - Connection Pool
    db_pool_min_size: int = 1
    db_pool_max_size: int = 1000
    db_pool_max_idle_seconds: float = 60.0
    db_pool_timeout_seconds: float = 2.0
    db_pool_close_timeout_seconds: float = 5.0
    db_pool_reconnect_timeout_seconds: float = 300.0

    # Security - Rate Limiting
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: float = 15 * 60
    rate_limit_trust_proxy: bool = False

    @field_validator("db_pool_max_size")
    @classmethod
    def pool_max_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("db_pool_max_size must be greater than 0")
        return v

    @field_validator("db_pool_min_size")
    @classmethod
    def pool_min_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("db_pool_min_size must be >= 0")
        return v

    @field_validator("session_ttl_seconds")
    @classmethod
    def session_ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("session_ttl_seconds must be greater than 0")
        return v

    @field_validator("rate_limit_window_seconds")
    @classmethod
    def rate_limit_window_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("rate_limit_window_seconds must be greater than 0")
        return v

    @field_validator("session_backend")
    @classmethod
    def session_backend_valid(cls, v: str) -> str:
        backend = (v or "memory").strip().lower()
        if backend not in _SESSION_BACKENDS:
            raise ValueError("session_backend must be memory or redis")
        return backend

    @model_validator(mode="after")
    def validate_pool_bounds(self):
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError(
                f"db_pool_min_size ({self.db_pool_min_size}) must not exceed "
                f"db_pool_max_size ({self.db_pool_max_size})"
            )
        return self

    @model_validator(mode="after")
    def validate_session_backend(self):
        if self.session_backend == "redis" and not self.redis_url.strip():
            raise ValueError("REDIS_URL is required when SESSION_BACKEND=redis")
        return self

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        secret = (self.session_secret or "").strip()
        if not secret or secret in _INSECURE_SECRETS:
            raise ValueError(
                "SESSION_SECRET must be set to a strong, non-default value in production"
            )
        if len(secret) < 32:
            raise ValueError("SESSION_SECRET must be at least 32 characters in production")
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()
