"""Configuration management for the Copilot auth service.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once at
application startup, is immutable during runtime, and is passed explicitly
to the components that need it.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables (prefixed with
    ``COPILOT_AUTH_``) and .env files. All configuration values are
    validated at startup; a missing or short signing secret prevents
    the service from starting.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COPILOT_AUTH_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application Settings
    app_name: str = "Livestream Copilot Auth"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    app_url: str = "http://localhost:5173"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3123
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./data/copilot_auth.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Token Signing Settings
    jwt_secret: str = Field(
        ...,
        min_length=32,
        description="Secret used to sign access tokens",
    )
    jwt_refresh_secret: str = Field(
        ...,
        min_length=32,
        description="Secret used to sign refresh tokens (must differ from jwt_secret)",
    )
    jwt_access_expiry: int = Field(default=900, gt=0, description="Access token lifetime in seconds")
    jwt_refresh_expiry: int = Field(
        default=604800, gt=0, description="Refresh token lifetime in seconds"
    )
    refresh_token_rotation: bool = True

    # API Key Settings
    api_key_env: Literal["live", "test"] = "test"

    # Single-use Token Settings
    verification_token_expiry: int = 24 * 60 * 60  # 24 hours
    password_reset_token_expiry: int = 15 * 60  # 15 minutes

    # Credential Hashing Settings (argon2id)
    password_hash_time_cost: int = Field(default=3, ge=1)
    password_hash_memory_cost: int = Field(default=65536, ge=8)  # KiB
    password_hash_parallelism: int = Field(default=4, ge=1)
    token_hash_time_cost: int = Field(default=2, ge=1)
    token_hash_memory_cost: int = Field(default=8192, ge=8)  # KiB

    # Breached Password Check Settings
    breach_check_enabled: bool = True
    breach_check_url: str = "https://api.pwnedpasswords.com/range"
    breach_check_timeout: float = 3.0

    # Email Settings
    email_provider: Literal["console", "smtp"] = "console"
    email_from_address: str = "no-reply@livestream-copilot.local"
    email_from_name: str = "Livestream Copilot"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_timeout: int = 10

    # Rate Limiting Settings
    rate_limit_enabled: bool = True

    # CORS Settings
    cors_origins: list[str] = Field(default=["http://localhost:5173", "http://localhost:3000"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self) -> "Settings":
        """Ensure access and refresh tokens are signed with different secrets."""
        if self.jwt_secret == self.jwt_refresh_secret:
            raise ValueError("jwt_secret and jwt_refresh_secret must be different")
        return self

    @model_validator(mode="after")
    def validate_smtp_settings(self) -> "Settings":
        """Require an SMTP host when the SMTP provider is selected."""
        if self.email_provider == "smtp" and not self.smtp_host:
            raise ValueError("smtp_host is required when email_provider is 'smtp'")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get the cached application settings.

    Settings are built on first access and reused for the lifetime of the
    process.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
