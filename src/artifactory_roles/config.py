"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Token generation command for documentation (split for line length)
TOKEN_GEN_CMD = (
    'python -c "import secrets;'
    'print(secrets.token_urlsafe(32))"'
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Artifactory Roles API"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Role record store
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/roles.db",
        description="PostgreSQL or SQLite connection URL for role records.",
    )
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Artifactory
    artifactory_url: str = "http://localhost:8082/artifactory"
    artifactory_bearer_token: str = ""
    artifactory_api_key: str = ""
    # v2 exposes repo and build scopes, v1 only repository scopes
    artifactory_api_version: Literal["v1", "v2"] = "v2"
    artifactory_timeout_seconds: float = 30.0
    artifactory_connect_timeout_seconds: float = 10.0
    artifactory_max_retries: int = Field(default=3, ge=1)
    artifactory_retry_delay_seconds: float = 1.0
    artifactory_name_prefix: str = Field(
        default="vault", min_length=1, max_length=16, pattern=r"^[a-z][a-z0-9_]*$"
    )

    # Role defaults (seconds)
    default_token_ttl: int = Field(default=600, ge=0)
    default_max_ttl: int = Field(default=3600, ge=0)

    # Repair of interrupted reconciliations
    repair_interval_minutes: int = Field(default=15, ge=1)
    repair_on_startup: bool = True

    # Security - static API token for the HTTP surface
    api_token: str = ""

    # Rate limiting settings (requests per minute)
    rate_limit_default: int = 100
    rate_limit_role_write: int = 30
    rate_limit_role_delete: int = 30

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings for security and consistency requirements."""
        # Security: Prevent debug mode in production
        if self.environment == "production" and self.debug:
            raise ValueError(
                "DEBUG mode cannot be enabled in production environment. "
                "This would expose API documentation and detailed error messages."
            )

        if not self.database_url.startswith(
            ("postgresql://", "postgres://", "postgresql+asyncpg://", "sqlite+aiosqlite://")
        ):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL URL or an sqlite+aiosqlite URL"
            )

        if self.environment == "production" and not self.api_token:
            raise ValueError(
                f"API_TOKEN must be set in production. Generate with: {TOKEN_GEN_CMD}"
            )

        if self.default_token_ttl > self.default_max_ttl:
            raise ValueError("DEFAULT_TOKEN_TTL cannot exceed DEFAULT_MAX_TTL")

        return self

    @property
    def async_database_url(self) -> str:
        """Get async database URL for SQLAlchemy.

        PostgreSQL URLs are rewritten for asyncpg, converting sslmode to ssl:
        - sslmode=disable -> ssl=disable
        - sslmode=require -> ssl=require
        """
        url = self.database_url
        if url.startswith("sqlite+aiosqlite://") or url.startswith("postgresql+asyncpg://"):
            return url
        url = url.replace("postgres://", "postgresql://", 1)
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        url = url.replace("sslmode=", "ssl=")
        return url

    @property
    def artifactory_base_url(self) -> str:
        """Get Artifactory base URL without trailing slash."""
        return self.artifactory_url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
