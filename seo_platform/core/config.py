"""Application configuration loaded from environment variables.

All configuration is via environment variables (or a local .env file).
No hardcoded URLs, ports, or credentials.
"""

from functools import lru_cache

from pydantic import Field, PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Hoxton SEO Platform")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")
    api_prefix: str = Field(default="/api", description="Prefix for all API routes")

    # Server
    port: int = Field(default=8000, description="Port to bind to")
    host: str = Field(default="0.0.0.0", description="Host to bind to")

    # Database
    database_url: PostgresDsn = Field(
        ...,
        description="PostgreSQL connection string",
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size")
    db_max_overflow: int = Field(default=10, description="Max overflow connections")
    db_pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    db_slow_query_threshold_ms: int = Field(
        default=100, description="Threshold for slow transaction warnings (ms)"
    )

    # Shared-secret auth for every non-health route
    api_key: str | None = Field(
        default=None,
        description="Value expected in the x-api-key header",
    )

    # DataForSEO
    dataforseo_api_login: str | None = Field(
        default=None,
        description="DataForSEO API login (email)",
    )
    dataforseo_api_password: str | None = Field(
        default=None,
        description="DataForSEO API password",
    )
    dataforseo_language_code: str = Field(
        default="en", description="Language code sent with every DataForSEO task"
    )
    serp_depth: int = Field(
        default=100, description="Number of SERP results requested per keyword"
    )

    # Enrichment
    primary_domain: str = Field(
        default="hoxtonwealth.com",
        description="First-party domain flagged in SERP results",
    )
    default_country: str = Field(
        default="UK", description="Country used when an inline keyword has none"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format: json or text")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()  # type: ignore[call-arg]
