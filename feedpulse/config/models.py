"""Configuration models."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("feedpulse", description="Database name")
    user: str = Field("feedpulse", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")
    min_pool_size: int = Field(1, ge=1, le=50)
    max_pool_size: int = Field(10, ge=1, le=100)


class IngestionConfig(BaseModel):
    """Feed fetching and item normalization settings."""

    timeout_seconds: float = Field(5.0, description="HTTP timeout per feed", gt=0, le=120)
    user_agent: str = Field(
        "feedpulse/1.0 (+https://github.com/feedpulse/feedpulse)",
        description="User-Agent sent with feed requests",
    )
    supported_languages: List[str] = Field(
        default_factory=lambda: ["fr", "en", "es", "de", "it"],
        description="Languages an article may be tagged with",
    )
    default_language: str = Field("fr", description="Language used when a feed declares none")
    snippet_length: int = Field(300, description="Max characters kept in content snippets", ge=20)
    max_concurrent_items: Optional[int] = Field(
        None,
        description="Cap on concurrently normalized items per feed (unbounded when unset)",
        ge=1,
    )

    @field_validator("supported_languages")
    @classmethod
    def normalize_languages(cls, v: List[str]) -> List[str]:
        """Lowercase language codes."""
        return [code.strip().lower() for code in v if code.strip()]

    @field_validator("default_language")
    @classmethod
    def validate_default_language(cls, v: str, info) -> str:
        """Default language must be one of the supported ones."""
        v = v.strip().lower()
        supported = info.data.get("supported_languages")
        if supported and v not in supported:
            raise ValueError(f"default_language '{v}' is not in supported_languages")
        return v


class SchedulerConfig(BaseModel):
    """Scheduled ingestion settings."""

    interval_minutes: int = Field(30, description="Minutes between ingestion cycles", ge=1, le=1440)
    run_on_start: bool = Field(True, description="Run one cycle as soon as the scheduler starts")
    poll_seconds: float = Field(5.0, description="How often pending jobs are checked", gt=0)


class RetentionConfig(BaseModel):
    """Article retention settings."""

    days: int = Field(7, description="Articles older than this are pruned", ge=1)


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field("INFO", description="Root log level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level name."""
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v


class ConfigModel(BaseModel):
    """Main configuration model."""

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class SourceConfig(BaseModel):
    """Source configuration from sources.yaml."""

    name: str = Field(..., description="Source name")
    url: str = Field(..., description="Website URL")
    rss_url: str = Field(..., description="RSS/Atom feed URL")
    favicon_url: Optional[str] = Field(None, description="Favicon shown next to articles")
    description: Optional[str] = Field(None, description="Short description of the outlet")
    orientation: List[str] = Field(default_factory=list, description="Editorial orientation tags")
    categories: List[str] = Field(default_factory=list, description="Topic categories")
    enabled: bool = Field(True, description="Whether source is enabled")

    @field_validator("url", "rss_url")
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        """Feed and site URLs must be http(s)."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got {v!r}")
        return v
