"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Override via environment variables (prefixed with PMTAX_) or .env file.

    Examples:
        PMTAX_LOG_LEVEL=DEBUG
        PMTAX_LOG_FORMAT=json
        PMTAX_MAX_CONCURRENT_LOOKUPS=10
    """

    model_config = SettingsConfigDict(
        env_prefix="PMTAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: Environment = Environment.DEVELOPMENT

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Polymarket endpoints
    data_api_url: str = "https://data-api.polymarket.com"
    clob_api_url: str = "https://clob.polymarket.com"
    request_timeout: float = Field(default=30.0, gt=0)

    # Trade history pagination
    page_size: int = Field(default=500, ge=1, le=500)
    max_offset: int = Field(
        default=50000, ge=0, description="Safety limit on activity pagination"
    )

    # Market resolution lookups
    market_batch_size: int = Field(default=5, ge=1)
    max_concurrent_lookups: int = Field(default=5, ge=1, le=32)
    batch_pause_seconds: float = Field(default=0.5, ge=0)

    # Form 8949 rendering
    description_max_length: int = Field(default=55, ge=10)

    @field_validator("log_format", mode="before")
    @classmethod
    def set_log_format_from_environment(cls, v: str, info) -> str:
        """Default to JSON logging in production."""
        if v is None:
            env = info.data.get("environment")
            if env == Environment.PRODUCTION:
                return "json"
        return v or "console"

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
