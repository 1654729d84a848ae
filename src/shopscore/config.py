"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shopscore.scoring.models import ScoringConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Scoring defaults can be overridden per field, e.g.
    ``SHOPSCORE_SCORING__THRESHOLDS__MIN_REVIEW_COUNT=5``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SHOPSCORE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "shopscore"
    app_description: str = "Marketplace product scoring and ranking API"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Frontend
    frontend_url: str = "http://localhost:5173"

    # API
    api_prefix: str = "/api"

    # Scoring defaults
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
