"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"

    # Monitoring
    SENTRY_DSN: str = ""

    # Fireflies GraphQL API (server-only secret, never exposed to clients)
    FIREFLIES_API_KEY: str = ""
    FIREFLIES_API_URL: str = "https://api.fireflies.ai/graphql"
    FIREFLIES_TIMEOUT: float = 30.0

    # Public URL used when building transcript links
    BASE_URL: str = "http://localhost:3001"

    # RSS channel
    FEED_TITLE: str = "Mars Project Transcripts"
    FEED_DESCRIPTION: str = "Latest transcripts from Mars Project meetings"
    FEED_LANGUAGE: str = "en-us"
    FEED_AUTHOR: str = "Mars Project Team"
    FEED_CATEGORY: str = "Meeting Transcript"
    FEED_ITEM_LIMIT: int = 10
    FEED_CACHE_MAX_AGE: int = 3600

    @property
    def fireflies_configured(self) -> bool:
        """True when an API key is present (whitespace-only counts as missing)."""
        return bool(self.FIREFLIES_API_KEY.strip())

    def get_cors_origins(self) -> list[str]:
        """Return the CORS allow-list parsed from CORS_ALLOWED_ORIGINS."""
        if self.CORS_ALLOWED_ORIGINS == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
