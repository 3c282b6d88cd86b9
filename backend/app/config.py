"""Application configuration using pydantic-settings."""

from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase API Keys
    supabase_url: str
    supabase_secret_key: str  # Server-side key for backend operations
    supabase_publishable_key: str  # Anon/publishable key for client requests

    # App
    app_name: str = "Allocatr"
    app_env: str = "development"
    debug: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # API
    api_v1_prefix: str = "/app/v1"

    # Local calendar used to turn stored timestamps into transaction dates
    timezone: str = "UTC"

    # AI (expense categorization and monthly summary reports)
    anthropic_api_key: str | None = None
    claude_model: str = "claude-3-5-sonnet-20241022"
    ai_max_tokens: int = 2000

    # Analytics
    default_analytics_window_days: int = 7

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
