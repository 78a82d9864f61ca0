"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    log_level: str = "INFO"
    timezone: str = "UTC"
    default_weekly_target: float = 20.0
    default_monthly_target: float = 80.0
    monthly_bucket_target: float = 40.0
    welcome_points: int = 100
    recent_activity_limit: int = 10
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
