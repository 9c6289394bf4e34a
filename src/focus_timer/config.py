"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from focus_timer.domain.sessions import DEFAULT_PROJECT

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    default_project: str = DEFAULT_PROJECT
    stats_timezone: str = "UTC"
    max_page_size: int = 100
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
