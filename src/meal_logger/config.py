"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from meal_logger.services.timezones import DEFAULT_TIMEZONE

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Credentials are optional here; a missing one surfaces as a
    ConfigurationError on the request that needs it.
    """

    supabase_url: str | None = None
    supabase_service_key: str | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.3
    default_timezone: str = DEFAULT_TIMEZONE
    meal_logs_table: str = "meal_logs"
    logs_limit: int = 200
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
