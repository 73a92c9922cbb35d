"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    storage_backend: str = "file"
    data_dir: Path = Path.home() / ".food-diary"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
