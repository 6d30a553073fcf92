"""Application configuration loaded from environment variables."""
import os
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from voice_analysis.providers import ASSEMBLYAI_BASE_URL, DEFAULT_COMPLETION_MODEL, GROQ_BASE_URL


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Storage; ":memory:" selects the in-process store
    database_path: str = os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
        "moods.db",
    )

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8082
    environment: str = "development"
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Providers
    assemblyai_base_url: str = ASSEMBLYAI_BASE_URL
    assemblyai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MOODTRACK_ASSEMBLYAI_API_KEY", "ASSEMBLYAI_API_KEY"),
    )
    groq_base_url: str = GROQ_BASE_URL
    groq_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MOODTRACK_GROQ_API_KEY", "GROQ_API_KEY"),
    )
    tone_model: str = DEFAULT_COMPLETION_MODEL
    chat_model: str = "llama-3.3-70b-versatile"
    provider_timeout: float = 30.0

    # Transcription polling
    poll_interval_seconds: float = Field(default=3.0, ge=0)
    poll_max_attempts: int = Field(default=40, ge=1)

    # Analytics
    default_lookback_days: int = Field(default=30, ge=1)

    class Config:
        env_prefix = "MOODTRACK_"
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
