"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_TRANSFORM_URL = (
    "https://ai.tu.qq.com/trpc.shadow_cv.ai_processor_cgi.AIProcessorCgi/Process"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    admin_token: str | None = None
    transform_url: str = DEFAULT_TRANSFORM_URL
    transform_busi_id: str = "ai_painting_anime_entry"
    transform_max_attempts: int = 100
    transform_timeout_seconds: float = 30.0
    rate_limit_delay_seconds: float = 3.0
    download_max_attempts: int = 100
    download_timeout_seconds: float = 10.0
    keep_files: bool = True
    files_dir: str = "files"
    poll_timeout_seconds: int = 30
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

