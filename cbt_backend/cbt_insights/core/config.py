from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENV: str = "local"
    APP_NAME: str = "cbt-insights-backend"

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FILE: str | None = None  # rotating file handler is added only when set

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    MAX_MESSAGES: int = 500
    MAX_MESSAGE_CHARS: int = 100_000

    # signature confidence at which a single message counts as a CBT diary entry
    CBT_DIARY_THRESHOLD: float = 0.7


@lru_cache
def get_settings() -> Settings:
    return Settings()
