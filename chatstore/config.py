from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Message store settings loaded from environment variables.
    Every setting has a default so a store is always constructible.
    """

    # env_file is only used as fallback, env vars take precedence
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    # Storage Configuration
    MESSAGES_FILE: str = "messages.json"

    # Indentation of the saved JSON array, 0 writes compact output
    JSON_INDENT: int = 2

    # Logging Configuration
    LOG_LEVEL: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every store construction.
    """
    return Settings()
