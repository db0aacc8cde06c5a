from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings, read from the environment or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credentials
    gemini_api_key: SecretStr | None = None

    # API endpoint
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Timeouts (seconds)
    request_timeout: float = 300.0

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings; the environment is read once."""
    return Settings()
