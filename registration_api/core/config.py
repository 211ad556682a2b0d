"""
Application configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

from typing import Optional

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Conference Registration API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # HTTP
    API_PREFIX: str = ""
    CORS_ORIGINS: list[str] = ["*"]

    # Storage
    STORAGE_BACKEND: str = "redis"  # redis, memory
    REDIS_URL: str = "redis://localhost:6379/0"
    REGISTRATION_KEY_PREFIX: str = "conference_registration:"

    # Admission
    EVENT_CAPACITY: int = 150
    ADMISSION_GUARD: str = "none"  # none, redis
    ADMISSION_LOCK_TIMEOUT: float = 10.0  # lock auto-expiry
    ADMISSION_LOCK_WAIT: float = 3.0  # max wait to acquire

    # Mailchimp
    MAILCHIMP_API_KEY: Optional[str] = None
    MAILCHIMP_SERVER_PREFIX: Optional[str] = None
    MAILCHIMP_AUDIENCE_ID: Optional[str] = None
    NEWSLETTER_TIMEOUT_SECONDS: float = 5.0

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }

    @property
    def mailchimp_configured(self) -> bool:
        return bool(
            self.MAILCHIMP_API_KEY
            and self.MAILCHIMP_SERVER_PREFIX
            and self.MAILCHIMP_AUDIENCE_ID
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
