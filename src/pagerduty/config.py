"""
PagerDuty Events API client configuration.
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_env_file() -> str:
    """
    Determine which .env file pydantic-settings reads, based on ENVIRONMENT.
    Nothing is copied into os.environ.
    """
    env = os.getenv("ENVIRONMENT", "development")
    mapping = {
        "production": ".env",
        "development": ".env.dev",
    }
    return mapping.get(env, ".env.dev")


class Settings(BaseSettings):
    """Configuration settings for the Events API clients."""

    model_config = SettingsConfigDict(
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        env_ignore_empty=True,
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "production"] = "development"

    # Events API endpoints
    PAGERDUTY_EVENTS_URL: str = "https://events.pagerduty.com/v2/enqueue"
    PAGERDUTY_CHANGE_EVENTS_URL: str = "https://events.pagerduty.com/v2/change/enqueue"

    # Sent when the caller does not supply its own User-Agent
    PAGERDUTY_USER_AGENT: str = "pagerduty-events-python/0.1.0"

    # Only applied to HTTP clients the library opens itself
    PAGERDUTY_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache()
def get_settings() -> Settings:
    """Get (and cache) the Settings instance."""
    return Settings()
