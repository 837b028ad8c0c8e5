from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App environment
    env: str = Field(default="development", alias="ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./dev.db", alias="DATABASE_URL")

    # Discord bot credentials; the dispatcher stays off without a token
    discord_token: Optional[str] = Field(default=None, alias="DISCORD_TOKEN")

    # Reminder dispatch
    reminder_dispatch_interval_seconds: int = Field(default=30, alias="REMINDER_DISPATCH_INTERVAL_SECONDS")
    # Upper bound on concurrently running dispatch cycles (fixed rate, runs may overlap)
    reminder_dispatch_max_instances: int = Field(default=10, alias="REMINDER_DISPATCH_MAX_INSTANCES")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
