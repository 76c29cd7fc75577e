"""
Configuration - environment-driven settings via pydantic-settings.

Every field can be overridden with a DUEL_-prefixed environment variable
(e.g. DUEL_LOG_LEVEL=DEBUG) or a .env file. get_settings() is cached, so
there is one Settings instance per process.
"""

from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_prefix="DUEL_", env_file=".env", case_sensitive=False)

    env: str = "development"

    # API
    allowed_origins: Annotated[list[str], NoDecode] = ["*"]
    host: str = "127.0.0.1"
    port: int = 8000

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    # Match lifecycle
    match_idle_timeout_seconds: int = 3600
    bot_decision_timeout_seconds: float = 5.0

    # Card lookup
    scryfall_base_url: str = "https://api.scryfall.com"
    card_cache_ttl_seconds: float = 300.0
    request_min_delay_ms: int = 100
    http_timeout_seconds: float = 10.0
    user_agent: str = "DuelEngine/0.1 (+https://github.com/duelengine/duelengine)"

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
