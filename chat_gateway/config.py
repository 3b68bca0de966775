"""Application configuration."""

import json
import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_ORIGINS = [
    "http://127.0.0.1:3000",
    "http://localhost:3000",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # so ALLOWED_ORIGINS works regardless of case
        extra="ignore",
        env_ignore_empty=True,
    )

    # CORS allow-list, JSON array of origins (parsed by allowed_origins_list)
    allowed_origins: str = ""

    # OpenAI (or compatible API)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None  # For Azure/OpenRouter
    openai_timeout_seconds: float = 30.0

    # Chat policy
    chat_history_window: int = 8
    chat_max_tokens: int = 200

    # Lead intake webhook
    lead_webhook_url: str = ""
    lead_webhook_token: str = ""
    lead_timeout_seconds: float = 15.0

    # App
    port: int = 5000
    log_level: str = "INFO"

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse ALLOWED_ORIGINS; fall back to the local dev origins."""
        if not self.allowed_origins:
            return list(DEFAULT_ALLOWED_ORIGINS)
        try:
            parsed = json.loads(self.allowed_origins)
        except ValueError:
            logger.warning("ALLOWED_ORIGINS env parse failed, using defaults.")
            return list(DEFAULT_ALLOWED_ORIGINS)
        if not isinstance(parsed, list) or not all(isinstance(o, str) for o in parsed):
            logger.warning("ALLOWED_ORIGINS is not a JSON array of strings, using defaults.")
            return list(DEFAULT_ALLOWED_ORIGINS)
        return parsed


@lru_cache()
def get_settings() -> Settings:
    return Settings()
