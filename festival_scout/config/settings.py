"""Application settings loaded from environment variables via pydantic-settings.

Settings are read from two sources, highest priority first:

  1. Environment variables, e.g. ``SPOTIFY_CLIENT_ID=abc``
  2. A ``.env`` file in the working directory (local development)

Field ``spotify_client_id`` maps to env var ``SPOTIFY_CLIENT_ID``.  Empty
strings mean "not configured": provider selection in ``main.py`` skips any
provider whose credentials are blank.  Copy ``.env.example`` to start.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """festival_scout application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # === LLM Providers ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoints (TogetherAI, etc.)
    openai_text_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = ""

    # === Music Catalog ===
    spotify_client_id: str = ""
    spotify_client_secret: str = ""

    # === Cache ===
    cache_backend: Literal["memory", "redis", "none"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_max_entries: int = 5000
    cache_sweep_interval: float = 3600.0

    # === Page Rendering ===
    render_timeout_ms: int = 30000
    render_max_attempts: int = 3
    render_retry_delay: float = 1.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )

    # === Storage ===
    db_path: str = "data/festival_scout.db"

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return the LLM provider names that have non-empty API keys configured."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        if self.anthropic_api_key:
            providers.append("anthropic")
        return providers

    def has_catalog_credentials(self) -> bool:
        return bool(self.spotify_client_id and self.spotify_client_secret)
