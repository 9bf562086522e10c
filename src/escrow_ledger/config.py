"""Configuration via pydantic-settings.

Reads from .env file or environment variables, e.g.
``ESCROW_REQUIRE_POSITIVE_AMOUNT=true``.

Usage:
    from escrow_ledger.config import get_settings
    settings = get_settings()
    print(settings.app_log_level)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for a host embedding the escrow ledger."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_log_level: str = "INFO"
    app_json_logs: bool = False

    # --- Escrow Policy ---
    # Agreements may be created with a zero amount unless the host opts in.
    escrow_require_positive_amount: bool = False

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the settings."""
    return Settings()
