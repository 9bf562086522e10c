"""Tests for settings loading."""

from __future__ import annotations

import pytest

from escrow_ledger.config import Settings, get_settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.app_env == "development"
        assert settings.is_development
        assert settings.escrow_require_positive_amount is False

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ESCROW_REQUIRE_POSITIVE_AMOUNT", "true")
        monkeypatch.setenv("APP_JSON_LOGS", "1")
        settings = Settings(_env_file=None)
        assert settings.escrow_require_positive_amount is True
        assert settings.app_json_logs is True

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()
