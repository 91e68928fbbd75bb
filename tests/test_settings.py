"""Tests for configuration loading."""

import pytest
from pathlib import Path

from expense_tracker.config import (
    AppSettings,
    LoggingSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:

    def test_defaults_need_no_environment(self):
        storage = StorageSettings()
        assert storage.data_file == Path("expenses.csv")
        assert storage.save_retry_attempts == 3
        assert AppSettings().currency_symbol == "$"
        assert LoggingSettings().level == "WARNING"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_STORAGE_DATA_FILE", "/tmp/ledger.csv")
        monkeypatch.setenv("EXPENSE_APP_CURRENCY_SYMBOL", "€")
        settings = get_settings()
        assert settings.storage.data_file == Path("/tmp/ledger.csv")
        assert settings.app.currency_symbol == "€"

    def test_log_level_is_normalised(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_LOG_LEVEL", "debug")
        assert LoggingSettings().level == "DEBUG"

    def test_retry_attempts_bounded(self):
        with pytest.raises(ValueError):
            StorageSettings(save_retry_attempts=0)

    def test_validate_all_settings_reports_bad_section(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_LOG_LEVEL", "LOUD")
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["app"] is True
        assert results["logging"] is False
        assert "logging_error" in results
