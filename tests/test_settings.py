"""Tests for configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from billtracker.config import (
    AnalyticsSettings,
    AppSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestStorageSettings:
    def test_defaults(self):
        settings = StorageSettings()
        assert settings.bills_key == "monthly-bills-app-bills"
        assert settings.payments_key == "monthly-bills-app-payments"
        assert settings.capacity_bytes == 5 * 1024 * 1024

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BILLTRACKER_STORAGE_DATA_DIR", str(tmp_path))
        assert StorageSettings().data_dir == Path(tmp_path)

    def test_rejects_path_in_key(self):
        with pytest.raises(ValidationError):
            StorageSettings(bills_key="../bills")


class TestAnalyticsSettings:
    def test_defaults(self):
        settings = AnalyticsSettings()
        assert settings.due_soon_days == 7
        assert settings.trend_months == 6
        assert settings.top_categories_limit == 5

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("BILLTRACKER_ANALYTICS_TREND_MONTHS", "12")
        assert get_settings().analytics.trend_months == 12

    def test_trend_needs_two_months(self):
        with pytest.raises(ValidationError):
            AnalyticsSettings(trend_months=1)


class TestAppSettings:
    def test_log_level_is_normalized(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            AppSettings(log_level="loud")

    def test_validate_all_settings(self):
        assert validate_all_settings() == {"storage": True, "analytics": True, "app": True}

    def test_validate_all_settings_reports_errors(self, monkeypatch):
        monkeypatch.setenv("BILLTRACKER_ANALYTICS_TREND_MONTHS", "100")
        results = validate_all_settings()
        assert results["analytics"] is False
        assert "analytics_error" in results
