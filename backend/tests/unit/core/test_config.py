"""
Tests for application settings.
"""

import pytest
from pydantic import ValidationError

from property_lookup.core.config import Settings, get_settings, reset_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("CACHE_MAX_AGE_HOURS", raising=False)
        monkeypatch.delenv("CACHE_RETENTION_DAYS", raising=False)
        settings = Settings(_env_file=None)

        assert settings.database_url is None
        assert settings.cache_max_age_hours == 24
        assert settings.cache_retention_days == 90
        assert settings.property_overrides == {}

    def test_property_overrides_parsed_from_json(self, monkeypatch):
        monkeypatch.setenv(
            "PROPERTY_OVERRIDES", '{"123 Main St": {"ownerName": "Example Trust"}}'
        )
        settings = Settings(_env_file=None)

        assert settings.property_overrides == {"123 Main St": {"ownerName": "Example Trust"}}

    def test_rejects_non_positive_max_age(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_max_age_hours=0)

    def test_rejects_zero_retention(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_retention_days=0)

    def test_log_format_is_validated(self):
        assert Settings(_env_file=None, log_format="JSON").log_format == "json"
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_format="xml")

    def test_cors_origin_list(self):
        settings = Settings(
            _env_file=None, cors_origins="https://a.example, https://b.example,"
        )

        assert settings.cors_origin_list == ["https://a.example", "https://b.example"]

    def test_get_settings_is_cached_until_reset(self, monkeypatch):
        first = get_settings()
        assert get_settings() is first

        monkeypatch.setenv("ENVIRONMENT", "staging")
        reset_settings()
        assert get_settings().environment == "staging"
