"""Unit tests for infrastructure settings."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from infrastructure.settings import PublicConfigSettings, Settings


class TestPublicConfigSettings:
    """Tests for public config resolver settings."""

    def test_defaults(self):
        """Should have five minute TTLs and Bulgarian as fallback."""
        settings = PublicConfigSettings()

        assert settings.config_ttl == timedelta(minutes=5)
        assert settings.not_found_ttl == timedelta(minutes=5)
        assert settings.default_retry_after == timedelta(minutes=5)
        assert settings.fallback_language == "bg"
        assert settings.language_query_param == "lang"
        assert settings.preference_key_prefix == "public.lang"
        assert settings.catalog_dir is None

    def test_reads_environment(self, monkeypatch):
        """Should read MENU_PUBLIC_* variables."""
        monkeypatch.setenv("MENU_PUBLIC_API_BASE_URL", "https://api.example/menu")
        monkeypatch.setenv("MENU_PUBLIC_CONFIG_TTL_SECONDS", "60")

        settings = PublicConfigSettings()

        assert settings.api_base_url == "https://api.example/menu"
        assert settings.config_ttl == timedelta(seconds=60)

    def test_catalog_dir_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MENU_PUBLIC_CATALOG_DIR", str(tmp_path))

        assert PublicConfigSettings().catalog_dir == tmp_path

    def test_fallback_language_is_normalized(self):
        settings = PublicConfigSettings(fallback_language=" EN ")

        assert settings.fallback_language == "en"

    def test_fallback_must_be_supported(self):
        """Should reject a fallback the runtime cannot render."""
        with pytest.raises(ValidationError) as exc_info:
            PublicConfigSettings(fallback_language="ja")

        assert "fallback_language" in str(exc_info.value)

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValidationError):
            PublicConfigSettings(not_found_ttl_seconds=0)


class TestSettings:
    """Tests for application settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.app_name == "Menu Public API"
        assert settings.debug is False
        assert settings.log_level == "info"
