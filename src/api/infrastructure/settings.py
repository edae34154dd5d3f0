"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set the upstream URL explicitly.
"""

from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PublicConfigSettings(BaseSettings):
    """Public menu configuration resolver settings.

    Environment variables:
        MENU_PUBLIC_API_BASE_URL: Base URL of the upstream menu API
            (default: http://localhost:8000/api/menu)
        MENU_PUBLIC_REQUEST_TIMEOUT_SECONDS: Upstream request timeout (default: 10)
        MENU_PUBLIC_CONFIG_TTL_SECONDS: How long a loaded config is cached (default: 300)
        MENU_PUBLIC_NOT_FOUND_TTL_SECONDS: How long a 404 is cached (default: 300)
        MENU_PUBLIC_DEFAULT_RETRY_AFTER_SECONDS: Backoff used when a 429 carries
            no usable Retry-After header (default: 300)
        MENU_PUBLIC_FALLBACK_LANGUAGE: Language used when a tenant declares none (default: bg)
        MENU_PUBLIC_SUPPORTED_LANGUAGES: Languages the localization runtime ships
        MENU_PUBLIC_LANGUAGE_QUERY_PARAM: Query parameter carrying the language (default: lang)
        MENU_PUBLIC_PREFERENCE_KEY_PREFIX: Prefix of per-tenant preference keys
            (default: public.lang)
        MENU_PUBLIC_CATALOG_DIR: Directory holding <code>.json message catalogs
            (default: unset, interface strings fall back to their keys)
    """

    model_config = SettingsConfigDict(
        env_prefix="MENU_PUBLIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = Field(
        default="http://localhost:8000/api/menu",
        description="Base URL of the upstream menu API",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Upstream request timeout",
        gt=0,
    )
    config_ttl_seconds: int = Field(
        default=300,
        description="Success cache TTL",
        ge=1,
    )
    not_found_ttl_seconds: int = Field(
        default=300,
        description="Negative cache TTL",
        ge=1,
    )
    default_retry_after_seconds: int = Field(
        default=300,
        description="Backoff when Retry-After is missing or invalid",
        ge=1,
    )
    fallback_language: str = Field(
        default="bg",
        description="Language used when a tenant declares no usable language",
    )
    supported_languages: list[str] = Field(
        default_factory=lambda: ["bg", "en", "de", "fr", "tr"],
        description="Languages available in the localization runtime",
    )
    language_query_param: str = Field(
        default="lang",
        description="URL query parameter reflecting the active language",
    )
    preference_key_prefix: str = Field(
        default="public.lang",
        description="Prefix of the per-tenant language preference key",
    )
    catalog_dir: Path | None = Field(
        default=None,
        description="Directory of per-language JSON message catalogs",
    )

    @field_validator("fallback_language")
    @classmethod
    def normalize_fallback_language(cls, value: str) -> str:
        """Fallback language is stored lowercase without surrounding whitespace."""
        value = value.strip().lower()
        if not value:
            raise ValueError("fallback_language must not be empty")
        return value

    @model_validator(mode="after")
    def validate_supported_languages(self) -> "PublicConfigSettings":
        """Validate the fallback language is one the runtime can render."""
        self.supported_languages = [
            lang.strip().lower() for lang in self.supported_languages if lang.strip()
        ]
        if self.fallback_language not in self.supported_languages:
            raise ValueError(
                f"fallback_language ({self.fallback_language}) must be one of "
                f"supported_languages ({', '.join(self.supported_languages)})"
            )
        return self

    @property
    def config_ttl(self) -> timedelta:
        return timedelta(seconds=self.config_ttl_seconds)

    @property
    def not_found_ttl(self) -> timedelta:
        return timedelta(seconds=self.not_found_ttl_seconds)

    @property
    def default_retry_after(self) -> timedelta:
        return timedelta(seconds=self.default_retry_after_seconds)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="MENU_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Menu Public API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="info", description="Minimum log level")

    @property
    def public_config(self) -> PublicConfigSettings:
        """Get public config resolver settings."""
        return get_public_config_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_public_config_settings() -> PublicConfigSettings:
    """Get cached public config settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return PublicConfigSettings()
