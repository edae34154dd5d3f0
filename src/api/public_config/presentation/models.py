"""Pydantic models for public config API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from public_config.domain.value_objects import GateView


class SetLanguageRequest(BaseModel):
    """Request model for an explicit language switch."""

    lang: str = Field(..., description="Language code to switch to", min_length=1)
    url: str | None = Field(
        default=None,
        description="Page URL whose language parameter should be kept in sync",
    )


class PublicConfigResponse(BaseModel):
    """Response model for a resolved, language-ready tenant."""

    slug: str = Field(..., description="Tenant slug")
    restaurant_id: int | None = Field(default=None, description="Restaurant ID")
    restaurant_name: str | None = Field(default=None, description="Display name")
    lang: str = Field(..., description="Active language")
    langs: list[str] = Field(..., description="Languages the visitor may choose")
    default_lang: str = Field(..., description="Tenant default language")
    has_multiple_langs: bool = Field(..., description="Whether to show a switcher")
    can_fetch: bool = Field(..., description="Whether tenant data may be requested")
    canonical_url: str | None = Field(
        default=None,
        description="Page URL with the language parameter rewritten",
    )

    @classmethod
    def from_view(
        cls, view: GateView, canonical_url: str | None = None
    ) -> PublicConfigResponse:
        """Convert a ready gate view to an API response.

        Args:
            view: Gate view with ``is_ready`` set

        Returns:
            PublicConfigResponse
        """
        return cls(
            slug=view.tenant_key or "",
            restaurant_id=view.tenant_id,
            restaurant_name=view.tenant_name,
            lang=view.lang or "",
            langs=list(view.langs),
            default_lang=view.default_lang or "",
            has_multiple_langs=view.has_multiple_langs,
            can_fetch=view.can_fetch,
            canonical_url=canonical_url,
        )
