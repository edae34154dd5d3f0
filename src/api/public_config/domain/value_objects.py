"""Domain value objects for the Public Config bounded context."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from public_config.domain.languages import (
    FALLBACK_LANGUAGE,
    normalize_language_set,
    pick_default,
)


class ConfigRecord(BaseModel):
    """Immutable, normalized public configuration of one tenant.

    Both language tuples are non-empty and each default is a member of its
    tuple. Display attributes are carried along but never drive logic.
    """

    model_config = ConfigDict(frozen=True)

    tenant_key: str
    tenant_id: int | None = None
    tenant_slug: str | None = None
    tenant_name: str | None = None
    ui_languages: tuple[str, ...]
    ui_default: str
    content_languages: tuple[str, ...]
    content_default: str


class RestaurantPayload(BaseModel):
    """Optional restaurant block of the config payload."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    slug: str | None = None
    name: str | None = None


class LanguageSetPayload(BaseModel):
    """A ``{"langs": [...], "default": "..."}`` block of the config payload."""

    model_config = ConfigDict(extra="ignore")

    langs: list[str] = Field(default_factory=list)
    default: str | None = None


class PublicConfigPayload(BaseModel):
    """Wire shape of ``GET /{tenant}/config``."""

    model_config = ConfigDict(extra="ignore")

    restaurant: RestaurantPayload | None = None
    ui: LanguageSetPayload = Field(default_factory=LanguageSetPayload)
    content: LanguageSetPayload = Field(default_factory=LanguageSetPayload)

    def to_record(
        self, tenant_key: str, fallback_language: str = FALLBACK_LANGUAGE
    ) -> ConfigRecord:
        """Normalize the payload into a ConfigRecord for ``tenant_key``."""
        ui_languages = normalize_language_set(self.ui.langs, fallback_language)
        content_languages = normalize_language_set(
            self.content.langs, fallback_language
        )
        restaurant = self.restaurant or RestaurantPayload()
        return ConfigRecord(
            tenant_key=tenant_key,
            tenant_id=restaurant.id,
            tenant_slug=restaurant.slug,
            tenant_name=restaurant.name,
            ui_languages=ui_languages,
            ui_default=pick_default(self.ui.default, ui_languages),
            content_languages=content_languages,
            content_default=pick_default(self.content.default, content_languages),
        )


@dataclass(frozen=True)
class FreshEntry:
    """A successfully loaded config, valid until ``expires_at``."""

    record: ConfigRecord
    expires_at: datetime


@dataclass(frozen=True)
class NotFoundEntry:
    """Negative cache: the tenant did not exist as of the last fetch."""

    expires_at: datetime


@dataclass(frozen=True)
class BlockedEntry:
    """Backoff cache: the upstream asked us not to ask again before ``until``."""

    until: datetime


CacheEntry: TypeAlias = FreshEntry | NotFoundEntry | BlockedEntry


class ResolutionStatus(StrEnum):
    """Terminal outcome of resolving one tenant key."""

    SUCCEEDED = "succeeded"
    NOT_FOUND = "not_found"
    BLOCKED = "blocked"
    FAILED = "failed"


@dataclass(frozen=True)
class Resolution:
    """Outcome of a resolver call.

    ``NOT_FOUND`` and ``BLOCKED`` are kept apart here because they are cached
    with different lifetimes; consumers should only look at ``not_found``.
    """

    tenant_key: str
    status: ResolutionStatus
    record: ConfigRecord | None = None
    from_cache: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is ResolutionStatus.SUCCEEDED

    @property
    def not_found(self) -> bool:
        return self.status in (ResolutionStatus.NOT_FOUND, ResolutionStatus.BLOCKED)

    @property
    def failed(self) -> bool:
        return self.status is ResolutionStatus.FAILED


@dataclass(frozen=True)
class NegotiatedLanguage:
    """Result of language negotiation for one tenant.

    Attributes:
        active: Language to apply.
        allowed: Languages the visitor may switch between, in server order.
        default: The server default, always a member of ``allowed``.
    """

    active: str
    allowed: tuple[str, ...]
    default: str

    @property
    def has_choice(self) -> bool:
        return len(self.allowed) > 1

    def with_active(self, language: str) -> NegotiatedLanguage:
        return replace(self, active=language)


class GateState(StrEnum):
    """Render gate state for the current tenant key.

    PENDING is the only non-terminal state.
    """

    PENDING = "pending"
    READY = "ready"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class GateSnapshot:
    """Everything the gate knows about the current tenant key."""

    state: GateState
    tenant_key: str | None = None
    resolved_key: str | None = None
    record: ConfigRecord | None = None
    negotiated: NegotiatedLanguage | None = None
    applied_language: str | None = None
    error: str | None = None

    @classmethod
    def pending(cls, tenant_key: str | None) -> GateSnapshot:
        return cls(state=GateState.PENDING, tenant_key=tenant_key)


@dataclass(frozen=True)
class GateView:
    """Read model consumed by the rendering layer."""

    tenant_key: str | None
    loading: bool
    error: str | None
    not_found: bool
    is_ready: bool
    lang_ready: bool
    can_fetch: bool
    lang: str | None
    langs: tuple[str, ...]
    default_lang: str | None
    has_multiple_langs: bool
    tenant_id: int | None = None
    tenant_name: str | None = None
