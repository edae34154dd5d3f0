"""Ports for visitor-local state: language preference and localization."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

DEFAULT_PREFERENCE_PREFIX = "public.lang"


def preference_key(tenant_key: str, prefix: str = DEFAULT_PREFERENCE_PREFIX) -> str:
    """Storage key holding the last chosen language of a tenant."""
    return f"{prefix}.{tenant_key}"


@runtime_checkable
class IPreferenceStore(Protocol):
    """One remembered language code per tenant."""

    def get(self, tenant_key: str) -> str | None:
        """Return the stored language for ``tenant_key``, if any."""
        ...

    def set(self, tenant_key: str, language: str) -> None:
        """Remember ``language`` for ``tenant_key``."""
        ...


@runtime_checkable
class ILocalizationRuntime(Protocol):
    """The component that renders interface strings in one language at a time."""

    @property
    def language(self) -> str:
        """Language currently in effect."""
        ...

    async def change_language(self, language: str) -> str:
        """Switch language, returning once strings for it are available.

        Returns:
            The language actually in effect afterwards.

        Raises:
            LanguageApplyError: If the language could not be applied.
        """
        ...
