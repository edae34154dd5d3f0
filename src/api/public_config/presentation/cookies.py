"""Cookie-backed language preferences for HTTP visitors."""

from __future__ import annotations

from collections.abc import Mapping

from fastapi import Response

from public_config.domain.languages import normalize_language
from public_config.ports.preferences import (
    DEFAULT_PREFERENCE_PREFIX,
    IPreferenceStore,
    preference_key,
)

ONE_YEAR_SECONDS = 365 * 24 * 60 * 60


class CookiePreferenceStore(IPreferenceStore):
    """Reads preferences from request cookies and queues writes for the response.

    The cookie name is the preference key itself, ``public.lang.<tenant>``.
    """

    def __init__(
        self,
        cookies: Mapping[str, str],
        prefix: str = DEFAULT_PREFERENCE_PREFIX,
    ):
        self._cookies = dict(cookies)
        self._prefix = prefix
        self._pending: dict[str, str] = {}

    def get(self, tenant_key: str) -> str | None:
        name = preference_key(tenant_key, self._prefix)
        raw = self._pending.get(name, self._cookies.get(name))
        return normalize_language(raw) or None

    def set(self, tenant_key: str, language: str) -> None:
        self._pending[preference_key(tenant_key, self._prefix)] = language

    @property
    def pending(self) -> dict[str, str]:
        return dict(self._pending)

    def apply(self, response: Response, max_age: int = ONE_YEAR_SECONDS) -> None:
        """Write queued preferences to ``response`` as cookies."""
        for name, value in self._pending.items():
            response.set_cookie(
                key=name,
                value=value,
                max_age=max_age,
                httponly=False,
                samesite="lax",
            )
