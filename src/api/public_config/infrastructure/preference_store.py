"""Language preference stores."""

from __future__ import annotations

from collections.abc import Mapping

from public_config.domain.languages import normalize_language
from public_config.ports.preferences import (
    DEFAULT_PREFERENCE_PREFIX,
    IPreferenceStore,
    preference_key,
)


class InMemoryPreferenceStore(IPreferenceStore):
    """Keeps preferences in a dict keyed by ``public.lang.<tenant>``."""

    def __init__(
        self,
        initial: Mapping[str, str] | None = None,
        prefix: str = DEFAULT_PREFERENCE_PREFIX,
    ):
        self._prefix = prefix
        self._values: dict[str, str] = dict(initial or {})

    def key(self, tenant_key: str) -> str:
        return preference_key(tenant_key, self._prefix)

    def get(self, tenant_key: str) -> str | None:
        return normalize_language(self._values.get(self.key(tenant_key))) or None

    def set(self, tenant_key: str, language: str) -> None:
        self._values[self.key(tenant_key)] = language

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)
