"""Application service composing the public config resolver and gates."""

from __future__ import annotations

from datetime import timedelta

from public_config.application.cache import (
    DEFAULT_CONFIG_TTL,
    DEFAULT_NOT_FOUND_TTL,
    Clock,
    ConfigStore,
    utc_now,
)
from public_config.application.dedup import RequestDeduplicator
from public_config.application.gate import PublicGate
from public_config.application.observability import (
    DefaultGateProbe,
    DefaultResolverProbe,
    GateProbe,
    ResolverProbe,
)
from public_config.application.resolver import DEFAULT_RETRY_AFTER, ConfigResolver
from public_config.application.url_state import DEFAULT_LANGUAGE_PARAM
from public_config.domain.languages import FALLBACK_LANGUAGE
from public_config.domain.value_objects import Resolution
from public_config.ports.preferences import ILocalizationRuntime, IPreferenceStore
from public_config.ports.transport import IConfigTransport


class PublicConfigService:
    """Owns the config cache and in-flight registry for one application.

    Created once at start-up and shared by every gate it hands out, so all
    visitors benefit from the same cache and request deduplication.
    """

    def __init__(
        self,
        transport: IConfigTransport,
        config_ttl: timedelta = DEFAULT_CONFIG_TTL,
        not_found_ttl: timedelta = DEFAULT_NOT_FOUND_TTL,
        default_retry_after: timedelta = DEFAULT_RETRY_AFTER,
        fallback_language: str = FALLBACK_LANGUAGE,
        language_param: str = DEFAULT_LANGUAGE_PARAM,
        clock: Clock = utc_now,
        resolver_probe: ResolverProbe | None = None,
        gate_probe: GateProbe | None = None,
    ):
        self._store = ConfigStore(clock=clock)
        self._deduplicator: RequestDeduplicator[Resolution] = RequestDeduplicator()
        self._resolver = ConfigResolver(
            transport=transport,
            store=self._store,
            deduplicator=self._deduplicator,
            probe=resolver_probe or DefaultResolverProbe(),
            config_ttl=config_ttl,
            not_found_ttl=not_found_ttl,
            default_retry_after=default_retry_after,
            fallback_language=fallback_language,
        )
        self._gate_probe = gate_probe or DefaultGateProbe()
        self._fallback_language = fallback_language
        self._language_param = language_param

    @property
    def resolver(self) -> ConfigResolver:
        return self._resolver

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def gate_probe(self) -> GateProbe:
        return self._gate_probe

    @property
    def fallback_language(self) -> str:
        return self._fallback_language

    @property
    def language_param(self) -> str:
        return self._language_param

    async def resolve(self, tenant_key: str) -> Resolution:
        return await self._resolver.resolve(tenant_key)

    def create_gate(
        self,
        preferences: IPreferenceStore,
        runtime: ILocalizationRuntime,
        probe: GateProbe | None = None,
    ) -> PublicGate:
        """Create a gate for one visitor, backed by the shared resolver."""
        return PublicGate(
            resolver=self._resolver,
            runtime=runtime,
            preferences=preferences,
            probe=probe or self._gate_probe,
            language_param=self._language_param,
            fallback_language=self._fallback_language,
        )

    def reset(self) -> None:
        """Forget every cached outcome. In-flight fetches are left to finish."""
        self._store.clear()
