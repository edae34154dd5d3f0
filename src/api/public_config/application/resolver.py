"""Config resolver: cache lookup, request deduplication, outcome classification."""

from __future__ import annotations

import asyncio
import math
from datetime import datetime, timedelta
from email.utils import parsedate_to_datetime

from pydantic import ValidationError

from public_config.application.cache import (
    DEFAULT_CONFIG_TTL,
    DEFAULT_NOT_FOUND_TTL,
    ConfigStore,
)
from public_config.application.dedup import RequestDeduplicator
from public_config.application.observability import (
    DefaultResolverProbe,
    ResolverProbe,
)
from public_config.domain.languages import FALLBACK_LANGUAGE
from public_config.domain.value_objects import (
    BlockedEntry,
    FreshEntry,
    NotFoundEntry,
    PublicConfigPayload,
    Resolution,
    ResolutionStatus,
)
from public_config.ports.transport import IConfigTransport, RawConfigResponse

DEFAULT_RETRY_AFTER = timedelta(minutes=5)


def parse_retry_after(
    value: str | None,
    now: datetime,
    default: timedelta = DEFAULT_RETRY_AFTER,
) -> timedelta:
    """Interpret a Retry-After header as a backoff duration.

    Accepts delta-seconds and HTTP-dates. Missing, unparsable or
    non-positive values give ``default``, as do values so large that
    ``now`` plus the backoff is not a representable datetime.
    """
    if not value:
        return default
    value = value.strip()

    try:
        seconds = float(value)
    except ValueError:
        seconds = None

    if seconds is None:
        try:
            retry_at = parsedate_to_datetime(value)
        except (TypeError, ValueError, OverflowError):
            return default
        if retry_at.tzinfo is None:
            return default
        delta = retry_at - now
        return delta if delta > timedelta(0) else default

    if not math.isfinite(seconds) or seconds <= 0:
        return default
    try:
        delta = timedelta(seconds=seconds)
        now + delta
    except OverflowError:
        return default
    return delta


class ConfigResolver:
    """Resolves a tenant key to its public configuration.

    Answers from the cache when it can (backoff first, then negative, then
    success), and otherwise fetches through the deduplicator so concurrent
    callers share one upstream request. The shared task classifies the
    response and writes the cache exactly once.

    ``resolve`` never raises: every outcome, including transport failures,
    is returned as a Resolution. Transient failures are not cached.
    """

    def __init__(
        self,
        transport: IConfigTransport,
        store: ConfigStore | None = None,
        deduplicator: RequestDeduplicator[Resolution] | None = None,
        probe: ResolverProbe | None = None,
        config_ttl: timedelta = DEFAULT_CONFIG_TTL,
        not_found_ttl: timedelta = DEFAULT_NOT_FOUND_TTL,
        default_retry_after: timedelta = DEFAULT_RETRY_AFTER,
        fallback_language: str = FALLBACK_LANGUAGE,
    ):
        self._transport = transport
        self._store = store if store is not None else ConfigStore()
        self._deduplicator = (
            deduplicator if deduplicator is not None else RequestDeduplicator()
        )
        self._probe = probe or DefaultResolverProbe()
        self._config_ttl = config_ttl
        self._not_found_ttl = not_found_ttl
        self._default_retry_after = default_retry_after
        self._fallback_language = fallback_language

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def deduplicator(self) -> RequestDeduplicator[Resolution]:
        return self._deduplicator

    def cached(self, tenant_key: str) -> Resolution | None:
        """Answer from cache only, or None when a fetch would be needed."""
        entry = self._store.get(tenant_key)

        if isinstance(entry, BlockedEntry):
            self._probe.cache_hit(tenant_key, entry_kind="blocked")
            return Resolution(
                tenant_key=tenant_key,
                status=ResolutionStatus.BLOCKED,
                from_cache=True,
            )
        if isinstance(entry, NotFoundEntry):
            self._probe.cache_hit(tenant_key, entry_kind="not_found")
            return Resolution(
                tenant_key=tenant_key,
                status=ResolutionStatus.NOT_FOUND,
                from_cache=True,
            )
        if isinstance(entry, FreshEntry):
            self._probe.cache_hit(tenant_key, entry_kind="fresh")
            return Resolution(
                tenant_key=tenant_key,
                status=ResolutionStatus.SUCCEEDED,
                record=entry.record,
                from_cache=True,
            )
        return None

    async def resolve(self, tenant_key: str) -> Resolution:
        """Resolve ``tenant_key`` from cache or upstream.

        Args:
            tenant_key: Tenant slug, case-sensitive.

        Returns:
            Resolution describing the terminal outcome.
        """
        cached = self.cached(tenant_key)
        if cached is not None:
            return cached

        if self._deduplicator.in_flight(tenant_key):
            self._probe.in_flight_joined(tenant_key)

        task = self._deduplicator.run(tenant_key, lambda: self._fetch(tenant_key))
        return await asyncio.shield(task)

    async def _fetch(self, tenant_key: str) -> Resolution:
        self._probe.fetch_started(tenant_key)
        try:
            response = await self._transport.fetch_config(tenant_key)
        except Exception as e:
            self._probe.fetch_failed(tenant_key, reason=repr(e))
            return Resolution(
                tenant_key=tenant_key,
                status=ResolutionStatus.FAILED,
                error="Failed to load public config",
            )
        return self._classify(tenant_key, response)

    def _classify(self, tenant_key: str, response: RawConfigResponse) -> Resolution:
        if response.is_success:
            try:
                payload = PublicConfigPayload.model_validate_json(response.body)
            except ValidationError as e:
                self._probe.fetch_failed(
                    tenant_key,
                    reason=f"Malformed config payload: {e.error_count()} error(s)",
                    status_code=response.status_code,
                )
                return Resolution(
                    tenant_key=tenant_key,
                    status=ResolutionStatus.FAILED,
                    error="Failed to load public config",
                )

            record = payload.to_record(tenant_key, self._fallback_language)
            self._store.put_success(tenant_key, record, self._config_ttl)
            self._probe.config_loaded(
                tenant_key,
                ui_languages=record.ui_languages,
                content_languages=record.content_languages,
            )
            return Resolution(
                tenant_key=tenant_key,
                status=ResolutionStatus.SUCCEEDED,
                record=record,
            )

        if response.status_code == 404:
            self._store.put_not_found(tenant_key, self._not_found_ttl)
            self._probe.tenant_not_found(tenant_key)
            return Resolution(tenant_key=tenant_key, status=ResolutionStatus.NOT_FOUND)

        if response.status_code == 429:
            now = self._store.now()
            retry_after = parse_retry_after(
                response.header("retry-after"), now, self._default_retry_after
            )
            self._store.put_blocked(tenant_key, now + retry_after)
            self._probe.rate_limited(
                tenant_key, retry_after_seconds=retry_after.total_seconds()
            )
            return Resolution(tenant_key=tenant_key, status=ResolutionStatus.BLOCKED)

        self._probe.fetch_failed(
            tenant_key,
            reason="Unexpected status",
            status_code=response.status_code,
        )
        return Resolution(
            tenant_key=tenant_key,
            status=ResolutionStatus.FAILED,
            error="Failed to load public config",
        )

