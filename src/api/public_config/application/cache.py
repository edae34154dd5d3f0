"""Tenant-keyed config cache with success, negative and backoff tiers."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from public_config.domain.value_objects import (
    BlockedEntry,
    CacheEntry,
    ConfigRecord,
    FreshEntry,
    NotFoundEntry,
)

Clock = Callable[[], datetime]

DEFAULT_CONFIG_TTL = timedelta(minutes=5)
DEFAULT_NOT_FOUND_TTL = timedelta(minutes=5)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class ConfigStore:
    """In-memory map from tenant key to its latest cached outcome.

    Holds exactly one entry per key; every write replaces what was there.
    Expiry is evaluated lazily: an expired entry is dropped the next time it
    is read, there is no background sweep.

    Not thread-safe. All access is expected from one event loop.
    """

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def now(self) -> datetime:
        return self._clock()

    def get(self, tenant_key: str) -> CacheEntry | None:
        """Return the live entry for ``tenant_key``, or None if absent or expired."""
        entry = self._entries.get(tenant_key)
        if entry is None:
            return None

        deadline = entry.until if isinstance(entry, BlockedEntry) else entry.expires_at
        if self._clock() > deadline:
            del self._entries[tenant_key]
            return None
        return entry

    def put_success(
        self,
        tenant_key: str,
        record: ConfigRecord,
        ttl: timedelta = DEFAULT_CONFIG_TTL,
    ) -> FreshEntry:
        entry = FreshEntry(record=record, expires_at=self._clock() + ttl)
        self._entries[tenant_key] = entry
        return entry

    def put_not_found(
        self, tenant_key: str, ttl: timedelta = DEFAULT_NOT_FOUND_TTL
    ) -> NotFoundEntry:
        entry = NotFoundEntry(expires_at=self._clock() + ttl)
        self._entries[tenant_key] = entry
        return entry

    def put_blocked(self, tenant_key: str, until: datetime) -> BlockedEntry:
        entry = BlockedEntry(until=until)
        self._entries[tenant_key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, tenant_key: object) -> bool:
        return isinstance(tenant_key, str) and self.get(tenant_key) is not None
