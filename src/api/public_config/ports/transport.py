"""Transport port for the upstream public config endpoint."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class RawConfigResponse:
    """Undecoded response of ``GET /{tenant}/config``.

    Header names are lowercase.
    """

    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())


@runtime_checkable
class IConfigTransport(Protocol):
    """Fetches one tenant's public configuration from upstream."""

    async def fetch_config(self, tenant_key: str) -> RawConfigResponse:
        """Issue one request for ``tenant_key``.

        Every HTTP status, error statuses included, is returned as a
        RawConfigResponse.

        Raises:
            ConfigTransportError: If no response was received.
        """
        ...
