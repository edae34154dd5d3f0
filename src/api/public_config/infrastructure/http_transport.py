"""httpx adapter for the upstream public config endpoint."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from public_config.ports.exceptions import ConfigTransportError
from public_config.ports.transport import IConfigTransport, RawConfigResponse


class HttpxConfigTransport(IConfigTransport):
    """Fetches ``GET {base_url}/{tenant}/config`` with an httpx.AsyncClient.

    The client is owned by whoever created it; pass ``client`` to share a
    connection pool, otherwise one is created lazily and closed by
    ``aclose``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    def config_url(self, tenant_key: str) -> str:
        return f"{self._base_url}/{quote(tenant_key, safe='')}/config"

    async def fetch_config(self, tenant_key: str) -> RawConfigResponse:
        """Fetch the config of ``tenant_key``.

        Raises:
            ConfigTransportError: On connection errors, timeouts and other
                failures to obtain a response.
        """
        url = self.config_url(tenant_key)
        try:
            response = await self._get_client().get(url, timeout=self._timeout)
        except httpx.HTTPError as e:
            raise ConfigTransportError(
                f"Failed to fetch public config from {url}: {e!r}",
                tenant_key=tenant_key,
            ) from e

        return RawConfigResponse(
            status_code=response.status_code,
            body=response.content,
            headers={name.lower(): value for name, value in response.headers.items()},
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
