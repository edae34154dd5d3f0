"""Dependency injection for the Public Config bounded context.

The service itself is built once by the application lifespan and kept on
``app.state``; request handlers only look it up.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import httpx
from fastapi import Depends, Request

from infrastructure.settings import PublicConfigSettings, get_public_config_settings
from public_config.application.services import PublicConfigService
from public_config.infrastructure.http_transport import HttpxConfigTransport
from public_config.infrastructure.localization import (
    CatalogLoader,
    CatalogLocalizationRuntime,
    json_catalog_loader,
)
from public_config.ports.transport import IConfigTransport


def build_http_transport(
    settings: PublicConfigSettings, client: httpx.AsyncClient | None = None
) -> HttpxConfigTransport:
    """Create the upstream transport described by ``settings``."""
    return HttpxConfigTransport(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout_seconds,
        client=client,
    )


def build_public_config_service(
    settings: PublicConfigSettings, transport: IConfigTransport
) -> PublicConfigService:
    """Create the application-scoped PublicConfigService."""
    return PublicConfigService(
        transport=transport,
        config_ttl=settings.config_ttl,
        not_found_ttl=settings.not_found_ttl,
        default_retry_after=settings.default_retry_after,
        fallback_language=settings.fallback_language,
        language_param=settings.language_query_param,
    )


def get_public_config_service(request: Request) -> PublicConfigService:
    """Get the PublicConfigService created at start-up.

    Raises:
        RuntimeError: If the application lifespan has not run
    """
    service = getattr(request.app.state, "public_config_service", None)
    if service is None:
        raise RuntimeError(
            "PublicConfigService not initialized. Ensure app startup completed successfully."
        )
    return service


def get_localization_runtime(
    settings: PublicConfigSettings = Depends(get_public_config_settings),
) -> CatalogLocalizationRuntime:
    """Create a request-scoped localization runtime.

    Catalogs come from ``settings.catalog_dir`` and are shared between
    requests. Without a catalog directory the runtime switches language
    but translates every key to itself.
    """
    loader = (
        get_catalog_loader(settings.catalog_dir)
        if settings.catalog_dir is not None
        else None
    )
    return CatalogLocalizationRuntime(
        supported=settings.supported_languages,
        default_language=settings.fallback_language,
        loader=loader,
    )


@lru_cache
def get_catalog_loader(directory: Path) -> CatalogLoader:
    """Get the process-wide catalog loader for ``directory``."""
    return json_catalog_loader(directory)
