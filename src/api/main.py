"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from infrastructure.logging import configure_logging
from infrastructure.settings import get_public_config_settings, get_settings
from infrastructure.version import __version__
from public_config.application.services import PublicConfigService
from public_config.dependencies import (
    build_http_transport,
    build_public_config_service,
)
from public_config.presentation import routes as public_config_routes


@asynccontextmanager
async def public_config_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the shared upstream client and PublicConfigService.

    Both live for the whole application; the client is closed on shutdown.
    """
    settings = get_public_config_settings()
    async with httpx.AsyncClient(
        timeout=settings.request_timeout_seconds,
        headers={"Accept": "application/json"},
    ) as client:
        transport = build_http_transport(settings, client=client)
        app.state.public_config_service = build_public_config_service(
            settings, transport
        )
        yield


def create_app(service: PublicConfigService | None = None) -> FastAPI:
    """Build the application.

    Args:
        service: Pre-built service to use instead of one talking to the
            configured upstream (tests, embedding).
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        if service is not None:
            app.state.public_config_service = service
            yield
            return
        async with public_config_lifespan(app):
            yield

    application = FastAPI(
        title=settings.app_name,
        description="Public menu configuration, language negotiation and render gating",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.include_router(public_config_routes.router)

    @application.get("/health")
    def health():
        """Basic health check endpoint."""
        return {"status": "ok"}

    return application


app = create_app()
