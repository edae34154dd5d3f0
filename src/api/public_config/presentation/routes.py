"""HTTP routes for the public menu configuration."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from infrastructure.settings import PublicConfigSettings, get_public_config_settings
from public_config.application.gate import PublicGate
from public_config.application.services import PublicConfigService
from public_config.dependencies import (
    get_localization_runtime,
    get_public_config_service,
)
from public_config.domain.value_objects import GateView
from public_config.infrastructure.localization import CatalogLocalizationRuntime
from public_config.presentation.cookies import CookiePreferenceStore
from public_config.presentation.models import PublicConfigResponse, SetLanguageRequest
from shared_kernel.observability_context import ObservationContext

router = APIRouter(prefix="/menu", tags=["public-config"])

NOT_FOUND_DETAIL = "Restaurant not found"
LOAD_FAILED_DETAIL = "Failed to load public config"
REQUEST_ID_HEADER = "x-request-id"


def _create_gate(
    service: PublicConfigService,
    runtime: CatalogLocalizationRuntime,
    preferences: CookiePreferenceStore,
    request: Request,
    slug: str,
) -> PublicGate:
    context = ObservationContext(
        request_id=request.headers.get(REQUEST_ID_HEADER), tenant_key=slug
    )
    return service.create_gate(
        preferences=preferences,
        runtime=runtime,
        probe=service.gate_probe.with_context(context),
    )


def _build_response(
    gate: PublicGate,
    view: GateView,
    preferences: CookiePreferenceStore,
    response: Response,
) -> PublicConfigResponse:
    """Map a settled gate to the HTTP contract.

    Unknown and rate-limited tenants produce the same 404.
    """
    if view.not_found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND_DETAIL,
        )
    if view.error is not None or not view.is_ready:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=LOAD_FAILED_DETAIL,
        )

    preferences.apply(response)
    return PublicConfigResponse.from_view(view, canonical_url=gate.url)


@router.get("/{slug}/public-config")
async def get_public_config(
    slug: str,
    request: Request,
    response: Response,
    service: Annotated[PublicConfigService, Depends(get_public_config_service)],
    runtime: Annotated[CatalogLocalizationRuntime, Depends(get_localization_runtime)],
    settings: Annotated[PublicConfigSettings, Depends(get_public_config_settings)],
) -> PublicConfigResponse:
    """Resolve a tenant's public configuration and negotiate its language.

    The ``lang`` query parameter is honored only for tenants with more than
    one language; otherwise the ``public.lang.<slug>`` cookie or the tenant
    default decides. The chosen language is written back to the cookie.

    Returns:
        PublicConfigResponse for a ready tenant

    Raises:
        HTTPException: 404 if the tenant is unknown or unavailable
        HTTPException: 502 if the upstream could not be read
    """
    preferences = CookiePreferenceStore(
        request.cookies, prefix=settings.preference_key_prefix
    )
    gate = _create_gate(service, runtime, preferences, request, slug)
    view = await gate.select_tenant(slug, url=str(request.url))
    return _build_response(gate, view, preferences, response)


@router.put("/{slug}/public-config/lang")
async def set_public_language(
    slug: str,
    body: SetLanguageRequest,
    request: Request,
    response: Response,
    service: Annotated[PublicConfigService, Depends(get_public_config_service)],
    runtime: Annotated[CatalogLocalizationRuntime, Depends(get_localization_runtime)],
    settings: Annotated[PublicConfigSettings, Depends(get_public_config_settings)],
) -> PublicConfigResponse:
    """Switch the visitor's language for a tenant.

    Uses the cached configuration when available. Languages the tenant does
    not allow fall back to its default.

    Raises:
        HTTPException: 404 if the tenant is unknown or unavailable
        HTTPException: 502 if the upstream could not be read
    """
    preferences = CookiePreferenceStore(
        request.cookies, prefix=settings.preference_key_prefix
    )
    gate = _create_gate(service, runtime, preferences, request, slug)
    view = await gate.select_tenant(slug, url=body.url)
    if view.is_ready:
        view = await gate.set_public_lang(body.lang)
    return _build_response(gate, view, preferences, response)
