"""Render gate for public menu pages.

The gate tells page code when it may render and fetch tenant-scoped data:
only once the tenant's config is resolved and its language is fully applied
to the localization runtime. All of its state lives in one GateSnapshot;
``derive_gate_view`` turns that snapshot into the flags pages read.
"""

from __future__ import annotations

import asyncio

from public_config.application.observability import DefaultGateProbe, GateProbe
from public_config.application.resolver import ConfigResolver
from public_config.application.url_state import (
    DEFAULT_LANGUAGE_PARAM,
    read_language_hint,
    rewrite_language_param,
)
from public_config.domain.languages import FALLBACK_LANGUAGE
from public_config.domain.negotiation import negotiate, select_language
from public_config.domain.value_objects import (
    GateSnapshot,
    GateState,
    GateView,
    Resolution,
)
from public_config.ports.exceptions import LanguageApplyError
from public_config.ports.preferences import ILocalizationRuntime, IPreferenceStore

LOAD_ERROR_MESSAGE = "Failed to load public config"
LANGUAGE_ERROR_MESSAGE = "Failed to apply language"


def derive_gate_view(snapshot: GateSnapshot) -> GateView:
    """Derive the rendering flags from a gate snapshot.

    ``not_found`` covers both unknown and rate-limited tenants. ``is_ready``
    additionally requires the resolution to belong to the current key and
    the negotiated language to be applied.
    """
    current = snapshot.resolved_key is not None and (
        snapshot.resolved_key == snapshot.tenant_key
    )
    loading = snapshot.state is GateState.PENDING and not current
    not_found = snapshot.state is GateState.NOT_FOUND
    error = snapshot.error if snapshot.state is GateState.ERROR else None
    lang_ready = (
        snapshot.state is GateState.READY and snapshot.applied_language is not None
    )
    is_ready = (
        not loading and error is None and not not_found and current and lang_ready
    )

    negotiated = snapshot.negotiated
    langs = negotiated.allowed if negotiated is not None else ()
    record = snapshot.record

    return GateView(
        tenant_key=snapshot.tenant_key,
        loading=loading,
        error=error,
        not_found=not_found,
        is_ready=is_ready,
        lang_ready=lang_ready,
        can_fetch=is_ready and not not_found,
        lang=negotiated.active if negotiated is not None else None,
        langs=langs,
        default_lang=negotiated.default if negotiated is not None else None,
        has_multiple_langs=len(langs) > 1,
        tenant_id=record.tenant_id if record is not None else None,
        tenant_name=record.tenant_name if record is not None else None,
    )


class PublicGate:
    """State machine gating public rendering for one visitor.

    ``select_tenant`` resets the gate to PENDING synchronously and schedules
    resolution. Each selection bumps a generation counter; any result that
    arrives for an older generation is dropped, which is how a late fetch
    for a previous tenant is kept from opening the gate for the new one.

    Example:
        >>> gate = service.create_gate(preferences, runtime)
        >>> view = await gate.select_tenant("viva", url="https://m.example/viva")
        >>> view.can_fetch
        True
    """

    def __init__(
        self,
        resolver: ConfigResolver,
        runtime: ILocalizationRuntime,
        preferences: IPreferenceStore,
        probe: GateProbe | None = None,
        language_param: str = DEFAULT_LANGUAGE_PARAM,
        fallback_language: str = FALLBACK_LANGUAGE,
    ):
        self._resolver = resolver
        self._runtime = runtime
        self._preferences = preferences
        self._probe = probe or DefaultGateProbe()
        self._language_param = language_param
        self._fallback_language = fallback_language

        self._snapshot = GateSnapshot.pending(None)
        self._generation = 0
        self._url: str | None = None

    @property
    def snapshot(self) -> GateSnapshot:
        return self._snapshot

    @property
    def view(self) -> GateView:
        return derive_gate_view(self._snapshot)

    @property
    def url(self) -> str | None:
        """Current page URL, with the language parameter kept in sync."""
        return self._url

    def select_tenant(
        self, tenant_key: str | None, url: str | None = None
    ) -> asyncio.Task[GateView]:
        """Switch the gate to ``tenant_key``.

        The reset to PENDING happens before this method returns. Must be
        called from a running event loop.

        Returns:
            Task completing with the view once this selection settles (or
            is superseded).
        """
        self._generation += 1
        generation = self._generation
        self._snapshot = GateSnapshot.pending(tenant_key)
        self._url = url
        self._probe.tenant_selected(tenant_key)

        if not tenant_key:
            self._snapshot = GateSnapshot(state=GateState.NOT_FOUND, tenant_key=None)

        loop = asyncio.get_running_loop()
        return loop.create_task(self._settle(tenant_key, generation))

    async def _settle(self, tenant_key: str | None, generation: int) -> GateView:
        if not tenant_key:
            return self.view

        resolution = await self._resolver.resolve(tenant_key)
        if not self._is_current(generation, tenant_key):
            return self.view

        if not resolution.succeeded:
            self._finish_unsuccessful(resolution)
            return self.view

        record = resolution.record
        assert record is not None
        negotiated = negotiate(
            record,
            url_hint=read_language_hint(self._url, self._language_param),
            preference=self._preferences.get(tenant_key),
            fallback=self._fallback_language,
        )
        self._snapshot = GateSnapshot(
            state=GateState.PENDING,
            tenant_key=tenant_key,
            resolved_key=tenant_key,
            record=record,
            negotiated=negotiated,
        )

        try:
            await self._apply_language(negotiated.active)
        except Exception as e:
            if self._is_current(generation, tenant_key):
                self._probe.language_apply_failed(
                    tenant_key, negotiated.active, error=repr(e)
                )
                self._snapshot = GateSnapshot(
                    state=GateState.ERROR,
                    tenant_key=tenant_key,
                    resolved_key=tenant_key,
                    record=record,
                    negotiated=negotiated,
                    error=LANGUAGE_ERROR_MESSAGE,
                )
            return self.view

        if not self._is_current(generation, tenant_key):
            return self.view

        self._remember(tenant_key, negotiated.active, negotiated.has_choice)
        self._snapshot = GateSnapshot(
            state=GateState.READY,
            tenant_key=tenant_key,
            resolved_key=tenant_key,
            record=record,
            negotiated=negotiated,
            applied_language=negotiated.active,
        )
        self._probe.language_applied(tenant_key, negotiated.active)
        return self.view

    def _finish_unsuccessful(self, resolution: Resolution) -> None:
        if resolution.not_found:
            self._snapshot = GateSnapshot(
                state=GateState.NOT_FOUND,
                tenant_key=resolution.tenant_key,
                resolved_key=resolution.tenant_key,
            )
        else:
            self._snapshot = GateSnapshot(
                state=GateState.ERROR,
                tenant_key=resolution.tenant_key,
                resolved_key=resolution.tenant_key,
                error=resolution.error or LOAD_ERROR_MESSAGE,
            )

    def _is_current(self, generation: int, tenant_key: str) -> bool:
        if generation == self._generation:
            return True
        self._probe.stale_result_discarded(tenant_key, self._snapshot.tenant_key)
        return False

    async def _apply_language(self, language: str) -> None:
        applied = await self._runtime.change_language(language)
        if applied != language:
            raise LanguageApplyError(
                f"Runtime switched to '{applied}' instead of '{language}'"
            )

    def _remember(self, tenant_key: str, language: str, has_choice: bool) -> None:
        self._preferences.set(tenant_key, language)
        if self._url is not None:
            self._url = rewrite_language_param(
                self._url, language, show=has_choice, param=self._language_param
            )

    async def set_public_lang(self, language: str) -> GateView:
        """Switch language on user request without refetching config.

        Ignored until the gate is ready. Unknown codes fall back to the
        tenant's default language. The preference, URL and active language
        change only once the runtime has confirmed the switch; on failure
        the previous language stays in effect.
        """
        snapshot = self._snapshot
        tenant_key = snapshot.tenant_key
        if not self.view.is_ready or snapshot.negotiated is None or not tenant_key:
            self._probe.language_switch_ignored(tenant_key, language)
            return self.view

        generation = self._generation
        chosen = select_language(language, snapshot.negotiated)
        negotiated = snapshot.negotiated.with_active(chosen)

        try:
            await self._apply_language(chosen)
        except Exception as e:
            self._probe.language_apply_failed(tenant_key, chosen, error=repr(e))
            return self.view

        if self._is_current(generation, tenant_key):
            self._remember(tenant_key, chosen, negotiated.has_choice)
            self._snapshot = GateSnapshot(
                state=GateState.READY,
                tenant_key=tenant_key,
                resolved_key=tenant_key,
                record=snapshot.record,
                negotiated=negotiated,
                applied_language=chosen,
            )
            self._probe.language_applied(tenant_key, chosen)
        return self.view
