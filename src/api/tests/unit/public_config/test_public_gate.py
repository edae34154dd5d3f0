"""Unit tests for the public render gate."""

import asyncio

import pytest

from public_config.application.cache import ConfigStore
from public_config.application.gate import (
    LANGUAGE_ERROR_MESSAGE,
    PublicGate,
    derive_gate_view,
)
from public_config.application.resolver import ConfigResolver
from public_config.domain.value_objects import (
    ConfigRecord,
    GateSnapshot,
    GateState,
    NegotiatedLanguage,
)
from public_config.infrastructure.localization import CatalogLocalizationRuntime
from public_config.infrastructure.preference_store import InMemoryPreferenceStore
from public_config.ports.exceptions import LanguageApplyError
from public_config.ports.transport import RawConfigResponse


class BlockingRuntime:
    """Runtime whose language switch completes only when released."""

    def __init__(self) -> None:
        self.language = "en"
        self.release = asyncio.Event()

    async def change_language(self, language: str) -> str:
        await self.release.wait()
        self.language = language
        return language


class FailingRuntime:
    language = "bg"

    async def change_language(self, language: str) -> str:
        raise LanguageApplyError(f"no catalog for {language}")


class StuckRuntime:
    """Runtime that stays on one language whatever it is asked for."""

    language = "bg"

    async def change_language(self, language: str) -> str:
        return self.language


class FlakyRuntime:
    """Runtime that applies the first language and fails every later switch."""

    def __init__(self) -> None:
        self.language: str | None = None

    async def change_language(self, language: str) -> str:
        if self.language is not None:
            raise LanguageApplyError(f"no catalog for {language}")
        self.language = language
        return language


@pytest.fixture
def preferences() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture
def resolver(mock_transport, mock_resolver_probe, clock) -> ConfigResolver:
    return ConfigResolver(
        transport=mock_transport,
        store=ConfigStore(clock=clock),
        probe=mock_resolver_probe,
    )


@pytest.fixture
def make_gate(resolver, preferences, mock_gate_probe):
    def _make(runtime) -> PublicGate:
        return PublicGate(
            resolver=resolver,
            runtime=runtime,
            preferences=preferences,
            probe=mock_gate_probe,
        )

    return _make


def _record() -> ConfigRecord:
    return ConfigRecord(
        tenant_key="viva",
        ui_languages=("bg", "en"),
        ui_default="bg",
        content_languages=("bg", "en"),
        content_default="bg",
    )


class TestDeriveGateView:
    """Tests for the pure view derivation."""

    def test_pending_without_result_is_loading(self):
        view = derive_gate_view(GateSnapshot.pending("viva"))

        assert view.loading is True
        assert view.is_ready is False
        assert view.can_fetch is False
        assert view.langs == ()

    def test_resolved_but_language_not_applied(self):
        negotiated = NegotiatedLanguage(active="bg", allowed=("bg", "en"), default="bg")
        snapshot = GateSnapshot(
            state=GateState.PENDING,
            tenant_key="viva",
            resolved_key="viva",
            record=_record(),
            negotiated=negotiated,
        )

        view = derive_gate_view(snapshot)

        assert view.loading is False
        assert view.lang_ready is False
        assert view.is_ready is False
        assert view.lang == "bg"
        assert view.has_multiple_langs is True

    def test_result_for_other_key_is_not_ready(self):
        negotiated = NegotiatedLanguage(active="bg", allowed=("bg",), default="bg")
        snapshot = GateSnapshot(
            state=GateState.READY,
            tenant_key="other",
            resolved_key="viva",
            record=_record(),
            negotiated=negotiated,
            applied_language="bg",
        )

        assert derive_gate_view(snapshot).is_ready is False

    def test_ready(self):
        negotiated = NegotiatedLanguage(active="en", allowed=("bg", "en"), default="bg")
        snapshot = GateSnapshot(
            state=GateState.READY,
            tenant_key="viva",
            resolved_key="viva",
            record=_record(),
            negotiated=negotiated,
            applied_language="en",
        )

        view = derive_gate_view(snapshot)

        assert view.is_ready is True
        assert view.can_fetch is True
        assert view.default_lang == "bg"

    def test_not_found_never_fetches(self):
        snapshot = GateSnapshot(
            state=GateState.NOT_FOUND, tenant_key="ghost", resolved_key="ghost"
        )

        view = derive_gate_view(snapshot)

        assert view.not_found is True
        assert view.error is None
        assert view.can_fetch is False


class TestSelectTenant:
    """Tests for PublicGate.select_tenant."""

    @pytest.mark.asyncio
    async def test_single_language_tenant_opens_after_language_applied(
        self, make_gate, mock_transport, config_response, preferences
    ):
        mock_transport.fetch_config.return_value = config_response(
            ui=["bg", "en"], ui_default="bg", content=["bg"], content_default="bg"
        )
        runtime = BlockingRuntime()
        gate = make_gate(runtime)

        task = gate.select_tenant("viva", url="https://menu.example/viva?lang=en")
        for _ in range(10):
            await asyncio.sleep(0)

        pending = gate.view
        assert pending.lang == "bg"
        assert pending.langs == ("bg",)
        assert pending.has_multiple_langs is False
        assert pending.can_fetch is False

        runtime.release.set()
        view = await task

        assert view.can_fetch is True
        assert view.lang == "bg"
        assert runtime.language == "bg"
        assert preferences.get("viva") == "bg"
        assert gate.url == "https://menu.example/viva"

    @pytest.mark.asyncio
    async def test_reset_to_pending_is_synchronous(
        self, make_gate, runtime, mock_transport, config_response
    ):
        mock_transport.fetch_config.return_value = config_response()
        gate = make_gate(runtime)
        await gate.select_tenant("viva")
        assert gate.view.is_ready is True

        task = gate.select_tenant("other")

        assert gate.snapshot.state is GateState.PENDING
        assert gate.view.loading is True
        assert gate.view.can_fetch is False
        await task

    @pytest.mark.asyncio
    async def test_multi_language_tenant_keeps_url_param(
        self, make_gate, runtime, mock_transport, config_response, preferences
    ):
        mock_transport.fetch_config.return_value = config_response(
            ui=["bg", "en"], content=["bg", "en"]
        )
        preferences.set("viva", "en")
        gate = make_gate(runtime)

        view = await gate.select_tenant("viva", url="https://menu.example/viva")

        assert view.lang == "en"
        assert runtime.applied == ["en"]
        assert gate.url == "https://menu.example/viva?lang=en"

    @pytest.mark.asyncio
    async def test_stale_result_is_discarded(
        self, make_gate, runtime, mock_transport, config_response, mock_gate_probe
    ):
        releases = {"a": asyncio.Event(), "b": asyncio.Event()}

        async def held_fetch(tenant_key):
            await releases[tenant_key].wait()
            return config_response()

        mock_transport.fetch_config.side_effect = held_fetch
        gate = make_gate(runtime)

        first = gate.select_tenant("a")
        await asyncio.sleep(0)
        second = gate.select_tenant("b")
        await asyncio.sleep(0)

        releases["a"].set()
        await first

        assert gate.snapshot.tenant_key == "b"
        assert gate.view.is_ready is False
        assert gate.view.loading is True
        assert runtime.applied == []
        mock_gate_probe.stale_result_discarded.assert_called_once_with("a", "b")

        releases["b"].set()
        view = await second

        assert view.tenant_key == "b"
        assert view.is_ready is True

    @pytest.mark.asyncio
    async def test_empty_key_is_not_found_without_fetch(
        self, make_gate, runtime, mock_transport
    ):
        gate = make_gate(runtime)

        view = await gate.select_tenant("")

        assert view.not_found is True
        assert view.error is None
        mock_transport.fetch_config.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rate_limited_tenant_looks_not_found(
        self, make_gate, runtime, mock_transport
    ):
        mock_transport.fetch_config.return_value = RawConfigResponse(status_code=429)
        gate = make_gate(runtime)

        view = await gate.select_tenant("busy")

        assert view.not_found is True
        assert view.can_fetch is False

    @pytest.mark.asyncio
    async def test_upstream_failure_is_error(self, make_gate, runtime, mock_transport):
        mock_transport.fetch_config.return_value = RawConfigResponse(status_code=500)
        gate = make_gate(runtime)

        view = await gate.select_tenant("viva")

        assert view.error == "Failed to load public config"
        assert view.not_found is False
        assert view.is_ready is False

    @pytest.mark.asyncio
    async def test_language_failure_is_error(
        self, make_gate, mock_transport, config_response, mock_gate_probe
    ):
        mock_transport.fetch_config.return_value = config_response()
        gate = make_gate(FailingRuntime())

        view = await gate.select_tenant("viva")

        assert view.error == LANGUAGE_ERROR_MESSAGE
        assert view.can_fetch is False
        mock_gate_probe.language_apply_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_runtime_applying_other_language_is_error(
        self, make_gate, mock_transport, config_response, mock_gate_probe
    ):
        mock_transport.fetch_config.return_value = config_response(
            ui=["en"], ui_default="en", content=["en"], content_default="en"
        )
        gate = make_gate(StuckRuntime())

        view = await gate.select_tenant("viva")

        assert view.error == LANGUAGE_ERROR_MESSAGE
        assert view.is_ready is False
        assert view.can_fetch is False
        mock_gate_probe.language_applied.assert_not_called()

    @pytest.mark.asyncio
    async def test_language_the_runtime_cannot_render_is_error(
        self, make_gate, mock_transport, config_response, preferences
    ):
        mock_transport.fetch_config.return_value = config_response(
            ui=["es"], ui_default="es", content=["es"], content_default="es"
        )
        gate = make_gate(CatalogLocalizationRuntime())

        view = await gate.select_tenant("viva")

        assert view.is_ready is False
        assert view.error == LANGUAGE_ERROR_MESSAGE
        assert preferences.get("viva") is None

    @pytest.mark.asyncio
    async def test_huge_retry_after_looks_not_found(
        self, make_gate, runtime, mock_transport
    ):
        mock_transport.fetch_config.return_value = RawConfigResponse(
            status_code=429, headers={"retry-after": "1e20"}
        )
        gate = make_gate(runtime)

        view = await gate.select_tenant("busy")

        assert view.not_found is True
        assert view.error is None

    @pytest.mark.asyncio
    async def test_malformed_url_is_kept_and_gate_opens(
        self, make_gate, runtime, mock_transport, config_response
    ):
        mock_transport.fetch_config.return_value = config_response(
            ui=["bg", "en"], content=["bg", "en"]
        )
        gate = make_gate(runtime)

        view = await gate.select_tenant("viva", url="http://[::1")

        assert view.is_ready is True
        assert view.lang == "bg"
        assert gate.url == "http://[::1"


class TestSetPublicLang:
    """Tests for user-driven language switches."""

    @pytest.mark.asyncio
    async def test_switch_persists_and_rewrites_url(
        self, make_gate, runtime, mock_transport, config_response, preferences
    ):
        mock_transport.fetch_config.return_value = config_response(
            ui=["bg", "en"], content=["bg", "en"]
        )
        gate = make_gate(runtime)
        await gate.select_tenant("viva", url="https://menu.example/viva?lang=bg")

        view = await gate.set_public_lang("EN")

        assert view.lang == "en"
        assert view.is_ready is True
        assert runtime.language == "en"
        assert preferences.get("viva") == "en"
        assert gate.url == "https://menu.example/viva?lang=en"
        assert mock_transport.fetch_config.await_count == 1

    @pytest.mark.asyncio
    async def test_unknown_language_uses_default(
        self, make_gate, runtime, mock_transport, config_response
    ):
        mock_transport.fetch_config.return_value = config_response(
            ui=["bg", "en"], content=["bg", "en"]
        )
        gate = make_gate(runtime)
        await gate.select_tenant("viva")

        view = await gate.set_public_lang("fr")

        assert view.lang == "bg"

    @pytest.mark.asyncio
    async def test_ignored_before_ready(
        self, make_gate, runtime, mock_gate_probe, preferences
    ):
        gate = make_gate(runtime)

        view = await gate.set_public_lang("en")

        assert view.is_ready is False
        assert runtime.applied == []
        assert preferences.get("viva") is None
        mock_gate_probe.language_switch_ignored.assert_called_once_with(None, "en")

    @pytest.mark.asyncio
    async def test_failed_switch_keeps_previous_language(
        self, make_gate, mock_transport, config_response, preferences, mock_gate_probe
    ):
        mock_transport.fetch_config.return_value = config_response(
            ui=["bg", "en"], content=["bg", "en"]
        )
        gate = make_gate(FlakyRuntime())
        await gate.select_tenant("viva", url="https://menu.example/viva?lang=bg")

        view = await gate.set_public_lang("en")

        assert view.lang == "bg"
        assert view.is_ready is True
        assert preferences.get("viva") == "bg"
        assert gate.url == "https://menu.example/viva?lang=bg"
        assert gate.snapshot.applied_language == "bg"
        mock_gate_probe.language_apply_failed.assert_called_once()
