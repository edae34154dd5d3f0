"""Domain probes for the Public Config application layer.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events of config resolution and render gating.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ResolverProbe(Protocol):
    """Domain probe for config resolution."""

    def cache_hit(self, tenant_key: str, entry_kind: str) -> None:
        """Record that a resolution was answered from cache."""
        ...

    def in_flight_joined(self, tenant_key: str) -> None:
        """Record that a caller joined an already running fetch."""
        ...

    def fetch_started(self, tenant_key: str) -> None:
        """Record that a request to the upstream was issued."""
        ...

    def config_loaded(
        self,
        tenant_key: str,
        ui_languages: tuple[str, ...],
        content_languages: tuple[str, ...],
    ) -> None:
        """Record that a config was fetched and cached."""
        ...

    def tenant_not_found(self, tenant_key: str) -> None:
        """Record that the upstream does not know the tenant."""
        ...

    def rate_limited(self, tenant_key: str, retry_after_seconds: float) -> None:
        """Record that the upstream asked us to back off."""
        ...

    def fetch_failed(
        self, tenant_key: str, reason: str, status_code: int | None = None
    ) -> None:
        """Record a transient failure that is not cached."""
        ...

    def with_context(self, context: ObservationContext) -> ResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultResolverProbe:
    """Default implementation of ResolverProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultResolverProbe(logger=self._logger, context=context)

    def cache_hit(self, tenant_key: str, entry_kind: str) -> None:
        self._logger.debug(
            "public_config_cache_hit",
            tenant_key=tenant_key,
            entry_kind=entry_kind,
            **self._get_context_kwargs(),
        )

    def in_flight_joined(self, tenant_key: str) -> None:
        self._logger.debug(
            "public_config_in_flight_joined",
            tenant_key=tenant_key,
            **self._get_context_kwargs(),
        )

    def fetch_started(self, tenant_key: str) -> None:
        self._logger.info(
            "public_config_fetch_started",
            tenant_key=tenant_key,
            **self._get_context_kwargs(),
        )

    def config_loaded(
        self,
        tenant_key: str,
        ui_languages: tuple[str, ...],
        content_languages: tuple[str, ...],
    ) -> None:
        self._logger.info(
            "public_config_loaded",
            tenant_key=tenant_key,
            ui_languages=list(ui_languages),
            content_languages=list(content_languages),
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_key: str) -> None:
        self._logger.info(
            "public_config_tenant_not_found",
            tenant_key=tenant_key,
            **self._get_context_kwargs(),
        )

    def rate_limited(self, tenant_key: str, retry_after_seconds: float) -> None:
        self._logger.warning(
            "public_config_rate_limited",
            tenant_key=tenant_key,
            retry_after_seconds=retry_after_seconds,
            **self._get_context_kwargs(),
        )

    def fetch_failed(
        self, tenant_key: str, reason: str, status_code: int | None = None
    ) -> None:
        self._logger.error(
            "public_config_fetch_failed",
            tenant_key=tenant_key,
            reason=reason,
            status_code=status_code,
            **self._get_context_kwargs(),
        )


class GateProbe(Protocol):
    """Domain probe for the public render gate."""

    def tenant_selected(self, tenant_key: str | None) -> None:
        """Record that the gate was reset for a new tenant key."""
        ...

    def stale_result_discarded(self, tenant_key: str, current_key: str | None) -> None:
        """Record that a late result for a superseded key was ignored."""
        ...

    def language_applied(self, tenant_key: str, language: str) -> None:
        """Record that the localization runtime switched language."""
        ...

    def language_apply_failed(self, tenant_key: str, language: str, error: str) -> None:
        """Record that the localization runtime failed to switch language."""
        ...

    def language_switch_ignored(self, tenant_key: str | None, language: str) -> None:
        """Record a language switch requested before the gate was ready."""
        ...

    def with_context(self, context: ObservationContext) -> GateProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultGateProbe:
    """Default implementation of GateProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultGateProbe:
        return DefaultGateProbe(logger=self._logger, context=context)

    def tenant_selected(self, tenant_key: str | None) -> None:
        self._logger.debug(
            "public_gate_tenant_selected",
            tenant_key=tenant_key,
            **self._get_context_kwargs(),
        )

    def stale_result_discarded(self, tenant_key: str, current_key: str | None) -> None:
        self._logger.debug(
            "public_gate_stale_result_discarded",
            tenant_key=tenant_key,
            current_key=current_key,
            **self._get_context_kwargs(),
        )

    def language_applied(self, tenant_key: str, language: str) -> None:
        self._logger.info(
            "public_gate_language_applied",
            tenant_key=tenant_key,
            language=language,
            **self._get_context_kwargs(),
        )

    def language_apply_failed(self, tenant_key: str, language: str, error: str) -> None:
        self._logger.error(
            "public_gate_language_apply_failed",
            tenant_key=tenant_key,
            language=language,
            error=error,
            **self._get_context_kwargs(),
        )

    def language_switch_ignored(self, tenant_key: str | None, language: str) -> None:
        self._logger.warning(
            "public_gate_language_switch_ignored",
            tenant_key=tenant_key,
            language=language,
            **self._get_context_kwargs(),
        )
