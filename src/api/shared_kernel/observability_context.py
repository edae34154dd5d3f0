"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Attributes:
        request_id: Unique identifier for the current request/operation.
        tenant_key: Tenant slug the operation is scoped to (if applicable).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", tenant_key="viva")
        probe = DefaultResolverProbe().with_context(context)
    """

    request_id: str | None = None
    tenant_key: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.tenant_key is not None:
            result["context_tenant_key"] = self.tenant_key
        result.update(self.extra)
        return result

    def with_tenant(self, tenant_key: str) -> ObservationContext:
        """Create a new context scoped to a tenant."""
        return ObservationContext(
            request_id=self.request_id,
            tenant_key=tenant_key,
            extra=self.extra,
        )

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return ObservationContext(
            request_id=self.request_id,
            tenant_key=self.tenant_key,
            extra={**self.extra, **kwargs},
        )
