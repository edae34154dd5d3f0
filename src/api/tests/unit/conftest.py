"""Unit test fixtures with mocked dependencies."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from public_config.application.observability import GateProbe, ResolverProbe
from public_config.ports.transport import IConfigTransport, RawConfigResponse


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingRuntime:
    """Localization runtime double that records applied languages."""

    def __init__(self) -> None:
        self.language = "bg"
        self.applied: list[str] = []

    async def change_language(self, language: str) -> str:
        self.applied.append(language)
        self.language = language
        return language


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def runtime() -> RecordingRuntime:
    """Provide a localization runtime that applies languages immediately."""
    return RecordingRuntime()


@pytest.fixture
def mock_transport() -> AsyncMock:
    """Provide a mocked upstream transport."""
    return AsyncMock(spec=IConfigTransport)


@pytest.fixture
def mock_resolver_probe() -> MagicMock:
    """Create a mock probe for resolver observability."""
    return MagicMock(spec=ResolverProbe)


@pytest.fixture
def mock_gate_probe() -> MagicMock:
    """Create a mock probe for gate observability."""
    return MagicMock(spec=GateProbe)


@pytest.fixture
def config_response() -> Callable[..., RawConfigResponse]:
    """Build a successful upstream config response."""

    def _build(
        ui: list[str] | None = None,
        ui_default: str | None = "bg",
        content: list[str] | None = None,
        content_default: str | None = "bg",
        restaurant: dict[str, Any] | None = None,
    ) -> RawConfigResponse:
        payload: dict[str, Any] = {
            "ui": {"langs": ui if ui is not None else ["bg"], "default": ui_default},
            "content": {
                "langs": content if content is not None else ["bg"],
                "default": content_default,
            },
        }
        if restaurant is not None:
            payload["restaurant"] = restaurant
        return RawConfigResponse(
            status_code=200,
            body=json.dumps(payload).encode(),
            headers={"content-type": "application/json"},
        )

    return _build
