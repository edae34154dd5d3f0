"""Infrastructure adapters for the Public Config bounded context."""

from public_config.infrastructure.http_transport import HttpxConfigTransport
from public_config.infrastructure.localization import CatalogLocalizationRuntime
from public_config.infrastructure.preference_store import InMemoryPreferenceStore

__all__ = [
    "CatalogLocalizationRuntime",
    "HttpxConfigTransport",
    "InMemoryPreferenceStore",
]
