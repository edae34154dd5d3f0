"""Application layer of the Public Config bounded context."""

from public_config.application.cache import ConfigStore
from public_config.application.dedup import RequestDeduplicator
from public_config.application.gate import PublicGate, derive_gate_view
from public_config.application.resolver import ConfigResolver
from public_config.application.services import PublicConfigService

__all__ = [
    "ConfigResolver",
    "ConfigStore",
    "PublicConfigService",
    "PublicGate",
    "RequestDeduplicator",
    "derive_gate_view",
]
