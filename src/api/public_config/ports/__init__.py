"""Ports (interfaces) for the Public Config bounded context.

Ports define the contracts for the upstream endpoint, visitor-local storage
and the localization runtime without specifying implementation details.
"""

from public_config.ports.exceptions import ConfigTransportError, LanguageApplyError
from public_config.ports.preferences import (
    ILocalizationRuntime,
    IPreferenceStore,
    preference_key,
)
from public_config.ports.transport import IConfigTransport, RawConfigResponse

__all__ = [
    "ConfigTransportError",
    "IConfigTransport",
    "ILocalizationRuntime",
    "IPreferenceStore",
    "LanguageApplyError",
    "RawConfigResponse",
    "preference_key",
]
