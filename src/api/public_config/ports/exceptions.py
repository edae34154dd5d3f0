"""Exceptions raised by Public Config ports.

Adapters raise these; the resolver converts them into outcomes so they
never reach the rendering layer.
"""


class ConfigTransportError(Exception):
    """Raised when the upstream config endpoint cannot be reached.

    Covers connection errors, timeouts and protocol errors. A response with
    any status code is not a transport error.
    """

    def __init__(self, message: str, tenant_key: str | None = None):
        super().__init__(message)
        self.tenant_key = tenant_key


class LanguageApplyError(Exception):
    """Raised when the localization runtime cannot switch language."""

    pass
