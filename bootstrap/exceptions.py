"""
Exception classes for the configuration bootstrap.

Startup failures (malformed settings files, secret store outages) surface as
subclasses of BootstrapError so a host can fail fast with one except clause.
Lookups made after startup never raise.
"""

from typing import Optional


class BootstrapError(RuntimeError):
    """
    Base exception for all bootstrap-related errors.

    Raised when the configuration cannot be assembled and the service
    should not start.
    """

    def __init__(self, message: str, phase: Optional[str] = None):
        super().__init__(message)
        self.phase = phase

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.phase:
            return f"{base_msg} (phase={self.phase})"
        return base_msg


class ConfigurationError(BootstrapError):
    """
    Raised when a settings source exists but cannot be used.

    Missing optional files are not errors; a file that is present but
    malformed, or whose top level is not a mapping, is.
    """

    def __init__(self, message: str, source: Optional[str] = None, phase: Optional[str] = "load_configuration"):
        super().__init__(message, phase=phase)
        self.source = source

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.source:
            return f"{base_msg} (source={self.source})"
        return base_msg


class SecretStoreError(BootstrapError):
    """
    Raised when the secret-store sidecar call fails or returns a payload
    that is not a mapping of secret name to a self-keyed mapping.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, phase="fetch_secrets")
        self.url = url
        self.status_code = status_code
        self.original_error = original_error

    def __str__(self) -> str:
        base_msg = super().__str__()
        context_parts = []
        if self.status_code is not None:
            context_parts.append(f"status={self.status_code}")
        if self.url:
            context_parts.append(f"url={self.url}")
        if context_parts:
            base_msg = f"{base_msg} [{', '.join(context_parts)}]"
        if self.original_error:
            return f"{base_msg}\nCaused by: {type(self.original_error).__name__}: {self.original_error}"
        return base_msg


__all__ = ['BootstrapError', 'ConfigurationError', 'SecretStoreError']
