"""Custom exceptions for rcprov."""

from __future__ import annotations


class RcprovError(Exception):
    """Base exception for all rcprov operations."""

    def __init__(self, message: str, *, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(RcprovError):
    """Required configuration is missing or invalid."""


class ApiError(RcprovError):
    """RunCloud API answered with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 0,
        errors: dict[str, list[str]] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or {}


class AuthenticationError(ApiError):
    """Bearer token rejected (401)."""


class PermissionDeniedError(ApiError):
    """Token valid but not allowed on this resource (403)."""


class ApiValidationError(ApiError):
    """Request payload rejected by the API (422)."""


class NetworkError(RcprovError):
    """RunCloud API host could not be reached."""


class DomainLookupError(RcprovError):
    """Configured domain not present in the app's domain list."""


class PrivilegeError(RcprovError):
    """Operation requires root."""


class NginxConfigError(RcprovError):
    """nginx-rc configuration validation failed."""


class CommandError(RcprovError):
    """External command exited non-zero."""
