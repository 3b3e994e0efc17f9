# PATH: core/exceptions.py
"""
Typed exceptions for HAWK.

Infra errors (provider, timeouts, rate limits) are transient and are
either retried by the scan loop or absorbed as a risk penalty.
Config errors are fatal at startup.
"""

from typing import Optional

from core.constants import ErrorCode


class HawkError(Exception):
    """Base exception for HAWK."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"


class InfraError(HawkError):
    """Infrastructure-related errors (provider, timeouts, rate limits)."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INFRA_PROVIDER_ERROR,
        details: Optional[dict] = None,
    ):
        super().__init__(message, code, details)


class ProviderError(InfraError):
    """Chain data provider call failed."""
    pass


class ProviderTimeoutError(InfraError):
    """Provider call timed out."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INFRA_TIMEOUT, details)


class RateLimitError(InfraError):
    """Rate limit exceeded."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INFRA_RATE_LIMIT, details)


class NotFoundError(InfraError):
    """Requested object does not exist on chain (or is not indexed yet)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INFRA_NOT_FOUND, details)


class ConfigError(HawkError):
    """Invalid or missing configuration."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        details: Optional[dict] = None,
    ):
        super().__init__(message, code, details)


class BlockScanError(HawkError):
    """A block could not be scanned completely."""

    def __init__(self, message: str, height: int, details: Optional[dict] = None):
        super().__init__(
            message,
            ErrorCode.BLOCK_SCAN_FAILED,
            {"height": height, **(details or {})},
        )
        self.height = height
