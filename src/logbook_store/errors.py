"""Custom exceptions for logbook-store.

This module defines typed exceptions for the document store. Only terminal
failures cross the store boundary; retryable conditions are handled inside
the remote client and the optimistic writer.
"""

from typing import Optional


class StoreError(RuntimeError):
    """Base class for all store-related errors."""
    pass


# Remote content errors
class NotFoundError(StoreError):
    """Document or directory does not exist (404)."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not found: {path}")


class ConflictError(StoreError):
    """Write rejected because the version token is stale (409/422)."""

    def __init__(self, path: str, expected_version: Optional[str] = None):
        self.path = path
        self.expected_version = expected_version
        version_display = expected_version[:12] if expected_version else "(none)"
        super().__init__(
            f"Version conflict writing {path}: "
            f"content changed since version {version_display}"
        )


class AuthError(StoreError):
    """Authentication or authorization failed (401/403)."""
    pass


# Transient errors
class TemporaryUnavailableError(StoreError):
    """Backing API temporarily unavailable; raised once retries are exhausted."""
    pass


class RateLimitedError(TemporaryUnavailableError):
    """Backing API is throttling requests (429 or exhausted rate-limit budget)."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(message)


class TransportError(TemporaryUnavailableError):
    """Network failure, timeout or 5xx from the backing API."""
    pass


# Write orchestration errors
class ConcurrentModificationError(StoreError):
    """Document kept changing underneath the writer."""

    def __init__(self, path: str, attempts: int):
        self.path = path
        self.attempts = attempts
        super().__init__(
            f"Could not save {path}: it was modified concurrently "
            f"{attempts} times in a row. Please retry."
        )


# Content errors
class InvalidDocumentError(StoreError):
    """Stored bytes are not a valid JSON document of the expected shape."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid document at {path}: {reason}")


# Configuration errors
class ConfigError(StoreError):
    """Invalid or incomplete store configuration."""
    pass
