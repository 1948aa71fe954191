"""Exceptions raised while synchronizing Firefly assets."""

from __future__ import annotations


class FireflyError(Exception):
    """Base class for all firefly-catalog errors."""


class AuthenticationError(FireflyError):
    """Login failed or the API rejected the bearer token."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FetchError(FireflyError):
    """An inventory request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransientFetchError(FetchError):
    """Network failure, throttling or server error; worth retrying."""


class TerminalFetchError(FetchError):
    """Retries exhausted or the request cannot succeed as issued."""


class ComponentLookupError(FireflyError):
    """The component registry could not be queried."""


class PublishError(FireflyError):
    """The catalog rejected a mutation."""
