"""Failure taxonomy for upstream providers.

``ProviderError`` subclasses never leave the adapter chain: the engine turns
them into an ``Err`` result.  ``NoFallbackAvailable`` is the only error that
reaches a client, as an HTTP error response.
"""
from __future__ import annotations

from typing import Any


class ProviderError(Exception):
    """An upstream provider could not produce a usable payload."""


class ProviderUnavailable(ProviderError):
    """Network failure, timeout or non-2xx status."""


class ProviderRateLimited(ProviderError):
    """The payload carries an explicit rate-limit marker."""


class ProviderMalformed(ProviderError):
    """Bad JSON or a required field is missing."""


class NoFallbackAvailable(Exception):
    """Every provider failed and the source has nothing to substitute."""

    def __init__(
        self,
        source: str,
        message: str,
        *,
        status_code: int = 503,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.message = message
        self.status_code = status_code
        self.extra = extra or {}

    def body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}
