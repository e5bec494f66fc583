##########################################################################
#                                                                        #
#  This file (errors.py) holds the EmotionScore error taxonomy.          #
#                                                                        #
##########################################################################

from __future__ import annotations

from typing import Any


class EmotionScoreError(Exception):
    """Base error for EmotionScore failures."""


class RateLimitedError(EmotionScoreError):
    """Raised to the caller when an identity exceeds its request window."""

    def __init__(self, identity: Any, retry_after_ms: int | None = None):
        super().__init__(f"Too many requests for identity '{identity}'.")
        self.identity = identity
        self.retry_after_ms = retry_after_ms


class ProviderError(EmotionScoreError):
    """Raised when a generation provider fails (transport, rate limit, timeout)."""

    def __init__(self, message: str, provider: str | None = None, metadata: dict[str, Any] | None = None):
        super().__init__(message)
        self.provider = provider
        self.metadata = metadata or {}


class MalformedOutputError(ProviderError):
    """Raised when a provider answered but nothing usable could be recovered."""

    def __init__(self, message: str, raw: Any = None, provider: str | None = None):
        super().__init__(message, provider=provider)
        self.raw = raw


class ProviderUnavailableError(EmotionScoreError):
    """Raised when no generation provider is configured."""


class AllProvidersExhaustedError(EmotionScoreError):
    """Raised when every provider failed on every prompt tier."""

    def __init__(self, message: str, attempted: list[str] | None = None, errors: list[str] | None = None):
        super().__init__(message)
        self.attempted = list(attempted or [])
        self.errors = list(errors or [])


__all__ = [
    "AllProvidersExhaustedError",
    "EmotionScoreError",
    "MalformedOutputError",
    "ProviderError",
    "ProviderUnavailableError",
    "RateLimitedError",
]
