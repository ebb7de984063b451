"""
Core Exceptions - Custom exception classes for AniStream.

This module defines the error taxonomy used by the resolution pipeline.
Upstream errors carry the provider identity and episode reference so that
the pipeline can log them before advancing to the next provider.
"""

from typing import Any, List, Optional


class AniStreamError(Exception):
    """Base exception class for all AniStream-specific errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        """
        Initialize AniStream error.

        Args:
            message: Human-readable error message
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class ConfigurationError(AniStreamError):
    """Raised when configuration-related errors occur."""

    def __init__(self, message: str, config_path: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize configuration error.

        Args:
            message: Error description
            config_path: Path to the problematic configuration file
            details: Additional error context
        """
        super().__init__(message, details)
        self.config_path = config_path


class UpstreamError(AniStreamError):
    """Base class for failures reported by an upstream provider."""

    kind = "upstream"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        episode_ref: Optional[str] = None,
        details: Optional[Any] = None
    ):
        """
        Initialize upstream error.

        Args:
            message: Error description
            provider: Name of the provider that failed
            episode_ref: Episode identifier being resolved, if any
            details: Additional error context
        """
        super().__init__(message, details)
        self.provider = provider
        self.episode_ref = episode_ref


class UpstreamNetworkError(UpstreamError):
    """Raised on timeouts, connection failures and 5xx responses."""

    kind = "network"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        episode_ref: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Any] = None
    ):
        super().__init__(message, provider, episode_ref, details)
        self.url = url
        self.status_code = status_code


class UpstreamNoDataError(UpstreamError):
    """Raised when an upstream answers well-formed but with nothing usable."""

    kind = "no-sources"


class UpstreamMalformedResponseError(UpstreamError):
    """Raised when a successful response has an unexpected shape."""

    kind = "invalid-response"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        episode_ref: Optional[str] = None,
        url: Optional[str] = None,
        details: Optional[Any] = None
    ):
        super().__init__(message, provider, episode_ref, details)
        self.url = url


class AllProvidersExhaustedError(AniStreamError):
    """
    Raised internally when every provider failed for an episode.

    The resolution pipeline converts this into a fallback result; it never
    reaches callers of ``resolve``.
    """

    def __init__(self, episode_ref: str, attempts: Optional[List[Any]] = None):
        super().__init__(f"All providers exhausted for episode '{episode_ref}'")
        self.episode_ref = episode_ref
        self.attempts = attempts or []


# Export all exception classes
__all__ = [
    "AniStreamError",
    "ConfigurationError",
    "UpstreamError",
    "UpstreamNetworkError",
    "UpstreamNoDataError",
    "UpstreamMalformedResponseError",
    "AllProvidersExhaustedError",
]
