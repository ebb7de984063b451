"""
Base Provider Interface - Abstract base class for upstream stream providers.

This module defines the interface every provider variant implements:
discovering episode sources and, optionally, anime/episode metadata. It also
owns the shared HTTP plumbing so that every outbound call is gated by the
process-wide rate limiter (or request scheduler for upstreams that forbid
concurrent requests) and every failure is mapped onto the upstream error
taxonomy.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import aiohttp
from pydantic import BaseModel, Field

from anistream.core.config_schemas import ProviderSettings, ResolverSettings
from anistream.core.exceptions import (
    UpstreamMalformedResponseError,
    UpstreamNetworkError,
    UpstreamNoDataError,
)
from anistream.core.models import AnimeInfo, EpisodeRef, ProviderName, ProviderPayload
from anistream.core.normalizer import SourceNormalizer
from anistream.core.rate_limiter import RateLimiter, UpstreamKey
from anistream.core.scheduler import RequestScheduler


logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProviderMetadata(BaseModel):
    """Metadata information for a provider."""

    name: str = Field(..., description="Provider display name")
    kind: str = Field(..., description="Provider family, e.g. aggregator or scraper")
    description: str = Field(default="", description="Provider description")
    website: Optional[str] = Field(None, description="Upstream website URL")
    supports_metadata: bool = Field(default=False, description="Whether episode lookup is available")


class BaseProvider(ABC):
    """
    Abstract base class for upstream providers.

    Subclasses set ``name`` and implement ``metadata`` and ``get_sources``.
    Providers that can look up episode lists also override ``get_metadata``.
    "Nothing found" is always reported as ``UpstreamNoDataError``; only
    transport failures and unexpected response shapes use the other kinds.
    """

    name: ProviderName

    def __init__(
        self,
        settings: ProviderSettings,
        rate_limiter: RateLimiter,
        scheduler: RequestScheduler,
        normalizer: Optional[SourceNormalizer] = None,
        resolver_settings: Optional[ResolverSettings] = None
    ):
        """
        Initialize the provider.

        Args:
            settings: Provider-specific settings
            rate_limiter: Process-wide rate limiter
            scheduler: Process-wide request scheduler
            normalizer: Normalizer used to check candidate payloads
            resolver_settings: Timeout, retry and user agent settings
        """
        self.settings = settings
        self.rate_limiter = rate_limiter
        self.scheduler = scheduler
        self.normalizer = normalizer or SourceNormalizer()
        self.resolver_settings = resolver_settings or ResolverSettings()
        self._session: Optional[aiohttp.ClientSession] = None

        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def metadata(self) -> ProviderMetadata:
        """Get provider metadata information."""

    @property
    def base_url(self) -> str:
        """Base URL of the upstream API."""
        return self.settings.base_url

    @property
    def supports_metadata(self) -> bool:
        return self.metadata.supports_metadata

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session with proper configuration."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=10,
                limit_per_host=2,
                ttl_dns_cache=300,
            )

            timeout = aiohttp.ClientTimeout(total=self.resolver_settings.timeout)

            headers = {
                'User-Agent': self.resolver_settings.user_agent,
                'Accept': 'application/json, text/plain, */*',
                'Accept-Language': 'en-US,en;q=0.5',
            }

            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout,
                headers=headers
            )

        return self._session

    @abstractmethod
    async def get_sources(self, episode_ref: EpisodeRef) -> ProviderPayload:
        """
        Discover streaming sources for an episode.

        Args:
            episode_ref: Episode to resolve

        Returns:
            Raw provider payload with at least one usable source or an embed URL

        Raises:
            UpstreamNoDataError: Nothing usable was found
            UpstreamNetworkError: The upstream could not be reached
            UpstreamMalformedResponseError: The upstream answered with an unexpected shape
        """

    async def get_metadata(self, title_or_id: str) -> AnimeInfo:
        """
        Look up an anime and its episode list.

        Args:
            title_or_id: Upstream anime id or a title to search for

        Raises:
            UpstreamNoDataError: Always, unless the provider supports lookups
        """
        raise UpstreamNoDataError(
            f"{self.metadata.name} does not provide episode metadata",
            provider=self.name.value
        )

    def _no_data(self, message: str, episode_ref: Optional[EpisodeRef] = None) -> UpstreamNoDataError:
        return UpstreamNoDataError(
            message,
            provider=self.name.value,
            episode_ref=str(episode_ref) if episode_ref else None
        )

    async def _gated(self, upstream: UpstreamKey, factory: Callable[[], Awaitable[T]]) -> T:
        """Run one outbound call behind the rate limiter or request queue."""
        if self.settings.serialize:
            return await self.scheduler.enqueue(upstream, factory)

        await self.rate_limiter.await_turn(upstream)
        return await factory()

    async def _request_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        episode_ref: Optional[EpisodeRef] = None,
        upstream: Optional[UpstreamKey] = None
    ) -> Dict[str, Any]:
        """
        GET a JSON object from the upstream with gating and retries.

        Args:
            url: Absolute URL to request
            params: Query parameters
            episode_ref: Episode being resolved, for error context
            upstream: Rate-limit key; defaults to the provider name

        Returns:
            Decoded JSON object

        Raises:
            UpstreamNetworkError: If request fails after retries
            UpstreamNoDataError: On 4xx responses
            UpstreamMalformedResponseError: On undecodable or non-object bodies
        """
        key = upstream or self.name
        max_retries = self.resolver_settings.max_retries
        last_exception: Optional[UpstreamNetworkError] = None

        for attempt in range(max_retries + 1):
            try:
                self.logger.debug(f"GET {url} params={params} (attempt {attempt + 1})")
                return await self._gated(key, lambda: self._fetch_json(url, params, episode_ref))
            except UpstreamNetworkError as e:
                last_exception = e
                self.logger.warning(f"Request to {self.name} failed (attempt {attempt + 1}): {e}")

                if attempt < max_retries:
                    await asyncio.sleep(self.resolver_settings.retry_delay * (attempt + 1))

        assert last_exception is not None
        raise last_exception

    async def _fetch_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        episode_ref: Optional[EpisodeRef] = None
    ) -> Dict[str, Any]:
        """Issue a single GET and map the outcome onto upstream errors."""
        provider = self.name.value
        ref = str(episode_ref) if episode_ref else None

        try:
            async with self.session.get(url, params=params) as response:
                if response.status >= 500:
                    raise UpstreamNetworkError(
                        f"HTTP {response.status} from {provider}",
                        provider=provider,
                        episode_ref=ref,
                        url=url,
                        status_code=response.status
                    )

                if response.status >= 400:
                    raise UpstreamNoDataError(
                        f"HTTP {response.status} from {provider}",
                        provider=provider,
                        episode_ref=ref,
                        details=await response.text(errors="replace")
                    )

                try:
                    data = await response.json(content_type=None)
                except (json.JSONDecodeError, ValueError) as e:
                    raise UpstreamMalformedResponseError(
                        f"{provider} returned invalid JSON",
                        provider=provider,
                        episode_ref=ref,
                        url=url,
                        details=str(e)
                    ) from e

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamNetworkError(
                f"Network error contacting {provider}: {str(e) or type(e).__name__}",
                provider=provider,
                episode_ref=ref,
                url=url,
                details=str(e)
            ) from e

        if not isinstance(data, dict):
            raise UpstreamMalformedResponseError(
                f"{provider} returned {type(data).__name__} instead of an object",
                provider=provider,
                episode_ref=ref,
                url=url
            )

        return data

    async def cleanup(self) -> None:
        """Clean up resources used by the provider."""
        if self._session and not self._session.closed:
            await self._session.close()
            self.logger.debug("HTTP session closed")
        self._session = None

    def __str__(self) -> str:
        return self.metadata.name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url='{self.base_url}')"


# Export base provider class and metadata
__all__ = ["BaseProvider", "ProviderMetadata"]
