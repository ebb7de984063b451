"""
Shared test fixtures for the AniStream test suite.

This module provides:
- Fresh rate limiter and scheduler instances (asyncio primitives must not
  outlive the event loop of a single test)
- A stub provider whose outcome is scripted per test
- Sample provider payloads
"""

from typing import Any, Dict, List, Optional, Union

import pytest

from anistream.core.config_schemas import AppSettings, ProviderSettings, ResolverSettings
from anistream.core.models import AnimeInfo, EpisodeRef, ProviderName, ProviderPayload
from anistream.core.rate_limiter import RateLimiter
from anistream.core.scheduler import RequestScheduler
from anistream.providers.base import BaseProvider, ProviderMetadata


# ========== Stub Provider ==========


class StubProvider(BaseProvider):
    """Provider returning a scripted payload or raising a scripted error."""

    def __init__(
        self,
        name: ProviderName,
        outcome: Union[Dict[str, Any], BaseException],
        rate_limiter: RateLimiter,
        scheduler: RequestScheduler,
        info: Optional[AnimeInfo] = None,
        metadata_error: Optional[BaseException] = None,
    ):
        super().__init__(ProviderSettings(base_url="http://stub.invalid", min_interval_ms=0), rate_limiter, scheduler)
        self.name = name
        self.outcome = outcome
        self.info = info
        self.metadata_error = metadata_error
        self.calls: List[EpisodeRef] = []
        self.metadata_calls: List[str] = []
        self.cleaned_up = False

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name=f"Stub {self.name.value}",
            kind="stub",
            supports_metadata=self.info is not None or self.metadata_error is not None,
        )

    async def get_sources(self, episode_ref: EpisodeRef) -> ProviderPayload:
        self.calls.append(episode_ref)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return ProviderPayload(provider=self.name.value, data=self.outcome)

    async def get_metadata(self, title_or_id: str) -> AnimeInfo:
        self.metadata_calls.append(title_or_id)
        if self.metadata_error is not None:
            raise self.metadata_error
        if self.info is None:
            return await super().get_metadata(title_or_id)
        return self.info

    async def cleanup(self) -> None:
        self.cleaned_up = True
        await super().cleanup()


# ========== Gating Fixtures ==========


@pytest.fixture
def rate_limiter():
    """Rate limiter with no spacing, so tests run at full speed."""
    return RateLimiter(default_interval_ms=0)


@pytest.fixture
def scheduler(rate_limiter):
    """Request scheduler sharing the zero-interval rate limiter."""
    return RequestScheduler(rate_limiter)


@pytest.fixture
def make_stub(rate_limiter, scheduler):
    """Factory for scripted stub providers."""
    def _make(name: ProviderName, outcome, **kwargs) -> StubProvider:
        return StubProvider(name, outcome, rate_limiter, scheduler, **kwargs)
    return _make


@pytest.fixture
def make_provider(rate_limiter, scheduler):
    """Factory for real provider classes wired to the test limiter/scheduler."""
    def _make(provider_class, **settings_overrides):
        settings = ProviderSettings(**{"base_url": "http://upstream.test", "min_interval_ms": 0, **settings_overrides})
        resolver_settings = ResolverSettings(retry_delay=0)
        return provider_class(settings, rate_limiter, scheduler, resolver_settings=resolver_settings)
    return _make


# ========== Settings Fixtures ==========


@pytest.fixture
def fast_settings():
    """Default settings with every upstream interval set to zero."""
    settings = AppSettings()
    for provider in settings.providers.values():
        provider.min_interval_ms = 0
    settings.resolver.retry_delay = 0
    return settings


# ========== Sample Data Fixtures ==========


@pytest.fixture
def two_quality_payload():
    """Aggregator payload with a 480p and a 1080p file."""
    return {
        "sources": [
            {"url": "https://cdn.example/a.mp4", "quality": "480p"},
            {"url": "https://cdn.example/b.mp4", "quality": "1080p"},
        ]
    }


@pytest.fixture
def hls_payload():
    """Payload with HLS renditions, required headers and subtitles."""
    return {
        "headers": {"Referer": "https://player.example/"},
        "sources": [
            {"url": "https://cdn.example/720.m3u8", "quality": "720p", "isM3U8": True},
            {"url": "https://cdn.example/360.m3u8", "quality": "360p", "isM3U8": True},
        ],
        "subtitles": [
            {"url": "https://cdn.example/en.vtt", "lang": "en", "language": "English"},
        ],
    }
