"""
Core Layer - Resolution building blocks and application services.

This module contains the data models, configuration handling, rate limiting,
request scheduling, source normalization and ranking, and fallback link
generation. The resolution pipeline itself lives in ``anistream.core.resolver``.
"""

from anistream.core.config_manager import ConfigManager
from anistream.core.config_schemas import (
    AppSettings,
    FallbackSettings,
    FallbackSite,
    ProviderSettings,
    ResolverSettings,
)
from anistream.core.config_defaults import (
    create_default_config_files,
    get_default_settings,
)
from anistream.core.exceptions import (
    AllProvidersExhaustedError,
    AniStreamError,
    ConfigurationError,
    UpstreamError,
    UpstreamMalformedResponseError,
    UpstreamNetworkError,
    UpstreamNoDataError,
)
from anistream.core.fallback import FallbackLinkBuilder, slugify
from anistream.core.models import (
    EmbedResult,
    EpisodeRef,
    FallbackLink,
    FallbackResult,
    MediaSource,
    ProviderName,
    ProviderPayload,
    StreamResult,
    SubtitleTrack,
)
from anistream.core.normalizer import SourceNormalizer
from anistream.core.ranker import SourceRanker, quality_value
from anistream.core.rate_limiter import RateLimiter
from anistream.core.scheduler import RequestScheduler

__all__ = [
    # Data Models
    "EpisodeRef",
    "MediaSource",
    "SubtitleTrack",
    "FallbackLink",
    "StreamResult",
    "EmbedResult",
    "FallbackResult",
    "ProviderName",
    "ProviderPayload",
    # Configuration Management
    "ConfigManager",
    "AppSettings",
    "ResolverSettings",
    "ProviderSettings",
    "FallbackSettings",
    "FallbackSite",
    "create_default_config_files",
    "get_default_settings",
    # Request Gating
    "RateLimiter",
    "RequestScheduler",
    # Source Processing
    "SourceNormalizer",
    "SourceRanker",
    "quality_value",
    "FallbackLinkBuilder",
    "slugify",
    # Exceptions
    "AniStreamError",
    "ConfigurationError",
    "UpstreamError",
    "UpstreamNetworkError",
    "UpstreamNoDataError",
    "UpstreamMalformedResponseError",
    "AllProvidersExhaustedError",
]
