"""
Provider Layer - Upstream stream provider implementations.

Each provider knows how to ask one upstream for an episode's sources. All of
them share the HTTP plumbing, request gating and error mapping defined in
``anistream.providers.base``.
"""

from anistream.providers.base import BaseProvider, ProviderMetadata
from anistream.providers.anify import AnifyProvider
from anistream.providers.consumet import ConsumetProvider
from anistream.providers.hianime import HiAnimeProvider
from anistream.providers.scraper import ScraperProvider
from anistream.providers.registry import PROVIDER_CLASSES, build_providers

__all__ = [
    # Base Provider Architecture
    "BaseProvider",
    "ProviderMetadata",
    # Provider Implementations
    "ConsumetProvider",
    "AnifyProvider",
    "ScraperProvider",
    "HiAnimeProvider",
    # Registry
    "PROVIDER_CLASSES",
    "build_providers",
]
