"""
Provider Registry - Build provider instances in their fixed priority order.
"""

import logging
from typing import Dict, List, Type

from anistream.core.config_schemas import AppSettings
from anistream.core.models import PROVIDER_PRIORITY, ProviderName
from anistream.core.normalizer import SourceNormalizer
from anistream.core.rate_limiter import RateLimiter
from anistream.core.scheduler import RequestScheduler
from anistream.providers.anify import AnifyProvider
from anistream.providers.base import BaseProvider
from anistream.providers.consumet import ConsumetProvider
from anistream.providers.hianime import HiAnimeProvider
from anistream.providers.scraper import ScraperProvider


logger = logging.getLogger(__name__)

PROVIDER_CLASSES: Dict[ProviderName, Type[BaseProvider]] = {
    ProviderName.CONSUMET: ConsumetProvider,
    ProviderName.ANIFY: AnifyProvider,
    ProviderName.SCRAPER: ScraperProvider,
    ProviderName.HIANIME: HiAnimeProvider,
}


def build_providers(
    settings: AppSettings,
    rate_limiter: RateLimiter,
    scheduler: RequestScheduler,
    normalizer: SourceNormalizer
) -> List[BaseProvider]:
    """
    Instantiate the enabled providers.

    The order always follows PROVIDER_PRIORITY; configuration can disable a
    provider but cannot reorder them.

    Args:
        settings: Application settings
        rate_limiter: Shared rate limiter
        scheduler: Shared request scheduler
        normalizer: Shared source normalizer

    Returns:
        Provider instances, highest priority first
    """
    providers = []
    for name in PROVIDER_PRIORITY:
        provider_settings = settings.provider(name)
        if not provider_settings.enabled:
            logger.info(f"Provider {name} disabled by configuration")
            continue

        provider_class = PROVIDER_CLASSES[name]
        providers.append(provider_class(
            provider_settings,
            rate_limiter,
            scheduler,
            normalizer=normalizer,
            resolver_settings=settings.resolver,
        ))

    logger.debug(f"Built providers: {[p.name.value for p in providers]}")
    return providers


__all__ = ["PROVIDER_CLASSES", "build_providers"]
