"""
Scraper Provider - Headless-browser scraping slot (priority 3).

Output contract: ``{"embed_url": <player page>}``, which the pipeline turns
into an embed result. No browser automation ships with AniStream, so this
provider reports "no data" for every episode and the pipeline moves on.
"""

import logging

from anistream.core.models import EpisodeRef, ProviderName, ProviderPayload
from anistream.providers.base import BaseProvider, ProviderMetadata


logger = logging.getLogger(__name__)


class ScraperProvider(BaseProvider):
    """Embed-link scraper; deterministically yields no data."""

    name = ProviderName.SCRAPER

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="Scraper",
            kind="scraper",
            description="Headless-browser embed scraper (not implemented)",
            website=self.base_url,
        )

    async def get_sources(self, episode_ref: EpisodeRef) -> ProviderPayload:
        if not episode_ref.anime_title:
            raise self._no_data("Scraping requires an anime title", episode_ref)

        logger.info(f"Scraping for: {episode_ref.anime_title} - {episode_ref}")
        raise self._no_data("Headless scraping is not available", episode_ref)


__all__ = ["ScraperProvider"]
