"""
Anify Provider - Secondary aggregator (priority 2).
"""

import logging
from typing import Optional
from urllib.parse import quote

from anistream.core.exceptions import UpstreamError, UpstreamNoDataError
from anistream.core.models import EpisodeRef, ProviderName, ProviderPayload
from anistream.providers.base import BaseProvider, ProviderMetadata


logger = logging.getLogger(__name__)

DEFAULT_BACKENDS = ["gogoanime"]


class AnifyProvider(BaseProvider):
    """
    Client for the Anify watch API.

    Anify proxies the same sites as Consumet; the site is selected with the
    ``provider`` query parameter, one configured backend at a time.
    """

    name = ProviderName.ANIFY

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="Anify",
            kind="aggregator",
            description="Secondary anime aggregator",
            website=self.base_url,
        )

    async def get_sources(self, episode_ref: EpisodeRef) -> ProviderPayload:
        url = f"{self.base_url}/watch/{quote(episode_ref.episode_id, safe='$')}"
        last_error: Optional[UpstreamError] = None

        for backend in self.settings.backends or DEFAULT_BACKENDS:
            try:
                data = await self._request_json(url, params={"provider": backend}, episode_ref=episode_ref)
            except UpstreamError as e:
                logger.warning(f"Anify backend {backend} failed for {episode_ref}: {e}")
                last_error = e
                continue

            if self.normalizer.normalize(data):
                return ProviderPayload(provider=self.name.value, data=data)

        if last_error is not None and not isinstance(last_error, UpstreamNoDataError):
            raise last_error
        raise self._no_data("No valid sources from Anify", episode_ref)


__all__ = ["AnifyProvider"]
