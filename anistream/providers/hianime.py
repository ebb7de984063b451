"""
HiAnime Provider - Dedicated scraper library (priority 4).

Talks to an aniwatch-compatible API server, which wraps the HiAnime scraper
library behind HTTP. Each streaming server ("hd-1", "hd-2", ...) is tried in
turn for the configured category (sub/dub/raw).
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import unquote

from anistream.core.exceptions import UpstreamError, UpstreamNoDataError
from anistream.core.models import EpisodeRef, ProviderName, ProviderPayload
from anistream.core.normalizer import is_segmented_url
from anistream.providers.base import BaseProvider, ProviderMetadata


logger = logging.getLogger(__name__)

DEFAULT_SERVERS = ["hd-1", "hd-2"]
DEFAULT_CATEGORY = "sub"
# HLS master playlists carry every rendition, so they get a label instead of being dropped.
MASTER_PLAYLIST_QUALITY = "auto"


class HiAnimeProvider(BaseProvider):
    """Client for the aniwatch episode-sources endpoint."""

    name = ProviderName.HIANIME

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="HiAnime",
            kind="library",
            description="HiAnime scraper library served over the aniwatch API",
            website="https://hianime.to",
        )

    async def get_sources(self, episode_ref: EpisodeRef) -> ProviderPayload:
        url = f"{self.base_url}/api/v2/hianime/episode/sources"
        episode_id = unquote(episode_ref.episode_id)
        category = self.settings.category or DEFAULT_CATEGORY
        last_error: Optional[UpstreamError] = None

        for server in self.settings.backends or DEFAULT_SERVERS:
            params = {"animeEpisodeId": episode_id, "server": server, "category": category}
            try:
                response = await self._request_json(url, params=params, episode_ref=episode_ref)
            except UpstreamError as e:
                logger.warning(f"HiAnime server {server} failed for {episode_ref}: {e}")
                last_error = e
                continue

            data = self._label_master_playlists(self._unwrap(response))
            if self.normalizer.normalize(data):
                return ProviderPayload(provider=self.name.value, data=data)

        if last_error is not None and not isinstance(last_error, UpstreamNoDataError):
            raise last_error
        raise self._no_data("HiAnime returned no sources", episode_ref)

    @staticmethod
    def _unwrap(response: Dict[str, Any]) -> Dict[str, Any]:
        """Strip the ``{"status": ..., "data": {...}}`` envelope if present."""
        inner = response.get("data")
        return inner if isinstance(inner, dict) else response

    @staticmethod
    def _label_master_playlists(data: Dict[str, Any]) -> Dict[str, Any]:
        sources = data.get("sources")
        if not isinstance(sources, list):
            return data

        labelled = []
        for entry in sources:
            if isinstance(entry, dict) and not entry.get("quality"):
                url = str(entry.get("url") or "")
                if entry.get("type") == "hls" or is_segmented_url(url):
                    entry = {**entry, "quality": MASTER_PLAYLIST_QUALITY}
            labelled.append(entry)

        return {**data, "sources": labelled}


__all__ = ["HiAnimeProvider"]
