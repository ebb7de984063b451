"""
Consumet Provider - Multi-backend aggregator (priority 1).

Consumet fronts several anime sites ("backends") behind one API. Sources are
requested from each configured backend in turn until one of them answers
with at least one usable source. Consumet is also the provider used for the
initial anime/episode lookup.
"""

import logging
from typing import Any, List, Optional
from urllib.parse import quote

from anistream.core.exceptions import UpstreamError, UpstreamNoDataError
from anistream.core.models import (
    AnimeInfo,
    AnimeSearchResult,
    EpisodeInfo,
    EpisodeRef,
    ProviderName,
    ProviderPayload,
)
from anistream.providers.base import BaseProvider, ProviderMetadata


logger = logging.getLogger(__name__)

DEFAULT_BACKENDS = ["gogoanime", "zoro", "animepahe"]
METADATA_BACKEND = "gogoanime"


class ConsumetProvider(BaseProvider):
    """Client for the Consumet aggregator API."""

    name = ProviderName.CONSUMET

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="Consumet",
            kind="aggregator",
            description="Multi-backend anime aggregator (gogoanime, zoro, animepahe)",
            website=self.base_url,
            supports_metadata=True,
        )

    @property
    def backends(self) -> List[str]:
        return self.settings.backends or DEFAULT_BACKENDS

    async def get_sources(self, episode_ref: EpisodeRef) -> ProviderPayload:
        """
        Get streaming sources, trying each backend sequentially.

        A backend that errors or returns nothing usable is skipped. If none
        works, the last typed error is re-raised so that a malformed response
        stays distinguishable in the logs; otherwise no-data is reported.

        Args:
            episode_ref: Episode to resolve

        Returns:
            First backend payload that normalizes to at least one source
        """
        episode_id = quote(episode_ref.episode_id, safe="$")
        last_error: Optional[UpstreamError] = None

        for backend in self.backends:
            url = f"{self.base_url}/anime/{backend}/watch/{episode_id}"
            try:
                data = await self._request_json(url, episode_ref=episode_ref)
            except UpstreamError as e:
                logger.warning(f"Consumet backend {backend} failed for {episode_ref}: {e}")
                last_error = e
                continue

            if self.normalizer.normalize(data):
                logger.debug(f"Consumet backend {backend} returned sources for {episode_ref}")
                return ProviderPayload(provider=self.name.value, data=data)

            logger.debug(f"Consumet backend {backend} had no usable sources for {episode_ref}")

        if last_error is not None and not isinstance(last_error, UpstreamNoDataError):
            raise last_error
        raise self._no_data("All Consumet backends returned no sources", episode_ref)

    async def search(self, query: str) -> List[AnimeSearchResult]:
        """
        Search anime by title.

        Args:
            query: Search query string

        Returns:
            Parsed search results (possibly empty)
        """
        url = f"{self.base_url}/anime/{METADATA_BACKEND}/{quote(query.strip(), safe='')}"
        data = await self._request_json(url)

        results = []
        for entry in data.get("results") or []:
            parsed = self._parse_search_result(entry)
            if parsed is not None:
                results.append(parsed)

        logger.debug(f"Found {len(results)} search results for query: '{query}'")
        return results

    async def get_anime_info(self, anime_id: str) -> AnimeInfo:
        """
        Get anime details and its episode list.

        Raises:
            UpstreamNoDataError: If the anime has no episodes
        """
        url = f"{self.base_url}/anime/{METADATA_BACKEND}/info/{quote(anime_id, safe='')}"
        data = await self._request_json(url)

        episodes = self._parse_episodes(data.get("episodes"))
        if not episodes:
            raise self._no_data(f"No episodes found for '{anime_id}'")

        total = data.get("totalEpisodes")
        return AnimeInfo(
            id=str(data.get("id") or anime_id),
            title=str(data.get("title") or anime_id),
            episodes=episodes,
            total_episodes=total if isinstance(total, int) else len(episodes),
            provider=self.name.value,
        )

    async def get_metadata(self, title_or_id: str) -> AnimeInfo:
        """
        Look up episodes by id, falling back to a title search.

        Args:
            title_or_id: Consumet anime id or a free-text title
        """
        if not title_or_id or not title_or_id.strip():
            raise self._no_data("Empty anime title or id")

        try:
            return await self.get_anime_info(title_or_id.strip())
        except UpstreamNoDataError:
            logger.debug(f"'{title_or_id}' is not a known id, searching by title")

        results = await self.search(title_or_id)
        if not results:
            raise self._no_data(f"No anime found for '{title_or_id}'")

        return await self.get_anime_info(results[0].id)

    @staticmethod
    def _parse_search_result(entry: Any) -> Optional[AnimeSearchResult]:
        if not isinstance(entry, dict) or not entry.get("id"):
            return None

        title = entry.get("title")
        if isinstance(title, dict):
            title = title.get("english") or title.get("romaji")
        if not title:
            return None

        return AnimeSearchResult(
            id=str(entry["id"]),
            title=str(title),
            url=entry.get("url"),
            image=entry.get("image"),
            release_date=str(entry["releaseDate"]) if entry.get("releaseDate") else None,
            sub_or_dub=entry.get("subOrDub"),
        )

    @staticmethod
    def _parse_episodes(raw: Any) -> List[EpisodeInfo]:
        episodes = []
        if not isinstance(raw, list):
            return episodes

        for entry in raw:
            if not isinstance(entry, dict) or not entry.get("id"):
                continue
            try:
                number = float(entry.get("number"))
            except (TypeError, ValueError):
                continue
            if number < 0:
                continue
            episodes.append(EpisodeInfo(
                id=str(entry["id"]),
                number=number,
                title=entry.get("title"),
                url=entry.get("url"),
            ))
        return episodes


__all__ = ["ConsumetProvider", "DEFAULT_BACKENDS"]
