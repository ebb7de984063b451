"""
Fallback Link Builder - External "watch it yourself" links.

Used when no provider could resolve an episode. Pure string construction
from the anime title; no network access.
"""

import re
from typing import List, Optional, Sequence

from anistream.core.config_schemas import FallbackSite, FallbackSettings
from anistream.core.models import FallbackLink


_WHITESPACE_RE = re.compile(r"\s+")


def slugify(title: str) -> str:
    """Lowercase the title and replace whitespace runs with hyphens."""
    return _WHITESPACE_RE.sub("-", title.strip().lower())


class FallbackLinkBuilder:
    """Builds one link per configured site template."""

    def __init__(self, sites: Optional[Sequence[FallbackSite]] = None):
        """
        Initialize the builder.

        Args:
            sites: Site templates; defaults to the built-in three sites
        """
        self.sites = list(sites) if sites is not None else FallbackSettings().sites

    def build(self, anime_title: Optional[str] = None, episode_number: Optional[int] = None) -> List[FallbackLink]:
        """
        Build fallback links for a title.

        Args:
            anime_title: Anime title; without one no links can be built
            episode_number: Episode to link to, defaults to 1

        Returns:
            One link per site, or an empty list when no title is available
        """
        if not anime_title or not anime_title.strip():
            return []

        slug = slugify(anime_title)
        episode = episode_number if episode_number and episode_number > 0 else 1

        return [
            FallbackLink(
                label=site.name,
                url=site.template.replace("{slug}", slug).replace("{episode}", str(episode)),
                kind="site",
            )
            for site in self.sites
        ]


__all__ = ["FallbackLinkBuilder", "slugify"]
