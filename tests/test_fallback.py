"""
Tests for fallback link generation (core/fallback.py)
"""

import pytest
from pydantic import ValidationError

from anistream.core.config_schemas import FallbackSite
from anistream.core.fallback import FallbackLinkBuilder, slugify


class TestSlugify:
    """Test title slugs."""

    @pytest.mark.parametrize("title,expected", [
        ("Demo Show", "demo-show"),
        ("  Attack   on\tTitan  ", "attack-on-titan"),
        ("ONE PIECE", "one-piece"),
        ("Re:Zero", "re:zero"),
    ])
    def test_slugify(self, title, expected):
        assert slugify(title) == expected


class TestFallbackLinkBuilder:
    """Test link building."""

    def test_default_sites(self):
        links = FallbackLinkBuilder().build("Demo Show")

        assert [link.label for link in links] == ["Gogoanime", "Zoro", "9anime"]
        assert [link.url for link in links] == [
            "https://gogoanime.fi/demo-show-episode-1",
            "https://zoro.to/watch/demo-show-episode-1",
            "https://9anime.to/watch/demo-show.episode-1",
        ]
        assert all(link.kind == "site" for link in links)

    def test_episode_number_used_when_known(self):
        links = FallbackLinkBuilder().build("Demo Show", episode_number=12)
        assert links[0].url == "https://gogoanime.fi/demo-show-episode-12"

    @pytest.mark.parametrize("episode_number", [None, 0, -3])
    def test_episode_defaults_to_one(self, episode_number):
        links = FallbackLinkBuilder().build("Demo Show", episode_number=episode_number)
        assert links[0].url.endswith("-episode-1")

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_no_title_gives_no_links(self, title):
        assert FallbackLinkBuilder().build(title) == []

    def test_custom_sites(self):
        builder = FallbackLinkBuilder([FallbackSite(name="Mirror", template="https://mirror.example/{slug}")])

        links = builder.build("Demo Show", episode_number=4)

        assert len(links) == 1
        assert links[0].url == "https://mirror.example/demo-show"

    def test_template_requires_slug(self):
        with pytest.raises(ValidationError):
            FallbackSite(name="Broken", template="https://broken.example/{episode}")
